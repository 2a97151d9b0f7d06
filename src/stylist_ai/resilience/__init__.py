"""
Resilience module for stylist-ai.

Provides bounded retry, per-resource circuit breakers, confidence gating
and the orchestrator that composes them around model calls.
"""

from stylist_ai.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitState,
    CircuitStats,
)
from stylist_ai.resilience.confidence import (
    DEFAULT_MIN_CONFIDENCE,
    ConfidenceGate,
    GateDecision,
)
from stylist_ai.resilience.orchestrator import (
    AIResilienceOrchestrator,
    AnalysisResult,
)
from stylist_ai.resilience.retry import (
    JitterStrategy,
    RetryManager,
    RetryPolicy,
    RetryResult,
    retry_transient,
    retry_unless,
    with_retry,
)

__all__ = [
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitState",
    "CircuitStats",
    # Confidence
    "DEFAULT_MIN_CONFIDENCE",
    "ConfidenceGate",
    "GateDecision",
    # Orchestrator
    "AIResilienceOrchestrator",
    "AnalysisResult",
    # Retry
    "JitterStrategy",
    "RetryManager",
    "RetryPolicy",
    "RetryResult",
    "retry_transient",
    "retry_unless",
    "with_retry",
]
