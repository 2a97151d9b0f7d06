"""面向 AI 造型顾问的弹性调用引擎与对话式引导状态机。

stylist-ai: Resilient AI calls and conversational onboarding for a styling service.

Every model call goes through bounded retry, a per-resource circuit breaker
and, for photo analysis, a confidence gate. Onboarding collects style
preferences one step at a time.
"""
from __future__ import annotations

from stylist_ai.analysis import BodyShapeAnalyzer, ColorPaletteAnalyzer
from stylist_ai.config import StylistConfig, configure_logging
from stylist_ai.conversation import ConversationStateMachine, TurnResult
from stylist_ai.errors import AppError, ErrorKind
from stylist_ai.resilience import (
    AIResilienceOrchestrator,
    AnalysisResult,
    CircuitBreaker,
    CircuitBreakerRegistry,
    ConfidenceGate,
    RetryManager,
    RetryPolicy,
)
from stylist_ai.types import ConversationSession, OnboardingStep

__version__ = "0.1.0"

__all__ = [
    # Analysis
    "BodyShapeAnalyzer",
    "ColorPaletteAnalyzer",
    # Config
    "StylistConfig",
    "configure_logging",
    # Conversation
    "ConversationSession",
    "ConversationStateMachine",
    "OnboardingStep",
    "TurnResult",
    # Errors
    "AppError",
    "ErrorKind",
    # Resilience
    "AIResilienceOrchestrator",
    "AnalysisResult",
    "CircuitBreaker",
    "CircuitBreakerRegistry",
    "ConfidenceGate",
    "RetryManager",
    "RetryPolicy",
    # Version
    "__version__",
]
