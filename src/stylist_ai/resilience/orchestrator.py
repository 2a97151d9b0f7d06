"""韧性编排器：组合熔断、重试与置信度门控。

AI call orchestration.

Every model call goes through ``AIResilienceOrchestrator``, which wraps each
attempt in the resource's circuit breaker, retries transient failures and,
for gated calls, interprets the parsed result with a ``ConfidenceGate``.
Failures come back as ``AnalysisResult`` values rather than exceptions; the
orchestrator performs no storage writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from stylist_ai.errors import (
    AIServiceError,
    AppError,
    ErrorKind,
    PhotoAnalysisError,
    ValidationError,
    classify_exception,
)
from stylist_ai.resilience.circuit_breaker import CircuitBreakerRegistry
from stylist_ai.resilience.retry import RetryManager, RetryPolicy
from stylist_ai.telemetry import get_logger, log_context

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from stylist_ai.resilience.confidence import ConfidenceGate

T = TypeVar("T")

logger = get_logger("stylist_ai.resilience.orchestrator")


@dataclass(frozen=True)
class AnalysisResult(Generic[T]):
    """Outcome of an orchestrated call.

    ``success`` implies data and no error; a failure always carries an
    error and may still carry data (low-confidence soft-fail).
    """

    success: bool
    data: T | None = None
    error: AppError | None = None

    def __post_init__(self) -> None:
        if self.success and (self.data is None or self.error is not None):
            raise ValueError("a successful result needs data and no error")
        if not self.success and self.error is None:
            raise ValueError("a failed result needs an error")

    @classmethod
    def ok(cls, data: T) -> AnalysisResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: AppError, data: T | None = None) -> AnalysisResult[T]:
        return cls(success=False, data=data, error=error)

    @property
    def is_soft_fail(self) -> bool:
        """Failed, but with data the caller may still present."""
        return not self.success and self.data is not None


class AIResilienceOrchestrator:
    """Composes circuit breaker, retry and confidence gate around model calls.

    Example:
        >>> orchestrator = AIResilienceOrchestrator(CircuitBreakerRegistry())
        >>> result = await orchestrator.run_gated_call(
        ...     call_vision_model,
        ...     "bedrock-vision-body-shape",
        ...     0.70,
        ...     ConfidenceGate(BodyShapeAnalysis),
        ...     parse=extract_json_object,
        ... )
        >>> if result.is_soft_fail:
        ...     ask_for_another_photo(result.data)
    """

    def __init__(
        self,
        registry: CircuitBreakerRegistry,
        retry_manager: RetryManager | None = None,
        policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            registry: Shared circuit breaker registry
            retry_manager: Retry manager (defaults to one using asyncio.sleep)
            policy: Default retry policy for calls made through this orchestrator
        """
        self._registry = registry
        self._retry = retry_manager or RetryManager()
        self._policy = policy or RetryPolicy()

    @property
    def registry(self) -> CircuitBreakerRegistry:
        return self._registry

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def run_call(
        self,
        call: Callable[[], Awaitable[T]],
        resource_name: str,
        policy: RetryPolicy | None = None,
    ) -> AnalysisResult[T]:
        """Run an ungated call through circuit breaker and retry.

        Args:
            call: Zero-argument async model call
            resource_name: Circuit breaker resource
            policy: Retry policy override

        Returns:
            AnalysisResult carrying the call's value or a mapped AppError
        """

        async def guarded() -> T:
            return await self._registry.with_circuit_breaker(call, resource_name)

        with log_context(resource=resource_name):
            try:
                value = await self._retry.with_retry(guarded, policy or self._policy)
            except Exception as e:
                error = self._map_error(e, resource_name)
                logger.warning(
                    "Model call failed",
                    resource=resource_name,
                    code=error.code,
                    kind=error.kind.value,
                    error=error.message,
                )
                return AnalysisResult.fail(error)

        if value is None:
            return AnalysisResult.fail(
                AIServiceError(f"Empty response from {resource_name}", kind=ErrorKind.PARSE)
            )
        return AnalysisResult.ok(value)

    async def run_gated_call(
        self,
        call: Callable[[], Awaitable[Any]],
        resource_name: str,
        min_confidence: float,
        gate: ConfidenceGate[Any],
        parse: Callable[[Any], Any] | None = None,
        policy: RetryPolicy | None = None,
    ) -> AnalysisResult[Any]:
        """Run a call and gate its parsed result on confidence.

        Args:
            call: Zero-argument async model call
            resource_name: Circuit breaker resource
            min_confidence: Inclusive acceptance threshold in [0, 1]
            gate: Confidence gate for the expected result model
            parse: Optional conversion of the raw response (e.g. JSON
                extraction); runs once, outside retry
            policy: Retry policy override

        Returns:
            - accept: success with the validated model
            - low confidence: failure with data and a PhotoAnalysisError
            - malformed: failure without data and a PhotoAnalysisError
            - call failure: failure with the mapped AppError
        """
        if not 0.0 <= min_confidence <= 1.0:
            raise ValueError("min_confidence must be between 0 and 1")

        raw = await self.run_call(call, resource_name, policy)
        if not raw.success:
            return AnalysisResult.fail(raw.error)  # type: ignore[arg-type]

        try:
            payload = parse(raw.data) if parse else raw.data
            decision = gate.evaluate(payload, min_confidence)
        except ValidationError as e:
            logger.warning(
                "Model result rejected",
                resource=resource_name,
                kind=e.kind.value,
                error=e.message,
            )
            return AnalysisResult.fail(
                PhotoAnalysisError(
                    "AI returned invalid response format",
                    kind=e.kind,
                    details={"resource": resource_name, "reason": e.message},
                )
            )

        if decision.accept:
            return AnalysisResult.ok(decision.data)

        logger.info(
            "Model result below confidence threshold",
            resource=resource_name,
            confidence=decision.confidence,
            min_confidence=min_confidence,
        )
        return AnalysisResult.fail(
            PhotoAnalysisError(
                "Analysis confidence is below the required threshold",
                confidence=decision.confidence,
                kind=ErrorKind.LOW_CONFIDENCE,
                details={"min_confidence": min_confidence},
            ),
            data=decision.data,
        )

    @staticmethod
    def _map_error(error: Exception, resource_name: str) -> AppError:
        if isinstance(error, AppError):
            return error
        return AIServiceError(
            f"AI service call to {resource_name} failed",
            kind=classify_exception(error),
            details={"resource": resource_name, "error_type": type(error).__name__},
        )
