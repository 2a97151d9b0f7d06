"""
Bounded retry with exponential backoff.

The first retry waits ``base_delay``, each later retry doubles the wait,
capped at ``max_delay``. A caller-supplied predicate decides whether a
failure is worth another attempt.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from stylist_ai.errors import ErrorKind, classify_exception, is_retryable
from stylist_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("stylist_ai.resilience.retry")


class JitterStrategy(str, Enum):
    """Jitter strategy for retry delays."""

    NONE = "none"
    FULL = "full"
    EQUAL = "equal"


def retry_transient(error: BaseException) -> bool:
    """Default predicate: retry only transient, network-class failures."""
    return is_retryable(classify_exception(error))


def retry_unless(*kinds: ErrorKind) -> Callable[[BaseException], bool]:
    """Build a predicate that retries every failure except the given kinds.

    Example:
        >>> policy = RetryPolicy(should_retry=retry_unless(ErrorKind.NOT_FOUND))
    """
    excluded = frozenset(kinds)

    def predicate(error: BaseException) -> bool:
        return classify_exception(error) not in excluded

    return predicate


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable per-call retry policy.

    Attributes:
        max_retries: Retries after the first attempt (0 = single attempt)
        base_delay: Delay before the first retry, in seconds
        max_delay: Upper bound for any single delay, in seconds
        should_retry: Predicate deciding whether a failure is retried
        jitter: Jitter strategy applied to each delay
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    should_retry: Callable[[BaseException], bool] = field(default=retry_transient)
    jitter: JitterStrategy = JitterStrategy.NONE

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """Create a policy that makes a single attempt."""
        return cls(max_retries=0)

    def delay_for(self, attempt_index: int) -> float:
        """Calculate the delay before a retry.

        Args:
            attempt_index: 1 for the first retry, 2 for the second, ...

        Returns:
            Delay in seconds
        """
        base = min(self.base_delay * (2 ** (attempt_index - 1)), self.max_delay)

        if self.jitter == JitterStrategy.FULL:
            return random.uniform(0, base)
        if self.jitter == JitterStrategy.EQUAL:
            return base / 2 + random.uniform(0, base / 2)
        return base


@dataclass
class RetryResult:
    """Result of a retried operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        total_delay: Total backoff time in seconds
    """

    success: bool
    value: Any = None
    error: BaseException | None = None
    attempts: int = 0
    total_delay: float = 0.0


class RetryManager:
    """Runs operations under a ``RetryPolicy``.

    Example:
        >>> manager = RetryManager()
        >>> value = await manager.with_retry(fetch, RetryPolicy(max_retries=2))
    """

    def __init__(
        self,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize retry manager.

        Args:
            sleep: Awaitable used for backoff (defaults to ``asyncio.sleep``)
        """
        self._sleep = sleep or asyncio.sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        on_retry: Callable[[int, BaseException, float], None] | None = None,
    ) -> RetryResult:
        """Execute an operation with retry, capturing the outcome.

        Args:
            operation: Zero-argument async operation
            policy: Retry policy for this call
            on_retry: Optional callback ``(attempt_index, error, delay)``

        Returns:
            RetryResult with success status and value/error
        """
        total_delay = 0.0
        attempt = 0

        while True:
            try:
                value = await operation()
                return RetryResult(
                    success=True,
                    value=value,
                    attempts=attempt + 1,
                    total_delay=total_delay,
                )
            except Exception as e:
                attempt += 1

                if attempt > policy.max_retries or not policy.should_retry(e):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay=total_delay,
                    )

                delay = policy.delay_for(attempt)
                total_delay += delay

                logger.warning(
                    "Retrying failed operation",
                    attempt=attempt,
                    max_retries=policy.max_retries,
                    delay=delay,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if on_retry:
                    on_retry(attempt, e, delay)

                await self._sleep(delay)

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy,
        on_retry: Callable[[int, BaseException, float], None] | None = None,
    ) -> T:
        """Execute an operation with retry, raising on failure.

        Raises:
            The last exception, unchanged, once retries are exhausted or the
            policy declines to retry
        """
        result = await self.execute(operation, policy, on_retry)
        if result.success:
            return result.value
        raise result.error  # type: ignore[misc]


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> T:
    """Execute an operation with retry using a default manager.

    Args:
        operation: Zero-argument async operation
        policy: Retry policy (defaults to ``RetryPolicy()``)
        on_retry: Optional callback before each retry

    Returns:
        Operation result
    """
    return await RetryManager().with_retry(operation, policy or RetryPolicy(), on_retry)
