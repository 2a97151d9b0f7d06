"""
Circuit breaker for fault isolation.

Implements the circuit breaker pattern with three states:
- Closed: Normal operation, requests pass through
- Open: Circuit tripped, requests fail fast
- Half-Open: A single trial request tests whether the service recovered

Each named resource gets its own breaker from a ``CircuitBreakerRegistry``
constructed once per process and injected where calls are made.
"""

from __future__ import annotations

import asyncio
import os
import time
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from stylist_ai.errors import CircuitOpenError
from stylist_ai.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger("stylist_ai.resilience.circuit_breaker")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for a circuit breaker.

    Attributes:
        failure_threshold: Consecutive failures that trip the circuit
        reset_timeout: Seconds the circuit stays open before a trial call
        call_timeout: Optional per-call timeout in seconds; a timeout counts
            as a failure
    """

    failure_threshold: int = 5
    reset_timeout: float = 60.0
    call_timeout: float | None = None

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if self.reset_timeout < 0:
            raise ValueError("reset_timeout must be >= 0")

    @classmethod
    def from_env(cls) -> CircuitBreakerConfig:
        """Create configuration from environment variables."""
        failure_threshold = 5
        reset_timeout = 60.0
        call_timeout: float | None = None

        with suppress(ValueError):
            failure_threshold = int(os.getenv("STYLIST_BREAKER_FAILURE_THRESHOLD", "5"))
        with suppress(ValueError):
            reset_timeout = float(os.getenv("STYLIST_BREAKER_RESET_TIMEOUT_SECS", "60"))
        raw_timeout = os.getenv("STYLIST_BREAKER_CALL_TIMEOUT_SECS")
        if raw_timeout:
            with suppress(ValueError):
                call_timeout = float(raw_timeout)

        return cls(
            failure_threshold=max(1, failure_threshold),
            reset_timeout=max(0.0, reset_timeout),
            call_timeout=call_timeout,
        )


@dataclass
class CircuitStats:
    """Statistics for a circuit breaker."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    rejected_requests: int = 0
    state_changes: int = 0


class CircuitBreaker:
    """Async-safe circuit breaker for a single named resource.

    Every read-modify-write of ``state``, ``consecutive_failures`` and
    ``opened_at`` happens under one lock. The half-open trial slot is
    claimed inside that lock, so concurrent callers can never both become
    the trial.

    Example:
        >>> breaker = CircuitBreaker("bedrock-conversation")
        >>> try:
        ...     reply = await breaker.execute(call_model)
        ... except CircuitOpenError:
        ...     print("Service unavailable")
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize circuit breaker.

        Args:
            name: Resource name, used in errors and logs
            config: Circuit breaker configuration
            clock: Monotonic clock (defaults to ``time.monotonic``)
        """
        self.name = name
        self._config = config or CircuitBreakerConfig()
        self._clock = clock or time.monotonic
        self._lock = asyncio.Lock()

        self._state = CircuitState.CLOSED
        self._consecutive_failures = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False

        self._stats = CircuitStats()

    @property
    def config(self) -> CircuitBreakerConfig:
        return self._config

    @property
    def state(self) -> CircuitState:
        """Get the recorded circuit state."""
        return self._state

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def opened_at(self) -> float | None:
        return self._opened_at

    def time_until_trial(self) -> float | None:
        """Seconds until an open circuit admits a trial call, or None if not open."""
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return None
        remaining = self._config.reset_timeout - (self._clock() - self._opened_at)
        return max(0.0, remaining)

    def _transition_to(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return

        previous = self._state
        self._state = new_state
        self._stats.state_changes += 1

        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._consecutive_failures = 0
            self._opened_at = None

        logger.info(
            "Circuit state changed",
            resource=self.name,
            previous=previous.value,
            current=new_state.value,
            consecutive_failures=self._consecutive_failures,
        )

    def _admit(self) -> bool:
        """Decide whether a call may proceed. Must be called under the lock.

        Returns:
            True if the admitted call is the half-open trial

        Raises:
            CircuitOpenError: If the call is rejected
        """
        if self._state == CircuitState.OPEN:
            remaining = self.time_until_trial() or 0.0
            if remaining > 0:
                self._stats.rejected_requests += 1
                raise CircuitOpenError(self.name, remaining)
            self._transition_to(CircuitState.HALF_OPEN)

        if self._state == CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                self._stats.rejected_requests += 1
                raise CircuitOpenError(self.name, 0.0)
            self._trial_in_flight = True
            self._stats.total_requests += 1
            return True

        self._stats.total_requests += 1
        return False

    def _record_success(self, is_trial: bool) -> None:
        self._stats.successful_requests += 1

        if is_trial:
            self._trial_in_flight = False
            self._transition_to(CircuitState.CLOSED)
        elif self._state == CircuitState.CLOSED:
            self._consecutive_failures = 0

    def _record_failure(self, is_trial: bool) -> None:
        self._stats.failed_requests += 1

        if is_trial:
            self._trial_in_flight = False
            # Trial failed: reopen with a fresh opened_at
            self._state = CircuitState.HALF_OPEN
            self._transition_to(CircuitState.OPEN)
        elif self._state == CircuitState.CLOSED:
            self._consecutive_failures += 1
            if self._consecutive_failures >= self._config.failure_threshold:
                self._transition_to(CircuitState.OPEN)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute an operation through the circuit breaker.

        Args:
            operation: Zero-argument async operation

        Returns:
            Operation result

        Raises:
            CircuitOpenError: If the circuit rejects the call
            Exception: The operation's own error, after it is recorded
        """
        async with self._lock:
            is_trial = self._admit()

        try:
            result = await self._call_with_timeout(operation)
        except (Exception, asyncio.CancelledError):
            async with self._lock:
                self._record_failure(is_trial)
            raise

        async with self._lock:
            self._record_success(is_trial)
        return result

    async def _call_with_timeout(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._config.call_timeout:
            return await asyncio.wait_for(operation(), timeout=self._config.call_timeout)
        return await operation()

    async def reset(self) -> None:
        """Force the circuit back to closed."""
        async with self._lock:
            self._trial_in_flight = False
            self._transition_to(CircuitState.CLOSED)
            self._consecutive_failures = 0

    def get_stats(self) -> CircuitStats:
        """Get a copy of the breaker statistics."""
        return CircuitStats(**vars(self._stats))

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-serializable snapshot for health reporting."""
        return {
            "name": self.name,
            "state": self._state.value,
            "consecutive_failures": self._consecutive_failures,
            "failure_threshold": self._config.failure_threshold,
            "reset_timeout": self._config.reset_timeout,
            "time_until_trial": self.time_until_trial(),
            **vars(self._stats),
        }

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self.name!r}, state={self._state.value}, "
            f"failures={self._consecutive_failures}/{self._config.failure_threshold})"
        )


class CircuitBreakerRegistry:
    """Process-wide map from resource name to ``CircuitBreaker``.

    Usage::

        registry = CircuitBreakerRegistry(CircuitBreakerConfig(failure_threshold=5))
        reply = await registry.with_circuit_breaker(call_model, "bedrock-conversation")
    """

    def __init__(
        self,
        default_config: CircuitBreakerConfig | None = None,
        overrides: dict[str, CircuitBreakerConfig] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize registry.

        Args:
            default_config: Configuration for breakers without an override
            overrides: Per-resource configuration
            clock: Monotonic clock shared by all breakers
        """
        self._default_config = default_config or CircuitBreakerConfig()
        self._overrides = dict(overrides or {})
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}

    def get(self, resource_name: str) -> CircuitBreaker:
        """Return (or create) the breaker for *resource_name*."""
        breaker = self._breakers.get(resource_name)
        if breaker is None:
            breaker = CircuitBreaker(
                resource_name,
                self._overrides.get(resource_name, self._default_config),
                clock=self._clock,
            )
            self._breakers[resource_name] = breaker
        return breaker

    async def with_circuit_breaker(
        self,
        operation: Callable[[], Awaitable[T]],
        resource_name: str,
    ) -> T:
        """Execute *operation* through the breaker for *resource_name*."""
        return await self.get(resource_name).execute(operation)

    def names(self) -> list[str]:
        return sorted(self._breakers)

    def all_snapshots(self) -> list[dict[str, Any]]:
        """Return snapshots for every registered breaker."""
        return [self._breakers[name].snapshot() for name in self.names()]

    async def reset_all(self) -> None:
        """Reset every breaker to closed."""
        for breaker in self._breakers.values():
            await breaker.reset()
