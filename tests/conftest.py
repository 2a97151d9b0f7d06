"""Root pytest fixtures for stylist-ai tests."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest

from stylist_ai.inference import ModelClient
from stylist_ai.resilience import (
    AIResilienceOrchestrator,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    RetryManager,
    RetryPolicy,
)
from stylist_ai.storage import MemoryAnalysisStore, MemorySessionStore, ObjectStorage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stylist_ai.types import ConversationMessage


@dataclass
class RecordedCall:
    """One call made to ``FakeModelClient``."""

    kind: str
    system_prompt: str | None
    history: list[ConversationMessage] = field(default_factory=list)
    prompt: str | None = None
    image_base64: str | None = None


class FakeModelClient(ModelClient):
    """Model client answering from a script of replies.

    Each queued item is either a string (returned) or an exception (raised).
    """

    def __init__(self, *replies: str | BaseException) -> None:
        self._replies: deque[str | BaseException] = deque(replies)
        self.calls: list[RecordedCall] = []

    def queue(self, *replies: str | BaseException) -> FakeModelClient:
        self._replies.extend(replies)
        return self

    @property
    def remaining(self) -> int:
        return len(self._replies)

    def _next(self) -> str:
        if not self._replies:
            raise AssertionError("FakeModelClient has no scripted reply left")
        reply = self._replies.popleft()
        if isinstance(reply, BaseException):
            raise reply
        return reply

    async def send_message(
        self,
        history: Sequence[ConversationMessage],
        system_prompt: str | None = None,
    ) -> str:
        self.calls.append(RecordedCall("text", system_prompt, history=list(history)))
        return self._next()

    async def send_message_with_image(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None = None,
    ) -> str:
        self.calls.append(
            RecordedCall("image", system_prompt, prompt=prompt, image_base64=image_base64)
        )
        return self._next()


class FakeObjectStorage(ObjectStorage):
    """Object storage serving fixed bytes, or raising scripted errors first."""

    def __init__(self, content: bytes = b"\x89PNG fake image", *errors: BaseException) -> None:
        self.content = content
        self._errors: deque[BaseException] = deque(errors)
        self.downloads: list[str] = []

    async def download(self, url: str) -> bytes:
        self.downloads.append(url)
        if self._errors:
            raise self._errors.popleft()
        return self.content


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def fake_client() -> FakeModelClient:
    """Model client with an empty script."""
    return FakeModelClient()


@pytest.fixture
def fake_storage() -> FakeObjectStorage:
    return FakeObjectStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry_manager(sleep: RecordingSleep) -> RetryManager:
    """Retry manager that never actually waits."""
    return RetryManager(sleep=sleep)


@pytest.fixture
def fast_policy() -> RetryPolicy:
    return RetryPolicy(max_retries=3, base_delay=1.0, max_delay=10.0)


@pytest.fixture
def registry(clock: FakeClock) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(
        CircuitBreakerConfig(failure_threshold=5, reset_timeout=60.0),
        clock=clock,
    )


@pytest.fixture
def orchestrator(
    registry: CircuitBreakerRegistry,
    retry_manager: RetryManager,
    fast_policy: RetryPolicy,
) -> AIResilienceOrchestrator:
    return AIResilienceOrchestrator(registry, retry_manager=retry_manager, policy=fast_policy)


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def analysis_store() -> MemoryAnalysisStore:
    return MemoryAnalysisStore()


@pytest.fixture
def make_client() -> Any:
    """Factory for scripted model clients."""
    return FakeModelClient


@pytest.fixture
def make_storage() -> Any:
    """Factory for scripted object storage."""
    return FakeObjectStorage
