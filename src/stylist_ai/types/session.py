"""
Onboarding session model.

A session walks through a fixed, strictly ordered list of steps. Each step
(apart from the greeting and the terminal step) is satisfied by one field of
``ExtractedData``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import Field, model_validator

from stylist_ai.types.base import WireModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OnboardingStep(str, Enum):
    """Ordered onboarding steps.

    Comparison follows declaration order, not string order::

        >>> OnboardingStep.EMOTIONS < OnboardingStep.ARCHETYPE
        True
        >>> OnboardingStep.BUDGET.next()
        <OnboardingStep.COMPLETE: 'complete'>
    """

    GREETING = "greeting"
    EMOTIONS = "emotions"
    ARCHETYPE = "archetype"
    ESSENCE = "essence"
    LIFESTYLE = "lifestyle"
    VALUES = "values"
    LOCATION = "location"
    BUDGET = "budget"
    COMPLETE = "complete"

    @property
    def position(self) -> int:
        return list(type(self)).index(self)

    @property
    def is_terminal(self) -> bool:
        return self is OnboardingStep.COMPLETE

    @property
    def required_fields(self) -> tuple[str, ...]:
        """Fields of ``ExtractedData`` that satisfy this step."""
        return STEP_REQUIRED_FIELDS[self]

    def next(self) -> OnboardingStep:
        """Return the following step. ``COMPLETE`` is its own successor."""
        steps = list(type(self))
        return steps[min(self.position + 1, len(steps) - 1)]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, OnboardingStep):
            return NotImplemented
        return self.position < other.position

    def __le__(self, other: object) -> bool:
        if not isinstance(other, OnboardingStep):
            return NotImplemented
        return self.position <= other.position

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, OnboardingStep):
            return NotImplemented
        return self.position > other.position

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, OnboardingStep):
            return NotImplemented
        return self.position >= other.position


STEP_REQUIRED_FIELDS: dict[OnboardingStep, tuple[str, ...]] = {
    OnboardingStep.GREETING: (),
    OnboardingStep.EMOTIONS: ("emotions",),
    OnboardingStep.ARCHETYPE: ("archetype",),
    OnboardingStep.ESSENCE: ("essence",),
    OnboardingStep.LIFESTYLE: ("lifestyle",),
    OnboardingStep.VALUES: ("values",),
    OnboardingStep.LOCATION: ("zip_code",),
    OnboardingStep.BUDGET: ("max_budget",),
    OnboardingStep.COMPLETE: (),
}

REQUIRED_FIELDS: tuple[str, ...] = tuple(
    name for fields in STEP_REQUIRED_FIELDS.values() for name in fields
)


class ConversationMessage(WireModel):
    """One entry of the conversation history."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


class ExtractedData(WireModel):
    """Structured preferences accumulated across turns."""

    emotions: list[str] | None = None
    archetype: list[str] | None = None
    essence: list[str] | None = None
    lifestyle: list[str] | None = None
    values: list[str] | None = None
    zip_code: str | None = None
    max_budget: int | None = None

    def has(self, name: str) -> bool:
        """Check whether a field holds a usable value (non-empty for lists)."""
        value = getattr(self, name)
        if isinstance(value, list):
            return len(value) > 0
        return value is not None

    def has_all(self, names: tuple[str, ...]) -> bool:
        return all(self.has(name) for name in names)

    def collected(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if self.has(name)]

    def missing(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not self.has(name)]

    @property
    def is_complete(self) -> bool:
        return self.has_all(REQUIRED_FIELDS)

    def merged(self, updates: dict[str, Any]) -> ExtractedData:
        """Return a copy with *updates* overwriting the named fields."""
        known = {k: v for k, v in updates.items() if k in type(self).model_fields}
        return self.model_copy(update=known, deep=True)


class ConversationSession(WireModel):
    """Persisted state of one onboarding conversation.

    Attributes:
        version: Incremented on every successful write; updates are
            conditional on the version that was loaded.
    """

    user_id: str
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_history: list[ConversationMessage] = Field(default_factory=list)
    current_step: OnboardingStep = OnboardingStep.GREETING
    extracted_data: ExtractedData = Field(default_factory=ExtractedData)
    is_complete: bool = False
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    version: int = 0

    @model_validator(mode="after")
    def _check_completion(self) -> ConversationSession:
        if (self.current_step is OnboardingStep.COMPLETE) != self.is_complete:
            raise ValueError("current_step must be 'complete' exactly when is_complete is set")
        if self.is_complete and not self.extracted_data.is_complete:
            raise ValueError("a complete session must have every required field")
        return self

    def add_message(self, role: Literal["user", "assistant"], content: str) -> None:
        self.conversation_history.append(ConversationMessage(role=role, content=content))
