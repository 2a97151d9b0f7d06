"""错误基类：提供分层错误体系、恢复动作和错误类型标签。

Base error classes for stylist-ai.

Provides a layered error hierarchy:
- AppError: Base class for all application errors
- ValidationError / ResponseParseError: Malformed input or model output
- NotFoundError: Missing session or resource
- StorageError: Download or persistence failure
- PhotoAnalysisError: Unusable or low-confidence analysis result
- CircuitOpenError: Dependency deemed unhealthy
- AIServiceError / ConversationError: Model call failures
- ConcurrentModificationError: Stale session write
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from stylist_ai.errors.classification import ErrorKind, is_retryable

RecoveryActionType = Literal["retry", "fallback", "manual", "session_recovery"]


@dataclass(frozen=True)
class RecoveryAction:
    """A follow-up the client can offer after a failure.

    Attributes:
        type: Action category
        label: Short button-style label
        description: What the action does
        endpoint: Optional endpoint the action targets
    """

    type: RecoveryActionType
    label: str
    description: str
    endpoint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format."""
        data: dict[str, Any] = {
            "type": self.type,
            "label": self.label,
            "description": self.description,
        }
        if self.endpoint:
            data["endpoint"] = self.endpoint
        return data


_RETRY = RecoveryAction("retry", "Try Again", "Retry the operation")


class AppError(Exception):
    """Base class for all stylist-ai errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status equivalent
        kind: Typed classification used by retry predicates
        retryable: Whether the client may retry
        retry_after: Suggested client retry delay in seconds
        recovery_actions: Follow-ups offered to the client
        details: Additional diagnostic fields
    """

    default_code = "INTERNAL_SERVER_ERROR"
    default_status = 500
    default_kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        kind: ErrorKind | None = None,
        retryable: bool | None = None,
        retry_after: float | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.status_code = status_code or self.default_status
        self.kind = kind or self.default_kind
        self.retryable = is_retryable(self.kind) if retryable is None else retryable
        self.retry_after = retry_after
        self.recovery_actions = list(recovery_actions or [])
        self.details = dict(details or {})
        self.request_id: str | None = None
        super().__init__(message)

    def with_request_id(self, request_id: str) -> AppError:
        """Attach the request correlation id."""
        self.request_id = request_id
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, kind={self.kind.value}, message={self.message!r})"


class ValidationError(AppError):
    """Malformed input. Never retried.

    Raised when:
    - Request fields are missing or empty
    - A model result is missing required fields
    - A value lies outside its valid domain
    """

    default_code = "VALIDATION_ERROR"
    default_status = 400
    default_kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
        kind: ErrorKind | None = None,
    ) -> None:
        merged = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(message, kind=kind, retryable=False, details=merged)
        self.field = field


class ResponseParseError(ValidationError):
    """Model output could not be parsed into the expected structure."""

    default_kind = ErrorKind.PARSE

    def __init__(self, message: str, *, raw: str | None = None) -> None:
        details = {"raw_length": len(raw)} if raw is not None else None
        super().__init__(message, details=details, kind=ErrorKind.PARSE)
        self.raw = raw


class NotFoundError(AppError):
    """Requested resource does not exist."""

    default_code = "NOT_FOUND"
    default_status = 404
    default_kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found", retryable=False)
        self.resource = resource


class StorageError(AppError):
    """Object download or persistence failure.

    The kind is supplied by the adapter that raised it; not-found and
    forbidden downloads are therefore not retried.
    """

    default_code = "STORAGE_ERROR"
    default_status = 500
    default_kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            kind=kind,
            retry_after=3.0,
            recovery_actions=[
                RecoveryAction("retry", "Retry Upload", "Try uploading the image again"),
                RecoveryAction(
                    "manual",
                    "Try Different Image",
                    "Select a different image or check your internet connection",
                ),
            ],
            details=details,
        )


class PhotoAnalysisError(AppError):
    """Model returned an unusable or low-confidence analysis.

    When ``confidence`` is below the photo threshold a manual-input
    recovery action is offered alongside retry and re-upload.
    """

    default_code = "PHOTO_ANALYSIS_ERROR"
    default_status = 422
    default_kind = ErrorKind.PARSE

    LOW_CONFIDENCE_THRESHOLD = 0.7

    def __init__(
        self,
        message: str,
        *,
        confidence: float | None = None,
        kind: ErrorKind | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        actions = [
            RecoveryAction("retry", "Retry Analysis", "Try analyzing the same photo again"),
            RecoveryAction(
                "manual",
                "Upload Different Photo",
                "Try a different photo with better lighting or angle",
            ),
        ]
        if confidence is not None and confidence < self.LOW_CONFIDENCE_THRESHOLD:
            actions.append(
                RecoveryAction("manual", "Manual Input", "Provide your measurements manually instead")
            )
        merged = dict(details or {})
        if confidence is not None:
            merged["confidence"] = confidence
        super().__init__(
            message,
            kind=kind,
            retryable=True,
            retry_after=3.0,
            recovery_actions=actions,
            details=merged,
        )
        self.confidence = confidence


class CircuitOpenError(AppError):
    """Raised when a circuit is open and the call is rejected.

    Attributes:
        resource_name: Name of the guarded resource
        retry_after: Seconds until the circuit allows a trial call
    """

    default_code = "CIRCUIT_OPEN"
    default_status = 503
    default_kind = ErrorKind.CIRCUIT_OPEN

    def __init__(self, resource_name: str, retry_after: float = 0.0) -> None:
        remaining = max(0.0, retry_after)
        super().__init__(
            f"Service {resource_name} is temporarily unavailable",
            retryable=True,
            retry_after=remaining,
            recovery_actions=[_RETRY],
            details={"resource": resource_name},
        )
        self.resource_name = resource_name


class AIServiceError(AppError):
    """Model call failed after resilience handling."""

    default_code = "AI_SERVICE_ERROR"
    default_status = 502
    default_kind = ErrorKind.UPSTREAM

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        actions = [RecoveryAction("retry", "Try Again", "Retry the AI analysis with the same input")]
        lowered = message.lower()
        if "conversation" in lowered or "chat" in lowered:
            actions.append(
                RecoveryAction(
                    "fallback",
                    "Use Structured Form",
                    "Complete your profile using a structured questionnaire instead",
                )
            )
        super().__init__(
            message,
            kind=kind,
            retry_after=5.0,
            recovery_actions=actions,
            details=details,
        )


class ConversationError(AppError):
    """Onboarding conversation could not be continued."""

    default_code = "CONVERSATION_ERROR"
    default_status = 500
    default_kind = ErrorKind.UPSTREAM

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message,
            retryable=True,
            retry_after=2.0,
            recovery_actions=[
                RecoveryAction("retry", "Try Again", "Send your message again"),
                RecoveryAction(
                    "fallback",
                    "Use Structured Form",
                    "Complete your profile using a questionnaire instead",
                ),
                RecoveryAction(
                    "session_recovery",
                    "Resume Previous Session",
                    "Continue from your last saved conversation",
                ),
            ],
            details=details,
        )


class ConcurrentModificationError(AppError):
    """Session was updated by another turn since it was loaded."""

    default_code = "CONFLICT"
    default_status = 409
    default_kind = ErrorKind.CONFLICT

    def __init__(self, session_id: str, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"Session {session_id} was modified concurrently",
            retryable=True,
            recovery_actions=[RecoveryAction("retry", "Try Again", "Send your message again")],
            details={"expected_version": expected_version, "actual_version": actual_version},
        )
        self.session_id = session_id
        self.expected_version = expected_version
        self.actual_version = actual_version

