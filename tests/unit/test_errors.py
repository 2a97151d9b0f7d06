"""Tests for error hierarchy and classification."""

import asyncio
import json

import httpx
import pytest

from stylist_ai.errors import (
    AIServiceError,
    AppError,
    CircuitOpenError,
    ConcurrentModificationError,
    ConversationError,
    ErrorKind,
    NotFoundError,
    PhotoAnalysisError,
    RecoveryAction,
    ResponseParseError,
    StorageError,
    ValidationError,
    classify_exception,
    classify_http_status,
    is_retryable,
)


class TestErrorKind:
    """Tests for ErrorKind classification."""

    @pytest.mark.parametrize(
        "kind",
        [
            ErrorKind.TIMEOUT,
            ErrorKind.NETWORK,
            ErrorKind.RATE_LIMITED,
            ErrorKind.SERVER_ERROR,
            ErrorKind.OVERLOADED,
            ErrorKind.UPSTREAM,
        ],
    )
    def test_transient_kinds_are_retryable(self, kind) -> None:
        """Test network-class kinds are retryable."""
        assert is_retryable(kind)

    @pytest.mark.parametrize(
        "kind",
        [
            ErrorKind.VALIDATION,
            ErrorKind.PARSE,
            ErrorKind.NOT_FOUND,
            ErrorKind.FORBIDDEN,
            ErrorKind.CONFLICT,
            ErrorKind.LOW_CONFIDENCE,
            ErrorKind.CIRCUIT_OPEN,
        ],
    )
    def test_permanent_kinds_are_not_retryable(self, kind) -> None:
        """Test input and state errors are never retried."""
        assert not is_retryable(kind)

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (400, ErrorKind.VALIDATION),
            (403, ErrorKind.FORBIDDEN),
            (404, ErrorKind.NOT_FOUND),
            (418, ErrorKind.VALIDATION),
            (429, ErrorKind.RATE_LIMITED),
            (500, ErrorKind.SERVER_ERROR),
            (503, ErrorKind.OVERLOADED),
            (504, ErrorKind.TIMEOUT),
            (599, ErrorKind.SERVER_ERROR),
        ],
    )
    def test_classify_http_status(self, status, kind) -> None:
        """Test HTTP status mapping."""
        assert classify_http_status(status) == kind

    def test_classify_exception(self) -> None:
        """Test classification of foreign exceptions."""
        request = httpx.Request("GET", "https://images.example.com/a.jpg")
        response = httpx.Response(404, request=request)

        assert classify_exception(asyncio.TimeoutError()) == ErrorKind.TIMEOUT
        assert classify_exception(httpx.ReadTimeout("slow")) == ErrorKind.TIMEOUT
        assert classify_exception(httpx.ConnectError("refused")) == ErrorKind.NETWORK
        assert classify_exception(ConnectionResetError()) == ErrorKind.NETWORK
        assert (
            classify_exception(httpx.HTTPStatusError("missing", request=request, response=response))
            == ErrorKind.NOT_FOUND
        )
        assert classify_exception(json.JSONDecodeError("bad", "{", 0)) == ErrorKind.PARSE
        assert classify_exception(RuntimeError("boom")) == ErrorKind.INTERNAL
        assert classify_exception(KeyError("content")) == ErrorKind.INTERNAL

    def test_application_errors_report_own_kind(self) -> None:
        """Test errors carrying a kind are classified by it."""
        assert classify_exception(NotFoundError("Image")) == ErrorKind.NOT_FOUND
        assert classify_exception(StorageError("x", kind=ErrorKind.FORBIDDEN)) == ErrorKind.FORBIDDEN


class TestErrors:
    """Tests for the error hierarchy."""

    def test_app_error_defaults(self) -> None:
        """Test base error defaults."""
        error = AppError("Something broke")
        assert error.code == "INTERNAL_SERVER_ERROR"
        assert error.status_code == 500
        assert error.kind == ErrorKind.INTERNAL
        assert not error.retryable
        assert error.recovery_actions == []
        assert str(error) == "Something broke"

    def test_request_id(self) -> None:
        """Test attaching a correlation id."""
        error = AppError("x").with_request_id("req_1_abc")
        assert error.request_id == "req_1_abc"

    def test_validation_error(self) -> None:
        """Test validation errors carry the field and are never retryable."""
        error = ValidationError("Zip code is required", field="zipCode")
        assert error.status_code == 400
        assert error.code == "VALIDATION_ERROR"
        assert error.details == {"field": "zipCode"}
        assert not error.retryable

    def test_response_parse_error(self) -> None:
        """Test parse errors are validation errors of kind PARSE."""
        error = ResponseParseError("no JSON", raw="hello")
        assert isinstance(error, ValidationError)
        assert error.kind == ErrorKind.PARSE
        assert error.details == {"raw_length": 5}

    def test_not_found(self) -> None:
        """Test not-found message."""
        error = NotFoundError("Session")
        assert error.message == "Session not found"
        assert error.status_code == 404

    def test_storage_error_retryability_follows_kind(self) -> None:
        """Test storage failures are retryable only for transient kinds."""
        assert StorageError("download failed").retryable
        assert not StorageError("missing", kind=ErrorKind.NOT_FOUND).retryable
        assert StorageError("x").retry_after == 3.0

    def test_photo_analysis_error_manual_input(self) -> None:
        """Test low confidence offers manual input."""
        low = PhotoAnalysisError("unsure", confidence=0.5)
        high = PhotoAnalysisError("unsure", confidence=0.8)

        assert "Manual Input" in [a.label for a in low.recovery_actions]
        assert "Manual Input" not in [a.label for a in high.recovery_actions]
        assert low.details["confidence"] == 0.5
        assert low.status_code == 422

    def test_circuit_open_error(self) -> None:
        """Test circuit-open errors name the resource."""
        error = CircuitOpenError("bedrock-conversation", 42.0)
        assert error.status_code == 503
        assert error.retry_after == 42.0
        assert error.details == {"resource": "bedrock-conversation"}
        assert "bedrock-conversation" in error.message
        assert CircuitOpenError("x", -3).retry_after == 0.0

    def test_ai_service_error_conversation_fallback(self) -> None:
        """Test conversation failures offer the structured form."""
        error = AIServiceError("Conversation model unavailable")
        labels = [a.label for a in error.recovery_actions]
        assert labels == ["Try Again", "Use Structured Form"]
        assert error.retry_after == 5.0
        assert error.retryable

    def test_conversation_error(self) -> None:
        """Test conversation errors offer session recovery."""
        error = ConversationError("Could not continue")
        assert [a.type for a in error.recovery_actions] == ["retry", "fallback", "session_recovery"]

    def test_concurrent_modification(self) -> None:
        """Test version conflict details."""
        error = ConcurrentModificationError("s-1", 2, 3)
        assert error.status_code == 409
        assert error.kind == ErrorKind.CONFLICT
        assert error.details == {"expected_version": 2, "actual_version": 3}
        assert error.retryable

    def test_recovery_action_to_dict(self) -> None:
        """Test recovery action wire format."""
        action = RecoveryAction("retry", "Try Again", "Retry", endpoint="/api/retry")
        assert action.to_dict() == {
            "type": "retry",
            "label": "Try Again",
            "description": "Retry",
            "endpoint": "/api/retry",
        }
        assert "endpoint" not in RecoveryAction("manual", "a", "b").to_dict()
