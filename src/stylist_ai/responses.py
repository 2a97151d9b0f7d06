"""
Response envelopes for the HTTP layer.

Every endpoint answers with ``{success, data?, error?}`` in camelCase.
Errors carry the request correlation id; exceptions that are not
``AppError`` are reported generically so internals never leak.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from stylist_ai.errors import AppError, RecoveryAction
from stylist_ai.telemetry import get_logger

if TYPE_CHECKING:
    from stylist_ai.resilience import AnalysisResult

logger = get_logger("stylist_ai.responses")

_ID_ALPHABET = string.ascii_lowercase + string.digits
_GENERIC_RETRY_AFTER = 5.0
_GENERIC_ACTION = RecoveryAction("retry", "Try Again", "Retry the operation")


def generate_request_id() -> str:
    """Create a correlation id of the form ``req_<epoch ms>_<9 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def _to_data(value: Any) -> Any:
    to_wire = getattr(value, "to_wire", None)
    return to_wire() if callable(to_wire) else value


def _millis(seconds: float | None) -> int | None:
    return None if seconds is None else int(round(seconds * 1000))


def error_status(error: BaseException) -> int:
    """HTTP status for an error."""
    return error.status_code if isinstance(error, AppError) else 500


def format_error_response(error: BaseException, request_id: str) -> dict[str, Any]:
    """Render the ``{"error": {...}}`` envelope.

    ``retryAfter`` is in milliseconds.
    """
    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    if isinstance(error, AppError):
        body: dict[str, Any] = {
            "code": error.code,
            "message": error.message,
            "timestamp": timestamp,
            "requestId": error.request_id or request_id,
            "retryable": error.retryable,
            "recoveryActions": [action.to_dict() for action in error.recovery_actions],
        }
        if error.details:
            body["details"] = error.details
        if error.retry_after is not None:
            body["retryAfter"] = _millis(error.retry_after)
        return {"error": body}

    logger.error(
        "Unhandled error",
        request_id=request_id,
        error_type=type(error).__name__,
    )
    return {
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred",
            "timestamp": timestamp,
            "requestId": request_id,
            "retryable": True,
            "retryAfter": _millis(_GENERIC_RETRY_AFTER),
            "recoveryActions": [_GENERIC_ACTION.to_dict()],
        }
    }


def success_response(data: Any) -> dict[str, Any]:
    return {"success": True, "data": _to_data(data)}


def failure_response(
    error: BaseException,
    request_id: str,
    data: Any = None,
) -> tuple[dict[str, Any], int]:
    """Render a failure, optionally with soft-fail data.

    Returns:
        (body, HTTP status)
    """
    body: dict[str, Any] = {"success": False}
    if data is not None:
        body["data"] = _to_data(data)
    body.update(format_error_response(error, request_id))
    return body, error_status(error)


def result_response(result: AnalysisResult[Any], request_id: str) -> tuple[dict[str, Any], int]:
    """Render an orchestrated result.

    Returns:
        (body, HTTP status); soft-fails keep their data
    """
    if result.success:
        return success_response(result.data), 200
    return failure_response(result.error, request_id, data=result.data)  # type: ignore[arg-type]
