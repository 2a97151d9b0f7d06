"""错误分类模块：为每个失败附加类型化的错误种类，驱动重试决策。

Error classification for stylist-ai.

Every failure carries an ``ErrorKind`` attached where it is raised, so retry
predicates switch on the kind instead of inspecting message text.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum

import httpx
import pydantic


class ErrorKind(str, Enum):
    """Typed failure classification."""

    VALIDATION = "validation"
    """Malformed input; never retried."""

    PARSE = "parse"
    """Model returned text that could not be parsed or validated."""

    NOT_FOUND = "not_found"
    """Requested resource (session, image) does not exist."""

    FORBIDDEN = "forbidden"
    """Caller is not permitted to access the resource."""

    AUTHENTICATION = "authentication"
    """Missing or invalid credentials."""

    CONFLICT = "conflict"
    """Concurrent modification detected."""

    LOW_CONFIDENCE = "low_confidence"
    """Structurally valid result below the confidence threshold."""

    CIRCUIT_OPEN = "circuit_open"
    """Dependency is known-bad; fail fast."""

    TIMEOUT = "timeout"
    """Attempt exceeded its deadline."""

    NETWORK = "network"
    """Connection-level failure."""

    RATE_LIMITED = "rate_limited"
    """Throttled by the upstream service."""

    SERVER_ERROR = "server_error"
    """Transient 5xx from the upstream service."""

    OVERLOADED = "overloaded"
    """Upstream temporarily unavailable."""

    UPSTREAM = "upstream"
    """Model call failed for a reason the client did not classify."""

    INTERNAL = "internal"
    """Unexpected local failure."""


_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.NETWORK,
        ErrorKind.RATE_LIMITED,
        ErrorKind.SERVER_ERROR,
        ErrorKind.OVERLOADED,
        ErrorKind.UPSTREAM,
    }
)

_STATUS_MAPPING: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    408: ErrorKind.TIMEOUT,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVER_ERROR,
    503: ErrorKind.OVERLOADED,
    504: ErrorKind.TIMEOUT,
    529: ErrorKind.OVERLOADED,
}


def is_retryable(kind: ErrorKind) -> bool:
    """Check whether failures of this kind are transient.

    Args:
        kind: The error kind

    Returns:
        True for timeout, network, throttling and server-side kinds
    """
    return kind in _RETRYABLE_KINDS


def classify_http_status(status_code: int) -> ErrorKind:
    """Map an HTTP status code onto an error kind.

    Args:
        status_code: HTTP status code

    Returns:
        ErrorKind for the status
    """
    if status_code in _STATUS_MAPPING:
        return _STATUS_MAPPING[status_code]
    if 400 <= status_code < 500:
        return ErrorKind.VALIDATION
    if 500 <= status_code < 600:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.INTERNAL


def classify_exception(error: BaseException) -> ErrorKind:
    """Determine the kind of an arbitrary exception.

    Library errors report their own kind. Foreign exceptions are mapped by
    type; anything unrecognised is ``INTERNAL`` and never retried.

    Args:
        error: The exception to classify

    Returns:
        ErrorKind for the exception
    """
    kind = getattr(error, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind

    if isinstance(error, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(error, httpx.HTTPStatusError):
        return classify_http_status(error.response.status_code)
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return ErrorKind.NETWORK
    if isinstance(error, (json.JSONDecodeError, pydantic.ValidationError)):
        return ErrorKind.PARSE
    return ErrorKind.INTERNAL
