"""错误体系：带类型化错误种类的结构化应用错误。

Error hierarchy for stylist-ai.

Provides structured error types tagged with an ``ErrorKind`` so retry and
circuit-breaker decisions never depend on message text.
"""

from stylist_ai.errors.base import (
    AIServiceError,
    AppError,
    CircuitOpenError,
    ConcurrentModificationError,
    ConversationError,
    NotFoundError,
    PhotoAnalysisError,
    RecoveryAction,
    ResponseParseError,
    StorageError,
    ValidationError,
)
from stylist_ai.errors.classification import (
    ErrorKind,
    classify_exception,
    classify_http_status,
    is_retryable,
)

__all__ = [
    # Base errors
    "AIServiceError",
    "AppError",
    "CircuitOpenError",
    "ConcurrentModificationError",
    "ConversationError",
    "NotFoundError",
    "PhotoAnalysisError",
    "RecoveryAction",
    "ResponseParseError",
    "StorageError",
    "ValidationError",
    # Classification
    "ErrorKind",
    "classify_exception",
    "classify_http_status",
    "is_retryable",
]
