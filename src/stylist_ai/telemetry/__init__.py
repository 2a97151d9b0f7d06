"""
Telemetry module for stylist-ai.

Provides structured logging with request-scoped context.
"""

from stylist_ai.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    StylistLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "SensitiveDataMasker",
    "StylistLogger",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "set_log_context",
]
