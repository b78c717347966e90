"""
Telemetry module for track-app-python.

Provides structured, config-gated logging with sensitive data masking.
"""

from track_app_python.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    ProtocolLogger,
    SensitiveDataMasker,
    StageLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
    update_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "ProtocolLogger",
    "SensitiveDataMasker",
    "StageLogger",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "set_log_context",
    "update_log_context",
]
