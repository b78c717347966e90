"""
Structured logging for track-app-python.

Provides context-aware logging with sensitive data masking, plus the
stage logger used by the envelope handler and client.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig

# Context variable for request-scoped logging context
_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return getattr(logging, self.value)


@dataclass
class LogContext:
    """Request-scoped logging context.

    Attributes:
        request_id: Unique request identifier
        role: Protocol role ("client" or "server")
        app_id: Application ID being tracked
        stage: Current pipeline stage
        extra: Additional context fields
    """

    request_id: str | None = None
    role: str | None = None
    app_id: str | None = None
    stage: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        if self.request_id:
            result["request_id"] = self.request_id
        if self.role:
            result["role"] = self.role
        if self.app_id:
            result["app_id"] = self.app_id
        if self.stage:
            result["stage"] = self.stage
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> LogContext:
        """Create new context with additional fields."""
        return LogContext(
            request_id=self.request_id,
            role=self.role,
            app_id=self.app_id,
            stage=self.stage,
            extra={**self.extra, **kwargs},
        )


_CONTEXT_FIELDS = ("request_id", "role", "app_id", "stage")


def get_log_context() -> LogContext:
    """Get current logging context."""
    data = _log_context.get()
    if not data:
        return LogContext()
    known = {k: data[k] for k in _CONTEXT_FIELDS if k in data}
    extra = {k: v for k, v in data.items() if k not in _CONTEXT_FIELDS}
    return LogContext(**known, extra=extra)


def set_log_context(context: LogContext) -> None:
    """Set logging context for current async context."""
    _log_context.set(context.to_dict())


def update_log_context(**kwargs: Any) -> None:
    """Merge fields into the current logging context."""
    current = _log_context.get() or {}
    _log_context.set({**current, **{k: v for k, v in kwargs.items() if v is not None}})


def clear_log_context() -> None:
    """Clear logging context."""
    _log_context.set(None)


class SensitiveDataMasker:
    """Masks sensitive data in log messages."""

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        (r"(encryption[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", r"\1***REDACTED***"),
        (r"(encryption[_-]?iv[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", r"\1***REDACTED***"),
        (r"(checksum[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", r"\1***REDACTED***"),
        (r"(authorization[_-]?token[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", r"\1***REDACTED***"),
        (r"(Bearer\s+)([^\s]+)", r"\1***REDACTED***"),
        (r"(TRACK_APP_(?:ENCRYPTION_KEY|ENCRYPTION_IV|CHECKSUM_KEY)=)([^\s]+)", r"\1***REDACTED***"),
    ]

    SENSITIVE_KEYS: ClassVar[tuple[str, ...]] = (
        "key",
        "token",
        "secret",
        "password",
        "auth",
    )

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        """Initialize masker with patterns.

        Args:
            patterns: List of (pattern, replacement) tuples
        """
        self._patterns = [
            (re.compile(p, re.IGNORECASE), r)
            for p, r in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        """Mask sensitive data in text."""
        result = text
        for pattern, replacement in self._patterns:
            result = pattern.sub(replacement, result)
        return result

    def _is_sensitive_key(self, key: str) -> bool:
        key_lower = key.lower()
        if key_lower == "iv" or key_lower.endswith("_iv"):
            return True
        return any(sensitive in key_lower for sensitive in self.SENSITIVE_KEYS)

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive data in dictionary."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            if self._is_sensitive_key(key):
                result[key] = "***REDACTED***"
            elif isinstance(value, str):
                result[key] = self.mask(value)
            elif isinstance(value, dict):
                result[key] = self.mask_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self.mask_dict(v) if isinstance(v, dict) else v for v in value
                ]
            else:
                result[key] = value
        return result


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_timestamp: bool = True,
    ) -> None:
        super().__init__()
        self._masker = masker or SensitiveDataMasker()
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }

        if self._include_timestamp:
            log_data["timestamp"] = time.strftime(
                "%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)
            ) + f".{int(record.msecs):03d}Z"

        context = get_log_context()
        if context_dict := context.to_dict():
            log_data["context"] = context_dict

        if hasattr(record, "extra_fields"):
            log_data.update(self._masker.mask_dict(record.extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_context: bool = True,
    ) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SensitiveDataMasker()
        self._include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text."""
        original_msg = record.msg
        record.msg = self._masker.mask(str(record.msg))

        result = super().format(record)

        record.msg = original_msg

        if hasattr(record, "extra_fields") and record.extra_fields:
            fields = self._masker.mask_dict(record.extra_fields)
            result = f"{result} | " + " ".join(f"{k}={v}" for k, v in fields.items())

        if self._include_context:
            context = get_log_context()
            if context_dict := context.to_dict():
                context_str = " ".join(f"{k}={v}" for k, v in context_dict.items())
                result = f"{result} | {context_str}"

        return result


class ProtocolLogger:
    """Logger for track-app-python with structured logging support.

    Example:
        >>> logger = ProtocolLogger.get_logger("track_app_python.server")
        >>> logger.info("Request validated", app_id="INC12345678")
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[LogLevel] = LogLevel.INFO
    _formatter: ClassVar[logging.Formatter | None] = None
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "json",
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Configure global logging settings.

        Args:
            level: Log level
            format: Output format ('json' or 'text')
            stream: Output stream (default: stderr)
            masker: Sensitive data masker
        """
        cls._level = level

        if format == "json":
            cls._formatter = JsonFormatter(masker=masker)
        else:
            cls._formatter = TextFormatter(masker=masker)

        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(cls._formatter)
        cls._handler.setLevel(level.to_logging_level())

        for logger in cls._loggers.values():
            logger.handlers.clear()
            logger.addHandler(cls._handler)
            logger.setLevel(level.to_logging_level())

    @classmethod
    def get_logger(cls, name: str) -> ProtocolLogger:
        """Get or create a logger.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            logger.setLevel(cls._level.to_logging_level())

            if cls._handler:
                logger.handlers.clear()
                logger.addHandler(cls._handler)
            elif not logger.handlers:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(TextFormatter())
                logger.addHandler(handler)

            logger.propagate = False
            cls._loggers[name] = logger

        return cls(cls._loggers[name])

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize with underlying logger."""
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(
        self, level: int, msg: str, exc_info: bool = False, **kwargs: Any
    ) -> None:
        """Internal log method."""
        extra = {"extra_fields": kwargs} if kwargs else {}
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def emit(self, level: int, msg: str, **kwargs: Any) -> None:
        """Hand a record to the handlers without consulting this logger's level.

        For callers that gate verbosity themselves, so the shared named
        logger never has to be lowered for them.
        """
        extra = {"extra_fields": kwargs} if kwargs else None
        record = self._logger.makeRecord(
            self._logger.name, level, "(unknown file)", 0, msg, (), None, extra=extra
        )
        self._logger.handle(record)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)


class StageLogger:
    """Config-gated logger for protocol pipelines.

    Nothing is written unless ``EnableLogging`` is set. Decrypted payloads
    go through :meth:`payload`, which only writes at ``LogLevel.DEBUG``.

    Example:
        >>> log = StageLogger(config, "track_app_python.server")
        >>> log.stage("decrypted")
        >>> log.payload("Request decrypted", plaintext)
    """

    def __init__(self, config: ProtocolConfig, name: str) -> None:
        self._enabled = config.enable_logging
        self._debug = config.debug_enabled
        self._logger = get_logger(name)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def stage(self, stage: str, msg: str | None = None, **kwargs: Any) -> None:
        """Record entry into a pipeline stage (info level)."""
        update_log_context(stage=stage)
        if self._enabled:
            self._logger.info(msg or f"Stage {stage}", **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        if self._enabled:
            self._logger.info(msg, **kwargs)

    def failure(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Record a terminal failure (error level)."""
        if self._enabled:
            self._logger.error(msg, exc_info=exc_info, **kwargs)

    def security_event(self, msg: str, **kwargs: Any) -> None:
        """Record an authentication failure (warning level)."""
        if self._enabled:
            self._logger.warning(msg, security_event=True, **kwargs)

    def payload(self, msg: str, text: str) -> None:
        """Record raw plaintext, only at debug verbosity."""
        if self._debug:
            self._logger.emit(logging.DEBUG, f"{msg}: {text}")


def get_logger(name: str) -> ProtocolLogger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return ProtocolLogger.get_logger(name)
