"""Base error classes for track-app-python.

Provides a layered error hierarchy:
- TrackAppError: Base class for all library errors
- FormatError: Malformed envelope or inner JSON
- CipherError: Triple-DES encryption/decryption failures
- ValidationError: Request/response field-level violations
- ApplicationNotFoundError: "not found" signal raised by data providers
- ProviderError: Any other data provider failure
- TransportError: Client-side network errors (retryable)
- RemoteError: Structured error response decoded from the counterpart
- ChecksumMismatchError: Legacy handshake authentication failure
- RequestCancelledError: Caller-cancelled client request
- RequestFailedError: Client request failed after exhausting retries
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'DeskDetails[1].DeskNumber')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'cipher', 'transport', 'validation')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class TrackAppError(Exception):
    """Base class for all track-app-python errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> TrackAppError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class ConfigurationError(TrackAppError):
    """Invalid or incomplete protocol configuration."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        option: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="config")
        if option:
            ctx.field_path = option
        super().__init__(message, ctx)
        self.option = option


class FormatError(TrackAppError):
    """Malformed outer envelope, inner JSON or pipe-delimited payload."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="format")
        super().__init__(message, ctx)
        self.__cause__ = cause


class DeserializationError(FormatError):
    """JSON text could not be turned into a wire model."""

    def __init__(
        self,
        message: str,
        *,
        model: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = ErrorContext(source="format")
        if model:
            ctx.details["model"] = model
        super().__init__(message, ctx, cause=cause)
        self.model = model


class CipherError(TrackAppError):
    """Triple-DES encryption or decryption failure.

    Raised when:
    - Key or IV has the wrong length
    - Ciphertext is not valid hex or not block aligned
    - Decrypted bytes are not valid UTF-8
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="cipher")
        super().__init__(message, ctx)
        self.__cause__ = cause


class EncryptionError(CipherError):
    """Failure while encrypting outbound data."""


class DecryptionError(CipherError):
    """Failure while decrypting inbound data."""


class ValidationError(TrackAppError):
    """Request or response failed field-level validation.

    Carries every violation found, not only the first one.
    """

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        self.errors = list(errors or [])
        if self.errors:
            ctx.details["errors"] = self.errors
        super().__init__(message, ctx)


class ApplicationNotFoundError(TrackAppError):
    """Raised by a data provider when no matching application exists."""

    def __init__(
        self,
        message: str = "Application not found",
        *,
        application_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="provider")
        if application_id:
            ctx.details["application_id"] = application_id
        super().__init__(message, ctx)
        self.application_id = application_id


class ProviderError(TrackAppError):
    """Unexpected failure inside a department data provider."""

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, ErrorContext(source="provider"))
        self.__cause__ = cause


class TransportError(TrackAppError):
    """Error during HTTP transport.

    Raised when:
    - Network connection failure
    - Timeout
    - Error status without a parseable JSON body (e.g. proxy HTML pages)

    Transport errors are the only errors the client retries.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.__cause__ = cause


class RemoteError(TrackAppError):
    """Structured error response returned by the counterpart.

    Attributes:
        status_code: HTTP status code
        error_message: The ``error`` field of the response body, if any
        timestamp: The ``timestamp`` field of the response body, if any
        raw_body: Raw response text, kept for diagnostics
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        raw_body: str | None = None,
        error_message: str | None = None,
        timestamp: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.status_code = status_code
        self.raw_body = raw_body
        self.error_message = error_message
        self.timestamp = timestamp

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any],
        raw_body: str | None = None,
    ) -> RemoteError:
        """Create RemoteError from a decoded ``{"error", "timestamp"}`` body.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            raw_body: Response text

        Returns:
            RemoteError carrying the counterpart's message
        """
        error_message = body.get("error")
        if error_message is not None:
            error_message = str(error_message)
        message = f"API returned error status {status_code}"
        if error_message:
            message = f"{message}: {error_message}"
        return cls(
            message,
            status_code=status_code,
            raw_body=raw_body,
            error_message=error_message,
            timestamp=body.get("timestamp"),
        )


class ChecksumMismatchError(TrackAppError):
    """Checksum of a pipe-delimited payload did not match.

    Always treated as an authentication failure; never retried.
    """

    def __init__(
        self,
        message: str = "Checksum validation failed",
        *,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        # Checksum values are not secret, but the raw input string is.
        ctx = ErrorContext(source="checksum")
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.expected = expected
        self.actual = actual


class RequestCancelledError(TrackAppError):
    """Client request aborted by the caller."""

    def __init__(self, message: str = "Request cancelled", *, reason: str | None = None) -> None:
        ctx = ErrorContext(source="client")
        if reason:
            ctx.details["reason"] = reason
        super().__init__(message, ctx)
        self.reason = reason


class RequestFailedError(TrackAppError):
    """Client request failed after exhausting all retry attempts.

    Attributes:
        attempts: Number of attempts made
        last_error: The final underlying failure
    """

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error: Exception | None = None,
    ) -> None:
        ctx = ErrorContext(source="client")
        ctx.details["attempts"] = attempts
        super().__init__(message, ctx)
        self.attempts = attempts
        self.last_error = last_error
        self.__cause__ = last_error
