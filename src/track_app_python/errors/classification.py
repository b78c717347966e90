"""Error classification for the envelope protocol.

Maps every terminal failure of the server pipeline to an HTTP status and
the client-facing message defined by the wire contract.
"""

from __future__ import annotations

from enum import Enum

from track_app_python.errors.base import (
    ApplicationNotFoundError,
    ChecksumMismatchError,
    CipherError,
    DecryptionError,
    EncryptionError,
    FormatError,
    ProviderError,
    ValidationError,
)


class ErrorKind(str, Enum):
    """Tagged error kinds produced by the envelope handler stages."""

    INVALID_FORMAT = "invalid_format"
    """Outer envelope or inner JSON is malformed, or ``data`` is missing."""

    DECRYPT_FAILED = "decrypt_failed"
    """Inbound ciphertext could not be decrypted."""

    REQUEST_INVALID = "request_invalid"
    """Decrypted request failed validation."""

    NOT_FOUND = "not_found"
    """Data provider reported that the application does not exist."""

    PROVIDER_FAILED = "provider_failed"
    """Data provider failed for any other reason."""

    RESPONSE_INVALID = "response_invalid"
    """Provider returned a response that violates the contract."""

    ENCRYPT_FAILED = "encrypt_failed"
    """Outbound response could not be encrypted."""

    CHECKSUM_MISMATCH = "checksum_mismatch"
    """Legacy pipe payload failed checksum authentication."""

    UNEXPECTED = "unexpected"
    """Any uncaught failure."""

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def default_message(self) -> str:
        return _DEFAULT_MESSAGES[self]

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500


_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_FORMAT: 400,
    ErrorKind.DECRYPT_FAILED: 400,
    ErrorKind.REQUEST_INVALID: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PROVIDER_FAILED: 500,
    ErrorKind.RESPONSE_INVALID: 500,
    ErrorKind.ENCRYPT_FAILED: 500,
    ErrorKind.CHECKSUM_MISMATCH: 401,
    ErrorKind.UNEXPECTED: 500,
}

_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_FORMAT: "Invalid request format",
    ErrorKind.DECRYPT_FAILED: "Failed to decrypt request",
    ErrorKind.REQUEST_INVALID: "Validation failed",
    ErrorKind.NOT_FOUND: "Application not found",
    ErrorKind.PROVIDER_FAILED: "Internal server error",
    ErrorKind.RESPONSE_INVALID: "Invalid response data",
    ErrorKind.ENCRYPT_FAILED: "Failed to encrypt response",
    ErrorKind.CHECKSUM_MISMATCH: "Checksum validation failed",
    ErrorKind.UNEXPECTED: "An unexpected error occurred",
}


def classify_exception(error: BaseException) -> ErrorKind:
    """Classify a library exception into an ErrorKind.

    Args:
        error: The exception to classify

    Returns:
        Matching ErrorKind, ``UNEXPECTED`` for anything unrecognized
    """
    if isinstance(error, ApplicationNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, ChecksumMismatchError):
        return ErrorKind.CHECKSUM_MISMATCH
    if isinstance(error, EncryptionError):
        return ErrorKind.ENCRYPT_FAILED
    if isinstance(error, (DecryptionError, CipherError)):
        return ErrorKind.DECRYPT_FAILED
    if isinstance(error, FormatError):
        return ErrorKind.INVALID_FORMAT
    if isinstance(error, ValidationError):
        return ErrorKind.REQUEST_INVALID
    if isinstance(error, ProviderError):
        return ErrorKind.PROVIDER_FAILED
    return ErrorKind.UNEXPECTED
