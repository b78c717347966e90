"""Error hierarchy for track-app-python.

Provides structured error types and the error-kind classification used by
the envelope protocol.
"""

from track_app_python.errors.base import (
    ApplicationNotFoundError,
    ChecksumMismatchError,
    CipherError,
    ConfigurationError,
    DecryptionError,
    DeserializationError,
    EncryptionError,
    ErrorContext,
    FormatError,
    ProviderError,
    RemoteError,
    RequestCancelledError,
    RequestFailedError,
    TrackAppError,
    TransportError,
    ValidationError,
)
from track_app_python.errors.classification import ErrorKind, classify_exception

__all__ = [
    "ApplicationNotFoundError",
    "ChecksumMismatchError",
    "CipherError",
    "ConfigurationError",
    "DecryptionError",
    "DeserializationError",
    "EncryptionError",
    "ErrorContext",
    # Classification
    "ErrorKind",
    "FormatError",
    "ProviderError",
    "RemoteError",
    "RequestCancelledError",
    "RequestFailedError",
    # Base errors
    "TrackAppError",
    "TransportError",
    "ValidationError",
    "classify_exception",
]
