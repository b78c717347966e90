"""Tests for the error hierarchy and classification."""

import pytest

from track_app_python.errors import (
    ApplicationNotFoundError,
    ChecksumMismatchError,
    CipherError,
    ConfigurationError,
    DecryptionError,
    DeserializationError,
    EncryptionError,
    ErrorContext,
    ErrorKind,
    FormatError,
    ProviderError,
    RemoteError,
    RequestCancelledError,
    RequestFailedError,
    TrackAppError,
    TransportError,
    ValidationError,
    classify_exception,
)


class TestErrorHierarchy:
    """Tests for error classes."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            FormatError("bad"),
            DeserializationError("bad"),
            CipherError("bad"),
            ValidationError("bad"),
            ApplicationNotFoundError(),
            ProviderError("bad"),
            TransportError("bad"),
            RemoteError("bad", status_code=500),
            ChecksumMismatchError(),
            RequestCancelledError(),
            RequestFailedError("bad", attempts=1),
        ],
    )
    def test_all_are_library_errors(self, error) -> None:
        assert isinstance(error, TrackAppError)

    def test_context_in_message(self) -> None:
        error = FormatError("Envelope is not valid JSON").with_hint("Send {\"data\": ...}")
        assert error.context.source == "format"
        assert error.context.hint == 'Send {"data": ...}'

    def test_error_context_str(self) -> None:
        ctx = ErrorContext(field_path="DeskDetails[1].DeskNumber", source="validation")
        assert str(ctx) == "[validation] at 'DeskDetails[1].DeskNumber'"

    def test_validation_error_keeps_all_errors(self) -> None:
        error = ValidationError("Request validation failed", ["AppID is required", "DeptName is required"])
        assert error.errors == ["AppID is required", "DeptName is required"]
        assert error.context.details["errors"] == error.errors

    def test_remote_error_from_response(self) -> None:
        error = RemoteError.from_response(
            404, {"error": "Application not found", "timestamp": "2025-09-18T17:30:00"}, "{}"
        )
        assert error.is_not_found
        assert error.error_message == "Application not found"
        assert error.timestamp == "2025-09-18T17:30:00"
        assert "404" in error.message

    def test_request_failed_keeps_cause(self) -> None:
        cause = TransportError("Connection failed")
        error = RequestFailedError("failed", attempts=4, last_error=cause)
        assert error.__cause__ is cause
        assert error.context.details["attempts"] == 4

    def test_checksum_error_default_message(self) -> None:
        assert ChecksumMismatchError().message == "Checksum validation failed"


class TestErrorKind:
    """Tests for ErrorKind."""

    @pytest.mark.parametrize(
        ("kind", "status", "message"),
        [
            (ErrorKind.INVALID_FORMAT, 400, "Invalid request format"),
            (ErrorKind.DECRYPT_FAILED, 400, "Failed to decrypt request"),
            (ErrorKind.REQUEST_INVALID, 400, "Validation failed"),
            (ErrorKind.NOT_FOUND, 404, "Application not found"),
            (ErrorKind.PROVIDER_FAILED, 500, "Internal server error"),
            (ErrorKind.RESPONSE_INVALID, 500, "Invalid response data"),
            (ErrorKind.ENCRYPT_FAILED, 500, "Failed to encrypt response"),
            (ErrorKind.CHECKSUM_MISMATCH, 401, "Checksum validation failed"),
            (ErrorKind.UNEXPECTED, 500, "An unexpected error occurred"),
        ],
    )
    def test_mapping(self, kind: ErrorKind, status: int, message: str) -> None:
        assert kind.http_status == status
        assert kind.default_message == message

    def test_is_client_error(self) -> None:
        assert ErrorKind.NOT_FOUND.is_client_error
        assert not ErrorKind.PROVIDER_FAILED.is_client_error

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (ApplicationNotFoundError(), ErrorKind.NOT_FOUND),
            (ChecksumMismatchError(), ErrorKind.CHECKSUM_MISMATCH),
            (EncryptionError("bad"), ErrorKind.ENCRYPT_FAILED),
            (DecryptionError("bad"), ErrorKind.DECRYPT_FAILED),
            (DeserializationError("bad"), ErrorKind.INVALID_FORMAT),
            (ValidationError("bad"), ErrorKind.REQUEST_INVALID),
            (ProviderError("bad"), ErrorKind.PROVIDER_FAILED),
            (RuntimeError("bad"), ErrorKind.UNEXPECTED),
        ],
    )
    def test_classify_exception(self, error: BaseException, kind: ErrorKind) -> None:
        assert classify_exception(error) == kind
