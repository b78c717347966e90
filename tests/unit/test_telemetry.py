"""Tests for telemetry module."""

import io
import json
import logging
from unittest.mock import MagicMock

from track_app_python.config import ProtocolConfig
from track_app_python.telemetry import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    StageLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
    update_log_context,
)

KEY = "ABCDEFGHIJKLMNOPQRSTUVWX"
IV = "12345678"


def _stage_logger(**options) -> tuple[StageLogger, MagicMock]:
    config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV, **options)
    log = StageLogger(config, "track_app_python.test")
    mock = MagicMock()
    log._logger = mock
    return log, mock


class TestSensitiveDataMasker:
    """Tests for SensitiveDataMasker."""

    def test_mask_key_assignment(self) -> None:
        masker = SensitiveDataMasker()
        masked = masker.mask(f"encryption_key={KEY}")
        assert KEY not in masked
        assert "***REDACTED***" in masked

    def test_mask_env_variable(self) -> None:
        masked = SensitiveDataMasker().mask("TRACK_APP_CHECKSUM_KEY=shared-secret")
        assert "shared-secret" not in masked

    def test_mask_dict(self) -> None:
        masked = SensitiveDataMasker().mask_dict(
            {"checksum_key": "shared-secret", "encryption_iv": IV, "app_id": "INC1", "nested": {"token": "t"}}
        )
        assert masked["checksum_key"] == "***REDACTED***"
        assert masked["encryption_iv"] == "***REDACTED***"
        assert masked["app_id"] == "INC1"
        assert masked["nested"]["token"] == "***REDACTED***"


class TestLogContext:
    """Tests for request-scoped context."""

    def test_set_and_get(self) -> None:
        set_log_context(LogContext(request_id="abc", role="server"))
        update_log_context(stage="decrypted", app_id=None)
        context = get_log_context()
        assert context.request_id == "abc"
        assert context.role == "server"
        assert context.stage == "decrypted"
        assert context.app_id is None
        clear_log_context()
        assert get_log_context().to_dict() == {}

    def test_with_extra(self) -> None:
        context = LogContext(request_id="abc").with_extra(attempt=2)
        assert context.to_dict() == {"request_id": "abc", "attempt": 2}


class TestFormatters:
    """Tests for log formatters."""

    def _record(self, msg: str) -> logging.LogRecord:
        return logging.LogRecord("track_app_python", logging.INFO, __file__, 1, msg, None, None)

    def test_json_formatter(self) -> None:
        clear_log_context()
        output = json.loads(JsonFormatter().format(self._record(f"encryption_key={KEY}")))
        assert output["level"] == "INFO"
        assert KEY not in output["message"]

    def test_text_formatter(self) -> None:
        clear_log_context()
        output = TextFormatter().format(self._record("Request validated"))
        assert "Request validated" in output
        assert "INFO" in output


class TestStageLogger:
    """Tests for config-gated stage logging."""

    def test_disabled_writes_nothing(self) -> None:
        log, mock = _stage_logger()
        log.stage("decrypted")
        log.info("hello")
        log.failure("boom")
        log.security_event("checksum mismatch")
        log.payload("Request decrypted", '{"AppID":"INC1"}')
        assert mock.method_calls == []

    def test_enabled_info_level(self) -> None:
        log, mock = _stage_logger(enable_logging=True)
        log.stage("decrypted", "Request decrypted")
        log.failure("boom", error_kind="unexpected")
        log.security_event("checksum mismatch")
        log.payload("Request decrypted", '{"AppID":"INC1"}')

        mock.info.assert_called_once_with("Request decrypted")
        mock.error.assert_called_once_with("boom", exc_info=False, error_kind="unexpected")
        mock.warning.assert_called_once_with("checksum mismatch", security_event=True)
        mock.emit.assert_not_called()

    def test_payload_at_debug_level(self) -> None:
        log, mock = _stage_logger(enable_logging=True, log_level=LogLevel.DEBUG)
        log.payload("Request decrypted", '{"AppID":"INC1"}')
        mock.emit.assert_called_once_with(logging.DEBUG, 'Request decrypted: {"AppID":"INC1"}')

    def test_debug_config_leaves_shared_level_alone(self) -> None:
        name = "track_app_python.level_test"
        debug_log = StageLogger(
            ProtocolConfig(
                encryption_key=KEY,
                encryption_iv=IV,
                enable_logging=True,
                log_level=LogLevel.DEBUG,
            ),
            name,
        )
        info_log = StageLogger(
            ProtocolConfig(encryption_key=KEY, encryption_iv=IV, enable_logging=True),
            name,
        )

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        logging.getLogger(name).addHandler(handler)
        try:
            info_log.payload("Request decrypted", "info-plaintext")
            debug_log.payload("Request decrypted", "debug-plaintext")
        finally:
            logging.getLogger(name).removeHandler(handler)

        assert not logging.getLogger(name).isEnabledFor(logging.DEBUG)
        assert "debug-plaintext" in stream.getvalue()
        assert "info-plaintext" not in stream.getvalue()

    def test_stage_updates_context(self) -> None:
        clear_log_context()
        log, _ = _stage_logger()
        log.stage("validated_request")
        assert get_log_context().stage == "validated_request"

    def test_writes_to_configured_stream(self) -> None:
        from track_app_python.telemetry import ProtocolLogger

        stream = io.StringIO()
        ProtocolLogger.configure(level=LogLevel.INFO, format="text", stream=stream)
        try:
            config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV, enable_logging=True)
            StageLogger(config, "track_app_python.stream_test").info("Request processed")
        finally:
            ProtocolLogger.configure(level=LogLevel.INFO, format="text")
        assert "Request processed" in stream.getvalue()
