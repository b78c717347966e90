"""Tests for protocol configuration."""

import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from track_app_python.config import DEFAULT_API_ENDPOINT, ProtocolConfig, PushChecksumMode
from track_app_python.errors import ConfigurationError
from track_app_python.telemetry import LogLevel

KEY = "ABCDEFGHIJKLMNOPQRSTUVWX"
IV = "12345678"


class TestProtocolConfig:
    """Tests for ProtocolConfig."""

    def test_defaults(self) -> None:
        config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV)
        assert config.timeout == 30.0
        assert config.max_retries == 3
        assert config.retry_delay == 2.0
        assert config.api_endpoint == DEFAULT_API_ENDPOINT
        assert not config.enable_logging
        assert config.log_level == LogLevel.INFO
        assert config.push_checksum_mode == PushChecksumMode.SHARED_KEY

    def test_aliases(self) -> None:
        config = ProtocolConfig.from_mapping(
            {
                "EncryptionKey": KEY,
                "EncryptionIV": IV,
                "ChecksumKey": "shared-secret",
                "EnableLogging": True,
                "LogLevel": "Debug",
                "ApiEndpoint": "api/status",
            }
        )
        assert config.checksum_key == "shared-secret"
        assert config.log_level == LogLevel.DEBUG
        assert config.debug_enabled
        assert config.api_endpoint == "/api/status"

    def test_key_bytes(self) -> None:
        config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV)
        assert config.key_bytes == KEY.encode()
        assert config.iv_bytes == IV.encode()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"encryption_key": "short"},
            {"encryption_iv": "1234567"},
            {"timeout": 0},
            {"max_retries": -1},
            {"unknown_option": 1},
        ],
    )
    def test_invalid_values(self, overrides) -> None:
        data = {"encryption_key": KEY, "encryption_iv": IV, **overrides}
        with pytest.raises(ConfigurationError):
            ProtocolConfig.from_mapping(data)

    def test_missing_key(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ProtocolConfig.from_mapping({"encryption_iv": IV})
        assert "EncryptionKey" in str(exc_info.value)

    def test_frozen(self) -> None:
        config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV)
        with pytest.raises(PydanticValidationError):
            config.timeout = 5

    def test_repr_hides_secrets(self) -> None:
        config = ProtocolConfig(encryption_key=KEY, encryption_iv=IV, checksum_key="shared-secret")
        text = repr(config)
        assert KEY not in text
        assert "shared-secret" not in text

    def test_from_env(self) -> None:
        config = ProtocolConfig.from_env(
            environ={
                "TRACK_APP_ENCRYPTION_KEY": KEY,
                "TRACK_APP_ENCRYPTION_IV": IV,
                "TRACK_APP_TIMEOUT": "10",
                "TRACK_APP_MAX_RETRIES": "5",
                "TRACK_APP_ENABLE_LOGGING": "true",
                "TRACK_APP_PUSH_CHECKSUM_MODE": "field_name",
                "UNRELATED": "x",
            }
        )
        assert config.timeout == 10.0
        assert config.max_retries == 5
        assert config.enable_logging
        assert config.push_checksum_mode == PushChecksumMode.FIELD_NAME

    def test_from_env_custom_prefix(self) -> None:
        config = ProtocolConfig.from_env(
            prefix="DEPT_", environ={"DEPT_ENCRYPTION_KEY": KEY, "DEPT_ENCRYPTION_IV": IV}
        )
        assert config.encryption_key == KEY

    def test_from_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "track_app.yaml"
        path.write_text(
            f"EncryptionKey: {KEY}\nEncryptionIV: '{IV}'\nMaxRetries: 1\nDepartmentName: Revenue Department\n",
            encoding="utf-8",
        )
        config = ProtocolConfig.from_file(path)
        assert config.max_retries == 1
        assert config.department_name == "Revenue Department"

    def test_from_json_file(self, tmp_path) -> None:
        path = tmp_path / "track_app.json"
        path.write_text(json.dumps({"EncryptionKey": KEY, "EncryptionIV": IV}), encoding="utf-8")
        assert ProtocolConfig.from_file(path).encryption_iv == IV

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            ProtocolConfig.from_file(tmp_path / "missing.yaml")

    def test_file_must_be_mapping(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            ProtocolConfig.from_file(path)
