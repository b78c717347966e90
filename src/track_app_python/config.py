"""Protocol configuration.

A single immutable configuration object is built once at process start and
passed to every component. Nothing in the library keeps credentials in
module or class globals.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from track_app_python.errors import ConfigurationError
from track_app_python.telemetry.logger import LogLevel

DEFAULT_API_ENDPOINT = "/api/SampleAPI/sendappstatus_encrypted"
DEFAULT_ENV_PREFIX = "TRACK_APP_"

# Environment suffix -> field name
_ENV_FIELDS: dict[str, str] = {
    "ENCRYPTION_KEY": "encryption_key",
    "ENCRYPTION_IV": "encryption_iv",
    "CHECKSUM_KEY": "checksum_key",
    "ENABLE_LOGGING": "enable_logging",
    "LOG_LEVEL": "log_level",
    "TIMEOUT": "timeout",
    "MAX_RETRIES": "max_retries",
    "RETRY_DELAY": "retry_delay",
    "API_ENDPOINT": "api_endpoint",
    "API_BASE_URL": "api_base_url",
    "DEPARTMENT_NAME": "department_name",
    "PUSH_CHECKSUM_MODE": "push_checksum_mode",
}


class PushChecksumMode(str, Enum):
    """What occupies the checksum slot when re-deriving a push token checksum."""

    SHARED_KEY = "shared_key"
    """The shared checksum key itself."""

    FIELD_NAME = "field_name"
    """The literal text ``Checksum``."""


class ProtocolConfig(BaseModel):
    """Read-only configuration shared by client and server roles.

    Field aliases match the option names used by the deployed counterparts
    (``EncryptionKey``, ``EncryptionIV``, ...); snake_case names are
    accepted as well.

    Example:
        >>> config = ProtocolConfig(
        ...     encryption_key="ABCDEFGHIJKLMNOPQRSTUVWX",
        ...     encryption_iv="12345678",
        ...     checksum_key="shared-secret",
        ... )
        >>> config.key_bytes
        b'ABCDEFGHIJKLMNOPQRSTUVWX'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    encryption_key: str = Field(alias="EncryptionKey", repr=False)
    encryption_iv: str = Field(alias="EncryptionIV", repr=False)
    checksum_key: str = Field(default="", alias="ChecksumKey", repr=False)
    enable_logging: bool = Field(default=False, alias="EnableLogging")
    log_level: LogLevel = Field(default=LogLevel.INFO, alias="LogLevel")
    timeout: float = Field(default=30.0, gt=0, alias="Timeout", description="Seconds")
    max_retries: int = Field(default=3, ge=0, alias="MaxRetries")
    retry_delay: float = Field(default=2.0, ge=0, alias="RetryDelay", description="Seconds")
    api_endpoint: str = Field(default=DEFAULT_API_ENDPOINT, alias="ApiEndpoint")
    api_base_url: str | None = Field(default=None, alias="ApiBaseUrl")
    department_name: str | None = Field(default=None, alias="DepartmentName")
    push_checksum_mode: PushChecksumMode = Field(
        default=PushChecksumMode.SHARED_KEY, alias="PushChecksumMode"
    )

    @field_validator("encryption_key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        if len(value.encode("utf-8")) != 24:
            raise ValueError("EncryptionKey must be exactly 24 bytes (24 ASCII characters)")
        return value

    @field_validator("encryption_iv")
    @classmethod
    def _check_iv(cls, value: str) -> str:
        if len(value.encode("utf-8")) != 8:
            raise ValueError("EncryptionIV must be exactly 8 bytes (8 ASCII characters)")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _coerce_log_level(cls, value: Any) -> Any:
        # Counterparts spell the levels "Info" / "Debug".
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("api_endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        if not value.startswith("/"):
            return f"/{value}"
        return value

    @property
    def key_bytes(self) -> bytes:
        return self.encryption_key.encode("utf-8")

    @property
    def iv_bytes(self) -> bytes:
        return self.encryption_iv.encode("utf-8")

    @property
    def debug_enabled(self) -> bool:
        return self.enable_logging and self.log_level == LogLevel.DEBUG

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> ProtocolConfig:
        """Build a config from a mapping, raising ConfigurationError on bad input."""
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            option = ".".join(str(p) for p in first.get("loc", ())) or None
            raise ConfigurationError(
                f"Invalid protocol configuration: {first.get('msg', e)}",
                option=option,
            ) from e

    @classmethod
    def from_env(
        cls,
        prefix: str = DEFAULT_ENV_PREFIX,
        environ: dict[str, str] | None = None,
    ) -> ProtocolConfig:
        """Build a config from environment variables.

        Args:
            prefix: Variable prefix (e.g. ``TRACK_APP_ENCRYPTION_KEY``)
            environ: Mapping to read instead of ``os.environ``

        Returns:
            ProtocolConfig instance
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for suffix, field_name in _ENV_FIELDS.items():
            value = env.get(f"{prefix}{suffix}")
            if value is not None:
                data[field_name] = value
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | Path) -> ProtocolConfig:
        """Load a config from a YAML or JSON file.

        Args:
            path: Path to the file

        Returns:
            ProtocolConfig instance
        """
        file_path = Path(path)
        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        content = file_path.read_text(encoding="utf-8")
        try:
            if file_path.suffix == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot parse configuration file {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")
        return cls.from_mapping(data)
