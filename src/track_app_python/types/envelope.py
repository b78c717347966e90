"""
Outer wire bodies.

- ``EncryptedEnvelope``: ``{"data": "<hex ciphertext>"}`` for requests and
  successful responses
- ``ErrorBody``: ``{"error": ..., "timestamp": ...}``, never encrypted
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from track_app_python.errors import FormatError
from track_app_python.utils.formatting import error_timestamp


class EncryptedEnvelope(BaseModel):
    """Outer JSON wrapper carrying hex ciphertext."""

    model_config = ConfigDict(frozen=True)

    data: str = Field(description="Uppercase hex ciphertext")

    def to_dict(self) -> dict[str, str]:
        return {"data": self.data}

    @classmethod
    def parse(cls, raw: str | bytes) -> EncryptedEnvelope:
        """Parse an outer envelope.

        Raises:
            FormatError: Body is not a JSON object or ``data`` is missing/empty
        """
        try:
            body: Any = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise FormatError("Envelope is not valid JSON", cause=e) from e

        if not isinstance(body, dict):
            raise FormatError("Envelope must be a JSON object")
        data = body.get("data")
        if not isinstance(data, str) or not data:
            raise FormatError("Envelope does not contain encrypted data")
        return cls(data=data)


class ErrorBody(BaseModel):
    """Unencrypted error body returned with 4xx/5xx statuses."""

    model_config = ConfigDict(frozen=True)

    error: str
    timestamp: str = Field(default_factory=error_timestamp)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "timestamp": self.timestamp}
