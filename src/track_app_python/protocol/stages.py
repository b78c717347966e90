"""
Pipeline stages and tagged stage results.

Each stage of the envelope handler returns either ``Ok(value)`` or
``Failure(kind, message)``. The handler branches on the tag, so no stage
needs exceptions to signal an expected failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

from track_app_python.errors.classification import ErrorKind

T = TypeVar("T")


class Stage(str, Enum):
    """States of the server-side envelope pipeline, in order."""

    RECEIVED_ENVELOPE = "received_envelope"
    DECRYPTED = "decrypted"
    PARSED_REQUEST = "parsed_request"
    VALIDATED_REQUEST = "validated_request"
    DATA_FETCHED = "data_fetched"
    VALIDATED_RESPONSE = "validated_response"
    NORMALIZED = "normalized"
    SERIALIZED = "serialized"
    ENCRYPTED = "encrypted"
    SENT = "sent"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful stage output."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Terminal stage failure.

    Attributes:
        kind: Error kind, which fixes the HTTP status
        message: Client-facing message; defaults to the kind's message
        cause: Underlying exception, kept for logging only
    """

    kind: ErrorKind
    message: str | None = None
    cause: BaseException | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def status_code(self) -> int:
        return self.kind.http_status

    @property
    def error_message(self) -> str:
        return self.message or self.kind.default_message


StageResult = Union[Ok[T], Failure]
