"""
JSON serialization of wire models.

Field names are the case-sensitive PascalCase names of the contract.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from track_app_python.errors import DeserializationError
from track_app_python.types.request import StatusRequest
from track_app_python.types.response import StatusResponse

M = TypeVar("M", bound=BaseModel)


def serialize(model: BaseModel) -> str:
    """Serialize a wire model to compact JSON using contract field names.

    Non-ASCII text (Marathi service names, for instance) is emitted as-is.
    """
    return model.model_dump_json(by_alias=True)


def deserialize(text: str | bytes, model_type: type[M]) -> M:
    """Parse JSON text into a wire model.

    Raises:
        DeserializationError: Invalid JSON, a non-object document, or
            values of the wrong type
    """
    try:
        return model_type.model_validate_json(text)
    except PydanticValidationError as e:
        raise DeserializationError(
            f"Cannot parse {model_type.__name__}: {e.errors()[0]['msg'] if e.errors() else e}",
            model=model_type.__name__,
            cause=e,
        ) from e


def deserialize_request(text: str | bytes) -> StatusRequest:
    return deserialize(text, StatusRequest)


def deserialize_response(text: str | bytes) -> StatusResponse:
    return deserialize(text, StatusResponse)
