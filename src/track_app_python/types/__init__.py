"""
Types layer - wire model of the status protocol.

This module provides the record shapes exchanged between portal and
departments:
- StatusRequest / Language for inquiries
- StatusResponse / DeskDetail / FinalDecision for answers
- EncryptedEnvelope and ErrorBody for the outer bodies
"""

from track_app_python.types.envelope import EncryptedEnvelope, ErrorBody
from track_app_python.types.request import Language, StatusRequest
from track_app_python.types.response import (
    DeskDetail,
    FinalDecision,
    StatusResponse,
    normalize_response,
)
from track_app_python.types.serialization import (
    deserialize,
    deserialize_request,
    deserialize_response,
    serialize,
)

__all__ = [
    "DeskDetail",
    # Envelope types
    "EncryptedEnvelope",
    "ErrorBody",
    "FinalDecision",
    # Request types
    "Language",
    "StatusRequest",
    # Response types
    "StatusResponse",
    "deserialize",
    "deserialize_request",
    "deserialize_response",
    "normalize_response",
    "serialize",
]
