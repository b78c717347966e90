"""
Protocol layer - envelope pipeline, validation, and legacy handshakes.

This module handles:
- Request and response validation
- The server-side envelope handler and its tagged stage results
- Envelope sealing/opening for the client role
- The pipe-delimited push token and pull payload
"""

from track_app_python.protocol.envelope import EnvelopeCodec
from track_app_python.protocol.handler import EnvelopeHandler, HandlerResponse
from track_app_python.protocol.legacy import (
    PullRequestPayload,
    PullStatusHandler,
    PushRequestToken,
)
from track_app_python.protocol.stages import Failure, Ok, Stage, StageResult
from track_app_python.protocol.validator import (
    ValidationResult,
    desk_sort_key,
    validate_request,
    validate_response,
)

__all__ = [
    # Envelope
    "EnvelopeCodec",
    "EnvelopeHandler",
    "Failure",
    "HandlerResponse",
    "Ok",
    # Legacy handshakes
    "PullRequestPayload",
    "PullStatusHandler",
    "PushRequestToken",
    "Stage",
    "StageResult",
    # Validation
    "ValidationResult",
    "desk_sort_key",
    "validate_request",
    "validate_response",
]
