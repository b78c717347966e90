"""track-app-python: encrypted status protocol between the services portal and departments.

Both sides of the wire contract live here: the portal-side client that
requests application status, and the department-side handler that
answers it. Payloads travel as Triple-DES hex envelopes; legacy
pipe-delimited handshakes are authenticated with a keyed CRC-32 checksum.
"""
from __future__ import annotations

from track_app_python.client import CancelToken, TrackAppClient, TrackAppClientBuilder
from track_app_python.config import ProtocolConfig, PushChecksumMode
from track_app_python.crypto import TripleDesCodec, compute_checksum
from track_app_python.errors import (
    ApplicationNotFoundError,
    RemoteError,
    RequestFailedError,
    TrackAppError,
    TransportError,
    ValidationError,
)
from track_app_python.protocol import (
    EnvelopeHandler,
    PullRequestPayload,
    PullStatusHandler,
    PushRequestToken,
    validate_request,
    validate_response,
)
from track_app_python.server import DepartmentDataProvider, ServerAdapter
from track_app_python.types import (
    DeskDetail,
    FinalDecision,
    Language,
    StatusRequest,
    StatusResponse,
    normalize_response,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ApplicationNotFoundError",
    # Client
    "CancelToken",
    # Server
    "DepartmentDataProvider",
    # Types
    "DeskDetail",
    "EnvelopeHandler",
    "FinalDecision",
    "Language",
    # Configuration
    "ProtocolConfig",
    # Legacy handshakes
    "PullRequestPayload",
    "PullStatusHandler",
    "PushChecksumMode",
    "PushRequestToken",
    "RemoteError",
    "RequestFailedError",
    "ServerAdapter",
    "StatusRequest",
    "StatusResponse",
    "TrackAppClient",
    "TrackAppClientBuilder",
    "TrackAppError",
    "TransportError",
    # Crypto
    "TripleDesCodec",
    "ValidationError",
    # Version
    "__version__",
    "compute_checksum",
    "normalize_response",
    "validate_request",
    "validate_response",
]
