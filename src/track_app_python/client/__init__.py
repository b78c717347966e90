"""
Client layer - portal-side (initiating) role.

This module provides:
- TrackAppClient: Fetches encrypted application status from departments
- TrackAppClientBuilder: Fluent construction
- CallStats: Per-call statistics
- Cancellation: Request cancellation control
"""

from track_app_python.client.builder import TrackAppClientBuilder
from track_app_python.client.cancel import (
    CancelHandle,
    CancelReason,
    CancelState,
    CancelToken,
    create_cancel_pair,
)
from track_app_python.client.core import TrackAppClient
from track_app_python.client.response import CallStats

__all__ = [
    "CallStats",
    "CancelHandle",
    "CancelReason",
    "CancelState",
    "CancelToken",
    "TrackAppClient",
    "TrackAppClientBuilder",
    "create_cancel_pair",
]
