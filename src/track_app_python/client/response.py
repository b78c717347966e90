"""
Call statistics for client operations.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field


@dataclass
class CallStats:
    """Statistics for a single status fetch.

    Attributes:
        client_request_id: Client-generated request ID for tracking
        latency_ms: Total latency in milliseconds, retries and backoff included
        attempts: Number of HTTP attempts made
        endpoint: API endpoint used
        app_id: Application ID requested
    """

    client_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    latency_ms: float = 0.0
    attempts: int = 0
    endpoint: str | None = None
    app_id: str | None = None

    # Internal timing
    _start_time: float = field(default_factory=time.monotonic, repr=False)

    def record_start(self) -> None:
        """Record the start time."""
        self._start_time = time.monotonic()

    def record_end(self) -> None:
        """Record the end time and calculate latency."""
        self.latency_ms = (time.monotonic() - self._start_time) * 1000

    @property
    def retry_count(self) -> int:
        """Number of retries performed."""
        return max(self.attempts - 1, 0)
