"""
Resilience layer - client retry policy.

- RetryPolicy: linear backoff (``retry_delay * attempt``), transport
  errors only
"""

from track_app_python.resilience.retry import (
    RetryConfig,
    RetryPolicy,
    RetryResult,
    with_retry,
)

__all__ = [
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
    "with_retry",
]
