"""
Transport layer - HTTP client for envelope exchange.

Provides httpx-based transport with:
- Timeout management
- Error status classification (retryable vs. structured remote errors)
"""

from track_app_python.transport.http import HttpTransport

__all__ = [
    "HttpTransport",
]
