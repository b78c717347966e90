"""
Conformance checks for department endpoints.
"""

from track_app_python.conformance.checker import (
    CheckResult,
    CheckStatus,
    ConformanceChecker,
    ConformanceReport,
)

__all__ = [
    "CheckResult",
    "CheckStatus",
    "ConformanceChecker",
    "ConformanceReport",
]
