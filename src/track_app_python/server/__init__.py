"""
Server layer - department-side (receiving) role.

This module provides:
- DepartmentDataProvider: The collaborator interface departments implement
- StaticDataProvider: Mapping-backed provider
- ServerAdapter / ServerReply: Bridge to the hosting transport
"""

from track_app_python.server.adapter import ServerAdapter, ServerReply
from track_app_python.server.provider import DepartmentDataProvider, StaticDataProvider

__all__ = [
    "DepartmentDataProvider",
    "ServerAdapter",
    "ServerReply",
    "StaticDataProvider",
]
