"""
Department data provider interface.

Each department supplies one object with a single coroutine method. A
missing application is signalled by raising
:class:`~track_app_python.errors.ApplicationNotFoundError`, never by
returning None.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from track_app_python.errors import ApplicationNotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from track_app_python.types.response import StatusResponse


@runtime_checkable
class DepartmentDataProvider(Protocol):
    """Supplies application records to the envelope handler."""

    async def get_application_status(
        self,
        application_id: str,
        service_id: str,
        department_name: str,
        language: str,
    ) -> StatusResponse:
        """Look up one application.

        Args:
            application_id: AppID from the request
            service_id: ServiceID from the request
            department_name: DeptName from the request
            language: ``EN`` or ``MR``

        Returns:
            StatusResponse for the application

        Raises:
            ApplicationNotFoundError: No matching application
        """
        ...


class StaticDataProvider:
    """Provider backed by a fixed mapping of application ID to response.

    Handy for sandboxes and conformance runs.

    Example:
        >>> provider = StaticDataProvider({"INC12345678": response})
        >>> handler = EnvelopeHandler(config, provider)
    """

    def __init__(self, records: Mapping[str, StatusResponse]) -> None:
        self._records = dict(records)

    async def get_application_status(
        self,
        application_id: str,
        service_id: str,
        department_name: str,
        language: str,
    ) -> StatusResponse:
        try:
            return self._records[application_id]
        except KeyError:
            raise ApplicationNotFoundError(application_id=application_id) from None
