"""
Integration test helpers.

Wires a ServerAdapter behind an in-process httpx transport so the client
and the conformance checker talk to a real handler without sockets.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import httpx
import pytest

from track_app_python.server import ServerAdapter, StaticDataProvider
from track_app_python.types import StatusResponse

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig


class BilingualProvider:
    """Answers in Marathi when asked to, like a real department would."""

    def __init__(self, english: StatusResponse) -> None:
        self._english = StaticDataProvider({english.application_id: english})

    async def get_application_status(
        self, application_id: str, service_id: str, department_name: str, language: str
    ) -> StatusResponse:
        response = await self._english.get_application_status(
            application_id, service_id, department_name, language
        )
        if language == "MR":
            return response.model_copy(
                update={"service_name": "उत्पन्न प्रमाणपत्र", "applicant_name": "रमेश पाटील"}
            )
        return response


def department_transport(
    route: Callable[[httpx.Request], Awaitable[httpx.Response]],
) -> httpx.MockTransport:
    return httpx.MockTransport(route)


def adapter_route(adapter: ServerAdapter) -> Callable[[httpx.Request], Awaitable[httpx.Response]]:
    """Route POSTs on the adapter endpoint to the adapter; everything else gets a 404 page."""

    async def route(request: httpx.Request) -> httpx.Response:
        if request.method != "POST" or request.url.path != adapter.endpoint:
            return httpx.Response(404, text="<html>Not Found</html>")
        reply = await adapter.handle(request.content)
        return httpx.Response(reply.status_code, content=reply.body_bytes, headers=reply.headers)

    return route


@pytest.fixture
def serve_department() -> Callable[[ServerAdapter], httpx.AsyncClient]:
    """Factory for httpx clients served by a given adapter."""

    def serve(adapter: ServerAdapter) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=department_transport(adapter_route(adapter)))

    return serve


@pytest.fixture
def bilingual_provider(status_response: StatusResponse) -> BilingualProvider:
    return BilingualProvider(status_response)


@pytest.fixture
def department_client(
    config: ProtocolConfig,
    bilingual_provider: BilingualProvider,
    serve_department: Callable[[ServerAdapter], httpx.AsyncClient],
) -> httpx.AsyncClient:
    """httpx client whose requests are served by an in-process department."""
    return serve_department(ServerAdapter(config, bilingual_provider))
