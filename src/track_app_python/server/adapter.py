"""
Server role adapter.

Bridges a hosting web framework to the envelope handler: raw request body
in, status code plus JSON text out. Routing, TLS and the framework itself
belong to the host application.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from track_app_python.protocol.handler import EnvelopeHandler

if TYPE_CHECKING:
    from track_app_python.config import ProtocolConfig
    from track_app_python.protocol.handler import HandlerResponse
    from track_app_python.server.provider import DepartmentDataProvider

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class ServerReply:
    """Transport-ready reply.

    Attributes:
        status_code: HTTP status
        body: JSON text (UTF-8)
        headers: Response headers
    """

    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=lambda: {"Content-Type": JSON_CONTENT_TYPE})

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8")

    @classmethod
    def from_handler_response(cls, response: HandlerResponse) -> ServerReply:
        return cls(status_code=response.status_code, body=response.to_json())


class ServerAdapter:
    """Department-side entry point for status requests.

    Example (any async framework)::

        adapter = ServerAdapter(config, MyDepartmentProvider())

        async def sendappstatus_encrypted(request):
            reply = await adapter.handle(await request.body())
            return Response(reply.body, status_code=reply.status_code, headers=reply.headers)
    """

    def __init__(
        self,
        config: ProtocolConfig,
        provider: DepartmentDataProvider,
        *,
        handler: EnvelopeHandler | None = None,
    ) -> None:
        self._handler = handler or EnvelopeHandler(config, provider)

    @property
    def handler(self) -> EnvelopeHandler:
        return self._handler

    @property
    def endpoint(self) -> str:
        """Path the host should route to this adapter."""
        return self._handler.config.api_endpoint

    async def handle(self, raw_body: str | bytes) -> ServerReply:
        """Process one request body.

        Args:
            raw_body: Raw HTTP request body

        Returns:
            ServerReply with status, JSON body and headers
        """
        response = await self._handler.process(raw_body)
        return ServerReply.from_handler_response(response)
