"""Tests for the HTTP transport."""

import httpx
import pytest

from track_app_python.errors import RemoteError, TransportError
from track_app_python.transport import HttpTransport

BASE_URL = "https://dept.example.gov.in"
PATH = "/api/SampleAPI/sendappstatus_encrypted"


class TestHttpTransport:
    """Tests for HttpTransport."""

    def test_defaults(self) -> None:
        transport = HttpTransport(f"{BASE_URL}/")
        assert transport.base_url == BASE_URL
        assert transport.timeout == 30.0

    @pytest.mark.asyncio
    async def test_post_json(self, httpx_mock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}{PATH}", method="POST", json={"data": "AB"})

        async with HttpTransport(BASE_URL, headers={"X-Dept": "revenue"}) as transport:
            response = await transport.post(PATH, {"data": "CD"})

        assert response.json() == {"data": "AB"}
        request = httpx_mock.get_request()
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("track-app-python/")
        assert request.headers["X-Dept"] == "revenue"

    @pytest.mark.asyncio
    async def test_error_with_json_body(self, httpx_mock) -> None:
        httpx_mock.add_response(
            url=f"{BASE_URL}{PATH}",
            status_code=400,
            json={"error": "Validation failed: AppID is required", "timestamp": "2025-09-18T17:30:00"},
        )

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(RemoteError) as exc_info:
                await transport.post(PATH, {"data": "CD"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_message == "Validation failed: AppID is required"

    @pytest.mark.asyncio
    async def test_error_without_json_body(self, httpx_mock) -> None:
        httpx_mock.add_response(url=f"{BASE_URL}{PATH}", status_code=503, text="Service Unavailable")

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.post(PATH, {"data": "CD"})

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_connect_error(self, httpx_mock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(TransportError, match="Connection failed"):
                await transport.post(PATH, {"data": "CD"})

    @pytest.mark.asyncio
    async def test_timeout(self, httpx_mock) -> None:
        httpx_mock.add_exception(httpx.ReadTimeout("Read timed out"))

        async with HttpTransport(BASE_URL) as transport:
            with pytest.raises(TransportError, match="timed out"):
                await transport.post(PATH, {"data": "CD"}, timeout=1.0)

    @pytest.mark.asyncio
    async def test_does_not_close_supplied_client(self) -> None:
        client = httpx.AsyncClient()
        transport = HttpTransport(BASE_URL, client=client)
        await transport.close()
        assert not client.is_closed
        await client.aclose()
