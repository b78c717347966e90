"""HTTP transport using httpx for async requests.

Provides:
- Configurable timeouts (per transport and per call)
- Automatic header management
- Mapping of httpx failures and error statuses to library errors
"""

from __future__ import annotations

import os
from typing import Any

import httpx

from track_app_python.errors import RemoteError, TransportError

# Default timeouts
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0


_UA_VERSION: str | None = None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("TRACK_APP_HTTP_TRUST_ENV", "0") == "1"


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        from importlib.metadata import PackageNotFoundError, version

        try:
            _UA_VERSION = version("track-app-python")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


class HttpTransport:
    """HTTP transport for envelope exchange.

    Error statuses are split in two:

    - a parseable ``{"error", "timestamp"}`` JSON body becomes
      :class:`RemoteError` (terminal for the client)
    - anything else, such as an HTML page from a proxy, becomes
      :class:`TransportError` (retryable), as do connection failures and
      timeouts

    Example:
        >>> transport = HttpTransport("https://dept.example.gov.in", timeout=30.0)
        >>> response = await transport.post("/api/SampleAPI/sendappstatus_encrypted", {"data": "..."})
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            base_url: Counterpart base URL
            timeout: Default request timeout in seconds
            headers: Extra headers sent with every request
            client: Preconfigured httpx client (not closed by :meth:`close`)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout if timeout is not None else _DEFAULT_TIMEOUT
        self._extra_headers = dict(headers or {})

        # Client instance (lazy initialization)
        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                self._timeout,
                connect=min(self._timeout, _DEFAULT_CONNECT_TIMEOUT),
            )

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                trust_env=_trust_env_enabled(),
            )

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        """Build request headers.

        Args:
            extra_headers: Additional headers to include

        Returns:
            Complete headers dictionary
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"track-app-python/{_get_ua_version()}",
        }
        headers.update(self._extra_headers)

        if extra_headers:
            headers.update(extra_headers)

        return headers

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    async def post(
        self,
        path: str,
        json: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make a POST request.

        Args:
            path: Request path (relative to base URL)
            json: JSON body
            headers: Additional headers
            timeout: Per-call timeout in seconds

        Returns:
            HTTP response with a status below 400

        Raises:
            TransportError: On network/connection errors, timeouts, and
                error statuses without a JSON body
            RemoteError: On error statuses carrying a JSON error body
        """
        client = self._get_client()
        request_headers = self._build_headers(headers)
        extra: dict[str, Any] = {}
        if timeout is not None:
            extra["timeout"] = httpx.Timeout(timeout, connect=min(timeout, _DEFAULT_CONNECT_TIMEOUT))

        try:
            response = await client.post(
                self._url(path),
                json=json,
                headers=request_headers,
                **extra,
            )
        except httpx.ConnectError as e:
            raise TransportError(
                f"Connection failed: {e}",
                url=self._url(path),
                cause=e,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {e}",
                url=self._url(path),
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}",
                url=self._url(path),
                cause=e,
            ) from e

        if response.status_code >= 400:
            body: Any = None
            try:
                body = response.json()
            except ValueError:
                body = None

            if isinstance(body, dict):
                raise RemoteError.from_response(
                    status_code=response.status_code,
                    body=body,
                    raw_body=response.text,
                )
            raise TransportError(
                f"API returned error status {response.status_code} without a JSON body",
                url=self._url(path),
                status_code=response.status_code,
            )

        return response

    async def __aenter__(self) -> HttpTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
