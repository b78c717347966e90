"""
Builder for fluent client construction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from track_app_python.errors import ConfigurationError
from track_app_python.transport import HttpTransport

if TYPE_CHECKING:
    import httpx

    from track_app_python.client.core import TrackAppClient
    from track_app_python.config import ProtocolConfig


class TrackAppClientBuilder:
    """Builder for creating TrackAppClient instances with custom configuration.

    Values set on the builder override the matching configuration options
    for this client only; the shared configuration object is not modified.

    Example:
        >>> client = (
        ...     TrackAppClientBuilder()
        ...     .config(config)
        ...     .base_url("https://dept.example.gov.in")
        ...     .timeout(10)
        ...     .max_retries(5)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        """Initialize the builder."""
        self._config: ProtocolConfig | None = None
        self._base_url: str | None = None
        self._overrides: dict[str, Any] = {}
        self._headers: dict[str, str] = {}
        self._http_client: httpx.AsyncClient | None = None

    def config(self, config: ProtocolConfig) -> TrackAppClientBuilder:
        """Set the protocol configuration.

        Args:
            config: Shared protocol configuration

        Returns:
            Self for chaining
        """
        self._config = config
        return self

    def base_url(self, url: str) -> TrackAppClientBuilder:
        """Set the department base URL.

        Args:
            url: Base URL for API requests

        Returns:
            Self for chaining
        """
        self._base_url = url
        return self

    def endpoint(self, path: str) -> TrackAppClientBuilder:
        """Override the API endpoint path."""
        self._overrides["api_endpoint"] = path if path.startswith("/") else f"/{path}"
        return self

    def timeout(self, seconds: float) -> TrackAppClientBuilder:
        """Set request timeout.

        Args:
            seconds: Timeout in seconds

        Returns:
            Self for chaining
        """
        if seconds <= 0:
            raise ConfigurationError("Timeout must be positive", option="timeout")
        self._overrides["timeout"] = seconds
        return self

    def max_retries(self, n: int) -> TrackAppClientBuilder:
        """Set retries after the first attempt."""
        if n < 0:
            raise ConfigurationError("MaxRetries must not be negative", option="max_retries")
        self._overrides["max_retries"] = n
        return self

    def retry_delay(self, seconds: float) -> TrackAppClientBuilder:
        """Set the base backoff delay in seconds."""
        if seconds < 0:
            raise ConfigurationError("RetryDelay must not be negative", option="retry_delay")
        self._overrides["retry_delay"] = seconds
        return self

    def department_name(self, name: str) -> TrackAppClientBuilder:
        """Set the default DeptName for convenience lookups."""
        self._overrides["department_name"] = name
        return self

    def header(self, name: str, value: str) -> TrackAppClientBuilder:
        """Add a header sent with every request."""
        self._headers[name] = value
        return self

    def http_client(self, client: httpx.AsyncClient) -> TrackAppClientBuilder:
        """Use a preconfigured httpx client (the caller keeps ownership)."""
        self._http_client = client
        return self

    def build(self) -> TrackAppClient:
        """Build the TrackAppClient instance.

        Returns:
            Configured TrackAppClient

        Raises:
            ConfigurationError: No configuration or no base URL
        """
        from track_app_python.client.core import TrackAppClient

        if self._config is None:
            raise ConfigurationError("Protocol configuration is required. Use .config()")

        config = self._config
        if self._overrides:
            config = config.model_copy(update=self._overrides)

        base_url = self._base_url or config.api_base_url
        if not base_url:
            raise ConfigurationError(
                "Base URL is required. Use .base_url() or set ApiBaseUrl",
                option="api_base_url",
            )

        transport = HttpTransport(
            base_url,
            timeout=config.timeout,
            headers=self._headers,
            client=self._http_client,
        )
        return TrackAppClient(config, transport)
