"""
Core TrackAppClient implementation.

The portal-side (initiating) role: validate locally, seal the request into
an envelope, POST it, open the response envelope.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

from track_app_python.client.builder import TrackAppClientBuilder
from track_app_python.client.response import CallStats
from track_app_python.errors import (
    CipherError,
    FormatError,
    RequestCancelledError,
    RequestFailedError,
    ValidationError,
)
from track_app_python.protocol.envelope import EnvelopeCodec
from track_app_python.protocol.validator import validate_request, validate_response
from track_app_python.resilience.retry import RetryConfig, RetryPolicy
from track_app_python.telemetry.logger import LogContext, StageLogger, set_log_context
from track_app_python.types.request import Language, StatusRequest
from track_app_python.types.response import normalize_response
from track_app_python.types.serialization import deserialize_response

if TYPE_CHECKING:
    from collections.abc import Awaitable

    import httpx

    from track_app_python.client.cancel import CancelToken
    from track_app_python.config import ProtocolConfig
    from track_app_python.transport import HttpTransport
    from track_app_python.types.response import StatusResponse


class TrackAppClient:
    """Client for department status endpoints.

    Only transport failures are retried (``retry_delay * attempt`` between
    attempts). Local validation errors, cipher errors, malformed responses
    and structured remote errors are raised on the first occurrence.

    Example:
        >>> config = ProtocolConfig.from_env()
        >>> async with TrackAppClient.create(config, base_url="https://dept.example.gov.in") as client:
        ...     status = await client.get_application_status("INC12345678", "4111")
        ...     print(status.applicant_name, status.progress_percentage)

        >>> # With builder
        >>> client = (
        ...     TrackAppClient.builder()
        ...     .config(config)
        ...     .base_url("https://dept.example.gov.in")
        ...     .max_retries(5)
        ...     .build()
        ... )
    """

    def __init__(
        self,
        config: ProtocolConfig,
        transport: HttpTransport,
        *,
        envelope: EnvelopeCodec | None = None,
    ) -> None:
        """Initialize the client (internal use).

        Use TrackAppClient.create() or TrackAppClientBuilder for public construction.
        """
        self._config = config
        self._transport = transport
        self._envelope = envelope or EnvelopeCodec.from_config(config)
        self._log = StageLogger(config, "track_app_python.client")

    @classmethod
    def create(
        cls,
        config: ProtocolConfig,
        *,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> TrackAppClient:
        """Create a client from configuration.

        Args:
            config: Protocol configuration
            base_url: Department base URL (defaults to ``config.api_base_url``)
            http_client: Preconfigured httpx client

        Returns:
            Configured TrackAppClient instance
        """
        builder = cls.builder().config(config)
        if base_url is not None:
            builder.base_url(base_url)
        if http_client is not None:
            builder.http_client(http_client)
        return builder.build()

    @classmethod
    def builder(cls) -> TrackAppClientBuilder:
        """Get a builder for advanced configuration."""
        return TrackAppClientBuilder()

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.api_endpoint

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    async def get_application_status(
        self,
        app_id: str,
        service_id: str,
        language: Language | str = Language.ENGLISH,
        *,
        dept_name: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> StatusResponse:
        """Fetch the status of one application.

        Args:
            app_id: Application ID
            service_id: Department service code
            language: Response language
            dept_name: Department name (defaults to ``config.department_name``)
            cancel_token: Token that aborts the request

        Returns:
            Normalized StatusResponse
        """
        request = StatusRequest.create(
            app_id=app_id,
            service_id=service_id,
            dept_name=dept_name or self._config.department_name or "",
            language=language,
        )
        return await self.fetch_status(request, cancel_token=cancel_token)

    async def fetch_status(
        self,
        request: StatusRequest,
        *,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> StatusResponse:
        """Send a status request and return the decrypted response.

        Args:
            request: Status request
            timeout: Per-attempt timeout in seconds (default ``config.timeout``)
            max_retries: Retries after the first attempt (default ``config.max_retries``)
            retry_delay: Base backoff in seconds (default ``config.retry_delay``)
            cancel_token: Token that aborts the request

        Returns:
            Normalized StatusResponse

        Raises:
            ValidationError: Request failed local validation (nothing sent)
            RemoteError: Department answered with a structured error
            CipherError: Request or response could not be encrypted/decrypted
            FormatError: Response body is not a valid envelope
            RequestCancelledError: ``cancel_token`` was cancelled
            RequestFailedError: Transport failures persisted past ``max_retries``
        """
        response, _ = await self.fetch_status_with_stats(
            request,
            timeout=timeout,
            max_retries=max_retries,
            retry_delay=retry_delay,
            cancel_token=cancel_token,
        )
        return response

    async def fetch_status_with_stats(
        self,
        request: StatusRequest,
        *,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> tuple[StatusResponse, CallStats]:
        """Like :meth:`fetch_status`, also returning call statistics."""
        stats = CallStats(endpoint=self.endpoint, app_id=request.app_id)
        set_log_context(
            LogContext(request_id=stats.client_request_id, role="client", app_id=request.app_id)
        )

        validation = validate_request(request)
        if not validation.valid:
            self._log.failure(f"Request validation failed: {validation.joined()}")
            raise ValidationError(
                f"Request validation failed: {validation.joined()}",
                validation.errors,
            )

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        body = self._envelope.seal(request)
        attempt_timeout = timeout if timeout is not None else self._config.timeout
        policy = RetryPolicy(
            RetryConfig(
                max_retries=self._config.max_retries if max_retries is None else max_retries,
                retry_delay=self._config.retry_delay if retry_delay is None else retry_delay,
            )
        )

        async def do_request() -> StatusResponse:
            self._log.info(f"Sending status request to {self.base_url}{self.endpoint}")
            http_response = await self._until_cancelled(
                self._transport.post(self.endpoint, body, timeout=attempt_timeout),
                cancel_token,
            )
            return self._open_response(http_response, request)

        def on_retry(attempt: int, error: Exception, delay: float) -> None:
            self._log.info(f"Attempt {attempt} failed: {error}. Retrying in {delay:g}s")

        stats.record_start()
        try:
            result = await policy.execute(do_request, on_retry, cancel_token)
        finally:
            stats.record_end()
        stats.attempts = result.attempts

        if result.success:
            return result.value, stats

        self._log.failure(f"Status request failed after {result.attempts} attempts: {result.error}")
        if result.exhausted:
            raise RequestFailedError(
                f"Request failed after {result.attempts} attempts: {result.error}",
                attempts=result.attempts,
                last_error=result.error,
            )
        raise result.error  # type: ignore[misc]

    async def _until_cancelled(
        self,
        operation: Awaitable[Any],
        cancel_token: CancelToken | None,
    ) -> Any:
        """Await ``operation``, aborting it if ``cancel_token`` fires first."""
        if cancel_token is None:
            return await operation

        send = asyncio.ensure_future(operation)
        cancelled = asyncio.ensure_future(cancel_token.wait())
        try:
            done, _ = await asyncio.wait({send, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (send, cancelled):
                if not task.done():
                    task.cancel()

        if send in done:
            return send.result()
        reason = cancel_token.reason.value if cancel_token.reason else None
        raise RequestCancelledError(reason=reason)

    def _open_response(self, http_response: httpx.Response, request: StatusRequest) -> StatusResponse:
        try:
            response = self._decode_response(http_response)
        except (FormatError, CipherError) as e:
            e.context.details.setdefault("status_code", http_response.status_code)
            e.context.details.setdefault("raw_body", http_response.text)
            raise

        validation = validate_response(response, request)
        for problem in (*validation.errors, *validation.warnings):
            self._log.info(f"Response check: {problem}")
        return response

    def _decode_response(self, http_response: httpx.Response) -> StatusResponse:
        try:
            body = http_response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise FormatError("Response is not valid JSON", cause=e) from e
        if not isinstance(body, dict):
            raise FormatError("Response must be a JSON object")

        plaintext = self._envelope.open(body)
        self._log.payload("Response decrypted", plaintext)
        return normalize_response(deserialize_response(plaintext))

    async def close(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> TrackAppClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self, exc_type: Any, exc_val: Any, exc_tb: Any
    ) -> None:
        """Async context manager exit."""
        await self.close()
