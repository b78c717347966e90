"""
Client retry policy with linear backoff.

Only :class:`TransportError` is retried: connection failures, timeouts and
error statuses without a parseable body. Structured remote errors, cipher
failures, format errors and validation errors are terminal. The wait
before retry ``n`` is ``retry_delay * n``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from track_app_python.errors import RequestCancelledError, RequestFailedError, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from track_app_python.client.cancel import CancelToken
    from track_app_python.config import ProtocolConfig

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry policy.

    Attributes:
        max_retries: Additional attempts after the first (0 = no retries)
        retry_delay: Base delay in seconds, multiplied by the attempt number
    """

    max_retries: int = 3
    retry_delay: float = 2.0

    @classmethod
    def from_config(cls, config: ProtocolConfig) -> RetryConfig:
        """Create retry config from the protocol configuration."""
        return cls(max_retries=config.max_retries, retry_delay=config.retry_delay)

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that disables retries."""
        return cls(max_retries=0)


@dataclass
class RetryResult:
    """Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        total_delay: Total time spent waiting between attempts, in seconds
        exhausted: True when the last error was retryable but no attempts remained
    """

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    total_delay: float = 0.0
    exhausted: bool = False


class RetryPolicy:
    """Retry policy with linearly increasing delay.

    Example:
        >>> policy = RetryPolicy(RetryConfig(max_retries=3, retry_delay=2.0))
        >>> result = await policy.execute(send_request)
        >>> if result.success:
        ...     print(result.value)
        ... else:
        ...     print(f"Failed after {result.attempts} attempts")
    """

    def __init__(self, config: RetryConfig | None = None) -> None:
        self._config = config or RetryConfig()

    @property
    def config(self) -> RetryConfig:
        return self._config

    def calculate_delay(self, attempt: int) -> float:
        """Delay before the retry that follows failed attempt ``attempt`` (1-based)."""
        return self._config.retry_delay * attempt

    def is_retryable(self, error: Exception) -> bool:
        return isinstance(error, TransportError)

    def should_retry(self, error: Exception, attempt: int) -> bool:
        """Check if an error should trigger a retry.

        Args:
            error: The exception that occurred
            attempt: Number of attempts made so far (1-based)

        Returns:
            True if should retry
        """
        if attempt > self._config.max_retries:
            return False
        return self.is_retryable(error)

    async def _wait(self, delay: float, cancel_token: CancelToken | None) -> None:
        if delay <= 0:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            return
        if cancel_token is None:
            await asyncio.sleep(delay)
            return
        if await cancel_token.wait_with_timeout(delay):
            cancel_token.raise_if_cancelled()

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, Exception, float], None] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> RetryResult:
        """Execute an operation with retry.

        Cancellation (``RequestCancelledError`` or ``asyncio.CancelledError``)
        is never retried and propagates to the caller.

        Args:
            operation: Async operation to execute
            on_retry: Optional callback called before each retry
            cancel_token: Token that aborts the backoff wait

        Returns:
            RetryResult with success status and value/error
        """
        total_delay = 0.0
        attempt = 0

        while True:
            attempt += 1
            try:
                result = await operation()
                return RetryResult(
                    success=True,
                    value=result,
                    attempts=attempt,
                    total_delay=total_delay,
                )
            except RequestCancelledError:
                raise
            except Exception as e:
                if not self.should_retry(e, attempt):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=attempt,
                        total_delay=total_delay,
                        exhausted=self.is_retryable(e),
                    )

                delay = self.calculate_delay(attempt)
                total_delay += delay

                if on_retry:
                    on_retry(attempt, e, delay)

                await self._wait(delay, cancel_token)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
    cancel_token: CancelToken | None = None,
) -> T:
    """Execute an operation with retry, raising on failure.

    Args:
        operation: Async operation to execute
        config: Retry configuration
        on_retry: Optional callback called before each retry
        cancel_token: Token that aborts the backoff wait

    Returns:
        Operation result

    Raises:
        RequestFailedError: Retryable failures persisted past ``max_retries``
        Exception: Any terminal error, unchanged
    """
    policy = RetryPolicy(config)
    result = await policy.execute(operation, on_retry, cancel_token)

    if result.success:
        return result.value
    if result.exhausted:
        raise RequestFailedError(
            f"Request failed after {result.attempts} attempts: {result.error}",
            attempts=result.attempts,
            last_error=result.error,
        )
    raise result.error  # type: ignore[misc]
