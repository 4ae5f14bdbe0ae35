"""Network error classification and caller-side retry with exponential backoff."""

import asyncio
import logging
import random
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from ..exceptions import (
    APIClientError,
    DNSResolutionError,
    HttpStatusError,
    NetworkConnectionError,
    NetworkTimeoutError,
    RedirectLoopError,
    ResponseDecodeError,
    SSLCertificateError,
    TransportError,
)

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry logic with exponential backoff."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    jitter_enabled: bool = True


class NetworkErrorHandler:
    """Handles network error classification and retry logic."""

    def __init__(self):
        self._dns_error_patterns = [
            r"name.*resolution.*failed",
            r"name.*or.*service.*not.*known",
            r"nodename.*nor.*servname.*provided",
            r"temporary.*failure.*in.*name.*resolution",
            r"getaddrinfo.*failed",
        ]
        self._connection_error_patterns = [
            r"connection.*refused",
            r"connection.*reset",
            r"network.*is.*unreachable",
            r"no.*route.*to.*host",
        ]
        self._ssl_error_patterns = [
            r"ssl.*certificate.*verification.*failed",
            r"certificate.*verify.*failed",
            r"ssl.*handshake.*failed",
            r"bad.*certificate",
        ]

    def classify_network_error(self, error: Exception) -> None:
        """Classify an httpx exception and raise the matching ``APIClientError``.

        Args:
            error: The original httpx exception

        Raises:
            TransportError subclass, ResponseDecodeError for
            ``httpx.DecodingError``, or HttpStatusError for
            ``httpx.HTTPStatusError``.
        """
        error_message = str(error).lower()

        if isinstance(error, httpx.ConnectError):
            self._handle_connect_error(error, error_message)
        elif isinstance(error, httpx.TimeoutException):
            self._handle_timeout_error(error, error_message)
        elif isinstance(error, httpx.HTTPStatusError):
            raise HttpStatusError.from_response(error.response) from error
        elif isinstance(error, httpx.NetworkError):
            raise NetworkConnectionError(f"Network error: {error}", error) from error
        elif isinstance(error, httpx.TransportError):
            # Protocol and proxy errors.
            raise TransportError(f"Transport error: {error}", error) from error
        elif isinstance(error, httpx.TooManyRedirects):
            raise RedirectLoopError(f"Too many redirects: {error}", error) from error
        elif isinstance(error, httpx.DecodingError):
            # Content-Encoding did not match the body; nothing readable to keep.
            raise ResponseDecodeError(error, "") from error
        else:
            raise NetworkConnectionError(
                f"Unknown network error: {error}", error
            ) from error

    def _handle_connect_error(
        self, error: httpx.ConnectError, error_message: str
    ) -> None:
        """Handle connection errors with specific classification."""
        if any(
            re.search(pattern, error_message) for pattern in self._dns_error_patterns
        ):
            raise DNSResolutionError(
                f"Cannot resolve server address: {error}", error
            ) from error

        if any(
            re.search(pattern, error_message) for pattern in self._ssl_error_patterns
        ):
            raise SSLCertificateError(
                f"SSL certificate verification failed: {error}", error
            ) from error

        if any(
            re.search(pattern, error_message)
            for pattern in self._connection_error_patterns
        ):
            raise NetworkConnectionError(
                f"Cannot connect to server: {error}", error
            ) from error

        raise NetworkConnectionError(f"Connection failed: {error}", error) from error

    def _handle_timeout_error(self, error: Exception, error_message: str) -> None:
        if isinstance(error, httpx.ConnectTimeout) or "connect" in error_message:
            message = "Connection timed out"
        else:
            message = "Request timed out"
        raise NetworkTimeoutError(f"{message}: {error}", error) from error

    def is_error_retryable(self, error: Exception) -> bool:
        """Determine if an error is retryable.

        Conservative policy: only errors flagged retryable by the client layer
        (timeouts, DNS, dropped connections, 429 and 5xx) are retried.
        """
        if isinstance(error, APIClientError):
            return error.is_retryable
        return False

    async def retry_with_backoff(
        self,
        operation: Callable[[], Awaitable[Any]],
        config: RetryConfig,
        progress_callback: Optional[Callable[[str, int, int], None]] = None,
    ) -> Any:
        """Execute operation with retry logic and exponential backoff.

        Args:
            operation: Async function to execute
            config: Retry configuration
            progress_callback: Optional callback for progress indication

        Returns:
            Result of successful operation

        Raises:
            Original exception if it is not retryable or all retries are exhausted
        """
        last_exception = None

        for attempt in range(config.max_retries + 1):  # +1 for initial attempt
            try:
                return await operation()
            except Exception as e:
                last_exception = e

                if not self.is_error_retryable(e):
                    raise

                if attempt == config.max_retries:
                    logger.warning(
                        f"Giving up after {attempt + 1} attempts: {e}"
                    )
                    raise

                delay = min(
                    config.initial_delay * (config.backoff_multiplier**attempt),
                    config.max_delay,
                )
                if config.jitter_enabled:
                    delay = delay + delay * 0.1 * random.random()  # Up to 10% jitter

                logger.debug(
                    f"Retryable error on attempt {attempt + 1}, "
                    f"sleeping {delay:.2f}s: {e}"
                )
                if progress_callback:
                    progress_callback(
                        "Retrying after transient error...",
                        attempt + 1,
                        config.max_retries,
                    )
                await asyncio.sleep(delay)

        if last_exception:
            raise last_exception
