"""
Upstream HTTP fetcher with per-attempt timeout and exponential backoff.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, TYPE_CHECKING
from urllib.parse import urlsplit

import httpx

from shared.errors import UpstreamTransientError
from shared.logging import get_logger
from shared.retry import RetryConfig, retry_async

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TIMEOUT_SECONDS = 8.0
DEFAULT_MAX_RETRIES = 1
DEFAULT_BACKOFF_BASE_SECONDS = 0.5


class RetryingFetcher:
    """Performs one logical GET against an upstream provider.

    2xx and 4xx responses are returned as-is; a 4xx is terminal and left to
    the provider to interpret. 5xx, timeouts and transport errors are retried
    until the attempt budget runs out, at which point ``RetryError`` is raised.
    """

    def __init__(
        self,
        user_agent: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.user_agent = user_agent
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.backoff_base_seconds = backoff_base_seconds
        self.metrics = metrics
        self.logger = get_logger("trivsel.upstream_fetcher")
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get the shared HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_seconds,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> httpx.Response:
        attempt_timeout = self.timeout_seconds if timeout is None else timeout
        retries = self.max_retries if max_retries is None else max_retries
        service = urlsplit(url).netloc or url

        async def _attempt() -> httpx.Response:
            client = self._get_client()
            try:
                response = await asyncio.wait_for(
                    client.get(url, params=params, headers=headers, timeout=attempt_timeout),
                    timeout=attempt_timeout,
                )
            except asyncio.TimeoutError as exc:
                self._record("timeout")
                raise UpstreamTransientError(
                    service,
                    f"No response within {attempt_timeout}s",
                    details={"url": url},
                ) from exc
            except httpx.HTTPError as exc:
                self._record("transport_error")
                raise UpstreamTransientError(
                    service,
                    f"Transport error: {exc.__class__.__name__}",
                    details={"url": url, "error": str(exc)},
                ) from exc

            if response.is_success:
                self._record("ok")
                return response

            if response.is_client_error:
                self._record("client_error")
                self.logger.info("Upstream client error, not retrying", url=url, status_code=response.status_code)
                return response

            self._record("retryable_status")
            raise UpstreamTransientError(
                service,
                f"Request failed with status {response.status_code}",
                details={"url": url, "status_code": response.status_code},
            )

        return await retry_async(
            _attempt,
            (UpstreamTransientError,),
            RetryConfig(
                max_attempts=retries + 1,
                base_delay=self.backoff_base_seconds,
            ),
            name=f"fetch.{service}",
            sleep=self._sleep,
        )

    def _record(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("upstream_requests_total", outcome=outcome)
