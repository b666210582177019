"""
Common behaviour for provider adapters.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, TYPE_CHECKING

from shared.errors import ParseError, UpstreamClientError, UpstreamError
from shared.logging import get_logger
from shared.retry import RetryError

from ..caching import TTLCache, make_cache_key
from ..domain.results import ProviderResult, RealResult, result_source, utc_timestamp

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..adapters import RetryingFetcher


class ProviderAdapter(ABC):
    """One data kind (climate, pollution, ...) resolved for a coordinate.

    ``fetch`` never raises for upstream trouble: failures are converted to
    the adapter's ``fallback`` result.
    """

    kind: str = ""
    # Key used for this provider in summary and grid responses
    layer: str = ""

    def __init__(self, *, metrics: Optional["MetricsCollector"] = None):
        self.metrics = metrics
        self.logger = get_logger(f"trivsel.providers.{self.kind}")

    @abstractmethod
    async def fetch(self, lat: float, lon: float) -> ProviderResult:
        """Resolve this provider's data for one coordinate."""

    @abstractmethod
    def fallback(self, lat: float, lon: float, reason: str = "") -> ProviderResult:
        """Result served when the real data cannot be obtained."""

    def _record(self, result: ProviderResult) -> None:
        if self.metrics:
            self.metrics.increment_counter(
                "provider_results_total",
                provider=self.kind,
                source=result_source(result) or "unavailable",
            )


class CachedUpstreamAdapter(ProviderAdapter):
    """Adapter backed by an HTTP upstream and the shared TTL cache.

    Only real upstream results are cached. Fallbacks are recomputed on every
    call so a recovering upstream is picked up on the next request.
    """

    ttl_seconds: float = 0
    precision: int = 3
    source: str = ""

    def __init__(
        self,
        cache: TTLCache,
        fetcher: "RetryingFetcher",
        base_url: str,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        super().__init__(metrics=metrics)
        self.cache = cache
        self.fetcher = fetcher
        self.base_url = base_url

    async def fetch(self, lat: float, lon: float) -> ProviderResult:
        cache_key = make_cache_key(self.kind, lat, lon, self.precision)

        cached = self.cache.get(cache_key)
        if cached is not None:
            self._record(cached)
            return cached

        try:
            result: ProviderResult = await self._fetch_upstream(lat, lon)
        except (UpstreamError, RetryError) as exc:
            self.logger.warning(
                "Upstream fetch failed, using fallback",
                cache_key=cache_key,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            result = self.fallback(lat, lon, reason=str(exc))
        else:
            self.cache.set(cache_key, result, self.ttl_seconds)

        self._record(result)
        return result

    async def _fetch_upstream(self, lat: float, lon: float) -> RealResult:
        url, params = self.build_request(lat, lon)
        self.logger.info("Fetching upstream data", url=url, params=params)

        response = await self.fetcher.fetch(url, params=params)
        if response.is_client_error:
            raise UpstreamClientError(self.kind, response.status_code, details={"url": url})

        try:
            data = self.parse(response.json())
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            raise ParseError(self.kind, f"{exc.__class__.__name__}: {exc}", details={"url": url}) from exc

        return RealResult(data=data, timestamp=utc_timestamp(), source=self.source)

    def rounded(self, lat: float, lon: float) -> Tuple[str, str]:
        return f"{lat:.{self.precision}f}", f"{lon:.{self.precision}f}"

    @abstractmethod
    def build_request(self, lat: float, lon: float) -> Tuple[str, Dict[str, str]]:
        """Return the upstream URL and its query parameters."""

    @abstractmethod
    def parse(self, payload: Any) -> Any:
        """Turn the upstream JSON into this provider's data type."""
