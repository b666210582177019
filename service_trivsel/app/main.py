"""
Trivsel environmental data gateway.
"""

import time
from typing import Any, Callable, Dict, Optional

import httpx
from fastapi import Depends, Query, Request
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import RateLimitError
from shared.logging import set_client_context

from .adapters import RetryingFetcher
from .aggregation import DEFAULT_POINTS, GridAggregator, SummaryAggregator
from .caching import TTLCache
from .domain import GeoValidator, to_payload
from .providers import ClimateProvider, ElevationProvider, EnergyProvider, PollutionProvider, ProviderAdapter
from .ratelimit import FixedWindowRateLimiter, get_client_id


SOURCES_CATALOG = [
    {
        "name": "MET Norway",
        "type": "Climate",
        "description": "Temperature, Wind, Precipitation from Locationforecast 2.0",
        "attribution": "Data from MET Norway, licensed under CC BY 4.0",
    },
    {
        "name": "Kartverket / GeoNorge",
        "type": "Elevation",
        "description": "Elevation data for coordinates",
        "attribution": "© Kartverket via GeoNorge",
    },
    {
        "name": "MET AirQuality",
        "type": "Pollution",
        "description": "Air quality forecast",
        "attribution": "Data from MET Norway",
    },
    {
        "name": "Mock Energy Provider",
        "type": "Energy",
        "description": "Simulated energy grid context for MVP",
    },
]


class TrivselGatewayService(BaseService):
    """Aggregation gateway for the Kristiansand service area.

    Owns the process-wide state (TTL cache, rate limit windows, upstream
    HTTP client) and hands it to the components that use it.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__("trivsel", 3000, config)

        self.geo = GeoValidator()
        self.cache = TTLCache(clock, metrics=self.metrics)
        self.global_rate_limiter = FixedWindowRateLimiter(
            self.config.global_rate_limit,
            self.config.global_rate_window_seconds,
            name="global",
            clock=clock,
            metrics=self.metrics,
        )
        self.grid_rate_limiter = FixedWindowRateLimiter(
            self.config.grid_rate_limit,
            self.config.grid_rate_window_seconds,
            name="grid",
            clock=clock,
            metrics=self.metrics,
        )

        self.fetcher = RetryingFetcher(
            self.config.met_user_agent,
            timeout_seconds=self.config.upstream_timeout_seconds,
            max_retries=self.config.upstream_max_retries,
            backoff_base_seconds=self.config.upstream_backoff_base_seconds,
            transport=transport,
            metrics=self.metrics,
        )

        self.climate = ClimateProvider(self.cache, self.fetcher, self.config.climate_api_url, metrics=self.metrics)
        self.pollution = PollutionProvider(self.cache, self.fetcher, self.config.pollution_api_url, metrics=self.metrics)
        self.elevation = ElevationProvider(self.cache, self.fetcher, self.config.elevation_api_url, metrics=self.metrics)
        self.energy = EnergyProvider(metrics=self.metrics)

        self.summary = SummaryAggregator([self.climate, self.pollution, self.elevation, self.energy])
        self.grid = GridAggregator(self.summary, metrics=self.metrics)

        self._setup_rate_limit_middleware()
        self._setup_gateway_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    async def _on_shutdown(self) -> None:
        await self.fetcher.close()

    def _setup_rate_limit_middleware(self):
        """Global per-client budget, applied before any route runs."""

        @self.app.middleware("http")
        async def enforce_global_rate_limit(request: Request, call_next):
            client_id = get_client_id(request)
            set_client_context(client_id)
            limiter = self.global_rate_limiter

            if not limiter.check(client_id):
                return JSONResponse(
                    status_code=429,
                    content=RateLimitError("Too Many Requests").to_response().model_dump(),
                    headers={"X-RateLimit-Limit": str(limiter.default_limit), "X-RateLimit-Remaining": "0"},
                )

            response = await call_next(request)
            response.headers["X-RateLimit-Limit"] = str(limiter.default_limit)
            response.headers["X-RateLimit-Remaining"] = str(limiter.remaining(client_id))
            return response

    def _enforce_grid_rate_limit(self, request: Request) -> None:
        """Separate, stricter budget for the grid endpoint."""
        client_id = get_client_id(request)
        if not self.grid_rate_limiter.check(client_id):
            limit = self.grid_rate_limiter.default_limit
            minutes = self.grid_rate_limiter.default_window_seconds / 60
            raise RateLimitError(
                f"Grid rate limit exceeded ({limit} req / {minutes:g} min)",
                details={"limiter": "grid"},
            )

    def _invalid_params_message(self, path: str) -> str:
        if path.startswith("/v1/grid"):
            return "Invalid parameters"
        return "Invalid coordinates"

    async def _provider_response(self, provider: ProviderAdapter, lat: float, lon: float, label: str):
        coord = self.geo.validate(lat, lon)
        result = await provider.fetch(coord.lat, coord.lon)
        payload = to_payload(result)
        if payload is None:
            return JSONResponse(
                status_code=503,
                content={"error": f"{label} data unavailable", "availability": False},
            )
        return payload

    def _setup_gateway_routes(self):
        """Set up data routes."""

        @self.app.get("/sources")
        async def get_sources() -> Dict[str, Any]:
            """Upstream providers and their attributions."""
            return {"sources": SOURCES_CATALOG}

        @self.app.get("/v1/klima")
        async def get_climate(lat: float = Query(...), lon: float = Query(...)):
            """Current weather; 503 when MET cannot be reached."""
            return await self._provider_response(self.climate, lat, lon, "Climate")

        @self.app.get("/v1/forurensing")
        async def get_pollution(lat: float = Query(...), lon: float = Query(...)):
            """Air quality; falls back to mock data, never 503."""
            return await self._provider_response(self.pollution, lat, lon, "Pollution")

        @self.app.get("/v1/hoyde")
        async def get_elevation(lat: float = Query(...), lon: float = Query(...)):
            """Terrain elevation; falls back to mock data, never 503."""
            return await self._provider_response(self.elevation, lat, lon, "Elevation")

        @self.app.get("/v1/energi")
        async def get_energy(lat: float = Query(...), lon: float = Query(...)):
            """Mocked energy context."""
            return await self._provider_response(self.energy, lat, lon, "Energy")

        @self.app.get("/v1/sammendrag")
        async def get_summary(lat: float = Query(...), lon: float = Query(...)):
            """All providers for one coordinate."""
            coord = self.geo.validate(lat, lon)
            return await self.summary.summarize(coord)

        @self.app.get("/v1/grid", dependencies=[Depends(self._enforce_grid_rate_limit)])
        async def get_grid(
            min_lat: float = Query(..., alias="minLat"),
            max_lat: float = Query(..., alias="maxLat"),
            min_lon: float = Query(..., alias="minLon"),
            max_lon: float = Query(..., alias="maxLon"),
            points: int = Query(DEFAULT_POINTS),
            layers: Optional[str] = Query(None),
        ):
            """Sample a bounding box; ``points`` is clamped to 1..40."""
            box = self.geo.validate_box(min_lat, max_lat, min_lon, max_lon)
            selected = layers.split(",") if layers else None
            return await self.grid.aggregate(box, points, selected)


def create_app(config: Optional[ServiceConfig] = None, *, transport: Optional[httpx.AsyncBaseTransport] = None):
    """Create FastAPI application."""
    service = TrivselGatewayService(config, transport=transport)
    return service.app


if __name__ == "__main__":
    service = TrivselGatewayService()
    service.run()
