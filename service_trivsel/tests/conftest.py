"""
Shared fixtures for gateway tests.
"""

import copy
from typing import Any, Callable, Dict, List, Union
from unittest.mock import AsyncMock

import httpx
import pytest

from service_trivsel.app.adapters import RetryingFetcher
from service_trivsel.app.caching import TTLCache
from shared.metrics import MetricsCollector


VALID_LAT = 58.15
VALID_LON = 8.00

CLIMATE_PAYLOAD = {
    "type": "Feature",
    "properties": {
        "timeseries": [
            {
                "time": "2024-05-01T12:00:00Z",
                "data": {
                    "instant": {"details": {"air_temperature": 12.3, "wind_speed": 4.5}},
                    "next_1_hours": {"details": {"precipitation_amount": 0.4}},
                },
            },
            {
                "time": "2024-05-01T13:00:00Z",
                "data": {"instant": {"details": {"air_temperature": 99.0, "wind_speed": 99.0}}},
            },
        ]
    },
}

POLLUTION_PAYLOAD = {
    "data": {
        "time": [
            {
                "from": "2024-05-01T12:00:00Z",
                "variables": {
                    "pm10_concentration": {"value": 11.0, "units": "ug/m3"},
                    "pm25_concentration": {"value": 25.0, "units": "ug/m3"},
                    "o3_concentration": {"value": 50.2, "units": "ug/m3"},
                    "no2_concentration": {"value": 9.1, "units": "ug/m3"},
                },
            }
        ]
    }
}

ELEVATION_PAYLOAD = {
    "type": "Point",
    "coordinates": [8.0, 58.15],
    "properties": {"value": 42.7},
}

Handler = Callable[[httpx.Request], Union[httpx.Response, Any]]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubUpstream:
    """Scripted stand-in for MET and Kartverket.

    Requests are routed on a path fragment. Each route has a queue of
    scripted responses; once the queue is empty the route's default handler
    answers.
    """

    ROUTES = ("locationforecast", "airqualityforecast", "hoydedata")

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.defaults: Dict[str, Handler] = {
            "locationforecast": lambda request: httpx.Response(200, json=copy.deepcopy(CLIMATE_PAYLOAD)),
            "airqualityforecast": lambda request: httpx.Response(200, json=copy.deepcopy(POLLUTION_PAYLOAD)),
            "hoydedata": lambda request: httpx.Response(200, json=copy.deepcopy(ELEVATION_PAYLOAD)),
        }
        self.scripted: Dict[str, List[Handler]] = {route: [] for route in self.ROUTES}

    def set_default(self, route: str, handler: Handler) -> None:
        self.defaults[route] = handler

    def fail(self, route: str, status_code: int = 500) -> None:
        self.set_default(route, lambda request: httpx.Response(status_code, json={"error": "boom"}))

    def script(self, route: str, *handlers: Handler) -> None:
        self.scripted[route].extend(handlers)

    def calls(self, route: str) -> int:
        return sum(1 for request in self.requests if route in request.url.path)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for route in self.ROUTES:
            if route in request.url.path:
                handler = self.scripted[route].pop(0) if self.scripted[route] else self.defaults[route]
                response = handler(request)
                if not isinstance(response, httpx.Response):
                    response = await response
                return response
        return httpx.Response(404, json={"error": "unknown route"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def respond(status_code: int, payload: Any = None) -> Handler:
    return lambda request: httpx.Response(status_code, json=payload if payload is not None else {})


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metrics():
    return MetricsCollector("trivsel")


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def cache(clock, metrics):
    return TTLCache(clock, metrics=metrics)


@pytest.fixture
def fetcher(upstream, sleep, metrics):
    return RetryingFetcher(
        "TrivselTests/1.0",
        transport=upstream.transport,
        sleep=sleep,
        metrics=metrics,
    )
