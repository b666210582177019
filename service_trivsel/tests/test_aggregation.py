"""
Unit tests for summary and grid aggregation.
"""

import asyncio

import pytest

from service_trivsel.app.aggregation import GridAggregator, SummaryAggregator, plan_grid
from service_trivsel.app.domain import (
    BoundingBox,
    ClimateData,
    Coordinate,
    ElevationData,
    MockResult,
    RealResult,
    Unavailable,
)
from service_trivsel.app.providers import (
    ClimateProvider,
    ElevationProvider,
    EnergyProvider,
    PollutionProvider,
    ProviderAdapter,
)
from shared.errors import ValidationError

from .conftest import VALID_LAT, VALID_LON

BOX = BoundingBox(min_lat=58.10, max_lat=58.20, min_lon=7.90, max_lon=8.10)


class StaticClimate(ProviderAdapter):
    kind = "climate"
    layer = "klima"

    async def fetch(self, lat, lon):
        return RealResult(data=ClimateData(10.0, 3.0), timestamp="t", source="met")

    def fallback(self, lat, lon, reason=""):
        return Unavailable(provider=self.kind, reason=reason)


class DownClimate(StaticClimate):
    async def fetch(self, lat, lon):
        return self.fallback(lat, lon, "down")


class ExplodingElevation(ProviderAdapter):
    kind = "elevation"
    layer = "hoyde"

    async def fetch(self, lat, lon):
        raise RuntimeError("bug in adapter")

    def fallback(self, lat, lon, reason=""):
        return MockResult(data=ElevationData(1.0), timestamp="t")


class SlowElevation(ExplodingElevation):
    """Tracks how many fetches are in flight at once."""

    def __init__(self):
        super().__init__()
        self.in_flight = 0
        self.peak = 0

    async def fetch(self, lat, lon):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        await asyncio.sleep(0.01)
        self.in_flight -= 1
        return self.fallback(lat, lon)


@pytest.fixture
def gateway_providers(cache, fetcher, metrics):
    return [
        ClimateProvider(cache, fetcher, "https://api.met.no/weatherapi/locationforecast/2.0/compact", metrics=metrics),
        PollutionProvider(cache, fetcher, "https://api.met.no/weatherapi/airqualityforecast/0.1/", metrics=metrics),
        ElevationProvider(cache, fetcher, "https://ws.geonorge.no/hoydedata/v1/punkt", metrics=metrics),
        EnergyProvider(metrics=metrics),
    ]


@pytest.fixture
def summary(gateway_providers):
    return SummaryAggregator(gateway_providers)


class TestSummaryAggregator:
    """Test cases for SummaryAggregator."""

    @pytest.mark.asyncio
    async def test_summary_shape(self, summary):
        body = await summary.summarize(Coordinate(VALID_LAT, VALID_LON))

        assert body["location"] == {"lat": VALID_LAT, "lon": VALID_LON, "withinBounds": True}
        assert body["klima"]["temperatureC"] == 12.3
        assert body["forurensing"]["source"] == "met"
        assert body["hoyde"]["elevationMeters"] == 42.7
        assert body["energi"]["source"] == "mock"
        assert body["meta"]["sourcesUsed"] == ["met", "kartverket", "mock"]
        assert body["meta"]["generatedAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_failing_provider_does_not_affect_others(self, summary, upstream):
        upstream.fail("locationforecast", 500)

        body = await summary.summarize(Coordinate(VALID_LAT, VALID_LON))

        assert body["klima"] is None
        assert body["forurensing"]["pm2_5"] == 25.0
        assert body["hoyde"]["elevationMeters"] == 42.7
        assert body["meta"]["sourcesUsed"] == ["met", "kartverket", "mock"]

    @pytest.mark.asyncio
    async def test_all_upstreams_down(self, summary, upstream):
        for route in upstream.ROUTES:
            upstream.fail(route, 503)

        body = await summary.summarize(Coordinate(VALID_LAT, VALID_LON))

        assert body["klima"] is None
        assert body["forurensing"]["source"] == "mock"
        assert body["hoyde"]["source"] == "mock"
        assert body["meta"]["sourcesUsed"] == ["mock"]

    @pytest.mark.asyncio
    async def test_raising_provider_is_replaced_by_its_fallback(self):
        aggregator = SummaryAggregator([StaticClimate(), ExplodingElevation()])

        report = await aggregator.resolve(VALID_LAT, VALID_LON)

        assert isinstance(report.results["klima"], RealResult)
        assert isinstance(report.results["hoyde"], MockResult)
        assert report.sources_used() == ["met", "mock"]

    def test_select_layers_keeps_canonical_order(self, summary):
        assert summary.select_layers(None) == ("klima", "forurensing", "hoyde", "energi")
        assert summary.select_layers(["energi", " klima "]) == ("klima", "energi")
        assert summary.select_layers(["", " "]) == summary.layers

    def test_unknown_layers_are_rejected(self, summary):
        with pytest.raises(ValidationError, match="Unknown layers: wind"):
            summary.select_layers(["klima", "wind"])


class TestPlanGrid:
    """Grid layout."""

    def test_default_is_five_by_five(self):
        plan = plan_grid(BOX, 25)

        assert (plan.rows, plan.cols) == (5, 5)
        assert len(plan.cells) == 25
        first, last = plan.cells[0], plan.cells[-1]
        assert (first.lat, first.lon) == (BOX.min_lat, BOX.min_lon)
        assert last.lat == pytest.approx(BOX.max_lat)
        assert last.lon == pytest.approx(BOX.max_lon)

    def test_ids_follow_enumeration_order(self):
        plan = plan_grid(BOX, 25)
        assert [cell.id for cell in plan.cells] == [f"p-{i}" for i in range(25)]
        # Row-major: longitude varies fastest
        assert plan.cells[1].lat == plan.cells[0].lat
        assert plan.cells[1].lon > plan.cells[0].lon

    def test_points_are_clamped_to_forty(self):
        plan = plan_grid(BOX, 41)
        assert (plan.rows, plan.cols) == (6, 7)
        assert len(plan.cells) == 40

    @pytest.mark.parametrize("points", [0, -5])
    def test_points_are_clamped_to_one(self, points):
        plan = plan_grid(BOX, points)
        assert (plan.rows, plan.cols) == (1, 1)
        assert len(plan.cells) == 1
        assert (plan.cells[0].lat, plan.cells[0].lon) == (BOX.min_lat, BOX.min_lon)

    def test_last_row_is_truncated(self):
        plan = plan_grid(BOX, 10)

        assert (plan.rows, plan.cols) == (3, 4)
        assert len(plan.cells) == 10
        assert [cell.row for cell in plan.cells].count(2) == 2

    def test_degenerate_box(self):
        point = BoundingBox(min_lat=58.15, max_lat=58.15, min_lon=8.0, max_lon=8.0)
        plan = plan_grid(point, 4)
        assert all((cell.lat, cell.lon) == (58.15, 8.0) for cell in plan.cells)


class TestGridAggregator:
    """Test cases for GridAggregator."""

    @pytest.mark.asyncio
    async def test_all_points_resolved_concurrently(self):
        slow = SlowElevation()
        grid = GridAggregator(SummaryAggregator([slow]))

        points = await grid.aggregate(BOX, 25)

        assert len(points) == 25
        assert slow.peak == 25

    @pytest.mark.asyncio
    async def test_points_in_plan_order(self, summary):
        points = await GridAggregator(summary).aggregate(BOX, 10)

        assert [p["id"] for p in points] == [f"p-{i}" for i in range(10)]
        assert set(points[0]) == {"id", "lat", "lon", "klima", "forurensing", "hoyde", "energi"}

    @pytest.mark.asyncio
    async def test_unavailable_layers_are_omitted(self):
        grid = GridAggregator(SummaryAggregator([DownClimate(), ExplodingElevation()]))

        points = await grid.aggregate(BOX, 4)

        assert all("klima" not in point for point in points)
        assert all(point["hoyde"]["source"] == "mock" for point in points)

    @pytest.mark.asyncio
    async def test_layers_filter(self, summary, upstream):
        points = await GridAggregator(summary).aggregate(BOX, 4, ["energi"])

        assert all(set(point) == {"id", "lat", "lon", "energi"} for point in points)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_unknown_layer_rejected_before_fan_out(self, summary, upstream):
        with pytest.raises(ValidationError):
            await GridAggregator(summary).aggregate(BOX, 4, ["nope"])

        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_grid_points_are_counted(self, summary, metrics):
        await GridAggregator(summary, metrics=metrics).aggregate(BOX, 9, ["energi"])

        assert metrics.get_sample_value("grid_points_total") == 9
