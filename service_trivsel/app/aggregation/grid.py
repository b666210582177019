"""
Grid fan-out: sample a bounding box and resolve every sample point at once.
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from shared.logging import get_logger

from ..domain.geo import BoundingBox
from .summary import PointReport, SummaryAggregator

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


MIN_POINTS = 1
MAX_POINTS = 40
DEFAULT_POINTS = 25


@dataclass(frozen=True)
class GridCell:
    id: str
    row: int
    col: int
    lat: float
    lon: float


@dataclass(frozen=True)
class GridPlan:
    rows: int
    cols: int
    cells: List[GridCell]


def clamp_points(points: int) -> int:
    return min(max(points, MIN_POINTS), MAX_POINTS)


def plan_grid(box: BoundingBox, points: int = DEFAULT_POINTS) -> GridPlan:
    """Lay out ``points`` samples over ``box`` in row-major order.

    Uses ``floor(sqrt(n))`` rows and as many columns as needed to reach n;
    the last row is cut short once exactly n points have been placed. The
    first sample sits on ``(min_lat, min_lon)``.
    """
    count = clamp_points(points)
    rows = math.floor(math.sqrt(count))
    cols = math.ceil(count / rows)

    lat_step = (box.max_lat - box.min_lat) / max(rows - 1, 1)
    lon_step = (box.max_lon - box.min_lon) / max(cols - 1, 1)

    cells: List[GridCell] = []
    for r in range(rows):
        for c in range(cols):
            if len(cells) >= count:
                break
            cells.append(GridCell(
                id=f"p-{len(cells)}",
                row=r,
                col=c,
                lat=box.min_lat + r * lat_step,
                lon=box.min_lon + c * lon_step,
            ))

    return GridPlan(rows=rows, cols=cols, cells=cells)


class GridAggregator:
    """Resolves every grid point concurrently.

    All points are dispatched together; there is no internal cap on
    fan-out. Results come back in plan order.
    """

    def __init__(self, summary: SummaryAggregator, *, metrics: Optional["MetricsCollector"] = None):
        self.summary = summary
        self.metrics = metrics
        self.logger = get_logger("trivsel.aggregation.grid")

    async def aggregate(
        self,
        box: BoundingBox,
        points: int = DEFAULT_POINTS,
        layers: Optional[Iterable[str]] = None,
    ) -> List[Dict[str, Any]]:
        plan = plan_grid(box, points)
        selected = self.summary.select_layers(layers)

        self.logger.info(
            "Resolving grid",
            points=len(plan.cells),
            rows=plan.rows,
            cols=plan.cols,
            layers=list(selected),
        )

        reports = await asyncio.gather(
            *(self.summary.resolve(cell.lat, cell.lon, selected) for cell in plan.cells)
        )

        if self.metrics:
            self.metrics.increment_counter("grid_points_total", amount=len(plan.cells))

        return [self._grid_point(cell, report) for cell, report in zip(plan.cells, reports)]

    @staticmethod
    def _grid_point(cell: GridCell, report: PointReport) -> Dict[str, Any]:
        point: Dict[str, Any] = {"id": cell.id, "lat": cell.lat, "lon": cell.lon}
        for layer in report.results:
            payload = report.payload(layer)
            # Unavailable layers are omitted rather than null
            if payload is not None:
                point[layer] = payload
        return point
