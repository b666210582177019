"""
Aggregation package: single-point summaries and grid fan-out.
"""

from .grid import DEFAULT_POINTS, MAX_POINTS, MIN_POINTS, GridAggregator, GridCell, GridPlan, plan_grid
from .summary import PointReport, SummaryAggregator

__all__ = [
    "DEFAULT_POINTS",
    "MAX_POINTS",
    "MIN_POINTS",
    "GridAggregator",
    "GridCell",
    "GridPlan",
    "PointReport",
    "SummaryAggregator",
    "plan_grid",
]
