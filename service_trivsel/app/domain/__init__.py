"""
Domain types for the gateway: service-area geometry and provider results.
"""

from .geo import BoundingBox, Coordinate, GeoValidator, SERVICE_BOUNDS
from .results import (
    ClimateData,
    ElevationData,
    EnergyData,
    MockResult,
    PollutionData,
    ProviderResult,
    RealResult,
    Unavailable,
    to_payload,
)

__all__ = [
    "BoundingBox",
    "Coordinate",
    "GeoValidator",
    "SERVICE_BOUNDS",
    "ClimateData",
    "ElevationData",
    "EnergyData",
    "MockResult",
    "PollutionData",
    "ProviderResult",
    "RealResult",
    "Unavailable",
    "to_payload",
]
