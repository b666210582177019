"""
Service-area geometry and coordinate validation.
"""

import math
from dataclasses import dataclass

from shared.errors import ValidationError


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def describe(self) -> str:
        return f"({self.min_lat}-{self.max_lat}, {self.min_lon}-{self.max_lon})"


# Kristiansand. The only region the gateway serves.
SERVICE_BOUNDS = BoundingBox(min_lat=58.05, max_lat=58.25, min_lon=7.85, max_lon=8.25)


class GeoValidator:
    """Gatekeeper for every coordinate entering the service."""

    def __init__(self, bounds: BoundingBox = SERVICE_BOUNDS):
        self.bounds = bounds

    def is_in_bounds(self, coord: Coordinate) -> bool:
        # NaN compares False against everything, so it never lands inside
        return (
            self.bounds.min_lat <= coord.lat <= self.bounds.max_lat
            and self.bounds.min_lon <= coord.lon <= self.bounds.max_lon
        )

    def validate(self, lat: float, lon: float) -> Coordinate:
        """Return the coordinate or raise ValidationError naming the bounds."""
        if math.isnan(lat) or math.isnan(lon):
            raise ValidationError("Invalid coordinates: NaN", details={"lat": str(lat), "lon": str(lon)})

        coord = Coordinate(lat=lat, lon=lon)
        if not self.is_in_bounds(coord):
            raise ValidationError(
                f"Coordinates out of bounds {self.bounds.describe()}",
                details={
                    "lat": str(lat),
                    "lon": str(lon),
                    "bounds": {
                        "minLat": self.bounds.min_lat,
                        "maxLat": self.bounds.max_lat,
                        "minLon": self.bounds.min_lon,
                        "maxLon": self.bounds.max_lon,
                    },
                },
            )
        return coord

    def validate_box(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> BoundingBox:
        """Both corners must independently pass the coordinate check."""
        try:
            self.validate(min_lat, min_lon)
            self.validate(max_lat, max_lon)
        except ValidationError as exc:
            raise ValidationError(f"Grid bounds outside allowed area: {exc.message}", details=exc.details) from exc
        return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)
