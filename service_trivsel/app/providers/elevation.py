"""
Elevation provider backed by Kartverket's GeoNorge height service.
"""

import math
from typing import Any, Dict, Tuple

from ..domain.results import ElevationData, MockResult, ProviderResult, utc_timestamp
from .base import CachedUpstreamAdapter


def mock_elevation(lat: float, lon: float) -> float:
    """Smooth, deterministic pseudo-elevation so repeated fallbacks agree."""
    return round(abs(math.sin(lat * 100) * math.cos(lon * 100) * 100), 1)


class ElevationProvider(CachedUpstreamAdapter):
    """Terrain height in metres.

    Rounded to 4 decimals (about 10 m) rather than 3: terrain changes faster
    over short distances than weather, and the upstream data is static, so
    the long TTL keeps the hit rate up anyway.
    """

    kind = "elevation"
    layer = "hoyde"
    ttl_seconds = 24 * 60 * 60
    precision = 4
    source = "kartverket"

    def build_request(self, lat: float, lon: float) -> Tuple[str, Dict[str, str]]:
        r_lat, r_lon = self.rounded(lat, lon)
        # koordsys 4326 is WGS84
        return self.base_url, {"nord": r_lat, "ost": r_lon, "koordsys": "4326", "geojson": "true"}

    def parse(self, payload: Any) -> ElevationData:
        value = (payload.get("properties") or {}).get("value")
        if value is None:
            raise ValueError("missing properties.value")
        return ElevationData(elevation_meters=float(value))

    def fallback(self, lat: float, lon: float, reason: str = "") -> ProviderResult:
        return MockResult(data=ElevationData(elevation_meters=mock_elevation(lat, lon)), timestamp=utc_timestamp())
