"""
Climate provider backed by MET Norway Locationforecast 2.0.
"""

from typing import Any, Dict, Tuple

from ..domain.results import ClimateData, ProviderResult, Unavailable
from .base import CachedUpstreamAdapter


class ClimateProvider(CachedUpstreamAdapter):
    """Current temperature, wind and next-hour precipitation.

    There is no synthetic weather: when MET cannot be reached the result is
    ``Unavailable``.
    """

    kind = "climate"
    layer = "klima"
    ttl_seconds = 30 * 60
    precision = 3
    source = "met"

    def build_request(self, lat: float, lon: float) -> Tuple[str, Dict[str, str]]:
        r_lat, r_lon = self.rounded(lat, lon)
        return self.base_url, {"lat": r_lat, "lon": r_lon}

    def parse(self, payload: Any) -> ClimateData:
        first_step = payload["properties"]["timeseries"][0]["data"]
        current = first_step["instant"]["details"]
        next_hour = (first_step.get("next_1_hours") or {}).get("details") or {}

        precipitation = next_hour.get("precipitation_amount")
        return ClimateData(
            temperature_c=float(current["air_temperature"]),
            wind_speed_mps=float(current["wind_speed"]),
            precipitation_mm=float(precipitation) if precipitation is not None else 0.0,
        )

    def fallback(self, lat: float, lon: float, reason: str = "") -> ProviderResult:
        return Unavailable(provider=self.kind, reason=reason)
