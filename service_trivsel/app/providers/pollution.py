"""
Air quality provider backed by MET Norway Air Quality Forecast.
"""

from typing import Any, Dict, Optional, Tuple

from ..domain.results import MockResult, PollutionData, ProviderResult, utc_timestamp
from .base import CachedUpstreamAdapter


MOCK_POLLUTION = PollutionData(
    pm10=15.5,
    pm2_5=8.2,
    o3=40.1,
    no2=12.3,
    air_quality_index=1,
    confidence="low (mock)",
)


def air_quality_index(pm2_5: Optional[float]) -> Optional[int]:
    """Three-level indicator from PM2.5: 1 good, 2 fair, 3 poor."""
    if pm2_5 is None:
        return None
    if pm2_5 < 10:
        return 1
    if pm2_5 < 20:
        return 2
    return 3


def _concentration(variables: Dict[str, Any], name: str) -> Optional[float]:
    value = (variables.get(name) or {}).get("value")
    return float(value) if value is not None else None


class PollutionProvider(CachedUpstreamAdapter):
    kind = "pollution"
    layer = "forurensing"
    ttl_seconds = 60 * 60
    precision = 3
    source = "met"

    def build_request(self, lat: float, lon: float) -> Tuple[str, Dict[str, str]]:
        r_lat, r_lon = self.rounded(lat, lon)
        return self.base_url, {"lat": r_lat, "lon": r_lon}

    def parse(self, payload: Any) -> PollutionData:
        variables = payload["data"]["time"][0]["variables"]
        pm2_5 = _concentration(variables, "pm25_concentration")

        return PollutionData(
            pm10=_concentration(variables, "pm10_concentration"),
            pm2_5=pm2_5,
            o3=_concentration(variables, "o3_concentration"),
            no2=_concentration(variables, "no2_concentration"),
            air_quality_index=air_quality_index(pm2_5),
            confidence="high",
        )

    def fallback(self, lat: float, lon: float, reason: str = "") -> ProviderResult:
        return MockResult(data=MOCK_POLLUTION, timestamp=utc_timestamp())
