"""
Energy context provider. No upstream is integrated yet; every answer is mocked.
"""

from ..domain.results import EnergyData, MockResult, ProviderResult, utc_timestamp
from .base import ProviderAdapter


def mock_energy(lat: float, lon: float) -> EnergyData:
    # Same coordinate, same numbers
    seed = (lat + lon) * 1000
    grid_load = 40 + (seed % 40)
    renewable_share = 50 + (seed % 50)

    return EnergyData(
        grid_load_estimate=f"{grid_load:.0f}%",
        renewable_share=f"{renewable_share:.0f}%",
        local_industry_indicator="High" if seed % 2 > 1 else "Low",
        note="Mock provider in MVP",
    )


class EnergyProvider(ProviderAdapter):
    kind = "energy"
    layer = "energi"

    async def fetch(self, lat: float, lon: float) -> ProviderResult:
        result = self.fallback(lat, lon)
        self._record(result)
        return result

    def fallback(self, lat: float, lon: float, reason: str = "") -> ProviderResult:
        return MockResult(data=mock_energy(lat, lon), timestamp=utc_timestamp())
