"""
Provider payloads and the tagged result every provider adapter returns.

A provider never answers with ``None``: it answers with exactly one of
``RealResult`` (live upstream data), ``MockResult`` (deterministic fallback)
or ``Unavailable`` (no fallback exists for this provider).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, Optional, TypeVar, Union


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ClimateData:
    temperature_c: float
    wind_speed_mps: float
    precipitation_mm: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "temperatureC": self.temperature_c,
            "windSpeedMps": self.wind_speed_mps,
            "precipitationMm": self.precipitation_mm,
        }


@dataclass(frozen=True)
class PollutionData:
    pm10: Optional[float] = None
    pm2_5: Optional[float] = None
    o3: Optional[float] = None
    no2: Optional[float] = None
    air_quality_index: Optional[int] = None
    confidence: str = "high"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"confidence": self.confidence}
        if self.air_quality_index is not None:
            payload["airQualityIndex"] = self.air_quality_index
        if self.pm10 is not None:
            payload["pm10"] = self.pm10
        if self.pm2_5 is not None:
            payload["pm2_5"] = self.pm2_5
        if self.o3 is not None:
            payload["o3"] = self.o3
        if self.no2 is not None:
            payload["no2"] = self.no2
        return payload


@dataclass(frozen=True)
class ElevationData:
    elevation_meters: float

    def to_dict(self) -> Dict[str, Any]:
        return {"elevationMeters": self.elevation_meters}


@dataclass(frozen=True)
class EnergyData:
    grid_load_estimate: str
    renewable_share: str
    local_industry_indicator: str
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "energyContext": {
                "gridLoadEstimate": self.grid_load_estimate,
                "renewableShare": self.renewable_share,
                "localIndustryIndicator": self.local_industry_indicator,
            }
        }
        if self.note is not None:
            payload["note"] = self.note
        return payload


T = TypeVar("T", ClimateData, PollutionData, ElevationData, EnergyData)


@dataclass(frozen=True)
class RealResult(Generic[T]):
    """Data obtained from the live upstream."""

    data: T
    timestamp: str
    source: str


@dataclass(frozen=True)
class MockResult(Generic[T]):
    """Deterministic stand-in served when the upstream could not be used."""

    data: T
    timestamp: str
    source: ClassVar[str] = "mock"


@dataclass(frozen=True)
class Unavailable:
    """No data and no fallback for this provider."""

    provider: str
    reason: str = ""


ProviderResult = Union[RealResult, MockResult, Unavailable]


def result_source(result: ProviderResult) -> Optional[str]:
    if isinstance(result, Unavailable):
        return None
    return result.source


def to_payload(result: ProviderResult) -> Optional[Dict[str, Any]]:
    """Serialize a result to its public JSON shape; ``None`` when unavailable."""
    if isinstance(result, (RealResult, MockResult)):
        payload = result.data.to_dict()
        payload["timestamp"] = result.timestamp
        payload["source"] = result.source
        return payload
    if isinstance(result, Unavailable):
        return None
    raise TypeError(f"Unknown provider result: {result!r}")
