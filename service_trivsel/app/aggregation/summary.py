"""
Single-coordinate fan-out across all provider adapters.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from shared.errors import ValidationError
from shared.logging import get_logger

from ..domain.geo import Coordinate
from ..domain.results import ProviderResult, result_source, to_payload, utc_timestamp
from ..providers import ProviderAdapter


@dataclass
class PointReport:
    """Every selected provider's result for one coordinate, keyed by layer."""

    lat: float
    lon: float
    results: Dict[str, ProviderResult] = field(default_factory=dict)

    def payload(self, layer: str) -> Optional[Dict[str, Any]]:
        result = self.results.get(layer)
        return to_payload(result) if result is not None else None

    def sources_used(self) -> List[str]:
        sources: List[str] = []
        for result in self.results.values():
            source = result_source(result)
            if source and source not in sources:
                sources.append(source)
        return sources


class SummaryAggregator:
    """Resolves all providers for a coordinate concurrently.

    Waits for every provider; one provider failing never cancels or fails
    the others.
    """

    def __init__(self, providers: Sequence[ProviderAdapter]):
        self.providers: Dict[str, ProviderAdapter] = {p.layer: p for p in providers}
        self.logger = get_logger("trivsel.aggregation.summary")

    @property
    def layers(self) -> Tuple[str, ...]:
        return tuple(self.providers)

    def select_layers(self, layers: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
        """Validate a requested layer subset, keeping canonical order."""
        if layers is None:
            return self.layers

        requested = {layer.strip() for layer in layers if layer.strip()}
        if not requested:
            return self.layers

        unknown = sorted(requested - set(self.providers))
        if unknown:
            raise ValidationError(
                f"Unknown layers: {', '.join(unknown)}",
                details={"allowed": list(self.layers)},
            )
        return tuple(layer for layer in self.layers if layer in requested)

    async def resolve(self, lat: float, lon: float, layers: Optional[Iterable[str]] = None) -> PointReport:
        selected = [self.providers[layer] for layer in self.select_layers(layers)]

        outcomes = await asyncio.gather(
            *(provider.fetch(lat, lon) for provider in selected),
            return_exceptions=True,
        )

        report = PointReport(lat=lat, lon=lon)
        for provider, outcome in zip(selected, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self.logger.error(
                    "Provider raised unexpectedly, using fallback",
                    provider=provider.kind,
                    lat=lat,
                    lon=lon,
                    error=str(outcome),
                )
                outcome = provider.fallback(lat, lon, reason=str(outcome))
            report.results[provider.layer] = outcome
        return report

    async def summarize(self, coord: Coordinate) -> Dict[str, Any]:
        """Combined response body for one validated coordinate."""
        report = await self.resolve(coord.lat, coord.lon)

        body: Dict[str, Any] = {
            "location": {"lat": coord.lat, "lon": coord.lon, "withinBounds": True},
        }
        for layer in self.layers:
            body[layer] = report.payload(layer)
        body["meta"] = {
            "sourcesUsed": report.sources_used(),
            "generatedAt": utc_timestamp(),
        }
        return body
