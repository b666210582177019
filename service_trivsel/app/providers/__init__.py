"""
Provider adapters: one per data kind served by the gateway.

Fallback policy differs per provider. Pollution and elevation degrade to
deterministic mock data, climate degrades to ``Unavailable``, energy is
always mocked.
"""

from .base import CachedUpstreamAdapter, ProviderAdapter
from .climate import ClimateProvider
from .elevation import ElevationProvider
from .energy import EnergyProvider
from .pollution import PollutionProvider

__all__ = [
    "CachedUpstreamAdapter",
    "ClimateProvider",
    "ElevationProvider",
    "EnergyProvider",
    "PollutionProvider",
    "ProviderAdapter",
]
