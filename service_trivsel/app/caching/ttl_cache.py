"""
In-process TTL cache shared by all provider adapters.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


def make_cache_key(kind: str, lat: float, lon: float, precision: int) -> str:
    """Derive the cache key for a provider lookup.

    Coordinates are rounded to ``precision`` decimals, so every request
    falling in the same cell (about 100 m at 3 decimals, 10 m at 4) shares
    one entry.
    """
    return f"{kind}:{lat:.{precision}f}:{lon:.{precision}f}"


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float


class TTLCache:
    """Key/value store with per-entry expiry.

    Expired entries are purged lazily on access; there is no background
    sweep, so memory grows with the number of distinct keys requested.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        *,
        metrics: Optional["MetricsCollector"] = None,
        cache_type: str = "provider",
    ):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.metrics = metrics
        self.cache_type = cache_type
        self.logger = get_logger("trivsel.cache")

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now > entry.expires_at:
                del self._entries[key]
                entry = None

        if entry is None:
            self._record("cache_misses_total")
            return None

        self._record("cache_hits_total")
        self.logger.debug("Cache hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        now = self._clock()
        entry = CacheEntry(value=value, created_at=now, expires_at=now + ttl_seconds)
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _record(self, metric_name: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, cache_type=self.cache_type)
