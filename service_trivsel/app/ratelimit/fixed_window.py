"""
Fixed-window rate limiter for the gateway.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, TYPE_CHECKING

from fastapi import Request

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass
class RateWindow:
    start: float
    count: int


class FixedWindowRateLimiter:
    """Per-key request counter reset at discrete window boundaries.

    The count drops to zero when a window closes instead of decaying, which
    allows bursts at window edges in exchange for O(1) state per key.
    """

    def __init__(
        self,
        default_limit: int,
        default_window_seconds: float,
        *,
        name: str = "global",
        clock: Callable[[], float] = time.monotonic,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.default_limit = default_limit
        self.default_window_seconds = default_window_seconds
        self.name = name
        self.metrics = metrics
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = threading.Lock()
        self.logger = get_logger(f"trivsel.rate_limiter.{name}")

    def check(self, key: str, limit: Optional[int] = None, window_seconds: Optional[float] = None) -> bool:
        """Count one request for ``key`` and report whether it is allowed."""
        effective_limit = self.default_limit if limit is None else limit
        effective_window = self.default_window_seconds if window_seconds is None else window_seconds
        now = self._clock()

        with self._lock:
            window = self._windows.get(key)

            if window is None or now - window.start > effective_window:
                self._windows[key] = RateWindow(start=now, count=1)
                return True

            if window.count < effective_limit:
                window.count += 1
                return True

            count = window.count

        self.logger.warning("Rate limit exceeded", client_id=key, count=count, limit=effective_limit)
        if self.metrics:
            self.metrics.increment_counter("rate_limit_hits_total", limiter=self.name)
        return False

    def remaining(self, key: str, limit: Optional[int] = None) -> int:
        """Approximate requests left in the current window."""
        effective_limit = self.default_limit if limit is None else limit
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return effective_limit
            return max(0, effective_limit - window.count)


def get_client_id(request: Request) -> str:
    """Identify the caller by forwarded IP, falling back to the socket peer."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"
