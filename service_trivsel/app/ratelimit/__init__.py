"""
Rate limiting package for the gateway.

Holds the fixed-window limiter used both for the global per-client budget
and for the stricter grid fan-out budget.
"""

from .fixed_window import FixedWindowRateLimiter, RateWindow, get_client_id

__all__ = ["FixedWindowRateLimiter", "RateWindow", "get_client_id"]
