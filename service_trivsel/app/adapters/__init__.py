"""
Adapters package for the gateway.

Contains the HTTP plumbing for talking to upstream providers:

- Per-attempt timeouts
- Retry with exponential backoff for transient failures
- Mapping of transport failures onto shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .upstream_fetcher import RetryingFetcher

__all__ = ["RetryingFetcher"]
