"""
Gateway caching package.

Holds the process-wide TTL cache that absorbs repeated provider lookups.
Entries live only as long as the process; nothing is persisted.
"""

from .ttl_cache import CacheEntry, TTLCache, make_cache_key

__all__ = ["CacheEntry", "TTLCache", "make_cache_key"]
