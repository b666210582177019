"""
Unit tests for the gateway TTL cache.
"""

from service_trivsel.app.caching import TTLCache, make_cache_key


class TestTTLCache:
    """Test cases for TTLCache."""

    def test_get_within_ttl_returns_value(self, cache, clock):
        value = {"temperatureC": 12.3}
        cache.set("climate:58.150:8.000", value, 60)

        clock.advance(59)

        assert cache.get("climate:58.150:8.000") is value

    def test_get_at_exact_expiry_is_still_valid(self, cache, clock):
        cache.set("k", "v", 30)
        clock.advance(30)
        assert cache.get("k") == "v"

    def test_expired_entry_is_absent_and_can_be_replaced(self, cache, clock):
        cache.set("k", "old", 10)
        clock.advance(10.5)

        assert cache.get("k") is None

        cache.set("k", "new", 10)
        assert cache.get("k") == "new"

    def test_expired_entries_are_purged_only_on_access(self, cache, clock):
        cache.set("a", 1, 5)
        cache.set("b", 2, 500)
        clock.advance(6)

        # No sweep happened yet
        assert len(cache) == 2

        assert cache.get("a") is None
        assert len(cache) == 1
        assert cache.get("b") == 2

    def test_set_overwrites_existing_entry_and_ttl(self, cache, clock):
        cache.set("k", "first", 5)
        cache.set("k", "second", 100)
        clock.advance(50)
        assert cache.get("k") == "second"

    def test_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_delete_and_clear(self, cache):
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)

        cache.delete("a")
        cache.delete("does-not-exist")
        assert cache.get("a") is None
        assert len(cache) == 1

        cache.clear()
        assert len(cache) == 0

    def test_hits_and_misses_are_counted(self, cache, metrics):
        cache.set("k", "v", 60)
        cache.get("k")
        cache.get("k")
        cache.get("missing")

        assert metrics.get_sample_value("cache_hits_total", {"cache_type": "provider"}) == 2
        assert metrics.get_sample_value("cache_misses_total", {"cache_type": "provider"}) == 1

    def test_works_without_metrics(self, clock):
        cache = TTLCache(clock)
        cache.set("k", "v", 1)
        assert cache.get("k") == "v"


class TestMakeCacheKey:
    """Cache key derivation."""

    def test_three_decimal_cells(self):
        assert make_cache_key("climate", 58.15, 8.0, 3) == "climate:58.150:8.000"

    def test_nearby_points_share_a_cell(self):
        assert make_cache_key("pollution", 58.15012, 8.00049, 3) == make_cache_key("pollution", 58.1498, 7.9996, 3)

    def test_four_decimal_cells_are_finer(self):
        assert make_cache_key("elevation", 58.15012, 8.0, 4) == "elevation:58.1501:8.0000"
        assert make_cache_key("elevation", 58.15012, 8.0, 4) != make_cache_key("elevation", 58.15026, 8.0, 4)

    def test_kind_is_part_of_key(self):
        assert make_cache_key("climate", 58.15, 8.0, 3) != make_cache_key("pollution", 58.15, 8.0, 3)
