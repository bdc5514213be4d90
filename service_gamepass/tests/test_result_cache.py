"""
Unit tests for the TTL result cache.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_gamepass.app.caching.result_cache import ResultCache
from service_gamepass.app.domain.models import GamePass


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestResultCache:
    """Test cases for ResultCache."""

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        """Create ResultCache instance with a 60s TTL."""
        return ResultCache(ttl_seconds=60.0, max_entries=3, clock=clock)

    @pytest.fixture
    def records(self):
        return [GamePass(id=55, name="VIP", price=100), GamePass(id=56, name="Gamepass 56", price=0)]

    def test_get_missing_key(self, cache):
        """Test a miss on an unknown key."""
        assert cache.get("123") is None

    def test_put_then_get_before_ttl(self, cache, clock, records):
        """Test fresh entries are served."""
        cache.put("123", records)
        clock.advance(59.9)

        assert cache.get("123") == records

    def test_get_after_ttl_is_absent(self, cache, clock, records):
        """Test expired entries read as absent and are dropped."""
        cache.put("123", records)
        clock.advance(60.0)

        assert cache.get("123") is None
        assert len(cache) == 0

    def test_put_overwrites_and_refreshes_ttl(self, cache, clock, records):
        """Test a new put replaces the entry and restarts the window."""
        cache.put("123", records)
        clock.advance(50)
        cache.put("123", records[:1])
        clock.advance(50)

        assert cache.get("123") == records[:1]

    def test_returned_list_is_a_copy(self, cache, records):
        """Test callers cannot mutate cached state."""
        cache.put("123", records)
        cache.get("123").clear()

        assert cache.get("123") == records

    def test_empty_result_is_cached(self, cache):
        """Test an empty list is a hit, not a miss."""
        cache.put("123", [])

        assert cache.get("123") == []

    def test_bound_evicts_oldest(self, cache, records):
        """Test the oldest entry goes when the bound is exceeded."""
        for key in ("a", "b", "c", "d"):
            cache.put(key, records)

        assert len(cache) == 3
        assert cache.get("a") is None
        assert cache.get("d") == records

    def test_bound_prefers_expired_entries(self, cache, clock, records):
        """Test expired entries are purged before live ones are evicted."""
        cache.put("old", records)
        clock.advance(61)
        cache.put("a", records)
        cache.put("b", records)
        cache.put("c", records)

        assert len(cache) == 3
        assert cache.get("a") == records

    def test_purge_expired(self, cache, clock, records):
        """Test the explicit sweep."""
        cache.put("a", records)
        clock.advance(30)
        cache.put("b", records)
        clock.advance(31)

        assert cache.purge_expired() == 1
        assert cache.get("b") == records

    def test_stats(self, cache, records):
        """Test stats report size and limits."""
        cache.put("a", records)

        assert cache.stats() == {"entries": 1, "max_entries": 3, "ttl_seconds": 60.0}
