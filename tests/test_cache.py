"""Tests for the TTL cache."""

from unittest.mock import MagicMock

from ekkyo.cache import TtlCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _cache(ttl=10, **kwargs):
    clock = FakeClock()
    return TtlCache(ttl, clock=clock, **kwargs), clock


class TestTtlCache:
    def test_hit_within_window(self):
        cache, clock = _cache()
        cache.set("k", 1)
        clock.now += 9.9
        assert cache.get("k") == 1
        assert "k" in cache

    def test_expires(self):
        cache, clock = _cache()
        cache.set("k", 1)
        clock.now += 10
        assert cache.get("k") is None
        assert "k" not in cache
        assert len(cache) == 0

    def test_get_or_set_computes_once(self):
        cache, clock = _cache()
        factory = MagicMock(return_value=150.0)
        assert cache.get_or_set(("USD", "JPY"), factory) == 150.0
        assert cache.get_or_set(("USD", "JPY"), factory) == 150.0
        assert factory.call_count == 1

        clock.now += 11
        cache.get_or_set(("USD", "JPY"), factory)
        assert factory.call_count == 2

    def test_none_not_stored(self):
        cache, _ = _cache()
        factory = MagicMock(return_value=None)
        cache.get_or_set("missing", factory)
        cache.get_or_set("missing", factory)
        assert factory.call_count == 2

    def test_invalidate(self):
        cache, _ = _cache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") == 2
        cache.invalidate()
        assert len(cache) == 0

    def test_max_entries_evicts_expired_first(self):
        cache, clock = _cache(max_entries=2)
        cache.set("old", 1)
        clock.now += 20
        cache.set("fresh", 2)
        cache.set("new", 3)
        assert cache.get("fresh") == 2
        assert cache.get("new") == 3

    def test_max_entries_full_resets(self):
        cache, _ = _cache(max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert len(cache) == 1
        assert cache.get("c") == 3
