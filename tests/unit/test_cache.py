"""
Unit tests for the TTL result cache.
"""

import pytest

from raffle_toolkit.utils.cache import (
    ResultCache,
    address_list_key,
    collection_key,
)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> ResultCache:
    return ResultCache(ttl=300, clock=clock)


class TestTTL:
    def test_hit_just_before_expiry(self, cache, clock):
        cache.set("k", [1, 2, 3])
        clock.advance(300 - 0.001)
        assert cache.get("k") == [1, 2, 3]

    def test_miss_just_after_expiry(self, cache, clock):
        cache.set("k", [1, 2, 3])
        clock.advance(300 + 0.001)
        assert cache.get("k") is None

    def test_miss_at_expiry(self, cache, clock):
        cache.set("k", "v")
        clock.advance(300)
        assert cache.get("k") is None

    def test_expired_entry_is_evicted(self, cache, clock):
        cache.set("k", "v")
        clock.advance(301)
        cache.get("k")
        assert cache.get_stats()["total_entries"] == 0

    def test_set_replaces_and_restarts_ttl(self, cache, clock):
        cache.set("k", "old")
        clock.advance(200)
        cache.set("k", "new")
        clock.advance(200)
        assert cache.get("k") == "new"

    def test_default_ttl_from_config(self, monkeypatch):
        from raffle_toolkit.shared.constants import GlobalConstants

        monkeypatch.setattr(GlobalConstants, "CACHE_TTL", 42)
        assert ResultCache().ttl == 42


class TestOperations:
    def test_miss_returns_none(self, cache):
        assert cache.get("missing") is None
        assert "missing" not in cache

    def test_delete(self, cache):
        cache.set("k", "v")
        cache.delete("k")
        cache.delete("never-set")
        assert cache.get("k") is None

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert cache.get_stats()["total_entries"] == 0

    def test_stats(self, cache, clock):
        cache.set("a", 1)
        clock.advance(200)
        cache.set("b", 2)
        clock.advance(150)

        stats = cache.get_stats()
        assert stats["total_entries"] == 2
        assert stats["active_entries"] == 1
        assert stats["expired_entries"] == 1
        assert stats["keys"] == ["b"]
        assert stats["ttl"] == 300


class TestKeys:
    def test_address_list_key(self):
        assert address_list_key(84532) == "raffle_addresses:84532"

    def test_collection_key_scopes_platform_and_size(self):
        assert collection_key(84532, "mobile", 25) == "raffles:84532:mobile:25"
        assert collection_key(84532, "mobile", 25) != collection_key(
            84532, "desktop", 25
        )
        assert collection_key(84532, "desktop", 10) != collection_key(
            84532, "desktop", 30
        )
