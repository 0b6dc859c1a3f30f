"""Tests for the TTL response cache."""

import pytest

from gamestats.cache import ResponseCache, games_key, profile_key


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=3600, clock=clock)


class TestResponseCache:
    """Tests for ResponseCache."""

    def test_miss(self, cache):
        assert cache.get(("games", "alice", 1, False)) is None

    def test_get_is_idempotent_within_ttl(self, cache, clock):
        cache.set("k", {"v": 1})
        first = cache.get("k")
        clock.now += 3599
        assert cache.get("k") is first
        assert cache.get("k") == {"v": 1}

    def test_expires_at_ttl(self, cache, clock):
        cache.set("k", "v")
        clock.now += 3600
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_set_replaces_and_restarts_ttl(self, cache, clock):
        cache.set("k", "old")
        clock.now += 3000
        cache.set("k", "new")
        clock.now += 3000
        assert cache.get("k") == "new"

    def test_invalidate(self, cache):
        cache.set("k", "v")
        assert cache.invalidate("k") is True
        assert cache.get("k") is None
        assert cache.invalidate("k") is False

    def test_clear_and_len(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        assert len(cache) == 2
        cache.clear()
        assert len(cache) == 0

    def test_len_skips_expired(self, cache, clock):
        cache.set("a", 1)
        clock.now += 4000
        cache.set("b", 2)
        assert len(cache) == 1

    def test_set_sweeps_expired_entries(self, clock):
        cache = ResponseCache(ttl_seconds=10, clock=clock)
        for i in range(1000):
            cache.set(("games", f"user{i}", 1, False), i)

        clock.now += 100
        cache.set("fresh", 1)

        assert len(cache) == 1
        assert list(cache._entries) == ["fresh"]

    def test_purge_expired(self, cache, clock):
        cache.set("a", 1)
        clock.now += 1800
        cache.set("b", 2)
        clock.now += 1800
        assert cache.purge_expired() == 1
        assert list(cache._entries) == ["b"]


class TestKeys:
    """Tests for cache key construction."""

    def test_games_key_distinguishes_page_and_mode(self):
        assert games_key("alice", 1, False) != games_key("alice", 1, True)
        assert games_key("alice", 1, False) != games_key("alice", 2, False)
        assert games_key("alice", 1, False) == ("games", "alice", 1, False)

    def test_profile_and_games_keys_differ(self):
        assert profile_key("alice") != games_key("alice", 1, False)

    def test_username_is_case_sensitive(self):
        assert profile_key("Alice") != profile_key("alice")
