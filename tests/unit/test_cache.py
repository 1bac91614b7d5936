"""Tests for the metadata cache."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from subscout.core.models import TargetMetadata
from subscout.core.subtitles import MetadataCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def cache_events(event: str) -> float:
    return REGISTRY.get_sample_value("metadata_cache_events_total", {"event": event}) or 0.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


MATRIX = TargetMetadata(identifier="tt0133093", title="The Matrix", year="1999")
MATRIX_RELOADED = TargetMetadata(identifier="tt0234215", title="The Matrix Reloaded", year="2003")


class TestMetadataCache:
    """Test MetadataCache behavior."""

    def test_get_and_set(self, clock):
        """Test that stored metadata is returned."""
        cache = MetadataCache(clock=clock)
        cache.set("tt0133093", MATRIX)

        assert cache.get("tt0133093") == MATRIX
        assert cache.contains("tt0133093")
        assert len(cache) == 1

    def test_miss_returns_default(self, clock):
        """Test that a missing identifier returns the default."""
        cache = MetadataCache(clock=clock)
        sentinel = object()

        assert cache.get("tt0000001") is None
        assert cache.get("tt0000001", sentinel) is sentinel
        assert not cache.contains("tt0000001")

    def test_negative_entries(self, clock):
        """Test that a cached "not found" is distinguishable from a miss."""
        cache = MetadataCache(clock=clock)
        cache.set("tt0000001", None)
        sentinel = object()

        assert cache.contains("tt0000001")
        assert cache.get("tt0000001", sentinel) is None

    def test_entries_expire(self, clock):
        """Test that entries older than the TTL are dropped."""
        cache = MetadataCache(ttl_seconds=10, clock=clock)
        cache.set("tt0133093", MATRIX)

        clock.advance(10)
        assert cache.contains("tt0133093")

        clock.advance(1)
        assert not cache.contains("tt0133093")
        assert len(cache) == 0

    def test_zero_ttl_never_expires(self, clock):
        """Test that a TTL of zero disables expiry."""
        cache = MetadataCache(ttl_seconds=0, clock=clock)
        cache.set("tt0133093", MATRIX)

        clock.advance(10**9)
        assert cache.get("tt0133093") == MATRIX

    def test_oldest_entry_evicted(self, clock):
        """Test that the oldest entry is evicted when full."""
        cache = MetadataCache(max_entries=2, clock=clock)
        cache.set("a", MATRIX)
        cache.set("b", MATRIX)
        cache.set("a", MATRIX_RELOADED)  # refreshes "a"
        cache.set("c", MATRIX)

        assert len(cache) == 2
        assert not cache.contains("b")
        assert cache.get("a") == MATRIX_RELOADED
        assert cache.contains("c")

    def test_clear_expired(self, clock):
        """Test bulk removal of expired entries."""
        cache = MetadataCache(ttl_seconds=10, clock=clock)
        cache.set("old", MATRIX)
        clock.advance(8)
        cache.set("new", MATRIX_RELOADED)
        clock.advance(5)

        assert cache.clear_expired() == 1
        assert len(cache) == 1
        assert cache.contains("new")

    def test_clear(self, clock):
        """Test that clear removes everything."""
        cache = MetadataCache(clock=clock)
        cache.set("tt0133093", MATRIX)
        cache.clear()

        assert len(cache) == 0

    def test_search_by_title(self, clock):
        """Test case-insensitive title search over positive entries."""
        cache = MetadataCache(clock=clock)
        cache.set("tt0133093", MATRIX)
        cache.set("tt0234215", MATRIX_RELOADED)
        cache.set("tt0000001", None)

        assert cache.search_by_title("reloaded") == [MATRIX_RELOADED]
        assert len(cache.search_by_title("MATRIX")) == 2

    def test_all_entries(self, clock):
        """Test that negative entries are not listed."""
        cache = MetadataCache(clock=clock)
        cache.set("tt0133093", MATRIX)
        cache.set("tt0000001", None)

        assert cache.all_entries() == {"tt0133093": MATRIX}

    def test_invalid_size(self):
        """Test that a cache must hold at least one entry."""
        with pytest.raises(ValueError):
            MetadataCache(max_entries=0)

    def test_metrics(self, clock):
        """Test that hits, misses and evictions are counted."""
        hits, misses, evictions = cache_events("hit"), cache_events("miss"), cache_events("evicted")
        cache = MetadataCache(max_entries=1, clock=clock)

        cache.get("a")
        cache.set("a", MATRIX)
        cache.get("a")
        cache.set("b", MATRIX)

        assert cache_events("hit") == hits + 1
        assert cache_events("miss") == misses + 1
        assert cache_events("evicted") == evictions + 1
