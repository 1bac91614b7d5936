"""Bounded in-memory cache for metadata lookups."""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import structlog

from subscout.core.metrics import metadata_cache_events_total
from subscout.core.models import TargetMetadata

logger = structlog.get_logger("subscout.subtitles.cache")


class MetadataCache:
    """Caches metadata lookups per identifier, including negative results.

    Entries expire ``ttl_seconds`` after they were stored (0 = never). When
    the cache is full the oldest entry is evicted. The clock is injectable so
    expiry can be tested without sleeping.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 86400,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize metadata cache.

        Args:
            max_entries: Maximum number of cached identifiers
            ttl_seconds: Lifetime of an entry in seconds (0 = no expiration)
            clock: Source of the current time in seconds
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        # identifier -> (metadata or None for "not found", stored_at)
        self._entries: OrderedDict[str, tuple[TargetMetadata | None, float]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, stored_at: float, now: float) -> bool:
        return self.ttl_seconds > 0 and now - stored_at > self.ttl_seconds

    def _live_entry(self, identifier: str) -> tuple[TargetMetadata | None, float] | None:
        entry = self._entries.get(identifier)
        if entry is None:
            return None
        if self._is_expired(entry[1], self.clock()):
            del self._entries[identifier]
            metadata_cache_events_total.labels(event="expired").inc()
            return None
        return entry

    def contains(self, identifier: str) -> bool:
        """Check whether a live entry (positive or negative) exists."""
        return self._live_entry(identifier) is not None

    def get(self, identifier: str, default: Any = None) -> Any:
        """Get the cached metadata for an identifier.

        Returns the stored value (which may be None for a cached "not found")
        or ``default`` when there is no live entry.
        """
        entry = self._live_entry(identifier)
        if entry is None:
            metadata_cache_events_total.labels(event="miss").inc()
            return default
        metadata_cache_events_total.labels(event="hit").inc()
        return entry[0]

    def set(self, identifier: str, metadata: TargetMetadata | None) -> None:
        """Store metadata (or None for "not found") for an identifier."""
        if identifier in self._entries:
            del self._entries[identifier]
        elif len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            metadata_cache_events_total.labels(event="evicted").inc()
            logger.debug("Evicted metadata cache entry", identifier=evicted)
        self._entries[identifier] = (metadata, self.clock())

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()
        logger.debug("Metadata cache cleared")

    def clear_expired(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed
        """
        now = self.clock()
        expired = [
            key
            for key, (_, stored_at) in self._entries.items()
            if self._is_expired(stored_at, now)
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            metadata_cache_events_total.labels(event="expired").inc(len(expired))
        return len(expired)

    def search_by_title(self, title: str) -> list[TargetMetadata]:
        """Cached metadata whose title contains ``title`` (case-insensitive)."""
        needle = title.lower()
        now = self.clock()
        return [
            metadata
            for metadata, stored_at in self._entries.values()
            if metadata is not None
            and metadata.title
            and needle in metadata.title.lower()
            and not self._is_expired(stored_at, now)
        ]

    def all_entries(self) -> dict[str, TargetMetadata]:
        """All live positive entries keyed by identifier."""
        now = self.clock()
        return {
            key: metadata
            for key, (metadata, stored_at) in self._entries.items()
            if metadata is not None and not self._is_expired(stored_at, now)
        }
