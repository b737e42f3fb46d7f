"""In-memory rendered-content cache.

Holds at most ``max_size`` rendered documents keyed by normalized identifier,
plus two aggregate slots: the chronological index and the RSS payload. The
whole cache is flushed on a timer (see schedulers.py) and on demand.

Eviction is by insertion time: when a ``put`` pushes the entry count past the
bound, exactly one entry, the one inserted longest ago, is dropped. A put never
evicts more than one entry, even if the bound was already exceeded.

The cache is an accelerator only. Misses return ``None`` and any entry can be
regenerated from the document store.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from dromedary.models.cache import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from dromedary.models.content import DayGroup

log = structlog.get_logger()

MAX_CACHE_SIZE = 50


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContentCache:
    """Bounded rendered-document cache with index and feed slots."""

    def __init__(
        self,
        max_size: int = MAX_CACHE_SIZE,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.max_size = max_size
        self._clock = clock
        # Re-inserted keys are popped first, so iteration order is insertion order.
        self._entries: dict[str, CacheEntry] = {}
        self._index: list[DayGroup] | None = None
        self._feed: tuple[datetime, str] | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    # ------------------------------------------------------------------
    # Rendered documents
    # ------------------------------------------------------------------

    def get(self, identifier: str) -> CacheEntry | None:
        """Return a copy of the cached entry, or ``None`` on a miss."""
        entry = self._entries.get(identifier)
        if entry is None:
            return None
        return entry.model_copy(deep=True)

    def put(
        self,
        identifier: str,
        *,
        body: str,
        metadata: dict[str, str] | None = None,
        unwrapped_body: str = "",
    ) -> CacheEntry:
        """Store or overwrite an entry, then evict at most one if over the bound."""
        entry = CacheEntry(
            identifier=identifier,
            body=body,
            metadata=dict(metadata or {}),
            unwrapped_body=unwrapped_body,
            inserted_at=self._clock(),
        )
        self._entries.pop(identifier, None)
        self._entries[identifier] = entry

        if len(self._entries) > self.max_size:
            # min() keeps the first of equal timestamps, i.e. the earliest inserted.
            oldest = min(self._entries.values(), key=lambda e: e.inserted_at)
            del self._entries[oldest.identifier]
            log.debug("cache_evicted", key=oldest.identifier, size=len(self._entries))

        return entry.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def get_index(self) -> list[DayGroup] | None:
        return self._index

    def set_index(self, days: list[DayGroup]) -> None:
        self._index = days

    def get_feed(self, max_age_seconds: int) -> str | None:
        """Return the cached feed XML if it was built less than ``max_age_seconds`` ago."""
        if self._feed is None:
            return None
        built_at, xml = self._feed
        if self._clock() - built_at > timedelta(seconds=max_age_seconds):
            return None
        return xml

    def set_feed(self, xml: str) -> None:
        self._feed = (self._clock(), xml)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Drop every entry, the chronological index and the feed payload."""
        dropped = len(self._entries)
        self._entries.clear()
        self._index = None
        self._feed = None
        log.info("cache_flushed", entries_dropped=dropped)
