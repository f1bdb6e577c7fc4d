"""Time-boxed cache holding the last normalized event list."""
import logging
import time
from dataclasses import replace
from typing import Callable, List, Optional

from processor.models import CacheEntry, NormalizedEvent

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 3600


def _copy_events(events: List[NormalizedEvent]) -> List[NormalizedEvent]:
    return [replace(event) for event in events]


class EventCache:
    """
    Single-slot event cache with lazy expiry.

    ``store`` replaces the slot wholesale. ``read`` returns the events while
    they are younger than CACHE_TTL_SECONDS and deletes them otherwise.
    Subclasses only provide the slot itself.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize the cache.

        Args:
            clock: Returns the current time in epoch seconds
        """
        self.clock = clock

    def store(self, events: List[NormalizedEvent]) -> None:
        """Replace the cached list with events, stamped with the current time."""
        entry = CacheEntry(events=_copy_events(events), captured_at=self.clock())
        self._save_entry(entry)
        logger.info(f"Cached {len(entry.events)} events")

    def read(self) -> Optional[List[NormalizedEvent]]:
        """
        Return the cached events, or None if absent or stale.

        A stale entry is removed as part of the read.
        """
        entry = self._load_entry()
        if entry is None:
            return None

        age = self.clock() - entry.captured_at
        if age >= CACHE_TTL_SECONDS:
            logger.info(f"Cached events expired ({age:.0f}s old), evicting")
            self._delete_entry()
            return None

        return _copy_events(entry.events)

    def _load_entry(self) -> Optional[CacheEntry]:
        raise NotImplementedError

    def _save_entry(self, entry: CacheEntry) -> None:
        raise NotImplementedError

    def _delete_entry(self) -> None:
        raise NotImplementedError


class InMemoryEventCache(EventCache):
    """EventCache keeping its slot in process memory."""

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock=clock)
        self._entry: Optional[CacheEntry] = None

    def _load_entry(self) -> Optional[CacheEntry]:
        return self._entry

    def _save_entry(self, entry: CacheEntry) -> None:
        self._entry = entry

    def _delete_entry(self) -> None:
        self._entry = None
