"""
In-process TTL + LRU cache for resolved period assignments.

Entries are keyed by (teacher, class, day). Reads of a live entry move it to
the most-recently-used end; inserting into a full cache evicts from the
least-recently-used end. Expired entries read as misses and are removed by
``cleanup_expired``.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .data.models import CacheStats, PeriodAssignment, normalize_day

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_cache_key(teacher_id: str, class_id: str, day_of_week: str) -> str:
    """Cache key for a teacher/class/day lookup."""
    return f"{teacher_id}|{class_id}|{normalize_day(day_of_week)}"


@dataclass(frozen=True)
class CacheEntry:
    """Cached assignments for one teacher/class/day."""
    teacher_id: str
    class_id: str
    day_of_week: str
    assignments: tuple[PeriodAssignment, ...]
    cached_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class AssignmentCache:
    """Bounded assignment cache with hit/miss counters."""

    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=5),
        max_size: int = 1000,
        clock: Optional[Clock] = None,
    ):
        self.ttl = ttl
        self.max_size = max_size
        self.clock = clock or utc_now
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    # -------------------------------------------------------------------------
    # Read / Write
    # -------------------------------------------------------------------------

    def lookup(self, teacher_id: str, class_id: str, day_of_week: str) -> Optional[list[PeriodAssignment]]:
        """
        Return cached assignments, or None on a miss.

        Counts a hit or a miss. A hit marks the entry most recently used.
        """
        key = make_cache_key(teacher_id, class_id, day_of_week)
        entry = self._entries.get(key)
        if entry is not None and not entry.is_expired(self.clock()):
            self.hits += 1
            self._entries.move_to_end(key)
            logger.debug("Cache hit for %s", key)
            return list(entry.assignments)

        self.misses += 1
        logger.debug("Cache miss for %s", key)
        return None

    def store(
        self,
        teacher_id: str,
        class_id: str,
        day_of_week: str,
        assignments: list[PeriodAssignment],
    ) -> CacheEntry:
        """Insert or replace an entry, evicting the least recently used if full."""
        key = make_cache_key(teacher_id, class_id, day_of_week)
        now = self.clock()
        entry = CacheEntry(
            teacher_id=teacher_id,
            class_id=class_id,
            day_of_week=normalize_day(day_of_week),
            assignments=tuple(assignments),
            cached_at=now,
            expires_at=now + self.ttl,
        )

        self._entries.pop(key, None)
        while len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cache entry %s", evicted)

        self._entries[key] = entry
        return entry

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Raw entry access; does not touch counters or recency."""
        return self._entries.get(key)

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    def remove(self, teacher_id: str, class_id: str, day_of_week: str) -> bool:
        key = make_cache_key(teacher_id, class_id, day_of_week)
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def cleanup_expired(self) -> int:
        """Remove every entry whose expiry has passed. Returns the count removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate(
        self,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        day_of_week: Optional[str] = None,
    ) -> int:
        """
        Remove entries matching ANY of the given filters.

        With no filters every entry is removed. Returns the count removed.
        """
        if not (class_id or teacher_id or day_of_week):
            return self.clear()

        day = normalize_day(day_of_week) if day_of_week else None
        matched = [
            key for key, entry in self._entries.items()
            if (class_id and entry.class_id == class_id)
            or (teacher_id and entry.teacher_id == teacher_id)
            or (day and entry.day_of_week == day)
        ]
        for key in matched:
            del self._entries[key]
        return len(matched)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def stats(self) -> CacheStats:
        now = self.clock()
        total = self.hits + self.misses
        hit_rate = (self.hits / total) * 100 if total else 0.0
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            keys=self.keys(),
            hits=self.hits,
            misses=self.misses,
            hit_rate=round(hit_rate, 2),
            expired_entries=sum(1 for e in self._entries.values() if e.is_expired(now)),
        )

    def reset_stats(self) -> None:
        self.hits = 0
        self.misses = 0
