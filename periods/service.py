"""
Teacher period-assignment service.

Resolves which periods a teacher teaches a class on a given day, caching
the expansion of schedule rows per (teacher, class, day). The service owns
an ``AssignmentCache`` and a background sweep task that drops expired
entries; start and stop the sweep with ``start_automatic_cleanup`` /
``stop_automatic_cleanup`` or by using the service as an async context
manager.

Concurrent misses on the same key are not coalesced: each computes and
stores the same result.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections import defaultdict
from typing import Optional

from .cache import AssignmentCache, Clock, make_cache_key, utc_now
from .data.models import (
    UNKNOWN_CLASS_NAME,
    CacheConfig,
    CacheStats,
    ClassPeriodSummary,
    ClassTeacherSummary,
    PeriodAssignment,
    TeacherDailySchedule,
    TeacherIdentity,
    WarmupResult,
    day_of_week_for,
    normalize_day,
)
from .data.source import RowSource
from .expander import expand_period_numbers, expand_row, expand_rows

logger = logging.getLogger(__name__)


class TeacherNotFoundError(LookupError):
    """Raised when a teacher ID has no identity row."""

    def __init__(self, teacher_id: str):
        super().__init__(f"Teacher not found: {teacher_id}")
        self.teacher_id = teacher_id


class PeriodAssignmentService:
    """Period lookups, access checks and cache maintenance over a row source."""

    def __init__(
        self,
        source: RowSource,
        config: Optional[CacheConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.source = source
        self.config = config or CacheConfig()
        self.clock = clock or utc_now
        self.cache = AssignmentCache(
            ttl=self.config.ttl,
            max_size=self.config.max_size,
            clock=self.clock,
        )
        self._cleanup_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "PeriodAssignmentService":
        self.start_automatic_cleanup()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop_automatic_cleanup()

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_teacher_periods(
        self,
        teacher_id: str,
        class_id: str,
        day_of_week: str,
    ) -> list[PeriodAssignment]:
        """
        Get a teacher's assigned periods for a class on a day.

        Returns an empty list when any argument is empty. Errors from the
        row source propagate.
        """
        if not teacher_id or not class_id or not day_of_week:
            return []

        day = normalize_day(day_of_week)
        cached = self.cache.lookup(teacher_id, class_id, day)
        if cached is not None:
            return cached

        logger.debug("Fetching periods for teacher=%s class=%s day=%s", teacher_id, class_id, day)
        rows = await self.source.fetch_rows(day, class_id=class_id, teacher_id=teacher_id)
        assignments = expand_rows(rows)

        self.cache.store(teacher_id, class_id, day, assignments)
        logger.debug("Found %d period assignments for %s", len(assignments),
                     make_cache_key(teacher_id, class_id, day))
        return assignments

    async def validate_teacher_period_access(
        self,
        teacher_id: str,
        class_id: str,
        period_number: int,
        day_of_week: str,
    ) -> bool:
        """Whether the teacher is assigned this period. Never raises."""
        try:
            assignments = await self.get_teacher_periods(teacher_id, class_id, day_of_week)
        except Exception as e:
            logger.error("Error validating access for teacher %s: %s", teacher_id, e)
            return False
        return any(a.period_number == period_number for a in assignments)

    async def get_teacher_daily_schedule(
        self,
        teacher_id: str,
        date: dt.date,
    ) -> TeacherDailySchedule:
        """
        Get a teacher's assignments across all classes for a date.

        Raises:
            TeacherNotFoundError: If the teacher ID is unknown
        """
        if isinstance(date, dt.datetime):
            date = date.date()
        day = day_of_week_for(date)
        teacher = await self.source.get_teacher(teacher_id)
        if teacher is None:
            logger.warning("Teacher not found: %s", teacher_id)
            raise TeacherNotFoundError(teacher_id)

        logger.debug("Fetching daily schedule for teacher=%s day=%s", teacher_id, day)
        rows = await self.source.fetch_rows(day, teacher_id=teacher_id, teacher_name=teacher.name)

        assignments: list[PeriodAssignment] = []
        class_names: dict[str, str] = {}
        class_periods: dict[str, set[int]] = defaultdict(set)
        for row in rows:
            expanded = expand_row(row)
            assignments.extend(expanded)
            class_names.setdefault(row.class_id, row.class_name or UNKNOWN_CLASS_NAME)
            class_periods[row.class_id].update(a.period_number for a in expanded)

        class_summary = []
        for class_id, class_name in class_names.items():
            assigned = sorted(class_periods[class_id])
            # Attendance marks are not tracked here, so every assigned period is pending
            marked: list[int] = []
            class_summary.append(ClassPeriodSummary(
                class_id=class_id,
                class_name=class_name,
                assigned_periods=assigned,
                marked_periods=marked,
                pending_periods=[p for p in assigned if p not in marked],
            ))

        assignments.sort(key=lambda a: a.period_number)
        return TeacherDailySchedule(
            teacher_id=teacher_id,
            teacher_name=teacher.name,
            date=date,
            day_of_week=day,
            total_periods=len(assignments),
            assignments=assignments,
            class_summary=class_summary,
        )

    async def get_class_teachers(self, class_id: str, day_of_week: str) -> list[ClassTeacherSummary]:
        """One summary per teacher name teaching the class on the day."""
        rows = await self.source.fetch_rows(normalize_day(day_of_week), class_id=class_id)

        teachers: dict[str, dict] = {}
        for row in rows:
            summary = teachers.setdefault(row.teacher_name, {
                "teacher_id": row.teacher_id,
                "periods": set(),
                "subjects": {},
            })
            summary["subjects"].setdefault(row.subject, None)
            summary["periods"].update(expand_period_numbers(row.start_time, row.hours))

        return [
            ClassTeacherSummary(
                teacher_id=summary["teacher_id"],
                teacher_name=name,
                periods=sorted(summary["periods"]),
                subjects=list(summary["subjects"]),
            )
            for name, summary in teachers.items()
        ]

    async def find_teacher_by_name(self, name: str) -> Optional[TeacherIdentity]:
        """First teacher whose first or last name contains ``name``."""
        matches = await self.source.find_teachers(name)
        return matches[0] if matches else None

    # =========================================================================
    # Cache Maintenance
    # =========================================================================

    def clear_cache(
        self,
        teacher_id: Optional[str] = None,
        class_id: Optional[str] = None,
        day_of_week: Optional[str] = None,
    ) -> None:
        """Remove one key when all three parts are given, otherwise everything."""
        if teacher_id and class_id and day_of_week:
            self.cache.remove(teacher_id, class_id, day_of_week)
            logger.info("Cleared cache for %s", make_cache_key(teacher_id, class_id, day_of_week))
        else:
            self.cache.clear()
            logger.info("Cleared all cache")

    def cleanup_expired_entries(self) -> int:
        count = self.cache.cleanup_expired()
        if count:
            logger.info("Cleaned up %d expired cache entries", count)
        return count

    def invalidate_schedule_cache(
        self,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        day_of_week: Optional[str] = None,
    ) -> int:
        """
        Drop cached entries after a schedule change.

        An entry is removed if it matches ANY given filter; with no filters
        the whole cache is dropped.
        """
        count = self.cache.invalidate(class_id=class_id, teacher_id=teacher_id, day_of_week=day_of_week)
        logger.info("Invalidated %d cache entries", count)
        return count

    async def preload_cache(
        self,
        teacher_ids: list[str],
        class_ids: list[str],
        days: list[str],
    ) -> int:
        """Warm every teacher x class x day combination. Returns the count loaded."""
        loaded, _ = await self._preload(teacher_ids, class_ids, days)
        return loaded

    async def _preload(
        self,
        teacher_ids: list[str],
        class_ids: list[str],
        days: list[str],
    ) -> tuple[int, int]:
        loaded = failed = 0
        for teacher_id in teacher_ids:
            for class_id in class_ids:
                for day in days:
                    try:
                        await self.get_teacher_periods(teacher_id, class_id, day)
                        loaded += 1
                    except Exception as e:
                        failed += 1
                        logger.warning(
                            "Failed to preload cache for teacher=%s class=%s day=%s: %s",
                            teacher_id, class_id, day, e,
                        )
        logger.info("Preloaded %d cache entries", loaded)
        return loaded, failed

    async def warmup_cache(self) -> WarmupResult:
        """Preload today's periods for every active teacher and class."""
        logger.info("Starting cache warmup")
        try:
            teacher_ids = await self.source.list_teacher_ids()
            class_ids = await self.source.list_class_ids()
        except Exception as e:
            logger.error("Cache warmup could not list teachers or classes: %s", e)
            return WarmupResult(success=0, failed=0)

        today = day_of_week_for(self.clock().date())
        loaded, failed = await self._preload(teacher_ids, class_ids, [today])
        logger.info("Cache warmup completed: %d loaded, %d failed", loaded, failed)
        return WarmupResult(success=loaded, failed=failed)

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def reset_cache_stats(self) -> None:
        self.cache.reset_stats()
        logger.info("Reset cache statistics")

    # =========================================================================
    # Background Cleanup
    # =========================================================================

    @property
    def cleanup_running(self) -> bool:
        return self._cleanup_task is not None and not self._cleanup_task.done()

    def start_automatic_cleanup(self) -> None:
        """
        Start the periodic expired-entry sweep on the running event loop.

        Calling it again replaces the existing task.
        """
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
        self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop())
        logger.info("Started automatic cache cleanup every %ss", self.config.cleanup_interval_seconds)

    async def stop_automatic_cleanup(self) -> None:
        task, self._cleanup_task = self._cleanup_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped automatic cache cleanup")

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleanup_interval_seconds)
            self.cleanup_expired_entries()
