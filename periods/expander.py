"""Expand schedule rows into per-period assignments."""

from __future__ import annotations

from .data.models import (
    MAX_PERIOD,
    MIN_PERIOD,
    UNKNOWN_CLASS_NAME,
    PeriodAssignment,
    ScheduleRow,
)
from .timetable import TimeLike, period_to_time, session_for_time, time_to_period


def expand_period_numbers(start_time: TimeLike, hours: int | None) -> list[int]:
    """
    Period numbers covered by a slot starting at ``start_time``.

    Periods past the end of the session are dropped, not wrapped.

    Example:
        >>> expand_period_numbers("11:25", 4)  # starts at period 5
        [5, 6]
    """
    start_period = time_to_period(start_time)
    count = hours or 1
    return [
        start_period + i
        for i in range(count)
        if MIN_PERIOD <= start_period + i <= MAX_PERIOD
    ]


def expand_row(row: ScheduleRow) -> list[PeriodAssignment]:
    """
    Expand one schedule row into one assignment per covered period.

    The session comes from the row's start hour; display times come from
    the fixed timetable rather than the row's own times.
    """
    session = session_for_time(row.start_time)
    assignments = []
    for period_number in expand_period_numbers(row.start_time, row.hours):
        times = period_to_time(period_number, session)
        assignments.append(PeriodAssignment(
            period_number=period_number,
            session=session,
            start_time=times.start_time,
            end_time=times.end_time,
            subject=row.subject,
            teacher_name=row.teacher_name,
            teacher_id=row.teacher_id,
            class_id=row.class_id,
            class_name=row.class_name or UNKNOWN_CLASS_NAME,
            day_of_week=row.day_of_week,
            schedule_entry_id=row.id,
        ))
    return assignments


def expand_rows(rows: list[ScheduleRow]) -> list[PeriodAssignment]:
    """Expand many rows, sorted by period number (stable within a period)."""
    assignments: list[PeriodAssignment] = []
    for row in rows:
        assignments.extend(expand_row(row))
    assignments.sort(key=lambda a: a.period_number)
    return assignments
