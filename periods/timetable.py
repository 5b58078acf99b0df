"""
Fixed daily timetable and time-to-period resolution.

Each session has six 40-minute periods with a 15-minute break after period 3:

    MORNING    08:30 09:10 09:50 | 10:45 11:25 12:05  (ends 12:45)
    AFTERNOON  13:15 13:55 14:35 | 15:30 16:10 16:50  (ends 17:30)

A time that does not fall inside any period resolves to period 1.
"""

from __future__ import annotations

from datetime import time
from typing import Optional, Union

from .data.models import MAX_PERIOD, MIN_PERIOD, PeriodTime, Session


# =============================================================================
# Constants
# =============================================================================

MINUTES_PER_HOUR = 60
AFTERNOON_START_HOUR = 13

# (start, end) in minutes from midnight, indexed by period number - 1
TIMETABLE: dict[Session, tuple[tuple[int, int], ...]] = {
    Session.MORNING: (
        (510, 550),   # 08:30-09:10
        (550, 590),   # 09:10-09:50
        (590, 630),   # 09:50-10:30
        (645, 685),   # 10:45-11:25
        (685, 725),   # 11:25-12:05
        (725, 765),   # 12:05-12:45
    ),
    Session.AFTERNOON: (
        (795, 835),   # 13:15-13:55
        (835, 875),   # 13:55-14:35
        (875, 915),   # 14:35-15:15
        (930, 970),   # 15:30-16:10
        (970, 1010),  # 16:10-16:50
        (1010, 1050), # 16:50-17:30
    ),
}

TimeLike = Union[str, time]


# =============================================================================
# Parsing and Formatting
# =============================================================================

def parse_time_of_day(value: TimeLike) -> time:
    """
    Parse "HH:MM" or "HH:MM:SS" into a time.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    if isinstance(value, time):
        return value
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    return time(hour, minute, second)


def to_minutes(value: TimeLike) -> int:
    """Minutes from midnight, ignoring seconds."""
    t = parse_time_of_day(value)
    return t.hour * MINUTES_PER_HOUR + t.minute


def format_clock(minutes: int) -> str:
    """Format minutes from midnight as a 12-hour clock string ("4:10 PM")."""
    hour, minute = divmod(minutes, MINUTES_PER_HOUR)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {suffix}"


# =============================================================================
# Resolution
# =============================================================================

def session_for_time(value: TimeLike) -> Session:
    """Session by hour alone: 13:00 onwards is AFTERNOON."""
    hour = parse_time_of_day(value).hour
    return Session.AFTERNOON if hour >= AFTERNOON_START_HOUR else Session.MORNING


def resolve_slot(value: TimeLike) -> Optional[tuple[Session, int]]:
    """
    Find the (session, period) whose window contains the given time.

    Windows are half-open: a period's end time belongs to the next slot
    (or to a break). Returns None for breaks and times outside both sessions.
    """
    minutes = to_minutes(value)
    for session, periods in TIMETABLE.items():
        for index, (start, end) in enumerate(periods):
            if start <= minutes < end:
                return session, index + MIN_PERIOD
    return None


def time_to_period(value: TimeLike) -> int:
    """
    Map a time of day to a period number (1-6).

    Falls back to period 1 for breaks and times outside both sessions.

    Example:
        >>> time_to_period("08:30")
        1
        >>> time_to_period("15:30")
        4
        >>> time_to_period("07:00")
        1
    """
    slot = resolve_slot(value)
    if slot is None:
        return MIN_PERIOD
    return slot[1]


def period_to_time(period_number: int, session: Session) -> PeriodTime:
    """
    Canonical display times for a period in a session.

    Unknown period numbers fall back to the session's period 1.

    Example:
        >>> period_to_time(4, Session.AFTERNOON)
        PeriodTime(start_time='3:30 PM', end_time='4:10 PM')
    """
    periods = TIMETABLE[Session(session)]
    if not MIN_PERIOD <= period_number <= MAX_PERIOD:
        period_number = MIN_PERIOD
    start, end = periods[period_number - 1]
    return PeriodTime(start_time=format_clock(start), end_time=format_clock(end))


def period_windows(session: Session) -> list[tuple[int, PeriodTime]]:
    """All periods of a session with their display times."""
    return [
        (number, period_to_time(number, session))
        for number in range(MIN_PERIOD, MAX_PERIOD + 1)
    ]
