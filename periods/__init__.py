"""Teacher period assignments - timetable resolution with a TTL/LRU cache."""

from .cache import AssignmentCache, CacheEntry, make_cache_key
from .data.models import (
    CacheConfig,
    PeriodAssignment,
    ScheduleRow,
    Session,
)
from .data.source import DataAccessError, InMemoryRowSource, SQLiteRowSource
from .expander import expand_period_numbers, expand_row
from .service import PeriodAssignmentService, TeacherNotFoundError
from .timetable import period_to_time, time_to_period
from .cli import app as cli_app

__all__ = [
    # Timetable
    "time_to_period",
    "period_to_time",
    # Expansion
    "expand_row",
    "expand_period_numbers",
    # Cache and service
    "AssignmentCache",
    "CacheEntry",
    "make_cache_key",
    "PeriodAssignmentService",
    "TeacherNotFoundError",
    # Data
    "CacheConfig",
    "PeriodAssignment",
    "ScheduleRow",
    "Session",
    "DataAccessError",
    "InMemoryRowSource",
    "SQLiteRowSource",
    # CLI
    "cli_app",
]
