"""Schedule data models, loading and row sources."""

from .models import (
    DAY_NAMES,
    CacheConfig,
    PeriodAssignment,
    ScheduleData,
    ScheduleRow,
    Session,
    TeacherIdentity,
    day_of_week_for,
)
from .loader import DataValidationError, load_schedule_data, validate_schedule_data
from .source import (
    DataAccessError,
    InMemoryRowSource,
    RowSource,
    SQLiteRowSource,
    create_schema,
    insert_schedule_data,
)

__all__ = [
    # Models
    "DAY_NAMES",
    "CacheConfig",
    "PeriodAssignment",
    "ScheduleData",
    "ScheduleRow",
    "Session",
    "TeacherIdentity",
    "day_of_week_for",
    # Loader
    "DataValidationError",
    "load_schedule_data",
    "validate_schedule_data",
    # Sources
    "DataAccessError",
    "InMemoryRowSource",
    "RowSource",
    "SQLiteRowSource",
    "create_schema",
    "insert_schedule_data",
]
