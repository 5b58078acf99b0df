"""
Pydantic models for teacher period assignments.

Time conventions:
- Raw schedule times are wall-clock strings: "HH:MM" or "HH:MM:SS" (24-hour)
- Canonical period times are 12-hour display strings: "8:30 AM", "4:10 PM"
- Days are lowercase English names, Sunday first ("sunday" .. "saturday")

The school day is split into two sessions (MORNING and AFTERNOON), each with
six 40-minute periods and a 15-minute break after period 3.
"""

from __future__ import annotations

import datetime as dt
import os
from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# Constants and Enums
# =============================================================================

DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")

MIN_PERIOD = 1
MAX_PERIOD = 6

UNKNOWN_CLASS_NAME = "Unknown Class"


class Session(str, Enum):
    """Half-day teaching session."""
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"


# =============================================================================
# Helper Functions
# =============================================================================

def day_of_week_for(value: dt.date) -> str:
    """Get the lowercase day name for a date (Sunday-first index)."""
    # date.weekday() is Monday=0; shift so Sunday lands on index 0
    return DAY_NAMES[(value.weekday() + 1) % 7]


def normalize_day(day: str) -> str:
    """Lowercase and strip a day name."""
    return day.strip().lower()


# =============================================================================
# Input Models
# =============================================================================

class ScheduleRow(BaseModel):
    """
    One recurring teaching slot as stored in the schedule table.

    A row covers ``hours`` consecutive periods starting at ``start_time``.
    """
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Schedule entry ID")
    teacher_id: Optional[str] = Field(default=None, description="Teacher ID (may be missing)")
    teacher_name: str = Field(description="Teacher display name")
    class_id: str = Field(min_length=1, description="Class ID")
    class_name: Optional[str] = Field(default=None, description="Joined class display name")
    subject: str = Field(description="Subject taught")
    day_of_week: str = Field(description="Lowercase day name")
    start_time: str = Field(pattern=r"^\d{1,2}:\d{2}(:\d{2})?$", description="Start time HH:MM[:SS]")
    end_time: Optional[str] = Field(default=None, pattern=r"^\d{1,2}:\d{2}(:\d{2})?$", description="End time HH:MM[:SS]")
    hours: int = Field(default=1, ge=1, description="Consecutive periods occupied")

    @field_validator("day_of_week", mode="before")
    @classmethod
    def validate_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = normalize_day(value)
            if value not in DAY_NAMES:
                raise ValueError(f"unknown day_of_week '{value}'")
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_of_day(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            parts = [int(p) for p in value.split(":")]
            try:
                dt.time(*parts)
            except ValueError:
                raise ValueError(f"invalid time of day '{value}'") from None
        return value

    @field_validator("hours", mode="before")
    @classmethod
    def default_hours(cls, value: Any) -> Any:
        """Missing or zero hours means a single period."""
        if not value:
            return 1
        return value

    def __str__(self) -> str:
        return f"{self.subject} ({self.teacher_name}) {self.day_of_week} {self.start_time} x{self.hours}"


class TeacherIdentity(BaseModel):
    """Teacher identity row."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Teacher ID")
    first_name: str = Field(description="First name")
    last_name: str = Field(default="", description="Last name")
    status: str = Field(default="ACTIVE", description="Employment status")

    @property
    def name(self) -> str:
        """Display name."""
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class SchoolClass(BaseModel):
    """Student class."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, description="Class ID")
    name: str = Field(min_length=1, description="Class name")


class ScheduleData(BaseModel):
    """
    Complete schedule dataset: teachers, classes and schedule rows.
    This is what the loader produces and what in-memory sources serve.
    """
    model_config = ConfigDict(extra="forbid")

    teachers: list[TeacherIdentity] = Field(default_factory=list)
    classes: list[SchoolClass] = Field(default_factory=list)
    schedule_entries: list[ScheduleRow] = Field(default_factory=list)

    @model_validator(mode="after")
    def join_class_names(self) -> "ScheduleData":
        """Fill in class_name on rows that lack it."""
        names = {c.id: c.name for c in self.classes}
        for row in self.schedule_entries:
            if row.class_name is None and row.class_id in names:
                row.class_name = names[row.class_id]
        return self

    def summary(self) -> dict[str, Any]:
        """Get a summary of the dataset."""
        days = sorted({r.day_of_week for r in self.schedule_entries}, key=DAY_NAMES.index)
        return {
            "teachers": len(self.teachers),
            "classes": len(self.classes),
            "schedule_entries": len(self.schedule_entries),
            "total_hours": sum(r.hours for r in self.schedule_entries),
            "days": days,
        }


# =============================================================================
# Derived Models
# =============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PeriodTime(_CamelModel):
    """Canonical display times for one period."""
    model_config = ConfigDict(frozen=True)

    start_time: str
    end_time: str


class PeriodAssignment(_CamelModel):
    """A single teacher-period assignment derived from a schedule row."""
    model_config = ConfigDict(frozen=True)

    period_number: int = Field(ge=MIN_PERIOD, le=MAX_PERIOD)
    session: Session
    start_time: str
    end_time: str
    subject: str
    teacher_name: str
    teacher_id: Optional[str] = None
    class_id: str
    class_name: str = UNKNOWN_CLASS_NAME
    day_of_week: str
    schedule_entry_id: str


class ClassPeriodSummary(_CamelModel):
    """Per-class view of a teacher's day."""
    class_id: str
    class_name: str
    assigned_periods: list[int] = Field(default_factory=list)
    marked_periods: list[int] = Field(default_factory=list)
    pending_periods: list[int] = Field(default_factory=list)


class TeacherDailySchedule(_CamelModel):
    """A teacher's assignments across all classes for one date."""
    teacher_id: str
    teacher_name: str
    date: dt.date
    day_of_week: str
    total_periods: int
    assignments: list[PeriodAssignment] = Field(default_factory=list)
    class_summary: list[ClassPeriodSummary] = Field(default_factory=list)


class ClassTeacherSummary(_CamelModel):
    """Who teaches a class on a given day, and when."""
    teacher_id: Optional[str] = None
    teacher_name: str
    periods: list[int] = Field(default_factory=list)
    subjects: list[str] = Field(default_factory=list)


class CacheStats(_CamelModel):
    """Snapshot of cache counters."""
    size: int
    max_size: int
    keys: list[str] = Field(default_factory=list)
    hits: int
    misses: int
    hit_rate: float
    expired_entries: int


class WarmupResult(_CamelModel):
    """Outcome of a cache warmup run."""
    success: int = 0
    failed: int = 0


# =============================================================================
# Configuration Models
# =============================================================================

class CacheConfig(BaseModel):
    """Cache tuning settings."""
    model_config = ConfigDict(extra="forbid")

    ttl_seconds: float = Field(default=300, gt=0, description="Entry lifetime (default 5 minutes)")
    max_size: int = Field(default=1000, ge=1, description="Maximum number of cached keys")
    cleanup_interval_seconds: float = Field(
        default=120, gt=0, description="Expired-entry sweep interval (default 2 minutes)"
    )

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Build a config from PERIODS_* environment variables."""
        values: dict[str, str] = {}
        env_map = {
            "ttl_seconds": "PERIODS_CACHE_TTL_SECONDS",
            "max_size": "PERIODS_CACHE_MAX_SIZE",
            "cleanup_interval_seconds": "PERIODS_CLEANUP_INTERVAL_SECONDS",
        }
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw:
                values[field_name] = raw
        return cls.model_validate(values)
