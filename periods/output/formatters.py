"""
Output formatters for period assignments.

This module provides formatters for different output formats:
- JSON: camelCase documents for API layers
- CSV: Flat assignment rows for spreadsheets
- Console: rich tables for the CLI
"""

from __future__ import annotations

import csv
import json
from io import StringIO
from typing import Sequence, Union

from pydantic import BaseModel
from rich.table import Table

from ..data.models import (
    CacheStats,
    ClassTeacherSummary,
    PeriodAssignment,
    TeacherDailySchedule,
)


# =============================================================================
# JSON Formatter
# =============================================================================

def to_jsonable(value: Union[BaseModel, Sequence[BaseModel]]) -> Union[dict, list]:
    """Dump a model or a list of models with camelCase keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return [item.model_dump(mode="json", by_alias=True) for item in value]


def format_json(value: Union[BaseModel, Sequence[BaseModel]], indent: int = 2) -> str:
    """Convenience function for JSON formatting."""
    return json.dumps(to_jsonable(value), indent=indent)


# =============================================================================
# CSV Formatter
# =============================================================================

CSV_COLUMNS = [
    'day_of_week', 'session', 'period_number', 'start_time', 'end_time',
    'class_id', 'class_name', 'subject', 'teacher_id', 'teacher_name',
    'schedule_entry_id',
]


def format_csv(assignments: Sequence[PeriodAssignment], include_header: bool = True) -> str:
    """Format assignments as CSV text."""
    buffer = StringIO()
    writer = csv.writer(buffer)
    if include_header:
        writer.writerow(CSV_COLUMNS)
    for assignment in assignments:
        data = assignment.model_dump(mode="json")
        writer.writerow(["" if data[c] is None else data[c] for c in CSV_COLUMNS])
    return buffer.getvalue()


# =============================================================================
# Console Tables
# =============================================================================

def assignments_table(assignments: Sequence[PeriodAssignment], title: str | None = None) -> Table:
    """Table of assignments, one row per period."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Day", style="cyan")
    table.add_column("Session")
    table.add_column("Period", justify="right")
    table.add_column("Time")
    table.add_column("Class")
    table.add_column("Subject")
    table.add_column("Teacher")

    for a in assignments:
        table.add_row(
            a.day_of_week.capitalize(),
            a.session.value.capitalize(),
            str(a.period_number),
            f"{a.start_time} - {a.end_time}",
            a.class_name,
            a.subject,
            a.teacher_name,
        )
    return table


def class_summary_table(schedule: TeacherDailySchedule) -> Table:
    """Per-class summary of a teacher's day."""
    table = Table(title="Classes", show_header=True, header_style="bold")
    table.add_column("Class", style="cyan")
    table.add_column("Assigned")
    table.add_column("Marked")
    table.add_column("Pending")

    def periods(values: list[int]) -> str:
        return ", ".join(str(p) for p in values) or "-"

    for summary in schedule.class_summary:
        table.add_row(
            f"{summary.class_name} ({summary.class_id})",
            periods(summary.assigned_periods),
            periods(summary.marked_periods),
            periods(summary.pending_periods),
        )
    return table


def class_teachers_table(teachers: Sequence[ClassTeacherSummary], title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Teacher", style="cyan")
    table.add_column("ID", style="dim")
    table.add_column("Periods")
    table.add_column("Subjects")

    for t in teachers:
        table.add_row(
            t.teacher_name,
            t.teacher_id or "-",
            ", ".join(str(p) for p in t.periods) or "-",
            ", ".join(t.subjects),
        )
    return table


def cache_stats_table(stats: CacheStats) -> Table:
    table = Table(title="Cache", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Entries", f"{stats.size} / {stats.max_size}")
    table.add_row("Expired", str(stats.expired_entries))
    table.add_row("Hits", str(stats.hits))
    table.add_row("Misses", str(stats.misses))
    table.add_row("Hit rate", f"{stats.hit_rate:.2f}%")
    return table
