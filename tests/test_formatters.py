"""Tests for output formatters."""

from __future__ import annotations

import asyncio
import csv
import datetime as dt
import json
from io import StringIO

import pytest
from rich.console import Console

from periods.data.models import CacheStats, ClassTeacherSummary, ScheduleRow
from periods.expander import expand_row
from periods.output.formatters import (
    CSV_COLUMNS,
    assignments_table,
    cache_stats_table,
    class_summary_table,
    class_teachers_table,
    format_csv,
    format_json,
    to_jsonable,
)
from periods.service import PeriodAssignmentService
from periods.data.source import InMemoryRowSource


@pytest.fixture
def assignments():
    row = ScheduleRow(
        id="e1", teacher_id="t1", teacher_name="Ahmad Karimi", class_id="c1",
        class_name="Grade 10A", subject="Mathematics", day_of_week="monday",
        start_time="08:30", hours=2,
    )
    return expand_row(row)


def render(renderable) -> str:
    console = Console(file=StringIO(), width=120)
    console.print(renderable)
    return console.file.getvalue()


class TestJSON:
    """Tests for JSON output."""

    def test_list_uses_camel_case(self, assignments):
        data = json.loads(format_json(assignments))
        assert data[0]["periodNumber"] == 1
        assert data[1]["startTime"] == "9:10 AM"

    def test_single_model(self):
        stats = CacheStats(size=1, max_size=10, hits=0, misses=1, hit_rate=0.0, expired_entries=0)
        assert to_jsonable(stats)["maxSize"] == 10


class TestCSV:
    """Tests for CSV output."""

    def test_rows(self, assignments):
        reader = csv.DictReader(StringIO(format_csv(assignments)))
        rows = list(reader)

        assert reader.fieldnames == CSV_COLUMNS
        assert len(rows) == 2
        assert rows[0]["session"] == "MORNING"
        assert rows[1]["period_number"] == "2"

    def test_no_header(self, assignments):
        text = format_csv(assignments, include_header=False)
        assert not text.startswith("day_of_week")

    def test_none_written_as_empty(self, assignments):
        anonymous = [a.model_copy(update={"teacher_id": None}) for a in assignments]
        rows = list(csv.DictReader(StringIO(format_csv(anonymous))))
        assert rows[0]["teacher_id"] == ""


class TestTables:
    """Tests for rich tables."""

    def test_assignments_table(self, assignments):
        output = render(assignments_table(assignments, title="Monday"))
        assert "Grade 10A" in output
        assert "8:30 AM - 9:10 AM" in output

    def test_class_teachers_table(self):
        teachers = [ClassTeacherSummary(teacher_name="Sara Noori", periods=[4, 5], subjects=["English"])]
        output = render(class_teachers_table(teachers))
        assert "Sara Noori" in output
        assert "4, 5" in output

    def test_cache_stats_table(self):
        stats = CacheStats(size=2, max_size=10, hits=3, misses=1, hit_rate=75.0, expired_entries=0)
        output = render(cache_stats_table(stats))
        assert "2 / 10" in output
        assert "75.00%" in output

    def test_class_summary_table(self, schedule_data):
        service = PeriodAssignmentService(InMemoryRowSource(schedule_data))
        schedule = asyncio.run(service.get_teacher_daily_schedule("t1", dt.date(2024, 9, 2)))

        output = render(class_summary_table(schedule))

        assert "Grade 11B (c2)" in output
        assert "1, 4" in output
