"""Shared fixtures: a controllable clock and a small school schedule."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from periods.data.models import ScheduleData


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 9, 2, 8, 0, tzinfo=timezone.utc)  # a Monday

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def schedule_dict() -> dict:
    """Schedule data as it appears in a JSON file (camelCase keys)."""
    return {
        "teachers": [
            {"id": "t1", "firstName": "Ahmad", "lastName": "Karimi"},
            {"id": "t2", "firstName": "Sara", "lastName": "Noori"},
            {"id": "t3", "firstName": "Omid", "lastName": "Rahimi", "status": "INACTIVE"},
        ],
        "classes": [
            {"id": "c1", "name": "Grade 10A"},
            {"id": "c2", "name": "Grade 11B"},
        ],
        "scheduleEntries": [
            {
                "id": "e1", "teacherId": "t1", "teacherName": "Ahmad Karimi",
                "classId": "c1", "subject": "Mathematics", "dayOfWeek": "monday",
                "startTime": "08:30", "endTime": "10:30", "hours": 3,
            },
            {
                "id": "e2", "teacherId": "t1", "teacherName": "Ahmad Karimi",
                "classId": "c1", "subject": "Physics", "dayOfWeek": "monday",
                "startTime": "11:25:00", "endTime": "12:45:00", "hours": 2,
            },
            {
                "id": "e3", "teacherId": "t2", "teacherName": "Sara Noori",
                "classId": "c1", "subject": "English", "dayOfWeek": "Monday",
                "startTime": "10:45", "endTime": "11:25", "hours": 1,
            },
            {
                "id": "e4", "teacherId": "t1", "teacherName": "Ahmad Karimi",
                "classId": "c2", "subject": "Mathematics", "dayOfWeek": "monday",
                "startTime": "15:30", "endTime": "16:10", "hours": 1,
            },
            {
                "id": "e5", "teacherId": None, "teacherName": "Ahmad Karimi",
                "classId": "c2", "subject": "Chemistry", "dayOfWeek": "monday",
                "startTime": "13:15", "endTime": "13:55",
            },
            {
                "id": "e6", "teacherId": "t2", "teacherName": "Sara Noori",
                "classId": "c2", "subject": "English", "dayOfWeek": "tuesday",
                "startTime": "09:10", "endTime": "09:50", "hours": 1,
            },
        ],
    }


@pytest.fixture
def schedule_data(schedule_dict) -> ScheduleData:
    from periods.data.loader import convert_keys_to_snake_case
    return ScheduleData.model_validate(convert_keys_to_snake_case(schedule_dict))
