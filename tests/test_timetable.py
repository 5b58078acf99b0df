"""Tests for time-to-period resolution."""

from __future__ import annotations

from datetime import time

import pytest

from periods.data.models import Session
from periods.timetable import (
    TIMETABLE,
    format_clock,
    parse_time_of_day,
    period_to_time,
    resolve_slot,
    session_for_time,
    time_to_period,
)


MORNING_STARTS = ["08:30", "09:10", "09:50", "10:45", "11:25", "12:05"]
AFTERNOON_STARTS = ["13:15", "13:55", "14:35", "15:30", "16:10", "16:50"]


class TestParsing:
    """Tests for time parsing and formatting helpers."""

    def test_parse_hh_mm(self):
        assert parse_time_of_day("08:30") == time(8, 30)

    def test_parse_hh_mm_ss(self):
        assert parse_time_of_day("15:30:45") == time(15, 30, 45)

    def test_parse_passes_time_through(self):
        assert parse_time_of_day(time(9, 10)) == time(9, 10)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_time_of_day("noon")

    def test_format_clock(self):
        assert format_clock(510) == "8:30 AM"
        assert format_clock(725) == "12:05 PM"
        assert format_clock(970) == "4:10 PM"
        assert format_clock(0) == "12:00 AM"


class TestTimeToPeriod:
    """Tests for time_to_period and resolve_slot."""

    @pytest.mark.parametrize("start,expected", list(zip(MORNING_STARTS, range(1, 7))))
    def test_morning_starts(self, start, expected):
        assert time_to_period(start) == expected
        assert resolve_slot(start) == (Session.MORNING, expected)

    @pytest.mark.parametrize("start,expected", list(zip(AFTERNOON_STARTS, range(1, 7))))
    def test_afternoon_starts(self, start, expected):
        assert time_to_period(start) == expected
        assert resolve_slot(start) == (Session.AFTERNOON, expected)

    def test_time_inside_period(self):
        """A time part-way through a period resolves to that period."""
        assert time_to_period("09:30") == 2
        assert time_to_period("16:49") == 5

    def test_afternoon_is_not_a_flat_day(self):
        """3:30 PM is afternoon period 4, not period 7 of a single day."""
        assert time_to_period("15:30") == 4

    @pytest.mark.parametrize("value", ["07:00", "10:35", "12:45", "13:00", "15:20", "17:30", "23:59"])
    def test_outside_periods_falls_back_to_one(self, value):
        assert resolve_slot(value) is None
        assert time_to_period(value) == 1

    def test_accepts_seconds(self):
        assert time_to_period("14:35:00") == 3


class TestSessionForTime:
    """Tests for the hour-based session heuristic."""

    def test_before_one_pm_is_morning(self):
        assert session_for_time("12:59") == Session.MORNING

    def test_from_one_pm_is_afternoon(self):
        assert session_for_time("13:00") == Session.AFTERNOON

    @pytest.mark.parametrize("start", MORNING_STARTS + AFTERNOON_STARTS)
    def test_agrees_with_table_on_period_starts(self, start):
        session, _ = resolve_slot(start)
        assert session_for_time(start) == session


class TestPeriodToTime:
    """Tests for canonical period times."""

    def test_morning_table(self):
        expected = [
            ("8:30 AM", "9:10 AM"),
            ("9:10 AM", "9:50 AM"),
            ("9:50 AM", "10:30 AM"),
            ("10:45 AM", "11:25 AM"),
            ("11:25 AM", "12:05 PM"),
            ("12:05 PM", "12:45 PM"),
        ]
        for number, (start, end) in enumerate(expected, start=1):
            times = period_to_time(number, Session.MORNING)
            assert (times.start_time, times.end_time) == (start, end)

    def test_afternoon_period_four(self):
        times = period_to_time(4, Session.AFTERNOON)
        assert times.start_time == "3:30 PM"
        assert times.end_time == "4:10 PM"

    def test_unknown_period_falls_back_to_first(self):
        assert period_to_time(9, Session.AFTERNOON) == period_to_time(1, Session.AFTERNOON)
        assert period_to_time(0, Session.MORNING) == period_to_time(1, Session.MORNING)

    @pytest.mark.parametrize("session,starts", [
        (Session.MORNING, MORNING_STARTS),
        (Session.AFTERNOON, AFTERNOON_STARTS),
    ])
    def test_round_trip_at_period_starts(self, session, starts):
        for start in starts:
            times = period_to_time(time_to_period(start), session)
            expected = period_to_time(starts.index(start) + 1, session)
            assert times == expected
            assert times.start_time == format_clock(parse_time_of_day(start).hour * 60 + parse_time_of_day(start).minute)

    def test_table_shape(self):
        """Six 40-minute periods per session with a 15-minute break after period 3."""
        for periods in TIMETABLE.values():
            assert len(periods) == 6
            assert all(end - start == 40 for start, end in periods)
            assert periods[3][0] - periods[2][1] == 15
