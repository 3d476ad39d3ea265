"""
Unit tests for the dates module.
Tests local calendar-day arithmetic and half-up rounding.
"""

import pytest
from datetime import date, datetime, timedelta, timezone

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from tracker.core.dates import (
    add_local_days,
    days_between_local_dates,
    format_local_date,
    js_weekday,
    local_date_range,
    parse_local_date,
    round_half_up,
    start_of_local_day,
    to_instant,
    to_local_datetime,
    week_start_for,
)


class TestRoundHalfUp:
    """Tests for half-up rounding."""

    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_negative_half_rounds_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_whole_result_is_int(self):
        assert isinstance(round_half_up(16.7), int)
        assert round_half_up(16.7) == 17

    def test_one_decimal(self):
        assert round_half_up(0.25, 1) == 0.3
        assert round_half_up(-0.25, 1) == -0.2

    def test_two_decimals(self):
        assert round_half_up(17.5, 2) == 17.5
        assert round_half_up(66.666666, 2) == 66.67


class TestLocalDateStrings:
    """Tests for YYYY-MM-DD formatting and parsing."""

    def test_format_date(self):
        assert format_local_date(date(2024, 3, 5)) == "2024-03-05"

    def test_format_naive_datetime(self):
        assert format_local_date(datetime(2024, 12, 31, 23, 59)) == "2024-12-31"

    def test_parse_is_local_midnight(self):
        parsed = parse_local_date("2024-06-10")
        assert parsed == datetime(2024, 6, 10, 0, 0)
        assert parsed.tzinfo is None

    def test_add_days_across_month_and_year(self):
        assert add_local_days("2024-01-31", 1) == "2024-02-01"
        assert add_local_days("2024-12-31", 1) == "2025-01-01"
        assert add_local_days("2024-03-01", -1) == "2024-02-29"

    def test_date_range(self):
        assert list(local_date_range("2024-02-27", 4)) == [
            "2024-02-27", "2024-02-28", "2024-02-29", "2024-03-01",
        ]


class TestDatetimeNormalization:
    """Tests for converting mixed inputs to local datetimes."""

    def test_date_only_string_is_local_day(self):
        assert to_local_datetime("2024-06-10") == datetime(2024, 6, 10)

    def test_aware_value_converted_to_local(self):
        aware = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
        expected = aware.astimezone().replace(tzinfo=None)
        assert to_local_datetime(aware) == expected
        assert to_local_datetime("2024-06-10T12:00:00+00:00") == expected

    def test_to_instant_is_aware(self):
        assert to_instant("2024-06-10").tzinfo is not None
        assert to_instant(datetime(2024, 6, 10, 8)).tzinfo is not None

    def test_instants_order_mixed_inputs(self):
        earlier = datetime(2024, 6, 10, 8, 0)
        later = (earlier + timedelta(hours=1)).astimezone()
        assert to_instant(earlier) < to_instant(later)

    def test_start_of_day(self):
        assert start_of_local_day(datetime(2024, 6, 10, 17, 45)) == datetime(2024, 6, 10)


class TestDaysBetween:
    """Tests for whole local calendar days between two moments."""

    def test_same_day_is_zero(self):
        assert days_between_local_dates(datetime(2024, 6, 10, 1), datetime(2024, 6, 10, 23)) == 0

    def test_just_past_midnight_is_one(self):
        start = datetime(2024, 6, 10, 23, 55)
        end = datetime(2024, 6, 11, 0, 5)
        assert days_between_local_dates(start, end) == 1

    def test_end_before_start_clamps_to_zero(self):
        assert days_between_local_dates("2024-06-12", "2024-06-10") == 0

    def test_counts_calendar_days_across_month(self):
        assert days_between_local_dates("2024-02-25", "2024-03-02") == 6


class TestWeekdays:
    """Tests for Sunday-based weekday numbers and week starts."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-06-09", 0),  # Sunday
        ("2024-06-10", 1),  # Monday
        ("2024-06-15", 6),  # Saturday
    ])
    def test_js_weekday(self, value, expected):
        assert js_weekday(value) == expected

    def test_monday_week_start(self):
        assert week_start_for("2024-06-13", 1) == "2024-06-10"
        assert week_start_for("2024-06-16", 1) == "2024-06-10"
        assert week_start_for("2024-06-10", 1) == "2024-06-10"

    def test_sunday_week_start(self):
        assert week_start_for("2024-06-13", 0) == "2024-06-09"
        assert week_start_for("2024-06-09", 0) == "2024-06-09"
