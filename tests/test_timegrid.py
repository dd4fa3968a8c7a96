"""Tests for calendar date and wall-clock helpers."""

from datetime import date, datetime, time

from meetslot.timegrid import (
    add_minutes,
    combine,
    format_date,
    format_display,
    format_time_of_day,
    is_before,
    is_valid_date,
    is_valid_time_of_day,
    parse_date,
    parse_time_of_day,
)

NOW = datetime(2025, 3, 10, 8, 17, 42)


class TestParseDate:
    def test_parses_iso_date(self):
        assert parse_date("2025-03-14") == date(2025, 3, 14)

    def test_strips_whitespace(self):
        assert parse_date(" 2025-03-14 ") == date(2025, 3, 14)

    def test_malformed_falls_back_to_now(self):
        assert parse_date("14/03/2025", now=NOW) == NOW.date()

    def test_impossible_date_falls_back_to_now(self):
        assert parse_date("2025-02-30", now=NOW) == NOW.date()

    def test_validity_signal(self):
        assert is_valid_date("2025-03-14")
        assert not is_valid_date("2025-3-14")
        assert not is_valid_date("2025-02-30")
        assert not is_valid_date("")


class TestParseTimeOfDay:
    def test_parses_hh_mm(self):
        assert parse_time_of_day("09:30") == time(9, 30)

    def test_malformed_falls_back_to_current_minute(self):
        assert parse_time_of_day("9.30am", now=NOW) == time(8, 17)

    def test_out_of_range_falls_back(self):
        assert parse_time_of_day("25:00", now=NOW) == time(8, 17)

    def test_validity_signal(self):
        assert is_valid_time_of_day("23:45")
        assert not is_valid_time_of_day("9:30")
        assert not is_valid_time_of_day("24:00")
        assert not is_valid_time_of_day("noon")


class TestFormatting:
    def test_format_time_pads(self):
        assert format_time_of_day(time(9, 5)) == "09:05"

    def test_format_date(self):
        assert format_date(date(2025, 3, 4)) == "2025-03-04"

    def test_format_display_morning(self):
        assert format_display(date(2025, 3, 14), time(9, 30)) == "Friday, March 14, 2025 at 9:30 AM"

    def test_format_display_afternoon(self):
        assert format_display(date(2025, 3, 14), time(13, 0)) == "Friday, March 14, 2025 at 1:00 PM"


class TestArithmetic:
    def test_add_minutes_crosses_hour(self):
        start = combine(date(2025, 3, 14), time(9, 45))
        assert add_minutes(start, 30) == datetime(2025, 3, 14, 10, 15)

    def test_add_minutes_crosses_midnight(self):
        start = combine(date(2025, 3, 14), time(23, 45))
        assert add_minutes(start, 30) == datetime(2025, 3, 15, 0, 15)

    def test_is_before_strict(self):
        a = datetime(2025, 3, 14, 9, 0)
        assert is_before(a, add_minutes(a, 1))
        assert not is_before(a, a)
