"""Tests for timestamp parsing and calendar-day comparison."""

from datetime import datetime

import pytz

from dailyb3.utils.dates import is_same_calendar_day, now_timestamp, parse_timestamp

SAO_PAULO = "America/Sao_Paulo"


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_iso_with_offset(self):
        parsed = parse_timestamp("2026-10-18T14:03:00-03:00")
        assert parsed.year == 2026 and parsed.hour == 14
        assert parsed.utcoffset().total_seconds() == -3 * 3600

    def test_iso_zulu(self):
        parsed = parse_timestamp("2026-10-18T17:03:00Z")
        assert parsed.utcoffset().total_seconds() == 0

    def test_naive_is_localized(self):
        parsed = parse_timestamp("2026-10-18", SAO_PAULO)
        assert parsed.tzinfo is not None
        assert parsed.date().isoformat() == "2026-10-18"

    def test_javascript_date_string(self):
        parsed = parse_timestamp(
            "Sun Oct 18 2026 14:03:00 GMT-0300 (Brasilia Standard Time)"
        )
        assert parsed is not None
        assert (parsed.month, parsed.day, parsed.hour) == (10, 18, 14)

    def test_datetime_passthrough(self):
        value = datetime(2026, 10, 18, 9, 0, tzinfo=pytz.utc)
        assert parse_timestamp(value) == value

    def test_garbage(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(42) is None


class TestIsSameCalendarDay:
    """Tests for is_same_calendar_day."""

    def test_time_of_day_ignored(self):
        assert is_same_calendar_day(
            "2026-10-18T08:00:00-03:00", "2026-10-18T23:30:00-03:00", SAO_PAULO
        )

    def test_different_days(self):
        assert not is_same_calendar_day(
            "2026-10-18T08:00:00-03:00", "2026-10-19T08:00:00-03:00", SAO_PAULO
        )

    def test_compared_in_given_timezone(self):
        """01:00 UTC on the 19th is still the 18th in Sao Paulo."""
        assert is_same_calendar_day("2026-10-19T01:00:00Z", "2026-10-18", SAO_PAULO)
        assert not is_same_calendar_day("2026-10-19T01:00:00Z", "2026-10-18", "UTC")

    def test_mixed_formats(self):
        assert is_same_calendar_day(
            "Sun Oct 18 2026 14:03:00 GMT-0300 (Brasilia Standard Time)",
            "2026-10-18",
            SAO_PAULO,
        )

    def test_unparseable_never_matches(self):
        assert not is_same_calendar_day("garbage", "2026-10-18")
        assert not is_same_calendar_day(None, "2026-10-18")


class TestNowTimestamp:
    """Tests for now_timestamp."""

    def test_round_trips_through_parser(self):
        stamp = now_timestamp(SAO_PAULO)
        parsed = parse_timestamp(stamp)
        assert parsed is not None
        assert is_same_calendar_day(stamp, datetime.now(pytz.utc), SAO_PAULO)
