"""Tests for date parsing and the inclusive date window."""

from datetime import date, datetime, timezone

import pytest

from scripts.lib.dates import NO_WINDOW, DateWindow, parse_calendar_date, parse_timestamp
from scripts.lib.errors import ValidationError


class TestParseTimestamp:
    def test_iso_with_z_suffix(self):
        assert parse_timestamp("2024-01-05T10:00:00Z") == datetime(2024, 1, 5, 10, tzinfo=timezone.utc)

    def test_naive_iso(self):
        assert parse_timestamp("2024-01-05T10:00:00") == datetime(2024, 1, 5, 10)

    def test_two_digit_fraction(self):
        assert parse_timestamp("2024-01-10T10:00:00.12+00:00") == datetime(
            2024, 1, 10, 10, 0, 0, 120000, tzinfo=timezone.utc,
        )

    def test_five_digit_fraction_with_z(self):
        assert parse_timestamp("2024-01-10T10:00:00.12345Z").microsecond == 123450

    def test_date_becomes_midnight(self):
        assert parse_timestamp(date(2024, 1, 5)) == datetime(2024, 1, 5)

    def test_epoch_seconds_are_utc(self):
        assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-45"])
    def test_unusable_values(self, value):
        assert parse_timestamp(value) is None


class TestParseCalendarDate:
    def test_valid(self):
        assert parse_calendar_date("2024-02-29", "startDate") == date(2024, 2, 29)

    def test_absent(self):
        assert parse_calendar_date(None, "startDate") is None

    def test_malformed_names_field(self):
        with pytest.raises(ValidationError) as exc:
            parse_calendar_date("01/02/2024", "endDate")
        assert exc.value.field == "endDate"
        assert exc.value.status_code == 400


class TestDateWindow:
    def test_end_is_last_instant_of_day(self):
        window = DateWindow.from_strings("2024-01-01", "2024-01-01")
        assert window.start == datetime(2024, 1, 1, 0, 0)
        assert window.end == datetime(2024, 1, 1, 23, 59, 59, 999000)

    def test_both_bounds_inclusive(self):
        window = DateWindow.from_strings("2024-01-01", "2024-01-01")
        assert window.contains(datetime(2024, 1, 1, 0, 0))
        assert window.contains(datetime(2024, 1, 1, 23, 59, 59, 999000))
        assert not window.contains(datetime(2024, 1, 2, 0, 0))
        assert not window.contains(datetime(2023, 12, 31, 23, 59, 59))

    def test_reversed_dates_rejected(self):
        with pytest.raises(ValidationError):
            DateWindow.from_strings("2024-02-01", "2024-01-01")

    def test_open_ended(self):
        window = DateWindow.from_strings("2024-01-10", None)
        assert window.contains(datetime(2030, 1, 1))
        assert not window.contains(datetime(2024, 1, 9, 23, 59))

    def test_unbounded_contains_everything(self):
        assert NO_WINDOW.is_unbounded
        assert NO_WINDOW.contains(None)
        assert NO_WINDOW.contains(datetime(1999, 1, 1))

    def test_bounded_window_excludes_missing_timestamp(self):
        assert not DateWindow.from_strings("2024-01-01", "2024-01-31").contains(None)

    def test_aware_timestamp_compared_on_its_own_clock(self):
        window = DateWindow.from_strings("2024-01-01", "2024-01-01")
        assert window.contains(datetime.fromisoformat("2024-01-01T22:00:00-05:00"))
        assert not window.contains(datetime.fromisoformat("2024-01-02T01:00:00+01:00"))

    def test_query_bounds(self):
        window = DateWindow.from_strings("2024-01-01", "2024-01-31")
        assert window.as_query_bounds() == ("2024-01-01T00:00:00", "2024-01-31T23:59:59.999000")
        assert NO_WINDOW.as_query_bounds() == (None, None)

    def test_describe(self):
        assert DateWindow.from_strings("2024-01-01", None).describe() == "[2024-01-01 .. -]"
