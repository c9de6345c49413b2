"""Unit tests for date helpers."""

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from src.core.dates import (
    add_months,
    ceil_days,
    end_of_day,
    last_day_of_month,
    parse_datetime,
    round_half_up,
    start_of_day,
    utc_date_key,
)


@pytest.mark.unit
class TestParseDatetime:
    """Tests for parse_datetime function."""

    def test_iso_string_with_zone(self):
        """Test ISO strings keep their offset."""
        parsed = parse_datetime("2024-03-01T10:00:00+02:00")

        assert parsed == datetime(2024, 3, 1, 8, 0, tzinfo=UTC)

    def test_naive_values_are_utc(self):
        """Test naive strings and datetimes are treated as UTC."""
        assert parse_datetime("2024-03-01") == datetime(2024, 3, 1, tzinfo=UTC)
        assert parse_datetime(datetime(2024, 3, 1, 9)) == datetime(2024, 3, 1, 9, tzinfo=UTC)

    def test_date_objects(self):
        """Test plain dates become midnight UTC."""
        assert parse_datetime(date(2024, 3, 1)) == datetime(2024, 3, 1, tzinfo=UTC)

    def test_free_form_fallback(self):
        """Test non-ISO strings go through the free-form parser."""
        assert parse_datetime("March 5, 2024") == datetime(2024, 3, 5, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "garbage", "not a date", 12345])
    def test_unparsable_values(self, value):
        """Test empty or malformed values parse to None."""
        assert parse_datetime(value) is None


@pytest.mark.unit
class TestDayArithmetic:
    """Tests for day boundary and duration helpers."""

    def test_day_bounds(self):
        """Test start and end of day cover the whole calendar day."""
        moment = datetime(2024, 3, 15, 13, 45, 10, tzinfo=UTC)

        assert start_of_day(moment) == datetime(2024, 3, 15, tzinfo=UTC)
        assert end_of_day(moment) == datetime(2024, 3, 15, 23, 59, 59, 999999, tzinfo=UTC)

    def test_ceil_days_rounds_partial_days_up(self):
        """Test any partial day counts as a whole day."""
        start = datetime(2024, 3, 1, tzinfo=UTC)

        assert ceil_days(start, start) == 0
        assert ceil_days(start, start + timedelta(hours=1)) == 1
        assert ceil_days(start, start + timedelta(days=2)) == 2
        assert ceil_days(start, start + timedelta(days=2, seconds=1)) == 3

    def test_utc_date_key_converts_zone(self):
        """Test the date key is the UTC calendar day."""
        late_evening = datetime(2024, 3, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))

        assert utc_date_key(late_evening) == "2024-03-02"


@pytest.mark.unit
class TestMonthArithmetic:
    """Tests for add_months and last_day_of_month."""

    def test_add_months_crosses_years(self):
        """Test month shifts wrap around year boundaries."""
        assert add_months(datetime(2024, 1, 31, tzinfo=UTC), -1) == datetime(2023, 12, 1, tzinfo=UTC)
        assert add_months(datetime(2024, 11, 15, tzinfo=UTC), 2) == datetime(2025, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize(
        ("moment", "last_day"),
        [
            (datetime(2024, 2, 10, tzinfo=UTC), 29),
            (datetime(2023, 2, 10, tzinfo=UTC), 28),
            (datetime(2024, 4, 30, tzinfo=UTC), 30),
            (datetime(2024, 12, 1, tzinfo=UTC), 31),
        ],
    )
    def test_last_day_of_month(self, moment, last_day):
        """Test month lengths including leap years."""
        assert last_day_of_month(moment).day == last_day


@pytest.mark.unit
class TestRoundHalfUp:
    """Tests for round_half_up function."""

    @pytest.mark.parametrize(("value", "expected"), [(2.5, 3), (3.5, 4), (0.5, 1), (2.49, 2), (-0.5, 0), (96.8, 97)])
    def test_halves_round_up(self, value, expected):
        """Test halves always round towards positive infinity."""
        assert round_half_up(value) == expected
