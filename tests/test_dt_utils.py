"""Tests for date/time utilities."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from fuelpoints.exceptions import InvalidInputError
from fuelpoints.utils.dt_utils import (
    as_utc,
    days_until,
    dt_parse,
    local_date,
    next_local_midnight,
    require_aware,
    start_of_local_day,
)
from tests.helpers import make_local_dt, make_utc_dt

NEW_YORK = ZoneInfo("America/New_York")


class TestConversions:
    """Tests for aware-datetime helpers."""

    def test_naive_rejected(self) -> None:
        """Test naive datetimes raise InvalidInputError."""
        with pytest.raises(InvalidInputError):
            require_aware(datetime(2025, 1, 1))
        with pytest.raises(InvalidInputError):
            as_utc(datetime(2025, 1, 1))

    def test_local_date(self) -> None:
        """Test late evening UTC-5 is the previous UTC day locally."""
        assert local_date(make_utc_dt(2025, 3, 10, 3, 30), NEW_YORK) == date(2025, 3, 9)


class TestDayBoundaries:
    """Tests for start_of_local_day() and next_local_midnight()."""

    def test_start_of_local_day_offsets(self) -> None:
        """Test winter and summer midnights carry their own offsets."""
        winter = start_of_local_day(date(2025, 1, 15), NEW_YORK)
        summer = start_of_local_day(date(2025, 7, 15), NEW_YORK)

        assert winter.utcoffset() == timedelta(hours=-5)
        assert summer.utcoffset() == timedelta(hours=-4)

    def test_next_local_midnight_across_spring_forward(self) -> None:
        """Test the 23-hour day still rolls to the next local midnight."""
        result = next_local_midnight(make_local_dt(2025, 3, 9, 0, 30), NEW_YORK)

        assert result == make_local_dt(2025, 3, 10)
        assert result.hour == 0


class TestParsingAndDurations:
    """Tests for dt_parse() and days_until()."""

    def test_parse_naive_string_uses_reference_tz(self) -> None:
        """Test naive ISO strings are local times."""
        assert dt_parse("2025-04-15T08:00:00", NEW_YORK) == make_local_dt(2025, 4, 15, 8)

    def test_parse_date(self) -> None:
        """Test dates map to local midnight."""
        assert dt_parse(date(2025, 4, 15), NEW_YORK) == make_local_dt(2025, 4, 15)

    def test_parse_garbage(self) -> None:
        """Test unparseable input returns None."""
        assert dt_parse("not a date", NEW_YORK) is None
        assert dt_parse(None, NEW_YORK) is None

    def test_days_until(self) -> None:
        """Test ceiling day counts."""
        now = make_utc_dt(2025, 1, 1)

        assert days_until(now + timedelta(days=6, hours=1), now) == 7
        assert days_until(now + timedelta(days=7), now) == 7
        assert days_until(now - timedelta(seconds=1), now) == 0
