"""Unit tests for ResetScheduleEngine - pure Python logic tests.

Test Categories:
- Next fire instant (margin, day rollover)
- Host timezone independence
- DST transitions (spring forward, fall back)
- Exactly-once guard after a backwards clock step
- Missed boundary detection
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, date, timedelta
import time
from zoneinfo import ZoneInfo

from freezegun import freeze_time
import pytest

from fuelpoints.engines.schedule_engine import ResetScheduleEngine
from tests.helpers import make_local_dt, make_utc_dt

NEW_YORK = ZoneInfo("America/New_York")


@pytest.fixture
def host_tz(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run with a host timezone far from the reference timezone."""
    monkeypatch.setenv("TZ", "Asia/Kolkata")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


# =============================================================================
# Test: Next Fire
# =============================================================================


class TestNextFire:
    """Tests for ResetScheduleEngine.next_fire()."""

    def test_just_before_midnight(self) -> None:
        """Test 23:59:30 local fires at 00:01:00 the next local day."""
        now = make_local_dt(2025, 1, 15, 23, 59, 30)

        fire = ResetScheduleEngine.next_fire(NEW_YORK, now)

        assert fire.astimezone(NEW_YORK) == make_local_dt(2025, 1, 16, 0, 1)
        assert fire.tzinfo is UTC

    def test_inside_margin_fires_today(self) -> None:
        """Test between midnight and midnight+margin, today's fire is pending."""
        now = make_local_dt(2025, 1, 16, 0, 0, 30)

        fire = ResetScheduleEngine.next_fire(NEW_YORK, now)

        assert fire == make_local_dt(2025, 1, 16, 0, 1)

    def test_exactly_at_fire_moves_to_tomorrow(self) -> None:
        """Test the fire instant itself is not 'after now'."""
        now = make_local_dt(2025, 1, 16, 0, 1)

        fire = ResetScheduleEngine.next_fire(NEW_YORK, now)

        assert fire == make_local_dt(2025, 1, 17, 0, 1)

    def test_custom_margin(self) -> None:
        """Test the safety margin is configurable."""
        now = make_local_dt(2025, 1, 15, 12, 0)

        fire = ResetScheduleEngine.next_fire(NEW_YORK, now, timedelta(minutes=5))

        assert fire == make_local_dt(2025, 1, 16, 0, 5)

    def test_input_offset_irrelevant(self) -> None:
        """Test the same instant in UTC and in local time gives the same answer."""
        local = make_local_dt(2025, 1, 15, 23, 59, 30)

        assert ResetScheduleEngine.next_fire(
            NEW_YORK, local
        ) == ResetScheduleEngine.next_fire(NEW_YORK, local.astimezone(UTC))

    @pytest.mark.usefixtures("host_tz")
    def test_host_timezone_independent(self) -> None:
        """Test the result does not depend on the host timezone."""
        now = make_utc_dt(2025, 1, 16, 4, 59, 30)  # 23:59:30 EST

        assert ResetScheduleEngine.next_fire(NEW_YORK, now) == make_utc_dt(
            2025, 1, 16, 5, 1
        )

    @freeze_time("2025-01-15 17:00:00", tz_offset=0)
    def test_defaults_to_wall_clock(self) -> None:
        """Test now defaults to the current UTC instant."""
        assert ResetScheduleEngine.next_fire(NEW_YORK) == make_utc_dt(2025, 1, 16, 5, 1)


# =============================================================================
# Test: DST
# =============================================================================


class TestDaylightSaving:
    """Fire instants across DST transitions."""

    def test_spring_forward(self) -> None:
        """Test fires on either side of the March change keep 00:01 local."""
        first = ResetScheduleEngine.next_fire(NEW_YORK, make_local_dt(2025, 3, 8, 23, 59, 30))
        second = ResetScheduleEngine.next_fire(NEW_YORK, make_local_dt(2025, 3, 9, 23, 59, 30))

        assert first == make_utc_dt(2025, 3, 9, 5, 1)
        assert second == make_utc_dt(2025, 3, 10, 4, 1)
        assert first.astimezone(NEW_YORK).utcoffset() != second.astimezone(
            NEW_YORK
        ).utcoffset()
        assert second - first == timedelta(hours=23)

    def test_fall_back(self) -> None:
        """Test the November change gives a 25 hour gap between fires."""
        first = ResetScheduleEngine.next_fire(NEW_YORK, make_local_dt(2025, 11, 1, 23, 0))
        second = ResetScheduleEngine.next_fire(NEW_YORK, make_local_dt(2025, 11, 2, 23, 0))

        assert first.astimezone(NEW_YORK).time() == second.astimezone(NEW_YORK).time()
        assert second - first == timedelta(hours=25)

    def test_fire_instant_for_day(self) -> None:
        """Test summer and winter fires carry different UTC offsets."""
        winter = ResetScheduleEngine.fire_instant_for_day(date(2025, 1, 16), NEW_YORK)
        summer = ResetScheduleEngine.fire_instant_for_day(date(2025, 7, 16), NEW_YORK)

        assert winter == make_utc_dt(2025, 1, 16, 5, 1)
        assert summer == make_utc_dt(2025, 7, 16, 4, 1)


# =============================================================================
# Test: Exactly Once
# =============================================================================


class TestNextFireAfter:
    """Tests for ResetScheduleEngine.next_fire_after()."""

    def test_no_last_fired(self) -> None:
        """Test behaves like next_fire without history."""
        now = make_local_dt(2025, 1, 15, 12, 0)

        assert ResetScheduleEngine.next_fire_after(
            NEW_YORK, now, None
        ) == ResetScheduleEngine.next_fire(NEW_YORK, now)

    def test_clock_stepped_back_after_fire(self) -> None:
        """Test a boundary that already fired is never returned again."""
        fired = make_local_dt(2025, 1, 16, 0, 1)
        stepped_back = make_local_dt(2025, 1, 15, 23, 58)

        fire = ResetScheduleEngine.next_fire_after(NEW_YORK, stepped_back, fired)

        assert fire == make_local_dt(2025, 1, 17, 0, 1)


# =============================================================================
# Test: Missed Boundaries
# =============================================================================


class TestMissedBoundary:
    """Tests for most_recent_fire() and missed_boundary()."""

    def test_most_recent_fire_before_margin(self) -> None:
        """Test before today's fire, the most recent one is yesterday's."""
        now = make_local_dt(2025, 1, 16, 0, 0, 30)

        assert ResetScheduleEngine.most_recent_fire(NEW_YORK, now) == make_local_dt(
            2025, 1, 15, 0, 1
        )

    def test_unknown_last_reset_is_not_missed(self) -> None:
        """Test a fresh deployment has nothing to compensate."""
        now = make_local_dt(2025, 1, 16, 12, 0)

        assert ResetScheduleEngine.missed_boundary(NEW_YORK, now, None) is None

    def test_recent_reset_not_missed(self) -> None:
        """Test a reset after today's boundary means nothing was missed."""
        now = make_local_dt(2025, 1, 16, 12, 0)
        last_reset = make_local_dt(2025, 1, 16, 0, 1, 2)

        assert ResetScheduleEngine.missed_boundary(NEW_YORK, now, last_reset) is None

    def test_stale_reset_reports_latest_boundary(self) -> None:
        """Test downtime over midnight reports today's boundary."""
        now = make_local_dt(2025, 1, 16, 12, 0)
        last_reset = make_local_dt(2025, 1, 14, 0, 1, 2)

        assert ResetScheduleEngine.missed_boundary(
            NEW_YORK, now, last_reset
        ) == make_local_dt(2025, 1, 16, 0, 1)
