"""Reset Schedule Engine - Pure logic for the daily reset boundary.

Computes when the recurring streak reset should fire: local midnight in the
reference timezone plus a small safety margin, expressed as an absolute UTC
instant.

The result depends only on the instant passed in and the reference timezone,
never on the host timezone. Day arithmetic is done on calendar dates and then
converted, so DST transitions shift the UTC offset of the fire instant while
its local wall time stays at 00:00 + margin.

The timer that waits for these instants lives in ResetManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from .. import const
from ..utils.dt_utils import as_utc, dt_now_utc, local_date, start_of_local_day

if TYPE_CHECKING:
    from datetime import date, datetime, tzinfo

DEFAULT_SAFETY_MARGIN = timedelta(seconds=const.DEFAULT_RESET_SAFETY_MARGIN_SECONDS)


@dataclass(frozen=True)
class ResetSchedule:
    """Process-wide snapshot of the pending reset.

    Attributes:
        reference_timezone: IANA name of the timezone that defines "a day"
        next_fire_instant: UTC instant of the pending fire
    """

    reference_timezone: str
    next_fire_instant: datetime


class ResetScheduleEngine:
    """Pure logic engine for reset boundaries."""

    @staticmethod
    def fire_instant_for_day(
        day: date,
        tz: tzinfo,
        margin: timedelta = DEFAULT_SAFETY_MARGIN,
    ) -> datetime:
        """UTC fire instant for the boundary that starts calendar day `day`."""
        return as_utc(start_of_local_day(day, tz)) + margin

    @staticmethod
    def next_fire(
        tz: tzinfo,
        now: datetime | None = None,
        margin: timedelta = DEFAULT_SAFETY_MARGIN,
    ) -> datetime:
        """Return the first fire instant strictly after `now`.

        Normally this is tomorrow's local midnight plus margin. Between
        midnight and midnight + margin, today's fire has not happened yet and
        is returned instead.

        Args:
            tz: Reference timezone
            now: Current instant (defaults to the wall clock)
            margin: Delay past midnight before firing

        Returns:
            UTC-aware fire instant

        Example:
            now = 23:59:30 local on Mar 8 → Mar 9 00:01:00 local
        """
        now_utc = as_utc(now) if now is not None else dt_now_utc()
        today = local_date(now_utc, tz)

        todays_fire = ResetScheduleEngine.fire_instant_for_day(today, tz, margin)
        if todays_fire > now_utc:
            return todays_fire
        return ResetScheduleEngine.fire_instant_for_day(
            today + relativedelta(days=1), tz, margin
        )

    @staticmethod
    def next_fire_after(
        tz: tzinfo,
        now: datetime,
        last_fired: datetime | None,
        margin: timedelta = DEFAULT_SAFETY_MARGIN,
    ) -> datetime:
        """Next fire instant that is after both `now` and the last fired boundary.

        Guards exactly-once delivery when the wall clock is stepped backwards
        after a fire: the boundary that already fired is never returned again.
        """
        candidate = ResetScheduleEngine.next_fire(tz, now, margin)
        if last_fired is not None and candidate <= as_utc(last_fired):
            candidate = ResetScheduleEngine.next_fire(tz, last_fired, margin)
        return candidate

    @staticmethod
    def most_recent_fire(
        tz: tzinfo,
        now: datetime,
        margin: timedelta = DEFAULT_SAFETY_MARGIN,
    ) -> datetime:
        """Latest fire instant at or before `now`."""
        now_utc = as_utc(now)
        today = local_date(now_utc, tz)
        todays_fire = ResetScheduleEngine.fire_instant_for_day(today, tz, margin)
        if todays_fire <= now_utc:
            return todays_fire
        return ResetScheduleEngine.fire_instant_for_day(
            today - relativedelta(days=1), tz, margin
        )

    @staticmethod
    def missed_boundary(
        tz: tzinfo,
        now: datetime,
        last_reset: datetime | None,
        margin: timedelta = DEFAULT_SAFETY_MARGIN,
    ) -> datetime | None:
        """Return the latest boundary not covered by last_reset, or None.

        A missing last_reset is treated as unknown rather than missed: a brand
        new deployment has nothing to compensate.
        """
        if last_reset is None:
            return None
        boundary = ResetScheduleEngine.most_recent_fire(tz, now, margin)
        if as_utc(last_reset) < boundary:
            return boundary
        return None
