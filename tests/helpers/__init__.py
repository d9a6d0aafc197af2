"""Test helpers for Fuel Points tests.

    from tests.helpers import FakeClock, make_local_dt, make_completion, boost_days
"""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from fuelpoints import const
from fuelpoints.type_defs import ActionCompletion

NEW_YORK = ZoneInfo("America/New_York")


def make_local_dt(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    tz: ZoneInfo = NEW_YORK,
) -> datetime:
    """Aware datetime at a local wall time."""
    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


def make_utc_dt(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0
) -> datetime:
    """Aware UTC datetime."""
    return datetime(year, month, day, hour, minute, second, tzinfo=UTC)


def make_completion(
    completed_at: datetime,
    action_kind: str = const.ACTION_KIND_BOOST,
    action_id: str = "cold-plunge",
    player_id: str = "player-1",
    awarded_fp: int = 5,
) -> ActionCompletion:
    """Build an ActionCompletion with test defaults."""
    return ActionCompletion(
        player_id=player_id,
        action_kind=action_kind,
        action_id=action_id,
        completed_at=completed_at,
        awarded_fp=awarded_fp,
    )


def boost_days(
    first_day: date,
    count: int,
    tz: ZoneInfo = NEW_YORK,
    at: time = time(9, 0),
    player_id: str = "player-1",
) -> list[ActionCompletion]:
    """One boost per consecutive local day starting at first_day."""
    return [
        make_completion(
            datetime.combine(first_day + timedelta(days=offset), at, tzinfo=tz),
            action_id=f"boost-{offset}",
            player_id=player_id,
        )
        for offset in range(count)
    ]


class FakeClock:
    """Wall clock that only moves when told to.

    sleep() advances the clock by the requested amount and yields to the
    event loop, so reset loops run at full speed in tests.
    """

    def __init__(self, start: datetime) -> None:
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        """Current fake instant."""
        return self._now

    def set(self, value: datetime) -> None:
        """Jump to an instant (forwards or backwards)."""
        self._now = value

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta built from kwargs."""
        self._now = self._now + timedelta(**kwargs)
        return self._now

    async def sleep(self, seconds: float) -> None:
        """Record the requested sleep, advance the clock, yield once."""
        self.sleeps.append(seconds)
        self._now = self._now + timedelta(seconds=seconds)
        await asyncio.sleep(0)
