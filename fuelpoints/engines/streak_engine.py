"""Streak Engine - Pure logic for burn streaks and streak bonuses.

This engine provides stateless, pure Python functions for:
- Qualifying-day extraction from a completion history (reference timezone)
- Burn streak length as of a calendar date
- One-time bonus FP at streak milestones (3, 7, 21 days)

PURITY REQUIREMENT: Output depends only on (history, as_of, tz). The stored
streak counter in the progress store is a cache; this engine is the source
of truth when the two disagree (e.g. after a missed midnight reset).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import local_date

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import tzinfo

    from ..type_defs import ActionCompletion


@dataclass(frozen=True)
class StreakResult:
    """Burn streak state as of a calendar date.

    Attributes:
        streak_days: Consecutive qualifying days ending today (if today
            qualifies) or yesterday (otherwise); 0 when broken
        bonus_fp: Bonus earned on as_of itself (a milestone reached today)
        cumulative_bonus_fp: Total bonus earned by the current streak run
        qualified_today: Whether as_of already has a qualifying action
    """

    streak_days: int
    bonus_fp: int
    cumulative_bonus_fp: int
    qualified_today: bool


class StreakEngine:
    """Pure logic engine for burn streaks.

    A day qualifies when at least one boost was completed on that calendar
    day in the reference timezone. A single missed day breaks the run; the
    next qualifying day starts a new run at 1, and every milestone bonus is
    available again for the new run.
    """

    QUALIFYING_KINDS: frozenset[str] = frozenset({const.ACTION_KIND_BOOST})

    @staticmethod
    def qualifying_days(
        history: Iterable[ActionCompletion],
        tz: tzinfo,
    ) -> set[date]:
        """Return the local calendar days with at least one qualifying action."""
        return {
            local_date(completion.completed_at, tz)
            for completion in history
            if completion.action_kind in StreakEngine.QUALIFYING_KINDS
        }

    @staticmethod
    def bonus_for_day(
        streak_days: int,
        schedule: Mapping[int, int] | None = None,
    ) -> int:
        """Bonus granted on the day a run reaches exactly `streak_days`.

        Examples:
            bonus_for_day(3) → 5
            bonus_for_day(4) → 0
            bonus_for_day(21) → 100
        """
        schedule = const.STREAK_BONUS_SCHEDULE if schedule is None else schedule
        return schedule.get(streak_days, 0)

    @staticmethod
    def next_threshold(
        streak_days: int,
        schedule: Mapping[int, int] | None = None,
    ) -> int | None:
        """Next milestone length above streak_days, or None past the last one."""
        schedule = const.STREAK_BONUS_SCHEDULE if schedule is None else schedule
        upcoming = [days for days in schedule if days > streak_days]
        return min(upcoming) if upcoming else None

    @staticmethod
    def compute_streak(
        history: Iterable[ActionCompletion],
        as_of: date,
        tz: tzinfo,
        schedule: Mapping[int, int] | None = None,
    ) -> StreakResult:
        """Compute the burn streak and bonuses as of a calendar date.

        Completions after as_of are ignored so replays of a past day produce
        the same answer they produced on that day.

        Args:
            history: Player completions in any order
            as_of: "Today" in the reference timezone
            tz: Reference timezone used to bucket completions into days
            schedule: Milestone -> bonus map (default const.STREAK_BONUS_SCHEDULE)

        Returns:
            StreakResult for as_of
        """
        schedule = const.STREAK_BONUS_SCHEDULE if schedule is None else schedule
        days = {
            day
            for day in StreakEngine.qualifying_days(history, tz)
            if day <= as_of
        }

        qualified_today = as_of in days
        cursor = as_of if qualified_today else as_of - timedelta(days=1)

        streak_days = 0
        while cursor in days:
            streak_days += 1
            cursor -= timedelta(days=1)

        # Each milestone is crossed at most once per run
        cumulative = sum(
            bonus for length, bonus in schedule.items() if length <= streak_days
        )
        bonus_today = (
            StreakEngine.bonus_for_day(streak_days, schedule) if qualified_today else 0
        )

        return StreakResult(
            streak_days=streak_days,
            bonus_fp=bonus_today,
            cumulative_bonus_fp=cumulative,
            qualified_today=qualified_today,
        )
