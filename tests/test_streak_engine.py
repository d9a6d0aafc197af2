"""Unit tests for StreakEngine - pure Python logic tests.

Test Categories:
- Qualifying day bucketing in the reference timezone
- Streak length (today vs yesterday anchoring)
- Breaks and rebuilds
- Milestone bonuses (3, 7, 21)
"""

from __future__ import annotations

from datetime import date, time
import random
from zoneinfo import ZoneInfo

import pytest

from fuelpoints import const
from fuelpoints.engines.streak_engine import StreakEngine
from tests.helpers import boost_days, make_completion, make_utc_dt

NEW_YORK = ZoneInfo("America/New_York")
JAN_1 = date(2025, 1, 1)

# =============================================================================
# Test: Qualifying Days
# =============================================================================


class TestQualifyingDays:
    """Tests for StreakEngine.qualifying_days()."""

    def test_buckets_by_reference_timezone(self) -> None:
        """Test a 03:30 UTC boost counts toward the previous New York day."""
        history = [make_completion(make_utc_dt(2025, 3, 10, 3, 30))]

        assert StreakEngine.qualifying_days(history, NEW_YORK) == {date(2025, 3, 9)}

    def test_only_boosts_qualify(self) -> None:
        """Test quests and assessments do not count as burn days."""
        history = [
            make_completion(
                make_utc_dt(2025, 1, 2, 15), action_kind=const.ACTION_KIND_QUEST
            ),
            make_completion(
                make_utc_dt(2025, 1, 3, 15), action_kind=const.ACTION_KIND_ASSESSMENT
            ),
        ]

        assert StreakEngine.qualifying_days(history, NEW_YORK) == set()


# =============================================================================
# Test: Streak Length
# =============================================================================


class TestComputeStreak:
    """Tests for StreakEngine.compute_streak()."""

    def test_empty_history(self) -> None:
        """Test no history means no streak."""
        result = StreakEngine.compute_streak([], JAN_1, NEW_YORK)

        assert result.streak_days == 0
        assert result.bonus_fp == 0
        assert result.cumulative_bonus_fp == 0
        assert not result.qualified_today

    def test_streak_ending_today(self) -> None:
        """Test three consecutive days through today."""
        history = boost_days(JAN_1, 3)

        result = StreakEngine.compute_streak(history, date(2025, 1, 3), NEW_YORK)

        assert result.streak_days == 3
        assert result.qualified_today

    def test_streak_ending_yesterday_still_counts(self) -> None:
        """Test today without a boost yet keeps yesterday's streak alive."""
        history = boost_days(JAN_1, 3)

        result = StreakEngine.compute_streak(history, date(2025, 1, 4), NEW_YORK)

        assert result.streak_days == 3
        assert not result.qualified_today
        assert result.bonus_fp == 0

    def test_missed_day_breaks_streak(self) -> None:
        """Test a full missed day resets the streak to 0."""
        history = boost_days(JAN_1, 5)

        result = StreakEngine.compute_streak(history, date(2025, 1, 7), NEW_YORK)

        assert result.streak_days == 0

    def test_rebuilds_from_one_after_break(self) -> None:
        """Test a boost after a break starts a new run at 1."""
        history = boost_days(JAN_1, 5) + boost_days(date(2025, 1, 7), 1)

        result = StreakEngine.compute_streak(history, date(2025, 1, 7), NEW_YORK)

        assert result.streak_days == 1

    def test_multiple_boosts_same_day_count_once(self) -> None:
        """Test several boosts on one day are a single qualifying day."""
        history = boost_days(JAN_1, 1) + boost_days(JAN_1, 1, at=time(18, 0))

        result = StreakEngine.compute_streak(history, JAN_1, NEW_YORK)

        assert result.streak_days == 1

    def test_future_completions_ignored(self) -> None:
        """Test replaying a past day ignores later completions."""
        history = boost_days(JAN_1, 10)

        result = StreakEngine.compute_streak(history, date(2025, 1, 4), NEW_YORK)

        assert result.streak_days == 4

    def test_history_order_irrelevant(self) -> None:
        """Test the result is the same for shuffled history."""
        history = boost_days(JAN_1, 8)
        shuffled = history[:]
        random.Random(7).shuffle(shuffled)

        as_of = date(2025, 1, 8)
        assert StreakEngine.compute_streak(
            history, as_of, NEW_YORK
        ) == StreakEngine.compute_streak(shuffled, as_of, NEW_YORK)


# =============================================================================
# Test: Bonuses
# =============================================================================


class TestStreakBonuses:
    """Tests for milestone bonuses."""

    @pytest.mark.parametrize(
        ("days", "expected"), [(1, 0), (3, 5), (4, 0), (7, 10), (21, 100), (22, 0)]
    )
    def test_bonus_for_day(self, days: int, expected: int) -> None:
        """Test the bonus step function."""
        assert StreakEngine.bonus_for_day(days) == expected

    @pytest.mark.parametrize(
        ("days", "expected"), [(0, 3), (3, 7), (6, 7), (7, 21), (21, None)]
    )
    def test_next_threshold(self, days: int, expected: int | None) -> None:
        """Test the next milestone shown to the player."""
        assert StreakEngine.next_threshold(days) == expected

    def test_bonus_awarded_on_crossing_day(self) -> None:
        """Test day 3 of a run earns the 5 FP bonus."""
        history = boost_days(JAN_1, 3)

        result = StreakEngine.compute_streak(history, date(2025, 1, 3), NEW_YORK)

        assert result.bonus_fp == 5
        assert result.cumulative_bonus_fp == 5

    def test_twenty_one_day_run_totals_115(self) -> None:
        """Test 21 unbroken days earn 5 + 10 + 100."""
        history = boost_days(JAN_1, 21)

        result = StreakEngine.compute_streak(history, date(2025, 1, 21), NEW_YORK)

        assert result.streak_days == 21
        assert result.bonus_fp == 100
        assert result.cumulative_bonus_fp == 115

    def test_new_run_earns_bonuses_again(self) -> None:
        """Test milestones reset after a break."""
        history = boost_days(JAN_1, 7) + boost_days(date(2025, 1, 10), 3)

        result = StreakEngine.compute_streak(history, date(2025, 1, 12), NEW_YORK)

        assert result.streak_days == 3
        assert result.bonus_fp == 5
        assert result.cumulative_bonus_fp == 5
