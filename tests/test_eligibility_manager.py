"""Tests for EligibilityManager - fact gathering around EligibilityEngine."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from fuelpoints import const
from fuelpoints.config import validate_config
from fuelpoints.coordinator import ProgressionCoordinator
from fuelpoints.exceptions import InvalidInputError, UnknownPlayerError
from fuelpoints.intents import (
    RegisterContest,
    StartBoost,
    StartChallenge,
    StartQuest,
    SubmitHealthAssessment,
)
from fuelpoints.store import InMemoryProgressStore
from tests.helpers import boost_days, make_completion, make_local_dt

CONTEST = {
    "contest_id": "spring-sprint",
    "name": "Spring Sprint",
    "entry_fee": 0.0,
    "required_device": "Apple Watch",
    "fuel_points": 150,
}


class TestAsyncCheck:
    """Tests for EligibilityManager.async_check()."""

    @pytest.mark.asyncio
    async def test_unknown_player(self, coordinator: ProgressionCoordinator, noon) -> None:
        """Test a missing player raises UnknownPlayerError."""
        with pytest.raises(UnknownPlayerError) as exc_info:
            await coordinator.eligibility_manager.async_check(
                "ghost", StartBoost("a"), noon
            )

        assert exc_info.value.player_id == "ghost"

    @pytest.mark.asyncio
    async def test_naive_now_rejected(self, coordinator: ProgressionCoordinator) -> None:
        """Test a naive `now` is a contract error."""
        with pytest.raises(InvalidInputError):
            await coordinator.eligibility_manager.async_check(
                "player-1", StartBoost("a"), make_local_dt(2025, 1, 15).replace(tzinfo=None)
            )

    @pytest.mark.asyncio
    async def test_unsupported_intent(self, coordinator: ProgressionCoordinator, noon) -> None:
        """Test an unknown intent object raises InvalidInputError."""
        with pytest.raises(InvalidInputError):
            await coordinator.eligibility_manager.async_check(
                "player-1", object(), noon  # type: ignore[arg-type]
            )

    @pytest.mark.asyncio
    async def test_cooldown_rebuilt_from_store_history(
        self, coordinator: ProgressionCoordinator, store: InMemoryProgressStore, noon
    ) -> None:
        """Test a completion written straight to the store still blocks the boost."""
        await store.async_append_completion(
            make_completion(noon - timedelta(days=3), action_id="a")
        )

        decision = await coordinator.eligibility_manager.async_check(
            "player-1", StartBoost("a"), noon
        )

        assert decision.reason == const.REASON_COOLDOWN_ACTIVE
        assert decision.details["days_remaining"] == 4

    @pytest.mark.asyncio
    async def test_challenge_uses_derived_streak(
        self, coordinator: ProgressionCoordinator, store: InMemoryProgressStore, noon
    ) -> None:
        """Test the challenge unlock follows the history, not the cached counter."""
        for completion in boost_days(noon.date() - timedelta(days=2), 3):
            await store.async_append_completion(completion)
        store.data["players"]["player-1"]["burn_streak_days"] = 0

        decision = await coordinator.eligibility_manager.async_check(
            "player-1", StartChallenge("c", active_challenges=0), noon
        )

        assert decision.admitted

    @pytest.mark.asyncio
    async def test_assessment_available_for_new_player(
        self, coordinator: ProgressionCoordinator, noon
    ) -> None:
        """Test a player who never submitted may submit."""
        decision = await coordinator.eligibility_manager.async_check(
            "player-1", SubmitHealthAssessment(), noon
        )

        assert decision.admitted

    @pytest.mark.asyncio
    async def test_tier_two_boost_needs_pro_plan(
        self, coordinator: ProgressionCoordinator, noon
    ) -> None:
        """Test the plan fact on the intent gates Tier 2 boosts."""
        manager = coordinator.eligibility_manager

        locked = await manager.async_check("player-1", StartBoost("a", tier=2), noon)
        unlocked = await manager.async_check(
            "player-1", StartBoost("a", tier=2, pro_plan=True), noon
        )

        assert locked.reason == const.REASON_PLAN_REQUIRED
        assert unlocked.admitted

    @pytest.mark.asyncio
    async def test_quest_uses_configured_prerequisite(self, store, oracle, noon) -> None:
        """Test quest_challenges_required is honored."""
        coordinator = ProgressionCoordinator(
            store,
            oracle,
            config=validate_config({const.CONF_QUEST_CHALLENGES_REQUIRED: 3}),
        )
        manager = coordinator.eligibility_manager

        locked = await manager.async_check(
            "player-1", StartQuest("q", completed_challenges=2), noon
        )
        unlocked = await manager.async_check(
            "player-1", StartQuest("q", completed_challenges=3), noon
        )

        assert locked.reason == const.REASON_PREREQUISITE_REQUIRED
        assert locked.details["required"] == 3
        assert unlocked.admitted

    @pytest.mark.asyncio
    async def test_quest_for_unknown_player(
        self, coordinator: ProgressionCoordinator, noon
    ) -> None:
        """Test a quest check still resolves the player first."""
        with pytest.raises(UnknownPlayerError):
            await coordinator.eligibility_manager.async_check(
                "ghost", StartQuest("q", completed_challenges=5), noon
            )


class TestRegisterContestFacts:
    """Oracle interaction for contest registration."""

    @pytest.mark.asyncio
    async def test_device_denial_skips_other_oracle_calls(self, store, noon) -> None:
        """Test a missing device short-circuits the remaining checks."""
        oracle = AsyncMock()
        oracle.async_check_device_connected.return_value = False
        coordinator = ProgressionCoordinator(store, oracle)

        decision = await coordinator.eligibility_manager.async_check(
            "player-1", RegisterContest(CONTEST), noon
        )

        assert decision.reason == const.REASON_DEVICE_NOT_CONNECTED
        oracle.async_check_credits.assert_not_called()
        oracle.async_get_registration_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_does_not_consume(self, store, noon) -> None:
        """Test the gate is read-only even when it admits with a credit."""
        oracle = AsyncMock()
        oracle.async_check_device_connected.return_value = True
        oracle.async_get_registration_status.return_value = None
        oracle.async_check_credits.return_value = {
            "player_id": "player-1",
            "credits_remaining": 2,
            "is_preview_account": True,
        }
        coordinator = ProgressionCoordinator(store, oracle)

        decision = await coordinator.eligibility_manager.async_check(
            "player-1", RegisterContest(CONTEST), noon
        )

        assert decision.consume_credit
        oracle.async_consume_credit.assert_not_called()
        oracle.async_register.assert_not_called()
