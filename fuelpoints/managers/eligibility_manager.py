"""Eligibility Manager - Gathers facts and asks EligibilityEngine to decide.

The gate is read-only: it never appends completions, consumes credits or
registers players. The coordinator performs those mutations after an Admit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..engines.eligibility_engine import EligibilityEngine
from ..engines.streak_engine import StreakEngine
from ..exceptions import InvalidInputError, UnknownPlayerError
from ..intents import (
    RegisterContest,
    StartBoost,
    StartChallenge,
    StartQuest,
    SubmitHealthAssessment,
)
from ..utils.dt_utils import dt_now_utc, local_date, require_aware
from .base_manager import BaseManager

if TYPE_CHECKING:
    from datetime import datetime

    from ..engines.eligibility_engine import EligibilityDecision
    from ..intents import Intent
    from ..type_defs import ActionCompletion, PlayerProgressData


class EligibilityManager(BaseManager):
    """Manager for admit/deny decisions on player intents."""

    async def async_setup(self) -> None:
        """No subscriptions; every check reads fresh facts."""
        const.LOGGER.debug("EligibilityManager: Ready")

    async def async_get_progress(self, player_id: str) -> PlayerProgressData:
        """Fetch a player's progress row.

        Raises:
            UnknownPlayerError: The store has no such player
            TransientExternalFailure: The store failed or timed out
        """
        progress = await self._async_call_external(
            "async_get_progress", self.coordinator.store.async_get_progress(player_id)
        )
        if progress is None:
            raise UnknownPlayerError(player_id)
        return progress

    async def async_get_history(self, player_id: str) -> list[ActionCompletion]:
        """Fetch a player's history and refresh their cooldown windows from it."""
        history = await self._async_call_external(
            "async_get_completions",
            self.coordinator.store.async_get_completions(player_id),
        )
        self.coordinator.cooldown_manager.sync_from_history(player_id, history)
        return history

    async def async_check(
        self,
        player_id: str,
        intent: Intent,
        now: datetime | None = None,
    ) -> EligibilityDecision:
        """Decide whether `player_id` may perform `intent` at `now`.

        Expected outcomes (cooldowns, slot limits, missing devices) come back
        as Deny decisions. Exceptions are reserved for contract violations and
        collaborator failures.

        Raises:
            UnknownPlayerError: The store has no such player
            InvalidInputError: Unsupported intent or naive `now`
            TransientExternalFailure: A collaborator failed or timed out
        """
        now = require_aware(now, "now") if now is not None else dt_now_utc()
        await self.async_get_progress(player_id)

        if isinstance(intent, StartBoost):
            decision = await self._async_check_start_boost(player_id, intent, now)
        elif isinstance(intent, StartChallenge):
            decision = await self._async_check_start_challenge(player_id, intent, now)
        elif isinstance(intent, StartQuest):
            decision = self._check_start_quest(intent)
        elif isinstance(intent, RegisterContest):
            decision = await self._async_check_register_contest(player_id, intent)
        elif isinstance(intent, SubmitHealthAssessment):
            decision = await self._async_check_health_assessment(player_id, now)
        else:
            raise InvalidInputError(f"Unsupported intent: {intent!r}")

        const.LOGGER.debug(
            "EligibilityManager: %s for player %s -> %s (%s)",
            type(intent).__name__,
            player_id,
            "admit" if decision.admitted else "deny",
            decision.tag if decision.admitted else decision.reason,
        )
        return decision

    # =========================================================================
    # Per-intent fact gathering
    # =========================================================================

    async def _async_check_start_boost(
        self, player_id: str, intent: StartBoost, now: datetime
    ) -> EligibilityDecision:
        history = await self.async_get_history(player_id)
        tz = self.config.reference_timezone
        window = self.coordinator.cooldown_manager.get_window(
            player_id, const.ACTION_KIND_BOOST, intent.action_id
        )
        boosts_today = EligibilityEngine.count_on_day(
            history, const.ACTION_KIND_BOOST, local_date(now, tz), tz
        )
        return EligibilityEngine.check_start_boost(
            window,
            now,
            boosts_today,
            self.config.max_daily_boosts,
            tier=intent.tier,
            pro_plan=intent.pro_plan,
            pro_plan_min_tier=self.config.pro_plan_min_tier,
        )

    async def _async_check_start_challenge(
        self, player_id: str, intent: StartChallenge, now: datetime
    ) -> EligibilityDecision:
        history = await self.async_get_history(player_id)
        tz = self.config.reference_timezone
        streak = StreakEngine.compute_streak(history, local_date(now, tz), tz)
        return EligibilityEngine.check_start_challenge(
            streak.streak_days,
            intent.active_challenges,
            self.config.challenge_streak_required,
            self.config.max_active_challenges,
            tier=intent.tier,
            pro_plan=intent.pro_plan,
            pro_plan_min_tier=self.config.pro_plan_min_tier,
        )

    def _check_start_quest(self, intent: StartQuest) -> EligibilityDecision:
        # Challenge progress is tracked by the host and arrives on the intent
        return EligibilityEngine.check_start_quest(
            intent.completed_challenges,
            self.config.quest_challenges_required,
            tier=intent.tier,
            pro_plan=intent.pro_plan,
            pro_plan_min_tier=self.config.pro_plan_min_tier,
        )

    async def _async_check_register_contest(
        self, player_id: str, intent: RegisterContest
    ) -> EligibilityDecision:
        oracle = self.coordinator.oracle
        contest_id = intent.contest_id

        device_connected = await self._async_call_external(
            "async_check_device_connected",
            oracle.async_check_device_connected(player_id, contest_id),
        )
        if not device_connected:
            # Later checks cannot change a device denial
            return EligibilityEngine.check_register_contest(
                intent.contest, False, None, {}
            )

        registration_status = await self._async_call_external(
            "async_get_registration_status",
            oracle.async_get_registration_status(player_id, contest_id),
        )
        credits = await self._async_call_external(
            "async_check_credits", oracle.async_check_credits(player_id)
        )
        return EligibilityEngine.check_register_contest(
            intent.contest, True, registration_status, credits
        )

    async def _async_check_health_assessment(
        self, player_id: str, now: datetime
    ) -> EligibilityDecision:
        await self.async_get_history(player_id)
        window = self.coordinator.cooldown_manager.get_window(
            player_id, const.ACTION_KIND_ASSESSMENT, const.HEALTH_ASSESSMENT_ACTION_ID
        )
        return EligibilityEngine.check_health_assessment(window, now)
