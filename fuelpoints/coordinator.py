# File: coordinator.py
"""Coordinator for the Fuel Points engine.

Owns the managers for one process, holds the external collaborators, and
exposes the entry points request handlers call:

    request → Eligibility Gate → (admitted) external mutation → recompute view

The Reset Scheduler runs on its own task, started by async_setup() and
stopped by async_shutdown().
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import inspect
from typing import TYPE_CHECKING, Any

import voluptuous as vol

from . import const
from .config import EngineConfig
from .engines.eligibility_engine import EligibilityEngine
from .engines.leveling_engine import LevelingEngine
from .engines.streak_engine import StreakEngine
from .exceptions import InvalidInputError
from .intents import (
    CONTEST_SCHEMA,
    RegisterContest,
    StartBoost,
    SubmitHealthAssessment,
)
from .managers import CooldownManager, EligibilityManager, ResetManager
from .managers.base_manager import async_call_external
from .type_defs import ActionCompletion
from .utils.dt_utils import dt_now_utc, local_date, require_aware

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from datetime import date, datetime

    from .engines.eligibility_engine import EligibilityDecision
    from .intents import Intent
    from .type_defs import (
        ContestCreditData,
        ContestData,
        EligibilityOracle,
        PaymentSessionCreator,
        PlayerView,
        ProgressStore,
    )


@dataclass(frozen=True)
class ActionOutcome:
    """Result of a gated action.

    Attributes:
        decision: The gate decision; nothing below is set on a Deny
        completion: Completion appended for the action
        bonus_completion: Streak bonus appended alongside it, if one was earned
        view: Recomputed player view after the mutation
        credits: Updated credit balance when a contest credit was consumed
        redirect: Opaque payment session result when payment is required
    """

    decision: EligibilityDecision
    completion: ActionCompletion | None = None
    bonus_completion: ActionCompletion | None = None
    view: PlayerView | None = None
    credits: ContestCreditData | None = None
    redirect: Any = None

    @property
    def admitted(self) -> bool:
        """Shortcut for decision.admitted."""
        return self.decision.admitted


class ProgressionCoordinator:
    """Coordinator for player progression and eligibility.

    Args:
        store: Progress store collaborator
        oracle: Eligibility oracle collaborator
        payments: Payment session collaborator (needed for paid contests)
        config: Validated configuration (defaults when omitted)
        now_func: Wall clock used when callers pass no `now`
        sleep: Sleep coroutine for the reset loop
    """

    def __init__(
        self,
        store: ProgressStore,
        oracle: EligibilityOracle,
        payments: PaymentSessionCreator | None = None,
        config: EngineConfig | None = None,
        *,
        now_func: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the coordinator and its managers."""
        self.config = config or EngineConfig()
        self.store = store
        self.oracle = oracle
        self.payments = payments
        self._now = now_func or dt_now_utc
        self._listeners: dict[str, list[Callable[[dict[str, Any]], Any]]] = {}
        self._listener_tasks: set[asyncio.Future[Any]] = set()

        self.cooldown_manager = CooldownManager(self)
        self.eligibility_manager = EligibilityManager(self)
        self.reset_manager = ResetManager(self, now_func=self._now, sleep=sleep)
        self._managers = (
            self.cooldown_manager,
            self.eligibility_manager,
            self.reset_manager,
        )

    # -------------------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------------------

    async def async_setup(self) -> None:
        """Set up every manager; starts the reset loop."""
        for manager in self._managers:
            await manager.async_setup()
        const.LOGGER.info(
            "%s coordinator ready (timezone=%s)",
            const.ENGINE_TITLE,
            self.config.reference_timezone,
        )

    async def async_shutdown(self) -> None:
        """Shut managers down in reverse order; cancels the reset loop."""
        for manager in reversed(self._managers):
            await manager.async_shutdown()
        self._listeners.clear()
        await self._async_cancel_listener_tasks()

    # -------------------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------------------

    def listen(
        self, signal: str, callback: Callable[[dict[str, Any]], Any]
    ) -> Callable[[], None]:
        """Register a callback for a signal; returns an unsubscribe function.

        Example:
            unsub = coordinator.listen(const.SIGNAL_FP_AWARDED, on_award)
        """
        callbacks = self._listeners.setdefault(signal, [])
        callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return _unsubscribe

    def dispatch(self, signal: str, payload: dict[str, Any]) -> None:
        """Deliver a payload to every listener of a signal.

        A failing listener is logged and does not stop delivery to the rest.
        Coroutine listeners are scheduled on the running loop.
        """
        for callback in list(self._listeners.get(signal, ())):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    self._track_listener_task(asyncio.ensure_future(result), signal)
            except Exception:
                const.LOGGER.exception(
                    "Error in listener %r for signal '%s'", callback, signal
                )

    def _track_listener_task(self, task: asyncio.Future[Any], signal: str) -> None:
        """Hold a reference to a coroutine listener until it finishes."""
        self._listener_tasks.add(task)

        def _on_done(done: asyncio.Future[Any]) -> None:
            self._listener_tasks.discard(done)
            if done.cancelled():
                return
            err = done.exception()
            if err is not None:
                const.LOGGER.error(
                    "Error in async listener for signal '%s'",
                    signal,
                    exc_info=err,
                )

        task.add_done_callback(_on_done)

    async def _async_cancel_listener_tasks(self) -> None:
        """Cancel coroutine listeners still running at shutdown."""
        pending = list(self._listener_tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._listener_tasks.clear()

    def _emit(self, signal: str, **payload: Any) -> None:
        const.LOGGER.debug(
            "Emitting event '%s' with payload keys: %s", signal, list(payload.keys())
        )
        self.dispatch(signal, payload)

    # -------------------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------------------

    def _resolve_now(self, now: datetime | None) -> datetime:
        return require_aware(now, "now") if now is not None else self._now()

    def _today(self, now: datetime) -> date:
        return local_date(now, self.config.reference_timezone)

    async def _async_call_external(self, operation: str, awaitable: Awaitable[Any]) -> Any:
        return await async_call_external(
            operation,
            awaitable,
            self.config.external_timeout_seconds,
            self.__class__.__name__,
        )

    @staticmethod
    def validate_award(action_kind: str, fuel_points: int) -> int:
        """Check an FP award against the per-kind award table.

        Raises:
            InvalidInputError: Kind has no award range or FP is out of range

        Example:
            validate_award("boost", 5) → 5
            validate_award("quest", 100) → InvalidInputError
        """
        award_range = const.FP_AWARD_RANGES.get(action_kind)
        if award_range is None:
            raise InvalidInputError(f"No FP award defined for {action_kind!r}")
        if isinstance(fuel_points, bool) or not isinstance(fuel_points, int):
            raise InvalidInputError(f"FP award must be an integer, got {fuel_points!r}")
        low, high = award_range
        if not low <= fuel_points <= high:
            raise InvalidInputError(
                f"{action_kind} award must be between {low} and {high} FP, "
                f"got {fuel_points}"
            )
        return fuel_points

    # -------------------------------------------------------------------------------------
    # Read Paths
    # -------------------------------------------------------------------------------------

    async def async_get_player_view(
        self, player_id: str, now: datetime | None = None
    ) -> PlayerView:
        """Recompute a player's derived state from the store.

        Level and streak are always derived from the FP total and the
        completion history; cached values in the progress row are ignored.

        Raises:
            UnknownPlayerError: The store has no such player
            TransientExternalFailure: The store failed or timed out
        """
        now = self._resolve_now(now)
        tz = self.config.reference_timezone
        today = self._today(now)

        progress = await self.eligibility_manager.async_get_progress(player_id)
        history = await self.eligibility_manager.async_get_history(player_id)

        total_fp = progress["total_fuel_points"]
        level_info = LevelingEngine.level_for(
            total_fp, self.config.level_base_threshold, self.config.level_growth_factor
        )
        streak = StreakEngine.compute_streak(history, today, tz)
        assessment_args = (
            player_id,
            const.ACTION_KIND_ASSESSMENT,
            const.HEALTH_ASSESSMENT_ACTION_ID,
            now,
        )

        return {
            "player_id": player_id,
            "total_fuel_points": total_fp,
            "level": level_info.level,
            "fp_required_for_next": level_info.fp_required_for_next,
            "fp_required_for_current": level_info.fp_required_for_current,
            "fp_to_next": level_info.fp_to_next,
            "progress_percent": level_info.progress_percent,
            "burn_streak_days": streak.streak_days,
            "next_streak_milestone": StreakEngine.next_threshold(streak.streak_days),
            "boosts_completed_today": EligibilityEngine.count_on_day(
                history, const.ACTION_KIND_BOOST, today, tz
            ),
            "assessment_available": self.cooldown_manager.is_available(
                *assessment_args
            ),
            "assessment_days_remaining": self.cooldown_manager.days_remaining(
                *assessment_args
            ),
            "assessment_bonus_fp": LevelingEngine.health_assessment_bonus(
                total_fp,
                self.config.level_base_threshold,
                self.config.level_growth_factor,
            ),
        }

    async def async_check(
        self, player_id: str, intent: Intent, now: datetime | None = None
    ) -> EligibilityDecision:
        """Run the Eligibility Gate without mutating anything."""
        return await self.eligibility_manager.async_check(
            player_id, intent, self._resolve_now(now)
        )

    # -------------------------------------------------------------------------------------
    # Write Paths
    # -------------------------------------------------------------------------------------

    async def async_complete_boost(
        self,
        player_id: str,
        action_id: str,
        fuel_points: int,
        now: datetime | None = None,
        *,
        tier: int = const.DEFAULT_CONTENT_TIER,
        pro_plan: bool = False,
    ) -> ActionOutcome:
        """Complete a boost: gate, append, start its cooldown, award streak bonus.

        tier and pro_plan describe the boost content and the player's plan.

        Raises:
            InvalidInputError: fuel_points outside the boost award range
            UnknownPlayerError: The store has no such player
            TransientExternalFailure: A collaborator failed or timed out
        """
        now = self._resolve_now(now)
        self.validate_award(const.ACTION_KIND_BOOST, fuel_points)

        decision = await self.eligibility_manager.async_check(
            player_id, StartBoost(action_id=action_id, tier=tier, pro_plan=pro_plan), now
        )
        if not decision.admitted:
            return ActionOutcome(decision=decision)

        completion = ActionCompletion(
            player_id=player_id,
            action_kind=const.ACTION_KIND_BOOST,
            action_id=action_id,
            completed_at=now,
            awarded_fp=fuel_points,
        )
        await self._async_call_external(
            "async_append_completion", self.store.async_append_completion(completion)
        )
        self.cooldown_manager.record_completion(
            player_id, const.ACTION_KIND_BOOST, action_id, now
        )

        bonus_completion = await self._async_award_streak_bonus(player_id, now)
        earned = fuel_points + (bonus_completion.awarded_fp if bonus_completion else 0)
        self._emit(
            const.SIGNAL_FP_AWARDED,
            player_id=player_id,
            fp_earned=earned,
            category=const.ACTION_KIND_BOOST,
        )

        return ActionOutcome(
            decision=decision,
            completion=completion,
            bonus_completion=bonus_completion,
            view=await self.async_get_player_view(player_id, now),
        )

    async def _async_award_streak_bonus(
        self, player_id: str, now: datetime
    ) -> ActionCompletion | None:
        """Append the milestone bonus if today's boost just reached one."""
        tz = self.config.reference_timezone
        today = self._today(now)
        history = await self.eligibility_manager.async_get_history(player_id)
        streak = StreakEngine.compute_streak(history, today, tz)
        if not streak.bonus_fp:
            return None

        bonus_id = f"streak_{streak.streak_days}"
        already_awarded = any(
            completion.action_kind == const.ACTION_KIND_STREAK_BONUS
            and completion.action_id == bonus_id
            and local_date(completion.completed_at, tz) == today
            for completion in history
        )
        if already_awarded:
            return None

        bonus = ActionCompletion(
            player_id=player_id,
            action_kind=const.ACTION_KIND_STREAK_BONUS,
            action_id=bonus_id,
            completed_at=now,
            awarded_fp=streak.bonus_fp,
        )
        await self._async_call_external(
            "async_append_completion", self.store.async_append_completion(bonus)
        )
        const.LOGGER.info(
            "ProgressionCoordinator: Player %s reached a %d-day burn streak (+%d FP)",
            player_id,
            streak.streak_days,
            streak.bonus_fp,
        )
        return bonus

    async def async_award_fp(
        self,
        player_id: str,
        action_kind: str,
        action_id: str,
        fuel_points: int,
        now: datetime | None = None,
    ) -> ActionCompletion:
        """Record a completed challenge or quest and its FP.

        Challenge and quest starts are gated separately (StartChallenge,
        StartQuest); this records the completion once the host has verified it.

        Raises:
            InvalidInputError: Kind is not challenge/quest or FP out of range
            TransientExternalFailure: The store failed or timed out
        """
        if action_kind not in (const.ACTION_KIND_CHALLENGE, const.ACTION_KIND_QUEST):
            raise InvalidInputError(
                f"async_award_fp only records challenges and quests, got {action_kind!r}"
            )
        now = self._resolve_now(now)
        self.validate_award(action_kind, fuel_points)
        await self.eligibility_manager.async_get_progress(player_id)

        completion = ActionCompletion(
            player_id=player_id,
            action_kind=action_kind,
            action_id=action_id,
            completed_at=now,
            awarded_fp=fuel_points,
        )
        await self._async_call_external(
            "async_append_completion", self.store.async_append_completion(completion)
        )
        self.cooldown_manager.record_completion(player_id, action_kind, action_id, now)
        self._emit(
            const.SIGNAL_FP_AWARDED,
            player_id=player_id,
            fp_earned=fuel_points,
            category=action_kind,
        )
        return completion

    async def async_submit_health_assessment(
        self, player_id: str, now: datetime | None = None
    ) -> ActionOutcome:
        """Submit the monthly assessment; awards 10% of the next level threshold.

        Raises:
            UnknownPlayerError: The store has no such player
            TransientExternalFailure: A collaborator failed or timed out
        """
        now = self._resolve_now(now)
        decision = await self.eligibility_manager.async_check(
            player_id, SubmitHealthAssessment(), now
        )
        if not decision.admitted:
            return ActionOutcome(decision=decision)

        progress = await self.eligibility_manager.async_get_progress(player_id)
        bonus_fp = LevelingEngine.health_assessment_bonus(
            progress["total_fuel_points"],
            self.config.level_base_threshold,
            self.config.level_growth_factor,
        )
        completion = ActionCompletion(
            player_id=player_id,
            action_kind=const.ACTION_KIND_ASSESSMENT,
            action_id=const.HEALTH_ASSESSMENT_ACTION_ID,
            completed_at=now,
            awarded_fp=bonus_fp,
        )
        await self._async_call_external(
            "async_append_completion", self.store.async_append_completion(completion)
        )
        self.cooldown_manager.record_completion(
            player_id,
            const.ACTION_KIND_ASSESSMENT,
            const.HEALTH_ASSESSMENT_ACTION_ID,
            now,
        )
        self._emit(
            const.SIGNAL_FP_AWARDED,
            player_id=player_id,
            fp_earned=bonus_fp,
            category=const.ACTION_KIND_ASSESSMENT,
        )
        return ActionOutcome(
            decision=decision,
            completion=completion,
            view=await self.async_get_player_view(player_id, now),
        )

    async def async_register_contest(
        self,
        player_id: str,
        contest: ContestData,
        now: datetime | None = None,
    ) -> ActionOutcome:
        """Register for a contest after the gate admits.

        Admit paths:
        - credit: one credit consumed; registration done by the oracle
        - payment_required: a payment session is created and its result
          returned opaquely; registration happens after payment, outside the engine
        - free: registered directly

        Raises:
            InvalidInputError: Invalid contest data, or a paid contest with no
                payment collaborator
            UnknownPlayerError: The store has no such player
            TransientExternalFailure: A collaborator failed or timed out
        """
        try:
            contest = CONTEST_SCHEMA(dict(contest))
        except vol.Invalid as err:
            raise InvalidInputError(f"Invalid contest: {err}") from err

        intent = RegisterContest(contest=contest)
        decision = await self.eligibility_manager.async_check(
            player_id, intent, self._resolve_now(now)
        )
        if not decision.admitted:
            return ActionOutcome(decision=decision)

        if decision.consume_credit:
            credits = await self._async_call_external(
                "async_consume_credit",
                self.oracle.async_consume_credit(player_id, intent.contest_id),
            )
            const.LOGGER.info(
                "ProgressionCoordinator: Player %s registered for %s with a credit",
                player_id,
                intent.contest_id,
            )
            return ActionOutcome(decision=decision, credits=credits)

        if decision.payment_required:
            if self.payments is None:
                raise InvalidInputError(
                    f"Contest {intent.contest_id} requires payment but no "
                    "payment collaborator is configured"
                )
            redirect = await self._async_call_external(
                "async_create_session",
                self.payments.async_create_session(intent.contest_id, intent.entry_fee),
            )
            return ActionOutcome(decision=decision, redirect=redirect)

        await self._async_call_external(
            "async_register", self.oracle.async_register(player_id, intent.contest_id)
        )
        const.LOGGER.info(
            "ProgressionCoordinator: Player %s registered for free contest %s",
            player_id,
            intent.contest_id,
        )
        return ActionOutcome(decision=decision)
