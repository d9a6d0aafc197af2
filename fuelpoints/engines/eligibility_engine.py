"""Eligibility Engine - Pure logic for admit/deny decisions.

This engine provides stateless, pure Python functions that turn
pre-gathered facts into an EligibilityDecision for each intent:
- StartBoost: cooldown window + daily slot limit
- StartChallenge: burn streak requirement + active challenge slots
- StartQuest: related challenges completed
- Boosts, challenges and quests: Tier 2+ content needs the Pro Plan
- RegisterContest: device, existing registration, credits, entry fee
- SubmitHealthAssessment: 30-day cadence

PURITY REQUIREMENT: No collaborator access. EligibilityManager gathers the
facts (oracle answers, cooldown windows, history) and passes them in.

Denials are normal return values. Nothing here raises for an expected
business outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import local_date
from .cooldown_engine import CooldownEngine

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime, tzinfo

    from ..type_defs import (
        ActionCompletion,
        ContestCreditData,
        ContestData,
        CooldownWindow,
    )


# =============================================================================
# DECISION DATA STRUCTURE
# =============================================================================


@dataclass(frozen=True)
class EligibilityDecision:
    """Outcome of an eligibility check.

    Attributes:
        admitted: True for Admit, False for Deny
        reason: Machine-readable denial reason (None when admitted)
        message: Human display string
        tag: Admit tag (credit, payment_required, free) or None
        details: Structured values used in the message (days_remaining, ...)
    """

    admitted: bool
    reason: str | None = None
    message: str = ""
    tag: str | None = None
    details: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def admit(cls, tag: str = const.TAG_FREE, **details: Any) -> EligibilityDecision:
        """Build an Admit decision."""
        message = const.DISPLAY_MESSAGES.get(tag, "").format(**details)
        return cls(admitted=True, message=message, tag=tag, details=details)

    @classmethod
    def deny(cls, reason: str, **details: Any) -> EligibilityDecision:
        """Build a Deny decision with its display string."""
        message = const.DISPLAY_MESSAGES.get(reason, reason).format(**details)
        return cls(admitted=False, reason=reason, message=message, details=details)

    @property
    def consume_credit(self) -> bool:
        """True when admission must consume one contest credit."""
        return self.admitted and self.tag == const.TAG_CREDIT

    @property
    def payment_required(self) -> bool:
        """True when admission is conditional on the external payment step."""
        return self.admitted and self.tag == const.TAG_PAYMENT_REQUIRED


# =============================================================================
# ELIGIBILITY ENGINE
# =============================================================================


class EligibilityEngine:
    """Pure logic engine for the Eligibility Gate."""

    @staticmethod
    def count_on_day(
        history: Iterable[ActionCompletion],
        action_kind: str,
        day: date,
        tz: tzinfo,
    ) -> int:
        """Count completions of one kind on a local calendar day."""
        return sum(
            1
            for completion in history
            if completion.action_kind == action_kind
            and local_date(completion.completed_at, tz) == day
        )

    @staticmethod
    def check_plan_access(
        tier: int,
        pro_plan: bool,
        pro_plan_min_tier: int = const.DEFAULT_PRO_PLAN_MIN_TIER,
    ) -> EligibilityDecision | None:
        """Deny content at or above the Pro tier for players without the plan.

        Returns None when the player may access the tier.
        """
        if tier >= pro_plan_min_tier and not pro_plan:
            return EligibilityDecision.deny(const.REASON_PLAN_REQUIRED, tier=tier)
        return None

    @staticmethod
    def check_start_boost(
        window: CooldownWindow | None,
        now: datetime,
        boosts_today: int,
        max_daily_boosts: int = const.DEFAULT_MAX_DAILY_BOOSTS,
        *,
        tier: int = const.DEFAULT_CONTENT_TIER,
        pro_plan: bool = False,
        pro_plan_min_tier: int = const.DEFAULT_PRO_PLAN_MIN_TIER,
    ) -> EligibilityDecision:
        """Boost admission: plan tier, cooldown, then the daily slot limit."""
        if denial := EligibilityEngine.check_plan_access(
            tier, pro_plan, pro_plan_min_tier
        ):
            return denial
        if not CooldownEngine.is_available(window, now):
            return EligibilityDecision.deny(
                const.REASON_COOLDOWN_ACTIVE,
                days_remaining=CooldownEngine.days_remaining(window, now),
            )
        if boosts_today >= max_daily_boosts:
            return EligibilityDecision.deny(
                const.REASON_SLOT_LIMIT_REACHED,
                limit=max_daily_boosts,
                active=boosts_today,
            )
        return EligibilityDecision.admit(
            const.TAG_FREE, slots_remaining=max_daily_boosts - boosts_today - 1
        )

    @staticmethod
    def check_start_challenge(
        streak_days: int,
        active_challenges: int,
        streak_required: int = const.DEFAULT_CHALLENGE_STREAK_REQUIRED,
        max_active_challenges: int = const.DEFAULT_MAX_ACTIVE_CHALLENGES,
        *,
        tier: int = const.DEFAULT_CONTENT_TIER,
        pro_plan: bool = False,
        pro_plan_min_tier: int = const.DEFAULT_PRO_PLAN_MIN_TIER,
    ) -> EligibilityDecision:
        """Challenges unlock after a burn streak and have limited slots."""
        if denial := EligibilityEngine.check_plan_access(
            tier, pro_plan, pro_plan_min_tier
        ):
            return denial
        if streak_days < streak_required:
            return EligibilityDecision.deny(
                const.REASON_STREAK_REQUIRED,
                required=streak_required,
                streak_days=streak_days,
            )
        if active_challenges >= max_active_challenges:
            return EligibilityDecision.deny(
                const.REASON_SLOT_LIMIT_REACHED,
                limit=max_active_challenges,
                active=active_challenges,
            )
        return EligibilityDecision.admit(const.TAG_FREE)

    @staticmethod
    def check_start_quest(
        completed_challenges: int,
        challenges_required: int = const.DEFAULT_QUEST_CHALLENGES_REQUIRED,
        *,
        tier: int = const.DEFAULT_CONTENT_TIER,
        pro_plan: bool = False,
        pro_plan_min_tier: int = const.DEFAULT_PRO_PLAN_MIN_TIER,
    ) -> EligibilityDecision:
        """Quests open once enough related challenges are complete."""
        if denial := EligibilityEngine.check_plan_access(
            tier, pro_plan, pro_plan_min_tier
        ):
            return denial
        if completed_challenges < challenges_required:
            return EligibilityDecision.deny(
                const.REASON_PREREQUISITE_REQUIRED,
                required=challenges_required,
                completed=completed_challenges,
            )
        return EligibilityDecision.admit(const.TAG_FREE)

    @staticmethod
    def check_register_contest(
        contest: ContestData,
        device_connected: bool,
        registration_status: str | None,
        credits: ContestCreditData,
    ) -> EligibilityDecision:
        """Contest admission.

        Order:
        1. Required device must be connected.
        2. An existing `registered` status denies before any admit path.
        3. Preview account with credits left: admit, consume a credit.
        4. Non-zero entry fee: admit tagged payment_required.
        5. Otherwise free admission.
        """
        if not device_connected:
            return EligibilityDecision.deny(
                const.REASON_DEVICE_NOT_CONNECTED,
                device_name=contest.get(const.FIELD_REQUIRED_DEVICE)
                or const.DISPLAY_UNKNOWN,
            )

        if registration_status == const.REGISTRATION_STATUS_REGISTERED:
            return EligibilityDecision.deny(
                const.REASON_ALREADY_REGISTERED,
                contest_id=contest[const.FIELD_CONTEST_ID],
            )

        credits_remaining = int(credits.get("credits_remaining", 0))
        if credits.get("is_preview_account") and credits_remaining > 0:
            return EligibilityDecision.admit(
                const.TAG_CREDIT, credits_remaining=credits_remaining
            )

        entry_fee = float(contest.get(const.FIELD_ENTRY_FEE, 0) or 0)
        if entry_fee > 0:
            return EligibilityDecision.admit(
                const.TAG_PAYMENT_REQUIRED, entry_fee=f"{entry_fee:g}"
            )

        return EligibilityDecision.admit(const.TAG_FREE)

    @staticmethod
    def check_health_assessment(
        window: CooldownWindow | None,
        now: datetime,
    ) -> EligibilityDecision:
        """Health assessment admission: one per 30-day cadence."""
        if not CooldownEngine.is_available(window, now):
            return EligibilityDecision.deny(
                const.REASON_COOLDOWN_ACTIVE,
                days_remaining=CooldownEngine.days_remaining(window, now),
            )
        return EligibilityDecision.admit(const.TAG_FREE)
