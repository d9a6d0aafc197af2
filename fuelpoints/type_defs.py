"""Type definitions for Fuel Points data structures.

HYBRID APPROACH
===============
1. TypedDict for payloads exchanged with external collaborators (store rows,
   oracle answers, contest definitions). These arrive as plain dicts from
   whatever backend implements the collaborator.
2. Frozen dataclasses for the engine's own immutable records
   (ActionCompletion, CooldownWindow), which are created and compared in
   Python code.
3. typing.Protocol for the collaborator interfaces themselves.

IMPORTANT: This file must NOT import from coordinator.py or managers to avoid
circular dependencies. Only typing machinery and the standard library.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, NotRequired, Protocol, TypedDict, runtime_checkable

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

PlayerId = str
ActionId = str
ContestId = str
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
CooldownKey = tuple[PlayerId, str, ActionId]


# =============================================================================
# Collaborator Payloads
# =============================================================================


class PlayerProgressData(TypedDict):
    """Progress row owned by the external store.

    `level` may be present as a cached value; it is never trusted and is
    always recomputed from total_fuel_points on read.
    """

    player_id: PlayerId
    total_fuel_points: int
    burn_streak_days: int
    last_action_date: ISODate | None
    level: NotRequired[int]


class ContestCreditData(TypedDict):
    """Answer from the credit oracle for one player."""

    player_id: PlayerId
    credits_remaining: int
    is_preview_account: bool


class ContestData(TypedDict):
    """Contest definition as passed in by the request handler."""

    contest_id: ContestId
    name: str
    entry_fee: float
    required_device: NotRequired[str | None]
    fuel_points: NotRequired[int]


class PlayerView(TypedDict):
    """Derived view state returned to the dashboard after a recompute."""

    player_id: PlayerId
    total_fuel_points: int
    level: int
    fp_required_for_next: int
    fp_required_for_current: int
    fp_to_next: int
    progress_percent: float
    burn_streak_days: int
    next_streak_milestone: int | None
    boosts_completed_today: int
    assessment_available: bool
    assessment_days_remaining: int
    assessment_bonus_fp: int


# =============================================================================
# Engine Records
# =============================================================================


@dataclass(frozen=True)
class ActionCompletion:
    """A single completed action. Immutable; history is append-only.

    Attributes:
        player_id: Player who completed the action
        action_kind: One of const.ACTION_KINDS
        action_id: Boost/challenge/quest id, or the assessment slot id
        completed_at: Timezone-aware instant of completion
        awarded_fp: FP granted for this completion (non-negative)
    """

    player_id: PlayerId
    action_kind: str
    action_id: ActionId
    completed_at: datetime
    awarded_fp: int = 0


@dataclass(frozen=True)
class CooldownWindow:
    """Earliest instant an action may be completed again.

    One window exists per (player, action_kind, action_id); it is overwritten
    on every completion and never deleted.
    """

    player_id: PlayerId
    action_kind: str
    action_id: ActionId
    available_after: datetime

    @property
    def key(self) -> CooldownKey:
        """Ledger key for this window."""
        return (self.player_id, self.action_kind, self.action_id)


# =============================================================================
# Collaborator Interfaces
# =============================================================================


@runtime_checkable
class ProgressStore(Protocol):
    """External owner of PlayerProgress and ActionCompletion history."""

    async def async_get_progress(self, player_id: PlayerId) -> PlayerProgressData | None:
        """Return the player's progress row, or None if the player is unknown."""

    async def async_get_completions(self, player_id: PlayerId) -> list[ActionCompletion]:
        """Return the player's full completion history."""

    async def async_append_completion(self, completion: ActionCompletion) -> None:
        """Append a completion and atomically add its FP to the player's total."""

    async def async_reset_streaks(self) -> None:
        """Reset broken burn streaks. Must be safe to call twice per boundary."""


class EligibilityOracle(Protocol):
    """External facts about credits, devices and contest registrations."""

    async def async_check_credits(self, player_id: PlayerId) -> ContestCreditData:
        """Return the player's contest credit balance."""

    async def async_check_device_connected(
        self, player_id: PlayerId, contest_id: ContestId
    ) -> bool:
        """Return True if the device the contest requires is connected."""

    async def async_consume_credit(
        self, player_id: PlayerId, contest_id: ContestId
    ) -> ContestCreditData:
        """Consume one credit and register; returns the updated balance."""

    async def async_get_registration_status(
        self, player_id: PlayerId, contest_id: ContestId
    ) -> str | None:
        """Return the player's status for a contest, or None."""

    async def async_register(self, player_id: PlayerId, contest_id: ContestId) -> None:
        """Register the player for a free contest."""


class PaymentSessionCreator(Protocol):
    """External payment collaborator; its result is treated opaquely."""

    async def async_create_session(
        self, contest_id: ContestId, entry_fee: float
    ) -> Any:
        """Create a checkout session and return its redirect target."""
