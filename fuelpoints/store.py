# File: store.py
"""In-memory collaborators for the Fuel Points engine.

Reference implementations of the ProgressStore and EligibilityOracle
interfaces. The hosting application normally supplies database-backed
versions; these keep the same semantics (atomic FP increments, idempotent
streak resets, transactional credit consumption) and are used by the test
suite and for local development.
"""

from __future__ import annotations

import asyncio
import copy
from datetime import timedelta
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from . import const
from .engines.streak_engine import StreakEngine
from .exceptions import InvalidInputError, UnknownPlayerError
from .utils.dt_utils import dt_now_utc, local_date

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date, datetime, tzinfo

    from .type_defs import ActionCompletion, ContestCreditData, PlayerProgressData


class InMemoryProgressStore:
    """Progress rows and completion history held in process memory.

    Data layout:
        players: {player_id: PlayerProgressData}
        completions: [ActionCompletion, ...] in append order
        last_reset: UTC instant of the most recent streak reset, or None
    """

    def __init__(
        self,
        tz: tzinfo | None = None,
        *,
        now_func: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            tz: Reference timezone used to bucket completions into days
            now_func: Clock used by async_reset_streaks (defaults to UTC now)
        """
        self._tz = tz or ZoneInfo(const.DEFAULT_REFERENCE_TIMEZONE)
        self._now = now_func or dt_now_utc
        self._data: dict[str, Any] = self.get_default_structure()
        self._lock = asyncio.Lock()

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return the empty data structure."""
        return {
            "players": {},
            "completions": [],
            "last_reset": None,
        }

    @property
    def data(self) -> dict[str, Any]:
        """Raw data, for inspection in tests."""
        return self._data

    def add_player(
        self,
        player_id: str,
        total_fuel_points: int = 0,
        burn_streak_days: int = 0,
        last_action_date: date | None = None,
    ) -> PlayerProgressData:
        """Create (or replace) a player's progress row."""
        row: PlayerProgressData = {
            "player_id": player_id,
            "total_fuel_points": total_fuel_points,
            "burn_streak_days": burn_streak_days,
            "last_action_date": last_action_date.isoformat()
            if last_action_date
            else None,
        }
        self._data["players"][player_id] = row
        return copy.deepcopy(row)

    # -------------------------------------------------------------------------------------
    # ProgressStore interface
    # -------------------------------------------------------------------------------------

    async def async_get_progress(self, player_id: str) -> PlayerProgressData | None:
        """Return a copy of the player's row, or None."""
        row = self._data["players"].get(player_id)
        return copy.deepcopy(row) if row is not None else None

    async def async_get_completions(self, player_id: str) -> list[ActionCompletion]:
        """Return the player's history in append order."""
        return [
            completion
            for completion in self._data["completions"]
            if completion.player_id == player_id
        ]

    async def async_append_completion(self, completion: ActionCompletion) -> None:
        """Append a completion and add its FP to the player's total.

        Boost completions also advance the cached streak counter.

        Raises:
            UnknownPlayerError: No row exists for completion.player_id
            InvalidInputError: awarded_fp is negative
        """
        if completion.awarded_fp < 0:
            raise InvalidInputError(
                f"awarded_fp must be non-negative, got {completion.awarded_fp}"
            )

        async with self._lock:
            row = self._data["players"].get(completion.player_id)
            if row is None:
                raise UnknownPlayerError(completion.player_id)

            self._data["completions"].append(completion)
            row["total_fuel_points"] += completion.awarded_fp

            if completion.action_kind in StreakEngine.QUALIFYING_KINDS:
                self._advance_streak(row, local_date(completion.completed_at, self._tz))

        const.LOGGER.debug(
            "InMemoryProgressStore: Appended %s/%s for player %s (+%d FP)",
            completion.action_kind,
            completion.action_id,
            completion.player_id,
            completion.awarded_fp,
        )

    @staticmethod
    def _advance_streak(row: PlayerProgressData, day: date) -> None:
        last = row["last_action_date"]
        if last == day.isoformat():
            return
        if last == (day - timedelta(days=1)).isoformat():
            row["burn_streak_days"] += 1
        else:
            row["burn_streak_days"] = 1
        row["last_action_date"] = day.isoformat()

    async def async_reset_streaks(self) -> None:
        """Zero every streak whose last qualifying day is before yesterday.

        Check-and-reset: the outcome depends only on each row and today's
        date, so a second call for the same day changes nothing.
        """
        now = self._now()
        yesterday = (local_date(now, self._tz) - timedelta(days=1)).isoformat()
        reset_count = 0

        async with self._lock:
            for row in self._data["players"].values():
                last = row["last_action_date"]
                if row["burn_streak_days"] and (last is None or last < yesterday):
                    row["burn_streak_days"] = 0
                    reset_count += 1
            self._data["last_reset"] = now

        const.LOGGER.info(
            "InMemoryProgressStore: Reset %d broken streaks", reset_count
        )

    async def async_get_last_reset(self) -> datetime | None:
        """Instant of the most recent streak reset, or None."""
        return self._data["last_reset"]


class InMemoryEligibilityOracle:
    """Credits, device connections and registrations held in process memory."""

    def __init__(self) -> None:
        """Initialize the oracle with no players."""
        self._credits: dict[str, ContestCreditData] = {}
        self._devices: set[tuple[str, str]] = set()
        self._registrations: dict[tuple[str, str], str] = {}
        self._lock = asyncio.Lock()

    def set_credits(
        self, player_id: str, credits_remaining: int, is_preview_account: bool = True
    ) -> None:
        """Set a player's credit balance."""
        if credits_remaining < 0:
            raise InvalidInputError("credits_remaining must be non-negative")
        self._credits[player_id] = {
            "player_id": player_id,
            "credits_remaining": credits_remaining,
            "is_preview_account": is_preview_account,
        }

    def connect_device(self, player_id: str, contest_id: str) -> None:
        """Mark the device a contest requires as connected for a player."""
        self._devices.add((player_id, contest_id))

    def disconnect_device(self, player_id: str, contest_id: str) -> None:
        """Mark the device a contest requires as disconnected."""
        self._devices.discard((player_id, contest_id))

    # -------------------------------------------------------------------------------------
    # EligibilityOracle interface
    # -------------------------------------------------------------------------------------

    async def async_check_credits(self, player_id: str) -> ContestCreditData:
        """Return a copy of the player's balance (zero if never set)."""
        credits = self._credits.get(player_id)
        if credits is None:
            return {
                "player_id": player_id,
                "credits_remaining": 0,
                "is_preview_account": False,
            }
        return dict(credits)  # type: ignore[return-value]

    async def async_check_device_connected(
        self, player_id: str, contest_id: str
    ) -> bool:
        """True when the contest's required device is connected."""
        return (player_id, contest_id) in self._devices

    async def async_consume_credit(
        self, player_id: str, contest_id: str
    ) -> ContestCreditData:
        """Consume one credit and register the player in one step.

        Raises:
            InvalidInputError: No credit left (the balance never goes negative)
        """
        async with self._lock:
            credits = self._credits.get(player_id)
            if credits is None or credits["credits_remaining"] <= 0:
                raise InvalidInputError(f"No contest credits remaining for {player_id}")
            credits["credits_remaining"] -= 1
            self._registrations[(player_id, contest_id)] = (
                const.REGISTRATION_STATUS_REGISTERED
            )
            remaining = dict(credits)

        const.LOGGER.debug(
            "InMemoryEligibilityOracle: Player %s used a credit for %s (%d left)",
            player_id,
            contest_id,
            remaining["credits_remaining"],
        )
        return remaining  # type: ignore[return-value]

    async def async_get_registration_status(
        self, player_id: str, contest_id: str
    ) -> str | None:
        """Return the registration status, or None."""
        return self._registrations.get((player_id, contest_id))

    async def async_register(self, player_id: str, contest_id: str) -> None:
        """Register the player for a contest."""
        async with self._lock:
            self._registrations[(player_id, contest_id)] = (
                const.REGISTRATION_STATUS_REGISTERED
            )
