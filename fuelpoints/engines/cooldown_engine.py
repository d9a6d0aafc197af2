"""Cooldown Engine - Pure logic for action cooldown windows.

This engine provides stateless, pure Python functions for:
- Cooldown duration lookup per action kind
- Building the window produced by a completion
- Availability and days-remaining checks against a window
- Latest-completion reduction used to rebuild windows from history

State (the current window per key) belongs in CooldownManager.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from .. import const
from ..exceptions import InvalidInputError
from ..type_defs import CooldownWindow
from ..utils.dt_utils import as_utc, days_until, require_aware

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from ..type_defs import ActionCompletion, CooldownKey

DEFAULT_COOLDOWN_DURATIONS: dict[str, timedelta] = {
    const.ACTION_KIND_BOOST: timedelta(days=const.DEFAULT_BOOST_COOLDOWN_DAYS),
    const.ACTION_KIND_ASSESSMENT: timedelta(
        days=const.DEFAULT_ASSESSMENT_COOLDOWN_DAYS
    ),
}


class CooldownEngine:
    """Pure logic engine for cooldown windows.

    Durations are fixed elapsed time (7 days = 168 hours), not calendar days,
    so a window closes at exactly completed_at + duration.
    """

    @staticmethod
    def duration_for(
        action_kind: str,
        durations: Mapping[str, timedelta] | None = None,
    ) -> timedelta:
        """Return the cooldown duration for an action kind.

        Kinds without a time cooldown (challenge, quest) return zero.

        Raises:
            InvalidInputError: action_kind is not a known kind
        """
        if action_kind not in const.ACTION_KINDS:
            raise InvalidInputError(f"Unknown action kind: {action_kind!r}")
        durations = DEFAULT_COOLDOWN_DURATIONS if durations is None else durations
        return durations.get(action_kind, timedelta())

    @staticmethod
    def build_window(
        player_id: str,
        action_kind: str,
        action_id: str,
        completed_at: datetime,
        durations: Mapping[str, timedelta] | None = None,
    ) -> CooldownWindow:
        """Return the window created by completing an action at completed_at."""
        require_aware(completed_at, "completed_at")
        duration = CooldownEngine.duration_for(action_kind, durations)
        return CooldownWindow(
            player_id=player_id,
            action_kind=action_kind,
            action_id=action_id,
            available_after=as_utc(completed_at) + duration,
        )

    @staticmethod
    def is_available(window: CooldownWindow | None, now: datetime) -> bool:
        """True when no window exists or now >= window.available_after."""
        if window is None:
            return True
        return as_utc(now) >= window.available_after

    @staticmethod
    def days_remaining(window: CooldownWindow | None, now: datetime) -> int:
        """Whole days (rounded up) until the window opens; 0 if available."""
        if window is None:
            return 0
        return days_until(window.available_after, now)

    @staticmethod
    def latest_completions(
        completions: Iterable[ActionCompletion],
    ) -> dict[CooldownKey, ActionCompletion]:
        """Reduce a history to the latest completion per cooldown key.

        Streak bonus entries are bookkeeping, not actions, and are skipped.
        """
        latest: dict[CooldownKey, ActionCompletion] = {}
        for completion in completions:
            if completion.action_kind == const.ACTION_KIND_STREAK_BONUS:
                continue
            key = (completion.player_id, completion.action_kind, completion.action_id)
            current = latest.get(key)
            if current is None or as_utc(completion.completed_at) > as_utc(
                current.completed_at
            ):
                latest[key] = completion
        return latest
