"""Cooldown Manager - Stateful ledger of cooldown windows.

Owns the current CooldownWindow per (player, action_kind, action_id) and is
the only writer of that ledger. All timing math is delegated to
CooldownEngine.

The ledger is a cache: sync_from_history() rebuilds a player's windows from
the completion history held by the progress store.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from .. import const
from ..engines.cooldown_engine import CooldownEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from ..coordinator import ProgressionCoordinator
    from ..type_defs import ActionCompletion, CooldownKey, CooldownWindow

LOCK_STRIPES = 64


class CooldownManager(BaseManager):
    """Manager for cooldown windows.

    Writes to the same key are serialized by one of a fixed set of striped
    locks, so lock memory stays constant however many keys exist. Reads
    return the window currently stored, which is always a complete, immutable
    CooldownWindow.
    """

    def __init__(self, coordinator: ProgressionCoordinator) -> None:
        """Initialize the CooldownManager."""
        super().__init__(coordinator)
        self._windows: dict[CooldownKey, CooldownWindow] = {}
        self._lock_stripes: tuple[threading.Lock, ...] = tuple(
            threading.Lock() for _ in range(LOCK_STRIPES)
        )

    async def async_setup(self) -> None:
        """Nothing to subscribe to; windows are loaded lazily per player."""
        const.LOGGER.debug("CooldownManager: Ready")

    def _lock_for(self, key: CooldownKey) -> threading.Lock:
        return self._lock_stripes[hash(key) % len(self._lock_stripes)]

    # =========================================================================
    # Queries
    # =========================================================================

    def get_window(
        self, player_id: str, action_kind: str, action_id: str
    ) -> CooldownWindow | None:
        """Return the current window for a key, or None if never completed."""
        return self._windows.get((player_id, action_kind, action_id))

    def is_available(
        self, player_id: str, action_kind: str, action_id: str, now: datetime
    ) -> bool:
        """True when the action may be completed at `now`."""
        window = self.get_window(player_id, action_kind, action_id)
        return CooldownEngine.is_available(window, now)

    def days_remaining(
        self, player_id: str, action_kind: str, action_id: str, now: datetime
    ) -> int:
        """Whole days until the action opens again; 0 when available."""
        window = self.get_window(player_id, action_kind, action_id)
        return CooldownEngine.days_remaining(window, now)

    # =========================================================================
    # Writes
    # =========================================================================

    def record_completion(
        self,
        player_id: str,
        action_kind: str,
        action_id: str,
        completed_at: datetime,
    ) -> CooldownWindow:
        """Record a completion and overwrite the key's window.

        Last write wins. Callers check is_available() first; this method does
        not re-check.

        Raises:
            InvalidInputError: Unknown action kind or naive completed_at
        """
        window = CooldownEngine.build_window(
            player_id,
            action_kind,
            action_id,
            completed_at,
            self.config.cooldown_durations,
        )
        with self._lock_for(window.key):
            self._windows[window.key] = window

        const.LOGGER.debug(
            "CooldownManager: %s/%s for player %s available after %s",
            action_kind,
            action_id,
            player_id,
            window.available_after.isoformat(),
        )
        return window

    def sync_from_history(
        self, player_id: str, completions: Iterable[ActionCompletion]
    ) -> int:
        """Rebuild a player's windows from their completion history.

        Only the player's own completions are considered. A window is replaced
        only when history holds a completion at least as recent as the one that
        produced it, so an in-flight record_completion is never rolled back.

        Returns:
            Number of windows written
        """
        durations = self.config.cooldown_durations
        latest = CooldownEngine.latest_completions(
            completion for completion in completions if completion.player_id == player_id
        )

        written = 0
        for key, completion in latest.items():
            window = CooldownEngine.build_window(
                completion.player_id,
                completion.action_kind,
                completion.action_id,
                completion.completed_at,
                durations,
            )
            with self._lock_for(key):
                current = self._windows.get(key)
                if current is not None and current.available_after > window.available_after:
                    continue
                self._windows[key] = window
                written += 1

        const.LOGGER.debug(
            "CooldownManager: Synced %d windows for player %s", written, player_id
        )
        return written
