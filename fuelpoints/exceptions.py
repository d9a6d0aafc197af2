"""Exceptions and error records for the Fuel Points engine.

Taxonomy:
- InvalidInputError: contract violation by the caller, fatal to the call.
- UnknownPlayerError: the player does not exist in the progress store.
- TransientExternalFailure: store/oracle/payment failure or timeout; the
  caller may retry with backoff.
- ScheduleMissed: a reset boundary that elapsed while the process was down.
  Reported, never raised.

Eligibility denials are NOT exceptions; see EligibilityDecision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from . import const

if TYPE_CHECKING:
    from datetime import datetime


class FuelPointsError(Exception):
    """Base class for all engine errors."""


class InvalidInputError(FuelPointsError, ValueError):
    """Raised when a caller passes a value that violates the engine contract."""


class UnknownPlayerError(InvalidInputError):
    """Raised when a player id is not known to the progress store.

    Attributes:
        player_id: The id that could not be resolved
    """

    def __init__(self, player_id: str) -> None:
        """Initialize UnknownPlayerError.

        Args:
            player_id: The id that could not be resolved
        """
        self.player_id = player_id
        super().__init__(f"Unknown player: {player_id}")


class TransientExternalFailure(FuelPointsError):
    """Raised when an external collaborator fails or times out.

    Attributes:
        operation: Name of the collaborator call (e.g. "async_check_credits")
        timed_out: True when the bounded timeout elapsed
        display: User-facing text; never exposes the underlying cause
    """

    def __init__(
        self,
        operation: str,
        *,
        timed_out: bool = False,
        display: str = const.DISPLAY_TRANSIENT_FAILURE,
    ) -> None:
        """Initialize TransientExternalFailure.

        Args:
            operation: Name of the collaborator call
            timed_out: Whether the failure was a timeout
            display: Text safe to show the player
        """
        self.operation = operation
        self.timed_out = timed_out
        self.display = display
        detail = "timed out" if timed_out else "failed"
        super().__init__(f"External call '{operation}' {detail}")


@dataclass(frozen=True)
class ScheduleMissed:
    """A reset boundary that elapsed while the process was not running.

    Attributes:
        boundary: The fire instant (UTC) that was missed
        last_reset: When the store last recorded a reset, if known
        compensated: True when the boundary was fired on startup
    """

    boundary: datetime
    last_reset: datetime | None
    compensated: bool = False
