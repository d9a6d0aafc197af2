"""Leveling Engine - Pure logic for FP thresholds and level derivation.

This engine provides stateless, pure Python functions for:
- FP required to reach a level (geometric thresholds, half-up rounding)
- Level derivation from a player's total FP
- Progress toward the next level
- The health assessment FP bonus, which scales with the next level

ARCHITECTURE: Level is never stored as independent truth. Callers pass the
canonical FP total and get the level back on every read.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from .. import const
from ..exceptions import InvalidInputError
from ..utils.math_utils import calculate_percentage, multiply_half_up

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class LevelInfo:
    """Level derived from an FP total.

    Attributes:
        level: Largest L with fp_required(L) <= total FP
        fp_required_for_next: Absolute FP threshold of level + 1
        fp_required_for_current: Absolute FP threshold of the current level
        fp_to_next: FP still needed to reach level + 1
        progress_percent: Progress through the current level (0-100)
    """

    level: int
    fp_required_for_next: int
    fp_required_for_current: int
    fp_to_next: int
    progress_percent: float


def _validate_fp(total_fp: object) -> int:
    """Return total_fp as an int, rejecting negatives and non-integers."""
    # bool is an int subclass; True FP is a caller bug
    if isinstance(total_fp, bool) or not isinstance(total_fp, int):
        raise InvalidInputError(f"FP total must be an integer, got {total_fp!r}")
    if total_fp < 0:
        raise InvalidInputError(f"FP total must be non-negative, got {total_fp}")
    return total_fp


class LevelingEngine:
    """Pure logic engine for level thresholds.

    All methods are static and take the base threshold and growth factor as
    parameters (defaulting to const values) so client and server can share a
    single computation.

    Threshold sequence with defaults (B=20, G=1.414):
        L1=0, L2=20, L3=28, L4=40, L5=57, L6=81, ...
    """

    @staticmethod
    def iter_thresholds(
        base_threshold: int = const.DEFAULT_LEVEL_BASE_THRESHOLD,
        growth_factor: float = const.DEFAULT_LEVEL_GROWTH_FACTOR,
    ) -> Iterator[tuple[int, int]]:
        """Yield (level, fp_required) pairs starting at level 1, without end."""
        growth = Decimal(str(growth_factor))
        yield 1, 0
        required = base_threshold
        level = 2
        while True:
            yield level, required
            # Small factors can stall at tiny thresholds (e.g. round(1 * 1.2) == 1)
            required = max(multiply_half_up(required, growth), required + 1)
            level += 1

    @staticmethod
    def fp_required(
        level: int,
        base_threshold: int = const.DEFAULT_LEVEL_BASE_THRESHOLD,
        growth_factor: float = const.DEFAULT_LEVEL_GROWTH_FACTOR,
    ) -> int:
        """Return the total FP needed to reach a level.

        Args:
            level: Target level (>= 1)
            base_threshold: FP required for level 2
            growth_factor: Multiplier applied per level after level 2

        Returns:
            Absolute FP threshold

        Raises:
            InvalidInputError: level < 1
        """
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise InvalidInputError(f"Level must be an integer >= 1, got {level!r}")

        for current, required in LevelingEngine.iter_thresholds(
            base_threshold, growth_factor
        ):
            if current == level:
                return required
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def level_for(
        total_fp: int,
        base_threshold: int = const.DEFAULT_LEVEL_BASE_THRESHOLD,
        growth_factor: float = const.DEFAULT_LEVEL_GROWTH_FACTOR,
    ) -> LevelInfo:
        """Derive the level for an FP total.

        O(level) iteration; levels stay small in practice because thresholds
        grow geometrically.

        Args:
            total_fp: Player's accumulated FP (non-negative integer)
            base_threshold: FP required for level 2
            growth_factor: Multiplier applied per level after level 2

        Returns:
            LevelInfo for the total

        Raises:
            InvalidInputError: total_fp is negative or not an integer
        """
        total_fp = _validate_fp(total_fp)

        current_level = 1
        current_required = 0
        for level, required in LevelingEngine.iter_thresholds(
            base_threshold, growth_factor
        ):
            if required > total_fp:
                span = required - current_required
                return LevelInfo(
                    level=current_level,
                    fp_required_for_next=required,
                    fp_required_for_current=current_required,
                    fp_to_next=required - total_fp,
                    progress_percent=calculate_percentage(
                        total_fp - current_required, span
                    ),
                )
            current_level, current_required = level, required
        raise AssertionError("unreachable")  # pragma: no cover

    @staticmethod
    def health_assessment_bonus(
        total_fp: int,
        base_threshold: int = const.DEFAULT_LEVEL_BASE_THRESHOLD,
        growth_factor: float = const.DEFAULT_LEVEL_GROWTH_FACTOR,
    ) -> int:
        """FP granted for a health assessment: 10% of the next level threshold.

        Example:
            total_fp=25 → next threshold 28 → bonus 3
        """
        info = LevelingEngine.level_for(total_fp, base_threshold, growth_factor)
        return multiply_half_up(
            info.fp_required_for_next, const.HEALTH_ASSESSMENT_BONUS_RATIO
        )
