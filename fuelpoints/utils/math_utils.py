# File: utils/math_utils.py
"""Math and calculation utilities for the Fuel Points engine.

Pure Python math functions with no collaborator access. All functions here can
be unit tested without any store or scheduler setup.

Functions:
    - round_half_up: Round to an integer with a single consistent rule
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import logging

_LOGGER = logging.getLogger(__name__)

# Default float precision for percentages
DATA_FLOAT_PRECISION = 2


def _to_decimal(value: int | float | str | Decimal) -> Decimal:
    """Convert a number to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    # str() keeps 1.414 as "1.414" instead of 1.41399999999999992...
    return Decimal(str(value))


def round_half_up(value: int | float | str | Decimal) -> int:
    """Round a value to the nearest integer, halves away from zero.

    Python's built-in round() uses banker's rounding (round(28.5) == 28),
    which would make level thresholds disagree with clients that use
    Math.round semantics.

    Args:
        value: Number to round

    Returns:
        Rounded integer

    Examples:
        round_half_up(28.28) → 28
        round_half_up(28.5) → 29
        round_half_up(39.592) → 40
    """
    return int(_to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def multiply_half_up(
    base: int | float | str | Decimal,
    factor: int | float | str | Decimal,
) -> int:
    """Multiply two numbers exactly and round the product half-up.

    Args:
        base: Base value
        factor: Multiplier (e.g. level growth factor 1.414)

    Returns:
        Rounded integer product

    Examples:
        multiply_half_up(20, 1.414) → 28
        multiply_half_up(28, 1.414) → 40
    """
    return round_half_up(_to_decimal(base) * _to_decimal(factor))


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Args:
        current: Current progress value
        target: Target/total value
        precision: Number of decimal places for rounding

    Returns:
        Percentage (0-100) with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0
    return clamp(round((current / target) * 100, precision), 0.0, 100.0)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    if min_val > max_val:
        _LOGGER.warning("clamp called with min %s > max %s", min_val, max_val)
    return max(min_val, min(value, max_val))
