"""Tests for math utilities."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fuelpoints.utils.math_utils import (
    calculate_percentage,
    clamp,
    multiply_half_up,
    round_half_up,
)


class TestRounding:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(28.28, 28), (28.5, 29), (2.5, 3), (39.592, 40), (Decimal("11.5"), 12)],
    )
    def test_round_half_up(self, value: float | Decimal, expected: int) -> None:
        """Test halves round up, unlike built-in round()."""
        assert round_half_up(value) == expected

    def test_multiply_without_float_drift(self) -> None:
        """Test products are computed in Decimal."""
        assert multiply_half_up(20, 1.414) == 28
        assert multiply_half_up(81, 1.414) == 115


class TestPercentages:
    """Tests for calculate_percentage() and clamp()."""

    def test_calculate_percentage(self) -> None:
        """Test rounding and the zero-target guard."""
        assert calculate_percentage(1, 3) == 33.33
        assert calculate_percentage(5, 0) == 0.0
        assert calculate_percentage(150, 100) == 100.0

    def test_clamp(self) -> None:
        """Test values are bounded."""
        assert clamp(150, 0, 100) == 100
        assert clamp(-10, 0, 100) == 0
