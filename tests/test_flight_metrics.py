"""
Tests for P/L, breakeven and premium resolution.
"""

import math

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rocket_engine.flight_metrics import (
    CONTRACT_MULTIPLIER,
    MIN_PREMIUM,
    calculate_profit_loss,
    calculate_breakeven,
    intrinsic_value,
    is_in_the_money,
    resolve_premium
)


class TestProfitLoss:
    """Tests for P/L calculation."""

    def test_flat(self):
        assert calculate_profit_loss(5.20, 5.20, 1) == 0

    def test_long_gain(self):
        assert calculate_profit_loss(7.00, 5.20, 1) == pytest.approx(180)

    def test_short_gain(self):
        """Short position profits when the option cheapens."""
        assert calculate_profit_loss(3.00, 5.20, -1) == pytest.approx(220)

    def test_quantity_scales(self):
        assert calculate_profit_loss(6.00, 5.00, 3) == pytest.approx(3 * CONTRACT_MULTIPLIER)


class TestMoneynessByPrice:
    """Tests for intrinsic value and ITM flag."""

    def test_at_strike_not_itm(self):
        """Exactly at the strike is out of the money."""
        assert is_in_the_money(100, 100, 'call') is False
        assert is_in_the_money(100, 100, 'put') is False

    def test_itm(self):
        assert is_in_the_money(101, 100, 'call')
        assert is_in_the_money(99, 100, 'put')

    def test_intrinsic(self):
        assert intrinsic_value(110, 100, 'call') == 10
        assert intrinsic_value(90, 100, 'call') == 0
        assert intrinsic_value(90, 100, 'put') == 10
        assert intrinsic_value(110, 100, 'put') == 0


class TestBreakeven:
    """Tests for breakeven price."""

    def test_call(self):
        assert calculate_breakeven(600, 5.20, 'call') == pytest.approx(605.20)

    def test_put(self):
        assert calculate_breakeven(600, 5.20, 'put') == pytest.approx(594.80)


class TestResolvePremium:
    """Tests for the P/L baseline fallback chain."""

    def test_stored_premium_wins(self):
        assert resolve_premium(5.0, 4.0, 3.0, 2.0) == 5.0

    def test_entry_when_no_stored(self):
        assert resolve_premium(None, 4.0, 3.0, 2.0) == 4.0

    def test_initial_price_next(self):
        assert resolve_premium(None, None, 3.0, 2.0) == 3.0

    def test_current_price_last(self):
        """Falling through to current price gives zero P/L."""
        premium = resolve_premium(None, None, None, 2.0)
        assert calculate_profit_loss(2.0, premium) == 0

    def test_skips_unusable_candidates(self):
        """Zero, negative and NaN candidates are skipped."""
        assert resolve_premium(0.0, math.nan, -1.0, 2.5) == 2.5

    def test_floor(self):
        """Result never drops below one cent."""
        assert resolve_premium(0.001, None, None, 0.0) == MIN_PREMIUM
        assert resolve_premium(None, None, None, 0.0) == MIN_PREMIUM


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
