"""
Tests for moneyness classification and regime thresholds.
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mission_config.settings import MoneynessConfig
from rocket_engine.moneyness import (
    Moneyness,
    MoneynessThresholds,
    classify_moneyness,
    is_warp_delta,
    is_crash_delta
)


class TestClassifyMoneyness:
    """Tests for ITM/ATM/OTM boundaries."""

    @pytest.mark.parametrize("delta,expected", [
        (0.95, Moneyness.ITM),
        (0.81, Moneyness.ITM),
        (0.80, Moneyness.ATM),
        (0.50, Moneyness.ATM),
        (0.21, Moneyness.ATM),
        (0.20, Moneyness.OTM),
        (0.0, Moneyness.OTM),
    ])
    def test_call_deltas(self, delta, expected):
        assert classify_moneyness(delta) == expected

    def test_put_deltas_use_magnitude(self):
        """Put deltas classify by |delta|."""
        assert classify_moneyness(-0.9) == Moneyness.ITM
        assert classify_moneyness(-0.5) == Moneyness.ATM
        assert classify_moneyness(-0.1) == Moneyness.OTM

    def test_custom_thresholds(self):
        """Boundaries are independently configurable."""
        thresholds = MoneynessThresholds(itm=0.7, otm=0.3)
        assert classify_moneyness(0.75, thresholds) == Moneyness.ITM
        assert classify_moneyness(0.25, thresholds) == Moneyness.OTM


class TestRegimeThresholds:
    """Tests for warp and crash predicates."""

    def test_warp_is_strict(self):
        assert not is_warp_delta(0.90)
        assert is_warp_delta(0.91)
        assert is_warp_delta(-0.95)

    def test_crash_is_strict(self):
        assert not is_crash_delta(0.15)
        assert is_crash_delta(0.149)
        assert is_crash_delta(-0.01)

    def test_warp_stricter_than_itm(self):
        """A delta can be ITM without warping."""
        assert classify_moneyness(0.85) == Moneyness.ITM
        assert not is_warp_delta(0.85)

    def test_crash_stricter_than_otm(self):
        """A delta can be OTM without crashing."""
        assert classify_moneyness(0.18) == Moneyness.OTM
        assert not is_crash_delta(0.18)

    def test_from_config(self):
        """Thresholds load from the config section."""
        thresholds = MoneynessThresholds.from_config(
            MoneynessConfig(itm_delta=0.75, otm_delta=0.25, warp_delta=0.95, crash_delta=0.05)
        )
        assert thresholds == MoneynessThresholds(itm=0.75, otm=0.25, warp=0.95, crash=0.05)
        assert not is_warp_delta(0.93, thresholds)
        assert not is_crash_delta(0.1, thresholds)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
