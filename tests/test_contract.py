"""
Tests for the contract and flight state model.
"""

import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rocket_engine.contract import (
    Contract,
    FlightRegime,
    InvalidContractError,
    SimulationState,
    ensure_valid_params
)


class TestContract:
    """Tests for Contract."""

    def test_ids_unique(self):
        a = Contract('call', 100, 100, 0.1, 0.2)
        b = Contract('call', 100, 100, 0.1, 0.2)
        assert a.id != b.id
        assert a.id.startswith("rocket_")

    def test_id_immutable(self):
        contract = Contract('call', 100, 100, 0.1, 0.2)
        with pytest.raises(AttributeError):
            contract.id = "other"

    def test_base_iv_defaults_to_iv(self):
        contract = Contract('put', 100, 100, 0.1, 0.25)
        assert contract.base_iv == 0.25
        assert contract.follow_feed

    def test_long_short(self):
        assert Contract('call', 100, 100, 0.1, 0.2, quantity=2).is_long
        assert not Contract('call', 100, 100, 0.1, 0.2, quantity=-1).is_long


class TestEnsureValidParams:
    """Tests for the launch/adjust validation boundary."""

    def test_valid(self):
        ensure_valid_params({
            'option_type': 'call', 'strike': 100, 'spot': 100,
            'time_to_expiry': 0.0, 'iv': 0.2
        })

    @pytest.mark.parametrize("field,value", [
        ('strike', 0),
        ('strike', -5),
        ('spot', 0),
        ('iv', 0),
        ('iv', float('nan')),
        ('time_to_expiry', -0.01),
        ('option_type', 'straddle'),
    ])
    def test_invalid(self, field, value):
        params = {'option_type': 'call', 'strike': 100, 'spot': 100, 'time_to_expiry': 0.1, 'iv': 0.2}
        params[field] = value
        with pytest.raises(InvalidContractError) as exc_info:
            ensure_valid_params(params)
        assert isinstance(exc_info.value, ValueError)
        assert any(issue.field == field for issue in exc_info.value.result.errors)

    def test_partial_only_checks_present(self):
        ensure_valid_params({'spot': 101.5}, partial=True)
        with pytest.raises(InvalidContractError):
            ensure_valid_params({'iv': -0.1}, partial=True)


class TestRegimeStateMachine:
    """Tests for FlightRegime transitions."""

    def test_normal_to_warp_and_back(self):
        state = SimulationState()
        assert state.transition_to(FlightRegime.WARPING)
        assert state.is_warping
        assert state.transition_to(FlightRegime.NORMAL)
        assert not state.is_warping

    def test_crashed_is_terminal(self):
        state = SimulationState()
        assert state.transition_to(FlightRegime.CRASHED)
        assert not state.transition_to(FlightRegime.NORMAL)
        assert not state.transition_to(FlightRegime.WARPING)
        assert state.is_crashed

    def test_warp_cannot_crash_directly(self):
        state = SimulationState(regime=FlightRegime.WARPING)
        assert not state.transition_to(FlightRegime.CRASHED)

    def test_is_finite(self):
        state = SimulationState()
        assert state.is_finite()
        state.position = np.array([0.0, np.inf, 0.0])
        assert not state.is_finite()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
