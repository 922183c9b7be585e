"""
Contract and Flight State Model
One Contract (financial parameters) paired with one SimulationState
(kinematics + regime) per rocket. Both are created and removed together.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Literal, Mapping, Optional
import uuid

import numpy as np

from rocket_utils.validation import validate_contract_params, ValidationResult
from .option_pricer import Greeks


class InvalidContractError(ValueError):
    """Non-positive strike/spot/IV, negative expiry or bad option type."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(f"Invalid contract parameters: {result.summary()}")


def ensure_valid_params(params: Mapping[str, Any], partial: bool = False) -> None:
    """Raise InvalidContractError if any financial parameter is invalid."""
    result = validate_contract_params(params, partial=partial)
    if not result.is_valid:
        raise InvalidContractError(result)
    result.log_summary()


def _new_contract_id() -> str:
    return f"rocket_{uuid.uuid4().hex[:12]}"


@dataclass
class Contract:
    """
    Financial side of a rocket.

    premium is the entry price used as the P/L baseline. When no entry was
    supplied at launch it is filled with the creation-time option price.
    """
    option_type: Literal['call', 'put']
    strike: float
    spot: float
    time_to_expiry: float       # Years, fixed for the run
    iv: float
    quantity: int = 1           # Sign = long/short
    ticker: str = "SPY"
    entry: Optional[float] = None
    premium: Optional[float] = None
    initial_price: Optional[float] = None
    greeks: Optional[Greeks] = None
    base_iv: Optional[float] = None     # IV before any slider adjustment
    follow_feed: bool = True            # Cleared once spot is set by hand
    id: str = field(default_factory=_new_contract_id)

    def __post_init__(self):
        if self.base_iv is None:
            self.base_iv = self.iv

    def __setattr__(self, name, value):
        if name == 'id' and 'id' in self.__dict__:
            raise AttributeError("Contract id is immutable")
        super().__setattr__(name, value)

    @property
    def is_long(self) -> bool:
        return self.quantity > 0


class FlightRegime(Enum):
    """Kinematic mode of a rocket."""
    NORMAL = "normal"
    WARPING = "warping"     # Extreme ITM
    CRASHED = "crashed"     # Latched for the rest of the run


# Allowed transitions; CRASHED is terminal
REGIME_TRANSITIONS = {
    FlightRegime.NORMAL: {FlightRegime.NORMAL, FlightRegime.WARPING, FlightRegime.CRASHED},
    FlightRegime.WARPING: {FlightRegime.WARPING, FlightRegime.NORMAL},
    FlightRegime.CRASHED: {FlightRegime.CRASHED},
}


@dataclass(frozen=True)
class RegimeFlags:
    """Read-only view for renderers."""
    is_warping: bool
    is_crashed: bool
    is_exploding: bool


@dataclass
class WarpEffects:
    """Warp-only cosmetic state; cleared when leaving warp."""
    trail: Deque = field(default_factory=lambda: deque(maxlen=50))
    pulse_phase: float = 0.0

    def reset(self) -> None:
        self.trail.clear()
        self.pulse_phase = 0.0


def _vec(values=(0.0, 0.0, 0.0)) -> np.ndarray:
    return np.array(values, dtype=float)


@dataclass
class SimulationState:
    """
    Kinematic state owned by the simulator.

    max_thrust, fuel_burn_rate and max_speed are derived once at launch.
    """
    position: np.ndarray = field(default_factory=_vec)
    velocity: np.ndarray = field(default_factory=_vec)
    acceleration: np.ndarray = field(default_factory=_vec)
    forward: np.ndarray = field(default_factory=lambda: _vec((1.0, 0.0, 0.0)))
    rotation: np.ndarray = field(default_factory=_vec)  # Cosmetic tumble (radians)
    spot_anchor: np.ndarray = field(default_factory=_vec)

    fuel: float = 1.0
    max_thrust: float = 0.0
    fuel_burn_rate: float = 0.0
    max_speed: float = 5.0

    slot_angle: float = 0.0
    regime: FlightRegime = FlightRegime.NORMAL
    is_descending: bool = False         # Crash attraction active, not yet latched
    crash_time: Optional[float] = None
    explosion_remaining: float = 0.0
    is_frozen: bool = False
    hold_position: bool = False         # Manual override pending for one frame
    elapsed: float = 0.0
    warp: WarpEffects = field(default_factory=WarpEffects)

    @property
    def is_warping(self) -> bool:
        return self.regime == FlightRegime.WARPING

    @property
    def is_crashed(self) -> bool:
        return self.regime == FlightRegime.CRASHED

    @property
    def is_exploding(self) -> bool:
        return self.explosion_remaining > 0.0

    @property
    def flags(self) -> RegimeFlags:
        return RegimeFlags(
            is_warping=self.is_warping,
            is_crashed=self.is_crashed,
            is_exploding=self.is_exploding
        )

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    def transition_to(self, regime: FlightRegime) -> bool:
        """Move to a new regime if the transition table allows it."""
        if regime not in REGIME_TRANSITIONS[self.regime]:
            return False
        self.regime = regime
        return True

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.position)) and np.all(np.isfinite(self.velocity)))
