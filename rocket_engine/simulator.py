"""
Rocket Flight Simulator
Per-frame kinematics driven by live Greeks.

Regimes (state machine in contract.FlightRegime):
- NORMAL: gravity toward the origin, thrust along the launch orientation
  while fuel lasts, linear drag, bounce off the minimum safe radius. When
  |delta| drops below the crash threshold the rocket is instead pulled
  toward its spot marker until contact, which latches CRASHED.
- WARPING: |delta| above the warp threshold. Runs outward from the spot
  marker, capped at warp_max_distance. Entry/exit are edge-triggered.
- CRASHED: terminal. Position frozen at the crash site, cosmetic tumble only.

Rockets never interact with each other.
"""

from collections import deque
import logging
from typing import Optional

import numpy as np

from mission_config.settings import Config
from .contract import Contract, FlightRegime, SimulationState, WarpEffects
from .geometry import compute_launch_geometry, spot_anchor
from .moneyness import MoneynessThresholds, is_crash_delta, is_warp_delta
from .option_pricer import Greeks, black_scholes_greeks

logger = logging.getLogger(__name__)

# Cosmetic tumble rates (rad/s) per axis
DESCENT_TUMBLE = np.array([1.5, 1.2, 1.8])
CRASH_TUMBLE = np.array([1.0, 0.9, 1.1])


class FlightSimulator:
    """
    Stateless integrator: all per-rocket state lives in SimulationState.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.physics = self.config.physics
        self.thresholds = MoneynessThresholds.from_config(self.config.moneyness)

    def compute_greeks(self, contract: Contract) -> Greeks:
        """Greeks at the contract's current spot."""
        return black_scholes_greeks(
            contract.spot,
            contract.strike,
            contract.time_to_expiry,
            self.config.pricing.risk_free_rate,
            contract.iv,
            contract.option_type,
            self.config.pricing.cdf_model
        )

    def derive_thrust(self, state: SimulationState, greeks: Greeks) -> None:
        """Thrust from |delta|, fuel burn from |theta|."""
        state.max_thrust = abs(greeks.delta) * self.physics.thrust_scale
        state.fuel_burn_rate = abs(greeks.theta) * self.physics.burn_scale
        state.max_speed = self.physics.max_speed

    def initialize_state(self, contract: Contract, index: int) -> SimulationState:
        """
        Launch state for a freshly created contract.

        Args:
            contract: Contract with creation-time Greeks already set
            index: Launch slot (spaces rockets around the origin)
        """
        greeks = contract.greeks or self.compute_greeks(contract)
        geometry = compute_launch_geometry(
            index,
            contract.option_type,
            contract.strike,
            contract.spot,
            greeks.delta,
            greeks.price,
            self.config.launch
        )

        state = SimulationState(
            position=geometry.position.copy(),
            forward=geometry.forward,
            spot_anchor=geometry.spot_anchor,
            slot_angle=geometry.slot_angle,
            warp=WarpEffects(trail=deque(maxlen=self.physics.warp_trail_length))
        )
        self.derive_thrust(state, greeks)

        logger.debug(
            f"{contract.id}: max thrust {state.max_thrust:.2f}, "
            f"fuel burn rate {state.fuel_burn_rate:.4f}"
        )
        return state

    def advance(self, contract: Contract, state: SimulationState, dt: float) -> None:
        """
        Advance one rocket by dt seconds.

        Recomputes Greeks from the contract's live spot, refreshes the spot
        marker, then applies the active regime.
        """
        if dt <= 0:
            return

        state.elapsed += dt
        if state.is_frozen:
            return

        greeks = self.compute_greeks(contract)
        contract.greeks = greeks
        if self.physics.recompute_thrust_on_update:
            self.derive_thrust(state, greeks)

        state.spot_anchor = spot_anchor(contract.spot, state.slot_angle, self.config.launch)
        state.explosion_remaining = max(0.0, state.explosion_remaining - dt)

        if state.is_crashed:
            self._tumble_crashed(state, dt)
            return

        if not state.is_finite():
            self._freeze(contract, state)
            return

        if state.hold_position:
            # Manual override: keep it for this frame, integrate from it next frame
            state.hold_position = False
            return

        self._update_regime(contract, state, greeks)

        previous_position = state.position.copy()
        previous_velocity = state.velocity.copy()

        if state.is_warping:
            self._warp_step(state, greeks, dt)
        elif is_crash_delta(greeks.delta, self.thresholds):
            self._descent_step(contract, state, greeks, dt)
        else:
            state.is_descending = False
            self._normal_step(state, dt)

        if not state.is_finite():
            state.position = previous_position
            state.velocity = previous_velocity
            self._freeze(contract, state)

    def _update_regime(self, contract: Contract, state: SimulationState, greeks: Greeks) -> None:
        """Edge-triggered warp entry/exit."""
        warp_now = is_warp_delta(greeks.delta, self.thresholds)

        if warp_now and not state.is_warping:
            state.transition_to(FlightRegime.WARPING)
            state.is_descending = False
            state.warp.reset()
            logger.info(f"{contract.id}: warp drive engaged (delta={greeks.delta:.3f})")
        elif not warp_now and state.is_warping:
            state.transition_to(FlightRegime.NORMAL)
            state.warp.reset()
            logger.info(f"{contract.id}: warp drive disengaged (delta={greeks.delta:.3f})")

    def _normal_step(self, state: SimulationState, dt: float) -> None:
        p = self.physics
        acceleration = np.zeros(3)

        # Inverse-square gravity toward the origin
        distance = float(np.linalg.norm(state.position))
        if distance >= p.gravity_epsilon:
            acceleration -= state.position / distance * (p.gravitational_parameter / distance ** 2)

        # Thrust along the launch orientation, constants fixed at launch
        if state.fuel > 0:
            acceleration += state.forward * state.max_thrust * state.fuel
            state.fuel = max(0.0, state.fuel - state.fuel_burn_rate * dt)

        acceleration -= p.drag_coefficient * state.velocity

        velocity = state.velocity + acceleration * dt
        speed = float(np.linalg.norm(velocity))
        if speed > state.max_speed:
            velocity *= state.max_speed / speed

        position = state.position + velocity * dt

        # Inelastic bounce off the minimum safe radius
        radius = float(np.linalg.norm(position))
        if radius < p.min_safe_radius:
            if radius >= p.gravity_epsilon:
                normal = position / radius
            elif distance >= p.gravity_epsilon:
                normal = state.position / distance
            else:
                normal = np.array([0.0, 1.0, 0.0])
            normal_speed = float(np.dot(velocity, normal))
            if normal_speed < 0:
                velocity = velocity - (1.0 + p.restitution) * normal_speed * normal
            position = normal * p.min_safe_radius

        state.acceleration = acceleration
        state.velocity = velocity
        state.position = position

    def _warp_step(self, state: SimulationState, greeks: Greeks, dt: float) -> None:
        p = self.physics
        offset = state.position - state.spot_anchor
        distance = float(np.linalg.norm(offset))
        direction = offset / distance if distance >= p.gravity_epsilon else state.forward

        target_distance = min(distance + abs(greeks.delta) * p.warp_speed_scale * dt, p.warp_max_distance)
        position = state.spot_anchor + direction * target_distance

        state.warp.trail.appendleft(state.position.copy())
        state.warp.pulse_phase = (state.warp.pulse_phase + 8.0 * dt) % (2.0 * np.pi)

        state.acceleration = np.zeros(3)
        state.velocity = (position - state.position) / dt
        state.position = position

    def _descent_step(self, contract: Contract, state: SimulationState, greeks: Greeks, dt: float) -> None:
        """Pull toward the spot marker; latch CRASHED on contact."""
        p = self.physics
        state.is_descending = True

        offset = state.spot_anchor - state.position
        distance = float(np.linalg.norm(offset))
        if distance >= p.crash_contact_radius:
            strength = p.crash_base_strength + (self.thresholds.crash - abs(greeks.delta)) * p.crash_strength_gain
            step = min(strength * dt * p.crash_speed_scale, distance)
            move = offset / distance * step
            state.velocity = move / dt
            state.position = state.position + move
            state.acceleration = np.zeros(3)
            state.rotation = state.rotation + DESCENT_TUMBLE * dt
            distance = float(np.linalg.norm(state.spot_anchor - state.position))

        if distance < p.crash_contact_radius:
            self._crash(contract, state, greeks)

    def _crash(self, contract: Contract, state: SimulationState, greeks: Greeks) -> None:
        state.transition_to(FlightRegime.CRASHED)
        state.is_descending = False
        state.position = state.spot_anchor.copy()
        state.velocity = np.zeros(3)
        state.acceleration = np.zeros(3)
        state.crash_time = state.elapsed
        state.explosion_remaining = self.physics.explosion_lifetime
        logger.info(f"{contract.id}: crashed into spot marker (delta={greeks.delta:.3f})")

    def _tumble_crashed(self, state: SimulationState, dt: float) -> None:
        crash_age = state.elapsed - (state.crash_time or state.elapsed)
        tumble_speed = 2.0 + crash_age * 0.5
        state.rotation = state.rotation + CRASH_TUMBLE * tumble_speed * dt

    def _freeze(self, contract: Contract, state: SimulationState) -> None:
        state.is_frozen = True
        logger.warning(f"{contract.id}: non-finite flight state, rocket frozen")
