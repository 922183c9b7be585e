"""
Launch and Breakeven Geometry

Maps prices into scene coordinates:
- spot marker (per-rocket anchor) from the live spot
- launch position from strike distance and moneyness
- thrust orientation from delta tilt
- breakeven ring, strike line and trajectory curve for renderers
"""

from dataclasses import dataclass
from typing import Literal

import numpy as np

from .flight_metrics import calculate_breakeven, is_in_the_money


@dataclass(frozen=True)
class LaunchGeometry:
    """Scene-space launch parameters for one rocket."""
    position: np.ndarray
    spot_anchor: np.ndarray
    forward: np.ndarray
    slot_angle: float
    strike_distance: float


def slot_angle(index: int, spacing_deg: float = 60.0) -> float:
    """Angular slot (radians) of the index-th rocket."""
    return np.radians(index * spacing_deg)


def strike_distance(strike: float, spot: float, min_distance: float = 3.0, max_distance: float = 20.0) -> float:
    """Logarithmic strike-to-spot distance, clamped to [min_distance, max_distance]."""
    strike_pct = abs(strike - spot) / spot
    base = np.log(1.0 + strike_pct * 10.0) * 2.0
    return float(np.clip(base, min_distance, max_distance))


def spot_anchor(spot: float, angle: float, launch_config) -> np.ndarray:
    """Spot marker on the ground plane; x tracks spot, z separates slots."""
    x = (spot - launch_config.reference_spot) * launch_config.spot_scale
    z = np.sin(angle) * launch_config.slot_spread
    return np.array([x, 0.0, z], dtype=float)


def forward_direction(delta: float, option_type: Literal['call', 'put']) -> np.ndarray:
    """
    Nose direction: +X tilted about Z by (delta - 0.5) * 0.2 * pi; puts are
    turned half a revolution about Y.
    """
    tilt = (delta - 0.5) * np.pi * 0.2
    direction = np.array([np.cos(tilt), np.sin(tilt), 0.0])
    if option_type == 'put':
        direction[0] = -direction[0]
    return direction


def launch_height(option_price: float, launch_config) -> float:
    return max(launch_config.min_launch_height, option_price * launch_config.height_per_dollar)


def compute_launch_geometry(
    index: int,
    option_type: Literal['call', 'put'],
    strike: float,
    spot: float,
    delta: float,
    option_price: float,
    launch_config
) -> LaunchGeometry:
    """
    ITM rockets start outside their spot marker, OTM rockets start inside,
    both along the slot direction at the clamped strike distance.
    """
    angle = slot_angle(index, launch_config.slot_angle_deg)
    distance = strike_distance(
        strike, spot,
        launch_config.min_launch_distance,
        launch_config.max_launch_distance
    )
    direction = 1.0 if is_in_the_money(spot, strike, option_type) else -1.0
    anchor = spot_anchor(spot, angle, launch_config)

    position = np.array([
        anchor[0] + np.cos(angle) * distance * direction,
        launch_height(option_price, launch_config),
        anchor[2] + np.sin(angle) * distance * direction,
    ])

    return LaunchGeometry(
        position=position,
        spot_anchor=anchor,
        forward=forward_direction(delta, option_type),
        slot_angle=float(angle),
        strike_distance=distance
    )


def breakeven_ring_radius(strike: float, premium: float, spot: float, option_type: Literal['call', 'put']) -> float:
    """Radius of the breakeven ring around the spot marker."""
    return abs(calculate_breakeven(strike, premium, option_type) - spot) * 2.0


def strike_line(strike: float, spot: float):
    """(height, radius) of the horizontal strike reference ring."""
    distance = abs(strike - spot)
    return distance * 2.0, distance * 3.0


def trajectory_points(strike: float, spot: float, option_price: float, segments: int = 50) -> np.ndarray:
    """
    Closed loop of radius 2|K - S| that sinks to half its height as time
    decays. Returns (segments + 1, 3).
    """
    t = np.linspace(0.0, 1.0, segments + 1)
    radius = abs(strike - spot) * 2.0
    return np.column_stack([
        np.cos(t * 2.0 * np.pi) * radius,
        option_price * 10.0 * (1.0 - t * 0.5),
        np.sin(t * 2.0 * np.pi) * radius,
    ])
