"""
Rocket Flight Engine - Core Components

This module provides the pricing-and-dynamics core:
- Black-Scholes Greeks with selectable CDF model
- Moneyness classification and regime thresholds
- Contract / flight state model with regime state machine
- Per-frame kinematic simulator (normal, warp, crash)
- P/L, breakeven and launch geometry
- MissionControl: owned rocket collection, adjustments, frame tick
"""

from .option_pricer import (
    Greeks,
    black_scholes_greeks,
    black_scholes_price,
    black_scholes_delta,
    approx_norm_cdf,
    normal_cdf,
    norm_pdf,
    terminal_greeks,
)
from .moneyness import (
    Moneyness,
    MoneynessThresholds,
    DEFAULT_THRESHOLDS,
    classify_moneyness,
    is_warp_delta,
    is_crash_delta
)
from .contract import (
    Contract,
    FlightRegime,
    RegimeFlags,
    SimulationState,
    WarpEffects,
    InvalidContractError,
    REGIME_TRANSITIONS
)
from .flight_metrics import (
    CONTRACT_MULTIPLIER,
    MIN_PREMIUM,
    calculate_profit_loss,
    calculate_breakeven,
    intrinsic_value,
    is_in_the_money,
    resolve_premium
)
from .geometry import (
    LaunchGeometry,
    compute_launch_geometry,
    breakeven_ring_radius,
    strike_line,
    trajectory_points
)
from .simulator import FlightSimulator
from .mailbox import UpdateMailbox, MailboxBatch
from .mission_control import MissionControl

__all__ = [
    # Greeks
    'Greeks',
    'black_scholes_greeks',
    'black_scholes_price',
    'black_scholes_delta',
    'approx_norm_cdf',
    'normal_cdf',
    'norm_pdf',
    'terminal_greeks',
    # Moneyness
    'Moneyness',
    'MoneynessThresholds',
    'DEFAULT_THRESHOLDS',
    'classify_moneyness',
    'is_warp_delta',
    'is_crash_delta',
    # Contract model
    'Contract',
    'FlightRegime',
    'RegimeFlags',
    'SimulationState',
    'WarpEffects',
    'InvalidContractError',
    'REGIME_TRANSITIONS',
    # P/L
    'CONTRACT_MULTIPLIER',
    'MIN_PREMIUM',
    'calculate_profit_loss',
    'calculate_breakeven',
    'intrinsic_value',
    'is_in_the_money',
    'resolve_premium',
    # Geometry
    'LaunchGeometry',
    'compute_launch_geometry',
    'breakeven_ring_radius',
    'strike_line',
    'trajectory_points',
    # Simulation
    'FlightSimulator',
    'UpdateMailbox',
    'MailboxBatch',
    'MissionControl',
]
