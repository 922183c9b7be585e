"""
Profit/Loss and Breakeven Calculations
All functions are pure; called every frame with a contract's live spot.
"""

import math
from typing import Literal, Optional

CONTRACT_MULTIPLIER = 100   # Shares per option contract
MIN_PREMIUM = 0.01          # One cent floor for the P/L baseline


def calculate_profit_loss(current_option_price: float, premium: float, quantity: int = 1) -> float:
    """
    P/L = (current option price - premium paid) * 100 * quantity.

    A negative quantity (short) flips the sign.
    """
    return (current_option_price - premium) * CONTRACT_MULTIPLIER * quantity


def intrinsic_value(spot: float, strike: float, option_type: Literal['call', 'put']) -> float:
    if option_type == 'call':
        return max(0.0, spot - strike)
    return max(0.0, strike - spot)


def is_in_the_money(spot: float, strike: float, option_type: Literal['call', 'put']) -> bool:
    """Strict inequality: exactly at the strike counts as out of the money."""
    if option_type == 'call':
        return spot > strike
    return spot < strike


def calculate_breakeven(strike: float, premium: float, option_type: Literal['call', 'put']) -> float:
    if option_type == 'call':
        return strike + premium
    return strike - premium


def _usable(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value) and value > 0


def resolve_premium(
    stored_premium: Optional[float],
    entry: Optional[float],
    initial_price: Optional[float],
    current_price: float
) -> float:
    """
    P/L baseline, first usable of: stored premium, launch entry, price at
    launch, current price. Falling through to the current price means the
    first frame shows exactly zero P/L. The result is floored at MIN_PREMIUM.
    """
    for candidate in (stored_premium, entry, initial_price):
        if _usable(candidate):
            return max(MIN_PREMIUM, candidate)
    return max(MIN_PREMIUM, current_price)
