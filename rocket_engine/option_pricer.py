"""
Black-Scholes Option Pricing and Greeks
Drives rocket thrust, fuel and regime selection every frame.

Two normal CDF models are available:
- 'approx': 0.5 * (1 + sign(x) * (1 - exp(-2x^2/pi))), cheap and symmetric,
  matches the flight visuals the tuning constants were chosen against.
- 'exact': scipy.stats.norm.cdf.

Invalid inputs (S <= 0 or sigma <= 0 with T > 0) are not guarded here;
they propagate as NaN/inf. Validate at the launch/adjust boundary instead.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Literal

import numpy as np
from scipy.stats import norm

CdfModel = Literal['approx', 'exact']


@dataclass(frozen=True)
class Greeks:
    """Option price and sensitivities for one contract at one spot."""
    delta: float
    gamma: float
    vega: float        # Per 1 percentage point of IV
    theta: float       # Annualized
    price: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'Greeks':
        return cls(
            delta=float(data['delta']),
            gamma=float(data['gamma']),
            vega=float(data['vega']),
            theta=float(data['theta']),
            price=float(data['price'])
        )


def approx_norm_cdf(x: float) -> float:
    """Closed-form normal CDF approximation; symmetric: cdf(x) + cdf(-x) == 1."""
    return 0.5 * (1.0 + np.sign(x) * (1.0 - np.exp(-2.0 * x * x / np.pi)))


def norm_pdf(x: float) -> float:
    return np.exp(-0.5 * x * x) / np.sqrt(2.0 * np.pi)


def normal_cdf(x: float, cdf_model: CdfModel = 'approx') -> float:
    """Dispatch to the configured CDF model."""
    if cdf_model == 'exact':
        return float(norm.cdf(x))
    if cdf_model == 'approx':
        return float(approx_norm_cdf(x))
    raise ValueError(f"Unknown cdf_model: {cdf_model!r}")


def _d1_d2(S: float, K: float, T: float, r: float, sigma: float):
    sqrt_t = np.sqrt(T)
    d1 = (np.log(S / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * sqrt_t)
    d2 = d1 - sigma * sqrt_t
    return d1, d2


def terminal_greeks(S: float, K: float, option_type: Literal['call', 'put']) -> Greeks:
    """Expired contract: unit-step delta, no curvature, intrinsic price."""
    if option_type == 'call':
        delta = 1.0 if S > K else 0.0
        price = max(0.0, S - K)
    else:
        delta = -1.0 if S < K else 0.0
        price = max(0.0, K - S)
    return Greeks(delta=delta, gamma=0.0, vega=0.0, theta=0.0, price=float(price))


def black_scholes_greeks(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Literal['call', 'put'],
    cdf_model: CdfModel = 'approx'
) -> Greeks:
    """
    Price and Greeks for a European option.

    Args:
        S: Current underlying price
        K: Strike price
        T: Time to expiration (years); T <= 0 returns the terminal payoff
        r: Risk-free rate (annualized)
        sigma: Implied volatility (annualized)
        option_type: 'call' or 'put'
        cdf_model: 'approx' or 'exact'

    Returns:
        Greeks(delta, gamma, vega, theta, price)
    """
    if T <= 0:
        return terminal_greeks(S, K, option_type)

    d1, d2 = _d1_d2(S, K, T, r, sigma)
    sqrt_t = np.sqrt(T)
    pdf_d1 = norm_pdf(d1)
    discount = K * np.exp(-r * T)

    cdf_d1 = normal_cdf(d1, cdf_model)
    if option_type == 'call':
        delta = cdf_d1
        theta_carry = normal_cdf(d2, cdf_model)
        price = S * cdf_d1 - discount * theta_carry
    else:
        delta = cdf_d1 - 1.0
        theta_carry = normal_cdf(-d2, cdf_model)
        price = discount * theta_carry - S * normal_cdf(-d1, cdf_model)

    gamma = pdf_d1 / (S * sigma * sqrt_t)
    vega = S * pdf_d1 * sqrt_t * 0.01
    theta = -(S * pdf_d1 * sigma) / (2.0 * sqrt_t) - r * discount * theta_carry

    return Greeks(
        delta=float(delta),
        gamma=float(gamma),
        vega=float(vega),
        theta=float(theta),
        price=float(price)
    )


def black_scholes_price(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Literal['call', 'put'],
    cdf_model: CdfModel = 'approx'
) -> float:
    """Option price only."""
    return black_scholes_greeks(S, K, T, r, sigma, option_type, cdf_model).price


def black_scholes_delta(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    option_type: Literal['call', 'put'],
    cdf_model: CdfModel = 'approx'
) -> float:
    """Calculate option delta"""
    return black_scholes_greeks(S, K, T, r, sigma, option_type, cdf_model).delta
