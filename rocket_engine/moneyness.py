"""
Moneyness Classification

Maps delta to a discrete category and to the two regime triggers:
- ITM / ATM / OTM (hull shape, HUD colouring)
- Warp (extreme ITM) and crash (deep OTM) thresholds for the simulator

The three boundaries are independent: warp is stricter than ITM and crash is
stricter than OTM.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

ITM_DELTA_THRESHOLD = 0.80
OTM_DELTA_THRESHOLD = 0.20
WARP_DELTA_THRESHOLD = 0.90
CRASH_DELTA_THRESHOLD = 0.15


class Moneyness(Enum):
    """Option moneyness by delta magnitude."""
    ITM = "ITM"     # |delta| > 0.8
    ATM = "ATM"     # 0.2 < |delta| <= 0.8
    OTM = "OTM"     # |delta| <= 0.2


@dataclass(frozen=True)
class MoneynessThresholds:
    """Delta boundaries shared by the classifier and the simulator."""
    itm: float = ITM_DELTA_THRESHOLD
    otm: float = OTM_DELTA_THRESHOLD
    warp: float = WARP_DELTA_THRESHOLD
    crash: float = CRASH_DELTA_THRESHOLD

    @classmethod
    def from_config(cls, moneyness_config) -> 'MoneynessThresholds':
        return cls(
            itm=moneyness_config.itm_delta,
            otm=moneyness_config.otm_delta,
            warp=moneyness_config.warp_delta,
            crash=moneyness_config.crash_delta
        )


DEFAULT_THRESHOLDS = MoneynessThresholds()


def classify_moneyness(delta: float, thresholds: Optional[MoneynessThresholds] = None) -> Moneyness:
    """Classify by |delta|."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    abs_delta = abs(delta)
    if abs_delta > thresholds.itm:
        return Moneyness.ITM
    if abs_delta > thresholds.otm:
        return Moneyness.ATM
    return Moneyness.OTM


def is_warp_delta(delta: float, thresholds: Optional[MoneynessThresholds] = None) -> bool:
    """Extreme ITM: |delta| strictly above the warp threshold."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    return abs(delta) > thresholds.warp


def is_crash_delta(delta: float, thresholds: Optional[MoneynessThresholds] = None) -> bool:
    """Deep OTM: |delta| strictly below the crash threshold."""
    thresholds = thresholds or DEFAULT_THRESHOLDS
    return abs(delta) < thresholds.crash
