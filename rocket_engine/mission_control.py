"""
Mission Control
Owns every live rocket (Contract + SimulationState keyed by id) and is the
single entry point for launches, parameter adjustments and frame ticks.
"""

import logging
import math
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from mission_config.settings import Config
from rocket_utils.validation import validate_and_normalize_iv
from .contract import Contract, SimulationState, ensure_valid_params
from .flight_metrics import (
    calculate_breakeven,
    calculate_profit_loss,
    intrinsic_value,
    is_in_the_money,
    resolve_premium
)
from .geometry import breakeven_ring_radius
from .mailbox import UpdateMailbox
from .moneyness import classify_moneyness
from .simulator import FlightSimulator

logger = logging.getLogger(__name__)

ADJUSTABLE_PARAMS = ('strike', 'spot', 'iv', 'time_to_expiry', 'option_type', 'position')
IV_ADJUSTMENT_LIMIT = 50.0      # Slider range in percent, either side of base IV


def _as_vector(value: Sequence[float], name: str) -> np.ndarray:
    vector = np.asarray(value, dtype=float)
    if vector.shape != (3,) or not np.all(np.isfinite(vector)):
        raise ValueError(f"{name} must be three finite numbers, got {value!r}")
    return vector


def _first_present(params: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if params.get(key) is not None:
            return params[key]
    return None


def _normalize_iv(iv: Any, label: str) -> Any:
    """Percent-style IV (16 for 16%) becomes a decimal; bad values pass through to validation."""
    normalized, message = validate_and_normalize_iv(iv)
    if normalized is None or normalized == iv:
        return iv
    logger.warning(f"{label}: {message}")
    return normalized


class MissionControl:
    """
    Portfolio of rockets.

    Only the frame-loop thread may call the mutating methods directly. Other
    threads post into `mailbox`; `tick` drains it before integrating.
    """

    def __init__(self, config: Optional[Config] = None, mailbox: Optional[UpdateMailbox] = None):
        self.config = config or Config()
        self.simulator = FlightSimulator(self.config)
        self.mailbox = mailbox or UpdateMailbox()
        self.contracts: Dict[str, Contract] = {}
        self.states: Dict[str, SimulationState] = {}
        self.iv_adjustment = 0.0
        self.last_spot: Optional[float] = None
        self.camera_state: Optional[Dict[str, Any]] = None  # Renderer camera, carried through export
        self._launch_count = 0

    def __len__(self) -> int:
        return len(self.contracts)

    def __contains__(self, contract_id: str) -> bool:
        return contract_id in self.contracts

    @property
    def iv_factor(self) -> float:
        return 1.0 + self.iv_adjustment / 100.0

    def launch(
        self,
        option_type: str,
        strike: float,
        spot: float,
        time_to_expiry: float,
        iv: float,
        entry: Optional[float] = None,
        quantity: int = 1,
        ticker: str = "SPY",
        position: Optional[Sequence[float]] = None
    ) -> Contract:
        """
        Create a contract and its flight state.

        Args:
            option_type: 'call' or 'put'
            strike: Strike price
            spot: Underlying price at launch
            time_to_expiry: Years to expiry
            iv: Implied volatility (decimal); the current slider adjustment
                is applied on top
            entry: Premium paid per share, defaults to the launch price
            quantity: Signed contract count (negative = short)
            ticker: Underlying symbol
            position: Optional launch position overriding the computed one

        Returns:
            The new Contract

        Raises:
            InvalidContractError: Nothing is created
        """
        iv = _normalize_iv(iv, f"{ticker} {strike} {option_type}")
        ensure_valid_params({
            'option_type': option_type,
            'strike': strike,
            'spot': spot,
            'time_to_expiry': time_to_expiry,
            'iv': iv,
            'entry': entry,
            'quantity': quantity,
        })
        start = _as_vector(position, 'position') if position is not None else None

        contract = Contract(
            option_type=option_type,
            strike=float(strike),
            spot=float(spot),
            time_to_expiry=float(time_to_expiry),
            iv=float(iv) * self.iv_factor,
            quantity=int(quantity),
            ticker=ticker,
            entry=entry,
            base_iv=float(iv)
        )
        greeks = self.simulator.compute_greeks(contract)
        contract.greeks = greeks
        contract.initial_price = greeks.price
        contract.premium = entry if entry is not None else greeks.price

        state = self.simulator.initialize_state(contract, self._launch_count)
        if start is not None:
            state.position = start
        self._launch_count += 1

        self.contracts[contract.id] = contract
        self.states[contract.id] = state

        logger.info(
            f"Launched {contract.id}: {contract.quantity} {ticker} {strike}"
            f"{option_type[0].upper()} spot={spot} delta={greeks.delta:.3f} "
            f"premium=${contract.premium:.2f}"
        )
        return contract

    def launch_from_params(self, params: Mapping[str, Any]) -> Contract:
        """
        Launch from an input record {type, strike, spot, time_to_expiry, iv,
        entry?, quantity?, ticker?, position?}. Missing fields take the
        configured launch defaults.
        """
        defaults = self.config.launch
        return self.launch(
            option_type=params.get('type', params.get('option_type', defaults.default_type)),
            strike=params.get('strike', defaults.default_strike),
            spot=params.get('spot', self.last_spot or defaults.default_spot),
            time_to_expiry=params.get('time_to_expiry', defaults.default_time_to_expiry),
            iv=params.get('iv', defaults.default_iv),
            entry=_first_present(params, 'entry', 'entry_premium'),
            quantity=params.get('quantity', 1),
            ticker=params.get('ticker', defaults.default_ticker),
            position=params.get('position')
        )

    def launch_from_text(
        self,
        text: str,
        spot: Optional[float] = None,
        iv: Optional[float] = None,
        today: Optional[date] = None
    ) -> Contract:
        """
        Parse a contract string such as "2 SPY 600C Dec 20 @ 5.20" and launch it.

        Spot defaults to the last feed price, then the feed fallback price.
        """
        from mission_io.contract_parser import ContractParser, to_launch_params

        parser = ContractParser(self.config.parser)
        parsed = parser.parse(text, today=today)
        if spot is None:
            spot = self.last_spot or self.config.feed.fallback_price
        params = to_launch_params(
            parsed,
            spot=spot,
            iv=iv or self.config.launch.default_iv,
            default_dte=self.config.parser.default_dte
        )
        return self.launch_from_params(params)

    def remove(self, contract_id: str) -> bool:
        if contract_id not in self.contracts:
            return False
        del self.contracts[contract_id]
        del self.states[contract_id]
        logger.info(f"Removed {contract_id}")
        return True

    def reset(self) -> None:
        """Remove every rocket and restart slot numbering."""
        self.contracts.clear()
        self.states.clear()
        self._launch_count = 0

    def get(self, contract_id: str) -> Optional[Contract]:
        return self.contracts.get(contract_id)

    def get_state(self, contract_id: str) -> Optional[SimulationState]:
        return self.states.get(contract_id)

    def adjust(self, contract_id: str, **params: Any) -> bool:
        """
        Change any subset of strike, spot, iv, time_to_expiry, option_type
        and position on one contract.

        Everything is validated before anything is applied, and Greeks are
        recomputed before returning. A position is held for the next frame
        and integrated from afterwards.

        Returns:
            False if the id is unknown, True otherwise

        Raises:
            ValueError: Unknown parameter or malformed position
            InvalidContractError: Invalid financial value
        """
        contract = self.contracts.get(contract_id)
        if contract is None:
            return False

        unknown = set(params) - set(ADJUSTABLE_PARAMS)
        if unknown:
            raise ValueError(f"Cannot adjust {sorted(unknown)}; allowed: {ADJUSTABLE_PARAMS}")

        position = params.pop('position', None)
        if 'iv' in params:
            params['iv'] = _normalize_iv(params['iv'], contract_id)
        ensure_valid_params(params, partial=True)
        new_position = _as_vector(position, 'position') if position is not None else None

        for key, value in params.items():
            setattr(contract, key, value if key == 'option_type' else float(value))
        if 'iv' in params:
            contract.base_iv = contract.iv / self.iv_factor
        if 'spot' in params:
            contract.follow_feed = False
        contract.greeks = self.simulator.compute_greeks(contract)

        if new_position is not None:
            state = self.states[contract_id]
            state.position = new_position
            state.hold_position = True

        if params or new_position is not None:
            changed = sorted(params) + (['position'] if new_position is not None else [])
            logger.info(f"Adjusted {contract_id}: {', '.join(changed)}")
        return True

    def update_spot(self, price: float, ticker: Optional[str] = None) -> int:
        """
        Apply a feed price to every contract still following the feed.

        Args:
            price: New underlying price
            ticker: Only contracts on this ticker; None means all

        Returns:
            Number of contracts updated
        """
        ensure_valid_params({'spot': price}, partial=True)
        self.last_spot = float(price)

        updated = 0
        for contract in self.contracts.values():
            if not contract.follow_feed:
                continue
            if ticker is not None and contract.ticker != ticker:
                continue
            contract.spot = float(price)
            contract.greeks = self.simulator.compute_greeks(contract)
            updated += 1
        return updated

    def apply_iv_adjustment(self, percent: float) -> float:
        """
        Volatility slider: every contract's IV becomes base IV * (1 + percent/100).

        Returns:
            The percent actually applied (clamped to +-50)
        """
        percent = float(np.clip(percent, -IV_ADJUSTMENT_LIMIT, IV_ADJUSTMENT_LIMIT))
        self.iv_adjustment = percent

        for contract in self.contracts.values():
            contract.iv = contract.base_iv * self.iv_factor
            contract.greeks = self.simulator.compute_greeks(contract)

        logger.info(f"IV adjustment {percent:+.0f}% applied to {len(self.contracts)} rockets")
        return percent

    def tick(self, dt: float) -> None:
        """
        One frame: drain pending updates, then advance every rocket.

        Rejected posts from other threads are logged and dropped.
        """
        batch = self.mailbox.drain()

        for ticker, price in batch.spot.items():
            try:
                self.update_spot(price, ticker)
            except ValueError as e:
                logger.warning(f"Ignoring spot update {ticker}={price}: {e}")

        for contract_id, params in batch.adjustments:
            try:
                if not self.adjust(contract_id, **params):
                    logger.warning(f"Ignoring adjustment for unknown rocket {contract_id}")
            except ValueError as e:
                logger.warning(f"Rejected adjustment for {contract_id}: {e}")

        for params in batch.launches:
            try:
                self.launch_from_params(params)
            except ValueError as e:
                logger.warning(f"Rejected launch {params}: {e}")

        for contract_id, contract in self.contracts.items():
            self.simulator.advance(contract, self.states[contract_id], dt)

    def flight_report(self, contract_id: str) -> Optional[Dict[str, Any]]:
        """HUD values for one rocket: Greeks, P/L, breakeven, regime."""
        contract = self.contracts.get(contract_id)
        if contract is None:
            return None
        state = self.states[contract_id]
        greeks = contract.greeks or self.simulator.compute_greeks(contract)

        premium = resolve_premium(contract.premium, contract.entry, contract.initial_price, greeks.price)
        breakeven = calculate_breakeven(contract.strike, premium, contract.option_type)

        return {
            'id': contract.id,
            'ticker': contract.ticker,
            'type': contract.option_type,
            'strike': contract.strike,
            'spot': contract.spot,
            'quantity': contract.quantity,
            'iv': contract.iv,
            'price': greeks.price,
            'delta': greeks.delta,
            'gamma': greeks.gamma,
            'vega': greeks.vega,
            'theta': greeks.theta,
            'premium': premium,
            'pnl': calculate_profit_loss(greeks.price, premium, contract.quantity),
            'intrinsic_value': intrinsic_value(contract.spot, contract.strike, contract.option_type),
            'in_the_money': is_in_the_money(contract.spot, contract.strike, contract.option_type),
            'breakeven': breakeven,
            'breakeven_ring_radius': breakeven_ring_radius(
                contract.strike, premium, contract.spot, contract.option_type
            ),
            'moneyness': classify_moneyness(greeks.delta, self.simulator.thresholds).value,
            'regime': state.regime.value,
            'fuel': state.fuel,
            'speed': state.speed,
            'altitude': float(state.position[1]),
            'is_frozen': state.is_frozen,
        }

    def snapshot(self, contract_id: str) -> Optional[Dict[str, Any]]:
        """Renderer view of one rocket's kinematic state."""
        state = self.states.get(contract_id)
        if state is None:
            return None
        flags = state.flags
        return {
            'position': state.position.tolist(),
            'velocity': state.velocity.tolist(),
            'rotation': state.rotation.tolist(),
            'forward': state.forward.tolist(),
            'spot_anchor': state.spot_anchor.tolist(),
            'fuel': state.fuel,
            'is_warping': flags.is_warping,
            'is_crashed': flags.is_crashed,
            'is_exploding': flags.is_exploding,
            'is_descending': state.is_descending,
            'warp_trail': [p.tolist() for p in state.warp.trail],
            'warp_pulse_phase': state.warp.pulse_phase,
        }

    def get_flight_summary(self) -> pd.DataFrame:
        """One row per rocket, launch order."""
        if not self.contracts:
            return pd.DataFrame()
        rows: List[Dict[str, Any]] = [self.flight_report(cid) for cid in self.contracts]
        df = pd.DataFrame(rows)
        return df.set_index('id')

    def total_pnl(self) -> float:
        """Sum of P/L across all rockets."""
        total = 0.0
        for contract_id in self.contracts:
            pnl = self.flight_report(contract_id)['pnl']
            if math.isfinite(pnl):
                total += pnl
        return total
