"""
Mission export / import.

Record format:
    {version, timestamp, metadata: {spot, iv_adjustment},
     rockets: [{type, strike, spot, quantity, time_to_expiry, iv,
                entry_premium, ticker, greeks, position, velocity}],
     camera_state}

Import is all-or-nothing: the whole record is validated before any rocket
is created.
"""

from datetime import datetime
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from mission_config.settings import Config
from rocket_engine.mission_control import MissionControl
from rocket_engine.option_pricer import Greeks
from rocket_utils.validation import ValidationResult, validate_mission_record

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class MissionImportError(ValueError):
    """Malformed mission record; nothing was applied."""

    def __init__(self, message: str, result: Optional[ValidationResult] = None):
        self.result = result
        super().__init__(message)


def export_rocket(mission: MissionControl, contract_id: str) -> Dict[str, Any]:
    contract = mission.contracts[contract_id]
    state = mission.states[contract_id]
    premium = contract.premium if contract.premium is not None and contract.premium > 0 else None

    return {
        'type': contract.option_type,
        'strike': contract.strike,
        'spot': contract.spot,
        'quantity': contract.quantity,
        'time_to_expiry': contract.time_to_expiry,
        'iv': contract.iv,
        'entry_premium': premium,
        'ticker': contract.ticker,
        'greeks': contract.greeks.to_dict() if contract.greeks else None,
        'position': [float(v) for v in state.position],
        'velocity': [float(v) for v in state.velocity],
    }


def export_mission(mission: MissionControl, camera_state: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Plain, JSON-serializable record of every rocket.

    camera_state defaults to the one stored on the mission (set by restore).
    """
    if camera_state is None:
        camera_state = mission.camera_state
    return {
        'version': EXPORT_VERSION,
        'timestamp': datetime.now().isoformat(),
        'metadata': {
            'spot': mission.last_spot,
            'iv_adjustment': mission.iv_adjustment,
        },
        'rockets': [export_rocket(mission, cid) for cid in mission.contracts],
        'camera_state': camera_state,
    }


def import_mission(source: Union[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Parse (if JSON text) and validate an export record.

    Raises:
        MissionImportError: Bad JSON, missing version/rockets, or any invalid
            rocket entry
    """
    if isinstance(source, str):
        try:
            data = json.loads(source)
        except ValueError as e:
            raise MissionImportError(f"Failed to import mission: invalid JSON ({e})") from e
    else:
        data = source

    result = validate_mission_record(data)
    if not result.is_valid:
        raise MissionImportError(f"Failed to import mission: {result.summary()}", result)

    logger.info(f"Mission imported: {len(data['rockets'])} rockets")
    return data


def restore_mission(source: Union[str, Dict[str, Any]], config: Optional[Config] = None) -> MissionControl:
    """
    Build a new MissionControl from an export record. Position, velocity and
    Greeks are restored exactly as exported.
    """
    data = import_mission(source)
    mission = MissionControl(config)

    for record in data['rockets']:
        contract = mission.launch(
            option_type=record['type'],
            strike=record['strike'],
            spot=record['spot'],
            time_to_expiry=record['time_to_expiry'],
            iv=record['iv'],
            entry=record.get('entry_premium'),
            quantity=record.get('quantity', 1),
            ticker=record.get('ticker') or mission.config.launch.default_ticker,
            position=record.get('position')
        )
        if record.get('greeks'):
            contract.greeks = Greeks.from_dict(record['greeks'])
        if record.get('velocity') is not None:
            mission.states[contract.id].velocity = np.array(record['velocity'], dtype=float)

    mission.camera_state = data.get('camera_state')

    metadata = data.get('metadata') or {}
    if metadata.get('spot'):
        mission.last_spot = float(metadata['spot'])
    if metadata.get('iv_adjustment'):
        # Exported IVs already include the adjustment
        mission.iv_adjustment = float(metadata['iv_adjustment'])
        for contract in mission.contracts.values():
            contract.base_iv = contract.iv / mission.iv_factor

    return mission


def save_mission(
    mission: MissionControl,
    filepath: Union[str, Path],
    camera_state: Optional[Dict[str, Any]] = None
) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(export_mission(mission, camera_state), f, indent=2)
    logger.info(f"Mission exported: {path} ({len(mission)} rockets)")
    return path


def load_mission(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Read and validate an export file."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Mission file not found: {filepath}")
    with open(path) as f:
        return import_mission(f.read())
