"""
Validation framework for contract parameters and mission records.
"""
import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping
from enum import Enum
import logging

logger = logging.getLogger(__name__)

OPTION_TYPES = ('call', 'put')

# Exported rocket fields and whether they must be present on import
ROCKET_RECORD_FIELDS = {
    'type': True,
    'strike': True,
    'spot': True,
    'quantity': False,
    'time_to_expiry': True,
    'iv': True,
    'entry_premium': False,
    'ticker': False,
    'greeks': False,
    'position': False,
    'velocity': False,
}


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Input is unusable
    WARNING = "warning"  # Input is suspicious but usable
    INFO = "info"        # Minor issue


@dataclass
class ValidationIssue:
    """Single validation issue."""
    field: str
    severity: ValidationSeverity
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Result of validating one record."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == ValidationSeverity.ERROR for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    def error(self, field_name: str, message: str) -> None:
        self.issues.append(ValidationIssue(field_name, ValidationSeverity.ERROR, message))

    def warning(self, field_name: str, message: str) -> None:
        self.issues.append(ValidationIssue(field_name, ValidationSeverity.WARNING, message))

    def extend(self, other: 'ValidationResult', prefix: str = "") -> None:
        for issue in other.issues:
            self.issues.append(ValidationIssue(
                f"{prefix}{issue.field}", issue.severity, issue.message
            ))

    def summary(self) -> str:
        return "; ".join(str(i) for i in self.errors)

    def log_summary(self):
        """Log validation summary."""
        for issue in self.issues:
            if issue.severity == ValidationSeverity.ERROR:
                logger.error(f"{issue.field}: {issue.message}")
            elif issue.severity == ValidationSeverity.WARNING:
                logger.warning(f"{issue.field}: {issue.message}")
            else:
                logger.info(f"{issue.field}: {issue.message}")


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_positive(result: ValidationResult, name: str, value: Any) -> None:
    if not _is_number(value) or not math.isfinite(value):
        result.error(name, f"must be a finite number, got {value!r}")
    elif value <= 0:
        result.error(name, f"must be positive, got {value}")


def validate_and_normalize_iv(iv: float):
    """
    Validate implied volatility and convert percentage input to decimal.

    Returns:
        Tuple of (normalized_iv, warning_message)
        Returns (None, error_message) if invalid
    """
    if not _is_number(iv) or not math.isfinite(iv):
        return None, f"IV is not a finite number: {iv!r}"

    if iv <= 0:
        return None, f"IV is non-positive: {iv}"

    # Likely percentage format (e.g., 16 instead of 0.16)
    if iv > 10.0:
        normalized = iv / 100.0
        return normalized, f"IV appears to be percentage format, converted {iv} -> {normalized}"

    if iv > 2.0:
        return iv, f"Unusually high IV: {iv:.1%}"

    return iv, None


def validate_contract_params(params: Mapping[str, Any], partial: bool = False) -> ValidationResult:
    """
    Validate financial parameters for a launch or an adjustment.

    Args:
        params: Mapping with any of option_type, strike, spot, iv, time_to_expiry,
            quantity
        partial: When True only the keys present are checked (adjustments)

    Returns:
        ValidationResult
    """
    result = ValidationResult()

    required = () if partial else ('option_type', 'strike', 'spot', 'iv', 'time_to_expiry')
    for name in required:
        if params.get(name) is None:
            result.error(name, "is required")

    if params.get('option_type') is not None and params['option_type'] not in OPTION_TYPES:
        result.error('option_type', f"must be 'call' or 'put', got {params['option_type']!r}")

    for name in ('strike', 'spot', 'iv'):
        if params.get(name) is not None:
            _check_positive(result, name, params[name])

    tte = params.get('time_to_expiry')
    if tte is not None:
        if not _is_number(tte) or not math.isfinite(tte):
            result.error('time_to_expiry', f"must be a finite number, got {tte!r}")
        elif tte < 0:
            result.error('time_to_expiry', f"cannot be negative, got {tte}")

    entry = params.get('entry')
    if entry is not None:
        _check_positive(result, 'entry', entry)

    quantity = params.get('quantity')
    if quantity is not None:
        if not isinstance(quantity, numbers.Integral) or isinstance(quantity, bool):
            result.error('quantity', f"must be an integer, got {quantity!r}")
        elif quantity == 0:
            result.error('quantity', "cannot be zero")

    iv = params.get('iv')
    if _is_number(iv) and math.isfinite(iv) and iv > 2.0:
        result.warning('iv', f"unusually high IV: {iv:.1%}")

    return result


def _check_vector(result: ValidationResult, name: str, value: Any) -> None:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        result.error(name, f"must be a 3-element list, got {value!r}")
    elif not all(_is_number(v) and math.isfinite(v) for v in value):
        result.error(name, f"must contain finite numbers, got {value!r}")


def validate_rocket_record(record: Any) -> ValidationResult:
    """Validate one exported rocket entry."""
    result = ValidationResult()
    if not isinstance(record, dict):
        result.error('rocket', f"must be an object, got {type(record).__name__}")
        return result

    for name, required in ROCKET_RECORD_FIELDS.items():
        if required and name not in record:
            result.error(name, "is missing")

    result.extend(validate_contract_params({
        'option_type': record.get('type'),
        'strike': record.get('strike'),
        'spot': record.get('spot'),
        'iv': record.get('iv'),
        'time_to_expiry': record.get('time_to_expiry'),
        'entry': record.get('entry_premium'),
        'quantity': record.get('quantity'),
    }, partial=True))

    for name in ('position', 'velocity'):
        if record.get(name) is not None:
            _check_vector(result, name, record[name])

    greeks = record.get('greeks')
    if greeks is not None:
        if not isinstance(greeks, dict):
            result.error('greeks', "must be an object")
        else:
            missing = [k for k in ('delta', 'gamma', 'vega', 'theta', 'price') if k not in greeks]
            if missing:
                result.error('greeks', f"missing {missing}")

    ticker = record.get('ticker')
    if ticker is not None and (not isinstance(ticker, str) or not ticker.strip()):
        result.error('ticker', "must be a non-empty string")

    return result


def validate_mission_record(data: Any) -> ValidationResult:
    """Validate a full export record (version, rockets list, each rocket)."""
    result = ValidationResult()
    if not isinstance(data, dict):
        result.error('record', f"must be an object, got {type(data).__name__}")
        return result

    if not data.get('version'):
        result.error('version', "missing version")

    rockets = data.get('rockets')
    if not isinstance(rockets, list):
        result.error('rockets', "missing rockets data")
        return result

    for i, rocket in enumerate(rockets):
        result.extend(validate_rocket_record(rocket), prefix=f"rockets[{i}].")

    return result
