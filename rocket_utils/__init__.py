"""
Utility modules for the Rocket Flight Engine.
"""
from .logging_config import setup_logging, resolve_level
from .dates import normalize_date, month_day_to_date, calendar_dte, dte_to_years
from .validation import (
    validate_contract_params,
    validate_rocket_record,
    validate_mission_record,
    validate_and_normalize_iv,
    ValidationResult,
    ValidationIssue,
    ValidationSeverity
)
