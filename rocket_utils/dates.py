"""
Expiry date helpers for the contract parser.
"""
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

MONTHS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}


def normalize_date(value: Any) -> Optional[date]:
    """
    ISO string, datetime, pandas Timestamp or date -> date.

    Returns None for None, NaT and anything pandas cannot parse.
    """
    if value is None:
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    try:
        stamp = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.date()


def month_day_to_date(month: str, day: int, today: date) -> date:
    """
    'DEC', 20 -> the next Dec 20 on or after today.

    Raises:
        KeyError: Unknown month abbreviation
        ValueError: Day does not exist in that month
    """
    expiry = date(today.year, MONTHS[month.upper()], day)
    if expiry < today:
        expiry = date(today.year + 1, expiry.month, expiry.day)
    return expiry


def calendar_dte(expiry: Optional[date], today: date, default: int = 7) -> int:
    """Calendar days until expiry; `default` when unknown, 0 once past."""
    if expiry is None:
        return default
    return max(0, (expiry - today).days)


def dte_to_years(dte: int) -> float:
    """Calendar days -> year fraction on a 365-day basis (never negative)."""
    return max(0, dte) / 365.0
