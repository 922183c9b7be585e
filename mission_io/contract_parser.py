"""
Contract String Parser
Turns text like "2 SPY 600C Dec 20 @ 5.20" into launch parameters.

Common formats are handled by regex; anything else goes to the OpenAI chat
completions API when an API key is configured.
"""

from dataclasses import dataclass, field
from datetime import date
import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

import requests

from mission_config.settings import ParserConfig
from rocket_utils.dates import calendar_dte, dte_to_years, month_day_to_date, normalize_date

logger = logging.getLogger(__name__)

# "2 SPY 600C DEC 20 @ 5.20", "-1 QQQ 500P 0DTE @ 2.50"
STANDARD_PATTERN = re.compile(
    r'^([+-]?\d+)\s+([A-Z]+)\s+(\d+(?:\.\d+)?)\s*([CP])\s+(.+?)(?:\s+@\s+(\d+(?:\.\d+)?))?$'
)
# "SPY 600C", "3 SPY 600C"
SIMPLE_PATTERN = re.compile(r'^([+-]?\d+)?\s*([A-Z]+)\s+(\d+(?:\.\d+)?)\s*([CP])$')
MONTH_DAY_PATTERN = re.compile(r'^(JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)\s+(\d{1,2})$')

SYSTEM_PROMPT = "You are a financial options contract parser. Always respond with valid JSON only."
USER_PROMPT = """Parse this options contract description into JSON format. Extract:
- quantity (number, can be negative for short positions)
- ticker (stock symbol)
- strike (strike price as number)
- type ("call" or "put")
- expiry (date string in ISO format, or null if not specified)
- premium (entry price as number, or null if not specified)

Contract: "{text}"

Respond with ONLY valid JSON, no other text."""


class ContractParseError(ValueError):
    """Text could not be turned into a valid contract."""


@dataclass
class ParsedContract:
    """Structured result of parsing one contract string."""
    ticker: str
    strike: float
    option_type: str
    quantity: int = 1
    expiry: Optional[date] = None
    premium: Optional[float] = None
    raw: str = ""
    source: str = "regex"           # 'regex' or 'openai'
    today: date = field(default_factory=date.today)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'quantity': self.quantity,
            'ticker': self.ticker,
            'strike': self.strike,
            'type': self.option_type,
            'expiry': self.expiry.isoformat() if self.expiry else None,
            'premium': self.premium,
        }


def parse_expiry(expiry_str: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """
    '0DTE' -> today, 'DEC 20' -> next Dec 20 (this year or next), anything
    else through the generic date parser. None if unparseable.
    """
    if not expiry_str:
        return None
    today = today or date.today()
    normalized = expiry_str.strip().upper()

    if normalized == '0DTE':
        return today

    match = MONTH_DAY_PATTERN.match(normalized)
    if match:
        month, day = match.groups()
        try:
            return month_day_to_date(month, int(day), today)
        except ValueError:
            return None

    return normalize_date(expiry_str.strip())


def try_regex_parse(text: str, today: Optional[date] = None) -> Optional[ParsedContract]:
    """Parse the common formats; None when no pattern matches."""
    today = today or date.today()
    normalized = text.strip().upper()

    match = STANDARD_PATTERN.match(normalized)
    if match:
        quantity, ticker, strike, kind, expiry_str, premium = match.groups()
        return ParsedContract(
            quantity=int(quantity),
            ticker=ticker,
            strike=float(strike),
            option_type='call' if kind == 'C' else 'put',
            expiry=parse_expiry(expiry_str, today),
            premium=float(premium) if premium else None,
            raw=text,
            today=today
        )

    match = SIMPLE_PATTERN.match(normalized)
    if match:
        quantity, ticker, strike, kind = match.groups()
        return ParsedContract(
            quantity=int(quantity) if quantity else 1,
            ticker=ticker,
            strike=float(strike),
            option_type='call' if kind == 'C' else 'put',
            raw=text,
            today=today
        )

    return None


def validate_parsed_contract(contract: Optional[ParsedContract]) -> List[str]:
    """Return a list of problems; empty means the contract is usable."""
    if contract is None:
        return ["no contract"]

    errors = []
    if not contract.ticker or not contract.ticker.strip():
        errors.append("missing ticker")
    if contract.option_type not in ('call', 'put'):
        errors.append(f"invalid type: {contract.option_type!r}")
    if not contract.strike or contract.strike <= 0:
        errors.append(f"invalid strike: {contract.strike}")
    if contract.quantity == 0:
        errors.append("quantity cannot be zero")
    if contract.premium is not None and contract.premium <= 0:
        errors.append(f"invalid premium: {contract.premium}")
    return errors


def calculate_dte(contract: ParsedContract, default: int = 7) -> int:
    """Calendar days to expiry; `default` when no expiry was given."""
    return calendar_dte(contract.expiry, contract.today, default)


def to_launch_params(
    contract: ParsedContract,
    spot: float,
    iv: float,
    default_dte: int = 7
) -> Dict[str, Any]:
    """Launch input record for MissionControl.launch_from_params."""
    return {
        'type': contract.option_type,
        'strike': contract.strike,
        'spot': spot,
        'time_to_expiry': dte_to_years(calculate_dte(contract, default_dte)),
        'iv': iv,
        'entry': contract.premium,
        'quantity': contract.quantity,
        'ticker': contract.ticker,
    }


class ContractParser:
    """Regex first, OpenAI fallback."""

    def __init__(self, config: Optional[ParserConfig] = None, session: Optional[requests.Session] = None):
        self.config = config or ParserConfig()
        self.session = session or requests.Session()

    @property
    def api_key(self) -> Optional[str]:
        return os.getenv(self.config.api_key_env)

    def parse(self, text: str, today: Optional[date] = None) -> ParsedContract:
        """
        Args:
            text: Contract description
            today: Reference date for expiry resolution (default: today)

        Raises:
            ContractParseError: Empty text, no parser could handle it, or the
                result failed validation
        """
        if not text or not text.strip():
            raise ContractParseError("Contract text cannot be empty")
        today = today or date.today()

        contract = try_regex_parse(text, today)
        if contract is not None:
            logger.debug(f"Parsed with regex: {contract.to_dict()}")
        else:
            if not self.api_key:
                raise ContractParseError(
                    f"Could not parse {text!r} and no OpenAI API key is configured "
                    f"(set {self.config.api_key_env})"
                )
            contract = self.parse_with_openai(text, today)
            logger.info(f"Parsed with OpenAI: {contract.to_dict()}")

        errors = validate_parsed_contract(contract)
        if errors:
            raise ContractParseError(f"Invalid contract {text!r}: {'; '.join(errors)}")
        return contract

    def parse_with_openai(self, text: str, today: date) -> ParsedContract:
        body = {
            'model': self.config.openai_model,
            'messages': [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': USER_PROMPT.format(text=text)},
            ],
            'temperature': 0,
            'max_tokens': 200,
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self.api_key}",
        }

        try:
            resp = self.session.post(
                self.config.openai_url,
                headers=headers,
                json=body,
                timeout=self.config.request_timeout
            )
            resp.raise_for_status()
            content = resp.json()['choices'][0]['message']['content'].strip()
        except (requests.RequestException, ValueError, KeyError, IndexError) as e:
            raise ContractParseError(f"Failed to parse contract: OpenAI request failed: {e}") from e

        try:
            parsed = json.loads(content)
        except ValueError as e:
            raise ContractParseError(f"Invalid JSON response from OpenAI: {content}") from e

        if not isinstance(parsed, dict) or not all(parsed.get(k) for k in ('ticker', 'strike', 'type')):
            raise ContractParseError("Missing required fields in parsed contract")

        try:
            return ParsedContract(
                quantity=int(parsed.get('quantity') or 1),
                ticker=str(parsed['ticker']).upper(),
                strike=float(parsed['strike']),
                option_type=str(parsed['type']).lower(),
                expiry=normalize_date(parsed['expiry']) if parsed.get('expiry') else None,
                premium=float(parsed['premium']) if parsed.get('premium') else None,
                raw=text,
                source='openai',
                today=today
            )
        except (TypeError, ValueError) as e:
            raise ContractParseError(f"Unusable values from OpenAI: {parsed}") from e
