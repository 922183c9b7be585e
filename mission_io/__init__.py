"""
External interfaces: spot price feed, contract string parser, mission export.
"""

from .price_feed import (
    SpotPriceFeed,
    SpotPricePoller,
    HttpPriceSource,
    YahooPriceSource,
    PriceFeedError,
    extract_price,
    make_price_source
)
from .contract_parser import (
    ContractParser,
    ContractParseError,
    ParsedContract,
    parse_expiry,
    try_regex_parse,
    validate_parsed_contract,
    calculate_dte,
    to_launch_params
)
from .export import (
    EXPORT_VERSION,
    MissionImportError,
    export_mission,
    import_mission,
    restore_mission,
    save_mission,
    load_mission
)

__all__ = [
    'SpotPriceFeed',
    'SpotPricePoller',
    'HttpPriceSource',
    'YahooPriceSource',
    'PriceFeedError',
    'extract_price',
    'make_price_source',
    'ContractParser',
    'ContractParseError',
    'ParsedContract',
    'parse_expiry',
    'try_regex_parse',
    'validate_parsed_contract',
    'calculate_dte',
    'to_launch_params',
    'EXPORT_VERSION',
    'MissionImportError',
    'export_mission',
    'import_mission',
    'restore_mission',
    'save_mission',
    'load_mission',
]
