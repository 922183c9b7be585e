"""Configuration module for the Rocket Flight Engine."""

from .settings import (
    Config,
    ConfigManager,
    PricingConfig,
    MoneynessConfig,
    PhysicsConfig,
    LaunchConfig,
    FeedConfig,
    ParserConfig,
    Environment,
    get_arcade_config,
    get_exact_pricing_config
)

__all__ = [
    'Config',
    'ConfigManager',
    'PricingConfig',
    'MoneynessConfig',
    'PhysicsConfig',
    'LaunchConfig',
    'FeedConfig',
    'ParserConfig',
    'Environment',
    'get_arcade_config',
    'get_exact_pricing_config'
]
