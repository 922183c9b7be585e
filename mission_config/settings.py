"""
Configuration Management System

Centralized configuration for the Rocket Flight Engine:
- Pricing model parameters
- Moneyness and regime thresholds
- Flight physics tuning
- Launch geometry
- Spot price feed and contract parser settings

Configuration hierarchy:
1. Default values (this file)
2. Environment variables
3. Config file overrides (YAML/JSON)
4. Runtime overrides
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any
from pathlib import Path
import os
import json
import yaml
from enum import Enum


class Environment(Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    DEMO = "demo"
    PRODUCTION = "production"


@dataclass
class PricingConfig:
    """Black-Scholes model parameters."""
    risk_free_rate: float = 0.02        # 2% annualized
    cdf_model: str = "approx"           # 'approx' (visual parity) or 'exact' (scipy)

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if self.cdf_model not in ("approx", "exact"):
            errors.append(f"cdf_model {self.cdf_model!r} must be 'approx' or 'exact'")
        if not -0.05 <= self.risk_free_rate <= 0.25:
            errors.append(f"risk_free_rate {self.risk_free_rate} out of range [-0.05, 0.25]")
        return errors


@dataclass
class MoneynessConfig:
    """Delta thresholds for moneyness and flight regimes."""
    itm_delta: float = 0.80             # |delta| above -> ITM
    otm_delta: float = 0.20             # |delta| at or below -> OTM
    warp_delta: float = 0.90            # |delta| above -> warp regime
    crash_delta: float = 0.15           # |delta| below -> crash regime

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        for name in ("itm_delta", "otm_delta", "warp_delta", "crash_delta"):
            value = getattr(self, name)
            if not 0 < value < 1:
                errors.append(f"{name} {value} must be between 0 and 1")
        if self.otm_delta >= self.itm_delta:
            errors.append("otm_delta must be less than itm_delta")
        return errors


@dataclass
class PhysicsConfig:
    """Flight dynamics tuning. Units are visual, not SI."""
    # Gravity toward the origin anchor
    gravitational_parameter: float = 500.0
    gravity_epsilon: float = 1e-3       # Skip gravity closer than this
    min_safe_radius: float = 3.0        # Rockets bounce off this sphere
    restitution: float = 0.3            # Fraction of normal speed kept on bounce

    # Thrust and fuel (fixed at launch from Greeks)
    thrust_scale: float = 1.5           # max_thrust = |delta| * thrust_scale
    burn_scale: float = 0.003           # fuel_burn_rate = |theta| * burn_scale
    max_speed: float = 5.0
    drag_coefficient: float = 0.1
    recompute_thrust_on_update: bool = False

    # Crash regime
    crash_contact_radius: float = 4.5   # Spot marker radius 1.5 + 3 margin
    crash_base_strength: float = 0.8
    crash_strength_gain: float = 5.0
    crash_speed_scale: float = 20.0
    explosion_lifetime: float = 2.0     # Seconds

    # Warp regime
    warp_max_distance: float = 25.0
    warp_speed_scale: float = 50.0
    warp_trail_length: int = 50

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if self.gravitational_parameter < 0:
            errors.append("gravitational_parameter cannot be negative")
        if self.min_safe_radius <= 0:
            errors.append("min_safe_radius must be positive")
        if not 0 <= self.restitution <= 1:
            errors.append(f"restitution {self.restitution} should be between 0 and 1")
        if self.max_speed <= 0:
            errors.append("max_speed must be positive")
        if self.drag_coefficient < 0:
            errors.append("drag_coefficient cannot be negative")
        if self.crash_contact_radius <= 0:
            errors.append("crash_contact_radius must be positive")
        if self.warp_max_distance <= 0:
            errors.append("warp_max_distance must be positive")
        if self.explosion_lifetime < 0:
            errors.append("explosion_lifetime cannot be negative")
        return errors


@dataclass
class LaunchConfig:
    """Launch geometry and default contract parameters."""
    reference_spot: float = 680.0       # Spot mapped to x = 0
    spot_scale: float = 0.3             # World units per dollar of spot
    slot_angle_deg: float = 60.0        # Angular spacing between rockets
    slot_spread: float = 20.0
    min_launch_distance: float = 3.0
    max_launch_distance: float = 20.0
    min_launch_height: float = 15.0
    height_per_dollar: float = 20.0

    default_type: str = "call"
    default_strike: float = 100.0
    default_spot: float = 100.0
    default_time_to_expiry: float = 0.0027  # ~1 day
    default_iv: float = 0.16
    default_ticker: str = "SPY"

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if self.reference_spot <= 0:
            errors.append("reference_spot must be positive")
        if self.min_launch_distance >= self.max_launch_distance:
            errors.append("min_launch_distance must be less than max_launch_distance")
        if self.default_type not in ("call", "put"):
            errors.append(f"default_type {self.default_type!r} must be 'call' or 'put'")
        if self.default_iv <= 0:
            errors.append("default_iv must be positive")
        return errors


@dataclass
class FeedConfig:
    """Live spot price feed."""
    source: str = "http"                # 'http' backend or 'yfinance'
    api_base_url: str = "http://localhost:5001/api"
    ticker: str = "SPY"
    poll_interval: float = 5.0          # Seconds
    request_timeout: float = 3.0
    fallback_price: float = 680.0

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if self.source not in ("http", "yfinance"):
            errors.append(f"source {self.source!r} must be 'http' or 'yfinance'")
        if self.poll_interval <= 0:
            errors.append("poll_interval must be positive")
        if self.fallback_price <= 0:
            errors.append("fallback_price must be positive")
        return errors


@dataclass
class ParserConfig:
    """Natural-language contract parser."""
    openai_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o-mini"
    api_key_env: str = "OPENAI_API_KEY"
    request_timeout: float = 15.0
    default_dte: int = 7

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []
        if self.default_dte < 0:
            errors.append("default_dte cannot be negative")
        return errors


@dataclass
class Config:
    """Master configuration container."""
    environment: Environment = Environment.DEVELOPMENT
    pricing: PricingConfig = field(default_factory=PricingConfig)
    moneyness: MoneynessConfig = field(default_factory=MoneynessConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    launch: LaunchConfig = field(default_factory=LaunchConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)

    def validate(self) -> List[str]:
        """Validate all configuration sections."""
        errors = []
        errors.extend(self.pricing.validate())
        errors.extend(self.moneyness.validate())
        errors.extend(self.physics.validate())
        errors.extend(self.launch.validate())
        errors.extend(self.feed.validate())
        errors.extend(self.parser.validate())
        return errors

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'environment': self.environment.value,
            'pricing': asdict(self.pricing),
            'moneyness': asdict(self.moneyness),
            'physics': asdict(self.physics),
            'launch': asdict(self.launch),
            'feed': asdict(self.feed),
            'parser': asdict(self.parser),
        }

    def save(self, filepath: str) -> None:
        """Save configuration to file."""
        data = self.to_dict()
        path = Path(filepath)

        if path.suffix == '.yaml' or path.suffix == '.yml':
            with open(filepath, 'w') as f:
                yaml.dump(data, f, default_flow_style=False)
        else:
            with open(filepath, 'w') as f:
                json.dump(data, f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'Config':
        """Load configuration from file."""
        path = Path(filepath)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        if path.suffix == '.yaml' or path.suffix == '.yml':
            with open(filepath) as f:
                data = yaml.safe_load(f)
        else:
            with open(filepath) as f:
                data = json.load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict) -> 'Config':
        """Create config from dictionary. Unknown keys are ignored."""
        config = cls()

        if 'environment' in data:
            config.environment = Environment(data['environment'])

        for section in ('pricing', 'moneyness', 'physics', 'launch', 'feed', 'parser'):
            if section not in data:
                continue
            target = getattr(config, section)
            for key, value in data[section].items():
                if hasattr(target, key):
                    setattr(target, key, value)

        return config

    @classmethod
    def from_environment(cls) -> 'Config':
        """Create config from environment variables."""
        config = cls()

        env = os.getenv('ROCKET_ENV', 'development')
        config.environment = Environment(env)

        for var, (section, key, cast) in _ENV_OVERRIDES.items():
            raw = os.getenv(var)
            if raw:
                setattr(getattr(config, section), key, cast(raw))

        return config


# Environment variable -> (section, field, type)
_ENV_OVERRIDES = {
    'ROCKET_RISK_FREE_RATE': ('pricing', 'risk_free_rate', float),
    'ROCKET_CDF_MODEL': ('pricing', 'cdf_model', str),
    'ROCKET_API_BASE_URL': ('feed', 'api_base_url', str),
    'ROCKET_TICKER': ('feed', 'ticker', str),
    'ROCKET_POLL_INTERVAL': ('feed', 'poll_interval', float),
    'ROCKET_PRICE_SOURCE': ('feed', 'source', str),
}


class ConfigManager:
    """
    Configuration management with layered overrides.

    Hierarchy: defaults < config file < environment < runtime
    """

    _instance: Optional['ConfigManager'] = None
    _config: Optional[Config] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_config(cls) -> Config:
        """Get current configuration."""
        if cls._config is None:
            cls._config = Config()
        return cls._config

    @classmethod
    def load_config(
        cls,
        config_file: Optional[str] = None,
        use_env: bool = True
    ) -> Config:
        """
        Load configuration with all overrides.

        Args:
            config_file: Path to config file (YAML or JSON)
            use_env: Whether to apply environment variable overrides
        """
        config = Config()

        if config_file and Path(config_file).exists():
            config = Config.load(config_file)

        if use_env:
            env_config = Config.from_environment()
            if os.getenv('ROCKET_ENV'):
                config.environment = env_config.environment
            for var, (section, key, _) in _ENV_OVERRIDES.items():
                if os.getenv(var):
                    setattr(getattr(config, section), key,
                            getattr(getattr(env_config, section), key))

        errors = config.validate()
        if errors:
            raise ValueError(f"Configuration errors: {errors}")

        cls._config = config
        return config

    @classmethod
    def update(cls, **kwargs: Any) -> Config:
        """
        Update configuration at runtime.

        Nested keys use double underscores or are passed via a dict, e.g.
        ``ConfigManager.update(**{'physics.drag_coefficient': 0.2})``.
        """
        config = cls.get_config()

        for key, value in kwargs.items():
            key = key.replace('__', '.')
            if '.' in key:
                parts = key.split('.')
                obj = config
                for part in parts[:-1]:
                    obj = getattr(obj, part)
                setattr(obj, parts[-1], value)
            elif hasattr(config, key):
                setattr(config, key, value)

        errors = config.validate()
        if errors:
            raise ValueError(f"Configuration errors after update: {errors}")

        return config

    @classmethod
    def reset(cls) -> None:
        """Drop the cached configuration (next get_config returns defaults)."""
        cls._config = None


# Preset configurations
def get_arcade_config() -> Config:
    """Snappier flight: stronger thrust, less drag, faster warp."""
    config = Config()
    config.environment = Environment.DEMO
    config.physics.thrust_scale = 3.0
    config.physics.drag_coefficient = 0.05
    config.physics.max_speed = 8.0
    config.physics.warp_speed_scale = 80.0
    return config


def get_exact_pricing_config() -> Config:
    """Use the exact normal CDF instead of the visual approximation."""
    config = Config()
    config.pricing.cdf_model = "exact"
    return config
