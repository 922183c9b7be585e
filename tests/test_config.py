"""
Tests for the configuration system.
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mission_config.settings import (
    Config,
    ConfigManager,
    Environment,
    get_arcade_config,
    get_exact_pricing_config
)


@pytest.fixture(autouse=True)
def reset_config_manager():
    ConfigManager.reset()
    yield
    ConfigManager.reset()


class TestConfigDefaults:
    """Tests for default values and validation."""

    def test_defaults_valid(self):
        config = Config()
        assert config.validate() == []
        assert config.pricing.risk_free_rate == 0.02
        assert config.pricing.cdf_model == "approx"
        assert config.physics.gravitational_parameter == 500.0
        assert config.physics.recompute_thrust_on_update is False
        assert config.feed.fallback_price == 680.0

    def test_bad_cdf_model(self):
        config = Config()
        config.pricing.cdf_model = "fancy"
        assert any("cdf_model" in e for e in config.validate())

    def test_otm_above_itm(self):
        config = Config()
        config.moneyness.otm_delta = 0.9
        assert any("otm_delta" in e for e in config.validate())

    def test_bad_physics(self):
        config = Config()
        config.physics.restitution = 1.5
        config.physics.max_speed = 0
        assert len(config.validate()) == 2

    def test_presets_valid(self):
        assert get_arcade_config().validate() == []
        exact = get_exact_pricing_config()
        assert exact.validate() == []
        assert exact.pricing.cdf_model == "exact"


class TestConfigPersistence:
    """Tests for save/load."""

    @pytest.mark.parametrize("suffix", [".yaml", ".json"])
    def test_round_trip(self, tmp_path, suffix):
        config = Config()
        config.physics.drag_coefficient = 0.25
        config.feed.ticker = "QQQ"
        config.environment = Environment.DEMO

        path = tmp_path / f"config{suffix}"
        config.save(str(path))
        loaded = Config.load(str(path))

        assert loaded.to_dict() == config.to_dict()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load(str(tmp_path / "missing.yaml"))

    def test_from_dict_ignores_unknown(self):
        config = Config.from_dict({'physics': {'max_speed': 9.0, 'warp_factor': 11}})
        assert config.physics.max_speed == 9.0
        assert not hasattr(config.physics, 'warp_factor')


class TestEnvironmentOverrides:
    """Tests for ROCKET_* variables."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ROCKET_ENV", "demo")
        monkeypatch.setenv("ROCKET_RISK_FREE_RATE", "0.045")
        monkeypatch.setenv("ROCKET_CDF_MODEL", "exact")
        monkeypatch.setenv("ROCKET_POLL_INTERVAL", "2.5")
        monkeypatch.setenv("ROCKET_PRICE_SOURCE", "yfinance")

        config = Config.from_environment()

        assert config.environment == Environment.DEMO
        assert config.pricing.risk_free_rate == 0.045
        assert config.pricing.cdf_model == "exact"
        assert config.feed.poll_interval == 2.5
        assert config.feed.source == "yfinance"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        config = Config()
        config.feed.ticker = "IWM"
        config.pricing.risk_free_rate = 0.01
        config.save(str(path))

        monkeypatch.setenv("ROCKET_TICKER", "QQQ")
        loaded = ConfigManager.load_config(str(path))

        assert loaded.feed.ticker == "QQQ"
        assert loaded.pricing.risk_free_rate == 0.01
        assert ConfigManager.get_config() is loaded

    def test_invalid_env_rejected(self, monkeypatch):
        monkeypatch.setenv("ROCKET_CDF_MODEL", "bogus")
        with pytest.raises(ValueError):
            ConfigManager.load_config()


class TestConfigManager:
    """Tests for runtime updates."""

    def test_singleton(self):
        assert ConfigManager() is ConfigManager()

    def test_dotted_update(self):
        config = ConfigManager.update(**{'physics.drag_coefficient': 0.2})
        assert config.physics.drag_coefficient == 0.2

    def test_double_underscore_update(self):
        config = ConfigManager.update(physics__max_speed=7.0)
        assert config.physics.max_speed == 7.0

    def test_invalid_update_rejected(self):
        with pytest.raises(ValueError):
            ConfigManager.update(**{'feed.poll_interval': 0})

    def test_reset(self):
        ConfigManager.update(physics__max_speed=7.0)
        ConfigManager.reset()
        assert ConfigManager.get_config().physics.max_speed == 5.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
