"""Unit tests for ConfigManager."""
import json
import os
import tempfile
import pytest
from strategy_engine.config import CalculatorSettings, ConfigManager, EngineConfig, LoggingConfig


def write_config(config_data):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(config_data, f)
        return f.name


@pytest.fixture
def config_data():
    return {
        "market_data_provider": "marketdata",
        "providers": {
            "marketdata": {
                "api_token": "test_token",
                "base_url": "https://api.marketdata.app",
                "timeout_seconds": 10
            }
        },
        "default_strategy": "iron_condor",
        "calculator": {
            "pl_curve_points": 50,
            "pl_curve_lower_percent": 0.8,
            "pl_curve_upper_percent": 1.2,
            "expiration_cutoff_hour": 15
        },
        "logging": {
            "level": "INFO",
            "file_path": "logs/test.log"
        }
    }


class TestConfigManager:
    """Test cases for ConfigManager."""

    def test_load_valid_config(self, config_data):
        """Test loading a valid configuration file."""
        config_path = write_config(config_data)

        try:
            manager = ConfigManager()
            config = manager.load_config(config_path)

            assert isinstance(config, EngineConfig)
            assert config.market_data_provider == "marketdata"
            assert config.marketdata_credentials.api_token == "test_token"
            assert config.marketdata_credentials.timeout_seconds == 10.0
            assert config.default_strategy == "iron_condor"
            assert config.calculator.pl_curve_points == 50
            assert config.calculator.expiration_cutoff_hour == 15
            # Unspecified calculator values keep their defaults
            assert config.calculator.fallback_implied_volatility == 25.0
            assert config.logging_config.file_path == "logs/test.log"
        finally:
            os.unlink(config_path)

    def test_flat_marketdata_section(self, config_data):
        """Test credentials given at the top level instead of under providers."""
        config_data["marketdata"] = config_data.pop("providers")["marketdata"]
        config_path = write_config(config_data)

        try:
            config = ConfigManager().load_config(config_path)
            assert config.marketdata_credentials.api_token == "test_token"
        finally:
            os.unlink(config_path)

    def test_snapshot_provider(self):
        """Test a snapshot provider needs no API token."""
        config_path = write_config({
            "market_data_provider": "snapshot",
            "providers": {"snapshot": {"path": "data/chain.json"}}
        })

        try:
            manager = ConfigManager()
            config = manager.load_config(config_path)

            assert config.marketdata_credentials is None
            assert manager.get_snapshot_path() == "data/chain.json"
            assert config.default_strategy == "long_strangle"
            assert config.logging_config.file_path == "logs/strategy_engine.log"
        finally:
            os.unlink(config_path)

    def test_load_config_missing_file(self):
        """Test loading configuration from non-existent file."""
        manager = ConfigManager()

        with pytest.raises(FileNotFoundError) as exc_info:
            manager.load_config("nonexistent_config.json")

        assert "Configuration file not found" in str(exc_info.value)

    def test_load_config_invalid_json(self):
        """Test loading configuration with invalid JSON format."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{ invalid json }")
            config_path = f.name

        try:
            manager = ConfigManager()

            with pytest.raises(json.JSONDecodeError) as exc_info:
                manager.load_config(config_path)

            assert "Invalid JSON format" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_environment_variable_substitution(self, config_data, monkeypatch):
        """Test environment variable substitution in configuration."""
        monkeypatch.setenv("TEST_MARKETDATA_TOKEN", "env_token_value")
        config_data["providers"]["marketdata"]["api_token"] = "${TEST_MARKETDATA_TOKEN}"
        config_path = write_config(config_data)

        try:
            config = ConfigManager().load_config(config_path)
            assert config.marketdata_credentials.api_token == "env_token_value"
        finally:
            os.unlink(config_path)

    def test_missing_environment_variable_fails_validation(self, config_data, monkeypatch):
        """Test an unset variable leaves an empty token, which is rejected."""
        monkeypatch.delenv("TEST_UNSET_TOKEN", raising=False)
        config_data["providers"]["marketdata"]["api_token"] = "${TEST_UNSET_TOKEN}"
        config_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                ConfigManager().load_config(config_path)

            assert "API token is required" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_invalid_value_type(self, config_data):
        """Test a non-numeric calculator value."""
        config_data["calculator"]["pl_curve_points"] = "many"
        config_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                ConfigManager().load_config(config_path)

            assert "Invalid configuration value type" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    @pytest.mark.parametrize("key,value,message", [
        ("market_data_provider", "polygon", "Market data provider must be one of"),
        ("default_strategy", "covered_call", "Default strategy must be one of"),
    ])
    def test_invalid_values(self, config_data, key, value, message):
        config_data[key] = value
        config_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                ConfigManager().load_config(config_path)

            assert message in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_invalid_calculator_settings(self, config_data):
        config_data["calculator"]["pl_curve_upper_percent"] = 0.5
        config_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                ConfigManager().load_config(config_path)

            assert "Calculator settings error" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_invalid_log_level(self, config_data):
        config_data["logging"]["level"] = "VERBOSE"
        config_path = write_config(config_data)

        try:
            with pytest.raises(ValueError) as exc_info:
                ConfigManager().load_config(config_path)

            assert "Logging config error" in str(exc_info.value)
        finally:
            os.unlink(config_path)

    def test_getters(self, config_data):
        config_path = write_config(config_data)

        try:
            manager = ConfigManager()
            manager.load_config(config_path)

            assert manager.get_market_data_provider() == "marketdata"
            assert manager.get_marketdata_credentials().api_token == "test_token"
            assert manager.get_default_strategy() == "iron_condor"
            assert isinstance(manager.get_calculator_settings(), CalculatorSettings)
            assert isinstance(manager.get_logging_config(), LoggingConfig)
        finally:
            os.unlink(config_path)

    @pytest.mark.parametrize("getter", [
        "get_market_data_provider",
        "get_marketdata_credentials",
        "get_snapshot_path",
        "get_default_strategy",
        "get_calculator_settings",
        "get_logging_config",
    ])
    def test_getters_before_load(self, getter):
        """Test getters raise when no configuration is loaded."""
        manager = ConfigManager()

        with pytest.raises(RuntimeError) as exc_info:
            getattr(manager, getter)()

        assert "Configuration not loaded" in str(exc_info.value)
