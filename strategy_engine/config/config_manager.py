"""Configuration manager for loading and validating configuration."""
import json
import os
import re

from .models import CalculatorSettings, EngineConfig, LoggingConfig, MarketDataCredentials


class ConfigManager:
    """Manages loading and validation of configuration."""

    def __init__(self):
        """Initialize the ConfigManager."""
        self._config: EngineConfig = None

    def load_config(self, config_path: str) -> EngineConfig:
        """Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            EngineConfig object with loaded configuration

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
            json.JSONDecodeError: If JSON is malformed
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}\n"
                f"Please create a configuration file at this location."
            )

        try:
            with open(config_path, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"Invalid JSON format in configuration file: {e.msg}",
                e.doc,
                e.pos
            )

        config = self.build_config(self._substitute_env_vars(config_data))

        # Validate configuration
        if not self.validate_config(config):
            raise ValueError("Configuration validation failed")

        self._config = config
        return config

    def build_config(self, config_data: dict) -> EngineConfig:
        """Build an EngineConfig from already-substituted JSON data.

        Raises:
            ValueError: If a value has the wrong type
        """
        provider = config_data.get('market_data_provider', 'marketdata')
        providers = config_data.get('providers', {})

        marketdata_credentials = None
        snapshot_path = None
        try:
            if provider.lower() == 'marketdata':
                # Try nested first, then flat
                marketdata_data = providers.get('marketdata', {}) or config_data.get('marketdata', {})
                marketdata_credentials = MarketDataCredentials(
                    api_token=marketdata_data.get('api_token', ''),
                    base_url=marketdata_data.get('base_url', 'https://api.marketdata.app'),
                    timeout_seconds=float(marketdata_data.get('timeout_seconds', 15.0))
                )
            elif provider.lower() == 'snapshot':
                snapshot_data = providers.get('snapshot', {}) or config_data.get('snapshot', {})
                snapshot_path = snapshot_data.get('path', '')

            logging_data = config_data.get('logging', {})
            logging_config = LoggingConfig(
                level=logging_data.get('level', 'INFO'),
                file_path=logging_data.get('file_path', 'logs/strategy_engine.log')
            )

            calculator_data = config_data.get('calculator', {})
            calculator = CalculatorSettings(
                pl_curve_points=int(calculator_data.get('pl_curve_points', 100)),
                pl_curve_lower_percent=float(calculator_data.get('pl_curve_lower_percent', 0.7)),
                pl_curve_upper_percent=float(calculator_data.get('pl_curve_upper_percent', 1.3)),
                expiration_cutoff_hour=int(calculator_data.get('expiration_cutoff_hour', 16)),
                fallback_implied_volatility=float(
                    calculator_data.get('fallback_implied_volatility', 25.0)
                ),
                fallback_iv_percentile=float(calculator_data.get('fallback_iv_percentile', 50.0))
            )

            return EngineConfig(
                market_data_provider=provider,
                logging_config=logging_config,
                marketdata_credentials=marketdata_credentials,
                snapshot_path=snapshot_path,
                default_strategy=config_data.get('default_strategy', 'long_strangle'),
                calculator=calculator
            )
        except (ValueError, TypeError) as e:
            raise ValueError(
                f"Invalid configuration value type: {e}\n"
                f"Please check that numeric values are numbers and other values are correct types."
            )

    def _substitute_env_vars(self, data):
        """Recursively substitute environment variables in configuration data.

        Environment variables should be in the format ${VAR_NAME}.

        Args:
            data: Configuration data (dict, list, or string)

        Returns:
            Data with environment variables substituted
        """
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            pattern = r'\$\{([^}]+)\}'
            result = data
            for var_name in re.findall(pattern, data):
                result = result.replace(f'${{{var_name}}}', os.environ.get(var_name, ''))
            return result
        else:
            return data

    def validate_config(self, config: EngineConfig) -> bool:
        """Validate the configuration.

        Args:
            config: EngineConfig object to validate

        Returns:
            True if valid

        Raises:
            ValueError: If validation fails with error message
        """
        is_valid, error_message = config.validate()
        if not is_valid:
            raise ValueError(f"Configuration validation error: {error_message}")
        return True

    def _require_config(self) -> EngineConfig:
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load_config first.")
        return self._config

    def get_market_data_provider(self) -> str:
        return self._require_config().market_data_provider

    def get_marketdata_credentials(self) -> MarketDataCredentials:
        """Get MarketData API credentials.

        Returns:
            MarketDataCredentials object, or None for the snapshot provider
        """
        return self._require_config().marketdata_credentials

    def get_snapshot_path(self) -> str:
        return self._require_config().snapshot_path

    def get_default_strategy(self) -> str:
        return self._require_config().default_strategy

    def get_calculator_settings(self) -> CalculatorSettings:
        """Get calculator defaults.

        Returns:
            CalculatorSettings object
        """
        return self._require_config().calculator

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration.

        Returns:
            LoggingConfig object
        """
        return self._require_config().logging_config
