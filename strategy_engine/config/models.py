"""Data models for configuration."""
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class MarketDataCredentials:
    """MarketData.app API credentials."""
    api_token: str
    base_url: str = 'https://api.marketdata.app'
    timeout_seconds: float = 15.0

    def validate(self) -> tuple[bool, Optional[str]]:
        """Validate market data credentials.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not self.api_token or not self.api_token.strip():
            return False, "API token is required"
        if not self.base_url or not self.base_url.strip():
            return False, "Base URL is required"
        if not self.base_url.startswith(('http://', 'https://')):
            return False, "Base URL must start with http:// or https://"
        if self.timeout_seconds <= 0:
            return False, "Timeout must be positive"
        return True, None


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str
    file_path: str

    def validate(self) -> tuple[bool, Optional[str]]:
        """Validate logging configuration.

        Returns:
            Tuple of (is_valid, error_message)
        """
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.level.upper() not in valid_levels:
            return False, f"Log level must be one of {valid_levels}"
        if not self.file_path or not self.file_path.strip():
            return False, "Log file path is required"
        return True, None


@dataclass
class CalculatorSettings:
    """Tunable defaults for the calculator."""
    pl_curve_points: int = 100
    pl_curve_lower_percent: float = 0.7  # Fraction of current price
    pl_curve_upper_percent: float = 1.3
    expiration_cutoff_hour: int = 16  # Friday hour after which next week's expiration is used
    fallback_implied_volatility: float = 25.0
    fallback_iv_percentile: float = 50.0

    def validate(self) -> tuple[bool, Optional[str]]:
        """Validate calculator settings.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if self.pl_curve_points < 2:
            return False, "P&L curve needs at least 2 points"
        if self.pl_curve_lower_percent <= 0:
            return False, "P&L curve lower percent must be positive"
        if self.pl_curve_upper_percent <= self.pl_curve_lower_percent:
            return False, "P&L curve upper percent must exceed lower percent"
        if not 0 <= self.expiration_cutoff_hour <= 23:
            return False, "Expiration cutoff hour must be between 0 and 23"
        if self.fallback_implied_volatility <= 0:
            return False, "Fallback implied volatility must be positive"
        if not 0 <= self.fallback_iv_percentile <= 100:
            return False, "Fallback IV percentile must be between 0 and 100"
        return True, None


@dataclass
class EngineConfig:
    """Main configuration for the strategy engine."""
    market_data_provider: str  # "marketdata" or "snapshot"
    logging_config: LoggingConfig
    marketdata_credentials: Optional[MarketDataCredentials] = None
    snapshot_path: Optional[str] = None
    default_strategy: str = 'long_strangle'
    calculator: CalculatorSettings = field(default_factory=CalculatorSettings)

    def validate(self) -> tuple[bool, Optional[str]]:
        """Validate the entire configuration.

        Returns:
            Tuple of (is_valid, error_message)
        """
        valid_providers = ['marketdata', 'snapshot']
        if self.market_data_provider.lower() not in valid_providers:
            return False, f"Market data provider must be one of {valid_providers}"

        if self.market_data_provider.lower() == 'marketdata':
            if not self.marketdata_credentials:
                return False, "MarketData credentials required when provider is 'marketdata'"
            is_valid, error = self.marketdata_credentials.validate()
            if not is_valid:
                return False, f"MarketData credentials error: {error}"
        elif not self.snapshot_path or not self.snapshot_path.strip():
            return False, "Snapshot path required when provider is 'snapshot'"

        valid_strategies = [
            'long_strangle', 'short_strangle', 'iron_condor',
            'butterfly_spread', 'diagonal_calendar'
        ]
        if self.default_strategy not in valid_strategies:
            return False, f"Default strategy must be one of {valid_strategies}"

        is_valid, error = self.calculator.validate()
        if not is_valid:
            return False, f"Calculator settings error: {error}"

        is_valid, error = self.logging_config.validate()
        if not is_valid:
            return False, f"Logging config error: {error}"

        return True, None
