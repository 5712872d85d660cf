"""Configuration management module."""
from .models import CalculatorSettings, EngineConfig, LoggingConfig, MarketDataCredentials
from .config_manager import ConfigManager

__all__ = ['CalculatorSettings', 'EngineConfig', 'LoggingConfig', 'MarketDataCredentials', 'ConfigManager']
