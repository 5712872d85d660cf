"""Factory for creating market data clients."""
from typing import Optional

from strategy_engine.config.models import EngineConfig
from strategy_engine.logging.engine_logger import EngineLogger
from .base_client import BaseMarketDataClient
from .marketdata_client import MarketDataClient
from .snapshot_client import SnapshotMarketDataClient


class MarketDataClientFactory:
    """Factory for creating market data clients based on configuration."""

    @staticmethod
    def create_client(provider: str, settings: dict,
                      logger: Optional[EngineLogger] = None) -> BaseMarketDataClient:
        """Create a market data client based on provider.

        Args:
            provider: Provider name ("marketdata" or "snapshot")
            settings: Dictionary with provider-specific settings
            logger: Optional logger instance

        Returns:
            BaseMarketDataClient instance

        Raises:
            ValueError: If provider is not supported
        """
        provider = provider.lower()

        if provider == "marketdata":
            return MarketDataClient(
                api_token=settings.get('api_token'),
                base_url=settings.get('base_url', 'https://api.marketdata.app'),
                timeout_seconds=settings.get('timeout_seconds', 15.0),
                logger=logger
            )
        elif provider == "snapshot":
            return SnapshotMarketDataClient(
                snapshot_path=settings.get('path'),
                logger=logger
            )
        else:
            raise ValueError(f"Unsupported market data provider: {provider}. Supported: marketdata, snapshot")

    @staticmethod
    def from_config(config: EngineConfig, logger: Optional[EngineLogger] = None) -> BaseMarketDataClient:
        """Create the client named in an engine configuration."""
        if config.market_data_provider.lower() == "marketdata":
            credentials = config.marketdata_credentials
            settings = {
                'api_token': credentials.api_token,
                'base_url': credentials.base_url,
                'timeout_seconds': credentials.timeout_seconds,
            }
        else:
            settings = {'path': config.snapshot_path}
        return MarketDataClientFactory.create_client(config.market_data_provider, settings, logger)

    @staticmethod
    def get_supported_providers() -> list:
        """Get list of supported provider names.

        Returns:
            List of supported provider names
        """
        return ["marketdata", "snapshot"]
