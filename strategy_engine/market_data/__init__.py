"""Market data clients and chain model."""
from .base_client import BaseMarketDataClient, MarketDataError, OptionContract, OptionsChain
from .client_factory import MarketDataClientFactory
from .marketdata_client import MarketDataClient
from .snapshot_client import SnapshotMarketDataClient

__all__ = [
    'BaseMarketDataClient', 'MarketDataError', 'OptionContract', 'OptionsChain',
    'MarketDataClientFactory', 'MarketDataClient', 'SnapshotMarketDataClient',
]
