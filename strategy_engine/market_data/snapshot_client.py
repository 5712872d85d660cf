"""Market data client that serves a chain saved to disk as JSON."""
import json
from pathlib import Path
from typing import Optional

from strategy_engine.logging.engine_logger import EngineLogger
from .base_client import BaseMarketDataClient, MarketDataError, OptionsChain


class SnapshotMarketDataClient(BaseMarketDataClient):
    """Reads an options chain in the provider dict shape from a JSON file.

    Useful offline and for reproducible calculations: the file holds
    ``symbol``, ``underlyingPrice`` and an ``options`` list.
    """

    def __init__(self, snapshot_path: str, logger: Optional[EngineLogger] = None):
        self.snapshot_path = Path(snapshot_path)
        self.logger = logger
        self._chain: Optional[OptionsChain] = None

    def get_provider_name(self) -> str:
        return "Snapshot"

    def _load(self) -> OptionsChain:
        if self._chain is not None:
            return self._chain

        if not self.snapshot_path.exists():
            raise MarketDataError(f"Snapshot file not found: {self.snapshot_path}")

        try:
            with open(self.snapshot_path, 'r') as f:
                self._chain = OptionsChain.from_dict(json.load(f))
        except (json.JSONDecodeError, ValueError, KeyError) as e:
            if self.logger:
                self.logger.log_error(f"Invalid snapshot file: {self.snapshot_path}", e)
            raise MarketDataError(f"Invalid snapshot file {self.snapshot_path}: {e}") from e

        if self.logger:
            self.logger.log_info(
                f"Loaded options snapshot for {self._chain.symbol}",
                {"path": str(self.snapshot_path), "contracts": len(self._chain.options)}
            )
        return self._chain

    def get_stock_quote(self, symbol: str) -> float:
        chain = self._load()
        self._check_symbol(chain, symbol)
        if chain.underlying_price <= 0:
            raise MarketDataError(f"Snapshot has no underlying price for {symbol}")
        return chain.underlying_price

    def get_options_chain(self, symbol: str,
                          current_price: Optional[float] = None) -> OptionsChain:
        """Return the saved chain, re-priced to ``current_price`` when given.

        Raises:
            MarketDataError: If the file is missing, invalid or for another symbol
        """
        chain = self._load()
        self._check_symbol(chain, symbol)
        return OptionsChain(
            symbol=chain.symbol,
            underlying_price=current_price or chain.underlying_price,
            options=list(chain.options)
        )

    @staticmethod
    def _check_symbol(chain: OptionsChain, symbol: str) -> None:
        if chain.symbol and chain.symbol.upper() != symbol.upper():
            raise MarketDataError(
                f"Snapshot holds {chain.symbol}, not {symbol}"
            )
