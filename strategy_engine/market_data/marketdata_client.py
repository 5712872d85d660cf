"""MarketData.app client for quotes and options chains."""
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import requests

from strategy_engine.logging.engine_logger import EngineLogger
from .base_client import BaseMarketDataClient, MarketDataError, OptionContract, OptionsChain

MIN_QUOTE = 0.01
CHAIN_LOOKBACK_DAYS = 1
CHAIN_LOOKAHEAD_DAYS = 60
STRIKE_LIMIT = 1000


class MarketDataClient(BaseMarketDataClient):
    """Client for the MarketData.app REST API."""

    def __init__(self, api_token: str, base_url: str = 'https://api.marketdata.app',
                 timeout_seconds: float = 15.0, logger: Optional[EngineLogger] = None):
        """Initialize MarketData client.

        Args:
            api_token: MarketData.app API token
            base_url: API base URL
            timeout_seconds: Per-request timeout
            logger: Optional logger instance
        """
        self.api_token = api_token
        self.base_url = base_url.rstrip('/')
        self.timeout_seconds = timeout_seconds
        self.logger = logger
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_token}',
            'Accept': 'application/json'
        })

    def get_provider_name(self) -> str:
        return "MarketData"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = self.session.get(
                f'{self.base_url}{path}',
                params=params,
                timeout=self.timeout_seconds
            )
        except requests.RequestException as e:
            if self.logger:
                self.logger.log_error(
                    f"Request to MarketData failed: {path}",
                    e,
                    {"error_type": type(e).__name__}
                )
            raise MarketDataError(f"Request to {path} failed: {e}") from e

        # 203 is returned for cached data on some plans
        if response.status_code not in (200, 203):
            error_msg = f"MarketData API error: {response.status_code} - {response.text}"
            if self.logger:
                self.logger.log_error(error_msg, None, {"status_code": response.status_code})
            raise MarketDataError(error_msg)

        return response.json()

    def get_stock_quote(self, symbol: str) -> float:
        """Get the last trade price for a symbol.

        Args:
            symbol: Stock symbol (e.g., 'AAPL')

        Returns:
            Current price as float

        Raises:
            MarketDataError: If price data is unavailable
        """
        data = self._get(f'/v1/stocks/quotes/{symbol}/')
        prices = data.get('last') or []
        if data.get('s') != 'ok' or not prices:
            raise MarketDataError(f"No quote available for {symbol}")

        price = float(prices[0])
        if self.logger:
            self.logger.log_info(f"Retrieved quote for {symbol}", {"symbol": symbol, "price": price})
        return price

    def get_options_chain(self, symbol: str,
                          current_price: Optional[float] = None,
                          today: Optional[date] = None) -> OptionsChain:
        """Get every option listed from yesterday through the next 60 days.

        Args:
            symbol: Stock symbol
            current_price: Underlying price; fetched with a quote when omitted
            today: Anchor date for the expiration window

        Returns:
            OptionsChain snapshot; empty when the provider has no data

        Raises:
            MarketDataError: If the request fails
        """
        if not current_price:
            current_price = self.get_stock_quote(symbol)

        today = today or date.today()
        params = {
            'from': (today - timedelta(days=CHAIN_LOOKBACK_DAYS)).isoformat(),
            'to': (today + timedelta(days=CHAIN_LOOKAHEAD_DAYS)).isoformat(),
            'strikeLimit': STRIKE_LIMIT,
        }
        data = self._get(f'/v1/options/chain/{symbol}/', params)

        if data.get('s') != 'ok' or not data.get('optionSymbol'):
            if self.logger:
                self.logger.log_warning(f"No options data found for {symbol}", {"status": data.get('s')})
            return OptionsChain(symbol=symbol, underlying_price=current_price)

        options = self._parse_chain(data)
        options.sort(key=lambda option: (option.expiration_date, option.strike))

        if self.logger:
            self.logger.log_info(
                f"Retrieved options chain for {symbol}",
                {
                    "symbol": symbol,
                    "contracts": len(options),
                    "expirations": len({option.expiration_date for option in options})
                }
            )
        return OptionsChain(symbol=symbol, underlying_price=current_price, options=options)

    def _parse_chain(self, data: Dict[str, Any]) -> List[OptionContract]:
        """Convert the columnar chain response into contracts.

        Quotes are clamped to at least one cent; a missing ask falls back to
        bid then last, a missing last to the bid/ask midpoint.
        """
        def column(name: str, index: int) -> Any:
            values = data.get(name) or []
            return values[index] if index < len(values) else None

        options = []
        for i, option_symbol in enumerate(data['optionSymbol']):
            bid = column('bid', i) or 0
            ask = column('ask', i) or 0
            last = column('last', i) or 0
            mid = (bid + ask) / 2 if bid > 0 and ask > 0 else last
            expiration = datetime.fromtimestamp(column('expiration', i), tz=timezone.utc).date()

            options.append(OptionContract(
                strike=float(column('strike', i)),
                option_type=column('side', i),
                expiration_date=expiration,
                bid=max(MIN_QUOTE, bid),
                ask=max(MIN_QUOTE, ask or bid or last or MIN_QUOTE),
                last=max(MIN_QUOTE, last or mid or MIN_QUOTE),
                symbol=option_symbol,
                volume=int(column('volume', i) or 0),
                open_interest=int(column('openInterest', i) or 0),
                implied_volatility=column('iv', i),
                delta=column('delta', i),
                gamma=column('gamma', i),
                theta=column('theta', i),
                vega=column('vega', i),
            ))
        return options
