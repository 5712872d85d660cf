"""Base client interface and data model for options market data."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


class MarketDataError(Exception):
    """Raised when market data cannot be retrieved from a provider."""


def _parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    return float(value)


@dataclass
class OptionContract:
    """A single quoted option contract from an options chain snapshot."""
    strike: float
    option_type: str  # 'put' or 'call'
    expiration_date: date
    bid: Optional[float] = None
    ask: Optional[float] = None
    last: Optional[float] = None
    symbol: str = ''
    volume: int = 0
    open_interest: int = 0
    implied_volatility: Optional[float] = None
    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None

    @property
    def premium(self) -> float:
        """Bid/ask midpoint, or last trade price if either side is missing or zero."""
        if self.bid and self.ask and self.bid > 0 and self.ask > 0:
            return (self.bid + self.ask) / 2
        return self.last or 0.0

    @property
    def has_greeks(self) -> bool:
        return None not in (self.delta, self.gamma, self.theta, self.vega)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptionContract':
        """Build a contract from the provider's dictionary shape.

        Args:
            data: Dictionary with keys such as ``contract_type``, ``strike``,
                ``expiration_date``, ``bid``, ``ask``, ``last``

        Returns:
            OptionContract instance

        Raises:
            ValueError: If required keys are missing or malformed
        """
        option_type = data.get('contract_type') or data.get('option_type') or data.get('side')
        if option_type not in ('call', 'put'):
            raise ValueError(f"Invalid contract type: {option_type}")
        expiration = data.get('expiration_date') or data.get('expiration')
        if expiration is None:
            raise ValueError("Contract expiration date is required")
        if data.get('strike') is None:
            raise ValueError("Contract strike is required")

        return cls(
            strike=float(data['strike']),
            option_type=option_type,
            expiration_date=_parse_date(expiration),
            bid=_optional_float(data.get('bid')),
            ask=_optional_float(data.get('ask')),
            last=_optional_float(data.get('last')),
            symbol=data.get('ticker') or data.get('symbol') or '',
            volume=int(data.get('volume') or 0),
            open_interest=int(data.get('open_interest') or 0),
            implied_volatility=_optional_float(data.get('implied_volatility')),
            delta=_optional_float(data.get('delta')),
            gamma=_optional_float(data.get('gamma')),
            theta=_optional_float(data.get('theta')),
            vega=_optional_float(data.get('vega')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'ticker': self.symbol,
            'strike': self.strike,
            'contract_type': self.option_type,
            'expiration_date': self.expiration_date.isoformat(),
            'bid': self.bid,
            'ask': self.ask,
            'last': self.last,
            'volume': self.volume,
            'open_interest': self.open_interest,
            'implied_volatility': self.implied_volatility,
            'delta': self.delta,
            'gamma': self.gamma,
            'theta': self.theta,
            'vega': self.vega,
        }


@dataclass
class OptionsChain:
    """Options chain snapshot for one underlying."""
    symbol: str
    underlying_price: float
    options: List[OptionContract] = field(default_factory=list)

    def expirations(self) -> List[date]:
        """Distinct expiration dates in ascending order."""
        return sorted({option.expiration_date for option in self.options})

    def contracts(self, option_type: str,
                  expiration: Optional[date] = None) -> List[OptionContract]:
        """Contracts of one kind, optionally for one expiration, sorted by strike."""
        selected = [
            option for option in self.options
            if option.option_type == option_type
            and (expiration is None or option.expiration_date == expiration)
        ]
        return sorted(selected, key=lambda option: option.strike)

    def calls(self, expiration: Optional[date] = None) -> List[OptionContract]:
        return self.contracts('call', expiration)

    def puts(self, expiration: Optional[date] = None) -> List[OptionContract]:
        return self.contracts('put', expiration)

    def is_empty(self) -> bool:
        return len(self.options) == 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptionsChain':
        """Build a chain from the provider's dictionary shape.

        Args:
            data: Dictionary with ``symbol``, ``underlyingPrice`` (or
                ``underlying_price``) and an ``options`` list

        Returns:
            OptionsChain instance
        """
        underlying = data.get('underlyingPrice', data.get('underlying_price', 0.0))
        return cls(
            symbol=data.get('symbol', ''),
            underlying_price=float(underlying or 0.0),
            options=[OptionContract.from_dict(item) for item in data.get('options', [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'underlyingPrice': self.underlying_price,
            'options': [option.to_dict() for option in self.options],
        }


class BaseMarketDataClient(ABC):
    """Abstract base class for all market data providers."""

    @abstractmethod
    def get_stock_quote(self, symbol: str) -> float:
        """Get the current price of the underlying.

        Args:
            symbol: Stock symbol

        Returns:
            Current price as float
        """
        pass

    @abstractmethod
    def get_options_chain(self, symbol: str,
                          current_price: Optional[float] = None) -> OptionsChain:
        """Get the options chain across all near-term expirations.

        Args:
            symbol: Stock symbol
            current_price: Underlying price to record on the chain; fetched
                from the provider when omitted

        Returns:
            OptionsChain snapshot

        Raises:
            MarketDataError: If the chain cannot be retrieved
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of the market data provider.

        Returns:
            Provider name string
        """
        pass
