"""Value objects shared by every strategy calculation."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from strategy_engine.market_data.base_client import OptionsChain
from .errors import InvalidInputError, StrategyNotImplementedError

CONTRACT_MULTIPLIER = 100


class StrategyType(str, Enum):
    """Closed set of supported strategies."""
    LONG_STRANGLE = 'long_strangle'
    SHORT_STRANGLE = 'short_strangle'
    IRON_CONDOR = 'iron_condor'
    BUTTERFLY_SPREAD = 'butterfly_spread'
    DIAGONAL_CALENDAR = 'diagonal_calendar'

    @classmethod
    def from_value(cls, value: Any) -> 'StrategyType':
        """Resolve a strategy identifier.

        Raises:
            StrategyNotImplementedError: If the identifier is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            available = ', '.join(member.value for member in cls)
            raise StrategyNotImplementedError(
                f"Strategy {value} not implemented. Available strategies: {available}",
                strategy_type=str(value)
            )


class RiskLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    UNLIMITED = 'unlimited'


@dataclass
class StrategyInputs:
    """Inputs for a single strategy calculation."""
    symbol: str
    current_price: float
    expiration_date: Optional[date]
    days_to_expiry: int
    strategy_type: Optional[StrategyType] = None
    implied_volatility: Optional[float] = None
    iv_percentile: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.expiration_date, str) and self.expiration_date:
            try:
                self.expiration_date = date.fromisoformat(self.expiration_date)
            except ValueError as e:
                raise InvalidInputError(
                    f"Expiration date must be an ISO date (YYYY-MM-DD): {self.expiration_date}",
                    strategy_type=self.strategy_type.value if self.strategy_type else None,
                    symbol=self.symbol or None
                ) from e

    def validate(self) -> tuple[bool, Optional[str]]:
        """Validate calculation inputs.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not self.symbol or not self.symbol.strip():
            return False, "Symbol is required"
        if self.current_price is None or self.current_price <= 0:
            return False, "Current price must be positive"
        if self.days_to_expiry is None or self.days_to_expiry < 0:
            return False, "Days to expiry cannot be negative"
        if not self.expiration_date:
            return False, "Expiration date is required"
        if not isinstance(self.expiration_date, date):
            return False, f"Expiration date must be an ISO date (YYYY-MM-DD): {self.expiration_date}"
        return True, None


@dataclass
class MarketDataInput:
    """Market data handed to a strategy alongside its inputs."""
    symbol: str
    current_price: float
    options_chain: Optional[OptionsChain] = None
    expiration_date: Optional[date] = None


@dataclass
class OptionLeg:
    """One leg of a position, in the common shape used at the result boundary."""
    strike: float
    premium: float
    option_type: str  # 'call' or 'put'
    action: str  # 'buy' or 'sell'
    quantity: int = 1
    expiration_date: Optional[date] = None
    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None

    @property
    def sign(self) -> int:
        return 1 if self.action == 'buy' else -1

    def intrinsic_value(self, price: float) -> float:
        if self.option_type == 'call':
            return max(0.0, price - self.strike)
        return max(0.0, self.strike - price)

    def profit_loss_at(self, price: float) -> float:
        """Per-share P&L of this leg at expiration, net of premium."""
        return self.sign * self.quantity * (self.intrinsic_value(price) - self.premium)

    def has_greeks(self) -> bool:
        return None not in (self.delta, self.gamma, self.theta, self.vega)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'strike': self.strike,
            'premium': self.premium,
            'option_type': self.option_type,
            'action': self.action,
            'quantity': self.quantity,
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
        }


@dataclass(frozen=True)
class MaxLoss:
    """Maximum loss: a finite amount, or unlimited when ``amount`` is None."""
    amount: Optional[float] = None

    @classmethod
    def finite(cls, amount: float) -> 'MaxLoss':
        return cls(amount=round(amount, 2))

    @classmethod
    def unlimited(cls) -> 'MaxLoss':
        return cls(amount=None)

    @property
    def is_unlimited(self) -> bool:
        return self.amount is None

    def percent_of(self, value: float) -> Optional[float]:
        """Max loss as a percentage of ``value``; None when the loss is unlimited."""
        if self.is_unlimited or not value:
            return None
        return self.amount / value * 100

    def __str__(self) -> str:
        return 'Unlimited' if self.is_unlimited else f"${self.amount:.2f}"


@dataclass
class ProfitZone:
    lower: float
    upper: float


@dataclass
class PositionGreeks:
    """Aggregate Greeks of a position, per share."""
    delta: float
    gamma: float
    theta: float
    vega: float

    @classmethod
    def from_legs(cls, legs: List[OptionLeg]) -> Optional['PositionGreeks']:
        """Sum leg Greeks (bought +, sold -); None if any leg lacks Greeks."""
        if not legs or not all(leg.has_greeks() for leg in legs):
            return None
        return cls(
            delta=sum(leg.sign * leg.quantity * leg.delta for leg in legs),
            gamma=sum(leg.sign * leg.quantity * leg.gamma for leg in legs),
            theta=sum(leg.sign * leg.quantity * leg.theta for leg in legs),
            vega=sum(leg.sign * leg.quantity * leg.vega for leg in legs),
        )


@dataclass
class StrategyResult:
    """Final output of a strategy calculation."""
    strategy_type: StrategyType
    symbol: str
    legs: List[OptionLeg]
    position: Any  # the strategy's leg structure, used for P&L evaluation
    lower_breakeven: float
    upper_breakeven: float
    max_loss: MaxLoss
    max_profit: Optional[float]  # None means unlimited upside
    underlying_price: float
    implied_volatility: float
    iv_percentile: float
    days_to_expiry: int
    expiration_date: date
    profit_zone: ProfitZone
    risk_profile: RiskLevel
    net_debit: Optional[float] = None
    net_credit: Optional[float] = None
    iv_is_fallback: bool = False
    greeks: Optional[PositionGreeks] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to plain Python types for an API layer."""
        return {
            'strategy_type': self.strategy_type.value,
            'symbol': self.symbol,
            'legs': [leg.to_dict() for leg in self.legs],
            'lower_breakeven': self.lower_breakeven,
            'upper_breakeven': self.upper_breakeven,
            'max_loss': self.max_loss.amount,
            'max_loss_unlimited': self.max_loss.is_unlimited,
            'max_profit': self.max_profit,
            'max_profit_unlimited': self.max_profit is None,
            'underlying_price': self.underlying_price,
            'implied_volatility': self.implied_volatility,
            'iv_percentile': self.iv_percentile,
            'iv_is_fallback': self.iv_is_fallback,
            'days_to_expiry': self.days_to_expiry,
            'expiration_date': self.expiration_date.isoformat(),
            'net_debit': self.net_debit,
            'net_credit': self.net_credit,
            'profit_zone': {'lower': self.profit_zone.lower, 'upper': self.profit_zone.upper},
            'risk_profile': self.risk_profile.value,
            'greeks': None if self.greeks is None else {
                'delta': self.greeks.delta,
                'gamma': self.greeks.gamma,
                'theta': self.greeks.theta,
                'vega': self.greeks.vega,
            },
        }


@dataclass(frozen=True)
class StrategyParameters:
    """Static metadata describing a strategy."""
    optimal_days_to_expiry: int
    risk_level: RiskLevel
    complexity: str  # 'simple', 'intermediate' or 'advanced'
    capital_requirement: str  # 'low', 'medium' or 'high'
    directionality: str  # 'bullish', 'bearish', 'neutral' or 'volatile'


@dataclass(frozen=True)
class StrategyDescription:
    """Human-readable description and trading rules."""
    name: str
    description: str
    market_outlook: str
    entry_rules: List[str] = field(default_factory=list)
    exit_rules: List[str] = field(default_factory=list)
    risk_management: List[str] = field(default_factory=list)


@dataclass
class StrategyInfo:
    """Catalogue entry for one strategy."""
    strategy_type: StrategyType
    name: str
    description: str
    parameters: StrategyParameters


@dataclass(frozen=True)
class PriceRange:
    """Price grid for P&L curve sampling."""
    min_price: float
    max_price: float
    points: int = 100

    @classmethod
    def around(cls, current_price: float, lower_percent: float = 0.7,
               upper_percent: float = 1.3, points: int = 100) -> 'PriceRange':
        return cls(current_price * lower_percent, current_price * upper_percent, points)

    def validate(self) -> tuple[bool, Optional[str]]:
        if self.points < 2:
            return False, "Price range needs at least 2 points"
        if self.min_price < 0:
            return False, "Minimum price cannot be negative"
        if self.max_price <= self.min_price:
            return False, "Maximum price must be greater than minimum price"
        return True, None

    def prices(self) -> List[float]:
        step = (self.max_price - self.min_price) / (self.points - 1)
        return [self.min_price + step * index for index in range(self.points)]


@dataclass
class PLPoint:
    price: float
    profit_loss: float


@dataclass
class PositionSizeRecommendation:
    max_position_size: float
    recommended_size: float
    reasoning: str
