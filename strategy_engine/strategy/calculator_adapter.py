"""Adapter between the flat calculator interface and the strategy factory.

Callers that speak the flat input/result shape (one record with
long_put_strike, short_call_premium and so on) go through this adapter. It
fills in defaults, makes sure an options chain is available and converts
results back to the flat shape.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from strategy_engine.config.models import CalculatorSettings
from strategy_engine.logging.engine_logger import EngineLogger
from strategy_engine.market_data.base_client import (
    BaseMarketDataClient,
    MarketDataError,
    OptionsChain,
)
from .errors import InsufficientMarketDataError, StrategyError
from .models import (
    MarketDataInput,
    PLPoint,
    PositionSizeRecommendation,
    PriceRange,
    StrategyInfo,
    StrategyInputs,
    StrategyResult,
    StrategyType,
)
from .strategy_factory import StrategyFactory

UNKNOWN_SYMBOL = 'UNKNOWN'
FRIDAY = 4
MIN_STRANGLE_STRIKES = 3
MIN_IRON_CONDOR_STRIKES = 4
MIN_BUTTERFLY_STRIKES = 6


@dataclass
class LegacyCalculationInputs:
    """Flat calculator inputs; everything but strategy and price is optional."""
    strategy_type: Union[StrategyType, str]
    current_price: float
    symbol: Optional[str] = None
    expiration_date: Optional[Union[date, str]] = None
    days_to_expiry: Optional[int] = None
    implied_volatility: Optional[float] = None
    iv_percentile: Optional[float] = None
    options_chain: Optional[Union[OptionsChain, Dict[str, Any]]] = None


@dataclass
class LegacyCalculationResult:
    """Flat calculator result. ``max_loss`` is None when the loss is unlimited."""
    strategy_type: StrategyType
    lower_breakeven: float
    upper_breakeven: float
    max_loss: Optional[float]
    max_loss_unlimited: bool
    max_profit: Optional[float]
    atm_value: float
    implied_volatility: float
    iv_percentile: float
    days_to_expiry: int
    expiration_date: date
    long_put_strike: Optional[float] = None
    long_call_strike: Optional[float] = None
    long_put_premium: Optional[float] = None
    long_call_premium: Optional[float] = None
    short_put_strike: Optional[float] = None
    short_call_strike: Optional[float] = None
    short_put_premium: Optional[float] = None
    short_call_premium: Optional[float] = None
    long_expiration: Optional[date] = None
    short_expiration: Optional[date] = None

    @classmethod
    def from_result(cls, result: StrategyResult) -> 'LegacyCalculationResult':
        fields = {
            'long_expiration': result.expiration_date,
        }
        fields.update(result.position.legacy_fields())
        return cls(
            strategy_type=result.strategy_type,
            lower_breakeven=result.lower_breakeven,
            upper_breakeven=result.upper_breakeven,
            max_loss=result.max_loss.amount,
            max_loss_unlimited=result.max_loss.is_unlimited,
            max_profit=result.max_profit,
            atm_value=result.underlying_price,
            implied_volatility=result.implied_volatility,
            iv_percentile=result.iv_percentile,
            days_to_expiry=result.days_to_expiry,
            expiration_date=result.expiration_date,
            **fields
        )


@dataclass
class StrategyDataValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class StrategyCalculatorAdapter:
    """Bridges flat calculator requests onto the strategy factory."""

    def __init__(self, factory: Optional[StrategyFactory] = None,
                 market_data_client: Optional[BaseMarketDataClient] = None,
                 logger: Optional[EngineLogger] = None,
                 settings: Optional[CalculatorSettings] = None):
        """Initialize the adapter.

        Args:
            factory: Strategy factory; one is built from settings when omitted
            market_data_client: Client used to fetch chains the caller did not supply
            logger: Optional logger instance
            settings: Calculator defaults (P&L range, expiration cutoff, IV fallbacks)
        """
        self.settings = settings or CalculatorSettings()
        self.logger = logger
        self.market_data_client = market_data_client
        self.factory = factory or StrategyFactory(
            logger=logger,
            fallback_implied_volatility=self.settings.fallback_implied_volatility,
            fallback_iv_percentile=self.settings.fallback_iv_percentile
        )

    def calculate_strategy(self, inputs: LegacyCalculationInputs) -> StrategyResult:
        """Calculate a position and return the full result.

        Args:
            inputs: Flat calculator inputs

        Returns:
            StrategyResult for the position

        Raises:
            StrategyError: If the calculation fails
            MarketDataError: If the chain had to be fetched and the fetch failed
        """
        strategy_type = StrategyType.from_value(inputs.strategy_type)
        symbol = inputs.symbol or UNKNOWN_SYMBOL

        if self.logger:
            self.logger.log_info(
                f"Calculator adapter: calculating {strategy_type.value} for {symbol}"
            )

        expiration_date = self._resolve_expiration(inputs.expiration_date)
        days_to_expiry = inputs.days_to_expiry
        if days_to_expiry is None:
            days_to_expiry = self.calculate_days_to_expiry(expiration_date)

        strategy_inputs = StrategyInputs(
            symbol=symbol,
            current_price=inputs.current_price,
            expiration_date=expiration_date,
            days_to_expiry=days_to_expiry,
            strategy_type=strategy_type,
            implied_volatility=inputs.implied_volatility,
            iv_percentile=inputs.iv_percentile
        )
        market_data = MarketDataInput(
            symbol=symbol,
            current_price=inputs.current_price,
            options_chain=self._resolve_chain(inputs, strategy_type, symbol),
            expiration_date=expiration_date
        )

        return self.factory.calculate_position(strategy_type, strategy_inputs, market_data)

    def calculate_position(self, inputs: LegacyCalculationInputs) -> LegacyCalculationResult:
        """Calculate a position and return the flat result shape."""
        result = self.calculate_strategy(inputs)
        if self.logger:
            self.logger.log_info(
                f"Calculator adapter: {result.strategy_type.value} calculation completed",
                {"symbol": result.symbol}
            )
        return LegacyCalculationResult.from_result(result)

    def calculate_optimal_position(self, inputs: LegacyCalculationInputs) -> LegacyCalculationResult:
        return self.calculate_position(inputs)

    def _resolve_expiration(self, expiration: Optional[Union[date, str]]) -> date:
        if expiration is None or expiration == '':
            return self.get_next_options_expiration()
        if isinstance(expiration, date):
            return expiration
        return date.fromisoformat(expiration)

    def _resolve_chain(self, inputs: LegacyCalculationInputs, strategy_type: StrategyType,
                       symbol: str) -> OptionsChain:
        chain = inputs.options_chain
        if isinstance(chain, dict):
            chain = OptionsChain.from_dict(chain)

        if chain is None and inputs.symbol and self.market_data_client:
            if self.logger:
                self.logger.log_info(f"Fetching options chain for {symbol}")
            try:
                chain = self.market_data_client.get_options_chain(symbol, inputs.current_price)
            except MarketDataError as e:
                if self.logger:
                    self.logger.log_error(f"Failed to fetch options chain for {symbol}", e)
                raise

        if chain is None or chain.is_empty():
            raise InsufficientMarketDataError(
                f"No options chain data available for {symbol}",
                strategy_type=strategy_type.value,
                symbol=symbol
            )
        return chain

    def get_next_options_expiration(self, now: Optional[datetime] = None) -> date:
        """Next Friday; after the cutoff hour on a Friday, the Friday after.

        Args:
            now: Current time (defaults to local now)

        Returns:
            Expiration date
        """
        now = now or datetime.now()
        days_until_friday = (FRIDAY - now.weekday()) % 7
        if days_until_friday == 0 and now.hour >= self.settings.expiration_cutoff_hour:
            days_until_friday = 7
        return now.date() + timedelta(days=days_until_friday)

    def calculate_days_to_expiry(self, expiration: Union[date, str],
                                 today: Optional[date] = None) -> int:
        """Calendar days until expiration, never negative."""
        if isinstance(expiration, str):
            expiration = date.fromisoformat(expiration)
        today = today or date.today()
        return max(0, (expiration - today).days)

    def validate_strategy_data(self, strategy_type: Union[StrategyType, str],
                               market_data: MarketDataInput) -> StrategyDataValidation:
        """Check whether a strategy can be calculated from the given market data.

        Counts cover every expiration in the chain.

        Args:
            strategy_type: Strategy to check
            market_data: Market data to check

        Returns:
            StrategyDataValidation with errors and warnings
        """
        strategy_type = StrategyType.from_value(strategy_type)
        errors: List[str] = []
        warnings: List[str] = []

        chain = market_data.options_chain
        if chain is None or chain.is_empty():
            errors.append('No options chain data available')
        if market_data.current_price is None or market_data.current_price <= 0:
            errors.append('Invalid current price')

        if chain is not None and not chain.is_empty():
            call_count = len(chain.calls())
            put_count = len(chain.puts())

            if strategy_type in (StrategyType.LONG_STRANGLE, StrategyType.SHORT_STRANGLE):
                if call_count == 0:
                    errors.append('No call options available')
                if put_count == 0:
                    errors.append('No put options available')
                if call_count < MIN_STRANGLE_STRIKES:
                    warnings.append('Limited call option strikes available')
                if put_count < MIN_STRANGLE_STRIKES:
                    warnings.append('Limited put option strikes available')
            elif strategy_type == StrategyType.IRON_CONDOR:
                if call_count < MIN_IRON_CONDOR_STRIKES:
                    errors.append('Iron Condor requires at least 4 call strikes')
                if put_count < MIN_IRON_CONDOR_STRIKES:
                    errors.append('Iron Condor requires at least 4 put strikes')
            elif strategy_type == StrategyType.BUTTERFLY_SPREAD:
                if call_count < MIN_BUTTERFLY_STRIKES:
                    errors.append('Butterfly Spread requires at least 6 call strikes')
            elif strategy_type == StrategyType.DIAGONAL_CALENDAR:
                if len(chain.expirations()) < 2:
                    errors.append('Diagonal Calendar requires multiple expiration dates')

        return StrategyDataValidation(is_valid=not errors, errors=errors, warnings=warnings)

    def get_strategy_info(self, strategy_type: Union[StrategyType, str]) -> StrategyInfo:
        strategy_type = StrategyType.from_value(strategy_type)
        for info in self.factory.get_strategy_info():
            if info.strategy_type == strategy_type:
                return info
        # Registry is closed over StrategyType, so every member has an entry
        raise StrategyError(f"No info for {strategy_type.value}", strategy_type=strategy_type.value)

    def get_available_strategies(self) -> List[StrategyType]:
        return self.factory.get_available_strategies()

    def calculate_pl_curve(self, strategy_type: Union[StrategyType, str], result: StrategyResult,
                           current_price: float) -> List[PLPoint]:
        """P&L curve over the configured band around ``current_price``."""
        price_range = PriceRange.around(
            current_price,
            lower_percent=self.settings.pl_curve_lower_percent,
            upper_percent=self.settings.pl_curve_upper_percent,
            points=self.settings.pl_curve_points
        )
        return self.factory.calculate_pl_curve(strategy_type, result, price_range)

    def get_recommended_position_size(self, strategy_type: Union[StrategyType, str],
                                      portfolio_value: float) -> PositionSizeRecommendation:
        return self.factory.get_recommended_position_size(strategy_type, portfolio_value)
