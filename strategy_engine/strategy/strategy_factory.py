"""Factory that maps strategy types to strategy implementations."""
from dataclasses import replace
from typing import Dict, List, Optional, Union

from strategy_engine.logging.engine_logger import EngineLogger
from .base_strategy import (
    DEFAULT_IMPLIED_VOLATILITY,
    DEFAULT_IV_PERCENTILE,
    BaseOptionsStrategy,
)
from .butterfly_spread import ButterflySpreadStrategy
from .diagonal_calendar import DiagonalCalendarStrategy
from .errors import InvalidInputError, StrategyError
from .iron_condor import IronCondorStrategy
from .long_strangle import LongStrangleStrategy
from .models import (
    MarketDataInput,
    PLPoint,
    PositionSizeRecommendation,
    PriceRange,
    RiskLevel,
    StrategyInfo,
    StrategyInputs,
    StrategyParameters,
    StrategyResult,
    StrategyType,
)
from .short_strangle import ShortStrangleStrategy

StrategyKey = Union[StrategyType, str]

# (max percent, recommended percent, reasoning) of portfolio value by risk level
POSITION_SIZING = {
    RiskLevel.LOW: (0.10, 0.05, 'Low risk strategy - can size larger positions'),
    RiskLevel.MEDIUM: (0.05, 0.02, 'Medium risk strategy - moderate position sizing'),
    RiskLevel.HIGH: (0.03, 0.01, 'High risk strategy - small position sizing required'),
    RiskLevel.UNLIMITED: (0.02, 0.005, 'Unlimited risk strategy - very small positions only'),
}


class StrategyFactory:
    """Closed registry of strategies with dispatch and analysis helpers."""

    def __init__(self, logger: Optional[EngineLogger] = None,
                 fallback_implied_volatility: float = DEFAULT_IMPLIED_VOLATILITY,
                 fallback_iv_percentile: float = DEFAULT_IV_PERCENTILE):
        """Initialize the factory and build one instance of every strategy.

        Args:
            logger: Optional logger instance, shared with the strategies
            fallback_implied_volatility: IV reported when inputs carry none
            fallback_iv_percentile: IV percentile reported when inputs carry none
        """
        self.logger = logger
        self._strategies: Dict[StrategyType, BaseOptionsStrategy] = {}
        for strategy_type in StrategyType:
            self._strategies[strategy_type] = self._create_strategy(
                strategy_type, fallback_implied_volatility, fallback_iv_percentile
            )

    def _create_strategy(self, strategy_type: StrategyType, fallback_implied_volatility: float,
                         fallback_iv_percentile: float) -> BaseOptionsStrategy:
        if strategy_type == StrategyType.LONG_STRANGLE:
            strategy_class = LongStrangleStrategy
        elif strategy_type == StrategyType.SHORT_STRANGLE:
            strategy_class = ShortStrangleStrategy
        elif strategy_type == StrategyType.IRON_CONDOR:
            strategy_class = IronCondorStrategy
        elif strategy_type == StrategyType.BUTTERFLY_SPREAD:
            strategy_class = ButterflySpreadStrategy
        elif strategy_type == StrategyType.DIAGONAL_CALENDAR:
            strategy_class = DiagonalCalendarStrategy
        else:
            raise ValueError(f"No implementation registered for {strategy_type}")

        return strategy_class(
            logger=self.logger,
            fallback_implied_volatility=fallback_implied_volatility,
            fallback_iv_percentile=fallback_iv_percentile
        )

    def get_strategy(self, strategy_type: StrategyKey) -> BaseOptionsStrategy:
        """Get the strategy instance for a type.

        Args:
            strategy_type: StrategyType or its string value

        Returns:
            BaseOptionsStrategy instance

        Raises:
            StrategyNotImplementedError: If the type is unknown
        """
        return self._strategies[StrategyType.from_value(strategy_type)]

    def calculate_position(self, strategy_type: StrategyKey, inputs: StrategyInputs,
                           market_data: MarketDataInput) -> StrategyResult:
        """Calculate a position with the given strategy.

        Args:
            strategy_type: Strategy to use
            inputs: Calculation inputs (strategy_type is overwritten)
            market_data: Market data including the options chain

        Returns:
            StrategyResult for the position

        Raises:
            StrategyError: Any failure, with strategy and symbol attached
        """
        strategy = self.get_strategy(strategy_type)
        full_inputs = replace(inputs, strategy_type=strategy.strategy_type)

        if self.logger:
            self.logger.log_info(
                f"Calculating {strategy.name} for {full_inputs.symbol}",
                {"strategy": strategy.strategy_type.value,
                 "current_price": full_inputs.current_price,
                 "days_to_expiry": full_inputs.days_to_expiry}
            )

        try:
            result = strategy.calculate(full_inputs, market_data)
        except StrategyError as error:
            error.with_context(strategy.strategy_type.value, full_inputs.symbol)
            if self.logger:
                self.logger.log_error(
                    f"Error calculating {strategy.name}",
                    error,
                    {"strategy": strategy.strategy_type.value, "symbol": full_inputs.symbol}
                )
            raise

        if self.logger:
            self.logger.log_calculation(result)
        return result

    def get_available_strategies(self) -> List[StrategyType]:
        return list(self._strategies.keys())

    def get_strategy_info(self) -> List[StrategyInfo]:
        """Catalogue entry (name, description, parameters) for every strategy."""
        info = []
        for strategy_type, strategy in self._strategies.items():
            description = strategy.get_description()
            info.append(StrategyInfo(
                strategy_type=strategy_type,
                name=description.name,
                description=description.description,
                parameters=strategy.get_strategy_parameters()
            ))
        return info

    def get_strategy_parameters(self, strategy_type: StrategyKey) -> StrategyParameters:
        return self.get_strategy(strategy_type).get_strategy_parameters()

    def calculate_pl_curve(self, strategy_type: StrategyKey, result: StrategyResult,
                           price_range: Optional[PriceRange] = None) -> List[PLPoint]:
        """Sample expiration P&L over a uniform price grid.

        Args:
            strategy_type: Strategy that produced the result
            result: Calculated position
            price_range: Grid to sample; defaults to 70%-130% of the
                result's underlying price with 100 points

        Returns:
            List of PLPoint, prices and P&L rounded to cents

        Raises:
            InvalidInputError: If the price range is invalid
        """
        strategy = self.get_strategy(strategy_type)
        if price_range is None:
            price_range = PriceRange.around(result.underlying_price)

        is_valid, error_message = price_range.validate()
        if not is_valid:
            raise InvalidInputError(
                error_message,
                strategy_type=strategy.strategy_type.value,
                symbol=result.symbol
            )

        return [
            PLPoint(
                price=round(price, 2),
                profit_loss=round(strategy.get_profit_loss_at_price(price, result.position), 2)
            )
            for price in price_range.prices()
        ]

    def get_recommended_position_size(self, strategy_type: StrategyKey,
                                      portfolio_value: float) -> PositionSizeRecommendation:
        """Suggest position size from the strategy's risk level.

        Args:
            strategy_type: Strategy to size
            portfolio_value: Total portfolio value in dollars

        Returns:
            PositionSizeRecommendation in dollars
        """
        risk_level = self.get_strategy_parameters(strategy_type).risk_level
        max_percent, recommended_percent, reasoning = POSITION_SIZING.get(
            risk_level, (0.05, 0.02, 'Default conservative sizing')
        )
        return PositionSizeRecommendation(
            max_position_size=portfolio_value * max_percent,
            recommended_size=portfolio_value * recommended_percent,
            reasoning=reasoning
        )


_default_factory: Optional[StrategyFactory] = None


def get_default_factory() -> StrategyFactory:
    """Shared factory used by ``calculate_strategy``."""
    global _default_factory
    if _default_factory is None:
        _default_factory = StrategyFactory()
    return _default_factory


def calculate_strategy(strategy_type: StrategyKey, inputs: StrategyInputs,
                       market_data: MarketDataInput) -> StrategyResult:
    """Calculate a position with the shared default factory."""
    return get_default_factory().calculate_position(strategy_type, inputs, market_data)
