"""Strategy contract implemented by every options strategy."""
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from strategy_engine.logging.engine_logger import EngineLogger
from strategy_engine.market_data.base_client import OptionsChain
from .errors import (
    InsufficientMarketDataError,
    InvalidInputError,
    InvariantViolationError,
    StrategyError,
)
from .models import (
    CONTRACT_MULTIPLIER,
    MarketDataInput,
    MaxLoss,
    PositionGreeks,
    ProfitZone,
    StrategyDescription,
    StrategyInputs,
    StrategyParameters,
    StrategyResult,
    StrategyType,
)

DEFAULT_IMPLIED_VOLATILITY = 25.0
DEFAULT_IV_PERCENTILE = 50.0


class BaseOptionsStrategy(ABC):
    """Abstract base class for all options strategies.

    Subclasses select strikes from a quoted chain, compute the position and
    describe themselves. ``calculate`` drives the whole pipeline and enforces
    the result invariants every strategy must satisfy.
    """

    strategy_type: StrategyType

    def __init__(self, logger: Optional[EngineLogger] = None,
                 fallback_implied_volatility: float = DEFAULT_IMPLIED_VOLATILITY,
                 fallback_iv_percentile: float = DEFAULT_IV_PERCENTILE):
        """Initialize the strategy.

        Args:
            logger: Optional logger instance
            fallback_implied_volatility: IV reported when inputs carry none
            fallback_iv_percentile: IV percentile reported when inputs carry none
        """
        self.logger = logger
        self.fallback_implied_volatility = fallback_implied_volatility
        self.fallback_iv_percentile = fallback_iv_percentile

    @property
    def name(self) -> str:
        return self.get_description().name

    @abstractmethod
    def find_optimal_strikes(self, inputs: StrategyInputs, market_data: MarketDataInput) -> Any:
        """Select strikes and premiums from the quoted chain.

        Args:
            inputs: Calculation inputs
            market_data: Market data including the options chain

        Returns:
            The strategy's leg structure

        Raises:
            InsufficientMarketDataError: If the chain cannot support the structure
            UnprofitableStructureError: If quoted premiums give the wrong debit/credit
        """
        pass

    @abstractmethod
    def calculate_position(self, inputs: StrategyInputs, legs: Any) -> StrategyResult:
        """Compute position metrics from selected legs. Performs no I/O."""
        pass

    @abstractmethod
    def calculate_breakevens(self, legs: Any) -> Tuple[float, float]:
        """Return (lower_breakeven, upper_breakeven)."""
        pass

    @abstractmethod
    def calculate_max_profit_loss(self, legs: Any) -> Tuple[Optional[float], MaxLoss]:
        """Return (max_profit, max_loss); a max_profit of None means unlimited."""
        pass

    @abstractmethod
    def get_profit_loss_at_price(self, price: float, legs: Any) -> float:
        """P&L per contract at expiration for an underlying price."""
        pass

    @abstractmethod
    def get_strategy_parameters(self) -> StrategyParameters:
        pass

    @abstractmethod
    def get_description(self) -> StrategyDescription:
        pass

    def calculate(self, inputs: StrategyInputs, market_data: MarketDataInput) -> StrategyResult:
        """Validate inputs, select strikes, compute the position and check it.

        Args:
            inputs: Calculation inputs
            market_data: Market data including the options chain

        Returns:
            StrategyResult for the position

        Raises:
            InvalidInputError: If inputs are invalid
            InsufficientMarketDataError: If the chain cannot support the structure
            UnprofitableStructureError: If quoted premiums give the wrong debit/credit
            InvariantViolationError: If the computed result is inconsistent
        """
        self.validate_inputs(inputs)
        try:
            legs = self.find_optimal_strikes(inputs, market_data)
        except StrategyError as error:
            error.with_context(self.strategy_type.value, inputs.symbol)
            raise
        result = self.calculate_position(inputs, legs)
        self.validate_result(result)
        return result

    def validate_inputs(self, inputs: StrategyInputs) -> None:
        """Raise InvalidInputError if inputs are not usable."""
        is_valid, error_message = inputs.validate()
        if not is_valid:
            raise InvalidInputError(
                error_message,
                strategy_type=self.strategy_type.value,
                symbol=inputs.symbol or None
            )

    def validate_result(self, result: StrategyResult) -> None:
        """Check the invariants every result must satisfy.

        Raises:
            InvariantViolationError: If max loss is not positive or breakevens are inverted
        """
        error = None
        if not result.max_loss.is_unlimited and result.max_loss.amount <= 0:
            error = InvariantViolationError(
                f"Invalid max loss calculation: {result.max_loss.amount}",
                strategy_type=self.strategy_type.value,
                symbol=result.symbol
            )
        elif result.lower_breakeven >= result.upper_breakeven:
            error = InvariantViolationError(
                f"Invalid breakeven calculation: lower {result.lower_breakeven:.2f} "
                f">= upper {result.upper_breakeven:.2f}",
                strategy_type=self.strategy_type.value,
                symbol=result.symbol
            )

        if error is not None:
            if self.logger:
                self.logger.log_critical(
                    "Strategy result failed invariant check",
                    error,
                    {"strategy": self.strategy_type.value, "symbol": result.symbol}
                )
            raise error

    def resolve_implied_volatility(self, inputs: StrategyInputs) -> Tuple[float, float, bool]:
        """Return (iv, iv_percentile, is_fallback) for the result."""
        if inputs.implied_volatility and inputs.implied_volatility > 0:
            percentile = inputs.iv_percentile
            if percentile is None:
                percentile = self.fallback_iv_percentile
            return inputs.implied_volatility, percentile, False

        if self.logger:
            self.logger.log_warning(
                f"No implied volatility supplied for {inputs.symbol}, using fallback values",
                {
                    "strategy": self.strategy_type.value,
                    "implied_volatility": self.fallback_implied_volatility,
                    "iv_percentile": self.fallback_iv_percentile
                }
            )
        return self.fallback_implied_volatility, self.fallback_iv_percentile, True

    def _build_result(self, inputs: StrategyInputs, legs: Any,
                      breakevens: Tuple[float, float], profit_zone: ProfitZone,
                      net_debit: Optional[float] = None,
                      net_credit: Optional[float] = None) -> StrategyResult:
        implied_volatility, iv_percentile, iv_is_fallback = self.resolve_implied_volatility(inputs)
        max_profit, max_loss = self.calculate_max_profit_loss(legs)
        option_legs = legs.option_legs()

        return StrategyResult(
            strategy_type=self.strategy_type,
            symbol=inputs.symbol,
            legs=option_legs,
            position=legs,
            lower_breakeven=breakevens[0],
            upper_breakeven=breakevens[1],
            max_loss=max_loss,
            max_profit=max_profit,
            underlying_price=inputs.current_price,
            implied_volatility=implied_volatility,
            iv_percentile=iv_percentile,
            iv_is_fallback=iv_is_fallback,
            days_to_expiry=inputs.days_to_expiry,
            expiration_date=inputs.expiration_date,
            profit_zone=profit_zone,
            risk_profile=self.get_strategy_parameters().risk_level,
            net_debit=net_debit,
            net_credit=net_credit,
            greeks=PositionGreeks.from_legs(option_legs),
        )

    def _require_chain(self, inputs: StrategyInputs, market_data: MarketDataInput) -> OptionsChain:
        chain = market_data.options_chain if market_data else None
        if chain is None or chain.is_empty():
            raise InsufficientMarketDataError(
                f"Options chain data required for {self.name}",
                strategy_type=self.strategy_type.value,
                symbol=inputs.symbol
            )
        return chain

    def _insufficient(self, message: str, inputs: StrategyInputs) -> InsufficientMarketDataError:
        return InsufficientMarketDataError(
            message,
            strategy_type=self.strategy_type.value,
            symbol=inputs.symbol
        )

    def _log_selection(self, message: str, context: dict) -> None:
        if self.logger:
            self.logger.log_info(message, context)

    @staticmethod
    def _per_contract(amount: float) -> float:
        return amount * CONTRACT_MULTIPLIER
