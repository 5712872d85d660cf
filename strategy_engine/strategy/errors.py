"""Error taxonomy for strategy calculations."""
from typing import Optional


class StrategyError(Exception):
    """Base class for all strategy calculation failures.

    Carries the strategy type and symbol so callers can report which
    calculation failed without parsing the message.
    """

    def __init__(self, message: str, strategy_type: Optional[str] = None,
                 symbol: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.strategy_type = strategy_type
        self.symbol = symbol

    def with_context(self, strategy_type: Optional[str] = None,
                     symbol: Optional[str] = None) -> 'StrategyError':
        """Attach strategy/symbol context where it is not already set.

        Returns:
            The same error instance
        """
        if self.strategy_type is None and strategy_type is not None:
            self.strategy_type = strategy_type
        if self.symbol is None and symbol is not None:
            self.symbol = symbol
        return self

    def __str__(self) -> str:
        context = []
        if self.strategy_type:
            context.append(f"strategy={self.strategy_type}")
        if self.symbol:
            context.append(f"symbol={self.symbol}")
        if context:
            return f"{self.message} [{', '.join(context)}]"
        return self.message


class InvalidInputError(StrategyError, ValueError):
    """Symbol empty, price not positive, negative days to expiry or missing expiration."""


class InsufficientMarketDataError(StrategyError):
    """The options chain cannot support the requested structure."""


class UnprofitableStructureError(StrategyError):
    """A credit strategy would not collect a credit, or a debit strategy not pay a debit."""


class InvariantViolationError(StrategyError):
    """A post-calculation sanity check failed. Indicates a defect, not a market condition."""


class StrategyNotImplementedError(StrategyError, ValueError):
    """Unknown strategy identifier."""
