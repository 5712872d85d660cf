"""Strategy calculation module."""
from .errors import (
    InsufficientMarketDataError,
    InvalidInputError,
    InvariantViolationError,
    StrategyError,
    StrategyNotImplementedError,
    UnprofitableStructureError,
)
from .models import (
    MarketDataInput,
    MaxLoss,
    PriceRange,
    RiskLevel,
    StrategyInputs,
    StrategyResult,
    StrategyType,
)
from .strategy_factory import StrategyFactory, calculate_strategy
from .calculator_adapter import (
    LegacyCalculationInputs,
    LegacyCalculationResult,
    StrategyCalculatorAdapter,
)

__all__ = [
    'InsufficientMarketDataError', 'InvalidInputError', 'InvariantViolationError',
    'StrategyError', 'StrategyNotImplementedError', 'UnprofitableStructureError',
    'MarketDataInput', 'MaxLoss', 'PriceRange', 'RiskLevel', 'StrategyInputs',
    'StrategyResult', 'StrategyType', 'StrategyFactory', 'calculate_strategy',
    'LegacyCalculationInputs', 'LegacyCalculationResult', 'StrategyCalculatorAdapter',
]
