"""Shared fixtures: a synthetic options chain around a $100 underlying."""
from datetime import date
from unittest.mock import Mock

import pytest

from strategy_engine.market_data.base_client import OptionContract, OptionsChain
from strategy_engine.strategy.models import MarketDataInput, StrategyInputs

NEAR_EXPIRATION = date(2024, 12, 20)
FAR_EXPIRATION = date(2025, 1, 31)

# strike: (bid, ask) -> mid premiums 0.20, 0.40, 0.80, 1.50, 2.50, ...
PUT_QUOTES = {
    80.0: (0.15, 0.25),
    85.0: (0.35, 0.45),
    90.0: (0.75, 0.85),
    95.0: (1.45, 1.55),
    100.0: (2.45, 2.55),
    105.0: (5.45, 5.55),
    110.0: (10.15, 10.25),
    115.0: (15.05, 15.15),
    120.0: (20.00, 20.10),
}

CALL_QUOTES = {
    80.0: (20.00, 20.10),
    85.0: (15.05, 15.15),
    90.0: (10.15, 10.25),
    95.0: (5.45, 5.55),
    100.0: (2.45, 2.55),
    105.0: (1.45, 1.55),
    110.0: (0.75, 0.85),
    115.0: (0.35, 0.45),
    120.0: (0.15, 0.25),
}

FAR_CALL_QUOTES = {
    95.0: (7.40, 7.60),
    100.0: (4.45, 4.55),
    105.0: (2.75, 2.85),
    110.0: (1.55, 1.65),
    115.0: (0.85, 0.95),
}


def make_contracts(quotes, option_type, expiration, symbol='TEST'):
    """Build contracts from a {strike: (bid, ask)} table."""
    return [
        OptionContract(
            strike=strike,
            option_type=option_type,
            expiration_date=expiration,
            bid=bid,
            ask=ask,
            last=round((bid + ask) / 2, 2),
            symbol=f"{symbol}{expiration.strftime('%y%m%d')}{option_type[0].upper()}{int(strike * 1000):08d}",
        )
        for strike, (bid, ask) in quotes.items()
    ]


@pytest.fixture
def options_chain():
    """Single-expiration chain, strikes 80-120 in $5 steps."""
    return OptionsChain(
        symbol='TEST',
        underlying_price=100.0,
        options=(
            make_contracts(PUT_QUOTES, 'put', NEAR_EXPIRATION)
            + make_contracts(CALL_QUOTES, 'call', NEAR_EXPIRATION)
        ),
    )


@pytest.fixture
def two_expiration_chain(options_chain):
    """The single-expiration chain plus far-term calls."""
    return OptionsChain(
        symbol='TEST',
        underlying_price=100.0,
        options=options_chain.options + make_contracts(FAR_CALL_QUOTES, 'call', FAR_EXPIRATION),
    )


@pytest.fixture
def market_data(options_chain):
    return MarketDataInput(symbol='TEST', current_price=100.0, options_chain=options_chain)


def make_inputs(days_to_expiry, expiration=NEAR_EXPIRATION, symbol='TEST', price=100.0, **kwargs):
    return StrategyInputs(
        symbol=symbol,
        current_price=price,
        expiration_date=expiration,
        days_to_expiry=days_to_expiry,
        **kwargs
    )


@pytest.fixture
def mock_logger():
    """Create a mock logger."""
    logger = Mock()
    logger.log_info = Mock()
    logger.log_error = Mock()
    logger.log_warning = Mock()
    logger.log_critical = Mock()
    logger.log_calculation = Mock()
    return logger
