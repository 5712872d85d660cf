"""Strike selection helpers shared by all strategies."""
from typing import List, Optional

from strategy_engine.market_data.base_client import OptionContract
from .errors import InsufficientMarketDataError

ABOVE = 'above'
BELOW = 'below'
NEAREST = 'nearest'


def find_nearest_strike(target_strike: float, available_strikes: List[float],
                        direction: str) -> float:
    """Find the quoted strike to use for a target strike.

    ``above`` returns the first strike strictly greater than the target, or
    the highest strike when none is. ``below`` returns the closest strike
    strictly less than the target, or the lowest strike when none is. An
    exact match on the target is never selected by either. ``nearest``
    returns the strike with the smallest absolute distance, ties going to
    the lower strike.

    Args:
        target_strike: Target strike price
        available_strikes: Quoted strike prices (any order)
        direction: One of 'above', 'below' or 'nearest'

    Returns:
        A strike from available_strikes

    Raises:
        InsufficientMarketDataError: If no strikes are available
        ValueError: If direction is unknown
    """
    if not available_strikes:
        raise InsufficientMarketDataError("No available strikes provided")

    sorted_strikes = sorted(available_strikes)

    if direction == ABOVE:
        for strike in sorted_strikes:
            if strike > target_strike:
                return strike
        return sorted_strikes[-1]
    if direction == BELOW:
        for strike in reversed(sorted_strikes):
            if strike < target_strike:
                return strike
        return sorted_strikes[0]
    if direction == NEAREST:
        return min(sorted_strikes, key=lambda strike: abs(strike - target_strike))

    raise ValueError(f"Unknown strike search direction: {direction}")


def select_contract(target_strike: float, contracts: List[OptionContract],
                    direction: str) -> OptionContract:
    """Select the contract whose strike ``find_nearest_strike`` picks."""
    strike = find_nearest_strike(target_strike, [c.strike for c in contracts], direction)
    return contract_at_strike(strike, contracts)


def contract_at_strike(strike: float, contracts: List[OptionContract]) -> Optional[OptionContract]:
    """Return the first contract quoted at exactly ``strike``, or None."""
    for contract in contracts:
        if contract.strike == strike:
            return contract
    return None


def get_strike_increment(current_price: float) -> float:
    """Typical listed strike spacing for an underlying at this price."""
    if current_price < 25:
        return 1.0
    if current_price < 50:
        return 2.5
    if current_price < 200:
        return 5.0
    if current_price < 500:
        return 10.0
    return 25.0
