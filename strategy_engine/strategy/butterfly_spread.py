"""Call butterfly: buy lower wing, sell two at the center, buy upper wing.

Max profit is reached at the center strike at expiration:
wing distance - net debit. Max loss is the net debit.
"""
from typing import Optional, Tuple

from .base_strategy import BaseOptionsStrategy
from .legs import ButterflyLegs
from .models import (
    MarketDataInput,
    MaxLoss,
    ProfitZone,
    RiskLevel,
    StrategyDescription,
    StrategyInputs,
    StrategyParameters,
    StrategyResult,
    StrategyType,
)
from .strike_selection import NEAREST, contract_at_strike, get_strike_increment, select_contract

MIN_CALLS = 6


class ButterflySpreadStrategy(BaseOptionsStrategy):
    """Low-cost neutral play that pays off when the stock pins the center strike."""

    strategy_type = StrategyType.BUTTERFLY_SPREAD

    def wing_distance(self, current_price: float, days_to_expiry: int) -> float:
        """Distance from the center to each wing, in whole strike increments."""
        increment = get_strike_increment(current_price)
        if days_to_expiry <= 14:
            return increment * 2
        if days_to_expiry <= 30:
            return increment * 3
        return increment * 4

    def find_optimal_strikes(self, inputs: StrategyInputs,
                             market_data: MarketDataInput) -> ButterflyLegs:
        """Center on the strike nearest the underlying and place the wings.

        Raises:
            InsufficientMarketDataError: If fewer than six calls are quoted or
                a wing strike is not listed
            UnprofitableStructureError: If the quotes give a credit
        """
        chain = self._require_chain(inputs, market_data)
        calls = chain.calls(inputs.expiration_date)
        if len(calls) < MIN_CALLS:
            raise self._insufficient(
                f"Insufficient call options for Butterfly Spread on {inputs.symbol} "
                f"(need {MIN_CALLS}+, have {len(calls)})",
                inputs
            )

        center = select_contract(inputs.current_price, calls, NEAREST)
        wing = self.wing_distance(inputs.current_price, inputs.days_to_expiry)
        lower = contract_at_strike(center.strike - wing, calls)
        upper = contract_at_strike(center.strike + wing, calls)

        if lower is None or upper is None:
            raise self._insufficient(
                f"Could not find wing strikes {center.strike - wing:g}/{center.strike + wing:g} "
                f"for Butterfly Spread on {inputs.symbol}",
                inputs
            )

        legs = ButterflyLegs(
            lower_strike=lower.strike,
            lower_premium=lower.premium,
            center_strike=center.strike,
            center_premium=center.premium,
            upper_strike=upper.strike,
            upper_premium=upper.premium,
            option_type='call',
            expiration_date=inputs.expiration_date,
            contracts={'lower': lower, 'center': center, 'upper': upper},
        )

        self._log_selection(
            f"Butterfly Spread structure for {inputs.symbol}: "
            f"Buy {legs.lower_strike}@${legs.lower_premium:.2f}, "
            f"Sell 2x {legs.center_strike}@${legs.center_premium:.2f}, "
            f"Buy {legs.upper_strike}@${legs.upper_premium:.2f}",
            {"symbol": inputs.symbol, "net_debit": f"{legs.net_debit:.2f}",
             "wing_distance": wing}
        )
        return legs

    def calculate_position(self, inputs: StrategyInputs, legs: ButterflyLegs) -> StrategyResult:
        lower, upper = self.calculate_breakevens(legs)
        return self._build_result(
            inputs, legs, (lower, upper),
            profit_zone=ProfitZone(lower, upper),
            net_debit=legs.net_debit,
        )

    def calculate_breakevens(self, legs: ButterflyLegs) -> Tuple[float, float]:
        net_debit = legs.net_debit
        return legs.lower_strike + net_debit, legs.upper_strike - net_debit

    def calculate_max_profit_loss(self, legs: ButterflyLegs) -> Tuple[Optional[float], MaxLoss]:
        net_debit = legs.net_debit
        max_profit = round(self._per_contract(legs.wing_distance - net_debit), 2)
        return max_profit, MaxLoss.finite(self._per_contract(net_debit))

    def get_profit_loss_at_price(self, price: float, legs: ButterflyLegs) -> float:
        return self._per_contract(sum(leg.profit_loss_at(price) for leg in legs.option_legs()))

    def get_strategy_parameters(self) -> StrategyParameters:
        return StrategyParameters(
            optimal_days_to_expiry=21,
            risk_level=RiskLevel.LOW,
            complexity='advanced',
            capital_requirement='low',
            directionality='neutral'
        )

    def get_description(self) -> StrategyDescription:
        return StrategyDescription(
            name='Butterfly Spread',
            description=(
                'Buy one lower strike, sell two middle strikes, buy one higher strike. All same '
                'expiration and option type. Profits when stock finishes near the middle strike.'
            ),
            market_outlook=(
                'Low volatility with stock expected to finish near current price. '
                'Ideal when you have a specific price target.'
            ),
            entry_rules=[
                'Enter when implied volatility is high (will decrease)',
                'Choose center strike near current stock price or target',
                'Target 15-30 days to expiration',
                'Look for even strike spacing (5 or 10 point intervals)',
                'Ensure net debit is reasonable (< 50% of wing spread)',
            ],
            exit_rules=[
                'Close when profit reaches 50-75% of maximum potential',
                'Exit if stock moves beyond breakeven points',
                'Close before expiration week to avoid pin risk',
                'Take profits early if volatility decreases quickly',
            ],
            risk_management=[
                'Maximum loss is limited to net debit paid',
                'Monitor pin risk near center strike at expiration',
                'Close early if volatility increases significantly',
                'Size positions small due to low probability of max profit',
                'Avoid butterflies over earnings or major events',
            ]
        )
