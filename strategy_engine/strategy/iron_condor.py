"""Iron condor: short put spread plus short call spread on one expiration.

Max profit is the net credit, max loss the wider spread minus the credit.
Breakevens: short put - net credit, short call + net credit.
"""
from typing import Optional, Tuple

from .base_strategy import BaseOptionsStrategy
from .legs import IronCondorLegs
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
from .strike_selection import ABOVE, BELOW, select_contract

MIN_CONTRACTS_PER_SIDE = 4


class IronCondorStrategy(BaseOptionsStrategy):
    """Defined-risk premium collection for range-bound markets."""

    strategy_type = StrategyType.IRON_CONDOR

    def strike_distances(self, current_price: float, days_to_expiry: int) -> Tuple[float, float]:
        """Return (inner, outer) distances from the underlying price.

        Inner distance places the short strikes, outer distance the long
        strikes; the gap between them is the target spread width.
        """
        if days_to_expiry <= 14:
            inner, width = 0.05, 0.03
        elif days_to_expiry <= 30:
            inner, width = 0.08, 0.05
        else:
            inner, width = 0.12, 0.08
        inner_distance = current_price * inner
        return inner_distance, inner_distance + current_price * width

    def find_optimal_strikes(self, inputs: StrategyInputs,
                             market_data: MarketDataInput) -> IronCondorLegs:
        """Find the four strikes of the condor.

        Raises:
            InsufficientMarketDataError: If fewer than four calls or puts are
                quoted, or the wings collapse onto the short strikes
            UnprofitableStructureError: If either spread would not collect a credit
        """
        chain = self._require_chain(inputs, market_data)
        puts = chain.puts(inputs.expiration_date)
        calls = chain.calls(inputs.expiration_date)
        if len(calls) < MIN_CONTRACTS_PER_SIDE or len(puts) < MIN_CONTRACTS_PER_SIDE:
            raise self._insufficient(
                f"Insufficient options for Iron Condor on {inputs.symbol} "
                f"(need {MIN_CONTRACTS_PER_SIDE}+ calls and {MIN_CONTRACTS_PER_SIDE}+ puts)",
                inputs
            )

        price = inputs.current_price
        inner_distance, outer_distance = self.strike_distances(price, inputs.days_to_expiry)

        short_put = select_contract(price - inner_distance, puts, BELOW)
        long_put = select_contract(price - outer_distance, puts, BELOW)
        short_call = select_contract(price + inner_distance, calls, ABOVE)
        long_call = select_contract(price + outer_distance, calls, ABOVE)

        if long_put.strike >= short_put.strike or long_call.strike <= short_call.strike:
            raise self._insufficient(
                f"Could not find distinct wing strikes for Iron Condor on {inputs.symbol}",
                inputs
            )

        legs = IronCondorLegs(
            long_put_strike=long_put.strike,
            long_put_premium=long_put.premium,
            short_put_strike=short_put.strike,
            short_put_premium=short_put.premium,
            short_call_strike=short_call.strike,
            short_call_premium=short_call.premium,
            long_call_strike=long_call.strike,
            long_call_premium=long_call.premium,
            expiration_date=inputs.expiration_date,
            contracts={
                'long_put': long_put,
                'short_put': short_put,
                'short_call': short_call,
                'long_call': long_call,
            },
        )

        self._log_selection(
            f"Iron Condor structure for {inputs.symbol}: "
            f"Long Put {legs.long_put_strike}@${legs.long_put_premium:.2f}, "
            f"Short Put {legs.short_put_strike}@${legs.short_put_premium:.2f}, "
            f"Short Call {legs.short_call_strike}@${legs.short_call_premium:.2f}, "
            f"Long Call {legs.long_call_strike}@${legs.long_call_premium:.2f}",
            {"symbol": inputs.symbol, "net_credit": f"{legs.net_credit:.2f}"}
        )
        return legs

    def calculate_position(self, inputs: StrategyInputs, legs: IronCondorLegs) -> StrategyResult:
        return self._build_result(
            inputs, legs, self.calculate_breakevens(legs),
            profit_zone=ProfitZone(legs.short_put_strike, legs.short_call_strike),
            net_credit=legs.net_credit,
        )

    def calculate_breakevens(self, legs: IronCondorLegs) -> Tuple[float, float]:
        net_credit = legs.net_credit
        return legs.short_put_strike - net_credit, legs.short_call_strike + net_credit

    def calculate_max_profit_loss(self, legs: IronCondorLegs) -> Tuple[Optional[float], MaxLoss]:
        net_credit = legs.net_credit
        max_profit = round(self._per_contract(net_credit), 2)
        max_loss = MaxLoss.finite(self._per_contract(legs.max_spread_width - net_credit))
        return max_profit, max_loss

    def get_profit_loss_at_price(self, price: float, legs: IronCondorLegs) -> float:
        return self._per_contract(sum(leg.profit_loss_at(price) for leg in legs.option_legs()))

    def get_strategy_parameters(self) -> StrategyParameters:
        return StrategyParameters(
            optimal_days_to_expiry=30,
            risk_level=RiskLevel.LOW,
            complexity='advanced',
            capital_requirement='medium',
            directionality='neutral'
        )

    def get_description(self) -> StrategyDescription:
        return StrategyDescription(
            name='Iron Condor',
            description=(
                'Combination of a put spread and call spread. Sell closer strikes, buy further '
                'strikes for protection. Profits from low volatility and range-bound movement.'
            ),
            market_outlook=(
                'Low volatility expected with stock remaining between the short strikes. '
                'Ideal for range-bound markets with strong support/resistance.'
            ),
            entry_rules=[
                'Enter when implied volatility is high (IV percentile > 60)',
                'Choose short strikes with strong support/resistance levels',
                'Target 20-45 days to expiration for optimal time decay',
                'Ensure 5-10 point spread width for good risk/reward',
                'Look for credit of 1/3 to 1/2 of spread width',
            ],
            exit_rules=[
                'Close when profit reaches 25-50% of credit collected',
                'Exit if stock approaches either short strike',
                'Close before expiration week to avoid assignment',
                'Consider closing one side if directionally challenged',
            ],
            risk_management=[
                'Maximum loss is limited (spread width - credit)',
                'Monitor both short strikes for breach risk',
                'Consider adjustments if one side threatened',
                'Close early if volatility expands significantly',
                'Size positions appropriately (3-5% of portfolio)',
                'Have plan for early assignment on short options',
            ]
        )
