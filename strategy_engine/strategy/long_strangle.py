"""Long strangle: buy an OTM put and an OTM call.

Max profit is unlimited, max loss is the total premium paid.
Breakevens: put strike - total premium, call strike + total premium.
"""
from typing import Optional, Tuple

from .base_strategy import BaseOptionsStrategy
from .legs import LongStrangleLegs
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


class LongStrangleStrategy(BaseOptionsStrategy):
    """Long volatility play that profits from a large move in either direction."""

    strategy_type = StrategyType.LONG_STRANGLE

    def strike_distance_percent(self, days_to_expiry: int) -> float:
        """OTM distance as a fraction of the underlying price."""
        if days_to_expiry <= 7:
            return 0.03
        if days_to_expiry <= 30:
            return 0.05
        return 0.08

    def find_optimal_strikes(self, inputs: StrategyInputs,
                             market_data: MarketDataInput) -> LongStrangleLegs:
        """Find OTM put and call strikes for the inputs' expiration.

        Args:
            inputs: Calculation inputs
            market_data: Market data including the options chain

        Returns:
            LongStrangleLegs with the selected strikes and mid premiums

        Raises:
            InsufficientMarketDataError: If the expiration lacks calls or puts
        """
        chain = self._require_chain(inputs, market_data)
        puts = chain.puts(inputs.expiration_date)
        calls = chain.calls(inputs.expiration_date)
        if not calls or not puts:
            raise self._insufficient(
                f"Insufficient options data for Long Strangle on {inputs.symbol}", inputs
            )

        distance = inputs.current_price * self.strike_distance_percent(inputs.days_to_expiry)
        put_contract = select_contract(inputs.current_price - distance, puts, BELOW)
        call_contract = select_contract(inputs.current_price + distance, calls, ABOVE)

        legs = LongStrangleLegs(
            put_strike=put_contract.strike,
            put_premium=put_contract.premium,
            call_strike=call_contract.strike,
            call_premium=call_contract.premium,
            expiration_date=inputs.expiration_date,
            contracts={'put': put_contract, 'call': call_contract},
        )

        self._log_selection(
            f"Long Strangle strikes for {inputs.symbol}: "
            f"Put {legs.put_strike}@${legs.put_premium:.2f}, "
            f"Call {legs.call_strike}@${legs.call_premium:.2f}",
            {"symbol": inputs.symbol, "current_price": inputs.current_price,
             "days_to_expiry": inputs.days_to_expiry}
        )
        return legs

    def calculate_position(self, inputs: StrategyInputs,
                           legs: LongStrangleLegs) -> StrategyResult:
        lower, upper = self.calculate_breakevens(legs)
        return self._build_result(
            inputs, legs, (lower, upper),
            profit_zone=ProfitZone(lower, upper),
            net_debit=legs.total_premium,
        )

    def calculate_breakevens(self, legs: LongStrangleLegs) -> Tuple[float, float]:
        total_premium = legs.total_premium
        return legs.put_strike - total_premium, legs.call_strike + total_premium

    def calculate_max_profit_loss(self, legs: LongStrangleLegs) -> Tuple[Optional[float], MaxLoss]:
        return None, MaxLoss.finite(self._per_contract(legs.total_premium))

    def get_profit_loss_at_price(self, price: float, legs: LongStrangleLegs) -> float:
        return self._per_contract(sum(leg.profit_loss_at(price) for leg in legs.option_legs()))

    def get_strategy_parameters(self) -> StrategyParameters:
        return StrategyParameters(
            optimal_days_to_expiry=45,  # 4-8 weeks
            risk_level=RiskLevel.MEDIUM,
            complexity='simple',
            capital_requirement='low',
            directionality='volatile'
        )

    def get_description(self) -> StrategyDescription:
        return StrategyDescription(
            name='Long Strangle',
            description=(
                'Buy an out-of-the-money put and an out-of-the-money call with the same '
                'expiration date. Profits from large price movements in either direction.'
            ),
            market_outlook=(
                'High volatility expected, but direction uncertain. Ideal before earnings, '
                'FDA approvals, or major announcements.'
            ),
            entry_rules=[
                'Enter when implied volatility is low (IV percentile < 30)',
                'Choose strikes 5-10% out-of-the-money',
                'Target 30-45 days to expiration for optimal time decay',
                'Ensure adequate liquidity in both strikes',
            ],
            exit_rules=[
                'Close when profit reaches 50-100% of premium paid',
                'Exit before expiration week to avoid rapid time decay',
                'Close losing trades at 50% of premium paid',
                'Consider rolling to later expiration if thesis intact',
            ],
            risk_management=[
                'Maximum loss is limited to premium paid',
                'Monitor time decay acceleration in final weeks',
                'Watch for volatility crush after events',
                'Size positions appropriately (2-5% of portfolio per trade)',
            ]
        )
