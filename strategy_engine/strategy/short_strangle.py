"""Short strangle: sell an OTM put and an OTM call.

Max profit is the premium collected, max loss is unlimited.
"""
from typing import Optional, Tuple

from .base_strategy import BaseOptionsStrategy
from .legs import ShortStrangleLegs
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

LOW_PREMIUM_RATIO = 0.02


class ShortStrangleStrategy(BaseOptionsStrategy):
    """Premium collection play for range-bound, low volatility markets."""

    strategy_type = StrategyType.SHORT_STRANGLE

    def strike_distance_percent(self, days_to_expiry: int) -> float:
        # Wider tiers than the long strangle
        if days_to_expiry <= 14:
            return 0.08
        if days_to_expiry <= 45:
            return 0.12
        return 0.15

    def find_optimal_strikes(self, inputs: StrategyInputs,
                             market_data: MarketDataInput) -> ShortStrangleLegs:
        """Find OTM put and call strikes to sell for the inputs' expiration.

        Raises:
            InsufficientMarketDataError: If the expiration lacks calls or puts
            UnprofitableStructureError: If no premium would be collected
        """
        chain = self._require_chain(inputs, market_data)
        puts = chain.puts(inputs.expiration_date)
        calls = chain.calls(inputs.expiration_date)
        if not calls or not puts:
            raise self._insufficient(
                f"Insufficient options data for Short Strangle on {inputs.symbol}", inputs
            )

        distance = inputs.current_price * self.strike_distance_percent(inputs.days_to_expiry)
        put_contract = select_contract(inputs.current_price - distance, puts, BELOW)
        call_contract = select_contract(inputs.current_price + distance, calls, ABOVE)

        legs = ShortStrangleLegs(
            put_strike=put_contract.strike,
            put_premium=put_contract.premium,
            call_strike=call_contract.strike,
            call_premium=call_contract.premium,
            expiration_date=inputs.expiration_date,
            contracts={'put': put_contract, 'call': call_contract},
        )

        strike_width = legs.call_strike - legs.put_strike
        if strike_width > 0 and self.logger:
            premium_ratio = legs.total_premium / strike_width
            if premium_ratio < LOW_PREMIUM_RATIO:
                self.logger.log_warning(
                    f"Low premium collection for Short Strangle on {inputs.symbol}",
                    {"premium_to_width_ratio": f"{premium_ratio:.3f}"}
                )

        self._log_selection(
            f"Short Strangle strikes for {inputs.symbol}: "
            f"Sell Put {legs.put_strike}@${legs.put_premium:.2f}, "
            f"Sell Call {legs.call_strike}@${legs.call_premium:.2f}",
            {"symbol": inputs.symbol,
             "premium_per_contract": f"{self._per_contract(legs.total_premium):.0f}"}
        )
        return legs

    def calculate_position(self, inputs: StrategyInputs,
                           legs: ShortStrangleLegs) -> StrategyResult:
        return self._build_result(
            inputs, legs, self.calculate_breakevens(legs),
            profit_zone=ProfitZone(legs.put_strike, legs.call_strike),
            net_credit=legs.total_premium,
        )

    def calculate_breakevens(self, legs: ShortStrangleLegs) -> Tuple[float, float]:
        total_premium = legs.total_premium
        return legs.put_strike - total_premium, legs.call_strike + total_premium

    def calculate_max_profit_loss(self, legs: ShortStrangleLegs) -> Tuple[Optional[float], MaxLoss]:
        return round(self._per_contract(legs.total_premium), 2), MaxLoss.unlimited()

    def get_profit_loss_at_price(self, price: float, legs: ShortStrangleLegs) -> float:
        return self._per_contract(sum(leg.profit_loss_at(price) for leg in legs.option_legs()))

    def get_strategy_parameters(self) -> StrategyParameters:
        return StrategyParameters(
            optimal_days_to_expiry=30,
            risk_level=RiskLevel.UNLIMITED,
            complexity='intermediate',
            capital_requirement='high',  # margin for naked short options
            directionality='neutral'
        )

    def get_description(self) -> StrategyDescription:
        return StrategyDescription(
            name='Short Strangle',
            description=(
                'Sell an out-of-the-money put and an out-of-the-money call with the same '
                'expiration date. Profits from low volatility and sideways price movement.'
            ),
            market_outlook=(
                'Low volatility expected, stock price to remain range-bound between strikes. '
                'Ideal when IV is high and expected to decrease.'
            ),
            entry_rules=[
                'Enter when implied volatility is high (IV percentile > 70)',
                'Choose strikes 10-15% out-of-the-money for safety margin',
                'Target 20-45 days to expiration for optimal time decay',
                'Ensure strong support/resistance levels near strikes',
                'Avoid earnings announcements and major events',
            ],
            exit_rules=[
                'Close when profit reaches 25-50% of premium collected',
                'Exit immediately if stock breaks through either strike',
                'Close before expiration week to avoid assignment risk',
                'Consider rolling strikes out and up/down if challenged',
            ],
            risk_management=[
                'UNLIMITED LOSS POTENTIAL - use strict stop losses',
                'Monitor delta exposure and hedge if necessary',
                'Close positions before major events or earnings',
                'Keep position size small (1-2% of portfolio maximum)',
                'Have assignment plan ready for both puts and calls',
                'Consider converting to iron condor if strikes threatened',
            ]
        )
