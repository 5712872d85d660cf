"""Diagonal calendar: sell a near-term call, buy a longer-dated call at another strike.

The two legs expire on different dates, so breakevens, max profit and the
P&L curve are approximations rather than exact expiration payoffs.
"""
from datetime import date, timedelta
from typing import List, Optional, Tuple

from .base_strategy import BaseOptionsStrategy
from .errors import InsufficientMarketDataError
from .legs import DiagonalCalendarLegs
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
from .strike_selection import ABOVE, select_contract

SHORT_TERM_DAYS = (7, 30)
LONG_TERM_DAYS = (45, 90)
SHORT_STRIKE_OTM = 0.05
LONG_STRIKE_OTM = 0.02
OPTIMAL_ZONE_PERCENT = 0.05
SHORT_DECAY_CAPTURE = 0.8


class DiagonalCalendarStrategy(BaseOptionsStrategy):
    """Time-decay play across two expirations."""

    strategy_type = StrategyType.DIAGONAL_CALENDAR

    def select_expirations(self, expirations: List[date], reference_date: date) -> Tuple[date, date]:
        """Pick the (short, long) expirations from the sorted list.

        The short leg takes the first expiration 7-30 days after the
        reference date, else the earliest. The long leg takes the first
        expiration 45-90 days out, else the latest, and is moved to the next
        later expiration if it does not fall after the short one.

        Raises:
            InsufficientMarketDataError: If no expiration follows the short one
        """
        def days_out(expiration: date) -> int:
            return (expiration - reference_date).days

        short_expiration = next(
            (exp for exp in expirations if SHORT_TERM_DAYS[0] <= days_out(exp) <= SHORT_TERM_DAYS[1]),
            expirations[0]
        )
        long_expiration = next(
            (exp for exp in expirations if LONG_TERM_DAYS[0] <= days_out(exp) <= LONG_TERM_DAYS[1]),
            expirations[-1]
        )
        if long_expiration <= short_expiration:
            later = [exp for exp in expirations if exp > short_expiration]
            if not later:
                raise InsufficientMarketDataError(
                    "No expiration later than the short leg for Diagonal Calendar",
                    strategy_type=self.strategy_type.value
                )
            long_expiration = later[0]
        return short_expiration, long_expiration

    def find_optimal_strikes(self, inputs: StrategyInputs,
                             market_data: MarketDataInput) -> DiagonalCalendarLegs:
        """Select the short and long calls across two expirations.

        Raises:
            InsufficientMarketDataError: If the chain has fewer than two
                expirations or either expiration has no calls
            UnprofitableStructureError: If the long call costs no more than the short call
        """
        chain = self._require_chain(inputs, market_data)
        expirations = chain.expirations()
        if len(expirations) < 2:
            raise self._insufficient(
                f"Need at least 2 expiration dates for Diagonal Calendar on {inputs.symbol}",
                inputs
            )

        reference_date = inputs.expiration_date - timedelta(days=inputs.days_to_expiry)
        short_expiration, long_expiration = self.select_expirations(expirations, reference_date)

        short_calls = chain.calls(short_expiration)
        long_calls = chain.calls(long_expiration)
        if not short_calls or not long_calls:
            raise self._insufficient(
                f"Insufficient call options for Diagonal Calendar on {inputs.symbol}", inputs
            )

        price = inputs.current_price
        short_call = select_contract(price + price * SHORT_STRIKE_OTM, short_calls, ABOVE)
        long_call = select_contract(price + price * LONG_STRIKE_OTM, long_calls, ABOVE)

        legs = DiagonalCalendarLegs(
            short_strike=short_call.strike,
            short_premium=short_call.premium,
            short_expiration=short_expiration,
            long_strike=long_call.strike,
            long_premium=long_call.premium,
            long_expiration=long_expiration,
            option_type='call',
            contracts={'short': short_call, 'long': long_call},
        )

        self._log_selection(
            f"Diagonal Calendar structure for {inputs.symbol}: "
            f"Sell Call {legs.short_strike}@${legs.short_premium:.2f} ({short_expiration.isoformat()}), "
            f"Buy Call {legs.long_strike}@${legs.long_premium:.2f} ({long_expiration.isoformat()})",
            {"symbol": inputs.symbol, "net_debit": f"{legs.net_debit:.2f}"}
        )
        return legs

    def calculate_position(self, inputs: StrategyInputs,
                           legs: DiagonalCalendarLegs) -> StrategyResult:
        low_strike = min(legs.short_strike, legs.long_strike)
        high_strike = max(legs.short_strike, legs.long_strike)
        return self._build_result(
            inputs, legs, self.calculate_breakevens(legs),
            profit_zone=ProfitZone(low_strike * 0.95, high_strike * 1.05),
            net_debit=legs.net_debit,
        )

    def calculate_breakevens(self, legs: DiagonalCalendarLegs) -> Tuple[float, float]:
        # Approximation: the long leg still carries time value at the short expiration
        spread = legs.net_debit * 2
        return legs.average_strike - spread, legs.average_strike + spread

    def calculate_max_profit_loss(self, legs: DiagonalCalendarLegs) -> Tuple[Optional[float], MaxLoss]:
        max_profit = round(self._per_contract(legs.short_premium + legs.strike_spread * 0.5), 2)
        return max_profit, MaxLoss.finite(self._per_contract(legs.net_debit))

    def get_profit_loss_at_price(self, price: float, legs: DiagonalCalendarLegs) -> float:
        """Two-level P&L estimate around the average strike."""
        average_strike = legs.average_strike
        if abs(price - average_strike) <= average_strike * OPTIMAL_ZONE_PERCENT:
            return self._per_contract(legs.short_premium * SHORT_DECAY_CAPTURE - legs.net_debit)
        return -self._per_contract(legs.net_debit)

    def get_strategy_parameters(self) -> StrategyParameters:
        return StrategyParameters(
            optimal_days_to_expiry=35,
            risk_level=RiskLevel.MEDIUM,
            complexity='advanced',
            capital_requirement='medium',
            directionality='neutral'
        )

    def get_description(self) -> StrategyDescription:
        return StrategyDescription(
            name='Diagonal Calendar Spread',
            description=(
                'Sell a short-term option and buy a longer-term option with different strikes. '
                'Profits from time decay of the short option while maintaining upside potential '
                'with the long option.'
            ),
            market_outlook=(
                'Neutral to slightly bullish. Expects short-term consolidation followed by '
                'gradual upward movement.'
            ),
            entry_rules=[
                'Enter when front-month IV > back-month IV',
                'Choose short strike slightly OTM (5-10%)',
                'Choose long strike near ATM or slightly ITM',
                'Target 30-60 days difference between expirations',
                'Look for net debit < 50% of strike difference',
            ],
            exit_rules=[
                'Close short leg at 50-75% profit',
                'Hold long leg if still profitable after short expires',
                'Exit entire position if short strike breached',
                'Consider rolling short leg if challenged early',
            ],
            risk_management=[
                'Maximum loss limited to net debit paid',
                'Monitor early assignment risk on short leg',
                'Close before short expiration if ITM',
                'Manage as two separate positions after short expires',
                'Size conservatively due to complexity',
            ]
        )
