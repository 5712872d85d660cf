"""Per-strategy leg structures.

Each strategy fills exactly the legs it trades. The structures validate the
debit/credit shape of the position on construction and convert to the common
``OptionLeg`` list (and the legacy flat field names) only at the boundary.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from strategy_engine.market_data.base_client import OptionContract
from .errors import UnprofitableStructureError
from .models import OptionLeg, StrategyType


def _make_leg(strike: float, premium: float, option_type: str, action: str,
              quantity: int = 1, expiration_date: Optional[date] = None,
              contract: Optional[OptionContract] = None) -> OptionLeg:
    leg = OptionLeg(
        strike=strike,
        premium=premium,
        option_type=option_type,
        action=action,
        quantity=quantity,
        expiration_date=expiration_date,
    )
    if contract is not None and contract.has_greeks:
        leg.delta = contract.delta
        leg.gamma = contract.gamma
        leg.theta = contract.theta
        leg.vega = contract.vega
    return leg


@dataclass
class StrangleLegs:
    """OTM put + OTM call on the same expiration."""
    put_strike: float
    put_premium: float
    call_strike: float
    call_premium: float
    expiration_date: Optional[date] = None
    contracts: Dict[str, OptionContract] = field(default_factory=dict, repr=False, compare=False)

    action = 'buy'

    @property
    def total_premium(self) -> float:
        return self.put_premium + self.call_premium

    def option_legs(self) -> List[OptionLeg]:
        return [
            _make_leg(self.put_strike, self.put_premium, 'put', self.action,
                      expiration_date=self.expiration_date, contract=self.contracts.get('put')),
            _make_leg(self.call_strike, self.call_premium, 'call', self.action,
                      expiration_date=self.expiration_date, contract=self.contracts.get('call')),
        ]


@dataclass
class LongStrangleLegs(StrangleLegs):
    action = 'buy'

    def __post_init__(self):
        if self.total_premium <= 0:
            raise UnprofitableStructureError(
                "Long Strangle must result in net debit (premium paid)",
                strategy_type=StrategyType.LONG_STRANGLE.value
            )

    def legacy_fields(self) -> Dict[str, Any]:
        return {
            'long_put_strike': self.put_strike,
            'long_call_strike': self.call_strike,
            'long_put_premium': self.put_premium,
            'long_call_premium': self.call_premium,
        }


@dataclass
class ShortStrangleLegs(StrangleLegs):
    action = 'sell'

    def __post_init__(self):
        if self.total_premium <= 0:
            raise UnprofitableStructureError(
                "Short Strangle must result in net credit (premium collected)",
                strategy_type=StrategyType.SHORT_STRANGLE.value
            )

    def legacy_fields(self) -> Dict[str, Any]:
        # Legacy consumers read long_* fields; collected premium is reported negative there
        return {
            'long_put_strike': self.put_strike,
            'long_call_strike': self.call_strike,
            'long_put_premium': -self.put_premium,
            'long_call_premium': -self.call_premium,
            'short_put_strike': self.put_strike,
            'short_call_strike': self.call_strike,
            'short_put_premium': self.put_premium,
            'short_call_premium': self.call_premium,
        }


@dataclass
class IronCondorLegs:
    """Short put spread + short call spread."""
    long_put_strike: float
    long_put_premium: float
    short_put_strike: float
    short_put_premium: float
    short_call_strike: float
    short_call_premium: float
    long_call_strike: float
    long_call_premium: float
    expiration_date: Optional[date] = None
    contracts: Dict[str, OptionContract] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if self.short_put_premium <= self.long_put_premium:
            raise UnprofitableStructureError(
                f"Iron Condor put spread must collect a credit "
                f"(short {self.short_put_strike}@{self.short_put_premium:.2f} vs "
                f"long {self.long_put_strike}@{self.long_put_premium:.2f})",
                strategy_type=StrategyType.IRON_CONDOR.value
            )
        if self.short_call_premium <= self.long_call_premium:
            raise UnprofitableStructureError(
                f"Iron Condor call spread must collect a credit "
                f"(short {self.short_call_strike}@{self.short_call_premium:.2f} vs "
                f"long {self.long_call_strike}@{self.long_call_premium:.2f})",
                strategy_type=StrategyType.IRON_CONDOR.value
            )
        if self.net_credit >= self.max_spread_width:
            raise UnprofitableStructureError(
                f"Iron Condor credit {self.net_credit:.2f} is not less than "
                f"its widest spread {self.max_spread_width:.2f}",
                strategy_type=StrategyType.IRON_CONDOR.value
            )

    @property
    def put_spread_credit(self) -> float:
        return self.short_put_premium - self.long_put_premium

    @property
    def call_spread_credit(self) -> float:
        return self.short_call_premium - self.long_call_premium

    @property
    def net_credit(self) -> float:
        return self.put_spread_credit + self.call_spread_credit

    @property
    def put_spread_width(self) -> float:
        return self.short_put_strike - self.long_put_strike

    @property
    def call_spread_width(self) -> float:
        return self.long_call_strike - self.short_call_strike

    @property
    def max_spread_width(self) -> float:
        return max(self.put_spread_width, self.call_spread_width)

    def option_legs(self) -> List[OptionLeg]:
        exp = self.expiration_date
        return [
            _make_leg(self.long_put_strike, self.long_put_premium, 'put', 'buy',
                      expiration_date=exp, contract=self.contracts.get('long_put')),
            _make_leg(self.short_put_strike, self.short_put_premium, 'put', 'sell',
                      expiration_date=exp, contract=self.contracts.get('short_put')),
            _make_leg(self.short_call_strike, self.short_call_premium, 'call', 'sell',
                      expiration_date=exp, contract=self.contracts.get('short_call')),
            _make_leg(self.long_call_strike, self.long_call_premium, 'call', 'buy',
                      expiration_date=exp, contract=self.contracts.get('long_call')),
        ]

    def legacy_fields(self) -> Dict[str, Any]:
        return {
            'long_put_strike': self.long_put_strike,
            'long_call_strike': self.long_call_strike,
            'long_put_premium': self.long_put_premium,
            'long_call_premium': self.long_call_premium,
            'short_put_strike': self.short_put_strike,
            'short_call_strike': self.short_call_strike,
            'short_put_premium': self.short_put_premium,
            'short_call_premium': self.short_call_premium,
        }


@dataclass
class ButterflyLegs:
    """Buy lower wing, sell two at the center, buy upper wing (same kind)."""
    lower_strike: float
    lower_premium: float
    center_strike: float
    center_premium: float
    upper_strike: float
    upper_premium: float
    option_type: str = 'call'
    expiration_date: Optional[date] = None
    contracts: Dict[str, OptionContract] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if self.net_debit <= 0:
            raise UnprofitableStructureError(
                f"Butterfly Spread resulted in credit instead of debit: {self.net_debit:.2f}",
                strategy_type=StrategyType.BUTTERFLY_SPREAD.value
            )
        if self.net_debit >= self.wing_distance:
            raise UnprofitableStructureError(
                f"Butterfly Spread debit {self.net_debit:.2f} is not less than "
                f"its wing distance {self.wing_distance:.2f}",
                strategy_type=StrategyType.BUTTERFLY_SPREAD.value
            )

    @property
    def net_debit(self) -> float:
        return self.lower_premium + self.upper_premium - 2 * self.center_premium

    @property
    def wing_distance(self) -> float:
        return (self.upper_strike - self.lower_strike) / 2

    def option_legs(self) -> List[OptionLeg]:
        exp = self.expiration_date
        return [
            _make_leg(self.lower_strike, self.lower_premium, self.option_type, 'buy',
                      expiration_date=exp, contract=self.contracts.get('lower')),
            _make_leg(self.center_strike, self.center_premium, self.option_type, 'sell',
                      quantity=2, expiration_date=exp, contract=self.contracts.get('center')),
            _make_leg(self.upper_strike, self.upper_premium, self.option_type, 'buy',
                      expiration_date=exp, contract=self.contracts.get('upper')),
        ]

    def legacy_fields(self) -> Dict[str, Any]:
        # Legacy layout stores the wings in the long_* slots and the body in short_*
        return {
            'long_put_strike': self.lower_strike,
            'long_call_strike': self.upper_strike,
            'long_put_premium': self.lower_premium,
            'long_call_premium': self.upper_premium,
            'short_put_strike': self.center_strike,
            'short_call_strike': self.center_strike,
            'short_put_premium': self.center_premium,
            'short_call_premium': self.center_premium,
        }


@dataclass
class DiagonalCalendarLegs:
    """Sell a near-term option, buy a far-term option at a different strike."""
    short_strike: float
    short_premium: float
    short_expiration: date
    long_strike: float
    long_premium: float
    long_expiration: date
    option_type: str = 'call'
    contracts: Dict[str, OptionContract] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if self.net_debit <= 0:
            raise UnprofitableStructureError(
                "Diagonal Calendar must result in net debit (long premium > short premium)",
                strategy_type=StrategyType.DIAGONAL_CALENDAR.value
            )

    @property
    def net_debit(self) -> float:
        return self.long_premium - self.short_premium

    @property
    def average_strike(self) -> float:
        return (self.long_strike + self.short_strike) / 2

    @property
    def strike_spread(self) -> float:
        return abs(self.long_strike - self.short_strike)

    def option_legs(self) -> List[OptionLeg]:
        return [
            _make_leg(self.short_strike, self.short_premium, self.option_type, 'sell',
                      expiration_date=self.short_expiration, contract=self.contracts.get('short')),
            _make_leg(self.long_strike, self.long_premium, self.option_type, 'buy',
                      expiration_date=self.long_expiration, contract=self.contracts.get('long')),
        ]

    def legacy_fields(self) -> Dict[str, Any]:
        return {
            'long_put_strike': self.long_strike,
            'long_call_strike': self.long_strike,
            'long_put_premium': self.long_premium,
            'long_call_premium': self.long_premium,
            'short_put_strike': self.short_strike,
            'short_call_strike': self.short_strike,
            'short_put_premium': self.short_premium,
            'short_call_premium': self.short_premium,
            'long_expiration': self.long_expiration,
            'short_expiration': self.short_expiration,
        }
