"""Unit tests for value objects and the options chain model."""
from datetime import date

import pytest

from strategy_engine.market_data.base_client import OptionContract, OptionsChain
from strategy_engine.strategy.errors import (
    InvalidInputError,
    StrategyError,
    StrategyNotImplementedError,
)
from strategy_engine.strategy.models import (
    MaxLoss,
    OptionLeg,
    PriceRange,
    StrategyInputs,
    StrategyType,
)


class TestStrategyType:
    """Tests for StrategyType resolution."""

    def test_from_string(self):
        assert StrategyType.from_value('iron_condor') == StrategyType.IRON_CONDOR
        assert StrategyType.from_value('IRON_CONDOR') == StrategyType.IRON_CONDOR

    def test_from_enum(self):
        assert StrategyType.from_value(StrategyType.BUTTERFLY_SPREAD) == StrategyType.BUTTERFLY_SPREAD

    def test_unknown_raises(self):
        with pytest.raises(StrategyNotImplementedError, match="Strategy covered_call not implemented"):
            StrategyType.from_value('covered_call')

    def test_unknown_is_value_error(self):
        with pytest.raises(ValueError):
            StrategyType.from_value('jade_lizard')


class TestStrategyErrors:
    """Tests for error context."""

    def test_with_context_fills_missing_fields(self):
        error = StrategyError("boom", strategy_type='iron_condor')
        error.with_context('long_strangle', 'AAPL')

        assert error.strategy_type == 'iron_condor'
        assert error.symbol == 'AAPL'
        assert str(error) == "boom [strategy=iron_condor, symbol=AAPL]"

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)
        assert str(StrategyError("plain")) == "plain"


class TestStrategyInputs:
    """Tests for StrategyInputs validation."""

    def test_valid(self):
        inputs = StrategyInputs('AAPL', 150.0, date(2024, 12, 20), 0)
        assert inputs.validate() == (True, None)

    def test_blank_symbol(self):
        inputs = StrategyInputs('   ', 150.0, date(2024, 12, 20), 10)
        assert inputs.validate() == (False, "Symbol is required")

    def test_iso_string_expiration_converted(self):
        inputs = StrategyInputs('XYZ', 100.0, '2024-12-20', 10)

        assert inputs.expiration_date == date(2024, 12, 20)
        assert inputs.validate() == (True, None)

    def test_unparseable_expiration_raises(self):
        with pytest.raises(InvalidInputError, match="must be an ISO date") as exc_info:
            StrategyInputs('XYZ', 100.0, '12/20/2024', 10)

        assert exc_info.value.symbol == 'XYZ'

    def test_non_date_expiration_invalid(self):
        inputs = StrategyInputs('XYZ', 100.0, 20241220, 10)

        is_valid, message = inputs.validate()
        assert not is_valid
        assert "must be an ISO date" in message


class TestMaxLoss:
    """Tests for MaxLoss."""

    def test_finite_rounds_to_cents(self):
        max_loss = MaxLoss.finite(160.00000000000003)
        assert max_loss.amount == 160.0
        assert not max_loss.is_unlimited
        assert str(max_loss) == "$160.00"

    def test_unlimited(self):
        max_loss = MaxLoss.unlimited()
        assert max_loss.is_unlimited
        assert max_loss.amount is None
        assert str(max_loss) == "Unlimited"
        assert max_loss.percent_of(10000.0) is None

    def test_percent_of(self):
        assert MaxLoss.finite(500.0).percent_of(10000.0) == pytest.approx(5.0)


class TestOptionLeg:
    """Tests for per-leg P&L."""

    def test_long_call(self):
        leg = OptionLeg(strike=100.0, premium=2.0, option_type='call', action='buy')
        assert leg.profit_loss_at(110.0) == pytest.approx(8.0)
        assert leg.profit_loss_at(90.0) == pytest.approx(-2.0)

    def test_short_put_quantity(self):
        leg = OptionLeg(strike=100.0, premium=3.0, option_type='put', action='sell', quantity=2)
        assert leg.profit_loss_at(95.0) == pytest.approx(-4.0)
        assert leg.profit_loss_at(105.0) == pytest.approx(6.0)


class TestPriceRange:
    """Tests for PriceRange."""

    def test_around(self):
        price_range = PriceRange.around(100.0)
        assert price_range.min_price == pytest.approx(70.0)
        assert price_range.max_price == pytest.approx(130.0)
        assert price_range.points == 100

    def test_prices_include_both_ends(self):
        prices = PriceRange(90.0, 110.0, 5).prices()
        assert prices == pytest.approx([90.0, 95.0, 100.0, 105.0, 110.0])

    def test_validate(self):
        assert PriceRange(90.0, 110.0, 1).validate() == (False, "Price range needs at least 2 points")
        assert PriceRange(-1.0, 110.0).validate() == (False, "Minimum price cannot be negative")
        assert PriceRange(110.0, 90.0).validate() == (
            False, "Maximum price must be greater than minimum price"
        )
        assert PriceRange(90.0, 110.0).validate() == (True, None)


class TestOptionContract:
    """Tests for OptionContract."""

    def test_premium_is_mid(self):
        contract = OptionContract(100.0, 'call', date(2024, 12, 20), bid=1.0, ask=1.2, last=5.0)
        assert contract.premium == pytest.approx(1.1)

    def test_premium_falls_back_to_last(self):
        contract = OptionContract(100.0, 'call', date(2024, 12, 20), bid=0.0, ask=1.2, last=0.9)
        assert contract.premium == 0.9

    def test_premium_without_quotes_is_zero(self):
        contract = OptionContract(100.0, 'call', date(2024, 12, 20))
        assert contract.premium == 0.0

    def test_from_dict(self):
        contract = OptionContract.from_dict({
            'ticker': 'AAPL241220C00150000',
            'strike': 150,
            'contract_type': 'call',
            'expiration_date': '2024-12-20',
            'bid': 2.1,
            'ask': 2.3,
            'delta': 0.45,
        })

        assert contract.strike == 150.0
        assert contract.expiration_date == date(2024, 12, 20)
        assert contract.symbol == 'AAPL241220C00150000'
        assert contract.delta == 0.45
        assert contract.gamma is None

    def test_from_dict_rejects_bad_type(self):
        with pytest.raises(ValueError, match="Invalid contract type"):
            OptionContract.from_dict({'strike': 100, 'contract_type': 'stock', 'expiration_date': '2024-12-20'})


class TestOptionsChain:
    """Tests for OptionsChain."""

    @pytest.fixture
    def chain(self):
        return OptionsChain.from_dict({
            'symbol': 'AAPL',
            'underlyingPrice': 150.0,
            'options': [
                {'strike': 155, 'contract_type': 'call', 'expiration_date': '2024-12-27'},
                {'strike': 145, 'contract_type': 'call', 'expiration_date': '2024-12-20'},
                {'strike': 150, 'contract_type': 'call', 'expiration_date': '2024-12-20'},
                {'strike': 145, 'contract_type': 'put', 'expiration_date': '2024-12-20'},
            ],
        })

    def test_from_dict(self, chain):
        assert chain.symbol == 'AAPL'
        assert chain.underlying_price == 150.0
        assert len(chain.options) == 4

    def test_expirations_sorted(self, chain):
        assert chain.expirations() == [date(2024, 12, 20), date(2024, 12, 27)]

    def test_contracts_filtered_and_sorted(self, chain):
        calls = chain.calls(date(2024, 12, 20))
        assert [c.strike for c in calls] == [145.0, 150.0]
        assert len(chain.calls()) == 3
        assert len(chain.puts()) == 1

    def test_to_dict_round_trip_keys(self, chain):
        data = chain.to_dict()
        assert data['underlyingPrice'] == 150.0
        assert data['options'][0]['contract_type'] in ('call', 'put')
        assert OptionsChain.from_dict(data).expirations() == chain.expirations()
