"""
Unit tests for the par value visitor.
"""

from datetime import date
import pytest

from cashflowlib.conventions import Compounding, DayCount, Frequency, Side
from cashflowlib.currencies import Currency
from cashflowlib.curves import FlatForwardTermStructure
from cashflowlib.dates import Period, TimeUnit
from cashflowlib.errors import NotSupportedError
from cashflowlib.indices import IborIndex, OvernightIndex
from cashflowlib.instruments import (
    MakeDoubleRateInstrument,
    MakeFixedRateInstrument,
    MakeFloatingRateInstrument,
    RateType,
)
from cashflowlib.interest_rate import InterestRate, RateDefinition
from cashflowlib.market_store import MarketStore
from cashflowlib.models import SimpleModel
from cashflowlib.pricing import bind_market_data
from cashflowlib.visitors import NPVConstVisitor, ParValueConstVisitor


RD = RateDefinition(DayCount.THIRTY_360, Compounding.COMPOUNDED, Frequency.ANNUAL)
REFERENCE_DATE = date(2021, 9, 1)
DISCOUNT_ID = 2
FORECAST_ID = 1


@pytest.fixture
def store():
    """Discount curve flat 5% and overnight forecast curve flat 3%."""
    market_store = MarketStore(REFERENCE_DATE, Currency.USD)
    discount = FlatForwardTermStructure(REFERENCE_DATE, InterestRate(0.05, RD))
    forecast = FlatForwardTermStructure(REFERENCE_DATE, InterestRate(0.03, RD))
    market_store.add_index(DISCOUNT_ID, IborIndex("DISC", Period(1, TimeUnit.YEARS), RD, discount))
    market_store.add_index(FORECAST_ID, OvernightIndex("ON", RD, forecast))
    return market_store


def par_value(instrument, store):
    data = bind_market_data(instrument, SimpleModel(store))
    return ParValueConstVisitor(data).visit(instrument)


def fixed_builder(rate=0.07):
    """Five year semiannual fixed loan from the reference date."""
    return (MakeFixedRateInstrument()
            .with_start_date(REFERENCE_DATE)
            .with_tenor(Period(5, TimeUnit.YEARS))
            .with_payment_frequency(Frequency.SEMIANNUAL)
            .with_rate(InterestRate(rate, RD))
            .with_notional(100.0)
            .with_side(Side.RECEIVE)
            .with_currency(Currency.USD)
            .with_discount_curve_id(DISCOUNT_ID))


def double_rate(rate_type):
    """Nine year loan with a rate change after four years and two years of grace."""
    return (MakeDoubleRateInstrument()
            .with_start_date(REFERENCE_DATE)
            .with_tenor(Period(9, TimeUnit.YEARS))
            .with_tenor_change_rate(Period(4, TimeUnit.YEARS))
            .with_tenor_grace_period(Period(2, TimeUnit.YEARS))
            .with_payment_frequency(Frequency.SEMIANNUAL)
            .with_rate_type(rate_type)
            .with_first_part_rate(0.05)
            .with_first_part_rate_definition(RD)
            .with_second_part_rate(0.02)
            .with_second_part_rate_definition(RD)
            .with_notional(100.0)
            .with_side(Side.RECEIVE)
            .with_currency(Currency.USD)
            .with_discount_curve_id(DISCOUNT_ID)
            .with_forecast_curve_id(FORECAST_ID)
            .build())


class TestFixedParRate:
    """Tests for par rates of fixed instruments."""

    def test_bullet(self, store):
        """Test the par rate of a bullet is the curve rate."""
        bond = fixed_builder().bullet().build()
        assert abs(par_value(bond, store) - 0.05) < 1e-6

    def test_instrument_is_unchanged(self, store):
        """Test the solve does not touch the visited coupons."""
        bond = fixed_builder().bullet().build()
        par_value(bond, store)
        assert all(c.rate.rate == 0.07 for c in bond.coupons())

    def test_equal_payments(self, store):
        """Test the par rate of an annuity is the curve rate."""
        loan = fixed_builder().equal_payments().build()
        assert abs(par_value(loan, store) - 0.05) < 1e-6

    def test_rebuild_at_par(self, store):
        """Test rebuilding at the par rate gives a zero NPV."""
        bond = fixed_builder(0.03).bullet().build()
        rate = par_value(bond, store)
        rebuilt = fixed_builder(rate).bullet().build()
        data = bind_market_data(rebuilt, SimpleModel(store))
        npv = NPVConstVisitor(data, include_today_cashflows=True).visit(rebuilt)
        assert abs(npv) < 1e-5 * 100.0


class TestFloatingParSpread:
    """Tests for par spreads of floating instruments."""

    def test_bullet(self, store):
        """Test the par spread is the gap between discount and forecast rates."""
        note = (MakeFloatingRateInstrument()
                .with_start_date(REFERENCE_DATE)
                .with_tenor(Period(3, TimeUnit.YEARS))
                .with_payment_frequency(Frequency.SEMIANNUAL)
                .with_spread(0.0)
                .with_rate_definition(RD)
                .with_notional(100.0)
                .with_side(Side.PAY)
                .with_currency(Currency.USD)
                .with_discount_curve_id(DISCOUNT_ID)
                .with_forecast_curve_id(FORECAST_ID)
                .bullet()
                .build())
        assert abs(par_value(note, store) - 0.02) < 1e-6

    def test_no_coupons(self, store):
        """Test principal-only cashflows have no par value."""
        bond = fixed_builder().bullet().build()
        data = bind_market_data(bond, SimpleModel(store))
        with pytest.raises(NotSupportedError):
            ParValueConstVisitor(data).visit(bond.disbursements() + bond.redemptions())


class TestDoubleRateParValue:
    """Tests for par values of both parts of a double rate instrument."""

    def test_floating_then_fixed(self, store):
        """Test the floating part spread and the fixed part rate."""
        first, second = par_value(double_rate(RateType.FLOATING_THEN_FIXED), store)
        assert abs(first - 0.02) < 1e-6
        assert abs(second - 0.05) < 1e-6

    def test_fixed_then_floating(self, store):
        """Test the fixed part rate and the floating part spread."""
        first, second = par_value(double_rate(RateType.FIXED_THEN_FLOATING), store)
        assert abs(first - 0.05) < 1e-6
        assert abs(second - 0.02) < 1e-6

    def test_fixed_then_fixed(self, store):
        """Test both fixed parts price at the curve rate."""
        first, second = par_value(double_rate(RateType.FIXED_THEN_FIXED), store)
        assert abs(first - 0.05) < 1e-6
        assert abs(second - 0.05) < 1e-6
