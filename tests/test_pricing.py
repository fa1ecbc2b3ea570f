"""
Unit tests for pricing module.
"""

from datetime import date
import pytest

from cashflowlib.conventions import Compounding, DayCount, Frequency, Side
from cashflowlib.currencies import Currency
from cashflowlib.curves import FlatForwardTermStructure
from cashflowlib.dates import Period, TimeUnit
from cashflowlib.errors import InvalidValueError, NotFoundError
from cashflowlib.indices import IborIndex
from cashflowlib.instruments import MakeFixedRateInstrument
from cashflowlib.interest_rate import InterestRate, RateDefinition
from cashflowlib.market_store import MarketStore
from cashflowlib.pricing import PricingOutput, price_instrument, price_instruments, results_to_dataframe


REFERENCE_DATE = date(2024, 1, 1)
RD = RateDefinition(DayCount.THIRTY_360, Compounding.COMPOUNDED, Frequency.ANNUAL)


@pytest.fixture
def store():
    """USD store with one flat 5% discount curve."""
    market_store = MarketStore(REFERENCE_DATE, Currency.USD)
    curve = FlatForwardTermStructure(REFERENCE_DATE, InterestRate(0.05, RD))
    market_store.add_index(0, IborIndex("USD-DISC", Period(1, TimeUnit.YEARS), RD, curve))
    return market_store


def bond(id, rate=0.05, discount_curve_id=0):
    """Three year annual bullet."""
    return (MakeFixedRateInstrument()
            .with_start_date(REFERENCE_DATE)
            .with_tenor(Period(3, TimeUnit.YEARS))
            .with_payment_frequency(Frequency.ANNUAL)
            .with_rate(InterestRate(rate, RD))
            .with_notional(100.0)
            .with_side(Side.RECEIVE)
            .with_currency(Currency.USD)
            .with_discount_curve_id(discount_curve_id)
            .with_id(id)
            .bullet()
            .build())


class TestPriceInstrument:
    """Tests for single instrument pricing."""

    def test_npv_and_duration(self, store):
        """Test a par bond and its duration."""
        result = price_instrument(bond("A"), store)
        assert isinstance(result, PricingOutput)
        assert result.instrument_id == "A"
        assert result.reference_date == REFERENCE_DATE
        assert abs(result.npv - 100.0) < 1e-9
        assert 2.5 < result.duration < 3.0

    def test_include_today(self, store):
        """Test today's disbursement is counted on request."""
        result = price_instrument(bond("A"), store, include_today_cashflows=True, with_duration=False)
        assert abs(result.npv) < 1e-9
        assert result.duration is None

    def test_unknown_curve(self, store):
        """Test a missing index raises."""
        with pytest.raises(NotFoundError):
            price_instrument(bond("A", discount_curve_id=9), store)


class TestPriceInstruments:
    """Tests for parallel pricing."""

    def test_order_is_kept(self, store):
        """Test results follow the input order."""
        instruments = [bond(str(i), rate=0.01 * i) for i in range(1, 9)]
        results = price_instruments(instruments, store, max_workers=4)
        assert [r.instrument_id for r in results] == [str(i) for i in range(1, 9)]
        npvs = [r.npv for r in results]
        assert npvs == sorted(npvs)

    def test_matches_sequential(self, store):
        """Test parallel and sequential pricing agree."""
        parallel = price_instruments([bond("A", 0.04), bond("B", 0.06)], store)
        sequential = [price_instrument(bond("A", 0.04), store), price_instrument(bond("B", 0.06), store)]
        for p, s in zip(parallel, sequential):
            assert abs(p.npv - s.npv) < 1e-12

    def test_duplicate_instrument(self, store):
        """Test the same object cannot be priced twice concurrently."""
        instrument = bond("A")
        with pytest.raises(InvalidValueError):
            price_instruments([instrument, instrument], store)

    def test_first_failure_is_raised(self, store):
        """Test an error in one instrument propagates."""
        with pytest.raises(NotFoundError):
            price_instruments([bond("A"), bond("B", discount_curve_id=9)], store)

    def test_results_to_dataframe(self, store):
        """Test the results table."""
        frame = results_to_dataframe(price_instruments([bond("A"), bond("B")], store))
        assert list(frame["instrument_id"]) == ["A", "B"]
        assert list(frame.columns) == ["instrument_id", "reference_date", "npv", "duration"]
