"""
Unit tests for visitors module.
"""

from datetime import date
import pytest

from cashflowlib.conventions import Compounding, DayCount, Frequency, Side
from cashflowlib.currencies import Currency
from cashflowlib.curves import FlatForwardTermStructure
from cashflowlib.dates import Period, TimeUnit
from cashflowlib.errors import InvalidValueError, MarketRequestError, MarketRequestErrorKind, ValueNotSetError
from cashflowlib.indices import IborIndex
from cashflowlib.instruments import MakeFixedRateInstrument, MakeFloatingRateInstrument
from cashflowlib.interest_rate import InterestRate, RateDefinition
from cashflowlib.market_data import MarketData
from cashflowlib.market_store import MarketStore
from cashflowlib.models import SimpleModel
from cashflowlib.pricing import bind_market_data
from cashflowlib.visitors import (
    AccruedAmountConstVisitor,
    CashflowsAggregatorConstVisitor,
    DurationConstVisitor,
    FixingVisitor,
    IndexingVisitor,
    NPVByDateConstVisitor,
    NPVByTenorConstVisitor,
    NPVConstVisitor,
    ZSpreadConstVisitor,
)


REFERENCE_DATE = date(2024, 1, 1)
RD = RateDefinition(DayCount.THIRTY_360, Compounding.COMPOUNDED, Frequency.ANNUAL)


def flat_index(name, rate):
    """Term index on a flat annually compounded 30/360 curve."""
    curve = FlatForwardTermStructure(REFERENCE_DATE, InterestRate(rate, RD))
    return IborIndex(name, Period(1, TimeUnit.YEARS), RD, curve)


@pytest.fixture
def store():
    """USD store: discount curve 0 at 5%, forecast curve 1 at 4%, CLP/USD = 800."""
    market_store = MarketStore(REFERENCE_DATE, Currency.USD)
    market_store.add_index(0, flat_index("USD-DISC", 0.05))
    market_store.add_index(1, flat_index("USD-FWD", 0.04))
    market_store.add_exchange_rate(Currency.CLP, Currency.USD, 800.0)
    return market_store


def fixed_bond(notional=100.0, currency=Currency.USD, discount_curve_id=0):
    """Two year annual 5% bullet starting on the reference date."""
    return (MakeFixedRateInstrument()
            .with_start_date(REFERENCE_DATE)
            .with_end_date(date(2026, 1, 1))
            .with_payment_frequency(Frequency.ANNUAL)
            .with_rate(InterestRate(0.05, RD))
            .with_notional(notional)
            .with_side(Side.RECEIVE)
            .with_currency(currency)
            .with_discount_curve_id(discount_curve_id)
            .bullet()
            .build())


def floating_note(forecast_curve_id=1):
    """Two year annual floating bullet without spread."""
    return (MakeFloatingRateInstrument()
            .with_start_date(REFERENCE_DATE)
            .with_end_date(date(2026, 1, 1))
            .with_payment_frequency(Frequency.ANNUAL)
            .with_spread(0.0)
            .with_rate_definition(RD)
            .with_notional(100.0)
            .with_side(Side.RECEIVE)
            .with_currency(Currency.USD)
            .with_discount_curve_id(0)
            .with_forecast_curve_id(forecast_curve_id)
            .bullet()
            .build())


@pytest.fixture
def bound_bond(store):
    """Fixed bond with its market data."""
    bond = fixed_bond()
    data = bind_market_data(bond, SimpleModel(store))
    return bond, data


class TestMarketData:
    """Tests for resolved market data records."""

    def test_missing_values(self):
        """Test each unrequested value raises with its own kind."""
        data = MarketData(id=3, reference_date=REFERENCE_DATE)
        expected = {
            data.discount_factor: MarketRequestErrorKind.NO_DISCOUNT_REQUEST,
            data.forward_rate: MarketRequestErrorKind.NO_FORWARD_RATE_REQUEST,
            data.exchange_rate: MarketRequestErrorKind.NO_FX_REQUEST,
        }
        for accessor, kind in expected.items():
            with pytest.raises(MarketRequestError) as exc_info:
                accessor()
            assert exc_info.value.kind == kind

    def test_requested_values(self):
        """Test requested values are returned as stored."""
        data = MarketData(id=0, reference_date=REFERENCE_DATE, df=0.9, fwd=0.03, fx=800.0)
        assert (data.discount_factor(), data.forward_rate(), data.exchange_rate()) == (0.9, 0.03, 800.0)

    def test_npv_without_discount_factor(self):
        """Test the NPV of a cashflow with no discount factor raises."""
        bond = fixed_bond()
        IndexingVisitor().visit(bond)
        data = [MarketData(id=cf.id, reference_date=REFERENCE_DATE, fx=1.0) for cf in bond.cashflows]
        with pytest.raises(MarketRequestError) as exc_info:
            NPVConstVisitor(data).visit(bond)
        assert exc_info.value.kind == MarketRequestErrorKind.NO_DISCOUNT_REQUEST


class TestIndexingVisitor:
    """Tests for id assignment and request collection."""

    def test_dense_ids_across_instruments(self):
        """Test ids continue from one instrument to the next."""
        first, second = fixed_bond(), fixed_bond()
        indexer = IndexingVisitor()
        indexer.visit(first)
        indexer.visit(second)
        assert [cf.id for cf in first.cashflows] == [0, 1, 2, 3]
        assert [cf.id for cf in second.cashflows] == [4, 5, 6, 7]
        assert [r.id for r in indexer.requests] == list(range(8))

    def test_missing_discount_curve(self):
        """Test cashflows without a discount curve cannot be indexed."""
        bond = fixed_bond(discount_curve_id=None)
        with pytest.raises(MarketRequestError):
            IndexingVisitor().visit(bond)

    def test_market_data_is_aligned(self, bound_bond):
        """Test data[i] belongs to the cashflow with id i."""
        bond, data = bound_bond
        for cf in bond.cashflows:
            assert data[cf.id].id == cf.id


class TestFixingVisitor:
    """Tests for binding forward rates."""

    def test_fixes_floating_coupons(self, store):
        """Test coupons are fixed at the forecast curve rate."""
        note = floating_note()
        data = bind_market_data(note, SimpleModel(store))
        for coupon in note.coupons():
            assert abs(coupon.fixing_rate - 0.04) < 1e-12
        assert abs(note.coupons()[0].amount() - 4.0) < 1e-9
        assert len(data) == len(note.cashflows)

    def test_needs_forward(self, store):
        """Test market data without a forward rate cannot fix a coupon."""
        note = floating_note()
        indexer = IndexingVisitor()
        indexer.visit(note)
        data = SimpleModel(store).gen_market_data(indexer.requests)
        fixed_data = bind_market_data(fixed_bond(), SimpleModel(store))
        with pytest.raises(MarketRequestError) as exc_info:
            FixingVisitor(fixed_data).visit(note.coupons()[:1])
        assert exc_info.value.kind == MarketRequestErrorKind.NO_FORWARD_RATE_REQUEST
        FixingVisitor(data).visit(note)
        assert note.coupons()[0].fixing_rate is not None


class TestNPV:
    """Tests for the present value visitors."""

    def test_par_bond(self, bound_bond):
        """Test a bond paying the curve rate is worth its notional."""
        bond, data = bound_bond
        assert abs(NPVConstVisitor(data).visit(bond) - 100.0) < 1e-9
        assert abs(NPVConstVisitor(data, include_today_cashflows=True).visit(bond)) < 1e-9

    def test_foreign_currency(self, store):
        """Test amounts are converted to the local currency."""
        bond = fixed_bond(notional=80_000.0, currency=Currency.CLP)
        data = bind_market_data(bond, SimpleModel(store))
        assert abs(NPVConstVisitor(data).visit(bond) - 100.0) < 1e-9

    def test_par_floater(self, store):
        """Test a floater on the discount curve is worth par."""
        note = floating_note(forecast_curve_id=0)
        data = bind_market_data(note, SimpleModel(store))
        assert abs(NPVConstVisitor(data, include_today_cashflows=True).visit(note)) < 1e-9

    def test_npv_by_date(self, bound_bond):
        """Test values by date add up to the NPV."""
        bond, data = bound_bond
        by_date = NPVByDateConstVisitor(data).visit(bond)
        assert list(by_date) == [date(2025, 1, 1), date(2026, 1, 1)]
        assert abs(by_date[date(2025, 1, 1)] - 5.0 / 1.05) < 1e-9
        assert abs(sum(by_date.values()) - 100.0) < 1e-9

    def test_npv_by_tenor(self, bound_bond):
        """Test each cashflow falls in the first matching bucket."""
        bond, data = bound_bond
        short = (Period(0, TimeUnit.MONTHS), Period(1, TimeUnit.YEARS))
        long = (Period(1, TimeUnit.YEARS), Period(3, TimeUnit.YEARS))
        by_tenor = NPVByTenorConstVisitor(data, [short, long]).visit(bond)
        assert by_tenor[short] == 0.0
        assert abs(by_tenor[long] - 100.0) < 1e-9

    def test_npv_by_tenor_empty_bucket(self, bound_bond):
        """Test a bucket must have from < to."""
        _, data = bound_bond
        with pytest.raises(InvalidValueError):
            NPVByTenorConstVisitor(data, [(Period(1, TimeUnit.YEARS), Period(12, TimeUnit.MONTHS))])


class TestDuration:
    """Tests for the duration visitor."""

    def test_bullet_duration(self, bound_bond):
        """Test the PV weighted time of the future cashflows."""
        bond, data = bound_bond
        t1, t2 = 366 / 365, 731 / 365
        pv1, pv2 = 5.0 / 1.05, 105.0 / 1.05 ** 2
        expected = (t1 * pv1 + t2 * pv2) / (pv1 + pv2)
        assert abs(DurationConstVisitor(data).visit(bond) - expected) < 1e-9


class TestCashflowsAggregator:
    """Tests for the cashflow aggregator."""

    def test_nominal_totals(self):
        """Test signed amounts are summed by date across instruments."""
        aggregator = CashflowsAggregatorConstVisitor()
        aggregator.visit(fixed_bond())
        aggregator.visit(fixed_bond(notional=50.0))
        assert aggregator.disbursements() == {REFERENCE_DATE: -150.0}
        assert abs(aggregator.interest()[date(2025, 1, 1)] - 7.5) < 1e-9
        assert aggregator.redemptions() == {date(2026, 1, 1): 150.0}

    def test_present_values(self, bound_bond):
        """Test with market data only unpaid cashflows are valued."""
        bond, data = bound_bond
        aggregator = CashflowsAggregatorConstVisitor(data)
        aggregator.visit(bond)
        assert aggregator.disbursements() == {}
        assert abs(aggregator.redemptions()[date(2026, 1, 1)] - 100.0 / 1.05 ** 2) < 1e-9

    def test_present_values_include_today(self, bound_bond):
        """Test today's disbursement is valued at par when included."""
        bond, data = bound_bond
        aggregator = CashflowsAggregatorConstVisitor(data, include_today_cashflows=True)
        aggregator.visit(bond)
        assert aggregator.disbursements() == {REFERENCE_DATE: -100.0}
        total = sum(aggregator.interest().values()) + sum(aggregator.redemptions().values())
        assert abs(total - 100.0) < 1e-9

    def test_currency_validation(self):
        """Test a currency mismatch raises and leaves totals untouched."""
        aggregator = CashflowsAggregatorConstVisitor(validation_currency=Currency.USD)
        with pytest.raises(InvalidValueError):
            aggregator.visit(fixed_bond(currency=Currency.CLP))
        assert aggregator.interest() == {}

    def test_to_dataframe(self):
        """Test the table has one row per date."""
        aggregator = CashflowsAggregatorConstVisitor()
        aggregator.visit(fixed_bond())
        frame = aggregator.to_dataframe()
        assert len(frame) == 3
        assert list(frame.columns) == ["interest", "redemptions", "disbursements"]


class TestAccruedAmount:
    """Tests for daily accrued interest."""

    def test_year_of_accruals(self):
        """Test daily accruals over the first coupon add up to it."""
        visitor = AccruedAmountConstVisitor(REFERENCE_DATE, Period(1, TimeUnit.YEARS))
        visitor.visit(fixed_bond())
        accrued = visitor.accrued_amounts()
        assert len(accrued) == 366
        assert abs(sum(accrued.values()) - 5.0) < 1e-9

    def test_unfixed_floating_raises(self):
        """Test floating coupons must be fixed before accruing."""
        visitor = AccruedAmountConstVisitor(REFERENCE_DATE, Period(1, TimeUnit.MONTHS))
        with pytest.raises(ValueNotSetError):
            visitor.visit(floating_note())


class TestZSpread:
    """Tests for the z-spread solver."""

    def test_zero_spread_at_model_price(self, bound_bond):
        """Test the spread is zero when the target is the curve value."""
        bond, data = bound_bond
        z = ZSpreadConstVisitor(data, RD, 100.0).visit(bond)
        assert abs(z) < 1e-5

    def test_spread_for_lower_price(self, bound_bond):
        """Test a one percent higher yield is recovered."""
        bond, data = bound_bond
        target = 5.0 / 1.06 + 105.0 / 1.06 ** 2
        z = ZSpreadConstVisitor(data, RD, target).visit(bond)
        assert abs(z - 0.01) < 1e-5
