"""
End-to-end scenarios across builders, market binding and analytics.
"""

from collections import defaultdict
from datetime import date
import pytest

from cashflowlib.cashflows import Disbursement, Redemption
from cashflowlib.conventions import Compounding, DayCount, Frequency, Side
from cashflowlib.currencies import Currency
from cashflowlib.curves import FlatForwardTermStructure, RolledTermStructure, ZeroRateTermStructure
from cashflowlib.dates import Period, TimeUnit
from cashflowlib.exchange_rates import ExchangeRateStore
from cashflowlib.indices import IborIndex
from cashflowlib.instruments import MakeFixedRateInstrument, MakeFixFloatSwap, MakeFloatingRateInstrument
from cashflowlib.interest_rate import InterestRate, RateDefinition
from cashflowlib.market_store import MarketStore
from cashflowlib.models import SimpleModel
from cashflowlib.pricing import bind_market_data
from cashflowlib.visitors import IndexingVisitor, NPVConstVisitor


START = date(2020, 1, 1)
ACT360_COMPOUNDED = RateDefinition(DayCount.ACTUAL_360, Compounding.COMPOUNDED, Frequency.ANNUAL)
ACT360_SIMPLE = RateDefinition(DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL)


@pytest.fixture
def store():
    """USD store at START with a flat 5% Actual/360 compounded discount curve."""
    market_store = MarketStore(START, Currency.USD)
    curve = FlatForwardTermStructure(START, InterestRate(0.05, ACT360_COMPOUNDED))
    market_store.add_index(0, IborIndex("USD-DISC", Period(6, TimeUnit.MONTHS), ACT360_COMPOUNDED, curve))
    return market_store


def fixed_builder(end, frequency, notional=100.0):
    return (MakeFixedRateInstrument()
            .with_start_date(START)
            .with_end_date(end)
            .with_payment_frequency(frequency)
            .with_rate(InterestRate(0.05, ACT360_COMPOUNDED))
            .with_notional(notional)
            .with_side(Side.RECEIVE)
            .with_currency(Currency.USD)
            .with_discount_curve_id(0))


class TestScenarios:
    """Seed scenarios."""

    def test_bullet_npv(self, store):
        """Test a five year semiannual bullet on a matching flat curve prices at par."""
        bond = fixed_builder(date(2025, 1, 1), Frequency.SEMIANNUAL).bullet().build()
        data = bind_market_data(bond, SimpleModel(store))
        assert abs(NPVConstVisitor(data, include_today_cashflows=True).visit(bond)) < 1e-8
        assert abs(NPVConstVisitor(data).visit(bond) - 100.0) < 1e-8

    def test_equal_payments_totals(self):
        """Test a monthly annuity pays the same total every month."""
        loan = fixed_builder(date(2021, 1, 1), Frequency.MONTHLY, notional=1000.0).equal_payments().build()
        totals = defaultdict(float)
        for cf in loan.coupons() + loan.redemptions():
            totals[cf.payment_date] += cf.amount()
        assert len(totals) == 12
        assert max(totals.values()) - min(totals.values()) < 1e-6

    def test_equal_redemptions_exact(self):
        """Test ten redemptions of exactly 10 and the stepped outstanding."""
        loan = fixed_builder(date(2025, 1, 1), Frequency.SEMIANNUAL).equal_redemptions().build()
        assert [r.amount() for r in loan.redemptions()] == [10.0] * 10
        assert [c.notional for c in loan.coupons()] == [100.0 - i * 10.0 for i in range(10)]

    def test_fx_triangulation(self):
        """Test CLP/EUR through USD."""
        fx = ExchangeRateStore(START)
        fx.add_exchange_rate(Currency.CLP, Currency.USD, 800.0)
        fx.add_exchange_rate(Currency.USD, Currency.EUR, 1.1)
        assert abs(fx.get_exchange_rate(Currency.CLP, Currency.EUR) - 880.0) < 1e-9
        assert abs(fx.get_exchange_rate(Currency.EUR, Currency.CLP) - 1 / 880.0) < 1e-15

    def test_floating_coupon_fixing(self):
        """Test coupons fixed at zero pay the spread only."""
        note = (MakeFloatingRateInstrument()
                .with_start_date(START)
                .with_end_date(date(2025, 1, 1))
                .with_payment_frequency(Frequency.SEMIANNUAL)
                .with_spread(0.04)
                .with_rate_definition(ACT360_SIMPLE)
                .with_notional(5_000_000.0)
                .with_side(Side.RECEIVE)
                .with_currency(Currency.USD)
                .bullet()
                .build())
        total = 0.0
        for coupon in note.coupons():
            coupon.set_fixing_rate(0.0)
            days = (coupon.accrual_end - coupon.accrual_start).days
            assert abs(coupon.amount() - 5_000_000.0 * 0.04 * days / 360) < 1e-6
            total += coupon.amount()
        assert abs(total - 1_000_000.0) < 0.02 * 1_000_000.0


class TestProperties:
    """Laws that hold for any input."""

    def test_discount_factor_consistency(self):
        """Test df * compound factor is one."""
        rate = InterestRate(0.037, ACT360_COMPOUNDED)
        d1, d2 = date(2021, 3, 17), date(2029, 11, 2)
        assert abs(rate.discount_factor(d1, d2) * rate.compound_factor(d1, d2) - 1.0) < 1e-15

    def test_indexing_positions(self):
        """Test ids of a swap are a contiguous prefix matching the requests."""
        swap = (MakeFixFloatSwap()
                .with_start_date(START)
                .with_tenor(Period(2, TimeUnit.YEARS))
                .with_notional(100.0)
                .with_currency(Currency.USD)
                .with_side(Side.PAY)
                .with_fixed_rate(InterestRate(0.03, ACT360_SIMPLE))
                .with_fixed_leg_frequency(Frequency.ANNUAL)
                .with_spread(0.0)
                .with_rate_definition(ACT360_SIMPLE)
                .with_floating_leg_frequency(Frequency.SEMIANNUAL)
                .with_discount_curve_id(0)
                .with_forecast_curve_id(0)
                .build())
        indexer = IndexingVisitor()
        indexer.visit(swap)
        ids = sorted(cf.id for cf in swap.cashflows)
        assert ids == list(range(len(indexer.requests)))
        assert all(indexer.requests[cf.id].id == cf.id for cf in swap.cashflows)

    def test_opposite_principal_nets_to_zero(self, store):
        """Test a disbursement and a redemption on the same date cancel."""
        d = date(2022, 6, 30)
        cashflows = [
            Disbursement(d, Currency.USD, Side.PAY, 250.0, discount_curve_id=0),
            Redemption(d, Currency.USD, Side.RECEIVE, 250.0, discount_curve_id=0),
        ]
        data = bind_market_data(cashflows, SimpleModel(store))
        assert NPVConstVisitor(data).visit(cashflows) == 0.0

    def test_advance_idempotence(self, store):
        """Test advancing 3M then 6M equals advancing 9M."""
        two_steps = store.advance_to_period(Period(3, TimeUnit.MONTHS)).advance_to_period(Period(6, TimeUnit.MONTHS))
        one_step = store.advance_to_period(Period(9, TimeUnit.MONTHS))
        assert two_steps.reference_date == one_step.reference_date
        for d in (date(2021, 1, 1), date(2024, 5, 17), date(2030, 1, 1)):
            a = two_steps.get_index(0).discount_factor(d)
            b = one_step.get_index(0).discount_factor(d)
            assert abs(a - b) < 1e-12

    def test_advance_idempotence_other_curves(self):
        """Test two-step and one-step advances agree on zero rate, simple and rolled curves."""
        market_store = MarketStore(START, Currency.USD)
        zero = ZeroRateTermStructure(START, [START, date(2025, 1, 1), date(2030, 1, 1)], [0.02, 0.035, 0.04],
                                     rate_definition=ACT360_COMPOUNDED)
        simple = FlatForwardTermStructure(START, InterestRate(0.03, ACT360_SIMPLE))
        rolled = RolledTermStructure(FlatForwardTermStructure(date(2019, 7, 1), InterestRate(0.04, ACT360_SIMPLE)), START)
        for id, curve in enumerate((zero, simple, rolled)):
            market_store.add_index(id, IborIndex(f"CURVE-{id}", Period(6, TimeUnit.MONTHS), ACT360_SIMPLE, curve))

        two_steps = market_store.advance_to_period(Period(3, TimeUnit.MONTHS)).advance_to_period(Period(6, TimeUnit.MONTHS))
        one_step = market_store.advance_to_period(Period(9, TimeUnit.MONTHS))
        for id in range(3):
            for d in (date(2021, 1, 1), date(2024, 5, 17), date(2032, 1, 1)):
                a = two_steps.get_index(id).discount_factor(d)
                b = one_step.get_index(id).discount_factor(d)
                assert abs(a - b) < 1e-12

    def test_triangulation_is_multiplicative(self):
        """Test rates compose along any path."""
        fx = ExchangeRateStore(START)
        fx.add_exchange_rate(Currency.CLP, Currency.USD, 800.0)
        fx.add_exchange_rate(Currency.USD, Currency.EUR, 1.1)
        fx.add_exchange_rate(Currency.GBP, Currency.EUR, 0.85)
        for a, b, c in ((Currency.CLP, Currency.USD, Currency.GBP), (Currency.GBP, Currency.CLP, Currency.EUR)):
            composed = fx.get_exchange_rate(a, b) * fx.get_exchange_rate(b, c)
            assert abs(composed / fx.get_exchange_rate(a, c) - 1.0) < 1e-12

    def test_simple_accrual_partition(self):
        """Test monthly accruals of a simple coupon add up to its amount."""
        loan = (MakeFixedRateInstrument()
                .with_start_date(START)
                .with_end_date(date(2021, 1, 1))
                .with_payment_frequency(Frequency.ANNUAL)
                .with_rate(InterestRate(0.06, ACT360_SIMPLE))
                .with_notional(1000.0)
                .with_side(Side.RECEIVE)
                .with_currency(Currency.USD)
                .bullet()
                .build())
        coupon = loan.coupons()[0]
        bounds = [date(2020, m, 1) for m in range(1, 13)] + [date(2021, 1, 1)]
        total = sum(coupon.accrued_amount(a, b) for a, b in zip(bounds[:-1], bounds[1:]))
        assert abs(total - coupon.amount()) < 1e-9
        assert abs(coupon.accrued_amount(coupon.accrual_start, coupon.accrual_end) - coupon.amount()) < 1e-12
