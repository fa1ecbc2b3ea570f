"""
Unit tests for cashflows module.
"""

from datetime import date, timedelta
import pytest

from cashflowlib.cashflows import (
    CashflowType,
    Disbursement,
    FixedRateCoupon,
    FloatingRateCoupon,
    Redemption,
)
from cashflowlib.conventions import Compounding, DayCount, Frequency, Side
from cashflowlib.currencies import Currency
from cashflowlib.errors import InvalidValueError, MarketRequestError, MarketRequestErrorKind, ValueNotSetError
from cashflowlib.interest_rate import InterestRate, RateDefinition


START = date(2024, 1, 1)
END = date(2024, 7, 1)
SIMPLE_ACT360 = RateDefinition(DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL)


@pytest.fixture
def fixed_coupon():
    """Six month 6% simple coupon on 1,000,000."""
    return FixedRateCoupon(1_000_000.0, InterestRate(0.06, SIMPLE_ACT360), START, END, END, Currency.USD, Side.RECEIVE)


@pytest.fixture
def floating_coupon():
    """Unfixed floating coupon with a 50bp spread."""
    return FloatingRateCoupon(
        notional=1_000_000.0,
        spread=0.005,
        accrual_start=START,
        accrual_end=END,
        payment_date=END,
        fixing_date=START,
        rate_definition=SIMPLE_ACT360,
        currency=Currency.USD,
        side=Side.PAY,
        discount_curve_id=0,
        forecast_curve_id=1,
    )


class TestSimpleCashflows:
    """Tests for disbursements and redemptions."""

    def test_amount_and_sign(self):
        """Test signed amounts follow the side."""
        redemption = Redemption(END, Currency.USD, Side.RECEIVE, amount=100.0)
        disbursement = Disbursement(START, Currency.USD, Side.PAY, amount=100.0)
        assert redemption.signed_amount() == 100.0
        assert disbursement.signed_amount() == -100.0
        assert redemption.cashflow_type == CashflowType.REDEMPTION
        assert not disbursement.cashflow_type.is_coupon

    def test_unset_amount(self):
        """Test reading an unset amount raises."""
        with pytest.raises(ValueNotSetError):
            Redemption(END, Currency.USD, Side.RECEIVE).amount()

    def test_market_request(self):
        """Test the request carries discount and FX parts."""
        cf = Redemption(END, Currency.CLP, Side.RECEIVE, amount=100.0, discount_curve_id=2, id=5)
        request = cf.market_request()
        assert request.id == 5
        assert request.df.provider_id == 2 and request.df.date == END
        assert request.fwd is None
        assert request.fx.first_currency == Currency.CLP

    def test_market_request_without_id(self):
        """Test a request needs a registry id."""
        cf = Redemption(END, Currency.USD, Side.RECEIVE, amount=100.0, discount_curve_id=0)
        with pytest.raises(MarketRequestError) as exc_info:
            cf.market_request()
        assert exc_info.value.kind == MarketRequestErrorKind.NO_REGISTRY_ID

    def test_market_request_without_curve(self):
        """Test a request needs a discount curve id."""
        cf = Redemption(END, Currency.USD, Side.RECEIVE, amount=100.0, id=0)
        with pytest.raises(MarketRequestError) as exc_info:
            cf.market_request()
        assert exc_info.value.kind == MarketRequestErrorKind.NO_DISCOUNT_CURVE_ID


class TestFixedRateCoupon:
    """Tests for fixed rate coupons."""

    def test_amount(self, fixed_coupon):
        """Test the coupon amount (182 days)."""
        assert abs(fixed_coupon.amount() - 1_000_000.0 * 0.06 * 182 / 360) < 1e-6

    def test_set_rate_value(self, fixed_coupon):
        """Test rebinding the rate value recomputes the amount."""
        fixed_coupon.set_rate_value(0.03)
        assert abs(fixed_coupon.amount() - 1_000_000.0 * 0.03 * 182 / 360) < 1e-6
        assert fixed_coupon.rate.compounding == Compounding.SIMPLE

    def test_accrued_amount_window(self, fixed_coupon):
        """Test accrual over a window inside the period."""
        accrued = fixed_coupon.accrued_amount(date(2024, 2, 1), date(2024, 3, 1))
        assert abs(accrued - 1_000_000.0 * 0.06 * 29 / 360) < 1e-6

    def test_accrued_amount_clamped(self, fixed_coupon):
        """Test windows are clamped to the accrual period."""
        full = fixed_coupon.accrued_amount(date(2023, 1, 1), date(2025, 1, 1))
        assert abs(full - fixed_coupon.amount()) < 1e-9

    def test_accrued_amount_disjoint(self, fixed_coupon):
        """Test disjoint and empty windows accrue nothing."""
        assert fixed_coupon.accrued_amount(date(2025, 1, 1), date(2025, 2, 1)) == 0.0
        assert fixed_coupon.accrued_amount(date(2024, 3, 1), date(2024, 3, 1)) == 0.0

    def test_daily_accruals_partition(self):
        """Test daily accruals add up to the amount for compounded rates."""
        rate = InterestRate(0.07, RateDefinition(DayCount.ACTUAL_365_FIXED, Compounding.COMPOUNDED, Frequency.ANNUAL))
        coupon = FixedRateCoupon(250_000.0, rate, START, END, END, Currency.USD, Side.RECEIVE)
        total = 0.0
        d = START
        while d < END:
            total += coupon.accrued_amount(d, d + timedelta(days=1))
            d += timedelta(days=1)
        assert abs(total - coupon.amount()) < 1e-6

    def test_invalid_dates(self):
        """Test accrual end after payment raises."""
        with pytest.raises(InvalidValueError):
            FixedRateCoupon(100.0, InterestRate(0.05), START, END, START, Currency.USD, Side.RECEIVE)

    def test_to_dict(self, fixed_coupon):
        """Test the record view."""
        record = fixed_coupon.to_dict()
        assert record["type"] == "FixedRateCoupon"
        assert record["rate"] == 0.06
        assert record["notional"] == 1_000_000.0


class TestFloatingRateCoupon:
    """Tests for floating rate coupons."""

    def test_unfixed_amount_raises(self, floating_coupon):
        """Test the amount is unknown until fixed."""
        with pytest.raises(ValueNotSetError):
            floating_coupon.amount()
        assert floating_coupon.to_dict()["amount"] is None

    def test_fixed_amount(self, floating_coupon):
        """Test the amount uses fixing plus spread."""
        floating_coupon.set_fixing_rate(0.04)
        assert abs(floating_coupon.amount() - 1_000_000.0 * 0.045 * 182 / 360) < 1e-6
        assert floating_coupon.signed_amount() < 0

    def test_set_spread_after_fixing(self, floating_coupon):
        """Test changing the spread recomputes the amount."""
        floating_coupon.set_fixing_rate(0.04)
        floating_coupon.set_spread(0.0)
        assert abs(floating_coupon.rate.rate - 0.04) < 1e-15

    def test_market_request_has_forward(self, floating_coupon):
        """Test the forward request mirrors the accrual period."""
        floating_coupon.set_id(3)
        request = floating_coupon.market_request()
        assert request.fwd.provider_id == 1
        assert request.fwd.fixing_date == START
        assert (request.fwd.start_date, request.fwd.end_date) == (START, END)
        assert request.fwd.compounding == Compounding.SIMPLE

    def test_market_request_without_forecast_curve(self, floating_coupon):
        """Test a floating request needs a forecast curve id."""
        floating_coupon.set_id(0)
        floating_coupon.forecast_curve_id = None
        with pytest.raises(MarketRequestError) as exc_info:
            floating_coupon.market_request()
        assert exc_info.value.kind == MarketRequestErrorKind.NO_FORECAST_CURVE_ID

    def test_accrued_amount(self, floating_coupon):
        """Test accrual needs a fixing and then follows the rate."""
        with pytest.raises(ValueNotSetError):
            floating_coupon.accrued_amount(START, date(2024, 2, 1))
        floating_coupon.set_fixing_rate(0.04)
        accrued = floating_coupon.accrued_amount(START, date(2024, 2, 1))
        assert abs(accrued - 1_000_000.0 * 0.045 * 31 / 360) < 1e-6
