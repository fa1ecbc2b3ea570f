"""
Unit tests for interest_rate module.
"""

from datetime import date
import math
import pytest

from cashflowlib.conventions import Compounding, DayCount, Frequency
from cashflowlib.errors import InterestRateError, InterestRateErrorKind, InvalidValueError
from cashflowlib.interest_rate import InterestRate, RateDefinition


@pytest.fixture
def compounded_rate():
    """5% annually compounded Actual/360 rate."""
    return InterestRate.from_conventions(0.05, Compounding.COMPOUNDED, Frequency.ANNUAL, DayCount.ACTUAL_360)


class TestCompoundFactor:
    """Tests for compound and discount factors."""

    def test_simple(self):
        """Test simple compounding is linear in time."""
        rate = InterestRate(0.04, RateDefinition(DayCount.ACTUAL_360, Compounding.SIMPLE))
        assert abs(rate.compound_factor_from_yf(0.5) - 1.02) < 1e-12

    def test_compounded(self, compounded_rate):
        """Test annual compounding over two years."""
        assert abs(compounded_rate.compound_factor_from_yf(2.0) - 1.05 ** 2) < 1e-12

    def test_frequency_without_periods(self):
        """Test compounding needs a frequency with periods per year."""
        for frequency in (Frequency.ONCE, Frequency.OTHER_FREQUENCY):
            rate = InterestRate(0.05, RateDefinition(DayCount.ACTUAL_360, Compounding.COMPOUNDED, frequency))
            with pytest.raises(InvalidValueError, match="cannot be used for compounding"):
                rate.compound_factor_from_yf(1.0)

    def test_continuous(self):
        """Test continuous compounding."""
        rate = InterestRate(0.03, RateDefinition.continuous())
        assert abs(rate.compound_factor_from_yf(1.5) - math.exp(0.045)) < 1e-12

    def test_simple_then_compounded(self):
        """Test the regime switch at one period."""
        rd = RateDefinition(DayCount.ACTUAL_360, Compounding.SIMPLE_THEN_COMPOUNDED, Frequency.SEMIANNUAL)
        rate = InterestRate(0.06, rd)
        assert abs(rate.compound_factor_from_yf(0.25) - (1 + 0.06 * 0.25)) < 1e-12
        assert abs(rate.compound_factor_from_yf(2.0) - 1.03 ** 4) < 1e-12

    def test_compounded_then_simple(self):
        """Test the opposite regime switch."""
        rd = RateDefinition(DayCount.ACTUAL_360, Compounding.COMPOUNDED_THEN_SIMPLE, Frequency.SEMIANNUAL)
        rate = InterestRate(0.06, rd)
        assert abs(rate.compound_factor_from_yf(0.25) - 1.03 ** 0.5) < 1e-12
        assert abs(rate.compound_factor_from_yf(2.0) - 1.12) < 1e-12

    def test_unit_at_zero_time(self, compounded_rate):
        """Test the compound factor is 1 at t = 0."""
        assert compounded_rate.compound_factor_from_yf(0.0) == 1.0

    def test_from_dates(self):
        """Test date-based compound factor uses the day count."""
        rate = InterestRate(0.05, RateDefinition(DayCount.ACTUAL_360, Compounding.SIMPLE))
        cf = rate.compound_factor(date(2024, 1, 1), date(2024, 7, 1))  # 182 days
        assert abs(cf - (1 + 0.05 * 182 / 360)) < 1e-12

    def test_discount_is_inverse(self, compounded_rate):
        """Test discount factor times compound factor is one."""
        d1, d2 = date(2024, 1, 1), date(2027, 3, 15)
        product = compounded_rate.discount_factor(d1, d2) * compounded_rate.compound_factor(d1, d2)
        assert abs(product - 1.0) < 1e-12


class TestImpliedRate:
    """Tests for implied rates."""

    @pytest.mark.parametrize("compounding", [
        Compounding.SIMPLE,
        Compounding.COMPOUNDED,
        Compounding.CONTINUOUS,
        Compounding.SIMPLE_THEN_COMPOUNDED,
        Compounding.COMPOUNDED_THEN_SIMPLE,
    ])
    def test_inverts_compound_factor(self, compounding):
        """Test implied_rate recovers the rate behind a compound factor."""
        t = 1.7
        rate = InterestRate(0.045, RateDefinition(DayCount.ACTUAL_360, compounding, Frequency.SEMIANNUAL))
        implied = InterestRate.implied_rate(
            rate.compound_factor_from_yf(t), DayCount.ACTUAL_360, compounding, Frequency.SEMIANNUAL, t
        )
        assert abs(implied.rate - 0.045) < 1e-10

    def test_unit_compound_gives_zero(self):
        """Test a unit compound factor implies a zero rate even at t = 0."""
        implied = InterestRate.implied_rate(1.0, DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL, 0.0)
        assert implied.rate == 0.0

    def test_non_positive_compound(self):
        """Test a non-positive compound factor raises."""
        with pytest.raises(InterestRateError) as exc_info:
            InterestRate.implied_rate(0.0, DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL, 1.0)
        assert exc_info.value.kind == InterestRateErrorKind.POSITIVE_COMPOUND_FACTOR

    def test_non_positive_time(self):
        """Test a non-unit compound factor at t = 0 raises."""
        with pytest.raises(InterestRateError) as exc_info:
            InterestRate.implied_rate(1.01, DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL, 0.0)
        assert exc_info.value.kind == InterestRateErrorKind.POSITIVE_TIME

    def test_negative_time_with_unit_compound(self):
        """Test a unit compound factor at negative time raises."""
        with pytest.raises(InterestRateError):
            InterestRate.implied_rate(1.0, DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL, -1.0)

    def test_implied_rate_between(self):
        """Test the date-based variant."""
        rd = RateDefinition(DayCount.ACTUAL_365_FIXED, Compounding.SIMPLE)
        implied = InterestRate.implied_rate_between(1.05, rd, date(2024, 1, 1), date(2024, 12, 31))
        assert abs(implied.rate - 0.05) < 1e-12


class TestRateDefinition:
    """Tests for rate definitions and equivalence."""

    def test_defaults(self):
        """Test the default definition is simple Actual/360 annual."""
        rd = RateDefinition()
        assert rd.day_count == DayCount.ACTUAL_360
        assert rd.compounding == Compounding.SIMPLE
        assert rd.frequency == Frequency.ANNUAL

    def test_equivalent_rate(self, compounded_rate):
        """Test equivalent rates produce the same growth."""
        d1, d2 = date(2024, 1, 1), date(2026, 1, 1)
        continuous = compounded_rate.equivalent_rate(RateDefinition.continuous(DayCount.ACTUAL_360), d1, d2)
        assert abs(continuous.compound_factor(d1, d2) - compounded_rate.compound_factor(d1, d2)) < 1e-12
        assert abs(continuous.rate - math.log(1.05)) < 1e-10

    def test_equality(self):
        """Test rates compare by value and definition."""
        assert InterestRate(0.05) == InterestRate(0.05)
        assert InterestRate(0.05) != InterestRate(0.05, RateDefinition.continuous())

    def test_presets(self):
        """Test the money market and bond basis presets."""
        assert RateDefinition.money_market() == RateDefinition()
        bond = RateDefinition.bond_basis()
        assert (bond.day_count, bond.compounding, bond.frequency) == (
            DayCount.THIRTY_360, Compounding.COMPOUNDED, Frequency.SEMIANNUAL
        )
