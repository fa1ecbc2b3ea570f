"""
Unit tests for dates module.
"""

from datetime import date
import pytest

from cashflowlib.conventions import Frequency
from cashflowlib.dates import Period, TimeUnit, add_months, end_of_month, is_end_of_month
from cashflowlib.errors import PeriodError


class TestPeriodParsing:
    """Tests for tenor parsing."""

    def test_parse_months(self):
        """Test parsing month tenors."""
        assert Period.from_string("3M") == Period(3, TimeUnit.MONTHS)
        assert Period.from_string("6m") == Period(6, TimeUnit.MONTHS)

    def test_parse_years(self):
        """Test parsing year tenors."""
        assert Period.from_string("5Y") == Period(5, TimeUnit.YEARS)

    def test_parse_compound(self):
        """Test compound tenors are summed."""
        assert Period.from_string("1Y6M") == Period(18, TimeUnit.MONTHS)

    def test_parse_invalid(self):
        """Test invalid tenors raise."""
        with pytest.raises(PeriodError):
            Period.from_string("invalid")
        with pytest.raises(PeriodError):
            Period.from_string("3X")

    def test_str(self):
        """Test string form."""
        assert str(Period(6, TimeUnit.MONTHS)) == "6M"


class TestPeriodArithmetic:
    """Tests for period algebra."""

    def test_equality_across_units(self):
        """Test 12M equals 1Y and 14D equals 2W."""
        assert Period(12, TimeUnit.MONTHS) == Period(1, TimeUnit.YEARS)
        assert Period(14, TimeUnit.DAYS) == Period(2, TimeUnit.WEEKS)
        assert hash(Period(12, TimeUnit.MONTHS)) == hash(Period(1, TimeUnit.YEARS))

    def test_mixed_addition(self):
        """Test years plus months."""
        assert Period(1, TimeUnit.YEARS) + Period(3, TimeUnit.MONTHS) == Period(15, TimeUnit.MONTHS)

    def test_impossible_addition(self):
        """Test months plus days raises."""
        with pytest.raises(PeriodError):
            Period(1, TimeUnit.MONTHS) + Period(1, TimeUnit.DAYS)

    def test_negation_and_scaling(self):
        """Test unary minus and multiplication."""
        assert -Period(2, TimeUnit.YEARS) == Period(-2, TimeUnit.YEARS)
        assert Period(6, TimeUnit.MONTHS) * 3 == Period(18, TimeUnit.MONTHS)

    def test_ordering(self):
        """Test periods compare by length."""
        assert Period(6, TimeUnit.MONTHS) < Period(1, TimeUnit.YEARS)
        assert Period(2, TimeUnit.YEARS) > Period(18, TimeUnit.MONTHS)

    def test_normalized(self):
        """Test normalization to the largest exact unit."""
        n = Period(24, TimeUnit.MONTHS).normalized()
        assert n.units == TimeUnit.YEARS and n.length == 2


class TestPeriodFrequency:
    """Tests for conversions between periods and frequencies."""

    def test_from_frequency(self):
        """Test frequency to period."""
        assert Period.from_frequency(Frequency.SEMIANNUAL) == Period(6, TimeUnit.MONTHS)
        assert Period.from_frequency(Frequency.ANNUAL) == Period(1, TimeUnit.YEARS)
        assert Period.from_frequency(Frequency.WEEKLY) == Period(1, TimeUnit.WEEKS)

    def test_to_frequency(self):
        """Test period to frequency."""
        assert Period(3, TimeUnit.MONTHS).frequency() == Frequency.QUARTERLY
        assert Period(1, TimeUnit.YEARS).frequency() == Frequency.ANNUAL
        assert Period(5, TimeUnit.MONTHS).frequency() == Frequency.OTHER_FREQUENCY

    def test_other_frequency_raises(self):
        """Test OTHER_FREQUENCY has no period."""
        with pytest.raises(PeriodError):
            Period.from_frequency(Frequency.OTHER_FREQUENCY)


class TestDateArithmetic:
    """Tests for date + period."""

    def test_add_months(self):
        """Test adding months."""
        assert date(2024, 1, 15) + Period(3, TimeUnit.MONTHS) == date(2024, 4, 15)

    def test_add_years(self):
        """Test adding years."""
        assert date(2024, 1, 15) + Period(5, TimeUnit.YEARS) == date(2029, 1, 15)

    def test_month_end_clipping(self):
        """Test Jan 31 + 1M clips to the end of February."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_subtract_period(self):
        """Test date - period."""
        assert date(2024, 3, 15) - Period(2, TimeUnit.WEEKS) == date(2024, 3, 1)

    def test_end_of_month(self):
        """Test end of month helpers."""
        assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
        assert is_end_of_month(date(2024, 4, 30))
        assert not is_end_of_month(date(2024, 4, 29))
