"""
Date utilities for cashflow calculations.

Provides:
- TimeUnit and Period (tenor) with parsing and arithmetic
- Civil date helpers: leap years, month lengths, end of month
- add_period: date + period with month-end clipping

Dates are plain datetime.date objects; `date + Period` and
`date - Period` work through Period.__radd__ / __rsub__.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Tuple
import re

from .conventions import Frequency
from .errors import PeriodError


class TimeUnit(Enum):
    """Unit of a period length."""
    DAYS = "D"
    WEEKS = "W"
    MONTHS = "M"
    YEARS = "Y"


_UNIT_ORDER = {TimeUnit.DAYS: 0, TimeUnit.WEEKS: 1, TimeUnit.MONTHS: 2, TimeUnit.YEARS: 3}


class Period:
    """
    A length of time expressed as (length, unit).

    Addition between mixed units is only defined where the conversion is
    exact (years and months, weeks and days) or when one side is empty.

    Attributes:
        length: Signed number of units
        units: TimeUnit
    """

    # Tenor regex pattern: number + unit (D/W/M/Y), repeated for "1Y6M"
    TENOR_PATTERN = re.compile(r'(\d+)([DWMY])', re.IGNORECASE)
    FULL_PATTERN = re.compile(r'^-?(\d+[DWMY])+$', re.IGNORECASE)

    __slots__ = ("length", "units")

    def __init__(self, length: int, units: TimeUnit):
        self.length = int(length)
        self.units = units

    @classmethod
    def empty(cls) -> "Period":
        return cls(0, TimeUnit.DAYS)

    @classmethod
    def from_string(cls, tenor: str) -> "Period":
        """
        Parse a tenor string into a Period.

        Args:
            tenor: Tenor string like "1D", "3M", "2Y" or "1Y6M"

        Returns:
            Period (compound tenors are summed)

        Raises:
            PeriodError: If tenor format is invalid
        """
        text = tenor.strip().upper()
        if not cls.FULL_PATTERN.match(text):
            raise PeriodError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y', '1Y6M'")

        negative = text.startswith("-")
        result = cls.empty()
        for amount, unit in cls.TENOR_PATTERN.findall(text):
            result = result + cls(int(amount), TimeUnit(unit))
        return -result if negative else result

    @classmethod
    def from_frequency(cls, frequency: Frequency) -> "Period":
        """
        Period between two payments at the given frequency.

        Raises:
            PeriodError: For OTHER_FREQUENCY
        """
        if frequency == Frequency.NO_FREQUENCY:
            return cls(0, TimeUnit.DAYS)
        if frequency == Frequency.ONCE:
            return cls(0, TimeUnit.YEARS)
        if frequency == Frequency.ANNUAL:
            return cls(1, TimeUnit.YEARS)
        if frequency in (Frequency.SEMIANNUAL, Frequency.EVERY_FOURTH_MONTH,
                         Frequency.QUARTERLY, Frequency.BIMONTHLY, Frequency.MONTHLY):
            return cls(12 // frequency.value, TimeUnit.MONTHS)
        if frequency in (Frequency.EVERY_FOURTH_WEEK, Frequency.BIWEEKLY, Frequency.WEEKLY):
            return cls(52 // frequency.value, TimeUnit.WEEKS)
        if frequency == Frequency.DAILY:
            return cls(1, TimeUnit.DAYS)
        raise PeriodError(f"Cannot convert {frequency.name} to a period")

    def frequency(self) -> Frequency:
        """Frequency matching this period, OTHER_FREQUENCY if none does."""
        length = abs(self.length)
        if length == 0:
            return Frequency.ONCE if self.units == TimeUnit.YEARS else Frequency.NO_FREQUENCY

        if self.units == TimeUnit.YEARS:
            return Frequency.ANNUAL if length == 1 else Frequency.OTHER_FREQUENCY
        if self.units == TimeUnit.MONTHS:
            if length <= 12 and 12 % length == 0:
                return Frequency(12 // length)
            return Frequency.OTHER_FREQUENCY
        if self.units == TimeUnit.WEEKS:
            return {1: Frequency.WEEKLY, 2: Frequency.BIWEEKLY,
                    4: Frequency.EVERY_FOURTH_WEEK}.get(length, Frequency.OTHER_FREQUENCY)
        return Frequency.DAILY if length == 1 else Frequency.OTHER_FREQUENCY

    def normalized(self) -> "Period":
        """Equivalent period in the largest exact unit (12M -> 1Y, 14D -> 2W)."""
        if self.length == 0:
            return Period(0, TimeUnit.DAYS)
        if self.units == TimeUnit.MONTHS and self.length % 12 == 0:
            return Period(self.length // 12, TimeUnit.YEARS)
        if self.units == TimeUnit.DAYS and self.length % 7 == 0:
            return Period(self.length // 7, TimeUnit.WEEKS)
        return Period(self.length, self.units)

    def years(self) -> float:
        """Approximate length in years."""
        if self.units == TimeUnit.YEARS:
            return float(self.length)
        if self.units == TimeUnit.MONTHS:
            return self.length / 12.0
        if self.units == TimeUnit.WEEKS:
            return self.length / 52.0
        return self.length / 365.0

    def _comparison_key(self) -> Tuple[float, int]:
        return (self.years(), _UNIT_ORDER[self.units])

    def __add__(self, other):
        if isinstance(other, date):
            return add_period(other, self)
        if not isinstance(other, Period):
            return NotImplemented

        if self.length == 0:
            return Period(other.length, other.units)
        if other.length == 0:
            return Period(self.length, self.units)
        if self.units == other.units:
            return Period(self.length + other.length, self.units)

        pair = (self.units, other.units)
        if pair == (TimeUnit.YEARS, TimeUnit.MONTHS):
            return Period(self.length * 12 + other.length, TimeUnit.MONTHS)
        if pair == (TimeUnit.MONTHS, TimeUnit.YEARS):
            return Period(self.length + other.length * 12, TimeUnit.MONTHS)
        if pair == (TimeUnit.WEEKS, TimeUnit.DAYS):
            return Period(self.length * 7 + other.length, TimeUnit.DAYS)
        if pair == (TimeUnit.DAYS, TimeUnit.WEEKS):
            return Period(self.length + other.length * 7, TimeUnit.DAYS)
        raise PeriodError(f"Impossible addition between {self} and {other}")

    def __radd__(self, other):
        if isinstance(other, date):
            return add_period(other, self)
        return NotImplemented

    def __rsub__(self, other):
        if isinstance(other, date):
            return add_period(other, -self)
        return NotImplemented

    def __sub__(self, other):
        if not isinstance(other, Period):
            return NotImplemented
        return self + (-other)

    def __neg__(self) -> "Period":
        return Period(-self.length, self.units)

    def __mul__(self, n: int) -> "Period":
        if not isinstance(n, int):
            return NotImplemented
        return Period(self.length * n, self.units)

    __rmul__ = __mul__

    def __eq__(self, other) -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        if self.length == 0 and other.length == 0:
            return True
        a, b = self.normalized(), other.normalized()
        if a.units == b.units:
            return a.length == b.length
        if {a.units, b.units} == {TimeUnit.YEARS, TimeUnit.MONTHS}:
            return a.years() == b.years()
        if {a.units, b.units} == {TimeUnit.WEEKS, TimeUnit.DAYS}:
            days_a = a.length * 7 if a.units == TimeUnit.WEEKS else a.length
            days_b = b.length * 7 if b.units == TimeUnit.WEEKS else b.length
            return days_a == days_b
        return False

    def __hash__(self) -> int:
        n = self.normalized()
        if n.units == TimeUnit.YEARS:
            return hash((n.length * 12, TimeUnit.MONTHS))
        if n.units == TimeUnit.WEEKS:
            return hash((n.length * 7, TimeUnit.DAYS))
        return hash((n.length, n.units))

    def __lt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return self != other and self._comparison_key() < other._comparison_key()

    def __le__(self, other: "Period") -> bool:
        return self == other or self < other

    def __gt__(self, other: "Period") -> bool:
        if not isinstance(other, Period):
            return NotImplemented
        return other < self

    def __ge__(self, other: "Period") -> bool:
        return self == other or self > other

    def __str__(self) -> str:
        return f"{self.length}{self.units.value}"

    def __repr__(self) -> str:
        return f"Period({self.length}, {self.units.name})"


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or (year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    if month in (1, 3, 5, 7, 8, 10, 12):
        return 31
    elif month in (4, 6, 9, 11):
        return 30
    elif month == 2:
        return 29 if is_leap_year(year) else 28
    raise ValueError(f"Invalid month: {month}")


def end_of_month(d: date) -> date:
    return date(d.year, d.month, days_in_month(d.year, d.month))


def is_end_of_month(d: date) -> bool:
    return d.day == days_in_month(d.year, d.month)


def add_months(d: date, months: int) -> date:
    """Add calendar months, clipping the day to the target month length."""
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    day = min(d.day, days_in_month(year, month))
    return date(year, month, day)


def add_period(d: date, period: Period) -> date:
    """
    Add a period to a date.

    Months and years preserve the day of month where possible and clip to
    the last day of shorter months (Jan 31 + 1M = Feb 28/29).

    Args:
        d: Starting date
        period: Period to add (may be negative)

    Returns:
        Shifted date
    """
    if period.units == TimeUnit.DAYS:
        return d + timedelta(days=period.length)
    elif period.units == TimeUnit.WEEKS:
        return d + timedelta(weeks=period.length)
    elif period.units == TimeUnit.MONTHS:
        return add_months(d, period.length)
    elif period.units == TimeUnit.YEARS:
        return add_months(d, 12 * period.length)
    raise PeriodError(f"Unknown time unit: {period.units}")


__all__ = [
    "TimeUnit",
    "Period",
    "is_leap_year",
    "days_in_month",
    "end_of_month",
    "is_end_of_month",
    "add_months",
    "add_period",
]
