"""
Market conventions used across the cashflow engine.

Supported Day Counts:
- Actual/360: Actual days / 360 (money markets)
- Actual/365 Fixed: Actual days / 365
- 30/360: 30 days per month / 360 with end-of-month adjustments
- Actual/Actual (ISDA): Actual days split by calendar year
- Business/252: Business days / 252 under a holiday calendar

Also defines compounding, frequency, business day conventions,
schedule generation rules and the pay/receive side of a cashflow.
"""

from datetime import date
from enum import Enum
import calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACTUAL_360 = "Actual360"
    ACTUAL_365_FIXED = "Actual365Fixed"
    THIRTY_360 = "Thirty360"
    ACTUAL_ACTUAL = "ActualActual"
    BUSINESS_252 = "Business252"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACTUAL_360,
            "ACT360": cls.ACTUAL_360,
            "ACTUAL360": cls.ACTUAL_360,
            "ACT/365": cls.ACTUAL_365_FIXED,
            "ACT365": cls.ACTUAL_365_FIXED,
            "ACT/365F": cls.ACTUAL_365_FIXED,
            "ACTUAL365FIXED": cls.ACTUAL_365_FIXED,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
            "THIRTY360": cls.THIRTY_360,
            "ACT/ACT": cls.ACTUAL_ACTUAL,
            "ACTACT": cls.ACTUAL_ACTUAL,
            "ACTUALACTUAL": cls.ACTUAL_ACTUAL,
            "BUS/252": cls.BUSINESS_252,
            "BUSINESS252": cls.BUSINESS_252,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    FOLLOWING = "Following"
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    PRECEDING = "Preceding"
    MODIFIED_PRECEDING = "ModifiedPreceding"
    UNADJUSTED = "Unadjusted"

    @classmethod
    def from_string(cls, s: str) -> "BusinessDayConvention":
        key = s.upper().replace(" ", "").replace("_", "")
        for member in cls:
            if member.value.upper() == key:
                return member
        raise ValueError(f"Unknown business day convention: {s}")


class Compounding(Enum):
    """Interest rate compounding convention."""
    SIMPLE = "Simple"
    COMPOUNDED = "Compounded"
    CONTINUOUS = "Continuous"
    SIMPLE_THEN_COMPOUNDED = "SimpleThenCompounded"
    COMPOUNDED_THEN_SIMPLE = "CompoundedThenSimple"

    @classmethod
    def from_string(cls, s: str) -> "Compounding":
        key = s.upper().replace(" ", "").replace("_", "")
        for member in cls:
            if member.value.upper() == key:
                return member
        raise ValueError(f"Unknown compounding: {s}")


class Frequency(Enum):
    """
    Payment/compounding frequency.

    The value is the number of periods per year for the canonical set;
    NO_FREQUENCY, ONCE and OTHER_FREQUENCY use sentinel values.
    """
    NO_FREQUENCY = -1
    ONCE = 0
    ANNUAL = 1
    SEMIANNUAL = 2
    EVERY_FOURTH_MONTH = 3
    QUARTERLY = 4
    BIMONTHLY = 6
    MONTHLY = 12
    EVERY_FOURTH_WEEK = 13
    BIWEEKLY = 26
    WEEKLY = 52
    DAILY = 365
    OTHER_FREQUENCY = 999

    @classmethod
    def from_string(cls, s: str) -> "Frequency":
        """Parse frequency from names like 'Semiannual' or 'SEMI_ANNUAL'."""
        key = s.upper().replace(" ", "").replace("_", "").replace("-", "")
        aliases = {"SEMI": "SEMIANNUAL", "ANNUALLY": "ANNUAL", "QUARTER": "QUARTERLY"}
        key = aliases.get(key, key)
        for member in cls:
            if member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown frequency: {s}")

    @property
    def periods_per_year(self) -> float:
        """Numeric frequency used by compounding formulas."""
        if self.value <= 0 or self is Frequency.OTHER_FREQUENCY:
            raise ValueError(f"Frequency {self.name} has no periods per year")
        return float(self.value)


class DateGenerationRule(Enum):
    """Direction in which schedule dates are generated."""
    BACKWARD = "Backward"
    FORWARD = "Forward"
    ZERO = "Zero"


class Side(Enum):
    """Pay/receive side of a cashflow."""
    PAY = "Pay"
    RECEIVE = "Receive"

    @classmethod
    def from_string(cls, s: str) -> "Side":
        key = s.strip().upper()
        if key in ("PAY", "PAYER", "P"):
            return cls.PAY
        if key in ("RECEIVE", "RECEIVER", "REC", "R"):
            return cls.RECEIVE
        raise ValueError(f"side must be 'PAY' or 'RECEIVE', got '{s}'")

    @property
    def sign(self) -> float:
        return -1.0 if self is Side.PAY else 1.0

    def inverse(self) -> "Side":
        return Side.RECEIVE if self is Side.PAY else Side.PAY


def _thirty_360_days(start: date, end: date) -> int:
    d1 = start.day
    d2 = end.day
    if d1 == 31:
        d1 = 30
    if d2 == 31 and d1 == 30:
        d2 = 30
    return 360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)


def _actual_actual_fraction(start: date, end: date) -> float:
    # ISDA: split by calendar year boundaries
    if start.year == end.year:
        days_in_year = 366 if calendar.isleap(start.year) else 365
        return (end - start).days / days_in_year

    total = (date(start.year + 1, 1, 1) - start).days / (366 if calendar.isleap(start.year) else 365)
    total += end.year - start.year - 1
    total += (end - date(end.year, 1, 1)).days / (366 if calendar.isleap(end.year) else 365)
    return total


def day_count(start: date, end: date, convention: DayCount, holiday_calendar=None) -> int:
    """
    Number of days between two dates under a day count convention.

    Negative when end is before start.

    Args:
        start: Start date
        end: End date
        convention: Day count convention
        holiday_calendar: Calendar used by Business/252 (weekends only if None)

    Returns:
        Signed day count
    """
    if end < start:
        return -day_count(end, start, convention, holiday_calendar)

    if convention == DayCount.THIRTY_360:
        return _thirty_360_days(start, end)

    if convention == DayCount.BUSINESS_252:
        if holiday_calendar is None:
            from .calendars import WeekendsOnly
            holiday_calendar = WeekendsOnly()
        return len(holiday_calendar.business_day_list(start, end))

    return (end - start).days


def year_fraction(
    start: date,
    end: date,
    convention: DayCount,
    holiday_calendar=None
) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        convention: Day count convention
        holiday_calendar: Calendar used by Business/252

    Returns:
        Year fraction as float (negative when end < start)

    Conventions:
        Actual360: (end - start).days / 360
        Actual365Fixed: (end - start).days / 365
        Thirty360: 30 days per month, 360 days per year
        ActualActual: actual days / actual days in each calendar year
        Business252: business days / 252
    """
    if start == end:
        return 0.0
    if end < start:
        return -year_fraction(end, start, convention, holiday_calendar)

    if convention == DayCount.ACTUAL_360:
        return (end - start).days / 360.0

    elif convention == DayCount.ACTUAL_365_FIXED:
        return (end - start).days / 365.0

    elif convention == DayCount.THIRTY_360:
        return _thirty_360_days(start, end) / 360.0

    elif convention == DayCount.ACTUAL_ACTUAL:
        return _actual_actual_fraction(start, end)

    elif convention == DayCount.BUSINESS_252:
        return day_count(start, end, convention, holiday_calendar) / 252.0

    else:
        raise ValueError(f"Unknown day count: {convention}")


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "DateGenerationRule",
    "Side",
    "day_count",
    "year_fraction",
]
