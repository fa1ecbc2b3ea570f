"""
Business day calendars.

Holiday tables are external collaborators: this module provides the
interface (is_business_day / adjust / advance) plus three generic
implementations.

- NullCalendar: every day is a business day
- WeekendsOnly: Saturday and Sunday are holidays
- HolidayCalendar: weekends plus an explicit set of holiday dates

Business Day Conventions:
- Following: Move to next business day
- Modified Following: Next business day unless it falls in next month (then previous)
- Preceding: Move to previous business day
- Modified Preceding: Previous business day unless it falls in previous month (then next)
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import FrozenSet, Iterable, List, Optional

from .conventions import BusinessDayConvention
from .dates import Period, TimeUnit, add_period, end_of_month, is_end_of_month


class Calendar(ABC):
    """Abstract business day calendar."""

    name: str = "Calendar"

    @abstractmethod
    def is_business_day(self, d: date) -> bool:
        """True if d is a business day."""
        pass

    def is_holiday(self, d: date) -> bool:
        return not self.is_business_day(d)

    def is_weekend(self, d: date) -> bool:
        # 0 = Monday, 5 = Saturday, 6 = Sunday
        return d.weekday() >= 5

    def adjust(
        self,
        d: date,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING
    ) -> date:
        """
        Adjust a date according to business day convention.

        Args:
            d: Date to adjust
            convention: Business day adjustment rule

        Returns:
            Adjusted date
        """
        if convention == BusinessDayConvention.UNADJUSTED or self.is_business_day(d):
            return d

        if convention in (BusinessDayConvention.FOLLOWING, BusinessDayConvention.MODIFIED_FOLLOWING):
            adjusted = d
            while not self.is_business_day(adjusted):
                adjusted += timedelta(days=1)
            if convention == BusinessDayConvention.MODIFIED_FOLLOWING and adjusted.month != d.month:
                return self.adjust(d, BusinessDayConvention.PRECEDING)
            return adjusted

        if convention in (BusinessDayConvention.PRECEDING, BusinessDayConvention.MODIFIED_PRECEDING):
            adjusted = d
            while not self.is_business_day(adjusted):
                adjusted -= timedelta(days=1)
            if convention == BusinessDayConvention.MODIFIED_PRECEDING and adjusted.month != d.month:
                return self.adjust(d, BusinessDayConvention.FOLLOWING)
            return adjusted

        raise ValueError(f"Unknown business day convention: {convention}")

    def advance(
        self,
        d: date,
        period: Period,
        convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        end_of_month_rule: bool = False
    ) -> date:
        """
        Move a date by a period.

        Day periods count business days; week, month and year periods move
        the calendar date and then adjust it. With end_of_month_rule, a start
        date at the end of its month maps to the end of the target month.
        """
        if period.length == 0:
            return self.adjust(d, convention)

        if period.units == TimeUnit.DAYS:
            step = 1 if period.length > 0 else -1
            remaining = abs(period.length)
            result = d
            while remaining > 0:
                result += timedelta(days=step)
                if self.is_business_day(result):
                    remaining -= 1
            return result

        result = add_period(d, period)
        if end_of_month_rule and period.units in (TimeUnit.MONTHS, TimeUnit.YEARS) and self.is_end_of_month(d):
            return self.end_of_month(result)
        return self.adjust(result, convention)

    def is_end_of_month(self, d: date) -> bool:
        """True if d is the last business day of its month."""
        return d.month != self.adjust(d + timedelta(days=1), BusinessDayConvention.FOLLOWING).month

    def end_of_month(self, d: date) -> date:
        """Last business day of the month of d."""
        return self.adjust(end_of_month(d), BusinessDayConvention.PRECEDING)

    def business_day_list(self, start: date, end: date) -> List[date]:
        """Business days in [start, end) (or (end, start] reversed when end < start)."""
        if end < start:
            start, end = end + timedelta(days=1), start + timedelta(days=1)
        days = []
        current = start
        while current < end:
            if self.is_business_day(current):
                days.append(current)
            current += timedelta(days=1)
        return days

    def business_days_between(self, start: date, end: date) -> int:
        """Signed number of business days in [start, end)."""
        count = len(self.business_day_list(start, end))
        return -count if end < start else count

    def __eq__(self, other) -> bool:
        return type(self) is type(other) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(type(self).__name__)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class NullCalendar(Calendar):
    """Calendar with no holidays, not even weekends."""

    name = "Null"

    def is_business_day(self, d: date) -> bool:
        return True

    def is_end_of_month(self, d: date) -> bool:
        return is_end_of_month(d)

    def end_of_month(self, d: date) -> date:
        return end_of_month(d)


class WeekendsOnly(Calendar):
    """Saturdays and Sundays are the only holidays."""

    name = "WeekendsOnly"

    def is_business_day(self, d: date) -> bool:
        return not self.is_weekend(d)


class HolidayCalendar(Calendar):
    """
    Weekends plus an explicit holiday set.

    Attributes:
        holidays: Set of holiday dates
        name: Display name
    """

    def __init__(self, holidays: Optional[Iterable[date]] = None, name: str = "Holidays"):
        self.holidays: FrozenSet[date] = frozenset(holidays or ())
        self.name = name

    def is_business_day(self, d: date) -> bool:
        if self.is_weekend(d):
            return False
        return d not in self.holidays

    def add_holiday(self, d: date) -> "HolidayCalendar":
        """Return a new calendar with d added to the holidays."""
        return HolidayCalendar(self.holidays | {d}, self.name)

    def __hash__(self) -> int:
        return hash((self.name, self.holidays))

    def __repr__(self) -> str:
        return f"HolidayCalendar(name={self.name!r}, holidays={len(self.holidays)})"


__all__ = [
    "Calendar",
    "NullCalendar",
    "WeekendsOnly",
    "HolidayCalendar",
]
