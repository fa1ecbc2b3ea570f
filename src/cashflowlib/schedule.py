"""
Schedule generation for coupon-bearing instruments.

MakeSchedule(effective, termination) produces the sorted list of
cashflow anchor dates between two dates. Defaults are a NullCalendar,
Unadjusted convention and Backward generation.

Supported rules:
- Backward: roll back from termination; any stub sits at the front
- Forward: roll forward from effective; any stub sits at the back
- Zero: only effective and termination (also used for a zero tenor)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterator, List, Optional, Tuple
import logging

from .calendars import Calendar, NullCalendar
from .conventions import BusinessDayConvention, DateGenerationRule, Frequency
from .dates import Period, TimeUnit, end_of_month
from .errors import ScheduleError

logger = logging.getLogger(__name__)


@dataclass
class Schedule:
    """
    Container for generated schedule dates.

    Attributes:
        dates: Sorted schedule dates (first = effective, last = termination)
        is_regular: One flag per period, False for stubs
        tenor: Period between regular dates
        rule: Generation rule used
    """
    dates: List[date]
    is_regular: List[bool]
    tenor: Period
    calendar: Calendar
    convention: BusinessDayConvention
    termination_date_convention: BusinessDayConvention
    rule: DateGenerationRule
    end_of_month: bool = False
    first_date: Optional[date] = None
    next_to_last_date: Optional[date] = None

    @property
    def start_date(self) -> date:
        return self.dates[0]

    @property
    def end_date(self) -> date:
        return self.dates[-1]

    def periods(self) -> List[Tuple[date, date]]:
        """Consecutive (start, end) pairs."""
        return list(zip(self.dates[:-1], self.dates[1:]))

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self) -> Iterator[date]:
        return iter(self.dates)

    def __getitem__(self, i):
        return self.dates[i]


@dataclass
class MakeSchedule:
    """
    Builder for Schedule.

    Example:
        >>> schedule = (MakeSchedule(date(2020, 1, 1), date(2025, 1, 1))
        ...             .with_frequency(Frequency.SEMIANNUAL)
        ...             .build())
    """
    effective_date: date
    termination_date: date
    tenor: Period = field(default_factory=Period.empty)
    calendar: Calendar = field(default_factory=NullCalendar)
    convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED
    termination_date_convention: BusinessDayConvention = BusinessDayConvention.UNADJUSTED
    rule: DateGenerationRule = DateGenerationRule.BACKWARD
    end_of_month: bool = False
    first_date: Optional[date] = None
    next_to_last_date: Optional[date] = None

    def with_tenor(self, tenor: Period) -> "MakeSchedule":
        self.tenor = tenor
        return self

    def with_frequency(self, frequency: Frequency) -> "MakeSchedule":
        self.tenor = Period.from_frequency(frequency)
        return self

    def with_calendar(self, calendar: Calendar) -> "MakeSchedule":
        self.calendar = calendar
        return self

    def with_convention(self, convention: BusinessDayConvention) -> "MakeSchedule":
        self.convention = convention
        return self

    def with_termination_date_convention(self, convention: BusinessDayConvention) -> "MakeSchedule":
        self.termination_date_convention = convention
        return self

    def with_rule(self, rule: DateGenerationRule) -> "MakeSchedule":
        self.rule = rule
        return self

    def forwards(self) -> "MakeSchedule":
        self.rule = DateGenerationRule.FORWARD
        return self

    def backwards(self) -> "MakeSchedule":
        self.rule = DateGenerationRule.BACKWARD
        return self

    def with_end_of_month(self, flag: bool = True) -> "MakeSchedule":
        self.end_of_month = flag
        return self

    def with_first_date(self, first_date: date) -> "MakeSchedule":
        self.first_date = first_date
        return self

    def with_next_to_last_date(self, next_to_last_date: date) -> "MakeSchedule":
        self.next_to_last_date = next_to_last_date
        return self

    def _validate(self, rule: DateGenerationRule) -> None:
        if self.termination_date <= self.effective_date:
            raise ScheduleError(
                f"Termination date {self.termination_date} must be after effective date {self.effective_date}"
            )
        if self.first_date is not None:
            if rule == DateGenerationRule.ZERO:
                raise ScheduleError("First date incompatible with zero date generation rule")
            if self.first_date <= self.effective_date or self.first_date > self.termination_date:
                raise ScheduleError("First date out of effective-termination date range")
        if self.next_to_last_date is not None:
            if rule == DateGenerationRule.ZERO:
                raise ScheduleError("Next to last date incompatible with zero date generation rule")
            if (self.next_to_last_date <= self.effective_date
                    or self.next_to_last_date >= self.termination_date):
                raise ScheduleError("Next to last date out of effective-termination date range")

    def build(self) -> Schedule:
        """
        Generate the schedule.

        Returns:
            Schedule

        Raises:
            ScheduleError: For negative tenors or out-of-range first/next-to-last dates
        """
        if self.tenor.length < 0:
            raise ScheduleError(f"Non positive tenor ({self.tenor})")

        rule = self.rule
        tenor = self.tenor
        if tenor.length == 0:
            rule = DateGenerationRule.ZERO
        self._validate(rule)

        generator = NullCalendar()
        cal = self.calendar
        conv = self.convention
        dates: List[date] = []
        is_regular: List[bool] = []
        seed = self.effective_date

        if rule == DateGenerationRule.ZERO:
            tenor = Period(0, TimeUnit.YEARS)
            dates = [self.effective_date, self.termination_date]
            is_regular = [True]

        elif rule == DateGenerationRule.BACKWARD:
            dates.append(self.termination_date)
            seed = self.termination_date
            if self.next_to_last_date is not None:
                dates.insert(0, self.next_to_last_date)
                temp = generator.advance(seed, -tenor, conv, self.end_of_month)
                is_regular.insert(0, temp == self.next_to_last_date)
                seed = self.next_to_last_date

            exit_date = self.first_date if self.first_date is not None else self.effective_date
            periods = 1
            while True:
                temp = generator.advance(seed, tenor * -periods, conv, self.end_of_month)
                if temp < exit_date:
                    if self.first_date is not None and cal.adjust(dates[0], conv) != cal.adjust(self.first_date, conv):
                        dates.insert(0, self.first_date)
                        is_regular.insert(0, False)
                    break
                # skip dates that would duplicate after adjustment
                if cal.adjust(dates[0], conv) != cal.adjust(temp, conv):
                    dates.insert(0, temp)
                    is_regular.insert(0, True)
                periods += 1

            if cal.adjust(dates[0], conv) != cal.adjust(self.effective_date, conv):
                dates.insert(0, self.effective_date)
                is_regular.insert(0, False)

        elif rule == DateGenerationRule.FORWARD:
            dates.append(self.effective_date)
            seed = self.effective_date
            if self.first_date is not None:
                dates.append(self.first_date)
                temp = cal.advance(seed, tenor, conv, self.end_of_month)
                is_regular.append(temp == self.first_date)
                seed = self.first_date

            exit_date = self.next_to_last_date if self.next_to_last_date is not None else self.termination_date
            periods = 1
            while True:
                temp = generator.advance(seed, tenor * periods, conv, self.end_of_month)
                if temp > exit_date:
                    if (self.next_to_last_date is not None
                            and cal.adjust(dates[-1], conv) != cal.adjust(self.next_to_last_date, conv)):
                        dates.append(self.next_to_last_date)
                        is_regular.append(False)
                    break
                if cal.adjust(dates[-1], conv) != cal.adjust(temp, conv):
                    dates.append(temp)
                    is_regular.append(True)
                periods += 1

            term_conv = self.termination_date_convention
            if cal.adjust(dates[-1], term_conv) != cal.adjust(self.termination_date, term_conv):
                dates.append(self.termination_date)
                is_regular.append(False)

        else:
            raise ScheduleError(f"Unknown date generation rule: {rule}")

        if conv != BusinessDayConvention.UNADJUSTED:
            dates[0] = cal.adjust(dates[0], conv)
        if self.termination_date_convention != BusinessDayConvention.UNADJUSTED:
            dates[-1] = cal.adjust(dates[-1], self.termination_date_convention)

        if self.end_of_month and cal.is_end_of_month(seed):
            for i in range(1, len(dates) - 1):
                if conv == BusinessDayConvention.UNADJUSTED:
                    dates[i] = end_of_month(dates[i])
                else:
                    dates[i] = cal.end_of_month(dates[i])
        else:
            for i in range(1, len(dates) - 1):
                dates[i] = cal.adjust(dates[i], conv)

        # collapse a final stub that adjustment pushed onto the termination date
        if len(dates) >= 2 and dates[-2] >= dates[-1]:
            if len(is_regular) >= 2:
                is_regular[-2] = dates[-2] == dates[-1]
            dates[-2] = dates[-1]
            dates.pop()
            is_regular.pop()
        if len(dates) >= 3 and dates[1] <= dates[0]:
            is_regular[1] = dates[1] == dates[0]
            dates[1] = dates[0]
            dates.pop(0)
            is_regular.pop(0)

        logger.debug(
            "Schedule %s -> %s (%s, %s): %s dates",
            self.effective_date, self.termination_date, tenor, rule.value, len(dates)
        )
        return Schedule(
            dates=dates,
            is_regular=is_regular,
            tenor=tenor,
            calendar=cal,
            convention=conv,
            termination_date_convention=self.termination_date_convention,
            rule=rule,
            end_of_month=self.end_of_month,
            first_date=self.first_date,
            next_to_last_date=self.next_to_last_date,
        )


__all__ = [
    "Schedule",
    "MakeSchedule",
]
