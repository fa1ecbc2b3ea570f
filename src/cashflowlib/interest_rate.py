"""
Interest rate algebra.

RateDefinition bundles (day count, compounding, frequency); InterestRate
attaches a rate value to a definition and provides:
- compound_factor(d1, d2) and compound_factor_from_yf(t)
- discount_factor(d1, d2) = 1 / compound_factor(d1, d2)
- implied_rate(compound, ...): inverse of the compound factor

Compounding formulas for year fraction t and frequency f:
    Simple:      1 + r*t
    Compounded:  (1 + r/f)^(f*t)
    Continuous:  exp(r*t)
    SimpleThenCompounded / CompoundedThenSimple switch at t = 1/f
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional
import math

from .calendars import Calendar
from .conventions import Compounding, DayCount, Frequency, year_fraction
from .errors import InterestRateError, InterestRateErrorKind, InvalidValueError


@dataclass(frozen=True)
class RateDefinition:
    """
    Conventions under which a rate is quoted.

    Attributes:
        day_count: Day count used to turn dates into year fractions
        compounding: Compounding convention
        frequency: Compounding frequency (ignored for Simple/Continuous)
        calendar: Holiday calendar, only used by Business/252
    """
    day_count: DayCount = DayCount.ACTUAL_360
    compounding: Compounding = Compounding.SIMPLE
    frequency: Frequency = Frequency.ANNUAL
    calendar: Optional[Calendar] = field(default=None, compare=False)

    # Standard presets
    @classmethod
    def money_market(cls) -> "RateDefinition":
        """Actual/360 simple rate."""
        return cls(DayCount.ACTUAL_360, Compounding.SIMPLE, Frequency.ANNUAL)

    @classmethod
    def bond_basis(cls, frequency: Frequency = Frequency.SEMIANNUAL) -> "RateDefinition":
        """30/360 compounded rate at the coupon frequency."""
        return cls(DayCount.THIRTY_360, Compounding.COMPOUNDED, frequency)

    @classmethod
    def continuous(cls, day_count: DayCount = DayCount.ACTUAL_365_FIXED) -> "RateDefinition":
        """Continuously compounded rate."""
        return cls(day_count, Compounding.CONTINUOUS, Frequency.ANNUAL)

    def year_fraction(self, start: date, end: date) -> float:
        return year_fraction(start, end, self.day_count, self.calendar)


def _periods_per_year(frequency: Frequency) -> float:
    try:
        return frequency.periods_per_year
    except ValueError as exc:
        raise InvalidValueError(f"Frequency {frequency.name} cannot be used for compounding") from exc


class InterestRate:
    """
    A rate value quoted under a RateDefinition.

    Attributes:
        rate: Rate value (0.05 = 5%)
        rate_definition: Quoting conventions
    """

    __slots__ = ("rate", "rate_definition")

    def __init__(self, rate: float, rate_definition: Optional[RateDefinition] = None):
        self.rate = float(rate)
        self.rate_definition = rate_definition or RateDefinition()

    @classmethod
    def from_conventions(
        cls,
        rate: float,
        compounding: Compounding,
        frequency: Frequency,
        day_count: DayCount
    ) -> "InterestRate":
        return cls(rate, RateDefinition(day_count, compounding, frequency))

    @property
    def day_count(self) -> DayCount:
        return self.rate_definition.day_count

    @property
    def compounding(self) -> Compounding:
        return self.rate_definition.compounding

    @property
    def frequency(self) -> Frequency:
        return self.rate_definition.frequency

    def with_rate(self, rate: float) -> "InterestRate":
        """Same definition, new rate value."""
        return InterestRate(rate, self.rate_definition)

    def year_fraction(self, start: date, end: date) -> float:
        return self.rate_definition.year_fraction(start, end)

    def compound_factor_from_yf(self, t: float) -> float:
        """
        Growth of one unit over year fraction t.

        Args:
            t: Year fraction

        Returns:
            Compound factor (1.0 at t = 0)
        """
        r = self.rate
        comp = self.compounding

        if comp == Compounding.SIMPLE:
            return 1.0 + r * t
        if comp == Compounding.CONTINUOUS:
            return math.exp(r * t)

        f = _periods_per_year(self.frequency)
        if comp == Compounding.COMPOUNDED:
            return (1.0 + r / f) ** (f * t)
        if comp == Compounding.SIMPLE_THEN_COMPOUNDED:
            if t <= 1.0 / f:
                return 1.0 + r * t
            return (1.0 + r / f) ** (f * t)
        if comp == Compounding.COMPOUNDED_THEN_SIMPLE:
            if t <= 1.0 / f:
                return (1.0 + r / f) ** (f * t)
            return 1.0 + r * t
        raise InvalidValueError(f"Unknown compounding: {comp}")

    def compound_factor(self, start: date, end: date) -> float:
        return self.compound_factor_from_yf(self.year_fraction(start, end))

    def discount_factor_from_yf(self, t: float) -> float:
        return 1.0 / self.compound_factor_from_yf(t)

    def discount_factor(self, start: date, end: date) -> float:
        return 1.0 / self.compound_factor(start, end)

    @classmethod
    def implied_rate(
        cls,
        compound: float,
        day_count: DayCount,
        compounding: Compounding,
        frequency: Frequency,
        t: float,
        calendar: Optional[Calendar] = None
    ) -> "InterestRate":
        """
        Rate that produces a given compound factor over year fraction t.

        Args:
            compound: Target compound factor
            day_count: Day count of the resulting rate
            compounding: Compounding of the resulting rate
            frequency: Frequency of the resulting rate
            t: Year fraction
            calendar: Calendar for Business/252 definitions

        Returns:
            InterestRate under (day_count, compounding, frequency)

        Raises:
            InterestRateError: compound <= 0, t < 0 for a unit compound, or
                t <= 0 otherwise
        """
        definition = RateDefinition(day_count, compounding, frequency, calendar)

        if compound <= 0.0:
            raise InterestRateError(InterestRateErrorKind.POSITIVE_COMPOUND_FACTOR, f"compound={compound}")

        if compound == 1.0:
            if t < 0.0:
                raise InterestRateError(InterestRateErrorKind.NON_NEGATIVE_TIME, f"t={t}")
            return cls(0.0, definition)

        if t <= 0.0:
            raise InterestRateError(InterestRateErrorKind.POSITIVE_TIME, f"t={t}")

        if compounding == Compounding.SIMPLE:
            r = (compound - 1.0) / t
        elif compounding == Compounding.CONTINUOUS:
            r = math.log(compound) / t
        else:
            f = _periods_per_year(frequency)
            if compounding == Compounding.COMPOUNDED:
                use_simple = False
            elif compounding == Compounding.SIMPLE_THEN_COMPOUNDED:
                use_simple = t <= 1.0 / f
            elif compounding == Compounding.COMPOUNDED_THEN_SIMPLE:
                use_simple = t > 1.0 / f
            else:
                raise InvalidValueError(f"Unknown compounding: {compounding}")

            if use_simple:
                r = (compound - 1.0) / t
            else:
                r = (compound ** (1.0 / (f * t)) - 1.0) * f

        return cls(r, definition)

    @classmethod
    def implied_rate_between(
        cls,
        compound: float,
        rate_definition: RateDefinition,
        start: date,
        end: date
    ) -> "InterestRate":
        """Implied rate over [start, end] under a rate definition."""
        t = rate_definition.year_fraction(start, end)
        return cls.implied_rate(
            compound,
            rate_definition.day_count,
            rate_definition.compounding,
            rate_definition.frequency,
            t,
            rate_definition.calendar,
        )

    def equivalent_rate(self, rate_definition: RateDefinition, start: date, end: date) -> "InterestRate":
        """Rate under another definition with the same growth over [start, end]."""
        return self.implied_rate_between(self.compound_factor(start, end), rate_definition, start, end)

    def __eq__(self, other) -> bool:
        if not isinstance(other, InterestRate):
            return NotImplemented
        return self.rate == other.rate and self.rate_definition == other.rate_definition

    def __hash__(self) -> int:
        return hash((self.rate, self.rate_definition))

    def __repr__(self) -> str:
        rd = self.rate_definition
        return (f"InterestRate({self.rate:.6%}, {rd.day_count.value}, "
                f"{rd.compounding.value}, {rd.frequency.name})")


__all__ = [
    "RateDefinition",
    "InterestRate",
]
