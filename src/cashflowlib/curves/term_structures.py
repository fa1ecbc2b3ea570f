"""
Yield term structures.

A term structure is anchored at a reference date and provides:
- discount_factor(d) for d >= reference date
- forward_rate(d1, d2, compounding, frequency) implied by df(d1)/df(d2)
- zero_rate(d, compounding, frequency)
- advance_to_period / advance_to_date: the same curve seen from a later
  reference date, with df_new(d) = df_old(d) / df_old(new reference date)
  so that forward rates between future dates are unchanged

Implementations:
- FlatForwardTermStructure: one InterestRate for every horizon
- DiscountTermStructure: discount factor nodes with interpolation
- ZeroRateTermStructure: zero rate nodes under a RateDefinition
- SpreadTermStructure: base curve with a constant spread on its zero rates
- CompositeTermStructure: product of a spread curve and a base curve
- RolledTermStructure: any curve rebased onto a later reference date
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence
import logging

import numpy as np

from ..calendars import Calendar
from ..conventions import Compounding, DayCount, Frequency, year_fraction
from ..dates import Period
from ..errors import InvalidValueError
from ..interest_rate import InterestRate, RateDefinition
from .interpolation import Interpolator, create_interpolator

logger = logging.getLogger(__name__)

# yf(a, b) + yf(b, c) == yf(a, c) for any a <= b <= c
ADDITIVE_DAY_COUNTS = (DayCount.ACTUAL_360, DayCount.ACTUAL_365_FIXED)


class YieldTermStructure(ABC):
    """
    Abstract yield curve anchored at a reference date.

    Attributes:
        reference_date: Valuation date of the curve (df = 1)
        day_count: Day count for time calculations
        calendar: Calendar used by Business/252 day counts
    """

    def __init__(
        self,
        reference_date: date,
        day_count: DayCount = DayCount.ACTUAL_360,
        calendar: Optional[Calendar] = None
    ):
        self.reference_date = reference_date
        self.day_count = day_count
        self.calendar = calendar

    def year_fraction(self, start: date, end: date) -> float:
        return year_fraction(start, end, self.day_count, self.calendar)

    def _check_date(self, d: date) -> None:
        if d < self.reference_date:
            raise InvalidValueError(
                f"Date {d} is before curve reference date {self.reference_date}"
            )

    @abstractmethod
    def discount_factor(self, d: date) -> float:
        """
        Discount factor P(reference_date, d).

        Raises:
            InvalidValueError: If d is before the reference date
        """
        pass

    def forward_rate(
        self,
        start: date,
        end: date,
        compounding: Compounding,
        frequency: Frequency
    ) -> float:
        """
        Forward rate between two dates implied by the discount factors.

        Args:
            start: Start of the forward period
            end: End of the forward period
            compounding: Compounding of the returned rate
            frequency: Frequency of the returned rate

        Returns:
            Forward rate under (day_count, compounding, frequency)
        """
        compound = self.discount_factor(start) / self.discount_factor(end)
        t = self.year_fraction(start, end)
        return InterestRate.implied_rate(
            compound, self.day_count, compounding, frequency, t, self.calendar
        ).rate

    def zero_rate(
        self,
        d: date,
        compounding: Compounding = Compounding.CONTINUOUS,
        frequency: Frequency = Frequency.ANNUAL
    ) -> float:
        """Zero rate from the reference date to d."""
        return self.forward_rate(self.reference_date, d, compounding, frequency)

    def advance_to_period(self, period: Period) -> "YieldTermStructure":
        """
        Roll the curve forward by a period.

        Raises:
            InvalidValueError: For negative periods
        """
        if period.length < 0:
            raise InvalidValueError(f"Cannot advance a term structure by a negative period ({period})")
        return self.advance_to_date(self.reference_date + period)

    def advance_to_date(self, d: date) -> "YieldTermStructure":
        """
        Roll the curve forward to a later reference date.

        Raises:
            InvalidValueError: If d is before the reference date
        """
        self._check_date(d)
        if d == self.reference_date:
            return self
        return RolledTermStructure(self, d)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference_date={self.reference_date})"


class FlatForwardTermStructure(YieldTermStructure):
    """
    Curve with one rate for every horizon.

    Attributes:
        rate: InterestRate applied from the reference date
    """

    def __init__(self, reference_date: date, rate: InterestRate):
        super().__init__(reference_date, rate.day_count, rate.rate_definition.calendar)
        self.rate = rate

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        return self.rate.discount_factor(self.reference_date, d)

    def advance_to_date(self, d: date) -> YieldTermStructure:
        """
        Roll the curve to d.

        Re-anchoring at d keeps every forward only when compounding is
        multiplicative and year fractions add up across d; otherwise the
        curve is rebased on its discount factor at d.
        """
        self._check_date(d)
        if (self.rate.compounding in (Compounding.COMPOUNDED, Compounding.CONTINUOUS)
                and self.day_count in ADDITIVE_DAY_COUNTS):
            return FlatForwardTermStructure(d, self.rate)
        return super().advance_to_date(d)

    def __repr__(self) -> str:
        return f"FlatForwardTermStructure(reference_date={self.reference_date}, rate={self.rate!r})"


class DiscountTermStructure(YieldTermStructure):
    """
    Curve defined by discount factor nodes.

    The first node must sit on the reference date with a discount factor of
    1.0. Discount factors between nodes are interpolated in year fractions.

    Attributes:
        dates: Node dates
        discount_factors: Node discount factors
        interpolation: "linear" or "log_linear"
        enable_extrapolation: Continue the last segment past the last node
    """

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        discount_factors: Sequence[float],
        day_count: DayCount = DayCount.ACTUAL_360,
        interpolation: str = "linear",
        enable_extrapolation: bool = True,
        calendar: Optional[Calendar] = None
    ):
        super().__init__(reference_date, day_count, calendar)
        if len(dates) != len(discount_factors):
            raise InvalidValueError("Dates and discount factors must have same length")
        if len(dates) < 2:
            raise InvalidValueError("Need at least 2 nodes to build a discount curve")
        if dates[0] != reference_date:
            raise InvalidValueError("First date needs to be the reference date")
        if discount_factors[0] != 1.0:
            raise InvalidValueError("First discount factor needs to be 1.0")

        self.dates: List[date] = list(dates)
        self.discount_factors = np.asarray(discount_factors, dtype=np.float64)
        self.interpolation = interpolation
        self.enable_extrapolation = enable_extrapolation
        self.year_fractions = np.array([self.year_fraction(reference_date, d) for d in self.dates])
        self._interpolator: Interpolator = create_interpolator(interpolation, enable_extrapolation)
        self._interpolator.fit(self.year_fractions, self.discount_factors)

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        if d == self.reference_date:
            return 1.0
        return self._interpolator.interpolate(self.year_fraction(self.reference_date, d))

    def advance_to_date(self, d: date) -> YieldTermStructure:
        """Rebase the nodes on d: keep the later nodes and divide by df(d)."""
        self._check_date(d)
        if d == self.reference_date:
            return self

        base = self.discount_factor(d)
        dates = [d]
        dfs = [1.0]
        for node_date, df in zip(self.dates, self.discount_factors):
            if node_date > d:
                dates.append(node_date)
                dfs.append(float(df) / base)

        if len(dates) < 2:
            # past the last node: keep one synthetic node one spacing ahead
            extra = d + (self.dates[-1] - self.dates[-2])
            dates.append(extra)
            dfs.append(self.discount_factor(extra) / base)

        logger.debug("Discount curve advanced %s -> %s (%s nodes)", self.reference_date, d, len(dates))
        return DiscountTermStructure(
            d, dates, dfs, self.day_count, self.interpolation, self.enable_extrapolation, self.calendar
        )


class ZeroRateTermStructure(YieldTermStructure):
    """
    Curve defined by zero rate nodes quoted under a RateDefinition.

    Attributes:
        dates: Node dates
        rates: Zero rates at the nodes
        rate_definition: Quoting conventions of the zero rates
    """

    def __init__(
        self,
        reference_date: date,
        dates: Sequence[date],
        rates: Sequence[float],
        rate_definition: Optional[RateDefinition] = None,
        interpolation: str = "linear",
        enable_extrapolation: bool = True
    ):
        rate_definition = rate_definition or RateDefinition()
        super().__init__(reference_date, rate_definition.day_count, rate_definition.calendar)
        if len(dates) != len(rates):
            raise InvalidValueError("Dates and rates must have same length")
        if len(dates) < 2:
            raise InvalidValueError("Need at least 2 nodes to build a zero rate curve")
        if dates[0] < reference_date:
            raise InvalidValueError("Zero rate dates must not be before the reference date")

        self.dates: List[date] = list(dates)
        self.rates = np.asarray(rates, dtype=np.float64)
        self.rate_definition = rate_definition
        self.interpolation = interpolation
        self.enable_extrapolation = enable_extrapolation
        times = [self.year_fraction(reference_date, d) for d in self.dates]
        self._interpolator = create_interpolator(interpolation, enable_extrapolation).fit(times, self.rates)

    def zero_rate_at(self, d: date) -> float:
        """Interpolated zero rate, in the curve's own rate definition."""
        return self._interpolator.interpolate(self.year_fraction(self.reference_date, d))

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        if d == self.reference_date:
            return 1.0
        t = self.year_fraction(self.reference_date, d)
        rate = InterestRate(self._interpolator.interpolate(t), self.rate_definition)
        return rate.discount_factor_from_yf(t)


class SpreadTermStructure(YieldTermStructure):
    """
    Base curve with a constant spread added to its zero rates.

    Attributes:
        base: Underlying term structure
        spread: Spread added to the zero rate (0.01 = 100bp)
        rate_definition: Conventions of the zero rate the spread applies to
    """

    def __init__(
        self,
        base: YieldTermStructure,
        spread: float,
        rate_definition: Optional[RateDefinition] = None
    ):
        rate_definition = rate_definition or RateDefinition.continuous(base.day_count)
        super().__init__(base.reference_date, rate_definition.day_count, rate_definition.calendar)
        self.base = base
        self.spread = spread
        self.rate_definition = rate_definition

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        if d == self.reference_date:
            return 1.0
        rd = self.rate_definition
        t = self.year_fraction(self.reference_date, d)
        zero = InterestRate.implied_rate(
            1.0 / self.base.discount_factor(d), rd.day_count, rd.compounding, rd.frequency, t, rd.calendar
        )
        return zero.with_rate(zero.rate + self.spread).discount_factor_from_yf(t)

    def __repr__(self) -> str:
        return f"SpreadTermStructure(base={self.base!r}, spread={self.spread})"


class CompositeTermStructure(YieldTermStructure):
    """
    Product of a base curve and a spread curve.

    df(d) = spread.df(d) * base.df(d), so forward rates between two dates
    compound the forwards of both curves. Both curves must share a
    reference date.

    Attributes:
        spread_curve: Curve carrying the spread
        base_curve: Underlying curve, also source of the day count
    """

    def __init__(self, spread_curve: YieldTermStructure, base_curve: YieldTermStructure):
        if spread_curve.reference_date != base_curve.reference_date:
            raise InvalidValueError(
                f"Spread curve reference date {spread_curve.reference_date} "
                f"does not match base curve reference date {base_curve.reference_date}"
            )
        super().__init__(base_curve.reference_date, base_curve.day_count, base_curve.calendar)
        self.spread_curve = spread_curve
        self.base_curve = base_curve

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        return self.spread_curve.discount_factor(d) * self.base_curve.discount_factor(d)

    def advance_to_date(self, d: date) -> YieldTermStructure:
        """Advance both curves to d and combine them again."""
        self._check_date(d)
        if d == self.reference_date:
            return self
        return CompositeTermStructure(self.spread_curve.advance_to_date(d), self.base_curve.advance_to_date(d))

    def __repr__(self) -> str:
        return f"CompositeTermStructure(spread_curve={self.spread_curve!r}, base_curve={self.base_curve!r})"


class RolledTermStructure(YieldTermStructure):
    """
    A term structure seen from a later reference date.

    df(d) = base.df(d) / base.df(reference_date).
    """

    def __init__(self, base: YieldTermStructure, reference_date: date):
        if reference_date < base.reference_date:
            raise InvalidValueError(
                f"Cannot roll {base!r} back to {reference_date}"
            )
        super().__init__(reference_date, base.day_count, base.calendar)
        self.base = base
        self._anchor_df = base.discount_factor(reference_date)

    def discount_factor(self, d: date) -> float:
        self._check_date(d)
        if d == self.reference_date:
            return 1.0
        return self.base.discount_factor(d) / self._anchor_df

    def advance_to_date(self, d: date) -> YieldTermStructure:
        self._check_date(d)
        if d == self.reference_date:
            return self
        return RolledTermStructure(self.base, d)

    def __repr__(self) -> str:
        return f"RolledTermStructure(base={self.base!r}, reference_date={self.reference_date})"


__all__ = [
    "YieldTermStructure",
    "FlatForwardTermStructure",
    "DiscountTermStructure",
    "ZeroRateTermStructure",
    "SpreadTermStructure",
    "CompositeTermStructure",
    "RolledTermStructure",
]
