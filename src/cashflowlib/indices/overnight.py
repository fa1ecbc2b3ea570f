"""
Overnight indices.

OvernightIndex stores fixings as index levels (a compounded wealth
series). The rate between two past dates is implied by the ratio of their
levels; a period straddling the reference date compounds the realized
level with the curve's discount factor for the remaining piece.

OvernightCompoundedRateIndex is built from published daily rates instead:
the level series starts at BASE_LEVEL and grows by
level(t_{i+1}) = level(t_i) * (1 + r_i * yf(t_i, t_{i+1})).
"""

from datetime import date, timedelta
from typing import Dict, Optional
import logging

from ..conventions import Compounding, Frequency
from ..curves.term_structures import YieldTermStructure
from ..dates import Period, TimeUnit
from ..errors import InvalidValueError, NotFoundError
from ..interest_rate import InterestRate, RateDefinition
from .base import InterestRateIndex

logger = logging.getLogger(__name__)

# Level assigned to the first date of a synthesized series
BASE_LEVEL = 1000.0


def compose_index_levels(rates: Dict[date, float], rate_definition: RateDefinition) -> Dict[date, float]:
    """
    Compound a daily rate series into index levels.

    Args:
        rates: Published rate per date (any order)
        rate_definition: Conventions used for the year fractions

    Returns:
        Level per date, BASE_LEVEL on the first date
    """
    if not rates:
        return {}

    ordered = sorted(rates.items())
    level = BASE_LEVEL
    levels = {ordered[0][0]: level}
    for (prev_date, prev_rate), (d, _) in zip(ordered[:-1], ordered[1:]):
        level = level * (1.0 + prev_rate * rate_definition.year_fraction(prev_date, d))
        levels[d] = level
    return levels


class OvernightIndex(InterestRateIndex):
    """
    Overnight index whose fixings are index levels.

    Attributes:
        tenor: Always 1D
    """

    def __init__(
        self,
        name: Optional[str] = None,
        rate_definition: Optional[RateDefinition] = None,
        term_structure: Optional[YieldTermStructure] = None,
        fixings: Optional[Dict[date, float]] = None,
        reference_date: Optional[date] = None
    ):
        super().__init__(
            name=name,
            tenor=Period(1, TimeUnit.DAYS),
            rate_definition=rate_definition,
            term_structure=term_structure,
            fixings=fixings,
            reference_date=reference_date,
        )

    def average_rate(
        self,
        start: date,
        end: date,
        compounding: Optional[Compounding] = None,
        frequency: Optional[Frequency] = None
    ) -> float:
        """
        Realized rate between two fixing dates.

        Raises:
            NotFoundError: If either level is missing
        """
        rd = self.rate_definition
        compound = self.fixing(end) / self.fixing(start)
        return InterestRate.implied_rate(
            compound,
            rd.day_count,
            compounding or rd.compounding,
            frequency or rd.frequency,
            rd.year_fraction(start, end),
            rd.calendar,
        ).rate

    def forward_rate(
        self,
        start: date,
        end: date,
        compounding: Compounding,
        frequency: Frequency,
        fixing_date: Optional[date] = None
    ) -> float:
        if end < start:
            raise InvalidValueError(f"End date {end} must not be before start date {start}")

        ref = self.reference_date
        if start < ref < end:
            rd = self.rate_definition
            end_level = self.fixing(ref) / self.term_structure.discount_factor(end)
            compound = end_level / self.fixing(start)
            return InterestRate.implied_rate(
                compound, rd.day_count, compounding, frequency, rd.year_fraction(start, end), rd.calendar
            ).rate
        if start < ref:
            return self.average_rate(start, end, compounding, frequency)
        return self.term_structure.forward_rate(start, end, compounding, frequency)

    def _advanced_levels(self, d: date) -> Dict[date, float]:
        curve = self.term_structure
        levels = dict(self._fixings)
        seed = self.reference_date
        if seed not in levels:
            if levels:
                # new levels must chain onto the stored series
                raise NotFoundError(f"fixing for {seed} in index {self.name}")
            levels[seed] = BASE_LEVEL
        level = levels[seed]
        while seed < d:
            nxt = seed + timedelta(days=1)
            level = level * curve.discount_factor(seed) / curve.discount_factor(nxt)
            levels[nxt] = level
            seed = nxt
        return levels

    def advance_to_date(self, d: date) -> "OvernightIndex":
        """
        Roll the index to d.

        Levels for each day up to d grow by the old curve's one-day
        discount factor ratio. An index without fixings starts at BASE_LEVEL
        on the reference date.

        Raises:
            NotFoundError: If fixings exist but none on the reference date
        """
        self._check_advance(d)
        levels = self._advanced_levels(d)
        logger.debug("Index %s advanced %s -> %s", self.name, self.reference_date, d)
        return OvernightIndex(
            name=self.name,
            rate_definition=self.rate_definition,
            term_structure=self.term_structure.advance_to_date(d),
            fixings=levels,
        )


class OvernightCompoundedRateIndex(OvernightIndex):
    """
    Overnight index built from published daily rates.

    Attributes:
        fixings_rates: Published daily rates; fixings() returns the levels
    """

    def __init__(
        self,
        name: Optional[str] = None,
        rate_definition: Optional[RateDefinition] = None,
        term_structure: Optional[YieldTermStructure] = None,
        fixings_rates: Optional[Dict[date, float]] = None,
        reference_date: Optional[date] = None
    ):
        rate_definition = rate_definition or RateDefinition()
        self.fixings_rates: Dict[date, float] = dict(fixings_rates or {})
        super().__init__(
            name=name,
            rate_definition=rate_definition,
            term_structure=term_structure,
            fixings=compose_index_levels(self.fixings_rates, rate_definition),
            reference_date=reference_date,
        )

    def add_fixing_rate(self, d: date, rate: float) -> None:
        """Add a published rate and rebuild the level series."""
        if self._reference_date is not None and d > self._reference_date:
            raise InvalidValueError(f"Fixing date {d} is after reference date {self._reference_date}")
        self.fixings_rates[d] = rate
        self._fixings = compose_index_levels(self.fixings_rates, self.rate_definition)

    def advance_to_date(self, d: date) -> "OvernightCompoundedRateIndex":
        """
        Roll the index to d.

        Each day between the reference date and d without a published rate
        gets the old curve's one-day forward rate; levels follow from the rates.
        """
        self._check_advance(d)
        curve = self.term_structure
        rd = self.rate_definition

        def one_day_rate(day: date) -> float:
            nxt = day + timedelta(days=1)
            compound = curve.discount_factor(day) / curve.discount_factor(nxt)
            return InterestRate.implied_rate(
                compound, rd.day_count, Compounding.SIMPLE, rd.frequency, rd.year_fraction(day, nxt), rd.calendar
            ).rate

        rates = dict(self.fixings_rates)
        seed = self.reference_date
        while seed < d:
            if seed not in rates:
                rates[seed] = one_day_rate(seed)
            seed += timedelta(days=1)
        # the level on d needs a rate on d to exist in the series
        rates.setdefault(d, one_day_rate(d))

        logger.debug("Index %s advanced %s -> %s", self.name, self.reference_date, d)
        return OvernightCompoundedRateIndex(
            name=self.name,
            rate_definition=rd,
            term_structure=curve.advance_to_date(d),
            fixings_rates=rates,
        )

    def copy(self) -> "OvernightCompoundedRateIndex":
        clone = super().copy()
        clone.fixings_rates = dict(self.fixings_rates)
        return clone


__all__ = [
    "BASE_LEVEL",
    "compose_index_levels",
    "OvernightIndex",
    "OvernightCompoundedRateIndex",
]
