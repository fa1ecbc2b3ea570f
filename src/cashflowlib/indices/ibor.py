"""
Term rate (IBOR-style) index.

Fixings are rates published for the index tenor. A period whose fixing
date is in the past takes the stored fixing; later periods are forecast
from the term structure.
"""

from datetime import date, timedelta
from typing import Optional
import logging

from ..conventions import Compounding, Frequency
from ..errors import InvalidValueError
from .base import InterestRateIndex

logger = logging.getLogger(__name__)


class IborIndex(InterestRateIndex):
    """
    Index publishing a rate for a fixed tenor (e.g. 3M, 6M).

    Example:
        >>> index = IborIndex("TERM-6M", Period(6, TimeUnit.MONTHS), term_structure=curve)
        >>> index.forward_rate(d1, d2, Compounding.SIMPLE, Frequency.ANNUAL)
    """

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

        fixing_date = fixing_date or start
        ref = self.reference_date
        if fixing_date < ref or (fixing_date == ref and fixing_date in self._fixings):
            return self.fixing(fixing_date)
        return self.term_structure.forward_rate(start, end, compounding, frequency)

    def advance_to_date(self, d: date) -> "IborIndex":
        """
        Roll the index to d.

        Every day from the old reference date up to d without a stored fixing
        receives the old curve's forward rate over the index tenor.
        """
        self._check_advance(d)
        curve = self.term_structure
        rd = self.rate_definition

        fixings = dict(self._fixings)
        seed = self.reference_date
        while seed <= d:
            if seed not in fixings:
                fixings[seed] = curve.forward_rate(seed, seed + self.tenor, rd.compounding, rd.frequency)
            seed += timedelta(days=1)

        logger.debug("Index %s advanced %s -> %s", self.name, self.reference_date, d)
        return IborIndex(
            name=self.name,
            tenor=self.tenor,
            rate_definition=rd,
            term_structure=curve.advance_to_date(d),
            fixings=fixings,
        )


__all__ = ["IborIndex"]
