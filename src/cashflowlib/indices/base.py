"""
Interest rate index interface.

An index combines a forecasting term structure with a table of past
fixings. Its reference date is the curve's reference date, or the last
fixing date when no curve is attached.

Provides:
- InterestRateIndex: abstract base with fixings management, curve
  access and the advance-in-time contract
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Dict, Optional
import copy
import logging

from ..conventions import Compounding, Frequency
from ..curves.interpolation import create_interpolator
from ..curves.term_structures import YieldTermStructure
from ..dates import Period, TimeUnit
from ..errors import InvalidValueError, NotFoundError, ValueNotSetError
from ..interest_rate import RateDefinition

logger = logging.getLogger(__name__)


class InterestRateIndex(ABC):
    """
    Abstract interest rate index.

    Attributes:
        name: Display name (used for named lookups in the IndexStore)
        tenor: Tenor of the rate the index publishes
        rate_definition: Conventions of the published rate
        term_structure: Forecasting curve (optional)
    """

    def __init__(
        self,
        name: Optional[str] = None,
        tenor: Optional[Period] = None,
        rate_definition: Optional[RateDefinition] = None,
        term_structure: Optional[YieldTermStructure] = None,
        fixings: Optional[Dict[date, float]] = None,
        reference_date: Optional[date] = None
    ):
        self.name = name
        self.tenor = tenor if tenor is not None else Period(1, TimeUnit.DAYS)
        self.rate_definition = rate_definition or RateDefinition()
        self._fixings: Dict[date, float] = dict(fixings or {})
        self._term_structure: Optional[YieldTermStructure] = None
        self._reference_date = reference_date

        if term_structure is not None:
            self._link(term_structure)
        if self._reference_date is None and self._fixings:
            self._reference_date = max(self._fixings)

    def _link(self, term_structure: YieldTermStructure) -> None:
        if self._reference_date is not None and term_structure.reference_date != self._reference_date:
            raise InvalidValueError(
                f"Term structure reference date {term_structure.reference_date} "
                f"does not match index reference date {self._reference_date}"
            )
        self._term_structure = term_structure
        self._reference_date = term_structure.reference_date

    @property
    def reference_date(self) -> date:
        if self._reference_date is None:
            raise ValueNotSetError("reference_date")
        return self._reference_date

    @property
    def term_structure(self) -> YieldTermStructure:
        if self._term_structure is None:
            raise ValueNotSetError("term_structure")
        return self._term_structure

    def has_term_structure(self) -> bool:
        return self._term_structure is not None

    def link_to(self, term_structure: YieldTermStructure) -> None:
        """Attach a (new) forecasting curve with the same reference date."""
        self._link(term_structure)

    # Fixings

    def fixing(self, d: date) -> float:
        """
        Realized fixing on a date.

        Raises:
            NotFoundError: If no fixing is stored for d
        """
        try:
            return self._fixings[d]
        except KeyError:
            raise NotFoundError(f"fixing for {d} in index {self.name}") from None

    def fixings(self) -> Dict[date, float]:
        """Copy of the fixing table."""
        return dict(self._fixings)

    def add_fixing(self, d: date, value: float) -> None:
        """
        Record a fixing.

        Raises:
            InvalidValueError: If d is after the reference date
        """
        if self._reference_date is not None and d > self._reference_date:
            raise InvalidValueError(f"Fixing date {d} is after reference date {self._reference_date}")
        self._fixings[d] = value

    def fill_missing_fixings(self, interpolator: str = "linear") -> None:
        """
        Fill every calendar day between the first and last fixing.

        Missing days are interpolated on day ordinals with the named
        interpolation method; existing fixings are kept.
        """
        if len(self._fixings) < 2:
            return

        known = sorted(self._fixings.items())
        ordinals = [d.toordinal() for d, _ in known]
        values = [v for _, v in known]
        interp = create_interpolator(interpolator).fit(ordinals, values)

        filled = 0
        current = known[0][0]
        last = known[-1][0]
        while current < last:
            if current not in self._fixings:
                self._fixings[current] = interp.interpolate(float(current.toordinal()))
                filled += 1
            current += timedelta(days=1)
        logger.debug("Filled %s missing fixings for index %s", filled, self.name)

    # Curve access

    def discount_factor(self, d: date) -> float:
        return self.term_structure.discount_factor(d)

    @abstractmethod
    def forward_rate(
        self,
        start: date,
        end: date,
        compounding: Compounding,
        frequency: Frequency,
        fixing_date: Optional[date] = None
    ) -> float:
        """
        Rate for the period [start, end] under (compounding, frequency).

        Past periods are answered from fixings, future ones from the
        term structure.
        """
        pass

    # Advance in time

    def advance_to_period(self, period: Period) -> "InterestRateIndex":
        """
        Roll the index forward by a period.

        Raises:
            InvalidValueError: For negative periods
        """
        if period.length < 0:
            raise InvalidValueError(f"Cannot advance an index by a negative period ({period})")
        return self.advance_to_date(self.reference_date + period)

    @abstractmethod
    def advance_to_date(self, d: date) -> "InterestRateIndex":
        """Index seen from a later reference date, with synthesized fixings."""
        pass

    def _check_advance(self, d: date) -> None:
        if d < self.reference_date:
            raise InvalidValueError(f"Cannot advance index {self.name} back to {d}")

    def copy(self) -> "InterestRateIndex":
        """Shallow copy sharing the curve, with its own fixing table."""
        clone = copy.copy(self)
        clone._fixings = dict(self._fixings)
        return clone

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(name={self.name!r}, tenor={self.tenor}, "
                f"reference_date={self._reference_date})")


__all__ = ["InterestRateIndex"]
