"""
Macaulay-style duration of an instrument.

D = sum(t_i * pv_i) / sum(pv_i), with t_i the Actual/365 year fraction
from the reference date to each strictly future payment.
"""

from typing import Any

from ..conventions import DayCount, year_fraction
from ..errors import EvaluationError
from .base import MarketDataConstVisitor, cashflows_of


class DurationConstVisitor(MarketDataConstVisitor):
    """PV-weighted average time to payment, in years."""

    def visit(self, visitable: Any) -> float:
        """
        Raises:
            EvaluationError: If the future cashflows have zero present value
        """
        weighted = 0.0
        total = 0.0
        for cf in cashflows_of(visitable):
            data = self.data_for(cf)
            if cf.payment_date <= data.reference_date:
                continue
            t = year_fraction(data.reference_date, cf.payment_date, DayCount.ACTUAL_365_FIXED)
            pv = self.present_value(cf, data)
            weighted += t * pv
            total += pv
        if total == 0.0:
            raise EvaluationError("Duration undefined for zero present value")
        return weighted / total


__all__ = ["DurationConstVisitor"]
