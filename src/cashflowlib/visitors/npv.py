"""
Net present value visitors.

Provides:
- NPVConstVisitor: total present value in the local currency
- NPVByDateConstVisitor: present value grouped by payment date
- NPVByTenorConstVisitor: present value grouped by tenor buckets

The present value of a cashflow is amount * sign * df / fx, where fx is
the rate of the cashflow currency against the store's local currency.
"""

from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from ..dates import Period
from ..errors import InvalidValueError
from ..market_data import MarketData
from .base import MarketDataConstVisitor

TenorBucket = Tuple[Period, Period]


class NPVConstVisitor(MarketDataConstVisitor):
    """Sum of discounted cashflows."""

    def visit(self, visitable: Any) -> float:
        """
        Args:
            visitable: Indexed instrument, leg, swap or list of cashflows

        Returns:
            NPV in the local currency

        Raises:
            ValueNotSetError: If an amount is not known yet
            MarketRequestError: If the df or fx was not requested
            NotFoundError: If a cashflow id has no market data
        """
        return sum((self.present_value(cf, data) for cf, data in self.counted(visitable)), 0.0)


class NPVByDateConstVisitor(MarketDataConstVisitor):
    """Present value grouped by payment date, in ascending date order."""

    def visit(self, visitable: Any) -> Dict[date, float]:
        npv_by_date: Dict[date, float] = {}
        for cf, data in self.counted(visitable):
            npv_by_date[cf.payment_date] = npv_by_date.get(cf.payment_date, 0.0) + self.present_value(cf, data)
        return dict(sorted(npv_by_date.items()))

    def to_series(self, visitable: Any) -> pd.Series:
        """Same result as a pandas Series indexed by payment date."""
        result = self.visit(visitable)
        return pd.Series(list(result.values()), index=pd.Index(list(result.keys()), name="payment_date"),
                         name="npv", dtype=float)


class NPVByTenorConstVisitor(MarketDataConstVisitor):
    """
    Present value grouped by (from, to) tenor buckets.

    A cashflow paid on d joins the first bucket, in the order given, with
    reference + from <= d < reference + to. Cashflows outside every bucket
    are ignored. Every bucket appears in the result, possibly with 0.0.
    """

    def __init__(
        self,
        market_data: Sequence[MarketData],
        tenors: Sequence[TenorBucket],
        include_today_cashflows: bool = False
    ):
        super().__init__(market_data, include_today_cashflows)
        for lower, upper in tenors:
            if not lower < upper:
                raise InvalidValueError(f"Tenor bucket ({lower}, {upper}) is empty")
        self.tenors: List[TenorBucket] = list(tenors)

    def visit(self, visitable: Any) -> "OrderedDict[TenorBucket, float]":
        reference_date = self.reference_date()
        bounds = [(bucket, reference_date + bucket[0], reference_date + bucket[1]) for bucket in self.tenors]
        npv_by_tenor = OrderedDict((bucket, 0.0) for bucket in self.tenors)
        for cf, data in self.counted(visitable):
            for bucket, lower, upper in bounds:
                if lower <= cf.payment_date < upper:
                    npv_by_tenor[bucket] += self.present_value(cf, data)
                    break
        return npv_by_tenor

    def to_series(self, visitable: Any) -> pd.Series:
        result = self.visit(visitable)
        labels = [f"{lower}-{upper}" for lower, upper in result.keys()]
        return pd.Series(list(result.values()), index=pd.Index(labels, name="tenor"), name="npv", dtype=float)


__all__ = [
    "NPVConstVisitor",
    "NPVByDateConstVisitor",
    "NPVByTenorConstVisitor",
]
