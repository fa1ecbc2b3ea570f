"""
Visitor base classes.

Two families:
- Visitor: mutates the visited cashflows (ids, fixings)
- ConstVisitor: reads them and returns an analytic

Anything exposing a `cashflows` list can be visited (instruments, legs,
swaps); a plain iterable of cashflows is accepted as well.

Market-data visitors read MarketData positionally: the data of a cashflow
is market_data[cf.id], as produced by a Model from the requests of an
IndexingVisitor.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Iterable, List, Sequence

from ..cashflows import Cashflow
from ..errors import MarketRequestError, MarketRequestErrorKind, NotFoundError
from ..market_data import MarketData


def cashflows_of(visitable: Any) -> List[Cashflow]:
    """The cashflow list of an instrument-like object or iterable."""
    cashflows = getattr(visitable, "cashflows", None)
    if cashflows is not None:
        return cashflows
    return list(visitable)


class Visitor(ABC):
    """Visitor allowed to modify the cashflows it visits."""

    @abstractmethod
    def visit(self, visitable: Any) -> Any:
        pass


class ConstVisitor(ABC):
    """Visitor that leaves the visited cashflows unchanged."""

    @abstractmethod
    def visit(self, visitable: Any) -> Any:
        pass


class MarketDataConstVisitor(ConstVisitor):
    """
    Const visitor reading one MarketData node per cashflow.

    Attributes:
        market_data: Nodes indexed by cashflow id
        include_today_cashflows: Count cashflows paid on the reference date
    """

    def __init__(self, market_data: Sequence[MarketData], include_today_cashflows: bool = False):
        self.market_data = market_data
        self.include_today_cashflows = include_today_cashflows

    def set_include_today_cashflows(self, flag: bool) -> None:
        self.include_today_cashflows = flag

    def data_for(self, cf: Cashflow) -> MarketData:
        """
        Raises:
            MarketRequestError: If the cashflow has no id
            NotFoundError: If no node exists at its id
        """
        if cf.id is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_REGISTRY_ID, repr(cf))
        if not 0 <= cf.id < len(self.market_data):
            raise NotFoundError(f"market data for cashflow with id {cf.id}")
        return self.market_data[cf.id]

    def is_counted(self, cf: Cashflow, data: MarketData) -> bool:
        """Past cashflows never count; today's count when configured."""
        if cf.payment_date < data.reference_date:
            return False
        if cf.payment_date == data.reference_date:
            return self.include_today_cashflows
        return True

    @staticmethod
    def present_value(cf: Cashflow, data: MarketData) -> float:
        """Signed amount discounted and converted to the local currency."""
        return cf.amount() * cf.side.sign * data.discount_factor() / data.exchange_rate()

    def reference_date(self) -> date:
        """
        Raises:
            NotFoundError: Without market data
        """
        if not self.market_data:
            raise NotFoundError("market data")
        return self.market_data[0].reference_date

    def counted(self, visitable: Any) -> Iterable:
        """(cashflow, market data) pairs that take part in the analytic."""
        for cf in cashflows_of(visitable):
            data = self.data_for(cf)
            if self.is_counted(cf, data):
                yield cf, data


__all__ = [
    "cashflows_of",
    "Visitor",
    "ConstVisitor",
    "MarketDataConstVisitor",
]
