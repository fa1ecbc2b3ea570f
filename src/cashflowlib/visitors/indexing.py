"""
Mutating visitors of the market binding pipeline.

1. IndexingVisitor assigns dense ids and collects MarketRequests
2. A Model turns the requests into MarketData (same positions)
3. FixingVisitor binds forward rates to floating coupons
"""

from typing import Any, List, Sequence
import logging

from ..cashflows import CashflowType
from ..errors import MarketRequestError, MarketRequestErrorKind, NotFoundError
from ..market_data import MarketData, MarketRequest
from .base import Visitor, cashflows_of

logger = logging.getLogger(__name__)


class IndexingVisitor(Visitor):
    """
    Assigns each visited cashflow the next free id and records its request.

    Visiting several instruments with one IndexingVisitor gives ids that
    are unique across all of them; requests[i].id == i always holds.
    """

    def __init__(self):
        self.requests: List[MarketRequest] = []

    def visit(self, visitable: Any) -> None:
        """
        Raises:
            MarketRequestError: If a cashflow lacks a discount or forecast curve id
        """
        for cf in cashflows_of(visitable):
            cf.set_id(len(self.requests))
            self.requests.append(cf.market_request())
        logger.debug("Indexed %s market requests", len(self.requests))

    def request(self) -> List[MarketRequest]:
        return self.requests

    def __len__(self) -> int:
        return len(self.requests)


class FixingVisitor(Visitor):
    """Sets the fixing of every floating coupon from its MarketData forward rate."""

    def __init__(self, market_data: Sequence[MarketData]):
        self.market_data = market_data

    def visit(self, visitable: Any) -> None:
        """
        Raises:
            MarketRequestError: If a floating coupon has no id or its data no forward rate
            NotFoundError: If no market data exists at a coupon id
        """
        for cf in cashflows_of(visitable):
            if cf.cashflow_type != CashflowType.FLOATING_RATE_COUPON:
                continue
            if cf.id is None:
                raise MarketRequestError(MarketRequestErrorKind.NO_REGISTRY_ID, repr(cf))
            if not 0 <= cf.id < len(self.market_data):
                raise NotFoundError(f"market data for cashflow with id {cf.id}")
            cf.set_fixing_rate(self.market_data[cf.id].forward_rate())


__all__ = [
    "IndexingVisitor",
    "FixingVisitor",
]
