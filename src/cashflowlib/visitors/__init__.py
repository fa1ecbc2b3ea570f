"""
Visitors package - passes over the cashflows of an instrument.

Provides:
- IndexingVisitor, FixingVisitor: the mutating steps of the market binding pipeline
- NPVConstVisitor, NPVByDateConstVisitor, NPVByTenorConstVisitor
- DurationConstVisitor
- CashflowsAggregatorConstVisitor, AccruedAmountConstVisitor
- ParValueConstVisitor, ZSpreadConstVisitor
"""

from .base import Visitor, ConstVisitor, MarketDataConstVisitor, cashflows_of
from .indexing import IndexingVisitor, FixingVisitor
from .npv import NPVConstVisitor, NPVByDateConstVisitor, NPVByTenorConstVisitor
from .duration import DurationConstVisitor
from .aggregation import CashflowsAggregatorConstVisitor, AccruedAmountConstVisitor
from .par import ParValueConstVisitor
from .zspread import ZSpreadConstVisitor

__all__ = [
    "Visitor",
    "ConstVisitor",
    "MarketDataConstVisitor",
    "cashflows_of",
    "IndexingVisitor",
    "FixingVisitor",
    "NPVConstVisitor",
    "NPVByDateConstVisitor",
    "NPVByTenorConstVisitor",
    "DurationConstVisitor",
    "CashflowsAggregatorConstVisitor",
    "AccruedAmountConstVisitor",
    "ParValueConstVisitor",
    "ZSpreadConstVisitor",
]
