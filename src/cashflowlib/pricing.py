"""
Pricing pipeline helpers.

Runs the market binding pipeline on instruments:
index cashflows -> generate market data -> fix floating coupons -> NPV and duration.

Provides:
- PricingOutput: result container
- price_instrument: one instrument
- price_instruments: many instruments on a thread pool, each with its own
  request and data buffers
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
import logging

import pandas as pd

from .cashflows import CashflowType
from .errors import InvalidValueError
from .market_data import MarketData
from .market_store import MarketStore
from .models import Model, SimpleModel
from .visitors import (
    DurationConstVisitor,
    FixingVisitor,
    IndexingVisitor,
    NPVConstVisitor,
    cashflows_of,
)

logger = logging.getLogger(__name__)


@dataclass
class PricingOutput:
    """Container for pricing outputs to keep return type consistent."""

    instrument_id: Optional[str]
    reference_date: date
    npv: float
    duration: Optional[float]
    market_data: List[MarketData] = field(default_factory=list, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instrument_id": self.instrument_id,
            "reference_date": self.reference_date,
            "npv": self.npv,
            "duration": self.duration,
        }


def bind_market_data(instrument: Any, model: Model, eval_date: Optional[date] = None) -> List[MarketData]:
    """
    Index the instrument, generate its market data and fix its floating coupons.

    The instrument's cashflow ids are overwritten and its floating coupons
    are fixed in place.

    Returns:
        Market data aligned with the cashflow ids
    """
    indexer = IndexingVisitor()
    indexer.visit(instrument)
    data = model.gen_market_data(indexer.requests, eval_date)
    if any(cf.cashflow_type == CashflowType.FLOATING_RATE_COUPON for cf in cashflows_of(instrument)):
        FixingVisitor(data).visit(instrument)
    return data


def price_instrument(
    instrument: Any,
    market_store: MarketStore,
    model: Optional[Model] = None,
    include_today_cashflows: bool = False,
    with_duration: bool = True
) -> PricingOutput:
    """
    Price one instrument against a market store.

    Args:
        instrument: Instrument, leg or swap with discount (and forecast) curve ids set
        market_store: Store holding the indices and exchange rates
        model: Model used to resolve requests (SimpleModel by default)
        include_today_cashflows: Count cashflows paid on the reference date
        with_duration: Also compute the duration

    Returns:
        PricingOutput with the NPV in the store's local currency

    Raises:
        MarketRequestError: If a cashflow lacks a curve id
        NotFoundError: For unknown indices, fixings or exchange rates
    """
    model = model or SimpleModel(market_store)
    data = bind_market_data(instrument, model)
    npv = NPVConstVisitor(data, include_today_cashflows).visit(instrument)
    duration = DurationConstVisitor(data).visit(instrument) if with_duration else None
    return PricingOutput(
        instrument_id=getattr(instrument, "id", None),
        reference_date=model.reference_date,
        npv=npv,
        duration=duration,
        market_data=data,
    )


def price_instruments(
    instruments: Sequence[Any],
    market_store: MarketStore,
    model: Optional[Model] = None,
    include_today_cashflows: bool = False,
    with_duration: bool = True,
    max_workers: Optional[int] = None
) -> List[PricingOutput]:
    """
    Price several instruments in parallel.

    The store is only read; each instrument is indexed and fixed by the
    thread that prices it, so the same instrument object must not appear
    twice in `instruments`. Results keep the input order, and the first
    failure is raised.
    """
    if len({id(instrument) for instrument in instruments}) != len(instruments):
        raise InvalidValueError("The same instrument object appears more than once")
    model = model or SimpleModel(market_store)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(price_instrument, instrument, market_store, model, include_today_cashflows, with_duration)
            for instrument in instruments
        ]
        results = [future.result() for future in futures]
    logger.debug("Priced %s instruments", len(results))
    return results


def results_to_dataframe(results: Sequence[PricingOutput]) -> pd.DataFrame:
    """One row per PricingOutput."""
    return pd.DataFrame([result.to_dict() for result in results])


__all__ = [
    "PricingOutput",
    "bind_market_data",
    "price_instrument",
    "price_instruments",
    "results_to_dataframe",
]
