"""
Models turn market requests into market data.

Provides:
- Model: abstract resolver with gen_df / gen_fwd / gen_fx hooks
- SimpleModel: reads everything straight from a MarketStore

gen_market_data returns a list positionally aligned with the requests:
data[i].id == requests[i].id.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence
import logging

from .errors import InvalidValueError
from .market_data import (
    DiscountFactorRequest,
    ExchangeRateRequest,
    ForwardRateRequest,
    MarketData,
    MarketRequest,
)
from .market_store import MarketStore

logger = logging.getLogger(__name__)


class Model(ABC):
    """Abstract market data generator bound to a MarketStore."""

    def __init__(self, market_store: MarketStore):
        self.market_store = market_store

    @property
    def reference_date(self) -> date:
        return self.market_store.reference_date

    @abstractmethod
    def gen_df(self, request: DiscountFactorRequest, eval_date: date) -> float:
        pass

    @abstractmethod
    def gen_fwd(self, request: ForwardRateRequest, eval_date: date) -> float:
        pass

    @abstractmethod
    def gen_fx(self, request: ExchangeRateRequest, eval_date: date) -> float:
        pass

    def gen_node(self, request: MarketRequest, eval_date: Optional[date] = None) -> MarketData:
        """Resolve one request."""
        eval_date = eval_date or self.reference_date
        df = self.gen_df(request.df, eval_date) if request.df is not None else None
        fwd = self.gen_fwd(request.fwd, eval_date) if request.fwd is not None else None
        fx = self.gen_fx(request.fx, eval_date) if request.fx is not None else None
        return MarketData(id=request.id, reference_date=eval_date, df=df, fwd=fwd, fx=fx)

    def gen_market_data(
        self,
        requests: Sequence[MarketRequest],
        eval_date: Optional[date] = None
    ) -> List[MarketData]:
        """
        Resolve requests in order.

        Raises:
            InvalidValueError: If requests are not a dense id sequence
            NotFoundError: For unknown indices, fixings or exchange rates
        """
        data = []
        for position, request in enumerate(requests):
            if request.id != position:
                raise InvalidValueError(f"Request at position {position} has id {request.id}")
            data.append(self.gen_node(request, eval_date))
        logger.debug("Generated %s market data nodes", len(data))
        return data


class SimpleModel(Model):
    """
    Deterministic model reading curves, fixings and quotes from the store.

    Discount factors are 0 for dates before the evaluation date and 1 on
    it; forward rates come from the index (fixing or curve); exchange
    rates are triangulated against the local currency by default.
    """

    def gen_df(self, request: DiscountFactorRequest, eval_date: date) -> float:
        if request.date < eval_date:
            return 0.0
        if request.date == eval_date:
            return 1.0
        index = self.market_store.get_index(request.provider_id)
        return index.discount_factor(request.date)

    def gen_fwd(self, request: ForwardRateRequest, eval_date: date) -> float:
        index = self.market_store.get_index(request.provider_id)
        return index.forward_rate(
            request.start_date,
            request.end_date,
            request.compounding,
            request.frequency,
            fixing_date=request.fixing_date,
        )

    def gen_fx(self, request: ExchangeRateRequest, eval_date: date) -> float:
        return self.market_store.get_exchange_rate(request.first_currency, request.second_currency)


__all__ = [
    "Model",
    "SimpleModel",
]
