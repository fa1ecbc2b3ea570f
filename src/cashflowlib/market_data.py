"""
Market requests and market data.

A cashflow describes the market data it needs as a MarketRequest; a model
resolves each request against a MarketStore into a MarketData record.
Both sides are positional: requests[i].id == data[i].id == i.

Provides:
- DiscountFactorRequest(provider_id, date)
- ForwardRateRequest(provider_id, fixing_date, start_date, end_date, compounding, frequency)
- ExchangeRateRequest(first_currency, second_currency=None)
- MarketRequest(id, df, fwd, fx)
- MarketData(id, reference_date, df, fwd, fx)
"""

from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Optional

from .conventions import Compounding, Frequency
from .currencies import Currency
from .errors import MarketRequestError, MarketRequestErrorKind


@dataclass(frozen=True)
class DiscountFactorRequest:
    """Discount factor of curve `provider_id` at `date`."""
    provider_id: int
    date: date


@dataclass(frozen=True)
class ForwardRateRequest:
    """Forward rate of index `provider_id` over [start_date, end_date]."""
    provider_id: int
    fixing_date: date
    start_date: date
    end_date: date
    compounding: Compounding
    frequency: Frequency


@dataclass(frozen=True)
class ExchangeRateRequest:
    """
    Exchange rate first -> second.

    A missing second currency means the store's local currency.
    """
    first_currency: Currency
    second_currency: Optional[Currency] = None


@dataclass(frozen=True)
class MarketRequest:
    """Everything one cashflow needs from the market."""
    id: int
    df: Optional[DiscountFactorRequest] = None
    fwd: Optional[ForwardRateRequest] = None
    fx: Optional[ExchangeRateRequest] = None


@dataclass(frozen=True)
class MarketData:
    """
    Resolved market values for one cashflow.

    Accessors raise MarketRequestError when the value was not requested.
    """
    id: int
    reference_date: date
    df: Optional[float] = None
    fwd: Optional[float] = None
    fx: Optional[float] = None

    def discount_factor(self) -> float:
        if self.df is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_DISCOUNT_REQUEST, f"id {self.id}")
        return self.df

    def forward_rate(self) -> float:
        if self.fwd is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_FORWARD_RATE_REQUEST, f"id {self.id}")
        return self.fwd

    def exchange_rate(self) -> float:
        if self.fx is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_FX_REQUEST, f"id {self.id}")
        return self.fx

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "DiscountFactorRequest",
    "ForwardRateRequest",
    "ExchangeRateRequest",
    "MarketRequest",
    "MarketData",
]
