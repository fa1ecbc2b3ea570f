"""
Cashflow base classes.

Every cashflow has a payment date, a currency and a side, and can describe
the market data it needs (market_request). The closed set of variants is
tagged by CashflowType:

- DISBURSEMENT / REDEMPTION: principal movements with a given amount
- FIXED_RATE_COUPON: interest from a fixed InterestRate
- FLOATING_RATE_COUPON: interest from a fixing plus a spread

Signs: amount() is always the unsigned magnitude; signed_amount() applies
side.sign (Pay = -1, Receive = +1).
"""

from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional

from ..conventions import Side
from ..currencies import Currency
from ..errors import InvalidValueError, MarketRequestError, MarketRequestErrorKind
from ..market_data import DiscountFactorRequest, ExchangeRateRequest, MarketRequest


class CashflowType(Enum):
    """Variant tag of a cashflow."""
    DISBURSEMENT = "Disbursement"
    REDEMPTION = "Redemption"
    FIXED_RATE_COUPON = "FixedRateCoupon"
    FLOATING_RATE_COUPON = "FloatingRateCoupon"

    @property
    def is_coupon(self) -> bool:
        return self in (CashflowType.FIXED_RATE_COUPON, CashflowType.FLOATING_RATE_COUPON)


class Cashflow(ABC):
    """
    Abstract cashflow.

    Attributes:
        payment_date: Date the amount is paid
        currency: Currency of the amount
        side: Pay or Receive
        discount_curve_id: Index id used for discounting
        id: Dense position assigned by the indexing visitor
    """

    cashflow_type: CashflowType

    def __init__(
        self,
        payment_date: date,
        currency: Currency,
        side: Side,
        discount_curve_id: Optional[int] = None,
        id: Optional[int] = None
    ):
        self.payment_date = payment_date
        self.currency = currency
        self.side = side
        self.discount_curve_id = discount_curve_id
        self.id = id

    @abstractmethod
    def amount(self) -> float:
        """
        Unsigned amount.

        Raises:
            ValueNotSetError: If the amount is not known yet
        """
        pass

    def signed_amount(self) -> float:
        return self.amount() * self.side.sign

    def is_expired(self, as_of: date) -> bool:
        """True once the payment date is strictly before as_of."""
        return self.payment_date < as_of

    def set_id(self, id: int) -> None:
        self.id = id

    def set_discount_curve_id(self, curve_id: int) -> None:
        self.discount_curve_id = curve_id

    def market_request(self) -> MarketRequest:
        """
        Describe the discount factor and FX this cashflow needs.

        Raises:
            MarketRequestError: Without an id or a discount curve id
        """
        if self.id is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_REGISTRY_ID, repr(self))
        if self.discount_curve_id is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_DISCOUNT_CURVE_ID, repr(self))
        return MarketRequest(
            id=self.id,
            df=DiscountFactorRequest(self.discount_curve_id, self.payment_date),
            fwd=None,
            fx=ExchangeRateRequest(self.currency),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Record view used by Instrument.to_dataframe."""
        return {
            "id": self.id,
            "type": self.cashflow_type.value,
            "payment_date": self.payment_date,
            "accrual_start": None,
            "accrual_end": None,
            "notional": None,
            "rate": None,
            "amount": self._amount_or_none(),
            "side": self.side.value,
            "currency": self.currency.code,
        }

    def _amount_or_none(self) -> Optional[float]:
        try:
            return self.amount()
        except ValueError:
            return None

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(payment_date={self.payment_date}, "
                f"amount={self._amount_or_none()}, side={self.side.value}, currency={self.currency.code})")


class Coupon(Cashflow):
    """
    Interest cashflow accruing over [accrual_start, accrual_end].

    Raises:
        InvalidValueError: Unless accrual_start <= accrual_end <= payment_date
    """

    def __init__(
        self,
        notional: float,
        accrual_start: date,
        accrual_end: date,
        payment_date: date,
        currency: Currency,
        side: Side,
        discount_curve_id: Optional[int] = None,
        id: Optional[int] = None
    ):
        if not accrual_start <= accrual_end <= payment_date:
            raise InvalidValueError(
                f"Coupon dates must satisfy start <= end <= payment "
                f"({accrual_start}, {accrual_end}, {payment_date})"
            )
        super().__init__(payment_date, currency, side, discount_curve_id, id)
        self.notional = float(notional)
        self.accrual_start = accrual_start
        self.accrual_end = accrual_end

    def set_notional(self, notional: float) -> None:
        self.notional = float(notional)
        self._refresh()

    def _refresh(self) -> None:
        """Recompute cached amounts after an input changed."""

    def _relevant_dates(self, start: date, end: date):
        """Clamp [start, end] to the accrual period, None when disjoint."""
        if end < self.accrual_start or start > self.accrual_end or end <= start:
            return None
        return max(start, self.accrual_start), min(end, self.accrual_end)

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record.update({
            "accrual_start": self.accrual_start,
            "accrual_end": self.accrual_end,
            "notional": self.notional,
        })
        return record


__all__ = [
    "CashflowType",
    "Cashflow",
    "Coupon",
]
