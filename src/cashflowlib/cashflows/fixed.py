"""
Fixed rate coupon.

amount = notional * (rate.compound_factor(accrual_start, accrual_end) - 1)

Accrual over a sub-window [d1, d2] is the difference of the cumulative
accrual from accrual_start to the clamped window ends, so accruals over a
partition of the period always add up to the full amount.
"""

from datetime import date
from typing import Any, Dict, Optional

from ..conventions import Side
from ..currencies import Currency
from ..interest_rate import InterestRate
from .base import CashflowType, Coupon


class FixedRateCoupon(Coupon):
    """
    Coupon paying a fixed InterestRate on a notional.

    Attributes:
        rate: InterestRate (value and conventions)
    """

    cashflow_type = CashflowType.FIXED_RATE_COUPON

    def __init__(
        self,
        notional: float,
        rate: InterestRate,
        accrual_start: date,
        accrual_end: date,
        payment_date: date,
        currency: Currency,
        side: Side,
        discount_curve_id: Optional[int] = None,
        id: Optional[int] = None
    ):
        super().__init__(notional, accrual_start, accrual_end, payment_date, currency, side, discount_curve_id, id)
        self.rate = rate
        self._amount: Optional[float] = None

    def _refresh(self) -> None:
        self._amount = None

    def amount(self) -> float:
        if self._amount is None:
            self._amount = self._cumulative(self.accrual_end)
        return self._amount

    def set_rate(self, rate: InterestRate) -> None:
        self.rate = rate
        self._refresh()

    def set_rate_value(self, value: float) -> None:
        """Rebind the rate value, keeping its conventions."""
        self.set_rate(self.rate.with_rate(value))

    def _cumulative(self, d: date) -> float:
        return self.notional * (self.rate.compound_factor(self.accrual_start, d) - 1.0)

    def accrued_amount(self, start: date, end: date) -> float:
        """
        Interest accrued over [start, end] ∩ [accrual_start, accrual_end].

        Returns:
            Unsigned accrued amount (0.0 for disjoint windows)
        """
        window = self._relevant_dates(start, end)
        if window is None:
            return 0.0
        d1, d2 = window
        return self._cumulative(d2) - self._cumulative(d1)

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record["rate"] = self.rate.rate
        return record


__all__ = ["FixedRateCoupon"]
