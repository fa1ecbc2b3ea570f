"""
Principal cashflows: disbursements and redemptions.

Their amount is supplied by the caller (usually a builder) and must be set
before it is read.
"""

from datetime import date
from typing import Optional

from ..conventions import Side
from ..currencies import Currency
from ..errors import ValueNotSetError
from .base import Cashflow, CashflowType


class SimpleCashflow(Cashflow):
    """Cashflow with a user-supplied amount."""

    def __init__(
        self,
        payment_date: date,
        currency: Currency,
        side: Side,
        amount: Optional[float] = None,
        discount_curve_id: Optional[int] = None,
        id: Optional[int] = None
    ):
        super().__init__(payment_date, currency, side, discount_curve_id, id)
        self._amount = None if amount is None else float(amount)

    def amount(self) -> float:
        if self._amount is None:
            raise ValueNotSetError("amount")
        return self._amount

    def set_amount(self, amount: float) -> None:
        self._amount = float(amount)


class Disbursement(SimpleCashflow):
    """Principal paid out at the start of (or during) a loan."""

    cashflow_type = CashflowType.DISBURSEMENT


class Redemption(SimpleCashflow):
    """Principal paid back."""

    cashflow_type = CashflowType.REDEMPTION


__all__ = [
    "SimpleCashflow",
    "Disbursement",
    "Redemption",
]
