"""
Cross-instrument accumulators.

Provides:
- CashflowsAggregatorConstVisitor: interest, redemptions and disbursements by date
- AccruedAmountConstVisitor: daily accrued interest over a rolling window

Both keep their totals between visits so that one visitor can sum a whole
portfolio. The accumulators are guarded by a lock, which lets several
threads visit different instruments with the same visitor.
"""

from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence
import threading

import pandas as pd

from ..cashflows import Cashflow, CashflowType
from ..currencies import Currency
from ..dates import Period
from ..errors import InvalidValueError
from ..market_data import MarketData
from .base import ConstVisitor, MarketDataConstVisitor, cashflows_of


def _add(accumulator: Dict[date, float], key: date, value: float) -> None:
    accumulator[key] = accumulator.get(key, 0.0) + value


def _validate_currency(cf: Cashflow, currency: Optional[Currency]) -> None:
    if currency is not None and cf.currency != currency:
        raise InvalidValueError(
            f"Cashflow currency {cf.currency.code} does not match visitor currency {currency.code}"
        )


class CashflowsAggregatorConstVisitor(MarketDataConstVisitor):
    """
    Splits cashflows by kind and sums them by payment date.

    Without market data the signed nominal amounts are summed; with market
    data the present values (amount * sign * df / fx) of the cashflows that
    are not yet paid are summed instead.

    Attributes:
        market_data: Optional nodes indexed by cashflow id
        validation_currency: If set, every cashflow must be in this currency
    """

    def __init__(
        self,
        market_data: Optional[Sequence[MarketData]] = None,
        validation_currency: Optional[Currency] = None,
        include_today_cashflows: bool = False
    ):
        super().__init__(market_data, include_today_cashflows)
        self.validation_currency = validation_currency
        self._lock = threading.Lock()
        self._interest: Dict[date, float] = {}
        self._redemptions: Dict[date, float] = {}
        self._disbursements: Dict[date, float] = {}

    def with_validate_currency(self, currency: Currency) -> "CashflowsAggregatorConstVisitor":
        self.validation_currency = currency
        return self

    def _value(self, cf: Cashflow) -> Optional[float]:
        if self.market_data is None:
            return cf.signed_amount()
        data = self.data_for(cf)
        if not self.is_counted(cf, data):
            return None
        return self.present_value(cf, data)

    def visit(self, visitable: Any) -> None:
        """
        Add the cashflows of visitable to the running totals.

        The whole instrument is evaluated before anything is added, so a
        failing cashflow leaves the totals untouched.

        Raises:
            InvalidValueError: On a currency mismatch
            ValueNotSetError: If an amount is not known yet
        """
        contributions = []
        for cf in cashflows_of(visitable):
            _validate_currency(cf, self.validation_currency)
            value = self._value(cf)
            if value is not None:
                contributions.append((cf.cashflow_type, cf.payment_date, value))

        with self._lock:
            for cashflow_type, payment_date, value in contributions:
                if cashflow_type.is_coupon:
                    _add(self._interest, payment_date, value)
                elif cashflow_type == CashflowType.REDEMPTION:
                    _add(self._redemptions, payment_date, value)
                else:
                    _add(self._disbursements, payment_date, value)

    def interest(self) -> Dict[date, float]:
        with self._lock:
            return dict(sorted(self._interest.items()))

    def redemptions(self) -> Dict[date, float]:
        with self._lock:
            return dict(sorted(self._redemptions.items()))

    def disbursements(self) -> Dict[date, float]:
        with self._lock:
            return dict(sorted(self._disbursements.items()))

    def to_dataframe(self) -> pd.DataFrame:
        """One row per date with interest, redemptions and disbursements columns."""
        frame = pd.DataFrame({
            "interest": pd.Series(self.interest(), dtype=float),
            "redemptions": pd.Series(self.redemptions(), dtype=float),
            "disbursements": pd.Series(self.disbursements(), dtype=float),
        })
        return frame.fillna(0.0).sort_index()


class AccruedAmountConstVisitor(ConstVisitor):
    """
    Daily accrued interest over [evaluation_date, evaluation_date + horizon).

    The entry for day d is the signed interest accrued by every coupon over
    [d, d + 1 day]. Days inside the window are always present, possibly
    with 0.0, so the map sums to the interest accrued inside the window.

    Attributes:
        evaluation_date: First day of the window
        horizon: Length of the window
        validation_currency: If set, every cashflow must be in this currency
    """

    def __init__(self, evaluation_date: date, horizon: Period, validation_currency: Optional[Currency] = None):
        self.evaluation_date = evaluation_date
        self.horizon = horizon
        self.validation_currency = validation_currency
        self._lock = threading.Lock()
        self._accrued_amounts: Dict[date, float] = {}

    def with_validate_currency(self, currency: Currency) -> "AccruedAmountConstVisitor":
        self.validation_currency = currency
        return self

    @property
    def end_date(self) -> date:
        return self.evaluation_date + self.horizon

    def _days(self):
        day = self.evaluation_date
        end = self.end_date
        while day < end:
            yield day
            day += timedelta(days=1)

    def visit(self, visitable: Any) -> None:
        """
        Raises:
            InvalidValueError: On a currency mismatch
            ValueNotSetError: If a floating coupon accruing in the window is not fixed
        """
        coupons = []
        for cf in cashflows_of(visitable):
            _validate_currency(cf, self.validation_currency)
            if cf.cashflow_type.is_coupon:
                coupons.append(cf)

        daily = {}
        for day in self._days():
            following = day + timedelta(days=1)
            daily[day] = sum((cf.accrued_amount(day, following) * cf.side.sign for cf in coupons), 0.0)

        with self._lock:
            for day, value in daily.items():
                _add(self._accrued_amounts, day, value)

    def accrued_amounts(self) -> Dict[date, float]:
        with self._lock:
            return dict(sorted(self._accrued_amounts.items()))

    def to_series(self) -> pd.Series:
        result = self.accrued_amounts()
        return pd.Series(list(result.values()), index=pd.Index(list(result.keys()), name="date"),
                         name="accrued_amount", dtype=float)


__all__ = [
    "CashflowsAggregatorConstVisitor",
    "AccruedAmountConstVisitor",
]
