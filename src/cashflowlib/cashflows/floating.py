"""
Floating rate coupon.

The coupon goes through two states:
1. Unfixed: amount() raises ValueNotSetError("fixing_rate")
2. Fixed: set_fixing_rate(f) snapshots InterestRate(f + spread,
   rate_definition) and the amount follows as for a fixed coupon

market_request() adds a ForwardRateRequest on the forecast curve so that a
model can supply the fixing.
"""

from datetime import date
from typing import Any, Dict, Optional

from ..conventions import Side
from ..currencies import Currency
from ..errors import MarketRequestError, MarketRequestErrorKind, ValueNotSetError
from ..interest_rate import InterestRate, RateDefinition
from ..market_data import ForwardRateRequest, MarketRequest
from .base import CashflowType, Coupon


class FloatingRateCoupon(Coupon):
    """
    Coupon paying an index fixing plus a spread.

    Attributes:
        spread: Spread over the fixing
        fixing_date: Date the index is observed (defaults to accrual_start)
        rate_definition: Conventions of fixing + spread
        forecast_curve_id: Index id supplying the fixing
        fixing_rate: Realized fixing, None until fixed
    """

    cashflow_type = CashflowType.FLOATING_RATE_COUPON

    def __init__(
        self,
        notional: float,
        spread: float,
        accrual_start: date,
        accrual_end: date,
        payment_date: date,
        fixing_date: Optional[date],
        rate_definition: RateDefinition,
        currency: Currency,
        side: Side,
        discount_curve_id: Optional[int] = None,
        forecast_curve_id: Optional[int] = None,
        fixing_rate: Optional[float] = None,
        id: Optional[int] = None
    ):
        super().__init__(notional, accrual_start, accrual_end, payment_date, currency, side, discount_curve_id, id)
        self.spread = float(spread)
        self.fixing_date = fixing_date
        self.rate_definition = rate_definition
        self.forecast_curve_id = forecast_curve_id
        self.fixing_rate: Optional[float] = None
        self._rate: Optional[InterestRate] = None
        self._amount: Optional[float] = None
        if fixing_rate is not None:
            self.set_fixing_rate(fixing_rate)

    def _refresh(self) -> None:
        if self.fixing_rate is None:
            self._rate = None
            self._amount = None
            return
        self._rate = InterestRate(self.fixing_rate + self.spread, self.rate_definition)
        self._amount = self._cumulative(self.accrual_end)

    def set_fixing_rate(self, fixing_rate: float) -> None:
        """Bind the realized fixing and recompute the amount."""
        self.fixing_rate = float(fixing_rate)
        self._refresh()

    def set_spread(self, spread: float) -> None:
        self.spread = float(spread)
        self._refresh()

    def set_forecast_curve_id(self, curve_id: int) -> None:
        self.forecast_curve_id = curve_id

    @property
    def rate(self) -> InterestRate:
        """
        Raises:
            ValueNotSetError: Before the coupon is fixed
        """
        if self._rate is None:
            raise ValueNotSetError("fixing_rate")
        return self._rate

    def amount(self) -> float:
        if self._amount is None:
            raise ValueNotSetError("fixing_rate")
        return self._amount

    def _cumulative(self, d: date) -> float:
        return self.notional * (self._rate.compound_factor(self.accrual_start, d) - 1.0)

    def accrued_amount(self, start: date, end: date) -> float:
        """
        Interest accrued over [start, end] ∩ [accrual_start, accrual_end].

        Raises:
            ValueNotSetError: Before the coupon is fixed
        """
        window = self._relevant_dates(start, end)
        if window is None:
            return 0.0
        if self._rate is None:
            raise ValueNotSetError("fixing_rate")
        d1, d2 = window
        return self._cumulative(d2) - self._cumulative(d1)

    def market_request(self) -> MarketRequest:
        """
        Raises:
            MarketRequestError: Without id, discount curve id or forecast curve id
        """
        request = super().market_request()
        if self.forecast_curve_id is None:
            raise MarketRequestError(MarketRequestErrorKind.NO_FORECAST_CURVE_ID, repr(self))
        fwd = ForwardRateRequest(
            provider_id=self.forecast_curve_id,
            fixing_date=self.fixing_date or self.accrual_start,
            start_date=self.accrual_start,
            end_date=self.accrual_end,
            compounding=self.rate_definition.compounding,
            frequency=self.rate_definition.frequency,
        )
        return MarketRequest(id=request.id, df=request.df, fwd=fwd, fx=request.fx)

    def to_dict(self) -> Dict[str, Any]:
        record = super().to_dict()
        record["rate"] = None if self.fixing_rate is None else self.fixing_rate + self.spread
        return record


__all__ = ["FloatingRateCoupon"]
