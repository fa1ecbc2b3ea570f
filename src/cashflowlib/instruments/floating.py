"""
Floating rate instruments and their builder.

Coupons pay the index fixing observed at the start of each period plus a
constant spread. Built coupons are unfixed; a FixingVisitor (or
set_fixing_rate) binds the fixings before amounts can be read.

Equal payments need the coupon amounts at build time and are therefore not
available for floating instruments.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple
import logging

from ..cashflows import Cashflow, CashflowType, FloatingRateCoupon
from ..conventions import Frequency, Side
from ..currencies import Currency
from ..errors import InvalidValueError, NotSupportedError
from ..interest_rate import RateDefinition
from .base import Instrument, RateType, Structure, principal_amounts
from .builder import InstrumentBuilder

logger = logging.getLogger(__name__)


class FloatingRateInstrument(Instrument):
    """
    Instrument paying index fixings plus a spread.

    Attributes:
        spread: Spread over the fixings
        rate_definition: Conventions of fixing + spread
        forecast_curve_id: Index id supplying the fixings
    """

    rate_type = RateType.FLOATING

    def __init__(
        self,
        cashflows: List[Cashflow],
        start_date: date,
        end_date: date,
        notional: float,
        spread: float,
        rate_definition: RateDefinition,
        currency: Currency,
        side: Side,
        structure: Structure,
        payment_frequency: Frequency,
        discount_curve_id: Optional[int] = None,
        forecast_curve_id: Optional[int] = None,
        id: Optional[str] = None,
        issue_date: Optional[date] = None
    ):
        super().__init__(cashflows, start_date, end_date, notional, currency, side, structure,
                         payment_frequency, discount_curve_id, id, issue_date)
        self.spread = spread
        self.rate_definition = rate_definition
        self.forecast_curve_id = forecast_curve_id

    def set_spread(self, spread: float) -> None:
        """Rebind the spread of every coupon, keeping their fixings."""
        self.spread = spread
        for cf in self.cashflows:
            if cf.cashflow_type == CashflowType.FLOATING_RATE_COUPON:
                cf.set_spread(spread)

    def set_forecast_curve_id(self, curve_id: int) -> None:
        self.forecast_curve_id = curve_id
        for cf in self.cashflows:
            if cf.cashflow_type == CashflowType.FLOATING_RATE_COUPON:
                cf.set_forecast_curve_id(curve_id)


def floating_coupons(
    periods: List[Tuple[date, date]],
    notionals: List[float],
    spread: float,
    rate_definition: RateDefinition,
    side: Side,
    currency: Currency,
    forecast_curve_id: Optional[int] = None
) -> List[Cashflow]:
    """One coupon per (start, end) period, fixed at the start and paid at the end."""
    if len(periods) != len(notionals):
        raise InvalidValueError(f"{len(periods)} periods but {len(notionals)} notionals")
    return [
        FloatingRateCoupon(notional, spread, d1, d2, d2, d1, rate_definition, currency, side,
                           forecast_curve_id=forecast_curve_id)
        for (d1, d2), notional in zip(periods, notionals)
    ]


@dataclass
class MakeFloatingRateInstrument(InstrumentBuilder):
    """
    Builder for FloatingRateInstrument.

    Requires a spread and a rate definition on top of the common inputs.
    """
    spread: Optional[float] = None
    rate_definition: Optional[RateDefinition] = None
    forecast_curve_id: Optional[int] = None

    def with_spread(self, spread: float) -> "MakeFloatingRateInstrument":
        self.spread = spread
        return self

    def with_rate_definition(self, rate_definition: RateDefinition) -> "MakeFloatingRateInstrument":
        self.rate_definition = rate_definition
        return self

    def with_forecast_curve_id(self, curve_id: Optional[int]) -> "MakeFloatingRateInstrument":
        self.forecast_curve_id = curve_id
        return self

    def _build_cashflows(self) -> dict:
        structure = self._required("structure")
        if structure == Structure.EQUAL_PAYMENTS:
            raise NotSupportedError("Equal payments on a floating rate instrument")
        spread = self._required("spread")
        rate_definition = self._required("rate_definition")
        frequency = self._frequency(structure)
        side = self._required("side")
        currency = self._required("currency")

        cashflows, start_date, end_date, notional = self._principal_structure(
            structure, frequency, side, currency,
            lambda periods, notionals: floating_coupons(periods, notionals, spread, rate_definition,
                                                        side, currency, self.forecast_curve_id),
        )
        self._apply_curve_ids(cashflows)

        logger.debug("Built %s floating rate cashflows (%s)", len(cashflows), structure.value)
        return dict(
            cashflows=cashflows,
            start_date=start_date,
            end_date=end_date,
            notional=notional,
            spread=spread,
            rate_definition=rate_definition,
            currency=currency,
            side=side,
            structure=structure,
            payment_frequency=frequency,
            discount_curve_id=self.discount_curve_id,
            forecast_curve_id=self.forecast_curve_id,
        )

    def build(self) -> FloatingRateInstrument:
        """
        Build the instrument.

        Raises:
            ValueNotSetError: If a required input is missing
            NotSupportedError: For the EqualPayments structure
            InvalidValueError: For inconsistent inputs
        """
        terms = self._build_cashflows()
        return FloatingRateInstrument(id=self.id, issue_date=self.issue_date, **terms)

    @classmethod
    def from_instrument(cls, instrument: FloatingRateInstrument) -> "MakeFloatingRateInstrument":
        """Builder reproducing an instrument as an Other structure."""
        disbursements, redemptions, coupon_dates = principal_amounts(instrument.cashflows)
        return (cls()
                .with_spread(instrument.spread)
                .with_rate_definition(instrument.rate_definition)
                .with_currency(instrument.currency)
                .with_side(instrument.side)
                .with_discount_curve_id(instrument.discount_curve_id)
                .with_forecast_curve_id(instrument.forecast_curve_id)
                .with_disbursements(disbursements)
                .with_redemptions(redemptions)
                .with_additional_coupon_dates(coupon_dates)
                .with_id(instrument.id)
                .with_issue_date(instrument.issue_date)
                .other())


__all__ = [
    "FloatingRateInstrument",
    "MakeFloatingRateInstrument",
    "floating_coupons",
]
