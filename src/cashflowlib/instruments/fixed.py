"""
Fixed rate instruments and their builder.

MakeFixedRateInstrument collects sparse inputs and validates them in
build(). Every required financial quantity (rate, notional, side, currency)
must be given explicitly; missing inputs raise ValueNotSetError naming the
field.

Cashflow order of a built instrument:
- Bullet / EqualRedemptions / Zero: disbursement, coupons, redemptions
- EqualPayments: coupons, disbursement, redemptions (and capitalisations)
- Other: disbursements, coupons, redemptions
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple
import logging

from ..cashflows import Cashflow, CashflowType, FixedRateCoupon
from ..conventions import Frequency, Side
from ..currencies import Currency
from ..errors import InvalidValueError, ValueNotSetError
from ..interest_rate import InterestRate, RateDefinition
from .base import (
    Instrument,
    RateType,
    Structure,
    calculate_equal_payment_redemptions,
    outstanding_after,
    principal_amounts,
    principal_cashflows,
    resolve_end_date,
)
from .builder import InstrumentBuilder

logger = logging.getLogger(__name__)


class FixedRateInstrument(Instrument):
    """
    Instrument whose coupons all pay the same InterestRate.

    Attributes:
        rate: Coupon rate
    """

    rate_type = RateType.FIXED

    def __init__(
        self,
        cashflows: List[Cashflow],
        start_date: date,
        end_date: date,
        notional: float,
        rate: InterestRate,
        currency: Currency,
        side: Side,
        structure: Structure,
        payment_frequency: Frequency,
        discount_curve_id: Optional[int] = None,
        id: Optional[str] = None,
        issue_date: Optional[date] = None
    ):
        super().__init__(cashflows, start_date, end_date, notional, currency, side, structure,
                         payment_frequency, discount_curve_id, id, issue_date)
        self.rate = rate

    def set_rate(self, rate: InterestRate) -> None:
        """Rebind the rate of every coupon. Principal cashflows are unchanged."""
        self.rate = rate
        for cf in self.cashflows:
            if cf.cashflow_type == CashflowType.FIXED_RATE_COUPON:
                cf.set_rate(rate)

    def set_rate_value(self, value: float) -> None:
        self.set_rate(self.rate.with_rate(value))


def fixed_coupons(
    periods: List[Tuple[date, date]],
    notionals: List[float],
    rate: InterestRate,
    side: Side,
    currency: Currency
) -> List[Cashflow]:
    """One coupon per (start, end) period, paid at the period end."""
    if len(periods) != len(notionals):
        raise InvalidValueError(f"{len(periods)} periods but {len(notionals)} notionals")
    return [
        FixedRateCoupon(notional, rate, d1, d2, d2, currency, side)
        for (d1, d2), notional in zip(periods, notionals)
    ]


@dataclass
class MakeFixedRateInstrument(InstrumentBuilder):
    """
    Builder for FixedRateInstrument.

    The rate is either a full InterestRate (with_rate) or a value plus a
    RateDefinition (with_rate_value, with_rate_definition); a value or a
    definition given on top of a rate overrides that part of it.

    Example:
        >>> instrument = (MakeFixedRateInstrument()
        ...               .with_start_date(date(2020, 1, 1))
        ...               .with_end_date(date(2025, 1, 1))
        ...               .with_rate(InterestRate(0.05))
        ...               .with_payment_frequency(Frequency.SEMIANNUAL)
        ...               .with_notional(100.0)
        ...               .with_side(Side.RECEIVE)
        ...               .with_currency(Currency.USD)
        ...               .bullet()
        ...               .build())
    """
    rate: Optional[InterestRate] = None
    rate_definition: Optional[RateDefinition] = None
    rate_value: Optional[float] = None

    def with_rate(self, rate: InterestRate) -> "MakeFixedRateInstrument":
        self.rate = rate
        return self

    def with_rate_definition(self, rate_definition: RateDefinition) -> "MakeFixedRateInstrument":
        self.rate_definition = rate_definition
        return self

    def with_rate_value(self, rate_value: float) -> "MakeFixedRateInstrument":
        self.rate_value = rate_value
        return self

    def _resolve_rate(self) -> InterestRate:
        if self.rate is not None:
            rate = self.rate
            if self.rate_definition is not None:
                rate = InterestRate(rate.rate, self.rate_definition)
            if self.rate_value is not None:
                rate = rate.with_rate(self.rate_value)
            return rate
        if self.rate_value is None:
            raise ValueNotSetError("rate")
        if self.rate_definition is None:
            raise ValueNotSetError("rate_definition")
        return InterestRate(self.rate_value, self.rate_definition)

    def _equal_payments(
        self,
        rate: InterestRate,
        frequency: Frequency,
        side: Side,
        currency: Currency
    ) -> Tuple[List[Cashflow], date, date, float]:
        if self.redemptions is not None:
            disbursements = self._required("disbursements")
            if len(disbursements) != 1:
                raise InvalidValueError("Equal payments support exactly one disbursement")
            dates = sorted(set(disbursements) | set(self.redemptions))
            start_date, notional = next(iter(disbursements.items()))
            if start_date != dates[0]:
                raise InvalidValueError("The disbursement must precede every redemption")
            end_date = dates[-1]
        else:
            start_date = self._required("start_date")
            end_date = resolve_end_date(start_date, self.end_date, self.tenor)
            dates = self._schedule_dates(start_date, end_date, frequency)
            notional = self._required("notional")

        redemptions = calculate_equal_payment_redemptions(dates, rate, notional)
        notionals = outstanding_after(notional, redemptions)

        cashflows = fixed_coupons(list(zip(dates[:-1], dates[1:])), notionals, rate, side, currency)
        cashflows += principal_cashflows([dates[0]], [notional], side.inverse(), currency,
                                         CashflowType.DISBURSEMENT)
        for d, k in zip(dates[1:], redemptions):
            if k >= 0.0:
                cashflows += principal_cashflows([d], [k], side, currency, CashflowType.REDEMPTION)
            else:
                cashflows += principal_cashflows([d], [-k], side.inverse(), currency,
                                                 CashflowType.DISBURSEMENT)
        return cashflows, start_date, end_date, notional

    def _build_cashflows(self) -> dict:
        """
        Generate the cashflows and the resolved terms.

        Returns:
            Keyword arguments shared by FixedRateInstrument and Leg
        """
        structure = self._required("structure")
        rate = self._resolve_rate()
        frequency = self._frequency(structure)
        side = self._required("side")
        currency = self._required("currency")

        if structure == Structure.EQUAL_PAYMENTS:
            cashflows, start_date, end_date, notional = self._equal_payments(rate, frequency, side, currency)
        else:
            cashflows, start_date, end_date, notional = self._principal_structure(
                structure, frequency, side, currency,
                lambda periods, notionals: fixed_coupons(periods, notionals, rate, side, currency),
            )
        self._apply_curve_ids(cashflows)

        logger.debug("Built %s fixed rate cashflows (%s)", len(cashflows), structure.value)
        return dict(
            cashflows=cashflows,
            start_date=start_date,
            end_date=end_date,
            notional=notional,
            rate=rate,
            currency=currency,
            side=side,
            structure=structure,
            payment_frequency=frequency,
            discount_curve_id=self.discount_curve_id,
        )

    def build(self) -> FixedRateInstrument:
        """
        Build the instrument.

        Raises:
            ValueNotSetError: If a required input is missing
            InvalidValueError: For inconsistent inputs (unbalanced principal,
                first coupon date not after start date)
            EvaluationError: If the equal payment solve fails
        """
        terms = self._build_cashflows()
        return FixedRateInstrument(id=self.id, issue_date=self.issue_date, **terms)

    @classmethod
    def from_instrument(cls, instrument: FixedRateInstrument) -> "MakeFixedRateInstrument":
        """
        Builder reproducing an instrument as an Other structure.

        Principal cashflows become the disbursement and redemption maps and
        coupon boundaries become additional coupon dates.
        """
        disbursements, redemptions, coupon_dates = principal_amounts(instrument.cashflows)
        return (cls()
                .with_rate(instrument.rate)
                .with_currency(instrument.currency)
                .with_side(instrument.side)
                .with_discount_curve_id(instrument.discount_curve_id)
                .with_disbursements(disbursements)
                .with_redemptions(redemptions)
                .with_additional_coupon_dates(coupon_dates)
                .with_id(instrument.id)
                .with_issue_date(instrument.issue_date)
                .other())


__all__ = [
    "FixedRateInstrument",
    "MakeFixedRateInstrument",
    "fixed_coupons",
]
