"""
Double rate instruments: one rate regime up to a change date, another after.

The principal amortises as a single equal-payment annuity over both parts,
computed with the rate of the fixed part (the first part for
FixedThenFixed and FixedThenFloating, the second for FloatingThenFixed).
An optional grace period moves the first coupon date of the first part.

Floating parts carry their rate value as the spread over the index, fixed
on the period start.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional
import logging

from ..cashflows import Cashflow, CashflowType
from ..conventions import Frequency, Side
from ..currencies import Currency
from ..dates import Period
from ..errors import InvalidValueError, NotSupportedError, ValueNotSetError
from ..interest_rate import InterestRate, RateDefinition
from .base import (
    Instrument,
    RateType,
    Structure,
    build_schedule,
    calculate_equal_payment_redemptions,
    outstanding_after,
    principal_cashflows,
    resolve_end_date,
)
from .builder import InstrumentBuilder
from .fixed import fixed_coupons
from .floating import floating_coupons

logger = logging.getLogger(__name__)

DOUBLE_RATE_TYPES = (RateType.FIXED_THEN_FIXED, RateType.FIXED_THEN_FLOATING, RateType.FLOATING_THEN_FIXED)


class DoubleRateInstrument(Instrument):
    """
    Instrument switching rate regime at change_rate_date.

    Cashflows paid on or before change_rate_date belong to the first part.

    Attributes:
        rate_type: One of FixedThenFixed, FixedThenFloating, FloatingThenFixed
        change_rate_date: Last payment date of the first part
        notional_at_change_rate: Outstanding entering the second part
        first_part_rate: Rate (fixed part) or spread (floating part)
        first_part_rate_definition: Conventions of the first part
        second_part_rate: Rate or spread of the second part
        second_part_rate_definition: Conventions of the second part
        forecast_curve_id: Index id for the floating part
    """

    def __init__(
        self,
        cashflows: List[Cashflow],
        start_date: date,
        end_date: date,
        notional: float,
        notional_at_change_rate: float,
        change_rate_date: date,
        rate_type: RateType,
        first_part_rate: float,
        first_part_rate_definition: RateDefinition,
        second_part_rate: float,
        second_part_rate_definition: RateDefinition,
        currency: Currency,
        side: Side,
        payment_frequency: Frequency,
        discount_curve_id: Optional[int] = None,
        forecast_curve_id: Optional[int] = None,
        id: Optional[str] = None,
        issue_date: Optional[date] = None
    ):
        super().__init__(cashflows, start_date, end_date, notional, currency, side,
                         Structure.EQUAL_PAYMENTS, payment_frequency, discount_curve_id, id, issue_date)
        self.notional_at_change_rate = notional_at_change_rate
        self.change_rate_date = change_rate_date
        self.rate_type = rate_type
        self.first_part_rate = first_part_rate
        self.first_part_rate_definition = first_part_rate_definition
        self.second_part_rate = second_part_rate
        self.second_part_rate_definition = second_part_rate_definition
        self.forecast_curve_id = forecast_curve_id

    def in_first_part(self, cf: Cashflow) -> bool:
        return cf.payment_date <= self.change_rate_date

    def _set_part_rate(self, value: float, first: bool) -> None:
        for cf in self.cashflows:
            if self.in_first_part(cf) != first:
                continue
            if cf.cashflow_type == CashflowType.FLOATING_RATE_COUPON:
                cf.set_spread(value)
            elif cf.cashflow_type == CashflowType.FIXED_RATE_COUPON:
                cf.set_rate_value(value)

    def set_first_rate(self, value: float) -> None:
        """Rate value (or spread) of every first part coupon."""
        self.first_part_rate = value
        self._set_part_rate(value, first=True)

    def set_second_rate(self, value: float) -> None:
        """Rate value (or spread) of every second part coupon."""
        self.second_part_rate = value
        self._set_part_rate(value, first=False)

    def set_rates(self, first: Optional[float] = None, second: Optional[float] = None) -> None:
        if first is not None:
            self.set_first_rate(first)
        if second is not None:
            self.set_second_rate(second)


@dataclass
class MakeDoubleRateInstrument(InstrumentBuilder):
    """
    Builder for DoubleRateInstrument.

    The change date is given directly or as a tenor from the start date.
    The grace period is given as a first coupon date or as a tenor from the
    start date. The structure is always EqualPayments.
    """
    rate_type: Optional[RateType] = None
    change_rate_date: Optional[date] = None
    tenor_change_rate: Optional[Period] = None
    tenor_grace_period: Optional[Period] = None
    first_part_rate: Optional[float] = None
    first_part_rate_definition: Optional[RateDefinition] = None
    second_part_rate: Optional[float] = None
    second_part_rate_definition: Optional[RateDefinition] = None
    forecast_curve_id: Optional[int] = None

    def with_rate_type(self, rate_type: RateType) -> "MakeDoubleRateInstrument":
        self.rate_type = rate_type
        return self

    def with_change_rate_date(self, change_rate_date: date) -> "MakeDoubleRateInstrument":
        self.change_rate_date = change_rate_date
        return self

    def with_tenor_change_rate(self, tenor: Period) -> "MakeDoubleRateInstrument":
        self.tenor_change_rate = tenor
        return self

    def with_tenor_grace_period(self, tenor: Period) -> "MakeDoubleRateInstrument":
        self.tenor_grace_period = tenor
        return self

    def with_first_part_rate(self, rate: float) -> "MakeDoubleRateInstrument":
        self.first_part_rate = rate
        return self

    def with_first_part_rate_definition(self, rate_definition: RateDefinition) -> "MakeDoubleRateInstrument":
        self.first_part_rate_definition = rate_definition
        return self

    def with_second_part_rate(self, rate: float) -> "MakeDoubleRateInstrument":
        self.second_part_rate = rate
        return self

    def with_second_part_rate_definition(self, rate_definition: RateDefinition) -> "MakeDoubleRateInstrument":
        self.second_part_rate_definition = rate_definition
        return self

    def with_forecast_curve_id(self, curve_id: Optional[int]) -> "MakeDoubleRateInstrument":
        self.forecast_curve_id = curve_id
        return self

    def _amortisation_rate(self, rate_type: RateType) -> InterestRate:
        if rate_type == RateType.FLOATING_THEN_FIXED:
            return InterestRate(self._required("second_part_rate"),
                                self._required("second_part_rate_definition"))
        return InterestRate(self._required("first_part_rate"),
                            self._required("first_part_rate_definition"))

    def _part_coupons(
        self,
        floating: bool,
        dates: List[date],
        notionals: List[float],
        rate: float,
        rate_definition: RateDefinition,
        side: Side,
        currency: Currency
    ) -> List[Cashflow]:
        periods = list(zip(dates[:-1], dates[1:]))
        if floating:
            return floating_coupons(periods, notionals, rate, rate_definition, side, currency,
                                    self.forecast_curve_id)
        return fixed_coupons(periods, notionals, InterestRate(rate, rate_definition), side, currency)

    def build(self) -> DoubleRateInstrument:
        """
        Build the instrument.

        Raises:
            ValueNotSetError: If a required input is missing
            NotSupportedError: For single-regime rate types
            InvalidValueError: If the grace period does not end after the start date
            EvaluationError: If the equal payment solve fails
        """
        rate_type = self._required("rate_type")
        if rate_type not in DOUBLE_RATE_TYPES:
            raise NotSupportedError(f"Rate type {rate_type.value} in a double rate instrument")
        amortisation_rate = self._amortisation_rate(rate_type)
        frequency = self._required("payment_frequency")
        currency = self._required("currency")
        side = self._required("side")
        notional = self._required("notional")
        start_date = self._required("start_date")
        end_date = resolve_end_date(start_date, self.end_date, self.tenor)

        if self.change_rate_date is not None:
            change_rate_date = self.change_rate_date
        elif self.tenor_change_rate is not None:
            change_rate_date = start_date + self.tenor_change_rate
        else:
            raise ValueNotSetError("change_rate_date")
        if not start_date < change_rate_date < end_date:
            raise InvalidValueError(
                f"Change rate date {change_rate_date} must fall strictly between {start_date} and {end_date}"
            )

        first_coupon_date = self.first_coupon_date
        if first_coupon_date is None and self.tenor_grace_period is not None:
            first_coupon_date = start_date + self.tenor_grace_period

        conventions = dict(
            calendar=self.calendar,
            convention=self.business_day_convention,
            rule=self.date_generation_rule,
            end_of_month=self.end_of_month,
        )
        first_dates = list(build_schedule(start_date, change_rate_date, frequency,
                                          first_coupon_date=first_coupon_date, **conventions).dates)
        second_dates = list(build_schedule(change_rate_date, end_date, frequency, **conventions).dates)
        dates = first_dates[:-1] + second_dates

        redemptions = calculate_equal_payment_redemptions(dates, amortisation_rate, notional)
        notionals = outstanding_after(notional, redemptions)
        n_first = len(first_dates) - 1
        first_notionals = notionals[:n_first]
        second_notionals = notionals[n_first:]

        first_part_rate = self._required("first_part_rate")
        first_part_rate_definition = self._required("first_part_rate_definition")
        second_part_rate = self._required("second_part_rate")
        second_part_rate_definition = self._required("second_part_rate_definition")

        cashflows = self._part_coupons(rate_type == RateType.FLOATING_THEN_FIXED, first_dates, first_notionals,
                                       first_part_rate, first_part_rate_definition, side, currency)
        cashflows += self._part_coupons(rate_type == RateType.FIXED_THEN_FLOATING, second_dates,
                                        second_notionals, second_part_rate, second_part_rate_definition,
                                        side, currency)
        cashflows += principal_cashflows([dates[0]], [notional], side.inverse(), currency,
                                         CashflowType.DISBURSEMENT)
        paid = [(d, k) for d, k in zip(dates[1:], redemptions) if k >= 0.0]
        capitalised = [(d, -k) for d, k in zip(dates[1:], redemptions) if k < 0.0]
        cashflows += principal_cashflows([d for d, _ in paid], [k for _, k in paid], side, currency,
                                         CashflowType.REDEMPTION)
        cashflows += principal_cashflows([d for d, _ in capitalised], [k for _, k in capitalised],
                                         side.inverse(), currency, CashflowType.DISBURSEMENT)
        self._apply_curve_ids(cashflows)

        logger.debug("Built double rate instrument (%s) with %s cashflows, change at %s",
                     rate_type.value, len(cashflows), change_rate_date)
        return DoubleRateInstrument(
            cashflows=cashflows,
            start_date=start_date,
            end_date=end_date,
            notional=notional,
            notional_at_change_rate=second_notionals[0],
            change_rate_date=change_rate_date,
            rate_type=rate_type,
            first_part_rate=first_part_rate,
            first_part_rate_definition=first_part_rate_definition,
            second_part_rate=second_part_rate,
            second_part_rate_definition=second_part_rate_definition,
            currency=currency,
            side=side,
            payment_frequency=frequency,
            discount_curve_id=self.discount_curve_id,
            forecast_curve_id=self.forecast_curve_id,
            id=self.id,
            issue_date=self.issue_date,
        )


__all__ = [
    "DoubleRateInstrument",
    "MakeDoubleRateInstrument",
]
