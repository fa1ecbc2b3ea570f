"""
Common base of the instrument builders.

InstrumentBuilder holds the inputs shared by fixed, floating and leg
builders (dates, schedule conventions, principal profile, curve ids) and
generates the principal structure around a coupon factory supplied by the
concrete builder.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..calendars import Calendar
from ..cashflows import Cashflow, CashflowType
from ..conventions import BusinessDayConvention, DateGenerationRule, Frequency, Side
from ..currencies import Currency
from ..dates import Period
from ..errors import InvalidValueError, ValueNotSetError
from .base import (
    Structure,
    build_schedule,
    calculate_outstanding,
    check_principal_balance,
    notionals_vector,
    principal_cashflows,
    resolve_end_date,
)

CouponFactory = Callable[[List[Tuple[date, date]], List[float]], List[Cashflow]]


@dataclass
class InstrumentBuilder:
    """
    Shared builder inputs and fluent setters.

    Unset conventions fall back to NullCalendar, Unadjusted and Backward.
    Financial quantities have no defaults.
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tenor: Optional[Period] = None
    first_coupon_date: Optional[date] = None
    payment_frequency: Optional[Frequency] = None
    currency: Optional[Currency] = None
    side: Optional[Side] = None
    notional: Optional[float] = None
    structure: Optional[Structure] = None
    discount_curve_id: Optional[int] = None
    disbursements: Optional[Dict[date, float]] = None
    redemptions: Optional[Dict[date, float]] = None
    additional_coupon_dates: Optional[Set[date]] = None
    calendar: Optional[Calendar] = None
    business_day_convention: Optional[BusinessDayConvention] = None
    date_generation_rule: Optional[DateGenerationRule] = None
    end_of_month: bool = False
    issue_date: Optional[date] = None
    id: Optional[str] = None

    def with_start_date(self, start_date: date):
        self.start_date = start_date
        return self

    def with_end_date(self, end_date: date):
        self.end_date = end_date
        return self

    def with_tenor(self, tenor: Period):
        self.tenor = tenor
        return self

    def with_first_coupon_date(self, first_coupon_date: Optional[date]):
        self.first_coupon_date = first_coupon_date
        return self

    def with_payment_frequency(self, frequency: Frequency):
        self.payment_frequency = frequency
        return self

    def with_currency(self, currency: Currency):
        self.currency = currency
        return self

    def with_side(self, side: Side):
        self.side = side
        return self

    def with_notional(self, notional: float):
        self.notional = notional
        return self

    def with_discount_curve_id(self, curve_id: Optional[int]):
        self.discount_curve_id = curve_id
        return self

    def with_disbursements(self, disbursements: Dict[date, float]):
        self.disbursements = dict(disbursements)
        return self

    def with_redemptions(self, redemptions: Dict[date, float]):
        self.redemptions = dict(redemptions)
        return self

    def with_additional_coupon_dates(self, dates: Set[date]):
        self.additional_coupon_dates = set(dates)
        return self

    def with_calendar(self, calendar: Optional[Calendar]):
        self.calendar = calendar
        return self

    def with_business_day_convention(self, convention: Optional[BusinessDayConvention]):
        self.business_day_convention = convention
        return self

    def with_date_generation_rule(self, rule: Optional[DateGenerationRule]):
        self.date_generation_rule = rule
        return self

    def with_end_of_month(self, flag: bool = True):
        self.end_of_month = flag
        return self

    def with_issue_date(self, issue_date: Optional[date]):
        self.issue_date = issue_date
        return self

    def with_id(self, id: Optional[str]):
        self.id = id
        return self

    def with_structure(self, structure: Structure):
        self.structure = structure
        return self

    def bullet(self):
        self.structure = Structure.BULLET
        return self

    def equal_redemptions(self):
        self.structure = Structure.EQUAL_REDEMPTIONS
        return self

    def equal_payments(self):
        self.structure = Structure.EQUAL_PAYMENTS
        return self

    def zero(self):
        self.structure = Structure.ZERO
        self.payment_frequency = Frequency.ONCE
        return self

    def other(self):
        self.structure = Structure.OTHER
        self.payment_frequency = Frequency.OTHER_FREQUENCY
        return self

    # ---- helpers for build() ----

    def _required(self, field_name: str):
        value = getattr(self, field_name)
        if value is None:
            raise ValueNotSetError(field_name)
        return value

    def _frequency(self, structure: Structure) -> Frequency:
        if structure == Structure.ZERO:
            return Frequency.ONCE
        if structure == Structure.OTHER:
            return self.payment_frequency or Frequency.OTHER_FREQUENCY
        if structure == Structure.EQUAL_PAYMENTS and self.redemptions is not None:
            # dates come from the principal maps
            return self.payment_frequency or Frequency.OTHER_FREQUENCY
        return self._required("payment_frequency")

    def _schedule_dates(self, start_date: date, end_date: date, frequency: Frequency) -> List[date]:
        schedule = build_schedule(
            start_date, end_date, frequency,
            calendar=self.calendar,
            convention=self.business_day_convention,
            rule=self.date_generation_rule,
            end_of_month=self.end_of_month,
            first_coupon_date=self.first_coupon_date,
        )
        return list(schedule.dates)

    def _principal_structure(
        self,
        structure: Structure,
        frequency: Frequency,
        side: Side,
        currency: Currency,
        coupons: CouponFactory
    ) -> Tuple[List[Cashflow], date, date, float]:
        """
        Cashflows of the Bullet, EqualRedemptions, Zero and Other profiles.

        Returns:
            (cashflows, start_date, end_date, notional)
        """
        if structure in (Structure.BULLET, Structure.EQUAL_REDEMPTIONS, Structure.ZERO):
            start_date = self._required("start_date")
            end_date = resolve_end_date(start_date, self.end_date, self.tenor)
            dates = self._schedule_dates(start_date, end_date, frequency)
            notional = self._required("notional")
            n = len(dates) - 1

            cashflows = principal_cashflows([dates[0]], [notional], side.inverse(), currency,
                                            CashflowType.DISBURSEMENT)
            cashflows += coupons(list(zip(dates[:-1], dates[1:])), notionals_vector(n, notional, structure))
            if structure == Structure.EQUAL_REDEMPTIONS:
                cashflows += principal_cashflows(dates[1:], [notional / n] * n, side, currency,
                                                 CashflowType.REDEMPTION)
            else:
                cashflows += principal_cashflows([dates[-1]], [notional], side, currency,
                                                 CashflowType.REDEMPTION)
            return cashflows, start_date, end_date, notional

        if structure == Structure.OTHER:
            disbursements = self._required("disbursements")
            redemptions = self._required("redemptions")
            check_principal_balance(disbursements, redemptions)
            timeline = calculate_outstanding(disbursements, redemptions, self.additional_coupon_dates or ())
            if not timeline:
                raise InvalidValueError("Principal events must span at least two dates")

            ordered_disbursements = sorted(disbursements.items())
            ordered_redemptions = sorted(redemptions.items())
            cashflows = principal_cashflows([d for d, _ in ordered_disbursements],
                                            [a for _, a in ordered_disbursements],
                                            side.inverse(), currency, CashflowType.DISBURSEMENT)
            cashflows += coupons([(d1, d2) for d1, d2, _ in timeline],
                                 [outstanding for _, _, outstanding in timeline])
            cashflows += principal_cashflows([d for d, _ in ordered_redemptions],
                                             [a for _, a in ordered_redemptions],
                                             side, currency, CashflowType.REDEMPTION)
            return cashflows, timeline[0][0], timeline[-1][1], sum(disbursements.values())

        raise InvalidValueError(f"{structure.value} is not a principal structure")

    def _apply_curve_ids(self, cashflows: List[Cashflow]) -> None:
        if self.discount_curve_id is not None:
            for cf in cashflows:
                cf.set_discount_curve_id(self.discount_curve_id)


__all__ = [
    "CouponFactory",
    "InstrumentBuilder",
]
