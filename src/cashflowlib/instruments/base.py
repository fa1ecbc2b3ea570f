"""
Instrument base types and the redemption-profile helpers shared by builders.

Provides:
- Structure: redemption profile of a built instrument
- RateType: how the coupon rate is set over the life of an instrument
- Instrument: container owning an ordered list of cashflows
- calculate_outstanding: outstanding timeline from principal events
- notionals_vector: per-period notionals for the schedule-driven profiles
- calculate_equal_payment_redemptions: annuity amortisation via Brent
- principal_cashflows / principal_amounts: principal legs to and from cashflows
"""

from copy import deepcopy
from datetime import date
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple
import logging

import pandas as pd

from ..calendars import Calendar, NullCalendar
from ..cashflows import Cashflow, CashflowType, Disbursement, Redemption
from ..conventions import BusinessDayConvention, DateGenerationRule, Frequency, Side
from ..currencies import Currency
from ..dates import Period
from ..errors import InvalidValueError, ValueNotSetError
from ..interest_rate import InterestRate
from ..schedule import MakeSchedule, Schedule
from ..solvers import MAX_ITERATIONS, TOLERANCE, brent_root

logger = logging.getLogger(__name__)

EQUAL_PAYMENT_BRACKET = (-0.2, 1.5)
PRINCIPAL_TOLERANCE = 1e-6


class Structure(Enum):
    """Redemption profile."""
    BULLET = "Bullet"
    EQUAL_REDEMPTIONS = "EqualRedemptions"
    ZERO = "Zero"
    EQUAL_PAYMENTS = "EqualPayments"
    OTHER = "Other"

    @classmethod
    def from_string(cls, s: str) -> "Structure":
        key = s.upper().replace(" ", "").replace("_", "")
        for member in cls:
            if member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown structure: {s}")


class RateType(Enum):
    """Rate regime of an instrument."""
    FIXED = "Fixed"
    FLOATING = "Floating"
    FIXED_THEN_FIXED = "FixedThenFixed"
    FIXED_THEN_FLOATING = "FixedThenFloating"
    FLOATING_THEN_FIXED = "FloatingThenFixed"

    @classmethod
    def from_string(cls, s: str) -> "RateType":
        key = s.upper().replace(" ", "").replace("_", "").replace("-", "")
        for member in cls:
            if member.name.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown rate type: {s}")


class Instrument:
    """
    A built instrument: an ordered cashflow list plus the terms it came from.

    The order of `cashflows` is the order analytic passes see them in, and
    therefore the order ids are assigned by the indexing visitor.

    Attributes:
        cashflows: Owned cashflows
        start_date: First accrual date
        end_date: Maturity
        notional: Initial notional
        currency: Currency of every cashflow
        side: Side of the coupons (principal moves the other way at start)
        structure: Redemption profile
        payment_frequency: Coupon frequency
        discount_curve_id: Index id used to discount every cashflow
        id: Free-form identifier
        issue_date: Optional issue date
    """

    rate_type = RateType.FIXED

    def __init__(
        self,
        cashflows: List[Cashflow],
        start_date: date,
        end_date: date,
        notional: float,
        currency: Currency,
        side: Side,
        structure: Structure,
        payment_frequency: Frequency,
        discount_curve_id: Optional[int] = None,
        id: Optional[str] = None,
        issue_date: Optional[date] = None
    ):
        self.cashflows = cashflows
        self.start_date = start_date
        self.end_date = end_date
        self.notional = notional
        self.currency = currency
        self.side = side
        self.structure = structure
        self.payment_frequency = payment_frequency
        self.discount_curve_id = discount_curve_id
        self.id = id
        self.issue_date = issue_date

    def __iter__(self) -> Iterator[Cashflow]:
        return iter(self.cashflows)

    def __len__(self) -> int:
        return len(self.cashflows)

    def coupons(self) -> List[Cashflow]:
        return [cf for cf in self.cashflows if cf.cashflow_type.is_coupon]

    def redemptions(self) -> List[Cashflow]:
        return [cf for cf in self.cashflows if cf.cashflow_type == CashflowType.REDEMPTION]

    def disbursements(self) -> List[Cashflow]:
        return [cf for cf in self.cashflows if cf.cashflow_type == CashflowType.DISBURSEMENT]

    def accrued_amount(self, start: date, end: date) -> float:
        """
        Unsigned interest accrued by every coupon over [start, end].

        Raises:
            ValueNotSetError: If an unfixed floating coupon accrues in the window
        """
        return sum((cf.accrued_amount(start, end) for cf in self.coupons()), 0.0)

    def set_discount_curve_id(self, curve_id: int) -> None:
        """Point the instrument and all of its cashflows at a discount curve."""
        self.discount_curve_id = curve_id
        for cf in self.cashflows:
            cf.set_discount_curve_id(curve_id)

    def clone(self) -> "Instrument":
        """Deep copy, cashflow ids included."""
        return deepcopy(self)

    def to_dataframe(self) -> pd.DataFrame:
        """
        Cashflow table, one row per cashflow in list order.

        Amounts of unfixed floating coupons are missing values.
        """
        return pd.DataFrame([cf.to_dict() for cf in self.cashflows])

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(start_date={self.start_date}, end_date={self.end_date}, "
                f"notional={self.notional}, structure={self.structure.value}, "
                f"cashflows={len(self.cashflows)})")


# =============================================================================
# Schedule helpers
# =============================================================================

def resolve_end_date(start_date: date, end_date: Optional[date], tenor: Optional[Period]) -> date:
    """
    Raises:
        ValueNotSetError: If neither end_date nor tenor is given
    """
    if end_date is not None:
        return end_date
    if tenor is None:
        raise ValueNotSetError("tenor")
    return start_date + tenor


def build_schedule(
    start_date: date,
    end_date: date,
    frequency: Frequency,
    calendar: Optional[Calendar] = None,
    convention: Optional[BusinessDayConvention] = None,
    rule: Optional[DateGenerationRule] = None,
    end_of_month: bool = False,
    first_coupon_date: Optional[date] = None
) -> Schedule:
    """
    Coupon schedule with the builders' defaults (Null, Unadjusted, Backward).

    Raises:
        InvalidValueError: If first_coupon_date is not after start_date
    """
    builder = (MakeSchedule(start_date, end_date)
               .with_frequency(frequency)
               .with_calendar(calendar if calendar is not None else NullCalendar())
               .with_convention(convention or BusinessDayConvention.UNADJUSTED)
               .with_rule(rule or DateGenerationRule.BACKWARD)
               .with_end_of_month(end_of_month))
    if first_coupon_date is not None:
        if first_coupon_date <= start_date:
            raise InvalidValueError(
                f"First coupon date {first_coupon_date} must be after start date {start_date}"
            )
        builder.with_first_date(first_coupon_date)
    return builder.build()


# =============================================================================
# Redemption profile helpers
# =============================================================================

def calculate_outstanding(
    disbursements: Dict[date, float],
    redemptions: Dict[date, float],
    additional_dates: Iterable[date] = ()
) -> List[Tuple[date, date, float]]:
    """
    Outstanding notional per period from principal events.

    Disbursements add to the outstanding, redemptions subtract, additional
    dates only split periods. The outstanding of each period is the running
    total of all events strictly before its end.

    Returns:
        List of (period_start, period_end, outstanding)
    """
    timeline: Dict[date, float] = dict(disbursements)
    for d, amount in redemptions.items():
        timeline[d] = timeline.get(d, 0.0) - amount
    for d in additional_dates:
        timeline.setdefault(d, 0.0)

    events = sorted(timeline.items())
    if not events:
        return []

    outstanding = []
    period_start, current = events[0]
    for period_end, amount in events[1:]:
        outstanding.append((period_start, period_end, current))
        current += amount
        period_start = period_end
    return outstanding


def notionals_vector(n: int, notional: float, structure: Structure) -> List[float]:
    """
    Notional of each of the n coupon periods.

    - Bullet: constant
    - EqualRedemptions: notional - i * notional / n
    - Zero: one period
    Other profiles derive notionals from their redemptions and get [].
    """
    if structure == Structure.BULLET:
        return [notional] * n
    if structure == Structure.EQUAL_REDEMPTIONS:
        step = notional / n
        return [notional - i * step for i in range(n)]
    if structure == Structure.ZERO:
        return [notional]
    return []


def equal_payment_cost(payment: float, dates: List[date], rate: InterestRate) -> float:
    """Outstanding left on a unit notional after paying `payment` on every date."""
    outstanding = 1.0
    for d1, d2 in zip(dates[:-1], dates[1:]):
        interest = outstanding * (rate.compound_factor(d1, d2) - 1.0)
        outstanding -= payment - interest
    return outstanding


def calculate_equal_payment_redemptions(
    dates: List[date],
    rate: InterestRate,
    notional: float
) -> List[float]:
    """
    Redemptions of an annuity paying the same total on every date.

    The unit payment p solves equal_payment_cost(p) = 0 on [-0.2, 1.5].
    Each redemption is the payment less the interest on the outstanding;
    a negative redemption means capitalised interest.

    Args:
        dates: Sorted timeline, first date is the disbursement
        rate: Coupon rate (also used to amortise)
        notional: Initial outstanding

    Returns:
        One redemption per period (len(dates) - 1 values)

    Raises:
        EvaluationError: If no payment balances the schedule
    """
    lower, upper = EQUAL_PAYMENT_BRACKET
    unit_payment = brent_root(
        lambda p: equal_payment_cost(p, dates, rate),
        lower, upper,
        xtol=TOLERANCE,
        maxiter=MAX_ITERATIONS,
        what="equal payment",
    )
    payment = unit_payment * notional

    redemptions = []
    outstanding = notional
    for d1, d2 in zip(dates[:-1], dates[1:]):
        interest = outstanding * (rate.compound_factor(d1, d2) - 1.0)
        k = payment - interest
        outstanding -= k
        redemptions.append(k)
    logger.debug("Equal payment %s over %s periods", payment, len(redemptions))
    return redemptions


def outstanding_after(notional: float, redemptions: List[float]) -> List[float]:
    """Outstanding at the start of each period given per-period redemptions."""
    notionals = []
    outstanding = notional
    for k in redemptions:
        notionals.append(outstanding)
        outstanding -= k
    return notionals


def check_principal_balance(disbursements: Dict[date, float], redemptions: Dict[date, float]) -> None:
    """
    Raises:
        InvalidValueError: If total disbursed and total redeemed differ in absolute value
    """
    disbursed = sum(abs(a) for a in disbursements.values())
    redeemed = sum(abs(a) for a in redemptions.values())
    if abs(disbursed - redeemed) > PRINCIPAL_TOLERANCE:
        raise InvalidValueError(
            f"Disbursements ({disbursed}) and redemptions ({redeemed}) must add up to the same amount"
        )


def principal_cashflows(
    dates: List[date],
    amounts: List[float],
    side: Side,
    currency: Currency,
    cashflow_type: CashflowType
) -> List[Cashflow]:
    """One Disbursement or Redemption per (date, amount) pair."""
    if cashflow_type == CashflowType.DISBURSEMENT:
        cls = Disbursement
    elif cashflow_type == CashflowType.REDEMPTION:
        cls = Redemption
    else:
        raise InvalidValueError(f"{cashflow_type.value} is not a principal cashflow")
    return [cls(d, currency, side, amount=a) for d, a in zip(dates, amounts)]


def principal_amounts(cashflows: Iterable[Cashflow]) -> Tuple[Dict[date, float], Dict[date, float], Set[date]]:
    """
    Principal events and coupon boundaries of a cashflow list.

    Returns:
        (disbursements by date, redemptions by date, coupon accrual dates)
    """
    disbursements: Dict[date, float] = {}
    redemptions: Dict[date, float] = {}
    coupon_dates: Set[date] = set()
    for cf in cashflows:
        if cf.cashflow_type == CashflowType.DISBURSEMENT:
            disbursements[cf.payment_date] = disbursements.get(cf.payment_date, 0.0) + cf.amount()
        elif cf.cashflow_type == CashflowType.REDEMPTION:
            redemptions[cf.payment_date] = redemptions.get(cf.payment_date, 0.0) + cf.amount()
        else:
            coupon_dates.add(cf.accrual_start)
            coupon_dates.add(cf.accrual_end)
    return disbursements, redemptions, coupon_dates


__all__ = [
    "Structure",
    "RateType",
    "Instrument",
    "resolve_end_date",
    "build_schedule",
    "calculate_outstanding",
    "notionals_vector",
    "equal_payment_cost",
    "calculate_equal_payment_redemptions",
    "outstanding_after",
    "check_principal_balance",
    "principal_cashflows",
    "principal_amounts",
]
