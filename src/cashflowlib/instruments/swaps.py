"""
Swaps built from two legs.

The swap owns the concatenation of both legs' cashflows (first leg first).
The legs keep references to the same cashflow objects, so ids assigned to
the swap by an indexing visitor are visible from each leg as well.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterator, List, Optional

import pandas as pd

from ..calendars import Calendar
from ..cashflows import Cashflow
from ..conventions import BusinessDayConvention, DateGenerationRule, Frequency, Side
from ..currencies import Currency
from ..dates import Period
from ..errors import ValueNotSetError
from ..interest_rate import InterestRate, RateDefinition
from .legs import Leg, MakeFixedRateLeg, MakeFloatingRateLeg


class Swap:
    """
    Two legs and their merged cashflow list.

    Attributes:
        first_leg: Leg whose cashflows come first
        second_leg: Leg whose cashflows follow
        cashflows: first_leg.cashflows + second_leg.cashflows
        id: Free-form identifier
    """

    def __init__(self, first_leg: Leg, second_leg: Leg, id: Optional[str] = None):
        self.first_leg = first_leg
        self.second_leg = second_leg
        self.cashflows: List[Cashflow] = list(first_leg.cashflows) + list(second_leg.cashflows)
        self.id = id

    def __iter__(self) -> Iterator[Cashflow]:
        return iter(self.cashflows)

    def __len__(self) -> int:
        return len(self.cashflows)

    def to_dataframe(self) -> pd.DataFrame:
        """Cashflow table with a `leg` column (1 or 2)."""
        frames = []
        for number, leg in ((1, self.first_leg), (2, self.second_leg)):
            frame = leg.to_dataframe()
            frame.insert(0, "leg", number)
            frames.append(frame)
        return pd.concat(frames, ignore_index=True)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(first_leg={self.first_leg!r}, second_leg={self.second_leg!r})"


class FixFloatSwap(Swap):
    """
    Swap of a fixed leg (first) against a floating leg (second).

    Attributes:
        fixed_rate: Rate of the fixed leg
        spread: Spread of the floating leg
    """

    def __init__(
        self,
        fixed_leg: Leg,
        floating_leg: Leg,
        fixed_rate: InterestRate,
        spread: float,
        id: Optional[str] = None
    ):
        super().__init__(fixed_leg, floating_leg, id)
        self.fixed_rate = fixed_rate
        self.spread = spread

    @property
    def fixed_leg(self) -> Leg:
        return self.first_leg

    @property
    def floating_leg(self) -> Leg:
        return self.second_leg


@dataclass
class MakeSwap:
    """Composes two already built legs into a Swap."""
    first_leg: Optional[Leg] = None
    second_leg: Optional[Leg] = None
    id: Optional[str] = None

    def with_first_leg(self, leg: Leg) -> "MakeSwap":
        self.first_leg = leg
        return self

    def with_second_leg(self, leg: Leg) -> "MakeSwap":
        self.second_leg = leg
        return self

    def with_id(self, id: Optional[str]) -> "MakeSwap":
        self.id = id
        return self

    def build(self) -> Swap:
        """
        Raises:
            ValueNotSetError: If either leg is missing
        """
        if self.first_leg is None:
            raise ValueNotSetError("first_leg")
        if self.second_leg is None:
            raise ValueNotSetError("second_leg")
        return Swap(self.first_leg, self.second_leg, self.id)


@dataclass
class MakeFixFloatSwap:
    """
    Builder for a bullet fixed-against-floating swap.

    `side` is the side of the fixed leg; the floating leg takes the other
    side. Each leg has its own payment frequency and both share the dates,
    notional, currency and discount curve.
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tenor: Optional[Period] = None
    notional: Optional[float] = None
    currency: Optional[Currency] = None
    side: Optional[Side] = None
    fixed_rate: Optional[InterestRate] = None
    fixed_leg_frequency: Optional[Frequency] = None
    spread: Optional[float] = None
    rate_definition: Optional[RateDefinition] = None
    floating_leg_frequency: Optional[Frequency] = None
    discount_curve_id: Optional[int] = None
    forecast_curve_id: Optional[int] = None
    calendar: Optional[Calendar] = None
    business_day_convention: Optional[BusinessDayConvention] = None
    date_generation_rule: Optional[DateGenerationRule] = None
    id: Optional[str] = None

    def with_start_date(self, start_date: date) -> "MakeFixFloatSwap":
        self.start_date = start_date
        return self

    def with_end_date(self, end_date: date) -> "MakeFixFloatSwap":
        self.end_date = end_date
        return self

    def with_tenor(self, tenor: Period) -> "MakeFixFloatSwap":
        self.tenor = tenor
        return self

    def with_notional(self, notional: float) -> "MakeFixFloatSwap":
        self.notional = notional
        return self

    def with_currency(self, currency: Currency) -> "MakeFixFloatSwap":
        self.currency = currency
        return self

    def with_side(self, side: Side) -> "MakeFixFloatSwap":
        self.side = side
        return self

    def with_fixed_rate(self, rate: InterestRate) -> "MakeFixFloatSwap":
        self.fixed_rate = rate
        return self

    def with_fixed_leg_frequency(self, frequency: Frequency) -> "MakeFixFloatSwap":
        self.fixed_leg_frequency = frequency
        return self

    def with_spread(self, spread: float) -> "MakeFixFloatSwap":
        self.spread = spread
        return self

    def with_rate_definition(self, rate_definition: RateDefinition) -> "MakeFixFloatSwap":
        self.rate_definition = rate_definition
        return self

    def with_floating_leg_frequency(self, frequency: Frequency) -> "MakeFixFloatSwap":
        self.floating_leg_frequency = frequency
        return self

    def with_discount_curve_id(self, curve_id: Optional[int]) -> "MakeFixFloatSwap":
        self.discount_curve_id = curve_id
        return self

    def with_forecast_curve_id(self, curve_id: Optional[int]) -> "MakeFixFloatSwap":
        self.forecast_curve_id = curve_id
        return self

    def with_calendar(self, calendar: Optional[Calendar]) -> "MakeFixFloatSwap":
        self.calendar = calendar
        return self

    def with_business_day_convention(self, convention: Optional[BusinessDayConvention]) -> "MakeFixFloatSwap":
        self.business_day_convention = convention
        return self

    def with_date_generation_rule(self, rule: Optional[DateGenerationRule]) -> "MakeFixFloatSwap":
        self.date_generation_rule = rule
        return self

    def with_id(self, id: Optional[str]) -> "MakeFixFloatSwap":
        self.id = id
        return self

    def build(self) -> FixFloatSwap:
        """
        Raises:
            ValueNotSetError: If a required input of either leg is missing
        """
        if self.fixed_rate is None:
            raise ValueNotSetError("fixed_rate")
        if self.side is None:
            raise ValueNotSetError("side")

        def common(builder):
            return (builder
                    .with_start_date(self.start_date)
                    .with_end_date(self.end_date)
                    .with_tenor(self.tenor)
                    .with_notional(self.notional)
                    .with_currency(self.currency)
                    .with_discount_curve_id(self.discount_curve_id)
                    .with_calendar(self.calendar)
                    .with_business_day_convention(self.business_day_convention)
                    .with_date_generation_rule(self.date_generation_rule)
                    .bullet())

        fixed_leg = (common(MakeFixedRateLeg())
                     .with_rate(self.fixed_rate)
                     .with_payment_frequency(self.fixed_leg_frequency)
                     .with_side(self.side)
                     .build())
        floating_leg = (common(MakeFloatingRateLeg())
                        .with_spread(self.spread)
                        .with_rate_definition(self.rate_definition)
                        .with_forecast_curve_id(self.forecast_curve_id)
                        .with_payment_frequency(self.floating_leg_frequency)
                        .with_side(self.side.inverse())
                        .build())
        return FixFloatSwap(fixed_leg, floating_leg, self.fixed_rate, self.spread, self.id)


__all__ = [
    "Swap",
    "FixFloatSwap",
    "MakeSwap",
    "MakeFixFloatSwap",
]
