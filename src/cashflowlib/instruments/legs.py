"""
Swap legs.

A Leg is the cashflow list of one side of a swap together with the terms
it was built from. The leg builders reuse the instrument builders and only
change the container they return.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

import pandas as pd

from ..cashflows import Cashflow
from ..conventions import Side
from ..currencies import Currency
from ..interest_rate import RateDefinition
from .base import RateType, Structure
from .fixed import MakeFixedRateInstrument
from .floating import MakeFloatingRateInstrument


class Leg:
    """
    One leg of a swap.

    Attributes:
        cashflows: Owned cashflows
        structure: Redemption profile of the leg
        rate_type: FIXED or FLOATING
        rate_value: Fixed rate or spread
        rate_definition: Conventions of the rate
        currency: Currency of the leg
        side: Side of the coupons
        discount_curve_id: Index id used for discounting
        forecast_curve_id: Index id supplying fixings (floating legs)
    """

    def __init__(
        self,
        cashflows: List[Cashflow],
        structure: Structure,
        rate_type: RateType,
        rate_value: float,
        rate_definition: RateDefinition,
        currency: Currency,
        side: Side,
        discount_curve_id: Optional[int] = None,
        forecast_curve_id: Optional[int] = None
    ):
        self.cashflows = cashflows
        self.structure = structure
        self.rate_type = rate_type
        self.rate_value = rate_value
        self.rate_definition = rate_definition
        self.currency = currency
        self.side = side
        self.discount_curve_id = discount_curve_id
        self.forecast_curve_id = forecast_curve_id

    def __iter__(self) -> Iterator[Cashflow]:
        return iter(self.cashflows)

    def __len__(self) -> int:
        return len(self.cashflows)

    def clear(self) -> None:
        self.cashflows.clear()

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([cf.to_dict() for cf in self.cashflows])

    def __repr__(self) -> str:
        return (f"Leg(rate_type={self.rate_type.value}, rate_value={self.rate_value}, "
                f"side={self.side.value}, cashflows={len(self.cashflows)})")


@dataclass
class MakeFixedRateLeg(MakeFixedRateInstrument):
    """Builds the cashflows of a fixed rate instrument into a Leg."""

    def build(self) -> Leg:
        terms = self._build_cashflows()
        rate = terms["rate"]
        return Leg(
            cashflows=terms["cashflows"],
            structure=terms["structure"],
            rate_type=RateType.FIXED,
            rate_value=rate.rate,
            rate_definition=rate.rate_definition,
            currency=terms["currency"],
            side=terms["side"],
            discount_curve_id=terms["discount_curve_id"],
        )


@dataclass
class MakeFloatingRateLeg(MakeFloatingRateInstrument):
    """Builds the cashflows of a floating rate instrument into a Leg."""

    def build(self) -> Leg:
        terms = self._build_cashflows()
        return Leg(
            cashflows=terms["cashflows"],
            structure=terms["structure"],
            rate_type=RateType.FLOATING,
            rate_value=terms["spread"],
            rate_definition=terms["rate_definition"],
            currency=terms["currency"],
            side=terms["side"],
            discount_curve_id=terms["discount_curve_id"],
            forecast_curve_id=terms["forecast_curve_id"],
        )


__all__ = [
    "Leg",
    "MakeFixedRateLeg",
    "MakeFloatingRateLeg",
]
