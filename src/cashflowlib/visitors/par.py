"""
Par value solver.

The par value is the coupon rate (fixed coupons) or spread (floating
coupons) that makes the NPV of an instrument zero, cashflows paid on the
reference date included. The search runs on a deep copy of the cashflows,
keeping their ids, so the MarketData produced for the original instrument
is reused as is.

Double rate instruments are split at the change date into two
self-contained parts, each closed by the outstanding notional at the
change date, and each part is solved on its own.
"""

from copy import deepcopy
from typing import Any, List, Sequence, Tuple, Union
import logging

from ..cashflows import Cashflow, CashflowType, Disbursement, Redemption
from ..errors import NotFoundError, NotSupportedError
from ..instruments import DoubleRateInstrument, Structure
from ..market_data import MarketData
from ..solvers import MAX_ITERATIONS, TOLERANCE, brent_root
from .base import ConstVisitor, cashflows_of
from .indexing import FixingVisitor
from .npv import NPVConstVisitor

logger = logging.getLogger(__name__)

PAR_BRACKET = (-1.0, 1.0)
EQUAL_PAYMENTS_PAR_BRACKET = (-0.7, 0.7)


class ParValueConstVisitor(ConstVisitor):
    """
    Rate value making the NPV of an indexed instrument zero.

    Fixed coupons have their rate value solved; floating coupons keep their
    spread in that case. Without fixed coupons the floating spread is
    solved instead. Double rate instruments return one value per part.

    Attributes:
        market_data: Nodes indexed by cashflow id
    """

    def __init__(self, market_data: Sequence[MarketData]):
        self.market_data = market_data
        self._npv = NPVConstVisitor(market_data, include_today_cashflows=True)
        self._fixing = FixingVisitor(market_data)

    def visit(self, visitable: Any) -> Union[float, Tuple[float, float]]:
        """
        Args:
            visitable: Indexed instrument, leg, swap or DoubleRateInstrument

        Returns:
            The par value, or (first part, second part) for a double rate instrument

        Raises:
            NotSupportedError: If there are no coupons to solve for
            EvaluationError: If no root lies in the search bracket
        """
        if isinstance(visitable, DoubleRateInstrument):
            return self._visit_double_rate(visitable)

        bracket = PAR_BRACKET
        if getattr(visitable, "structure", None) == Structure.EQUAL_PAYMENTS:
            bracket = EQUAL_PAYMENTS_PAR_BRACKET
        return self._solve(deepcopy(list(cashflows_of(visitable))), bracket)

    def _solve(self, cashflows: List[Cashflow], bracket: Tuple[float, float]) -> float:
        fixed = [cf for cf in cashflows if cf.cashflow_type == CashflowType.FIXED_RATE_COUPON]
        floating = [cf for cf in cashflows if cf.cashflow_type == CashflowType.FLOATING_RATE_COUPON]
        if not fixed and not floating:
            raise NotSupportedError("Par value of an instrument without coupons")

        if floating:
            self._fixing.visit(cashflows)

        def objective(value: float) -> float:
            if fixed:
                for cf in fixed:
                    cf.set_rate_value(value)
            else:
                for cf in floating:
                    cf.set_spread(value)
            return self._npv.visit(cashflows)

        what = "par rate" if fixed else "par spread"
        return brent_root(objective, bracket[0], bracket[1], xtol=TOLERANCE, maxiter=MAX_ITERATIONS, what=what)

    def _visit_double_rate(self, instrument: DoubleRateInstrument) -> Tuple[float, float]:
        change_rate_date = instrument.change_rate_date
        cashflows = deepcopy(instrument.cashflows)
        first_part = [cf for cf in cashflows if cf.payment_date <= change_rate_date]
        second_part = [cf for cf in cashflows if cf.payment_date > change_rate_date]

        at_change = [cf for cf in first_part if cf.cashflow_type.is_coupon and cf.payment_date == change_rate_date]
        if not at_change:
            raise NotFoundError(f"coupon paid on the change rate date {change_rate_date}")
        anchor = at_change[0]

        notional = instrument.notional_at_change_rate
        first_part.append(Redemption(change_rate_date, instrument.currency, instrument.side, notional,
                                     anchor.discount_curve_id, anchor.id))
        second_part.append(Disbursement(change_rate_date, instrument.currency, instrument.side.inverse(), notional,
                                        anchor.discount_curve_id, anchor.id))

        first = self._solve(first_part, PAR_BRACKET)
        second = self._solve(second_part, PAR_BRACKET)
        logger.debug("Double rate par values: %s / %s", first, second)
        return first, second


__all__ = ["ParValueConstVisitor"]
