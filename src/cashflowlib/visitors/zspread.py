"""
Z-spread: the flat spread over the zero rates implied by the discount
factors that reprices the cashflows to a target value.

For each cashflow paid at t (in years under the chosen rate definition),
the zero rate r is implied from 1 / df, and the cashflow is discounted
with (r + z) under the same definition. Disbursements are left out and
amounts are taken in their own currency.
"""

from typing import Any, Sequence

from ..cashflows import Cashflow, CashflowType
from ..interest_rate import InterestRate, RateDefinition
from ..market_data import MarketData
from ..solvers import MAX_ITERATIONS, TOLERANCE, brent_root
from .base import MarketDataConstVisitor, cashflows_of

Z_SPREAD_BRACKET = (-1.0, 1.0)


class ZSpreadConstVisitor(MarketDataConstVisitor):
    """
    Attributes:
        rate_definition: Conventions of the zero rates and of the spread
        target: Value the spread-discounted cashflows must sum to
    """

    def __init__(self, market_data: Sequence[MarketData], rate_definition: RateDefinition, target: float):
        super().__init__(market_data)
        self.rate_definition = rate_definition
        self.target = target

    def spreaded_npv(self, visitable: Any, spread: float) -> float:
        """Value of the non-disbursement cashflows discounted at zero rate + spread."""
        return sum((self._cashflow_npv(cf, spread) for cf in cashflows_of(visitable)
                    if cf.cashflow_type != CashflowType.DISBURSEMENT), 0.0)

    def _cashflow_npv(self, cf: Cashflow, spread: float) -> float:
        data = self.data_for(cf)
        t = self.rate_definition.year_fraction(data.reference_date, cf.payment_date)
        if t < 0.0:
            return 0.0
        rd = self.rate_definition
        zero_rate = InterestRate.implied_rate(1.0 / data.discount_factor(), rd.day_count, rd.compounding,
                                              rd.frequency, t, rd.calendar)
        composite = InterestRate(zero_rate.rate + spread, rd)
        return cf.amount() * cf.side.sign / composite.compound_factor_from_yf(t)

    def visit(self, visitable: Any) -> float:
        """
        Raises:
            EvaluationError: If no spread in [-1, 1] matches the target
            InterestRateError: If a discount factor is not positive
        """
        return brent_root(lambda z: self.spreaded_npv(visitable, z) - self.target,
                          Z_SPREAD_BRACKET[0], Z_SPREAD_BRACKET[1],
                          xtol=TOLERANCE, maxiter=MAX_ITERATIONS, what="z-spread")


__all__ = ["ZSpreadConstVisitor"]
