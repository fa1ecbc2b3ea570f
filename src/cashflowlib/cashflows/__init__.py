"""
Cashflows package - the cashflow algebra.

Provides:
- Cashflow / Coupon: abstract bases, CashflowType tag
- Disbursement, Redemption: principal movements
- FixedRateCoupon, FloatingRateCoupon: interest cashflows
"""

from .base import CashflowType, Cashflow, Coupon
from .simple import SimpleCashflow, Disbursement, Redemption
from .fixed import FixedRateCoupon
from .floating import FloatingRateCoupon

__all__ = [
    "CashflowType",
    "Cashflow",
    "Coupon",
    "SimpleCashflow",
    "Disbursement",
    "Redemption",
    "FixedRateCoupon",
    "FloatingRateCoupon",
]
