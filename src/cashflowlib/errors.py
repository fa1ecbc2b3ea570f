"""
Exception hierarchy for the cashflow engine.

Every failure raised by the library derives from CashflowLibError and,
where it makes sense, from the matching builtin so that callers catching
ValueError or LookupError keep working.

Kinds:
- InvalidValueError: inconsistent arguments
- ValueNotSetError: incomplete builder input or coupon amount before fixing
- NotFoundError: missing fixing, curve, index or exchange rate
- NotSupportedError: unsupported combination of inputs
- EvaluationError: root solver failures
- InterestRateError: compound factor / time preconditions of implied rates
- MarketRequestError: cashflow cannot describe the market data it needs
"""

from enum import Enum
from typing import Any, Optional


class CashflowLibError(Exception):
    """Base exception for all library errors."""


class InvalidValueError(CashflowLibError, ValueError):
    """Argument inconsistency (e.g. redemptions not matching disbursements)."""


class ValueNotSetError(CashflowLibError, ValueError):
    """A required value was never provided."""

    def __init__(self, field_name: str):
        self.field = field_name
        super().__init__(f"{field_name} not set")


class NotFoundError(CashflowLibError, LookupError):
    """A lookup (fixing, index, curve, exchange rate) failed."""

    def __init__(self, what: Any):
        self.what = what
        super().__init__(f"Not found: {what}")


class NotSupportedError(CashflowLibError, NotImplementedError):
    """The requested combination is not implemented."""


class EvaluationError(CashflowLibError, RuntimeError):
    """A numerical procedure did not converge or returned no parameter."""


class InterestRateErrorKind(Enum):
    """Preconditions of implied-rate inversion."""
    POSITIVE_COMPOUND_FACTOR = "Compound factor must be positive"
    NON_NEGATIVE_TIME = "Time must be non-negative"
    POSITIVE_TIME = "Time must be positive"


class InterestRateError(CashflowLibError, ValueError):
    """Implied rate cannot be computed for the given inputs."""

    def __init__(self, kind: InterestRateErrorKind, detail: Optional[str] = None):
        self.kind = kind
        message = kind.value if detail is None else f"{kind.value} ({detail})"
        super().__init__(message)


class MarketRequestErrorKind(Enum):
    """Reasons a market request cannot be built or resolved."""
    NO_REGISTRY_ID = "Cashflow has no registry id"
    NO_DISCOUNT_CURVE_ID = "Cashflow has no discount curve id"
    NO_FORECAST_CURVE_ID = "Cashflow has no forecast curve id"
    NO_DISCOUNT_REQUEST = "Market request has no discount factor request"
    NO_FORWARD_RATE_REQUEST = "Market request has no forward rate request"
    NO_FX_REQUEST = "Market request has no exchange rate request"


class MarketRequestError(CashflowLibError):
    """Market request could not be created or resolved."""

    def __init__(self, kind: MarketRequestErrorKind, detail: Optional[str] = None):
        self.kind = kind
        message = kind.value if detail is None else f"{kind.value} ({detail})"
        super().__init__(message)


class PeriodError(CashflowLibError, ValueError):
    """Invalid period string or period arithmetic."""


class ScheduleError(CashflowLibError, ValueError):
    """Invalid schedule construction input."""


__all__ = [
    "CashflowLibError",
    "InvalidValueError",
    "ValueNotSetError",
    "NotFoundError",
    "NotSupportedError",
    "EvaluationError",
    "InterestRateErrorKind",
    "InterestRateError",
    "MarketRequestErrorKind",
    "MarketRequestError",
    "PeriodError",
    "ScheduleError",
]
