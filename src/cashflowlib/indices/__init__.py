"""
Indices package - interest rate indices and their fixings.

Provides:
- InterestRateIndex: abstract index (fixings + forecasting curve)
- IborIndex: term rate index
- OvernightIndex: overnight index stored as index levels
- OvernightCompoundedRateIndex: overnight index built from daily rates
"""

from .base import InterestRateIndex
from .ibor import IborIndex
from .overnight import (
    BASE_LEVEL,
    compose_index_levels,
    OvernightIndex,
    OvernightCompoundedRateIndex,
)

__all__ = [
    "InterestRateIndex",
    "IborIndex",
    "BASE_LEVEL",
    "compose_index_levels",
    "OvernightIndex",
    "OvernightCompoundedRateIndex",
]
