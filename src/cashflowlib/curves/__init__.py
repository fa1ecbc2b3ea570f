"""
Curves package - term structures and interpolation.

Provides:
- YieldTermStructure and its implementations (flat forward, discount
  factors, zero rates, spread, composite, rolled)
- Interpolators used by the node-based curves and by fixing gap filling
"""

from .interpolation import (
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    create_interpolator,
)
from .term_structures import (
    YieldTermStructure,
    FlatForwardTermStructure,
    DiscountTermStructure,
    ZeroRateTermStructure,
    SpreadTermStructure,
    CompositeTermStructure,
    RolledTermStructure,
)

__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "create_interpolator",
    "YieldTermStructure",
    "FlatForwardTermStructure",
    "DiscountTermStructure",
    "ZeroRateTermStructure",
    "SpreadTermStructure",
    "CompositeTermStructure",
    "RolledTermStructure",
]
