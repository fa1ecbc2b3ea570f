"""
Instruments package - builders and containers of cashflow lists.

Provides:
- Structure, RateType: redemption profile and rate regime tags
- Instrument: base container
- FixedRateInstrument / MakeFixedRateInstrument
- FloatingRateInstrument / MakeFloatingRateInstrument
- DoubleRateInstrument / MakeDoubleRateInstrument
- Leg / MakeFixedRateLeg / MakeFloatingRateLeg
- Swap / MakeSwap, FixFloatSwap / MakeFixFloatSwap
- calculate_outstanding, notionals_vector, calculate_equal_payment_redemptions
"""

from .base import (
    Structure,
    RateType,
    Instrument,
    calculate_outstanding,
    notionals_vector,
    calculate_equal_payment_redemptions,
)
from .builder import InstrumentBuilder
from .fixed import FixedRateInstrument, MakeFixedRateInstrument
from .floating import FloatingRateInstrument, MakeFloatingRateInstrument
from .double_rate import DoubleRateInstrument, MakeDoubleRateInstrument
from .legs import Leg, MakeFixedRateLeg, MakeFloatingRateLeg
from .swaps import Swap, FixFloatSwap, MakeSwap, MakeFixFloatSwap

__all__ = [
    "Structure",
    "RateType",
    "Instrument",
    "InstrumentBuilder",
    "calculate_outstanding",
    "notionals_vector",
    "calculate_equal_payment_redemptions",
    "FixedRateInstrument",
    "MakeFixedRateInstrument",
    "FloatingRateInstrument",
    "MakeFloatingRateInstrument",
    "DoubleRateInstrument",
    "MakeDoubleRateInstrument",
    "Leg",
    "MakeFixedRateLeg",
    "MakeFloatingRateLeg",
    "Swap",
    "FixFloatSwap",
    "MakeSwap",
    "MakeFixFloatSwap",
]
