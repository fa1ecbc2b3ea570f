"""
CashflowLib: Fixed Income Cashflow Engine

A modular library for:
- Rate algebra (day counts, compounding, implied rates) and date arithmetic
- Yield term structures and interest rate indices with fixings
- Loan and bond cashflows built from fixed, floating and double rate structures
- Binding cashflows to market data and computing NPV, duration, par rates
  and z-spreads through visitors
- Rolling a market store forward in time

Scope: deterministic cashflow valuation; no stochastic models, no curve bootstrapping.
"""

import logging

__version__ = "0.1.0"

# Core modules
from .errors import (
    CashflowLibError,
    InvalidValueError,
    ValueNotSetError,
    NotFoundError,
    NotSupportedError,
    EvaluationError,
    InterestRateError,
    InterestRateErrorKind,
    MarketRequestError,
    MarketRequestErrorKind,
    PeriodError,
    ScheduleError,
)
from .conventions import (
    DayCount,
    BusinessDayConvention,
    Compounding,
    Frequency,
    DateGenerationRule,
    Side,
    day_count,
    year_fraction,
)
from .dates import TimeUnit, Period
from .calendars import Calendar, NullCalendar, WeekendsOnly, HolidayCalendar
from .schedule import Schedule, MakeSchedule
from .currencies import Currency
from .interest_rate import RateDefinition, InterestRate

# Curves and indices
from .curves import (
    Interpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    YieldTermStructure,
    FlatForwardTermStructure,
    DiscountTermStructure,
    ZeroRateTermStructure,
    SpreadTermStructure,
    CompositeTermStructure,
    RolledTermStructure,
)
from .indices import InterestRateIndex, IborIndex, OvernightIndex, OvernightCompoundedRateIndex

# Market binding
from .market_data import (
    DiscountFactorRequest,
    ForwardRateRequest,
    ExchangeRateRequest,
    MarketRequest,
    MarketData,
)
from .exchange_rates import ExchangeRateStore
from .market_store import IndexStore, MarketStore
from .models import Model, SimpleModel

# Cashflows and instruments
from .cashflows import (
    CashflowType,
    Cashflow,
    Coupon,
    SimpleCashflow,
    Disbursement,
    Redemption,
    FixedRateCoupon,
    FloatingRateCoupon,
)
from .instruments import (
    Structure,
    RateType,
    Instrument,
    FixedRateInstrument,
    MakeFixedRateInstrument,
    FloatingRateInstrument,
    MakeFloatingRateInstrument,
    DoubleRateInstrument,
    MakeDoubleRateInstrument,
    Leg,
    MakeFixedRateLeg,
    MakeFloatingRateLeg,
    Swap,
    FixFloatSwap,
    MakeSwap,
    MakeFixFloatSwap,
)

# Visitors
from .visitors import (
    IndexingVisitor,
    FixingVisitor,
    NPVConstVisitor,
    NPVByDateConstVisitor,
    NPVByTenorConstVisitor,
    DurationConstVisitor,
    CashflowsAggregatorConstVisitor,
    AccruedAmountConstVisitor,
    ParValueConstVisitor,
    ZSpreadConstVisitor,
)

# Pricing
from .pricing import PricingOutput, price_instrument, price_instruments

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Errors
    "CashflowLibError",
    "InvalidValueError",
    "ValueNotSetError",
    "NotFoundError",
    "NotSupportedError",
    "EvaluationError",
    "InterestRateError",
    "InterestRateErrorKind",
    "MarketRequestError",
    "MarketRequestErrorKind",
    "PeriodError",
    "ScheduleError",
    # Conventions and dates
    "DayCount",
    "BusinessDayConvention",
    "Compounding",
    "Frequency",
    "DateGenerationRule",
    "Side",
    "day_count",
    "year_fraction",
    "TimeUnit",
    "Period",
    "Calendar",
    "NullCalendar",
    "WeekendsOnly",
    "HolidayCalendar",
    "Schedule",
    "MakeSchedule",
    "Currency",
    "RateDefinition",
    "InterestRate",
    # Curves and indices
    "Interpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "YieldTermStructure",
    "FlatForwardTermStructure",
    "DiscountTermStructure",
    "ZeroRateTermStructure",
    "SpreadTermStructure",
    "CompositeTermStructure",
    "RolledTermStructure",
    "InterestRateIndex",
    "IborIndex",
    "OvernightIndex",
    "OvernightCompoundedRateIndex",
    # Market binding
    "DiscountFactorRequest",
    "ForwardRateRequest",
    "ExchangeRateRequest",
    "MarketRequest",
    "MarketData",
    "ExchangeRateStore",
    "IndexStore",
    "MarketStore",
    "Model",
    "SimpleModel",
    # Cashflows and instruments
    "CashflowType",
    "Cashflow",
    "Coupon",
    "SimpleCashflow",
    "Disbursement",
    "Redemption",
    "FixedRateCoupon",
    "FloatingRateCoupon",
    "Structure",
    "RateType",
    "Instrument",
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
    # Visitors
    "IndexingVisitor",
    "FixingVisitor",
    "NPVConstVisitor",
    "NPVByDateConstVisitor",
    "NPVByTenorConstVisitor",
    "DurationConstVisitor",
    "CashflowsAggregatorConstVisitor",
    "AccruedAmountConstVisitor",
    "ParValueConstVisitor",
    "ZSpreadConstVisitor",
    # Pricing
    "PricingOutput",
    "price_instrument",
    "price_instruments",
]
