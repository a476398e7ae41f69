"""
RateSens: Curve-Based Discounting & Sensitivity Propagation Library

A modular library for:
- Discount factors from nodal curves (continuous, periodic and direct DF)
- Forward rates of overnight, Ibor and inflation indices, with fixings
- Point sensitivities and their projection onto curve parameters
- Finite-difference validation of analytic sensitivities
- Discounting pricers for payments and swaps, Hull-White swaptions

Scope: consumes calibrated curves; never calibrates them.
"""

__version__ = "0.1.0"

# Core modules
from .conventions import DayCount, CompoundedRateType, HolidayCalendar, year_fraction
from .currency import CurrencyPair, CurrencyAmount, MultiCurrencyAmount
from .errors import ConfigurationError, DomainError, RuntimeCalculationError
from .indices import (
    OvernightIndex,
    IborIndex,
    PriceIndex,
    USD_FED_FUND,
    GBP_SONIA,
    CHF_TOIS,
    EUR_EONIA,
    USD_LIBOR_3M,
    EUR_EURIBOR_3M,
    GB_RPI,
    US_CPI_U,
)

# Curves
from .curves import (
    Curve,
    ConstantCurve,
    CurveMetadata,
    ValueType,
    create_flat_curve,
    DiscountFactors,
    discount_factors_of,
)

# Sensitivities
from .sensitivity import (
    PointSensitivity,
    PointSensitivities,
    PointSensitivityBuilder,
    CurrencyParameterSensitivity,
    CurrencyParameterSensitivities,
    FiniteDifferenceSensitivityCalculator,
)

# Rates
from .rates import RatesProvider, daily_fixings, monthly_fixings

# Computations
from .computations import (
    OvernightCompoundedRateComputation,
    OvernightAveragedRateComputation,
    IborRateComputation,
    IborAveragedRateComputation,
    InflationInterpolatedRateComputation,
    DispatchingRateComputationFn,
    ExplainMap,
)

# Pricers
from .pricers import (
    Payment,
    DiscountingPaymentPricer,
    Swap,
    SwapLeg,
    DiscountingSwapPricer,
    Swaption,
    HullWhiteSwaptionPhysicalProductPricer,
)

# Models
from .models import HullWhiteModel, HullWhiteOneFactorParameters

__all__ = [
    # Core
    "DayCount",
    "CompoundedRateType",
    "HolidayCalendar",
    "year_fraction",
    "CurrencyPair",
    "CurrencyAmount",
    "MultiCurrencyAmount",
    "ConfigurationError",
    "DomainError",
    "RuntimeCalculationError",
    "OvernightIndex",
    "IborIndex",
    "PriceIndex",
    "USD_FED_FUND",
    "GBP_SONIA",
    "CHF_TOIS",
    "EUR_EONIA",
    "USD_LIBOR_3M",
    "EUR_EURIBOR_3M",
    "GB_RPI",
    "US_CPI_U",
    # Curves
    "Curve",
    "ConstantCurve",
    "CurveMetadata",
    "ValueType",
    "create_flat_curve",
    "DiscountFactors",
    "discount_factors_of",
    # Sensitivities
    "PointSensitivity",
    "PointSensitivities",
    "PointSensitivityBuilder",
    "CurrencyParameterSensitivity",
    "CurrencyParameterSensitivities",
    "FiniteDifferenceSensitivityCalculator",
    # Rates
    "RatesProvider",
    "daily_fixings",
    "monthly_fixings",
    # Computations
    "OvernightCompoundedRateComputation",
    "OvernightAveragedRateComputation",
    "IborRateComputation",
    "IborAveragedRateComputation",
    "InflationInterpolatedRateComputation",
    "DispatchingRateComputationFn",
    "ExplainMap",
    # Pricers
    "Payment",
    "DiscountingPaymentPricer",
    "Swap",
    "SwapLeg",
    "DiscountingSwapPricer",
    "Swaption",
    "HullWhiteSwaptionPhysicalProductPricer",
    # Models
    "HullWhiteModel",
    "HullWhiteOneFactorParameters",
]
