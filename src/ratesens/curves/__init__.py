"""
Curves package - nodal curves and discount factors.

Provides:
- Curve / ConstantCurve: nodal curves with metadata and a per-node sensitivity basis
- Interpolators with exact parameter sensitivities
- DiscountFactors variants wrapping zero-rate and discount-factor curves
"""

from .curve import ConstantCurve, Curve, CurveMetadata, ValueType, create_flat_curve
from .interpolation import (
    Interpolator,
    LinearInterpolator,
    CubicSplineInterpolator,
    LogLinearInterpolator,
    create_interpolator,
)
from .discount_factors import (
    EFFECTIVE_ZERO,
    DiscountFactors,
    ZeroRateDiscountFactors,
    ZeroRatePeriodicDiscountFactors,
    SimpleDiscountFactors,
    discount_factors_of,
)

__all__ = [
    "Curve",
    "ConstantCurve",
    "CurveMetadata",
    "ValueType",
    "create_flat_curve",
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "create_interpolator",
    "EFFECTIVE_ZERO",
    "DiscountFactors",
    "ZeroRateDiscountFactors",
    "ZeroRatePeriodicDiscountFactors",
    "SimpleDiscountFactors",
    "discount_factors_of",
]
