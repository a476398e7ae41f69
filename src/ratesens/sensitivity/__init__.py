"""
Sensitivity package - point and parameter sensitivities.

Provides:
- Point sensitivities to single market quantities (zero rates, forward rates,
  price index values, FX forwards)
- Parameter sensitivities, one vector per curve
- Central finite-difference calculator for validating analytic results
"""

from .point import (
    SensitivityKind,
    PointSensitivity,
    PointSensitivities,
    PointSensitivityBuilder,
    zero_rate_sensitivity,
    ibor_rate_sensitivity,
    overnight_rate_sensitivity,
    overnight_period_sensitivity,
    inflation_rate_sensitivity,
    fx_forward_sensitivity,
)
from .parameter import CurrencyParameterSensitivity, CurrencyParameterSensitivities
from .finite_difference import FiniteDifferenceSensitivityCalculator

__all__ = [
    "SensitivityKind",
    "PointSensitivity",
    "PointSensitivities",
    "PointSensitivityBuilder",
    "zero_rate_sensitivity",
    "ibor_rate_sensitivity",
    "overnight_rate_sensitivity",
    "overnight_period_sensitivity",
    "inflation_rate_sensitivity",
    "fx_forward_sensitivity",
    "CurrencyParameterSensitivity",
    "CurrencyParameterSensitivities",
    "FiniteDifferenceSensitivityCalculator",
]
