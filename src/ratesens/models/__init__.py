"""
Models package - term structure models.

Provides:
- Hull-White one-factor model with piecewise constant volatility
"""

from .hull_white import HullWhiteOneFactorParameters, HullWhiteModel, VOLATILITY_TIME_MAX

__all__ = [
    "HullWhiteOneFactorParameters",
    "HullWhiteModel",
    "VOLATILITY_TIME_MAX",
]
