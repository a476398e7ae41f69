"""
Rates package - market rate sources and the rates provider.

Provides:
- Overnight and Ibor forward rates with fixing priority
- Price index values
- FX forward rates and currency exposure
- RatesProvider: routes point sensitivities to the curves that own them
"""

from .timeseries import daily_fixings, monthly_fixings
from .overnight import DiscountOvernightIndexRates
from .ibor import DiscountIborIndexRates
from .inflation import SimplePriceIndexValues
from .fx import DiscountFxForwardRates
from .provider import RatesProvider

__all__ = [
    "daily_fixings",
    "monthly_fixings",
    "DiscountOvernightIndexRates",
    "DiscountIborIndexRates",
    "SimplePriceIndexValues",
    "DiscountFxForwardRates",
    "RatesProvider",
]
