"""
Pricers package - discounting pricers built on the rates provider.

Provides:
- Single payments
- Fixed/floating swaps, par rates and cash-flow equivalents
- Physically settled swaptions under Hull-White
"""

from .payment import Payment, DiscountingPaymentPricer, present_value_of_payments
from .swaps import (
    PayReceive,
    FixedRatePeriod,
    RateAccrualPeriod,
    SwapLeg,
    Swap,
    DiscountingSwapPricer,
    CashFlowEquivalentCalculator,
    swap_present_value,
)
from .swaption import LongShort, SettlementType, Swaption, HullWhiteSwaptionPhysicalProductPricer

__all__ = [
    "Payment",
    "DiscountingPaymentPricer",
    "present_value_of_payments",
    "PayReceive",
    "FixedRatePeriod",
    "RateAccrualPeriod",
    "SwapLeg",
    "Swap",
    "DiscountingSwapPricer",
    "CashFlowEquivalentCalculator",
    "swap_present_value",
    "LongShort",
    "SettlementType",
    "Swaption",
    "HullWhiteSwaptionPhysicalProductPricer",
]
