"""
Physically settled European swaption priced with the Hull-White model.

A swaption is an option to enter into a swap at expiry.
- Receiver swaption: right to receive fixed (omega = +1)
- Payer swaption: right to pay fixed (omega = -1)

The underlying swap is replaced by its cash-flow equivalent; each payment
gets a bond volatility alpha_i and the explicit Hull-White formula gives

    PV = sign * sum_i c_i * N(omega * (kappa + alpha_i))

with sign +1 for a long position and -1 for a short one.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..currency import CurrencyAmount
from ..errors import DomainError
from ..models.hull_white import HullWhiteModel
from .payment import DiscountingPaymentPricer
from .swaps import CashFlowEquivalentCalculator, PayReceive, Swap

logger = logging.getLogger(__name__)


class LongShort(Enum):
    """Position in the option."""
    LONG = "Long"
    SHORT = "Short"

    @property
    def sign(self) -> float:
        return 1.0 if self is LongShort.LONG else -1.0


class SettlementType(Enum):
    """How the swaption settles on exercise."""
    PHYSICAL = "Physical"
    CASH = "Cash"


@dataclass(frozen=True)
class Swaption:
    """
    European swaption.

    Attributes:
        expiry_date: Exercise date
        underlying: Single-currency swap entered on exercise
        long_short: Position
        settlement_type: Physical or cash settlement
    """
    expiry_date: date
    underlying: Swap
    long_short: LongShort = LongShort.LONG
    settlement_type: SettlementType = SettlementType.PHYSICAL

    def __post_init__(self):
        if self.underlying.is_cross_currency:
            raise ValueError("Swaption underlying must be a single-currency swap")
        if self.expiry_date > self.underlying.start_date:
            raise ValueError("Swaption expiry must not be after the underlying swap start")

    @property
    def currency(self) -> str:
        return self.underlying.fixed_leg.currency

    @property
    def is_receiver(self) -> bool:
        return self.underlying.fixed_leg.pay_receive is PayReceive.RECEIVE


class HullWhiteSwaptionPhysicalProductPricer:
    """Hull-White pricer for physically settled swaptions."""

    def __init__(
        self,
        cash_flow_calculator: Optional[CashFlowEquivalentCalculator] = None,
        payment_pricer: Optional[DiscountingPaymentPricer] = None
    ):
        self.cash_flow_calculator = cash_flow_calculator or CashFlowEquivalentCalculator()
        self.payment_pricer = payment_pricer or DiscountingPaymentPricer()

    def present_value(self, swaption: Swaption, provider, hw: HullWhiteModel) -> CurrencyAmount:
        """
        Present value of the swaption.

        Args:
            swaption: Physically settled swaption
            provider: Rates provider for discounting and forwards
            hw: Hull-White model

        Returns:
            Present value in the swaption currency, zero once expired
        """
        if swaption.settlement_type is not SettlementType.PHYSICAL:
            raise DomainError("Swaption must be physically settled")
        currency = swaption.currency
        if swaption.expiry_date < provider.valuation_date:
            return CurrencyAmount.zero(currency)

        payments = self.cash_flow_calculator.swap(swaption.underlying, provider)
        discounted = [self.payment_pricer.present_value(p, provider).amount for p in payments]
        alphas = [hw.alpha_for_dates(swaption.expiry_date, p.date) for p in payments]
        omega = 1.0 if swaption.is_receiver else -1.0
        pv = hw.swaption_value(discounted, alphas, omega)
        logger.debug("Hull-White swaption: %d cash flows, omega=%+.0f, pv=%.6f", len(payments), omega, pv)
        return CurrencyAmount(currency, pv * swaption.long_short.sign)


__all__ = [
    "LongShort",
    "SettlementType",
    "Swaption",
    "HullWhiteSwaptionPhysicalProductPricer",
]
