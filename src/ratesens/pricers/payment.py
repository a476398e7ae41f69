"""
Single payment pricing by discounting.

    PV = amount * DF(payment_date)

A payment dated before the valuation date has already settled and is worth
zero, with no sensitivity. A payment on the valuation date is still valued.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..computations.explain import ExplainKey, ExplainMap
from ..conventions import CompoundedRateType
from ..currency import CurrencyAmount
from ..sensitivity.point import PointSensitivityBuilder


@dataclass(frozen=True)
class Payment:
    """
    A known amount paid on a date.

    Attributes:
        currency: Payment currency
        amount: Signed amount, negative when paid
        date: Payment date
    """
    currency: str
    amount: float
    date: date

    @classmethod
    def of(cls, value: CurrencyAmount, payment_date: date) -> "Payment":
        return cls(value.currency, value.amount, payment_date)

    @property
    def value(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount)


class DiscountingPaymentPricer:
    """Prices a Payment off the discount curve of its currency."""

    def _is_settled(self, payment: Payment, provider) -> bool:
        return payment.date < provider.valuation_date

    def present_value(self, payment: Payment, provider) -> CurrencyAmount:
        if self._is_settled(payment, provider):
            return CurrencyAmount.zero(payment.currency)
        df = provider.discount_factor(payment.currency, payment.date)
        return CurrencyAmount(payment.currency, payment.amount * df)

    def present_value_with_spread(
        self,
        payment: Payment,
        provider,
        z_spread: float,
        compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
        periods_per_year: int = 0
    ) -> CurrencyAmount:
        """
        Present value with a z-spread added to the discount curve.

        Args:
            payment: Payment to value
            provider: Rates provider
            z_spread: Spread added to the zero rate
            compounded_rate_type: Basis in which the spread is added
            periods_per_year: Compounding frequency for PERIODIC

        Returns:
            Spread-adjusted present value
        """
        if self._is_settled(payment, provider):
            return CurrencyAmount.zero(payment.currency)
        df = provider.discount_factors(payment.currency).discount_factor_with_spread(
            payment.date, z_spread, compounded_rate_type, periods_per_year)
        return CurrencyAmount(payment.currency, payment.amount * df)

    def forecast_value(self, payment: Payment, provider) -> CurrencyAmount:
        if self._is_settled(payment, provider):
            return CurrencyAmount.zero(payment.currency)
        return payment.value

    def present_value_sensitivity(self, payment: Payment, provider) -> PointSensitivityBuilder:
        """Zero-rate sensitivity of the present value."""
        if self._is_settled(payment, provider):
            return PointSensitivityBuilder.none()
        point = provider.discount_factors(payment.currency).zero_rate_point_sensitivity(payment.date)
        return PointSensitivityBuilder.of(point).multiplied_by(payment.amount)

    def present_value_sensitivity_with_spread(
        self,
        payment: Payment,
        provider,
        z_spread: float,
        compounded_rate_type: CompoundedRateType = CompoundedRateType.CONTINUOUS,
        periods_per_year: int = 0
    ) -> PointSensitivityBuilder:
        if self._is_settled(payment, provider):
            return PointSensitivityBuilder.none()
        point = provider.discount_factors(payment.currency).zero_rate_point_sensitivity_with_spread(
            payment.date, z_spread, compounded_rate_type, periods_per_year)
        return PointSensitivityBuilder.of(point).multiplied_by(payment.amount)

    def explain_present_value(self, payment: Payment, provider) -> ExplainMap:
        """Breakdown of the present value calculation."""
        builder = ExplainMap.builder()
        builder.put(ExplainKey.PAYMENT_DATE, payment.date)
        builder.put(ExplainKey.CURRENCY, payment.currency)
        if self._is_settled(payment, provider):
            builder.put(ExplainKey.COMPLETED, True)
            builder.put(ExplainKey.FORECAST_VALUE, 0.0)
            builder.put(ExplainKey.PRESENT_VALUE, 0.0)
            return builder.build()
        df = provider.discount_factor(payment.currency, payment.date)
        builder.put(ExplainKey.DISCOUNT_FACTOR, df)
        builder.put(ExplainKey.FORECAST_VALUE, payment.amount)
        builder.put(ExplainKey.PRESENT_VALUE, payment.amount * df)
        return builder.build()


def present_value_of_payments(payments, provider, pricer: Optional[DiscountingPaymentPricer] = None) -> float:
    """Sum of the present values of same-currency payments."""
    pricer = pricer or DiscountingPaymentPricer()
    return sum(pricer.present_value(p, provider).amount for p in payments)


__all__ = ["Payment", "DiscountingPaymentPricer", "present_value_of_payments"]
