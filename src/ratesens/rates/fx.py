"""
FX forward rates implied by spot and the two currencies' discount factors.

    forward(base/counter, d) = spot * DF_base(d) / DF_counter(d)

Asking for the rate with the counter currency as base returns the inverse.
"""

from datetime import date

from ..currency import CurrencyAmount, CurrencyPair, MultiCurrencyAmount
from ..curves.discount_factors import DiscountFactors
from ..errors import ConfigurationError, DomainError
from ..sensitivity.parameter import CurrencyParameterSensitivities
from ..sensitivity.point import (
    PointSensitivity,
    PointSensitivityBuilder,
    SensitivityKind,
    fx_forward_sensitivity,
)


class DiscountFxForwardRates:
    """
    Forward FX rates for one currency pair.

    Attributes:
        currency_pair: Pair the spot rate is quoted for
        fx_spot: Counter units per base unit today
        base_discount_factors: Discount factors of the base currency
        counter_discount_factors: Discount factors of the counter currency
    """

    def __init__(
        self,
        currency_pair: CurrencyPair,
        fx_spot: float,
        base_discount_factors: DiscountFactors,
        counter_discount_factors: DiscountFactors
    ):
        if base_discount_factors.currency != currency_pair.base:
            raise ConfigurationError(
                f"Base discount factors currency {base_discount_factors.currency} "
                f"does not match pair {currency_pair}"
            )
        if counter_discount_factors.currency != currency_pair.counter:
            raise ConfigurationError(
                f"Counter discount factors currency {counter_discount_factors.currency} "
                f"does not match pair {currency_pair}"
            )
        if base_discount_factors.valuation_date != counter_discount_factors.valuation_date:
            raise ConfigurationError(
                f"Valuation dates differ: {base_discount_factors.valuation_date} "
                f"and {counter_discount_factors.valuation_date}"
            )
        if fx_spot <= 0:
            raise ConfigurationError(f"FX spot must be positive, got {fx_spot}")
        self.currency_pair = currency_pair
        self.fx_spot = float(fx_spot)
        self.base_discount_factors = base_discount_factors
        self.counter_discount_factors = counter_discount_factors

    @property
    def valuation_date(self) -> date:
        return self.base_discount_factors.valuation_date

    def _check_currency(self, currency: str) -> None:
        if not self.currency_pair.contains(currency):
            raise DomainError(f"Currency {currency} invalid for currency pair {self.currency_pair}")

    def _spot(self, base_currency: str) -> float:
        return self.fx_spot if base_currency == self.currency_pair.base else 1.0 / self.fx_spot

    def rate(self, base_currency: str, reference_date: date) -> float:
        """Forward rate: units of the other currency per unit of base_currency."""
        self._check_currency(base_currency)
        inverse = base_currency == self.currency_pair.counter
        df_base = self.base_discount_factors.discount_factor(reference_date)
        df_counter = self.counter_discount_factors.discount_factor(reference_date)
        forward = self.fx_spot * df_base / df_counter
        return 1.0 / forward if inverse else forward

    def rate_point_sensitivity(self, base_currency: str, reference_date: date) -> PointSensitivityBuilder:
        self._check_currency(base_currency)
        return PointSensitivityBuilder.of(fx_forward_sensitivity(
            self.currency_pair, base_currency, reference_date, 1.0,
            self.currency_pair.other(base_currency),
        ))

    def rate_fx_spot_sensitivity(self, base_currency: str, reference_date: date) -> float:
        """Derivative of the forward rate with respect to the spot rate in the same direction."""
        self._check_currency(base_currency)
        inverse = base_currency == self.currency_pair.counter
        ratio = (self.base_discount_factors.discount_factor(reference_date)
                 / self.counter_discount_factors.discount_factor(reference_date))
        return 1.0 / ratio if inverse else ratio

    def _ref_discount_factors(self, reference_currency: str):
        if reference_currency == self.currency_pair.base:
            return self.base_discount_factors, self.counter_discount_factors
        return self.counter_discount_factors, self.base_discount_factors

    def parameter_sensitivity(self, point: PointSensitivity) -> CurrencyParameterSensitivities:
        """
        Convert an FX forward sensitivity into parameter sensitivities of both curves.

        With R the reference currency and O the other one,
        F = spot(R/O) * DF_R / DF_O.
        """
        if point.kind != SensitivityKind.FX_FORWARD:
            raise ValueError(f"Expected FX forward sensitivity, got {point.kind.value}")
        ref = point.currency
        self._check_currency(ref)
        d = point.reference_date
        dfs_ref, dfs_other = self._ref_discount_factors(ref)
        df_ref = dfs_ref.discount_factor(d)
        df_other_inv = 1.0 / dfs_other.discount_factor(d)
        spot = self._spot(ref)
        ccy = point.value_currency

        ref_sens = dfs_ref.zero_rate_point_sensitivity(d, ccy).multiplied_by(
            spot * df_other_inv * point.value)
        other_sens = dfs_other.zero_rate_point_sensitivity(d, ccy).multiplied_by(
            -spot * df_ref * df_other_inv * df_other_inv * point.value)
        return dfs_ref.parameter_sensitivity(ref_sens).combined_with(dfs_other.parameter_sensitivity(other_sens))

    def currency_exposure(self, point: PointSensitivity) -> MultiCurrencyAmount:
        """
        Currency exposure implied by an FX forward sensitivity.

        The returned amounts exclude the present value itself; callers add it.
        Supported when the sensitivity is expressed in either currency of the pair.
        """
        if point.kind != SensitivityKind.FX_FORWARD:
            raise ValueError(f"Expected FX forward sensitivity, got {point.kind.value}")
        ref = point.currency
        other = point.currency_pair.other(ref)
        s = point.value
        d = point.reference_date
        dfs_ref, dfs_other = self._ref_discount_factors(ref)
        p_ref = dfs_ref.discount_factor(d)
        p_other = dfs_other.discount_factor(d)
        f = self._spot(ref)

        if point.value_currency == other:
            return MultiCurrencyAmount.of(
                CurrencyAmount(ref, s * p_ref / p_other),
                CurrencyAmount(other, -s * f * p_ref / p_other),
            )
        if point.value_currency == ref:
            return MultiCurrencyAmount.of(
                CurrencyAmount(ref, s * f * p_ref / p_other),
                CurrencyAmount(other, -s * f * f * p_ref / p_other),
            )
        raise DomainError(
            f"Currency exposure undefined for sensitivity currency {point.value_currency} "
            f"on pair {point.currency_pair}"
        )

    def with_discount_factors(
        self,
        base_discount_factors: DiscountFactors,
        counter_discount_factors: DiscountFactors
    ) -> "DiscountFxForwardRates":
        return DiscountFxForwardRates(
            self.currency_pair, self.fx_spot, base_discount_factors, counter_discount_factors)


__all__ = ["DiscountFxForwardRates"]
