"""
Interest rate swap pricing by discounting.

A swap is a set of legs; each leg is a list of resolved payment periods,
either fixed or driven by a rate computation (Ibor, overnight, inflation).

    forecast_i = notional * (gearing * rate_i + spread) * accrual_i
    PV_leg     = sign * sum(forecast_i * DF(payment_i))
    PV_swap    = sum(PV_leg)

where sign is +1 for a received leg and -1 for a paid leg. Periods paid
before the valuation date contribute nothing.

Also provides the cash-flow equivalent of a fixed/Ibor swap: a list of
payments with the same present value, used by the Hull-White swaption
pricer.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from ..computations.dispatch import DispatchingRateComputationFn
from ..computations.ibor import IborRateComputation
from ..currency import CurrencyAmount, MultiCurrencyAmount
from ..errors import DomainError
from ..sensitivity.point import PointSensitivityBuilder
from .payment import DiscountingPaymentPricer, Payment

logger = logging.getLogger(__name__)


class PayReceive(Enum):
    """Direction of a swap leg."""
    PAY = "Pay"
    RECEIVE = "Receive"

    @property
    def sign(self) -> float:
        return -1.0 if self is PayReceive.PAY else 1.0


@dataclass(frozen=True)
class FixedRatePeriod:
    """
    A fixed coupon period.

    Attributes:
        payment_date: Date the coupon is paid
        start_date: Accrual start
        end_date: Accrual end
        year_fraction: Accrual factor
        rate: Fixed rate
        notional: Positive notional
        currency: Payment currency
    """
    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    rate: float
    notional: float
    currency: str


@dataclass(frozen=True)
class RateAccrualPeriod:
    """
    A floating coupon period driven by a rate computation.

    Attributes:
        payment_date: Date the coupon is paid
        start_date: Accrual start
        end_date: Accrual end
        year_fraction: Accrual factor
        rate_computation: Ibor, overnight or inflation computation
        notional: Positive notional
        currency: Payment currency
        spread: Added to the rate after the gearing
        gearing: Multiplies the rate
    """
    payment_date: date
    start_date: date
    end_date: date
    year_fraction: float
    rate_computation: object
    notional: float
    currency: str
    spread: float = 0.0
    gearing: float = 1.0


SwapPeriod = Union[FixedRatePeriod, RateAccrualPeriod]


@dataclass(frozen=True)
class SwapLeg:
    """One leg of a swap, in a single currency."""
    pay_receive: PayReceive
    periods: Tuple[SwapPeriod, ...]

    def __post_init__(self):
        if not self.periods:
            raise ValueError("Swap leg requires at least one period")
        currencies = {p.currency for p in self.periods}
        if len(currencies) != 1:
            raise ValueError(f"Swap leg periods must share one currency, got {sorted(currencies)}")

    @classmethod
    def of(cls, pay_receive: PayReceive, periods: Sequence[SwapPeriod]) -> "SwapLeg":
        return cls(pay_receive, tuple(periods))

    @property
    def currency(self) -> str:
        return self.periods[0].currency

    @property
    def is_fixed(self) -> bool:
        return all(isinstance(p, FixedRatePeriod) for p in self.periods)

    @property
    def start_date(self) -> date:
        return self.periods[0].start_date

    @property
    def end_date(self) -> date:
        return self.periods[-1].end_date


@dataclass(frozen=True)
class Swap:
    """A swap made of one or more legs."""
    legs: Tuple[SwapLeg, ...]

    def __post_init__(self):
        if not self.legs:
            raise ValueError("Swap requires at least one leg")

    @classmethod
    def of(cls, *legs: SwapLeg) -> "Swap":
        return cls(tuple(legs))

    @property
    def fixed_leg(self) -> SwapLeg:
        for leg in self.legs:
            if leg.is_fixed:
                return leg
        raise DomainError("Swap has no fixed leg")

    @property
    def other_legs(self) -> List[SwapLeg]:
        fixed = self.fixed_leg
        return [leg for leg in self.legs if leg is not fixed]

    @property
    def is_cross_currency(self) -> bool:
        return len({leg.currency for leg in self.legs}) > 1

    @property
    def start_date(self) -> date:
        return min(leg.start_date for leg in self.legs)


class DiscountingSwapPricer:
    """
    Swap pricer discounting forecast coupons on the currency discount curve.

    Attributes:
        rate_fn: Function giving the rate of a rate computation
    """

    def __init__(self, rate_fn: Optional[DispatchingRateComputationFn] = None):
        self.rate_fn = rate_fn or DispatchingRateComputationFn()

    def _period_rate(self, period: SwapPeriod, provider) -> float:
        if isinstance(period, FixedRatePeriod):
            return period.rate
        raw = self.rate_fn.rate(period.rate_computation, period.start_date, period.end_date, provider)
        return period.gearing * raw + period.spread

    def period_forecast_value(self, period: SwapPeriod, provider) -> float:
        """Undiscounted, unsigned coupon amount."""
        if period.payment_date < provider.valuation_date:
            return 0.0
        return period.notional * self._period_rate(period, provider) * period.year_fraction

    def period_present_value(self, period: SwapPeriod, provider) -> float:
        if period.payment_date < provider.valuation_date:
            return 0.0
        df = provider.discount_factor(period.currency, period.payment_date)
        return self.period_forecast_value(period, provider) * df

    def period_present_value_sensitivity(self, period: SwapPeriod, provider) -> PointSensitivityBuilder:
        """
        Sensitivity of an unsigned period present value.

        Combines the discounting sensitivity (forecast * dDF) with the
        forecast sensitivity (DF * notional * gearing * accrual * drate).
        """
        if period.payment_date < provider.valuation_date:
            return PointSensitivityBuilder.none()
        discount_factors = provider.discount_factors(period.currency)
        df = discount_factors.discount_factor(period.payment_date)
        forecast = self.period_forecast_value(period, provider)
        result = PointSensitivityBuilder.of(
            discount_factors.zero_rate_point_sensitivity(period.payment_date)).multiplied_by(forecast)
        if isinstance(period, RateAccrualPeriod):
            rate_sens = self.rate_fn.rate_sensitivity(
                period.rate_computation, period.start_date, period.end_date, provider)
            factor = df * period.notional * period.gearing * period.year_fraction
            result = result.combined_with(rate_sens.multiplied_by(factor))
        return result

    def leg_present_value(self, leg: SwapLeg, provider) -> CurrencyAmount:
        total = sum(self.period_present_value(p, provider) for p in leg.periods)
        return CurrencyAmount(leg.currency, leg.pay_receive.sign * total)

    def leg_present_value_sensitivity(self, leg: SwapLeg, provider) -> PointSensitivityBuilder:
        result = PointSensitivityBuilder.none()
        for period in leg.periods:
            result = result.combined_with(self.period_present_value_sensitivity(period, provider))
        return result.multiplied_by(leg.pay_receive.sign)

    def present_value(self, swap: Swap, provider) -> MultiCurrencyAmount:
        """Present value of all legs, one amount per currency."""
        return MultiCurrencyAmount.empty().plus_all(self.leg_present_value(leg, provider) for leg in swap.legs)

    def present_value_sensitivity(self, swap: Swap, provider) -> PointSensitivityBuilder:
        result = PointSensitivityBuilder.none()
        for leg in swap.legs:
            result = result.combined_with(self.leg_present_value_sensitivity(leg, provider))
        return result

    def fixed_leg_pvbp(self, leg: SwapLeg, provider) -> float:
        """Signed present value of the fixed leg for a rate of 1."""
        if not leg.is_fixed:
            raise DomainError("PVBP requires a fixed leg")
        annuity = 0.0
        for period in leg.periods:
            if period.payment_date < provider.valuation_date:
                continue
            df = provider.discount_factor(period.currency, period.payment_date)
            annuity += period.notional * period.year_fraction * df
        return leg.pay_receive.sign * annuity

    def par_rate(self, swap: Swap, provider) -> float:
        """
        Fixed rate making the swap worth zero.

        Args:
            swap: Single-currency swap with one fixed leg
            provider: Rates provider

        Returns:
            Par rate
        """
        if swap.is_cross_currency:
            raise DomainError("Par rate requires a single-currency swap")
        fixed = swap.fixed_leg
        other_pv = sum(self.leg_present_value(leg, provider).amount for leg in swap.other_legs)
        pvbp = self.fixed_leg_pvbp(fixed, provider)
        if pvbp == 0.0:
            raise DomainError("Fixed leg has no remaining periods")
        return -other_pv / pvbp


class CashFlowEquivalentCalculator:
    """
    Cash-flow equivalents of fixed and Ibor legs.

    A fixed coupon is a single payment. An Ibor coupon on [S, E] paid at P is
    replaced by a payment beta * N * a / d at the index start S and a payment
    -N * a / d at P, where a is the accrual factor, d the index accrual
    factor and beta = (1 + d * F) * DF(E) / DF(S) the forward to discount
    basis. A spread adds N * spread * a at P.
    """

    def __init__(self, rate_fn: Optional[DispatchingRateComputationFn] = None):
        self.rate_fn = rate_fn or DispatchingRateComputationFn()

    def fixed_leg(self, leg: SwapLeg, provider) -> List[Payment]:
        if not leg.is_fixed:
            raise DomainError("Expected a fixed leg")
        sign = leg.pay_receive.sign
        return [
            Payment(p.currency, sign * p.notional * p.rate * p.year_fraction, p.payment_date)
            for p in leg.periods if p.payment_date >= provider.valuation_date
        ]

    def ibor_leg(self, leg: SwapLeg, provider) -> List[Payment]:
        sign = leg.pay_receive.sign
        payments: List[Payment] = []
        for period in leg.periods:
            if period.payment_date < provider.valuation_date:
                continue
            if not isinstance(period, RateAccrualPeriod) or not isinstance(
                    period.rate_computation, IborRateComputation):
                raise DomainError("Ibor cash-flow equivalent requires Ibor rate periods")
            if period.gearing != 1.0:
                raise DomainError("Ibor cash-flow equivalent requires a gearing of one")
            obs = period.rate_computation.observation
            forward = self.rate_fn.rate(period.rate_computation, period.start_date, period.end_date, provider)
            df_start = provider.discount_factor(period.currency, obs.effective_date)
            df_end = provider.discount_factor(period.currency, obs.maturity_date)
            beta = (1.0 + obs.year_fraction * forward) * df_end / df_start
            ratio = period.notional * period.year_fraction / obs.year_fraction
            payments.append(Payment(period.currency, sign * beta * ratio, obs.effective_date))
            payments.append(Payment(period.currency, -sign * ratio, period.payment_date))
            if period.spread != 0.0:
                spread_amount = sign * period.notional * period.spread * period.year_fraction
                payments.append(Payment(period.currency, spread_amount, period.payment_date))
        return payments

    def swap(self, swap: Swap, provider) -> List[Payment]:
        """
        Cash-flow equivalent of a single-currency fixed/Ibor swap.

        Payments are merged by date and sorted.

        Args:
            swap: Swap with one fixed leg and Ibor legs
            provider: Rates provider

        Returns:
            Payments sorted by date
        """
        if swap.is_cross_currency:
            raise DomainError("Cash-flow equivalent requires a single-currency swap")
        payments = self.fixed_leg(swap.fixed_leg, provider)
        for leg in swap.other_legs:
            payments.extend(self.ibor_leg(leg, provider))
        merged = {}
        for payment in payments:
            merged[payment.date] = merged.get(payment.date, 0.0) + payment.amount
        currency = swap.fixed_leg.currency
        logger.debug("Cash-flow equivalent: %d payments merged into %d dates", len(payments), len(merged))
        return [Payment(currency, merged[d], d) for d in sorted(merged)]


def swap_present_value(swap: Swap, provider, pricer: Optional[DiscountingSwapPricer] = None) -> float:
    """Present value of a single-currency swap as a float."""
    pricer = pricer or DiscountingSwapPricer()
    pv = pricer.present_value(swap, provider)
    return pv.get_amount(swap.fixed_leg.currency).amount


__all__ = [
    "PayReceive",
    "FixedRatePeriod",
    "RateAccrualPeriod",
    "SwapLeg",
    "Swap",
    "DiscountingSwapPricer",
    "CashFlowEquivalentCalculator",
    "swap_present_value",
]
