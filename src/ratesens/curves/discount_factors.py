"""
Discount factors backed by a nodal curve.

Provides:
- ZeroRateDiscountFactors: curve of continuously compounded zero rates
- ZeroRatePeriodicDiscountFactors: curve of zero rates compounded m times a year
- SimpleDiscountFactors: curve of discount factors
- discount_factors_of: picks the variant from the curve metadata

Time is t = relative_year_fraction(valuation_date, date) under the curve's
day count, so dates before the valuation date give negative times. The raw
formula is returned for such dates; deciding that a past cash flow is worth
zero belongs to the pricer.

Zero-rate point sensitivities are always expressed against the continuously
compounded zero rate at t (dDF/dz = -DF*t). Each variant converts that into
a derivative with respect to its own node values in parameter_sensitivity.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Union

import numpy as np

from ..conventions import CompoundedRateType, DayCount, relative_year_fraction
from ..errors import ConfigurationError
from ..sensitivity.parameter import CurrencyParameterSensitivities, CurrencyParameterSensitivity
from ..sensitivity.point import PointSensitivity, SensitivityKind, zero_rate_sensitivity
from .curve import Curve, ValueType

# Year fractions below this are treated as the valuation date itself
EFFECTIVE_ZERO = 1e-10

DateOrTime = Union[date, float]


class DiscountFactors(ABC):
    """
    Discount factors for one currency, derived from a curve.

    Attributes:
        currency: Currency of the discount factors
        valuation_date: Date at which discount factors are 1
        curve: Underlying curve
    """

    def __init__(self, currency: str, valuation_date: date, curve: Curve):
        self._validate(curve)
        self._currency = currency
        self._valuation_date = valuation_date
        self._curve = curve
        self._day_count: DayCount = curve.metadata.day_count

    def _validate(self, curve: Curve) -> None:
        md = curve.metadata
        if md.x_value_type != ValueType.YEAR_FRACTION:
            raise ConfigurationError(
                f"Incorrect x-value type for {type(self).__name__}: {md.x_value_type.value}"
            )
        if md.day_count is None:
            raise ConfigurationError(f"Curve {md.name} has no day count")

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def valuation_date(self) -> date:
        return self._valuation_date

    @property
    def curve(self) -> Curve:
        return self._curve

    @property
    def day_count(self) -> DayCount:
        return self._day_count

    @property
    def parameter_count(self) -> int:
        return self._curve.parameter_count

    def relative_year_fraction(self, d: date) -> float:
        """Curve time of a date, negative before the valuation date."""
        return relative_year_fraction(self._valuation_date, d, self._day_count)

    def _time(self, d: DateOrTime) -> float:
        if isinstance(d, date):
            return self.relative_year_fraction(d)
        return float(d)

    # Core formulas ---------------------------------------------------------
    @abstractmethod
    def discount_factor(self, d: DateOrTime) -> float:
        """Discount factor at a date or curve time."""

    @abstractmethod
    def zero_rate(self, d: DateOrTime) -> float:
        """Continuously compounded zero rate at a date or curve time."""

    @abstractmethod
    def discount_factor_time_derivative(self, t: float) -> float:
        """Derivative of the discount factor with respect to curve time."""

    @abstractmethod
    def _zero_rate_to_parameter_factor(self, t: float) -> float:
        """d(continuous zero rate)/d(curve value) at t."""

    # Spread ----------------------------------------------------------------
    def discount_factor_with_spread(
        self,
        d: DateOrTime,
        z_spread: float,
        compounded_rate_type: CompoundedRateType,
        periods_per_year: int = 0
    ) -> float:
        """
        Discount factor after adding a spread to the zero rate.

        The base rate is re-expressed in the requested compounding basis,
        the spread added, and the result turned back into a discount factor.

        Args:
            d: Date or curve time
            z_spread: Spread added to the rate
            compounded_rate_type: Basis in which the spread is added
            periods_per_year: Compounding frequency for PERIODIC

        Returns:
            Spread-adjusted discount factor, exactly 1.0 at the valuation date
        """
        t = self._time(d)
        if abs(t) < EFFECTIVE_ZERO:
            return 1.0
        df = self.discount_factor(t)
        if compounded_rate_type == CompoundedRateType.PERIODIC:
            m = _check_periods(periods_per_year)
            rate_plus_one = df ** (-1.0 / m / t) + z_spread / m
            return rate_plus_one ** (-m * t)
        return df * np.exp(-z_spread * t)

    # Point sensitivities ---------------------------------------------------
    def zero_rate_point_sensitivity(
        self,
        d: DateOrTime,
        sensitivity_currency: Optional[str] = None
    ) -> PointSensitivity:
        """
        Sensitivity of the discount factor to the zero rate at the same time.

        Args:
            d: Date or curve time
            sensitivity_currency: Currency of the result, curve currency by default

        Returns:
            Zero-rate point sensitivity with value -DF*t
        """
        t = self._time(d)
        df = self.discount_factor(t)
        return zero_rate_sensitivity(self._currency, t, -df * t, sensitivity_currency)

    def zero_rate_point_sensitivity_with_spread(
        self,
        d: DateOrTime,
        z_spread: float,
        compounded_rate_type: CompoundedRateType,
        periods_per_year: int = 0,
        sensitivity_currency: Optional[str] = None
    ) -> PointSensitivity:
        """
        Sensitivity of the spread-adjusted discount factor to the base zero rate.

        The spread is not a curve parameter and gets no sensitivity.
        """
        t = self._time(d)
        sensi = self.zero_rate_point_sensitivity(t, sensitivity_currency)
        if abs(t) < EFFECTIVE_ZERO:
            return sensi
        if compounded_rate_type == CompoundedRateType.PERIODIC:
            m = _check_periods(periods_per_year)
            df = self.discount_factor(t)
            df_root = df ** (-1.0 / m / t)
            factor = df_root / df / (df_root + z_spread / m) ** (m * t + 1.0)
            return sensi.multiplied_by(factor)
        return sensi.multiplied_by(np.exp(-z_spread * t))

    # Parameter sensitivities -----------------------------------------------
    def parameter_sensitivity(self, point: PointSensitivity) -> CurrencyParameterSensitivities:
        """
        Distribute a zero-rate point sensitivity over the curve parameters.

        Args:
            point: ZERO_RATE sensitivity for this curve's currency

        Returns:
            One entry sized to the curve's parameter count
        """
        if point.kind != SensitivityKind.ZERO_RATE:
            raise ValueError(f"Expected zero-rate sensitivity, got {point.kind.value}")
        t = point.year_fraction
        factor = self._zero_rate_to_parameter_factor(t)
        unit = self._curve.y_value_parameter_sensitivity(t)
        return CurrencyParameterSensitivities.of(
            self.create_parameter_sensitivity(point.value_currency, unit * factor * point.value)
        )

    def create_parameter_sensitivity(self, currency: str, sensitivities: np.ndarray) -> CurrencyParameterSensitivity:
        return self._curve.create_parameter_sensitivity(currency, sensitivities)

    # Immutable updates -----------------------------------------------------
    def with_curve(self, curve: Curve) -> "DiscountFactors":
        return type(self)(self._currency, self._valuation_date, curve)

    def with_parameter(self, index: int, value: float) -> "DiscountFactors":
        return self.with_curve(self._curve.with_parameter(index, value))

    def with_perturbation(self, perturbation) -> "DiscountFactors":
        return self.with_curve(self._curve.with_perturbation(perturbation))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._currency}, {self._valuation_date}, {self._curve!r})"


class ZeroRateDiscountFactors(DiscountFactors):
    """Discount factors from continuously compounded zero rates: DF = exp(-z(t)*t)."""

    def _validate(self, curve: Curve) -> None:
        super()._validate(curve)
        if curve.metadata.y_value_type != ValueType.ZERO_RATE:
            raise ConfigurationError(
                f"Incorrect y-value type for zero-rate discount factors: "
                f"{curve.metadata.y_value_type.value}"
            )

    def discount_factor(self, d: DateOrTime) -> float:
        t = self._time(d)
        return float(np.exp(-self._curve.y_value(t) * t))

    def zero_rate(self, d: DateOrTime) -> float:
        return self._curve.y_value(self._time(d))

    def discount_factor_time_derivative(self, t: float) -> float:
        z = self._curve.y_value(t)
        return -(z + t * self._curve.first_derivative(t)) * self.discount_factor(t)

    def _zero_rate_to_parameter_factor(self, t: float) -> float:
        return 1.0


class ZeroRatePeriodicDiscountFactors(DiscountFactors):
    """
    Discount factors from periodically compounded zero rates.

    DF = (1 + z(t)/m)^(-m*t) with m the curve's compounding per year.
    """

    def _validate(self, curve: Curve) -> None:
        super()._validate(curve)
        md = curve.metadata
        if md.y_value_type != ValueType.ZERO_RATE:
            raise ConfigurationError(
                f"Incorrect y-value type for periodic zero-rate discount factors: {md.y_value_type.value}"
            )
        if md.compounding_per_year is None:
            raise ConfigurationError(f"Curve {md.name} has no compounding per year")

    @property
    def frequency(self) -> int:
        return self._curve.metadata.compounding_per_year

    def discount_factor(self, d: DateOrTime) -> float:
        t = self._time(d)
        m = self.frequency
        return float((1.0 + self._curve.y_value(t) / m) ** (-m * t))

    def periodic_zero_rate(self, d: DateOrTime) -> float:
        """The curve's own periodically compounded rate."""
        return self._curve.y_value(self._time(d))

    def zero_rate(self, d: DateOrTime) -> float:
        m = self.frequency
        return float(m * np.log(1.0 + self.periodic_zero_rate(d) / m))

    def discount_factor_time_derivative(self, t: float) -> float:
        m = self.frequency
        z = self._curve.y_value(t)
        dz = self._curve.first_derivative(t)
        return -self.discount_factor(t) * (m * np.log(1.0 + z / m) + t * dz / (1.0 + z / m))

    def _zero_rate_to_parameter_factor(self, t: float) -> float:
        # z_c = m*ln(1 + z_p/m) => dz_c/dz_p = 1/(1 + z_p/m)
        return 1.0 / (1.0 + self._curve.y_value(t) / self.frequency)


class SimpleDiscountFactors(DiscountFactors):
    """Discount factors read directly from a discount factor curve."""

    def _validate(self, curve: Curve) -> None:
        super()._validate(curve)
        if curve.metadata.y_value_type != ValueType.DISCOUNT_FACTOR:
            raise ConfigurationError(
                f"Incorrect y-value type for simple discount factors: "
                f"{curve.metadata.y_value_type.value}"
            )

    def discount_factor(self, d: DateOrTime) -> float:
        return self._curve.y_value(self._time(d))

    def zero_rate(self, d: DateOrTime) -> float:
        t = max(EFFECTIVE_ZERO, self._time(d))
        return float(-np.log(self.discount_factor(t)) / t)

    def discount_factor_time_derivative(self, t: float) -> float:
        return self._curve.first_derivative(t)

    def _zero_rate_to_parameter_factor(self, t: float) -> float:
        if abs(t) < EFFECTIVE_ZERO:
            return 0.0
        # dDF/dz = -t*DF, so dz = -dDF/(t*DF)
        return -1.0 / (t * self.discount_factor(t))


def _check_periods(periods_per_year: int) -> int:
    if isinstance(periods_per_year, bool) or not isinstance(periods_per_year, (int, np.integer)) \
            or periods_per_year <= 0:
        raise ValueError(f"Periods per year must be a positive integer, got {periods_per_year!r}")
    return int(periods_per_year)


def discount_factors_of(currency: str, valuation_date: date, curve: Curve) -> DiscountFactors:
    """
    Wrap a curve in the discount factor variant matching its metadata.

    Args:
        currency: Currency of the discount factors
        valuation_date: Valuation date
        curve: Zero-rate (continuous or periodic) or discount factor curve

    Returns:
        DiscountFactors instance

    Raises:
        ConfigurationError: If the curve's y-value type is not supported
    """
    md = curve.metadata
    if md.y_value_type == ValueType.ZERO_RATE:
        if md.compounding_per_year is not None:
            return ZeroRatePeriodicDiscountFactors(currency, valuation_date, curve)
        return ZeroRateDiscountFactors(currency, valuation_date, curve)
    if md.y_value_type == ValueType.DISCOUNT_FACTOR:
        return SimpleDiscountFactors(currency, valuation_date, curve)
    raise ConfigurationError(f"Unsupported y-value type for discount factors: {md.y_value_type.value}")


__all__ = [
    "EFFECTIVE_ZERO",
    "DiscountFactors",
    "ZeroRateDiscountFactors",
    "ZeroRatePeriodicDiscountFactors",
    "SimpleDiscountFactors",
    "discount_factors_of",
]
