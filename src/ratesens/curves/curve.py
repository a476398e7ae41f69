"""
Nodal curve representation.

The Curve class provides:
- Interpolated y-value y(x) and its x-derivative
- Per-node sensitivity basis dy(x)/dy_i used by the sensitivity router
- Immutable parameter updates (with_parameter, with_perturbation, ...)

A curve carries metadata describing what its axes mean (year fraction vs
months, zero rate vs discount factor vs price index) together with the day
count used to map dates onto the x-axis. Consumers such as the discount
factor wrappers validate that metadata when they are built.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple
import numpy as np

from ..conventions import DayCount
from ..errors import ConfigurationError
from ..sensitivity.parameter import CurrencyParameterSensitivity
from .interpolation import Interpolator, create_interpolator


class ValueType(Enum):
    """Meaning of a curve axis."""
    YEAR_FRACTION = "YearFraction"
    MONTHS = "Months"
    ZERO_RATE = "ZeroRate"
    DISCOUNT_FACTOR = "DiscountFactor"
    PRICE_INDEX = "PriceIndex"
    BLACK_VOLATILITY = "BlackVolatility"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CurveMetadata:
    """
    Descriptive data attached to a curve.

    Attributes:
        name: Curve name, the key of its parameter sensitivities
        x_value_type: Meaning of the x-values
        y_value_type: Meaning of the y-values
        day_count: Day count mapping dates to x-values (year fraction curves)
        compounding_per_year: Compounding frequency for periodic zero rates
        parameter_labels: Optional label per node, e.g. tenors
    """
    name: str
    x_value_type: ValueType = ValueType.YEAR_FRACTION
    y_value_type: ValueType = ValueType.UNKNOWN
    day_count: Optional[DayCount] = None
    compounding_per_year: Optional[int] = None
    parameter_labels: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Curve name must not be empty")
        cpy = self.compounding_per_year
        if cpy is not None and (isinstance(cpy, bool) or not isinstance(cpy, int) or cpy <= 0):
            raise ConfigurationError(
                f"Compounding per year must be a positive integer, got {cpy!r}"
            )

    @classmethod
    def zero_rates(cls, name: str, day_count: DayCount) -> "CurveMetadata":
        """Metadata for a continuously compounded zero-rate curve."""
        return cls(name, ValueType.YEAR_FRACTION, ValueType.ZERO_RATE, day_count)

    @classmethod
    def periodic_zero_rates(cls, name: str, day_count: DayCount, frequency: int) -> "CurveMetadata":
        """Metadata for a zero-rate curve compounded `frequency` times a year."""
        return cls(name, ValueType.YEAR_FRACTION, ValueType.ZERO_RATE, day_count, frequency)

    @classmethod
    def discount_factors(cls, name: str, day_count: DayCount) -> "CurveMetadata":
        return cls(name, ValueType.YEAR_FRACTION, ValueType.DISCOUNT_FACTOR, day_count)

    @classmethod
    def prices(cls, name: str) -> "CurveMetadata":
        """Metadata for a price index curve on a months axis."""
        return cls(name, ValueType.MONTHS, ValueType.PRICE_INDEX)

    def with_parameter_labels(self, labels: Sequence[str]) -> "CurveMetadata":
        return replace(self, parameter_labels=tuple(labels))


class Curve:
    """
    Interpolated nodal curve.

    Stores node values at strictly increasing x-values and interpolates
    between them using the specified method. Instances never change after
    construction; every ``with_*`` method returns a new curve.

    Attributes:
        metadata: Curve metadata
        x_values: Node x-values (read-only array)
        y_values: Node y-values (read-only array), the curve parameters
        interpolation_method: Name of interpolation method
    """

    def __init__(
        self,
        metadata: CurveMetadata,
        x_values: Sequence[float],
        y_values: Sequence[float],
        interpolation_method: str = "linear"
    ):
        x = np.array(x_values, dtype=np.float64)
        y = np.array(y_values, dtype=np.float64)
        if x.ndim != 1 or y.ndim != 1:
            raise ConfigurationError("Curve nodes must be one-dimensional")
        if len(x) != len(y):
            raise ConfigurationError(
                f"x-values and y-values must have the same length: {len(x)} != {len(y)}"
            )
        if len(x) < 2:
            raise ConfigurationError("Interpolated curve requires at least 2 nodes")
        if np.any(np.diff(x) <= 0):
            raise ConfigurationError("x-values must be strictly increasing")
        labels = metadata.parameter_labels
        if labels is not None and len(labels) != len(x):
            raise ConfigurationError("Parameter labels must match the number of nodes")

        x.setflags(write=False)
        y.setflags(write=False)
        self._metadata = metadata
        self._x_values = x
        self._y_values = y
        self._interpolation_method = interpolation_method
        self._interpolator: Interpolator = create_interpolator(interpolation_method)
        self._interpolator.fit(x, y)

    @property
    def metadata(self) -> CurveMetadata:
        return self._metadata

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def x_values(self) -> np.ndarray:
        return self._x_values

    @property
    def y_values(self) -> np.ndarray:
        return self._y_values

    @property
    def interpolation_method(self) -> str:
        return self._interpolation_method

    @property
    def parameter_count(self) -> int:
        return len(self._y_values)

    def get_parameter(self, index: int) -> float:
        return float(self._y_values[index])

    def y_value(self, x: float) -> float:
        """Interpolated value at x."""
        return self._interpolator.interpolate(x)

    def first_derivative(self, x: float) -> float:
        """Derivative dy/dx at x."""
        return self._interpolator.derivative(x)

    def y_value_parameter_sensitivity(self, x: float) -> np.ndarray:
        """Derivative of y(x) with respect to each node value."""
        return self._interpolator.parameter_sensitivity(x)

    def with_y_values(self, y_values: Sequence[float]) -> "Curve":
        return Curve(self._metadata, self._x_values, y_values, self._interpolation_method)

    def with_metadata(self, metadata: CurveMetadata) -> "Curve":
        return Curve(metadata, self._x_values, self._y_values, self._interpolation_method)

    def with_parameter(self, index: int, value: float) -> "Curve":
        """
        Create a new curve with one node value replaced.

        Args:
            index: Node index (0-based)
            value: New node value

        Returns:
            New curve
        """
        if index < 0 or index >= self.parameter_count:
            raise IndexError(f"Invalid parameter index: {index}")
        y = self._y_values.copy()
        y[index] = value
        return self.with_y_values(y)

    def with_perturbation(self, perturbation: Callable[[int, float], float]) -> "Curve":
        """
        Create a new curve with every node value mapped through a function.

        Args:
            perturbation: Called as perturbation(index, value), returns the new value
        """
        y = [perturbation(i, float(v)) for i, v in enumerate(self._y_values)]
        return self.with_y_values(y)

    def bump_parallel(self, shift: float) -> "Curve":
        """New curve with the same additive shift applied to every node."""
        return self.with_perturbation(lambda i, v: v + shift)

    def create_parameter_sensitivity(
        self,
        currency: str,
        sensitivities: np.ndarray
    ) -> CurrencyParameterSensitivity:
        """Wrap a per-node vector as the parameter sensitivity of this curve."""
        return CurrencyParameterSensitivity.of(
            self.name, currency, sensitivities, self._metadata.parameter_labels
        )

    def __repr__(self) -> str:
        return (f"Curve(name={self.name}, y={self._metadata.y_value_type.value}, "
                f"nodes={self.parameter_count}, method={self._interpolation_method})")


class ConstantCurve:
    """
    Curve with a single parameter and the same value everywhere.

    Shares the Curve interface so that it can back any curve consumer.
    """

    def __init__(self, metadata: CurveMetadata, y_value: float):
        if metadata.parameter_labels is not None and len(metadata.parameter_labels) != 1:
            raise ConfigurationError("Constant curve has exactly one parameter label")
        self._metadata = metadata
        self._value = float(y_value)

    @property
    def metadata(self) -> CurveMetadata:
        return self._metadata

    @property
    def name(self) -> str:
        return self._metadata.name

    @property
    def parameter_count(self) -> int:
        return 1

    def get_parameter(self, index: int) -> float:
        if index != 0:
            raise IndexError(f"Invalid parameter index: {index}")
        return self._value

    def y_value(self, x: float) -> float:
        return self._value

    def first_derivative(self, x: float) -> float:
        return 0.0

    def y_value_parameter_sensitivity(self, x: float) -> np.ndarray:
        return np.ones(1)

    def with_metadata(self, metadata: CurveMetadata) -> "ConstantCurve":
        return ConstantCurve(metadata, self._value)

    def with_parameter(self, index: int, value: float) -> "ConstantCurve":
        if index != 0:
            raise IndexError(f"Invalid parameter index: {index}")
        return ConstantCurve(self._metadata, value)

    def with_perturbation(self, perturbation: Callable[[int, float], float]) -> "ConstantCurve":
        return ConstantCurve(self._metadata, perturbation(0, self._value))

    def bump_parallel(self, shift: float) -> "ConstantCurve":
        return ConstantCurve(self._metadata, self._value + shift)

    def create_parameter_sensitivity(
        self,
        currency: str,
        sensitivities: np.ndarray
    ) -> CurrencyParameterSensitivity:
        return CurrencyParameterSensitivity.of(
            self.name, currency, sensitivities, self._metadata.parameter_labels
        )

    def __repr__(self) -> str:
        return f"ConstantCurve(name={self.name}, value={self._value})"


def create_flat_curve(
    name: str,
    rate: float,
    day_count: DayCount = DayCount.ACT_365F,
    max_tenor_years: float = 30.0,
    interpolation_method: str = "linear"
) -> Curve:
    """
    Create a flat continuously compounded zero-rate curve.

    Args:
        name: Curve name
        rate: Flat zero rate
        day_count: Day count of the time axis
        max_tenor_years: Last node in years
        interpolation_method: Interpolator name

    Returns:
        Flat curve with nodes at standard tenors
    """
    times = [t for t in [0.25, 0.5, 1, 2, 5, 10, 20] if t < max_tenor_years] + [max_tenor_years]
    return Curve(
        CurveMetadata.zero_rates(name, day_count),
        times,
        [rate] * len(times),
        interpolation_method,
    )


__all__ = [
    "ValueType",
    "CurveMetadata",
    "Curve",
    "ConstantCurve",
    "create_flat_curve",
]
