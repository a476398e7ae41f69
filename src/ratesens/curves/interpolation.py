"""
Interpolation methods for nodal curves.

Provides:
- LinearInterpolator: Linear interpolation, flat extrapolation
- CubicSplineInterpolator: Natural cubic spline, flat extrapolation
- LogLinearInterpolator: Linear interpolation of log values (piecewise
  constant forward rates when applied to discount factors)

Each interpolator also exposes ``parameter_sensitivity(t)``: the derivative
of the interpolated value with respect to every node value. This row is what
turns a point sensitivity at time t into a per-node sensitivity vector.
"""

from abc import ABC, abstractmethod
from typing import Optional
import numpy as np


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    @abstractmethod
    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit the interpolator to data points.

        Args:
            times: Array of x-values (must be sorted ascending)
            values: Array of node values
        """
        pass

    @abstractmethod
    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point.

        Args:
            t: x-value

        Returns:
            Interpolated value
        """
        pass

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)

    @abstractmethod
    def derivative(self, t: float) -> float:
        """Return the first derivative with respect to x at point t."""
        pass

    @abstractmethod
    def parameter_sensitivity(self, t: float) -> np.ndarray:
        """
        Derivative of the interpolated value with respect to each node value.

        Args:
            t: x-value

        Returns:
            Array with one entry per node
        """
        pass

    def _check_fitted(self) -> None:
        if getattr(self, "times", None) is None:
            raise RuntimeError("Interpolator not fitted")

    @staticmethod
    def _prepare(times: np.ndarray, values: np.ndarray):
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) < 2:
            raise ValueError("Need at least 2 points for interpolation")
        idx = np.argsort(times)
        return (np.asarray(times, dtype=np.float64)[idx],
                np.asarray(values, dtype=np.float64)[idx])

    def _bracket(self, t: float) -> int:
        idx = np.searchsorted(self.times, t, side='right') - 1
        return int(max(0, min(idx, len(self.times) - 2)))


class LinearInterpolator(Interpolator):
    """
    Linear interpolation.

    Simple linear interpolation between knot points.
    Extrapolates flat beyond boundaries.
    """

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """Fit linear interpolator."""
        self.times, self.values = self._prepare(times, values)

    def interpolate(self, t: float) -> float:
        """Linear interpolation with flat extrapolation."""
        self._check_fitted()
        return float(np.dot(self.parameter_sensitivity(t), self.values))

    def derivative(self, t: float) -> float:
        """Derivative of linear interpolation (piecewise constant)."""
        self._check_fitted()

        if t < self.times[0] or t > self.times[-1]:
            return 0.0

        idx = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        v0, v1 = self.values[idx], self.values[idx + 1]
        return float((v1 - v0) / (t1 - t0))

    def parameter_sensitivity(self, t: float) -> np.ndarray:
        self._check_fitted()
        weights = np.zeros(len(self.times))

        if t <= self.times[0]:
            weights[0] = 1.0
            return weights
        if t >= self.times[-1]:
            weights[-1] = 1.0
            return weights

        idx = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        w = (t - t0) / (t1 - t0)
        weights[idx] = 1.0 - w
        weights[idx + 1] = w
        return weights


class CubicSplineInterpolator(Interpolator):
    """
    Cubic spline interpolation.

    Uses natural cubic splines (second derivative = 0 at boundaries).
    Provides smooth first and second derivatives.

    The spline is linear in the node values, so the second derivatives are
    stored as a matrix applied to the node values: ``M = second_derivative_matrix @ y``.
    The same matrix gives the exact parameter sensitivity.
    """

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None
        self.second_derivative_matrix: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit natural cubic spline.

        Solves the tridiagonal system for second derivatives once per unit
        node vector, giving the map from node values to second derivatives.
        """
        self.times, self.values = self._prepare(times, values)
        n = len(self.times)

        if n == 2:
            # Degenerate to linear
            self.second_derivative_matrix = np.zeros((2, 2))
            return

        h = np.diff(self.times)

        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        B = np.zeros((n, n))
        A[0, 0] = 1.0
        A[n-1, n-1] = 1.0

        for i in range(1, n-1):
            A[i, i-1] = h[i-1]
            A[i, i] = 2 * (h[i-1] + h[i])
            A[i, i+1] = h[i]
            # b[i] = 6 * ((y[i+1] - y[i]) / h[i] - (y[i] - y[i-1]) / h[i-1])
            B[i, i+1] = 6.0 / h[i]
            B[i, i] = -6.0 / h[i] - 6.0 / h[i-1]
            B[i, i-1] = 6.0 / h[i-1]

        self.second_derivative_matrix = np.linalg.solve(A, B)

    def _local_weights(self, t: float):
        """Per-node weights of S(t) and S'(t) inside the bracketing interval."""
        n = len(self.times)
        idx = self._bracket(t)
        h = self.times[idx + 1] - self.times[idx]
        dx = t - self.times[idx]
        m_lo = self.second_derivative_matrix[idx]
        m_hi = self.second_derivative_matrix[idx + 1]

        e_lo = np.zeros(n)
        e_hi = np.zeros(n)
        e_lo[idx] = 1.0
        e_hi[idx + 1] = 1.0

        # S_i(x) = a + b*dx + c*dx^2 + d*dx^3
        b = (e_hi - e_lo) / h - h * (m_hi + 2 * m_lo) / 6
        c = m_lo / 2
        d = (m_hi - m_lo) / (6 * h)
        value = e_lo + b * dx + c * dx**2 + d * dx**3
        slope = b + 2 * c * dx + 3 * d * dx**2
        return value, slope

    def interpolate(self, t: float) -> float:
        """Evaluate cubic spline at point t."""
        self._check_fitted()
        return float(np.dot(self.parameter_sensitivity(t), self.values))

    def derivative(self, t: float) -> float:
        """First derivative of cubic spline at point t."""
        self._check_fitted()

        if t < self.times[0] or t > self.times[-1]:
            return 0.0

        _, slope = self._local_weights(t)
        return float(np.dot(slope, self.values))

    def parameter_sensitivity(self, t: float) -> np.ndarray:
        self._check_fitted()
        n = len(self.times)

        # Flat extrapolation
        if t <= self.times[0]:
            weights = np.zeros(n)
            weights[0] = 1.0
            return weights
        if t >= self.times[-1]:
            weights = np.zeros(n)
            weights[-1] = 1.0
            return weights

        value, _ = self._local_weights(t)
        return value


class LogLinearInterpolator(Interpolator):
    """
    Log-linear interpolation.

    Interpolates linearly in log(value) space, which corresponds to
    piecewise constant forward rates when the values are discount factors.
    Flat to the left, linear in log space to the right.
    """

    def __init__(self):
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None
        self.log_values: Optional[np.ndarray] = None

    def fit(self, times: np.ndarray, values: np.ndarray) -> None:
        """
        Fit log-linear interpolator.

        Args:
            times: x-values
            values: Strictly positive node values (not log!)
        """
        times, values = self._prepare(times, values)
        if np.any(values <= 0):
            raise ValueError("Log-linear interpolation requires positive values")
        self.times = times
        self.values = values
        self.log_values = np.log(values)

    def _weight(self, t: float):
        if t <= self.times[0]:
            return 0, 0.0
        idx = self._bracket(t)
        t0, t1 = self.times[idx], self.times[idx + 1]
        return idx, (t - t0) / (t1 - t0)

    def interpolate(self, t: float) -> float:
        self._check_fitted()
        idx, w = self._weight(t)
        return float(np.exp((1.0 - w) * self.log_values[idx] + w * self.log_values[idx + 1]))

    def derivative(self, t: float) -> float:
        """Derivative of the interpolated value with respect to x."""
        self._check_fitted()

        if t < self.times[0]:
            return 0.0

        idx = self._bracket(t)
        slope = ((self.log_values[idx + 1] - self.log_values[idx]) /
                 (self.times[idx + 1] - self.times[idx]))
        return float(self.interpolate(t) * slope)

    def parameter_sensitivity(self, t: float) -> np.ndarray:
        self._check_fitted()
        weights = np.zeros(len(self.times))
        idx, w = self._weight(t)
        value = self.interpolate(t)
        weights[idx] = value * (1.0 - w) / self.values[idx]
        weights[idx + 1] += value * w / self.values[idx + 1]
        return weights


def create_interpolator(method: str) -> Interpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: One of "linear", "cubic_spline", "log_linear"

    Returns:
        Interpolator instance
    """
    method = method.lower().replace("-", "_").replace(" ", "_")

    if method in ("linear", "lin"):
        return LinearInterpolator()
    elif method in ("cubic_spline", "cubic", "spline", "natural_cubic_spline"):
        return CubicSplineInterpolator()
    elif method in ("log_linear", "loglinear"):
        return LogLinearInterpolator()
    else:
        raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "Interpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "LogLinearInterpolator",
    "create_interpolator",
]
