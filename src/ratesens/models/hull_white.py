"""
Hull-White one-factor model with piecewise constant volatility.

    dr(t) = (theta(t) - a * r(t)) dt + sigma(t) dW(t)

sigma is constant between consecutive volatility times. The model gives
the explicit European swaption formula of Henrard (2003):

    alpha_i = (exp(-a*t_num) - exp(-a*t_i)) * sqrt(int sigma(s)^2 exp(2as) ds / (2a^3))
    kappa   : sum_i c_i * exp(-alpha_i^2/2 - (alpha_i - alpha_0) * kappa) = 0
    PV      = sum_i c_i * N(omega * (kappa + alpha_i))

where c_i are the discounted cash-flow equivalents of the underlying swap
and omega is +1 for a receiver and -1 for a payer.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence, Tuple

import numpy as np
from scipy.optimize import brentq
from scipy.stats import norm

from ..conventions import DayCount, relative_year_fraction
from ..errors import RuntimeCalculationError

logger = logging.getLogger(__name__)

# Last volatility time, far beyond any maturity
VOLATILITY_TIME_MAX = 1000.0

N = norm.cdf


@dataclass(frozen=True)
class HullWhiteOneFactorParameters:
    """
    Model parameters.

    Attributes:
        mean_reversion: Mean reversion speed a
        volatility: Volatility on each period, one more than the interior times
        volatility_time: Full time grid, starting at 0 and ending at VOLATILITY_TIME_MAX
    """
    mean_reversion: float
    volatility: Tuple[float, ...]
    volatility_time: Tuple[float, ...]

    def __post_init__(self):
        if self.mean_reversion == 0.0:
            raise ValueError("Mean reversion must be non-zero")
        if len(self.volatility_time) != len(self.volatility) + 1:
            raise ValueError("Volatility time grid must have one more point than the volatilities")
        if any(v < 0 for v in self.volatility):
            raise ValueError("Volatilities must not be negative")
        if any(t2 <= t1 for t1, t2 in zip(self.volatility_time, self.volatility_time[1:])):
            raise ValueError("Volatility times must be strictly increasing")

    @classmethod
    def of(
        cls,
        mean_reversion: float,
        volatility: Sequence[float],
        volatility_time: Sequence[float] = ()
    ) -> "HullWhiteOneFactorParameters":
        """
        Build parameters from the interior volatility times.

        Args:
            mean_reversion: Mean reversion speed
            volatility: One volatility per period
            volatility_time: Times separating the periods, without 0 and the end

        Returns:
            Parameters with the full time grid
        """
        times = (0.0,) + tuple(float(t) for t in volatility_time) + (VOLATILITY_TIME_MAX,)
        return cls(float(mean_reversion), tuple(float(v) for v in volatility), times)


def _period_index(times: Tuple[float, ...], t: float) -> int:
    """Index i such that times[i-1] <= t < times[i]."""
    return int(np.searchsorted(times, t, side="right"))


class HullWhiteModel:
    """
    Hull-White model bound to a valuation date.

    Args:
        parameters: Model parameters
        valuation_date: Date of time zero
        day_count: Day count converting dates to model times
    """

    def __init__(
        self,
        parameters: HullWhiteOneFactorParameters,
        valuation_date: date,
        day_count: DayCount = DayCount.ACT_365F
    ):
        self.parameters = parameters
        self.valuation_date = valuation_date
        self.day_count = day_count

    def relative_time(self, d: date) -> float:
        return relative_year_fraction(self.valuation_date, d, self.day_count)

    def alpha(self, start_expiry: float, end_expiry: float, numeraire_time: float, bond_maturity: float) -> float:
        """
        Zero-coupon bond volatility divided by a bond numeraire.

        Args:
            start_expiry: Start of the expiry period
            end_expiry: End of the expiry period
            numeraire_time: Maturity of the numeraire bond
            bond_maturity: Maturity of the bond

        Returns:
            Re-based bond volatility
        """
        a = self.parameters.mean_reversion
        times = self.parameters.volatility_time
        vols = self.parameters.volatility
        factor1 = np.exp(-a * numeraire_time) - np.exp(-a * bond_maturity)
        start_index = _period_index(times, start_expiry)
        end_index = _period_index(times, end_expiry)
        s = [start_expiry] + list(times[start_index:end_index]) + [end_expiry]
        exp2as = np.exp(2.0 * a * np.array(s))
        factor2 = 0.0
        for k in range(len(s) - 1):
            sigma = vols[k + start_index - 1]
            factor2 += sigma * sigma * (exp2as[k + 1] - exp2as[k])
        return float(factor1 * np.sqrt(factor2 / (2.0 * a ** 3)))

    def alpha_for_dates(self, expiry_date: date, maturity_date: date) -> float:
        """alpha for a bond maturing at a date, numeraire at expiry."""
        expiry = self.relative_time(expiry_date)
        return self.alpha(0.0, expiry, expiry, self.relative_time(maturity_date))

    def kappa(self, discounted_cash_flows: Sequence[float], alphas: Sequence[float]) -> float:
        """
        Exercise boundary of the swaption.

        Args:
            discounted_cash_flows: Present values of the cash-flow equivalents
            alphas: Bond volatilities, same length

        Returns:
            Root kappa of the swap value in the model factor
        """
        cf = np.asarray(discounted_cash_flows, dtype=float)
        alpha = np.asarray(alphas, dtype=float)
        if cf.shape != alpha.shape or cf.size == 0:
            raise ValueError("Cash flows and alphas must be non-empty and of equal length")

        def swap_value(x: float) -> float:
            return float(np.sum(cf * np.exp(-0.5 * alpha * alpha - (alpha - alpha[0]) * x)))

        low, high = -2.0, 2.0
        for _ in range(50):
            if swap_value(low) * swap_value(high) <= 0.0:
                break
            width = high - low
            low -= width
            high += width
        else:
            raise RuntimeCalculationError("Unable to bracket the swaption exercise boundary")
        logger.debug("Exercise boundary bracket [%.4f, %.4f]", low, high)
        return brentq(swap_value, low, high, xtol=1e-14)

    def swaption_value(self, discounted_cash_flows: Sequence[float], alphas: Sequence[float], omega: float) -> float:
        """
        Explicit swaption value for a long position.

        Args:
            discounted_cash_flows: Present values of the cash-flow equivalents
            alphas: Bond volatilities
            omega: +1 for a receiver swaption, -1 for a payer

        Returns:
            Swaption present value
        """
        kappa = self.kappa(discounted_cash_flows, alphas)
        cf = np.asarray(discounted_cash_flows, dtype=float)
        alpha = np.asarray(alphas, dtype=float)
        return float(np.sum(cf * N(omega * (kappa + alpha))))


__all__ = [
    "HullWhiteOneFactorParameters",
    "HullWhiteModel",
    "VOLATILITY_TIME_MAX",
]
