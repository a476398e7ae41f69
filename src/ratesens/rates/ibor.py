"""
Ibor index rates implied by discount factors.

Forward rate of a fixing = simple rate over the deposit period of the
observation. A fixing on or before the valuation date is read from the
time series; only a fixing on the valuation date itself may fall back to
the forward curve.
"""

from datetime import date

import pandas as pd

from ..curves.discount_factors import DiscountFactors
from ..errors import RuntimeCalculationError
from ..indices import IborIndex, IborIndexObservation
from ..sensitivity.parameter import CurrencyParameterSensitivities
from ..sensitivity.point import (
    PointSensitivity,
    PointSensitivityBuilder,
    SensitivityKind,
    ibor_rate_sensitivity,
)
from .timeseries import FixingData, daily_fixings, fixing_on


class DiscountIborIndexRates:
    """
    Forward and historic rates of one Ibor index.

    Attributes:
        index: The Ibor index
        discount_factors: Forward curve expressed as discount factors
        fixings: Historical fixings keyed by fixing date
    """

    def __init__(self, index: IborIndex, discount_factors: DiscountFactors, fixings: FixingData = None):
        self.index = index
        self.discount_factors = discount_factors
        self.fixings: pd.Series = daily_fixings(fixings)

    @property
    def valuation_date(self) -> date:
        return self.discount_factors.valuation_date

    @property
    def curve(self):
        return self.discount_factors.curve

    def rate(self, observation: IborIndexObservation) -> float:
        """
        Rate for an observation.

        Raises:
            RuntimeCalculationError: If a fixing before the valuation date is missing
        """
        if observation.fixing_date <= self.valuation_date:
            fixing = fixing_on(self.fixings, observation.fixing_date)
            if fixing is not None:
                return fixing
            if observation.fixing_date < self.valuation_date:
                raise RuntimeCalculationError(
                    f"Unable to get fixing for {self.index.name} on date {observation.fixing_date}"
                )
        return self.rate_ignore_fixings(observation)

    def rate_ignore_fixings(self, observation: IborIndexObservation) -> float:
        df_start = self.discount_factors.discount_factor(observation.effective_date)
        df_end = self.discount_factors.discount_factor(observation.maturity_date)
        return (df_start / df_end - 1.0) / observation.year_fraction

    def rate_point_sensitivity(self, observation: IborIndexObservation) -> PointSensitivityBuilder:
        fixing_date = observation.fixing_date
        if fixing_date < self.valuation_date or (
                fixing_date == self.valuation_date and fixing_on(self.fixings, fixing_date) is not None):
            return PointSensitivityBuilder.none()
        return PointSensitivityBuilder.of(ibor_rate_sensitivity(observation, 1.0))

    def parameter_sensitivity(self, point: PointSensitivity) -> CurrencyParameterSensitivities:
        """Convert an Ibor rate sensitivity into curve parameter sensitivities."""
        if point.kind != SensitivityKind.IBOR_RATE:
            raise ValueError(f"Expected Ibor rate sensitivity, got {point.kind.value}")
        observation = self.index.observe(point.fixing_date)
        start = observation.effective_date
        end = observation.maturity_date
        accrual = observation.year_fraction
        df_start = self.discount_factors.discount_factor(start)
        df_end = self.discount_factors.discount_factor(end)

        df_start_bar = point.value / (accrual * df_end)
        df_end_bar = -point.value * df_start / (accrual * df_end * df_end)

        ccy = point.value_currency
        zr_start = self.discount_factors.zero_rate_point_sensitivity(start, ccy).multiplied_by(df_start_bar)
        zr_end = self.discount_factors.zero_rate_point_sensitivity(end, ccy).multiplied_by(df_end_bar)
        return (self.discount_factors.parameter_sensitivity(zr_start)
                .combined_with(self.discount_factors.parameter_sensitivity(zr_end)))

    def with_discount_factors(self, discount_factors: DiscountFactors) -> "DiscountIborIndexRates":
        return DiscountIborIndexRates(self.index, discount_factors, self.fixings)


__all__ = ["DiscountIborIndexRates"]
