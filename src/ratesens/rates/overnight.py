"""
Overnight index rates implied by discount factors.

The forward rate of an observation is the simple rate between its
effective and maturity dates:

    rate = (DF(effective) / DF(maturity) - 1) / year_fraction

Historical fixings take priority once the fixing has been published.
"""

import logging
from datetime import date

import pandas as pd

from ..conventions import year_fraction
from ..curves.discount_factors import DiscountFactors
from ..errors import RuntimeCalculationError
from ..indices import OvernightIndex, OvernightIndexObservation
from ..sensitivity.parameter import CurrencyParameterSensitivities
from ..sensitivity.point import (
    PointSensitivity,
    PointSensitivityBuilder,
    SensitivityKind,
    overnight_rate_sensitivity,
)
from .timeseries import FixingData, daily_fixings, fixing_on

logger = logging.getLogger(__name__)


class DiscountOvernightIndexRates:
    """
    Forward and historic rates of one overnight index.

    Attributes:
        index: The overnight index
        discount_factors: Forward curve expressed as discount factors
        fixings: Historical fixings keyed by fixing date
    """

    def __init__(
        self,
        index: OvernightIndex,
        discount_factors: DiscountFactors,
        fixings: FixingData = None
    ):
        self.index = index
        self.discount_factors = discount_factors
        self.fixings: pd.Series = daily_fixings(fixings)

    @property
    def valuation_date(self) -> date:
        return self.discount_factors.valuation_date

    @property
    def curve(self):
        return self.discount_factors.curve

    def _check(self, observation: OvernightIndexObservation) -> None:
        if observation.index != self.index:
            raise ValueError(f"Observation index {observation.index} does not match {self.index}")

    # Rates -----------------------------------------------------------------
    def rate(self, observation: OvernightIndexObservation) -> float:
        """
        Rate for an observation: historic fixing once published, else forward.

        Raises:
            RuntimeCalculationError: If the fixing was published before the
                valuation date but is missing from the time series
        """
        self._check(observation)
        if observation.publication_date <= self.valuation_date:
            return self._historic_rate(observation)
        return self.rate_ignore_fixings(observation)

    def _historic_rate(self, observation: OvernightIndexObservation) -> float:
        fixing = fixing_on(self.fixings, observation.fixing_date)
        if fixing is not None:
            return fixing
        if observation.publication_date < self.valuation_date:
            raise RuntimeCalculationError(
                f"Unable to get fixing for {self.index.name} on date {observation.fixing_date}"
            )
        logger.debug("No %s fixing published on %s yet, using forward rate",
                     self.index.name, observation.fixing_date)
        return self.rate_ignore_fixings(observation)

    def rate_ignore_fixings(self, observation: OvernightIndexObservation) -> float:
        """Forward rate from the curve, even for past observations."""
        df_start = self.discount_factors.discount_factor(observation.effective_date)
        df_end = self.discount_factors.discount_factor(observation.maturity_date)
        return (df_start / df_end - 1.0) / observation.year_fraction

    def period_rate(self, start_observation: OvernightIndexObservation, end_date: date) -> float:
        """
        Simple forward rate from the start observation's effective date to end_date.

        Used to estimate the compounded rate of many consecutive overnight
        periods in a single step.
        """
        self._check(start_observation)
        start = start_observation.effective_date
        if end_date <= start:
            raise ValueError(f"End date {end_date} must be after start date {start}")
        df_start = self.discount_factors.discount_factor(start)
        df_end = self.discount_factors.discount_factor(end_date)
        accrual = year_fraction(start, end_date, self.index.day_count)
        return (df_start / df_end - 1.0) / accrual

    # Sensitivities ---------------------------------------------------------
    def has_fixing_priority(self, observation: OvernightIndexObservation) -> bool:
        """True when `rate` returns a historic fixing for the observation."""
        publication = observation.publication_date
        if publication < self.valuation_date:
            return True
        return (publication == self.valuation_date
                and fixing_on(self.fixings, observation.fixing_date) is not None)

    def rate_point_sensitivity(self, observation: OvernightIndexObservation) -> PointSensitivityBuilder:
        """Sensitivity of `rate` to the forward curve; none once the fixing is known."""
        self._check(observation)
        if self.has_fixing_priority(observation):
            return PointSensitivityBuilder.none()
        return PointSensitivityBuilder.of(overnight_rate_sensitivity(observation, 1.0))

    def rate_ignore_fixings_point_sensitivity(
        self,
        observation: OvernightIndexObservation
    ) -> PointSensitivityBuilder:
        return PointSensitivityBuilder.of(overnight_rate_sensitivity(observation, 1.0))

    def period_rate_point_sensitivity(
        self,
        start_observation: OvernightIndexObservation,
        end_date: date
    ) -> PointSensitivityBuilder:
        self._check(start_observation)
        if end_date <= start_observation.effective_date:
            raise ValueError(f"End date {end_date} must be after start date {start_observation.effective_date}")
        return PointSensitivityBuilder.of(overnight_rate_sensitivity(start_observation, 1.0, end_date))

    def parameter_sensitivity(self, point: PointSensitivity) -> CurrencyParameterSensitivities:
        """
        Convert an overnight rate sensitivity into curve parameter sensitivities.

        The forward rate depends on the discount factors at both ends of
        its period; each end contributes through its zero-rate sensitivity.
        """
        if point.kind != SensitivityKind.OVERNIGHT_RATE:
            raise ValueError(f"Expected overnight rate sensitivity, got {point.kind.value}")
        observation = self.index.observe_on(point.fixing_date)
        start = observation.effective_date
        end = point.end_date
        accrual = year_fraction(start, end, self.index.day_count)
        df_start = self.discount_factors.discount_factor(start)
        df_end = self.discount_factors.discount_factor(end)

        df_start_bar = point.value / (accrual * df_end)
        df_end_bar = -point.value * df_start / (accrual * df_end * df_end)

        ccy = point.value_currency
        zr_start = self.discount_factors.zero_rate_point_sensitivity(start, ccy).multiplied_by(df_start_bar)
        zr_end = self.discount_factors.zero_rate_point_sensitivity(end, ccy).multiplied_by(df_end_bar)
        return (self.discount_factors.parameter_sensitivity(zr_start)
                .combined_with(self.discount_factors.parameter_sensitivity(zr_end)))

    def with_discount_factors(self, discount_factors: DiscountFactors) -> "DiscountOvernightIndexRates":
        return DiscountOvernightIndexRates(self.index, discount_factors, self.fixings)

    def with_fixings(self, fixings: FixingData) -> "DiscountOvernightIndexRates":
        return DiscountOvernightIndexRates(self.index, self.discount_factors, fixings)

    def __repr__(self) -> str:
        return f"DiscountOvernightIndexRates({self.index.name}, {self.discount_factors!r})"


__all__ = ["DiscountOvernightIndexRates"]
