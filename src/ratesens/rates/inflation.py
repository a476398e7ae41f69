"""
Price index values from a curve of index levels by month.

The curve's x-axis is the number of months from the valuation month;
months with a published fixing up to the valuation month use the fixing.
"""

import logging
from datetime import date

import pandas as pd

from ..curves.curve import Curve, ValueType
from ..dates import months_between, to_month
from ..errors import ConfigurationError
from ..indices import PriceIndex, PriceIndexObservation
from ..sensitivity.parameter import CurrencyParameterSensitivities
from ..sensitivity.point import (
    PointSensitivity,
    PointSensitivityBuilder,
    SensitivityKind,
    inflation_rate_sensitivity,
)
from .timeseries import FixingData, fixing_for_month, monthly_fixings

logger = logging.getLogger(__name__)


class SimplePriceIndexValues:
    """
    Values of a price index: fixings for the past, a curve for the future.

    Attributes:
        index: The price index
        valuation_date: Valuation date
        curve: Curve with MONTHS x-values and PRICE_INDEX y-values
        fixings: Monthly fixings
    """

    def __init__(self, index: PriceIndex, valuation_date: date, curve: Curve, fixings: FixingData = None):
        md = curve.metadata
        if md.x_value_type != ValueType.MONTHS:
            raise ConfigurationError(f"Incorrect x-value type for price index values: {md.x_value_type.value}")
        if md.y_value_type != ValueType.PRICE_INDEX:
            raise ConfigurationError(f"Incorrect y-value type for price index values: {md.y_value_type.value}")
        self.index = index
        self.valuation_date = valuation_date
        self.valuation_month = to_month(valuation_date)
        self.curve = curve
        self.fixings: pd.Series = monthly_fixings(fixings)

    def _months(self, month: pd.Period) -> float:
        return float(months_between(self.valuation_month, month))

    def _fixing(self, observation: PriceIndexObservation):
        if observation.month <= self.valuation_month:
            return fixing_for_month(self.fixings, observation.month)
        return None

    def value(self, observation: PriceIndexObservation) -> float:
        """Index level for the observation month."""
        fixing = self._fixing(observation)
        if fixing is not None:
            return fixing
        if observation.month < self.valuation_month:
            logger.warning("No %s fixing for elapsed month %s, using the curve", self.index, observation.month)
        return self.curve.y_value(self._months(observation.month))

    def value_point_sensitivity(self, observation: PriceIndexObservation) -> PointSensitivityBuilder:
        if self._fixing(observation) is not None:
            return PointSensitivityBuilder.none()
        return PointSensitivityBuilder.of(inflation_rate_sensitivity(observation, 1.0))

    def parameter_sensitivity(self, point: PointSensitivity) -> CurrencyParameterSensitivities:
        if point.kind != SensitivityKind.INFLATION_RATE:
            raise ValueError(f"Expected inflation sensitivity, got {point.kind.value}")
        unit = self.curve.y_value_parameter_sensitivity(self._months(point.reference_month))
        return CurrencyParameterSensitivities.of(
            self.curve.create_parameter_sensitivity(point.value_currency, unit * point.value)
        )

    def with_curve(self, curve: Curve) -> "SimplePriceIndexValues":
        return SimplePriceIndexValues(self.index, self.valuation_date, curve, self.fixings)


__all__ = ["SimplePriceIndexValues"]
