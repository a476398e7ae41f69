"""
Interpolated inflation rate computation.

The reference index at each end of the period is interpolated between two
consecutive months:

    I_start = w * I(start_month) + (1 - w) * I(start_interpolation_month)
    I_end   = w * I(end_month)   + (1 - w) * I(end_interpolation_month)
    rate    = I_end / I_start - 1
"""

from dataclasses import dataclass
from datetime import date
from typing import Union

import pandas as pd

from ..dates import to_month
from ..indices import PriceIndex, PriceIndexObservation
from ..sensitivity.point import PointSensitivityBuilder
from .explain import ExplainKey, ExplainMapBuilder

MonthLike = Union[date, str, pd.Period]


@dataclass(frozen=True)
class InflationInterpolatedRateComputation:
    """
    Inflation rate from interpolated start and end index values.

    Attributes:
        index: Price index
        start_month: First reference month of the start index
        start_interpolation_month: Second reference month of the start index
        end_month: First reference month of the end index
        end_interpolation_month: Second reference month of the end index
        weight: Weight of the first month in each interpolation, in [0, 1]
    """
    index: PriceIndex
    start_month: pd.Period
    start_interpolation_month: pd.Period
    end_month: pd.Period
    end_interpolation_month: pd.Period
    weight: float

    def __post_init__(self):
        if not self.start_month < self.end_month:
            raise ValueError("Start month must be before end month")
        if not self.start_month < self.start_interpolation_month:
            raise ValueError("Start interpolation month must be after start month")
        if not self.end_month < self.end_interpolation_month:
            raise ValueError("End interpolation month must be after end month")
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"Weight must be in [0, 1], got {self.weight}")

    @classmethod
    def of(
        cls,
        index: PriceIndex,
        start_month: MonthLike,
        end_month: MonthLike,
        weight: float
    ) -> "InflationInterpolatedRateComputation":
        """Interpolate each reference month with the month after it."""
        start = to_month(start_month)
        end = to_month(end_month)
        return cls(index, start, start + 1, end, end + 1, weight)

    def observations(self):
        """Observations of the start pair and the end pair."""
        return (
            PriceIndexObservation(self.index, self.start_month),
            PriceIndexObservation(self.index, self.start_interpolation_month),
            PriceIndexObservation(self.index, self.end_month),
            PriceIndexObservation(self.index, self.end_interpolation_month),
        )


class ForwardInflationInterpolatedRateComputationFn:
    """
    Inflation rate from forward price index values, fixings where published.

    The rate sensitivity flows to the four reference months through the
    price index curve; published months contribute nothing.
    """

    def _index_values(self, computation: InflationInterpolatedRateComputation, values):
        w = computation.weight
        s1, s2, e1, e2 = computation.observations()
        start = w * values.value(s1) + (1.0 - w) * values.value(s2)
        end = w * values.value(e1) + (1.0 - w) * values.value(e2)
        return start, end

    def rate(
        self,
        computation: InflationInterpolatedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> float:
        values = provider.price_index_values(computation.index)
        start, end = self._index_values(computation, values)
        return end / start - 1.0

    def rate_sensitivity(
        self,
        computation: InflationInterpolatedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        values = provider.price_index_values(computation.index)
        start, end = self._index_values(computation, values)
        w = computation.weight
        s1, s2, e1, e2 = computation.observations()

        start_sens = (values.value_point_sensitivity(s1).multiplied_by(w)
                      .combined_with(values.value_point_sensitivity(s2).multiplied_by(1.0 - w)))
        end_sens = (values.value_point_sensitivity(e1).multiplied_by(w)
                    .combined_with(values.value_point_sensitivity(e2).multiplied_by(1.0 - w)))
        return (start_sens.multiplied_by(-end / (start * start))
                .combined_with(end_sens.multiplied_by(1.0 / start)))

    def explain_rate(
        self,
        computation: InflationInterpolatedRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        values = provider.price_index_values(computation.index)
        w = computation.weight
        for obs, weight in zip(computation.observations(), (w, 1.0 - w, w, 1.0 - w)):
            value = values.value(obs)

            def explain(child, obs=obs, weight=weight, value=value):
                child.put(ExplainKey.INDEX, obs.index.name)
                child.put(ExplainKey.FIXING_DATE, obs.month)
                child.put(ExplainKey.INDEX_VALUE, value)
                child.put(ExplainKey.WEIGHT, weight)

            builder.add_list_entry(ExplainKey.OBSERVATIONS, explain)
        rate = self.rate(computation, start_date, end_date, provider)
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


__all__ = [
    "InflationInterpolatedRateComputation",
    "ForwardInflationInterpolatedRateComputationFn",
]
