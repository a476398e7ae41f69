"""
Ibor rate computations: single fixing and weighted average of fixings.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Tuple

from ..indices import IborIndex, IborIndexObservation
from ..rates.timeseries import fixing_on
from ..sensitivity.point import PointSensitivityBuilder
from .explain import ExplainKey, ExplainMapBuilder


@dataclass(frozen=True)
class IborRateComputation:
    """Rate of a single Ibor fixing."""
    observation: IborIndexObservation

    @classmethod
    def of(cls, index: IborIndex, fixing_date: date) -> "IborRateComputation":
        return cls(index.observe(fixing_date))

    @property
    def index(self) -> IborIndex:
        return self.observation.index


@dataclass(frozen=True)
class IborAveragedFixing:
    """
    One fixing of an averaged Ibor rate.

    Attributes:
        observation: The Ibor observation
        weight: Weight in the average, e.g. the days the fixing applies for
        fixed_rate: Rate agreed in advance; overrides the observation when set
    """
    observation: IborIndexObservation
    weight: float = 1.0
    fixed_rate: Optional[float] = None

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"Weight must not be negative, got {self.weight}")


@dataclass(frozen=True)
class IborAveragedRateComputation:
    """Weighted average of several fixings of one Ibor index."""
    fixings: Tuple[IborAveragedFixing, ...]

    def __post_init__(self):
        if not self.fixings:
            raise ValueError("Averaged rate requires at least one fixing")
        indices = {f.observation.index for f in self.fixings}
        if len(indices) != 1:
            raise ValueError("All fixings of an averaged rate must use the same index")
        if self.total_weight <= 0:
            raise ValueError("Total weight of an averaged rate must be positive")

    @classmethod
    def of(cls, fixings: Sequence[IborAveragedFixing]) -> "IborAveragedRateComputation":
        return cls(tuple(fixings))

    @property
    def index(self) -> IborIndex:
        return self.fixings[0].observation.index

    @property
    def total_weight(self) -> float:
        return sum(f.weight for f in self.fixings)


def _explain_observation(builder: ExplainMapBuilder, rates, observation: IborIndexObservation, rate: float) -> None:
    builder.put(ExplainKey.INDEX, observation.index.name)
    builder.put(ExplainKey.FIXING_DATE, observation.fixing_date)
    builder.put(ExplainKey.START_DATE, observation.effective_date)
    builder.put(ExplainKey.END_DATE, observation.maturity_date)
    builder.put(ExplainKey.ACCRUAL_YEAR_FRACTION, observation.year_fraction)
    builder.put(ExplainKey.INDEX_VALUE, rate)
    from_series = (observation.fixing_date <= rates.valuation_date
                   and fixing_on(rates.fixings, observation.fixing_date) is not None)
    builder.put(ExplainKey.FROM_FIXING_SERIES, from_series)


class ForwardIborRateComputationFn:
    """Ibor rate read from the provider's Ibor index rates."""

    def rate(self, computation: IborRateComputation, start_date: date, end_date: date, provider) -> float:
        return provider.ibor_index_rates(computation.index).rate(computation.observation)

    def rate_sensitivity(
        self,
        computation: IborRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        return provider.ibor_index_rates(computation.index).rate_point_sensitivity(computation.observation)

    def explain_rate(
        self,
        computation: IborRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        rates = provider.ibor_index_rates(computation.index)
        rate = rates.rate(computation.observation)
        builder.add_list_entry(
            ExplainKey.OBSERVATIONS,
            lambda child: _explain_observation(child, rates, computation.observation, rate))
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


class ForwardIborAveragedRateComputationFn:
    """Weighted average of Ibor rates: sum(w_i * r_i) / sum(w_i)."""

    def _fixing_rate(self, fixing: IborAveragedFixing, rates) -> float:
        if fixing.fixed_rate is not None:
            return fixing.fixed_rate
        return rates.rate(fixing.observation)

    def rate(self, computation: IborAveragedRateComputation, start_date: date, end_date: date, provider) -> float:
        rates = provider.ibor_index_rates(computation.index)
        weighted = sum(f.weight * self._fixing_rate(f, rates) for f in computation.fixings)
        return weighted / computation.total_weight

    def rate_sensitivity(
        self,
        computation: IborAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        rates = provider.ibor_index_rates(computation.index)
        total = computation.total_weight
        result = PointSensitivityBuilder.none()
        for fixing in computation.fixings:
            if fixing.fixed_rate is not None:
                continue
            result = result.combined_with(
                rates.rate_point_sensitivity(fixing.observation).multiplied_by(fixing.weight / total))
        return result

    def explain_rate(
        self,
        computation: IborAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        rates = provider.ibor_index_rates(computation.index)
        for fixing in computation.fixings:
            fixing_rate = self._fixing_rate(fixing, rates)

            def explain(child, fixing=fixing, fixing_rate=fixing_rate):
                _explain_observation(child, rates, fixing.observation, fixing_rate)
                child.put(ExplainKey.WEIGHT, fixing.weight)

            builder.add_list_entry(ExplainKey.OBSERVATIONS, explain)
        rate = self.rate(computation, start_date, end_date, provider)
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


__all__ = [
    "IborRateComputation",
    "IborAveragedFixing",
    "IborAveragedRateComputation",
    "ForwardIborRateComputationFn",
    "ForwardIborAveragedRateComputationFn",
]
