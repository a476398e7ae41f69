"""
Overnight rate computations: compounded and averaged accrual periods.

An accrual period covers the fixings from the fixing start date up to the
business day before the fixing end date. Each fixing falls in one of three
regions:

- fixed: already published on the valuation date, read from the fixings
- forward: estimated from the curve, either fixing by fixing or with one
  period rate covering all remaining non-cutoff fixings
- cutoff: the last ``rate_cutoff_days - 1`` fixings, which reuse the rate
  of the last fixing before the cutoff

Compounded:
    rate = (prod(1 + af_i * r_i) - 1) / AF
Averaged:
    rate = sum(af_i * r_i) / sum(af_i)
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from ..conventions import year_fraction
from ..errors import RuntimeCalculationError
from ..indices import OvernightIndex, OvernightIndexObservation
from ..rates.timeseries import fixing_on
from ..sensitivity.point import PointSensitivityBuilder
from .explain import ExplainKey, ExplainMapBuilder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _OvernightRateComputation:
    """
    Overnight rate computation over a fixing period.

    Attributes:
        index: Overnight index
        start_date: First fixing date
        end_date: Fixing date of the period end; not itself a fixing of the period
        rate_cutoff_days: Business days of rate cutoff, 0 or 1 for none
    """
    index: OvernightIndex
    start_date: date
    end_date: date
    rate_cutoff_days: int = 0

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date {self.start_date} must be before end date {self.end_date}")
        if self.rate_cutoff_days < 0:
            raise ValueError(f"Rate cutoff days must not be negative, got {self.rate_cutoff_days}")

    @classmethod
    def of(cls, index: OvernightIndex, start_date: date, end_date: date, rate_cutoff_days: int = 0):
        """
        Create from accrual (effective) dates.

        Args:
            index: Overnight index
            start_date: First effective date of the period
            end_date: Effective date the period ends on
            rate_cutoff_days: Business days of rate cutoff
        """
        return cls(
            index,
            index.calculate_fixing_from_effective(start_date),
            index.calculate_fixing_from_effective(end_date),
            rate_cutoff_days,
        )

    @property
    def fixing_calendar(self):
        return self.index.fixing_calendar

    def observe_on(self, fixing_date: date) -> OvernightIndexObservation:
        return self.index.observe_on(fixing_date)

    def calculate_effective_from_fixing(self, fixing_date: date) -> date:
        return self.index.calculate_effective_from_fixing(fixing_date)

    def calculate_maturity_from_fixing(self, fixing_date: date) -> date:
        return self.index.calculate_maturity_from_fixing(fixing_date)


@dataclass(frozen=True)
class OvernightCompoundedRateComputation(_OvernightRateComputation):
    """Daily compounded overnight rate, e.g. an OIS coupon."""


@dataclass(frozen=True)
class OvernightAveragedRateComputation(_OvernightRateComputation):
    """Arithmetic average of overnight rates, e.g. a Fed Fund coupon."""


class _FixingPeriod:
    """
    Splits an overnight accrual period into fixed, forward and cutoff regions.

    Args:
        computation: The overnight computation
        rates: Rate source with ``valuation_date``, ``fixings``, ``rate``,
            ``rate_point_sensitivity``, ``period_rate`` and
            ``period_rate_point_sensitivity``
    """

    def __init__(self, computation: _OvernightRateComputation, rates):
        self.computation = computation
        self.rates = rates
        self.index = computation.index
        cal = computation.fixing_calendar

        self.first_fixing = computation.start_date
        self.last_fixing = cal.previous(computation.end_date)
        cutoff_offset = max(computation.rate_cutoff_days, 1)
        self.last_fixing_non_cutoff = cal.shift(self.last_fixing, -(cutoff_offset - 1))
        if self.last_fixing_non_cutoff < self.first_fixing:
            raise ValueError("Rate cutoff covers the whole accrual period")

        self.cutoff_observations: List[OvernightIndexObservation] = []
        fixing = cal.next(self.last_fixing_non_cutoff)
        while fixing <= self.last_fixing:
            self.cutoff_observations.append(computation.observe_on(fixing))
            fixing = cal.next(fixing)

        self.accrual_factor_total = year_fraction(
            computation.calculate_effective_from_fixing(self.first_fixing),
            computation.calculate_maturity_from_fixing(self.last_fixing),
            self.index.day_count,
        )
        self.fixed, self.next_fixing = self._fixed_region()
        logger.debug("%s %s to %s: %d fixed observations, next fixing %s",
                     self.index.name, self.first_fixing, self.last_fixing, len(self.fixed), self.next_fixing)

    def _required_fixing(self, observation: OvernightIndexObservation) -> float:
        rate = fixing_on(self.rates.fixings, observation.fixing_date)
        if rate is None:
            raise RuntimeCalculationError(
                f"Could not get fixing value of index {self.index.name} for date {observation.fixing_date}"
            )
        return rate

    def _fixed_region(self) -> Tuple[List[Tuple[OvernightIndexObservation, float]], date]:
        """Observations already fixed with their rates, and the first fixing still to forecast."""
        cal = self.computation.fixing_calendar
        valuation = self.rates.valuation_date
        entries = []
        fixing = self.first_fixing
        while fixing <= self.last_fixing_non_cutoff:
            obs = self.computation.observe_on(fixing)
            if obs.publication_date < valuation:
                rate = self._required_fixing(obs)
            elif obs.publication_date == valuation:
                rate = fixing_on(self.rates.fixings, fixing)
                if rate is None:
                    break
            else:
                break
            entries.append((obs, rate))
            if fixing == self.last_fixing_non_cutoff:
                entries.extend((cutoff_obs, rate) for cutoff_obs in self.cutoff_observations)
            fixing = cal.next(fixing)
        return entries, fixing

    @property
    def fully_fixed(self) -> bool:
        return self.next_fixing > self.last_fixing_non_cutoff

    def forward_period(self) -> Optional[Tuple[OvernightIndexObservation, date, float]]:
        """Start observation, end date and accrual of the forward non-cutoff region."""
        if self.fully_fixed:
            return None
        start_obs = self.computation.observe_on(self.next_fixing)
        end = self.computation.calculate_maturity_from_fixing(self.last_fixing_non_cutoff)
        accrual = year_fraction(start_obs.effective_date, end, self.index.day_count)
        return start_obs, end, accrual

    def cutoff_forward(self) -> Optional[Tuple[OvernightIndexObservation, List[float]]]:
        """Observation supplying the cutoff rate and the cutoff accruals, when not fixed."""
        if self.fully_fixed or not self.cutoff_observations:
            return None
        obs = self.computation.observe_on(self.last_fixing_non_cutoff)
        return obs, [o.year_fraction for o in self.cutoff_observations]


def _explain_period(period: _FixingPeriod, builder: ExplainMapBuilder, forward_rate: Optional[float]) -> None:
    """Observation entries for the fixed, forward and cutoff regions of a period."""
    index_name = period.index.name
    for obs, rate in period.fixed:
        builder.add_list_entry(ExplainKey.OBSERVATIONS, lambda child, obs=obs, rate=rate: child.put_all({
            ExplainKey.INDEX: index_name,
            ExplainKey.FIXING_DATE: obs.fixing_date,
            ExplainKey.START_DATE: obs.effective_date,
            ExplainKey.END_DATE: obs.maturity_date,
            ExplainKey.ACCRUAL_YEAR_FRACTION: obs.year_fraction,
            ExplainKey.INDEX_VALUE: rate,
            ExplainKey.FROM_FIXING_SERIES: True,
        }))
    fwd = period.forward_period()
    if fwd is not None:
        start_obs, end, accrual = fwd
        builder.add_list_entry(ExplainKey.OBSERVATIONS, lambda child: child.put_all({
            ExplainKey.INDEX: index_name,
            ExplainKey.FIXING_DATE: start_obs.fixing_date,
            ExplainKey.START_DATE: start_obs.effective_date,
            ExplainKey.END_DATE: end,
            ExplainKey.ACCRUAL_YEAR_FRACTION: accrual,
            ExplainKey.INDEX_VALUE: forward_rate,
            ExplainKey.FROM_FIXING_SERIES: False,
        }))
    cutoff = period.cutoff_forward()
    if cutoff is not None:
        source, _ = cutoff
        cutoff_rate = period.rates.rate(source)
        for obs in period.cutoff_observations:
            builder.add_list_entry(ExplainKey.OBSERVATIONS, lambda child, obs=obs: child.put_all({
                ExplainKey.INDEX: index_name,
                ExplainKey.FIXING_DATE: obs.fixing_date,
                ExplainKey.START_DATE: obs.effective_date,
                ExplainKey.END_DATE: obs.maturity_date,
                ExplainKey.ACCRUAL_YEAR_FRACTION: obs.year_fraction,
                ExplainKey.INDEX_VALUE: cutoff_rate,
                ExplainKey.FROM_FIXING_SERIES: False,
            }))


class ForwardOvernightCompoundedRateComputationFn:
    """
    Compounded overnight rate, forward region estimated with one period rate.
    """

    def rate(self, computation: OvernightCompoundedRateComputation, start_date: date, end_date: date, provider) -> float:
        period = _FixingPeriod(computation, provider.overnight_index_rates(computation.index))
        return (self._composition_factor(period) - 1.0) / period.accrual_factor_total

    def _fixed_factor(self, period: _FixingPeriod) -> float:
        factor = 1.0
        for obs, rate in period.fixed:
            factor *= 1.0 + obs.year_fraction * rate
        return factor

    def _forward_factor(self, period: _FixingPeriod) -> float:
        fwd = period.forward_period()
        if fwd is None:
            return 1.0
        start_obs, end, accrual = fwd
        return 1.0 + accrual * period.rates.period_rate(start_obs, end)

    def _cutoff_factor(self, period: _FixingPeriod) -> float:
        cutoff = period.cutoff_forward()
        if cutoff is None:
            return 1.0
        obs, accruals = cutoff
        rate = period.rates.rate(obs)
        return math.prod(1.0 + af * rate for af in accruals)

    def _composition_factor(self, period: _FixingPeriod) -> float:
        return self._fixed_factor(period) * self._forward_factor(period) * self._cutoff_factor(period)

    def rate_sensitivity(
        self,
        computation: OvernightCompoundedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        rates = provider.overnight_index_rates(computation.index)
        period = _FixingPeriod(computation, rates)
        if period.fully_fixed:
            return PointSensitivityBuilder.none()
        fixed = self._fixed_factor(period)
        forward = self._forward_factor(period)
        cutoff = self._cutoff_factor(period)
        total = period.accrual_factor_total

        start_obs, end, accrual = period.forward_period()
        result = rates.period_rate_point_sensitivity(start_obs, end).multiplied_by(
            fixed * cutoff * accrual / total)
        cutoff_fwd = period.cutoff_forward()
        if cutoff_fwd is not None:
            obs, accruals = cutoff_fwd
            rate = rates.rate(obs)
            d_cutoff = cutoff * sum(af / (1.0 + af * rate) for af in accruals)
            result = result.combined_with(
                rates.rate_point_sensitivity(obs).multiplied_by(fixed * forward * d_cutoff / total))
        return result

    def explain_rate(
        self,
        computation: OvernightCompoundedRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        rates = provider.overnight_index_rates(computation.index)
        period = _FixingPeriod(computation, rates)
        fwd = period.forward_period()
        forward_rate = rates.period_rate(fwd[0], fwd[1]) if fwd is not None else None
        _explain_period(period, builder, forward_rate)
        rate = self.rate(computation, start_date, end_date, provider)
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


class ForwardOvernightAveragedRateComputationFn:
    """
    Averaged overnight rate computed fixing by fixing.

    Each fixing is read through the rate source, which applies fixing
    priority itself.
    """

    def _weighted_observations(
        self,
        computation: OvernightAveragedRateComputation
    ) -> List[Tuple[OvernightIndexObservation, float]]:
        """Observation supplying the rate of each fixing, with the fixing's own accrual."""
        cal = computation.fixing_calendar
        last_fixing = cal.previous(computation.end_date)
        cutoff_offset = max(computation.rate_cutoff_days, 1)
        last_fixing_non_cutoff = cal.shift(last_fixing, -(cutoff_offset - 1))
        if last_fixing_non_cutoff < computation.start_date:
            raise ValueError("Rate cutoff covers the whole accrual period")
        cutoff_obs = computation.observe_on(last_fixing_non_cutoff)

        result = []
        fixing = computation.start_date
        while fixing <= last_fixing:
            obs = computation.observe_on(fixing)
            source = obs if fixing <= last_fixing_non_cutoff else cutoff_obs
            result.append((source, obs.year_fraction))
            fixing = cal.next(fixing)
        return result

    def rate(self, computation: OvernightAveragedRateComputation, start_date: date, end_date: date, provider) -> float:
        rates = provider.overnight_index_rates(computation.index)
        weighted = self._weighted_observations(computation)
        accrued = sum(rates.rate(obs) * af for obs, af in weighted)
        return accrued / sum(af for _, af in weighted)

    def rate_sensitivity(
        self,
        computation: OvernightAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        rates = provider.overnight_index_rates(computation.index)
        weighted = self._weighted_observations(computation)
        total = sum(af for _, af in weighted)
        result = PointSensitivityBuilder.none()
        for obs, af in weighted:
            if obs.publication_date < rates.valuation_date:
                # elapsed fixings carry no sensitivity but must be present
                rates.rate(obs)
            result = result.combined_with(rates.rate_point_sensitivity(obs).multiplied_by(af / total))
        return result

    def explain_rate(
        self,
        computation: OvernightAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        rates = provider.overnight_index_rates(computation.index)
        valuation = rates.valuation_date
        for obs, af in self._weighted_observations(computation):
            value = rates.rate(obs)
            from_series = (obs.publication_date <= valuation
                           and fixing_on(rates.fixings, obs.fixing_date) is not None)

            def explain(child, obs=obs, af=af, value=value, from_series=from_series):
                child.put(ExplainKey.INDEX, obs.index.name)
                child.put(ExplainKey.FIXING_DATE, obs.fixing_date)
                child.put(ExplainKey.ACCRUAL_YEAR_FRACTION, af)
                child.put(ExplainKey.INDEX_VALUE, value)
                child.put(ExplainKey.FROM_FIXING_SERIES, from_series)

            builder.add_list_entry(ExplainKey.OBSERVATIONS, explain)
        rate = self.rate(computation, start_date, end_date, provider)
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


class ApproxForwardOvernightAveragedRateComputationFn:
    """
    Averaged overnight rate with the forward region approximated.

    The forward non-cutoff region is estimated from a single period rate r
    over accrual af as log(1 + r * af), the continuous-compounding proxy of
    the sum of the daily accrued rates.
    """

    def _accrued(self, period: _FixingPeriod) -> float:
        rates = period.rates
        accrued = sum(obs.year_fraction * rate for obs, rate in period.fixed)
        fwd = period.forward_period()
        if fwd is not None:
            start_obs, end, accrual = fwd
            accrued += math.log(1.0 + accrual * rates.period_rate(start_obs, end))
        cutoff = period.cutoff_forward()
        if cutoff is not None:
            obs, accruals = cutoff
            accrued += rates.rate(obs) * sum(accruals)
        return accrued

    def rate(self, computation: OvernightAveragedRateComputation, start_date: date, end_date: date, provider) -> float:
        period = _FixingPeriod(computation, provider.overnight_index_rates(computation.index))
        return self._accrued(period) / period.accrual_factor_total

    def rate_sensitivity(
        self,
        computation: OvernightAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider
    ) -> PointSensitivityBuilder:
        rates = provider.overnight_index_rates(computation.index)
        period = _FixingPeriod(computation, rates)
        if period.fully_fixed:
            return PointSensitivityBuilder.none()
        total = period.accrual_factor_total

        start_obs, end, accrual = period.forward_period()
        period_rate = rates.period_rate(start_obs, end)
        result = rates.period_rate_point_sensitivity(start_obs, end).multiplied_by(
            accrual / (1.0 + accrual * period_rate) / total)
        cutoff = period.cutoff_forward()
        if cutoff is not None:
            obs, accruals = cutoff
            result = result.combined_with(rates.rate_point_sensitivity(obs).multiplied_by(sum(accruals) / total))
        return result

    def explain_rate(
        self,
        computation: OvernightAveragedRateComputation,
        start_date: date,
        end_date: date,
        provider,
        builder: ExplainMapBuilder
    ) -> float:
        rates = provider.overnight_index_rates(computation.index)
        period = _FixingPeriod(computation, rates)
        fwd = period.forward_period()
        forward_rate = rates.period_rate(fwd[0], fwd[1]) if fwd is not None else None
        _explain_period(period, builder, forward_rate)
        rate = self.rate(computation, start_date, end_date, provider)
        builder.put(ExplainKey.COMBINED_RATE, rate)
        return rate


__all__ = [
    "OvernightCompoundedRateComputation",
    "OvernightAveragedRateComputation",
    "ForwardOvernightCompoundedRateComputationFn",
    "ForwardOvernightAveragedRateComputationFn",
    "ApproxForwardOvernightAveragedRateComputationFn",
]
