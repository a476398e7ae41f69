"""
Rates provider: the immutable market state of one valuation scenario.

Provides a single entry point for pricers:
- Discount factors per currency
- Forward rates per Ibor / overnight index, price index values
- FX spot and forward rates
- Conversion of point sensitivities into curve parameter sensitivities

Curves and fixings are handed in as explicit mappings at construction;
every ``with_*`` method returns a new provider.
"""

import logging
from datetime import date
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Union

from ..currency import CurrencyAmount, CurrencyPair, MultiCurrencyAmount
from ..curves.curve import Curve
from ..curves.discount_factors import DiscountFactors, discount_factors_of
from ..errors import ConfigurationError, DomainError
from ..indices import (
    IborIndex,
    IborIndexObservation,
    OvernightIndex,
    OvernightIndexObservation,
    PriceIndex,
    PriceIndexObservation,
)
from ..sensitivity.parameter import CurrencyParameterSensitivities
from ..sensitivity.point import PointSensitivities, PointSensitivity, SensitivityKind
from .fx import DiscountFxForwardRates
from .ibor import DiscountIborIndexRates
from .inflation import SimplePriceIndexValues
from .overnight import DiscountOvernightIndexRates
from .timeseries import FixingData

logger = logging.getLogger(__name__)

Index = Union[IborIndex, OvernightIndex, PriceIndex]


class RatesProvider:
    """
    Market data for one valuation date.

    Attributes:
        valuation_date: Valuation date
        discount_curves: Discount curve per currency
        index_curves: Forward curve per Ibor or overnight index, price curve per price index
        time_series: Historical fixings per index
        fx_rates: FX spot rate per currency pair (counter units per base unit)
    """

    def __init__(
        self,
        valuation_date: date,
        discount_curves: Optional[Mapping[str, Curve]] = None,
        index_curves: Optional[Mapping[Index, Curve]] = None,
        time_series: Optional[Mapping[Index, FixingData]] = None,
        fx_rates: Optional[Mapping[CurrencyPair, float]] = None
    ):
        self._valuation_date = valuation_date
        self._discount_curves: Mapping[str, Curve] = MappingProxyType(dict(discount_curves or {}))
        self._index_curves: Mapping[Index, Curve] = MappingProxyType(dict(index_curves or {}))
        self._time_series: Mapping[Index, FixingData] = MappingProxyType(dict(time_series or {}))
        self._fx_rates: Mapping[CurrencyPair, float] = MappingProxyType(dict(fx_rates or {}))

        names = [c.name for c in self._discount_curves.values()] + [c.name for c in self._index_curves.values()]
        duplicates = {n for n in names if names.count(n) > 1}
        # one curve may serve several roles only if it is the same object
        for name in duplicates:
            owners = {id(c) for c in self._all_curve_slots() if c.name == name}
            if len(owners) > 1:
                raise ConfigurationError(f"Different curves share the name {name}")

        self._sensitivity_router: Dict[SensitivityKind, Callable[[PointSensitivity], CurrencyParameterSensitivities]] = {
            SensitivityKind.ZERO_RATE: lambda p: self.discount_factors(p.currency).parameter_sensitivity(p),
            SensitivityKind.IBOR_RATE: lambda p: self.ibor_index_rates(p.index).parameter_sensitivity(p),
            SensitivityKind.OVERNIGHT_RATE: lambda p: self.overnight_index_rates(p.index).parameter_sensitivity(p),
            SensitivityKind.INFLATION_RATE: lambda p: self.price_index_values(p.index).parameter_sensitivity(p),
            SensitivityKind.FX_FORWARD: lambda p: self.fx_forward_rates(p.currency_pair).parameter_sensitivity(p),
        }

    def _all_curve_slots(self):
        yield from self._discount_curves.values()
        yield from self._index_curves.values()

    # Accessors -------------------------------------------------------------
    @property
    def valuation_date(self) -> date:
        return self._valuation_date

    @property
    def discount_curves(self) -> Mapping[str, Curve]:
        return self._discount_curves

    @property
    def index_curves(self) -> Mapping[Index, Curve]:
        return self._index_curves

    @property
    def time_series(self) -> Mapping[Index, FixingData]:
        return self._time_series

    @property
    def fx_rates(self) -> Mapping[CurrencyPair, float]:
        return self._fx_rates

    @property
    def curves(self) -> Dict[str, Curve]:
        """All curves keyed by name."""
        return {c.name: c for c in self._all_curve_slots()}

    def _index_curve(self, index: Index) -> Curve:
        curve = self._index_curves.get(index)
        if curve is None:
            raise ConfigurationError(f"No curve found for index {index}")
        return curve

    # Rate sources ----------------------------------------------------------
    def discount_factors(self, currency: str) -> DiscountFactors:
        curve = self._discount_curves.get(currency)
        if curve is None:
            raise ConfigurationError(f"No discount curve found for currency {currency}")
        return discount_factors_of(currency, self._valuation_date, curve)

    def ibor_index_rates(self, index: IborIndex) -> DiscountIborIndexRates:
        dfs = discount_factors_of(index.currency, self._valuation_date, self._index_curve(index))
        return DiscountIborIndexRates(index, dfs, self._time_series.get(index))

    def overnight_index_rates(self, index: OvernightIndex) -> DiscountOvernightIndexRates:
        dfs = discount_factors_of(index.currency, self._valuation_date, self._index_curve(index))
        return DiscountOvernightIndexRates(index, dfs, self._time_series.get(index))

    def price_index_values(self, index: PriceIndex) -> SimplePriceIndexValues:
        return SimplePriceIndexValues(
            index, self._valuation_date, self._index_curve(index), self._time_series.get(index))

    def fx_rate(self, base: str, counter: str) -> float:
        """FX spot rate: units of `counter` per unit of `base`."""
        if base == counter:
            return 1.0
        pair = CurrencyPair(base, counter)
        if pair in self._fx_rates:
            return self._fx_rates[pair]
        if pair.inverse() in self._fx_rates:
            return 1.0 / self._fx_rates[pair.inverse()]
        raise DomainError(f"No FX rate found for {pair}")

    def fx_forward_rates(self, currency_pair: CurrencyPair) -> DiscountFxForwardRates:
        return DiscountFxForwardRates(
            currency_pair,
            self.fx_rate(currency_pair.base, currency_pair.counter),
            self.discount_factors(currency_pair.base),
            self.discount_factors(currency_pair.counter),
        )

    # Point queries ---------------------------------------------------------
    def discount_factor(self, currency: str, d: date) -> float:
        return self.discount_factors(currency).discount_factor(d)

    def ibor_index_rate(self, observation: IborIndexObservation) -> float:
        return self.ibor_index_rates(observation.index).rate(observation)

    def overnight_index_rate(self, observation: OvernightIndexObservation) -> float:
        return self.overnight_index_rates(observation.index).rate(observation)

    def overnight_index_rate_period(self, start_observation: OvernightIndexObservation, end_date: date) -> float:
        """Single forward rate over [start effective date, end_date]."""
        return self.overnight_index_rates(start_observation.index).period_rate(start_observation, end_date)

    def inflation_index_rate(self, observation: PriceIndexObservation) -> float:
        return self.price_index_values(observation.index).value(observation)

    # Sensitivities ---------------------------------------------------------
    def parameter_sensitivity(self, point_sensitivities: PointSensitivities) -> CurrencyParameterSensitivities:
        """
        Convert point sensitivities into parameter sensitivities.

        Each entry is routed to the curve that owns it and the resulting
        vectors are summed per (curve name, currency).

        Args:
            point_sensitivities: Point sensitivities of a value

        Returns:
            CurrencyParameterSensitivities with one vector per curve touched
        """
        result = CurrencyParameterSensitivities.empty()
        if len(point_sensitivities) == 0:
            logger.debug("No point sensitivities to convert")
            return result
        for point in point_sensitivities:
            router = self._sensitivity_router.get(point.kind)
            if router is None:
                raise DomainError(f"Unsupported sensitivity kind {point.kind}")
            result = result.combined_with(router(point))
        return result

    def currency_exposure(
        self,
        point_sensitivities: PointSensitivities,
        present_value: Union[CurrencyAmount, MultiCurrencyAmount, None] = None
    ) -> MultiCurrencyAmount:
        """
        Currency exposure from FX forward sensitivities plus a present value.

        Sensitivities of other kinds carry no FX exposure and are skipped.
        """
        exposure = MultiCurrencyAmount.empty()
        for point in point_sensitivities:
            if point.kind == SensitivityKind.FX_FORWARD:
                exposure = exposure.plus(self.fx_forward_rates(point.currency_pair).currency_exposure(point))
        if present_value is not None:
            exposure = exposure.plus(present_value)
        return exposure

    # Scenario construction -------------------------------------------------
    def with_curve(self, name: str, curve: Curve) -> "RatesProvider":
        """Replace every slot holding the curve called `name`."""
        found = False
        discount = {}
        for ccy, c in self._discount_curves.items():
            if c.name == name:
                c, found = curve, True
            discount[ccy] = c
        index = {}
        for idx, c in self._index_curves.items():
            if c.name == name:
                c, found = curve, True
            index[idx] = c
        if not found:
            raise ConfigurationError(f"No curve named {name}")
        return RatesProvider(self._valuation_date, discount, index, self._time_series, self._fx_rates)

    def with_curve_parameter(self, name: str, index: int, value: float) -> "RatesProvider":
        curve = self.curves.get(name)
        if curve is None:
            raise ConfigurationError(f"No curve named {name}")
        return self.with_curve(name, curve.with_parameter(index, value))

    def with_time_series(self, index: Index, fixings: FixingData) -> "RatesProvider":
        series = dict(self._time_series)
        series[index] = fixings
        return RatesProvider(self._valuation_date, self._discount_curves, self._index_curves, series, self._fx_rates)

    def with_fx_rate(self, currency_pair: CurrencyPair, rate: float) -> "RatesProvider":
        fx = dict(self._fx_rates)
        fx.pop(currency_pair.inverse(), None)
        fx[currency_pair] = rate
        return RatesProvider(self._valuation_date, self._discount_curves, self._index_curves, self._time_series, fx)

    def __repr__(self) -> str:
        return (f"RatesProvider({self._valuation_date}, curves={sorted(self.curves)}, "
                f"fx={[str(p) for p in self._fx_rates]})")


__all__ = ["RatesProvider"]
