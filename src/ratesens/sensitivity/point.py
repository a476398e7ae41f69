"""
Point sensitivities and their builder.

A point sensitivity is the derivative of a value with respect to one curve
observation: a zero rate at one time, a forward rate for one fixing, a price
index for one month, an FX forward for one date. All kinds share a single
record shape {kind, currency, keys, value, sensitivity_currency}; the kind
tag decides what the keys mean:

    ZERO_RATE       keys = (year_fraction,)            currency = curve currency
    IBOR_RATE       keys = (index, fixing_date)        currency = index currency
    OVERNIGHT_RATE  keys = (index, fixing_date, end_date)
    INFLATION_RATE  keys = (index, reference_month)
    FX_FORWARD      keys = (currency_pair, reference_date)  currency = reference currency

The rates provider routes each kind to the curve that owns it.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from ..currency import CurrencyPair


class SensitivityKind(Enum):
    """Rate-observation family a point sensitivity refers to."""
    ZERO_RATE = "ZeroRate"
    IBOR_RATE = "IborRate"
    OVERNIGHT_RATE = "OvernightRate"
    INFLATION_RATE = "InflationRate"
    FX_FORWARD = "FxForward"


def _sortable(key: Any) -> Any:
    """Map a key component onto something with a total order."""
    name = getattr(key, "name", None)
    if isinstance(name, str):
        return name
    if isinstance(key, (CurrencyPair, pd.Period)):
        return str(key)
    return key


@dataclass(frozen=True)
class PointSensitivity:
    """
    Sensitivity to a single curve observation.

    Attributes:
        kind: Observation family
        currency: Currency of the curve or index observed
        keys: Identifies the observed value within the curve (see module doc)
        value: The derivative
        sensitivity_currency: Currency of the value when it differs from `currency`
    """
    kind: SensitivityKind
    currency: str
    keys: Tuple[Any, ...]
    value: float
    sensitivity_currency: Optional[str] = None

    @property
    def value_currency(self) -> str:
        """Currency in which `value` is expressed."""
        return self.sensitivity_currency or self.currency

    @property
    def merge_key(self) -> Tuple[Any, ...]:
        return (self.kind, self.currency, self.keys, self.value_currency)

    def compare_key(self) -> Tuple[Any, ...]:
        """Total order used to sort normalized sensitivities."""
        return (
            self.kind.value,
            self.currency,
            tuple(_sortable(k) for k in self.keys),
            self.value_currency,
        )

    def matches(self, other: "PointSensitivity") -> bool:
        """True when both entries refer to the same observation in the same currency."""
        return self.merge_key == other.merge_key

    def with_value(self, value: float) -> "PointSensitivity":
        return replace(self, value=value)

    def multiplied_by(self, factor: float) -> "PointSensitivity":
        return replace(self, value=self.value * factor)

    def with_sensitivity_currency(self, currency: str) -> "PointSensitivity":
        return replace(self, sensitivity_currency=None if currency == self.currency else currency)

    def combined_with(
        self,
        other: Union["PointSensitivity", "PointSensitivityBuilder"]
    ) -> "PointSensitivityBuilder":
        """Add to another sensitivity: values are summed when keys match, else both kept."""
        if isinstance(other, PointSensitivity) and self.matches(other):
            return PointSensitivityBuilder.of(self.with_value(self.value + other.value))
        return PointSensitivityBuilder.of(self).combined_with(other)

    def build(self) -> "PointSensitivities":
        return PointSensitivities.of(self)

    # Accessors by kind -----------------------------------------------------
    @property
    def year_fraction(self) -> float:
        self._expect(SensitivityKind.ZERO_RATE)
        return self.keys[0]

    @property
    def index(self) -> Any:
        self._expect(SensitivityKind.IBOR_RATE, SensitivityKind.OVERNIGHT_RATE,
                     SensitivityKind.INFLATION_RATE)
        return self.keys[0]

    @property
    def fixing_date(self) -> date:
        self._expect(SensitivityKind.IBOR_RATE, SensitivityKind.OVERNIGHT_RATE)
        return self.keys[1]

    @property
    def end_date(self) -> date:
        self._expect(SensitivityKind.OVERNIGHT_RATE)
        return self.keys[2]

    @property
    def reference_month(self) -> pd.Period:
        self._expect(SensitivityKind.INFLATION_RATE)
        return self.keys[1]

    @property
    def currency_pair(self) -> CurrencyPair:
        self._expect(SensitivityKind.FX_FORWARD)
        return self.keys[0]

    @property
    def reference_date(self) -> date:
        self._expect(SensitivityKind.FX_FORWARD)
        return self.keys[1]

    def _expect(self, *kinds: SensitivityKind) -> None:
        if self.kind not in kinds:
            raise AttributeError(f"Not available on {self.kind.value} sensitivity")


# Factories ---------------------------------------------------------------

def zero_rate_sensitivity(
    currency: str,
    year_fraction: float,
    value: float,
    sensitivity_currency: Optional[str] = None
) -> PointSensitivity:
    """Sensitivity to the zero rate of the `currency` discount curve at a time."""
    sens = PointSensitivity(SensitivityKind.ZERO_RATE, currency, (float(year_fraction),), value)
    return sens.with_sensitivity_currency(sensitivity_currency) if sensitivity_currency else sens


def ibor_rate_sensitivity(
    observation,
    value: float,
    sensitivity_currency: Optional[str] = None
) -> PointSensitivity:
    """Sensitivity to an Ibor forward rate, keyed by index and fixing date."""
    index = observation.index
    sens = PointSensitivity(SensitivityKind.IBOR_RATE, index.currency,
                            (index, observation.fixing_date), value)
    return sens.with_sensitivity_currency(sensitivity_currency) if sensitivity_currency else sens


def overnight_rate_sensitivity(
    observation,
    value: float,
    end_date: Optional[date] = None,
    sensitivity_currency: Optional[str] = None
) -> PointSensitivity:
    """
    Sensitivity to an overnight forward rate.

    Args:
        observation: Observation giving the index and the start of the period
        value: Sensitivity value
        end_date: End of the forward period, the observation's maturity by default
        sensitivity_currency: Currency of the value, index currency by default
    """
    index = observation.index
    end = end_date if end_date is not None else observation.maturity_date
    sens = PointSensitivity(SensitivityKind.OVERNIGHT_RATE, index.currency,
                            (index, observation.fixing_date, end), value)
    return sens.with_sensitivity_currency(sensitivity_currency) if sensitivity_currency else sens


def overnight_period_sensitivity(start_observation, end_date: date, value: float) -> PointSensitivity:
    """Sensitivity to the single forward rate over [start effective, end_date]."""
    return overnight_rate_sensitivity(start_observation, value, end_date)


def inflation_rate_sensitivity(
    observation,
    value: float,
    sensitivity_currency: Optional[str] = None
) -> PointSensitivity:
    """Sensitivity to a price index value for a reference month."""
    index = observation.index
    sens = PointSensitivity(SensitivityKind.INFLATION_RATE, index.currency,
                            (index, observation.month), value)
    return sens.with_sensitivity_currency(sensitivity_currency) if sensitivity_currency else sens


def fx_forward_sensitivity(
    currency_pair: CurrencyPair,
    reference_currency: str,
    reference_date: date,
    value: float,
    sensitivity_currency: str
) -> PointSensitivity:
    """
    Sensitivity to the FX forward rate of a pair at a date.

    The forward rate is expressed as units of the other currency per unit of
    `reference_currency`.
    """
    if not currency_pair.contains(reference_currency):
        raise ValueError(f"Reference currency {reference_currency} not in {currency_pair}")
    sens = PointSensitivity(SensitivityKind.FX_FORWARD, reference_currency,
                            (currency_pair, reference_date), value)
    return sens.with_sensitivity_currency(sensitivity_currency)


# Collections -------------------------------------------------------------

@dataclass(frozen=True)
class PointSensitivities:
    """
    An ordered collection of point sensitivities.

    `normalized()` merges entries with identical keys and sorts them, so two
    collections accumulated in different orders normalize to the same value.
    """
    sensitivities: Tuple[PointSensitivity, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "PointSensitivities":
        return cls()

    @classmethod
    def of(cls, *sensitivities: PointSensitivity) -> "PointSensitivities":
        return cls(tuple(sensitivities))

    def combined_with(self, other: "PointSensitivities") -> "PointSensitivities":
        return PointSensitivities(self.sensitivities + other.sensitivities)

    def multiplied_by(self, factor: float) -> "PointSensitivities":
        return PointSensitivities(tuple(s.multiplied_by(factor) for s in self.sensitivities))

    def normalized(self, tolerance: float = 0.0) -> "PointSensitivities":
        """
        Merge identical keys, drop negligible entries, sort deterministically.

        Args:
            tolerance: Entries with an absolute merged value at or below this
                are dropped; the default drops exact zeros only
        """
        merged: Dict[Tuple[Any, ...], PointSensitivity] = {}
        for sens in self.sensitivities:
            existing = merged.get(sens.merge_key)
            merged[sens.merge_key] = sens if existing is None else existing.with_value(existing.value + sens.value)
        kept = [s for s in merged.values() if abs(s.value) > tolerance]
        kept.sort(key=PointSensitivity.compare_key)
        return PointSensitivities(tuple(kept))

    def equal_with_tolerance(self, other: "PointSensitivities", tolerance: float) -> bool:
        """Compare after normalization; a key missing on one side counts as zero."""
        mine = {s.merge_key: s.value for s in self.normalized().sensitivities}
        theirs = {s.merge_key: s.value for s in other.normalized().sensitivities}
        for key in set(mine) | set(theirs):
            if abs(mine.get(key, 0.0) - theirs.get(key, 0.0)) > tolerance:
                return False
        return True

    def to_frame(self) -> pd.DataFrame:
        rows = [{
            "kind": s.kind.value,
            "currency": s.currency,
            "sensitivity_currency": s.value_currency,
            "keys": tuple(_sortable(k) for k in s.keys),
            "value": s.value,
        } for s in self.sensitivities]
        return pd.DataFrame(rows, columns=["kind", "currency", "sensitivity_currency", "keys", "value"])

    @property
    def size(self) -> int:
        return len(self.sensitivities)

    def __iter__(self) -> Iterator[PointSensitivity]:
        return iter(self.sensitivities)

    def __len__(self) -> int:
        return len(self.sensitivities)


class PointSensitivityBuilder:
    """
    Accumulator of point sensitivities during a pricing walk.

    Every operation returns a new builder; `none()` is the identity of
    `combined_with`.
    """

    def __init__(self, sensitivities: Iterable[PointSensitivity] = ()):
        self._sensitivities: Tuple[PointSensitivity, ...] = tuple(sensitivities)

    @classmethod
    def none(cls) -> "PointSensitivityBuilder":
        return cls()

    @classmethod
    def of(cls, *sensitivities: PointSensitivity) -> "PointSensitivityBuilder":
        return cls(sensitivities)

    def combined_with(
        self,
        other: Union[PointSensitivity, "PointSensitivityBuilder", PointSensitivities]
    ) -> "PointSensitivityBuilder":
        if isinstance(other, PointSensitivity):
            return PointSensitivityBuilder(self._sensitivities + (other,))
        if isinstance(other, PointSensitivityBuilder):
            return PointSensitivityBuilder(self._sensitivities + other._sensitivities)
        return PointSensitivityBuilder(self._sensitivities + other.sensitivities)

    def multiplied_by(self, factor: float) -> "PointSensitivityBuilder":
        return PointSensitivityBuilder(s.multiplied_by(factor) for s in self._sensitivities)

    def map_sensitivity(self, fn: Callable[[float], float]) -> "PointSensitivityBuilder":
        return PointSensitivityBuilder(s.with_value(fn(s.value)) for s in self._sensitivities)

    def with_sensitivity_currency(self, currency: str) -> "PointSensitivityBuilder":
        return PointSensitivityBuilder(s.with_sensitivity_currency(currency) for s in self._sensitivities)

    def normalize(self) -> "PointSensitivityBuilder":
        return PointSensitivityBuilder(self.build().normalized().sensitivities)

    def build(self) -> PointSensitivities:
        return PointSensitivities(self._sensitivities)

    def is_empty(self) -> bool:
        return not self._sensitivities

    def __repr__(self) -> str:
        return f"PointSensitivityBuilder({list(self._sensitivities)})"


__all__ = [
    "SensitivityKind",
    "PointSensitivity",
    "PointSensitivities",
    "PointSensitivityBuilder",
    "zero_rate_sensitivity",
    "ibor_rate_sensitivity",
    "overnight_rate_sensitivity",
    "overnight_period_sensitivity",
    "inflation_rate_sensitivity",
    "fx_forward_sensitivity",
]
