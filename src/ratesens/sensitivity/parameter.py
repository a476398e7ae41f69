"""
Parameter sensitivities: one vector of derivatives per curve.

A CurrencyParameterSensitivity holds d(value)/d(parameter_i) for every
node of one curve, expressed in one currency. CurrencyParameterSensitivities
collects them keyed by (curve name, currency) and adds vectors that share
a key.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class CurrencyParameterSensitivity:
    """
    Sensitivity of a value to each parameter of a single curve.

    Attributes:
        curve_name: Name of the curve owning the parameters
        currency: Currency of the sensitivity amounts
        sensitivity: One derivative per curve parameter
        parameter_labels: Optional node labels, same length as sensitivity
    """
    curve_name: str
    currency: str
    sensitivity: np.ndarray
    parameter_labels: Optional[Tuple[str, ...]] = None

    @classmethod
    def of(
        cls,
        curve_name: str,
        currency: str,
        sensitivity: Sequence[float],
        parameter_labels: Optional[Sequence[str]] = None
    ) -> "CurrencyParameterSensitivity":
        values = np.array(sensitivity, dtype=np.float64)
        values.setflags(write=False)
        labels = tuple(parameter_labels) if parameter_labels is not None else None
        if labels is not None and len(labels) != len(values):
            raise ValueError("Parameter labels must match the sensitivity length")
        return cls(curve_name, currency, values, labels)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.curve_name, self.currency)

    @property
    def parameter_count(self) -> int:
        return len(self.sensitivity)

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivity":
        return CurrencyParameterSensitivity.of(
            self.curve_name, self.currency, self.sensitivity * factor, self.parameter_labels
        )

    def plus(self, other: "CurrencyParameterSensitivity") -> "CurrencyParameterSensitivity":
        """Add another sensitivity to the same curve and currency."""
        if other.key != self.key:
            raise ValueError(f"Cannot add sensitivities with keys {self.key} and {other.key}")
        if other.parameter_count != self.parameter_count:
            raise ValueError(
                f"Parameter count mismatch for {self.curve_name}: "
                f"{self.parameter_count} != {other.parameter_count}"
            )
        return CurrencyParameterSensitivity.of(
            self.curve_name, self.currency, self.sensitivity + other.sensitivity,
            self.parameter_labels or other.parameter_labels
        )

    def total(self) -> float:
        """Sum of the sensitivity to all parameters (parallel shift)."""
        return float(np.sum(self.sensitivity))

    def to_series(self) -> pd.Series:
        labels = self.parameter_labels or tuple(str(i) for i in range(self.parameter_count))
        return pd.Series(self.sensitivity, index=pd.Index(labels, name="parameter"),
                         name=f"{self.curve_name}/{self.currency}")

    def __repr__(self) -> str:
        return (f"CurrencyParameterSensitivity({self.curve_name}, {self.currency}, "
                f"{np.array2string(self.sensitivity, precision=6)})")


@dataclass(frozen=True)
class CurrencyParameterSensitivities:
    """
    Parameter sensitivities for any number of curves.

    Entries are unique per (curve name, currency) and kept in key order.
    """
    sensitivities: Tuple[CurrencyParameterSensitivity, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "CurrencyParameterSensitivities":
        return cls()

    @classmethod
    def of(cls, *sensitivities: CurrencyParameterSensitivity) -> "CurrencyParameterSensitivities":
        return cls.empty().combined_with_all(sensitivities)

    def combined_with(
        self,
        other: Union[CurrencyParameterSensitivity, "CurrencyParameterSensitivities"]
    ) -> "CurrencyParameterSensitivities":
        """Add entries, summing vectors with the same curve name and currency."""
        if isinstance(other, CurrencyParameterSensitivity):
            return self.combined_with_all([other])
        return self.combined_with_all(other.sensitivities)

    def combined_with_all(
        self,
        others: Iterable[CurrencyParameterSensitivity]
    ) -> "CurrencyParameterSensitivities":
        merged: Dict[Tuple[str, str], CurrencyParameterSensitivity] = {s.key: s for s in self.sensitivities}
        for sens in others:
            existing = merged.get(sens.key)
            merged[sens.key] = sens if existing is None else existing.plus(sens)
        return CurrencyParameterSensitivities(tuple(merged[k] for k in sorted(merged)))

    def multiplied_by(self, factor: float) -> "CurrencyParameterSensitivities":
        return CurrencyParameterSensitivities(tuple(s.multiplied_by(factor) for s in self.sensitivities))

    def find(self, curve_name: str, currency: str) -> Optional[CurrencyParameterSensitivity]:
        for sens in self.sensitivities:
            if sens.key == (curve_name, currency):
                return sens
        return None

    def get(self, curve_name: str, currency: str) -> CurrencyParameterSensitivity:
        sens = self.find(curve_name, currency)
        if sens is None:
            raise ValueError(f"No sensitivity for curve {curve_name} in {currency}")
        return sens

    def total(self) -> Dict[str, float]:
        """Total sensitivity per currency."""
        totals: Dict[str, float] = {}
        for sens in self.sensitivities:
            totals[sens.currency] = totals.get(sens.currency, 0.0) + sens.total()
        return totals

    def equal_with_tolerance(self, other: "CurrencyParameterSensitivities", tolerance: float) -> bool:
        """
        Compare two sets entry by entry.

        A key present on one side only is compared against a zero vector.
        """
        mine = {s.key: s.sensitivity for s in self.sensitivities}
        theirs = {s.key: s.sensitivity for s in other.sensitivities}
        for key in set(mine) | set(theirs):
            a = mine.get(key)
            b = theirs.get(key)
            if a is None:
                a = np.zeros_like(b)
            if b is None:
                b = np.zeros_like(a)
            if a.shape != b.shape:
                return False
            if np.any(np.abs(a - b) > tolerance):
                return False
        return True

    def to_frame(self) -> pd.DataFrame:
        """Long-format table: one row per curve parameter."""
        rows: List[dict] = []
        for sens in self.sensitivities:
            labels = sens.parameter_labels or tuple(str(i) for i in range(sens.parameter_count))
            for i, (label, value) in enumerate(zip(labels, sens.sensitivity)):
                rows.append({
                    "curve_name": sens.curve_name,
                    "currency": sens.currency,
                    "parameter": i,
                    "label": label,
                    "sensitivity": float(value),
                })
        return pd.DataFrame(rows, columns=["curve_name", "currency", "parameter", "label", "sensitivity"])

    @property
    def size(self) -> int:
        return len(self.sensitivities)

    def __iter__(self) -> Iterator[CurrencyParameterSensitivity]:
        return iter(self.sensitivities)

    def __len__(self) -> int:
        return len(self.sensitivities)


__all__ = [
    "CurrencyParameterSensitivity",
    "CurrencyParameterSensitivities",
]
