"""
Structured breakdown of a rate calculation.

An ExplainMap is an immutable mapping from ExplainKey to a value; list
valued keys (OBSERVATIONS) hold nested ExplainMaps, one per observation.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

import pandas as pd


class ExplainKey(Enum):
    """Keys of an explain map."""
    OBSERVATIONS = "Observations"
    INDEX = "Index"
    FIXING_DATE = "FixingDate"
    START_DATE = "StartDate"
    END_DATE = "EndDate"
    ACCRUAL_YEAR_FRACTION = "AccrualYearFraction"
    INDEX_VALUE = "IndexValue"
    FROM_FIXING_SERIES = "FromFixingSeries"
    WEIGHT = "Weight"
    COMBINED_RATE = "CombinedRate"
    PAYMENT_DATE = "PaymentDate"
    CURRENCY = "Currency"
    NOTIONAL = "Notional"
    DISCOUNT_FACTOR = "DiscountFactor"
    FORECAST_VALUE = "ForecastValue"
    PRESENT_VALUE = "PresentValue"
    COMPLETED = "Completed"


class ExplainMap:
    """Read-only explain data."""

    def __init__(self, values: Mapping[ExplainKey, Any]):
        self._values = MappingProxyType(dict(values))

    @classmethod
    def empty(cls) -> "ExplainMap":
        return cls({})

    @classmethod
    def builder(cls) -> "ExplainMapBuilder":
        return ExplainMapBuilder()

    def get(self, key: ExplainKey, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: ExplainKey) -> bool:
        return key in self._values

    def __getitem__(self, key: ExplainKey) -> Any:
        return self._values[key]

    def __len__(self) -> int:
        return len(self._values)

    def keys(self):
        return self._values.keys()

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary with string keys; nested maps are converted too."""
        result = {}
        for key, value in self._values.items():
            if isinstance(value, list):
                value = [v.to_dict() if isinstance(v, ExplainMap) else v for v in value]
            result[key.value] = value
        return result

    def observations_frame(self) -> pd.DataFrame:
        """One row per entry of OBSERVATIONS."""
        rows = []
        for obs in self._values.get(ExplainKey.OBSERVATIONS, []):
            rows.append({k.value: v for k, v in obs._values.items()})
        return pd.DataFrame(rows)

    def __repr__(self) -> str:
        return f"ExplainMap({self.to_dict()})"


class ExplainMapBuilder:
    """
    Mutable builder for an ExplainMap.

    Nested observation maps are opened with ``open_list_entry`` and closed
    with ``close_list_entry``; ``add_list_entry`` does both around a callback.
    """

    def __init__(self, parent: Optional["ExplainMapBuilder"] = None, list_key: Optional[ExplainKey] = None):
        self._values: Dict[ExplainKey, Any] = {}
        self._parent = parent
        self._list_key = list_key

    def put(self, key: ExplainKey, value: Any) -> "ExplainMapBuilder":
        self._values[key] = value
        return self

    def put_all(self, values: Mapping[ExplainKey, Any]) -> "ExplainMapBuilder":
        self._values.update(values)
        return self

    def open_list_entry(self, key: ExplainKey) -> "ExplainMapBuilder":
        return ExplainMapBuilder(self, key)

    def close_list_entry(self) -> "ExplainMapBuilder":
        if self._parent is None:
            raise ValueError("No list entry is open")
        entries: List[ExplainMap] = self._parent._values.setdefault(self._list_key, [])
        entries.append(self.build())
        return self._parent

    def add_list_entry(
        self,
        key: ExplainKey,
        fn: Callable[["ExplainMapBuilder"], Any]
    ) -> "ExplainMapBuilder":
        child = self.open_list_entry(key)
        fn(child)
        return child.close_list_entry()

    def build(self) -> ExplainMap:
        values = {}
        for key, value in self._values.items():
            values[key] = list(value) if isinstance(value, list) else value
        return ExplainMap(values)


__all__ = ["ExplainKey", "ExplainMap", "ExplainMapBuilder"]
