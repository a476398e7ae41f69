"""
Historical fixing series helpers.

Daily fixings are pandas Series indexed by a DatetimeIndex; monthly price
index fixings are Series indexed by a monthly PeriodIndex.
"""

from datetime import date
from typing import Mapping, Optional, Union

import pandas as pd

FixingData = Union[pd.Series, Mapping[date, float], None]


def daily_fixings(data: FixingData = None) -> pd.Series:
    """Normalize daily fixings to a sorted float Series on a DatetimeIndex."""
    if data is None:
        return pd.Series(dtype=float, index=pd.DatetimeIndex([]))
    series = data.copy() if isinstance(data, pd.Series) else pd.Series(dict(data), dtype=float)
    series.index = pd.DatetimeIndex(pd.to_datetime(series.index)).normalize()
    if series.index.has_duplicates:
        raise ValueError("Fixing series has duplicate dates")
    return series.astype(float).sort_index()


def monthly_fixings(data: FixingData = None) -> pd.Series:
    """Normalize monthly fixings to a sorted float Series on a PeriodIndex."""
    if data is None:
        return pd.Series(dtype=float, index=pd.PeriodIndex([], freq="M"))
    series = data.copy() if isinstance(data, pd.Series) else pd.Series(dict(data), dtype=float)
    if isinstance(series.index, pd.PeriodIndex):
        series.index = series.index.asfreq("M")
    else:
        series.index = pd.PeriodIndex([pd.Period(v, freq="M") for v in series.index], freq="M")
    if series.index.has_duplicates:
        raise ValueError("Fixing series has duplicate months")
    return series.astype(float).sort_index()


def fixing_on(series: pd.Series, d: date) -> Optional[float]:
    """The fixing for a date, None when absent."""
    key = pd.Timestamp(d)
    if key in series.index:
        return float(series.loc[key])
    return None


def fixing_for_month(series: pd.Series, month: pd.Period) -> Optional[float]:
    if month in series.index:
        return float(series.loc[month])
    return None


__all__ = [
    "daily_fixings",
    "monthly_fixings",
    "fixing_on",
    "fixing_for_month",
]
