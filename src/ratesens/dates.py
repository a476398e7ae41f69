"""
Date utilities for rates calculations.

Provides:
- Tenor parsing and tenor arithmetic used by index definitions
- Month arithmetic for price index observations (pandas monthly periods)
"""

from datetime import date, timedelta
from typing import Optional, Tuple, Union
import calendar
import re

import pandas as pd

from .conventions import HolidayCalendar


class DateUtils:
    """Utility class for date manipulation in rates contexts."""

    # Tenor regex pattern: number + unit (D/W/M/Y)
    TENOR_PATTERN = re.compile(r'^(\d+)([DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_tenor(tenor: str) -> Tuple[int, str]:
        """
        Parse a tenor string into (amount, unit).

        Args:
            tenor: Tenor string like "1D", "3M", "2Y"

        Returns:
            Tuple of (amount, unit) where unit is D/W/M/Y

        Raises:
            ValueError: If tenor format is invalid
        """
        match = DateUtils.TENOR_PATTERN.match(tenor.upper().strip())
        if not match:
            raise ValueError(f"Invalid tenor format: {tenor}. Expected format like '3M', '2Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_tenor(start: date, tenor: str, calendar_: Optional[HolidayCalendar] = None) -> date:
        """
        Add a tenor to a date.

        Day tenors count business days of the calendar (weekends only when
        no calendar is given); week, month and year tenors are calendar
        periods, month ends clipped to the last day of the target month.

        Args:
            start: Starting date
            tenor: Tenor string (e.g., "1D", "8W", "3M", "2Y")
            calendar_: Optional holiday calendar for day tenors

        Returns:
            End date
        """
        amount, unit = DateUtils.parse_tenor(tenor)

        if unit == 'D':
            cal = calendar_ or HolidayCalendar.of("WEEKEND")
            return cal.shift(start, amount)
        elif unit == 'W':
            return start + timedelta(weeks=amount)
        elif unit == 'M':
            return DateUtils.add_months(start, amount)
        elif unit == 'Y':
            return DateUtils.add_months(start, 12 * amount)
        raise ValueError(f"Unknown tenor unit: {unit}")

    @staticmethod
    def add_months(start: date, months: int) -> date:
        """Add calendar months, keeping the day of month where it exists."""
        year = start.year + (start.month + months - 1) // 12
        month = (start.month + months - 1) % 12 + 1
        day = min(start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)


def to_month(value: Union[date, str, pd.Period]) -> pd.Period:
    """Normalize a date, 'YYYY-MM' string or period to a monthly period."""
    if isinstance(value, pd.Period):
        return value.asfreq("M")
    return pd.Period(value, freq="M")


def months_between(start: pd.Period, end: pd.Period) -> int:
    """Signed number of months from start to end."""
    return (end.year - start.year) * 12 + (end.month - start.month)


__all__ = [
    "DateUtils",
    "to_month",
    "months_between",
]
