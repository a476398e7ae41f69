"""
Day count conventions, holiday calendars and compounding types.

Supported Day Counts:
- ACT/360: Actual days / 360 (money markets, overnight indices)
- ACT/365F: Actual days / 365 fixed (GBP, curve time axis)
- ACT/ACT: ISDA actual/actual, split by calendar year
- 30/360: 30 days per month / 360 (US bond basis)

Calendars:
- HolidayCalendar: weekends plus an explicit holiday set, with
  business-day navigation (next, previous, shift by n days)
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import FrozenSet, Iterable, Optional
import calendar


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse day count from string representation."""
        mapping = {
            "ACT/360": cls.ACT_360,
            "ACT360": cls.ACT_360,
            "ACT/365F": cls.ACT_365F,
            "ACT/365": cls.ACT_365F,
            "ACT365F": cls.ACT_365F,
            "ACT365": cls.ACT_365F,
            "ACT/ACT": cls.ACT_ACT,
            "ACTACT": cls.ACT_ACT,
            "ACT/ACTISDA": cls.ACT_ACT,
            "30/360": cls.THIRTY_360,
            "30360": cls.THIRTY_360,
        }
        key = s.upper().replace(" ", "")
        if key in mapping:
            return mapping[key]
        raise ValueError(f"Unknown day count convention: {s}")


class CompoundedRateType(Enum):
    """Compounding basis used when a spread is added to a zero rate."""
    CONTINUOUS = "Continuous"
    PERIODIC = "Periodic"


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Calculate year fraction between two dates using specified day count convention.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction as float, zero if end is not after start
    """
    if start >= end:
        return 0.0

    actual_days = (end - start).days

    if day_count == DayCount.ACT_360:
        return actual_days / 360.0

    elif day_count == DayCount.ACT_365F:
        return actual_days / 365.0

    elif day_count == DayCount.ACT_ACT:
        if start.year == end.year:
            return actual_days / _days_in_year(start.year)
        total = (date(start.year + 1, 1, 1) - start).days / _days_in_year(start.year)
        total += end.year - start.year - 1
        total += (end - date(end.year, 1, 1)).days / _days_in_year(end.year)
        return total

    elif day_count == DayCount.THIRTY_360:
        d1 = min(start.day, 30)
        d2 = end.day
        if d2 == 31 and d1 == 30:
            d2 = 30
        return (360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)) / 360.0

    else:
        raise ValueError(f"Unknown day count: {day_count}")


def relative_year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Signed year fraction, negative when end is before start.

    This is the time axis of every curve: dates before the valuation date
    map to negative times rather than being clamped to zero.
    """
    if end < start:
        return -year_fraction(end, start, day_count)
    return year_fraction(start, end, day_count)


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def is_business_day(d: date, holidays: Optional[Iterable[date]] = None) -> bool:
    """
    Check if a date is a business day.

    Uses weekend-only calendar by default (Saturday/Sunday are non-business days).

    Args:
        d: Date to check
        holidays: Optional collection of holiday dates

    Returns:
        True if business day, False otherwise
    """
    if d.weekday() >= 5:
        return False
    if holidays and d in holidays:
        return False
    return True


@dataclass(frozen=True)
class HolidayCalendar:
    """
    Business day calendar: weekends plus explicit holidays.

    Attributes:
        name: Calendar identifier (e.g. "USNY", "GBLO")
        holidays: Non-business week days
    """
    name: str
    holidays: FrozenSet[date] = field(default_factory=frozenset)

    @classmethod
    def of(cls, name: str, holidays: Iterable[date] = ()) -> "HolidayCalendar":
        return cls(name=name, holidays=frozenset(holidays))

    def is_business_day(self, d: date) -> bool:
        return is_business_day(d, self.holidays)

    def next(self, d: date) -> date:
        """First business day strictly after d."""
        result = d + timedelta(days=1)
        while not self.is_business_day(result):
            result += timedelta(days=1)
        return result

    def next_or_same(self, d: date) -> date:
        return d if self.is_business_day(d) else self.next(d)

    def previous(self, d: date) -> date:
        """Last business day strictly before d."""
        result = d - timedelta(days=1)
        while not self.is_business_day(result):
            result -= timedelta(days=1)
        return result

    def previous_or_same(self, d: date) -> date:
        return d if self.is_business_day(d) else self.previous(d)

    def shift(self, d: date, amount: int) -> date:
        """
        Move a date by a number of business days.

        Args:
            d: Starting date (need not be a business day)
            amount: Business days to move, negative to move backwards

        Returns:
            Shifted date; d itself when amount is zero
        """
        result = d
        if amount > 0:
            for _ in range(amount):
                result = self.next(result)
        elif amount < 0:
            for _ in range(-amount):
                result = self.previous(result)
        return result

    def days_between(self, start: date, end: date) -> int:
        """Business days in [start, end)."""
        count = 0
        current = start
        while current < end:
            if self.is_business_day(current):
                count += 1
            current += timedelta(days=1)
        return count


# Weekend-only calendars standing in for the index fixing calendars
USNY = HolidayCalendar.of("USNY")
GBLO = HolidayCalendar.of("GBLO")
CHZU = HolidayCalendar.of("CHZU")
EUTA = HolidayCalendar.of("EUTA")


__all__ = [
    "DayCount",
    "CompoundedRateType",
    "HolidayCalendar",
    "USNY",
    "GBLO",
    "CHZU",
    "EUTA",
    "year_fraction",
    "relative_year_fraction",
    "is_business_day",
]
