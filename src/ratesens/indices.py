"""
Rate and price indices and their observations.

Provides:
- OvernightIndex / OvernightIndexObservation: overnight rates with
  publication and effective date offsets
- IborIndex / IborIndexObservation: term rates fixed a spot lag before
  the deposit period
- PriceIndex / PriceIndexObservation: monthly price index values

Overnight date arithmetic (all business days of the fixing calendar):
    publication = shift(next_or_same(fixing), publication_offset)
    effective   = shift(next_or_same(fixing), effective_offset)
    maturity    = shift(next_or_same(effective), 1)
    fixing      = shift(next_or_same(effective), -effective_offset)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Union

import pandas as pd

from .conventions import (
    CHZU,
    EUTA,
    GBLO,
    USNY,
    DayCount,
    HolidayCalendar,
    year_fraction,
)
from .dates import DateUtils, to_month


@dataclass(frozen=True)
class OvernightIndex:
    """
    Overnight rate index.

    Attributes:
        name: Index name, e.g. "USD-FED-FUND"
        currency: Index currency
        day_count: Accrual day count
        fixing_calendar: Calendar for all fixing date arithmetic
        publication_date_offset: 0 when published on the fixing date, 1 the next day
        effective_date_offset: 0 for overnight, 1 for tomorrow/next indices
    """
    name: str
    currency: str
    day_count: DayCount
    fixing_calendar: HolidayCalendar
    publication_date_offset: int = 0
    effective_date_offset: int = 0

    def __post_init__(self):
        if self.publication_date_offset not in (0, 1):
            raise ValueError("Publication date offset must be 0 or 1")
        if self.effective_date_offset not in (0, 1):
            raise ValueError("Effective date offset must be 0 or 1")

    def calculate_publication_from_fixing(self, fixing_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(fixing_date), self.publication_date_offset)

    def calculate_effective_from_fixing(self, fixing_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(fixing_date), self.effective_date_offset)

    def calculate_maturity_from_fixing(self, fixing_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(fixing_date), self.effective_date_offset + 1)

    def calculate_fixing_from_effective(self, effective_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(effective_date), -self.effective_date_offset)

    def calculate_maturity_from_effective(self, effective_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(effective_date), 1)

    def observe_on(self, fixing_date: date) -> "OvernightIndexObservation":
        """
        Create the observation for a fixing date.

        No error is raised for a non-business day; it is moved to the next
        business day first.
        """
        publication = self.calculate_publication_from_fixing(fixing_date)
        effective = self.calculate_effective_from_fixing(fixing_date)
        maturity = self.calculate_maturity_from_effective(effective)
        return OvernightIndexObservation(
            index=self,
            fixing_date=fixing_date,
            publication_date=publication,
            effective_date=effective,
            maturity_date=maturity,
            year_fraction=year_fraction(effective, maturity, self.day_count),
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class OvernightIndexObservation:
    """
    A single observation of an overnight index.

    Two observations are equal when index and fixing date match.
    """
    index: OvernightIndex
    fixing_date: date
    publication_date: date = field(compare=False)
    effective_date: date = field(compare=False)
    maturity_date: date = field(compare=False)
    year_fraction: float = field(compare=False)

    @classmethod
    def of(cls, index: OvernightIndex, fixing_date: date) -> "OvernightIndexObservation":
        return index.observe_on(fixing_date)

    @property
    def currency(self) -> str:
        return self.index.currency


@dataclass(frozen=True)
class IborIndex:
    """
    Term (Ibor) rate index.

    Attributes:
        name: Index name, e.g. "USD-LIBOR-3M"
        currency: Index currency
        day_count: Accrual day count of the deposit
        fixing_calendar: Calendar for the spot lag and maturity adjustment
        effective_date_offset: Business days from fixing to deposit start
        tenor: Deposit tenor, e.g. "3M"
    """
    name: str
    currency: str
    day_count: DayCount
    fixing_calendar: HolidayCalendar
    effective_date_offset: int = 2
    tenor: str = "3M"

    def calculate_effective_from_fixing(self, fixing_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(fixing_date), self.effective_date_offset)

    def calculate_fixing_from_effective(self, effective_date: date) -> date:
        cal = self.fixing_calendar
        return cal.shift(cal.next_or_same(effective_date), -self.effective_date_offset)

    def calculate_maturity_from_effective(self, effective_date: date) -> date:
        return self.fixing_calendar.next_or_same(DateUtils.add_tenor(effective_date, self.tenor))

    def observe(self, fixing_date: date) -> "IborIndexObservation":
        effective = self.calculate_effective_from_fixing(fixing_date)
        maturity = self.calculate_maturity_from_effective(effective)
        return IborIndexObservation(
            index=self,
            fixing_date=fixing_date,
            effective_date=effective,
            maturity_date=maturity,
            year_fraction=year_fraction(effective, maturity, self.day_count),
        )

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IborIndexObservation:
    """A single Ibor fixing and the deposit period it applies to."""
    index: IborIndex
    fixing_date: date
    effective_date: date = field(compare=False)
    maturity_date: date = field(compare=False)
    year_fraction: float = field(compare=False)

    @classmethod
    def of(cls, index: IborIndex, fixing_date: date) -> "IborIndexObservation":
        return index.observe(fixing_date)

    @property
    def currency(self) -> str:
        return self.index.currency


@dataclass(frozen=True)
class PriceIndex:
    """Monthly price index, e.g. a retail price index."""
    name: str
    currency: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PriceIndexObservation:
    """Observation of a price index for a reference month."""
    index: PriceIndex
    month: pd.Period

    @classmethod
    def of(cls, index: PriceIndex, month: Union[date, str, pd.Period]) -> "PriceIndexObservation":
        return cls(index, to_month(month))

    @property
    def currency(self) -> str:
        return self.index.currency


# Presets
USD_FED_FUND = OvernightIndex("USD-FED-FUND", "USD", DayCount.ACT_360, USNY, 1, 0)
GBP_SONIA = OvernightIndex("GBP-SONIA", "GBP", DayCount.ACT_365F, GBLO, 0, 0)
CHF_TOIS = OvernightIndex("CHF-TOIS", "CHF", DayCount.ACT_360, CHZU, 0, 1)
EUR_EONIA = OvernightIndex("EUR-EONIA", "EUR", DayCount.ACT_360, EUTA, 0, 0)

USD_LIBOR_3M = IborIndex("USD-LIBOR-3M", "USD", DayCount.ACT_360, GBLO, 2, "3M")
EUR_EURIBOR_3M = IborIndex("EUR-EURIBOR-3M", "EUR", DayCount.ACT_360, EUTA, 2, "3M")

GB_RPI = PriceIndex("GB-RPI", "GBP")
US_CPI_U = PriceIndex("US-CPI-U", "USD")


__all__ = [
    "OvernightIndex",
    "OvernightIndexObservation",
    "IborIndex",
    "IborIndexObservation",
    "PriceIndex",
    "PriceIndexObservation",
    "USD_FED_FUND",
    "GBP_SONIA",
    "CHF_TOIS",
    "EUR_EONIA",
    "USD_LIBOR_3M",
    "EUR_EURIBOR_3M",
    "GB_RPI",
    "US_CPI_U",
]
