"""
Unit tests for conventions module.
"""

from datetime import date
import pytest

from ratesens.conventions import (
    DayCount,
    HolidayCalendar,
    year_fraction,
    relative_year_fraction,
    is_business_day,
)


class TestDayCount:
    """Tests for day count conventions."""

    def test_act_360(self):
        """Test ACT/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days

        yf = year_fraction(start, end, DayCount.ACT_360)
        assert abs(yf - 91 / 360) < 1e-10

    def test_act_365f(self):
        """Test ACT/365F day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)

        yf = year_fraction(start, end, DayCount.ACT_365F)
        assert abs(yf - 91 / 365) < 1e-10

    def test_act_act_spans_leap_year(self):
        """ACT/ACT splits the period by calendar year."""
        yf = year_fraction(date(2023, 12, 1), date(2024, 2, 1), DayCount.ACT_ACT)
        expected = 31 / 365 + 31 / 366
        assert abs(yf - expected) < 1e-12

    def test_thirty_360(self):
        """Test 30/360 day count."""
        yf = year_fraction(date(2024, 1, 15), date(2024, 4, 15), DayCount.THIRTY_360)
        assert abs(yf - 90 / 360) < 1e-10

    def test_year_fraction_same_date(self):
        """Test year fraction for same date returns 0."""
        d = date(2024, 1, 15)
        assert year_fraction(d, d, DayCount.ACT_360) == 0.0

    def test_year_fraction_reversed_dates(self):
        assert year_fraction(date(2024, 4, 15), date(2024, 1, 15), DayCount.ACT_360) == 0.0

    def test_relative_year_fraction_is_signed(self):
        """Dates before the start give negative times."""
        start = date(2024, 1, 15)
        earlier = date(2024, 1, 14)
        assert relative_year_fraction(start, earlier, DayCount.ACT_365F) == pytest.approx(-1 / 365)
        assert relative_year_fraction(earlier, start, DayCount.ACT_365F) == pytest.approx(1 / 365)

    @pytest.mark.parametrize("text,expected", [
        ("ACT/360", DayCount.ACT_360),
        ("act/365", DayCount.ACT_365F),
        ("30/360", DayCount.THIRTY_360),
    ])
    def test_from_string(self, text, expected):
        assert DayCount.from_string(text) == expected

    def test_from_string_invalid(self):
        with pytest.raises(ValueError):
            DayCount.from_string("BUS/252")


class TestHolidayCalendar:
    """Tests for business day navigation."""

    @pytest.fixture
    def calendar(self):
        # Monday 2015-01-19 is a holiday
        return HolidayCalendar.of("TEST", [date(2015, 1, 19)])

    def test_weekend_is_not_business_day(self):
        assert not is_business_day(date(2015, 1, 10))
        assert is_business_day(date(2015, 1, 12))

    def test_holiday_is_skipped(self, calendar):
        assert not calendar.is_business_day(date(2015, 1, 19))
        assert calendar.next(date(2015, 1, 16)) == date(2015, 1, 20)
        assert calendar.previous(date(2015, 1, 20)) == date(2015, 1, 16)

    def test_next_or_same(self, calendar):
        assert calendar.next_or_same(date(2015, 1, 16)) == date(2015, 1, 16)
        assert calendar.next_or_same(date(2015, 1, 17)) == date(2015, 1, 20)

    def test_previous_or_same(self, calendar):
        assert calendar.previous_or_same(date(2015, 1, 18)) == date(2015, 1, 16)

    def test_shift(self, calendar):
        assert calendar.shift(date(2015, 1, 15), 2) == date(2015, 1, 20)
        assert calendar.shift(date(2015, 1, 20), -2) == date(2015, 1, 15)
        assert calendar.shift(date(2015, 1, 17), 0) == date(2015, 1, 17)

    def test_days_between(self, calendar):
        # Thu 15, Fri 16, Tue 20
        assert calendar.days_between(date(2015, 1, 15), date(2015, 1, 21)) == 3
