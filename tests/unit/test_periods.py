"""
Tests for marketing_pulse.domain.periods module.
"""
import calendar
from datetime import date, datetime, timedelta

import pytest

from marketing_pulse.domain.models import Period, PeriodKind
from marketing_pulse.domain.periods import (
    day_period,
    iso_week_number,
    iso_week_year,
    month_period,
    months_ago_period,
    mtd_period,
    parse_date,
    resolve_anchor,
    resolve_period,
    same_week_last_year,
    week_period,
    wtd_period,
)


class TestIsoWeeks:
    """ISO-8601 week numbering at year boundaries."""

    def test_late_december_belongs_to_next_year(self):
        """2024-12-30 is week 1 of 2025."""
        day = date(2024, 12, 30)
        assert iso_week_number(day) == 1
        assert iso_week_year(day) == 2025

    def test_early_january_belongs_to_previous_year(self):
        """2023-01-01 is week 52 of 2022."""
        day = date(2023, 1, 1)
        assert iso_week_number(day) == 52
        assert iso_week_year(day) == 2022

    def test_week_53(self):
        """2020 has 53 ISO weeks."""
        assert iso_week_number(date(2020, 12, 31)) == 53
        assert iso_week_number(date(2021, 1, 3)) == 53

    def test_matches_isocalendar_across_boundaries(self):
        """Every day from late 2019 to early 2026 agrees with the standard library."""
        day = date(2019, 12, 20)
        while day <= date(2026, 1, 10):
            iso_year, iso_week, _ = day.isocalendar()
            assert iso_week_number(day) == iso_week
            assert iso_week_year(day) == iso_year
            day += timedelta(days=1)

    def test_same_week_last_year_uses_week_number(self):
        """Week 2 of 2024 maps to week 2 of 2023, not 364 days back."""
        assert same_week_last_year("2024-01-10") == ("2023-01-09", "2023-01-15")


class TestMonthPeriods:
    """Month windows and their YoY months."""

    def test_leap_february(self):
        assert month_period(2, 2024).end == "2024-02-29"
        assert month_period(2, 2023).end == "2023-02-28"

    @pytest.mark.parametrize("year", [2023, 2024, 2100])
    def test_end_is_last_calendar_day(self, year):
        """End matches the calendar for every month, including century non-leap years."""
        for month in range(1, 13):
            period = month_period(month, year)
            last_day = calendar.monthrange(year, month)[1]
            assert period.start == date(year, month, 1).isoformat()
            assert period.end == date(year, month, last_day).isoformat()

    def test_yoy_is_full_prior_year_month(self):
        period = month_period(2, 2024)
        assert period.yoy_start == "2023-02-01"
        assert period.yoy_end == "2023-02-28"
        assert period.label == "February 2024"

    def test_january_rolls_back_to_december(self):
        period = months_ago_period(date(2024, 1, 15), months_ago=1)
        assert period.start == "2023-12-01"
        assert period.end == "2023-12-31"

    def test_months_ago_crosses_years(self):
        period = months_ago_period(date(2024, 2, 10), months_ago=3)
        assert period.start == "2023-11-01"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_invalid_month_raises(self, month):
        with pytest.raises(ValueError):
            month_period(month, 2024)


class TestWeekPeriods:
    """Complete ISO weeks."""

    def test_last_complete_week(self):
        """Run on a Wednesday: last week is the previous Monday-Sunday."""
        period = week_period(date(2024, 1, 17), weeks_ago=1)
        assert (period.start, period.end) == ("2024-01-08", "2024-01-14")
        assert period.label == "Week 2, 2024"
        assert (period.yoy_start, period.yoy_end) == ("2023-01-09", "2023-01-15")

    def test_week_spanning_new_year(self):
        period = week_period(date(2025, 1, 8), weeks_ago=1)
        assert (period.start, period.end) == ("2024-12-30", "2025-01-05")
        assert period.label == "Week 1, 2025"

    def test_negative_offset_raises(self):
        with pytest.raises(ValueError):
            week_period(date(2024, 1, 17), weeks_ago=-1)


class TestWeekToDate:
    """Week-to-date windows."""

    @pytest.mark.parametrize("offset", range(7))
    def test_yoy_span_matches_current_span(self, offset):
        """For every weekday, the YoY window has exactly as many days as the current one."""
        through = date(2024, 3, 4) + timedelta(days=offset)
        period = wtd_period(through)
        current_span = (parse_date(period.end) - parse_date(period.start)).days
        yoy_span = (parse_date(period.yoy_end) - parse_date(period.yoy_start)).days
        assert current_span == yoy_span == offset

    def test_yoy_starts_on_monday(self):
        period = wtd_period("2024-03-06")
        assert period.start == "2024-03-04"
        assert (period.yoy_start, period.yoy_end) == ("2023-03-06", "2023-03-08")
        assert parse_date(period.yoy_start).weekday() == 0

    def test_labels(self):
        assert wtd_period("2024-03-04").label == "Mon"
        assert wtd_period("2024-03-06").label == "Mon–Wed"
        assert wtd_period("2024-03-10").label == "Mon–Sun"


class TestMonthToDate:
    """Month-to-date windows."""

    def test_label_and_range(self):
        period = mtd_period("2024-02-09")
        assert (period.start, period.end) == ("2024-02-01", "2024-02-09")
        assert period.label == "Feb 1–9"
        assert (period.yoy_start, period.yoy_end) == ("2023-02-01", "2023-02-09")

    def test_yoy_end_clamped_to_shorter_month(self):
        """Feb 29 compares against Feb 28, never spilling into March."""
        period = mtd_period("2024-02-29")
        assert period.yoy_end == "2023-02-28"

    def test_first_of_month(self):
        period = mtd_period("2024-03-01")
        assert period.start == period.end == "2024-03-01"


class TestDaysAndResolution:
    """Single days, anchors and the resolve_period dispatcher."""

    def test_leap_day_yoy(self):
        period = day_period("2024-02-29")
        assert period.yoy_start == period.yoy_end == "2023-02-28"

    def test_day_label(self):
        assert day_period("2024-03-04").label == "Mon Mar 4, 2024"

    def test_resolve_default_offsets(self):
        assert resolve_period("day", anchor="2024-03-05").start == "2024-03-04"
        assert resolve_period(PeriodKind.MONTH, anchor=date(2024, 3, 5)).label == "February 2024"
        assert resolve_period("wtd", anchor="2024-03-06").end == "2024-03-06"
        assert resolve_period("mtd", anchor="2024-03-06").start == "2024-03-01"

    def test_resolve_with_offset(self):
        period = resolve_period("week", anchor="2024-01-17", offset=2)
        assert period.start == "2024-01-01"

    def test_resolve_unknown_kind_raises(self):
        with pytest.raises(ValueError):
            resolve_period("quarter", anchor="2024-01-17")

    def test_naive_datetime_anchor(self):
        assert resolve_anchor(datetime(2024, 3, 5, 23, 30)) == date(2024, 3, 5)

    @pytest.mark.parametrize(
        "value", ["2024-13-01", "2024-02-30", "yesterday", "", "2024-3-5", "2024-03-05garbage", "2024-03-05T99:99"]
    )
    def test_malformed_dates_raise(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    @pytest.mark.parametrize("value", ["2024-3-5", "2024-03-05garbage", "2024-03-05T99:99"])
    def test_non_canonical_anchor_rejected(self, value):
        """Trailing text and unpadded fields are not silently truncated or accepted."""
        with pytest.raises(ValueError):
            resolve_period(PeriodKind.DAY, anchor=value)

    def test_period_rejects_inverted_range(self):
        with pytest.raises(ValueError):
            Period(kind=PeriodKind.DAY, start="2024-03-05", end="2024-03-04", label="bad")
