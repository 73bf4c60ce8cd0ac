"""Application service assembling daily, weekly and monthly report data."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence

from marketing_pulse.application.market_service import MarketData, build_all_market_metrics, markets_without_spend
from marketing_pulse.application.reporting.metrics import compare_yoy
from marketing_pulse.application.weighting import aggregate_weighted
from marketing_pulse.config import MARKETS, settings
from marketing_pulse.domain.models import Market, MarketMetrics, Period, WeightedTotals, YoYComparison
from marketing_pulse.domain.periods import (
    MONTH_NAMES,
    iso_week_number,
    iso_week_year,
    months_ago_period,
    mtd_period,
    parse_date,
    resolve_anchor,
    week_period,
    wtd_period,
    yesterday_period,
)

logger = logging.getLogger(__name__)

# date.weekday() of the run day: WTD is shown Wednesday-Friday.
WTD_RUN_WEEKDAYS: frozenset[int] = frozenset({2, 3, 4})


def _totals_dict(totals: WeightedTotals) -> dict[str, Any]:
    payload = totals.to_dict()
    payload["vs_ly"] = compare_yoy(totals.revenue, totals.revenue_yoy).to_dict()
    return payload


def _markets_dicts(markets: Sequence[MarketMetrics]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for row in markets:
        payload = row.to_dict()
        payload["vs_ly"] = compare_yoy(row.revenue, row.revenue_yoy).to_dict()
        rows.append(payload)
    return rows


@dataclass(frozen=True)
class PacingSection:
    """Market rows plus the weighted total for one period."""

    period: Period
    markets: list[MarketMetrics]
    totals: WeightedTotals

    @property
    def label(self) -> str:
        return self.period.label

    @property
    def vs_ly(self) -> YoYComparison:
        return compare_yoy(self.totals.revenue, self.totals.revenue_yoy)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period.to_dict(),
            "markets": _markets_dicts(self.markets),
            "totals": _totals_dict(self.totals),
        }


@dataclass(frozen=True)
class TrendPoint:
    label: str
    period: Period
    totals: WeightedTotals

    @property
    def vs_ly(self) -> YoYComparison:
        return compare_yoy(self.totals.revenue, self.totals.revenue_yoy)

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "period": self.period.to_dict(), "totals": _totals_dict(self.totals)}


@dataclass(frozen=True)
class DailyReport:
    main: PacingSection
    no_spend_markets: list[str]
    wtd: PacingSection | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "report": "daily",
            "main": self.main.to_dict(),
            "no_spend_markets": list(self.no_spend_markets),
            "wtd": self.wtd.to_dict() if self.wtd is not None else None,
        }


@dataclass(frozen=True)
class WeeklyReport:
    main: PacingSection
    week_number: int
    year: int
    no_spend_markets: list[str]
    pixel_data_incomplete: bool
    trend: list[TrendPoint] = field(default_factory=list)
    mtd: PacingSection | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "report": "weekly",
            "week_number": self.week_number,
            "year": self.year,
            "main": self.main.to_dict(),
            "trend": [point.to_dict() for point in self.trend],
            "no_spend_markets": list(self.no_spend_markets),
            "pixel_data_incomplete": self.pixel_data_incomplete,
            "mtd": self.mtd.to_dict() if self.mtd is not None else None,
        }


@dataclass(frozen=True)
class MonthlyReport:
    main: PacingSection
    month: int
    year: int
    no_spend_markets: list[str]
    trend: list[TrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "report": "monthly",
            "month": self.month,
            "year": self.year,
            "main": self.main.to_dict(),
            "trend": [point.to_dict() for point in self.trend],
            "no_spend_markets": list(self.no_spend_markets),
        }


def build_section(
    data: MarketData,
    markets: Sequence[Market],
    period: Period,
    include_nc_orders: bool = False,
) -> PacingSection:
    rows = build_all_market_metrics(data, markets, period, include_nc_orders=include_nc_orders)
    # Weighted totals need every market row first: revenue shares use the grand total.
    return PacingSection(period=period, markets=rows, totals=aggregate_weighted(rows))


def is_pixel_data_incomplete(period_end: str, anchor: date, lag_days: int = settings.pixel_lag_days) -> bool:
    """Pixel attribution keeps updating for a few days after a period closes."""
    days_since_end = (anchor - parse_date(period_end)).days
    return 0 <= days_since_end <= lag_days


def build_daily_report(
    data: MarketData,
    markets: Sequence[Market] = MARKETS,
    anchor: date | datetime | str | None = None,
    include_wtd: bool | None = None,
) -> DailyReport:
    """Yesterday's numbers, plus week-to-date on Wednesday-Friday runs unless overridden."""
    run_day = resolve_anchor(anchor)
    period = yesterday_period(run_day)
    main = build_section(data, markets, period)
    no_spend = markets_without_spend(data, markets, period.start, period.end)

    if include_wtd is None:
        include_wtd = run_day.weekday() in WTD_RUN_WEEKDAYS
    wtd = None
    if include_wtd:
        wtd_range = wtd_period(period.start)
        logger.info("WTD: %s to %s (%s)", wtd_range.start, wtd_range.end, wtd_range.label)
        wtd = build_section(data, markets, wtd_range)

    return DailyReport(main=main, no_spend_markets=no_spend, wtd=wtd)


def build_weekly_report(
    data: MarketData,
    markets: Sequence[Market] = MARKETS,
    anchor: date | datetime | str | None = None,
    trend_length: int = settings.trend_length,
) -> WeeklyReport:
    """Last complete ISO week, its trend, and month-to-date through that Sunday."""
    run_day = resolve_anchor(anchor)
    period = week_period(run_day, weeks_ago=1)
    main = build_section(data, markets, period)
    no_spend = markets_without_spend(data, markets, period.start, period.end)

    trend: list[TrendPoint] = []
    for weeks_ago in range(1, trend_length + 1):
        week = week_period(run_day, weeks_ago=weeks_ago)
        section = build_section(data, markets, week)
        trend.append(TrendPoint(label=f"Week {iso_week_number(parse_date(week.start))}", period=week, totals=section.totals))

    # Skip MTD when the month began on the reported week's Monday: it would repeat the week.
    mtd = None
    mtd_range = mtd_period(period.end)
    if mtd_range.start != period.start:
        logger.info("MTD: %s to %s (%s)", mtd_range.start, mtd_range.end, mtd_range.label)
        mtd = build_section(data, markets, mtd_range)

    week_start = parse_date(period.start)
    return WeeklyReport(
        main=main,
        week_number=iso_week_number(week_start),
        year=iso_week_year(week_start),
        no_spend_markets=no_spend,
        pixel_data_incomplete=is_pixel_data_incomplete(period.end, run_day),
        trend=trend,
        mtd=mtd,
    )


def build_monthly_report(
    data: MarketData,
    markets: Sequence[Market] = MARKETS,
    anchor: date | datetime | str | None = None,
    trend_length: int = settings.trend_length,
) -> MonthlyReport:
    """Last complete month with channel NC orders, and its trend."""
    run_day = resolve_anchor(anchor)
    period = months_ago_period(run_day, months_ago=1)
    main = build_section(data, markets, period, include_nc_orders=True)
    no_spend = markets_without_spend(data, markets, period.start, period.end)

    trend: list[TrendPoint] = []
    for months_ago in range(1, trend_length + 1):
        month = months_ago_period(run_day, months_ago=months_ago)
        section = build_section(data, markets, month, include_nc_orders=True)
        month_index = parse_date(month.start).month
        trend.append(TrendPoint(label=MONTH_NAMES[month_index - 1], period=month, totals=section.totals))

    month_start = parse_date(period.start)
    return MonthlyReport(
        main=main,
        month=month_start.month,
        year=month_start.year,
        no_spend_markets=no_spend,
        trend=trend,
    )
