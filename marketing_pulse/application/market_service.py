"""Application service for per-market period metrics."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from marketing_pulse.application.aggregation import aggregate_period, channel_metrics, period_spend, records_for_period
from marketing_pulse.application.reporting.metrics import ratio_or_zero
from marketing_pulse.domain.models import DailyRecord, Market, MarketMetrics, Period

logger = logging.getLogger(__name__)

MarketData = Mapping[str, Sequence[DailyRecord]]


def build_market_metrics(
    market: Market,
    current_records: Sequence[DailyRecord],
    yoy_records: Sequence[DailyRecord],
    include_nc_orders: bool = False,
) -> MarketMetrics:
    """Combine one market's current and last-year records into a metrics row.

    Records must already be normalized to the reporting currency. Top-level
    ROAS and NC ROAS fall back to 0 without spend because the row is always
    rendered; per-channel ROAS stays ``None`` instead.
    """
    current = aggregate_period(current_records)
    yoy = aggregate_period(yoy_records)

    return MarketMetrics(
        market=market,
        revenue=current.revenue,
        revenue_yoy=yoy.revenue if yoy.revenue > 0 else None,
        spend=current.spend,
        roas=ratio_or_zero(current.revenue, current.spend),
        nc_roas=ratio_or_zero(current.nc_revenue, current.spend),
        nc_percent=current.nc_percent if current.nc_percent is not None else 0.0,
        orders=current.orders,
        new_customer_orders=current.new_customer_orders,
        aov=current.aov if current.aov is not None else 0.0,
        channels=tuple(channel_metrics(current, include_nc_orders=include_nc_orders)),
    )


def markets_with_spend(data: MarketData, start: str, end: str) -> list[str]:
    return [code for code, records in data.items() if period_spend(records, start, end) > 0]


def markets_without_spend(data: MarketData, markets: Sequence[Market], start: str, end: str) -> list[str]:
    with_spend = set(markets_with_spend(data, start, end))
    return [market.code for market in markets if market.code not in with_spend]


def build_all_market_metrics(
    data: MarketData,
    markets: Sequence[Market],
    period: Period,
    include_nc_orders: bool = False,
) -> list[MarketMetrics]:
    """Metrics for every market that spent in ``period``, sorted by revenue (highest first)."""
    if period.yoy_start is None or period.yoy_end is None:
        raise ValueError(f"Period {period.label} has no year-over-year range")

    markets_by_code = {market.code: market for market in markets}
    output: list[MarketMetrics] = []
    for code in markets_with_spend(data, period.start, period.end):
        market = markets_by_code.get(code)
        if market is None:
            continue
        records = data[code]
        current_records = records_for_period(records, period.start, period.end)
        yoy_records = records_for_period(records, period.yoy_start, period.yoy_end)
        logger.debug(
            "%s %s: %d current days, %d yoy days",
            code,
            period.label,
            len(current_records),
            len(yoy_records),
        )
        output.append(build_market_metrics(market, current_records, yoy_records, include_nc_orders))

    output.sort(key=lambda row: -row.revenue)
    return output
