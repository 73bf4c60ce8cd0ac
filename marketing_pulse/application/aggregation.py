"""Daily record filtering, period aggregation and per-channel ROAS."""

from __future__ import annotations

from typing import Iterable, List, Sequence

import polars as pl

from marketing_pulse.application.reporting.metrics import safe_ratio, safe_ratio_expr
from marketing_pulse.domain.models import (
    CHANNEL_METRICS,
    CHANNELS,
    COUNT_COLUMNS,
    METRIC_COLUMNS,
    ChannelMetrics,
    ChannelTotals,
    DailyRecord,
    PeriodTotals,
    channel_column,
    require_iso_date,
)

RECORD_SCHEMA: dict[str, pl.DataType] = {
    "date": pl.Utf8,
    **{column: (pl.Int64 if column in COUNT_COLUMNS else pl.Float64) for column in METRIC_COLUMNS},
}


def records_frame(records: Iterable[DailyRecord]) -> pl.DataFrame:
    rows = [record.to_row() for record in records]
    if not rows:
        return pl.DataFrame(schema=RECORD_SCHEMA)
    return pl.DataFrame(rows, schema=RECORD_SCHEMA)


def frame_records(frame: pl.DataFrame) -> List[DailyRecord]:
    return [DailyRecord(**row) for row in frame.select(list(RECORD_SCHEMA)).iter_rows(named=True)]


def in_range_expr(start: str, end: str) -> pl.Expr:
    # ISO strings sort chronologically, so the range check is lexicographic.
    return (pl.col("date") >= pl.lit(start)) & (pl.col("date") <= pl.lit(end))


def records_for_period(records: Sequence[DailyRecord], start: str, end: str) -> List[DailyRecord]:
    """Records dated within ``[start, end]`` (inclusive), sorted by date."""
    require_iso_date(start)
    require_iso_date(end)
    if start > end:
        raise ValueError(f"start {start} is after end {end}")
    frame = records_frame(records).filter(in_range_expr(start, end)).sort("date")
    return frame_records(frame)


def period_spend(records: Sequence[DailyRecord], start: str, end: str) -> float:
    frame = records_frame(records).filter(in_range_expr(start, end))
    return float(frame.select(pl.col("spend").sum()).item() or 0.0)


def _sum_aggregations() -> list[pl.Expr]:
    return [pl.col(column).sum().alias(column) for column in METRIC_COLUMNS]


def _derived_ratios() -> list[pl.Expr]:
    return [
        safe_ratio_expr(pl.col("order_revenue"), pl.col("spend")).alias("mer"),
        (safe_ratio_expr(pl.col("new_customer_orders"), pl.col("orders")) * 100).alias("nc_percent"),
        safe_ratio_expr(pl.col("order_revenue"), pl.col("orders")).alias("aov"),
    ]


def aggregate_period(records: Sequence[DailyRecord]) -> PeriodTotals:
    """Sum a market's normalized daily records for one period.

    Ratios with no denominator (no spend, no orders) are ``None``, never 0.
    """
    frame = records_frame(records)
    summed = frame.select(_sum_aggregations()).with_columns(_derived_ratios()).row(0, named=True)

    channels = tuple(
        ChannelTotals(
            channel=channel,
            **{metric: float(summed[channel_column(channel, metric)] or 0.0) for metric in CHANNEL_METRICS},
        )
        for channel in CHANNELS
    )
    return PeriodTotals(
        revenue=float(summed["order_revenue"] or 0.0),
        spend=float(summed["spend"] or 0.0),
        orders=int(summed["orders"] or 0),
        new_customer_orders=int(summed["new_customer_orders"] or 0),
        mer=summed["mer"],
        nc_percent=summed["nc_percent"],
        aov=summed["aov"],
        channels=channels,
        days_with_data=frame.height,
    )


def channel_roas(
    spend: float,
    pixel_revenue: float,
    channel_revenue: float,
    nc_revenue: float,
) -> tuple[float | None, float | None, float | None]:
    """Pixel, platform-reported and new-customer ROAS; all ``None`` without spend."""
    return (
        safe_ratio(pixel_revenue, spend),
        safe_ratio(channel_revenue, spend),
        safe_ratio(nc_revenue, spend),
    )


def _estimated_nc_orders(channel: ChannelTotals, aov: float | None) -> int:
    if aov is None or aov <= 0:
        return 0
    return int(round(channel.pixel_nc_revenue / aov))


def channel_metrics(totals: PeriodTotals, include_nc_orders: bool = False) -> List[ChannelMetrics]:
    """Per-channel metrics for channels that actually spent in the period."""
    output: List[ChannelMetrics] = []
    for channel in totals.channels:
        if channel.spend <= 0:
            continue
        pixel_roas, platform_roas, nc_roas = channel_roas(
            channel.spend,
            channel.pixel_revenue,
            channel.channel_revenue,
            channel.pixel_nc_revenue,
        )
        output.append(
            ChannelMetrics(
                channel=channel.channel,
                spend=channel.spend,
                pixel_roas=pixel_roas,
                channel_roas=platform_roas,
                nc_roas=nc_roas,
                nc_orders=_estimated_nc_orders(channel, totals.aov) if include_nc_orders else None,
            )
        )
    return output
