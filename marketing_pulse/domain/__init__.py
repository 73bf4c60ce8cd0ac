"""Domain layer package."""

from .models import (
    CHANNELS,
    ChannelMetrics,
    ChannelTotals,
    DailyRecord,
    Market,
    MarketMetrics,
    Period,
    PeriodKind,
    PeriodTotals,
    WeightedTotals,
    YoYComparison,
    YoYKind,
)
from .periods import iso_week_number, resolve_period

__all__ = [
    "CHANNELS",
    "ChannelMetrics",
    "ChannelTotals",
    "DailyRecord",
    "Market",
    "MarketMetrics",
    "Period",
    "PeriodKind",
    "PeriodTotals",
    "WeightedTotals",
    "YoYComparison",
    "YoYKind",
    "iso_week_number",
    "resolve_period",
]
