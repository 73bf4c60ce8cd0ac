"""Application layer package."""

from .market_service import build_all_market_metrics, build_market_metrics
from .normalization import normalize_market_data
from .report_service import build_daily_report, build_monthly_report, build_weekly_report
from .weighting import aggregate_weighted

__all__ = [
    "aggregate_weighted",
    "build_all_market_metrics",
    "build_market_metrics",
    "normalize_market_data",
    "build_daily_report",
    "build_weekly_report",
    "build_monthly_report",
]
