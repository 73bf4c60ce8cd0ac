"""Multi-market marketing performance reporting package."""

from .application import (
    aggregate_weighted,
    build_all_market_metrics,
    build_daily_report,
    build_monthly_report,
    build_weekly_report,
    normalize_market_data,
)
from .ingestion import read_market_csv_dir, read_market_workbook, write_output_excel

__all__ = [
    "read_market_workbook",
    "read_market_csv_dir",
    "write_output_excel",
    "normalize_market_data",
    "build_all_market_metrics",
    "aggregate_weighted",
    "build_daily_report",
    "build_weekly_report",
    "build_monthly_report",
]
