"""Shared numeric/formatting utilities for reporting, including the YoY comparator."""

from __future__ import annotations

from typing import Any

import polars as pl

from marketing_pulse.domain.models import YoYComparison, YoYKind

YOY_CLAMP_PCT = 999.0
EMPTY_CELL = "—"


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def safe_ratio(num: float, den: float) -> float | None:
    if den <= 0:
        return None
    return num / den


def ratio_or_zero(num: float, den: float) -> float:
    ratio = safe_ratio(num, den)
    return 0.0 if ratio is None else ratio


def safe_ratio_expr(num: pl.Expr, den: pl.Expr) -> pl.Expr:
    safe_den = pl.when(den > 0).then(den).otherwise(None)
    return num / safe_den


def compare_yoy(current: float, baseline: float | None) -> YoYComparison:
    """Signed percentage change of ``current`` against last year's ``baseline``.

    A missing baseline has no comparison; a zero baseline is either a new
    market (current > 0) or nothing to compare; a negative baseline is a
    data-quality anomaly and is never divided by. The percentage saturates
    at +/-999.
    """
    if baseline is None:
        return YoYComparison(YoYKind.NO_DATA)
    if baseline == 0:
        if current > 0:
            return YoYComparison(YoYKind.NEW)
        return YoYComparison(YoYKind.NO_DATA)
    if baseline < 0:
        return YoYComparison(YoYKind.ANOMALOUS)
    change = ((current / baseline) - 1) * 100
    clamped = max(-YOY_CLAMP_PCT, min(YOY_CLAMP_PCT, change))
    return YoYComparison(YoYKind.PERCENT, clamped)


def fmt_yoy(comparison: YoYComparison) -> str:
    if comparison.kind is YoYKind.NO_DATA:
        return EMPTY_CELL
    if comparison.kind is YoYKind.NEW:
        return "NEW"
    if comparison.kind is YoYKind.ANOMALOUS:
        return "⚠️ neg."
    value = to_float(comparison.value)
    if value >= YOY_CLAMP_PCT:
        return f">{YOY_CLAMP_PCT:.0f}%"
    if value <= -YOY_CLAMP_PCT:
        return f"<-{YOY_CLAMP_PCT:.0f}%"
    return f"{value:+.1f}%"


def fmt_amount(value: float | None) -> str:
    if value is None:
        return EMPTY_CELL
    return f"{round(value):,}"


def fmt_percent(value: float | None) -> str:
    if value is None:
        return EMPTY_CELL
    return f"{value:.1f}%"


def fmt_roas(value: float | None) -> str:
    if value is None:
        return EMPTY_CELL
    return f"{value:.1f}"
