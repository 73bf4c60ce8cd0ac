"""Infrastructure adapter for report export targets."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import polars as pl

from marketing_pulse.application.report_service import PacingSection
from marketing_pulse.infrastructure.excel_repository import save_output_workbook
from marketing_pulse.reporting import Report, write_html_report


def save_report_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def save_report_text(path: Path, messages: Sequence[str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n\n".join(message.rstrip() for message in messages) + "\n", encoding="utf-8")


def save_report_html(path: Path, report: Report, vat_removed: bool = False) -> None:
    write_html_report(path, report, vat_removed=vat_removed)


def section_frame(section: PacingSection) -> pl.DataFrame:
    """One row per market plus a TOTAL row, flat enough for a spreadsheet."""
    rows = [
        {
            "market": row.market.code,
            "revenue": row.revenue,
            "revenue_yoy": row.revenue_yoy,
            "spend": row.spend,
            "roas": row.roas,
            "nc_roas": row.nc_roas,
            "nc_percent": row.nc_percent,
            "orders": row.orders,
            "aov": row.aov,
        }
        for row in section.markets
    ]
    totals = section.totals
    rows.append(
        {
            "market": "TOTAL",
            "revenue": totals.revenue,
            "revenue_yoy": totals.revenue_yoy,
            "spend": totals.spend,
            "roas": totals.roas,
            "nc_roas": totals.nc_roas,
            "nc_percent": totals.nc_percent,
            "orders": totals.orders,
            "aov": totals.aov,
        }
    )
    return pl.DataFrame(rows, schema_overrides={"revenue_yoy": pl.Float64})


def save_report_workbook(path: Path, sections: dict[str, PacingSection]) -> tuple[bool, str]:
    return save_output_workbook(path, {name: section_frame(section) for name, section in sections.items()})
