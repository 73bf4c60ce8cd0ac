"""Infrastructure adapter for file-based market data (xlsx workbook or CSV directory)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import polars as pl

from marketing_pulse.domain.models import DailyRecord, Market
from marketing_pulse.ingestion import read_market_csv_dir, read_market_workbook, write_output_excel

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES: frozenset[str] = frozenset({".xlsx", ".xlsm"})


def load_market_data(
    path: Path, markets: Sequence[Market], threshold: float | None = None
) -> dict[str, list[DailyRecord]]:
    """Raw (un-normalized) daily records per market code.

    ``path`` is either a workbook with one sheet per market or a directory
    of ``<CODE>.csv`` files. A single ``.csv`` file is read as the market
    named by its file stem. ``threshold`` overrides the configured parse-error
    limit.
    """
    codes = [market.code for market in markets]
    if not path.exists():
        raise FileNotFoundError(f"Input not found: {path}")

    if path.is_dir():
        data = read_market_csv_dir(path, codes, threshold=threshold)
    elif path.suffix.lower() in EXCEL_SUFFIXES:
        data = read_market_workbook(path, codes, threshold=threshold)
    elif path.suffix.lower() == ".csv":
        data = read_market_csv_dir(
            path.parent, [code for code in codes if code == path.stem.upper()], threshold=threshold
        )
    else:
        raise ValueError(f"Unsupported input type: {path.suffix or path.name}")

    logger.info("Loaded data for %d of %d market(s) from %s", len(data), len(codes), path)
    return data


def save_output_workbook(path: Path, sheets: dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_output_excel(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""
