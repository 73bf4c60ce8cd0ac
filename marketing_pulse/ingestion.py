"""Market sheet ingestion/output helpers with Polars-first and openpyxl fallback."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

import polars as pl

from marketing_pulse.config import settings
from marketing_pulse.domain.models import COUNT_COLUMNS, METRIC_COLUMNS, RECORD_COLUMNS, DailyRecord

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = ("date", "order_revenue")
DATE_FORMAT = "%Y-%m-%d"
ISO_DATE_LENGTH = 10


def _import_openpyxl() -> tuple[Any, Any]:
    try:
        from openpyxl import Workbook, load_workbook
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("openpyxl is required for Excel fallback I/O.") from exc
    return Workbook, load_workbook


def _normalize_headers(raw_headers: Sequence[Any]) -> list[str]:
    """Lower-cased, stripped header names; blanks and duplicates get stable suffixes."""
    headers: list[str] = []
    seen: dict[str, int] = {}
    for idx, value in enumerate(raw_headers):
        base = str(value).strip().lower() if value not in (None, "") else f"column_{idx + 1}"
        count = seen.get(base, 0)
        name = base if count == 0 else f"{base}_{count + 1}"
        seen[base] = count + 1
        headers.append(name)
    return headers


def _cell_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()[:ISO_DATE_LENGTH]
    return str(value)


def _date_expr() -> pl.Expr:
    return (
        pl.col("date")
        .cast(pl.Utf8, strict=False)
        .str.strip_chars()
        .str.slice(0, ISO_DATE_LENGTH)
        .str.to_date(DATE_FORMAT, strict=False)
        .dt.strftime(DATE_FORMAT)
        .alias("date")
    )


def _metric_text_expr(column_name: str) -> pl.Expr:
    return pl.col(column_name).cast(pl.Utf8, strict=False).str.strip_chars()


def _metric_parsed_expr(column_name: str) -> pl.Expr:
    return _metric_text_expr(column_name).str.replace_all(",", "").cast(pl.Float64, strict=False)


def _metric_parse_error_expr(column_name: str) -> pl.Expr:
    text_expr = _metric_text_expr(column_name)
    parsed_expr = _metric_parsed_expr(column_name)
    return (
        (text_expr.is_not_null() & (text_expr != "") & parsed_expr.is_null())
        .cast(pl.UInt32)
        .alias(f"__parse_error_{column_name}")
    )


def _metric_expr(column_name: str) -> pl.Expr:
    parsed = _metric_parsed_expr(column_name).fill_null(0.0)
    if column_name in COUNT_COLUMNS:
        return parsed.round(0).cast(pl.Int64).alias(column_name)
    return parsed.alias(column_name)


def _missing_metric_expr(column_name: str) -> pl.Expr:
    if column_name in COUNT_COLUMNS:
        return pl.lit(0, dtype=pl.Int64).alias(column_name)
    return pl.lit(0.0, dtype=pl.Float64).alias(column_name)


def _validate_metric_parse_errors(
    df: pl.DataFrame,
    metric_columns: Sequence[str],
    context: str,
    threshold: float | None = None,
) -> None:
    """Fail loudly when too many metric cells are non-numeric text."""
    limit = settings.parse_error_threshold if threshold is None else threshold
    if df.is_empty() or limit <= 0:
        return
    targets = [column for column in metric_columns if column in df.columns]
    if not targets:
        return

    checks_df = df.select([_metric_parse_error_expr(column) for column in targets])
    row_count = int(df.height)
    failures: list[str] = []
    for column in targets:
        parse_error_count = int(checks_df.select(pl.col(f"__parse_error_{column}").sum()).item() or 0)
        parse_error_ratio = parse_error_count / row_count
        if parse_error_ratio > limit:
            failures.append(f"{column}={parse_error_ratio:.2%} ({parse_error_count}/{row_count})")

    if failures:
        joined = ", ".join(failures)
        raise ValueError(f"Data quality check failed in {context}: metric parse error ratio exceeds {limit:.2%} ({joined})")


def parse_market_frame(df: pl.DataFrame, market_code: str, threshold: float | None = None) -> list[DailyRecord]:
    """Turn one market's raw sheet into daily records.

    Headers match case-insensitively and absent metric columns read as 0.
    Rows whose date is not a valid ISO date are dropped. A sheet without a
    ``date`` or ``order_revenue`` column yields no records.
    """
    if df.width == 0 or df.is_empty():
        return []

    frame = df.rename(dict(zip(df.columns, _normalize_headers(df.columns))))
    missing_required = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing_required:
        logger.warning("Sheet %s is missing required columns %s; skipping", market_code, missing_required)
        return []

    present = [column for column in METRIC_COLUMNS if column in frame.columns]
    absent = [column for column in METRIC_COLUMNS if column not in frame.columns]
    _validate_metric_parse_errors(frame, present, context=f"sheet {market_code}", threshold=threshold)

    parsed = (
        frame.with_columns([_date_expr()] + [_metric_expr(column) for column in present] + [_missing_metric_expr(column) for column in absent])
        .filter(pl.col("date").is_not_null())
        .select(list(RECORD_COLUMNS))
    )
    skipped = frame.height - parsed.height
    if skipped:
        logger.info("Sheet %s: skipped %d row(s) without a valid date", market_code, skipped)

    return [DailyRecord(**row) for row in parsed.iter_rows(named=True)]


def _read_excel_polars(path: Path, **kwargs: Any) -> pl.DataFrame:
    """Use larger schema sampling when supported to avoid dtype inference warnings."""
    try:
        return pl.read_excel(path, infer_schema_length=10000, **kwargs)  # type: ignore[arg-type]
    except TypeError:
        return pl.read_excel(path, **kwargs)  # type: ignore[arg-type]


def _read_with_openpyxl(path: Path, sheet_name: str) -> pl.DataFrame:
    _, load_workbook = _import_openpyxl()
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        row_iter = workbook[sheet_name].iter_rows(values_only=True)
        header_row = next(row_iter, None)
        if header_row is None:
            return pl.DataFrame()

        headers = _normalize_headers(header_row)
        columns: dict[str, list[str | None]] = {name: [] for name in headers}
        for values in row_iter:
            if values is None or all(value is None for value in values):
                continue
            for idx, name in enumerate(headers):
                columns[name].append(_cell_text(values[idx]) if idx < len(values) else None)
    finally:
        workbook.close()

    return pl.DataFrame({name: pl.Series(name, values, dtype=pl.Utf8) for name, values in columns.items()})


def _read_sheet(path: Path, sheet_name: str) -> pl.DataFrame:
    try:
        return _read_excel_polars(path, sheet_name=sheet_name)
    except Exception as exc:  # polars' Excel engines raise a variety of errors
        logger.debug("polars could not read sheet %s (%s); falling back to openpyxl", sheet_name, exc)
    return _read_with_openpyxl(path, sheet_name)


def workbook_sheet_names(path: Path) -> list[str]:
    _, load_workbook = _import_openpyxl()
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        return list(workbook.sheetnames)
    finally:
        workbook.close()


def read_market_workbook(
    path: str | Path, market_codes: Iterable[str], threshold: float | None = None
) -> Dict[str, list[DailyRecord]]:
    """Read one sheet per market code from a workbook; markets without a sheet are left out."""
    workbook_path = Path(path)
    if not workbook_path.is_file():
        raise FileNotFoundError(f"Input workbook not found: {workbook_path}")

    sheets_by_code = {name.strip().upper(): name for name in workbook_sheet_names(workbook_path)}
    output: Dict[str, list[DailyRecord]] = {}
    for code in market_codes:
        sheet_name = sheets_by_code.get(code.upper())
        if sheet_name is None:
            logger.info("No sheet for market %s in %s", code, workbook_path.name)
            continue
        output[code] = parse_market_frame(_read_sheet(workbook_path, sheet_name), code, threshold=threshold)
        logger.info("Loaded %d day(s) for %s", len(output[code]), code)
    return output


def read_market_csv_dir(
    directory: str | Path, market_codes: Iterable[str], threshold: float | None = None
) -> Dict[str, list[DailyRecord]]:
    """Read ``<CODE>.csv`` files (file name matched case-insensitively) from a directory."""
    csv_dir = Path(directory)
    if not csv_dir.is_dir():
        raise FileNotFoundError(f"Input directory not found: {csv_dir}")

    files_by_code = {file.stem.strip().upper(): file for file in sorted(csv_dir.glob("*.csv"))}
    output: Dict[str, list[DailyRecord]] = {}
    for code in market_codes:
        csv_path = files_by_code.get(code.upper())
        if csv_path is None:
            logger.info("No CSV for market %s in %s", code, csv_dir)
            continue
        frame = pl.read_csv(csv_path, infer_schema_length=0)
        output[code] = parse_market_frame(frame, code, threshold=threshold)
        logger.info("Loaded %d day(s) for %s", len(output[code]), code)
    return output


def _excel_cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, bool, str)):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _write_with_polars(path: Path, sheets: Dict[str, pl.DataFrame]) -> bool:
    # polars writes a single worksheet per call; multi-sheet output goes through openpyxl.
    if len(sheets) != 1:
        return False
    sheet_name, frame = next(iter(sheets.items()))
    try:
        frame.write_excel(path, worksheet=str(sheet_name)[:31])
        return True
    except Exception as exc:  # xlsxwriter is optional for polars
        logger.debug("polars could not write %s (%s); falling back to openpyxl", path.name, exc)
        return False


def _write_with_openpyxl(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    Workbook, _ = _import_openpyxl()
    workbook = Workbook()
    workbook.remove(workbook.active)

    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=str(sheet_name)[:31])
        worksheet.append(frame.columns)
        for row in frame.iter_rows(named=False):
            worksheet.append([_excel_cell_value(value) for value in row])

    workbook.save(path)


def write_output_excel(path: str | Path, sheets: Dict[str, pl.DataFrame]) -> None:
    """Write output Excel with Polars-first (single sheet) and openpyxl fallback."""
    excel_path = Path(path)
    excel_path.parent.mkdir(parents=True, exist_ok=True)

    if _write_with_polars(excel_path, sheets):
        return
    _write_with_openpyxl(excel_path, sheets)
