"""Marketing Pulse entrypoint."""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from marketing_pulse.application.normalization import normalize_market_data
from marketing_pulse.application.report_service import (
    PacingSection,
    build_daily_report,
    build_monthly_report,
    build_weekly_report,
)
from marketing_pulse.application.reporting.rendering import daily_messages, monthly_messages, weekly_messages
from marketing_pulse.config import MARKETS, configure_logging, settings
from marketing_pulse.domain.periods import parse_date
from marketing_pulse.infrastructure import (
    load_market_data,
    save_report_html,
    save_report_json,
    save_report_text,
    save_report_workbook,
)
from marketing_pulse.reporting import Report

logger = logging.getLogger("marketing_pulse")

REPORT_KINDS: tuple[str, ...] = ("daily", "weekly", "monthly")

BUILDERS: Dict[str, Callable[..., Report]] = {
    "daily": build_daily_report,
    "weekly": build_weekly_report,
    "monthly": build_monthly_report,
}
RENDERERS: Dict[str, Callable[..., List[str]]] = {
    "daily": daily_messages,
    "weekly": weekly_messages,
    "monthly": monthly_messages,
}


def _anchor_arg(value: str) -> str:
    try:
        parse_date(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="marketing-pulse", description="Multi-market marketing performance reports.")
    parser.add_argument("report", choices=REPORT_KINDS, help="Report to build.")
    parser.add_argument("--input", required=True, type=Path, help="Workbook (.xlsx) with one sheet per market, or a directory of <CODE>.csv files.")
    parser.add_argument("--anchor", type=_anchor_arg, default=None, help="Run date (YYYY-MM-DD). Defaults to today.")
    parser.add_argument("--output-dir", type=Path, default=None, help=f"Output directory (default: {settings.output_dir}).")
    parser.add_argument(
        "--remove-vat",
        action=argparse.BooleanOptionalAction,
        default=settings.remove_vat,
        help="Report revenue ex-VAT (default from MARKETING_PULSE_REMOVE_VAT).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the opening line of each message.")
    parser.add_argument("--log-level", default=None, help=f"Logging level (default: {settings.log_level}).")
    return parser


def _sections(report: Report) -> Dict[str, PacingSection]:
    sections: Dict[str, PacingSection] = {"main": report.main}
    for name in ("wtd", "mtd"):
        section = getattr(report, name, None)
        if section is not None:
            sections[name] = section
    return sections


def run(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    threshold = settings.parse_error_threshold

    raw_data = load_market_data(args.input, MARKETS, threshold=threshold)
    # Normalize exactly once; everything downstream expects reporting-currency values.
    data = normalize_market_data(raw_data, MARKETS, apply_vat=args.remove_vat)

    report = BUILDERS[args.report](data, MARKETS, anchor=args.anchor)
    messages = RENDERERS[args.report](report, random.Random(args.seed), vat_removed=args.remove_vat)

    output_dir = args.output_dir or Path(settings.output_dir)
    stem = f"{args.report}_{report.main.period.start}"
    output_json_path = output_dir / f"{stem}.json"
    output_text_path = output_dir / f"{stem}.txt"
    output_html_path = output_dir / f"{stem}.html"
    output_excel_path = output_dir / f"{stem}.xlsx"

    payload = report.to_dict()
    payload["vat_removed"] = args.remove_vat
    save_report_json(output_json_path, payload)
    save_report_text(output_text_path, messages)
    save_report_html(output_html_path, report, vat_removed=args.remove_vat)
    excel_saved, excel_error_message = save_report_workbook(output_excel_path, _sections(report))

    for message in messages:
        print(message)
    print(f"Saved JSON: {output_json_path}")
    print(f"Saved text: {output_text_path}")
    print(f"Saved HTML: {output_html_path}")
    if excel_saved:
        print(f"Saved Excel: {output_excel_path}")
    else:
        print(f"Excel save skipped (file may be open/locked): {excel_error_message}")
    return 0


def main() -> None:
    try:
        code = run()
    except (ValueError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
