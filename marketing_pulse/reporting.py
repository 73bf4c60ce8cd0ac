"""HTML report generator for daily, weekly and monthly market reports."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import List, Sequence, Union

from marketing_pulse.application.report_service import (
    DailyReport,
    MonthlyReport,
    PacingSection,
    TrendPoint,
    WeeklyReport,
)
from marketing_pulse.application.reporting.metrics import (
    compare_yoy,
    fmt_amount,
    fmt_percent,
    fmt_roas,
    fmt_yoy,
)
from marketing_pulse.config import REPORTING_CURRENCY
from marketing_pulse.domain.models import MarketMetrics, YoYComparison, YoYKind

Report = Union[DailyReport, WeeklyReport, MonthlyReport]


def _yoy_css_class(comparison: YoYComparison) -> str:
    if comparison.kind is YoYKind.NO_DATA:
        return "yoy-na"
    if comparison.kind is YoYKind.NEW:
        return "yoy-pos"
    if comparison.kind is YoYKind.ANOMALOUS:
        return "yoy-warn"
    value = comparison.value or 0.0
    if abs(value) < 1e-12:
        return "yoy-neutral"
    return "yoy-pos" if value > 0 else "yoy-neg"


def _render_yoy_cell(comparison: YoYComparison) -> str:
    return f"<td class=\"{_yoy_css_class(comparison)}\">{escape(fmt_yoy(comparison))}</td>"


def _market_row(row: MarketMetrics, show_yoy: bool) -> str:
    cells = (
        f"<td>{escape(row.market.flag)} {escape(row.market.name)}</td>"
        f"<td>{escape(fmt_amount(row.revenue))}</td>"
        f"<td>{escape(fmt_amount(row.spend))}</td>"
        f"<td>{escape(fmt_roas(row.roas))}</td>"
        f"<td>{escape(fmt_roas(row.nc_roas))}</td>"
        f"<td>{escape(fmt_percent(row.nc_percent))}</td>"
        f"<td>{row.orders}</td>"
        f"<td>{escape(fmt_amount(row.aov))}</td>"
    )
    if show_yoy:
        cells += _render_yoy_cell(compare_yoy(row.revenue, row.revenue_yoy))
    return f"<tr>{cells}</tr>"


def _render_section_table(section: PacingSection, show_yoy: bool = True) -> str:
    yoy_head = "<th>vs LY</th>" if show_yoy else ""
    rows = "".join(_market_row(row, show_yoy) for row in section.markets)
    totals = section.totals
    total_cells = (
        "<td>Total</td>"
        f"<td>{escape(fmt_amount(totals.revenue))}</td>"
        f"<td>{escape(fmt_amount(totals.spend))}</td>"
        f"<td>{escape(fmt_roas(totals.roas))}</td>"
        f"<td>{escape(fmt_roas(totals.nc_roas))}</td>"
        f"<td>{escape(fmt_percent(totals.nc_percent))}</td>"
        f"<td>{totals.orders}</td>"
        f"<td>{escape(fmt_amount(totals.aov))}</td>"
    )
    if show_yoy:
        total_cells += _render_yoy_cell(section.vs_ly)
    if not rows:
        colspan = 9 if show_yoy else 8
        rows = f"<tr><td class=\"muted\" colspan=\"{colspan}\">No markets with spend in this period.</td></tr>"
    return (
        "<table class=\"metric-table\">"
        "<thead><tr><th>Store</th><th>Revenue</th><th>Spend</th><th>ROAS</th><th>NC ROAS</th>"
        f"<th>NC %</th><th>Orders</th><th>AOV</th>{yoy_head}</tr></thead>"
        f"<tbody>{rows}<tr class=\"total\">{total_cells}</tr></tbody></table>"
    )


def _render_trend_table(trend: Sequence[TrendPoint]) -> str:
    rows = "".join(
        "<tr>"
        f"<td>{escape(point.label)}</td>"
        f"<td>{escape(fmt_amount(point.totals.revenue))}</td>"
        f"<td>{escape(fmt_amount(point.totals.spend))}</td>"
        f"<td>{escape(fmt_roas(point.totals.roas))}</td>"
        f"<td>{escape(fmt_percent(point.totals.nc_percent))}</td>"
        f"{_render_yoy_cell(point.vs_ly)}"
        "</tr>"
        for point in trend
    )
    return (
        "<table class=\"metric-table\">"
        "<thead><tr><th>Period</th><th>Revenue</th><th>Spend</th><th>ROAS</th><th>NC %</th><th>vs LY</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )


def _render_channel_cards(markets: Sequence[MarketMetrics], include_nc_orders: bool) -> str:
    cards: List[str] = []
    for row in markets:
        if not row.channels:
            continue
        nc_head = "<th>NC Orders</th>" if include_nc_orders else ""
        body = "".join(
            "<tr>"
            f"<td>{escape(channel.channel)}</td>"
            f"<td>{escape(fmt_amount(channel.spend))}</td>"
            f"<td>{escape(fmt_roas(channel.pixel_roas))}</td>"
            f"<td>{escape(fmt_roas(channel.channel_roas))}</td>"
            f"<td>{escape(fmt_roas(channel.nc_roas))}</td>"
            + (f"<td>{channel.nc_orders if channel.nc_orders is not None else ''}</td>" if include_nc_orders else "")
            + "</tr>"
            for channel in row.channels
        )
        cards.append(
            "<section class=\"market-card\">"
            f"<h3>{escape(row.market.flag)} {escape(row.market.name)}</h3>"
            "<table class=\"metric-table\">"
            "<thead><tr><th>Channel</th><th>Spend</th><th>ROAS (pixel)</th><th>ROAS (channel)</th>"
            f"<th>NC ROAS</th>{nc_head}</tr></thead>"
            f"<tbody>{body}</tbody></table>"
            "</section>"
        )
    return "".join(cards)


def _panel(title: str, body: str) -> str:
    return f"<section class=\"panel\"><h2>{escape(title)}</h2>{body}</section>"


def _report_title(report: Report) -> str:
    if isinstance(report, DailyReport):
        return f"Daily Marketing Report: {report.main.period.start}"
    if isinstance(report, WeeklyReport):
        return f"Weekly Marketing Report: {report.main.label}"
    return f"Monthly Marketing Report: {report.main.label}"


def _report_panels(report: Report) -> List[str]:
    panels: List[str] = []
    if isinstance(report, DailyReport):
        panels.append(_panel(report.main.label, _render_section_table(report.main, show_yoy=False)))
        if report.wtd is not None:
            wtd_table = _render_section_table(report.wtd, show_yoy=False)
            panels.append(_panel(f"Week to date ({report.wtd.label})", wtd_table))
        channels = _render_channel_cards(report.main.markets, include_nc_orders=False)
    elif isinstance(report, WeeklyReport):
        panels.append(_panel(report.main.label, _render_section_table(report.main)))
        if report.trend:
            panels.append(_panel(f"{len(report.trend)}-week trend", _render_trend_table(report.trend)))
        if report.mtd is not None:
            panels.append(_panel(f"Month to date ({report.mtd.label})", _render_section_table(report.mtd)))
        channels = _render_channel_cards(report.main.markets, include_nc_orders=False)
    else:
        panels.append(_panel(report.main.label, _render_section_table(report.main)))
        if report.trend:
            panels.append(_panel(f"{len(report.trend)}-month trend", _render_trend_table(report.trend)))
        channels = _render_channel_cards(report.main.markets, include_nc_orders=True)

    if channels:
        panels.append(_panel("Channels", channels))
    return panels


def _notes(report: Report, vat_removed: bool) -> List[str]:
    notes = [
        "Revenue is ex-VAT." if vat_removed else "Revenue includes VAT (gross). Spend is ex-VAT.",
        f"All amounts in {REPORTING_CURRENCY}.",
    ]
    if report.no_spend_markets:
        notes.append(f"No spend: {', '.join(report.no_spend_markets)}.")
    if isinstance(report, WeeklyReport) and report.pixel_data_incomplete:
        notes.append("Pixel data may still update for the last days of the week.")
    return notes


def render_html_report(report: Report, vat_removed: bool = False, generated_at: datetime | None = None) -> str:
    title = _report_title(report)
    stamp = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M")
    panels_html = "".join(_report_panels(report))
    notes_html = "".join(f"<li>{escape(note)}</li>" for note in _notes(report, vat_removed))

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{escape(title)}</title>
  <style>
    :root {{
      --bg: #f3f6fb;
      --panel: #ffffff;
      --line: #d5dce8;
      --text: #0f172a;
      --sub: #475569;
      --brand: #0f766e;
    }}
    * {{ box-sizing: border-box; }}
    body {{
      margin: 0;
      background: linear-gradient(180deg, #e9efff 0%, var(--bg) 35%);
      color: var(--text);
      font-family: "Segoe UI", sans-serif;
    }}
    .wrap {{
      max-width: 1200px;
      margin: 0 auto;
      padding: 20px;
    }}
    .panel {{
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 14px;
      box-shadow: 0 4px 16px rgba(15, 23, 42, 0.05);
      padding: 14px 18px;
      margin-bottom: 14px;
    }}
    h1 {{
      margin: 0 0 8px;
      color: var(--brand);
      font-size: 28px;
    }}
    h2 {{ margin: 0 0 10px; font-size: 20px; }}
    h3 {{ margin: 10px 0 6px; font-size: 16px; }}
    .meta, .muted {{ color: var(--sub); font-size: 13px; }}
    table {{
      width: 100%;
      border-collapse: collapse;
      font-size: 13px;
    }}
    th, td {{
      border: 1px solid var(--line);
      padding: 6px 8px;
      text-align: right;
    }}
    th:first-child, td:first-child {{ text-align: left; }}
    th {{ background: #eef4ff; font-weight: 700; }}
    tr.total td {{ font-weight: 700; background: #f8fafc; }}
    td.yoy-pos {{ color: #1d4ed8; }}
    td.yoy-neg {{ color: #b91c1c; }}
    td.yoy-warn {{ color: #b45309; }}
    td.yoy-neutral {{ color: #475569; }}
    td.yoy-na {{ color: #94a3b8; }}
  </style>
</head>
<body>
  <div class="wrap">
    <section class="panel">
      <h1>{escape(title)}</h1>
      <div class="meta">Generated: {escape(stamp)}</div>
    </section>
    {panels_html}
    <section class="panel">
      <ul class="meta">{notes_html}</ul>
    </section>
  </div>
</body>
</html>
"""


def write_html_report(output_path: Path, report: Report, vat_removed: bool = False) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_html_report(report, vat_removed=vat_removed), encoding="utf-8")
