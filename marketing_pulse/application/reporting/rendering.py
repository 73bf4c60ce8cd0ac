"""Text rendering helpers: monospace tables and chat-ready report messages."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, List, Sequence

from marketing_pulse.application.reporting.metrics import (
    compare_yoy,
    fmt_amount,
    fmt_percent,
    fmt_roas,
    fmt_yoy,
)
from marketing_pulse.domain.models import MarketMetrics, WeightedTotals

if TYPE_CHECKING:
    from marketing_pulse.application.report_service import DailyReport, MonthlyReport, TrendPoint, WeeklyReport

DAILY_OPENERS: tuple[str, ...] = (
    "Good morning. Here is how yesterday went:",
    "Daily numbers are in:",
    "Yesterday's spend and revenue, market by market:",
)
WEEKLY_OPENERS: tuple[str, ...] = (
    "Weekly report time. Here is last week:",
    "Seven days of campaigns, summed up:",
    "Last week's numbers are in:",
)
MONTHLY_OPENERS: tuple[str, ...] = (
    "The monthly report is here:",
    "A full month of campaigns, summed up:",
    "Last month's numbers are in:",
)
VAT_NOTE_GROSS = "💰 Revenue figures include VAT (gross). Spend is ex-VAT."
VAT_NOTE_NET = "💰 Revenue figures are ex-VAT. Spend is ex-VAT."
CODE_FENCE = "```"


def display_width(text: str) -> int:
    """Monospace width, counting flag pairs and most emoji as two cells."""
    width = 0
    chars = list(text)
    idx = 0
    while idx < len(chars):
        code = ord(chars[idx])
        if 0x1F1E6 <= code <= 0x1F1FF:
            if idx + 1 < len(chars) and 0x1F1E6 <= ord(chars[idx + 1]) <= 0x1F1FF:
                width += 2
                idx += 2
                continue
            width += 1
        elif code in (0xFE0F, 0xFE0E):
            pass
        elif code == 0x26A0 or 0x2700 <= code <= 0x27BF or code >= 0x1F300:
            width += 2
        else:
            width += 1
        idx += 1
    return width


def pad_left(text: str, width: int) -> str:
    return " " * max(0, width - display_width(text)) + text


def pad_right(text: str, width: int) -> str:
    return text + " " * max(0, width - display_width(text))


def separator(header: str) -> str:
    return "─" * display_width(header)


def _main_row(
    name: str,
    revenue: float,
    spend: float,
    roas: float,
    nc_roas: float,
    nc_percent: float,
    orders: int,
    aov: float,
    vs_ly: str | None,
) -> str:
    cells = [
        pad_right(name, 10),
        pad_left(fmt_amount(revenue), 11),
        pad_left(fmt_amount(spend), 9),
        pad_left(fmt_roas(roas), 6),
        pad_left(fmt_roas(nc_roas), 7),
        pad_left(fmt_percent(nc_percent), 7),
        pad_left(str(orders), 7),
        pad_left(fmt_amount(aov), 7),
    ]
    if vs_ly is not None:
        cells.append(pad_left(vs_ly, 9))
    return "  ".join(cells)


def format_main_table(markets: Sequence[MarketMetrics], totals: WeightedTotals, show_yoy: bool = True) -> str:
    header_cells = [
        pad_right("Store", 10),
        pad_left("Revenue", 11),
        pad_left("Spend", 9),
        pad_left("ROAS", 6),
        pad_left("NC ROAS", 7),
        pad_left("NC %", 7),
        pad_left("Orders", 7),
        pad_left("AOV", 7),
    ]
    if show_yoy:
        header_cells.append(pad_left("vs LY", 9))
    header = "  ".join(header_cells)

    lines: List[str] = [header, separator(header)]
    for row in markets:
        vs_ly = fmt_yoy(compare_yoy(row.revenue, row.revenue_yoy)) if show_yoy else None
        lines.append(
            _main_row(
                f"{row.market.flag} {row.market.code}",
                row.revenue,
                row.spend,
                row.roas,
                row.nc_roas,
                row.nc_percent,
                row.orders,
                row.aov,
                vs_ly,
            )
        )
    lines.append(separator(header))
    total_vs_ly = fmt_yoy(compare_yoy(totals.revenue, totals.revenue_yoy)) if show_yoy else None
    lines.append(
        _main_row(
            "TOTAL",
            totals.revenue,
            totals.spend,
            totals.roas,
            totals.nc_roas,
            totals.nc_percent,
            totals.orders,
            totals.aov,
            total_vs_ly,
        )
    )
    return "\n".join(lines) + "\n"


def format_channel_breakdown_inline(markets: Sequence[MarketMetrics]) -> str:
    """One line per market, e.g. ``NO: Meta 12,400 (ROAS 6.2) · Google 4,800 (ROAS 3.1)``."""
    lines: List[str] = []
    for row in markets:
        if not row.channels:
            continue
        parts = [f"{ch.channel} {fmt_amount(ch.spend)} (ROAS {fmt_roas(ch.channel_roas)})" for ch in row.channels]
        lines.append(f"{row.market.code}: {' · '.join(parts)}")
    return "\n".join(lines)


def format_channel_table(row: MarketMetrics, include_nc_orders: bool = False) -> str:
    if not row.channels:
        return ""

    header = (
        f"{pad_right('Channel', 10)} {pad_left('Spend', 10)}  {pad_left('ROAS (pixel)', 14)}  "
        f"{pad_left('ROAS (ch)', 11)}  {pad_left('NC ROAS', 9)}"
    )
    if include_nc_orders:
        header += f"  {pad_left('NC Orders', 10)}"

    lines: List[str] = [header, separator(header)]
    for channel in row.channels:
        line = (
            f"{pad_right(channel.channel, 10)} {pad_left(fmt_amount(channel.spend), 10)}  "
            f"{pad_left(fmt_roas(channel.pixel_roas), 14)}  {pad_left(fmt_roas(channel.channel_roas), 11)}  "
            f"{pad_left(fmt_roas(channel.nc_roas), 9)}"
        )
        if include_nc_orders and channel.nc_orders is not None:
            line += f"  {pad_left(str(channel.nc_orders), 10)}"
        lines.append(line)
    return "\n".join(lines) + "\n"


def format_trend_table(trend: Sequence[TrendPoint]) -> str:
    if not trend:
        return ""

    header = (
        f"{pad_right('', 12)} {pad_left('Revenue', 12)}  {pad_left('Spend', 10)}  "
        f"{pad_left('ROAS', 6)}  {pad_left('NC %', 7)}  {pad_left('vs LY', 9)}"
    )
    lines: List[str] = [header, separator(header)]
    for point in trend:
        totals = point.totals
        lines.append(
            f"{pad_right(point.label, 12)} {pad_left(fmt_amount(totals.revenue), 12)}  "
            f"{pad_left(fmt_amount(totals.spend), 10)}  {pad_left(fmt_roas(totals.roas), 6)}  "
            f"{pad_left(fmt_percent(totals.nc_percent), 7)}  {pad_left(fmt_yoy(point.vs_ly), 9)}"
        )
    return "\n".join(lines) + "\n"


def _fenced(body: str) -> str:
    return f"{CODE_FENCE}\n{body.rstrip()}\n{CODE_FENCE}\n\n"


def _footer(parts: Sequence[str]) -> str:
    return f"_{' '.join(parts)}_\n"


def _no_spend_note(codes: Sequence[str]) -> List[str]:
    if not codes:
        return []
    return [f"⚠️ No spend: {', '.join(codes)}. Check the tracking setup."]


def daily_messages(report: DailyReport, rng: random.Random, vat_removed: bool = False) -> List[str]:
    period = report.main.period
    text = f"*🚀 DAILY MARKETING REPORT*\n_{period.start}_\n\n"
    text += rng.choice(DAILY_OPENERS) + "\n\n"
    text += f"*⚡ MAIN METRICS: {period.label}*\n\n"
    text += _fenced(format_main_table(report.main.markets, report.main.totals, show_yoy=False))

    if any(row.channels for row in report.main.markets):
        text += "*📊 CHANNEL BREAKDOWN*\n"
        text += "_Market · Channel spend · Channel ROAS (markets and channels with spend only)_\n\n"
        text += _fenced(format_channel_breakdown_inline(report.main.markets))

    if report.wtd is not None:
        text += f"*📅 WEEK TO DATE ({report.wtd.label})*\n\n"
        text += _fenced(format_main_table(report.wtd.markets, report.wtd.totals, show_yoy=False))

    notes = ["💡 ROAS is channel-reported. Pixel ROAS is in the weekly report."]
    notes.append(VAT_NOTE_NET if vat_removed else VAT_NOTE_GROSS)
    notes.extend(_no_spend_note(report.no_spend_markets))
    text += _footer(notes)
    return [text]


def weekly_messages(report: WeeklyReport, rng: random.Random, vat_removed: bool = False) -> List[str]:
    period = report.main.period
    text = f"*🚀 WEEKLY MARKETING REPORT*\n_Week {report.week_number}, {report.year}: {period.start} – {period.end}_\n\n"
    text += rng.choice(WEEKLY_OPENERS) + "\n\n"
    text += _fenced(format_main_table(report.main.markets, report.main.totals))

    if report.trend:
        text += f"*📈 {len(report.trend)}-WEEK TREND*\n\n"
        text += _fenced(format_trend_table(report.trend))

    for row in report.main.markets:
        if row.channels:
            text += f"*🔍 CHANNELS: {row.market.flag} {row.market.code}*\n\n"
            text += _fenced(format_channel_table(row))

    notes: List[str] = []
    if report.pixel_data_incomplete:
        notes.append("⏱️ Pixel data may update 1-3 days after week end. Weekend numbers may be incomplete.")
    notes.append(VAT_NOTE_NET if vat_removed else VAT_NOTE_GROSS)
    notes.extend(_no_spend_note(report.no_spend_markets))
    footer = _footer(notes)

    if report.mtd is None:
        return [text + footer]

    mtd_text = f"*📅 MONTH TO DATE ({report.mtd.label})*\n\n"
    mtd_text += _fenced(format_main_table(report.mtd.markets, report.mtd.totals))
    return [text, mtd_text + footer]


def monthly_messages(report: MonthlyReport, rng: random.Random, vat_removed: bool = False) -> List[str]:
    period = report.main.period
    text = f"*🚀 MONTHLY MARKETING REPORT*\n_{period.label}_\n\n"
    text += rng.choice(MONTHLY_OPENERS) + "\n\n"
    text += _fenced(format_main_table(report.main.markets, report.main.totals))

    if report.trend:
        text += f"*📈 {len(report.trend)}-MONTH TREND*\n\n"
        text += _fenced(format_trend_table(report.trend))

    notes = [VAT_NOTE_NET if vat_removed else VAT_NOTE_GROSS]
    notes.extend(_no_spend_note(report.no_spend_markets))
    text += _footer(notes)

    messages = [text]
    channel_blocks = [
        f"*🔍 CHANNELS: {row.market.flag} {row.market.code}*\n\n" + _fenced(format_channel_table(row, include_nc_orders=True))
        for row in report.main.markets
        if row.channels
    ]
    if channel_blocks:
        messages.append("".join(channel_blocks).strip())
    return messages
