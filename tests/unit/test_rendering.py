"""
Tests for marketing_pulse.application.reporting.rendering module.
"""
import random

from marketing_pulse.application.report_service import build_daily_report, build_monthly_report, build_weekly_report
from marketing_pulse.application.reporting.rendering import (
    DAILY_OPENERS,
    VAT_NOTE_GROSS,
    VAT_NOTE_NET,
    daily_messages,
    display_width,
    format_channel_breakdown_inline,
    format_main_table,
    monthly_messages,
    pad_left,
    pad_right,
    weekly_messages,
)
from marketing_pulse.config import MARKETS
from marketing_pulse.reporting import render_html_report


class TestDisplayWidth:
    """Monospace width with emoji."""

    def test_ascii(self):
        assert display_width("TOTAL") == 5

    def test_flag_counts_as_two(self):
        assert display_width("🇳🇴 NO") == 5

    def test_variation_selector_ignored(self):
        assert display_width("⚠️ neg.") == 7

    def test_padding(self):
        assert pad_left("NO", 4) == "  NO"
        assert pad_right("🇳🇴", 4) == "🇳🇴  "
        assert pad_left("too long", 3) == "too long"


class TestTables:
    """Monospace tables."""

    def test_main_table_aligned(self, two_market_data):
        section = build_weekly_report(two_market_data, MARKETS, anchor="2024-01-17").main
        table = format_main_table(section.markets, section.totals)
        widths = {display_width(line) for line in table.rstrip("\n").split("\n")}
        assert len(widths) == 1
        assert "TOTAL" in table
        assert "+100.0%" in table
        assert "—" in table

    def test_main_table_without_yoy(self, two_market_data):
        section = build_weekly_report(two_market_data, MARKETS, anchor="2024-01-17").main
        assert "vs LY" not in format_main_table(section.markets, section.totals, show_yoy=False)

    def test_inline_channels(self, two_market_data):
        section = build_weekly_report(two_market_data, MARKETS, anchor="2024-01-17").main
        lines = format_channel_breakdown_inline(section.markets).split("\n")
        assert lines[0] == "NO: Meta 420 (ROAS 7.0) · Google 280 (ROAS 4.0)"
        assert lines[1] == "SE: TikTok 700 (ROAS 0.0)"


class TestMessages:
    """Chat message builders."""

    def test_daily_is_deterministic_with_seed(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-01-10")
        first = daily_messages(report, random.Random(7))
        second = daily_messages(report, random.Random(7))
        assert first == second
        assert len(first) == 1
        assert any(opener in first[0] for opener in DAILY_OPENERS)

    def test_daily_footer(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-01-10")
        [text] = daily_messages(report, random.Random(0))
        assert "WEEK TO DATE (Mon–Tue)" in text
        assert "No spend: DK, FI, DE, NL, UK, COM" in text
        assert VAT_NOTE_GROSS in text

    def test_vat_note_when_removed(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-01-10")
        [text] = daily_messages(report, random.Random(0), vat_removed=True)
        assert VAT_NOTE_NET in text

    def test_weekly_splits_mtd_into_second_message(self, two_market_data):
        report = build_weekly_report(two_market_data, MARKETS, anchor="2024-01-17")
        messages = weekly_messages(report, random.Random(0))
        assert len(messages) == 2
        assert "Week 2, 2024" in messages[0]
        assert "3-WEEK TREND" in messages[0]
        assert "MONTH TO DATE (Jan 1–14)" in messages[1]
        assert "Pixel data may update" in messages[1]

    def test_weekly_single_message_without_mtd(self, two_market_data):
        report = build_weekly_report(two_market_data, MARKETS, anchor="2024-01-10")
        assert len(weekly_messages(report, random.Random(0))) == 1

    def test_monthly_channel_message(self, two_market_data):
        report = build_monthly_report(two_market_data, MARKETS, anchor="2024-02-05")
        messages = monthly_messages(report, random.Random(0))
        assert len(messages) == 2
        assert "January 2024" in messages[0]
        assert "NC Orders" in messages[1]

    def test_daily_wtd_table_has_no_yoy_column(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-01-10")
        [text] = daily_messages(report, random.Random(0))
        wtd_block = text.split("WEEK TO DATE")[1]
        assert "TOTAL" in wtd_block
        assert "vs LY" not in wtd_block


class TestHtmlReport:
    """Self-contained HTML rendering."""

    def test_daily_tables_have_no_yoy_column(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-01-10")
        html = render_html_report(report)
        assert "Week to date (Mon–Tue)" in html
        assert "vs LY" not in html

    def test_empty_section_placeholder_spans_visible_columns(self, two_market_data):
        report = build_daily_report(two_market_data, MARKETS, anchor="2024-06-02")
        html = render_html_report(report)
        assert 'colspan="8">No markets with spend' in html
        assert 'colspan="9"' not in html

    def test_empty_section_placeholder_with_yoy(self, two_market_data):
        report = build_weekly_report(two_market_data, MARKETS, anchor="2024-07-10")
        html = render_html_report(report)
        assert 'colspan="9">No markets with spend' in html
