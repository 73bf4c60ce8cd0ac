"""
Tests for marketing_pulse.application.market_service module.
"""
import pytest

from marketing_pulse.application.market_service import (
    build_all_market_metrics,
    build_market_metrics,
    markets_with_spend,
    markets_without_spend,
)
from marketing_pulse.application.normalization import normalize_records
from marketing_pulse.config import MARKETS
from marketing_pulse.domain.models import Period, PeriodKind
from marketing_pulse.domain.periods import week_period


class TestBuildMarketMetrics:
    """One market's metrics row."""

    def test_end_to_end_scenario(self, scenario_records, plain_market):
        """Three days at 25% VAT: revenue 1200.0, spend 150, ROAS 8.0."""
        normalized = normalize_records(scenario_records, plain_market, apply_vat=True)
        row = build_market_metrics(plain_market, normalized, [])
        assert row.revenue == pytest.approx(1200.0)
        assert row.spend == 150.0
        assert row.roas == pytest.approx(8.0)
        assert row.revenue_yoy is None

    def test_zero_spend_defaults_ratios_to_zero(self, make_record, plain_market):
        row = build_market_metrics(plain_market, [make_record("2024-03-01", order_revenue=100.0)], [])
        assert row.roas == 0.0
        assert row.nc_roas == 0.0
        assert row.channels == ()

    def test_no_records(self, plain_market):
        row = build_market_metrics(plain_market, [], [])
        assert row.revenue == 0.0
        assert row.aov == 0.0
        assert row.nc_percent == 0.0

    def test_zero_baseline_is_absent(self, make_record, plain_market):
        current = [make_record("2024-03-01", order_revenue=100.0, spend=10.0)]
        last_year = [make_record("2023-03-01", order_revenue=0.0, spend=10.0)]
        assert build_market_metrics(plain_market, current, last_year).revenue_yoy is None

    def test_positive_baseline(self, make_record, plain_market):
        current = [make_record("2024-03-01", order_revenue=100.0, spend=10.0)]
        last_year = [make_record("2023-03-01", order_revenue=80.0)]
        assert build_market_metrics(plain_market, current, last_year).revenue_yoy == 80.0

    def test_nc_roas_uses_pixel_nc_revenue(self, make_record, plain_market):
        records = [make_record("2024-03-01", spend=100.0, meta_spend=100.0, meta_pixel_nc_revenue=250.0)]
        row = build_market_metrics(plain_market, records, [])
        assert row.nc_roas == pytest.approx(2.5)

    def test_channel_order_counts_optional(self, make_record, plain_market):
        records = [make_record("2024-03-01", order_revenue=100.0, orders=1, spend=10.0, meta_spend=10.0)]
        assert build_market_metrics(plain_market, records, []).channels[0].nc_orders is None
        assert build_market_metrics(plain_market, records, [], include_nc_orders=True).channels[0].nc_orders == 0


class TestSpendFilters:
    """Which markets count as active for a period."""

    def test_with_and_without_spend(self, two_market_data):
        assert markets_with_spend(two_market_data, "2024-01-08", "2024-01-14") == ["NO", "SE"]
        assert markets_with_spend(two_market_data, "2023-01-09", "2023-01-15") == ["NO"]

    def test_without_spend_follows_market_order(self, two_market_data):
        missing = markets_without_spend(two_market_data, MARKETS, "2024-01-08", "2024-01-14")
        assert missing == ["DK", "FI", "DE", "NL", "UK", "COM"]


class TestBuildAllMarketMetrics:
    """Rows for every active market."""

    def test_sorted_by_revenue(self, two_market_data):
        rows = build_all_market_metrics(two_market_data, MARKETS, week_period("2024-01-17", weeks_ago=1))
        assert [row.market.code for row in rows] == ["NO", "SE"]
        assert rows[0].revenue == 7000.0
        assert rows[0].revenue_yoy == 3500.0
        assert rows[1].revenue_yoy is None

    def test_unknown_market_code_skipped(self, two_market_data, make_record):
        data = dict(two_market_data)
        data["ZZ"] = [make_record("2024-01-10", order_revenue=1.0, spend=1.0)]
        rows = build_all_market_metrics(data, MARKETS, week_period("2024-01-17", weeks_ago=1))
        assert "ZZ" not in [row.market.code for row in rows]

    def test_period_without_yoy_raises(self, two_market_data):
        period = Period(kind=PeriodKind.DAY, start="2024-01-08", end="2024-01-08", label="no yoy")
        with pytest.raises(ValueError):
            build_all_market_metrics(two_market_data, MARKETS, period)
