"""
Pytest configuration and shared fixtures.
"""
from typing import Callable, Dict, List

import pytest

from marketing_pulse.domain.models import DailyRecord, Market


@pytest.fixture
def make_record() -> Callable[..., DailyRecord]:
    """Factory for daily records; unspecified metrics default to 0."""

    def _make(day: str, **metrics) -> DailyRecord:
        return DailyRecord(date=day, **metrics)

    return _make


@pytest.fixture
def plain_market() -> Market:
    """Market already in the reporting currency, 25% VAT."""
    return Market(code="NO", name="Norway", currency="NOK", flag="🇳🇴", exchange_rate=1.0, vat_rate=0.25)


@pytest.fixture
def euro_market() -> Market:
    return Market(code="DE", name="Germany", currency="EUR", flag="🇩🇪", exchange_rate=11.8, vat_rate=0.19)


@pytest.fixture
def scenario_records(make_record) -> List[DailyRecord]:
    """Three days: one normal, one with spend but no revenue, one with revenue but no spend."""
    return [
        make_record("2024-03-03", order_revenue=500.0, spend=0.0, orders=5),
        make_record("2024-03-01", order_revenue=1000.0, spend=100.0, orders=10, new_customer_orders=4),
        make_record("2024-03-02", order_revenue=0.0, spend=50.0),
    ]


@pytest.fixture
def two_market_data(make_record) -> Dict[str, List[DailyRecord]]:
    """Normalized data for NO and SE covering a week in 2024 and its 2023 counterpart."""
    no_days = [
        make_record(
            f"2024-01-{day:02d}",
            order_revenue=1000.0,
            spend=100.0,
            orders=10,
            new_customer_orders=3,
            meta_spend=60.0,
            meta_pixel_revenue=300.0,
            meta_channel_revenue=420.0,
            meta_pixel_nc_revenue=120.0,
            google_spend=40.0,
            google_pixel_revenue=100.0,
            google_channel_revenue=160.0,
        )
        for day in range(8, 15)
    ]
    no_last_year = [make_record(f"2023-01-{day:02d}", order_revenue=500.0, spend=80.0, orders=5) for day in range(9, 16)]
    se_days = [
        make_record(f"2024-01-{day:02d}", order_revenue=300.0, spend=100.0, orders=3, tiktok_spend=100.0)
        for day in range(8, 15)
    ]
    return {"NO": no_days + no_last_year, "SE": se_days}
