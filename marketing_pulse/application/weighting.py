"""Cross-market totals with revenue-share weighting."""

from __future__ import annotations

from typing import Sequence

from marketing_pulse.domain.models import MarketMetrics, WeightedTotals


def total_yoy_baseline(metrics: Sequence[MarketMetrics]) -> float | None:
    total = sum(row.revenue_yoy or 0.0 for row in metrics)
    return total if total > 0 else None


def aggregate_weighted(metrics: Sequence[MarketMetrics]) -> WeightedTotals:
    """Combine complete per-market rows into one all-markets row.

    Revenue, spend and orders are summed. ROAS, NC ROAS, NC% and AOV are
    averaged with each market weighted by its share of total revenue, so a
    small market with an outsized ratio cannot dominate the headline. With
    zero total revenue every weight (and every weighted ratio) is 0.
    """
    total_revenue = sum(row.revenue for row in metrics)
    total_spend = sum(row.spend for row in metrics)
    total_orders = sum(row.orders for row in metrics)

    roas = nc_roas = nc_percent = aov = 0.0
    for row in metrics:
        weight = row.revenue / total_revenue if total_revenue > 0 else 0.0
        roas += row.roas * weight
        nc_roas += row.nc_roas * weight
        nc_percent += row.nc_percent * weight
        aov += row.aov * weight

    return WeightedTotals(
        revenue=total_revenue,
        spend=total_spend,
        orders=total_orders,
        roas=roas,
        nc_roas=nc_roas,
        nc_percent=nc_percent,
        aov=aov,
        revenue_yoy=total_yoy_baseline(metrics),
    )
