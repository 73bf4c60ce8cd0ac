"""Currency and VAT normalization of raw daily records.

Upstream revenue is VAT-inclusive and in the market's local currency. These
transforms return new records and never touch their input, so normalizing a
dataset is a single explicit pass done before any aggregation.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from marketing_pulse.domain.models import MONETARY_COLUMNS, REVENUE_COLUMNS, DailyRecord, Market

logger = logging.getLogger(__name__)


def _scaled(record: DailyRecord, columns: Sequence[str], factor: float = 1.0, divisor: float = 1.0) -> DailyRecord:
    return replace(record, **{column: getattr(record, column) * factor / divisor for column in columns})


def remove_vat(records: Iterable[DailyRecord], vat_rate: float) -> list[DailyRecord]:
    """Divide every revenue field by ``1 + vat_rate``. Spend is booked ex-VAT and is left alone."""
    if vat_rate < 0:
        raise ValueError(f"vat_rate must be non-negative, got {vat_rate}")
    divisor = 1 + vat_rate
    if divisor == 1:
        return list(records)
    return [_scaled(record, REVENUE_COLUMNS, divisor=divisor) for record in records]


def convert_currency(records: Iterable[DailyRecord], exchange_rate: float) -> list[DailyRecord]:
    """Multiply every monetary field (revenue and spend) into the reporting currency."""
    if exchange_rate <= 0:
        raise ValueError(f"exchange_rate must be positive, got {exchange_rate}")
    if exchange_rate == 1:
        return list(records)
    return [_scaled(record, MONETARY_COLUMNS, factor=exchange_rate) for record in records]


def normalize_records(
    records: Iterable[DailyRecord],
    market: Market,
    apply_vat: bool = False,
) -> list[DailyRecord]:
    # VAT comes off in local currency, with the market's own rate.
    local = remove_vat(records, market.vat_rate) if apply_vat else list(records)
    return convert_currency(local, market.exchange_rate)


def normalize_market_data(
    data_by_market: Mapping[str, Sequence[DailyRecord]],
    markets: Sequence[Market],
    apply_vat: bool = False,
) -> dict[str, list[DailyRecord]]:
    """Normalize every configured market once; markets without a config entry are dropped."""
    normalized: dict[str, list[DailyRecord]] = {}
    for market in markets:
        records = data_by_market.get(market.code)
        if records is None:
            continue
        normalized[market.code] = normalize_records(records, market, apply_vat=apply_vat)

    unknown = sorted(set(data_by_market).difference(market.code for market in markets))
    if unknown:
        logger.warning("Ignoring data for unconfigured markets: %s", ", ".join(unknown))
    logger.debug("Normalized %d markets (apply_vat=%s)", len(normalized), apply_vat)
    return normalized
