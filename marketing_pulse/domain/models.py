"""Domain models for daily marketing records, markets, periods and metrics."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

CHANNELS: tuple[str, ...] = ("Meta", "Google", "TikTok")
CHANNEL_METRICS: tuple[str, ...] = ("spend", "pixel_revenue", "channel_revenue", "pixel_nc_revenue")
CHANNEL_REVENUE_METRICS: tuple[str, ...] = ("pixel_revenue", "channel_revenue", "pixel_nc_revenue")


def channel_column(channel: str, metric: str) -> str:
    return f"{channel.lower()}_{metric}"


BASE_METRIC_COLUMNS: list[str] = ["order_revenue", "spend", "orders", "new_customer_orders"]
CHANNEL_COLUMNS: list[str] = [channel_column(ch, metric) for ch in CHANNELS for metric in CHANNEL_METRICS]
METRIC_COLUMNS: list[str] = [*BASE_METRIC_COLUMNS, *CHANNEL_COLUMNS]
COUNT_COLUMNS: list[str] = ["orders", "new_customer_orders"]
# VAT-inclusive upstream; spend is booked ex-VAT.
REVENUE_COLUMNS: list[str] = ["order_revenue"] + [
    channel_column(ch, metric) for ch in CHANNELS for metric in CHANNEL_REVENUE_METRICS
]
MONETARY_COLUMNS: list[str] = [column for column in METRIC_COLUMNS if column not in COUNT_COLUMNS]
RECORD_COLUMNS: list[str] = ["date", *METRIC_COLUMNS]


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        parsed = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if parsed != parsed:
        return default
    return parsed


def _to_count(value: Any) -> int:
    return int(round(_to_float(value)))


def normalize_iso_date(value: Any) -> str:
    text = str(value or "").strip()[:10]
    try:
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date (expected YYYY-MM-DD): {value!r}") from exc
    return parsed.isoformat()


_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def require_iso_date(value: Any) -> str:
    """Strict counterpart of :func:`normalize_iso_date`: the whole value must be ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise ValueError(f"Invalid ISO date (expected YYYY-MM-DD): {value!r}")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date (expected YYYY-MM-DD): {value!r}") from exc
    return value


@dataclass(frozen=True)
class DailyRecord:
    """One market's activity for one calendar date."""

    date: str
    order_revenue: float = 0.0
    spend: float = 0.0
    orders: int = 0
    new_customer_orders: int = 0
    meta_spend: float = 0.0
    meta_pixel_revenue: float = 0.0
    meta_channel_revenue: float = 0.0
    meta_pixel_nc_revenue: float = 0.0
    google_spend: float = 0.0
    google_pixel_revenue: float = 0.0
    google_channel_revenue: float = 0.0
    google_pixel_nc_revenue: float = 0.0
    tiktok_spend: float = 0.0
    tiktok_pixel_revenue: float = 0.0
    tiktok_channel_revenue: float = 0.0
    tiktok_pixel_nc_revenue: float = 0.0

    def __post_init__(self) -> None:
        # Period filters compare dates as strings.
        require_iso_date(self.date)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DailyRecord":
        lowered = {str(key).strip().lower(): value for key, value in row.items()}
        values: dict[str, Any] = {"date": normalize_iso_date(lowered.get("date"))}
        for column in METRIC_COLUMNS:
            raw = lowered.get(column)
            values[column] = _to_count(raw) if column in COUNT_COLUMNS else _to_float(raw)
        return cls(**values)

    def to_row(self) -> dict[str, Any]:
        return asdict(self)

    def channel_values(self, channel: str) -> dict[str, float]:
        return {metric: getattr(self, channel_column(channel, metric)) for metric in CHANNEL_METRICS}


@dataclass(frozen=True)
class Market:
    """Static per-market configuration."""

    code: str
    name: str
    currency: str
    flag: str
    exchange_rate: float
    vat_rate: float

    def __post_init__(self) -> None:
        if self.exchange_rate <= 0:
            raise ValueError(f"exchange_rate must be positive for {self.code}, got {self.exchange_rate}")
        if self.vat_rate < 0:
            raise ValueError(f"vat_rate must be non-negative for {self.code}, got {self.vat_rate}")


class PeriodKind(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    WTD = "wtd"
    MTD = "mtd"


@dataclass(frozen=True)
class Period:
    """Inclusive calendar range plus its year-over-year counterpart."""

    kind: PeriodKind
    start: str
    end: str
    label: str
    yoy_start: str | None = None
    yoy_end: str | None = None

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Period start {self.start} is after end {self.end}")
        if (self.yoy_start is None) != (self.yoy_end is None):
            raise ValueError("yoy_start and yoy_end must be set together")
        if self.yoy_start is not None and self.yoy_end is not None and self.yoy_start > self.yoy_end:
            raise ValueError(f"YoY start {self.yoy_start} is after YoY end {self.yoy_end}")

    def contains(self, iso_date: str) -> bool:
        return self.start <= iso_date <= self.end

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload


@dataclass(frozen=True)
class ChannelTotals:
    channel: str
    spend: float = 0.0
    pixel_revenue: float = 0.0
    channel_revenue: float = 0.0
    pixel_nc_revenue: float = 0.0


@dataclass(frozen=True)
class PeriodTotals:
    """Summed daily records for one market and period, before ratios per channel."""

    revenue: float
    spend: float
    orders: int
    new_customer_orders: int
    mer: float | None
    nc_percent: float | None
    aov: float | None
    channels: tuple[ChannelTotals, ...]
    days_with_data: int

    @property
    def nc_revenue(self) -> float:
        return sum(channel.pixel_nc_revenue for channel in self.channels)

    def channel(self, name: str) -> ChannelTotals:
        for item in self.channels:
            if item.channel == name:
                return item
        return ChannelTotals(channel=name)


@dataclass(frozen=True)
class ChannelMetrics:
    channel: str
    spend: float
    pixel_roas: float | None
    channel_roas: float | None
    nc_roas: float | None
    nc_orders: int | None = None


@dataclass(frozen=True)
class MarketMetrics:
    """Fully formed metrics for one market and period, in the reporting currency."""

    market: Market
    revenue: float
    revenue_yoy: float | None
    spend: float
    roas: float
    nc_roas: float
    nc_percent: float
    orders: int
    new_customer_orders: int
    aov: float
    channels: tuple[ChannelMetrics, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["market"] = self.market.code
        return payload


@dataclass(frozen=True)
class WeightedTotals:
    """Synthetic all-markets row: sums for additive fields, revenue-weighted ratios."""

    revenue: float
    spend: float
    orders: int
    roas: float
    nc_roas: float
    nc_percent: float
    aov: float
    revenue_yoy: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class YoYKind(str, Enum):
    NO_DATA = "no_data"
    NEW = "new"
    ANOMALOUS = "anomalous"
    PERCENT = "percent"


@dataclass(frozen=True)
class YoYComparison:
    kind: YoYKind
    value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "value": self.value}
