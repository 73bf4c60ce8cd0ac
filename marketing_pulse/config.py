"""Market table, environment settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from marketing_pulse.domain.models import Market

load_dotenv()

REPORTING_CURRENCY = "NOK"

# Exchange rates are multipliers into NOK. VAT rates are fractions (0.25 = 25%).
MARKETS: tuple[Market, ...] = (
    Market(code="NO", name="Norway", currency="NOK", flag="🇳🇴", exchange_rate=1.00, vat_rate=0.25),
    Market(code="SE", name="Sweden", currency="SEK", flag="🇸🇪", exchange_rate=1.02, vat_rate=0.25),
    Market(code="DK", name="Denmark", currency="DKK", flag="🇩🇰", exchange_rate=1.60, vat_rate=0.25),
    Market(code="FI", name="Finland", currency="EUR", flag="🇫🇮", exchange_rate=11.80, vat_rate=0.255),
    Market(code="DE", name="Germany", currency="EUR", flag="🇩🇪", exchange_rate=11.80, vat_rate=0.19),
    Market(code="NL", name="Netherlands", currency="EUR", flag="🇳🇱", exchange_rate=11.80, vat_rate=0.21),
    Market(code="UK", name="UK", currency="GBP", flag="🇬🇧", exchange_rate=14.00, vat_rate=0.20),
    Market(code="COM", name="Europe", currency="USD", flag="🇪🇺", exchange_rate=11.00, vat_rate=0.25),
)


def market_by_code(code: str) -> Market | None:
    wanted = str(code or "").strip().upper()
    return next((market for market in MARKETS if market.code == wanted), None)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_error_threshold(raw: str) -> float:
    try:
        threshold = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid MARKETING_PULSE_PARSE_ERROR_THRESHOLD: {raw}") from exc
    if threshold < 0 or threshold > 1:
        raise ValueError(f"MARKETING_PULSE_PARSE_ERROR_THRESHOLD must be in [0, 1], got {threshold}")
    return threshold


@dataclass(frozen=True)
class Settings:
    """Runtime settings read from the environment (and `.env`)."""

    remove_vat: bool = field(default_factory=lambda: _env_flag("MARKETING_PULSE_REMOVE_VAT"))
    parse_error_threshold_raw: str = field(
        default_factory=lambda: os.getenv("MARKETING_PULSE_PARSE_ERROR_THRESHOLD", "0.01")
    )
    log_level: str = field(default_factory=lambda: os.getenv("MARKETING_PULSE_LOG_LEVEL", "INFO"))
    output_dir: str = field(default_factory=lambda: os.getenv("MARKETING_PULSE_OUTPUT_DIR", "output"))
    trend_length: int = 3
    pixel_lag_days: int = 3

    @property
    def parse_error_threshold(self) -> float:
        return _parse_error_threshold(self.parse_error_threshold_raw)


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    resolved = (level or settings.log_level or "INFO").upper()
    numeric = getattr(logging, resolved, None)
    if not isinstance(numeric, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
