"""Configuration helpers for the cruise price watch."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
import logging
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional

LOGGER = logging.getLogger(__name__)

_DATE_FORMATS = ["%Y-%m-%d", "%B %d, %Y", "%m/%d/%Y", "%d.%m.%Y"]

NCL_BASE_URL = "https://www.ncl.com/cruises/"
DEFAULT_ITINERARY_CODES = ["BLISS7SEAJNUSGYKTNVICSEA"]
DEFAULT_REFERENCE_DATE = date(2025, 10, 4)
# Booked fares including taxes and fees.
DEFAULT_REFERENCE_PRICES = {"Inside": 1220.0, "Balcony": 1662.0}
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/126.0.0.0 Safari/537.36"
)

ENV_PREFIX = "CRUISE_WATCH_"


@dataclass
class WatchConfig:
    """Canonical configuration used by the scraping workflow."""

    itinerary_codes: List[str] = field(default_factory=lambda: list(DEFAULT_ITINERARY_CODES))
    base_url: str = NCL_BASE_URL
    reference_date: Optional[date] = DEFAULT_REFERENCE_DATE
    reference_prices: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_REFERENCE_PRICES))
    request_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    def itinerary_url(self, code: str) -> str:
        return self.base_url + code

    @property
    def cabin_whitelist(self) -> List[str]:
        """Cabin types rendered as table columns."""

        return list(self.reference_prices)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable version of the configuration."""

        return {
            "itinerary_codes": list(self.itinerary_codes),
            "base_url": self.base_url,
            "reference_date": self.reference_date.isoformat() if self.reference_date else None,
            "reference_prices": dict(self.reference_prices),
            "request_timeout": self.request_timeout,
        }


def _parse_date(value: str | None) -> Optional[date]:
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    return None


def _parse_float(value: str | None) -> Optional[float]:
    if not value:
        return None
    cleaned = value.replace("$", "").replace(",", "").strip()
    try:
        return float(cleaned)
    except ValueError:
        return None


def _ensure_list(value: str | Iterable[str] | None) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        if not value:
            return []
        return [item.strip() for item in value.split(",") if item.strip()]
    return [item.strip() for item in value if item and item.strip()]


def _parse_reference_prices(value: str | Mapping[str, Any] | None) -> Dict[str, float]:
    """Parse ``"Inside=1220, Balcony=1662"`` style price tables.

    Entries without a usable price are dropped.
    """

    if value is None:
        return {}
    if isinstance(value, Mapping):
        pairs = [(str(key), str(price)) for key, price in value.items()]
    else:
        pairs = []
        for item in _ensure_list(value):
            label, sep, price = item.partition("=")
            if sep:
                pairs.append((label, price))

    prices: Dict[str, float] = {}
    for label, raw_price in pairs:
        price = _parse_float(raw_price)
        if label.strip() and price is not None:
            prices[label.strip()] = price
    return prices


def create_config_from_form(form_data: Mapping[str, Any]) -> WatchConfig:
    """Create a configuration object from an HTML form or query payload."""

    config = WatchConfig()

    codes = _ensure_list(form_data.get("itinerary_codes") or form_data.get("itineraries"))
    if codes:
        config.itinerary_codes = codes

    base_url = str(form_data.get("base_url") or "").strip()
    if base_url:
        config.base_url = base_url if base_url.endswith("/") else base_url + "/"

    if form_data.get("reference_date"):
        raw_date = str(form_data["reference_date"])
        parsed = _parse_date(raw_date)
        if parsed is None:
            LOGGER.warning("Ignoring unparseable reference_date %r; keeping %s", raw_date, config.reference_date)
        else:
            config.reference_date = parsed

    prices = _parse_reference_prices(form_data.get("reference_prices"))
    if prices:
        config.reference_prices = prices

    timeout = _parse_float(str(form_data.get("request_timeout") or ""))
    if timeout is not None and timeout > 0:
        config.request_timeout = timeout

    user_agent = str(form_data.get("user_agent") or "").strip()
    if user_agent:
        config.user_agent = user_agent
    return config


def create_config_from_env(environ: Mapping[str, str] | None = None) -> WatchConfig:
    """Create a configuration from ``CRUISE_WATCH_*`` environment variables."""

    source = os.environ if environ is None else environ
    form_data = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in source.items()
        if key.startswith(ENV_PREFIX)
    }
    return create_config_from_form(form_data)


def create_config(data: Mapping[str, Any] | None = None) -> WatchConfig:
    """Unified helper: explicit mapping wins, otherwise read the environment."""

    if data is None:
        return create_config_from_env()
    if isinstance(data, Mapping):
        return create_config_from_form(data)
    raise TypeError("Unsupported configuration payload type: expected a mapping or None")
