"""Itinerary scraping for the cruise price watch."""
from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional, Protocol

from .config import WatchConfig
from .extractor import try_extract_sailings
from .fetcher import Fetch, open_session, session_fetcher
from .models import AggregationResult, NormalizedItinerary, SailingRecord, TitleMetadata, sail_date_from_epoch
from .titles import TitleShapeError, extract_title, parse_title

LOGGER = logging.getLogger(__name__)


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class AggregationCancelled(Exception):
    """Raised when a load is cancelled between two fetches."""


def format_day(day: date) -> str:
    return f"{day:%B} {day.day}, {day.year}"


def format_sail_date(epoch_ms: int) -> str:
    """Format a timestamp the way the pricing table shows it, e.g. ``October 4, 2025``."""

    return format_day(sail_date_from_epoch(epoch_ms))


def _check_cancelled(cancel_event: Optional[CancelToken]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise AggregationCancelled("itinerary load cancelled")


async def _fetch_title(fetch: Fetch, url: str, warnings: List[str]) -> Optional[TitleMetadata]:
    source = await fetch(url)
    if source is None:
        warnings.append(f"Could not load itinerary page {url}")
        return None
    title = extract_title(source)
    if title is None:
        LOGGER.warning("No <title> found on %s", url)
        warnings.append(f"No title found on {url}")
        return None
    try:
        return parse_title(title)
    except TitleShapeError as exc:
        LOGGER.warning("Skipping sailing of %s: %s", url, exc)
        warnings.append(f"Unexpected title on {url}: {title}")
        return None


async def collect_itineraries(
    config: WatchConfig, fetch: Fetch, cancel_event: Optional[CancelToken] = None
) -> AggregationResult:
    """Load every configured itinerary, one request at a time.

    Failures are contained per itinerary and per sailing: the affected unit
    is skipped and a warning recorded. Only cancellation escapes.
    """

    itineraries: List[NormalizedItinerary] = []
    cabin_types: Dict[str, None] = {}
    warnings: List[str] = []

    for code in config.itinerary_codes:
        _check_cancelled(cancel_event)
        url = config.itinerary_url(code)
        source = await fetch(url)
        if source is None:
            warnings.append(f"Could not load itinerary {code}")
            continue
        sailings = try_extract_sailings(source, url)
        if sailings is None:
            warnings.append(f"No sailing data found for itinerary {code}")
            continue

        for raw in sailings:
            try:
                sailing = SailingRecord.from_raw(raw)
            except ValueError as exc:
                LOGGER.warning("Skipping malformed sailing in %s: %s", code, exc)
                warnings.append(f"Malformed sailing in itinerary {code}")
                continue

            _check_cancelled(cancel_event)
            metadata = await _fetch_title(fetch, config.itinerary_url(sailing.itinerary_code), warnings)
            if metadata is None:
                continue

            itineraries.append(
                NormalizedItinerary(
                    cruise=metadata.cruise,
                    origin=metadata.origin,
                    ship=metadata.ship,
                    itinerary_code=sailing.itinerary_code,
                    sail_date=format_day(sailing.sailed_on),
                    sailed_on=sailing.sailed_on,
                    staterooms=sailing.staterooms,
                )
            )
            for stateroom in sailing.staterooms:
                cabin_types.setdefault(stateroom.title, None)

    LOGGER.info(
        "Loaded %d sailings from %d itineraries (%d warnings)",
        len(itineraries),
        len(config.itinerary_codes),
        len(warnings),
    )
    return AggregationResult(itineraries=itineraries, cabin_types=list(cabin_types), warnings=warnings)


async def scrape_itineraries_async(
    config: WatchConfig, cancel_event: Optional[CancelToken] = None
) -> AggregationResult:
    """Run :func:`collect_itineraries` against the live site."""

    async with open_session(config) as session:
        return await collect_itineraries(config, session_fetcher(session), cancel_event)


def scrape_itineraries(
    config: WatchConfig, cancel_event: Optional[CancelToken] = None
) -> AggregationResult:
    """Run the async scraper from synchronous code.

    Must not be called from a running event loop; async callers use
    :func:`scrape_itineraries_async`.
    """

    return asyncio.run(scrape_itineraries_async(config, cancel_event))
