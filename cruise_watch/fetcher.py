"""HTTP access to itinerary pages."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import aiohttp

from .config import WatchConfig

LOGGER = logging.getLogger(__name__)

Fetch = Callable[[str], Awaitable[Optional[str]]]


def open_session(config: WatchConfig) -> aiohttp.ClientSession:
    """Create the client session used for one load."""

    timeout = aiohttp.ClientTimeout(total=config.request_timeout)
    headers = {
        "User-Agent": config.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }
    return aiohttp.ClientSession(timeout=timeout, headers=headers)


async def fetch_html(session: aiohttp.ClientSession, url: str) -> Optional[str]:
    """Return the body of ``url`` as text, or ``None`` if the request failed."""

    LOGGER.debug("Fetching %s", url)
    try:
        async with session.get(url) as response:
            if response.status >= 400:
                LOGGER.warning("Error fetching HTML for %s: HTTP %s", url, response.status)
                return None
            return await response.text()
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        LOGGER.warning("Error fetching HTML for %s: %s", url, exc)
        return None


def session_fetcher(session: aiohttp.ClientSession) -> Fetch:
    """Bind :func:`fetch_html` to ``session``."""

    async def fetch(url: str) -> Optional[str]:
        return await fetch_html(session, url)

    return fetch
