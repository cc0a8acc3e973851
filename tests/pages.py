"""HTML fixtures shaped like NCL itinerary pages."""
from __future__ import annotations

import html
import json
from typing import Any, Dict, List, Optional

BASE_URL = "https://www.ncl.com/cruises/"
BLISS = "BLISS7SEAJNUSGYKTNVICSEA"
BLISS_TITLE = "7-Day Alaska Round-trip from Seattle on Norwegian Bliss"

SEPTEMBER_27_2025 = 1758931200000
OCTOBER_4_2025 = 1759536000000


def sailing(code: str, start: int, **prices: float) -> Dict[str, Any]:
    return {
        "itineraryCode": code,
        "sailStartDate": start,
        "staterooms": [{"title": title, "price": price} for title, price in prices.items()],
    }


def itinerary_page(sailings: List[Dict[str, Any]], title: Optional[str] = BLISS_TITLE) -> str:
    payload = html.escape(json.dumps(sailings), quote=True)
    head = f"<title>{html.escape(title, quote=False)}</title>" if title is not None else ""
    return (
        "<!DOCTYPE html><html><head>"
        f"{head}"
        "</head><body>"
        '<div class="c-pricing" data-itinerary-code="x" '
        f'data-pricing-sailings="{payload}" '
        'data-pricing-offer-groups="[{&quot;id&quot;:1}]"></div>'
        "</body></html>"
    )


class FakeSite:
    """Async fetch stand-in serving canned pages and recording requests."""

    def __init__(self, pages: Dict[str, Optional[str]]) -> None:
        self.pages = pages
        self.requested: List[str] = []

    async def __call__(self, url: str) -> Optional[str]:
        self.requested.append(url)
        return self.pages.get(url)
