"""Page title handling for itinerary pages."""
from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup

from .models import TitleMetadata

CRUISE_DELIMITER = " from "
SHIP_DELIMITER = " on "
SHIP_PREFIX = "Norwegian "


class TitleShapeError(ValueError):
    """Raised when a title is not of the form ``<cruise> from <port> on <ship>``."""


def extract_title(source: str) -> Optional[str]:
    """Return the decoded ``<title>`` text of a page, if there is one."""

    soup = BeautifulSoup(source, "html.parser")
    if soup.title is None:
        return None
    return soup.title.get_text().strip() or None


def parse_title(title: str) -> TitleMetadata:
    """Split a title such as ``7-Day Alaska from Seattle on Norwegian Bliss``.

    Delimiters inside the names themselves cannot be told apart from the
    separators; the first occurrence always wins.
    """

    cruise, sep, remainder = title.partition(CRUISE_DELIMITER)
    if not sep:
        raise TitleShapeError(f"title has no {CRUISE_DELIMITER.strip()!r} part: {title!r}")
    origin, sep, ship = remainder.partition(SHIP_DELIMITER)
    if not sep:
        raise TitleShapeError(f"title has no {SHIP_DELIMITER.strip()!r} part: {title!r}")
    if ship.startswith(SHIP_PREFIX):
        ship = ship[len(SHIP_PREFIX):]
    return TitleMetadata(cruise=cruise, origin=origin, ship=ship)
