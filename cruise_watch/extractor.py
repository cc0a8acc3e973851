"""Recovery of the sailing list embedded in an itinerary page.

The pricing widget on an itinerary page carries its data as an
HTML-escaped JSON array in the ``data-pricing-sailings`` attribute. The
attribute is located by plain marker search on the raw markup, the value is
entity-decoded and the outermost ``[...]`` span is parsed as JSON.
"""
from __future__ import annotations

import html
import json
import logging
from typing import Any, Dict, List, Optional

LOGGER = logging.getLogger(__name__)

SAILINGS_START_MARKER = "data-pricing-sailings="
SAILINGS_END_MARKER = "data-pricing-offer-groups="


class ExtractionError(ValueError):
    """Raised when the embedded sailing list cannot be recovered."""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


def text_between(text: str, start: str, end: str) -> str:
    """Return the text between the first ``start`` and the next ``end``.

    One surrounding pair of attribute quotes is removed.
    """

    start_index = text.find(start)
    if start_index == -1:
        raise ExtractionError("markers", f"start marker {start!r} not found")
    end_index = text.find(end, start_index + len(start))
    if end_index == -1:
        raise ExtractionError("markers", f"end marker {end!r} not found")

    result = text[start_index + len(start):end_index].strip()
    if result.startswith('"'):
        result = result[1:]
    if result.endswith('"'):
        result = result[:-1]
    return result


def isolate_json_array(text: str) -> str:
    """Return the span from the first ``[`` through the last ``]``."""

    first = text.find("[")
    last = text.rfind("]")
    if first == -1 or last == -1:
        raise ExtractionError("brackets", "no JSON array brackets in decoded data")
    if last < first:
        raise ExtractionError("brackets", "closing bracket precedes opening bracket")
    return text[first:last + 1]


def extract_sailings(source: str) -> List[Dict[str, Any]]:
    """Parse the embedded sailing objects out of raw page markup.

    Raises :class:`ExtractionError` on missing markers, an invalid bracket
    span or a payload that is not a JSON array.
    """

    attribute = text_between(source, SAILINGS_START_MARKER, SAILINGS_END_MARKER)
    decoded = html.unescape(attribute)
    candidate = isolate_json_array(decoded)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ExtractionError("json", f"embedded sailing data is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ExtractionError("json", "embedded sailing data is not a JSON array")
    return data


def try_extract_sailings(source: str, url: str | None = None) -> Optional[List[Dict[str, Any]]]:
    """Like :func:`extract_sailings` but logs failures and returns ``None``."""

    try:
        return extract_sailings(source)
    except ExtractionError as exc:
        LOGGER.warning("Failed to extract sailings from %s (%s): %s", url or "page", exc.kind, exc)
        return None
