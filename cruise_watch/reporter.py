"""Reporting helpers for the cruise price watch."""
from __future__ import annotations

from datetime import date
from typing import List, Mapping, Sequence

from .config import WatchConfig
from .models import AggregationResult
from .processor import STYLE_HIGHER, STYLE_LOWER, PriceTable, build_price_table, format_price, summarise_itineraries

PRICE_NOTE = "* Prices are per person; rooms are double occupancy"

_STYLE_MARKERS = {STYLE_LOWER: " ↓", STYLE_HIGHER: " ↑"}


def _format_date(value: date | None) -> str:
    if value is None:
        return "none"
    return f"{value:%B} {value.day}, {value.year}"


def generate_price_table(table: PriceTable) -> str:
    """Return a markdown-style table; group cells are left blank on continuation rows."""

    header_row = "| " + " | ".join(table.headers) + " |"
    separator_row = "| " + " | ".join(["---"] * len(table.headers)) + " |"
    rows: List[str] = [header_row, separator_row]

    if not table.rows:
        rows.append("| No cruises found |" + " |" * (len(table.headers) - 1))
        return "\n".join(rows)

    for row in table.rows:
        sail_date = f"**{row.itinerary.sail_date}**" if row.booked else row.itinerary.sail_date
        columns = [
            row.group.cruise if row.group else "",
            row.group.origin if row.group else "",
            sail_date,
        ]
        columns.extend(cell.text + _STYLE_MARKERS.get(cell.style, "") for cell in row.cells)
        rows.append("| " + " | ".join(columns) + " |")
    return "\n".join(rows)


def build_report(
    config: WatchConfig, result: AggregationResult, warnings: Sequence[str] | None = None
) -> str:
    """Create a text report summarising the load."""

    table = build_price_table(result, config)
    summary = summarise_itineraries(result, config)
    warning_messages = [message.strip() for message in (warnings or result.warnings) if message]

    lines: List[str] = [
        "Alaska Cruises",
        "==============",
        PRICE_NOTE,
    ]
    if warning_messages:
        lines.append("")
        lines.extend(f"WARNING: {message}" for message in warning_messages)

    lines.extend(
        [
            "",
            f"Itineraries: {', '.join(config.itinerary_codes) or 'none'}",
            f"Booked sailing: {_format_date(config.reference_date)}",
        ]
    )
    if config.reference_prices:
        references = ", ".join(
            f"{cabin_type} ${format_price(price)}" for cabin_type, price in config.reference_prices.items()
        )
        lines.append(f"Reference prices: {references}")

    lines.append("")
    lines.append("Summary:")
    if summary["count"] == 0:
        if result.failed:
            lines.append("- Loading failed, no cruise data available")
        else:
            lines.append("- No cruises found")
    else:
        lines.append(f"- {summary['count']} sailings in {summary['groups']} cruises")
        cheapest: Mapping[str, float] = summary["cheapest"]  # type: ignore[assignment]
        for cabin_type, price in cheapest.items():
            lines.append(f"- Cheapest {cabin_type}: ${format_price(price)}")
        if summary["booked_found"]:
            deviation = float(summary["booked_deviation"])  # type: ignore[arg-type]
            if deviation == 0:
                lines.append("- Booked sailing matches the reference prices")
            else:
                lines.append(f"- Booked sailing deviation: {deviation:+.0f}")
        elif config.reference_date is not None:
            lines.append("- Booked sailing not found")

    lines.append("")
    lines.append("Sailings:")
    lines.append(generate_price_table(table))

    links = [row.group for row in table.rows if row.group]
    if links:
        lines.append("")
        lines.append("Itinerary links:")
        for group in links:
            lines.append(f"- {group.cruise} from {group.origin}: {config.itinerary_url(group.itinerary_code)}")

    return "\n".join(lines)
