"""Grouping and price comparison for scraped sailings."""
from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .config import WatchConfig
from .models import AggregationResult, NormalizedItinerary

MISSING_PRICE = "–"

STYLE_MUTED = "muted"
STYLE_PLAIN = "plain"
STYLE_LOWER = "lower"
STYLE_HIGHER = "higher"

TABLE_HEADERS = ["Cruise", "From", "Sail Date"]


@dataclass
class ItineraryGroup:
    """Sailings sharing one cruise and departure port."""

    cruise: str
    origin: str
    itinerary_code: str
    members: List[NormalizedItinerary] = field(default_factory=list)

    @property
    def row_span(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class PriceCell:
    """Rendered price of one cabin type for one sailing."""

    text: str
    style: str
    price: Optional[float] = None
    reference: Optional[float] = None
    deviation: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "text": self.text,
            "style": self.style,
            "price": self.price,
            "reference": self.reference,
            "deviation": self.deviation,
        }


@dataclass
class TableRow:
    itinerary: NormalizedItinerary
    booked: bool
    cells: List[PriceCell]
    group: Optional[ItineraryGroup] = None

    @property
    def row_span(self) -> int:
        return self.group.row_span if self.group else 0


@dataclass
class PriceTable:
    headers: List[str]
    cabin_types: List[str]
    rows: List[TableRow]

    def to_dict(self) -> Dict[str, object]:
        return {
            "headers": list(self.headers),
            "rows": [
                {
                    "group": (
                        {"cruise": row.group.cruise, "from": row.group.origin, "row_span": row.row_span}
                        if row.group
                        else None
                    ),
                    "sail_date": row.itinerary.sail_date,
                    "itinerary_code": row.itinerary.itinerary_code,
                    "booked": row.booked,
                    "cells": [cell.to_dict() for cell in row.cells],
                }
                for row in self.rows
            ],
        }


def format_price(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"


def itineraries_to_dataframe(itineraries: Iterable[NormalizedItinerary]) -> pd.DataFrame:
    """Convert sailings into a :class:`~pandas.DataFrame`, one row per sailing."""

    records: List[Dict[str, object]] = []
    for position, itinerary in enumerate(itineraries):
        records.append(
            {
                "position": position,
                "cruise": itinerary.cruise,
                "from": itinerary.origin,
                "ship": itinerary.ship,
                "itinerary_code": itinerary.itinerary_code,
                "sail_date": itinerary.sail_date,
            }
        )
    return pd.DataFrame.from_records(
        records, columns=["position", "cruise", "from", "ship", "itinerary_code", "sail_date"]
    )


def group_itineraries(itineraries: Sequence[NormalizedItinerary]) -> List[ItineraryGroup]:
    """Group sailings by (cruise, from) in order of first appearance."""

    df = itineraries_to_dataframe(itineraries)
    if df.empty:
        return []

    groups: List[ItineraryGroup] = []
    for (cruise, origin), frame in df.groupby(["cruise", "from"], sort=False):
        members = [itineraries[int(position)] for position in frame["position"]]
        groups.append(
            ItineraryGroup(
                cruise=str(cruise),
                origin=str(origin),
                itinerary_code=members[0].itinerary_code,
                members=members,
            )
        )
    return groups


def visible_cabin_types(cabin_types: Iterable[str], config: WatchConfig) -> List[str]:
    """Cabin types that get a column: those with a reference price."""

    whitelist = set(config.cabin_whitelist)
    return [cabin_type for cabin_type in cabin_types if cabin_type in whitelist]


def is_booked(itinerary: NormalizedItinerary, config: WatchConfig) -> bool:
    return config.reference_date is not None and itinerary.sailed_on == config.reference_date


def price_cell(itinerary: NormalizedItinerary, cabin_type: str, config: WatchConfig) -> PriceCell:
    """Compare one sailing's price against the reference price of ``cabin_type``."""

    booked = is_booked(itinerary, config)
    base_style = STYLE_PLAIN if booked else STYLE_MUTED
    price = itinerary.price_for(cabin_type)
    if price is None or math.isnan(price):
        return PriceCell(text=MISSING_PRICE, style=base_style)

    reference = config.reference_prices.get(cabin_type)
    if not booked or reference is None:
        return PriceCell(text=f"$ {format_price(price)}", style=base_style, price=price, reference=reference)

    deviation = price - reference
    if deviation == 0:
        return PriceCell(
            text=f"$ {format_price(price)}",
            style=STYLE_PLAIN,
            price=price,
            reference=reference,
            deviation=0.0,
        )
    return PriceCell(
        text=f"*** ${format_price(price)} *** ({format_price(reference)})",
        style=STYLE_LOWER if deviation < 0 else STYLE_HIGHER,
        price=price,
        reference=reference,
        deviation=deviation,
    )


def build_price_table(result: AggregationResult, config: WatchConfig) -> PriceTable:
    """Lay out the comparison table: grouped rows, one column per visible cabin type."""

    cabin_types = visible_cabin_types(result.cabin_types, config)
    rows: List[TableRow] = []
    for group in group_itineraries(result.itineraries):
        for index, itinerary in enumerate(group.members):
            rows.append(
                TableRow(
                    itinerary=itinerary,
                    booked=is_booked(itinerary, config),
                    cells=[price_cell(itinerary, cabin_type, config) for cabin_type in cabin_types],
                    group=group if index == 0 else None,
                )
            )
    return PriceTable(headers=TABLE_HEADERS + cabin_types, cabin_types=cabin_types, rows=rows)


def summarise_itineraries(result: AggregationResult, config: WatchConfig) -> Dict[str, object]:
    """Return simple statistics across the loaded sailings."""

    cabin_types = visible_cabin_types(result.cabin_types, config)
    prices = pd.DataFrame.from_records(
        [
            {"cabin_type": stateroom.title, "price": stateroom.price}
            for itinerary in result.itineraries
            for stateroom in itinerary.staterooms
            if stateroom.title in cabin_types and stateroom.price is not None
        ],
        columns=["cabin_type", "price"],
    )
    cheapest: Dict[str, float] = {}
    if not prices.empty:
        cheapest = {
            str(cabin_type): float(price)
            for cabin_type, price in prices.groupby("cabin_type")["price"].min().items()
        }

    booked = [itinerary for itinerary in result.itineraries if is_booked(itinerary, config)]
    deviations = [
        cell.deviation
        for itinerary in booked
        for cell in (price_cell(itinerary, cabin_type, config) for cabin_type in cabin_types)
        if cell.deviation is not None
    ]
    return {
        "count": len(result.itineraries),
        "groups": len(group_itineraries(result.itineraries)),
        "cheapest": {cabin_type: cheapest[cabin_type] for cabin_type in cabin_types if cabin_type in cheapest},
        "booked_found": bool(booked),
        "booked_deviation": float(sum(deviations)),
    }
