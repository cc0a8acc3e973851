"""Shared data structures used across scraping and processing."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple


def sail_date_from_epoch(epoch_ms: int) -> date:
    """Return the UTC calendar day of an epoch-milliseconds timestamp."""

    return datetime.fromtimestamp(int(epoch_ms) / 1000, tz=timezone.utc).date()


def _coerce_price(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Stateroom:
    """Price of one cabin category for a sailing."""

    title: str
    price: Optional[float]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Stateroom":
        return cls(title=str(raw.get("title") or ""), price=_coerce_price(raw.get("price")))

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "price": self.price}


@dataclass(frozen=True)
class SailingRecord:
    """A sailing as embedded in an itinerary page."""

    itinerary_code: str
    sail_start_date: int
    sailed_on: date
    staterooms: Tuple[Stateroom, ...] = ()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "SailingRecord":
        """Build a record from one decoded JSON object.

        Raises :class:`ValueError` when the code or a usable start date is
        missing, or when the staterooms are not a list.
        """

        if not isinstance(raw, Mapping):
            raise ValueError(f"sailing entry is not an object: {raw!r}")
        code = raw.get("itineraryCode")
        if not code:
            raise ValueError("sailing entry has no itineraryCode")
        try:
            start = int(raw["sailStartDate"])
            sailed_on = sail_date_from_epoch(start)
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
            raise ValueError(f"sailing {code} has no usable sailStartDate") from exc
        raw_staterooms = raw.get("staterooms") or []
        if not isinstance(raw_staterooms, list):
            raise ValueError(f"sailing {code} has malformed staterooms: {raw_staterooms!r}")
        staterooms = tuple(
            Stateroom.from_raw(item) for item in raw_staterooms if isinstance(item, Mapping)
        )
        return cls(
            itinerary_code=str(code), sail_start_date=start, sailed_on=sailed_on, staterooms=staterooms
        )


@dataclass(frozen=True)
class TitleMetadata:
    """Cruise name, departure port and ship decoded from a page title."""

    cruise: str
    origin: str
    ship: str


@dataclass(frozen=True)
class NormalizedItinerary:
    """One sailing joined with the metadata of its itinerary page."""

    cruise: str
    origin: str
    ship: str
    itinerary_code: str
    sail_date: str
    sailed_on: date
    staterooms: Tuple[Stateroom, ...] = ()

    def price_for(self, cabin_type: str) -> Optional[float]:
        for stateroom in self.staterooms:
            if stateroom.title == cabin_type:
                return stateroom.price
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cruise": self.cruise,
            "from": self.origin,
            "ship": self.ship,
            "itineraryCode": self.itinerary_code,
            "sailDate": self.sail_date,
            "staterooms": [stateroom.to_dict() for stateroom in self.staterooms],
        }


@dataclass
class AggregationResult:
    """Everything one load produced, delivered in one piece."""

    itineraries: List[NormalizedItinerary] = field(default_factory=list)
    cabin_types: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """True when nothing was loaded and at least one fetch went wrong."""

        return not self.itineraries and bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itineraries": [itinerary.to_dict() for itinerary in self.itineraries],
            "cabin_types": list(self.cabin_types),
            "warnings": list(self.warnings),
        }
