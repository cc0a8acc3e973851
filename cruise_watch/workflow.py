"""High level orchestration for running the cruise price watch."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import WatchConfig
from .models import AggregationResult
from .processor import PriceTable, build_price_table, summarise_itineraries
from .reporter import build_report
from .scraper import CancelToken, scrape_itineraries


@dataclass
class WatchResult:
    """Result returned by :func:`run_watch_workflow`."""

    config: WatchConfig
    aggregation: AggregationResult
    table: PriceTable
    summary: Dict[str, object]
    report: str

    @property
    def warnings(self) -> List[str]:
        return self.aggregation.warnings

    def to_dict(self) -> Dict[str, object]:
        return {
            "config": self.config.to_dict(),
            "summary": self.summary,
            "itineraries": [itinerary.to_dict() for itinerary in self.aggregation.itineraries],
            "cabin_types": list(self.aggregation.cabin_types),
            "table": self.table.to_dict(),
            "report": self.report,
            "warnings": list(self.warnings),
            "failed": self.aggregation.failed,
        }


def build_result(config: WatchConfig, aggregation: AggregationResult) -> WatchResult:
    """Derive the table, summary and report from a finished load."""

    return WatchResult(
        config=config,
        aggregation=aggregation,
        table=build_price_table(aggregation, config),
        summary=summarise_itineraries(aggregation, config),
        report=build_report(config, aggregation),
    )


def run_watch_workflow(config: WatchConfig, cancel_event: Optional[CancelToken] = None) -> WatchResult:
    """Execute the full scraping and reporting pipeline."""

    aggregation = scrape_itineraries(config, cancel_event)
    return build_result(config, aggregation)
