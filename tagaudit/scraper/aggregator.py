"""Reduce sized resources into :class:`AnalysisStats`."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from tagaudit.scraper.models import AnalysisStats, Resource


def aggregate(resources: Sequence[Resource], elapsed_seconds: float) -> AnalysisStats:
    """Summarise *resources*.  Unsized resources count toward every tally as 0 bytes."""
    by_type = Counter(r.kind for r in resources)
    first_party = sum(1 for r in resources if r.is_first_party)

    return AnalysisStats(
        total_size=sum(r.size or 0 for r in resources),
        resources_by_type=dict(by_type),
        first_party=first_party,
        third_party=len(resources) - first_party,
        processing_time_ms=elapsed_seconds * 1000,
        total_requests=len(resources),
        js_size=sum(r.size or 0 for r in resources if r.kind == "script"),
    )
