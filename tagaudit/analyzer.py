"""High-level analysis entry point.

``analyze_url`` wires the scraper stages together: fetch the page, collect
its resources, size the first few of them and reduce everything into
:class:`~tagaudit.scraper.models.AnalysisStats`.  Both the API and the CLI go
through here.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

from tagaudit.scraper.aggregator import aggregate
from tagaudit.scraper.collector import collect_resources
from tagaudit.scraper.estimator import estimate_sizes
from tagaudit.scraper.fetcher import FetchError, fetch_page, normalize_url
from tagaudit.scraper.models import AnalysisReport, Resource

logger = logging.getLogger(__name__)


async def analyze_url(url: str, max_sized: int | None = None) -> AnalysisReport:
    """Analyse the page at *url* and return an :class:`AnalysisReport`.

    The report's ``url`` is the final URL after redirects, not the input.

    Raises:
        FetchError: If the page could not be fetched with any strategy.
    """
    started = time.perf_counter()
    target = normalize_url(url)

    page = await fetch_page(target)
    resources = collect_resources(page.html, page.final_url)
    resources = await estimate_sizes(resources, limit=max_sized)

    elapsed = time.perf_counter() - started
    stats = aggregate(resources, elapsed)
    logger.info(
        "Analysed %s: %d resources, %d bytes in %.2fs",
        page.final_url,
        stats.total_requests,
        stats.total_size,
        elapsed,
    )
    return AnalysisReport(
        url=page.final_url,
        stats=stats,
        analysis_time=datetime.now(timezone.utc),
        strategy=page.strategy,
        resources=resources,
    )


# ---------------------------------------------------------------------------
# JSON payloads (the shape the front end reads)
# ---------------------------------------------------------------------------

def _resource_dict(resource: Resource) -> dict[str, Any]:
    return {
        "url": resource.url,
        "type": resource.kind,
        "domain": resource.party,
        "domainName": resource.domain,
        "size": resource.size,
    }


def report_payload(report: AnalysisReport) -> dict[str, Any]:
    stats = report.stats
    return {
        "url": report.url,
        "resources": [_resource_dict(r) for r in report.resources],
        "stats": {
            "totalSize": stats.total_size,
            "resourcesByType": stats.resources_by_type,
            "resourcesByDomain": {
                "firstParty": stats.first_party,
                "thirdParty": stats.third_party,
            },
            "processingTime": stats.processing_time_ms,
            "loadTime": stats.load_time,
            "totalRequests": stats.total_requests,
            "jsSize": stats.js_size,
        },
        "analysisTime": report.analysis_time.isoformat(),
        "strategy": report.strategy,
    }


def failure_payload(url: str, error: FetchError) -> dict[str, Any]:
    """Soft-failure body for a page that no strategy could fetch."""
    return {
        "success": False,
        "error": error.category,
        "message": error.user_message,
        "url": url,
        "analysisTime": datetime.now(timezone.utc).isoformat(),
    }
