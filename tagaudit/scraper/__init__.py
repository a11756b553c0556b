"""Scraper package: page fetch, resource collection and size estimation."""

from tagaudit.scraper.aggregator import aggregate
from tagaudit.scraper.collector import collect_resources
from tagaudit.scraper.estimator import estimate_sizes
from tagaudit.scraper.fetcher import FetchError, fetch_page, normalize_url
from tagaudit.scraper.models import AnalysisReport, AnalysisStats, FetchResult, Resource

__all__ = [
    "fetch_page",
    "normalize_url",
    "collect_resources",
    "estimate_sizes",
    "aggregate",
    "FetchError",
    "FetchResult",
    "Resource",
    "AnalysisStats",
    "AnalysisReport",
]
