"""Data models for the tag audit pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional

FIRST_PARTY = "1st party"
THIRD_PARTY = "3rd party"


@dataclass(frozen=True)
class Resource:
    """A script, stylesheet or image referenced by the analysed page."""

    url: str
    kind: str
    party: str
    domain: str
    size: Optional[int] = None

    @property
    def is_first_party(self) -> bool:
        return self.party == FIRST_PARTY


@dataclass(frozen=True)
class FetchAttemptConfig:
    """One named way of fetching the target page.

    ``transform`` rewrites the normalised target URL before the request is
    sent; ``accept_status`` decides whether the final response counts as a
    success.
    """

    name: str
    timeout: float
    max_redirects: int
    accept_status: Callable[[int], bool]
    headers: Mapping[str, str]
    transform: Callable[[str], str]


@dataclass
class FetchResult:
    """The page HTML returned by the first strategy that succeeded."""

    html: str
    final_url: str
    strategy: str
    status_code: int


@dataclass
class FetchAttempt:
    """A failed strategy, kept so callers can report every attempt."""

    strategy: str
    url: str
    error: Exception


@dataclass
class AnalysisStats:
    total_size: int
    resources_by_type: Dict[str, int]
    first_party: int
    third_party: int
    processing_time_ms: float
    total_requests: int
    js_size: int

    @property
    def load_time(self) -> float:
        """Elapsed analysis time in seconds."""
        return self.processing_time_ms / 1000


@dataclass
class AnalysisReport:
    """Everything the ``/api/analyze`` endpoint returns on success."""

    url: str
    stats: AnalysisStats
    analysis_time: datetime
    strategy: str
    resources: List[Resource] = field(default_factory=list)
