"""Analysis endpoint.

Routes
------
POST /api/analyze    Body: {"url": "...", "sector": "...", "hitCount": "...",
                            "selectedTags": [...]}

Only ``url`` is used here; the other fields are accepted so the front end can
send its whole form, and feed the scoring it does client-side.

A page that cannot be fetched is *not* an HTTP error: the endpoint answers
200 with ``{"success": false, "error": <category>, ...}`` so the front end
can tell "could not analyse this site" apart from a broken request.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tagaudit.analyzer import analyze_url, failure_payload, report_payload
from tagaudit.scraper.fetcher import FetchError, normalize_url

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    url: Optional[Any] = None
    sector: Optional[Any] = None
    hitCount: Optional[Any] = None
    selectedTags: Optional[List[Any]] = None


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("/analyze")
async def analyze(body: Optional[AnalyzeRequest] = None) -> dict[str, Any]:
    """Fetch the page at ``url`` and return its resources and stats."""
    if body is None or not isinstance(body.url, str) or not body.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    try:
        report = await analyze_url(body.url)
    except FetchError as exc:
        logger.warning("Analysis of %s failed: %s", body.url, exc)
        return failure_payload(normalize_url(body.url), exc)
    except Exception as exc:
        logger.exception("Unexpected error while analysing %s", body.url)
        raise HTTPException(
            status_code=500, detail=f"Site analysis failed: {exc}"
        ) from exc

    return report_payload(report)
