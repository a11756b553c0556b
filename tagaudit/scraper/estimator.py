"""Byte-size estimation for collected resources via HEAD probes."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import List, Sequence

import httpx

from tagaudit.config import settings
from tagaudit.scraper.models import Resource

logger = logging.getLogger(__name__)

# Sizes used when the server does not send a usable Content-Length.
_CONTENT_TYPE_SIZES = (
    ("javascript", 15000),
    ("css", 8000),
    ("image", 50000),
    ("html", 30000),
)
DEFAULT_SIZE = 10000
ERROR_SIZE = 5000


def _size_from_headers(headers: httpx.Headers) -> int:
    content_length = headers.get("content-length")
    if content_length is not None:
        try:
            size = int(content_length)
        except ValueError:
            size = -1
        if size >= 0:
            return size

    content_type = headers.get("content-type", "").lower()
    for marker, size in _CONTENT_TYPE_SIZES:
        if marker in content_type:
            return size
    return DEFAULT_SIZE


async def estimate_resource_size(client: httpx.AsyncClient, url: str) -> int:
    """Return a best-effort byte size for *url*.

    Never raises for HTTP failures or for hosts that cannot be IDNA-encoded
    (``idna.IDNAError`` is a ``UnicodeError``).
    """
    try:
        response = await client.head(url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
        logger.warning("Size probe failed for %s: %s", url, exc)
        return ERROR_SIZE
    return _size_from_headers(response.headers)


async def estimate_sizes(
    resources: Sequence[Resource],
    limit: int | None = None,
) -> List[Resource]:
    """Probe the first *limit* resources concurrently and return the full list.

    Probed resources come back as sized copies; the rest keep ``size=None``
    and are never requested.
    """
    if limit is None:
        limit = settings.max_sized_resources
    head, tail = list(resources[:limit]), list(resources[limit:])
    if not head:
        return tail

    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.probe_timeout,
        follow_redirects=True,
    ) as client:
        sizes = await asyncio.gather(
            *(estimate_resource_size(client, r.url) for r in head)
        )

    if tail:
        logger.info("Sized %d resources, skipped %d over the limit", len(head), len(tail))
    sized = [dataclasses.replace(r, size=size) for r, size in zip(head, sizes)]
    return sized + tail
