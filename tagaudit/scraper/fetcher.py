"""Page fetcher that walks an ordered list of fetch strategies.

Each strategy is a :class:`FetchAttemptConfig`: a URL transform plus the
client settings used for a single GET.  :func:`fetch_page` tries them in
order, stops at the first success and raises :class:`FetchError` once every
strategy has failed.
"""

from __future__ import annotations

import logging
from typing import List, Sequence
from urllib.parse import urlsplit, urlunsplit

import httpx

from tagaudit.config import settings
from tagaudit.scraper.models import FetchAttempt, FetchAttemptConfig, FetchResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Request headers
# ---------------------------------------------------------------------------
_BROWSER_HEADERS = {
    "User-Agent": settings.user_agent,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,fr;q=0.8",
    "Cache-Control": "no-cache",
    "Upgrade-Insecure-Requests": "1",
}

_MINIMAL_HEADERS = {"User-Agent": settings.user_agent}


# ---------------------------------------------------------------------------
# URL transforms
# ---------------------------------------------------------------------------

def normalize_url(url: str) -> str:
    """Strip *url* and default it to ``https://`` when it has no http scheme."""
    url = url.strip()
    if not url.startswith("http"):
        url = "https://" + url
    return url


def _unchanged(url: str) -> str:
    return url


def _with_www(url: str) -> str:
    """Insert ``www.`` in front of the hostname unless it is already there."""
    parts = urlsplit(url)
    if parts.netloc.startswith("www.") or not parts.netloc:
        return url
    return urlunsplit(parts._replace(netloc="www." + parts.netloc))


def _downgrade_to_http(url: str) -> str:
    if url.startswith("https://"):
        return "http://" + url[len("https://"):]
    return url


def _is_ok_or_redirect(status: int) -> bool:
    return 200 <= status < 400


# ---------------------------------------------------------------------------
# Strategy table
# ---------------------------------------------------------------------------
FETCH_STRATEGIES: tuple[FetchAttemptConfig, ...] = (
    FetchAttemptConfig(
        name="high_redirects",
        timeout=10.0,
        max_redirects=20,
        accept_status=_is_ok_or_redirect,
        headers=_BROWSER_HEADERS,
        transform=_unchanged,
    ),
    FetchAttemptConfig(
        name="with_www",
        timeout=10.0,
        max_redirects=10,
        accept_status=_is_ok_or_redirect,
        headers=_BROWSER_HEADERS,
        transform=_with_www,
    ),
    FetchAttemptConfig(
        name="http_fallback",
        timeout=15.0,
        max_redirects=15,
        accept_status=_is_ok_or_redirect,
        headers=_MINIMAL_HEADERS,
        transform=_downgrade_to_http,
    ),
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
ERROR_MESSAGES = {
    "too_many_redirects": (
        "The site redirects too many times. It may be misconfigured or "
        "protected against automated access."
    ),
    "timeout": "The site took too long to respond. Please try again later.",
    "connection_error": (
        "Could not connect to the site. Check the URL and that the site is online."
    ),
    "http_error": "The site answered with an error status and could not be analysed.",
    "unknown": "An unexpected error occurred while fetching the site.",
}


class FetchError(Exception):
    """Raised when every fetch strategy failed for a URL.

    ``attempts`` holds one :class:`FetchAttempt` per strategy, in the order
    they were tried.  Classification uses the last one.
    """

    def __init__(self, url: str, attempts: List[FetchAttempt]) -> None:
        self.url = url
        self.attempts = attempts
        last = attempts[-1] if attempts else None
        detail = f"{last.strategy}: {last.error}" if last else "no strategies configured"
        super().__init__(f"All fetch strategies failed for {url} ({detail})")

    @property
    def last_error(self) -> Exception | None:
        return self.attempts[-1].error if self.attempts else None

    @property
    def category(self) -> str:
        return classify_fetch_error(self.last_error)

    @property
    def user_message(self) -> str:
        return ERROR_MESSAGES[self.category]


def classify_fetch_error(exc: BaseException | None) -> str:
    """Map *exc* onto one of the keys of :data:`ERROR_MESSAGES`."""
    if exc is None:
        return "unknown"
    if isinstance(exc, httpx.TooManyRedirects):
        return "too_many_redirects"
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    if isinstance(exc, (httpx.ConnectError, httpx.NetworkError)):
        return "connection_error"
    if isinstance(exc, httpx.HTTPStatusError):
        return "http_error"

    message = str(exc).lower()
    if "redirect" in message:
        return "too_many_redirects"
    if "timeout" in message or "timed out" in message:
        return "timeout"
    if "connect" in message or "getaddrinfo" in message or "name or service" in message:
        return "connection_error"
    return "unknown"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def _attempt(strategy: FetchAttemptConfig, url: str) -> FetchResult:
    async with httpx.AsyncClient(
        headers=dict(strategy.headers),
        timeout=strategy.timeout,
        follow_redirects=True,
        max_redirects=strategy.max_redirects,
    ) as client:
        response = await client.get(url)
        if not strategy.accept_status(response.status_code):
            raise httpx.HTTPStatusError(
                f"Status {response.status_code} rejected by strategy {strategy.name!r}",
                request=response.request,
                response=response,
            )
        return FetchResult(
            html=response.text,
            final_url=str(response.url),
            strategy=strategy.name,
            status_code=response.status_code,
        )


async def fetch_page(
    url: str,
    strategies: Sequence[FetchAttemptConfig] = FETCH_STRATEGIES,
) -> FetchResult:
    """Fetch *url* with the first strategy in *strategies* that succeeds.

    Strategies run strictly one after another and none is retried.

    Raises:
        FetchError: If every strategy failed.  The exception keeps all
            attempts; its ``category`` is derived from the last one.
    """
    attempts: List[FetchAttempt] = []
    for strategy in strategies:
        target = strategy.transform(url)
        logger.debug("Fetching %s with strategy %s", target, strategy.name)
        try:
            result = await _attempt(strategy, target)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
            logger.warning(
                "Strategy %s failed for %s: %s", strategy.name, target, exc
            )
            attempts.append(FetchAttempt(strategy=strategy.name, url=target, error=exc))
            continue
        logger.info(
            "Fetched %s with strategy %s (final URL %s)",
            target,
            strategy.name,
            result.final_url,
        )
        return result

    raise FetchError(url, attempts)
