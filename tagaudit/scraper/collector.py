"""Resource collection: turns page HTML into a list of :class:`Resource`.

Only ``<script src>``, ``<link rel="stylesheet" href>`` and ``<img src>``
references are collected.  Nothing here touches the network.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Iterator, List, Tuple
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

from tagaudit.scraper.models import FIRST_PARTY, THIRD_PARTY, Resource

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Kind detection tables
# ---------------------------------------------------------------------------
_EXTENSION_KINDS = {
    "js": "script",
    "mjs": "script",
    "css": "style",
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "svg": "image",
    "webp": "image",
    "woff": "font",
    "woff2": "font",
    "ttf": "font",
    "eot": "font",
    "otf": "font",
    "json": "xhr",
    "xml": "xhr",
}

_HOST_KINDS = (
    ("google-analytics.com", "analytics"),
    ("facebook.com", "tracker"),
    ("fbcdn.net", "tracker"),
    ("doubleclick.net", "ads"),
    ("googlesyndication", "ads"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def base_domain(hostname: str) -> str:
    """Return the last two dot-separated labels of *hostname*.

    ``shop.example.co.uk`` yields ``co.uk``: multi-part public suffixes are
    not recognised.
    """
    parts = hostname.lower().split(".")
    if len(parts) > 2:
        return ".".join(parts[-2:])
    return hostname.lower()


def is_first_party(resource_host: str, page_host: str) -> bool:
    return base_domain(resource_host) == base_domain(page_host)


def resolve_resource_url(ref: str, base_url: str) -> str:
    """Turn a tag attribute value into an absolute URL.

    Raises:
        ValueError: If the result cannot be parsed or has no hostname
            (``data:`` and ``javascript:`` references end up here).
    """
    ref = ref.strip()
    if ref.startswith("//"):
        full_url = "https:" + ref
    elif not ref.startswith("http"):
        full_url = urljoin(base_url, ref)
    else:
        full_url = ref

    if not urlsplit(full_url).hostname:
        raise ValueError(f"no hostname in {full_url!r}")
    return full_url


def resource_kind(url: str, tag_kind: str) -> str:
    """Refine the kind implied by the tag using the URL's extension and host."""
    parts = urlsplit(url)
    extension = posixpath.splitext(parts.path)[1].lstrip(".").lower()
    if extension in _EXTENSION_KINDS:
        return _EXTENSION_KINDS[extension]

    host = (parts.hostname or "").lower()
    for marker, kind in _HOST_KINDS:
        if marker in host:
            return kind
    return tag_kind


def _is_stylesheet_link(tag: Tag) -> bool:
    """Match ``<link href>`` whose ``rel`` contains ``stylesheet`` in any case."""
    if tag.name != "link" or not tag.has_attr("href"):
        return False
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return any(value.lower() == "stylesheet" for value in rel)


def _references(soup: BeautifulSoup) -> Iterator[Tuple[str, str]]:
    """Yield ``(tag_kind, attribute value)`` in discovery order."""
    for tag in soup.find_all("script", src=True):
        yield "script", tag["src"]
    for tag in soup.find_all(_is_stylesheet_link):
        yield "style", tag["href"]
    for tag in soup.find_all("img", src=True):
        yield "image", tag["src"]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def collect_resources(html: str, base_url: str) -> List[Resource]:
    """Return every script, stylesheet and image referenced by *html*.

    Relative references are resolved against *base_url*, whose hostname also
    decides first- versus third-party.  References that cannot be resolved
    are logged and skipped.
    """
    page_host = urlsplit(base_url).hostname or ""
    soup = BeautifulSoup(html, "html.parser")

    resources: List[Resource] = []
    for tag_kind, ref in _references(soup):
        if not ref or not ref.strip():
            continue
        try:
            full_url = resolve_resource_url(ref, base_url)
            host = urlsplit(full_url).hostname or ""
        except ValueError as exc:
            logger.warning("Skipping %s reference %r: %s", tag_kind, ref, exc)
            continue

        resources.append(
            Resource(
                url=full_url,
                kind=resource_kind(full_url, tag_kind),
                party=FIRST_PARTY if is_first_party(host, page_host) else THIRD_PARTY,
                domain=host,
            )
        )

    logger.debug("Collected %d resources from %s", len(resources), base_url)
    return resources
