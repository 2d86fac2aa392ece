"""Lean classification and article-path filtering for candidate URLs."""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from perspective_lens.data import Article, Lean
from perspective_lens.outlets import LEAN_BY_DOMAIN, OUTLET_NAMES
from perspective_lens.text import clean_text
from perspective_lens.url import extract_host

logger = logging.getLogger(__name__)

_LISTING_PREFIXES = ("/author", "/people")
_LISTING_SEGMENTS = ("/tag/", "/tags/", "/category/", "/topic/", "/topics/")
_MIN_ARTICLE_PATH = 10


@dataclass(frozen=True)
class Classification:
    """Outcome of matching a URL against the outlet table."""

    lean: Lean
    outlet_name: str
    domain: str


def _match_domain(host: str) -> str | None:
    if host in LEAN_BY_DOMAIN:
        return host
    # Walk up the labels so subdomains inherit the parent's lean
    labels = host.split(".")
    for i in range(1, len(labels) - 1):
        parent = ".".join(labels[i:])
        if parent in LEAN_BY_DOMAIN:
            return parent
    return None


def outlet_name(host: str) -> str:
    """Display name for a host, falling back to its title-cased first label."""
    host = host.lower().removeprefix("www.")
    domain = _match_domain(host)
    if domain is not None:
        return OUTLET_NAMES[domain]
    first = host.split(".")[0]
    return first[:1].upper() + first[1:] if first else "Unknown"


def classify(url: str) -> Classification | None:
    """Map a URL to its outlet's lean.

    Returns None for unknown outlets and malformed URLs. Callers must discard
    unclassified URLs rather than default them to any lean.
    """
    host = extract_host(url)
    if not host:
        return None
    domain = _match_domain(host)
    if domain is None:
        return None
    return Classification(
        lean=LEAN_BY_DOMAIN[domain],
        outlet_name=OUTLET_NAMES[domain],
        domain=domain,
    )


def is_article_path(url: str) -> bool:
    """Heuristically decide whether a URL points at an article.

    Rejects homepages, author/people listings, tag/category/topic pages and
    very short paths. This is lossy by nature: some real articles with short
    slugs are rejected and some index pages slip through.
    """
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    if path in ("", "/"):
        return False
    if path.startswith(_LISTING_PREFIXES):
        return False
    if any(segment in path for segment in _LISTING_SEGMENTS):
        return False
    return len(path) > _MIN_ARTICLE_PATH


def accept(
    url: str,
    *,
    title: str | None,
    snippet: str | None,
    lean: Lean,
    provider: str,
    published_at: str | None = None,
) -> Article | None:
    """Build an Article if the URL belongs to ``lean`` and looks like an article.

    The lean always comes from the outlet table. A provider result whose
    outlet is in a different bucket is rejected.
    """
    if not url:
        return None
    match = classify(url)
    if match is None or match.lean != lean or not is_article_path(url):
        return None
    clean_title = clean_text(title or "") or f"Article from {match.outlet_name}"
    return Article(
        url=url,
        title=clean_title,
        outlet=match.outlet_name,
        snippet=clean_text(snippet or "") or clean_title,
        lean=match.lean,
        published_at=published_at,
        provider=provider,
    )
