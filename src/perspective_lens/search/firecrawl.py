"""Firecrawl search and scrape adapter."""

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

from perspective_lens.classify import accept
from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.search.base import build_query
from perspective_lens.search.http import request_with_retry
from perspective_lens.text import clean_snippet, clean_text

FIRECRAWL_SEARCH_URL = "https://api.firecrawl.dev/v1/search"
FIRECRAWL_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"

FIRECRAWL_SITE_LIMIT = 15
SCRAPE_TIMEOUT_SECONDS = 6.5

_TBS: dict[Recency, str | None] = {
    Recency.WEEK: "qdr:w",
    Recency.MONTH: "qdr:m",
    Recency.YEAR: "qdr:y",
    Recency.ANY: None,
}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrapedPage:
    """Title and readable snippet pulled from a scraped article page."""

    title: str
    snippet: str


class FirecrawlSearcher:
    """Search and scrape news pages with the Firecrawl API.

    Search results carry the page markdown, which is reduced to a readable
    snippet with ``clean_snippet``. ``scrape`` backs the metadata-repair step.

    Args:
        api_key: Firecrawl API key (defaults to FIRECRAWL_API_KEY env var).
        max_results: Default result cap per query.
        timeout: Per-request timeout for searches, in seconds.
    """

    name = "firecrawl"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        max_results: int = 30,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("FIRECRAWL_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Firecrawl API key required. Pass api_key or set FIRECRAWL_API_KEY env var."
            )
        self._max_results = max_results
        self._timeout = timeout

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search Firecrawl for a lean's coverage of a topic."""
        query = build_query(topic, lean, constrained=constrained, site_limit=FIRECRAWL_SITE_LIMIT)
        body: dict[str, Any] = {
            "query": query,
            "limit": max_results or self._max_results,
            "lang": "en",
            "country": "us",
            "scrapeOptions": {"formats": ["markdown"]},
        }
        tbs = _TBS[recency]
        if tbs:
            body["tbs"] = tbs

        tag = lean.upper()
        logger.info(f"[{tag}] Firecrawl search ({recency}): {query[:120]}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await request_with_retry(
                    client, "POST", FIRECRAWL_SEARCH_URL, json=body, headers=self._headers
                )
        except httpx.HTTPError as e:
            logger.warning(f"[{tag}] Firecrawl request failed: {e}")
            return ([], Usage())

        usage = Usage(firecrawl_requests=1)
        if response.status_code >= 400:
            logger.warning(
                f"[{tag}] Firecrawl error {response.status_code}: {response.text[:300]}"
            )
            return ([], usage)

        try:
            results = response.json().get("data") or []
        except (ValueError, AttributeError):
            logger.warning(f"[{tag}] Firecrawl returned an unexpected body")
            return ([], usage)
        if not isinstance(results, list):
            logger.warning(f"[{tag}] Firecrawl data is not a list")
            return ([], usage)

        articles: list[Article] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            metadata = item.get("metadata") or {}
            title = item.get("title") or metadata.get("title")
            description = item.get("description") or metadata.get("description")
            article = accept(
                item.get("url", ""),
                title=title,
                snippet=clean_snippet(item.get("markdown"), description, title),
                lean=lean,
                provider=self.name,
                published_at=metadata.get("publishedTime"),
            )
            if article is not None:
                articles.append(article)

        logger.info(f"[{tag}] Firecrawl kept {len(articles)} of {len(results)} results")
        return (articles, usage)

    async def scrape(self, url: str) -> tuple[ScrapedPage | None, Usage]:
        """Scrape one page for its title and a readable snippet.

        Returns ``(None, usage)`` if the page could not be fetched in time.
        """
        body = {
            "url": url,
            "formats": ["markdown"],
            "onlyMainContent": True,
            "timeout": int(SCRAPE_TIMEOUT_SECONDS * 1000),
        }
        try:
            async with httpx.AsyncClient(timeout=SCRAPE_TIMEOUT_SECONDS) as client:
                response = await client.post(FIRECRAWL_SCRAPE_URL, json=body, headers=self._headers)
        except httpx.HTTPError as e:
            logger.warning(f"Firecrawl scrape failed for {url}: {e}")
            return (None, Usage())

        usage = Usage(firecrawl_requests=1)
        if response.status_code >= 400:
            logger.warning(f"Firecrawl scrape error {response.status_code} for {url}")
            return (None, usage)

        try:
            data = response.json().get("data") or {}
        except ValueError:
            return (None, usage)

        metadata = data.get("metadata") or {}
        title = clean_text(metadata.get("ogTitle") or metadata.get("title"))
        description = metadata.get("ogDescription") or metadata.get("description")
        snippet = clean_snippet(data.get("markdown"), description, title)
        return (ScrapedPage(title=title, snippet=snippet), usage)
