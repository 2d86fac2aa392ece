"""Brave Web Search adapter."""

import logging
import os

import httpx

from perspective_lens.classify import accept
from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.search.base import build_query
from perspective_lens.search.http import request_with_retry

BRAVE_API_URL = "https://api.search.brave.com/res/v1/web/search"

# Brave rejects counts above 20 and queries longer than ~400 characters.
BRAVE_MAX_COUNT = 20
BRAVE_SITE_LIMIT = 12

_FRESHNESS: dict[Recency, str | None] = {
    Recency.WEEK: "pw",
    Recency.MONTH: "pm",
    Recency.YEAR: "py",
    Recency.ANY: None,
}

logger = logging.getLogger(__name__)


class BraveSearcher:
    """Search news coverage through the Brave Web Search API.

    The free plan allows one request per second, so the orchestrator spaces
    per-lean calls by ``lean_delay_seconds``.

    Args:
        api_key: Brave API key (defaults to BRAVE_SEARCH_API_KEY env var).
        max_results: Default result cap per query (Brave max is 20).
        lean_delay_seconds: Gap between sequential lean queries.
        timeout: Per-request timeout in seconds.
    """

    name = "brave"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        max_results: int = BRAVE_MAX_COUNT,
        lean_delay_seconds: float = 1.0,
        timeout: float = 15.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("BRAVE_SEARCH_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Brave API key required. Pass api_key or set BRAVE_SEARCH_API_KEY env var."
            )
        self._max_results = max_results
        self.lean_delay_seconds = lean_delay_seconds
        self._timeout = timeout

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search Brave for a lean's coverage of a topic."""
        query = build_query(topic, lean, constrained=constrained, site_limit=BRAVE_SITE_LIMIT)
        count = min(max_results or self._max_results, BRAVE_MAX_COUNT)
        params: dict[str, str | int] = {
            "q": query,
            "count": count,
            "text_decorations": "false",
        }
        freshness = _FRESHNESS[recency]
        if freshness:
            params["freshness"] = freshness
        headers = {
            "Accept": "application/json",
            "X-Subscription-Token": self._api_key,  # type: ignore[dict-item]
        }

        tag = lean.upper()
        logger.info(f"[{tag}] Brave search ({recency}): {query[:120]}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await request_with_retry(
                    client, "GET", BRAVE_API_URL, params=params, headers=headers
                )
        except httpx.HTTPError as e:
            logger.warning(f"[{tag}] Brave request failed: {e}")
            return ([], Usage())

        usage = Usage(brave_requests=1)
        if response.status_code >= 400:
            logger.warning(f"[{tag}] Brave error {response.status_code}: {response.text[:300]}")
            return ([], usage)

        try:
            results = (response.json().get("web") or {}).get("results") or []
        except (ValueError, AttributeError):
            logger.warning(f"[{tag}] Brave returned an unexpected body")
            return ([], usage)
        if not isinstance(results, list):
            logger.warning(f"[{tag}] Brave results are not a list")
            return ([], usage)

        articles: list[Article] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            article = accept(
                item.get("url", ""),
                title=item.get("title"),
                snippet=item.get("description"),
                lean=lean,
                provider=self.name,
                published_at=item.get("page_age") or item.get("age"),
            )
            if article is not None:
                articles.append(article)

        logger.info(f"[{tag}] Brave kept {len(articles)} of {len(results)} results")
        return (articles, usage)
