"""Exa search using the official exa-py SDK."""

import logging
import os
from datetime import UTC, datetime, timedelta

from exa_py import AsyncExa

from perspective_lens.classify import accept
from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.outlets import domains_for
from perspective_lens.search.base import clean_topic
from perspective_lens.text import clean_snippet

_WINDOW_DAYS: dict[Recency, int | None] = {
    Recency.WEEK: 7,
    Recency.MONTH: 30,
    Recency.YEAR: 365,
    Recency.ANY: None,
}

logger = logging.getLogger(__name__)


class ExaSearcher:
    """Search for news coverage using the Exa API.

    Uses the ``exa-py`` async SDK with Exa's native ``include_domains``
    filter, so constrained queries only ever return the lean's outlets.

    Args:
        api_key: Exa API key (defaults to EXA_API_KEY env var).
        max_results: Default result cap per query (default 25).
    """

    name = "exa"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        max_results: int = 25,
    ) -> None:
        self._api_key = api_key or os.environ.get("EXA_API_KEY")
        if not self._api_key:
            raise ValueError("Exa API key required. Pass api_key or set EXA_API_KEY env var.")
        self._max_results = max_results
        self._client = AsyncExa(api_key=self._api_key)

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search Exa for a lean's coverage of a topic."""
        tag = lean.upper()
        query = clean_topic(topic) if constrained else f"{clean_topic(topic)} news"
        logger.info(f"[{tag}] Exa search ({recency}): {query}")
        try:
            response = await self._client.search_and_contents(
                query,
                num_results=max_results or self._max_results,
                include_domains=list(domains_for(lean)) if constrained else None,
                start_published_date=_start_date(recency),
                text={"max_characters": 2000},
            )
        except Exception as e:
            # The SDK surfaces HTTP and validation failures as plain exceptions
            logger.warning(f"[{tag}] Exa search failed: {e}")
            return ([], Usage())

        articles: list[Article] = []
        for result in response.results:
            title = result.title or ""
            article = accept(
                result.url,
                title=title,
                snippet=clean_snippet(getattr(result, "text", None), None, title),
                lean=lean,
                provider=self.name,
                published_at=result.published_date,
            )
            if article is not None:
                articles.append(article)

        logger.info(f"[{tag}] Exa kept {len(articles)} of {len(response.results)} results")
        return (articles, Usage(exa_requests=1))


def _start_date(recency: Recency, now: datetime | None = None) -> str | None:
    """Earliest publish date for a recency window, as Exa's ISO 8601 format.

    Exa expects a time component, e.g. ``2026-01-01T00:00:00.000Z``.
    """
    days = _WINDOW_DAYS[recency]
    if days is None:
        return None
    now = now or datetime.now(tz=UTC)
    start = (now - timedelta(days=days)).date()
    return f"{start.isoformat()}T00:00:00.000Z"
