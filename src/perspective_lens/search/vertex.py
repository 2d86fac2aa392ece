"""Google Vertex AI Search (Discovery Engine) adapter."""

import logging
import os
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from perspective_lens.classify import accept
from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.search.auth import get_access_token, load_credential_info
from perspective_lens.search.base import build_query
from perspective_lens.search.http import request_with_retry

VERTEX_SEARCH_URL = (
    "https://discoveryengine.googleapis.com/v1/projects/{project}/locations/{location}"
    "/collections/default_collection/engines/{engine}/servingConfigs/default_search:search"
)
VERTEX_SITE_LIMIT = 10

logger = logging.getLogger(__name__)

TokenSource = Callable[[dict[str, Any]], Awaitable[str]]


class VertexSearcher:
    """Search a Vertex AI Search website engine.

    The engine's data store defines the indexed sites and freshness, so
    ``recency`` is not forwarded. Authentication uses a service-account
    credential exchanged for an OAuth2 bearer token.

    Args:
        credentials_json: Service-account JSON (defaults to
            GOOGLE_SERVICE_ACCOUNT_JSON env var).
        project_id: GCP project (defaults to VERTEX_PROJECT_ID env var).
        engine_id: Search engine/app id (defaults to VERTEX_ENGINE_ID env var).
        location: Engine location (default "global").
        max_results: Default result cap per query.
        token_source: Token exchange function, injectable for tests.
    """

    name = "vertex"

    def __init__(
        self,
        *,
        credentials_json: str | None = None,
        project_id: str | None = None,
        engine_id: str | None = None,
        location: str = "global",
        max_results: int = 10,
        timeout: float = 15.0,
        token_source: TokenSource = get_access_token,
    ) -> None:
        raw = credentials_json or os.environ.get("GOOGLE_SERVICE_ACCOUNT_JSON")
        project = project_id or os.environ.get("VERTEX_PROJECT_ID")
        engine = engine_id or os.environ.get("VERTEX_ENGINE_ID")
        if not raw or not project or not engine:
            raise ValueError(
                "Vertex credentials required. Set GOOGLE_SERVICE_ACCOUNT_JSON, "
                "VERTEX_PROJECT_ID and VERTEX_ENGINE_ID env vars."
            )
        self._credential_info = load_credential_info(raw)
        self._url = VERTEX_SEARCH_URL.format(project=project, location=location, engine=engine)
        self._max_results = max_results
        self._timeout = timeout
        self._token_source = token_source

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search the engine for a lean's coverage of a topic."""
        tag = lean.upper()
        query = build_query(topic, lean, constrained=constrained, site_limit=VERTEX_SITE_LIMIT)
        body = {
            "query": query,
            "pageSize": max_results or self._max_results,
            "contentSearchSpec": {"snippetSpec": {"returnSnippet": True}},
        }

        try:
            token = await self._token_source(self._credential_info)
        except Exception as e:
            logger.warning(f"[{tag}] Vertex token exchange failed: {e}")
            return ([], Usage())

        logger.info(f"[{tag}] Vertex search: {query[:120]}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await request_with_retry(
                    client,
                    "POST",
                    self._url,
                    json=body,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.warning(f"[{tag}] Vertex request failed: {e}")
            return ([], Usage())

        usage = Usage(vertex_requests=1)
        if response.status_code >= 400:
            logger.warning(f"[{tag}] Vertex error {response.status_code}: {response.text[:300]}")
            return ([], usage)

        try:
            results = response.json().get("results") or []
        except (ValueError, AttributeError):
            logger.warning(f"[{tag}] Vertex returned an unexpected body")
            return ([], usage)
        if not isinstance(results, list):
            logger.warning(f"[{tag}] Vertex results are not a list")
            return ([], usage)

        articles: list[Article] = []
        for item in results:
            if not isinstance(item, dict):
                continue
            data = (item.get("document") or {}).get("derivedStructData") or {}
            snippets = data.get("snippets") or []
            snippet = snippets[0].get("snippet") if snippets else None
            article = accept(
                data.get("link", ""),
                title=data.get("title") or data.get("htmlTitle"),
                snippet=snippet,
                lean=lean,
                provider=self.name,
                published_at=_published_time(data),
            )
            if article is not None:
                articles.append(article)

        logger.info(f"[{tag}] Vertex kept {len(articles)} of {len(results)} results")
        return (articles, usage)


def _published_time(data: dict[str, Any]) -> str | None:
    metatags = (data.get("pagemap") or {}).get("metatags") or []
    for tags in metatags:
        value = tags.get("article:published_time") or tags.get("og:updated_time")
        if value:
            return str(value)
    return None
