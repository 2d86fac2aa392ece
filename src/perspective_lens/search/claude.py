import logging
import os

import anthropic
from anthropic.types import WebSearchResultBlock

from perspective_lens.classify import accept
from perspective_lens.data import APICallUsage, Article, Lean, Recency, Usage
from perspective_lens.outlets import domains_for
from perspective_lens.search.base import clean_topic

logger = logging.getLogger(__name__)

_RECENCY_PHRASE: dict[Recency, str] = {
    Recency.WEEK: " published in the past week",
    Recency.MONTH: " published in the past month",
    Recency.YEAR: " published in the past year",
    Recency.ANY: "",
}


class ClaudeSearcher:
    """Search for news articles using Claude's built-in web search tool.

    The lean constraint is passed as the tool's native ``allowed_domains``
    filter. Only URLs returned by the search tool itself are used; the model's
    prose answer is ignored so no citation can be invented.

    Note: Web search must be enabled in your Anthropic Console settings.

    Args:
        api_key: Anthropic API key (defaults to CLAUDE_API_KEY env var).
        model: Model to use for search (default: claude-haiku-4-5-20251001).
        max_searches_per_query: Max web searches per query (default: 1).
        max_results: Default result cap per query.
    """

    name = "claude"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        max_searches_per_query: int = 1,
        max_results: int = 10,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        if not resolved_key:
            raise ValueError("Claude API key required. Pass api_key or set CLAUDE_API_KEY env var.")
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._model = model
        self._max_searches = max_searches_per_query
        self._max_results = max_results

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search for a lean's coverage of a topic via Claude web search."""
        limit = max_results or self._max_results
        tag = lean.upper()
        try:
            return await self._search_single(
                topic, lean, recency=recency, constrained=constrained, max_results=limit
            )
        except Exception as e:
            logger.warning(f"[{tag}] Claude web search failed. Error: {e}")
            return ([], Usage())

    async def _search_single(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency,
        constrained: bool,
        max_results: int,
    ) -> tuple[list[Article], Usage]:
        """Execute a single search using Claude's web search."""
        user_prompt = (
            f"Search for news articles about: {clean_topic(topic)}"
            f"{_RECENCY_PHRASE[recency]}\n\n"
            f"Find up to {max_results} relevant news articles."
        )

        tool: dict[str, object] = {
            "type": "web_search_20250305",
            "name": "web_search",
            "max_uses": self._max_searches,
        }
        if constrained:
            tool["allowed_domains"] = list(domains_for(lean))

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=1024,
            tools=[tool],  # type: ignore[list-item]
            messages=[{"role": "user", "content": user_prompt}],
        )

        web_searches = 0
        server_tool_use = getattr(response.usage, "server_tool_use", None)
        if server_tool_use is not None:
            web_searches = getattr(server_tool_use, "web_search_requests", 0) or 0

        usage = Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                    web_searches=web_searches,
                ),
            ],
        )

        articles: list[Article] = []
        for block in response.content:
            if block.type == "web_search_tool_result":
                content = block.content
                if isinstance(content, list):
                    for result in content:
                        article = self._parse_search_result(result, lean)
                        if article is not None:
                            articles.append(article)

        logger.info(f"[{lean.upper()}] Claude web search kept {len(articles)} results")
        return (articles[:max_results], usage)

    def _parse_search_result(self, result: WebSearchResultBlock, lean: Lean) -> Article | None:
        """Parse a web search result into an Article, if it belongs to the lean."""
        return accept(
            result.url,
            title=result.title,
            snippet=None,  # encrypted_content is not human-readable
            lean=lean,
            provider=self.name,
            published_at=result.page_age,
        )
