from typing import Protocol

from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.outlets import domains_for


class LeanSearcher(Protocol):
    """Interface for provider adapters that find articles for one lean."""

    name: str

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        """Search for articles about a topic from outlets of the given lean.

        Implementations never raise on provider failure: an unavailable
        provider yields an empty list.

        Args:
            topic: Free-text topic from the user.
            lean: Lean bucket whose outlets the results must come from.
            recency: How far back results may be published.
            constrained: If False, run a broad query and filter client-side.
            max_results: Provider result cap (adapter default if None).

        Returns:
            Tuple of (accepted articles, usage).
        """
        ...


def clean_topic(topic: str) -> str:
    """Strip quotes that break provider query syntax."""
    return topic.replace('"', "").replace("“", "").replace("”", "").strip()


def site_clause(lean: Lean, *, limit: int | None = None) -> str:
    """Boolean-OR ``site:`` clause over a lean's domains.

    Providers cap query length, so ``limit`` keeps only the first domains in
    table order.
    """
    domains = domains_for(lean)
    if limit is not None:
        domains = domains[:limit]
    return "(" + " OR ".join(f"site:{d}" for d in domains) + ")"


def build_query(topic: str, lean: Lean, *, constrained: bool, site_limit: int | None = None) -> str:
    topic = clean_topic(topic)
    if not constrained:
        return f"{topic} news"
    return f"{topic} {site_clause(lean, limit=site_limit)}"
