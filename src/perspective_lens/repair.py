"""Fill placeholder titles and snippets by scraping the article page."""

import asyncio
import dataclasses
import logging

from perspective_lens.data import Article, Usage
from perspective_lens.search.firecrawl import FirecrawlSearcher
from perspective_lens.text import is_placeholder

logger = logging.getLogger(__name__)


def needs_repair(article: Article) -> bool:
    return (
        is_placeholder(article.title)
        or is_placeholder(article.snippet)
        or article.snippet == article.title
    )


class MetadataRepairer:
    """Replace stand-in titles and snippets with scraped page content.

    Only ``title`` and ``snippet`` are ever replaced. URL, outlet and lean
    come from the classifier and are left alone.

    Args:
        scraper: Firecrawl adapter used for ``/v1/scrape`` calls.
    """

    def __init__(self, scraper: FirecrawlSearcher) -> None:
        self._scraper = scraper

    async def _repair_one(self, article: Article) -> tuple[Article, Usage]:
        page, usage = await self._scraper.scrape(article.url)
        if page is None:
            return (article, usage)

        title = article.title
        if is_placeholder(title) and not is_placeholder(page.title):
            title = page.title
        snippet = article.snippet
        # Snippets that merely echo the title get the scraped summary too
        if is_placeholder(snippet) or snippet == article.title:
            snippet = page.snippet if not is_placeholder(page.snippet) else title
        return (dataclasses.replace(article, title=title, snippet=snippet), usage)

    async def repair(self, articles: list[Article]) -> tuple[list[Article], Usage]:
        """Repair every placeholder article concurrently, preserving order."""
        targets = [i for i, a in enumerate(articles) if needs_repair(a)]
        if not targets:
            return (list(articles), Usage())

        logger.info(f"Repairing metadata for {len(targets)} articles")
        results = await asyncio.gather(
            *(self._repair_one(articles[i]) for i in targets), return_exceptions=True
        )

        repaired = list(articles)
        usage = Usage()
        for i, result in zip(targets, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Metadata repair failed for {articles[i].url}: {result}")
                continue
            article, call_usage = result
            repaired[i] = article
            usage += call_usage
        return (repaired, usage)
