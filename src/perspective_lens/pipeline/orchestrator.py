"""Multi-provider search orchestration across the three leans."""

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from perspective_lens.classify import classify
from perspective_lens.data import LEANS, Article, Lean, Recency, SearchResult, Usage
from perspective_lens.run_logger import RunLogger
from perspective_lens.search.base import LeanSearcher
from perspective_lens.url import normalize_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attempt:
    """One step of a search plan: a provider at a given recency window.

    ``constrained=False`` runs a broad query that is filtered against the
    outlet table client-side only.
    """

    provider: str
    recency: Recency = Recency.WEEK
    constrained: bool = True

    def __str__(self) -> str:
        scope = "" if self.constrained else ", unconstrained"
        return f"{self.provider}({self.recency}{scope})"


@dataclass(frozen=True)
class SearchPlan:
    """Primary attempt run for every lean, then ordered fallbacks for missing leans."""

    primary: Attempt
    fallbacks: tuple[Attempt, ...] = ()


DEFAULT_PLAN = SearchPlan(
    primary=Attempt("brave", Recency.WEEK),
    fallbacks=(
        Attempt("exa", Recency.WEEK),
        Attempt("exa", Recency.MONTH),
        Attempt("exa", Recency.YEAR),
        Attempt("firecrawl", Recency.WEEK),
        Attempt("firecrawl", Recency.MONTH),
        Attempt("firecrawl", Recency.YEAR),
        Attempt("vertex", Recency.ANY),
        Attempt("claude", Recency.MONTH),
        Attempt("claude", Recency.YEAR),
        Attempt("brave", Recency.ANY, constrained=False),
    ),
)


@dataclass
class ChainOutcome:
    """Articles gathered for one lean by a fallback chain."""

    articles: list[Article] = field(default_factory=list)
    providers: list[str] = field(default_factory=list)
    attempts: list[Attempt] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)


def _admit(
    articles: Iterable[Article],
    lean: Lean,
    seen: set[str],
) -> list[Article]:
    """Keep articles that classify into ``lean`` and have not been seen yet."""
    admitted: list[Article] = []
    for article in articles:
        match = classify(article.url)
        if match is None or match.lean != lean or article.lean != lean:
            logger.warning(f"[{lean.upper()}] Dropping misclassified article {article.url}")
            continue
        key = normalize_url(article.url)
        if key in seen:
            continue
        seen.add(key)
        admitted.append(article)
    return admitted


async def run_fallback_chain(
    topic: str,
    lean: Lean,
    attempts: Iterable[Attempt],
    searchers: Mapping[str, LeanSearcher],
    *,
    need: int,
    seen: set[str] | None = None,
    have: int = 0,
    max_results: int | None = None,
) -> ChainOutcome:
    """Try attempts in order until ``lean`` holds ``need`` articles.

    Attempts whose provider is not configured are skipped. The chain stops
    at the first attempt that brings the lean's total up to ``need``.

    Args:
        topic: The topic being searched.
        lean: The lean to fill.
        attempts: Ordered attempt descriptors.
        searchers: Configured searchers by provider name.
        need: Target article count for the lean.
        seen: Normalized URLs already collected; updated in place.
        have: Articles the lean already holds.
        max_results: Per-attempt provider result cap.
    """
    seen = seen if seen is not None else set()
    outcome = ChainOutcome()
    tag = lean.upper()

    for attempt in attempts:
        if have + len(outcome.articles) >= need:
            break
        searcher = searchers.get(attempt.provider)
        if searcher is None:
            logger.debug(f"[{tag}] Skipping {attempt}: provider not configured")
            continue

        logger.info(f"[{tag}] Fallback attempt {attempt}")
        outcome.attempts.append(attempt)
        try:
            articles, usage = await searcher.search(
                topic,
                lean,
                recency=attempt.recency,
                constrained=attempt.constrained,
                max_results=max_results,
            )
        except Exception as e:
            logger.warning(f"[{tag}] Fallback {attempt} error: {e}")
            continue
        outcome.usage += usage
        admitted = _admit(articles, lean, seen)
        if admitted:
            outcome.articles.extend(admitted)
            if attempt.provider not in outcome.providers:
                outcome.providers.append(attempt.provider)

    if have + len(outcome.articles) < need:
        logger.warning(f"[{tag}] No sources found after {len(outcome.attempts)} fallback attempts")
    return outcome


class Orchestrator:
    """Find coverage of a topic for every lean, falling back across providers.

    Flow:
    1. The plan's primary attempt runs for all three leans (concurrently, or
       one lean at a time when the provider asks for a delay between calls)
    2. Leans with fewer than ``min_articles_per_lean`` articles are collected
    3. Each missing lean runs the fallback chain concurrently; satisfied
       leans are never re-queried
    4. Results are deduplicated by normalized URL

    A lean that is still empty after every attempt stays empty.

    Args:
        searchers: Configured provider adapters by name.
        plan: Primary and fallback attempts.
        min_articles_per_lean: Target count before a lean stops escalating.
        max_articles_per_lean: Cap on articles kept per lean.
        max_results_per_attempt: Provider result cap (adapter default if None).
        log_dir: Directory for per-run JSON stage logs (disabled if None).
    """

    def __init__(
        self,
        searchers: Mapping[str, LeanSearcher],
        plan: SearchPlan = DEFAULT_PLAN,
        *,
        min_articles_per_lean: int = 1,
        max_articles_per_lean: int = 10,
        max_results_per_attempt: int | None = None,
        log_dir: Path | None = None,
    ) -> None:
        self._searchers = dict(searchers)
        self._plan = plan
        self._need = min_articles_per_lean
        self._cap = max_articles_per_lean
        self._max_results = max_results_per_attempt
        self._log_dir = log_dir
        self.last_log_path: Path | None = None

    @property
    def providers(self) -> list[str]:
        return list(self._searchers)

    def _fallbacks(self) -> list[Attempt]:
        return [a for a in self._plan.fallbacks if a != self._plan.primary]

    async def _primary(
        self, topic: str, leans: list[Lean]
    ) -> dict[Lean, tuple[list[Article], Usage]]:
        attempt = self._plan.primary
        searcher = self._searchers.get(attempt.provider)
        if searcher is None:
            logger.warning(f"Primary provider {attempt.provider!r} not configured")
            return {}

        def call(lean: Lean):
            return searcher.search(
                topic,
                lean,
                recency=attempt.recency,
                constrained=attempt.constrained,
                max_results=self._max_results,
            )

        delay = getattr(searcher, "lean_delay_seconds", 0.0) or 0.0
        results: list[tuple[list[Article], Usage] | BaseException] = []
        if delay > 0:
            for i, lean in enumerate(leans):
                if i:
                    await asyncio.sleep(delay)
                try:
                    results.append(await call(lean))
                except Exception as e:
                    results.append(e)
        else:
            results = await asyncio.gather(*(call(lean) for lean in leans), return_exceptions=True)

        by_lean: dict[Lean, tuple[list[Article], Usage]] = {}
        for lean, result in zip(leans, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"[{lean.upper()}] Primary search error: {result}")
                continue
            by_lean[lean] = result
        return by_lean

    def new_run_logger(self) -> RunLogger:
        return RunLogger(self._log_dir or Path("logs"), enabled=self._log_dir is not None)

    async def run(self, topic: str, run_logger: RunLogger | None = None) -> SearchResult:
        """Search every lean for coverage of ``topic``.

        Args:
            topic: Free-text topic.
            run_logger: Logger owned by a caller that records further
                stages. When None, the orchestrator starts and finishes
                its own run log.

        Returns:
            SearchResult with per-lean articles and provenance.
        """
        owns_logger = run_logger is None
        if run_logger is None:
            run_logger = self.new_run_logger()
            run_logger.start_run(topic)

        result = SearchResult()
        seen: set[str] = set()

        t0 = time.monotonic()
        primary = await self._primary(topic, list(LEANS))
        for lean, (articles, usage) in primary.items():
            result.usage += usage
            admitted = _admit(articles, lean, seen)
            if admitted:
                result.articles[lean].extend(admitted)
                result.sources[lean].append(self._plan.primary.provider)
        run_logger.log_stage(
            stage="primary_search",
            component=str(self._plan.primary),
            input_data={"topic": topic},
            output_data={str(lean): len(result.articles[lean]) for lean in LEANS},
            usage=result.usage,
            duration_seconds=time.monotonic() - t0,
        )

        missing = result.missing_leans(self._need)
        if missing:
            logger.info(f"Leans missing after primary pass: {', '.join(missing)}")
            t0 = time.monotonic()
            outcomes = await asyncio.gather(
                *(
                    run_fallback_chain(
                        topic,
                        lean,
                        self._fallbacks(),
                        self._searchers,
                        need=self._need,
                        seen=seen,
                        have=len(result.articles[lean]),
                        max_results=self._max_results,
                    )
                    for lean in missing
                )
            )
            for lean, outcome in zip(missing, outcomes, strict=True):
                result.articles[lean].extend(outcome.articles)
                for provider in outcome.providers:
                    if provider not in result.sources[lean]:
                        result.sources[lean].append(provider)
                result.usage += outcome.usage
                run_logger.log_stage(
                    stage="fallback_search",
                    component=lean.value,
                    input_data=[str(a) for a in outcome.attempts],
                    output_data=outcome.articles,
                    usage=outcome.usage,
                    duration_seconds=time.monotonic() - t0,
                )

        for lean in LEANS:
            result.articles[lean] = result.articles[lean][: self._cap]

        run_logger.log_stage(
            stage="deduplication",
            component="url_dedup",
            input_data={"unique_urls": len(seen)},
            output_data={str(lean): len(result.articles[lean]) for lean in LEANS},
            usage=None,
            duration_seconds=0.0,
        )
        if owns_logger:
            self.last_log_path = run_logger.finish_run(result)

        logger.info(
            "Search complete: "
            + ", ".join(f"{lean}={len(result.articles[lean])}" for lean in LEANS)
        )
        return result

    async def search_lean(self, topic: str, lean: Lean) -> tuple[list[Article], str, Usage]:
        """Search a single lean, escalating through fallbacks if it comes back empty.

        Returns:
            Tuple of (articles, provider tag, usage). The tag is "none" when
            nothing was found.
        """
        seen: set[str] = set()
        usage = Usage()
        articles: list[Article] = []
        providers: list[str] = []

        primary = await self._primary(topic, [lean])
        if lean in primary:
            found, primary_usage = primary[lean]
            usage += primary_usage
            articles = _admit(found, lean, seen)
            if articles:
                providers.append(self._plan.primary.provider)

        if len(articles) < self._need:
            outcome = await run_fallback_chain(
                topic,
                lean,
                self._fallbacks(),
                self._searchers,
                need=self._need,
                seen=seen,
                have=len(articles),
                max_results=self._max_results,
            )
            articles.extend(outcome.articles)
            usage += outcome.usage
            providers.extend(p for p in outcome.providers if p not in providers)

        source = "+".join(providers) if providers else "none"
        logger.info(f"[{lean.upper()}] Final result: {len(articles)} articles from {source}")
        return (articles[: self._cap], source, usage)
