"""Factory functions to create components from configuration."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from perspective_lens.config.models import (
    AppConfig,
    AttemptConfig,
    BraveSearcherConfig,
    ClaudeSearcherConfig,
    ExaSearcherConfig,
    FirecrawlSearcherConfig,
    PlanConfig,
    SearcherConfig,
    VertexSearcherConfig,
)
from perspective_lens.factcheck import GoogleFactChecker
from perspective_lens.metadata import ClaudeTopicDescriber
from perspective_lens.pipeline.orchestrator import Attempt, Orchestrator, SearchPlan
from perspective_lens.pipeline.perspectives import PerspectivePipeline
from perspective_lens.repair import MetadataRepairer
from perspective_lens.search.base import LeanSearcher
from perspective_lens.search.brave import BraveSearcher
from perspective_lens.search.claude import ClaudeSearcher
from perspective_lens.search.exa import ExaSearcher
from perspective_lens.search.firecrawl import FirecrawlSearcher
from perspective_lens.search.vertex import VertexSearcher
from perspective_lens.trending import PerplexityTrendingTopics

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Components built from one AppConfig.

    ``describer`` is None when the mandatory AI key is missing;
    ``fact_checker`` and ``repairer`` are None when their provider is
    unconfigured or disabled.
    """

    config: AppConfig
    searchers: dict[str, LeanSearcher] = field(default_factory=dict)
    orchestrator: Orchestrator | None = None
    describer: ClaudeTopicDescriber | None = None
    fact_checker: GoogleFactChecker | None = None
    repairer: MetadataRepairer | None = None
    trending: PerplexityTrendingTopics | None = None
    log_dir: Path | None = None

    def pipeline(self) -> PerspectivePipeline | None:
        """Full topic pipeline, or None when no describer is configured."""
        if self.describer is None or self.orchestrator is None:
            return None
        return PerspectivePipeline(
            self.orchestrator,
            self.describer,
            fact_checker=self.fact_checker,
            repairer=self.repairer,
        )


def create_searcher(config: SearcherConfig) -> LeanSearcher:
    """Create a provider adapter from config.

    Uses explicit type matching rather than getattr.

    Raises:
        ValueError: If the provider's credentials are missing.
    """
    if isinstance(config, BraveSearcherConfig):
        return BraveSearcher(
            max_results=config.max_results,
            lean_delay_seconds=config.lean_delay_seconds,
            timeout=config.timeout,
        )
    if isinstance(config, ExaSearcherConfig):
        return ExaSearcher(max_results=config.max_results)
    if isinstance(config, FirecrawlSearcherConfig):
        return FirecrawlSearcher(max_results=config.max_results, timeout=config.timeout)
    if isinstance(config, VertexSearcherConfig):
        return VertexSearcher(
            location=config.location,
            max_results=config.max_results,
            timeout=config.timeout,
        )
    if isinstance(config, ClaudeSearcherConfig):
        return ClaudeSearcher(
            model=config.model,
            max_searches_per_query=config.max_searches_per_query,
            max_results=config.max_results,
        )
    # Type checker ensures this is exhaustive
    msg = f"Unknown searcher config type: {type(config)}"
    raise ValueError(msg)


def create_searchers(configs: list[SearcherConfig]) -> dict[str, LeanSearcher]:
    """Build every enabled provider, skipping those without credentials."""
    searchers: dict[str, LeanSearcher] = {}
    for config in configs:
        if not config.enabled:
            continue
        try:
            searchers[config.type] = create_searcher(config)
        except ValueError as e:
            logger.info(f"Skipping provider {config.type}: {e}")
    return searchers


def create_plan(config: PlanConfig) -> SearchPlan:
    def attempt(step: AttemptConfig) -> Attempt:
        return Attempt(step.provider, step.recency, step.constrained)

    return SearchPlan(
        primary=attempt(config.primary),
        fallbacks=tuple(attempt(step) for step in config.fallbacks),
    )


def create_from_config(
    config: AppConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
    fact_check_override: bool | None = None,
) -> Services:
    """Create every service from root config.

    Optional providers whose keys are missing are skipped rather than
    failing; a missing AI key leaves ``describer`` unset.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.
        fact_check_override: Override the config's factcheck.enabled setting.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    searchers = create_searchers(config.providers)
    if not searchers:
        logger.warning("No search providers configured; every lean will come back empty")

    orchestrator = Orchestrator(
        searchers,
        create_plan(config.plan),
        min_articles_per_lean=config.min_articles_per_lean,
        max_articles_per_lean=config.max_articles_per_lean,
        max_results_per_attempt=config.max_results_per_attempt,
        log_dir=log_dir if log_enabled else None,
    )

    describer: ClaudeTopicDescriber | None = None
    try:
        describer = ClaudeTopicDescriber(model=config.metadata.model, strict=config.metadata.strict)
    except ValueError as e:
        logger.warning(f"Topic metadata disabled: {e}")

    check_enabled = (
        fact_check_override if fact_check_override is not None else config.factcheck.enabled
    )
    fact_checker: GoogleFactChecker | None = None
    if check_enabled:
        try:
            fact_checker = GoogleFactChecker(
                include_summary_sentence=config.factcheck.include_summary_sentence,
                max_claims=config.factcheck.max_claims,
                timeout=config.factcheck.timeout,
            )
        except ValueError as e:
            logger.info(f"Fact checking disabled: {e}")

    repairer: MetadataRepairer | None = None
    scraper = searchers.get("firecrawl")
    if config.repair.enabled and isinstance(scraper, FirecrawlSearcher):
        repairer = MetadataRepairer(scraper)

    return Services(
        config=config,
        searchers=searchers,
        orchestrator=orchestrator,
        describer=describer,
        fact_checker=fact_checker,
        repairer=repairer,
        trending=PerplexityTrendingTopics(
            model=config.trending.model, timeout=config.trending.timeout
        ),
        log_dir=log_dir if log_enabled else None,
    )
