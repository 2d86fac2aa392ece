"""End-to-end topic search: orchestrate, repair, fact-check and describe."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from perspective_lens.assembler import PerspectiveView, build_perspectives
from perspective_lens.data import (
    LEANS,
    FactCheckClaim,
    SearchResult,
    TopicMetadata,
    Usage,
)
from perspective_lens.factcheck import GoogleFactChecker
from perspective_lens.metadata import ClaudeTopicDescriber
from perspective_lens.pipeline.orchestrator import Orchestrator
from perspective_lens.repair import MetadataRepairer

logger = logging.getLogger(__name__)


@dataclass
class PipelineOutput:
    """Everything one topic search produced."""

    topic: TopicMetadata
    result: SearchResult
    perspectives: list[PerspectiveView]
    fact_checks: dict[str, list[FactCheckClaim]] = field(default_factory=dict)
    usage: Usage = field(default_factory=Usage)
    log_path: Path | None = None

    @property
    def has_articles(self) -> bool:
        return bool(self.result.all_articles())


class PerspectivePipeline:
    """Search a topic across all leans and build the perspective views.

    Flow:
    1. The orchestrator fills each lean through its fallback chain
    2. Placeholder titles and snippets are repaired (if a repairer is set)
    3. Fact-check enrichment and topic description run concurrently
    4. Views are assembled from the real articles only

    Args:
        orchestrator: Multi-provider search orchestrator.
        describer: Topic metadata generator.
        fact_checker: Optional fact-check enricher.
        repairer: Optional metadata repairer.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        describer: ClaudeTopicDescriber,
        *,
        fact_checker: GoogleFactChecker | None = None,
        repairer: MetadataRepairer | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._describer = describer
        self._fact_checker = fact_checker
        self._repairer = repairer

    async def _repair(self, result: SearchResult) -> Usage:
        if self._repairer is None:
            return Usage()
        outcomes = await asyncio.gather(
            *(self._repairer.repair(result.articles[lean]) for lean in LEANS)
        )
        usage = Usage()
        for lean, (repaired, lean_usage) in zip(LEANS, outcomes, strict=True):
            result.articles[lean] = repaired
            usage += lean_usage
        return usage

    async def _fact_check(
        self, result: SearchResult, topic: str
    ) -> tuple[dict[str, list[FactCheckClaim]], Usage]:
        if self._fact_checker is None:
            return ({}, Usage())
        return await self._fact_checker.enrich_all(result.all_articles(), topic)

    async def run(self, topic: str, *, fact_check: bool = True) -> PipelineOutput:
        """Run the full search for ``topic``.

        Raises:
            MetadataParseError: If the describer is strict and its reply
                could not be parsed.
        """
        run_logger = self._orchestrator.new_run_logger()
        run_logger.start_run(topic)

        result = await self._orchestrator.run(topic, run_logger=run_logger)
        usage = Usage() + result.usage

        if result.all_articles():
            t0 = time.monotonic()
            repair_usage = await self._repair(result)
            usage += repair_usage
            if self._repairer is not None:
                run_logger.log_stage(
                    stage="repair",
                    component=type(self._repairer).__name__,
                    input_data=None,
                    output_data=result.all_articles(),
                    usage=repair_usage,
                    duration_seconds=time.monotonic() - t0,
                )

        t0 = time.monotonic()
        checks_task = (
            self._fact_check(result, topic)
            if fact_check
            else asyncio.sleep(0, result=({}, Usage()))
        )
        (fact_checks, check_usage), (metadata, meta_usage) = await asyncio.gather(
            checks_task, self._describer.describe(topic)
        )
        duration = time.monotonic() - t0
        usage += check_usage
        usage += meta_usage

        run_logger.log_stage(
            stage="metadata",
            component=type(self._describer).__name__,
            input_data={"topic": topic},
            output_data=metadata,
            usage=meta_usage,
            duration_seconds=duration,
        )
        if self._fact_checker is not None and fact_check:
            run_logger.log_stage(
                stage="fact_check",
                component=type(self._fact_checker).__name__,
                input_data={"articles": len(result.all_articles())},
                output_data=fact_checks,
                usage=check_usage,
                duration_seconds=duration,
            )

        result.usage = usage
        log_path = run_logger.finish_run(result)
        return PipelineOutput(
            topic=metadata,
            result=result,
            perspectives=build_perspectives(result, fact_checks),
            fact_checks=fact_checks,
            usage=usage,
            log_path=log_path,
        )
