"""Tests for Orchestrator and the fallback chain."""

from unittest.mock import AsyncMock

import pytest

from perspective_lens.data import Article, Lean, Recency, Usage
from perspective_lens.pipeline.orchestrator import (
    DEFAULT_PLAN,
    Attempt,
    Orchestrator,
    SearchPlan,
    run_fallback_chain,
)


def _article(url: str, lean: Lean, outlet: str = "Outlet", provider: str = "brave") -> Article:
    return Article(
        url=url,
        title=f"Story at {url}",
        outlet=outlet,
        snippet="Snippet",
        lean=lean,
        provider=provider,
    )


LEFT_A = _article("https://www.cnn.com/2026/02/01/politics/climate-policy-vote", Lean.LEFT)
LEFT_B = _article("https://www.nytimes.com/2026/02/01/climate/policy-senate.html", Lean.LEFT)
RIGHT_A = _article("https://www.foxnews.com/politics/climate-policy-senate-fight", Lean.RIGHT)
CENTER_A = _article("https://www.reuters.com/world/us/climate-policy-vote-2026-02-01/", Lean.CENTER)


class FakeSearcher:
    """Searcher returning canned articles per (lean, recency)."""

    def __init__(
        self,
        name: str,
        responses: dict[tuple[Lean, Recency], list[Article]] | None = None,
        lean_delay_seconds: float = 0.0,
    ) -> None:
        self.name = name
        self.responses = responses or {}
        self.lean_delay_seconds = lean_delay_seconds
        self.calls: list[tuple[Lean, Recency, bool]] = []

    async def search(
        self,
        topic: str,
        lean: Lean,
        *,
        recency: Recency = Recency.WEEK,
        constrained: bool = True,
        max_results: int | None = None,
    ) -> tuple[list[Article], Usage]:
        self.calls.append((lean, recency, constrained))
        return (list(self.responses.get((lean, recency), [])), Usage(brave_requests=1))

    def leans_called(self) -> list[Lean]:
        return [lean for lean, _, _ in self.calls]


class FailingSearcher:
    """Searcher whose every call raises."""

    lean_delay_seconds = 0.0

    def __init__(self, name: str) -> None:
        self.name = name

    async def search(self, topic: str, lean: Lean, **kwargs) -> tuple[list[Article], Usage]:
        raise RuntimeError("provider unavailable")


class TestOrchestrator:
    """Tests for Orchestrator.run()."""

    async def test_fallback_runs_only_for_missing_lean(self):
        """Satisfied leans are never re-queried and an empty lean stays empty."""
        brave = FakeSearcher(
            "brave",
            {
                (Lean.LEFT, Recency.WEEK): [LEFT_A, LEFT_B],
                (Lean.RIGHT, Recency.WEEK): [RIGHT_A],
            },
        )
        exa = FakeSearcher("exa")
        orchestrator = Orchestrator({"brave": brave, "exa": exa})

        result = await orchestrator.run("climate policy")

        assert result.articles[Lean.LEFT] == [LEFT_A, LEFT_B]
        assert result.articles[Lean.RIGHT] == [RIGHT_A]
        assert result.articles[Lean.CENTER] == []
        assert result.source_for(Lean.LEFT) == "brave"
        assert result.source_for(Lean.CENTER) == "none"

        assert set(exa.leans_called()) == {Lean.CENTER}
        assert [r for _, r, _ in exa.calls] == [Recency.WEEK, Recency.MONTH, Recency.YEAR]
        # Primary once per lean, then the unconstrained brave fallback for center only
        assert brave.leans_called().count(Lean.LEFT) == 1
        assert brave.leans_called().count(Lean.RIGHT) == 1
        assert (Lean.CENTER, Recency.ANY, False) in brave.calls

    async def test_fallback_stops_at_first_success(self):
        brave = FakeSearcher(
            "brave",
            {(Lean.LEFT, Recency.WEEK): [LEFT_A], (Lean.RIGHT, Recency.WEEK): [RIGHT_A]},
        )
        exa = FakeSearcher("exa", {(Lean.CENTER, Recency.MONTH): [CENTER_A]})
        firecrawl = FakeSearcher("firecrawl")
        orchestrator = Orchestrator({"brave": brave, "exa": exa, "firecrawl": firecrawl})

        result = await orchestrator.run("climate policy")

        assert result.articles[Lean.CENTER] == [CENTER_A]
        assert result.source_for(Lean.CENTER) == "exa"
        assert firecrawl.calls == []
        assert result.usage.brave_requests == 5

    async def test_misclassified_articles_are_dropped(self):
        """An article whose outlet belongs to another lean never lands in the wrong bucket."""
        wrong = _article(RIGHT_A.url, Lean.LEFT)
        brave = FakeSearcher("brave", {(Lean.LEFT, Recency.WEEK): [wrong, LEFT_A]})
        orchestrator = Orchestrator({"brave": brave}, SearchPlan(primary=DEFAULT_PLAN.primary))

        result = await orchestrator.run("climate policy")
        assert result.articles[Lean.LEFT] == [LEFT_A]

    async def test_duplicates_across_providers_are_removed(self):
        duplicate = _article(
            "https://cnn.com/2026/02/01/politics/climate-policy-vote/", Lean.LEFT, provider="exa"
        )
        brave = FakeSearcher("brave", {(Lean.LEFT, Recency.WEEK): [LEFT_A, LEFT_A]})
        exa = FakeSearcher("exa", {(Lean.LEFT, Recency.WEEK): [duplicate, LEFT_B]})
        plan = SearchPlan(primary=Attempt("brave"), fallbacks=(Attempt("exa"),))
        orchestrator = Orchestrator({"brave": brave, "exa": exa}, plan, min_articles_per_lean=2)

        result = await orchestrator.run("climate policy")
        assert result.articles[Lean.LEFT] == [LEFT_A, LEFT_B]
        assert result.source_for(Lean.LEFT) == "brave+exa"

    async def test_unconfigured_providers_are_skipped(self):
        exa = FakeSearcher("exa", {(lean, Recency.WEEK): [a] for lean, a in (
            (Lean.LEFT, LEFT_A), (Lean.CENTER, CENTER_A), (Lean.RIGHT, RIGHT_A)
        )})
        orchestrator = Orchestrator({"exa": exa})

        result = await orchestrator.run("climate policy")
        assert result.all_articles() == [LEFT_A, CENTER_A, RIGHT_A]
        assert all(result.source_for(lean) == "exa" for lean in Lean)

    async def test_primary_exception_is_absorbed(self):
        brave = FakeSearcher("brave")
        brave.search = AsyncMock(side_effect=RuntimeError("boom"))  # type: ignore[method-assign]
        orchestrator = Orchestrator({"brave": brave}, SearchPlan(primary=Attempt("brave")))

        result = await orchestrator.run("climate policy")
        assert result.all_articles() == []

    async def test_sequential_primary_sleeps_between_leans(self, monkeypatch: pytest.MonkeyPatch):
        sleep = AsyncMock()
        monkeypatch.setattr("perspective_lens.pipeline.orchestrator.asyncio.sleep", sleep)
        brave = FakeSearcher("brave", lean_delay_seconds=1.0)
        orchestrator = Orchestrator({"brave": brave}, SearchPlan(primary=Attempt("brave")))

        await orchestrator.run("climate policy")

        assert brave.leans_called() == [Lean.LEFT, Lean.CENTER, Lean.RIGHT]
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)

    async def test_articles_capped_per_lean(self):
        many = [
            _article(f"https://www.cnn.com/2026/02/01/politics/climate-story-{i}", Lean.LEFT)
            for i in range(5)
        ]
        brave = FakeSearcher("brave", {(Lean.LEFT, Recency.WEEK): many})
        orchestrator = Orchestrator(
            {"brave": brave}, SearchPlan(primary=Attempt("brave")), max_articles_per_lean=3
        )

        result = await orchestrator.run("climate policy")
        assert result.articles[Lean.LEFT] == many[:3]

    async def test_run_writes_log_when_enabled(self, tmp_path):
        brave = FakeSearcher("brave", {(Lean.LEFT, Recency.WEEK): [LEFT_A]})
        orchestrator = Orchestrator(
            {"brave": brave}, SearchPlan(primary=Attempt("brave")), log_dir=tmp_path
        )

        await orchestrator.run("climate policy")
        assert orchestrator.last_log_path is not None
        assert orchestrator.last_log_path.exists()


class TestSearchLean:
    """Tests for Orchestrator.search_lean()."""

    async def test_returns_primary_source(self):
        brave = FakeSearcher("brave", {(Lean.RIGHT, Recency.WEEK): [RIGHT_A]})
        orchestrator = Orchestrator({"brave": brave})

        articles, source, usage = await orchestrator.search_lean("climate policy", Lean.RIGHT)
        assert articles == [RIGHT_A]
        assert source == "brave"
        assert brave.leans_called() == [Lean.RIGHT]
        assert usage.brave_requests == 1

    async def test_nothing_found_reports_none(self):
        brave = FakeSearcher("brave")
        orchestrator = Orchestrator({"brave": brave})

        articles, source, _ = await orchestrator.search_lean("climate policy", Lean.CENTER)
        assert articles == []
        assert source == "none"


class TestRunFallbackChain:
    """Tests for run_fallback_chain()."""

    async def test_skips_satisfied_lean(self):
        exa = FakeSearcher("exa", {(Lean.LEFT, Recency.WEEK): [LEFT_A]})
        outcome = await run_fallback_chain(
            "climate policy", Lean.LEFT, [Attempt("exa")], {"exa": exa}, need=1, have=1
        )
        assert outcome.articles == []
        assert exa.calls == []

    async def test_records_attempts_and_providers(self):
        exa = FakeSearcher("exa", {(Lean.LEFT, Recency.MONTH): [LEFT_A]})
        attempts = [Attempt("vertex", Recency.ANY), Attempt("exa"), Attempt("exa", Recency.MONTH)]
        outcome = await run_fallback_chain(
            "climate policy", Lean.LEFT, attempts, {"exa": exa}, need=1
        )
        assert outcome.articles == [LEFT_A]
        assert outcome.providers == ["exa"]
        assert [str(a) for a in outcome.attempts] == ["exa(week)", "exa(month)"]

    async def test_provider_error_moves_to_next_attempt(self):
        exa = FakeSearcher("exa", {(Lean.LEFT, Recency.MONTH): [LEFT_A]})
        attempts = [Attempt("broken", Recency.ANY), Attempt("exa", Recency.MONTH)]
        outcome = await run_fallback_chain(
            "climate policy",
            Lean.LEFT,
            attempts,
            {"broken": FailingSearcher("broken"), "exa": exa},
            need=1,
        )
        assert outcome.articles == [LEFT_A]
        assert outcome.providers == ["exa"]


class TestProviderFailures:
    """A failing provider never fails the whole search."""

    async def test_fallback_exception_leaves_lean_empty(self):
        empty = FakeSearcher("empty")
        plan = SearchPlan(primary=Attempt("empty"), fallbacks=(Attempt("broken"),))
        orchestrator = Orchestrator({"empty": empty, "broken": FailingSearcher("broken")}, plan)

        result = await orchestrator.run("climate policy")

        for lean in (Lean.LEFT, Lean.CENTER, Lean.RIGHT):
            assert result.articles[lean] == []
            assert result.source_for(lean) == "none"
