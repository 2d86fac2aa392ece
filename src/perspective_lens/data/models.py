"""Core data models for perspective-lens."""

from dataclasses import dataclass, field
from enum import StrEnum


class Lean(StrEnum):
    """Editorial lean bucket assigned to an outlet by the curated allow-lists."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


LEANS: tuple[Lean, ...] = (Lean.LEFT, Lean.CENTER, Lean.RIGHT)


class Recency(StrEnum):
    """Recency window for a provider query. ``ANY`` means unconstrained."""

    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ANY = "any"


class ClaimStatus(StrEnum):
    """Tri-state fact-check verdict, plus ``unverified`` when no review exists."""

    VERIFIED = "verified"
    DISPUTED = "disputed"
    FALSE = "false"
    UNVERIFIED = "unverified"


@dataclass(frozen=True)
class Article:
    """A news article found by a provider and bucketed by the classifier.

    Identity is the normalized URL. ``lean`` always comes from the outlet
    table, never from the provider.
    """

    url: str
    title: str
    outlet: str
    snippet: str
    lean: Lean
    published_at: str | None = None
    provider: str = ""


@dataclass(frozen=True)
class FactCheckClaim:
    """A third-party review of a claim, attached to an article."""

    claim_text: str
    claimant: str
    rating: str
    status: ClaimStatus
    source: str
    source_url: str
    review_title: str = ""


@dataclass(frozen=True)
class ClaimVerification:
    """Result of checking a free-standing claim against fact-check reviews."""

    original_claim: str
    status: ClaimStatus = ClaimStatus.UNVERIFIED
    fact_checks: tuple[FactCheckClaim, ...] = ()
    source: str | None = None
    source_url: str | None = None

    @property
    def verified(self) -> bool:
        return self.status == ClaimStatus.VERIFIED


@dataclass(frozen=True)
class TopicMetadata:
    """Cosmetic framing for a topic. Carries no article-derived fields."""

    title: str
    description: str
    tags: tuple[str, str, str]


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single LLM call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    web_searches: int = 0


@dataclass
class Usage:
    """Accumulated API usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    brave_requests: int = 0
    firecrawl_requests: int = 0
    exa_requests: int = 0
    vertex_requests: int = 0
    factcheck_requests: int = 0
    perplexity_requests: int = 0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    @property
    def web_searches(self) -> int:
        return sum(c.web_searches for c in self.api_calls)

    @property
    def provider_requests(self) -> int:
        return (
            self.brave_requests
            + self.firecrawl_requests
            + self.exa_requests
            + self.vertex_requests
            + self.factcheck_requests
            + self.perplexity_requests
        )

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            brave_requests=self.brave_requests + other.brave_requests,
            firecrawl_requests=self.firecrawl_requests + other.firecrawl_requests,
            exa_requests=self.exa_requests + other.exa_requests,
            vertex_requests=self.vertex_requests + other.vertex_requests,
            factcheck_requests=self.factcheck_requests + other.factcheck_requests,
            perplexity_requests=self.perplexity_requests + other.perplexity_requests,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.brave_requests += other.brave_requests
        self.firecrawl_requests += other.firecrawl_requests
        self.exa_requests += other.exa_requests
        self.vertex_requests += other.vertex_requests
        self.factcheck_requests += other.factcheck_requests
        self.perplexity_requests += other.perplexity_requests
        return self


@dataclass
class SearchResult:
    """Per-request search outcome, grouped by lean.

    ``sources`` records which providers contributed to each lean, in the
    order they were used.
    """

    articles: dict[Lean, list[Article]] = field(
        default_factory=lambda: {lean: [] for lean in LEANS}
    )
    sources: dict[Lean, list[str]] = field(default_factory=lambda: {lean: [] for lean in LEANS})
    usage: Usage = field(default_factory=Usage)

    def missing_leans(self, need: int = 1) -> list[Lean]:
        return [lean for lean in LEANS if len(self.articles.get(lean, [])) < need]

    def all_articles(self) -> list[Article]:
        return [a for lean in LEANS for a in self.articles.get(lean, [])]

    def source_for(self, lean: Lean) -> str:
        names = self.sources.get(lean) or []
        return "+".join(names) if names else "none"
