"""Request and response bodies for the HTTP API (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from perspective_lens.assembler import PerspectiveView
from perspective_lens.data import Article, ClaimVerification, FactCheckClaim, TopicMetadata


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ============================================================
# Requests
# ============================================================


class TopicRequest(BaseModel):
    topic: str | None = None


class ClaimsRequest(BaseModel):
    claims: list[str] | None = None


# ============================================================
# Responses
# ============================================================


class ArticleOut(CamelModel):
    url: str
    title: str
    outlet: str
    snippet: str
    lean: str
    published_at: str | None = None
    provider: str = ""

    @classmethod
    def from_article(cls, article: Article) -> "ArticleOut":
        return cls(
            url=article.url,
            title=article.title,
            outlet=article.outlet,
            snippet=article.snippet,
            lean=article.lean.value,
            published_at=article.published_at,
            provider=article.provider,
        )


class FactCheckOut(CamelModel):
    claim_text: str
    claimant: str
    rating: str
    status: str
    source: str
    source_url: str
    review_title: str = ""

    @classmethod
    def from_claim(cls, claim: FactCheckClaim) -> "FactCheckOut":
        return cls(
            claim_text=claim.claim_text,
            claimant=claim.claimant,
            rating=claim.rating,
            status=claim.status.value,
            source=claim.source,
            source_url=claim.source_url,
            review_title=claim.review_title,
        )


class PerspectiveOut(CamelModel):
    perspective: str
    label: str
    outlet: str
    headline: str
    summary: str
    time_ago: str
    article_url: str
    fact_checks: list[FactCheckOut]
    articles: list[ArticleOut]

    @classmethod
    def from_view(cls, view: PerspectiveView) -> "PerspectiveOut":
        return cls(
            perspective=view.perspective.value,
            label=view.label,
            outlet=view.outlet,
            headline=view.headline,
            summary=view.summary,
            time_ago=view.time_ago,
            article_url=view.article_url,
            fact_checks=[FactCheckOut.from_claim(c) for c in view.fact_checks],
            articles=[ArticleOut.from_article(a) for a in view.articles],
        )


class TopicOut(CamelModel):
    title: str
    description: str
    tags: list[str]

    @classmethod
    def from_metadata(cls, metadata: TopicMetadata) -> "TopicOut":
        return cls(title=metadata.title, description=metadata.description, tags=list(metadata.tags))


class PerspectivesData(CamelModel):
    topic: TopicOut
    perspectives: list[PerspectiveOut]


class SearchPerspectivesResponse(CamelModel):
    success: bool
    data: PerspectivesData | None = None
    error: str | None = None


class LeanSearchResponse(CamelModel):
    success: bool
    articles: list[ArticleOut]
    source: str


class ClaimVerificationOut(CamelModel):
    original_claim: str
    verified: bool
    status: str
    fact_checks: list[FactCheckOut]
    source: str | None = None
    source_url: str | None = None

    @classmethod
    def from_verification(cls, v: ClaimVerification) -> "ClaimVerificationOut":
        return cls(
            original_claim=v.original_claim,
            verified=v.verified,
            status=v.status.value,
            fact_checks=[FactCheckOut.from_claim(c) for c in v.fact_checks],
            source=v.source,
            source_url=v.source_url,
        )


class FactCheckResponse(CamelModel):
    success: bool
    data: list[ClaimVerificationOut]


class TrendingResponse(CamelModel):
    success: bool
    topics: list[str]


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
