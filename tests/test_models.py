"""Tests for data models and usage accounting."""

import dataclasses

import pytest

from perspective_lens.data import (
    LEANS,
    APICallUsage,
    Article,
    ClaimStatus,
    ClaimVerification,
    Lean,
    SearchResult,
    Usage,
)


def _article(url: str = "https://www.cnn.com/2026/01/01/politics/story", lean: Lean = Lean.LEFT):
    return Article(url=url, title="T", outlet="CNN", snippet="S", lean=lean)


def test_leans_order() -> None:
    assert LEANS == (Lean.LEFT, Lean.CENTER, Lean.RIGHT)
    assert [str(lean) for lean in LEANS] == ["left", "center", "right"]


def test_article_is_frozen() -> None:
    article = _article()
    with pytest.raises(dataclasses.FrozenInstanceError):
        article.url = "https://example.com"  # type: ignore[misc]


def test_article_defaults() -> None:
    article = _article()
    assert article.published_at is None
    assert article.provider == ""


def test_claim_verification_defaults_to_unverified() -> None:
    verification = ClaimVerification(original_claim="The moon is cheese")
    assert verification.status == ClaimStatus.UNVERIFIED
    assert verification.verified is False
    assert verification.fact_checks == ()
    assert verification.source is None


def test_claim_verification_verified_flag() -> None:
    verification = ClaimVerification(original_claim="x", status=ClaimStatus.VERIFIED)
    assert verification.verified is True


# -- Usage --


def test_usage_empty() -> None:
    usage = Usage()
    assert usage.input_tokens == 0
    assert usage.output_tokens == 0
    assert usage.web_searches == 0
    assert usage.provider_requests == 0


def test_usage_computed_properties() -> None:
    usage = Usage(
        api_calls=[
            APICallUsage(model="m1", input_tokens=100, output_tokens=50, web_searches=1),
            APICallUsage(model="m2", input_tokens=200, output_tokens=25, web_searches=2),
        ],
        brave_requests=3,
        factcheck_requests=2,
    )
    assert usage.input_tokens == 300
    assert usage.output_tokens == 75
    assert usage.web_searches == 3
    assert usage.provider_requests == 5


def test_usage_add_returns_new_object() -> None:
    a = Usage(api_calls=[APICallUsage(model="m", input_tokens=1)], brave_requests=1)
    b = Usage(exa_requests=2, perplexity_requests=1)
    c = a + b
    assert c is not a
    assert c.brave_requests == 1
    assert c.exa_requests == 2
    assert c.perplexity_requests == 1
    assert len(c.api_calls) == 1
    assert a.exa_requests == 0


def test_usage_iadd_mutates_in_place() -> None:
    usage = Usage()
    original = usage
    usage += Usage(firecrawl_requests=2, vertex_requests=1)
    assert usage is original
    assert usage.firecrawl_requests == 2
    assert usage.vertex_requests == 1


# -- SearchResult --


def test_search_result_starts_with_all_leans_empty() -> None:
    result = SearchResult()
    assert set(result.articles) == set(LEANS)
    assert result.missing_leans() == list(LEANS)
    assert result.all_articles() == []


def test_search_result_missing_leans_respects_need() -> None:
    result = SearchResult()
    result.articles[Lean.LEFT].append(_article())
    assert result.missing_leans() == [Lean.CENTER, Lean.RIGHT]
    assert result.missing_leans(need=2) == list(LEANS)


def test_search_result_all_articles_in_lean_order() -> None:
    result = SearchResult()
    right = _article("https://www.foxnews.com/politics/some-long-story", Lean.RIGHT)
    left = _article()
    result.articles[Lean.RIGHT].append(right)
    result.articles[Lean.LEFT].append(left)
    assert result.all_articles() == [left, right]


def test_search_result_source_for() -> None:
    result = SearchResult()
    assert result.source_for(Lean.CENTER) == "none"
    result.sources[Lean.CENTER].extend(["brave", "exa"])
    assert result.source_for(Lean.CENTER) == "brave+exa"
