"""Fact-check enrichment via the Google Fact Check Tools claim search API."""

import asyncio
import logging
import os
import re
from typing import Any

import httpx

from perspective_lens.data import (
    Article,
    ClaimStatus,
    ClaimVerification,
    FactCheckClaim,
    Usage,
)
from perspective_lens.text import split_sentences

FACTCHECK_API_URL = "https://factchecktools.googleapis.com/v1alpha1/claims:search"

MAX_QUERY_LENGTH = 200
MAX_CLAIMS_PER_ARTICLE = 3
MIN_KEYWORD_LENGTH = 4
MIN_KEYWORD_HITS = 2

STOPWORDS = frozenset(
    """
    about above after again against also among been before being below between
    both could does doing down during each from further have having here into
    just more most much must news only other over said same says should some
    such than that their them then there these they this those through under
    until very were what when where which while will with would your year years
    today week report reports latest update updates new
    """.split()
)

# Checked in order: a false marker wins over a mixed marker, which wins over
# a true marker ("Half True" is disputed, "Mostly False" is false).
_FALSE_MARKERS = ("false", "wrong", "incorrect", "pants on fire")
_MIXED_MARKERS = ("mixed", "partly", "misleading", "half")
_TRUE_MARKERS = ("true", "correct", "accurate")

# Claim-level verdicts look at every review at once; "mostly" marks a
# qualified rating and the Portuguese ratings are recognized.
_CLAIM_TRUE_MARKERS = (*_TRUE_MARKERS, "verdadeiro")
_CLAIM_FALSE_MARKERS = (*_FALSE_MARKERS, "falso")
_CLAIM_MIXED_MARKERS = (*_MIXED_MARKERS, "mostly")

_TOKEN_RE = re.compile(r"[a-z0-9]+")

logger = logging.getLogger(__name__)


def keywords(text: str) -> set[str]:
    """Lowercase alphanumeric tokens of 4+ characters, minus stopwords."""
    return {
        token
        for token in _TOKEN_RE.findall(text.lower())
        if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS
    }


def is_relevant(claim_text: str, review_title: str, topic: str, headline: str) -> bool:
    """Keyword-overlap gate between a claim and the article it would annotate.

    At least one topic keyword must literally appear in the claim text or
    review title, and at least two distinct topic/headline keywords must hit
    in total.
    """
    haystack = f"{claim_text} {review_title}".lower()
    topic_words = keywords(topic)
    headline_words = keywords(headline) - topic_words
    topic_hits = sum(1 for word in topic_words if word in haystack)
    if topic_hits < 1:
        return False
    headline_hits = sum(1 for word in headline_words if word in haystack)
    return topic_hits + headline_hits >= MIN_KEYWORD_HITS


def rating_to_status(rating: str) -> ClaimStatus:
    """Map a free-text review rating onto the tri-state verdict.

    Unrecognized ratings are disputed, never verified.
    """
    text = rating.lower()
    if any(marker in text for marker in _FALSE_MARKERS):
        return ClaimStatus.FALSE
    if any(marker in text for marker in _MIXED_MARKERS):
        return ClaimStatus.DISPUTED
    if any(marker in text for marker in _TRUE_MARKERS):
        return ClaimStatus.VERIFIED
    return ClaimStatus.DISPUTED


def build_query(topic: str, article: Article, *, include_summary: bool = False) -> str:
    parts = [topic.strip(), article.title.strip()]
    if include_summary and article.snippet and article.snippet != article.title:
        sentences = split_sentences(article.snippet)
        if sentences:
            parts.append(sentences[0])
    return " ".join(p for p in parts if p)[:MAX_QUERY_LENGTH]


def _review_claims(data: dict[str, Any]) -> list[FactCheckClaim]:
    """Flatten the API's claim/claimReview envelope into one row per review."""
    rows: list[FactCheckClaim] = []
    for claim in data.get("claims") or []:
        for review in claim.get("claimReview") or []:
            rating = review.get("textualRating") or "Unknown"
            rows.append(
                FactCheckClaim(
                    claim_text=claim.get("text") or "",
                    claimant=claim.get("claimant") or "",
                    rating=rating,
                    status=rating_to_status(rating),
                    source=(review.get("publisher") or {}).get("name") or "Unknown",
                    source_url=review.get("url") or "",
                    review_title=review.get("title") or "",
                )
            )
    return rows


def aggregate_status(claims: list[FactCheckClaim]) -> ClaimStatus:
    """Overall verdict for a free-standing claim from all of its review ratings.

    Any false rating without a true one makes the claim false. True ratings
    verify it only when nothing false or mixed was seen; conflicting or mixed
    ratings dispute it. Ratings matching no marker leave it unverified.
    """
    ratings = [c.rating.lower() for c in claims]
    has_true = any(m in r for r in ratings for m in _CLAIM_TRUE_MARKERS)
    has_false = any(m in r for r in ratings for m in _CLAIM_FALSE_MARKERS)
    has_mixed = any(m in r for r in ratings for m in _CLAIM_MIXED_MARKERS)
    if has_false and not has_true:
        return ClaimStatus.FALSE
    if has_true and not has_false and not has_mixed:
        return ClaimStatus.VERIFIED
    if has_mixed or (has_true and has_false):
        return ClaimStatus.DISPUTED
    return ClaimStatus.UNVERIFIED


class GoogleFactChecker:
    """Look up third-party fact-checks for articles and free-standing claims.

    Args:
        api_key: API key (defaults to GOOGLE_FACT_CHECK_API_KEY env var).
        include_summary_sentence: Add the article's first snippet sentence to
            the lookup query.
        max_claims: Cap on claims attached per article.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        include_summary_sentence: bool = False,
        max_claims: int = MAX_CLAIMS_PER_ARTICLE,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("GOOGLE_FACT_CHECK_API_KEY")
        if not self._api_key:
            raise ValueError(
                "Fact check API key required. "
                "Pass api_key or set GOOGLE_FACT_CHECK_API_KEY env var."
            )
        self._include_summary = include_summary_sentence
        self._max_claims = max_claims
        self._timeout = timeout

    async def _query(self, client: httpx.AsyncClient, query: str) -> dict[str, Any]:
        params = {"query": query, "key": self._api_key, "languageCode": "en"}
        response = await client.get(FACTCHECK_API_URL, params=params)
        response.raise_for_status()
        return response.json()

    async def enrich(
        self,
        article: Article,
        topic: str,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> list[FactCheckClaim]:
        """Find up to ``max_claims`` relevant fact-checks for one article.

        Raises:
            httpx.HTTPError: If the lookup fails.
        """
        query = build_query(topic, article, include_summary=self._include_summary)
        if client is None:
            async with httpx.AsyncClient(timeout=self._timeout) as own_client:
                data = await self._query(own_client, query)
        else:
            data = await self._query(client, query)

        seen_urls: set[str] = set()
        attached: list[FactCheckClaim] = []
        for claim in _review_claims(data):
            if claim.source_url and claim.source_url in seen_urls:
                continue
            seen_urls.add(claim.source_url)
            if not is_relevant(claim.claim_text, claim.review_title, topic, article.title):
                continue
            attached.append(claim)
            if len(attached) >= self._max_claims:
                break
        return attached

    async def enrich_all(
        self, articles: list[Article], topic: str
    ) -> tuple[dict[str, list[FactCheckClaim]], Usage]:
        """Enrich every article concurrently.

        A failed lookup yields an empty list for that article only.

        Returns:
            Tuple of (claims keyed by article URL, usage).
        """
        if not articles:
            return ({}, Usage())

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            tasks = [self.enrich(article, topic, client=client) for article in articles]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        claims_by_url: dict[str, list[FactCheckClaim]] = {}
        successful = 0
        for article, result in zip(articles, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Fact check failed for {article.url}. Error: {result}")
                claims_by_url[article.url] = []
                continue
            successful += 1
            claims_by_url[article.url] = result

        attached = sum(len(c) for c in claims_by_url.values())
        logger.info(f"Attached {attached} fact checks across {len(articles)} articles")
        return (claims_by_url, Usage(factcheck_requests=successful))

    async def verify_claims(self, claims: list[str]) -> tuple[list[ClaimVerification], Usage]:
        """Look up reviews for free-standing claim texts."""
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            tasks = [self._query(client, claim[:MAX_QUERY_LENGTH]) for claim in claims]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        verifications: list[ClaimVerification] = []
        successful = 0
        for claim, result in zip(claims, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(f"Error fact-checking claim {claim!r}: {result}")
                verifications.append(ClaimVerification(original_claim=claim))
                continue
            successful += 1
            reviews = _review_claims(result)[: self._max_claims]
            first = reviews[0] if reviews else None
            verifications.append(
                ClaimVerification(
                    original_claim=claim,
                    status=aggregate_status(reviews),
                    fact_checks=tuple(reviews),
                    source=first.source if first else None,
                    source_url=first.source_url if first else None,
                )
            )
        return (verifications, Usage(factcheck_requests=successful))


def unverified(claims: list[str]) -> list[ClaimVerification]:
    """Verdicts for when no fact-check provider is configured."""
    return [ClaimVerification(original_claim=claim) for claim in claims]
