"""Tests for the fact-check enricher."""

from unittest.mock import AsyncMock

import httpx
import pytest

from perspective_lens.data import Article, ClaimStatus, FactCheckClaim, Lean
from perspective_lens.factcheck import (
    FACTCHECK_API_URL,
    MAX_QUERY_LENGTH,
    GoogleFactChecker,
    aggregate_status,
    build_query,
    is_relevant,
    keywords,
    rating_to_status,
    unverified,
)

TOPIC = "tariffs on steel imports"
ARTICLE = Article(
    url="https://www.reuters.com/markets/steel-tariffs-2026-02-01/",
    title="White House raises steel tariffs",
    outlet="Reuters",
    snippet="The administration doubled steel tariffs on Monday. Markets fell.",
    lean=Lean.CENTER,
)


def _review(text: str, rating: str, url: str, title: str = "") -> dict:
    return {
        "text": text,
        "claimant": "Senator Example",
        "claimReview": [
            {
                "publisher": {"name": "PolitiFact"},
                "url": url,
                "title": title,
                "textualRating": rating,
            }
        ],
    }


def _response(json_data: object, status: int = 200) -> httpx.Response:
    return httpx.Response(status, json=json_data, request=httpx.Request("GET", FACTCHECK_API_URL))


class TestRatingToStatus:
    """Tests for rating_to_status()."""

    @pytest.mark.parametrize(
        "rating,expected",
        [
            ("True", ClaimStatus.VERIFIED),
            ("Mostly True", ClaimStatus.VERIFIED),
            ("Correct", ClaimStatus.VERIFIED),
            ("False", ClaimStatus.FALSE),
            ("Mostly False", ClaimStatus.FALSE),
            ("Pants on Fire", ClaimStatus.FALSE),
            ("Incorrect", ClaimStatus.FALSE),
            ("Half True", ClaimStatus.DISPUTED),
            ("Misleading", ClaimStatus.DISPUTED),
            ("Needs context", ClaimStatus.DISPUTED),
            ("", ClaimStatus.DISPUTED),
        ],
    )
    def test_mapping(self, rating: str, expected: ClaimStatus):
        assert rating_to_status(rating) == expected


class TestRelevance:
    """Tests for keywords() and is_relevant()."""

    def test_keywords_drop_stopwords_and_short_tokens(self):
        assert keywords("The new tariffs on steel, says report") == {"tariffs", "steel"}

    def test_requires_topic_keyword(self):
        """Headline words alone never admit a claim."""
        assert not is_relevant(
            "The White House raises taxes", "", TOPIC, ARTICLE.title
        )

    def test_requires_two_hits(self):
        assert not is_relevant("Steel is a metal", "", TOPIC, ARTICLE.title)
        assert is_relevant("Steel tariffs cost jobs", "", TOPIC, ARTICLE.title)

    def test_review_title_counts(self):
        assert is_relevant("Claim about trade", "Steel imports fell", TOPIC, ARTICLE.title)

    def test_headline_keyword_completes_match(self):
        assert is_relevant("White House cut steel output", "", TOPIC, ARTICLE.title)


class TestBuildQuery:
    """Tests for build_query()."""

    def test_topic_and_title(self):
        assert build_query(TOPIC, ARTICLE) == f"{TOPIC} {ARTICLE.title}"

    def test_summary_sentence_added(self):
        query = build_query(TOPIC, ARTICLE, include_summary=True)
        assert query.endswith("The administration doubled steel tariffs on Monday.")

    def test_truncated(self):
        assert len(build_query("x" * 500, ARTICLE)) == MAX_QUERY_LENGTH


class TestAggregateStatus:
    """Tests for aggregate_status()."""

    def _claims(self, *ratings: str) -> list[FactCheckClaim]:
        return [
            FactCheckClaim("c", "", rating, rating_to_status(rating), "s", "https://s")
            for rating in ratings
        ]

    def test_empty_is_unverified(self):
        assert aggregate_status([]) == ClaimStatus.UNVERIFIED

    @pytest.mark.parametrize(
        ("ratings", "expected"),
        [
            (("False",), ClaimStatus.FALSE),
            (("False", "Pants on Fire"), ClaimStatus.FALSE),
            (("Falso",), ClaimStatus.FALSE),
            (("Mostly False",), ClaimStatus.FALSE),
            (("True",), ClaimStatus.VERIFIED),
            (("Accurate", "Verdadeiro"), ClaimStatus.VERIFIED),
            (("Mostly True",), ClaimStatus.DISPUTED),
            (("Half True",), ClaimStatus.DISPUTED),
            (("True", "False"), ClaimStatus.DISPUTED),
            (("True", "Misleading"), ClaimStatus.DISPUTED),
            (("Needs context",), ClaimStatus.UNVERIFIED),
            (("Unknown",), ClaimStatus.UNVERIFIED),
        ],
    )
    def test_combines_ratings(self, ratings: tuple[str, ...], expected: ClaimStatus):
        assert aggregate_status(self._claims(*ratings)) == expected


class TestGoogleFactChecker:
    """Tests for GoogleFactChecker."""

    @pytest.fixture
    def checker(self) -> GoogleFactChecker:
        return GoogleFactChecker(api_key="test-key")

    def test_init_requires_api_key(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GOOGLE_FACT_CHECK_API_KEY", raising=False)
        with pytest.raises(ValueError, match="API key required"):
            GoogleFactChecker()

    async def test_enrich_filters_dedups_and_caps(
        self,
        checker: GoogleFactChecker,
        monkeypatch: pytest.MonkeyPatch,
    ):
        data = {
            "claims": [
                _review("Steel tariffs raise prices", "Mostly True", "https://p/1"),
                _review("Steel tariffs raise prices again", "True", "https://p/1"),
                _review("Vaccines cause autism", "False", "https://p/2"),
                _review("Steel imports doubled", "False", "https://p/3"),
                _review("Tariffs on steel were cut", "Half True", "https://p/4"),
                _review("Steel tariffs hurt farmers", "Mostly False", "https://p/5"),
            ]
        }
        mock_get = AsyncMock(return_value=_response(data))
        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        claims = await checker.enrich(ARTICLE, TOPIC)

        assert [c.source_url for c in claims] == ["https://p/1", "https://p/3", "https://p/4"]
        assert [c.status for c in claims] == [
            ClaimStatus.VERIFIED,
            ClaimStatus.FALSE,
            ClaimStatus.DISPUTED,
        ]
        assert claims[0].source == "PolitiFact"
        params = mock_get.call_args.kwargs["params"]
        assert params["key"] == "test-key"
        assert params["languageCode"] == "en"
        assert params["query"].startswith(TOPIC)

    async def test_enrich_all_isolates_failures(
        self,
        checker: GoogleFactChecker,
        monkeypatch: pytest.MonkeyPatch,
    ):
        other = Article(
            url="https://www.foxnews.com/politics/steel-tariff-fight",
            title="Steel tariff fight",
            outlet="Fox News",
            snippet="Snippet",
            lean=Lean.RIGHT,
        )
        data = {"claims": [_review("Steel tariffs raise prices", "True", "https://p/1")]}

        async def mock_get(self, url, params=None, **kwargs):
            if "Fox" in params["query"] or "fight" in params["query"]:
                return _response({"error": "quota"}, status=429)
            return _response(data)

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        claims_by_url, usage = await checker.enrich_all([ARTICLE, other], TOPIC)

        assert len(claims_by_url[ARTICLE.url]) == 1
        assert claims_by_url[other.url] == []
        assert usage.factcheck_requests == 1

    async def test_enrich_all_empty(self, checker: GoogleFactChecker):
        claims_by_url, usage = await checker.enrich_all([], TOPIC)
        assert claims_by_url == {}
        assert usage.factcheck_requests == 0

    async def test_verify_claims(
        self,
        checker: GoogleFactChecker,
        monkeypatch: pytest.MonkeyPatch,
    ):
        async def mock_get(self, url, params=None, **kwargs):
            if params["query"].startswith("The moon"):
                return _response({"claims": [_review("The moon is cheese", "False", "https://p/9")]})
            if params["query"].startswith("Nothing"):
                return _response({})
            raise httpx.ConnectError("down")

        monkeypatch.setattr(httpx.AsyncClient, "get", mock_get)

        results, usage = await checker.verify_claims(
            ["The moon is made of cheese", "Nothing to see", "Broken lookup"]
        )

        assert results[0].status == ClaimStatus.FALSE
        assert results[0].source == "PolitiFact"
        assert results[0].source_url == "https://p/9"
        assert not results[0].verified
        assert results[1].status == ClaimStatus.UNVERIFIED
        assert results[1].fact_checks == ()
        assert results[2].status == ClaimStatus.UNVERIFIED
        assert results[2].original_claim == "Broken lookup"
        assert usage.factcheck_requests == 2


def test_unverified() -> None:
    results = unverified(["a", "b"])
    assert [r.original_claim for r in results] == ["a", "b"]
    assert all(r.status == ClaimStatus.UNVERIFIED for r in results)
