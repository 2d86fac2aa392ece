"""Tests for the perspectives HTTP client and retry helpers."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from perspective_lens.client import (
    PerspectivesClient,
    ServiceError,
    describe_error,
    is_network_error,
    is_non_retryable,
    with_retry,
)
from perspective_lens.data import Lean


@pytest.fixture
def sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock()
    monkeypatch.setattr("perspective_lens.client.asyncio.sleep", mock)
    return mock


class TestWithRetry:
    """Tests for with_retry()."""

    async def test_backoff_schedule(self, sleep: AsyncMock):
        """Delays double per attempt and are capped at max_delay."""
        fn = AsyncMock(side_effect=[RuntimeError("boom")] * 4 + ["ok"])

        result = await with_retry(fn, max_retries=4, base_delay=3.0, max_delay=10.0)

        assert result == "ok"
        assert fn.await_count == 5
        assert [c.args[0] for c in sleep.await_args_list] == [3.0, 6.0, 10.0, 10.0]

    async def test_gives_up_after_max_retries(self, sleep: AsyncMock):
        fn = AsyncMock(side_effect=RuntimeError("still down"))
        with pytest.raises(RuntimeError, match="still down"):
            await with_retry(fn, max_retries=3)
        assert fn.await_count == 4
        assert sleep.await_count == 3

    async def test_non_retryable_raises_immediately(self, sleep: AsyncMock):
        fn = AsyncMock(side_effect=ServiceError("Topic is required", 400))
        with pytest.raises(ServiceError):
            await with_retry(fn)
        assert fn.await_count == 1
        sleep.assert_not_called()

    async def test_on_retry_callback(self, sleep: AsyncMock):
        seen: list[int] = []
        fn = AsyncMock(side_effect=[RuntimeError("x"), "ok"])
        await with_retry(fn, on_retry=lambda attempt, e: seen.append(attempt))
        assert seen == [1]


class TestErrorClassification:
    """Tests for is_non_retryable(), is_network_error() and describe_error()."""

    def test_non_retryable(self):
        assert is_non_retryable(ServiceError("Invalid request"))
        assert not is_non_retryable(RuntimeError("500"))

    def test_network_errors(self):
        assert is_network_error(httpx.ConnectError("refused"))
        assert is_network_error(RuntimeError("Failed to fetch"))
        assert not is_network_error(ServiceError("network provider failed"))

    def test_describe_timeout(self):
        assert describe_error(httpx.ReadTimeout("slow")).startswith("The request timed out")

    def test_describe_cors(self):
        assert describe_error(RuntimeError("CORS error")).startswith("Connection blocked")

    def test_describe_unreachable(self):
        assert describe_error(httpx.ConnectError("refused")).startswith("Unable to reach")

    def test_describe_server_error(self):
        assert describe_error(ServiceError("AI service not configured", 500)) == (
            "AI service not configured"
        )

    def test_describe_unknown(self):
        assert describe_error(ValueError("")) == "Search failed. Please try again."


def _transport(routes: dict[str, tuple[int, object]]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        status, body = routes[request.url.path]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)


class TestPerspectivesClient:
    """Tests for PerspectivesClient."""

    async def test_search_perspectives_returns_data(self):
        data = {"topic": {"title": "T"}, "perspectives": []}
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "data": data})

        client = PerspectivesClient("http://svc/", transport=httpx.MockTransport(handler))
        assert await client.search_perspectives("climate policy") == data
        assert captured == [{"topic": "climate policy"}]

    async def test_error_payload_raises_service_error(self):
        transport = _transport(
            {"/search-perspectives": (500, {"success": False, "error": "AI service not configured"})}
        )
        client = PerspectivesClient("http://svc", transport=transport)

        with pytest.raises(ServiceError) as exc_info:
            await client.search_perspectives("climate policy")
        assert exc_info.value.error == "AI service not configured"
        assert exc_info.value.status_code == 500

    async def test_no_results_is_service_error(self):
        transport = _transport(
            {"/search-perspectives": (200, {"success": False, "error": "No verified articles"})}
        )
        client = PerspectivesClient("http://svc", transport=transport)
        with pytest.raises(ServiceError, match="No verified articles"):
            await client.search_perspectives("zzqx")

    async def test_non_json_response(self):
        client = PerspectivesClient(
            "http://svc", transport=_transport({"/trending-topics": (502, "Bad Gateway")})
        )
        with pytest.raises(ServiceError, match="Invalid response"):
            await client.trending_topics()

    async def test_search_lean(self):
        articles = [{"url": "https://www.cnn.com/x", "outlet": "CNN"}]
        transport = _transport(
            {"/search-left": (200, {"success": True, "articles": articles, "source": "exa"})}
        )
        client = PerspectivesClient("http://svc", transport=transport)
        assert await client.search_lean(Lean.LEFT, "climate policy") == (articles, "exa")

    async def test_fact_check_and_trending(self):
        transport = _transport(
            {
                "/fact-check": (200, {"success": True, "data": [{"originalClaim": "c"}]}),
                "/trending-topics": (200, {"success": True, "topics": ["Politics"]}),
            }
        )
        client = PerspectivesClient("http://svc", transport=transport)
        assert await client.fact_check(["c"]) == [{"originalClaim": "c"}]
        assert await client.trending_topics() == ["Politics"]

    async def test_retry_recovers_from_transient_failure(self, sleep: AsyncMock):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"success": True, "data": {"perspectives": []}})

        client = PerspectivesClient("http://svc", transport=httpx.MockTransport(handler))
        assert await client.search_perspectives("t", retry=True) == {"perspectives": []}
        assert calls["n"] == 2
        sleep.assert_awaited_once_with(1.0)
