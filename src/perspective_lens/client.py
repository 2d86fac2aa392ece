"""Async HTTP client for the perspectives service, with retry helpers."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from perspective_lens.data import Lean

T = TypeVar("T")

NON_RETRYABLE_MESSAGES = ("Topic is required", "Invalid request")

_NETWORK_MARKERS = ("failed to fetch", "network", "timeout", "timed out", "cors", "connect")

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    """The service answered with ``success: false``.

    Attributes:
        error: The server's error string.
        status_code: HTTP status of the response.
    """

    def __init__(self, error: str, status_code: int = 200) -> None:
        super().__init__(error)
        self.error = error
        self.status_code = status_code


def is_non_retryable(exc: BaseException) -> bool:
    return any(msg in str(exc) for msg in NON_RETRYABLE_MESSAGES)


def is_network_error(exc: BaseException) -> bool:
    """Whether a failure looks like connectivity rather than a server answer."""
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError)):
        return True
    if isinstance(exc, ServiceError):
        return False
    message = str(exc).lower()
    return any(marker in message for marker in _NETWORK_MARKERS)


def describe_error(exc: BaseException) -> str:
    """User-facing wording, separating connectivity problems from search failures."""
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return "The request timed out. The server might be busy. Please try again in a moment."
    if is_network_error(exc):
        message = str(exc).lower()
        if "cors" in message:
            return "Connection blocked by browser security. Please try refreshing the page."
        if "timeout" in message or "timed out" in message:
            return "The request timed out. The server might be busy. Please try again in a moment."
        return (
            "Unable to reach the server. This could be due to network issues or a "
            "firewall blocking the connection. Please try again."
        )
    if isinstance(exc, ServiceError) and exc.error:
        return exc.error
    return "Search failed. Please try again."


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 10.0,
    on_retry: Callable[[int, BaseException], None] | None = None,
) -> T:
    """Call ``fn`` until it succeeds, backing off exponentially.

    Up to ``max_retries`` retries follow the first call, sleeping
    ``min(base_delay * 2**attempt, max_delay)`` seconds between them.
    Validation errors listed in ``NON_RETRYABLE_MESSAGES`` are raised at once.

    Raises:
        Exception: The last error once retries are exhausted.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn()
        except Exception as e:
            if is_non_retryable(e) or attempt >= max_retries:
                raise
            delay = min(base_delay * (2**attempt), max_delay)
            if on_retry is not None:
                on_retry(attempt + 1, e)
            logger.info(f"Retry {attempt + 1}/{max_retries} in {delay:.1f}s after error: {e}")
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")


class PerspectivesClient:
    """Thin async client for the perspectives HTTP API.

    Args:
        base_url: Service root, e.g. ``http://localhost:8000``.
        timeout: Request timeout in seconds.
        headers: Extra headers sent with every request.
        transport: Optional httpx transport (used in tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = headers or {}
        self._transport = transport

    async def _call(self, method: str, path: str, body: dict[str, Any] | None = None) -> dict:
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self._headers,
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, json=body)
        try:
            payload = response.json()
        except ValueError as e:
            raise ServiceError(
                f"Invalid response from server ({response.status_code})", response.status_code
            ) from e
        if not payload.get("success"):
            raise ServiceError(payload.get("error") or "Search failed", response.status_code)
        return payload

    async def search_perspectives(self, topic: str, *, retry: bool = False) -> dict[str, Any]:
        """Return the ``data`` object: ``{"topic": ..., "perspectives": [...]}``."""

        async def call() -> dict[str, Any]:
            payload = await self._call("POST", "/search-perspectives", {"topic": topic})
            return payload["data"]

        return await with_retry(call) if retry else await call()

    async def search_lean(self, lean: Lean, topic: str) -> tuple[list[dict[str, Any]], str]:
        payload = await self._call("POST", f"/search-{lean}", {"topic": topic})
        return (payload.get("articles") or [], payload.get("source") or "none")

    async def fact_check(self, claims: list[str]) -> list[dict[str, Any]]:
        payload = await self._call("POST", "/fact-check", {"claims": claims})
        return payload.get("data") or []

    async def trending_topics(self) -> list[str]:
        payload = await self._call("GET", "/trending-topics")
        return payload.get("topics") or []
