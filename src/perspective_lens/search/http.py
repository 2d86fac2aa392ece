"""Shared HTTP helper for provider adapters."""

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3
BACKOFF_SECONDS = 0.3


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff: float = BACKOFF_SECONDS,
    **kwargs: Any,
) -> httpx.Response:
    """Issue a request, retrying transient connection failures.

    Only transport-level errors are retried, with a fixed ``backoff * attempt``
    sleep between tries. HTTP error statuses are returned to the caller as-is.

    Raises:
        httpx.TransportError: If every attempt failed to connect.
    """
    last_error: httpx.TransportError | None = None
    for attempt in range(1, attempts + 1):
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            last_error = e
            logger.debug(f"{method} {url} attempt {attempt}/{attempts} failed: {e}")
            if attempt < attempts:
                await asyncio.sleep(backoff * attempt)
    assert last_error is not None
    raise last_error
