"""Trending news topics from Perplexity."""

import json
import logging
import os
import re

import httpx

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"

FALLBACK_TOPICS: tuple[str, ...] = (
    "Breaking News",
    "Politics",
    "Technology",
    "Economy",
    "Climate",
)
MAX_TOPICS = 5

PROMPT = """\
List the 5 most important trending news topics in the United States right \
now. Each topic must be a short label of 2 to 4 words suitable for a news \
search, for example "Federal Reserve Rates". Respond with ONLY a JSON array \
of strings.\
"""

_ARRAY_RE = re.compile(r"\[.*?\]", re.DOTALL)

logger = logging.getLogger(__name__)


def parse_topics(content: str) -> list[str]:
    """Pull the first JSON array of strings out of a model reply."""
    match = _ARRAY_RE.search(content)
    if not match:
        return []
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, list):
        return []
    topics = [t.strip() for t in parsed if isinstance(t, str) and t.strip()]
    return topics[:MAX_TOPICS]


class PerplexityTrendingTopics:
    """Fetch short trending-topic labels.

    ``fetch`` never raises. Any failure, including a missing key, yields
    ``FALLBACK_TOPICS``.

    Args:
        api_key: API key (defaults to PERPLEXITY_API_KEY env var).
        model: Perplexity model name.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "sonar",
        timeout: float = 20.0,
    ) -> None:
        self._api_key = api_key or os.environ.get("PERPLEXITY_API_KEY")
        self._model = model
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def fetch(self) -> list[str]:
        if not self._api_key:
            logger.info("PERPLEXITY_API_KEY not set, using fallback topics")
            return list(FALLBACK_TOPICS)

        body = {
            "model": self._model,
            "messages": [{"role": "user", "content": PROMPT}],
            "temperature": 0.3,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(PERPLEXITY_API_URL, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"Perplexity request failed: {e}")
            return list(FALLBACK_TOPICS)

        if response.status_code >= 400:
            logger.warning(f"Perplexity error {response.status_code}: {response.text[:300]}")
            return list(FALLBACK_TOPICS)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected Perplexity response shape: {e}")
            return list(FALLBACK_TOPICS)

        topics = parse_topics(content if isinstance(content, str) else "")
        if not topics:
            logger.warning("Could not parse trending topics, using fallback")
            return list(FALLBACK_TOPICS)

        logger.info(f"Trending topics: {', '.join(topics)}")
        return topics
