import json
import logging
import os
import re

import anthropic
from anthropic.types import TextBlock
from pydantic import BaseModel, ValidationError, field_validator

from perspective_lens.data import APICallUsage, TopicMetadata, Usage

logger = logging.getLogger(__name__)

DEFAULT_TAGS = ("News", "Politics", "Analysis")

SYSTEM_PROMPT = """\
You write short, neutral framing for a news topic that will be shown above \
coverage from left, center and right leaning outlets.

Given a topic, respond with a JSON object with exactly these keys:
- "title": a brief topic title (at most 8 words)
- "description": one neutral sentence describing the topic
- "tags": an array of exactly 3 short category tags

Do not mention any outlet, headline or URL. Return ONLY the JSON object, no \
other text.\
"""

_TOKEN_RE = re.compile(r"[A-Za-z0-9]+")
_SMALL_WORDS = frozenset({"a", "an", "and", "the", "of", "in", "on", "for", "to", "or", "vs"})


class MetadataParseError(ValueError):
    """The model's reply could not be parsed into topic metadata."""


class _TopicPayload(BaseModel):
    title: str
    description: str
    tags: list[str]

    @field_validator("title", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if isinstance(t, str) and t.strip()]


def _three_tags(tags: list[str]) -> tuple[str, str, str]:
    picked: list[str] = []
    for tag in [*tags, *DEFAULT_TAGS]:
        if tag.lower() not in {p.lower() for p in picked}:
            picked.append(tag)
        if len(picked) == 3:
            break
    return (picked[0], picked[1], picked[2])


def default_topic_metadata(topic: str) -> TopicMetadata:
    """Deterministic framing built from the raw topic string."""
    words = _TOKEN_RE.findall(topic)
    title = " ".join(
        w if w.isupper() or (i and w.lower() in _SMALL_WORDS) else w.capitalize()
        for i, w in enumerate(words)
    )
    keywords = [w.capitalize() for w in words if len(w) >= 4 and w.lower() not in _SMALL_WORDS]
    return TopicMetadata(
        title=title or topic.strip(),
        description=f"How outlets across the political spectrum are covering {topic.strip()}.",
        tags=_three_tags(keywords),
    )


def parse_topic_metadata(raw: str) -> TopicMetadata:
    """Parse the model's JSON reply.

    Raises:
        MetadataParseError: If the reply is not a valid metadata object.
    """
    text = raw.strip()
    # Strip markdown code fences if present
    if text.startswith("```"):
        text = text.split("\n", 1)[1].rsplit("```", 1)[0] if "\n" in text else ""
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        text = match.group(0)
    try:
        payload = _TopicPayload.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        raise MetadataParseError(f"Failed to parse response: {e}") from e
    return TopicMetadata(
        title=payload.title,
        description=payload.description,
        tags=_three_tags(payload.tags),
    )


class ClaudeTopicDescriber:
    """Generate a title, description and tags for a topic using Claude.

    The output is decorative. It never sees or changes article fields.

    Args:
        model: Anthropic model ID to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        strict: Raise MetadataParseError on malformed replies instead of
            falling back to ``default_topic_metadata``.
    """

    def __init__(
        self,
        *,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        strict: bool = False,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        if not resolved_key:
            raise ValueError("Claude API key required. Pass api_key or set CLAUDE_API_KEY env var.")
        self._model = model
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._strict = strict

    async def describe(self, topic: str) -> tuple[TopicMetadata, Usage]:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=300,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": f"Topic: {topic}"}],
            )
        except anthropic.APIError as e:
            logger.warning(f"Topic metadata call failed, using defaults. Error: {e}")
            return (default_topic_metadata(topic), Usage())

        usage = Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                ),
            ],
        )

        content_block = response.content[0] if response.content else None
        raw = content_block.text if isinstance(content_block, TextBlock) else ""
        try:
            return (parse_topic_metadata(raw), usage)
        except MetadataParseError:
            if self._strict:
                raise
            logger.warning("Failed to parse topic metadata JSON, using defaults")
            return (default_topic_metadata(topic), usage)
