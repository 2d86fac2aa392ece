"""Assemble per-lean perspective views from search results."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from perspective_lens.data import LEANS, Article, FactCheckClaim, Lean, SearchResult

LABELS: dict[Lean, str] = {
    Lean.LEFT: "Progressive View",
    Lean.CENTER: "Balanced Analysis",
    Lean.RIGHT: "Conservative View",
}

NO_RESULTS_MESSAGE = "No verified articles found for this topic. Try a different search term."
UNKNOWN_TIME = "Recently"

_RELATIVE_RE = re.compile(r"^\d+\s+(minute|hour|day|week|month|year)s?\s+ago$", re.IGNORECASE)


def empty_label(lean: Lean) -> str:
    return f"No {lean} sources found"


@dataclass(frozen=True)
class PerspectiveView:
    """One lean's column: a representative article plus the full list.

    Every article-derived field is copied from a real ``Article``; an empty
    lean has empty strings and no articles.
    """

    perspective: Lean
    label: str
    outlet: str = ""
    headline: str = ""
    summary: str = ""
    time_ago: str = ""
    article_url: str = ""
    fact_checks: tuple[FactCheckClaim, ...] = ()
    articles: tuple[Article, ...] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not self.articles


def _parse_datetime(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def time_ago(published_at: str | None, now: datetime | None = None) -> str:
    """Render a publication timestamp as "N minutes/hours/days ago".

    Provider-supplied relative strings ("3 days ago") pass through. Missing
    or unparseable values render as "Recently".
    """
    if not published_at:
        return UNKNOWN_TIME
    if _RELATIVE_RE.match(published_at.strip()):
        return published_at.strip()
    parsed = _parse_datetime(published_at)
    if parsed is None:
        return UNKNOWN_TIME

    now = now or datetime.now(tz=UTC)
    seconds = (now - parsed).total_seconds()
    if seconds < 0:
        return UNKNOWN_TIME
    minutes = int(seconds // 60)
    if minutes < 60:
        return _plural(max(minutes, 1), "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    return _plural(hours // 24, "day")


def build_view(
    lean: Lean,
    articles: list[Article],
    fact_checks: Mapping[str, list[FactCheckClaim]] | None = None,
    now: datetime | None = None,
) -> PerspectiveView:
    if not articles:
        return PerspectiveView(perspective=lean, label=empty_label(lean))

    lead = articles[0]
    claims = (fact_checks or {}).get(lead.url, [])
    return PerspectiveView(
        perspective=lean,
        label=LABELS[lean],
        outlet=lead.outlet,
        headline=lead.title,
        summary=lead.snippet,
        time_ago=time_ago(lead.published_at, now),
        article_url=lead.url,
        fact_checks=tuple(claims),
        articles=tuple(articles),
    )


def build_perspectives(
    result: SearchResult,
    fact_checks: Mapping[str, list[FactCheckClaim]] | None = None,
    now: datetime | None = None,
) -> list[PerspectiveView]:
    """Three views in left, center, right order.

    A lean with no articles keeps its slot with a "No ... sources found"
    label. Articles are never borrowed from another lean.
    """
    return [build_view(lean, result.articles.get(lean, []), fact_checks, now) for lean in LEANS]
