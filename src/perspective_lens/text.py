"""Text cleanup for provider titles and snippets."""

import re

_TAG_RE = re.compile(r"<[^>]+>")
_ENTITY_RE = re.compile(r"&(?:[a-z][a-z0-9]*|#\d+|#x[0-9a-f]+);", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")

_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_MD_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_MD_REF_LINK_RE = re.compile(r"\[([^\]]+)\]\[[^\]]*\]")
_MD_BARE_URL_RE = re.compile(r"https?://\S+")
_MD_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s*", re.MULTILINE)
_MD_QUOTE_RE = re.compile(r"^\s*>+\s?", re.MULTILINE)
_MD_LIST_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+", re.MULTILINE)
_MD_RULE_RE = re.compile(r"^\s*(?:[-*_]\s*){3,}$", re.MULTILINE)
_MD_EMPHASIS_RE = re.compile(r"(\*{1,3}|_{1,3}|~~)(?=\S)(.+?)(?<=\S)\1")
_MD_CODE_RE = re.compile(r"`{1,3}([^`]*)`{1,3}")

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[\"'“A-Z0-9])")

MIN_SENTENCE_LENGTH = 60
MIN_LETTER_RATIO = 0.5

BOILERPLATE_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(skip to|jump to) (main )?(content|navigation)\b",
        r"\b(sign in|log in|sign up|subscribe|newsletter)\b",
        r"\b(cookie|cookies|privacy policy|terms of (use|service))\b",
        r"\badvertisement\b|\bsponsored\b|\bad feedback\b",
        r"\b(share (this|on)|follow us|read more|click here|watch:)\b",
        r"^\s*(by|updated|published)\s",
        r"\b\d{1,2}:\d{2}\s*(am|pm)?\s*(et|est|edt|pt|gmt|utc)\b",
        r"\b(nasdaq|nyse|dow jones|s&p 500)\b.*[+-]?\d+(\.\d+)?%",
        r"\b[A-Z]{2,5}\s+[+-]\d+(\.\d+)?%",
        r"\ball rights reserved\b|©",
        r"\b(menu|home|search)\s*\|",
    )
)

PLACEHOLDER_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^article from\b", re.IGNORECASE),
    re.compile(r"^(untitled|no title|n/?a|null|undefined)$", re.IGNORECASE),
    re.compile(r"^(404|page not found|access denied)\b", re.IGNORECASE),
)


def clean_text(raw: str | None) -> str:
    """Strip HTML tags and entities, and collapse whitespace."""
    if not raw:
        return ""
    text = _TAG_RE.sub("", raw)
    text = _ENTITY_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def markdown_to_text(markdown: str | None) -> str:
    """Flatten markdown into plain prose."""
    if not markdown:
        return ""
    text = _MD_IMAGE_RE.sub("", markdown)
    text = _MD_LINK_RE.sub(r"\1", text)
    text = _MD_REF_LINK_RE.sub(r"\1", text)
    text = _MD_BARE_URL_RE.sub("", text)
    text = _MD_RULE_RE.sub("", text)
    text = _MD_HEADING_RE.sub("", text)
    text = _MD_QUOTE_RE.sub("", text)
    text = _MD_LIST_RE.sub("", text)
    text = _MD_CODE_RE.sub(r"\1", text)
    text = _MD_EMPHASIS_RE.sub(r"\2", text)
    paragraphs: list[str] = []
    for block in re.split(r"\n\s*\n", text):
        block = clean_text(block)
        if not block:
            continue
        # Headings and list items rarely end in punctuation; keep them apart
        if block[-1] not in ".!?\"'”":
            block += "."
        paragraphs.append(block)
    return " ".join(paragraphs)


def split_sentences(text: str) -> list[str]:
    """Split prose into sentences on terminal punctuation."""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def letter_ratio(text: str) -> float:
    if not text:
        return 0.0
    return sum(ch.isalpha() for ch in text) / len(text)


def is_boilerplate(sentence: str) -> bool:
    return any(p.search(sentence) for p in BOILERPLATE_PATTERNS)


def is_placeholder(text: str | None) -> bool:
    """Whether a title or snippet is empty or a stand-in value."""
    cleaned = clean_text(text)
    if not cleaned:
        return True
    return any(p.search(cleaned) for p in PLACEHOLDER_PATTERNS)


def clean_snippet(markdown: str | None, description: str | None, title: str | None) -> str:
    """Pick the best readable sentence from scraped markdown.

    Takes the first sentence that is long enough, is not boilerplate and is
    mostly letters. Falls back to the description, then the title.
    """
    for sentence in split_sentences(markdown_to_text(markdown)):
        if len(sentence) < MIN_SENTENCE_LENGTH:
            continue
        if is_boilerplate(sentence):
            continue
        if letter_ratio(sentence) < MIN_LETTER_RATIO:
            continue
        return sentence
    return clean_text(description) or clean_text(title)
