from perspective_lens.search.base import LeanSearcher
from perspective_lens.search.brave import BraveSearcher
from perspective_lens.search.claude import ClaudeSearcher
from perspective_lens.search.exa import ExaSearcher
from perspective_lens.search.firecrawl import FirecrawlSearcher
from perspective_lens.search.vertex import VertexSearcher

__all__ = [
    "BraveSearcher",
    "ClaudeSearcher",
    "ExaSearcher",
    "FirecrawlSearcher",
    "LeanSearcher",
    "VertexSearcher",
]
