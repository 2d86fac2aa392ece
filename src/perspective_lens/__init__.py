"""perspective-lens: news coverage of a topic from left, center and right outlets."""

from perspective_lens.api import create_app
from perspective_lens.assembler import (
    LABELS,
    NO_RESULTS_MESSAGE,
    PerspectiveView,
    build_perspectives,
    time_ago,
)
from perspective_lens.classify import Classification, accept, classify, is_article_path
from perspective_lens.client import (
    PerspectivesClient,
    ServiceError,
    describe_error,
    is_network_error,
    with_retry,
)
from perspective_lens.config import AppConfig, Services, create_from_config, load_config
from perspective_lens.data import (
    LEANS,
    APICallUsage,
    Article,
    ClaimStatus,
    ClaimVerification,
    FactCheckClaim,
    Lean,
    Recency,
    SearchResult,
    TopicMetadata,
    Usage,
)
from perspective_lens.factcheck import GoogleFactChecker, is_relevant, rating_to_status
from perspective_lens.metadata import (
    ClaudeTopicDescriber,
    MetadataParseError,
    default_topic_metadata,
)
from perspective_lens.outlets import LEAN_BY_DOMAIN, OUTLET_NAMES, OUTLETS
from perspective_lens.pipeline import (
    DEFAULT_PLAN,
    Attempt,
    Orchestrator,
    PerspectivePipeline,
    PipelineOutput,
    SearchPlan,
    run_fallback_chain,
)
from perspective_lens.repair import MetadataRepairer
from perspective_lens.run_logger import RunLogger
from perspective_lens.search import (
    BraveSearcher,
    ClaudeSearcher,
    ExaSearcher,
    FirecrawlSearcher,
    LeanSearcher,
    VertexSearcher,
)
from perspective_lens.text import clean_snippet, clean_text
from perspective_lens.trending import FALLBACK_TOPICS, PerplexityTrendingTopics
from perspective_lens.url import normalize_url

__all__ = [
    # Models
    "APICallUsage",
    "Article",
    "ClaimStatus",
    "ClaimVerification",
    "FactCheckClaim",
    "LEANS",
    "Lean",
    "Recency",
    "SearchResult",
    "TopicMetadata",
    "Usage",
    # Reference tables
    "LEAN_BY_DOMAIN",
    "OUTLETS",
    "OUTLET_NAMES",
    # Functions
    "accept",
    "build_perspectives",
    "clean_snippet",
    "clean_text",
    "classify",
    "default_topic_metadata",
    "describe_error",
    "is_article_path",
    "is_network_error",
    "is_relevant",
    "normalize_url",
    "rating_to_status",
    "run_fallback_chain",
    "time_ago",
    "with_retry",
    # Protocols
    "LeanSearcher",
    # Searchers
    "BraveSearcher",
    "ClaudeSearcher",
    "ExaSearcher",
    "FirecrawlSearcher",
    "VertexSearcher",
    # Orchestration
    "Attempt",
    "Classification",
    "DEFAULT_PLAN",
    "Orchestrator",
    "PerspectivePipeline",
    "PipelineOutput",
    "SearchPlan",
    # Enrichment
    "ClaudeTopicDescriber",
    "GoogleFactChecker",
    "MetadataParseError",
    "MetadataRepairer",
    "PerplexityTrendingTopics",
    "FALLBACK_TOPICS",
    # Assembly
    "LABELS",
    "NO_RESULTS_MESSAGE",
    "PerspectiveView",
    # HTTP
    "PerspectivesClient",
    "ServiceError",
    "create_app",
    # Logging
    "RunLogger",
    # Config
    "AppConfig",
    "Services",
    "create_from_config",
    "load_config",
]
