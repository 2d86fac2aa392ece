"""Configuration module for perspective-lens."""

from perspective_lens.config.factory import (
    Services,
    create_from_config,
    create_plan,
    create_searcher,
    create_searchers,
)
from perspective_lens.config.loader import get_default_config_path, load_config
from perspective_lens.config.models import (
    AppConfig,
    AttemptConfig,
    BraveSearcherConfig,
    ClaudeSearcherConfig,
    ExaSearcherConfig,
    FactCheckConfig,
    FirecrawlSearcherConfig,
    LoggingConfig,
    MetadataConfig,
    PlanConfig,
    RepairConfig,
    SearcherConfig,
    TrendingConfig,
    VertexSearcherConfig,
)

__all__ = [
    "AppConfig",
    "AttemptConfig",
    "BraveSearcherConfig",
    "ClaudeSearcherConfig",
    "ExaSearcherConfig",
    "FactCheckConfig",
    "FirecrawlSearcherConfig",
    "LoggingConfig",
    "MetadataConfig",
    "PlanConfig",
    "RepairConfig",
    "SearcherConfig",
    "Services",
    "TrendingConfig",
    "VertexSearcherConfig",
    "create_from_config",
    "create_plan",
    "create_searcher",
    "create_searchers",
    "get_default_config_path",
    "load_config",
]
