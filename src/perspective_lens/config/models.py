"""Pydantic configuration models for perspective-lens components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

from perspective_lens.data import Recency

# ============================================================
# Provider Configs
# ============================================================


class BraveSearcherConfig(BaseModel):
    """Configuration for BraveSearcher."""

    type: Literal["brave"] = "brave"
    enabled: bool = True
    max_results: int = Field(default=20, ge=1, le=20)
    lean_delay_seconds: float = Field(default=1.0, ge=0.0)
    timeout: float = 15.0

    model_config = {"frozen": True}


class ExaSearcherConfig(BaseModel):
    """Configuration for ExaSearcher."""

    type: Literal["exa"] = "exa"
    enabled: bool = True
    max_results: int = Field(default=25, ge=1)

    model_config = {"frozen": True}


class FirecrawlSearcherConfig(BaseModel):
    """Configuration for FirecrawlSearcher."""

    type: Literal["firecrawl"] = "firecrawl"
    enabled: bool = True
    max_results: int = Field(default=30, ge=1)
    timeout: float = 30.0

    model_config = {"frozen": True}


class VertexSearcherConfig(BaseModel):
    """Configuration for VertexSearcher."""

    type: Literal["vertex"] = "vertex"
    enabled: bool = True
    location: str = "global"
    max_results: int = Field(default=10, ge=1)
    timeout: float = 15.0

    model_config = {"frozen": True}


class ClaudeSearcherConfig(BaseModel):
    """Configuration for ClaudeSearcher."""

    type: Literal["claude"] = "claude"
    enabled: bool = True
    model: str = "claude-haiku-4-5-20251001"
    max_searches_per_query: int = 1
    max_results: int = Field(default=10, ge=1)

    model_config = {"frozen": True}


SearcherConfig = Annotated[
    BraveSearcherConfig
    | ExaSearcherConfig
    | FirecrawlSearcherConfig
    | VertexSearcherConfig
    | ClaudeSearcherConfig,
    Field(discriminator="type"),
]


def _default_providers() -> list[SearcherConfig]:
    return [
        BraveSearcherConfig(),
        ExaSearcherConfig(),
        FirecrawlSearcherConfig(),
        VertexSearcherConfig(),
        ClaudeSearcherConfig(),
    ]


# ============================================================
# Plan Configs
# ============================================================


class AttemptConfig(BaseModel):
    """One (provider, recency) step of the search plan."""

    provider: Literal["brave", "exa", "firecrawl", "vertex", "claude"]
    recency: Recency = Recency.WEEK
    constrained: bool = True

    model_config = {"frozen": True}


def _default_fallbacks() -> list[AttemptConfig]:
    return [
        AttemptConfig(provider="exa", recency=Recency.WEEK),
        AttemptConfig(provider="exa", recency=Recency.MONTH),
        AttemptConfig(provider="exa", recency=Recency.YEAR),
        AttemptConfig(provider="firecrawl", recency=Recency.WEEK),
        AttemptConfig(provider="firecrawl", recency=Recency.MONTH),
        AttemptConfig(provider="firecrawl", recency=Recency.YEAR),
        AttemptConfig(provider="vertex", recency=Recency.ANY),
        AttemptConfig(provider="claude", recency=Recency.MONTH),
        AttemptConfig(provider="claude", recency=Recency.YEAR),
        AttemptConfig(provider="brave", recency=Recency.ANY, constrained=False),
    ]


class PlanConfig(BaseModel):
    """Primary attempt plus ordered fallbacks for missing leans."""

    primary: AttemptConfig = Field(default_factory=lambda: AttemptConfig(provider="brave"))
    fallbacks: list[AttemptConfig] = Field(default_factory=_default_fallbacks)

    model_config = {"frozen": True}


# ============================================================
# Enrichment Configs
# ============================================================


class FactCheckConfig(BaseModel):
    """Configuration for GoogleFactChecker."""

    enabled: bool = True
    include_summary_sentence: bool = False
    max_claims: int = Field(default=3, ge=0, le=3)
    timeout: float = 10.0

    model_config = {"frozen": True}


class MetadataConfig(BaseModel):
    """Configuration for ClaudeTopicDescriber."""

    model: str = "claude-haiku-4-5-20251001"
    strict: bool = False

    model_config = {"frozen": True}


class RepairConfig(BaseModel):
    """Configuration for the Firecrawl-backed MetadataRepairer."""

    enabled: bool = True

    model_config = {"frozen": True}


class TrendingConfig(BaseModel):
    """Configuration for PerplexityTrendingTopics."""

    model: str = "sonar"
    timeout: float = 20.0

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for per-run JSON stage logs."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class AppConfig(BaseModel):
    """Root configuration for perspective-lens."""

    providers: list[SearcherConfig] = Field(default_factory=_default_providers)
    plan: PlanConfig = Field(default_factory=PlanConfig)
    min_articles_per_lean: int = Field(default=1, ge=1)
    max_articles_per_lean: int = Field(default=10, ge=1)
    max_results_per_attempt: int | None = None
    factcheck: FactCheckConfig = Field(default_factory=FactCheckConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    repair: RepairConfig = Field(default_factory=RepairConfig)
    trending: TrendingConfig = Field(default_factory=TrendingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_bounds(self) -> "AppConfig":
        if self.max_articles_per_lean < self.min_articles_per_lean:
            raise ValueError("max_articles_per_lean must be >= min_articles_per_lean")
        types = [p.type for p in self.providers]
        duplicates = sorted({t for t in types if types.count(t) > 1})
        if duplicates:
            raise ValueError(f"Duplicate provider configs: {', '.join(duplicates)}")
        return self
