"""Data models for perspective-lens."""

from perspective_lens.data.models import (
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

__all__ = [
    "LEANS",
    "APICallUsage",
    "Article",
    "ClaimStatus",
    "ClaimVerification",
    "FactCheckClaim",
    "Lean",
    "Recency",
    "SearchResult",
    "TopicMetadata",
    "Usage",
]
