from perspective_lens.pipeline.orchestrator import (
    DEFAULT_PLAN,
    Attempt,
    ChainOutcome,
    Orchestrator,
    SearchPlan,
    run_fallback_chain,
)
from perspective_lens.pipeline.perspectives import PerspectivePipeline, PipelineOutput

__all__ = [
    "DEFAULT_PLAN",
    "Attempt",
    "ChainOutcome",
    "Orchestrator",
    "PerspectivePipeline",
    "PipelineOutput",
    "SearchPlan",
    "run_fallback_chain",
]
