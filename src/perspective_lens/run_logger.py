"""Per-search JSON stage logs.

Each topic search produces one ``run_<timestamp>_<id>.json`` file holding the
ordered stage records (primary search, fallbacks, repair, enrichment) and a
per-lean summary of what was found.
"""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from perspective_lens.data import LEANS, SearchResult, Usage


class StageRecord(BaseModel):
    """One timed step of a search."""

    stage: str
    component: str
    input: Any = None
    output: Any = None
    usage: dict[str, Any] | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class LeanSummary(BaseModel):
    """What a search ended up with for one lean."""

    lean: str
    articles: int
    source: str
    outlets: list[str] = []


class RunRecord(BaseModel):
    """Everything logged for one topic search."""

    run_id: str
    topic: str
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = []
    leans: list[LeanSummary] = []
    total_usage: dict[str, Any] | None = None


def usage_summary(usage: Usage) -> dict[str, Any]:
    """Raw counters plus the derived token and request totals."""
    summary: dict[str, Any] = {
        f.name: getattr(usage, f.name) for f in dataclasses.fields(usage) if f.name != "api_calls"
    }
    summary["api_calls"] = [dataclasses.asdict(call) for call in usage.api_calls]
    summary["input_tokens"] = usage.input_tokens
    summary["output_tokens"] = usage.output_tokens
    summary["web_searches"] = usage.web_searches
    summary["provider_requests"] = usage.provider_requests
    return summary


def _serialize(obj: Any) -> Any:
    """Convert stage payloads into JSON-compatible values."""
    if isinstance(obj, Usage):
        return usage_summary(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Path):
        return str(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _serialize(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        return {str(_serialize(k)): _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_serialize(item) for item in obj]
    return obj


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


class RunLogger:
    """Collect stage records for one search and write them as JSON.

    A disabled logger accepts every call and writes nothing.

    Args:
        log_dir: Directory receiving the run files (created on first write).
        enabled: Whether to record anything at all.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._record: RunRecord | None = None
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        return self._last_log_path

    def start_run(self, topic: str) -> None:
        if self._enabled:
            self._record = RunRecord(run_id=str(uuid.uuid4()), topic=topic, started_at=_now())

    def log_stage(
        self,
        stage: str,
        component: str,
        input_data: Any,
        output_data: Any,
        usage: Usage | None,
        duration_seconds: float,
    ) -> None:
        """Append a stage to the current run; ignored before ``start_run``."""
        if self._record is None:
            return
        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=_serialize(input_data),
                output=_serialize(output_data),
                usage=usage_summary(usage) if usage is not None else None,
                timestamp=_now(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def _path(self, record: RunRecord) -> Path:
        # run_2026-02-12T14-30-00_1a2b3c4d.json
        stamp = record.started_at.split(".")[0].split("+")[0].replace(":", "-")
        return self._log_dir / f"run_{stamp}_{record.run_id[:8]}.json"

    def finish_run(self, result: SearchResult) -> Path | None:
        """Summarize ``result`` and write the run file.

        Returns:
            The written path, or None when disabled or never started.
        """
        record = self._record
        if record is None:
            return None

        record.completed_at = _now()
        record.leans = [
            LeanSummary(
                lean=lean.value,
                articles=len(result.articles.get(lean, [])),
                source=result.source_for(lean),
                outlets=sorted({a.outlet for a in result.articles.get(lean, [])}),
            )
            for lean in LEANS
        ]
        record.total_usage = usage_summary(result.usage)

        path = self._path(record)
        self._log_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(record.model_dump_json(indent=2))
        self._record = None
        self._last_log_path = path
        return path
