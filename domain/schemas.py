"""Pydantic models for extraction results, transcripts and model calls."""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.taxonomy.models import Proposal, utc_now
from domain.taxonomy.version import VersionField


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Achievement(_WireModel):
    """One extracted result item."""

    type: str = Field(..., description="Taxonomy domain of the achievement, e.g. 'healing'.")
    tags: list[str] = Field(
        default_factory=list,
        description="Domain, category, subcategory and attribute tags from the taxonomy.",
    )
    details: str | None = Field(default=None, description="Short narrative of the achievement.")

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Timeframe(_WireModel):
    notice_effects: str | None = None
    full_healing: str | None = None


def _clamp_unit(v: Any) -> Any:
    if v is None:
        return 0.0
    if isinstance(v, str):
        try:
            v = float(v)
        except ValueError:
            return v  # let pydantic reject it
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return v
    v = float(v)
    if math.isnan(v):
        return 0.0
    return min(max(v, 0.0), 1.0)


class AnalysisResult(_WireModel):
    """Typed result of one transcript analysis. Handlers mutate it in place."""

    achievements: list[Achievement] = Field(default_factory=list)
    timeframe: Timeframe | None = None
    practices: list[str] = Field(default_factory=list)
    sentiment_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    proposals: list[Proposal] = Field(default_factory=list)

    @field_validator("achievements", "practices", "proposals", mode="before")
    @classmethod
    def _list_or_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("sentiment_score", "confidence_score", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> Any:
        return _clamp_unit(v)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the reply envelope: ``{"analysis": {...}, "proposals": {"taxonomy": [...]}}``."""
        analysis = self.model_dump(mode="json", by_alias=True, exclude={"proposals"})
        return {
            "analysis": analysis,
            "proposals": {"taxonomy": [p.to_wire() for p in self.proposals]},
        }


class TranscriptSegment(_WireModel):
    start_seconds: float = 0.0
    duration_seconds: float = 0.0
    text: str


class TranscriptDocument(_WireModel):
    """A fetched transcript together with the video metadata used in the prompt."""

    id: str
    language: str = "en"
    title: str | None = None
    description: str | None = None
    duration_seconds: int | None = None
    segments: list[TranscriptSegment] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=utc_now)

    @property
    def text(self) -> str:
        return " ".join(s.text.strip() for s in self.segments if s.text and s.text.strip())


class LlmCallResult(BaseModel):
    """What a provider adapter returns for one prompt."""

    raw_text: str
    parsed_json: dict[str, Any] | None = None
    provider: str
    model_id: str
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    duration_ms: int = 0


class VideoAnalysis(BaseModel):
    """A completed analysis, ready to persist."""

    id: str = Field(..., description="Video id the analysis belongs to.")
    analyzed_at: datetime = Field(default_factory=utc_now)
    provider: str
    model_id: str
    taxonomy_version: VersionField | None = None
    result: AnalysisResult
    llm_duration_ms: int = 0
    total_tokens: int = 0

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "analyzedAt": self.analyzed_at.isoformat(),
            "provider": self.provider,
            "modelVersion": self.model_id,
            "taxonomyVersion": str(self.taxonomy_version) if self.taxonomy_version is not None else None,
            "llm": {"durationMs": self.llm_duration_ms, "totalTokens": self.total_tokens},
            **self.result.to_wire(),
        }


class AnalysisOutcome(BaseModel):
    """Typed success/failure result returned by the orchestrator."""

    video_id: str
    success: bool
    analysis: VideoAnalysis | None = None
    error_type: str | None = None
    error_message: str | None = None
    handler_failures: list[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, analysis: VideoAnalysis, handler_failures: list[str] | None = None) -> "AnalysisOutcome":
        return cls(
            video_id=analysis.id,
            success=True,
            analysis=analysis,
            handler_failures=list(handler_failures or []),
        )

    @classmethod
    def failure(cls, video_id: str, error: Exception) -> "AnalysisOutcome":
        return cls(
            video_id=video_id,
            success=False,
            error_type=type(error).__name__,
            error_message=str(error),
        )
