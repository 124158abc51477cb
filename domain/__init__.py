"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- schemas: Pydantic models for analysis results, transcripts and model calls
- taxonomy: Versioned taxonomy documents, seed parsing and proposal merging
- extraction: Parsing of model replies
- errors: Typed exceptions
"""

from domain.schemas import (
    Achievement,
    AnalysisOutcome,
    AnalysisResult,
    LlmCallResult,
    Timeframe,
    TranscriptDocument,
    TranscriptSegment,
    VideoAnalysis,
)

__all__ = [
    "Achievement",
    "Timeframe",
    "AnalysisResult",
    "TranscriptSegment",
    "TranscriptDocument",
    "LlmCallResult",
    "VideoAnalysis",
    "AnalysisOutcome",
]
