"""
Typed errors raised across the analysis engine.

Collaborator failures (transcript fetch, model call, malformed reply) are raised
as one of these types and turned into a failure outcome by the orchestrator.
"""

from typing import Any


class AnalysisError(Exception):
    """Base exception for all analysis-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ConfigError(AnalysisError, ValueError):
    """Invalid or missing configuration. Fatal at startup."""


class TaxonomyVersionError(AnalysisError, ValueError):
    """Raised when a taxonomy version string cannot be parsed."""

    def __init__(self, text: object):
        super().__init__(f"Invalid taxonomy version: {text!r}", {"text": text})


class TaxonomyUnavailableError(AnalysisError):
    """No taxonomy document could be loaded."""


class TaxonomyStoreError(AnalysisError):
    """Raised when the taxonomy store fails to read or persist a document."""


class TranscriptUnavailableError(AnalysisError):
    """Raised when a transcript cannot be obtained for a video."""

    def __init__(self, video_id: str, reason: str | None = None):
        message = f"Transcript unavailable for video {video_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"video_id": video_id})
        self.video_id = video_id


class LanguageModelError(AnalysisError):
    """Raised when the language-model provider call fails."""


class ExtractionParseError(AnalysisError):
    """The model reply is not valid JSON or does not match the expected envelope."""
