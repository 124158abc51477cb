"""Transcript sources: the collaborator interface plus local and caching implementations."""

from infrastructure.transcripts.base import TranscriptSource
from infrastructure.transcripts.caching import CachingTranscriptSource
from infrastructure.transcripts.local import LocalTranscriptSource

__all__ = [
    "TranscriptSource",
    "LocalTranscriptSource",
    "CachingTranscriptSource",
]
