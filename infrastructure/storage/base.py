"""Repository interfaces for durable documents keyed by string id."""

from abc import ABC, abstractmethod
from typing import Any

from domain.schemas import TranscriptDocument, VideoAnalysis
from domain.taxonomy.models import TaxonomyDocument


class TaxonomyRepository(ABC):
    """
    Taxonomy documents keyed by their version id (``"v1.2"``).

    ``upsert`` overwrites a document with the same id, so writing the same
    version twice is idempotent.
    """

    @abstractmethod
    def get(self, doc_id: str) -> TaxonomyDocument | None:
        raise NotImplementedError

    @abstractmethod
    def list_documents(self) -> list[TaxonomyDocument]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, doc: TaxonomyDocument) -> None:
        raise NotImplementedError


class AnalysisRepository(ABC):
    """Completed analyses keyed by video id."""

    @abstractmethod
    def get(self, video_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def exists(self, video_id: str) -> bool:
        return self.get(video_id) is not None

    @abstractmethod
    def upsert(self, analysis: VideoAnalysis) -> None:
        raise NotImplementedError


class TranscriptRepository(ABC):
    """Cached transcripts keyed by video id."""

    @abstractmethod
    def get(self, video_id: str) -> TranscriptDocument | None:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, doc: TranscriptDocument) -> None:
        raise NotImplementedError
