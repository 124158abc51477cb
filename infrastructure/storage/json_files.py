"""
JSON-file repositories: one ``<id>.json`` file per document under a directory.

Writes go through a temp file and an atomic replace, so an upsert of the same id
from two processes leaves one complete document behind.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from domain.schemas import TranscriptDocument, VideoAnalysis
from domain.taxonomy.models import TaxonomyDocument
from infrastructure.io import read_json, write_json_atomic

from .base import AnalysisRepository, TaxonomyRepository, TranscriptRepository

logger = logging.getLogger(__name__)


def validate_document_id(doc_id: str) -> str:
    """
    Return the trimmed id, or raise ValueError if it cannot name a file in one directory.

    Empty ids, ids with path separators and ids starting with "." are rejected.
    """
    doc_id = str(doc_id).strip()
    if not doc_id or doc_id.startswith(".") or "/" in doc_id or "\\" in doc_id:
        raise ValueError(f"Invalid document id: {doc_id!r}")
    return doc_id


class _DocumentDir:
    """Directory of JSON documents addressed by id."""

    def __init__(self, root: Path):
        self.root = root

    def path_for(self, doc_id: str) -> Path:
        return self.root / f"{validate_document_id(doc_id)}.json"

    def read(self, doc_id: str) -> Any | None:
        path = self.path_for(doc_id)
        if not path.exists():
            return None
        return read_json(path)

    def write(self, doc_id: str, data: Any) -> None:
        write_json_atomic(self.path_for(doc_id), data)

    def iter_paths(self) -> Iterator[Path]:
        if not self.root.is_dir():
            return iter(())
        return iter(sorted(self.root.glob("*.json")))


class JsonFileTaxonomyRepository(TaxonomyRepository):
    def __init__(self, root: Path):
        self._dir = _DocumentDir(root)

    def get(self, doc_id: str) -> TaxonomyDocument | None:
        data = self._dir.read(doc_id)
        return TaxonomyDocument.from_wire(data) if data is not None else None

    def list_documents(self) -> list[TaxonomyDocument]:
        docs: list[TaxonomyDocument] = []
        for path in self._dir.iter_paths():
            try:
                docs.append(TaxonomyDocument.from_wire(read_json(path)))
            except (ValueError, ValidationError) as e:
                # ValueError covers json.JSONDecodeError
                logger.error("Ignoring unreadable taxonomy document %s: %s", path, e)
        return docs

    def upsert(self, doc: TaxonomyDocument) -> None:
        self._dir.write(doc.id, doc.to_wire())
        logger.debug("Upserted taxonomy document %s", doc.id)


class JsonFileAnalysisRepository(AnalysisRepository):
    def __init__(self, root: Path):
        self._dir = _DocumentDir(root)

    def get(self, video_id: str) -> dict[str, Any] | None:
        return self._dir.read(video_id)

    def exists(self, video_id: str) -> bool:
        return self._dir.path_for(video_id).exists()

    def upsert(self, analysis: VideoAnalysis) -> None:
        self._dir.write(analysis.id, analysis.to_wire())
        logger.debug("Upserted analysis %s", analysis.id)


class JsonFileTranscriptRepository(TranscriptRepository):
    def __init__(self, root: Path):
        self._dir = _DocumentDir(root)

    def get(self, video_id: str) -> TranscriptDocument | None:
        data = self._dir.read(video_id)
        return TranscriptDocument.model_validate(data) if data is not None else None

    def upsert(self, doc: TranscriptDocument) -> None:
        self._dir.write(doc.id, doc.model_dump(mode="json", by_alias=True))
