"""Transcript source backed by a directory of JSON files."""

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from domain.errors import TranscriptUnavailableError
from domain.schemas import TranscriptDocument
from infrastructure.io import read_json
from infrastructure.storage.json_files import validate_document_id

from .base import TranscriptSource

logger = logging.getLogger(__name__)


class LocalTranscriptSource(TranscriptSource):
    """
    Reads ``<video_id>.<lang>.json`` for each preferred language in turn, then
    ``<video_id>.json`` regardless of language.

    File shape (camelCase)::

        {"language": "en", "title": "...", "description": "...", "durationSeconds": 754,
         "segments": [{"startSeconds": 0.0, "durationSeconds": 4.2, "text": "..."}]}
    """

    def __init__(self, root: Path):
        self.root = root

    def _candidates(self, video_id: str, preferred_languages: Sequence[str]) -> list[tuple[Path, str | None]]:
        paths = [(self.root / f"{video_id}.{lang}.json", lang) for lang in preferred_languages]
        paths.append((self.root / f"{video_id}.json", None))
        return paths

    def get_transcript(self, video_id: str, preferred_languages: Sequence[str]) -> TranscriptDocument:
        try:
            video_id = validate_document_id(video_id)
        except ValueError as e:
            raise TranscriptUnavailableError(str(video_id), str(e)) from e

        for path, lang in self._candidates(video_id, preferred_languages):
            if not path.exists():
                continue
            try:
                data = read_json(path)
                if not isinstance(data, dict):
                    raise ValueError("transcript file must contain a JSON object")
                data["id"] = video_id
                if lang is not None:
                    data.setdefault("language", lang)
                doc = TranscriptDocument.model_validate(data)
            except (OSError, json.JSONDecodeError, ValueError, ValidationError) as e:
                raise TranscriptUnavailableError(video_id, f"unreadable transcript file {path}: {e}") from e

            logger.debug("Loaded transcript for %s from %s (%d segments)", video_id, path, len(doc.segments))
            return doc

        raise TranscriptUnavailableError(video_id, f"no transcript file under {self.root}")
