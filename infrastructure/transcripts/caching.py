"""Cache-first transcript source with best-effort background cache writes."""

import contextvars
import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from domain.schemas import TranscriptDocument
from infrastructure.storage.base import TranscriptRepository

from .base import TranscriptSource

logger = logging.getLogger(__name__)


class CachingTranscriptSource(TranscriptSource):
    """
    Serve transcripts from ``repository`` when cached; otherwise fetch from ``inner``
    and cache the result without making the caller wait for the write.

    Cache read and write failures are logged and never surface to the caller.
    Writes are upserts keyed by video id, so duplicate fetches of the same id are safe.
    """

    def __init__(self, inner: TranscriptSource, repository: TranscriptRepository):
        self.inner = inner
        self.repository = repository
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="transcript-cache")
        self._pending: list[Future] = []

    def get_transcript(self, video_id: str, preferred_languages: Sequence[str]) -> TranscriptDocument:
        try:
            cached = self.repository.get(video_id)
        except Exception as e:
            logger.warning("Transcript cache read failed for %s; fetching from source: %s", video_id, e)
            cached = None

        if cached is not None:
            logger.debug("Transcript cache hit for %s", video_id)
            return cached

        logger.debug("Transcript cache miss for %s", video_id)
        doc = self.inner.get_transcript(video_id, preferred_languages)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(contextvars.copy_context().run, self._save, doc))
        return doc

    def _save(self, doc: TranscriptDocument) -> None:
        try:
            self.repository.upsert(doc)
            logger.debug("Cached transcript for %s", doc.id)
        except Exception:
            logger.exception("Failed to cache transcript for %s", doc.id)

    def flush(self, timeout: float | None = None) -> None:
        """Wait for pending cache writes (used at shutdown and in tests)."""
        for f in list(self._pending):
            f.result(timeout=timeout)
        self._pending.clear()

    def close(self) -> None:
        self._executor.shutdown(wait=True)
