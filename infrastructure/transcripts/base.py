from abc import ABC, abstractmethod
from collections.abc import Sequence

from domain.schemas import TranscriptDocument


class TranscriptSource(ABC):
    """Fetches the transcript of a video."""

    @abstractmethod
    def get_transcript(self, video_id: str, preferred_languages: Sequence[str]) -> TranscriptDocument:
        """
        Return the transcript of ``video_id`` in the first available preferred language.

        Raises:
            TranscriptUnavailableError: If no transcript can be obtained.
        """
        raise NotImplementedError
