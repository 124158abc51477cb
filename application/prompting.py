"""Prompt assembly from independent composers."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

PROMPT_HEADER = (
    "# Video Transcript Analysis Task\n\n"
    "Analyze the following video transcript and extract structured healing journey data.\n"
    "Return your response as valid JSON matching the schema provided below.\n\n"
)


@dataclass(frozen=True)
class PromptSegment:
    content: str
    order_hint: int = 0


@dataclass
class Prompt:
    """
    A prompt under construction.

    Segments are emitted in the order they were added. ``order_hint`` is kept on
    each segment but is not used to reorder them.
    """

    segments: list[PromptSegment] = field(default_factory=list)

    def add_segment(self, content: str, order_hint: int = 0) -> None:
        self.segments.append(PromptSegment(content=content, order_hint=order_hint))

    def build(self) -> str:
        parts = [PROMPT_HEADER]
        for segment in self.segments:
            parts.append(segment.content)
            parts.append("\n\n")
        return "".join(parts)


class PromptComposer(ABC):
    """One pipeline stage; contributes exactly one segment per request."""

    order_hint: int = 0

    @abstractmethod
    def compose(self, prompt: Prompt, subject_id: str) -> None:
        """
        Fetch whatever this composer needs and append one segment to ``prompt``.

        Raises:
            AnalysisError subclass: If the required data is unavailable. The whole
                pipeline fails; no degraded segment is emitted.
        """
        raise NotImplementedError


class PromptPipeline:
    def __init__(self, composers: Sequence[PromptComposer]):
        self.composers = list(composers)

    def build_prompt(self, subject_id: str) -> Prompt:
        """Run every composer once, in registration order."""
        prompt = Prompt()
        for composer in self.composers:
            composer.compose(prompt, subject_id)
            logger.debug("%s contributed a segment for %s", type(composer).__name__, subject_id)
        return prompt
