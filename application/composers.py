"""The standard prompt composers: taxonomy, transcript, output format."""

import json
import logging
from collections.abc import Sequence

from application.prompting import Prompt, PromptComposer
from application.taxonomy_store import TaxonomyStore
from domain.errors import TaxonomyUnavailableError, TranscriptUnavailableError
from domain.extraction.examples import example_analysis_result
from domain.schemas import TranscriptDocument
from infrastructure.prompting import PromptManager
from infrastructure.transcripts import TranscriptSource

logger = logging.getLogger(__name__)

TAXONOMY_TEMPLATE = "taxonomy-prompt"
TRANSCRIPT_TEMPLATE = "transcript-prompt"
OUTPUT_TEMPLATE = "output-prompt"

DEFAULT_TAXONOMY_TEMPLATE = "# Taxonomy for Tag Extraction\n```json\n{{taxonomy}}\n```"
DEFAULT_TRANSCRIPT_TEMPLATE = (
    "# Video Transcript to Analyze\n\n"
    "**Video Metadata:**\n"
    "{{metadata}}\n\n"
    "**Transcript:**\n"
    "```\n{{transcript}}\n```"
)
DEFAULT_OUTPUT_TEMPLATE = "# Expected Output Schema\n```json\n{{format}}\n```"


def format_duration(seconds: int | float | None) -> str:
    """
    Examples:
        >>> format_duration(3723)
        '1h 2m 3s'
        >>> format_duration(125)
        '2m 5s'
        >>> format_duration(9)
        '9s'
    """
    total = max(int(seconds or 0), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


class TaxonomyPromptComposer(PromptComposer):
    """Embeds the latest taxonomy so the model tags only with allowed values."""

    order_hint = 10

    def __init__(self, store: TaxonomyStore, prompts: PromptManager):
        self.store = store
        self.prompts = prompts

    def compose(self, prompt: Prompt, subject_id: str) -> None:
        doc = self.store.get_latest()
        if doc is None:
            raise TaxonomyUnavailableError("No taxonomy available to build the prompt", {"video_id": subject_id})

        taxonomy_json = json.dumps({"taxonomy": doc.to_wire()["taxonomy"]}, ensure_ascii=False, indent=2)
        template = self.prompts.get_template(TAXONOMY_TEMPLATE, fallback=DEFAULT_TAXONOMY_TEMPLATE)
        prompt.add_segment(template.format(taxonomy=taxonomy_json), self.order_hint)
        logger.debug("Taxonomy %s added to prompt", doc.version)


class TranscriptPromptComposer(PromptComposer):
    """Adds video metadata and the transcript text."""

    order_hint = 20

    def __init__(self, source: TranscriptSource, prompts: PromptManager, preferred_languages: Sequence[str]):
        self.source = source
        self.prompts = prompts
        self.preferred_languages = list(preferred_languages)

    @staticmethod
    def _metadata_lines(doc: TranscriptDocument) -> str:
        lines = [
            f"- Title: {doc.title or 'Unknown'}",
            f"- Language: {doc.language}",
            f"- Duration: {format_duration(doc.duration_seconds)}",
        ]
        if doc.description and doc.description.strip():
            lines.append(f"- Description: {doc.description.strip()}")
        return "\n".join(lines)

    def compose(self, prompt: Prompt, subject_id: str) -> None:
        doc = self.source.get_transcript(subject_id, self.preferred_languages)
        text = doc.text
        if not text:
            raise TranscriptUnavailableError(subject_id, "transcript is empty")

        template = self.prompts.get_template(TRANSCRIPT_TEMPLATE, fallback=DEFAULT_TRANSCRIPT_TEMPLATE)
        prompt.add_segment(
            template.format(metadata=self._metadata_lines(doc), transcript=text),
            self.order_hint,
        )


class OutputPromptComposer(PromptComposer):
    """Shows the model the exact reply envelope expected back."""

    order_hint = 90

    def __init__(self, prompts: PromptManager):
        self.prompts = prompts

    def compose(self, prompt: Prompt, subject_id: str) -> None:
        example = json.dumps(example_analysis_result().to_wire(), ensure_ascii=False, indent=2)
        template = self.prompts.get_template(OUTPUT_TEMPLATE, fallback=DEFAULT_OUTPUT_TEMPLATE)
        prompt.add_segment(template.format(format=example), self.order_hint)
