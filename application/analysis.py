"""Single-video analysis workflow: prompt -> model -> parse -> handlers."""

import logging

from opik import track

from application.handlers import AnalysisContext, PostAnalysisPipeline
from application.prompting import PromptPipeline
from application.taxonomy_store import TaxonomyStore
from domain.errors import (
    ExtractionParseError,
    LanguageModelError,
    TaxonomyStoreError,
    TaxonomyUnavailableError,
    TranscriptUnavailableError,
)
from domain.extraction import parse_extraction_response
from domain.schemas import AnalysisOutcome, VideoAnalysis
from infrastructure.observability import annotate_current_span, clear_video_context, set_log_context
from infrastructure.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

# Collaborator failures reported as a failed outcome instead of raised.
RECOVERABLE_ERRORS = (
    TranscriptUnavailableError,
    TaxonomyUnavailableError,
    TaxonomyStoreError,
    LanguageModelError,
    ExtractionParseError,
)


class AnalysisOrchestrator:
    def __init__(
        self,
        *,
        prompts: PromptPipeline,
        llm: ProviderAdapter,
        handlers: PostAnalysisPipeline,
        store: TaxonomyStore,
    ):
        self.prompts = prompts
        self.llm = llm
        self.handlers = handlers
        self.store = store

    @track(
        name="analysis.video",
        type="general",
        metadata={"task": "transcript_achievement_extraction"},
        capture_output=False,
    )
    def analyze(self, video_id: str) -> AnalysisOutcome:
        """
        Analyze one video.

        Returns:
            AnalysisOutcome. Transcript, taxonomy, model and parse failures are
            returned as a failed outcome (no retry). Handler failures do not fail
            the analysis; they are listed in ``handler_failures``.
        """
        set_log_context(video_id=video_id)
        try:
            return self._analyze(video_id)
        except RECOVERABLE_ERRORS as e:
            logger.error("Analysis of %s failed: %s", video_id, e)
            annotate_current_span(metadata={"video_id": video_id, "error_type": type(e).__name__})
            return AnalysisOutcome.failure(video_id, e)
        finally:
            clear_video_context()

    def _analyze(self, video_id: str) -> AnalysisOutcome:
        baseline = self.store.get_latest()
        if baseline is not None:
            set_log_context(taxonomy_version=baseline.version)

        prompt_text = self.prompts.build_prompt(video_id).build()
        logger.info(
            "Prompt built (%d chars); calling %s model %s",
            len(prompt_text),
            self.llm.provider.value,
            self.llm.model,
        )

        call = self.llm.call(prompt_text)
        result = parse_extraction_response(call.parsed_json if call.parsed_json is not None else call.raw_text)
        logger.info(
            "Extracted %d achievement(s), %d proposal(s)",
            len(result.achievements),
            len(result.proposals),
        )

        context = AnalysisContext(subject_id=video_id)
        self.handlers.run(result, context)

        taxonomy_version = context.taxonomy_version or (baseline.version if baseline is not None else None)
        analysis = VideoAnalysis(
            id=video_id,
            provider=call.provider,
            model_id=call.model_id,
            taxonomy_version=taxonomy_version,
            result=result,
            llm_duration_ms=call.duration_ms,
            total_tokens=call.total_tokens,
        )

        annotate_current_span(
            metadata={
                "video_id": video_id,
                "taxonomy_version": str(taxonomy_version) if taxonomy_version else None,
                "achievements": len(result.achievements),
                "proposals": len(result.proposals),
                "handler_failures": len(context.failures),
            }
        )
        return AnalysisOutcome.ok(analysis, context.failures)
