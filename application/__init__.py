"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure:
prompt assembly, the taxonomy store, post-analysis handlers and the
single-video analysis workflow.
"""

from application.analysis import AnalysisOrchestrator
from application.composers import OutputPromptComposer, TaxonomyPromptComposer, TranscriptPromptComposer
from application.handlers import (
    AnalysisContext,
    AnalysisHandler,
    PostAnalysisPipeline,
    ProposalIntegratorHandler,
    TaxonomyEvolutionHandler,
)
from application.integration import ProposalIntegrator, extract_proposal_tags
from application.prompting import Prompt, PromptComposer, PromptPipeline, PromptSegment
from application.taxonomy_store import TaxonomyStore

__all__ = [
    # Main workflow
    "AnalysisOrchestrator",
    # Prompt assembly
    "Prompt",
    "PromptSegment",
    "PromptComposer",
    "PromptPipeline",
    "TaxonomyPromptComposer",
    "TranscriptPromptComposer",
    "OutputPromptComposer",
    # Post-analysis
    "AnalysisContext",
    "AnalysisHandler",
    "PostAnalysisPipeline",
    "ProposalIntegratorHandler",
    "TaxonomyEvolutionHandler",
    "ProposalIntegrator",
    "extract_proposal_tags",
    # Taxonomy
    "TaxonomyStore",
]
