from pathlib import Path

import pytest

from application.analysis import AnalysisOrchestrator
from application.composers import OutputPromptComposer, TaxonomyPromptComposer, TranscriptPromptComposer
from application.handlers import PostAnalysisPipeline, ProposalIntegratorHandler, TaxonomyEvolutionHandler
from application.prompting import PromptPipeline
from application.taxonomy_store import TaxonomyStore
from domain.errors import TranscriptUnavailableError
from domain.schemas import TranscriptDocument, TranscriptSegment
from domain.taxonomy.models import TaxonomySpecification
from domain.taxonomy.version import TaxonomyVersion
from infrastructure.config.models import AppConfig, OpenAIConfig, Provider
from infrastructure.prompting import PromptManager
from infrastructure.providers import MockAdapter
from infrastructure.storage.memory import InMemoryTaxonomyRepository


class FakeSource:
    def get_transcript(self, video_id, preferred_languages):
        if video_id == "missing":
            raise TranscriptUnavailableError(video_id, "no captions")
        return TranscriptDocument(
            id=video_id,
            title="Breathwork journey",
            duration_seconds=120,
            segments=[TranscriptSegment(text="My tinnitus got quieter after two weeks of breath work.")],
        )


class ExplodingAdapter(MockAdapter):
    def _send(self, *, system_text, user_text):
        raise RuntimeError("connection reset")


def _cfg(tmp_path: Path) -> AppConfig:
    return AppConfig(provider=Provider.OPENAI, model="test-model", storage={"root": tmp_path}, openai=OpenAIConfig())


def _seed() -> TaxonomySpecification:
    return TaxonomySpecification(
        version="v1.0",
        taxonomy={
            "healing": {"physical_health": {"subcategories": ["obesity"]}},
            "manifestation": {"financial": {"subcategories": ["manifested_money"]}},
        },
    )


def _orchestrator(tmp_path: Path, llm, *, seeded: bool = True) -> tuple[AnalysisOrchestrator, TaxonomyStore]:
    store = TaxonomyStore(InMemoryTaxonomyRepository(), lambda: _seed() if seeded else None)
    prompts = PromptManager(tmp_path / "prompts")
    orchestrator = AnalysisOrchestrator(
        prompts=PromptPipeline(
            [
                TaxonomyPromptComposer(store, prompts),
                TranscriptPromptComposer(FakeSource(), prompts, ["en"]),
                OutputPromptComposer(prompts),
            ]
        ),
        llm=llm,
        handlers=PostAnalysisPipeline([ProposalIntegratorHandler(), TaxonomyEvolutionHandler(store)], timeout_s=5),
        store=store,
    )
    return orchestrator, store


def test_successful_analysis_evolves_taxonomy(tmp_path: Path) -> None:
    llm = MockAdapter(cfg=_cfg(tmp_path))
    orchestrator, store = _orchestrator(tmp_path, llm)

    outcome = orchestrator.analyze("vid-1")

    assert outcome.success, outcome.error_message
    assert outcome.handler_failures == []
    analysis = outcome.analysis
    assert analysis.id == "vid-1"
    assert analysis.provider == "mock"
    assert analysis.model_id == "test-model"
    assert analysis.taxonomy_version == TaxonomyVersion(1, 1)
    assert [a.type for a in analysis.result.achievements] == ["healing", "manifestation"]

    latest = store.get_latest()
    assert latest.version == TaxonomyVersion(1, 1)
    assert latest.taxonomy["healing"]["neurological"].subcategories == ["tinnitus"]
    assert latest.proposed_from_id == "vid-1"

    prompt = llm.prompts[0]
    assert prompt.index("# Taxonomy for Tag Extraction") < prompt.index("# Video Transcript to Analyze")
    assert prompt.index("# Video Transcript to Analyze") < prompt.index("# Expected Output Schema")
    assert "My tinnitus got quieter" in prompt


def test_reply_without_proposals_keeps_baseline_version(tmp_path: Path) -> None:
    reply = {"analysis": {"achievements": [{"type": "healing", "tags": ["healing"]}]}}
    llm = MockAdapter(cfg=_cfg(tmp_path), reply=reply)
    orchestrator, store = _orchestrator(tmp_path, llm)

    outcome = orchestrator.analyze("vid-2")

    assert outcome.success
    assert outcome.analysis.taxonomy_version == TaxonomyVersion(1, 0)
    assert store.get_latest().version == TaxonomyVersion(1, 0)


def test_integrator_appends_unseen_domain(tmp_path: Path) -> None:
    reply = {
        "analysis": {"achievements": [{"type": "healing", "tags": ["healing", "physical_health"]}]},
        "proposals": {"taxonomy": [{"transformation": {"relationships": {"subcategories": ["reconciliation"]}}}]},
    }
    orchestrator, store = _orchestrator(tmp_path, MockAdapter(cfg=_cfg(tmp_path), reply=reply))

    outcome = orchestrator.analyze("vid-3")

    achievements = outcome.analysis.result.achievements
    assert achievements[-1].type == "transformation"
    assert achievements[-1].tags == ["transformation", "relationships", "reconciliation"]
    assert "transformation" in store.get_latest().taxonomy


@pytest.mark.parametrize(
    "video_id,llm_factory,seeded,error_type",
    [
        ("missing", MockAdapter, True, "TranscriptUnavailableError"),
        ("vid", ExplodingAdapter, True, "LanguageModelError"),
        ("vid", lambda cfg: MockAdapter(cfg=cfg, reply="I cannot help with that."), True, "ExtractionParseError"),
        ("vid", lambda cfg: MockAdapter(cfg=cfg, reply="   "), True, "LanguageModelError"),
        ("vid", MockAdapter, False, "TaxonomyUnavailableError"),
    ],
)
def test_collaborator_failures_become_failed_outcomes(
    tmp_path: Path, video_id: str, llm_factory, seeded: bool, error_type: str
) -> None:
    cfg = _cfg(tmp_path)
    llm = llm_factory(cfg=cfg)
    orchestrator, store = _orchestrator(tmp_path, llm, seeded=seeded)

    outcome = orchestrator.analyze(video_id)

    assert not outcome.success
    assert outcome.video_id == video_id
    assert outcome.analysis is None
    assert outcome.error_type == error_type
    assert outcome.error_message
    if seeded:
        assert store.get_latest().version == TaxonomyVersion(1, 0)
