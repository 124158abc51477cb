from pathlib import Path

import pytest

from domain.extraction.examples import example_analysis_result
from domain.schemas import VideoAnalysis
from domain.taxonomy.models import TaxonomyDocument, TaxonomySpecification
from domain.taxonomy.version import TaxonomyVersion
from infrastructure.storage.json_files import JsonFileAnalysisRepository, JsonFileTaxonomyRepository


def _doc(version: str) -> TaxonomyDocument:
    return TaxonomyDocument(
        specification=TaxonomySpecification(
            version=version, taxonomy={"healing": {"cancer": {"subcategories": ["x"]}}}
        ),
        changes=[f"created {version}"],
    )


def test_taxonomy_documents_are_keyed_by_version(tmp_path: Path) -> None:
    repo = JsonFileTaxonomyRepository(tmp_path)
    repo.upsert(_doc("v1.0"))
    repo.upsert(_doc("v1.1"))

    assert sorted(p.name for p in tmp_path.iterdir()) == ["v1.0.json", "v1.1.json"]
    loaded = repo.get("v1.1")
    assert loaded is not None
    assert loaded.version == TaxonomyVersion(1, 1)
    assert loaded.taxonomy["healing"]["cancer"].subcategories == ["x"]
    assert repo.get("v9.9") is None


def test_upsert_replaces_existing_document(tmp_path: Path) -> None:
    repo = JsonFileTaxonomyRepository(tmp_path)
    repo.upsert(_doc("v1.0"))
    replacement = _doc("v1.0").model_copy(update={"changes": ["replaced"]})
    repo.upsert(replacement)

    assert [d.changes for d in repo.list_documents()] == [["replaced"]]


def test_unreadable_documents_are_skipped_when_listing(tmp_path: Path) -> None:
    repo = JsonFileTaxonomyRepository(tmp_path)
    repo.upsert(_doc("v1.0"))
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    (tmp_path / "bad-id.json").write_text('{"id": "latest"}', encoding="utf-8")

    assert [d.id for d in repo.list_documents()] == ["v1.0"]


def test_missing_directory_lists_nothing(tmp_path: Path) -> None:
    assert JsonFileTaxonomyRepository(tmp_path / "absent").list_documents() == []


@pytest.mark.parametrize("doc_id", ["", "../escape", "a/b", ".hidden"])
def test_invalid_ids_are_rejected(tmp_path: Path, doc_id: str) -> None:
    with pytest.raises(ValueError):
        JsonFileAnalysisRepository(tmp_path).exists(doc_id)


def test_analysis_round_trip(tmp_path: Path) -> None:
    repo = JsonFileAnalysisRepository(tmp_path / "analyses")
    analysis = VideoAnalysis(
        id="vid",
        provider="openai",
        model_id="gpt-4.1-mini",
        taxonomy_version="v1.2",
        result=example_analysis_result(),
        llm_duration_ms=1200,
        total_tokens=900,
    )

    assert not repo.exists("vid")
    repo.upsert(analysis)
    assert repo.exists("vid")

    stored = repo.get("vid")
    assert stored["taxonomyVersion"] == "v1.2"
    assert stored["modelVersion"] == "gpt-4.1-mini"
    assert stored["llm"] == {"durationMs": 1200, "totalTokens": 900}
    assert stored["analysis"]["sentimentScore"] == pytest.approx(0.78)
    assert stored["proposals"]["taxonomy"][0]["justification"]
