from application.integration import ProposalIntegrator, extract_proposal_tags
from domain.schemas import Achievement, AnalysisResult
from domain.taxonomy.models import CategoryNode, Proposal


def _proposal(domain: str, category: str, subcategories: list[str]) -> Proposal:
    return Proposal(domain=domain, group={category: CategoryNode(subcategories=subcategories)})


def test_tags_are_categories_then_subcategories() -> None:
    proposal = Proposal(
        domain="healing",
        group={
            "cancer": CategoryNode(subcategories=["cervical_cancer"]),
            "neurological": CategoryNode(subcategories=["tinnitus", "Cancer"]),
        },
    )
    assert extract_proposal_tags(proposal) == ["cancer", "cervical_cancer", "neurological", "tinnitus"]


def test_merges_into_achievement_with_matching_category() -> None:
    result = AnalysisResult(
        achievements=[Achievement(type="healing", tags=["healing", "cancer"], details="remission")],
        proposals=[_proposal("healing", "cancer", ["cervical_cancer"])],
    )

    applied = ProposalIntegrator().integrate(result)

    assert applied == 1
    assert len(result.achievements) == 1
    assert result.achievements[0].tags == ["healing", "cancer", "cervical_cancer"]
    assert result.achievements[0].details == "remission"


def test_appends_achievement_for_unseen_domain() -> None:
    result = AnalysisResult(
        achievements=[Achievement(type="healing", tags=["healing"])],
        proposals=[_proposal("manifestation", "career", ["promotion"])],
    )

    assert ProposalIntegrator().integrate(result) == 1

    added = result.achievements[-1]
    assert added.type == "manifestation"
    assert added.tags == ["manifestation", "career", "promotion"]


def test_skips_when_no_category_matches() -> None:
    result = AnalysisResult(
        achievements=[Achievement(type="healing", tags=["healing", "mental_health"])],
        proposals=[_proposal("healing", "neurological", ["tinnitus"])],
    )

    assert ProposalIntegrator().integrate(result) == 0
    assert result.achievements[0].tags == ["healing", "mental_health"]


def test_type_and_tags_compare_case_insensitively() -> None:
    result = AnalysisResult(
        achievements=[Achievement(type="Healing", tags=["CANCER"])],
        proposals=[_proposal("healing", "cancer", ["Cervical_Cancer", "cancer"])],
    )

    ProposalIntegrator().integrate(result)

    assert result.achievements[0].tags == ["CANCER", "Cervical_Cancer"]


def test_empty_proposal_is_ignored() -> None:
    result = AnalysisResult(proposals=[Proposal(domain="healing", group={})])
    assert ProposalIntegrator().integrate(result) == 0
    assert result.achievements == []
