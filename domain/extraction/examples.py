"""Canonical example of a well-formed analysis reply."""

from domain.schemas import Achievement, AnalysisResult, Timeframe
from domain.taxonomy.models import CategoryNode, Proposal


def example_analysis_result() -> AnalysisResult:
    """Build a fresh example result (callers may mutate it)."""
    return AnalysisResult(
        achievements=[
            Achievement(
                type="healing",
                tags=["healing", "physical_health", "obesity", "weight_loss"],
                details="Lost 25 pounds and normalized blood pressure after 10 weeks of consistent practice.",
            ),
            Achievement(
                type="manifestation",
                tags=["manifestation", "financial", "manifested_money", "amount_over_10k"],
                details="Unexpected $15,000 business opportunity after shifting beliefs and daily meditations.",
            ),
        ],
        timeframe=Timeframe(notice_effects="2 weeks", full_healing="3 months"),
        practices=["meditation", "breath_work", "journaling"],
        sentiment_score=0.78,
        confidence_score=0.82,
        proposals=[
            Proposal(
                domain="healing",
                group={"neurological": CategoryNode(subcategories=["tinnitus"], attributes=[])},
                justification=(
                    "Multiple testimonials mention tinnitus improvements; proposing a 'neurological' "
                    "subcategory with 'tinnitus' for better specificity."
                ),
            )
        ],
    )
