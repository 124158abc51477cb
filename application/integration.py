"""Best-effort reconciliation of proposal tags into the in-flight achievements."""

import logging

from domain.schemas import Achievement, AnalysisResult
from domain.taxonomy.models import Proposal
from domain.taxonomy.normalizer import dedupe_casefold, fold

logger = logging.getLogger(__name__)


def extract_proposal_tags(proposal: Proposal) -> list[str]:
    """Category names followed by their subcategories; the domain is not a tag."""
    tags: list[str] = []
    for category, node in proposal.group.items():
        tags.append(category)
        tags.extend(node.subcategories)
    return dedupe_casefold(tags)


class ProposalIntegrator:
    """
    Merge each proposal's tags into the achievement of the same type.

    - Same type exists and carries one of the proposal's category names: add missing tags.
    - Same type exists but no category tag matches: skip (no safe target).
    - No achievement of that type: append ``{type: domain, tags: [domain, *tags]}``.
    """

    def integrate(self, result: AnalysisResult) -> int:
        """Mutate ``result.achievements`` in place; return the number of proposals applied."""
        applied = 0
        for proposal in result.proposals:
            if self._integrate_one(result, proposal):
                applied += 1
        return applied

    def _integrate_one(self, result: AnalysisResult, proposal: Proposal) -> bool:
        tags = extract_proposal_tags(proposal)
        domain = proposal.domain.strip()
        if not tags or not domain:
            return False

        same_type = [a for a in result.achievements if fold(a.type) == fold(domain)]
        if not same_type:
            result.achievements.append(Achievement(type=domain, tags=dedupe_casefold([domain, *tags])))
            logger.debug("Appended achievement for new domain %s with %d proposed tags", domain, len(tags))
            return True

        category_keys = {fold(c) for c in proposal.group}
        target = next(
            (a for a in same_type if any(fold(t) in category_keys for t in a.tags)),
            None,
        )
        if target is None:
            logger.debug(
                "No existing achievement for domain %s with matching category; skipping merge.",
                domain,
            )
            return False

        present = {fold(t) for t in target.tags}
        added = [t for t in tags if fold(t) not in present]
        target.tags.extend(added)
        logger.debug("Merged %d proposed tag(s) into %s achievement", len(added), target.type)
        return True
