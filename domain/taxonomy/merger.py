"""Merge taxonomy proposals into a new taxonomy version."""

import logging
from collections.abc import Sequence
from datetime import datetime

from domain.taxonomy.models import (
    CategoryNode,
    Proposal,
    TaxonomyDocument,
    TaxonomyMap,
    TaxonomySpecification,
    utc_now,
)
from domain.taxonomy.normalizer import find_key, is_blank, union_casefold

logger = logging.getLogger(__name__)


def merge_proposals(
    current: TaxonomyDocument,
    proposals: Sequence[Proposal],
    *,
    proposed_from_id: str | None = None,
    now: datetime | None = None,
) -> tuple[TaxonomyDocument | None, list[str]]:
    """
    Apply proposals, in order, to a working copy of ``current``.

    Domains and categories are matched case-insensitively; an existing key keeps
    its casing. ``current`` is never modified.

    Args:
        current: Latest taxonomy document
        proposals: Proposals extracted from one analysis
        proposed_from_id: Id of the video whose analysis produced the proposals
        now: Timestamp for the new document (defaults to current UTC time)

    Returns:
        ``(new_document, change_log)``, or ``(None, [])`` when nothing changed.
        The new document's version is ``current.version.increment_minor()``.
    """
    working: TaxonomyMap = {
        domain: {category: node.model_copy(deep=True) for category, node in group.items()}
        for domain, group in current.taxonomy.items()
    }
    changes: list[str] = []

    for proposal in proposals:
        if is_blank(proposal.domain):
            logger.debug("Skipping proposal with blank domain")
            continue

        domain_key = find_key(working, proposal.domain.strip())
        if domain_key is None:
            domain_key = proposal.domain.strip()
            working[domain_key] = {}
            changes.append(f"Add domain '{domain_key}'")

        group = working[domain_key]
        for category, node in proposal.group.items():
            if is_blank(category):
                continue

            category_key = find_key(group, category.strip())
            if category_key is None:
                category_key = category.strip()
                group[category_key] = CategoryNode(
                    subcategories=list(node.subcategories),
                    attributes=list(node.attributes),
                )
                changes.append(f"Add category '{domain_key}.{category_key}'")
                continue

            existing = group[category_key]
            group[category_key] = CategoryNode(
                subcategories=union_casefold(existing.subcategories, node.subcategories),
                attributes=union_casefold(existing.attributes, node.attributes),
            )
            changes.append(f"Merge category '{domain_key}.{category_key}'")

    if not changes:
        return None, []

    merged = TaxonomyDocument(
        specification=TaxonomySpecification(
            version=current.version.increment_minor(),
            taxonomy=working,
        ),
        updated_at=now or utc_now(),
        changes=changes,
        proposed_from_id=proposed_from_id,
    )
    logger.info("Merged %d taxonomy change(s): %s -> %s", len(changes), current.version, merged.version)
    return merged, changes
