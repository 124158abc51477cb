"""
Taxonomy management: versions, documents, seed parsing and proposal merging.

All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.loader import parse_taxonomy_seed
from domain.taxonomy.merger import merge_proposals
from domain.taxonomy.models import (
    CategoryNode,
    Proposal,
    TaxonomyDocument,
    TaxonomyGroup,
    TaxonomyMap,
    TaxonomySpecification,
)
from domain.taxonomy.version import TaxonomyVersion

__all__ = [
    "TaxonomyVersion",
    "CategoryNode",
    "TaxonomyGroup",
    "TaxonomyMap",
    "TaxonomySpecification",
    "TaxonomyDocument",
    "Proposal",
    "parse_taxonomy_seed",
    "merge_proposals",
]
