"""Parse a baseline taxonomy seed from a pre-loaded JSON dict."""

import logging
from typing import Any

from domain.taxonomy.models import TaxonomySpecification
from domain.taxonomy.version import TaxonomyVersion

logger = logging.getLogger(__name__)

# Top-level keys that are never domains when the seed is flattened.
RESERVED_SEED_KEYS = frozenset({"id", "version", "rules"})

DEFAULT_SEED_VERSION = TaxonomyVersion(1, 0)


def parse_taxonomy_seed(data: dict[str, Any]) -> TaxonomySpecification:
    """
    Parse a seed definition into a TaxonomySpecification.

    This is a pure function - it does NOT perform file I/O.
    The JSON loading happens in infrastructure.config.loader.

    Two shapes are accepted:
        - wrapped: ``{"id": "v1.0", "taxonomy": {<domain>: {...}}}``
        - flat: ``{"id": "v1.0", <domain>: {...}, ...}`` where ``id``,
          ``version`` and ``rules`` are skipped

    Args:
        data: Dictionary from json.load()

    Returns:
        TaxonomySpecification; version defaults to v1.0 when absent

    Raises:
        ValueError: If the version is malformed or a domain is not a mapping
    """
    if not isinstance(data, dict):
        raise ValueError(f"Taxonomy seed must be a mapping, got {type(data).__name__}")

    raw_version = data.get("id") or data.get("version")
    version = TaxonomyVersion.parse(str(raw_version)) if raw_version else DEFAULT_SEED_VERSION

    wrapped = data.get("taxonomy")
    if isinstance(wrapped, dict):
        domains = wrapped
    else:
        domains = {k: v for k, v in data.items() if k not in RESERVED_SEED_KEYS}

    for domain, group in domains.items():
        if group is not None and not isinstance(group, dict):
            raise ValueError(f"Seed domain '{domain}' must map category names to nodes")

    taxonomy = {
        str(domain): {str(category): node or {} for category, node in (group or {}).items()}
        for domain, group in domains.items()
    }
    spec = TaxonomySpecification(version=version, taxonomy=taxonomy)
    logger.debug("Parsed taxonomy seed %s with %d domains", spec.version, len(spec.taxonomy))
    return spec
