"""Taxonomy data models (Pydantic classes)."""

from datetime import datetime, timezone
from typing import Any, TypeAlias

from pydantic import BaseModel, Field, field_validator

from domain.taxonomy.normalizer import dedupe_casefold
from domain.taxonomy.version import TaxonomyVersion, VersionField


class CategoryNode(BaseModel):
    """Subcategories and attributes of one category; case-insensitively unique."""

    subcategories: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)

    @field_validator("subcategories", "attributes", mode="before")
    @classmethod
    def _dedupe(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set)):
            raise ValueError(f"expected a list of strings, got {type(v).__name__}")
        return dedupe_casefold(v)

    def is_empty(self) -> bool:
        return not self.subcategories and not self.attributes


# category name -> node
TaxonomyGroup: TypeAlias = dict[str, CategoryNode]
# domain name -> group
TaxonomyMap: TypeAlias = dict[str, TaxonomyGroup]


class TaxonomySpecification(BaseModel):
    """The taxonomy data shape: a version plus the domain -> category hierarchy."""

    version: VersionField = Field(default_factory=TaxonomyVersion)
    taxonomy: TaxonomyMap = Field(default_factory=dict)


JUSTIFICATION_KEY = "justification"


class Proposal(BaseModel):
    """
    A model-suggested extension to one taxonomy domain.

    On the wire the domain is not a field but the name of the single property
    that sits next to ``justification``:

        {"healing": {"neurological": {"subcategories": ["tinnitus"]}}, "justification": "..."}

    Use :meth:`from_wire` / :meth:`to_wire` for that shape.
    """

    domain: str
    group: TaxonomyGroup = Field(default_factory=dict)
    justification: str = ""

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Proposal":
        """
        Decode the dynamic-domain-key shape.

        ``justification`` is matched case-insensitively; exactly one other
        property must be present and its value must be a category mapping.

        Raises:
            ValueError: If the payload is not a mapping, has no domain property,
                has more than one, or the group does not validate.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Proposal must be a JSON object, got {type(data).__name__}")

        justification = ""
        domains: list[tuple[str, Any]] = []
        for key, value in data.items():
            if str(key).strip().lower() == JUSTIFICATION_KEY:
                justification = "" if value is None else str(value)
            else:
                domains.append((str(key), value))

        if len(domains) != 1:
            raise ValueError(f"Proposal must carry exactly one domain property, found {[k for k, _ in domains]}")

        domain, group = domains[0]
        if group is None:
            group = {}
        if not isinstance(group, dict):
            raise ValueError(f"Proposal domain '{domain}' must map category names to nodes")

        return cls.model_validate(
            {
                "domain": domain,
                "group": {str(category): node or {} for category, node in group.items()},
                "justification": justification,
            }
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            self.domain: {category: node.model_dump(mode="json") for category, node in self.group.items()},
            JUSTIFICATION_KEY: self.justification,
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaxonomyDocument(BaseModel):
    """
    One persisted taxonomy snapshot.

    Wraps a :class:`TaxonomySpecification` and adds audit-only fields. A document
    is never edited after creation; evolution produces a new document with a
    higher version.
    """

    specification: TaxonomySpecification
    updated_at: datetime = Field(default_factory=utc_now)
    changes: list[str] = Field(default_factory=list)
    proposed_from_id: str | None = None

    @property
    def version(self) -> TaxonomyVersion:
        return self.specification.version

    @property
    def taxonomy(self) -> TaxonomyMap:
        return self.specification.taxonomy

    @property
    def id(self) -> str:
        return str(self.version)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the stored document shape (``id``/``updatedAt``/``proposedFromVideoId``)."""
        return {
            "id": self.id,
            "taxonomy": {
                domain: {category: node.model_dump(mode="json") for category, node in group.items()}
                for domain, group in self.taxonomy.items()
            },
            "updatedAt": self.updated_at.isoformat(),
            "changes": list(self.changes),
            "proposedFromVideoId": self.proposed_from_id,
        }

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "TaxonomyDocument":
        """
        Build a document from its stored shape.

        Raises:
            ValueError: If the payload is not a mapping or fails validation
                (including a malformed ``id``).
        """
        if not isinstance(data, dict):
            raise ValueError(f"Taxonomy document must be a mapping, got {type(data).__name__}")

        payload: dict[str, Any] = {
            "specification": {
                "version": data.get("id") or data.get("version") or "v1.0",
                "taxonomy": data.get("taxonomy") or {},
            },
            "changes": data.get("changes") or [],
            "proposed_from_id": data.get("proposedFromVideoId"),
        }
        if data.get("updatedAt"):
            payload["updated_at"] = data["updatedAt"]
        return cls.model_validate(payload)
