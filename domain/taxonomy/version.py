"""Comparable ``major.minor`` taxonomy version."""

from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import PlainSerializer, PlainValidator

from domain.errors import TaxonomyVersionError


@dataclass(frozen=True, order=True)
class TaxonomyVersion:
    """
    Immutable taxonomy version identifier.

    Ordering compares ``major`` first, then ``minor`` (dataclass field order).
    The canonical text form is ``v{major}.{minor}``.
    """

    major: int = 1
    minor: int = 0

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            raise TaxonomyVersionError(f"{self.major}.{self.minor}")

    @classmethod
    def parse(cls, text: str) -> "TaxonomyVersion":
        """
        Parse ``"v1.2"``, ``"V1.2"`` or ``"1.2"``.

        Raises:
            TaxonomyVersionError: If the text is not exactly two non-negative
                integer parts separated by a single dot.
        """
        if not isinstance(text, str):
            raise TaxonomyVersionError(text)

        s = text.strip()
        if s[:1] in ("v", "V"):
            s = s[1:]

        parts = s.split(".")
        if len(parts) != 2 or not all(p.isdigit() and p.isascii() for p in parts):
            raise TaxonomyVersionError(text)

        return cls(int(parts[0]), int(parts[1]))

    @classmethod
    def try_parse(cls, text: str | None) -> "TaxonomyVersion | None":
        """Like :meth:`parse` but return None for malformed input."""
        if text is None:
            return None
        try:
            return cls.parse(text)
        except TaxonomyVersionError:
            return None

    def increment_minor(self) -> "TaxonomyVersion":
        return TaxonomyVersion(self.major, self.minor + 1)

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}"


def _coerce_version(value: Any) -> TaxonomyVersion:
    if isinstance(value, TaxonomyVersion):
        return value
    return TaxonomyVersion.parse(value)


# Pydantic field type: accepts a TaxonomyVersion or its text form, dumps as "vX.Y".
VersionField = Annotated[
    TaxonomyVersion,
    PlainValidator(_coerce_version),
    PlainSerializer(str, return_type=str),
]
