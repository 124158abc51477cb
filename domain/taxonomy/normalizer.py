"""Case-insensitive helpers for taxonomy names and tag lists."""

from collections.abc import Iterable, Mapping
from typing import TypeVar

T = TypeVar("T")


def fold(name: object) -> str:
    """Comparison key for taxonomy names (trimmed, case-folded)."""
    return str(name).strip().casefold()


def is_blank(value: object) -> bool:
    return value is None or not str(value).strip()


def dedupe_casefold(values: Iterable[object] | None) -> list[str]:
    """
    Drop blanks and case-insensitive duplicates, keeping first-seen casing and order.

    Examples:
        >>> dedupe_casefold(["Obesity", "obesity ", "", None, "Insomnia"])
        ['Obesity', 'Insomnia']
    """
    out: list[str] = []
    seen: set[str] = set()
    for raw in values or ():
        if is_blank(raw):
            continue
        item = str(raw).strip()
        key = fold(item)
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out


def union_casefold(existing: Iterable[str], incoming: Iterable[object] | None) -> list[str]:
    """Case-insensitive union; entries of ``existing`` come first and keep their casing."""
    return dedupe_casefold([*existing, *(incoming or ())])


def find_key(mapping: Mapping[str, T], name: str) -> str | None:
    """Return the existing key matching ``name`` case-insensitively, or None."""
    if name in mapping:
        return name
    target = fold(name)
    for key in mapping:
        if fold(key) == target:
            return key
    return None
