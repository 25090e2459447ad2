from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence, Tuple

Tag = Tuple[str, ...]

__all__ = [
    "Tag",
    "TagComparison",
    "as_tag",
    "compare_tags",
    "find_category",
    "merge_tags",
    "force_tag",
]


class TagComparison(Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    MISMATCH = "mismatch"


def as_tag(raw: Sequence[str] | str) -> Tag:
    """Coerce a list (or a lone category string) into the canonical tuple form."""
    if isinstance(raw, str):
        return (raw,)
    return tuple(str(part) for part in raw)


def compare_tags(a: Sequence[str], b: Sequence[str]) -> TagComparison:
    """
    Classify how two tag paths relate.

    Equal paths are EXACT. Paths of equal length that differ anywhere are a
    MISMATCH. Otherwise the shorter path must be a prefix of the longer one
    for the pair to count as PARTIAL.
    """
    if len(a) == len(b):
        if all(x == y for x, y in zip(a, b)):
            return TagComparison.EXACT
        return TagComparison.MISMATCH
    shorter, longer = (a, b) if len(a) < len(b) else (b, a)
    for index, element in enumerate(shorter):
        if element != longer[index]:
            return TagComparison.MISMATCH
    return TagComparison.PARTIAL


def find_category(tags: Iterable[Tag], category: str) -> Tag | None:
    for tag in tags:
        if tag and tag[0] == category:
            return tag
    return None


def merge_tags(current: Sequence[Tag], incoming: Iterable[Tag]) -> List[Tag]:
    """
    Fold `incoming` into `current`, keeping one tag per category.

    When both sides carry the same category the longer (more specific) tag
    wins; on a tie the existing tag stays.
    """
    merged = list(current)
    for tag in incoming:
        if not tag:
            continue
        site = next((i for i, existing in enumerate(merged) if existing[0] == tag[0]), -1)
        if site == -1:
            merged.append(tag)
        elif len(merged[site]) < len(tag):
            merged[site] = tag
    return merged


def force_tag(current: Sequence[Tag], tag: Tag) -> List[Tag]:
    """Return a copy of `current` where `tag` replaces its category outright."""
    forced = list(current)
    for index, existing in enumerate(forced):
        if existing[0] == tag[0]:
            forced[index] = tag
            return forced
    forced.append(tag)
    return forced
