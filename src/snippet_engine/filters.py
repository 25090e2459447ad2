from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence

from .model import ModelContext
from .snippets import Group
from .tags import Tag, TagComparison, compare_tags, find_category

__all__ = [
    "BUILTIN_FILTERS",
    "Filter",
    "FilterResult",
    "ScoredGroup",
    "apply_filters",
    "apply_filters_to_group",
    "build_filter",
    "dryness",
    "full_bonus",
    "mismatch_filter",
    "partial_bonus",
    "unmentioned",
]


@dataclass(frozen=True)
class FilterResult:
    """
    Outcome of a single filter on a single group.

    Either a score delta (optionally with a replacement group for the filters
    that follow) or a veto that drops the group.
    """

    delta: float = 0
    veto: bool = False
    group: Group | None = None

    @classmethod
    def score(cls, delta: float = 0) -> "FilterResult":
        return cls(delta=delta)

    @classmethod
    def vetoed(cls) -> "FilterResult":
        return cls(veto=True)

    @classmethod
    def replace(cls, group: Group, delta: float = 0) -> "FilterResult":
        return cls(delta=delta, group=group)


Filter = Callable[[Group, ModelContext], FilterResult]


@dataclass(frozen=True)
class ScoredGroup:
    group: Group
    score: float


def apply_filters_to_group(filters: Sequence[Filter], group: Group, model: ModelContext) -> ScoredGroup | None:
    """Thread `group` through `filters` in order; None means the group was vetoed."""
    score: float = 0
    current = group
    for filter_fn in filters:
        result = filter_fn(current, model)
        if not isinstance(result, FilterResult):
            raise TypeError(f"filter {filter_fn!r} returned {type(result).__name__}, expected FilterResult")
        if result.veto:
            return None
        if result.group is not None:
            current = result.group
        score += result.delta
    return ScoredGroup(current, score)


def apply_filters(filters: Sequence[Filter], groups: Sequence[Group], model: ModelContext) -> List[ScoredGroup]:
    scored: List[ScoredGroup] = []
    for group in groups:
        outcome = apply_filters_to_group(filters, group, model)
        if outcome is not None:
            scored.append(outcome)
    return scored


def _matches(group: Group, model: ModelContext, mode: TagComparison) -> List[Tag]:
    hits: List[Tag] = []
    for group_tag in group.tags:
        if not group_tag:
            continue
        model_tag = find_category(model.tags, group_tag[0])
        if model_tag is not None and compare_tags(group_tag, model_tag) is mode:
            hits.append(group_tag)
    return hits


# ---------------------------------------------------------------------- #
# Built-in filter factories
# ---------------------------------------------------------------------- #
def mismatch_filter() -> Filter:
    """Veto any group that contradicts a model tag of the same category."""

    def _mismatch(group: Group, model: ModelContext) -> FilterResult:
        if _matches(group, model, TagComparison.MISMATCH):
            return FilterResult.vetoed()
        return FilterResult.score(0)

    return _mismatch


def _bonus_compare(mode: TagComparison, bonus: float, cumulative: bool) -> Filter:
    def _bonus(group: Group, model: ModelContext) -> FilterResult:
        hits = _matches(group, model, mode)
        if not hits:
            return FilterResult.score(0)
        return FilterResult.score(bonus * len(hits) if cumulative else bonus)

    return _bonus


def partial_bonus(bonus: float = 1, cumulative: bool = False) -> Filter:
    return _bonus_compare(TagComparison.PARTIAL, bonus, cumulative)


def full_bonus(bonus: float = 1, cumulative: bool = False) -> Filter:
    return _bonus_compare(TagComparison.EXACT, bonus, cumulative)


def dryness() -> Filter:
    """Strip phrases that already appear in the model history."""

    def _dryness(group: Group, model: ModelContext) -> FilterResult:
        used = set(model.history)
        fresh = [phrase for phrase in group.phrases if phrase not in used]
        return FilterResult.replace(group.with_phrases(fresh), 0)

    return _dryness


def unmentioned(bonus: float = 1) -> Filter:
    """Reward groups carrying at least one category absent from the tag history."""

    def _unmentioned(group: Group, model: ModelContext) -> FilterResult:
        if not group.tags:
            return FilterResult.score(0)
        seen = {tag[0] for tag in model.tag_history if tag}
        if any(tag and tag[0] not in seen for tag in group.tags):
            return FilterResult.score(bonus)
        return FilterResult.score(0)

    return _unmentioned


BUILTIN_FILTERS: Dict[str, Callable[..., Filter]] = {
    "mismatch": mismatch_filter,
    "partial_bonus": partial_bonus,
    "full_bonus": full_bonus,
    "dryness": dryness,
    "unmentioned": unmentioned,
}


def build_filter(spec: str) -> Filter:
    """
    Build a built-in filter from a short descriptor such as 'dryness',
    'partial_bonus:2' or 'full_bonus:1:cumulative'.
    """
    name, _, raw_args = spec.strip().partition(":")
    factory = BUILTIN_FILTERS.get(name.strip())
    if factory is None:
        raise ValueError(f"unknown filter '{name}' (expected one of {', '.join(sorted(BUILTIN_FILTERS))})")
    args: list[object] = []
    for raw in (part.strip() for part in raw_args.split(":") if part.strip()):
        if raw.lower() == "cumulative":
            args.append(True)
            continue
        try:
            args.append(float(raw) if "." in raw else int(raw))
        except ValueError as exc:
            raise ValueError(f"invalid argument '{raw}' for filter '{name}'") from exc
    return factory(*args)
