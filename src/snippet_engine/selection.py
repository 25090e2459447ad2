from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .errors import ExhaustedCandidates
from .filters import ScoredGroup
from .model import ModelContext
from .tags import Tag

SalienceFormula = Callable[[float], float]
RandomSource = Callable[[], float]
Candidate = Tuple[str, Tuple[Tag, ...]]

__all__ = [
    "Candidate",
    "PhraseChoice",
    "PhraseSelector",
    "RandomSource",
    "SalienceFormula",
    "SalienceSelector",
    "flatten_groups",
    "identity_salience",
    "select_groups_with_phrases",
]


def identity_salience(max_score: float) -> float:
    return max_score


def select_groups_with_phrases(groups: Sequence[ScoredGroup]) -> List[ScoredGroup]:
    """Drop groups that the filters (usually dryness) left without phrases."""
    return [scored for scored in groups if scored.group.phrases]


class SalienceSelector:
    """Keep only groups scoring at or above `formula(max_score)`."""

    def __init__(self, formula: SalienceFormula | None = None) -> None:
        self.formula = formula or identity_salience

    def select(self, groups: Sequence[ScoredGroup]) -> List[ScoredGroup]:
        candidates = select_groups_with_phrases(groups)
        max_score = max((scored.score for scored in candidates), default=-math.inf)
        threshold = self.formula(max_score)
        return [scored for scored in candidates if scored.score >= threshold]


def flatten_groups(groups: Sequence[ScoredGroup]) -> List[Candidate]:
    """Pair every surviving phrase with the full tag set of its group."""
    return [(phrase, scored.group.tags) for scored in groups for phrase in scored.group.phrases]


@dataclass(frozen=True)
class PhraseChoice:
    phrase: str
    tags: Tuple[Tag, ...]
    index: int
    pool_size: int


class PhraseSelector:
    """Uniform pick over flattened candidates, recording the choice on the model."""

    def __init__(self, rng: RandomSource, *, reincorporate: bool = False) -> None:
        self.rng = rng
        self.reincorporate = reincorporate

    def choose(self, candidates: Sequence[Candidate], *, snippet: str | None = None) -> PhraseChoice:
        if not candidates:
            raise ExhaustedCandidates(snippet)
        index = math.floor(self.rng() * len(candidates))
        phrase, tags = candidates[index]
        return PhraseChoice(phrase=phrase, tags=tags, index=index, pool_size=len(candidates))

    def select(
        self,
        candidates: Sequence[Candidate],
        model: ModelContext,
        *,
        snippet: str | None = None,
    ) -> PhraseChoice:
        choice = self.choose(candidates, snippet=snippet)
        if self.reincorporate:
            model.merge_tags(choice.tags)
        model.record_choice(choice.phrase, choice.tags)
        return choice
