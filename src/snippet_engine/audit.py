from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping

from .snippets import SnippetRepository

__all__ = ["PhraseAudit"]


class PhraseAudit:
    """Counts how often each declared phrase has been chosen, per snippet."""

    def __init__(self, repository: SnippetRepository) -> None:
        self._counts: Dict[str, Dict[str, int]] = {}
        for snippet in repository.valid_snippets():
            self._counts[snippet.name] = {phrase: 0 for phrase in snippet.declared_phrases()}

    def increment(self, snippet: str, phrase: str) -> None:
        per_snippet = self._counts.setdefault(snippet, {})
        per_snippet[phrase] = per_snippet.get(phrase, 0) + 1

    def count(self, snippet: str, phrase: str) -> int:
        return self._counts.get(snippet, {}).get(phrase, 0)

    @property
    def data(self) -> Mapping[str, Mapping[str, int]]:
        return MappingProxyType(
            {name: MappingProxyType(phrases) for name, phrases in self._counts.items()}
        )
