from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, Mapping, Sequence, Tuple

from .errors import MalformedSnippet, UnknownSnippet
from .tags import Tag, as_tag

logger = logging.getLogger(__name__)

__all__ = ["Group", "Snippet", "SnippetRepository", "read_group", "read_snippet"]


@dataclass(frozen=True)
class Group:
    """A tagged bundle of candidate phrases. Never mutated; filters build new ones."""

    phrases: Tuple[str, ...]
    tags: Tuple[Tag, ...] = ()

    def with_phrases(self, phrases: Iterable[str]) -> "Group":
        return replace(self, phrases=tuple(phrases))


@dataclass(frozen=True)
class Snippet:
    name: str
    groups: Tuple[Group, ...]
    bind: bool = False

    def declared_phrases(self) -> Iterator[str]:
        for group in self.groups:
            yield from group.phrases


def _field(raw: Any, key: str, default: Any = None) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(key, default)
    return getattr(raw, key, default)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def read_group(snippet_name: str, raw: Any) -> Group:
    """
    Build a Group from repository data.

    Missing tags default to an empty tuple and a lone phrase string is read as
    a one-element list. Neither substitution is written back to `raw`.
    """
    if isinstance(raw, Group):
        return raw
    phrases = _field(raw, "phrases")
    if isinstance(phrases, str):
        phrases = [phrases]
    if not _is_sequence(phrases) or not all(isinstance(p, str) for p in phrases):
        raise MalformedSnippet(snippet_name, f"group phrases must be a string or list of strings, got {phrases!r}")
    raw_tags = _field(raw, "tags") or ()
    if not _is_sequence(raw_tags):
        raise MalformedSnippet(snippet_name, f"group tags must be a list, got {raw_tags!r}")
    tags = tuple(as_tag(tag) for tag in raw_tags)
    return Group(phrases=tuple(phrases), tags=tags)


def read_snippet(name: str, raw: Any) -> Snippet:
    if isinstance(raw, Snippet):
        return raw
    groups = _field(raw, "groups")
    if not _is_sequence(groups):
        raise MalformedSnippet(name, f"missing or bad groups array; was {type(groups).__name__}")
    return Snippet(
        name=name,
        groups=tuple(read_group(name, group) for group in groups),
        bind=bool(_field(raw, "bind", False)),
    )


class SnippetRepository:
    """Read-only view over caller-owned snippet data with per-session parsing."""

    def __init__(self, raw: Mapping[str, Any]) -> None:
        self._raw = raw
        self._parsed: Dict[str, Snippet] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._raw

    def __len__(self) -> int:
        return len(self._raw)

    def names(self) -> Sequence[str]:
        return list(self._raw.keys())

    def get(self, name: str) -> Snippet:
        cached = self._parsed.get(name)
        if cached is not None:
            return cached
        if name not in self._raw:
            logger.debug("unknown snippet requested: %s", name)
            raise UnknownSnippet(name)
        snippet = read_snippet(name, self._raw[name])
        self._parsed[name] = snippet
        return snippet

    def valid_snippets(self) -> Iterator[Snippet]:
        """Yield every snippet that parses; malformed ones are skipped with a warning."""
        for name in self._raw:
            try:
                yield self.get(name)
            except MalformedSnippet as exc:
                logger.warning("skipping malformed snippet %s (%s)", name, exc.detail)
