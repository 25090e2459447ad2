from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, MutableMapping, Sequence

from .errors import UnknownModelProperty
from .tags import Tag, as_tag, force_tag, merge_tags

logger = logging.getLogger(__name__)

TemplateFunction = Callable[[str], Any]
Submodeler = Callable[["ModelContext", str], Any]

RESERVED_KEYS = frozenset({"tags", "bindings", "history", "tag_history", "tagHistory", "submodels"})

__all__ = ["Model", "ModelContext", "ModelOverlay", "RESERVED_KEYS", "Submodeler", "TemplateFunction"]


def _empty_seed(parent: "ModelContext", name: str) -> dict:
    return {}


class ModelContext:
    """
    Shared behaviour for the generation context.

    Subclasses expose `tags`, `bindings`, `history`, `tag_history`,
    `submodels`, `builtins` and `submodeler`; everything here is written in
    terms of those attributes so an overlay and a root model behave alike.
    """

    tags: List[Tag]
    bindings: Dict[str, str]
    history: List[str]
    tag_history: List[Tag]
    submodels: Dict[str, "Model"]
    builtins: Mapping[str, TemplateFunction]
    submodeler: Submodeler | None

    # ------------------------------------------------------------------ #
    # Property access
    # ------------------------------------------------------------------ #
    def _local_property(self, name: str) -> Any:
        raise NotImplementedError

    def lookup(self, name: str) -> Any:
        value = self._local_property(name)
        if value is not _MISSING:
            return value
        if name in self.submodels:
            return self.submodels[name]
        raise UnknownModelProperty(name)

    def lookup_path(self, path: Sequence[str]) -> Any:
        """Walk a dotted property path through the model and nested values."""
        current: Any = self
        walked: list[str] = []
        for segment in path:
            walked.append(segment)
            try:
                if isinstance(current, ModelContext):
                    current = current.lookup(segment)
                elif isinstance(current, Mapping):
                    current = current[segment]
                else:
                    current = getattr(current, segment)
            except (KeyError, AttributeError, TypeError) as exc:
                raise UnknownModelProperty(".".join(walked)) from exc
        return current

    def function(self, name: str) -> TemplateFunction | None:
        """Return a callable property named `name`, if the model carries one."""
        value = self._local_property(name)
        if value is not _MISSING and callable(value):
            return value
        return None

    # ------------------------------------------------------------------ #
    # Mutation helpers used by the selection pipeline
    # ------------------------------------------------------------------ #
    def merge_tags(self, incoming: Iterable[Tag]) -> None:
        self.tags = merge_tags(self.tags, incoming)

    def record_choice(self, phrase: str, tags: Sequence[Tag]) -> None:
        """Prepend the chosen phrase and its tag set to the (shared) history ledgers."""
        self.tag_history[0:0] = list(tags)
        self.history.insert(0, phrase)

    def clear_history(self) -> None:
        del self.history[:]
        del self.tag_history[:]

    def overlay(self, tag: Tag) -> "ModelOverlay":
        return ModelOverlay(self, force_tag(self.tags, tag))

    def _as_child(self, seed: Any) -> "Model":
        if isinstance(seed, Model):
            return seed
        return Model.from_mapping(seed or {}, submodeler=self.submodeler, builtins=self.builtins)

    def submodel(self, name: str) -> "Model":
        """Return the named child model, creating it from the submodeler on first use."""
        existing = self.submodels.get(name)
        if existing is not None:
            return existing
        factory = self.submodeler or _empty_seed
        child = self._as_child(factory(self, name))
        self.submodels[name] = child
        logger.debug("created submodel %s", name)
        return child


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


_MISSING: Any = _Missing()


class Model(ModelContext):
    """Mutable per-generation context: tags, bindings, history and submodels."""

    def __init__(
        self,
        *,
        tags: Iterable[Sequence[str]] | None = None,
        bindings: MutableMapping[str, str] | None = None,
        history: Iterable[str] | None = None,
        tag_history: Iterable[Sequence[str]] | None = None,
        properties: Mapping[str, Any] | None = None,
        submodels: Mapping[str, "Model"] | None = None,
        builtins: Mapping[str, TemplateFunction] | None = None,
        submodeler: Submodeler | None = None,
    ) -> None:
        self.tags = merge_tags([], (as_tag(tag) for tag in (tags or ())))
        self.bindings = dict(bindings or {})
        self.history = list(history or ())
        self.tag_history = [as_tag(tag) for tag in (tag_history or ())]
        self.properties: Dict[str, Any] = dict(properties or {})
        self.builtins = dict(builtins or {})
        self.submodeler = submodeler
        self.submodels = {name: self._as_child(seed) for name, seed in (submodels or {}).items()}

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        submodeler: Submodeler | None = None,
        builtins: Mapping[str, TemplateFunction] | None = None,
    ) -> "Model":
        """Split a plain mapping into reserved model state and free-form properties."""
        tag_history = data.get("tag_history", data.get("tagHistory"))
        return cls(
            tags=data.get("tags"),
            bindings=data.get("bindings"),
            history=data.get("history"),
            tag_history=tag_history,
            properties={key: value for key, value in data.items() if key not in RESERVED_KEYS},
            submodels=data.get("submodels"),
            builtins=builtins,
            submodeler=submodeler,
        )

    def _local_property(self, name: str) -> Any:
        return self.properties.get(name, _MISSING)

    def to_mapping(self) -> Dict[str, Any]:
        """Plain, JSON-friendly snapshot that `from_mapping` reads back."""
        data: Dict[str, Any] = dict(self.properties)
        self.write_back(data)
        return data

    def write_back(self, target: MutableMapping[str, Any]) -> None:
        """
        Copy generation state into a caller-owned mapping so it can be reused.

        Everything written is a copy; editing the mapping afterwards does not
        reach this model or the engine session whose history it shares.
        """
        target["tags"] = [list(tag) for tag in self.tags]
        target["bindings"] = dict(self.bindings)
        target["history"] = list(self.history)
        target["tag_history"] = [list(tag) for tag in self.tag_history]
        target["submodels"] = {name: child.to_mapping() for name, child in self.submodels.items()}

    def __repr__(self) -> str:
        return (
            f"Model(tags={self.tags!r}, bindings={sorted(self.bindings)!r}, "
            f"history={len(self.history)}, submodels={sorted(self.submodels)!r})"
        )


class ModelOverlay(ModelContext):
    """
    Branch-local view of a parent context.

    Only `tags` is held locally, so tag writes on the branch (forced tags,
    reincorporation) never reach the parent or sibling branches. History,
    tag history, bindings and submodels resolve to the parent's containers.
    """

    def __init__(self, parent: ModelContext, tags: Iterable[Tag]) -> None:
        self.parent = parent
        self.tags = list(tags)

    @property
    def bindings(self) -> Dict[str, str]:  # type: ignore[override]
        return self.parent.bindings

    @property
    def history(self) -> List[str]:  # type: ignore[override]
        return self.parent.history

    @property
    def tag_history(self) -> List[Tag]:  # type: ignore[override]
        return self.parent.tag_history

    @property
    def submodels(self) -> Dict[str, "Model"]:  # type: ignore[override]
        return self.parent.submodels

    @property
    def builtins(self) -> Mapping[str, TemplateFunction]:  # type: ignore[override]
        return self.parent.builtins

    @property
    def submodeler(self) -> Submodeler | None:  # type: ignore[override]
        return self.parent.submodeler

    def _local_property(self, name: str) -> Any:
        return self.parent._local_property(name)
