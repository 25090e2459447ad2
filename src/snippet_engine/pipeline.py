from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Mapping, MutableMapping, Sequence, Tuple

from .audit import PhraseAudit
from .filters import Filter, ScoredGroup, apply_filters, build_filter
from .model import Model, ModelContext, Submodeler, TemplateFunction
from .selection import (
    PhraseSelector,
    RandomSource,
    SalienceFormula,
    SalienceSelector,
    flatten_groups,
    identity_salience,
)
from .settings import EngineSettings
from .snippets import SnippetRepository
from .tags import Tag
from .template import TemplateInterpreter

logger = logging.getLogger(__name__)

__all__ = ["EngineOptions", "GenerationRequest", "GenerationResult", "SnippetEngine"]


@dataclass
class EngineOptions:
    filters: Sequence[Filter] = field(default_factory=list)
    reincorporate: bool = False
    persistence: bool = True
    audit: bool = False
    salience_formula: SalienceFormula = identity_salience
    submodeler: Submodeler | None = None
    builtins: Mapping[str, TemplateFunction] = field(default_factory=dict)
    rng: RandomSource | None = None

    @classmethod
    def from_settings(cls, settings: EngineSettings, **overrides: Any) -> "EngineOptions":
        """Build options from environment settings; keyword overrides win."""
        options = cls(
            filters=[build_filter(spec) for spec in settings.filters],
            reincorporate=settings.reincorporate,
            persistence=settings.persistence,
            audit=settings.audit,
            rng=random.Random(settings.seed).random,
        )
        return replace(options, **overrides)


@dataclass(frozen=True)
class GenerationRequest:
    snippet: str
    model: ModelContext
    submodel: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    text: str
    model: Model


Proceed = Callable[[GenerationRequest], str]
Step = Callable[[GenerationRequest, Proceed], str]


class SnippetEngine:
    """
    Generates text from a snippet repository.

    Every generation, including each nested directive, goes through the same
    ordered steps (binding cache, submodel routing, active-snippet tracking,
    validation) before the filter -> salience -> phrase -> template core runs.
    """

    def __init__(self, snippets: Mapping[str, Any], options: EngineOptions | None = None) -> None:
        self.options = options or EngineOptions()
        self.repository = SnippetRepository(snippets)
        self.filters: List[Filter] = list(self.options.filters)
        self.persistence = bool(self.options.persistence)
        self.audit_enabled = bool(self.options.audit)
        self.rng: RandomSource = self.options.rng or random.Random().random
        self.salience = SalienceSelector(self.options.salience_formula)
        self.phrase_selector = PhraseSelector(self.rng, reincorporate=bool(self.options.reincorporate))
        self.interpreter = TemplateInterpreter(self.generate_snippet, self.rng)
        self.current_snippet: str | None = None
        self._history: List[str] = []
        self._tag_history: List[Tag] = []
        self._audit = PhraseAudit(self.repository)
        self.steps: Tuple[Tuple[str, Step], ...] = (
            ("bindings", self._use_bindings),
            ("submodel", self._use_submodel),
            ("active_snippet", self._track_active_snippet),
            ("validate", self._validate),
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def generate(self, snippet: str, model: Model | MutableMapping[str, Any] | None = None) -> str:
        """
        Generate `snippet` against `model`, sharing this engine's session history.

        A plain mapping is read into a fresh Model and the resulting state is
        written back into it afterwards as copies, so the mapping can be reused
        or serialised without reaching into this session.
        """
        target = self._init_model(model)
        target.history = self._history
        target.tag_history = self._tag_history
        text = self.generate_snippet(snippet, target)
        if not self.persistence:
            target.clear_history()
        if model is not None and not isinstance(model, Model):
            target.write_back(model)
        return text

    def full_generate(self, snippet: str, model: Model | Mapping[str, Any] | None = None) -> GenerationResult:
        """Generate against the model's own history and hand back the final model."""
        target = self._init_model(model)
        return GenerationResult(self.generate_snippet(snippet, target), target)

    def generate_snippet(self, snippet: str, model: ModelContext, submodel: str | None = None) -> str:
        """Entry point shared by `generate` and every nested template directive."""
        return self._dispatch(0, GenerationRequest(snippet, model, submodel))

    def apply_filters(self, snippet: str, model: Model | Mapping[str, Any] | None = None) -> List[ScoredGroup]:
        """Return the scored groups that survive the filters, without choosing anything."""
        groups = self.repository.get(snippet).groups
        return apply_filters(self.filters, groups, self._init_model(model))

    @property
    def phrase_audit(self) -> Mapping[str, Mapping[str, int]] | None:
        if not self.audit_enabled:
            return None
        return self._audit.data

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def tag_history(self) -> List[Tag]:
        return list(self._tag_history)

    def clear_history(self) -> None:
        """Forget chosen phrases and their tags; see `clear_tag_history` for tags only."""
        self._history = []
        self._tag_history = []

    def clear_tag_history(self) -> None:
        self._tag_history = []

    # ------------------------------------------------------------------ #
    # Step dispatch
    # ------------------------------------------------------------------ #
    def _dispatch(self, index: int, request: GenerationRequest) -> str:
        if index >= len(self.steps):
            return self._generate_core(request)
        _, step = self.steps[index]
        return step(request, lambda next_request: self._dispatch(index + 1, next_request))

    def _use_bindings(self, request: GenerationRequest, proceed: Proceed) -> str:
        bindings = request.model.bindings
        if request.snippet in bindings:
            logger.debug("binding hit for %s", request.snippet)
            return bindings[request.snippet]
        result = proceed(request)
        if self.repository.get(request.snippet).bind:
            bindings[request.snippet] = result
        return result

    def _use_submodel(self, request: GenerationRequest, proceed: Proceed) -> str:
        if request.submodel:
            request = replace(request, model=request.model.submodel(request.submodel))
        return proceed(request)

    def _track_active_snippet(self, request: GenerationRequest, proceed: Proceed) -> str:
        previous = self.current_snippet
        self.current_snippet = request.snippet
        try:
            return proceed(request)
        finally:
            self.current_snippet = previous

    def _validate(self, request: GenerationRequest, proceed: Proceed) -> str:
        self.repository.get(request.snippet)
        return proceed(request)

    # ------------------------------------------------------------------ #
    # Core generation
    # ------------------------------------------------------------------ #
    def _generate_core(self, request: GenerationRequest) -> str:
        snippet = self.repository.get(request.snippet)
        model = request.model
        scored = apply_filters(self.filters, snippet.groups, model)
        salient = self.salience.select(scored)
        candidates = flatten_groups(salient)
        choice = self.phrase_selector.select(candidates, model, snippet=self.current_snippet)
        self._audit.increment(snippet.name, choice.phrase)
        logger.debug(
            "%s -> %r (candidate %d of %d)",
            snippet.name,
            choice.phrase,
            choice.index + 1,
            choice.pool_size,
        )
        return self.interpreter.render(choice.phrase, model)

    def _init_model(self, model: Model | Mapping[str, Any] | None) -> Model:
        if isinstance(model, Model):
            if model.submodeler is None:
                model.submodeler = self.options.submodeler
            if not model.builtins:
                model.builtins = dict(self.options.builtins)
            return model
        return Model.from_mapping(
            model or {},
            submodeler=self.options.submodeler,
            builtins=self.options.builtins,
        )
