from __future__ import annotations

import math
import re
from typing import Callable, List, Mapping, Tuple

from .errors import MalformedPhrase, UnresolvableTemplateFunction
from .model import ModelContext, TemplateFunction
from .selection import RandomSource

GenerateCallback = Callable[[str, ModelContext, "str | None"], str]

_ARTICLE_VOWELS = re.compile(r"^[aeioAEIO]")  # no 'u': "a unicorn"
_SUBMODEL_RE = re.compile(r"^>?([A-Za-z_][\w-]*)\s*:(.*)$")
_RANGE_RE = re.compile(r"^#\s*(-?\d+)\s*-\s*(-?\d+)$")

__all__ = ["GenerateCallback", "TEMPLATE_BUILTINS", "TemplateInterpreter"]


def _article(text: str) -> str:
    if _ARTICLE_VOWELS.match(text):
        return f"an {text}"
    return f"a {text}"


def _cap(text: str) -> str:
    return text[:1].upper() + text[1:]


def _cap_article(text: str) -> str:
    return _cap(_article(text))


TEMPLATE_BUILTINS: Mapping[str, TemplateFunction] = {
    "a": _article,
    "an": _article,
    "cap": _cap,
    "A": _cap_article,
    "An": _cap_article,
}


class TemplateInterpreter:
    """
    Expands bracket directives inside a phrase.

    Directive forms, checked in this order:

        ['literal']            quoted text, returned as-is
        [fn rest]              call fn on the expansion of `rest`
        [|cat|sub:snippet]     generate `snippet` with the tag forced on a branch
        [name:snippet]         generate `snippet` inside submodel `name`
        [:snippet]             generate `snippet` on the current model
        [#min-max]             random integer, both ends inclusive
        [a.b.c]                dotted model property path
        [name]                 model property

    Every substitution is spliced back into the phrase and the whole string
    is scanned again, so generated text may itself carry directives. Nothing
    guards against snippets that expand into themselves.
    """

    def __init__(self, generate: GenerateCallback, rng: RandomSource) -> None:
        self.generate = generate
        self.rng = rng

    def render(self, phrase: str, model: ModelContext) -> str:
        text = phrase
        while True:
            open_at = text.find("[")
            if open_at == -1:
                return text
            close_at = text.find("]", open_at + 1)
            if close_at == -1:
                raise MalformedPhrase(text)
            value = self.process_directive(text[open_at + 1 : close_at], model)
            text = f"{text[:open_at]}{value}{text[close_at + 1:]}"

    def process_directive(self, raw: str, model: ModelContext) -> str:
        directive = raw.strip()
        if len(directive) >= 2 and directive[0] == directive[-1] == "'":
            return directive[1:-1]
        if " " in directive:
            name, _, rest = directive.partition(" ")
            function = self.resolve_function(name, model)
            return str(function(self.process_directive(rest, model)))
        if directive.startswith("|"):
            return self._tagged_generation(directive, model)
        submodel_match = _SUBMODEL_RE.match(directive)
        if submodel_match:
            name, snippet = submodel_match.group(1), submodel_match.group(2).strip()
            if not snippet:
                raise MalformedPhrase(directive, "Bad or malformed snippet name in directive")
            return self.generate(snippet, model, name)
        if directive.startswith(":"):
            snippet = directive[1:].strip()
            if not snippet:
                raise MalformedPhrase(directive, "Empty snippet name in directive")
            return self.generate(snippet, model, None)
        if directive.startswith("#"):
            low, high = self._parse_range(directive)
            return str(math.floor(self.rng() * (high - low + 1)) + low)
        if "." in directive:
            return str(model.lookup_path(directive.split(".")))
        return str(model.lookup(directive))

    def resolve_function(self, name: str, model: ModelContext) -> TemplateFunction:
        """Look `name` up in the builtin helpers, the model's registry, then the model itself."""
        for registry in self._registries(model):
            function = registry.get(name)
            if function is not None:
                return function
        function = model.function(name)
        if function is None:
            raise UnresolvableTemplateFunction(name)
        return function

    @staticmethod
    def _registries(model: ModelContext) -> List[Mapping[str, TemplateFunction]]:
        return [TEMPLATE_BUILTINS, model.builtins]

    def _tagged_generation(self, directive: str, model: ModelContext) -> str:
        tag_part, _, snippet = directive.partition(":")
        body = tag_part[1:]
        if body.endswith("|"):
            body = body[:-1]
        segments = tuple(body.split("|"))
        snippet = snippet.strip()
        if not all(segments) or not snippet:
            raise MalformedPhrase(directive, "Bad tag directive, expected |tag|...:snippet")
        return self.generate(snippet, model.overlay(segments), None)

    @staticmethod
    def _parse_range(directive: str) -> Tuple[int, int]:
        match = _RANGE_RE.match(directive)
        if not match:
            raise MalformedPhrase(directive, "Bad number range in directive")
        low, high = int(match.group(1)), int(match.group(2))
        return low, high
