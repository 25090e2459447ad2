from __future__ import annotations

__all__ = [
    "SnippetEngineError",
    "UnknownSnippet",
    "MalformedSnippet",
    "MalformedPhrase",
    "ExhaustedCandidates",
    "UnresolvableTemplateFunction",
    "UnknownModelProperty",
]


class SnippetEngineError(RuntimeError):
    """Base class for every failure raised while generating text."""


class UnknownSnippet(SnippetEngineError, KeyError):
    def __init__(self, snippet: str) -> None:
        self.snippet = snippet
        super().__init__(f'Tried generating snippet "{snippet}", but no such snippet exists')

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return self.args[0]


class MalformedSnippet(SnippetEngineError, TypeError):
    def __init__(self, snippet: str, detail: str) -> None:
        self.snippet = snippet
        self.detail = detail
        super().__init__(f"Malformed snippet {snippet!r}: {detail}")


class MalformedPhrase(SnippetEngineError, ValueError):
    def __init__(self, phrase: str, detail: str = "Missing close bracket in phrase") -> None:
        self.phrase = phrase
        self.detail = detail
        super().__init__(f"{detail}: {phrase}")


class ExhaustedCandidates(SnippetEngineError):
    def __init__(self, snippet: str | None) -> None:
        self.snippet = snippet
        where = f" while generating {snippet!r}" if snippet else ""
        super().__init__(f"Ran out of phrases{where}; every candidate was filtered out.")


class UnresolvableTemplateFunction(SnippetEngineError, TypeError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Builtin or model property "{name}" is not a function.')


class UnknownModelProperty(SnippetEngineError, KeyError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'Model has no property "{path}".')

    def __str__(self) -> str:
        return self.args[0]
