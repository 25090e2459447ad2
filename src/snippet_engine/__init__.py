"""
Snippet-driven text generation.

A repository of named snippets, each a list of tagged phrase groups, is
expanded into text:
    * filters score and veto groups against the model's tags and history,
    * the salience threshold keeps the best-scoring groups,
    * a phrase is picked uniformly with an injected randomness source,
    * bracket directives inside the phrase recurse back into generation.

See pipeline.SnippetEngine for the entry point.
"""

from .errors import (
    ExhaustedCandidates,
    MalformedPhrase,
    MalformedSnippet,
    SnippetEngineError,
    UnknownModelProperty,
    UnknownSnippet,
    UnresolvableTemplateFunction,
)
from .filters import FilterResult, dryness, full_bonus, mismatch_filter, partial_bonus, unmentioned
from .model import Model
from .pipeline import EngineOptions, GenerationResult, SnippetEngine

__all__ = [
    "EngineOptions",
    "ExhaustedCandidates",
    "FilterResult",
    "GenerationResult",
    "MalformedPhrase",
    "MalformedSnippet",
    "Model",
    "SnippetEngine",
    "SnippetEngineError",
    "UnknownModelProperty",
    "UnknownSnippet",
    "UnresolvableTemplateFunction",
    "dryness",
    "full_bonus",
    "mismatch_filter",
    "partial_bonus",
    "unmentioned",
]
