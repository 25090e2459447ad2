from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from .errors import MalformedSnippet

logger = logging.getLogger(__name__)

__all__ = ["load_snippet_directory", "load_snippet_file", "load_snippets", "normalize_snippet_record"]


def normalize_snippet_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Turn a one-snippet file record into repository shape.

    A top-level `phrases` list becomes an extra untagged group so corpus
    authors can skip the `groups` wrapper for simple snippets.
    """
    name = record.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedSnippet(str(name), "snippet record is missing a name")
    groups = list(record.get("groups") or [])
    phrases = record.get("phrases")
    if phrases:
        groups.append({"tags": [], "phrases": phrases})
    snippet: Dict[str, Any] = {"groups": groups}
    if record.get("bind"):
        snippet["bind"] = True
    return snippet


def load_snippet_file(path: str | Path) -> Dict[str, Any]:
    """Read a JSON file holding a whole repository (snippet name -> definition)."""
    source = Path(path)
    with source.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise MalformedSnippet(source.name, f"expected a JSON object at top level, got {type(data).__name__}")
    logger.debug("loaded %d snippet(s) from %s", len(data), source)
    return data


def load_snippet_directory(path: str | Path) -> Dict[str, Any]:
    """Read every *.json file in `path`, each describing one named snippet."""
    root = Path(path)
    snippets: Dict[str, Any] = {}
    for candidate in sorted(root.glob("*.json")):
        with candidate.open("r", encoding="utf-8") as handle:
            record = json.load(handle)
        if not isinstance(record, dict):
            raise MalformedSnippet(candidate.name, "expected a JSON object describing one snippet")
        snippet = normalize_snippet_record(record)
        name = record["name"]
        if name in snippets:
            raise MalformedSnippet(name, f"defined twice (again in {candidate.name})")
        snippets[name] = snippet
    logger.debug("loaded %d snippet(s) from %s", len(snippets), root)
    return snippets


def load_snippets(path: str | Path) -> Dict[str, Any]:
    """Load a repository from either a single JSON file or a directory of snippet files."""
    target = Path(path)
    if target.is_dir():
        return load_snippet_directory(target)
    return load_snippet_file(target)
