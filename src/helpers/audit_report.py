from __future__ import annotations

from typing import List, Mapping, Tuple

AuditData = Mapping[str, Mapping[str, int]]


def sorted_phrase_counts(counts: Mapping[str, int]) -> List[Tuple[str, int]]:
    """Order phrases by descending usage; ties keep declaration order."""
    return sorted(counts.items(), key=lambda item: -item[1])


def format_audit_lines(audit: AuditData, *, snippets: List[str] | None = None) -> list[str]:
    lines: list[str] = []
    for name in sorted(snippets if snippets is not None else audit.keys()):
        counts = audit.get(name)
        if counts is None:
            continue
        total = sum(counts.values())
        lines.append(f"{name} (uses={total}, phrases={len(counts)})")
        for phrase, count in sorted_phrase_counts(counts):
            lines.append(f"\t{phrase} :: {count}")
    return lines


def unused_phrases(audit: AuditData) -> dict[str, list[str]]:
    """Phrases never chosen, keyed by snippet; snippets with full coverage are omitted."""
    unused: dict[str, list[str]] = {}
    for name, counts in audit.items():
        missing = [phrase for phrase, count in counts.items() if count == 0]
        if missing:
            unused[name] = missing
    return unused


def format_coverage_line(audit: AuditData) -> str:
    declared = sum(len(counts) for counts in audit.values())
    missing = sum(len(phrases) for phrases in unused_phrases(audit).values())
    used = declared - missing
    ratio = (used / declared * 100.0) if declared else 0.0
    return f"audit coverage: {used}/{declared} phrase(s) used ({ratio:.1f}%) across {len(audit)} snippet(s)"
