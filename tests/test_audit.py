from __future__ import annotations

import unittest

from helpers.audit_report import format_audit_lines, format_coverage_line, sorted_phrase_counts, unused_phrases
from snippet_engine.audit import PhraseAudit
from snippet_engine.snippets import SnippetRepository


class PhraseAuditTests(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = SnippetRepository(
            {
                "pet": {"groups": [{"phrases": ["dog", "cat"]}, {"tags": [["odd"]], "phrases": "pet rock"}]},
                "broken": {"groups": "nope"},
            }
        )

    def test_seeds_every_declared_phrase_with_zero(self) -> None:
        audit = PhraseAudit(self.repository)
        self.assertEqual(dict(audit.data["pet"]), {"dog": 0, "cat": 0, "pet rock": 0})

    def test_malformed_snippets_are_skipped(self) -> None:
        with self.assertLogs("snippet_engine.snippets", level="WARNING"):
            audit = PhraseAudit(self.repository)
        self.assertNotIn("broken", audit.data)

    def test_increment_and_count(self) -> None:
        audit = PhraseAudit(self.repository)
        audit.increment("pet", "cat")
        audit.increment("pet", "cat")
        self.assertEqual(audit.count("pet", "cat"), 2)
        self.assertEqual(audit.count("pet", "dog"), 0)
        self.assertEqual(audit.count("ghost", "dog"), 0)


class AuditReportTests(unittest.TestCase):
    AUDIT = {
        "pet": {"dog": 1, "cat": 4, "bird": 0},
        "colour": {"red": 2, "blue": 2},
    }

    def test_sorted_counts_prefer_usage_then_declaration(self) -> None:
        self.assertEqual(sorted_phrase_counts(self.AUDIT["pet"]), [("cat", 4), ("dog", 1), ("bird", 0)])
        self.assertEqual(sorted_phrase_counts(self.AUDIT["colour"]), [("red", 2), ("blue", 2)])

    def test_format_lines(self) -> None:
        lines = format_audit_lines(self.AUDIT)
        self.assertEqual(
            lines,
            [
                "colour (uses=4, phrases=2)",
                "\tred :: 2",
                "\tblue :: 2",
                "pet (uses=5, phrases=3)",
                "\tcat :: 4",
                "\tdog :: 1",
                "\tbird :: 0",
            ],
        )

    def test_format_lines_for_selected_snippets(self) -> None:
        lines = format_audit_lines(self.AUDIT, snippets=["pet", "ghost"])
        self.assertEqual(lines[0], "pet (uses=5, phrases=3)")
        self.assertEqual(len(lines), 4)

    def test_unused_phrases_and_coverage(self) -> None:
        self.assertEqual(unused_phrases(self.AUDIT), {"pet": ["bird"]})
        self.assertEqual(
            format_coverage_line(self.AUDIT),
            "audit coverage: 4/5 phrase(s) used (80.0%) across 2 snippet(s)",
        )

    def test_empty_coverage(self) -> None:
        self.assertEqual(format_coverage_line({}), "audit coverage: 0/0 phrase(s) used (0.0%) across 0 snippet(s)")


if __name__ == "__main__":
    unittest.main()
