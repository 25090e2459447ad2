from __future__ import annotations

import unittest

from snippet_engine.tags import TagComparison, as_tag, compare_tags, force_tag, merge_tags


class CompareTagsTests(unittest.TestCase):
    def test_equal_paths_are_exact(self) -> None:
        self.assertIs(compare_tags(("mood", "dark"), ("mood", "dark")), TagComparison.EXACT)
        self.assertIs(compare_tags(("decline",), ("decline",)), TagComparison.EXACT)

    def test_equal_length_with_different_content_is_mismatch(self) -> None:
        self.assertIs(compare_tags(("mood", "dark"), ("mood", "bright")), TagComparison.MISMATCH)

    def test_prefix_is_partial_in_either_order(self) -> None:
        general = ("government", "autocracy")
        specific = ("government", "autocracy", "monarchy", "absolute")
        self.assertIs(compare_tags(general, specific), TagComparison.PARTIAL)
        self.assertIs(compare_tags(specific, general), TagComparison.PARTIAL)

    def test_divergent_prefix_is_mismatch(self) -> None:
        self.assertIs(
            compare_tags(("government", "democracy"), ("government", "autocracy", "monarchy")),
            TagComparison.MISMATCH,
        )

    def test_ordering_uses_length_not_lexical_order(self) -> None:
        # ("b",) sorts after ("a", "x") lexically but is the shorter path
        self.assertIs(compare_tags(("b",), ("a", "x")), TagComparison.MISMATCH)
        self.assertIs(compare_tags(("z", "y"), ("z",)), TagComparison.PARTIAL)


class MergeTagsTests(unittest.TestCase):
    def test_adds_new_categories(self) -> None:
        self.assertEqual(merge_tags([], [("test",)]), [("test",)])

    def test_keeps_more_specific_tag(self) -> None:
        merged = merge_tags([("foo",)], [("foo", "bar"), ("baz",)])
        self.assertEqual(merged, [("foo", "bar"), ("baz",)])

    def test_tie_keeps_existing_tag(self) -> None:
        merged = merge_tags([("mood", "dark")], [("mood", "bright")])
        self.assertEqual(merged, [("mood", "dark")])

    def test_does_not_mutate_input(self) -> None:
        current = [("foo",)]
        merge_tags(current, [("foo", "bar")])
        self.assertEqual(current, [("foo",)])

    def test_force_tag_replaces_category(self) -> None:
        self.assertEqual(force_tag([("mood", "dark"), ("x",)], ("mood", "bright")), [("mood", "bright"), ("x",)])
        self.assertEqual(force_tag([], ("mood", "bright")), [("mood", "bright")])

    def test_as_tag_accepts_lists_and_bare_strings(self) -> None:
        self.assertEqual(as_tag(["a", "b"]), ("a", "b"))
        self.assertEqual(as_tag("one"), ("one",))


if __name__ == "__main__":
    unittest.main()
