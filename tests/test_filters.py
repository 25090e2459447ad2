from __future__ import annotations

import unittest

from snippet_engine.filters import (
    FilterResult,
    apply_filters,
    apply_filters_to_group,
    build_filter,
    dryness,
    full_bonus,
    mismatch_filter,
    partial_bonus,
    unmentioned,
)
from snippet_engine.model import Model
from snippet_engine.snippets import Group


def group(*tags, phrases=("x",)) -> Group:
    return Group(phrases=tuple(phrases), tags=tuple(tuple(tag) for tag in tags))


class MismatchFilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.filter = mismatch_filter()
        self.model = Model(
            tags=[
                ["government", "autocracy", "monarchy", "absolute"],
                ["economy", "tourism"],
                ["decline"],
            ]
        )

    def test_vetoes_on_mismatch(self) -> None:
        result = self.filter(group(["government", "democracy"], ["economy"]), self.model)
        self.assertTrue(result.veto)

    def test_exact_match_scores_zero(self) -> None:
        result = self.filter(group(*self.model.tags), self.model)
        self.assertFalse(result.veto)
        self.assertEqual(result.delta, 0)

    def test_partial_match_scores_zero(self) -> None:
        result = self.filter(group(["government", "autocracy", "monarchy"], ["decline"]), self.model)
        self.assertEqual(result, FilterResult.score(0))

    def test_unrelated_categories_pass(self) -> None:
        self.assertFalse(self.filter(group(["weather", "rain"]), self.model).veto)


class BonusFilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.model = Model(tags=[["government", "monarchy", "constitutional"], ["war", "civil"]])
        self.partial = group(["government", "monarchy"])
        self.mismatching = group(["government", "republic"])
        self.unrelated = group(["economy", "export"])
        self.full = group(["government", "monarchy", "constitutional"])
        self.multi = group(["government", "monarchy"], ["war"])

    def test_partial_bonus_ignores_non_partial_groups(self) -> None:
        bonus = partial_bonus(1, False)
        for candidate in (self.mismatching, self.unrelated, self.full):
            self.assertEqual(bonus(candidate, self.model).delta, 0)

    def test_partial_bonus_rewards_partial_match(self) -> None:
        self.assertEqual(partial_bonus()(self.partial, self.model).delta, 1)
        self.assertEqual(partial_bonus(2)(self.partial, self.model).delta, 2)

    def test_non_cumulative_counts_one_match(self) -> None:
        self.assertEqual(partial_bonus()(self.multi, self.model).delta, 1)

    def test_cumulative_multiplies_by_matches(self) -> None:
        self.assertEqual(partial_bonus(1, True)(self.multi, self.model).delta, 2)
        self.assertEqual(partial_bonus(2, True)(self.multi, self.model).delta, 4)

    def test_full_bonus_rewards_exact_match_only(self) -> None:
        self.assertEqual(full_bonus(1)(self.full, self.model).delta, 1)
        self.assertEqual(full_bonus(1)(self.partial, self.model).delta, 0)


class DrynessAndUnmentionedTests(unittest.TestCase):
    def test_dryness_builds_new_group_without_used_phrases(self) -> None:
        original = group(phrases=("one", "two", "three"))
        model = Model(history=["two"])
        result = dryness()(original, model)
        self.assertEqual(result.delta, 0)
        self.assertIsNotNone(result.group)
        assert result.group is not None
        self.assertEqual(result.group.phrases, ("one", "three"))
        self.assertEqual(original.phrases, ("one", "two", "three"))

    def test_dryness_can_empty_a_group(self) -> None:
        result = dryness()(group(phrases=("one",)), Model(history=["one"]))
        assert result.group is not None
        self.assertEqual(result.group.phrases, ())

    def test_unmentioned_rewards_novel_categories(self) -> None:
        model = Model(tag_history=[["used"]])
        self.assertEqual(unmentioned()(group(["unused"]), model).delta, 1)
        self.assertEqual(unmentioned(3)(group(["used"], ["fresh"]), model).delta, 3)
        self.assertEqual(unmentioned()(group(["used", "deeper"]), model).delta, 0)

    def test_unmentioned_ignores_untagged_groups(self) -> None:
        self.assertEqual(unmentioned()(group(), Model()).delta, 0)


class PipelineTests(unittest.TestCase):
    def test_scores_accumulate_in_order(self) -> None:
        model = Model(tags=[["animal", "dog"]])
        scored = apply_filters_to_group(
            [full_bonus(2), partial_bonus(5), unmentioned(1)],
            group(["animal", "dog"]),
            model,
        )
        assert scored is not None
        self.assertEqual(scored.score, 3)

    def test_veto_skips_remaining_filters(self) -> None:
        calls: list[str] = []

        def spy(candidate, model):
            calls.append("spy")
            return FilterResult.score(1)

        scored = apply_filters_to_group(
            [mismatch_filter(), spy],
            group(["animal", "cat"]),
            Model(tags=[["animal", "dog"]]),
        )
        self.assertIsNone(scored)
        self.assertEqual(calls, [])

    def test_replacement_group_reaches_later_filters(self) -> None:
        seen: list[tuple[str, ...]] = []

        def spy(candidate, model):
            seen.append(candidate.phrases)
            return FilterResult.score(0)

        scored = apply_filters_to_group([dryness(), spy], group(phrases=("a", "b")), Model(history=["a"]))
        self.assertEqual(seen, [("b",)])
        assert scored is not None
        self.assertEqual(scored.group.phrases, ("b",))

    def test_apply_filters_drops_vetoed_groups(self) -> None:
        groups = [group(["animal", "dog"], phrases=("dog",)), group(["animal", "cat"], phrases=("cat",))]
        scored = apply_filters([mismatch_filter()], groups, Model(tags=[["animal", "cat"]]))
        self.assertEqual([item.group.phrases for item in scored], [("cat",)])

    def test_non_result_return_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            apply_filters_to_group([lambda g, m: 0], group(), Model())


class BuildFilterTests(unittest.TestCase):
    def test_parses_arguments(self) -> None:
        model = Model(tags=[["a", "b", "c"], ["d", "e"]])
        multi = group(["a"], ["d"])
        self.assertEqual(build_filter("partial_bonus:2")(multi, model).delta, 2)
        self.assertEqual(build_filter("partial_bonus:2:cumulative")(multi, model).delta, 4)

    def test_rejects_unknown_names(self) -> None:
        with self.assertRaises(ValueError):
            build_filter("sparkle")


if __name__ == "__main__":
    unittest.main()
