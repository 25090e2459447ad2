from __future__ import annotations

import unittest

from helpers.resource_monitor import ResourceDelta, ResourceMonitor
from run import parse_model_arg, run_batch
from snippet_engine import EngineOptions, SnippetEngine


class ModelArgTests(unittest.TestCase):
    def test_empty_argument_gives_empty_model(self) -> None:
        self.assertEqual(parse_model_arg(None), {})
        self.assertEqual(parse_model_arg(""), {})

    def test_parses_json_object(self) -> None:
        self.assertEqual(parse_model_arg('{"tags": [["mood", "dark"]]}'), {"tags": [["mood", "dark"]]})

    def test_rejects_bad_json_and_non_objects(self) -> None:
        with self.assertRaises(ValueError):
            parse_model_arg("{nope")
        with self.assertRaises(ValueError):
            parse_model_arg("[1, 2]")


class RunBatchTests(unittest.TestCase):
    def test_each_text_starts_from_a_fresh_copy_of_the_seed_model(self) -> None:
        snippets = {"root": {"bind": True, "groups": [{"phrases": ["[#1-3]"]}]}}
        values = iter([0.0, 0.0, 0.0, 0.9])
        engine = SnippetEngine(snippets, EngineOptions(rng=lambda: next(values)))
        seed_model: dict = {"tags": []}
        self.assertEqual(run_batch(engine, "root", 2, seed_model, quiet=True), 2)
        self.assertEqual(seed_model, {"tags": []})
        self.assertEqual(engine.history, ["[#1-3]", "[#1-3]"])


class ResourceMonitorTests(unittest.TestCase):
    def test_describe_formats_delta(self) -> None:
        monitor = ResourceMonitor()
        delta = ResourceDelta(
            duration_sec=1.5,
            cpu_percent=None,
            rss_after_mb=12.0,
            rss_delta_mb=0.5,
            load_avg=None,
        )
        self.assertEqual(monitor.describe(delta), "wall=1.50s rss=12.0MB(+0.5)")

    def test_delta_between_snapshots(self) -> None:
        monitor = ResourceMonitor()
        before = monitor.snapshot()
        delta = monitor.delta(before, monitor.snapshot())
        self.assertGreaterEqual(delta.duration_sec, 0.0)
        self.assertGreater(delta.rss_after_mb, 0.0)


if __name__ == "__main__":
    unittest.main()
