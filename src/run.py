from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Any, Dict, Sequence

from snippet_engine import EngineOptions, SnippetEngine, SnippetEngineError
from snippet_engine.filters import build_filter
from snippet_engine.loader import load_snippets
from snippet_engine.settings import EngineSettings, load_settings

from helpers.audit_report import format_audit_lines, format_coverage_line
from helpers.resource_monitor import ResourceMonitor
from log_helpers import log, log_lines, log_verbose, parse_log_level, set_log_level


def build_parser(settings: EngineSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate text from a snippet repository (JSON file or directory of snippet files)."
    )
    parser.add_argument(
        "--snippets",
        default=settings.snippets_path,
        help="Snippet JSON file or directory of one-snippet JSON files (default: %(default)s).",
    )
    parser.add_argument(
        "--root",
        default="root",
        help="Snippet to generate (default: %(default)s).",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=1,
        help="How many texts to generate (default: %(default)s).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.seed,
        help="Seed for the random source; omit for OS entropy.",
    )
    parser.add_argument(
        "--filter",
        dest="filters",
        action="append",
        default=None,
        metavar="SPEC",
        help=(
            "Built-in filter spec such as 'mismatch', 'dryness', 'partial_bonus:2' or "
            "'full_bonus:1:cumulative'. Repeat to chain; order is preserved."
        ),
    )
    parser.add_argument(
        "--model",
        help="JSON object used as the starting model for every generation (e.g. '{\"tags\": [[\"mood\", \"dark\"]]}').",
    )
    parser.add_argument(
        "--reincorporate",
        action=argparse.BooleanOptionalAction,
        default=settings.reincorporate,
        help="Merge chosen phrase tags back into the model (default: %(default)s).",
    )
    parser.add_argument(
        "--persistence",
        action=argparse.BooleanOptionalAction,
        default=settings.persistence,
        help="Keep history across generations in this run (default: %(default)s).",
    )
    parser.add_argument(
        "--audit",
        action=argparse.BooleanOptionalAction,
        default=settings.audit,
        help="Print phrase usage counts and batch telemetry after generating (default: %(default)s).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not echo generated texts (useful with --audit and a large --count).",
    )
    parser.add_argument(
        "--log-level",
        help="Verbosity override (0-3 or quiet/info/verbose/debug).",
    )
    return parser


def parse_model_arg(raw: str | None) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"--model is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("--model must be a JSON object")
    return data


def build_engine(args: argparse.Namespace, settings: EngineSettings) -> SnippetEngine:
    snippets = load_snippets(args.snippets)
    log_verbose(2, f"[run:v2] Loaded {len(snippets)} snippet(s) from {args.snippets}")
    filter_specs: Sequence[str] = args.filters if args.filters is not None else settings.filters
    overrides: Dict[str, Any] = {
        "filters": [build_filter(spec) for spec in filter_specs],
        "reincorporate": args.reincorporate,
        "persistence": args.persistence,
        "audit": args.audit,
        "rng": random.Random(args.seed).random,
    }
    return SnippetEngine(snippets, EngineOptions.from_settings(settings, **overrides))


def run_batch(engine: SnippetEngine, root: str, count: int, seed_model: Dict[str, Any], quiet: bool) -> int:
    generated = 0
    for index in range(count):
        # bindings and submodels are per text
        text = engine.generate(root, json.loads(json.dumps(seed_model)))
        generated += 1
        if not quiet:
            log(text, prefix=False)
        log_verbose(3, f"[run:v3] #{index + 1}: history={len(engine.history)}")
    return generated


def main() -> None:
    settings = load_settings()
    parser = build_parser(settings)
    args = parser.parse_args()
    if args.log_level is not None:
        set_log_level(parse_log_level(args.log_level))
    log_verbose(3, f"[run:v3] Parsed CLI arguments: {vars(args)}")
    if args.count < 1:
        parser.error("--count must be >= 1")
    try:
        seed_model = parse_model_arg(args.model)
        engine = build_engine(args, settings)
    except (OSError, ValueError, SnippetEngineError) as exc:
        parser.error(str(exc))

    monitor = ResourceMonitor() if args.audit else None
    before = monitor.snapshot() if monitor else None
    try:
        generated = run_batch(engine, args.root, args.count, seed_model, args.quiet)
    except SnippetEngineError as exc:
        log(f"[run] Generation failed: {exc}", file=sys.stderr)
        sys.exit(1)

    if monitor and before:
        delta = monitor.delta(before, monitor.snapshot())
        audit = engine.phrase_audit or {}
        log_lines(format_audit_lines(audit))
        log(f"[run] {format_coverage_line(audit)}")
        log(f"[run] {generated} generation(s) -> {monitor.describe(delta)}")


if __name__ == "__main__":
    main()
