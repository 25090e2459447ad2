from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Dict, Tuple

_TRUE_FLAGS = {"1", "true", "yes", "on"}
_FALSE_FLAGS = {"0", "false", "no", "off"}


def _parse_env_file(path: Path) -> Dict[str, str]:
    """Minimal .env parser (no external dependency required)."""
    data: dict[str, str] = {}
    if not path.exists():
        return data
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip('"').strip("'")
    return data


def _parse_flag(raw: str, default: bool) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUE_FLAGS:
        return True
    if normalized in _FALSE_FLAGS:
        return False
    return default


@dataclass(frozen=True)
class EngineSettings:
    snippets_path: str
    seed: int | None
    persistence: bool
    reincorporate: bool
    audit: bool
    filters: Tuple[str, ...]
    env_file: Path | None


def load_settings(env_path: str | Path = ".env") -> EngineSettings:
    """Load engine settings from .env (if present) + real environment."""
    env_file = Path(env_path)
    file_values = _parse_env_file(env_file)

    def read(key: str, default: str) -> str:
        return os.environ.get(key, file_values.get(key, default))

    snippets_path = read("SNIPPET_ENGINE_SNIPPETS_PATH", "snippets")
    seed_raw = read("SNIPPET_ENGINE_SEED", "").strip()
    try:
        seed = int(seed_raw) if seed_raw else None
    except ValueError as exc:
        raise ValueError(f"SNIPPET_ENGINE_SEED must be an integer, got '{seed_raw}'") from exc
    persistence = _parse_flag(read("SNIPPET_ENGINE_PERSISTENCE", "1"), True)
    reincorporate = _parse_flag(read("SNIPPET_ENGINE_REINCORPORATE", "0"), False)
    audit = _parse_flag(read("SNIPPET_ENGINE_AUDIT", "0"), False)
    filters_raw = read("SNIPPET_ENGINE_FILTERS", "")
    filters = tuple(part.strip() for part in filters_raw.split(",") if part.strip())

    env_file_used = env_file if env_file.exists() else None
    return EngineSettings(
        snippets_path=snippets_path,
        seed=seed,
        persistence=persistence,
        reincorporate=reincorporate,
        audit=audit,
        filters=filters,
        env_file=env_file_used,
    )
