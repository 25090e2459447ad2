import builtins
import os
import time
from typing import Any, Iterable

_start_time = time.perf_counter()
_LOG_LEVEL_ENV = "SNIPPET_ENGINE_LOG_LEVEL"
_NAMED_LEVELS = {
    "quiet": 0,
    "off": 0,
    "info": 1,
    "warning": 1,
    "warn": 1,
    "verbose": 2,
    "debug": 3,
    "trace": 3,
}


def parse_log_level(raw: str | None, default: int = 1) -> int:
    """Turn '2', 'debug', 'quiet' and friends into a numeric verbosity."""
    if raw is None:
        return default
    text = raw.strip()
    if not text:
        return default
    try:
        return max(0, int(text))
    except ValueError:
        return _NAMED_LEVELS.get(text.lower(), default)


_LOG_LEVEL = parse_log_level(os.getenv(_LOG_LEVEL_ENV))


def set_log_level(level: int) -> None:
    global _LOG_LEVEL
    _LOG_LEVEL = max(0, int(level))


def _elapsed() -> float:
    return time.perf_counter() - _start_time


def timestamp_prefix() -> str:
    return f"+[{_elapsed():7.2f}]"


def reset_timestamp() -> None:
    global _start_time
    _start_time = time.perf_counter()


def log(*objects: Any, sep: str = " ", end: str = "\n", file=None, flush: bool = False, prefix: bool = True) -> None:
    message = sep.join(str(obj) for obj in objects)
    if prefix:
        message = f"{timestamp_prefix()} {message}"
    builtins.print(message, end=end, file=file, flush=flush)


def log_lines(lines: Iterable[str], *, prefix: bool = False) -> None:
    """Print pre-formatted report lines (tables, audit dumps) one per row."""
    for line in lines:
        log(line, prefix=prefix)


def verbose_enabled(level: int) -> bool:
    return _LOG_LEVEL >= level


def log_verbose(level: int, *objects: Any, **kwargs: Any) -> None:
    """Emit a log line only when the configured verbosity is high enough."""
    if verbose_enabled(level):
        log(*objects, **kwargs)
