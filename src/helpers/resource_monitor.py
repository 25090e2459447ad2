from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Tuple

import psutil

LoadAverage = Tuple[float, float, float]


@dataclass(frozen=True)
class ResourceSample:
    """Process metrics captured before/after a generation batch."""

    taken_at: float
    rss_mb: float
    cpu_total: float
    load_avg: LoadAverage | None


@dataclass(frozen=True)
class ResourceDelta:
    duration_sec: float
    cpu_percent: float | None
    rss_after_mb: float
    rss_delta_mb: float
    load_avg: LoadAverage | None


class ResourceMonitor:
    """Lightweight process telemetry used to profile long generation/audit runs."""

    _MB = 1024 * 1024

    def __init__(self) -> None:
        self._cpu_count = psutil.cpu_count(logical=True) or 1
        self._process = psutil.Process(os.getpid())

    def snapshot(self) -> ResourceSample:
        with self._process.oneshot():
            rss = self._process.memory_info().rss
            cpu_times = self._process.cpu_times()
        return ResourceSample(
            taken_at=time.perf_counter(),
            rss_mb=rss / self._MB,
            cpu_total=float(cpu_times.user + cpu_times.system),
            load_avg=self._load_average(),
        )

    def delta(self, before: ResourceSample, after: ResourceSample) -> ResourceDelta:
        duration = max(0.0, after.taken_at - before.taken_at)
        cpu_percent: float | None = None
        if duration > 0:
            cpu_delta = after.cpu_total - before.cpu_total
            cpu_percent = max(0.0, (cpu_delta / duration) * 100.0 / float(self._cpu_count))
        return ResourceDelta(
            duration_sec=duration,
            cpu_percent=cpu_percent,
            rss_after_mb=after.rss_mb,
            rss_delta_mb=after.rss_mb - before.rss_mb,
            load_avg=after.load_avg,
        )

    def describe(self, delta: ResourceDelta) -> str:
        """Return a short, human-friendly summary string."""
        parts = [f"wall={delta.duration_sec:.2f}s"]
        if delta.cpu_percent is not None:
            parts.append(f"cpu={delta.cpu_percent:.1f}%/{self._cpu_count}c")
        parts.append(f"rss={delta.rss_after_mb:.1f}MB({delta.rss_delta_mb:+.1f})")
        if delta.load_avg is not None:
            parts.append("load=" + ",".join(f"{value:.2f}" for value in delta.load_avg))
        return " ".join(parts)

    @staticmethod
    def _load_average() -> LoadAverage | None:
        try:
            load = os.getloadavg()
        except (AttributeError, OSError):
            return None
        return float(load[0]), float(load[1]), float(load[2])
