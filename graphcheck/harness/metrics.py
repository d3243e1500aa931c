import os
import time
from contextlib import contextmanager

import psutil

_PROC = psutil.Process(os.getpid())


def rss_mb() -> float:
    return _PROC.memory_info().rss / 1024**2


@contextmanager
def measure():
    """
    Context manager yielding a dict filled on exit with:
      - wall_time_s
      - cpu_time_s (process user + system)
      - rss_after_mb
      - rss_delta_mb
    """
    rss0 = rss_mb()
    cpu0 = _PROC.cpu_times()
    t0 = time.perf_counter()
    result = {}
    try:
        yield result
    finally:
        t1 = time.perf_counter()
        cpu1 = _PROC.cpu_times()
        rss1 = rss_mb()
        result.update(
            wall_time_s=t1 - t0,
            cpu_time_s=(cpu1.user - cpu0.user) + (cpu1.system - cpu0.system),
            rss_after_mb=rss1,
            rss_delta_mb=rss1 - rss0,
        )


class Timer:
    """Accumulates wall-clock timings by label; one open interval at a time."""

    def __init__(self):
        self._label = None
        self._t0 = None
        self.timings = {}

    def start(self, label):
        if self._label is not None:
            raise RuntimeError(f"timer already running for {self._label!r}")
        self._label = label
        self._t0 = time.perf_counter()

    def stop(self):
        if self._label is None:
            raise RuntimeError("timer is not running")
        elapsed = time.perf_counter() - self._t0
        self.timings.setdefault(self._label, []).append(elapsed)
        self._label = None
        return elapsed

    def report(self):
        """One line per label: count, total and mean seconds."""
        lines = []
        for label, times in self.timings.items():
            total = sum(times)
            lines.append(f"{label}: n={len(times)} total={total:.6f}s mean={total / len(times):.6f}s")
        return "\n".join(lines)
