"""Wall-clock accounting for the transform chain."""

from __future__ import annotations

import math
import threading
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


def benchmark(callback: Callable[[], object]) -> float:
    """Run `callback` and return the elapsed time in milliseconds."""
    start = time.perf_counter()
    callback()
    return (time.perf_counter() - start) * 1000.0


class TransformTimers:
    """Cumulative milliseconds per transform name.

    Pages may be transformed on worker threads, so every update goes through
    a lock. Names keep the order they were first registered in, which is the
    order the report prints them in.
    """

    __slots__ = ("_lock", "_totals")

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._lock = threading.Lock()
        self._totals: dict[str, float] = dict.fromkeys(names, 0.0)

    def register(self, name: str) -> None:
        with self._lock:
            self._totals.setdefault(name, 0.0)

    def add(self, name: str, elapsed_ms: float) -> None:
        with self._lock:
            self._totals[name] = self._totals.get(name, 0.0) + elapsed_ms

    def time(self, name: str, callback: Callable[[], object]) -> float:
        """Benchmark `callback` and charge the elapsed time to `name`."""
        elapsed = benchmark(callback)
        self.add(name, elapsed)
        return elapsed

    def totals(self) -> dict[str, float]:
        with self._lock:
            return dict(self._totals)

    def report_lines(self) -> list[str]:
        lines: list[str] = []
        total = 0
        for name, elapsed in self.totals().items():
            rounded = math.ceil(elapsed)
            lines.append(f"{name}: {rounded}ms")
            total += rounded
        lines.append(f"Total transform time: {total}ms")
        return lines

    def report(self) -> None:
        for line in self.report_lines():
            print(line)
