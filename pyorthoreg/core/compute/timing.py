"""
Wall-clock timing for fits and runs.

A Timer collects named sections (minimization, resampling, fitting, ...)
plus a total, and hands them over as the dict stored in Result.timing.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer.

        timer = Timer()
        timer.start()
        with timer.section('minimization'):
            output = minimizer.minimize(objective, initial)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'minimization': ...}
    """

    def __init__(self):
        self._sections: dict[str, float] = {}
        self._started: float | None = None
        self._total: float | None = None

    def start(self) -> None:
        self._started = time.perf_counter()

    def stop(self) -> None:
        if self._started is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._started

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under name; repeated names add up."""
        began = time.perf_counter()
        try:
            yield
        finally:
            self._sections[name] = (
                self._sections.get(name, 0.0) + time.perf_counter() - began
            )

    def result(self) -> dict[str, float]:
        """'total_seconds' followed by every section, in first-use order."""
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}


@contextmanager
def timed() -> Iterator[Timer]:
    """Run the enclosed block under a started Timer, stopped on exit."""
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
