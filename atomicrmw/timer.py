"""Monotonic nanosecond timers measured from a process-wide start point."""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

NANOS_PER_SECOND = 1_000_000_000
SECONDS_PER_DAY = 24 * 60 * 60
_U32_MAX = (1 << 32) - 1

_start_lock = threading.Lock()
_start_ns: Optional[int] = None


@dataclass(frozen=True)
class DaysSecondsNanos:
    """Elapsed time split into whole days, seconds of the day and nanoseconds."""

    days: int
    seconds: int
    nanos: int


def start_time() -> int:
    """Return the monotonic clock reading, in ns, taken on first use."""
    global _start_ns
    if _start_ns is None:
        with _start_lock:
            if _start_ns is None:
                _start_ns = time.monotonic_ns()
    return _start_ns


def _elapsed() -> int:
    start = start_time()
    return time.monotonic_ns() - start


def elapsed_nanos() -> int:
    """Nanoseconds since the start point, never negative."""
    return max(0, _elapsed())


def elapsed_days_seconds_nanos() -> DaysSecondsNanos:
    """Elapsed time since the start point, or all zeros if out of range."""
    total = _elapsed()
    if total < 0:
        return DaysSecondsNanos(0, 0, 0)
    seconds, nanos = divmod(total, NANOS_PER_SECOND)
    if seconds >= _U32_MAX:
        return DaysSecondsNanos(0, 0, 0)
    days, seconds = divmod(seconds, SECONDS_PER_DAY)
    return DaysSecondsNanos(days, seconds, nanos)


class NanoTimer:
    """A stopwatch accumulating nanoseconds across start/stop intervals."""

    def __init__(self, start_now: bool = False) -> None:
        self._summed = 0
        self._started = 0
        self._running = False
        self._invalid = False
        if start_now:
            self.start()

    def start(self) -> None:
        """Start timing; does nothing if already running."""
        if self._running:
            return
        self._running = True
        self._started = elapsed_nanos()

    def stop(self) -> None:
        """Stop timing and add the interval; does nothing if not running."""
        if not self._running:
            return
        self._running = False
        diff = elapsed_nanos() - self._started
        if diff < 0:
            self._invalid = True
            diff = 0
        self._summed += diff
        self._started = 0

    def current_nanos(self) -> int:
        """Total nanoseconds so far, including a running interval."""
        diff = elapsed_nanos() - self._started if self._running else 0
        return self._summed + diff

    def current_seconds(self) -> float:
        """Total time so far in seconds."""
        return 1.0e-9 * self.current_nanos()

    def is_running(self) -> bool:
        return self._running

    def is_valid(self) -> bool:
        return not self._invalid


class EzTimer:
    """A named timer that reports its result when finished.

    Use it as a context manager, or call ``finish`` explicitly. Without a
    callback the result is printed: to stdout normally, to stderr when the
    timer saw the clock run backwards.
    """

    def __init__(self, what: str, start: bool = True) -> None:
        self._what = what
        self._timer = NanoTimer(start)
        self._callback: Optional[Callable[["EzTimer"], None]] = None
        self._finished = False

    def set_callback(self, callback: Optional[Callable[["EzTimer"], None]]) -> None:
        """Replace the default report with ``callback(timer)``."""
        self._callback = callback

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def current_nanos(self) -> int:
        return self._timer.current_nanos()

    def current_seconds(self) -> float:
        return self._timer.current_seconds()

    def what(self) -> str:
        return self._what

    def is_valid(self) -> bool:
        return self._timer.is_valid()

    def finish(self) -> None:
        """Stop the timer and report the result; only the first call reports."""
        if self._finished:
            return
        self._finished = True
        self._timer.stop()
        if self._callback is not None:
            self._callback(self)
            return
        if not self._timer.is_valid():
            print(f"[EzTimer: {self._what}] invalid timer state.", file=sys.stderr)
            return
        nanos = self._timer.current_nanos()
        seconds = self._timer.current_seconds()
        print(f"[EzTimer: {self._what}] {nanos} (ns), {seconds:.6f} (s)")

    def __enter__(self) -> "EzTimer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.finish()