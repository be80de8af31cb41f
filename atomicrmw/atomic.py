"""Atomic word-sized cells and a compare-and-swap read-modify-write loop."""

from __future__ import annotations

import threading
import time
from typing import Callable, Tuple

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

BUSYWAIT_PAUSE_TSC_GOAL = 160


class BusyWaitError(RuntimeError):
    """Raised when a busy-wait loop has been stuck for too long."""

    def __init__(self, message: str, thread_name: str | None = None) -> None:
        super().__init__(message)
        self.thread_name = thread_name


class AtomicCell:
    """An unsigned machine word whose operations are sequentially consistent."""

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0) -> None:
        self._value = value & WORD_MASK
        self._lock = threading.Lock()

    def load(self) -> int:
        """Return the current value."""
        with self._lock:
            return self._value

    def store(self, value: int) -> None:
        """Replace the current value."""
        with self._lock:
            self._value = value & WORD_MASK

    def try_replace(self, expected: int, desired: int) -> bool:
        """Store ``desired`` if the cell holds ``expected``; report success."""
        with self._lock:
            if self._value != (expected & WORD_MASK):
                return False
            self._value = desired & WORD_MASK
            return True

    def __repr__(self) -> str:
        return f"AtomicCell({self.load()})"


def busywait_pause(tsc_goal: int = BUSYWAIT_PAUSE_TSC_GOAL) -> None:
    """Spin without any system call until ``tsc_goal`` nanoseconds have passed."""
    start = time.perf_counter_ns()
    while True:
        if time.perf_counter_ns() - start >= tsc_goal:
            return


def busywait_yield() -> None:
    """Give up the rest of this thread's time slice."""
    time.sleep(0)


def busywait_noreturn() -> None:
    """Signal a busy-wait loop that appears to be stuck for good.

    The raised error records the name of the thread that got stuck.
    """
    thread_name = threading.current_thread().name
    raise BusyWaitError("Busywait raise", thread_name=thread_name)


class BusyWaiter:
    """Escalating wait: pauses first, then yields, then gives up."""

    BUSYWAIT_PAUSE_TSC_GOAL = BUSYWAIT_PAUSE_TSC_GOAL
    ESCALATE_PAUSE_COUNT = 32
    ESCALATE_YIELD_COUNT = 32

    def __init__(self) -> None:
        self.pause_count = 0
        self.yield_count = 0

    def wait(self) -> None:
        """Wait once inside a retry loop, escalating when retries pile up.

        Raises BusyWaitError once both pauses and yields are exhausted.
        """
        if self.pause_count >= self.ESCALATE_PAUSE_COUNT:
            self.wait_longer()
        else:
            self.pause_count += 1
            busywait_pause(self.BUSYWAIT_PAUSE_TSC_GOAL)

    def wait_longer(self) -> None:
        """Reset the pause budget and yield, or give up when yields run out."""
        self.pause_count = 0
        if self.yield_count >= self.ESCALATE_YIELD_COUNT:
            busywait_noreturn()
        self.yield_count += 1
        busywait_yield()


def modify(cell: AtomicCell, op: Callable[[int], int]) -> Tuple[int, int]:
    """Apply ``op`` to the cell's value atomically via a compare-and-swap loop.

    ``op`` may be called several times if other threads interfere.
    Returns the ``(old, new)`` pair of the successful update.
    """
    waiter = BusyWaiter()
    while True:
        loaded = cell.load()
        computed = op(loaded) & WORD_MASK
        if cell.try_replace(loaded, computed):
            return loaded, computed
        waiter.wait()