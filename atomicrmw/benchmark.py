"""Two-thread contention benchmark for the compare-and-swap modify loop."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from atomicrmw.atomic import AtomicCell, modify

BUSY_FUNC_REPEAT_COUNT = 1000

_HALF_MASK = 0xFFFF


class LcgHelper:
    """Tables mapping the LCG's members to their position in its cycle."""

    PERIOD = 32768

    @staticmethod
    def next(value: int) -> int:
        """Advance the 16-bit LCG by one step."""
        return ((value & _HALF_MASK) * 51 + 1) & _HALF_MASK

    @staticmethod
    def get_modified(value: int) -> int:
        """Squeeze out bit 1, which is constant across the LCG's members."""
        return ((value >> 2) << 1) | (value & 1)

    @staticmethod
    def get_unmodified(value: int) -> int:
        """Undo ``get_modified`` for a member of the LCG's cycle."""
        return ((value >> 1) << 2) | (value & 1)

    def __init__(self) -> None:
        values: List[int] = []
        inverse: List[Optional[int]] = [None] * self.PERIOD
        value = 0
        for position in range(self.PERIOD):
            modified = self.get_modified(value)
            if modified >= self.PERIOD:
                raise IndexError(
                    f"LcgHelper: bad at i={position}, modified={modified}"
                )
            if inverse[modified] is not None:
                raise RuntimeError(
                    f"LcgHelper: bad at i={position}, modified={modified}, "
                    f"ref_inverse={inverse[modified]}"
                )
            values.append(modified)
            inverse[modified] = position
            value = self.next(value)
        self.values: Tuple[int, ...] = tuple(values)
        self._inverse: Tuple[int, ...] = tuple(inverse)  # type: ignore[arg-type]

    def find(self, value: int) -> int:
        """Return how many LCG steps from 0 produce ``value``."""
        modified = self.get_modified(value)
        if not 0 <= modified < self.PERIOD:
            raise IndexError(f"LcgHelper: value {value} out of range")
        return self._inverse[modified]


def busy_func(value: int) -> int:
    """Advance an obscured 30-bit counter made of two 16-bit LCG halves.

    The lower half steps every call; the upper half steps whenever the
    lower one wraps back to zero.
    """
    lower = value & _HALF_MASK
    upper = (value >> 16) & _HALF_MASK
    new_lower = LcgHelper.next(lower)
    new_upper = upper if new_lower else LcgHelper.next(upper)
    return (new_upper << 16) | new_lower


@dataclass(frozen=True)
class TargetReport:
    """Final state of one contended target."""

    name: str
    raw: int
    decoded: int

    @property
    def valid(self) -> bool:
        return self.decoded % BUSY_FUNC_REPEAT_COUNT == 0


class Benchmark1:
    """Runs two threads that modify shared and private targets in phases.

    Time is split into phases of ``phase_seconds``: thread 0 works alone on
    target 00 in phase 1, both threads share target 01 in phase 2, thread 1
    works alone on target 11 in phase 3, and both finish after phase 5.
    """

    def __init__(self, phase_seconds: float = 1.0) -> None:
        if phase_seconds <= 0:
            raise ValueError("phase_seconds must be positive")
        self.phase_seconds = phase_seconds
        self.lcg_helper = LcgHelper()
        self.calibration = [0, 0]
        self.target_00 = AtomicCell(0)
        self.target_01 = AtomicCell(0)
        self.target_11 = AtomicCell(0)
        self.ticks_per_phase = 0
        self.tick_epoch = 0

    def _pause(self) -> None:
        time.sleep(self.phase_seconds)

    def run(self) -> List[TargetReport]:
        """Calibrate, then run the competing threads and report the targets."""
        self.run_calibration()
        return self.run_competing_threads()

    def run_calibration(self) -> None:
        """Measure clock ticks per phase on two threads and average them."""
        print(
            f"Calibration start. Takes about {2 * self.phase_seconds:g} seconds."
        )
        self.calibration = [0, 0]
        threads = [
            threading.Thread(target=self.calibration_func, args=(tid,))
            for tid in range(2)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        v1, v2 = self.calibration
        print(f"Calibration done: {v1}, {v2}")
        self.ticks_per_phase = (v1 + v2) // 2
        print(f"Average ticks per phase: {self.ticks_per_phase}")

    def calibration_func(self, tid: int) -> None:
        """Time one phase-long pause and store it in ``calibration[tid]``."""
        if not 0 <= tid < len(self.calibration):
            raise IndexError(f"calibration index {tid} out of range")
        self._pause()
        t_start = time.perf_counter_ns()
        self._pause()
        t_stop = time.perf_counter_ns()
        self.calibration[tid] = t_stop - t_start

    def run_competing_threads(self) -> List[TargetReport]:
        """Run both worker threads to completion and decode the targets."""
        self.tick_epoch = time.perf_counter_ns()
        print(f"busy_func_repeat_count: {BUSY_FUNC_REPEAT_COUNT}")
        print(f"Approximate total running time: {5 * self.phase_seconds:g} seconds")
        print("Running competing threads...")
        print(f"_tsc_epoch = {self.tick_epoch}")
        targets = (
            ("00", self.target_00),
            ("01", self.target_01),
            ("11", self.target_11),
        )
        for _, cell in targets:
            cell.store(0)
        threads = [
            threading.Thread(target=self.thread_func, args=(tid,))
            for tid in range(2)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        print("Threads joined.")
        raws = [(name, cell.load()) for name, cell in targets]
        for name, raw in raws:
            print(f"Target {name} (before decoding): {raw}")
        reports = [
            TargetReport(name, raw, self.decode_final_value(raw))
            for name, raw in raws
        ]
        for report in reports:
            print(f"Target {report.name} (decoded): {report.decoded}")
        for report in reports:
            answer = "yes" if report.valid else "no"
            print(f"Target {report.name} decoded value is valid: {answer}")
        return reports

    def decode_final_value(self, value: int) -> int:
        """Turn an obscured counter back into the number of steps taken."""
        lower = value & _HALF_MASK
        upper = (value >> 16) & _HALF_MASK
        return (self.lcg_helper.find(upper) << 15) | self.lcg_helper.find(lower)

    def thread_func(self, tid: int) -> None:
        """Worker loop for thread ``tid``; other ids return at once."""
        tpp = self.ticks_per_phase
        schedules = {
            0: ((self.target_00, 1, 2), (self.target_01, 2, 3)),
            1: ((self.target_01, 2, 3), (self.target_11, 3, 4)),
        }
        if tid not in schedules:
            return
        windows = [(cell, start * tpp, stop * tpp) for cell, start, stop in schedules[tid]]
        join_offset = 5 * tpp
        while True:
            toff = time.perf_counter_ns() - self.tick_epoch
            if toff >= join_offset:
                break
            target = next(
                (cell for cell, start, stop in windows if start <= toff < stop),
                None,
            )
            if target is None:
                continue
            for _ in range(BUSY_FUNC_REPEAT_COUNT):
                modify(target, busy_func)