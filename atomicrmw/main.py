"""Demonstrations of the atomic modify loop, followed by the benchmark."""

from __future__ import annotations

import argparse
import time
from typing import Callable, List, Optional, Sequence, Tuple

from atomicrmw.atomic import AtomicCell, modify
from atomicrmw.benchmark import Benchmark1, TargetReport

_DEFAULT_PHASE_SECONDS = 1.0


def _almost_always() -> bool:
    return time.perf_counter_ns() != (time.perf_counter_ns() ^ 0x1111111111111111)


def add_one(current: int) -> int:
    return current + 1


def add_two(current: int) -> int:
    return current + 2


def _report(result: Tuple[int, int], dest: Optional[AtomicCell] = None) -> None:
    before, after = result
    print(f"Before: {before}")
    print(f"After: {after}")
    if dest is not None:
        print(f"Dest: {dest.load()}")
        print(f"Load(Dest): {dest.load()}")


def simple_demo_1() -> Tuple[int, int]:
    """Increment a cell holding 3; return the (before, after) pair."""
    print("====== Simple Demo 1 ======")
    dest = AtomicCell(3)
    result = modify(dest, add_one)
    _report(result, dest)
    return result


def simple_demo_2() -> Tuple[int, int]:
    """Modify a cell holding 3 with a function chosen at run time."""
    print("====== Simple Demo 2 ======")
    dest = AtomicCell(3)
    op: Callable[[int], int] = add_two if _almost_always() else add_one
    result = modify(dest, op)
    _report(result, dest)
    print(f"Is fp add_one? {'true' if op is add_one else 'false'}")
    print(f"Is fp add_two? {'true' if op is add_two else 'false'}")
    return result


def simple_demo_3() -> Tuple[int, int]:
    """Multiply a cell holding 3 by seven."""
    print("====== Simple Demo 3 ======")
    dest = AtomicCell(3)
    result = modify(dest, lambda current: current * 7)
    _report(result, dest)
    return result


def simple_demo_4() -> Tuple[int, int]:
    """Square a cell holding 3 modulo a million, 555 times, in one update."""
    print("====== Simple Demo 4 ======")
    dest = AtomicCell(3)
    repeat = 555

    def square_modulo_million(current: int) -> int:
        result = current
        for _ in range(repeat):
            result = (result * result) % 1_000_000
        return result

    result = modify(dest, square_modulo_million)
    _report(result)
    return result


def _run_benchmark(phase_seconds: float) -> List[TargetReport]:
    print("====== Benchmark 1 ======")
    return Benchmark1(phase_seconds).run()


def benchmark_1() -> List[TargetReport]:
    """Run the contention benchmark with one-second phases and return its reports."""
    return _run_benchmark(_DEFAULT_PHASE_SECONDS)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run the atomic modify demos and the contention benchmark."
    )
    parser.add_argument(
        "--phase-seconds",
        type=float,
        default=_DEFAULT_PHASE_SECONDS,
        help="length of each benchmark phase in seconds (default: 1.0)",
    )
    args = parser.parse_args(argv)
    if args.phase_seconds <= 0:
        parser.error("--phase-seconds must be positive")
    simple_demo_1()
    simple_demo_2()
    simple_demo_3()
    simple_demo_4()
    _run_benchmark(args.phase_seconds)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())