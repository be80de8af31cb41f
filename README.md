# atomicrmw

Atomic read-modify-write on a shared integer cell, a pair of nanosecond
timers, and a two-thread benchmark that checks whether concurrent updates
through the read-modify-write loop stay consistent. It uses only the
standard library.

## Modules

### `atomicrmw.atomic`

- `AtomicCell(value=0)` holds one unsigned 64-bit value. Values wrap
  modulo 2**64. Every operation runs under the cell's own lock:
  - `load()` returns the value.
  - `store(value)` replaces the value.
  - `try_replace(expected, desired)` stores `desired` only if the cell
    holds `expected`, and returns whether it did.
- `modify(cell, op)` loads the value, computes `op(value)` and tries to
  swap it in. It repeats until the swap succeeds and returns the
  `(old, new)` pair. `op` may be called more than once when other threads
  get in between.
- `BusyWaiter` is the back-off used between retries. `wait()` pauses
  first, up to 32 times (`busywait_pause`, a short spin measured in
  nanoseconds). After that, `wait_longer()` yields the thread
  (`busywait_yield`) and resets the pause budget. Once 32 yields have
  been used it calls `busywait_noreturn()`, which raises `BusyWaitError`
  (a `RuntimeError` that records the stuck thread's name).

```python
from atomicrmw.atomic import AtomicCell, modify

cell = AtomicCell(3)
before, after = modify(cell, lambda current: current * 7)
print(before, after, cell.load())   # 3 21 21
```

### `atomicrmw.timer`

- `start_time()` returns the monotonic clock reading taken the first time
  any timer function is used. `elapsed_nanos()` measures from that point
  and is never negative. `elapsed_days_seconds_nanos()` returns a
  `DaysSecondsNanos(days, seconds, nanos)`, or all zeros if the value is
  out of range.
- `NanoTimer(start_now=False)` is an accumulating stopwatch. Its methods
  are `start()`, `stop()` (both do nothing if the timer is already in
  that state), `current_nanos()`, `current_seconds()`, `is_running()` and
  `is_valid()`.
- `EzTimer(what, start=True)` is a named `NanoTimer`. `finish()`, or the
  end of a `with` block, stops it and reports once. With a callback set
  through `set_callback`, the callback receives the timer. Otherwise it
  prints `[EzTimer: <what>] <nanos> (ns), <seconds> (s)` to stdout, or an
  "invalid timer state" line to stderr.

```python
from atomicrmw.timer import EzTimer

with EzTimer("work"):
    sum(range(1_000_000))
```

### `atomicrmw.benchmark`

- `busy_func(value)` advances an obscured counter made of two 16-bit
  halves. Each half steps through a linear congruential generator with a
  period of 32768.
- `LcgHelper` builds the tables that map generator outputs back to their
  positions. It provides `next`, `get_modified`, `get_unmodified` and
  `find(value)`.
- `Benchmark1(phase_seconds=1.0)` first calibrates clock ticks per phase
  on two threads. It then runs two threads that call
  `modify(cell, busy_func)` in bursts of 1000:
  - thread 0 works alone on target 00 in phase 1;
  - both threads share target 01 in phase 2;
  - thread 1 works alone on target 11 in phase 3;
  - both threads stop after phase 5.

  `run()` prints the raw and decoded totals and returns a list of
  `TargetReport(name, raw, decoded)`. A report's `valid` property is
  true when the decoded total is a multiple of 1000.

### `atomicrmw.main`

`main(argv=None)` runs four small `modify` demos and then the benchmark.
The demos are: add one, add two, multiply by seven, and a repeated
square modulo a million.

## Command line

```
atomicrmw [--phase-seconds SECONDS]
```

`--phase-seconds` sets the length of each benchmark phase (default 1.0,
must be positive). With the default, the run takes about seven seconds:
two seconds of calibration and five of competing threads.

## What it does not do

`AtomicCell` is built on a Python lock, not on hardware atomic
instructions. The benchmark times its phases with `time.perf_counter_ns`
and does not read a CPU cycle counter. Its numbers describe the
interpreter's threading, not the behaviour of a native compare-and-swap.

## Tests

```
pip install .[test]
pytest
```