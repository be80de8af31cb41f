"""Atomic read-modify-write cells, nanosecond timers and a contention benchmark."""

__version__ = "0.1.0"
__all__ = ["atomic", "timer", "benchmark", "main"]