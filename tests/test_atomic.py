import threading

import pytest

from atomicrmw.atomic import (
    AtomicCell,
    BusyWaitError,
    BusyWaiter,
    WORD_MASK,
    busywait_noreturn,
    busywait_pause,
    busywait_yield,
    modify,
)


def add_one(current):
    return current + 1


def test_load_returns_initial_value():
    assert AtomicCell(3).load() == 3


def test_store_then_load_round_trip():
    cell = AtomicCell(0)
    cell.store(555)
    assert cell.load() == 555


def test_store_wraps_to_word_size():
    cell = AtomicCell(0)
    cell.store(WORD_MASK + 1)
    assert cell.load() == 0


def test_try_replace_succeeds_on_match():
    cell = AtomicCell(3)
    assert cell.try_replace(3, 9) is True
    assert cell.load() == 9


def test_try_replace_fails_on_mismatch_and_leaves_value():
    cell = AtomicCell(3)
    assert cell.try_replace(4, 9) is False
    assert cell.load() == 3


def test_modify_add_one():
    cell = AtomicCell(3)
    assert modify(cell, add_one) == (3, 4)
    assert cell.load() == 4


def test_modify_with_lambda():
    cell = AtomicCell(3)
    before, after = modify(cell, lambda v: v * 7)
    assert before == 3
    assert after == 21
    assert cell.load() == after


def test_modify_wraps_on_overflow():
    cell = AtomicCell(WORD_MASK)
    assert modify(cell, add_one) == (WORD_MASK, 0)
    assert cell.load() == 0


def test_modify_stateful_op_sees_changes():
    calls = []

    def op(value):
        calls.append(value)
        return value + 2

    cell = AtomicCell(10)
    assert modify(cell, op) == (10, 12)
    assert calls == [10]
    assert cell.load() == 12


def test_modify_retries_after_interference():
    cell = AtomicCell(0)
    interfered = []

    def op(value):
        if not interfered:
            interfered.append(True)
            cell.store(100)
        return value + 1

    assert modify(cell, op) == (100, 101)
    assert cell.load() == 101


def test_modify_raises_when_always_interfered():
    cell = AtomicCell(0)

    def op(value):
        cell.store(value + 1)
        return value

    with pytest.raises(BusyWaitError):
        modify(cell, op)


def test_modify_is_atomic_across_threads():
    cell = AtomicCell(0)
    repeat = 2000

    def worker():
        for _ in range(repeat):
            modify(cell, add_one)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert cell.load() == 4 * repeat


def test_busywaiter_pauses_before_yielding():
    waiter = BusyWaiter()
    for _ in range(BusyWaiter.ESCALATE_PAUSE_COUNT):
        waiter.wait()
    assert (waiter.pause_count, waiter.yield_count) == (BusyWaiter.ESCALATE_PAUSE_COUNT, 0)
    waiter.wait()
    assert (waiter.pause_count, waiter.yield_count) == (0, 1)


def test_busywaiter_gives_up_after_all_escalations():
    waiter = BusyWaiter()
    succeeded = 0
    with pytest.raises(BusyWaitError):
        while succeeded < 100000:
            waiter.wait()
            succeeded += 1
    assert succeeded == 1088
    assert waiter.yield_count == BusyWaiter.ESCALATE_YIELD_COUNT


def test_wait_longer_resets_pause_count():
    waiter = BusyWaiter()
    waiter.pause_count = 5
    waiter.wait_longer()
    assert waiter.pause_count == 0
    assert waiter.yield_count == 1


def test_busywait_noreturn_raises():
    with pytest.raises(BusyWaitError, match="Busywait raise"):
        busywait_noreturn()


def test_busywait_error_is_runtime_error():
    with pytest.raises(RuntimeError):
        busywait_noreturn()


def test_pause_and_yield_leave_cell_untouched():
    cell = AtomicCell(7)
    busywait_pause(1000)
    busywait_yield()
    assert cell.load() == 7