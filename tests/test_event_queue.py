import dataclasses
import random

import pytest

from sim.errors import CapacityOverflow, SchedulingError
from sim.queues import EventKind, EventQueue


def test_pop_returns_minimum_time():
    rng = random.Random(7)
    fel = EventQueue()
    pushed = []
    for i in range(200):
        t = round(rng.uniform(0, 50), 1)  # coarse grid to force plenty of ties
        fel.push(t, EventKind.ARRIVAL, i % 3)
        pushed.append((t, i))
    popped = []
    while not fel.is_empty():
        ev = fel.pop()
        popped.append((ev.time, ev.seq - 1))
    assert popped == sorted(pushed)


def test_equal_times_pop_in_push_order():
    fel = EventQueue()
    a = fel.push(5.0, EventKind.COMPLETION, 0)
    b = fel.push(5.0, EventKind.ARRIVAL, 1)
    c = fel.push(1.0, EventKind.ARRIVAL, 0)
    d = fel.push(5.0, EventKind.ARRIVAL, 0)
    assert [fel.pop() for _ in range(4)] == [c, a, b, d]


def test_peek_does_not_remove():
    fel = EventQueue()
    assert fel.peek() is None
    ev = fel.push(2.0, EventKind.ARRIVAL, 0)
    fel.push(3.0, EventKind.ARRIVAL, 0)
    assert fel.peek() is ev
    assert len(fel) == 2
    assert fel.pop() is ev
    assert len(fel) == 1


def test_clear_empties_queue():
    fel = EventQueue()
    fel.push(1.0, EventKind.ARRIVAL, 0)
    fel.clear()
    assert fel.is_empty()
    assert len(fel) == 0


def test_pop_empty_raises_scheduling_error():
    fel = EventQueue()
    fel.push(4.5, EventKind.ARRIVAL, 0)
    fel.pop()
    with pytest.raises(SchedulingError) as exc:
        fel.pop()
    assert exc.value.clock == 4.5
    assert exc.value.exit_code == 1


def test_capacity_bound_raises_overflow():
    fel = EventQueue(capacity=2)
    fel.push(1.0, EventKind.ARRIVAL, 0)
    fel.push(2.0, EventKind.ARRIVAL, 0)
    with pytest.raises(CapacityOverflow) as exc:
        fel.push(3.0, EventKind.ARRIVAL, 0)
    assert exc.value.stage is None
    assert "event list" in str(exc.value)


def test_events_are_immutable():
    fel = EventQueue()
    ev = fel.push(1.0, EventKind.ARRIVAL, 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        ev.time = 0.5
