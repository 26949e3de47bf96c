# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: Event, the Future Event List (EventQueue), the
#   per-replication Env that owns the clock, and the single-server FIFO Stage
#   with its time-weighted accumulators.
#
# Design notes:
#   - The FEL is a binary heap keyed by (time, seq); seq is a monotonically
#     increasing insertion tag so equal-time events pop in push order.
#   - Events are frozen. Rescheduling means pushing a new event.
#   - Stage accumulators must be flushed (update_time_avg_stats) before any
#     of the integrated state variables change.
#   - Transition logic is delegated to env.network (see sim.network).
#
# Usage:
#   from sim.queues import Env, EventQueue, EventKind, Stage
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, List, Optional, Tuple

from .errors import CapacityOverflow, SchedulingError


class EventKind(str, Enum):
    ARRIVAL = "arrival"
    COMPLETION = "completion"


@dataclass(frozen=True, order=True)
class Event:
    """Minimal event object for the Future Event List (FEL)."""
    time: float
    seq: int
    kind: EventKind = field(compare=False)
    stage: int = field(compare=False)


class EventQueue:
    """Time-ordered pending events with insertion-order tie-breaking.

    Parameters
    ----------
    capacity : int | None
        Maximum number of simultaneously pending events. None means unbounded;
        pushing past a finite capacity raises CapacityOverflow.
    """

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity
        self._heap: List[Tuple[float, int, Event]] = []
        self._seq = 0
        self._last_time = 0.0

    def push(self, time: float, kind: EventKind, stage: int) -> Event:
        if self.capacity is not None and len(self._heap) >= self.capacity:
            raise CapacityOverflow(None, self._last_time, self.capacity)
        self._seq += 1
        ev = Event(time, self._seq, kind, stage)
        heapq.heappush(self._heap, (time, self._seq, ev))
        return ev

    def pop(self) -> Event:
        if not self._heap:
            raise SchedulingError(self._last_time)
        _, _, ev = heapq.heappop(self._heap)
        self._last_time = ev.time
        return ev

    def peek(self) -> Optional[Event]:
        return self._heap[0][2] if self._heap else None

    def is_empty(self) -> bool:
        return not self._heap

    def clear(self):
        self._heap.clear()
        self._seq = 0
        self._last_time = 0.0

    def __len__(self) -> int:
        return len(self._heap)


class Env:
    """Simulation context for one replication: clock, FEL, and network hook.

    Attributes
    ----------
    t : float
        Simulation clock.
    FEL : EventQueue
        Pending events.
    network : object
        Object with on_arrival/on_completion/close used by the loop.
    """

    def __init__(self, network, event_limit: Optional[int] = None):
        self.t: float = 0.0
        self.FEL = EventQueue(capacity=event_limit)
        self.network = network
        self.events_processed = 0

    def schedule(self, delay: float, kind: EventKind, stage: int) -> Event:
        return self.FEL.push(self.t + delay, kind, stage)

    def step(self) -> Event:
        """Pop the next event, advance the clock to it and dispatch it."""
        ev = self.FEL.pop()
        self.t = ev.time
        if ev.kind is EventKind.ARRIVAL:
            self.network.on_arrival(self, ev.stage)
        else:
            self.network.on_completion(self, ev.stage)
        self.events_processed += 1
        return ev

    def run_until(self, horizon: float,
                  on_event: Optional[Callable[["Env", Event], None]] = None) -> float:
        """Process events up to and including `horizon`.

        Stops as soon as the next pending event lies beyond the horizon, then
        closes the books at exactly `horizon`. An empty FEL before that point
        means some stage failed to reschedule itself.
        """
        while True:
            nxt = self.FEL.peek()
            if nxt is None:
                raise SchedulingError(self.t)
            if nxt.time > horizon:
                break
            ev = self.step()
            if on_event is not None:
                on_event(self, ev)
        self.t = horizon
        self.network.close(self)
        return self.t


class Stage:
    """Single-server FIFO stage holding arrival timestamps of waiting customers.

    Parameters
    ----------
    index : int
        Zero-based position in the tandem line.
    mean_service : float
        Mean of the exponential service time.
    q_limit : int
        Most customers that may wait (excluding the one in service).
    rng : VariateStream
        Source of service-time draws.
    """

    def __init__(self, index: int, mean_service: float, q_limit: int, rng):
        self.index = index
        self.name = f"stage{index + 1}"
        self.mean_service = mean_service
        self.q_limit = q_limit
        self.rng = rng
        self.busy = False
        self.queue: Deque[float] = deque()
        self.total_delay = 0.0
        self.customers_served = 0
        self.customers_rejected = 0
        self.area_queue_length = 0.0
        self.area_server_busy = 0.0
        self.time_last_event = 0.0

    @property
    def num_in_queue(self) -> int:
        return len(self.queue)

    def is_full(self) -> bool:
        return len(self.queue) >= self.q_limit

    def update_time_avg_stats(self, now: float):
        dt = now - self.time_last_event
        self.time_last_event = now
        self.area_queue_length += len(self.queue) * dt
        if self.busy:
            self.area_server_busy += dt

    def draw_service(self) -> float:
        return self.rng.exponential(self.mean_service)

    def join_queue(self, env: Env):
        self.queue.append(env.t)

    def start_service(self, env: Env, arrived_at: float):
        """Seize the server for a customer that arrived at `arrived_at`."""
        self.total_delay += env.t - arrived_at
        self.customers_served += 1
        self.busy = True
        env.schedule(self.draw_service(), EventKind.COMPLETION, self.index)

    def release(self, env: Env):
        """Finish the current service and pull the next waiting customer, if any."""
        if not self.queue:
            self.busy = False
            return
        self.start_service(env, self.queue.popleft())
