# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Tandem-line wiring and state transitions. Decides what happens when a
#   customer arrives at a stage and when a stage completes a service, and
#   tracks customers travelling between consecutive stages.
#
# Design notes:
#   - Every link between stage k and k+1 has a uniform transit range; [0, 0]
#     is an immediate transfer and goes through the same code path.
#   - Accumulators are flushed at the top of each handler, before any queue,
#     server or in-transit count is touched.
#   - Full queues are handed to sim.policies.
#
# Usage:
#   network = TandemNetwork(params, stages, rng)
#   env = Env(network); network.start(env); env.run_until(params.horizon)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import List, Sequence, Tuple

from .queues import Env, EventKind, Stage
from .policies import OverflowPolicy, handle_overflow

logger = logging.getLogger(__name__)


class TandemNetwork:
    def __init__(self, params, stages: List[Stage], rng):
        self.params = params
        self.S = stages
        self.rng = rng
        self.mean_interarrival: float = params.mean_interarrival
        self.transit: Sequence[Tuple[float, float]] = params.transit
        self.policy: OverflowPolicy = params.overflow
        self.num_in_transit = 0
        self.max_in_transit = 0
        self.area_in_transit = 0.0
        self.time_last_transit_event = 0.0

    @property
    def last(self) -> int:
        return len(self.S) - 1

    def start(self, env: Env):
        """Seed the FEL with the bootstrap arrival at the first stage."""
        env.schedule(self.rng.exponential(self.mean_interarrival), EventKind.ARRIVAL, 0)

    def on_arrival(self, env: Env, stage: int):
        st = self.S[stage]
        st.update_time_avg_stats(env.t)
        if stage == 0:
            # Keeps the exogenous arrival process alive
            env.schedule(self.rng.exponential(self.mean_interarrival), EventKind.ARRIVAL, 0)
        else:
            self.update_transit_stats(env.t)
            self.num_in_transit -= 1

        if not st.busy:
            st.start_service(env, env.t)
        elif st.is_full():
            handle_overflow(self.policy, st, env.t)
        else:
            st.join_queue(env)

    def on_completion(self, env: Env, stage: int):
        st = self.S[stage]
        st.update_time_avg_stats(env.t)
        st.release(env)
        if stage < self.last:
            self._send_downstream(env, stage)

    def _send_downstream(self, env: Env, stage: int):
        self.update_transit_stats(env.t)
        self.num_in_transit += 1
        if self.num_in_transit > self.max_in_transit:
            self.max_in_transit = self.num_in_transit
        lo, hi = self.transit[stage]
        env.schedule(self.rng.uniform_range(lo, hi), EventKind.ARRIVAL, stage + 1)

    def update_transit_stats(self, now: float):
        dt = now - self.time_last_transit_event
        self.time_last_transit_event = now
        self.area_in_transit += self.num_in_transit * dt

    def close(self, env: Env):
        """Flush every accumulator up to the final clock value."""
        for st in self.S:
            st.update_time_avg_stats(env.t)
        self.update_transit_stats(env.t)
        logger.debug("replication closed at t=%.3f after %d events",
                     env.t, env.events_processed)
