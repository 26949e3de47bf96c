# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: build stages and the network, seed the
#   bootstrap arrival, run the event loop to the horizon, and return metrics.
#
# Design notes:
#   - The variate stream is passed in, not created here, so the driver can
#     keep one stream running across replications.
#   - The replication loop and report writing live in experiments/.
#
# Usage:
#   from sim.simulation import run_replication
#   result = run_replication(params, rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Callable, Optional
from .queues import Env, Event
from .stations import make_stages
from .network import TandemNetwork
from .metrics import Metrics, ReplicationResult


def build_env(params, rng) -> Env:
    """Fresh Env with idle stages and exactly one pending stage-0 arrival."""
    stages = make_stages(params, rng)
    network = TandemNetwork(params, stages, rng)
    env = Env(network, event_limit=params.event_limit)
    network.start(env)
    return env


def run_replication(params, rng, replication: int = 1,
                    on_event: Optional[Callable[[Env, Event], None]] = None) -> ReplicationResult:
    env = build_env(params, rng)
    env.run_until(params.horizon, on_event=on_event)
    return Metrics(replication).summary(env)
