# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Build the ordered list of Stage instances for one replication.
#
# Design notes:
#   - Stages are created fresh for each replication: idle servers, empty
#     queues and zeroed accumulators. Only the variate stream is shared.
#
# Usage:
#   from sim.stations import make_stages
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List
from .queues import Stage


def make_stages(params, rng) -> List[Stage]:
    """
    Create one Stage per configured mean service time, in tandem order.

    Parameters
    ----------
    params : SimParams
        Validated parameters; `mean_service` gives the stage count.
    rng : VariateStream
        Stream every stage draws its service times from.
    """
    return [
        Stage(i, mean, params.q_limit, rng)
        for i, mean in enumerate(params.mean_service)
    ]
