# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Turn the area-under-curve accumulators of a finished replication into
#   the per-stage and network-wide point estimates.
#
# Design notes:
#   - A zero denominator (nobody served, or a zero-length run) yields NaN
#     rather than raising; the report prints it as "nan".
#   - Summaries are frozen dataclasses; as_dict() gives a JSON-serializable
#     view for easy tabulation.
#
# Usage:
#   M = Metrics(replication=1); result = M.summary(env)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Tuple


def _ratio(num: float, den: float) -> float:
    return num / den if den else math.nan


@dataclass(frozen=True)
class StageResult:
    average_delay: float
    average_queue_length: float
    utilization: float
    customers_served: int
    customers_rejected: int = 0


@dataclass(frozen=True)
class ReplicationResult:
    stages: Tuple[StageResult, ...]
    average_in_transit: float
    max_in_transit: int
    simulation_end_time: float
    replication: int = 1

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Metrics:
    def __init__(self, replication: int = 1):
        self.replication = replication

    def summary(self, env) -> ReplicationResult:
        """Read a closed Env (all accumulators flushed to env.t) into a result."""
        clock = env.t
        net = env.network
        stages = tuple(
            StageResult(
                average_delay=_ratio(st.total_delay, st.customers_served),
                average_queue_length=_ratio(st.area_queue_length, clock),
                utilization=_ratio(st.area_server_busy, clock),
                customers_served=st.customers_served,
                customers_rejected=st.customers_rejected,
            )
            for st in net.S
        )
        return ReplicationResult(
            stages=stages,
            average_in_transit=_ratio(net.area_in_transit, clock),
            max_in_transit=net.max_in_transit,
            simulation_end_time=clock,
            replication=self.replication,
        )


def mean_by_stage(results: Sequence[ReplicationResult], attr: str) -> List[float]:
    """Average one StageResult attribute across replications, skipping NaNs."""
    if not results:
        return []
    out = []
    for k in range(len(results[0].stages)):
        vals = [getattr(r.stages[k], attr) for r in results]
        vals = [v for v in vals if not math.isnan(v)]
        out.append(sum(vals) / len(vals) if vals else math.nan)
    return out
