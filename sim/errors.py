# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Failure taxonomy for the tandem simulator. Each fatal condition carries
#   the process exit status the driver should terminate with.
#
# Design notes:
#   - The core never calls exit(); it raises and the driver decides.
#   - ConfigError is also a ValueError so callers validating plain dicts can
#     catch it the usual way.
#
# Usage:
#   from sim.errors import CapacityOverflow, SchedulingError, ConfigError
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Optional


class SimulationError(Exception):
    """Base class for every fatal simulation condition."""
    exit_code: int = 1


class ConfigError(SimulationError, ValueError):
    """Malformed or missing input; raised before any event is processed."""
    exit_code = 3


class CapacityOverflow(SimulationError):
    """A stage queue (or the event list) grew past its configured bound.

    Parameters
    ----------
    stage : int | None
        Zero-based stage index, or None when the event list itself overflowed.
    clock : float
        Simulation time at which the overflow happened.
    """
    exit_code = 2

    def __init__(self, stage: Optional[int], clock: float, limit: int):
        self.stage = stage
        self.clock = clock
        self.limit = limit
        where = "event list" if stage is None else f"queue {stage + 1}"
        super().__init__(f"Overflow of {where} (limit {limit}) at time {clock:f}")


class SchedulingError(SimulationError):
    """The event list emptied while the clock was still short of the horizon."""
    exit_code = 1

    def __init__(self, clock: float):
        self.clock = clock
        super().__init__(f"Event list empty at time {clock:f}")
