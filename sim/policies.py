# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Operational policies applied by the network when a stage queue is full.
#
# Design notes:
#   - FATAL aborts the replication with CapacityOverflow.
#   - REJECT turns the arriving customer away and counts it on the stage so
#     the loss shows up in the report.
#
# Usage:
#   from sim.policies import OverflowPolicy, handle_overflow
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from enum import Enum

from .errors import CapacityOverflow, ConfigError

logger = logging.getLogger(__name__)


class OverflowPolicy(str, Enum):
    FATAL = "fatal"
    REJECT = "reject"

    @classmethod
    def parse(cls, value) -> "OverflowPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigError(
                f"unknown overflow policy {value!r}; expected 'fatal' or 'reject'"
            ) from None


def handle_overflow(policy: OverflowPolicy, stage, now: float) -> None:
    """Apply `policy` to a customer arriving at a full `stage` at time `now`."""
    if policy is OverflowPolicy.REJECT:
        stage.customers_rejected += 1
        logger.debug("stage %d full at t=%.3f, customer rejected (%d so far)",
                     stage.index + 1, now, stage.customers_rejected)
        return
    raise CapacityOverflow(stage.index, now, stage.q_limit)
