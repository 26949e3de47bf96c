"""
experiments/report.py

Plain-text report for tandem runs: a heading with the input parameters, then
one block per replication, concatenated in a single stream. Every line is a
label padded so the value ends at column 38, keeping the classic layout.
"""

from __future__ import annotations
from typing import List, TextIO

from sim.config import SimParams
from sim.errors import SimulationError
from sim.metrics import ReplicationResult
from sim.policies import OverflowPolicy

LINE_WIDTH = 38
TITLE = "Tandem-server queueing system"


def fmt_line(label: str, value, unit: str = "", decimals: int = 3) -> str:
    """Right-align `value` so label + value span LINE_WIDTH characters."""
    width = max(LINE_WIDTH - len(label), 1)
    if isinstance(value, int) and not isinstance(value, bool):
        text = f"{value:{width}d}"
    else:
        text = f"{value:{width}.{decimals}f}"
    return f"{label}{text}" + (f" {unit}" if unit else "")


def _horizon_value(horizon: float):
    return int(horizon) if float(horizon).is_integer() else horizon


def _transit_lines(params: SimParams) -> List[str]:
    links = params.transit
    if len(set(links)) == 1:
        lo, hi = links[0]
        return [
            fmt_line("Minimum transit time", lo, "minutes"),
            fmt_line("Maximum transit time", hi, "minutes"),
        ]
    lines = []
    for k, (lo, hi) in enumerate(links, start=1):
        lines.append(fmt_line(f"Minimum transit time ({k}-{k + 1})", lo, "minutes"))
        lines.append(fmt_line(f"Maximum transit time ({k}-{k + 1})", hi, "minutes"))
    return lines


def format_heading(params: SimParams) -> str:
    lines = [TITLE, fmt_line("Mean interarrival time", params.mean_interarrival, "minutes")]
    for k, mean in enumerate(params.mean_service, start=1):
        lines.append(fmt_line(f"Mean service time (server {k})", mean, "minutes"))
    if params.has_transit_delay:
        lines.extend(_transit_lines(params))
    lines.append(fmt_line("Time cutoff", _horizon_value(params.horizon), "minutes"))
    return "\n\n".join(lines) + "\n\n"


def format_replication(result: ReplicationResult, params: SimParams) -> str:
    stages = result.stages
    lines = [fmt_line(f"Average delay in queue ({k})", s.average_delay, "minutes")
             for k, s in enumerate(stages, start=1)]
    lines += [fmt_line(f"Average number in queue ({k})", s.average_queue_length)
              for k, s in enumerate(stages, start=1)]
    lines += [fmt_line(f"Server {k} utilization", s.utilization)
              for k, s in enumerate(stages, start=1)]
    if params.has_transit_delay:
        lines.append(fmt_line("Average number in transit", result.average_in_transit))
        lines.append(fmt_line("Most in transit", result.max_in_transit))
    if params.overflow is OverflowPolicy.REJECT:
        lines += [fmt_line(f"Rejected customers ({k})", s.customers_rejected)
                  for k, s in enumerate(stages, start=1)]
    lines.append(fmt_line("Time simulation ended", result.simulation_end_time, "minutes"))
    return "\n\n" + "\n\n".join(lines) + "\n"


def format_failure(err: SimulationError) -> str:
    return f"\n{err}\n"


class ReportWriter:
    """Writes the heading once, then one block per replication, to `stream`."""

    def __init__(self, stream: TextIO, params: SimParams):
        self.stream = stream
        self.params = params
        self._heading_written = False

    def write_heading(self):
        if not self._heading_written:
            self.stream.write(format_heading(self.params))
            self._heading_written = True

    def write_result(self, result: ReplicationResult):
        self.write_heading()
        self.stream.write(format_replication(result, self.params))

    def write_failure(self, err: SimulationError):
        self.write_heading()
        self.stream.write(format_failure(err))
