"""
experiments/run_experiments.py

Replication driver: loads the baseline config (optionally replaced by a plain
input record), applies scenario overrides, runs REPS independent replications
per scenario and writes the tandem report. Fatal simulation conditions end the
run with a distinct exit status; with `on_error: skip` the failed replication
is reported and the driver moves on.

    python -m experiments.run_experiments --input config/tandem_transit.in
"""

from __future__ import annotations
import argparse
import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from sim.config import SimParams, load_cfg, read_input_record
from sim.errors import ConfigError, SimulationError
from sim.metrics import ReplicationResult, mean_by_stage
from sim.simulation import run_replication
from sim.variates import DEFAULT_LCG_SEED, VariateStream, make_stream

from .report import ReportWriter
from .scenarios import SCENARIOS

logger = logging.getLogger(__name__)

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG = os.path.join(ROOT, "config", "baseline.yaml")
STREAM_MODES = ("shared", "per_replication")
ERROR_MODES = ("abort", "skip")


def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new


@dataclass(frozen=True)
class ExperimentSettings:
    replications: int = 10
    streams: str = "shared"
    on_error: str = "abort"
    plot: bool = False

    @classmethod
    def from_cfg(cls, cfg: Dict) -> "ExperimentSettings":
        exp = cfg.get("experiments") or {}
        if not isinstance(exp, dict):
            raise ConfigError("'experiments' section must be a mapping")
        reps = exp.get("replications", 10)
        if isinstance(reps, bool) or not isinstance(reps, int) or reps < 1:
            raise ConfigError(f"experiments.replications must be a positive integer, got {reps!r}")
        streams = exp.get("streams", "shared")
        if streams not in STREAM_MODES:
            raise ConfigError(f"experiments.streams must be one of {STREAM_MODES}, got {streams!r}")
        on_error = exp.get("on_error", "abort")
        if on_error not in ERROR_MODES:
            raise ConfigError(f"experiments.on_error must be one of {ERROR_MODES}, got {on_error!r}")
        return cls(replications=reps, streams=streams, on_error=on_error,
                   plot=bool(exp.get("plot", False)))


@dataclass
class RunOutcome:
    results: List[ReplicationResult] = field(default_factory=list)
    failures: List[Tuple[int, SimulationError]] = field(default_factory=list)


def base_seed(params: SimParams) -> int:
    if params.seed is not None:
        return params.seed
    return DEFAULT_LCG_SEED if params.generator == "lcg" else 0


def run_replications(params: SimParams, replications: int, streams: str = "shared",
                     on_error: str = "abort", writer: Optional[ReportWriter] = None,
                     rng: Optional[VariateStream] = None) -> RunOutcome:
    """
    Run `replications` independent replications of the tandem line.

    With streams="shared" one variate stream keeps advancing across all
    replications; with "per_replication" replication r draws from a fresh
    stream seeded with base_seed + r - 1. A SimulationError propagates unless
    on_error="skip", in which case it is recorded and the next replication runs.
    """
    outcome = RunOutcome()
    if streams == "shared" and rng is None:
        rng = make_stream(params.generator, params.seed)
    if writer is not None:
        writer.write_heading()
    for rep in range(1, replications + 1):
        if streams == "per_replication":
            rng = make_stream(params.generator, base_seed(params) + rep - 1)
        try:
            res = run_replication(params, rng, replication=rep)
        except SimulationError as err:
            if on_error != "skip":
                raise
            logger.warning("replication %d failed, skipping: %s", rep, err)
            outcome.failures.append((rep, err))
            if writer is not None:
                writer.write_failure(err)
            continue
        logger.info("replication %d done: end=%.3f served=%s", rep,
                    res.simulation_end_time, [s.customers_served for s in res.stages])
        outcome.results.append(res)
        if writer is not None:
            writer.write_result(res)
    return outcome


def summarize(name: str, outcome: RunOutcome, settings: ExperimentSettings) -> None:
    """Print mean KPIs across the completed replications of one scenario."""
    results = outcome.results
    print(f"Scenario: {name} (replications={settings.replications}, completed={len(results)}, streams={settings.streams})")
    if results:
        delays = mean_by_stage(results, "average_delay")
        lengths = mean_by_stage(results, "average_queue_length")
        utils = mean_by_stage(results, "utilization")
        for k in range(len(delays)):
            print(f"  Stage {k + 1}: delay {delays[k]:.3f} min, queue {lengths[k]:.3f}, utilization {utils[k] * 100.0:.1f}%")
        in_transit = sum(r.average_in_transit for r in results) / len(results)
        most = max(r.max_in_transit for r in results)
        print(f"  In transit: mean {in_transit:.3f}, max {most}")
    for rep, err in outcome.failures:
        print(f"  [warn] replication {rep} failed: {err}")
    print("-")


def plot_replications(results: List[ReplicationResult], scenario_name: str):
    """
    Persist a PNG showing per-replication utilization and average queue length
    for every stage, to eyeball replication-to-replication spread.
    """
    if not results:
        return None
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt  # type: ignore
    except Exception:
        return None
    reps = [r.replication for r in results]
    fig, (ax_u, ax_q) = plt.subplots(2, 1, figsize=(9, 7), sharex=True)
    for k in range(len(results[0].stages)):
        ax_u.plot(reps, [r.stages[k].utilization for r in results], marker="o", label=f"Server {k + 1}")
        ax_q.plot(reps, [r.stages[k].average_queue_length for r in results], marker="o", label=f"Queue {k + 1}")
    ax_u.set_ylabel("Utilization")
    ax_q.set_ylabel("Average number in queue")
    ax_q.set_xlabel("Replication")
    ax_u.set_title(f"{scenario_name}: per-replication estimates")
    for ax in (ax_u, ax_q):
        ax.grid(True, linestyle="--", alpha=0.4)
        ax.legend()
    out_dir = os.path.join(ROOT, "experiments", "output")
    os.makedirs(out_dir, exist_ok=True)
    safe_name = scenario_name.lower().replace(" ", "_")
    out_path = os.path.join(out_dir, f"{safe_name}_replications.png")
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
    plt.close(fig)
    return out_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run tandem queueing-network replications")
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config (default: config/baseline.yaml)")
    parser.add_argument("--input", help="plain input record; replaces the sim parameters of the config")
    parser.add_argument("--stages", type=int, default=2, help="number of stages in the input record")
    parser.add_argument("--output", help="report file (default: stdout)")
    parser.add_argument("--replications", type=int, help="override experiments.replications")
    parser.add_argument("--seed", type=int, help="override sim.seed")
    parser.add_argument("--scenario", action="append", dest="scenarios",
                        help="scenario name from experiments/scenarios.py (repeatable)")
    parser.add_argument("--plot", action="store_true", help="save per-replication plots")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def prepare(args) -> List[Tuple[str, SimParams, ExperimentSettings]]:
    """Resolve every requested scenario up front so config errors stop the run early."""
    cfg = load_cfg(args.config)
    if args.input:
        cfg = apply_overrides(cfg, {"sim": read_input_record(args.input, args.stages)})
    cli: Dict = {}
    if args.seed is not None:
        cli.setdefault("sim", {})["seed"] = args.seed
    if args.replications is not None:
        cli.setdefault("experiments", {})["replications"] = args.replications
    if args.plot:
        cli.setdefault("experiments", {})["plot"] = True

    index = {sc["name"]: sc for sc in SCENARIOS}
    names = args.scenarios or ["baseline"]
    prepared = []
    for name in names:
        if name not in index:
            raise ConfigError(f"unknown scenario {name!r}; choose from {sorted(index)}")
        sc_cfg = apply_overrides(apply_overrides(cfg, index[name]["overrides"]), cli)
        prepared.append((name, SimParams.from_cfg(sc_cfg), ExperimentSettings.from_cfg(sc_cfg)))
    return prepared


def run(prepared, out: TextIO, print_summary: bool) -> int:
    for name, params, settings in prepared:
        if len(prepared) > 1:
            out.write(f"Scenario: {name}\n\n")
        writer = ReportWriter(out, params)
        try:
            outcome = run_replications(params, settings.replications, settings.streams,
                                       settings.on_error, writer=writer)
        except SimulationError as err:
            writer.write_failure(err)
            logger.error("scenario %s aborted: %s", name, err)
            return err.exit_code
        if print_summary:
            summarize(name, outcome, settings)
        if settings.plot:
            path = plot_replications(outcome.results, name)
            if path:
                logger.info("plot saved to %s", path)
        if len(prepared) > 1:
            out.write("\n")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point: drive the requested scenarios and write the report."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        prepared = prepare(args)
    except ConfigError as err:
        logger.error("configuration error: %s", err)
        print(f"configuration error: {err}", file=sys.stderr)
        return err.exit_code

    if not args.output:
        return run(prepared, sys.stdout, print_summary=False)
    with open(args.output, "w") as out:
        return run(prepared, out, print_summary=True)


if __name__ == "__main__":
    sys.exit(main())
