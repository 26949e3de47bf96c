# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# config.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load and validate simulation parameters, either from the YAML config
#   (config/baseline.yaml plus scenario overrides) or from the classic
#   whitespace-separated input record.
#
# Design notes:
#   - The raw config stays a plain dict so experiments can deep-merge
#     overrides; SimParams.from_cfg is the single validation point.
#   - Any problem is a ConfigError, raised before a replication starts.
#
# Usage:
#   cfg = load_cfg("config/baseline.yaml")
#   params = SimParams.from_cfg(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import yaml

from .errors import ConfigError
from .policies import OverflowPolicy
from .variates import GENERATORS, MODLUS

DEFAULT_Q_LIMIT = 1000


@dataclass(frozen=True)
class SimParams:
    mean_interarrival: float
    mean_service: Tuple[float, ...]
    transit: Tuple[Tuple[float, float], ...]   # one (min, max) per link
    horizon: float
    q_limit: int = DEFAULT_Q_LIMIT
    event_limit: Optional[int] = None
    overflow: OverflowPolicy = OverflowPolicy.FATAL
    generator: str = "lcg"
    seed: Optional[int] = None

    @property
    def num_stages(self) -> int:
        return len(self.mean_service)

    @property
    def has_transit_delay(self) -> bool:
        return any(hi > 0.0 for _, hi in self.transit)

    @classmethod
    def from_cfg(cls, cfg: Dict) -> "SimParams":
        """Build validated parameters from the `sim` section of a config dict."""
        sim = cfg.get("sim") if isinstance(cfg, dict) else None
        if not isinstance(sim, dict):
            raise ConfigError("config is missing the 'sim' section")
        missing = [k for k in ("mean_interarrival", "mean_service", "horizon") if k not in sim]
        if missing:
            raise ConfigError(f"sim config missing keys: {', '.join(missing)}")

        mean_service = sim["mean_service"]
        if not isinstance(mean_service, (list, tuple)) or not mean_service:
            raise ConfigError("sim.mean_service must be a non-empty list")
        services = tuple(_positive(v, "sim.mean_service") for v in mean_service)

        event_limit = sim.get("event_limit")
        generator = str(sim.get("generator", "lcg"))
        if generator not in GENERATORS:
            raise ConfigError(f"unknown generator {generator!r}; expected one of {sorted(GENERATORS)}")
        seed = sim.get("seed")
        if generator == "lcg" and isinstance(seed, int) and seed % MODLUS == 0:
            raise ConfigError("sim.seed must not be a multiple of 2**31 - 1 for the lcg generator")

        params = cls(
            mean_interarrival=_positive(sim["mean_interarrival"], "sim.mean_interarrival"),
            mean_service=services,
            transit=_transit_links(sim.get("transit"), len(services)),
            horizon=_positive(sim["horizon"], "sim.horizon"),
            q_limit=_count(sim.get("q_limit", DEFAULT_Q_LIMIT), "sim.q_limit"),
            event_limit=None if event_limit is None else _count(event_limit, "sim.event_limit"),
            overflow=OverflowPolicy.parse(sim.get("overflow", "fatal")),
            generator=generator,
            seed=None if seed is None else _integer(seed, "sim.seed"),
        )
        if params.event_limit is not None and params.event_limit < params.q_limit:
            raise ConfigError("sim.event_limit must be at least sim.q_limit")
        return params


def _number(value, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(out):
        raise ConfigError(f"{name} must be finite, got {value!r}")
    return out


def _positive(value, name: str) -> float:
    out = _number(value, name)
    if out <= 0.0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return out


def _integer(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    return value


def _count(value, name: str) -> int:
    out = _integer(value, name)
    if out < 1:
        raise ConfigError(f"{name} must be at least 1, got {value!r}")
    return out


def _transit_links(raw, num_stages: int) -> Tuple[Tuple[float, float], ...]:
    """Normalize `sim.transit` into one (min, max) pair per link.

    Accepts None (immediate transfer everywhere), a single [min, max] pair
    broadcast to every link, or a list with one pair per link.
    """
    links = num_stages - 1
    if raw is None:
        return ((0.0, 0.0),) * links
    if not isinstance(raw, (list, tuple)):
        raise ConfigError("sim.transit must be a [min, max] pair or a list of pairs")
    if len(raw) == 2 and not any(isinstance(v, (list, tuple)) for v in raw):
        pairs = [raw] * links
    else:
        pairs = list(raw)
    if len(pairs) != links:
        raise ConfigError(f"sim.transit needs {links} [min, max] pairs for {num_stages} stages, got {len(pairs)}")
    out = []
    for k, pair in enumerate(pairs):
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ConfigError(f"sim.transit[{k}] must be a [min, max] pair, got {pair!r}")
        lo = _number(pair[0], f"sim.transit[{k}][0]")
        hi = _number(pair[1], f"sim.transit[{k}][1]")
        if lo < 0.0 or hi < lo:
            raise ConfigError(f"sim.transit[{k}] must satisfy 0 <= min <= max, got {pair!r}")
        out.append((lo, hi))
    return tuple(out)


def load_cfg(path: str) -> Dict:
    """Read a YAML config file into a plain dict."""
    if not os.path.exists(path):
        raise ConfigError(f"config file not found: {path}")
    with open(path, "r") as f:
        try:
            cfg = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return cfg


def parse_input_record(text: str, stages: int = 2) -> Dict:
    """
    Parse the whitespace-separated input record.

    Layout: mean_interarrival, one mean service time per stage, optionally a
    transit range (min max) applied to every link, then an integer horizon.
    Returns a dict shaped like the `sim` config section.
    """
    if stages < 1:
        raise ConfigError(f"stage count must be at least 1, got {stages}")
    tokens = text.split()
    with_transit = len(tokens) == stages + 4 and stages > 1
    if len(tokens) != stages + 2 and not with_transit:
        expected = f"{stages + 2}" + (f" or {stages + 4}" if stages > 1 else "")
        raise ConfigError(f"input record needs {expected} fields for {stages} stages, got {len(tokens)}")

    try:
        horizon = int(tokens[-1])
    except ValueError:
        raise ConfigError(f"time horizon must be an integer, got {tokens[-1]!r}") from None
    values: List[float] = [_number(tok, f"field {i + 1}") for i, tok in enumerate(tokens[:-1])]

    sim: Dict = {
        "mean_interarrival": values[0],
        "mean_service": values[1:1 + stages],
        "horizon": horizon,
    }
    # An explicit None clears any transit range inherited from a base config
    sim["transit"] = [values[1 + stages], values[2 + stages]] if with_transit else None
    return sim


def read_input_record(path: str, stages: int = 2) -> Dict:
    if not os.path.exists(path):
        raise ConfigError(f"input file not found: {path}")
    with open(path, "r") as f:
        return parse_input_record(f.read(), stages)
