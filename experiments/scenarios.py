"""
experiments/scenarios.py

Holds scenario definitions (parameter overrides) to sweep during experiments.
Each override dict is deep-merged over config/baseline.yaml.
"""

from __future__ import annotations

BASELINE = {
    "name": "baseline",
    "overrides": {},  # override config keys here per scenario
}

# Balanced line from the classic textbook check: rho = 0.5 at both servers.
BALANCED = {
    "name": "balanced",
    "overrides": {
        "sim": {
            "mean_interarrival": 1.0,
            "mean_service": [0.5, 0.5],
            "transit": [0.0, 0.0],
        },
    },
}

TRANSIT_DELAY = {
    "name": "transit_delay",
    "overrides": {
        "sim": {
            "transit": [0.5, 2.0],
        },
    },
}

HIGH_LOAD = {
    "name": "high_load",
    "overrides": {
        "sim": {
            "mean_service": [0.95, 0.9],
            "transit": [0.0, 1.0],
        },
    },
}

FINITE_BUFFER = {
    "name": "finite_buffer",
    "overrides": {
        "sim": {
            "mean_service": [0.95, 0.9],
            "q_limit": 5,
            "overflow": "reject",
        },
        "experiments": {
            "on_error": "skip",
        },
    },
}

THREE_STAGE = {
    "name": "three_stage",
    "overrides": {
        "sim": {
            "mean_service": [0.6, 0.7, 0.5],
            "transit": [[0.0, 0.0], [0.25, 0.75]],
        },
    },
}

SCENARIOS = [BASELINE, BALANCED, TRANSIT_DELAY, HIGH_LOAD, FINITE_BUFFER, THREE_STAGE]
