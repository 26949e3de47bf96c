# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# variates.py
# -----------------------------------------------------------------------------
# Purpose:
#   Random-variate streams for the tandem model: uniform(0,1) draws plus the
#   exponential and uniform-range variates derived from them.
#
# Design notes:
#   - A stream owns all of its state; nothing touches the module-level
#     `random` generator, so two streams built from the same seed replay the
#     same sequence no matter what else runs in the process.
#   - LcgStream reproduces the prime-modulus multiplicative LCG of Law &
#     Kelton (`lcgrand`), whose draws are strictly inside (0,1).
#   - One stream normally lives for the whole driver run and keeps advancing
#     across replications.
#
# Usage:
#   from sim.variates import make_stream
#   rng = make_stream("lcg", seed=None)
#   rng.exponential(1.0)
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
import random
from typing import Optional

from .errors import ConfigError

MODLUS = 2147483647
MULT1 = 24112
MULT2 = 26143
DEFAULT_LCG_SEED = 1973272912


class VariateStream:
    """Base stream. Subclasses supply uniform01(); the derived variates follow."""

    def uniform01(self) -> float:
        raise NotImplementedError

    def exponential(self, mean: float) -> float:
        """Return an exponential variate with mean `mean`."""
        return -mean * math.log(self.uniform01())

    def uniform_range(self, lo: float, hi: float) -> float:
        """Return a variate uniformly distributed on [lo, hi)."""
        return lo + (hi - lo) * self.uniform01()


class LcgStream(VariateStream):
    """Prime-modulus multiplicative LCG (modulus 2**31 - 1).

    The two multiplications are the composite multiplier 630360016 split in
    two steps, exactly as `lcgrand` does it.
    """

    def __init__(self, seed: Optional[int] = None):
        z = DEFAULT_LCG_SEED if seed is None else int(seed) % MODLUS
        if z == 0:
            raise ConfigError("LCG seed must not be a multiple of 2**31 - 1")
        self.seed = z
        self._z = z
        self.draws = 0

    def uniform01(self) -> float:
        z = (self._z * MULT1) % MODLUS
        z = (z * MULT2) % MODLUS
        self._z = z
        self.draws += 1
        return ((z >> 7) | 1) / 16777216.0

    @property
    def state(self) -> int:
        return self._z


class RandomStream(VariateStream):
    """Stream backed by a private Mersenne Twister instance."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)
        self.draws = 0

    def uniform01(self) -> float:
        u = self._rng.random()
        # random() may return exactly 0.0; log(0) is undefined
        while u == 0.0:
            u = self._rng.random()
        self.draws += 1
        return u


GENERATORS = {
    "lcg": LcgStream,
    "python": RandomStream,
}


def make_stream(kind: str = "lcg", seed: Optional[int] = None) -> VariateStream:
    """Build a fresh stream of the requested kind."""
    try:
        cls = GENERATORS[kind]
    except KeyError:
        raise ConfigError(
            f"unknown generator {kind!r}; expected one of {sorted(GENERATORS)}"
        ) from None
    return cls(seed)
