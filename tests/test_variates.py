import math

import pytest

from sim.errors import ConfigError
from sim.variates import (
    DEFAULT_LCG_SEED, MODLUS, LcgStream, RandomStream, VariateStream, make_stream,
)


class FixedStream(VariateStream):
    def __init__(self, u):
        self.u = u

    def uniform01(self):
        return self.u


def test_lcg_matches_composite_multiplier():
    s = LcgStream()
    assert s.seed == DEFAULT_LCG_SEED
    s.uniform01()
    assert s.state == (DEFAULT_LCG_SEED * 630360016) % MODLUS
    s.uniform01()
    assert s.state == (DEFAULT_LCG_SEED * pow(630360016, 2, MODLUS)) % MODLUS


def test_lcg_draws_strictly_inside_unit_interval():
    s = LcgStream(seed=42)
    draws = [s.uniform01() for _ in range(5000)]
    assert all(0.0 < u < 1.0 for u in draws)
    assert s.draws == 5000


@pytest.mark.parametrize("cls", [LcgStream, RandomStream])
def test_same_seed_same_sequence(cls):
    a, b = cls(123), cls(123)
    assert [a.uniform01() for _ in range(50)] == [b.uniform01() for _ in range(50)]
    assert [a.uniform01() for _ in range(5)] != [cls(124).uniform01() for _ in range(5)]


def test_exponential_and_uniform_range_formulas():
    s = FixedStream(0.25)
    assert s.exponential(2.0) == pytest.approx(-2.0 * math.log(0.25))
    assert s.uniform_range(1.0, 3.0) == pytest.approx(1.5)
    assert s.uniform_range(0.0, 0.0) == 0.0


@pytest.mark.parametrize("kind", ["lcg", "python"])
def test_exponential_sample_mean(kind):
    s = make_stream(kind, seed=99)
    n = 20000
    mean = sum(s.exponential(0.8) for _ in range(n)) / n
    assert mean == pytest.approx(0.8, rel=0.05)


def test_uniform_range_bounds():
    s = LcgStream(seed=5)
    vals = [s.uniform_range(0.5, 2.0) for _ in range(2000)]
    assert min(vals) >= 0.5
    assert max(vals) < 2.0


def test_random_stream_does_not_touch_global_random():
    import random
    random.seed(1)
    expected = random.random()
    random.seed(1)
    RandomStream(3).uniform01()
    assert random.random() == expected


def test_make_stream_rejects_unknown_kind():
    with pytest.raises(ConfigError):
        make_stream("mersenne")


def test_lcg_rejects_degenerate_seed():
    with pytest.raises(ConfigError):
        LcgStream(seed=MODLUS)
