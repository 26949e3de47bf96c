from pathlib import Path

import pytest
import yaml

from sim.config import SimParams, load_cfg, parse_input_record, read_input_record
from sim.errors import ConfigError
from sim.policies import OverflowPolicy

ROOT = Path(__file__).resolve().parents[1]


def test_baseline_config_is_valid():
    params = SimParams.from_cfg(load_cfg(str(ROOT / "config" / "baseline.yaml")))
    assert params.num_stages == 2
    assert params.transit == ((0.0, 0.0),)
    assert params.overflow is OverflowPolicy.FATAL
    assert not params.has_transit_delay


def test_parse_record_without_transit():
    sim = parse_input_record("1.0 0.5 0.6 1000\n")
    assert sim == {"mean_interarrival": 1.0, "mean_service": [0.5, 0.6],
                   "horizon": 1000, "transit": None}


def test_parse_record_with_transit():
    sim = parse_input_record("1.0 0.5 0.6\n0.5 2.0 480")
    assert sim["transit"] == [0.5, 2.0]
    params = SimParams.from_cfg({"sim": sim})
    assert params.transit == ((0.5, 2.0),)
    assert params.horizon == 480.0


def test_parse_record_three_stages():
    sim = parse_input_record("1 0.2 0.3 0.4 0 1 100", stages=3)
    assert SimParams.from_cfg({"sim": sim}).transit == ((0.0, 1.0), (0.0, 1.0))


@pytest.mark.parametrize("text", ["1.0 0.5 1000", "1.0 0.5 0.6 0.1 1000", "1.0 0.5 0.6 10.5", "1.0 x 0.6 10"])
def test_parse_record_rejects_malformed(text):
    with pytest.raises(ConfigError):
        parse_input_record(text)


def test_read_record_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        read_input_record(str(tmp_path / "nope.in"))


def test_transit_pair_is_broadcast():
    params = SimParams.from_cfg({"sim": {"mean_interarrival": 1, "mean_service": [1, 1, 1],
                                         "transit": [0.1, 0.2], "horizon": 10}})
    assert params.transit == ((0.1, 0.2), (0.1, 0.2))


@pytest.mark.parametrize("sim", [
    {"mean_service": [1.0], "horizon": 10},
    {"mean_interarrival": 1.0, "mean_service": [], "horizon": 10},
    {"mean_interarrival": 1.0, "mean_service": [-1.0], "horizon": 10},
    {"mean_interarrival": 1.0, "mean_service": [1.0, 1.0], "horizon": 10, "transit": [[0, 1], [0, 1]]},
    {"mean_interarrival": 1.0, "mean_service": [1.0, 1.0], "horizon": 10, "transit": [2.0, 1.0]},
    {"mean_interarrival": 1.0, "mean_service": [1.0], "horizon": 10, "q_limit": 0},
    {"mean_interarrival": 1.0, "mean_service": [1.0], "horizon": 10, "q_limit": 10, "event_limit": 5},
    {"mean_interarrival": 1.0, "mean_service": [1.0], "horizon": 10, "overflow": "drop"},
    {"mean_interarrival": 1.0, "mean_service": [1.0], "horizon": 10, "generator": "xorshift"},
    {"mean_interarrival": True, "mean_service": [1.0], "horizon": 10},
])
def test_invalid_sim_section(sim):
    with pytest.raises(ConfigError):
        SimParams.from_cfg({"sim": sim})


def test_missing_sim_section():
    with pytest.raises(ConfigError):
        SimParams.from_cfg({"experiments": {}})


def test_load_cfg_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_cfg(str(tmp_path / "missing.yaml"))
    bad = tmp_path / "bad.yaml"
    bad.write_text("sim: [unclosed\n")
    with pytest.raises(ConfigError):
        load_cfg(str(bad))
    scalar = tmp_path / "scalar.yaml"
    scalar.write_text(yaml.safe_dump(42))
    with pytest.raises(ConfigError):
        load_cfg(str(scalar))
