import pytest

from sim.config import SimParams


@pytest.fixture
def tandem_params():
    """Two balanced stages, immediate transfer, rho = 0.5 everywhere."""
    return SimParams(
        mean_interarrival=1.0,
        mean_service=(0.5, 0.5),
        transit=((0.0, 0.0),),
        horizon=1000.0,
    )


@pytest.fixture
def transit_params():
    return SimParams(
        mean_interarrival=1.0,
        mean_service=(0.8, 0.7),
        transit=((0.5, 2.0),),
        horizon=500.0,
    )
