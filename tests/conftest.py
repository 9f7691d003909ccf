import pytest

from seasonal_sis.core.disease_params import SeasonalParameters
from seasonal_sis.network.generators import create_complete_graph, create_random_graph


@pytest.fixture
def constant_params():
    return SeasonalParameters(t1=10, t2=20, base_rate=2.0, rate_boost=0.0, recovery_rate=10.0)


@pytest.fixture
def seasonal_params():
    return SeasonalParameters(t1=10, t2=20, base_rate=2.0, rate_boost=6.0, recovery_rate=2.0)


@pytest.fixture
def complete4():
    return create_complete_graph(4)


@pytest.fixture
def random_network():
    return create_random_graph(60, 0.1, seed=7)
