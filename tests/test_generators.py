"""Tests for contact network generators."""

import pytest

from seasonal_sis.core.exceptions import ConfigurationError
from seasonal_sis.core.population import ContactNetwork
from seasonal_sis.network.generators import (
    build_network,
    create_complete_graph,
    create_k_regular_graph,
    create_lattice,
    create_random_graph,
)


def degrees(network):
    return [len(network.neighbors(node)) for node in range(network.vertex_count())]


def test_lattice():
    network = create_lattice(3, 4)
    assert isinstance(network, ContactNetwork)
    assert network.vertex_count() == 12
    assert min(degrees(network)) == 2
    assert max(degrees(network)) == 4


def test_periodic_lattice():
    network = create_lattice(4, 4, periodic=True)
    assert set(degrees(network)) == {4}


def test_complete():
    network = create_complete_graph(5)
    assert degrees(network) == [4] * 5


@pytest.mark.parametrize("p, expected_edges", [(0.0, 0), (1.0, 45)])
def test_random_extremes(p, expected_edges):
    network = create_random_graph(10, p, seed=1)
    assert network.graph.number_of_edges() == expected_edges


def test_random_is_reproducible():
    a = create_random_graph(30, 0.2, seed=5)
    b = create_random_graph(30, 0.2, seed=5)
    assert sorted(a.graph.edges()) == sorted(b.graph.edges())


def test_k_regular():
    network = create_k_regular_graph(10, 3, seed=2)
    assert degrees(network) == [3] * 10


@pytest.mark.parametrize("factory, args", [
    (create_lattice, (0, 3)),
    (create_random_graph, (10, 1.5)),
    (create_random_graph, (0, 0.5)),
    (create_complete_graph, (0,)),
    (create_k_regular_graph, (5, 3)),
    (create_k_regular_graph, (4, 4)),
])
def test_invalid_arguments(factory, args):
    with pytest.raises(ConfigurationError):
        factory(*args)


def test_build_network_dispatch():
    assert build_network('complete', n=6).vertex_count() == 6
    assert build_network('lattice', lx=2, ly=2).vertex_count() == 4
    assert build_network('regular', n=8, k=2, seed=0).vertex_count() == 8


def test_build_network_errors():
    with pytest.raises(ConfigurationError):
        build_network('scale-free', n=10)
    with pytest.raises(ConfigurationError):
        build_network('complete', nodes=10)
