"""
Contact Network Generators
==========================
Lattice, Erdos-Renyi, complete and k-regular topologies wrapped as
ContactNetwork objects
"""

import inspect
from typing import Optional

import networkx as nx

from ..core.exceptions import ConfigurationError
from ..core.population import ContactNetwork


def create_lattice(lx: int, ly: int, periodic: bool = False) -> ContactNetwork:
    """
    Two-dimensional square lattice

    Args:
        lx, ly: Lattice dimensions
        periodic: Wrap edges into a torus
    """
    if lx < 1 or ly < 1:
        raise ConfigurationError(f"Invalid lattice dimensions: {lx} x {ly}")
    return ContactNetwork(nx.grid_2d_graph(lx, ly, periodic=periodic))


def create_random_graph(n: int, p: float, seed: Optional[int] = None) -> ContactNetwork:
    """G(n, p) Erdos-Renyi graph without self loops"""
    if n < 1:
        raise ConfigurationError(f"Number of nodes must be positive, got {n}")
    if not 0.0 <= p <= 1.0:
        raise ConfigurationError(f"Edge probability must be in [0, 1], got {p}")
    return ContactNetwork(nx.gnp_random_graph(n, p, seed=seed))


def create_complete_graph(n: int) -> ContactNetwork:
    if n < 1:
        raise ConfigurationError(f"Number of nodes must be positive, got {n}")
    return ContactNetwork(nx.complete_graph(n))


def create_k_regular_graph(n: int, k: int, seed: Optional[int] = None) -> ContactNetwork:
    """Random k-regular graph (n * k must be even, k < n)"""
    if n < 1 or k < 0 or k >= n or (n * k) % 2:
        raise ConfigurationError(f"No {k}-regular graph on {n} nodes")
    return ContactNetwork(nx.random_regular_graph(k, n, seed=seed))


def build_network(kind: str, **kwargs) -> ContactNetwork:
    """
    Create a network by name

    Args:
        kind: 'lattice', 'random', 'complete' or 'regular'
        **kwargs: Arguments of the matching create_* function
    """
    factories = {
        'lattice': create_lattice,
        'random': create_random_graph,
        'complete': create_complete_graph,
        'regular': create_k_regular_graph,
    }
    if kind not in factories:
        raise ConfigurationError(f"Unknown network type: {kind}")
    factory = factories[kind]
    try:
        inspect.signature(factory).bind(**kwargs)
    except TypeError as exc:
        raise ConfigurationError(f"Bad arguments for {kind} network: {exc}") from exc
    return factory(**kwargs)
