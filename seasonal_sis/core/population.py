"""
Contact Network State
=====================
Per-node infection state on a static contact graph, plus the simulation
clock owned by the engine
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict

import networkx as nx
import numpy as np

from .exceptions import PreconditionViolation


class NodeState(IntEnum):
    """Enumeration of node states"""
    SUSCEPTIBLE = 0
    INFECTED = 1


@dataclass
class SimulationState:
    """Global clock of one trial"""
    t: float = 0.0        # Elapsed simulation time
    L: float = 0.0        # Cumulative integrated transmissibility
    n_events: int = 0

    _CLOCKS = ('t', 'L')

    def get_clock(self, name: str) -> float:
        if name not in self._CLOCKS:
            raise KeyError(f"Unknown clock: {name!r}")
        return getattr(self, name)

    def set_clock(self, name: str, value: float):
        if name not in self._CLOCKS:
            raise KeyError(f"Unknown clock: {name!r}")
        setattr(self, name, float(value))


class ContactNetwork:
    """
    Static contact graph with one binary infected flag per node

    Topology is fixed after construction; only the infection buffer is
    mutated, and copy() gives each trial its own buffer over the shared
    adjacency.
    """

    def __init__(self, graph: nx.Graph):
        """
        Args:
            graph: Any networkx graph. Nodes are relabelled to 0..N-1 and
                   the original label is kept in the 'label' node attribute.
                   Directed graphs are treated as undirected.
        """
        if graph.is_directed():
            graph = graph.to_undirected()
        self.graph = nx.convert_node_labels_to_integers(graph, label_attribute='label')
        self.size = self.graph.number_of_nodes()

        self._adjacency = [
            np.fromiter(self.graph.neighbors(node), dtype=np.int64)
            for node in range(self.size)
        ]
        self.infected = np.zeros(self.size, dtype=np.int8)

    def vertex_count(self) -> int:
        return self.size

    def neighbors(self, node: int) -> np.ndarray:
        return self._adjacency[node]

    def get_infected(self, node: int) -> int:
        return int(self.infected[node])

    def set_infected(self, node: int, value: int):
        if value not in (NodeState.SUSCEPTIBLE, NodeState.INFECTED):
            raise PreconditionViolation(f"Infected flag must be 0 or 1, got {value!r}")
        self.infected[node] = value

    def infected_nodes(self) -> np.ndarray:
        return np.flatnonzero(self.infected)

    def susceptible_nodes(self) -> np.ndarray:
        return np.flatnonzero(self.infected == NodeState.SUSCEPTIBLE)

    def count_infected(self) -> int:
        return int(np.count_nonzero(self.infected))

    def infected_fraction(self) -> float:
        if self.size == 0:
            return 0.0
        return self.count_infected() / self.size

    def clear(self):
        """Mark every node susceptible"""
        self.infected[:] = NodeState.SUSCEPTIBLE

    def copy(self) -> 'ContactNetwork':
        """Same topology, independent infection buffer"""
        clone = object.__new__(ContactNetwork)
        clone.graph = self.graph
        clone.size = self.size
        clone._adjacency = self._adjacency
        clone.infected = self.infected.copy()
        return clone

    def get_state_counts(self) -> Dict[NodeState, int]:
        """Count nodes in each state"""
        n_infected = self.count_infected()
        return {
            NodeState.SUSCEPTIBLE: self.size - n_infected,
            NodeState.INFECTED: n_infected,
        }

    def summary(self) -> str:
        """Return network summary statistics"""
        degrees = np.array([len(adj) for adj in self._adjacency])

        summary = f"Contact Network Summary\n"
        summary += f"=" * 50 + "\n"
        summary += f"Nodes: {self.size}\n"
        summary += f"Edges: {self.graph.number_of_edges()}\n"
        if self.size:
            summary += f"Mean degree: {degrees.mean():.2f}\n"
            summary += f"Degree range: {degrees.min()} - {degrees.max()}\n"

        summary += f"\nCurrent state:\n"
        for state, count in self.get_state_counts().items():
            summary += f"  {state.name}: {count}\n"

        return summary
