"""Contact network construction"""

from .generators import (
    create_lattice,
    create_random_graph,
    create_complete_graph,
    create_k_regular_graph,
    build_network,
)

__all__ = [
    'create_lattice',
    'create_random_graph',
    'create_complete_graph',
    'create_k_regular_graph',
    'build_network',
]
