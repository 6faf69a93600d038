"""
Greedy pruning of weighted, undirected edge lists.

A graph is read from a tab-separated edge list (two node labels per row plus
named weight columns), optionally filtered per edge by an expression over those
columns, and then the node with the largest summed incident weight is removed
(or its neighbours are, with ``keep_heavy``) until no edge is left. The
surviving labels form an "unlinked" set; the removed ones are reported apart.
"""

from __future__ import annotations

from .builder import GraphBuilder, LabelIndex, build_graph
from .components import connected_components
from .config import PruneConfig
from .errors import FatalInputError
from .expression import WeightFilter
from .graph import Graph
from .pruner import PruneResult, Pruner, PrunerState, prune
from .weight_index import find_heaviest_node, node_weight, nodes_weight
from .weights import round_weight

__version__ = "0.1.0"

__all__ = [
    "FatalInputError",
    "Graph",
    "GraphBuilder",
    "LabelIndex",
    "PruneConfig",
    "PruneResult",
    "Pruner",
    "PrunerState",
    "WeightFilter",
    "build_graph",
    "connected_components",
    "find_heaviest_node",
    "node_weight",
    "nodes_weight",
    "prune",
    "round_weight",
    "__version__",
]
