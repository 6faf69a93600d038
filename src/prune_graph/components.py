from __future__ import annotations

import numpy as np
from scipy import sparse
from scipy.sparse.csgraph import connected_components as _cc

from .graph import Graph


def component_labels(graph: Graph) -> tuple[int, np.ndarray]:
    """Component id for every node id, from the live edges only (removed nodes end up as singletons)."""
    ids = graph.live_edges()
    n = graph.n_ids
    if n == 0:
        return 0, np.zeros((0,), dtype=np.int32)
    adj = sparse.coo_matrix(
        (np.ones((ids.size,), dtype=np.float64), (graph.src[ids], graph.dst[ids])),
        shape=(n, n),
    ).tocsr()
    n_comp, labels = _cc(adj, directed=False)
    return int(n_comp), labels


def connected_components(graph: Graph) -> list[np.ndarray]:
    """
    Node ids of every connected component that still holds at least one live edge.

    Components without edges (isolated or removed nodes) are left out. Each array is
    sorted; components are ordered by their smallest node id.
    """
    n_comp, labels = component_labels(graph)
    ids = graph.live_edges()
    with_edges = np.bincount(labels[graph.src[ids]], minlength=n_comp) > 0

    order = np.argsort(labels, kind="stable")
    bounds = np.cumsum(np.bincount(labels, minlength=n_comp))[:-1]
    members = np.split(order, bounds)
    comps = [members[c] for c in range(n_comp) if with_edges[c]]
    comps.sort(key=lambda c: int(c[0]))
    return comps
