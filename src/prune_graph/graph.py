"""
Live undirected multigraph used by the pruner.

Nodes are dense integer ids (0..n-1) into the label table; edges are rows of
three parallel arrays (src, dst, weight). Nothing is ever deleted from the
arrays: removal flips liveness masks, so ids stay stable for the whole run and
the node -> incident-edge index (CSR layout) is built once.

Repeated pairs are kept as separate edges. A self-loop is listed once in its
node's incidence, so it counts once towards the node's weight.
"""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np


class Graph:
    def __init__(self, labels: list[str], src: np.ndarray, dst: np.ndarray, weight: np.ndarray):
        src = np.asarray(src, dtype=np.int64)
        dst = np.asarray(dst, dtype=np.int64)
        weight = np.asarray(weight, dtype=np.float64)
        if not (src.shape == dst.shape == weight.shape) or src.ndim != 1:
            raise ValueError(f"Bad edge arrays: src={src.shape}, dst={dst.shape}, weight={weight.shape}")
        n = len(labels)
        if src.size and (min(int(src.min()), int(dst.min())) < 0 or max(int(src.max()), int(dst.max())) >= n):
            raise ValueError(f"Edge endpoint out of range for {n} nodes")

        self._labels = list(labels)
        self.src = src
        self.dst = dst
        self.weight = weight
        self.node_alive = np.ones((n,), dtype=bool)
        self.edge_alive = np.ones((src.size,), dtype=bool)
        self._n_nodes = int(n)
        self._n_edges = int(src.size)

        # Incidence in CSR layout: incident edges of node i are inc_edges[inc_ptr[i]:inc_ptr[i + 1]].
        not_loop = src != dst
        edge_ids = np.arange(src.size, dtype=np.int64)
        ends = np.concatenate([src, dst[not_loop]])
        ids = np.concatenate([edge_ids, edge_ids[not_loop]])
        order = np.argsort(ends, kind="stable")
        self.inc_edges = ids[order]
        self.inc_ptr = np.zeros((n + 1,), dtype=np.int64)
        np.cumsum(np.bincount(ends, minlength=n), out=self.inc_ptr[1:])

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"

    @property
    def n_ids(self) -> int:
        """Number of node ids ever allocated (live or removed)."""
        return len(self._labels)

    def node_count(self) -> int:
        return self._n_nodes

    def edge_count(self) -> int:
        return self._n_edges

    def label(self, node: int) -> str:
        return self._labels[int(node)]

    def is_live(self, node: int) -> bool:
        return bool(self.node_alive[int(node)])

    def node_indices(self) -> np.ndarray:
        return np.flatnonzero(self.node_alive)

    def labels(self) -> Iterator[str]:
        """Labels of the live nodes, in id order."""
        for i in self.node_indices():
            yield self._labels[int(i)]

    def live_edges(self) -> np.ndarray:
        return np.flatnonzero(self.edge_alive)

    def incident_edges(self, node: int) -> np.ndarray:
        node = int(node)
        ids = self.inc_edges[self.inc_ptr[node] : self.inc_ptr[node + 1]]
        return ids[self.edge_alive[ids]]

    def degree(self, node: int) -> int:
        return int(self.incident_edges(node).size)

    def neighbors(self, node: int) -> np.ndarray:
        """Distinct live neighbours (a node with a self-loop is its own neighbour)."""
        node = int(node)
        ids = self.incident_edges(node)
        other = np.where(self.src[ids] == node, self.dst[ids], self.src[ids])
        return np.unique(other)

    def remove_node(self, node: int) -> str:
        node = int(node)
        if not self.node_alive[node]:
            raise KeyError(f"node {self._labels[node]!r} was already removed")
        ids = self.incident_edges(node)
        self.edge_alive[ids] = False
        self.node_alive[node] = False
        self._n_edges -= int(ids.size)
        self._n_nodes -= 1
        return self._labels[node]

    def subset(self, keep: Iterable[str]) -> int:
        """Remove every live node whose label is not in ``keep``; returns the number of removed nodes."""
        keep = set(keep)
        removed = 0
        for i in self.node_indices():
            if self._labels[int(i)] not in keep:
                self.remove_node(int(i))
                removed += 1
        return removed

    def to_dot(self) -> str:
        lines = ["graph {"]
        for i in self.node_indices():
            lines.append(f'    {int(i)} [ label = "{_dot_escape(self._labels[int(i)])}" ]')
        for e in self.live_edges():
            w = _dot_escape(f"{float(self.weight[e]):g}")
            lines.append(f'    {int(self.src[e])} -- {int(self.dst[e])} [ label = "{w}" ]')
        lines.append("}")
        return "\n".join(lines) + "\n"


def _dot_escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"')
