from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from .graph import Graph

logger = logging.getLogger(__name__)


def node_weight(graph: Graph, node: int) -> float:
    ids = graph.incident_edges(node)
    return float(np.sum(graph.weight[ids], dtype=np.float64))


def _weights_of(graph: Graph, nodes: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Summed live incident weight and live degree for each of ``nodes``."""
    nodes = np.asarray(nodes, dtype=np.int64)
    starts = graph.inc_ptr[nodes]
    lengths = graph.inc_ptr[nodes + 1] - starts
    total = int(lengths.sum())
    owner = np.repeat(np.arange(nodes.size, dtype=np.int64), lengths)
    offsets = np.arange(total, dtype=np.int64) - np.repeat(np.cumsum(lengths) - lengths, lengths)
    ids = graph.inc_edges[np.repeat(starts, lengths) + offsets]

    alive = graph.edge_alive[ids]
    owner = owner[alive]
    ids = ids[alive]
    weights = np.bincount(owner, weights=graph.weight[ids], minlength=nodes.size)
    degrees = np.bincount(owner, minlength=nodes.size)
    return weights.astype(np.float64, copy=False), degrees


def nodes_weight(graph: Graph, nodes: np.ndarray | None = None) -> list[tuple[int, float]]:
    if nodes is None:
        nodes = graph.node_indices()
    nodes = np.asarray(nodes, dtype=np.int64)
    weights, _ = _weights_of(graph, nodes)
    return [(int(n), float(w)) for n, w in zip(nodes, weights)]


def find_heaviest_node(
    graph: Graph, nodes: np.ndarray | None = None, *, require_edges: bool = False
) -> tuple[int, float] | None:
    """
    Node with the largest summed incident weight among ``nodes`` (default: all live nodes).

    Ties go to the smallest label; a NaN sum ranks below every number. With
    ``require_edges`` only nodes with at least one live edge compete. Returns
    None if no node competes.
    """
    if nodes is None:
        nodes = graph.node_indices()
    nodes = np.asarray(nodes, dtype=np.int64)
    weights, degrees = _weights_of(graph, nodes)

    if require_edges:
        has_edge = degrees > 0
        nodes = nodes[has_edge]
        weights = weights[has_edge]
    if nodes.size == 0:
        return None

    ranked = np.where(np.isnan(weights), -np.inf, weights)
    top = ranked.max()
    tied = nodes[ranked == top]
    heaviest = min((int(n) for n in tied), key=graph.label)
    w = float(weights[nodes == heaviest][0])

    logger.debug("Heaviest node and weight: %s [%d] => %s", graph.label(heaviest), heaviest, w)
    return heaviest, w


def merge_heaviest(graph: Graph, picks: Iterable[tuple[int, float] | None]) -> tuple[int, float] | None:
    """Fold partial ``find_heaviest_node`` results (e.g. one per chunk) into the overall heaviest."""
    best: tuple[int, float] | None = None
    for p in picks:
        if p is None:
            continue
        if best is None or _outranks(graph, p, best):
            best = p
    return best


def _outranks(graph: Graph, a: tuple[int, float], b: tuple[int, float]) -> bool:
    wa = -np.inf if np.isnan(a[1]) else a[1]
    wb = -np.inf if np.isnan(b[1]) else b[1]
    if wa != wb:
        return wa > wb
    return graph.label(a[0]) < graph.label(b[0])
