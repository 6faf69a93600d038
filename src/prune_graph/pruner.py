"""
Greedy heaviest-node elimination.

Each iteration picks the heaviest node (largest summed incident weight, ties to
the smallest label) and removes it, or, with ``keep_heavy``, removes all of its
neighbours instead. The loop stops once no edge is left; the remaining nodes
are pairwise unlinked.

In ``component`` mode the heaviest node is picked independently inside every
connected component that still has edges, and all picks of one iteration are
eliminated together. Components share no edges, so picks never interfere, and
the per-component selection is spread over a thread pool. Selection reads a
fixed snapshot of the graph; the graph is only mutated afterwards, on the
calling thread.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from .components import connected_components
from .config import MODES
from .errors import FatalInputError
from .graph import Graph
from .weight_index import find_heaviest_node, merge_heaviest

logger = logging.getLogger(__name__)

PROGRESS_EVERY_S = 30.0


class PrunerState(enum.Enum):
    RUNNING = "running"
    DONE = "done"


@dataclass
class PruneResult:
    survivors: list[str]
    excluded: list[str]


@dataclass
class Pruner:
    graph: Graph
    keep_heavy: bool = False
    mode: str = "global"
    n_threads: int = 1
    excluded: list[str] = field(default_factory=list)
    history: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode!r}")
        if int(self.n_threads) < 1:
            raise ValueError(f"n_threads must be >= 1, got {self.n_threads}")
        if self.graph.node_count() == 0:
            raise FatalInputError("Graph is empty!")
        self._pool: ThreadPoolExecutor | None = None

    @property
    def state(self) -> PrunerState:
        return PrunerState.RUNNING if self.graph.edge_count() > 0 else PrunerState.DONE

    def _candidate_sets(self) -> list[np.ndarray]:
        if self.mode == "global":
            return [self.graph.node_indices()]
        return connected_components(self.graph)

    def _select(self, candidate_sets: list[np.ndarray]) -> list[int]:
        def pick(nodes: np.ndarray) -> tuple[int, float] | None:
            # An isolated pick would never shrink the graph under keep_heavy.
            return find_heaviest_node(self.graph, nodes, require_edges=self.keep_heavy)

        if self._pool is None:
            picked = [pick(c) for c in candidate_sets]
        elif self.mode == "global":
            # One set: split it, pick per chunk, then keep the best pick.
            chunks = [c for c in np.array_split(candidate_sets[0], int(self.n_threads)) if c.size]
            picked = [merge_heaviest(self.graph, self._pool.map(pick, chunks))]
        else:
            picked = list(self._pool.map(pick, candidate_sets))
        return [p[0] for p in picked if p is not None]

    def _to_remove(self, heavy: list[int]) -> list[int]:
        if not self.keep_heavy:
            return list(heavy)
        out: list[int] = []
        seen: set[int] = set()
        for node in heavy:
            for nb in self.graph.neighbors(node):
                nb = int(nb)
                if nb not in seen:
                    seen.add(nb)
                    out.append(nb)
        return out

    def step(self) -> list[str]:
        """Run one iteration; returns the labels removed by it, in removal order."""
        if self.state is PrunerState.DONE:
            return []
        heavy = self._select(self._candidate_sets())
        if not heavy:
            raise RuntimeError(f"no candidate node found while {self.graph.edge_count()} edges remain")
        logger.debug("Heaviest: %s", [self.graph.label(n) for n in heavy])

        removed = [self.graph.remove_node(n) for n in self._to_remove(heavy)]
        self.excluded.extend(removed)
        self.history.append(self.graph.edge_count())
        return removed

    def run(self) -> PruneResult:
        if self.keep_heavy:
            logger.info("Pruning neighbors of heaviest position...")
        else:
            logger.info("Pruning heaviest position...")

        prev_time = time.monotonic()
        delta_n_nodes = 0
        if self.n_threads > 1:
            pool_ctx = ThreadPoolExecutor(max_workers=int(self.n_threads), thread_name_prefix="prune")
        else:
            pool_ctx = contextlib.nullcontext()
        with pool_ctx as pool:
            self._pool = pool
            try:
                while self.state is PrunerState.RUNNING:
                    elapsed = time.monotonic() - prev_time
                    if elapsed >= PROGRESS_EVERY_S and delta_n_nodes != 0:
                        logger.info(
                            "Pruned %d nodes in %ds (%.2f nodes/s); %d nodes remaining with %d edges.",
                            delta_n_nodes,
                            int(elapsed),
                            delta_n_nodes / elapsed,
                            self.graph.node_count(),
                            self.graph.edge_count(),
                        )
                        prev_time = time.monotonic()
                        delta_n_nodes = 0
                    delta_n_nodes += len(self.step())
            finally:
                self._pool = None

        logger.info(
            "Pruning complete! Final graph has %d nodes with %d edges",
            self.graph.node_count(),
            self.graph.edge_count(),
        )
        return PruneResult(survivors=list(self.graph.labels()), excluded=list(self.excluded))


def prune(graph: Graph, *, keep_heavy: bool = False, mode: str = "global", n_threads: int = 1) -> PruneResult:
    return Pruner(graph, keep_heavy=keep_heavy, mode=mode, n_threads=n_threads).run()
