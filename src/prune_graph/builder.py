"""
Build a Graph from a tab-separated edge list.

Row layout: ``node_a <TAB> node_b <TAB> w_1 <TAB> ... <TAB> w_k``. The first
row is a header when ``has_header`` is set; otherwise fields are named
``column_1 .. column_N`` (1-based, label columns included) and the first row is
data. Every weight column is parsed and rounded, the configured
``weight_field`` becomes the edge weight (or 1.0 when counting edges), and the
optional filter expression decides which rows become edges.

Both endpoints of every row are registered as nodes, even when the row itself
is skipped (NaN weight) or filtered out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np

from .errors import FatalInputError
from .expression import WeightFilter
from .graph import Graph
from .weights import parse_weight, round_weights

logger = logging.getLogger(__name__)

N_DEBUG_ROWS = 20


@dataclass
class BuildStats:
    rows_read: int = 0
    nan_skipped: int = 0
    filtered_out: int = 0
    edges_added: int = 0


class LabelIndex:
    """label -> node id, filled lazily and exactly once per distinct label."""

    def __init__(self) -> None:
        self.labels: list[str] = []
        self._ids: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.labels)

    def __contains__(self, label: object) -> bool:
        return label in self._ids

    def __getitem__(self, label: str) -> int:
        return self._ids[label]

    def add(self, label: str) -> int:
        idx = self._ids.get(label)
        if idx is None:
            idx = len(self.labels)
            self._ids[label] = idx
            self.labels.append(label)
        return idx

    def as_dict(self) -> dict[str, int]:
        return dict(self._ids)


def iter_records(lines: Iterable[str]) -> Iterator[list[str]]:
    for line in lines:
        yield line.rstrip("\r\n").split("\t")


def synth_header(n_fields: int) -> list[str]:
    return [f"column_{i}" for i in range(1, n_fields + 1)]


class GraphBuilder:
    def __init__(
        self,
        *,
        has_header: bool = False,
        weight_field: str = "column_3",
        weight_filter: str | WeightFilter | None = None,
        weight_n_edges: bool = False,
        weight_precision: int = 4,
    ):
        if int(weight_precision) < 0:
            raise ValueError(f"weight_precision must be >= 0, got {weight_precision}")
        self.has_header = bool(has_header)
        self.weight_field = str(weight_field)
        if weight_filter is not None and not isinstance(weight_filter, WeightFilter):
            weight_filter = WeightFilter(weight_filter)
        self.weight_filter = weight_filter
        self.weight_n_edges = bool(weight_n_edges)
        self.weight_precision = int(weight_precision)
        self.header: list[str] = []
        self.stats = BuildStats()

    def _resolve_header(self, first: list[str]) -> list[str]:
        header = list(first) if self.has_header else synth_header(len(first))
        logger.debug("HEADER = %s", header)
        if self.weight_field not in header:
            raise FatalInputError(f"weight_field '{self.weight_field}' is not present in the header")
        if self.weight_field in header[:2]:
            raise FatalInputError(f"weight_field '{self.weight_field}' is a node column, not a weight column")
        return header

    def build(self, lines: Iterable[str]) -> tuple[Graph, LabelIndex]:
        index = LabelIndex()
        self.stats = stats = BuildStats()
        header: list[str] = []
        src: list[int] = []
        dst: list[int] = []
        raw_weights: list[list[float]] = []

        for i, edge in enumerate(iter_records(lines)):
            if i == 0:
                header = self._resolve_header(edge)
                if self.has_header:
                    continue
            stats.rows_read += 1

            if len(edge) != len(header):
                raise FatalInputError(
                    f"edge {stats.rows_read} has {len(edge)} fields, while header has {len(header)}"
                )

            src.append(index.add(edge[0]))
            dst.append(index.add(edge[1]))
            raw_weights.append([parse_weight(x) for x in edge[2:]])

            if stats.rows_read <= N_DEBUG_ROWS:
                logger.debug("Edge: %s", edge)

        self.header = header
        weight_names = header[2:]
        values = np.asarray(raw_weights, dtype=np.float64).reshape(len(raw_weights), len(weight_names))
        values = round_weights(values, self.weight_precision)
        columns = {name: values[:, j] for j, name in enumerate(weight_names)}

        keep = np.ones((len(raw_weights),), dtype=bool)
        if weight_names:
            w = columns[self.weight_field]
            is_nan = np.isnan(w)
            for row in np.flatnonzero(is_nan):
                logger.warning("NaN found in '%s' (edge %d): %s\t%s", self.weight_field, int(row) + 1,
                               index.labels[src[row]], index.labels[dst[row]])
            stats.nan_skipped = int(is_nan.sum())
            keep &= ~is_nan

            if self.weight_filter is not None:
                admitted = self.weight_filter.admit_mask(columns)
                stats.filtered_out = int((keep & ~admitted).sum())
                keep &= admitted

        rows = np.flatnonzero(keep)
        if self.weight_n_edges:
            edge_weight = np.ones((rows.size,), dtype=np.float64)
        elif weight_names:
            edge_weight = columns[self.weight_field][rows]
        else:
            edge_weight = np.zeros((0,), dtype=np.float64)
        src_arr = np.asarray(src, dtype=np.int64)[rows]
        dst_arr = np.asarray(dst, dtype=np.int64)[rows]
        stats.edges_added = int(rows.size)

        graph = Graph(index.labels, src_arr, dst_arr, edge_weight)
        logger.debug(
            "Input file has %d nodes with %d edges%s",
            graph.node_count(),
            stats.rows_read,
            f" ({graph.edge_count()} edges with {self.weight_filter.expression})" if self.weight_filter else "",
        )
        return graph, index


def build_graph(
    lines: Iterable[str],
    has_header: bool = False,
    weight_field: str = "column_3",
    weight_filter: str | None = None,
    weight_n_edges: bool = False,
    weight_precision: int = 4,
) -> tuple[Graph, LabelIndex]:
    builder = GraphBuilder(
        has_header=has_header,
        weight_field=weight_field,
        weight_filter=weight_filter,
        weight_n_edges=weight_n_edges,
        weight_precision=weight_precision,
    )
    return builder.build(lines)
