from __future__ import annotations

import contextlib
import gzip
import io
import logging
import sys
from pathlib import Path
from typing import IO, Iterable, Iterator

from .graph import Graph

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
DOT_WARN_NODES = 10000


def _is_std(path: str | Path | None) -> bool:
    return path is None or str(path) == "-"


@contextlib.contextmanager
def open_input(path: str | Path | None) -> Iterator[IO[str]]:
    """Text stream over ``path`` (``-``: stdin), transparently gunzipped when it starts with the gzip magic."""
    if _is_std(path):
        logger.info("Reading from STDIN...")
        raw = sys.stdin.buffer
        is_gz = raw.peek(2)[:2] == GZIP_MAGIC
        stream = gzip.GzipFile(fileobj=raw, mode="rb") if is_gz else raw
        f = io.TextIOWrapper(stream, encoding="utf-8", errors="replace", newline="")
        try:
            yield f
        finally:
            # Leave sys.stdin itself open.
            inner = f.detach()
            if is_gz:
                inner.close()
        return

    path = Path(path)
    logger.info("Reading from input file %s...", path)
    with open(path, "rb") as fh:
        is_gz = fh.read(2) == GZIP_MAGIC
    if is_gz:
        with gzip.open(path, "rt", encoding="utf-8", errors="replace", newline="") as f:
            yield f
    else:
        with open(path, encoding="utf-8", errors="replace", newline="") as f:
            yield f


def read_subset(path: str | Path) -> list[str]:
    with open(path) as f:
        nodes = [ln.rstrip("\r\n") for ln in f]
    nodes = [n for n in nodes if n]
    logger.debug("Nodes to include: %s", nodes)
    return nodes


def write_labels(path: str | Path | None, labels: Iterable[str]) -> None:
    """Write ``labels`` sorted, one per line (``-``: stdout)."""
    labels = sorted(labels)
    if _is_std(path):
        for lab in labels:
            sys.stdout.write(f"{lab}\n")
        sys.stdout.flush()
        return
    path = Path(path)
    with open(path, "w") as f:
        for lab in labels:
            f.write(f"{lab}\n")


def write_dot(path: str | Path, graph: Graph) -> None:
    if graph.node_count() > DOT_WARN_NODES:
        logger.warning("Plotting graphs with more than %d nodes can be slow and not very informative", DOT_WARN_NODES)
    Path(path).write_text(graph.to_dot())
