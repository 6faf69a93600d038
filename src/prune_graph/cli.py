"""
Prune nodes from a graph and output unlinked nodes.

Reads a tab-separated edge list (plain or gzip, file or STDIN), builds a
weighted undirected graph and removes the heaviest node until no edge is left.
Surviving node labels are written sorted, one per line.

Examples:
  prune_graph --in ld.tsv.gz --header --weight-field r2 --weight-filter "r2 > 0.2" --out unlinked.txt
  zcat ld.tsv.gz | prune_graph --header -w r2 -f "r2 > 0.2" --mode component -t 4 --out-excl linked.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from tqdm import tqdm

from . import __version__
from .builder import GraphBuilder
from .config import MODES, PruneConfig
from .errors import FatalInputError
from .files import open_input, read_subset, write_dot, write_labels
from .pruner import Pruner

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MANY_THREADS = 5


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="prune_graph", description="Prune nodes from a graph and output unlinked nodes.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-t", "--n-threads", type=int, default=1, help="Number of threads.")
    p.add_argument("-i", "--in", dest="input", type=str, default="-", help="File with edges to be pruned (gzip ok; '-' is STDIN).")
    p.add_argument("--header", action="store_true", help="Input file has header.")
    p.add_argument("-o", "--out", type=str, default="-", help="File to output pruned (unlinked) nodes ('-' is STDOUT).")
    p.add_argument("--out-excl", type=str, default=None, help="File to dump excluded nodes.")
    p.add_argument("--out-graph", type=str, default=None, help="File to output the starting graph (DOT format).")
    p.add_argument(
        "-w",
        "--weight-field",
        type=str,
        default="column_3",
        help=(
            "Column in input file to use as weight (needs to be present in header); "
            "if input file has no header you can use 'column_#', where '#' stands for the column number."
        ),
    )
    p.add_argument("-f", "--weight-filter", type=str, default=None, help="Filtering expression (e.g. 'r2 > 0.2').")
    p.add_argument(
        "-n",
        "--weight-n-edges",
        action="store_true",
        help="Calculate node's weight by number of connected edges, instead of summing over their weights (default).",
    )
    p.add_argument("--weight-precision", type=int, default=4, help="Decimal digits weights are rounded to.")
    p.add_argument("--keep-heavy", action="store_true", help="Keep 'heaviest' nodes (instead of removing them).")
    p.add_argument(
        "--mode",
        choices=list(MODES),
        default="global",
        help="global: one heaviest node per iteration; component: one per connected component per iteration.",
    )
    p.add_argument("--subset", type=str, default=None, help="File with node IDs to include (one per line).")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbosity (-v info, -vv debug).")
    p.add_argument("-q", "--quiet", action="store_true", help="Disable all logging and progress output.")
    return p.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> PruneConfig:
    return PruneConfig(
        header=bool(args.header),
        weight_field=str(args.weight_field),
        weight_filter=args.weight_filter,
        weight_n_edges=bool(args.weight_n_edges),
        weight_precision=int(args.weight_precision),
        subset=args.subset,
        keep_heavy=bool(args.keep_heavy),
        mode=str(args.mode),
        n_threads=int(args.n_threads),
        input=str(args.input),
        out=str(args.out),
        out_excl=args.out_excl,
        out_graph=args.out_graph,
    ).validate()


def setup_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.CRITICAL + 1
    else:
        level = {0: logging.WARNING, 1: logging.INFO}.get(int(verbose), logging.DEBUG)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT, stream=sys.stderr, force=True)


def run(cfg: PruneConfig, *, progress: bool = False) -> int:
    start_time = time.monotonic()
    logger.info("prune_graph v%s", __version__)
    if cfg.n_threads > MANY_THREADS:
        logger.warning(
            "High number of threads is only relevant for very large graphs. For most uses, 2/3 threads are usually enough."
        )

    logger.info("Creating graph...")
    builder = GraphBuilder(
        has_header=cfg.header,
        weight_field=cfg.weight_field,
        weight_filter=cfg.weight_filter,
        weight_n_edges=cfg.weight_n_edges,
        weight_precision=cfg.weight_precision,
    )
    with open_input(cfg.input) as f:
        lines = tqdm(f, desc="Read", unit=" edges", disable=not progress)
        graph, _ = builder.build(lines)
    stats = builder.stats
    logger.info(
        "Graph has %d nodes with %d edges (%d rows read, %d NaN, %d filtered out)",
        graph.node_count(),
        graph.edge_count(),
        stats.rows_read,
        stats.nan_skipped,
        stats.filtered_out,
    )

    if cfg.subset is not None:
        logger.info("Subsetting nodes based on input file...")
        graph.subset(read_subset(cfg.subset))
        logger.info("Graph has %d nodes with %d edges", graph.node_count(), graph.edge_count())

    pruner = Pruner(graph, keep_heavy=cfg.keep_heavy, mode=cfg.mode, n_threads=cfg.n_threads)

    if cfg.out_graph is not None:
        logger.info("Saving graph as dot...")
        write_dot(cfg.out_graph, graph)

    result = pruner.run()

    logger.info("Saving remaining nodes...")
    write_labels(cfg.out, result.survivors)
    if cfg.out_excl is not None:
        logger.info("Saving excluded nodes to file...")
        write_labels(cfg.out_excl, result.excluded)

    logger.info("Total runtime: %.2f mins", (time.monotonic() - start_time) / 60.0)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.quiet)
    try:
        cfg = config_from_args(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 2
    progress = not args.quiet and sys.stderr.isatty()
    try:
        return run(cfg, progress=progress)
    except FatalInputError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
