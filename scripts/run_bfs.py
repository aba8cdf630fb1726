#!/usr/bin/env python3
"""
BFS Routing CLI - Animate a breadth-first search in the terminal.

Usage:
    python scripts/run_bfs.py --start A --end D
    python scripts/run_bfs.py --start A --end D --remove B
    python scripts/run_bfs.py --start A --end G --add-node G:F --delay 0
    python scripts/run_bfs.py --start A --end F --add-edge A:F

Edits are applied to the default graph (A-B, A-C, C-E, E-F, F-D, B-D)
before the search starts, in the order: add nodes, add edges, remove nodes.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from routeviz.config import LOG_FORMAT, LOG_LEVEL, PACING_DELAY_SECONDS  # noqa: E402
from routeviz.graph import GraphError, GraphStore  # noqa: E402
from routeviz.traversal import (  # noqa: E402
    NodeDiscovered,
    NodeVisited,
    PathEdge,
    TraversalEngine,
    TraversalFinished,
)

logger = logging.getLogger("run_bfs")


def parse_pair(value: str) -> tuple[str, str]:
    """Parse 'X:Y' into a label pair."""
    left, sep, right = value.partition(":")
    if not sep or not left or not right:
        raise argparse.ArgumentTypeError(f"Expected LABEL:LABEL, got {value!r}")
    return left.upper(), right.upper()


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Animate a BFS between two nodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--start", type=str, required=True, help="Start node label")
    parser.add_argument("--end", type=str, required=True, help="End node label")
    parser.add_argument(
        "--add-node",
        action="append",
        default=[],
        metavar="NEW[:CONNECT_TO]",
        help="Add a node, optionally connected to an existing one (repeatable)",
    )
    parser.add_argument(
        "--add-edge",
        action="append",
        default=[],
        type=parse_pair,
        metavar="A:B",
        help="Add an undirected edge (repeatable)",
    )
    parser.add_argument(
        "--remove",
        action="append",
        default=[],
        metavar="NODE",
        help="Remove a node before searching (repeatable)",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=PACING_DELAY_SECONDS,
        help=f"Seconds between discovery events (default: {PACING_DELAY_SECONDS})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser.parse_args()


def apply_edits(store: GraphStore, args: argparse.Namespace) -> None:
    """Apply the requested graph edits in order."""
    for entry in args.add_node:
        label, _, connect_to = entry.partition(":")
        store.add_node(label.upper(), connect_to=connect_to.upper() or None)
    for a, b in args.add_edge:
        if not store.add_edge(a, b):
            logger.info(f"Edge {a}-{b} already exists")
    for label in args.remove:
        store.remove_node(label.upper())


def describe(event) -> str:
    """One-line description of an event."""
    if isinstance(event, NodeVisited):
        return f"visit     {event.node}"
    if isinstance(event, NodeDiscovered):
        return f"discover  {event.node} (via {event.parent})"
    if isinstance(event, PathEdge):
        return f"path      {event.source} -> {event.target}"
    if isinstance(event, TraversalFinished):
        return "finished  " + ("path found" if event.found else "no path")
    return repr(event)


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format=LOG_FORMAT,
    )

    store = GraphStore()
    try:
        apply_edits(store, args)
    except GraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    engine = TraversalEngine(store, pacing_delay=args.delay)
    try:
        run = engine.run(args.start.upper(), args.end.upper())
    except GraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    path_edges: list[PathEdge] = []
    try:
        for event in run.events():
            print(f"[{event.seq:>3}] {describe(event)}")
            if isinstance(event, PathEdge):
                path_edges.append(event)
    except KeyboardInterrupt:
        engine.shutdown()
        print("\nCancelled")
        return 130

    if run.found:
        path = [run.start] + [edge.target for edge in reversed(path_edges)]
        print(f"\nShortest path ({len(path) - 1} hops): {' -> '.join(path)}")
        return 0

    print(f"\nNo path from {run.start} to {run.end}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
