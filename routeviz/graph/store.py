"""
Thread-safe store for an undirected, unweighted graph.

Usage:
    from routeviz.graph import GraphStore

    store = GraphStore()          # starts with the default graph
    store.add_node("G", connect_to="A")
    store.add_edge("G", "F")
    store.neighbors("G")          # ['A', 'F']
    store.reset()

Every operation runs under a single lock, so a concurrent reader sees each
mutation either fully applied or not at all.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from routeviz.config import DEFAULT_EDGES, DEFAULT_NODES
from routeviz.graph.errors import DuplicateNode, InvalidNodeId, UnknownNode

logger = logging.getLogger(__name__)


class GraphStore:
    """
    Mapping from node label to its adjacency set.

    Adjacency sets are ordered dicts (neighbor -> None) so iteration follows
    insertion order. This keeps BFS output reproducible for a given sequence
    of edits.

    Attributes:
        generation: Incremented on every reset; traversals use it to detect
            that the graph they started on has been replaced
    """

    def __init__(
        self,
        nodes: Iterable[str] = DEFAULT_NODES,
        edges: Iterable[tuple[str, str]] = DEFAULT_EDGES,
    ) -> None:
        """
        Initialize the store.

        Args:
            nodes: Initial node labels (also restored by reset())
            edges: Initial undirected edges (also restored by reset())
        """
        self._lock = threading.RLock()
        self._default_nodes = tuple(nodes)
        self._default_edges = tuple(edges)
        self._adjacency: dict[str, dict[str, None]] = self._build_default()
        self._generation = 0
        self._reset_listeners: list[Callable[[int], None]] = []

    def _build_default(self) -> dict[str, dict[str, None]]:
        """Build a fresh adjacency map from the defaults."""
        adjacency: dict[str, dict[str, None]] = {}
        for node in self._default_nodes:
            _validate_label(node)
            if node in adjacency:
                raise DuplicateNode(node)
            adjacency[node] = {}
        for a, b in self._default_edges:
            for endpoint in (a, b):
                if endpoint not in adjacency:
                    raise UnknownNode(endpoint)
            if a != b:
                adjacency[a][b] = None
                adjacency[b][a] = None
        return adjacency

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_node(self, node: str, connect_to: str | None = None) -> None:
        """
        Insert a node with no edges.

        Args:
            node: New node label
            connect_to: Optional existing node to connect the new one to,
                applied in the same atomic step

        Raises:
            InvalidNodeId: If the label is empty or not a string
            DuplicateNode: If the label already exists
            UnknownNode: If connect_to is given but not in the graph
        """
        _validate_label(node)
        with self._lock:
            if node in self._adjacency:
                raise DuplicateNode(node)
            if connect_to is not None and connect_to not in self._adjacency:
                raise UnknownNode(connect_to)

            self._adjacency[node] = {}
            if connect_to is not None:
                self._link(node, connect_to)

        logger.debug(f"Added node {node!r}" + (f" connected to {connect_to!r}" if connect_to else ""))

    def remove_node(self, node: str) -> None:
        """
        Remove a node and every edge touching it.

        Raises:
            UnknownNode: If the node is not in the graph
        """
        with self._lock:
            neighbors = self._adjacency.get(node)
            if neighbors is None:
                raise UnknownNode(node)
            for neighbor in neighbors:
                del self._adjacency[neighbor][node]
            del self._adjacency[node]

        logger.debug(f"Removed node {node!r}")

    def add_edge(self, a: str, b: str) -> bool:
        """
        Connect two nodes in both directions.

        Adding an edge that already exists, or a self-loop, is a no-op.

        Returns:
            True if a new edge was inserted, False for a no-op

        Raises:
            UnknownNode: If either endpoint is not in the graph
        """
        with self._lock:
            for endpoint in (a, b):
                if endpoint not in self._adjacency:
                    raise UnknownNode(endpoint)
            if a == b or b in self._adjacency[a]:
                return False
            self._link(a, b)

        logger.debug(f"Added edge {a!r} - {b!r}")
        return True

    def reset(self) -> None:
        """
        Replace the whole graph with the default nodes and edges.

        Registered reset listeners are called with the new generation after
        the lock is released.
        """
        fresh = self._build_default()
        with self._lock:
            self._adjacency = fresh
            self._generation += 1
            generation = self._generation
            listeners = list(self._reset_listeners)

        logger.info(f"Graph reset to default (generation {generation})")
        for listener in listeners:
            listener(generation)

    def add_reset_listener(self, listener: Callable[[int], None]) -> None:
        """Call listener(generation) after every reset."""
        with self._lock:
            self._reset_listeners.append(listener)

    def remove_reset_listener(self, listener: Callable[[int], None]) -> None:
        """Stop calling listener on reset. Unknown listeners are ignored."""
        with self._lock:
            if listener in self._reset_listeners:
                self._reset_listeners.remove(listener)

    def _link(self, a: str, b: str) -> None:
        # Caller holds the lock
        self._adjacency[a][b] = None
        self._adjacency[b][a] = None

    # =========================================================================
    # Queries
    # =========================================================================

    def neighbors(self, node: str) -> list[str]:
        """
        Get a snapshot of a node's neighbors in insertion order.

        Raises:
            UnknownNode: If the node is not in the graph
        """
        with self._lock:
            neighbors = self._adjacency.get(node)
            if neighbors is None:
                raise UnknownNode(node)
            return list(neighbors)

    def has_node(self, node: str) -> bool:
        """Check if a node exists."""
        with self._lock:
            return node in self._adjacency

    def has_edge(self, a: str, b: str) -> bool:
        """Check if two nodes are connected."""
        with self._lock:
            return b in self._adjacency.get(a, {})

    def nodes(self) -> list[str]:
        """All node labels in insertion order."""
        with self._lock:
            return list(self._adjacency)

    def edges(self) -> list[tuple[str, str]]:
        """Each undirected edge once, in first-seen order."""
        with self._lock:
            seen: set[frozenset[str]] = set()
            result = []
            for a, neighbors in self._adjacency.items():
                for b in neighbors:
                    key = frozenset((a, b))
                    if key not in seen:
                        seen.add(key)
                        result.append((a, b))
            return result

    def snapshot(self) -> dict[str, list[str]]:
        """Copy of the full adjacency structure."""
        with self._lock:
            return {node: list(neighbors) for node, neighbors in self._adjacency.items()}

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def __contains__(self, node: object) -> bool:
        return self.has_node(node)  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._adjacency)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nodes={len(self)}, edges={len(self.edges())})"


def _validate_label(node: object) -> None:
    """Raise InvalidNodeId unless node is a non-blank string."""
    if not isinstance(node, str) or not node.strip():
        raise InvalidNodeId(node)
