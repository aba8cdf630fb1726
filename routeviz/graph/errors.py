"""
Errors raised by the graph store.

"Edge already exists" and "no path found" are normal outcomes and have no
error type here.
"""

from __future__ import annotations


class GraphError(Exception):
    """Base class for graph store errors."""


class UnknownNode(GraphError, KeyError):
    """An operation referenced a node that is not in the graph."""

    def __init__(self, node: str) -> None:
        self.node = node
        super().__init__(node)

    def __str__(self) -> str:
        return f"Unknown node: {self.node!r}"


class DuplicateNode(GraphError, ValueError):
    """A node with this label already exists."""

    def __init__(self, node: str) -> None:
        self.node = node
        super().__init__(f"Node already exists: {node!r}")


class InvalidNodeId(DuplicateNode):
    """Node labels must be non-empty strings."""

    def __init__(self, node: object) -> None:
        self.node = node
        ValueError.__init__(self, f"Invalid node label: {node!r}")
