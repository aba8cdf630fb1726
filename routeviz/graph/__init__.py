"""
Graph store module.

Provides the shared, thread-safe graph and its error types:
- GraphStore: Undirected, unweighted adjacency store
- UnknownNode / DuplicateNode / InvalidNodeId: Mutation and query errors
"""

from routeviz.graph.errors import DuplicateNode, GraphError, InvalidNodeId, UnknownNode
from routeviz.graph.store import GraphStore

__all__ = [
    "GraphStore",
    "GraphError",
    "UnknownNode",
    "DuplicateNode",
    "InvalidNodeId",
]
