"""
Traversal module.

Provides the breadth-first search engine and its event stream:
- TraversalEngine: Runs searches on worker threads
- TraversalRun: Handle to one running search
- EventChannel: Ordered event delivery to consumers
- NodeVisited / NodeDiscovered / PathEdge / TraversalFinished: Event records
"""

from routeviz.traversal.channel import ChannelClosed, EventChannel
from routeviz.traversal.engine import TraversalEngine, TraversalRun, iter_bfs, shortest_path
from routeviz.traversal.events import (
    Event,
    NodeDiscovered,
    NodeVisited,
    PathEdge,
    TraversalFinished,
)

__all__ = [
    "TraversalEngine",
    "TraversalRun",
    "EventChannel",
    "ChannelClosed",
    "Event",
    "NodeVisited",
    "NodeDiscovered",
    "PathEdge",
    "TraversalFinished",
    "iter_bfs",
    "shortest_path",
]
