"""
Traversal event records.

Events are immutable and tagged with the run that produced them and their
position in that run's stream, so a consumer can tell runs apart and check
ordering.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import ClassVar, Union


@dataclass(frozen=True)
class NodeVisited:
    """The search started at this node."""

    node: str
    run_id: int = 0
    seq: int = 0

    type: ClassVar[str] = "visit"

    def to_dict(self) -> dict:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class NodeDiscovered:
    """
    A node was reached for the first time.

    Attributes:
        node: The newly discovered node
        parent: The node being expanded when it was found
    """

    node: str
    parent: str
    run_id: int = 0
    seq: int = 0

    type: ClassVar[str] = "discover"

    def to_dict(self) -> dict:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class PathEdge:
    """One edge of the found path, from parent to child."""

    source: str
    target: str
    run_id: int = 0
    seq: int = 0

    type: ClassVar[str] = "path"

    def to_dict(self) -> dict:
        return {"type": self.type, **asdict(self)}


@dataclass(frozen=True)
class TraversalFinished:
    """
    Last event of every run.

    Attributes:
        found: Whether the end node was reached
        cancelled: Whether the run was stopped early (new run, reset, or cancel)
    """

    found: bool
    cancelled: bool = False
    run_id: int = 0
    seq: int = 0

    type: ClassVar[str] = "finished"

    def to_dict(self) -> dict:
        return {"type": self.type, **asdict(self)}


Event = Union[NodeVisited, NodeDiscovered, PathEdge, TraversalFinished]
