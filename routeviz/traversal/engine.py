"""
Breadth-first search that streams its progress as events.

The search itself is a plain generator (iter_bfs) so it can be tested
step by step. TraversalEngine runs it on a worker thread, paces discovery
events for animation, and publishes everything to an EventChannel.
"""

from __future__ import annotations

import dataclasses
import itertools
import logging
import threading
from collections import deque
from collections.abc import Iterator

from routeviz.config import CANCEL_JOIN_TIMEOUT, EVENT_CHANNEL_MAXSIZE, PACING_DELAY_SECONDS
from routeviz.graph.errors import UnknownNode
from routeviz.graph.store import GraphStore
from routeviz.traversal.channel import ChannelClosed, EventChannel
from routeviz.traversal.events import (
    Event,
    NodeDiscovered,
    NodeVisited,
    PathEdge,
    TraversalFinished,
)

logger = logging.getLogger(__name__)

# Process-wide run identity
_run_ids = itertools.count(1)


# =============================================================================
# Search
# =============================================================================


def iter_bfs(store: GraphStore, start: str, end: str) -> Iterator[Event]:
    """
    Start a breadth-first search from start to end.

    Endpoints are checked immediately, so an invalid request fails before
    any event exists. The returned iterator yields untagged events
    (run_id=0, seq=0) and always ends with TraversalFinished.

    Raises:
        UnknownNode: If start or end is not in the graph
    """
    for node in (start, end):
        if not store.has_node(node):
            raise UnknownNode(node)
    return _bfs(store, start, end)


def _bfs(store: GraphStore, start: str, end: str) -> Iterator[Event]:
    visited = {start}
    frontier = deque([start])
    parent: dict[str, str] = {}

    yield NodeVisited(start)

    while frontier:
        current = frontier.popleft()

        if current == end:
            yield from _path_edges(parent, start, end)
            yield TraversalFinished(found=True)
            return

        try:
            neighbors = store.neighbors(current)
        except UnknownNode:
            # Removed since it was queued; treat as a dead end
            logger.debug(f"Node {current!r} vanished mid-search, skipping")
            continue

        for neighbor in neighbors:
            if neighbor in visited:
                continue
            parent[neighbor] = current
            visited.add(neighbor)
            frontier.append(neighbor)
            yield NodeDiscovered(neighbor, current)

    yield TraversalFinished(found=False)


def _path_edges(parent: dict[str, str], start: str, end: str) -> Iterator[PathEdge]:
    """Walk parent pointers from end back to start, nearest-end edge first."""
    if end != start and end not in parent:
        raise RuntimeError(f"No parent chain from {end!r} back to {start!r}")

    node = end
    while node != start:
        prev = parent[node]
        yield PathEdge(prev, node)
        node = prev


def shortest_path(store: GraphStore, start: str, end: str) -> list[str] | None:
    """
    Find the shortest path using BFS, without pacing.

    Returns:
        List of nodes from start to end, or None if no path exists

    Raises:
        UnknownNode: If start or end is not in the graph
    """
    path = [end]
    found = False
    for event in iter_bfs(store, start, end):
        if isinstance(event, PathEdge):
            path.append(event.source)
        elif isinstance(event, TraversalFinished):
            found = event.found
    return list(reversed(path)) if found else None


# =============================================================================
# Runs
# =============================================================================


class TraversalRun:
    """
    Handle to one background search.

    Attributes:
        run_id: Identity stamped on every event of this run
        start: Start node
        end: End node
        channel: Stream of this run's events
    """

    def __init__(self, run_id: int, start: str, end: str, channel: EventChannel) -> None:
        self.run_id = run_id
        self.start = start
        self.end = end
        self.channel = channel
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None
        self._found: bool | None = None

    def cancel(self) -> None:
        """Ask the worker to stop at its next step or pacing wait."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        """Whether the worker has exited."""
        return self._thread is not None and not self._thread.is_alive()

    @property
    def found(self) -> bool | None:
        """Search result once finished; None while running or if cancelled."""
        return self._found

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker. Returns True if it has exited."""
        if self._thread is not None:
            self._thread.join(timeout)
        return self.done

    def events(self, timeout: float | None = None) -> Iterator[Event]:
        """Consume this run's events through TraversalFinished."""
        return self.channel.iter(timeout=timeout)

    def __repr__(self) -> str:
        state = "done" if self.done else "running"
        return f"TraversalRun(run_id={self.run_id}, {self.start!r} -> {self.end!r}, {state})"


class TraversalEngine:
    """
    Runs searches against a shared GraphStore on worker threads.

    Only one run is active at a time: starting a new run cancels the
    previous one and waits briefly for it to publish its final event.
    Resetting the store also ends the active run as cancelled.
    """

    def __init__(
        self,
        store: GraphStore,
        pacing_delay: float = PACING_DELAY_SECONDS,
        channel_maxsize: int = EVENT_CHANNEL_MAXSIZE,
    ) -> None:
        """
        Initialize the engine.

        Args:
            store: Graph to search
            pacing_delay: Seconds to wait after each discovery event
            channel_maxsize: Buffer size for each run's channel (0 = unbounded)
        """
        self._store = store
        self._pacing_delay = pacing_delay
        self._channel_maxsize = channel_maxsize
        self._lock = threading.Lock()
        self._current: TraversalRun | None = None
        store.add_reset_listener(self._on_reset)

    @property
    def store(self) -> GraphStore:
        return self._store

    @property
    def current(self) -> TraversalRun | None:
        """The most recently started run, or None."""
        return self._current

    def run(self, start: str, end: str) -> TraversalRun:
        """
        Start a search from start to end in the background.

        Returns:
            Handle whose channel receives the run's events

        Raises:
            UnknownNode: If start or end is not in the graph (no run is started)
        """
        generation = self._store.generation
        events = iter_bfs(self._store, start, end)

        with self._lock:
            previous = self._current
            if previous is not None and not previous.done:
                logger.info(f"Cancelling run {previous.run_id} for a new search")
                previous.cancel()
                if not previous.join(CANCEL_JOIN_TIMEOUT):
                    logger.warning(f"Run {previous.run_id} did not stop within {CANCEL_JOIN_TIMEOUT}s")

            run = TraversalRun(
                run_id=next(_run_ids),
                start=start,
                end=end,
                channel=EventChannel(maxsize=self._channel_maxsize),
            )
            run._thread = threading.Thread(
                target=self._work,
                args=(run, events, generation),
                name=f"bfs-run-{run.run_id}",
                daemon=True,
            )
            self._current = run
            run._thread.start()

        logger.info(f"Started run {run.run_id}: {start!r} -> {end!r}")
        return run

    def cancel(self) -> None:
        """Cancel the active run, if any."""
        run = self._current
        if run is not None and not run.done:
            logger.info(f"Cancelling run {run.run_id}")
            run.cancel()

    def _on_reset(self, generation: int) -> None:
        run = self._current
        if run is not None and not run.done:
            logger.info(f"Graph reset (generation {generation}), cancelling run {run.run_id}")
            run.cancel()

    def shutdown(self, timeout: float | None = CANCEL_JOIN_TIMEOUT) -> None:
        """Cancel the active run, wait for its worker, and detach from the store."""
        self._store.remove_reset_listener(self._on_reset)
        run = self._current
        if run is not None:
            run.cancel()
            run.join(timeout)

    def _work(self, run: TraversalRun, events: Iterator[Event], generation: int) -> None:
        """Worker body: drive the search, tag events, pace, and publish."""
        seq = itertools.count(1)

        def publish(event: Event) -> None:
            run.channel.publish(
                dataclasses.replace(event, run_id=run.run_id, seq=next(seq)),
                cancel=run._cancel,
            )

        def stale() -> bool:
            return run.cancelled or self._store.generation != generation

        try:
            for event in events:
                if stale():
                    break
                if isinstance(event, TraversalFinished):
                    run._found = event.found
                publish(event)

                if isinstance(event, TraversalFinished):
                    logger.info(
                        f"Run {run.run_id} finished: "
                        f"{'path found' if event.found else 'no path'} ({run.start!r} -> {run.end!r})"
                    )
                    return

                if isinstance(event, NodeDiscovered) and self._pacing_delay > 0:
                    if run._cancel.wait(self._pacing_delay):
                        break

            publish(TraversalFinished(found=False, cancelled=True))
            logger.info(f"Run {run.run_id} cancelled")

        except ChannelClosed:
            logger.debug(f"Run {run.run_id} channel closed, stopping worker")
        except Exception:
            logger.exception(f"Run {run.run_id} failed")
            if not run.channel.closed:
                try:
                    publish(TraversalFinished(found=False))
                except ChannelClosed:
                    logger.debug(f"Run {run.run_id} channel closed before failure was reported")
