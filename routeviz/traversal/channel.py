"""
Ordered, asynchronous conduit from a traversal worker to its consumers.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Iterator

from routeviz.config import CHANNEL_PUBLISH_SLICE
from routeviz.traversal.events import Event, TraversalFinished

logger = logging.getLogger(__name__)


class ChannelClosed(Exception):
    """Publish was attempted after the channel finished or was abandoned."""


class EventChannel:
    """
    FIFO event stream for a single traversal run.

    One producer publishes; any number of consumers take events in order
    (each event is delivered once). Publishing TraversalFinished closes the
    channel, so it is always the last event a consumer sees. Once any
    consumer has taken it, every other iterator stops as soon as the buffer
    is empty.

    With maxsize > 0 the buffer is bounded and publish() blocks while it is
    full, waking every CHANNEL_PUBLISH_SLICE seconds to check whether the
    channel was abandoned.
    """

    def __init__(self, maxsize: int = 0) -> None:
        """
        Initialize the channel.

        Args:
            maxsize: Buffer size; 0 means unbounded
        """
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self._abandoned = threading.Event()
        self._finished = threading.Event()

    @property
    def closed(self) -> bool:
        """Whether the final event has been published."""
        return self._closed.is_set()

    @property
    def finished(self) -> bool:
        """Whether a consumer has taken the final event."""
        return self._finished.is_set()

    def publish(self, event: Event, cancel: threading.Event | None = None) -> None:
        """
        Append an event to the stream.

        Args:
            event: Event to deliver
            cancel: Producer's cancel flag; while the buffer is full and the
                flag is set, ordinary events are dropped and TraversalFinished
                replaces the oldest buffered event instead of waiting

        Raises:
            ChannelClosed: If the channel is already closed or abandoned
        """
        if self._closed.is_set() or self._abandoned.is_set():
            raise ChannelClosed(f"Cannot publish {event.type!r} to a closed channel")

        is_final = isinstance(event, TraversalFinished)
        while True:
            try:
                self._queue.put(event, timeout=CHANNEL_PUBLISH_SLICE)
                break
            except queue.Full:
                if self._abandoned.is_set():
                    raise ChannelClosed("Channel abandoned by its consumers") from None
                if cancel is not None and cancel.is_set():
                    if not is_final:
                        logger.debug(f"Dropped {event.type!r} event from a cancelled run")
                        return
                    self._drop_oldest()

        if is_final:
            self._closed.set()

    def _drop_oldest(self) -> None:
        try:
            dropped = self._queue.get_nowait()
        except queue.Empty:
            return
        logger.debug(f"Dropped buffered {dropped.type!r} event to close a cancelled run")

    def abandon(self) -> None:
        """Tell a blocked producer that nobody will read further events."""
        self._abandoned.set()

    def get(self, timeout: float | None = None) -> Event:
        """
        Take the next event, waiting up to timeout seconds.

        Raises:
            queue.Empty: If no event arrived in time
        """
        event = self._queue.get(timeout=timeout)
        if isinstance(event, TraversalFinished):
            self._finished.set()
        return event

    def drain(self, max_events: int | None = None) -> list[Event]:
        """Take whatever is buffered right now without blocking."""
        events: list[Event] = []
        while max_events is None or len(events) < max_events:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                break
            events.append(event)
            if isinstance(event, TraversalFinished):
                self._finished.set()
                break
        return events

    def iter(self, timeout: float | None = None) -> Iterator[Event]:
        """
        Yield events up to and including TraversalFinished.

        Several consumers may iterate the same channel. The one that takes
        TraversalFinished yields it; the others return once the buffer is
        empty instead of waiting for an event that will never come.

        Args:
            timeout: Max seconds to wait for each event; None waits forever

        Raises:
            queue.Empty: If an event does not arrive within timeout
        """
        while True:
            event = self._next(timeout)
            if event is None:
                return
            yield event
            if isinstance(event, TraversalFinished):
                return

    def _next(self, timeout: float | None) -> Event | None:
        # None means another consumer already took the final event
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._finished.is_set() and self._queue.empty():
                return None
            wait = CHANNEL_PUBLISH_SLICE
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Empty
                wait = min(wait, remaining)
            try:
                event = self._queue.get(timeout=wait)
            except queue.Empty:
                continue
            if isinstance(event, TraversalFinished):
                self._finished.set()
            return event

    def __iter__(self) -> Iterator[Event]:
        return self.iter()

    def __len__(self) -> int:
        return self._queue.qsize()
