"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures available to all test files.
"""

import pytest

from routeviz.graph import GraphStore
from routeviz.traversal import TraversalEngine


@pytest.fixture
def store() -> GraphStore:
    """Return a store holding the default graph."""
    return GraphStore()


@pytest.fixture
def engine(store: GraphStore):
    """Return an engine with no pacing delay, shut down after the test."""
    engine = TraversalEngine(store, pacing_delay=0)
    yield engine
    engine.shutdown()


@pytest.fixture
def slow_engine(store: GraphStore):
    """Return an engine whose runs stay in flight long enough to interrupt."""
    engine = TraversalEngine(store, pacing_delay=5.0)
    yield engine
    engine.shutdown()


@pytest.fixture
def default_edges() -> list[tuple[str, str]]:
    """Return the default graph's edges."""
    return [("A", "B"), ("A", "C"), ("C", "E"), ("E", "F"), ("F", "D"), ("B", "D")]
