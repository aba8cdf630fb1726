"""
Unit tests for GraphStore.
"""

import threading

import pytest

from routeviz.graph import DuplicateNode, GraphError, GraphStore, InvalidNodeId, UnknownNode


class TestDefaultGraph:
    """Test the graph created at startup."""

    def test_default_nodes(self, store):
        """Should start with nodes A through F."""
        assert store.nodes() == ["A", "B", "C", "D", "E", "F"]

    def test_default_edges(self, store, default_edges):
        """Should start with the six default edges."""
        assert {frozenset(e) for e in store.edges()} == {frozenset(e) for e in default_edges}
        assert len(store.edges()) == 6

    def test_neighbors_insertion_order(self, store):
        """Neighbors should come back in the order edges were added."""
        assert store.neighbors("A") == ["B", "C"]
        assert store.neighbors("D") == ["F", "B"]

    def test_len_and_contains(self, store):
        """Should support len() and the in operator."""
        assert len(store) == 6
        assert "A" in store
        assert "Z" not in store

    def test_custom_defaults(self):
        """Should accept custom initial nodes and edges."""
        store = GraphStore(nodes=["X", "Y"], edges=[("X", "Y")])
        assert store.neighbors("X") == ["Y"]
        assert store.neighbors("Y") == ["X"]

    def test_custom_defaults_with_dangling_edge_rejected(self):
        """An initial edge to a missing node should be rejected."""
        with pytest.raises(UnknownNode):
            GraphStore(nodes=["X"], edges=[("X", "Y")])


class TestAddNode:
    """Test AddNode."""

    def test_add_node_has_no_edges(self, store):
        """New nodes should have an empty adjacency set."""
        store.add_node("G")
        assert store.has_node("G")
        assert store.neighbors("G") == []
        assert len(store.edges()) == 6

    def test_add_duplicate_raises(self, store):
        """Adding an existing label should raise DuplicateNode."""
        before = store.snapshot()
        with pytest.raises(DuplicateNode):
            store.add_node("A")
        assert store.snapshot() == before

    @pytest.mark.parametrize("label", ["", "   ", None, 7])
    def test_add_invalid_label_raises(self, store, label):
        """Empty or non-string labels should raise InvalidNodeId."""
        with pytest.raises(InvalidNodeId):
            store.add_node(label)
        assert len(store) == 6

    def test_invalid_label_is_duplicate_node(self, store):
        """InvalidNodeId should also be catchable as DuplicateNode."""
        with pytest.raises(DuplicateNode):
            store.add_node("")

    def test_add_node_connected(self, store):
        """connect_to should link the new node in the same step."""
        store.add_node("G", connect_to="F")
        assert store.neighbors("G") == ["F"]
        assert "G" in store.neighbors("F")

    def test_add_node_connected_to_unknown(self, store):
        """Unknown connect_to should raise and leave the store unchanged."""
        before = store.snapshot()
        with pytest.raises(UnknownNode):
            store.add_node("G", connect_to="Z")
        assert store.snapshot() == before


class TestRemoveNode:
    """Test RemoveNode."""

    def test_remove_node_clears_edges(self, store):
        """Removing a node should remove it from every neighbor."""
        store.remove_node("B")
        assert not store.has_node("B")
        assert store.neighbors("A") == ["C"]
        assert store.neighbors("D") == ["F"]

    def test_remove_unknown_raises(self, store):
        """Removing a missing node should raise UnknownNode."""
        with pytest.raises(UnknownNode) as exc_info:
            store.remove_node("Z")
        assert exc_info.value.node == "Z"
        assert len(store) == 6

    def test_add_then_remove_restores_structure(self, store):
        """AddNode then RemoveNode should restore the adjacency exactly."""
        before = store.snapshot()
        store.add_node("G", connect_to="A")
        store.add_edge("G", "D")
        store.remove_node("G")
        assert store.snapshot() == before


class TestAddEdge:
    """Test AddEdge."""

    def test_add_edge_symmetric(self, store):
        """Both endpoints should list each other."""
        assert store.add_edge("A", "F") is True
        assert "F" in store.neighbors("A")
        assert "A" in store.neighbors("F")

    def test_add_existing_edge_is_noop(self, store):
        """Re-adding an edge in either direction should change nothing."""
        before = store.snapshot()
        assert store.add_edge("A", "B") is False
        assert store.add_edge("B", "A") is False
        assert store.snapshot() == before

    def test_self_loop_is_noop(self, store):
        """A self-loop should not be added."""
        assert store.add_edge("A", "A") is False
        assert "A" not in store.neighbors("A")

    @pytest.mark.parametrize("a, b", [("A", "Z"), ("Z", "A"), ("Y", "Z")])
    def test_add_edge_unknown_endpoint(self, store, a, b):
        """Unknown endpoints should raise and leave the store unchanged."""
        before = store.snapshot()
        with pytest.raises(UnknownNode):
            store.add_edge(a, b)
        assert store.snapshot() == before

    def test_has_edge(self, store):
        """has_edge should be symmetric and false for unknown nodes."""
        assert store.has_edge("A", "B")
        assert store.has_edge("B", "A")
        assert not store.has_edge("A", "F")
        assert not store.has_edge("Z", "A")


class TestQueries:
    """Test read-only accessors."""

    def test_neighbors_unknown_raises(self, store):
        """neighbors() should raise UnknownNode for a missing node."""
        with pytest.raises(UnknownNode):
            store.neighbors("Z")

    def test_unknown_node_is_key_error(self, store):
        """UnknownNode should be catchable as KeyError and GraphError."""
        with pytest.raises(KeyError):
            store.neighbors("Z")
        with pytest.raises(GraphError):
            store.neighbors("Z")

    def test_neighbors_returns_copy(self, store):
        """Mutating the returned list should not touch the store."""
        neighbors = store.neighbors("A")
        neighbors.append("Z")
        assert store.neighbors("A") == ["B", "C"]

    def test_snapshot_is_copy(self, store):
        """Mutating a snapshot should not touch the store."""
        snap = store.snapshot()
        snap["A"].clear()
        assert store.neighbors("A") == ["B", "C"]


class TestReset:
    """Test Reset."""

    def test_reset_restores_default(self, store):
        """Reset should undo every edit."""
        before = store.snapshot()
        store.add_node("G", connect_to="A")
        store.remove_node("B")
        store.add_edge("A", "F")
        store.reset()
        assert store.snapshot() == before

    def test_reset_idempotent(self, store):
        """Resetting twice should equal resetting once."""
        store.remove_node("C")
        store.reset()
        once = store.snapshot()
        store.reset()
        assert store.snapshot() == once

    def test_reset_bumps_generation(self, store):
        """Each reset should advance the generation counter."""
        assert store.generation == 0
        store.reset()
        store.reset()
        assert store.generation == 2

    def test_reset_listener_called_with_generation(self, store):
        """Listeners should receive the new generation after each reset."""
        seen = []
        store.add_reset_listener(seen.append)
        store.reset()
        store.reset()
        assert seen == [1, 2]

    def test_removed_reset_listener_not_called(self, store):
        """A removed listener should not hear later resets."""
        seen = []
        store.add_reset_listener(seen.append)
        store.reset()
        store.remove_reset_listener(seen.append)
        store.reset()
        assert seen == [1]

    def test_remove_unknown_reset_listener(self, store):
        """Removing a listener that was never added should be a no-op."""
        store.remove_reset_listener(print)
        store.reset()
        assert store.generation == 1


class TestConcurrency:
    """Test that concurrent readers never see half-applied edits."""

    def test_edges_always_symmetric_under_writes(self):
        """Readers should only ever observe symmetric adjacency."""
        store = GraphStore(nodes=[str(i) for i in range(20)], edges=[])
        stop = threading.Event()
        violations = []

        def reader():
            while not stop.is_set():
                snap = store.snapshot()
                for node, neighbors in snap.items():
                    for neighbor in neighbors:
                        if node not in snap.get(neighbor, []):
                            violations.append((node, neighbor))

        def writer():
            for i in range(20):
                for j in range(i + 1, 20):
                    store.add_edge(str(i), str(j))
            for i in range(0, 20, 2):
                store.remove_node(str(i))

        readers = [threading.Thread(target=reader) for _ in range(3)]
        for t in readers:
            t.start()
        writer()
        stop.set()
        for t in readers:
            t.join()

        assert violations == []
        assert store.nodes() == [str(i) for i in range(1, 20, 2)]
