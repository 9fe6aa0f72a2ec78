"""Tests for the single outgoing anchor connection rule."""

from chatflow.editing.connections import propose_connection
from chatflow.models.changes import EdgeAddChange, EdgeRemoveChange
from chatflow.models.flow_graph import Connection, FlowEdge


class TestProposeConnection:
    """Test the edge change plans produced for a new connection."""

    def test_free_anchor_adds_edge(self):
        """Connecting from an unused anchor only adds the edge."""
        plan = propose_connection(Connection(source="a", target="b"), [])

        assert len(plan) == 1
        assert isinstance(plan[0], EdgeAddChange)
        assert plan[0].item.id == "a-b"
        assert plan[0].item.source == "a"
        assert plan[0].item.target == "b"

    def test_used_anchor_replaces_edge(self):
        """Connecting from an anchor in use removes its edge first."""
        existing = [FlowEdge(id="a-b", source="a", target="b")]
        plan = propose_connection(Connection(source="a", target="c"), existing)

        assert [type(change) for change in plan] == [EdgeRemoveChange, EdgeAddChange]
        assert plan[0].id == "a-b"
        assert plan[1].item.id == "a-c"

    def test_other_handle_is_not_replaced(self):
        """Edges leaving a different handle of the same node are kept."""
        existing = [FlowEdge(id="a-b", source="a", target="b", source_handle="yes")]
        plan = propose_connection(
            Connection(source="a", target="c", source_handle="no"),
            existing,
        )

        assert len(plan) == 1
        assert isinstance(plan[0], EdgeAddChange)

    def test_incoming_edges_are_unlimited(self):
        """A target anchor may receive several edges."""
        existing = [
            FlowEdge(id="a-c", source="a", target="c"),
            FlowEdge(id="b-c", source="b", target="c"),
        ]
        plan = propose_connection(Connection(source="d", target="c"), existing)

        assert len(plan) == 1
        assert plan[0].item.id == "d-c"

    def test_inconsistent_edges_are_all_removed(self):
        """If an anchor somehow has several edges, all of them are replaced."""
        existing = [
            FlowEdge(id="a-b", source="a", target="b"),
            FlowEdge(id="a-c", source="a", target="c"),
            FlowEdge(id="x-a", source="x", target="a"),
        ]
        plan = propose_connection(Connection(source="a", target="d"), existing)

        removed = [change.id for change in plan if isinstance(change, EdgeRemoveChange)]
        assert removed == ["a-b", "a-c"]
        assert isinstance(plan[-1], EdgeAddChange)
        assert plan[-1].item.id == "a-d"

    def test_does_not_check_self_loops(self):
        """Self loops are left to the caller; a plan is always produced."""
        plan = propose_connection(Connection(source="a", target="a"), [])
        assert plan[-1].item.id == "a-a"
