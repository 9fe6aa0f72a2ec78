"""Connection rule for edges proposed on the canvas.

A source anchor can have only one outgoing edge, while a target anchor
can receive any number of incoming edges. Connecting from an anchor that
is already in use replaces its edge.
"""

from collections.abc import Iterable

from chatflow.models.changes import EdgeAddChange, EdgeChange, EdgeRemoveChange
from chatflow.models.flow_graph import Connection, FlowEdge


def propose_connection(
    candidate: Connection,
    current_edges: Iterable[FlowEdge],
) -> list[EdgeChange]:
    """Plan the edge changes that add ``candidate`` under the connection rule.

    Returns removals of every edge leaving the same source anchor, followed
    by the addition of the new edge. Node existence and self loops are the
    caller's responsibility.
    """
    plan: list[EdgeChange] = [
        EdgeRemoveChange(id=existing.id)
        for existing in current_edges
        if existing.source == candidate.source
        and existing.source_handle == candidate.source_handle
    ]
    plan.append(EdgeAddChange(item=candidate.to_edge()))
    return plan
