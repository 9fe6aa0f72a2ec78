"""Validation of a full flow snapshot before it is saved.

Checks run in a fixed order and the first failure is reported:

1. nodes and edges are well-formed lists
2. node IDs are unique
3. edges only reference existing nodes
4. no edge connects a node to itself
5. disconnected nodes are counted (warning only)
6. at most one node has no incoming edge (optional policy)
"""

from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from chatflow.models.flow_graph import FlowEdge, FlowGraph, FlowNode
from chatflow.models.results import FlowErrorKind, ValidationResult

logger = structlog.get_logger(__name__)

MALFORMED_INPUT = "Invalid flow structure: nodes and edges must be arrays"
DUPLICATE_NODE_IDS = "Invalid flow structure: duplicate node IDs found"
DANGLING_EDGE = "Invalid flow structure: edge references non-existent node"
SELF_REFERENCING_EDGE = "Invalid flow structure: self-referencing edges are not allowed"
MULTIPLE_ENTRY_POINTS = "Cannot save Flow: more than one node has empty target handles"

_NODES = TypeAdapter(list[FlowNode])
_EDGES = TypeAdapter(list[FlowEdge])


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _parse(nodes: Sequence[Any], edges: Sequence[Any]) -> FlowGraph | None:
    try:
        return FlowGraph(
            nodes=_NODES.validate_python(list(nodes)),
            edges=_EDGES.validate_python(list(edges)),
        )
    except ValidationError as exc:
        logger.debug("flow_shape_rejected", error_count=exc.error_count())
        return None


def validate_flow(
    nodes: Any,
    edges: Any,
    *,
    single_entry_point: bool = True,
) -> ValidationResult:
    """Check that a flow may be saved.

    ``nodes`` and ``edges`` may hold model instances or plain JSON
    mappings. Nothing is modified; the result says whether the flow is
    valid and, if not, why.

    Args:
        nodes: Node list of the flow.
        edges: Edge list of the flow.
        single_entry_point: Reject flows where more than one node has
            no incoming edge.
    """
    if not _is_array(nodes) or not _is_array(edges):
        return ValidationResult.invalid(FlowErrorKind.malformed_input, MALFORMED_INPUT)

    graph = _parse(nodes, edges)
    if graph is None:
        return ValidationResult.invalid(FlowErrorKind.malformed_input, MALFORMED_INPUT)

    node_ids: set[str] = set()
    for node in graph.nodes:
        if node.id in node_ids:
            return ValidationResult.invalid(FlowErrorKind.duplicate_identity, DUPLICATE_NODE_IDS)
        node_ids.add(node.id)

    for edge in graph.edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            return ValidationResult.invalid(FlowErrorKind.dangling_reference, DANGLING_EDGE)

    for edge in graph.edges:
        if edge.source == edge.target:
            return ValidationResult.invalid(FlowErrorKind.self_loop, SELF_REFERENCING_EDGE)

    disconnected = len(graph.disconnected_nodes())
    if disconnected > 0:
        logger.warning("flow_has_disconnected_nodes", count=disconnected)

    if single_entry_point and len(graph.nodes) > 1 and len(graph.entry_points()) > 1:
        return ValidationResult.invalid(
            FlowErrorKind.multiple_entry_points,
            MULTIPLE_ENTRY_POINTS,
        )

    return ValidationResult.ok(disconnected_nodes=disconnected)


def validate_graph(graph: FlowGraph, *, single_entry_point: bool = True) -> ValidationResult:
    """Validate an in-memory graph snapshot."""
    return validate_flow(graph.nodes, graph.edges, single_entry_point=single_entry_point)
