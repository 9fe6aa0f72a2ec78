"""Flow editor: the only writer of a flow graph.

Every edit made on the canvas goes through a ``FlowEditor``. Each public
method leaves the graph in a consistent state in a single step: either
the whole operation is applied or nothing changes. Rejections come back
as ``MutationOutcome`` values and are logged, never raised.
"""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from chatflow.editing.connections import propose_connection
from chatflow.models.changes import (
    EdgeAddChange,
    EdgeChange,
    EdgeRemoveChange,
    EdgeReplaceChange,
    NodeAddChange,
    NodeChange,
    NodeDimensionsChange,
    NodePositionChange,
    NodeRemoveChange,
    NodeReplaceChange,
    NodeSelectChange,
)
from chatflow.models.flow_graph import (
    NODE_DATA_MODELS,
    Connection,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    Position,
)
from chatflow.models.results import FlowErrorKind, MutationOutcome
from chatflow.utils.identifiers import generate_node_id

logger = structlog.get_logger(__name__)

SELF_LOOP_REASON = "Cannot connect a node to itself"
DANGLING_REFERENCE_REASON = "Edge references non-existent node"

_NODE_CHANGE = TypeAdapter(NodeChange)
_EDGE_CHANGE = TypeAdapter(EdgeChange)


def _index_of(items: list[Any], item_id: str) -> int | None:
    return next((i for i, item in enumerate(items) if item.id == item_id), None)


def _remove_node(
    nodes: list[FlowNode],
    edges: list[FlowEdge],
    node_id: str,
) -> tuple[list[FlowNode], list[FlowEdge], list[str]]:
    """Drop a node together with every edge touching it."""
    removed = [e.id for e in edges if e.source == node_id or e.target == node_id]
    return (
        [n for n in nodes if n.id != node_id],
        [e for e in edges if e.source != node_id and e.target != node_id],
        removed,
    )


def _replace_node(
    nodes: list[FlowNode],
    edges: list[FlowEdge],
    index: int,
    item: FlowNode,
) -> tuple[list[FlowNode], list[FlowEdge], MutationOutcome]:
    """Swap the node at ``index`` for ``item``.

    A replacement under a new ID ends the old identity, so edges of the
    old node are removed as on delete.
    """
    old_id = nodes[index].id
    if item.id != old_id and _index_of(nodes, item.id) is not None:
        logger.warning("duplicate_node_rejected", node_id=item.id)
        return nodes, edges, MutationOutcome.rejected(
            FlowErrorKind.duplicate_identity,
            f"Duplicate node ID: {item.id}",
        )

    removed: list[str] = []
    if item.id != old_id:
        _, edges, removed = _remove_node(nodes, edges, old_id)
    nodes = [*nodes[:index], item, *nodes[index + 1:]]
    return nodes, edges, MutationOutcome.done(removed_edge_ids=removed)


def _as_connection(edge: FlowEdge) -> Connection:
    return Connection(
        source=edge.source,
        target=edge.target,
        source_handle=edge.source_handle,
        target_handle=edge.target_handle,
    )


def _same_endpoints(a: FlowEdge, b: FlowEdge) -> bool:
    return (a.source, a.target) == (b.source, b.target)


def _id_taken(edges: list[FlowEdge], edge: FlowEdge) -> bool:
    """True when another node pair already uses ``edge``'s ID.

    Hyphens in node IDs let two different pairs derive the same edge ID,
    e.g. ``a-b -> c`` and ``a -> b-c``.
    """
    index = _index_of(edges, edge.id)
    return index is not None and not _same_endpoints(edges[index], edge)


def _apply_edge_change(
    edges: list[FlowEdge],
    change: EdgeChange,
) -> tuple[list[FlowEdge], list[str]]:
    """Apply one primitive edge change, returning the edges and removed IDs."""
    if isinstance(change, EdgeRemoveChange):
        removed = [e.id for e in edges if e.id == change.id]
        return [e for e in edges if e.id != change.id], removed

    if isinstance(change, EdgeAddChange):
        index = _index_of(edges, change.item.id)
        if index is None or not _same_endpoints(edges[index], change.item):
            return [*edges, change.item], []
        # edge IDs come from (source, target), so a second edge between the
        # same pair of nodes takes the place of the first
        updated = list(edges)
        updated[index] = change.item
        return updated, [change.item.id]

    updated = [
        e.model_copy(update={"selected": change.selected}) if e.id == change.id else e
        for e in edges
    ]
    return updated, []


class FlowEditor:
    """Applies edits to a flow graph while keeping its invariants.

    The graph is owned by the caller and passed in by reference, so the
    editor and whoever renders the graph share one live structure.

    Example:
        >>> editor = FlowEditor()
        >>> a = editor.add_node("textNode", {"x": 0, "y": 0})
        >>> b = editor.add_node("textNode", {"x": 250, "y": 0})
        >>> editor.connect(Connection(source=a, target=b)).accepted
        True
    """

    def __init__(self, graph: FlowGraph | None = None) -> None:
        self.graph = graph if graph is not None else FlowGraph()

    def snapshot(self) -> FlowGraph:
        """Deep copy of the current graph, for validation and saving."""
        return self.graph.model_copy(deep=True)

    # --- nodes ---

    def add_node(
        self,
        kind: NodeKind | str = NodeKind.text_node,
        position: Position | Mapping[str, float] | None = None,
    ) -> str:
        """Insert a node with default data and return its new ID."""
        kind = NodeKind(kind)
        node_id = generate_node_id(kind.value, self.graph.node_ids())
        node = FlowNode(id=node_id, type=kind, position=position or Position())
        self.graph.nodes = [*self.graph.nodes, node]
        logger.debug("node_added", node_id=node_id, kind=kind.value)
        return node_id

    def update_node_data(self, node_id: str, partial: Mapping[str, Any]) -> MutationOutcome:
        """Shallow-merge ``partial`` into the node's data."""
        node = self.graph.get_node(node_id)
        if node is None:
            return self._node_not_found("update_node_data", node_id)

        data_model = NODE_DATA_MODELS[node.type]
        try:
            data = data_model.model_validate({**node.data.model_dump(), **partial})
        except ValidationError as exc:
            logger.warning(
                "node_data_rejected",
                node_id=node_id,
                error_count=exc.error_count(),
            )
            return MutationOutcome.rejected(
                FlowErrorKind.malformed_input,
                f"Invalid data for node: {node_id}",
            )

        updated = node.model_copy(update={"data": data})
        self.graph.nodes = [updated if n.id == node_id else n for n in self.graph.nodes]
        return MutationOutcome.done()

    def delete_node(self, node_id: str) -> MutationOutcome:
        """Remove a node and all of its edges. Deleting twice is a no-op."""
        if not self.graph.has_node(node_id):
            return self._node_not_found("delete_node", node_id)

        nodes, edges, removed = _remove_node(self.graph.nodes, self.graph.edges, node_id)
        self._commit(nodes, edges)
        logger.debug("node_deleted", node_id=node_id, removed_edges=removed)
        return MutationOutcome.done(removed_edge_ids=removed)

    # --- edges ---

    def connect(self, connection: Connection | Mapping[str, Any]) -> MutationOutcome:
        """Add an edge, replacing the edge already leaving the same source anchor."""
        if not isinstance(connection, Connection):
            connection = Connection.model_validate(connection)

        edges, outcome = self._connect(connection, self.graph.node_ids(), self.graph.edges)
        if outcome.accepted:
            self.graph.edges = edges
        return outcome

    def _connect(
        self,
        connection: Connection,
        node_ids: set[str],
        edges: list[FlowEdge],
    ) -> tuple[list[FlowEdge], MutationOutcome]:
        if connection.source == connection.target:
            logger.info("connection_rejected", reason="self_loop", source=connection.source)
            return edges, MutationOutcome.rejected(FlowErrorKind.self_loop, SELF_LOOP_REASON)

        if connection.source not in node_ids or connection.target not in node_ids:
            logger.info(
                "connection_rejected",
                reason="dangling_reference",
                source=connection.source,
                target=connection.target,
            )
            return edges, MutationOutcome.rejected(
                FlowErrorKind.dangling_reference,
                DANGLING_REFERENCE_REASON,
            )

        plan = propose_connection(connection, edges)
        if _id_taken(edges, plan[-1].item):
            logger.warning("duplicate_edge_rejected", edge_id=plan[-1].item.id)
            return edges, MutationOutcome.rejected(
                FlowErrorKind.duplicate_identity,
                f"Duplicate edge ID: {plan[-1].item.id}",
            )

        removed: list[str] = []
        for change in plan:
            edges, dropped = _apply_edge_change(edges, change)
            removed.extend(dropped)
        removed = list(dict.fromkeys(removed))

        edge = plan[-1].item
        if removed:
            logger.debug("edge_replaced", edge_id=edge.id, replaced=removed)
        return edges, MutationOutcome.done(edge=edge, removed_edge_ids=removed)

    # --- batches from the canvas ---

    def apply_node_changes(
        self,
        changes: Iterable[NodeChange | Mapping[str, Any]],
    ) -> list[MutationOutcome]:
        """Apply a batch of node changes as one update.

        Removals cascade to incident edges, the same as ``delete_node``.
        A replace under a new ID ends the old node the same way.
        Returns one outcome per change, in order.
        """
        nodes = list(self.graph.nodes)
        edges = list(self.graph.edges)
        outcomes: list[MutationOutcome] = []

        for change in changes:
            if isinstance(change, Mapping):
                change = _NODE_CHANGE.validate_python(change)

            if isinstance(change, NodeAddChange):
                if _index_of(nodes, change.item.id) is not None:
                    logger.warning("duplicate_node_rejected", node_id=change.item.id)
                    outcomes.append(MutationOutcome.rejected(
                        FlowErrorKind.duplicate_identity,
                        f"Duplicate node ID: {change.item.id}",
                    ))
                    continue
                nodes.append(change.item)
                outcomes.append(MutationOutcome.done())
                continue

            index = _index_of(nodes, change.id)
            if index is None:
                outcomes.append(self._node_not_found(change.type, change.id))
                continue

            if isinstance(change, NodeRemoveChange):
                nodes, edges, removed = _remove_node(nodes, edges, change.id)
                outcomes.append(MutationOutcome.done(removed_edge_ids=removed))
            elif isinstance(change, NodePositionChange):
                if change.position is not None:
                    nodes[index] = nodes[index].model_copy(update={"position": change.position})
                outcomes.append(MutationOutcome.done())
            elif isinstance(change, NodeSelectChange):
                nodes[index] = nodes[index].model_copy(update={"selected": change.selected})
                outcomes.append(MutationOutcome.done())
            elif isinstance(change, NodeDimensionsChange):
                if change.dimensions is not None:
                    nodes[index] = nodes[index].model_copy(update={"measured": change.dimensions})
                outcomes.append(MutationOutcome.done())
            elif isinstance(change, NodeReplaceChange):
                nodes, edges, outcome = _replace_node(nodes, edges, index, change.item)
                outcomes.append(outcome)

        self._commit(nodes, edges)
        return outcomes

    def apply_edge_changes(
        self,
        changes: Iterable[EdgeChange | Mapping[str, Any]],
    ) -> list[MutationOutcome]:
        """Apply a batch of edge changes as one update.

        Added and replacing edges go through the same checks as
        ``connect``, so the connection rule also holds for edges inserted
        directly.
        """
        node_ids = self.graph.node_ids()
        edges = list(self.graph.edges)
        outcomes: list[MutationOutcome] = []

        for change in changes:
            if isinstance(change, Mapping):
                change = _EDGE_CHANGE.validate_python(change)

            if isinstance(change, EdgeAddChange):
                edges, outcome = self._connect(_as_connection(change.item), node_ids, edges)
                outcomes.append(outcome)
                continue

            if _index_of(edges, change.id) is None:
                logger.info("edge_not_found", edge_id=change.id, operation=change.type)
                outcomes.append(MutationOutcome.rejected(
                    FlowErrorKind.not_found,
                    f"Edge not found: {change.id}",
                ))
                continue

            if isinstance(change, EdgeReplaceChange):
                # the replaced edge no longer holds its source anchor
                remaining = [e for e in edges if e.id != change.id]
                updated, outcome = self._connect(_as_connection(change.item), node_ids, remaining)
                if outcome.accepted:
                    edges = updated
                    outcome = MutationOutcome.done(
                        edge=outcome.edge,
                        removed_edge_ids=list(dict.fromkeys([change.id, *outcome.removed_edge_ids])),
                    )
                outcomes.append(outcome)
                continue

            edges, removed = _apply_edge_change(edges, change)
            outcomes.append(MutationOutcome.done(removed_edge_ids=removed))

        self.graph.edges = edges
        return outcomes

    # --- internals ---

    def _commit(self, nodes: list[FlowNode], edges: list[FlowEdge]) -> None:
        self.graph.nodes = nodes
        self.graph.edges = edges

    def _node_not_found(self, operation: str, node_id: str) -> MutationOutcome:
        logger.info("node_not_found", node_id=node_id, operation=operation)
        return MutationOutcome.rejected(FlowErrorKind.not_found, f"Node not found: {node_id}")
