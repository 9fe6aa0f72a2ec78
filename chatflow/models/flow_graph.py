"""Data model for the in-memory flow graph.

A flow is a directed graph of conversation nodes. Each node exposes one
source anchor and one target anchor; edges attach to anchors, and a
source anchor may have at most one outgoing edge.

The JSON shape follows the canvas client (camelCase handles), while
Python code uses snake_case attributes through field aliases.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chatflow.utils.identifiers import edge_id


class NodeKind(str, Enum):
    """Kinds of nodes that can be placed on the canvas."""

    text_node = "textNode"


class Position(BaseModel):
    """canvas coordinates of a node."""

    x: float = 0.0
    y: float = 0.0


class Dimensions(BaseModel):
    """rendered size of a node, as measured by the canvas."""

    width: float
    height: float


class TextNodeData(BaseModel):
    """payload of a text message node."""

    # the settings panel may merge arbitrary keys into node data
    model_config = ConfigDict(extra="allow")

    content: str = ""


# one data variant per node kind; widen to a Union as kinds are added
NodeData = TextNodeData

NODE_DATA_MODELS: dict[NodeKind, type[BaseModel]] = {
    NodeKind.text_node: TextNodeData,
}


class FlowNode(BaseModel):
    """a node in the flow graph."""

    id: str
    type: NodeKind = NodeKind.text_node
    position: Position
    data: NodeData
    selected: bool = False
    measured: Dimensions | None = None

    @model_validator(mode="before")
    @classmethod
    def select_data_model(cls, values: Any) -> Any:
        """Parse ``data`` with the model registered for the node kind."""
        if not isinstance(values, dict):
            return values

        try:
            kind = NodeKind(values.get("type", NodeKind.text_node))
        except ValueError:
            # unknown kind is reported by the ``type`` field itself
            return values

        data_model = NODE_DATA_MODELS[kind]
        data = values.get("data")
        if data is None:
            return {**values, "data": data_model()}
        if isinstance(data, dict):
            return {**values, "data": data_model.model_validate(data)}
        return values


class FlowEdge(BaseModel):
    """a directed edge between two node anchors."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")
    selected: bool = False

    @model_validator(mode="before")
    @classmethod
    def derive_id(cls, values: Any) -> Any:
        """Fill in the ID from the endpoints when the caller omits it."""
        if (
            isinstance(values, dict)
            and not values.get("id")
            and isinstance(values.get("source"), str)
            and isinstance(values.get("target"), str)
        ):
            return {**values, "id": edge_id(values["source"], values["target"])}
        return values


class Connection(BaseModel):
    """An edge candidate produced by dragging from one anchor to another."""

    model_config = ConfigDict(populate_by_name=True)

    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")

    def to_edge(self) -> FlowEdge:
        return FlowEdge(
            id=edge_id(self.source, self.target),
            source=self.source,
            target=self.target,
            source_handle=self.source_handle,
            target_handle=self.target_handle,
        )


class FlowGraph(BaseModel):
    """Nodes and edges of a flow being edited.

    Only ``FlowEditor`` writes to a graph; everything here is a query.
    """

    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)

    def node_map(self) -> dict[str, FlowNode]:
        return {n.id: n for n in self.nodes}

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def has_node(self, node_id: str) -> bool:
        return any(n.id == node_id for n in self.nodes)

    def get_node(self, node_id: str) -> FlowNode | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def get_edge(self, edge_id: str) -> FlowEdge | None:
        return next((e for e in self.edges if e.id == edge_id), None)

    def incident_edges(self, node_id: str) -> list[FlowEdge]:
        """Edges that start or end at ``node_id``."""
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

    def incoming_edges(self, node_id: str) -> list[FlowEdge]:
        return [e for e in self.edges if e.target == node_id]

    def outgoing_edges(self, source: str, source_handle: str | None = None) -> list[FlowEdge]:
        """Edges leaving the anchor ``(source, source_handle)``.

        Holds at most one edge while the single outgoing anchor rule is kept.
        """
        return [
            e for e in self.edges
            if e.source == source and e.source_handle == source_handle
        ]

    def entry_points(self) -> list[FlowNode]:
        """Nodes without incoming edges, in node order."""
        targets = {e.target for e in self.edges}
        return [n for n in self.nodes if n.id not in targets]

    def disconnected_nodes(self) -> list[FlowNode]:
        """Nodes with neither incoming nor outgoing edges."""
        connected = {e.source for e in self.edges} | {e.target for e in self.edges}
        return [n for n in self.nodes if n.id not in connected]
