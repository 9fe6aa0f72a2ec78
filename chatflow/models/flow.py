"""Data models for persisted flows.

A flow is a named, timestamped snapshot of a flow graph. The storage
layer keeps nodes and edges as opaque JSON collections and, separately,
one normalized row per node.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chatflow.models.flow_graph import FlowEdge, FlowGraph, FlowNode, Position


class Flow(BaseModel):
    """a stored flow."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    def to_graph(self) -> FlowGraph:
        """Return an editable copy of the stored graph."""
        return FlowGraph(
            nodes=[n.model_copy(deep=True) for n in self.nodes],
            edges=[e.model_copy(deep=True) for e in self.edges],
        )


class FlowCreate(BaseModel):
    """Request model for saving a new flow."""

    name: str
    nodes: list[FlowNode] = Field(default_factory=list)
    edges: list[FlowEdge] = Field(default_factory=list)

    @classmethod
    def from_graph(cls, name: str, graph: FlowGraph) -> "FlowCreate":
        return cls(
            name=name,
            nodes=[n.model_copy(deep=True) for n in graph.nodes],
            edges=[e.model_copy(deep=True) for e in graph.edges],
        )


class FlowUpdate(BaseModel):
    """Request model for updating a stored flow. Omitted fields are kept."""

    name: str | None = None
    nodes: list[FlowNode] | None = None
    edges: list[FlowEdge] | None = None


class FlowNodeRecord(BaseModel):
    """One node of a stored flow, kept as its own row for querying."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    flow_id: str = Field(alias="flowId")
    node_id: str = Field(alias="nodeId")
    type: str
    data: dict[str, Any]
    position: Position
