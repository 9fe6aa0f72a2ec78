"""Chatflow - build, validate and store chatbot conversation flows."""

from chatflow.analysis.flow_validator import validate_flow, validate_graph
from chatflow.editing.connections import propose_connection
from chatflow.editing.editor import FlowEditor
from chatflow.models.flow import Flow, FlowCreate, FlowUpdate
from chatflow.models.flow_graph import (
    Connection,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeKind,
    Position,
    TextNodeData,
)
from chatflow.models.results import FlowErrorKind, MutationOutcome, ValidationResult
from chatflow.sdk.flow_client import FlowClient

__all__ = [
    # Graph model
    "Connection",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodeKind",
    "Position",
    "TextNodeData",
    # Persisted flows
    "Flow",
    "FlowCreate",
    "FlowUpdate",
    # Results
    "FlowErrorKind",
    "MutationOutcome",
    "ValidationResult",
    # High-level APIs
    "FlowEditor",
    "FlowClient",
    "propose_connection",
    "validate_flow",
    "validate_graph",
]
