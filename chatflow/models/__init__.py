"""Core data models for chatflow."""

from chatflow.models.changes import (
    EdgeAddChange,
    EdgeChange,
    EdgeRemoveChange,
    EdgeReplaceChange,
    EdgeSelectChange,
    NodeAddChange,
    NodeChange,
    NodeDimensionsChange,
    NodePositionChange,
    NodeRemoveChange,
    NodeReplaceChange,
    NodeSelectChange,
)
from chatflow.models.flow import (
    Flow,
    FlowCreate,
    FlowNodeRecord,
    FlowUpdate,
)
from chatflow.models.flow_graph import (
    NODE_DATA_MODELS,
    Connection,
    Dimensions,
    FlowEdge,
    FlowGraph,
    FlowNode,
    NodeData,
    NodeKind,
    Position,
    TextNodeData,
)
from chatflow.models.results import (
    FlowErrorKind,
    MutationOutcome,
    ValidationResult,
)

__all__ = [
    # Graph
    "NODE_DATA_MODELS",
    "Connection",
    "Dimensions",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodeData",
    "NodeKind",
    "Position",
    "TextNodeData",
    # Canvas changes
    "EdgeAddChange",
    "EdgeChange",
    "EdgeRemoveChange",
    "EdgeReplaceChange",
    "EdgeSelectChange",
    "NodeAddChange",
    "NodeChange",
    "NodeDimensionsChange",
    "NodePositionChange",
    "NodeRemoveChange",
    "NodeReplaceChange",
    "NodeSelectChange",
    # Persisted flows
    "Flow",
    "FlowCreate",
    "FlowNodeRecord",
    "FlowUpdate",
    # Results
    "FlowErrorKind",
    "MutationOutcome",
    "ValidationResult",
]
