"""Result values returned by the validator and the flow editor.

Rejections are reported as values carrying a kind and a human readable
reason; they are never raised.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from chatflow.models.flow_graph import FlowEdge


class FlowErrorKind(str, Enum):
    """Reasons a flow or a mutation can be rejected."""

    malformed_input = "malformed_input"
    duplicate_identity = "duplicate_identity"
    dangling_reference = "dangling_reference"
    self_loop = "self_loop"
    multiple_entry_points = "multiple_entry_points"
    not_found = "not_found"


class ValidationResult(BaseModel):
    """outcome of validating a full flow snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    error: str | None = None
    kind: FlowErrorKind | None = None
    # soft check, never makes a flow invalid
    disconnected_nodes: int = Field(default=0, alias="disconnectedNodes")

    @classmethod
    def ok(cls, disconnected_nodes: int = 0) -> "ValidationResult":
        return cls(valid=True, disconnected_nodes=disconnected_nodes)

    @classmethod
    def invalid(cls, kind: FlowErrorKind, error: str) -> "ValidationResult":
        return cls(valid=False, kind=kind, error=error)


class MutationOutcome(BaseModel):
    """outcome of a single editor operation."""

    accepted: bool
    kind: FlowErrorKind | None = None
    reason: str | None = None
    edge: FlowEdge | None = None  # edge created by a connection
    removed_edge_ids: list[str] = Field(default_factory=list)

    @classmethod
    def done(
        cls,
        edge: FlowEdge | None = None,
        removed_edge_ids: list[str] | None = None,
    ) -> "MutationOutcome":
        return cls(accepted=True, edge=edge, removed_edge_ids=removed_edge_ids or [])

    @classmethod
    def rejected(cls, kind: FlowErrorKind, reason: str) -> "MutationOutcome":
        return cls(accepted=False, kind=kind, reason=reason)
