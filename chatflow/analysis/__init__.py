"""Analysis of flow graphs."""

from chatflow.analysis.flow_validator import validate_flow, validate_graph

__all__ = [
    "validate_flow",
    "validate_graph",
]
