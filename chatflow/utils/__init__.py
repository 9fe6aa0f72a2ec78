"""Utility functions for chatflow."""

from chatflow.utils.identifiers import (
    edge_id,
    generate_flow_id,
    generate_node_id,
    generate_record_id,
    utc_timestamp,
)

__all__ = [
    "edge_id",
    "generate_flow_id",
    "generate_node_id",
    "generate_record_id",
    "utc_timestamp",
]
