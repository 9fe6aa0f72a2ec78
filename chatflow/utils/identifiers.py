"""ID generation and timestamp utilities."""

import time
import uuid
from collections.abc import Container
from datetime import datetime, timezone


def generate_flow_id() -> str:
    """Generate a unique flow ID (UUID4)."""
    return str(uuid.uuid4())


def generate_record_id() -> str:
    """Generate a unique ID for a normalized node row (UUID4)."""
    return str(uuid.uuid4())


def generate_node_id(kind: str, existing: Container[str] = ()) -> str:
    """Generate a node ID of the form ``{kind}-{epoch_ms}``.

    Two nodes dropped within the same millisecond would collide, so a
    numeric suffix is appended until the ID is not in ``existing``.
    """
    base_id = f"{kind}-{int(time.time() * 1000)}"
    node_id = base_id
    suffix = 1
    while node_id in existing:
        node_id = f"{base_id}-{suffix}"
        suffix += 1
    return node_id


def edge_id(source: str, target: str) -> str:
    """Derive an edge ID from its endpoints.

    Anchors are not part of the ID, so there is at most one edge per
    ordered pair of nodes.
    """
    return f"{source}-{target}"


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
