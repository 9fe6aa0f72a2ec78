"""Interactive editing of flow graphs."""

from chatflow.editing.connections import propose_connection
from chatflow.editing.editor import FlowEditor

__all__ = [
    "FlowEditor",
    "propose_connection",
]
