"""SDK for talking to the flow server."""

from chatflow.sdk.flow_client import (
    FlowClient,
    FlowClientError,
    FlowNotFoundError,
    FlowSaveError,
    FlowValidationError,
)

__all__ = [
    "FlowClient",
    "FlowClientError",
    "FlowNotFoundError",
    "FlowSaveError",
    "FlowValidationError",
]
