"""HTTP client for the flow server.

Saving a flow is two calls: validate, then persist. ``FlowClient.save``
runs both and only persists when validation passes:

    client = FlowClient("http://localhost:5000")
    flow = client.save(editor.snapshot(), name="Support Bot")
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from chatflow.models.flow import Flow, FlowCreate, FlowUpdate
from chatflow.models.flow_graph import FlowEdge, FlowGraph, FlowNode
from chatflow.models.results import ValidationResult

logger = structlog.get_logger(__name__)


class FlowClientError(Exception):
    """Exception raised when a request to the flow server fails."""
    pass


class FlowNotFoundError(FlowClientError):
    """The requested flow does not exist on the server."""
    pass


class FlowValidationError(FlowClientError):
    """The server rejected the flow; nothing was saved."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.error or "Cannot save Flow")
        self.result = result


class FlowSaveError(FlowClientError):
    """The flow passed validation but could not be persisted."""
    pass


def _dump_nodes(nodes: Sequence[FlowNode]) -> list[dict]:
    return [n.model_dump(mode="json", by_alias=True) for n in nodes]


def _dump_edges(edges: Sequence[FlowEdge]) -> list[dict]:
    return [e.model_dump(mode="json", by_alias=True) for e in edges]


class FlowClient:
    """Validate and store flows on a flow server."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the flow server
            timeout: HTTP request timeout in seconds
            client: Optional client to send requests through instead of
                opening one per request (e.g. a FastAPI TestClient)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}/api{path}"
        try:
            if self._client is not None:
                return self._client.request(method, url, **kwargs)
            with httpx.Client(timeout=self.timeout) as client:
                return client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise FlowClientError(
                f"Failed to connect to server at {self.base_url}: {e}"
            ) from e

    def _check(self, response: httpx.Response, flow_id: str | None = None) -> None:
        if response.status_code == 404 and flow_id is not None:
            raise FlowNotFoundError(f"Flow not found: {flow_id}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FlowClientError(str(e)) from e

    # --- validation ---

    def validate(
        self,
        nodes: Sequence[FlowNode],
        edges: Sequence[FlowEdge],
    ) -> ValidationResult:
        """Ask the server whether a flow may be saved."""
        response = self._request(
            "POST",
            "/flows/validate",
            json={"nodes": _dump_nodes(nodes), "edges": _dump_edges(edges)},
        )
        # a rejected flow comes back as 400 with a validation body
        if response.status_code == 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("valid") is False:
                return ValidationResult.model_validate(body)
        self._check(response)
        return ValidationResult.model_validate(response.json())

    # --- flows ---

    def list_flows(self) -> list[Flow]:
        response = self._request("GET", "/flows")
        self._check(response)
        return [Flow.model_validate(item) for item in response.json()]

    def get_flow(self, flow_id: str) -> Flow:
        response = self._request("GET", f"/flows/{flow_id}")
        self._check(response, flow_id)
        return Flow.model_validate(response.json())

    def create_flow(self, flow: FlowCreate) -> Flow:
        response = self._request("POST", "/flows", json=flow.model_dump(mode="json", by_alias=True))
        self._check(response)
        return Flow.model_validate(response.json())

    def update_flow(self, flow_id: str, update: FlowUpdate) -> Flow:
        response = self._request(
            "PUT",
            f"/flows/{flow_id}",
            json=update.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        self._check(response, flow_id)
        return Flow.model_validate(response.json())

    def delete_flow(self, flow_id: str) -> None:
        response = self._request("DELETE", f"/flows/{flow_id}")
        self._check(response, flow_id)

    def save(
        self,
        graph: FlowGraph,
        name: str = "Chatbot Flow",
        flow_id: str | None = None,
    ) -> Flow:
        """Validate ``graph`` and, only if it is valid, store it.

        Creates a new flow, or replaces the graph of ``flow_id`` when given.

        Raises:
            FlowValidationError: the flow is invalid; nothing was written.
            FlowSaveError: validation passed but storing failed. The graph
                is still unsaved.
        """
        result = self.validate(graph.nodes, graph.edges)
        if not result.valid:
            logger.info("flow_save_rejected", reason=result.error, kind=result.kind)
            raise FlowValidationError(result)

        try:
            if flow_id is None:
                flow = self.create_flow(FlowCreate.from_graph(name, graph))
            else:
                flow = self.update_flow(
                    flow_id,
                    FlowUpdate(name=name, nodes=graph.nodes, edges=graph.edges),
                )
        except FlowClientError as e:
            logger.error("flow_persist_failed", flow_id=flow_id, error=str(e))
            raise FlowSaveError(f"Failed to save flow: {e}") from e

        logger.info("flow_saved", flow_id=flow.id, nodes=len(flow.nodes), edges=len(flow.edges))
        return flow
