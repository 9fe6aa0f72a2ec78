"""API routes for flow validation and storage."""

import sqlite3
from typing import Any

import structlog
from fastapi import APIRouter, Body, HTTPException, Response
from fastapi.responses import JSONResponse

from chatflow.analysis.flow_validator import validate_flow
from chatflow.models.flow import Flow, FlowCreate, FlowNodeRecord, FlowUpdate
from chatflow.utils.identifiers import generate_flow_id, utc_timestamp
from chatflow_server import config
from chatflow_server.flow_db import (
    delete_flow as db_delete_flow,
    get_flow as db_get_flow,
    insert_flow as db_insert_flow,
    list_flow_nodes as db_list_flow_nodes,
    list_flows as db_list_flows,
    update_flow as db_update_flow,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


def _require_flow(flow_id: str) -> Flow:
    flow = db_get_flow(flow_id)
    if not flow:
        raise HTTPException(status_code=404, detail=f"Flow not found: {flow_id}")
    return flow


@router.post("/flows/validate")
def validate(body: Any = Body(None)):
    """check a flow before it is saved.

    The body is left untyped so a wrong shape is reported by the validator
    instead of being rejected by request parsing.
    """
    if not isinstance(body, dict):
        body = {}
    result = validate_flow(
        body.get("nodes"),
        body.get("edges"),
        single_entry_point=config.REQUIRE_SINGLE_ENTRY_POINT,
    )
    if not result.valid:
        return JSONResponse(
            status_code=400,
            content={
                "valid": False,
                "message": "Invalid flow structure",
                "error": result.error,
                "kind": result.kind.value,
            },
        )
    return {
        "valid": True,
        "message": "Flow is valid",
        "disconnectedNodes": result.disconnected_nodes,
    }


@router.get("/flows")
def list_flows() -> list[Flow]:
    """list all stored flows, most recently updated first."""
    return db_list_flows()


@router.get("/flows/{flow_id}")
def get_flow(flow_id: str) -> Flow:
    """get a specific flow."""
    return _require_flow(flow_id)


@router.get("/flows/{flow_id}/nodes")
def list_flow_nodes(flow_id: str) -> list[FlowNodeRecord]:
    """get the node rows stored for a flow."""
    _require_flow(flow_id)
    return db_list_flow_nodes(flow_id)


@router.post("/flows", status_code=201)
def create_flow(request: FlowCreate) -> Flow:
    """store a new flow."""
    now = utc_timestamp()
    flow = Flow(
        id=generate_flow_id(),
        name=request.name,
        nodes=request.nodes,
        edges=request.edges,
        created_at=now,
        updated_at=now,
    )
    try:
        db_insert_flow(flow)
    except sqlite3.Error as exc:
        logger.error("flow_persist_failed", operation="create", error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to create flow") from exc

    logger.info("flow_saved", flow_id=flow.id, nodes=len(flow.nodes), edges=len(flow.edges))
    return flow


@router.put("/flows/{flow_id}")
def update_flow(flow_id: str, request: FlowUpdate) -> Flow:
    """update a stored flow. Fields left out of the request are kept."""
    existing = _require_flow(flow_id)
    flow = Flow(
        id=flow_id,
        name=request.name if request.name is not None else existing.name,
        nodes=request.nodes if request.nodes is not None else existing.nodes,
        edges=request.edges if request.edges is not None else existing.edges,
        created_at=existing.created_at,
        updated_at=utc_timestamp(),
    )
    try:
        db_update_flow(flow)
    except sqlite3.Error as exc:
        logger.error("flow_persist_failed", operation="update", flow_id=flow_id, error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to update flow") from exc

    logger.info("flow_saved", flow_id=flow.id, nodes=len(flow.nodes), edges=len(flow.edges))
    return flow


@router.delete("/flows/{flow_id}", status_code=204)
def delete_flow(flow_id: str) -> Response:
    """delete a flow and its node rows."""
    _require_flow(flow_id)
    db_delete_flow(flow_id)
    return Response(status_code=204)
