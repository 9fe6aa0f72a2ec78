"""SQLite storage for flows.

Each flow row keeps its nodes and edges as opaque JSON. The
``flow_nodes`` table mirrors every node as its own row so nodes can be
queried without decoding whole flows; it is rewritten whenever a flow
is stored.
"""

import json
import sqlite3

from chatflow.models.flow import Flow, FlowNodeRecord
from chatflow.utils.identifiers import generate_record_id
from chatflow_server.config import FLOW_DB_PATH


def _connect() -> sqlite3.Connection:
    FLOW_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(FLOW_DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("pragma foreign_keys = on")
    return conn


def init_db() -> None:
    with _connect() as conn:
        conn.execute(
            """
            create table if not exists flows (
                flow_id text primary key,
                name text not null,
                nodes_json text not null default '[]',
                edges_json text not null default '[]',
                created_at text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            """
            create table if not exists flow_nodes (
                record_id text primary key,
                flow_id text not null references flows(flow_id) on delete cascade,
                node_id text not null,
                type text not null,
                data_json text not null,
                position_json text not null
            )
            """
        )
        conn.execute(
            "create index if not exists idx_flow_nodes_flow_id on flow_nodes(flow_id)"
        )
        conn.commit()


def _nodes_json(flow: Flow) -> str:
    return json.dumps([n.model_dump(mode="json", by_alias=True) for n in flow.nodes])


def _edges_json(flow: Flow) -> str:
    return json.dumps([e.model_dump(mode="json", by_alias=True) for e in flow.edges])


def _row_to_flow(row: sqlite3.Row) -> Flow:
    return Flow(
        id=row["flow_id"],
        name=row["name"],
        nodes=json.loads(row["nodes_json"]),
        edges=json.loads(row["edges_json"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _replace_flow_nodes(conn: sqlite3.Connection, flow: Flow) -> None:
    conn.execute("delete from flow_nodes where flow_id = ?", (flow.id,))
    conn.executemany(
        """
        insert into flow_nodes (
            record_id,
            flow_id,
            node_id,
            type,
            data_json,
            position_json
        )
        values (?, ?, ?, ?, ?, ?)
        """,
        [
            (
                generate_record_id(),
                flow.id,
                node.id,
                node.type.value,
                node.data.model_dump_json(),
                node.position.model_dump_json(),
            )
            for node in flow.nodes
        ],
    )


def insert_flow(flow: Flow) -> None:
    """insert a new flow and its node rows."""
    with _connect() as conn:
        conn.execute(
            """
            insert into flows (flow_id, name, nodes_json, edges_json, created_at, updated_at)
            values (?, ?, ?, ?, ?, ?)
            """,
            (
                flow.id,
                flow.name,
                _nodes_json(flow),
                _edges_json(flow),
                flow.created_at,
                flow.updated_at,
            ),
        )
        _replace_flow_nodes(conn, flow)
        conn.commit()


def update_flow(flow: Flow) -> None:
    """overwrite a stored flow; created_at is left untouched."""
    with _connect() as conn:
        conn.execute(
            """
            update flows
            set name = ?, nodes_json = ?, edges_json = ?, updated_at = ?
            where flow_id = ?
            """,
            (
                flow.name,
                _nodes_json(flow),
                _edges_json(flow),
                flow.updated_at,
                flow.id,
            ),
        )
        _replace_flow_nodes(conn, flow)
        conn.commit()


def get_flow(flow_id: str) -> Flow | None:
    with _connect() as conn:
        row = conn.execute(
            "select * from flows where flow_id = ?",
            (flow_id,),
        ).fetchone()
    if not row:
        return None
    return _row_to_flow(row)


def list_flows() -> list[Flow]:
    with _connect() as conn:
        rows = conn.execute(
            "select * from flows order by updated_at desc"
        ).fetchall()
    return [_row_to_flow(row) for row in rows]


def list_flow_nodes(flow_id: str) -> list[FlowNodeRecord]:
    with _connect() as conn:
        rows = conn.execute(
            "select * from flow_nodes where flow_id = ? order by rowid asc",
            (flow_id,),
        ).fetchall()
    return [
        FlowNodeRecord(
            id=row["record_id"],
            flow_id=row["flow_id"],
            node_id=row["node_id"],
            type=row["type"],
            data=json.loads(row["data_json"]),
            position=json.loads(row["position_json"]),
        )
        for row in rows
    ]


def delete_flow(flow_id: str) -> None:
    with _connect() as conn:
        conn.execute("delete from flow_nodes where flow_id = ?", (flow_id,))
        conn.execute("delete from flows where flow_id = ?", (flow_id,))
        conn.commit()
