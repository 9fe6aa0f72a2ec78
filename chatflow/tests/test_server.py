"""Tests for the flow server routes."""

import sqlite3

from chatflow_server import config, flow_routes


def _node(node_id: str, content: str = "", x: float = 0) -> dict:
    return {
        "id": node_id,
        "type": "textNode",
        "position": {"x": x, "y": 0},
        "data": {"content": content},
    }


def _edge(source: str, target: str) -> dict:
    return {"id": f"{source}-{target}", "source": source, "target": target}


def _create(client, name="Support Bot", nodes=None, edges=None) -> dict:
    response = client.post("/api/flows", json={
        "name": name,
        "nodes": nodes if nodes is not None else [_node("a", "Hi"), _node("b", "Bye", 250)],
        "edges": edges if edges is not None else [_edge("a", "b")],
    })
    assert response.status_code == 201
    return response.json()


class TestHealth:
    def test_root(self, app_client, db_path):
        response = app_client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["flow_db"] == str(db_path)
        assert body["endpoints"]["validate"] == "/api/flows/validate"


class TestValidateRoute:
    """Test POST /api/flows/validate."""

    def test_valid_flow(self, app_client):
        response = app_client.post("/api/flows/validate", json={
            "nodes": [_node("a"), _node("b")],
            "edges": [_edge("a", "b")],
        })
        assert response.status_code == 200
        assert response.json() == {"valid": True, "message": "Flow is valid", "disconnectedNodes": 0}

    def test_empty_flow(self, app_client):
        response = app_client.post("/api/flows/validate", json={"nodes": [], "edges": []})
        assert response.status_code == 200

    def test_multiple_entry_points(self, app_client):
        response = app_client.post("/api/flows/validate", json={
            "nodes": [_node("a"), _node("b")],
            "edges": [],
        })
        assert response.status_code == 400
        body = response.json()
        assert body["valid"] is False
        assert body["message"] == "Invalid flow structure"
        assert body["kind"] == "multiple_entry_points"
        assert body["error"] == "Cannot save Flow: more than one node has empty target handles"

    def test_self_loop(self, app_client):
        response = app_client.post("/api/flows/validate", json={
            "nodes": [_node("a"), _node("b")],
            "edges": [_edge("a", "a")],
        })
        assert response.status_code == 400
        assert response.json()["kind"] == "self_loop"

    def test_dangling_edge(self, app_client):
        response = app_client.post("/api/flows/validate", json={
            "nodes": [_node("a")],
            "edges": [_edge("a", "ghost")],
        })
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid flow structure: edge references non-existent node"

    def test_non_array_body_is_400(self, app_client):
        """A wrong shape is a validation failure, not a request parsing error."""
        response = app_client.post("/api/flows/validate", json={"nodes": {"a": 1}, "edges": []})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid flow structure: nodes and edges must be arrays"

    def test_body_that_is_not_an_object_is_400(self, app_client):
        for body in ([], "flow", 3):
            response = app_client.post("/api/flows/validate", json=body)
            assert response.status_code == 400
            assert response.json()["kind"] == "malformed_input"

    def test_empty_body_is_400(self, app_client):
        response = app_client.post("/api/flows/validate")
        assert response.status_code == 400
        assert response.json()["kind"] == "malformed_input"

    def test_missing_fields_are_400(self, app_client):
        response = app_client.post("/api/flows/validate", json={"nodes": "oops"})
        assert response.status_code == 400
        assert response.json()["kind"] == "malformed_input"

    def test_entry_point_policy_can_be_disabled(self, app_client, monkeypatch):
        monkeypatch.setattr(config, "REQUIRE_SINGLE_ENTRY_POINT", False)
        response = app_client.post("/api/flows/validate", json={
            "nodes": [_node("a"), _node("b")],
            "edges": [],
        })
        assert response.status_code == 200
        assert response.json()["disconnectedNodes"] == 2


class TestFlowCrud:
    """Test flow storage routes."""

    def test_create_flow(self, app_client):
        body = _create(app_client)
        assert body["id"]
        assert body["name"] == "Support Bot"
        assert body["createdAt"] == body["updatedAt"]
        assert [n["id"] for n in body["nodes"]] == ["a", "b"]
        assert body["edges"][0]["sourceHandle"] is None

    def test_get_flow_round_trip(self, app_client):
        """A stored flow reads back with the same nodes and edges."""
        created = _create(app_client)
        response = app_client.get(f"/api/flows/{created['id']}")

        assert response.status_code == 200
        fetched = response.json()
        assert fetched == created
        assert fetched["nodes"][0]["data"] == {"content": "Hi"}
        assert fetched["nodes"][1]["position"] == {"x": 250, "y": 0}

    def test_get_missing_flow(self, app_client):
        response = app_client.get("/api/flows/nope")
        assert response.status_code == 404
        assert response.json()["detail"] == "Flow not found: nope"

    def test_list_flows_newest_first(self, app_client):
        first = _create(app_client, name="First")
        second = _create(app_client, name="Second")
        app_client.put(f"/api/flows/{first['id']}", json={"name": "First, edited"})

        response = app_client.get("/api/flows")
        assert response.status_code == 200
        assert [f["id"] for f in response.json()] == [first["id"], second["id"]]

    def test_list_flows_empty(self, app_client):
        assert app_client.get("/api/flows").json() == []

    def test_update_is_partial(self, app_client):
        """Fields left out of the update keep their stored values."""
        created = _create(app_client)
        response = app_client.put(f"/api/flows/{created['id']}", json={"name": "Renamed"})

        assert response.status_code == 200
        updated = response.json()
        assert updated["name"] == "Renamed"
        assert updated["nodes"] == created["nodes"]
        assert updated["edges"] == created["edges"]
        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"] >= created["updatedAt"]

    def test_update_replaces_graph(self, app_client):
        created = _create(app_client)
        response = app_client.put(f"/api/flows/{created['id']}", json={
            "nodes": [_node("x", "Only")],
            "edges": [],
        })
        assert response.json()["nodes"][0]["id"] == "x"

        rows = app_client.get(f"/api/flows/{created['id']}/nodes").json()
        assert [r["nodeId"] for r in rows] == ["x"]

    def test_update_missing_flow(self, app_client):
        response = app_client.put("/api/flows/nope", json={"name": "x"})
        assert response.status_code == 404

    def test_create_rejects_bad_schema(self, app_client):
        response = app_client.post("/api/flows", json={"nodes": []})
        assert response.status_code == 422

    def test_delete_flow(self, app_client):
        created = _create(app_client)
        response = app_client.delete(f"/api/flows/{created['id']}")

        assert response.status_code == 204
        assert app_client.get(f"/api/flows/{created['id']}").status_code == 404
        assert app_client.delete(f"/api/flows/{created['id']}").status_code == 404


class TestFlowNodeRows:
    """Test the per-node rows kept beside each flow."""

    def test_node_rows_match_flow(self, app_client):
        created = _create(app_client)
        response = app_client.get(f"/api/flows/{created['id']}/nodes")

        assert response.status_code == 200
        rows = response.json()
        assert [r["nodeId"] for r in rows] == ["a", "b"]
        assert all(r["flowId"] == created["id"] for r in rows)
        assert rows[0]["type"] == "textNode"
        assert rows[0]["data"] == {"content": "Hi"}
        assert rows[1]["position"] == {"x": 250, "y": 0}

    def test_rows_removed_with_flow(self, app_client, db_path):
        created = _create(app_client)
        app_client.delete(f"/api/flows/{created['id']}")

        conn = sqlite3.connect(db_path)
        try:
            count = conn.execute("select count(*) from flow_nodes").fetchone()[0]
        finally:
            conn.close()
        assert count == 0

    def test_rows_for_missing_flow(self, app_client):
        assert app_client.get("/api/flows/nope/nodes").status_code == 404


class TestStorageFailure:
    """Storage errors surface as 500 and nothing is reported as saved."""

    def test_create_failure(self, app_client, monkeypatch):
        def fail(flow):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(flow_routes, "db_insert_flow", fail)
        response = app_client.post("/api/flows", json={"name": "Bot", "nodes": [], "edges": []})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create flow"
        assert app_client.get("/api/flows").json() == []

    def test_update_failure(self, app_client, monkeypatch):
        created = _create(app_client)

        def fail(flow):
            raise sqlite3.OperationalError("disk I/O error")

        monkeypatch.setattr(flow_routes, "db_update_flow", fail)
        response = app_client.put(f"/api/flows/{created['id']}", json={"name": "Renamed"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update flow"
        assert app_client.get(f"/api/flows/{created['id']}").json()["name"] == "Support Bot"
