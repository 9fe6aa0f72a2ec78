import pytest
from fastapi.testclient import TestClient

from chatflow_server import config, flow_db
from chatflow_server.app import app


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point flow storage at a fresh SQLite file."""
    path = tmp_path / "flows.db"
    monkeypatch.setattr(flow_db, "FLOW_DB_PATH", path)
    monkeypatch.setattr(config, "REQUIRE_SINGLE_ENTRY_POINT", True)
    return path


@pytest.fixture
def app_client(db_path):
    """TestClient with the app started against a temporary database."""
    with TestClient(app) as client:
        yield client
