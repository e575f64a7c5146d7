"""Tests de los endpoints HTTP (salud, consulta, estadísticas)."""

import json
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from common.config import Settings
from relay_api.main import create_app
from relay_api.runtime import RelayRuntime

from conftest import T1_WIRE, UPDATE_MESSAGE, RecordingStore, wait_until


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'relay.db'}",
        readings_table="tank_readings",
        host="127.0.0.1",
        port=3000,
        log_level="INFO",
    )


# =============================================================================
# SALUD
# =============================================================================

class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"status": "okay"}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_ready(self, client):
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_not_ready_when_store_unreachable(self):
        runtime = RelayRuntime.build(RecordingStore(healthy=False))
        with TestClient(create_app(runtime=runtime)) as client:
            response = client.get("/ready")
        assert response.status_code == 503


# =============================================================================
# CONSULTA Y ESTADÍSTICAS
# =============================================================================

class TestQueries:

    def test_list_tanks(self, client, store):
        store.insert_many(UPDATE_MESSAGE["tanks_info"])

        response = client.get("/tanks")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["tank_id"] == "T1"
        assert body[0]["current_level"] == 80
        assert body[0]["refilling"] is False

    def test_stats(self, client, runtime):
        with client.websocket_connect("/tanks/T1"):
            wait_until(lambda: runtime.registry.counts()["tank_subscribers"] == 1)

            body = client.get("/stats").json()

        assert body["connections"] == {
            "tanks": 1,
            "tank_subscribers": 1,
            "admin_subscribers": 0,
            "controller_connected": False,
        }
        assert body["batches_received"] == 0
        assert body["delivery_rate"] == 1.0


# =============================================================================
# APLICACIÓN COMPLETA SOBRE SQLITE
# =============================================================================

class TestSqlBackedApp:

    def test_lifespan_builds_sql_runtime(self, settings):
        app = create_app(settings=settings)

        with TestClient(app) as client:
            assert client.get("/ready").json() == {"status": "ready"}
            assert client.get("/tanks").json() == []

    def test_readings_are_persisted_and_listed(self, settings):
        app = create_app(settings=settings)

        with TestClient(app) as client:
            with client.websocket_connect("/admin") as admin_ws, client.websocket_connect("/iot") as iot_ws:
                runtime = app.state.runtime
                wait_until(lambda: runtime.registry.counts()["admin_subscribers"] == 1
                           and runtime.registry.counts()["controller_connected"])

                iot_ws.send_text(json.dumps(UPDATE_MESSAGE))
                assert admin_ws.receive_text() == T1_WIRE

            wait_until(lambda: len(client.get("/tanks").json()) == 1)
            response = client.get("/tanks")
            row = response.json()[0]

        assert row["tank_id"] == "T1"
        assert isinstance(row["initial_level"], int) and row["initial_level"] == 100
        assert isinstance(row["current_level"], int) and row["current_level"] == 80
        assert '"initial_level":100,"current_level":80' in response.text
        assert row["refilling"] is False
        received_at = datetime.fromisoformat(row["received_at"].replace("Z", "+00:00"))
        assert received_at.utcoffset() == timedelta(0)
