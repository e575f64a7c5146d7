"""Fixtures compartidos para los tests del relay."""

import json
import time
from typing import Any, Dict, List, Mapping, Sequence

import pytest
from fastapi.testclient import TestClient

from relay_api.core.registry import ConnectionRegistry
from relay_api.errors import StoreError
from relay_api.main import create_app
from relay_api.runtime import RelayRuntime


UPDATE_MESSAGE = {
    "action": "update",
    "tanks_info": [
        {"tank_id": "T1", "initial_level": 100, "current_level": 80, "refilling": False},
    ],
}

T1_WIRE = '{"tank_id":"T1","initial_level":100,"current_level":80,"refilling":false}'


class FakeHandle:
    """Send handle en memoria: registra mensajes o simula un peer caído."""

    def __init__(self, open: bool = True, raises: Exception | None = None):
        self.messages: List[str] = []
        self.open = open
        self.raises = raises

    async def send(self, message: str) -> bool:
        if self.raises is not None:
            raise self.raises
        if not self.open:
            return False
        self.messages.append(message)
        return True

    def close(self) -> None:
        self.open = False

    def json_messages(self) -> List[Dict[str, Any]]:
        return [json.loads(m) for m in self.messages]


class RecordingStore:
    """Store que guarda cada llamada a insert_many."""

    def __init__(self, healthy: bool = True):
        self.insert_calls: List[List[Dict[str, Any]]] = []
        self.healthy = healthy

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> None:
        self.insert_calls.append([dict(r) for r in records])

    def list_readings(self) -> List[Dict[str, Any]]:
        rows = []
        for call in self.insert_calls:
            for record in call:
                rows.append({"id": len(rows) + 1, **record})
        return rows

    def ping(self) -> bool:
        return self.healthy


class FailingStore(RecordingStore):
    """Store que siempre falla al insertar."""

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> None:
        self.insert_calls.append([dict(r) for r in records])
        raise StoreError("store is down")


def wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    """Espera a que el servidor (en otro hilo) alcance un estado."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(interval)
    raise AssertionError("condition not reached within %.1fs" % timeout)


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def runtime(store) -> RelayRuntime:
    return RelayRuntime.build(store)


@pytest.fixture
def client(runtime):
    with TestClient(create_app(runtime=runtime)) as client:
        yield client
