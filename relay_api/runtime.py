"""Componentes del relay para un proceso.

Built once per application (in the lifespan) and reachable from routes via
``app.state.runtime``.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from .core.command_relay import CommandRelay
from .core.fanout import FanoutEngine
from .core.monitoring.stats import RelayStats
from .core.registry import ConnectionRegistry
from .core.relay_service import RelayService
from .infrastructure.persistence.gateway import PersistenceGateway
from .infrastructure.persistence.reading_store import ReadingStore


@dataclass
class RelayRuntime:
    store: ReadingStore
    registry: ConnectionRegistry
    gateway: PersistenceGateway
    fanout: FanoutEngine
    command_relay: CommandRelay
    service: RelayService
    stats: RelayStats

    @classmethod
    def build(cls, store: ReadingStore) -> "RelayRuntime":
        registry = ConnectionRegistry()
        gateway = PersistenceGateway(store)
        fanout = FanoutEngine(registry)
        command_relay = CommandRelay(registry)
        stats = RelayStats()
        service = RelayService(gateway, fanout, command_relay, stats)
        return cls(
            store=store,
            registry=registry,
            gateway=gateway,
            fanout=fanout,
            command_relay=command_relay,
            service=service,
            stats=stats,
        )


def get_runtime(request: Request) -> RelayRuntime:
    """Dependencia FastAPI: runtime de la aplicación."""
    return request.app.state.runtime
