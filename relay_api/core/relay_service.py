"""Orquestación de un batch validado: persistencia + fan-out en paralelo."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .command_relay import CommandRelay
from .domain.reading import Command, TankReading
from .fanout import BroadcastReport, FanoutEngine
from .monitoring.stats import RelayStats
from ..errors import RelayError, StoreError
from ..infrastructure.persistence.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class RelayService:
    """Runs the persistence gateway and the fan-out engine for each batch.

    Persistence and fan-out share no transaction. A StoreError is logged and
    counted; subscribers still get the readings.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        fanout: FanoutEngine,
        command_relay: CommandRelay,
        stats: RelayStats,
    ):
        self._gateway = gateway
        self._fanout = fanout
        self._command_relay = command_relay
        self._stats = stats

    async def ingest(self, batch: Sequence[TankReading]) -> BroadcastReport:
        self._stats.batches_received += 1
        self._stats.readings_received += len(batch)

        _, report = await asyncio.gather(
            self._persist(batch),
            self._fanout.broadcast(batch),
        )

        self._stats.deliveries += report.delivered
        self._stats.skipped_deliveries += report.skipped
        return report

    async def _persist(self, batch: Sequence[TankReading]) -> bool:
        try:
            await self._gateway.persist(batch)
            return True
        except StoreError as e:
            self._stats.store_failures += 1
            logger.error("[RELAY] Persistence failed, readings=%d dropped from store: %s", len(batch), e)
            return False

    def record_validation_error(self) -> None:
        self._stats.validation_errors += 1

    async def submit_command(self, command: Command) -> None:
        """Relay ``command``; ControllerUnavailable/DeliveryFailed propagate to the caller."""
        try:
            await self._command_relay.relay(command)
        except RelayError:
            self._stats.commands_failed += 1
            raise
        self._stats.commands_relayed += 1
