"""Fan-out de lecturas a suscriptores de tanque y administradores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .domain.connection import SendHandle
from .domain.reading import TankReading
from .registry import ConnectionRegistry
from .validation.codec import encode_reading

logger = logging.getLogger(__name__)


@dataclass
class BroadcastReport:
    """Resultado de un broadcast (solo para stats y logs)."""
    readings: int = 0
    delivered: int = 0
    skipped: int = 0


class FanoutEngine:
    """Fire-and-forget multicast of readings.

    For every reading, the tank's subscribers and all admin subscribers get
    the same serialized message. A handle whose send fails is skipped: no
    retry, no error to the caller, no removal (removal is the transport close
    path's job).
    """

    def __init__(self, registry: ConnectionRegistry):
        self._registry = registry

    async def broadcast(self, batch: Sequence[TankReading]) -> BroadcastReport:
        report = BroadcastReport()

        for reading in batch:
            report.readings += 1
            tank_handles = self._registry.snapshot_tank_subscribers(reading.tank_id)
            admin_handles = self._registry.snapshot_admin_subscribers()
            if not tank_handles and not admin_handles:
                continue

            message = encode_reading(reading)
            for handle in [*tank_handles, *admin_handles]:
                if await self._deliver(handle, message):
                    report.delivered += 1
                else:
                    report.skipped += 1

        if report.skipped:
            logger.debug(
                "[FANOUT] readings=%d delivered=%d skipped=%d",
                report.readings, report.delivered, report.skipped,
            )
        return report

    async def _deliver(self, handle: SendHandle, message: str) -> bool:
        try:
            return await handle.send(message)
        except Exception as e:
            logger.debug("[FANOUT] Send failed, skipping subscriber: %s", e)
            return False
