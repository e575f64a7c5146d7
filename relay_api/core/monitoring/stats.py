"""Estadísticas del relay."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass
class RelayStats:
    """Contadores de actividad del relay."""

    batches_received: int = 0
    readings_received: int = 0
    validation_errors: int = 0
    store_failures: int = 0
    deliveries: int = 0
    skipped_deliveries: int = 0
    commands_relayed: int = 0
    commands_failed: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return (
            f"RelayStats: batches={self.batches_received} readings={self.readings_received} "
            f"delivered={self.deliveries} skipped={self.skipped_deliveries}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "batches_received": self.batches_received,
            "readings_received": self.readings_received,
            "validation_errors": self.validation_errors,
            "store_failures": self.store_failures,
            "deliveries": self.deliveries,
            "skipped_deliveries": self.skipped_deliveries,
            "commands_relayed": self.commands_relayed,
            "commands_failed": self.commands_failed,
            "started_at": self.started_at.isoformat(),
            "delivery_rate": self._delivery_rate(),
        }

    def _delivery_rate(self) -> float:
        total = self.deliveries + self.skipped_deliveries
        if total == 0:
            return 1.0
        return self.deliveries / total
