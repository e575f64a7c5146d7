from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .core.domain.reading import Level


class StoredReading(BaseModel):
    id: int
    tank_id: str
    initial_level: Level
    current_level: Level
    refilling: bool
    received_at: Optional[datetime] = None


class CommandResult(BaseModel):
    status: str = "success"


class RegistryCounts(BaseModel):
    tanks: int
    tank_subscribers: int
    admin_subscribers: int
    controller_connected: bool


class RelayStatsOut(BaseModel):
    batches_received: int
    readings_received: int
    validation_errors: int
    store_failures: int
    deliveries: int
    skipped_deliveries: int
    commands_relayed: int
    commands_failed: int
    started_at: datetime
    delivery_rate: float
    connections: RegistryCounts
