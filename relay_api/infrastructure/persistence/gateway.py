"""Persistence gateway: one bulk write per validated batch.

A failure here is reported to the caller as StoreError and never holds back
fan-out. Delivery to live subscribers matters more than durability for this
telemetry, so readings from a failed write are dropped, not retried.
"""

from __future__ import annotations

import logging
from typing import Sequence

from fastapi.concurrency import run_in_threadpool

from .reading_store import ReadingStore
from ...core.domain.reading import TankReading
from ...errors import StoreError

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Forwards validated batches to the reading store."""

    def __init__(self, store: ReadingStore):
        self._store = store

    @property
    def store(self) -> ReadingStore:
        return self._store

    async def persist(self, batch: Sequence[TankReading]) -> None:
        """Persist ``batch`` with a single insert-many call.

        Raises:
            StoreError: si el almacén falla (cualquier excepción se normaliza)
        """
        if not batch:
            return

        records = [reading.model_dump() for reading in batch]
        try:
            await run_in_threadpool(self._store.insert_many, records)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError(f"Unexpected store failure: {type(e).__name__}") from e

        logger.debug("[DB] Persisted batch of %d readings", len(records))
