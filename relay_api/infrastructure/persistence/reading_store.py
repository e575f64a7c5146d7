"""SQL store for tank readings.

Consumed by the relay only through ``insert_many``; the query surface uses
``list_readings``. Both are synchronous and meant to run off the event loop.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Protocol, Sequence

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    select,
    text,
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ...errors import StoreError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "tank_readings"


class ReadingStore(Protocol):
    """Contrato del almacén de lecturas."""

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> None:
        """Insert all ``records`` in one write. Raises StoreError on failure."""
        ...

    def list_readings(self) -> List[Dict[str, Any]]:
        ...

    def ping(self) -> bool:
        ...


class LevelType(TypeDecorator):
    """Nivel guardado como su texto JSON: 100 vuelve como 100, 45.5 como 45.5."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return json.loads(value)


def _readings_table(name: str, metadata: MetaData) -> Table:
    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("tank_id", String(255), nullable=False, index=True),
        Column("initial_level", LevelType, nullable=False),
        Column("current_level", LevelType, nullable=False),
        Column("refilling", Boolean, nullable=False),
        Column("received_at", DateTime(timezone=True), nullable=False),
    )


def _as_utc(row: Dict[str, Any]) -> Dict[str, Any]:
    # SQLite drops the offset; every timestamp is written in UTC.
    received_at = row.get("received_at")
    if isinstance(received_at, datetime) and received_at.tzinfo is None:
        row["received_at"] = received_at.replace(tzinfo=timezone.utc)
    return row


class SqlReadingStore:
    """Almacén de lecturas sobre SQLAlchemy.

    One ``executemany`` INSERT per batch, inside a single transaction.
    """

    def __init__(self, engine: Engine, table_name: str = DEFAULT_TABLE):
        self._engine = engine
        self._metadata = MetaData()
        self._table = _readings_table(table_name, self._metadata)

    @property
    def table_name(self) -> str:
        return self._table.name

    def ensure_schema(self) -> None:
        """Create the readings table if it does not exist. Safe to call multiple times."""
        logger.info("[DB] Ensuring table %s exists", self._table.name)
        try:
            self._metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            logger.exception("[DB] Schema creation failed: %s", e)
            raise StoreError(f"Schema creation failed: {type(e).__name__}") from e

    def insert_many(self, records: Sequence[Mapping[str, Any]]) -> None:
        if not records:
            return

        received_at = datetime.now(timezone.utc)
        values = [
            {
                "tank_id": r["tank_id"],
                "initial_level": r["initial_level"],
                "current_level": r["current_level"],
                "refilling": r["refilling"],
                "received_at": received_at,
            }
            for r in records
        ]

        try:
            with self._engine.begin() as conn:
                conn.execute(self._table.insert(), values)
        except SQLAlchemyError as e:
            raise StoreError(f"Insert of {len(values)} readings failed: {type(e).__name__}") from e

        logger.debug("[DB] Inserted %d readings into %s", len(values), self._table.name)

    def list_readings(self) -> List[Dict[str, Any]]:
        query = select(self._table).order_by(self._table.c.id)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Listing readings failed: {type(e).__name__}") from e
        return [_as_utc(dict(row)) for row in rows]

    def ping(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("[DB] Ping failed")
            return False
