from .gateway import PersistenceGateway
from .reading_store import DEFAULT_TABLE, ReadingStore, SqlReadingStore

__all__ = [
    "DEFAULT_TABLE",
    "PersistenceGateway",
    "ReadingStore",
    "SqlReadingStore",
]
