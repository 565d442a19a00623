"""Account snapshot persistence.

Stores (in-memory, JSON files, SQLite), snapshot migration, and the
debounced synchronizer that keeps stores in step with the ledger.
"""

from tradersim.services.persistence.interface import IStateStore, Snapshot
from tradersim.services.persistence.migration import migrate_snapshot
from tradersim.services.persistence.stores import (
    InMemoryStateStore,
    JsonFileStateStore,
    SqliteStateStore,
    build_store,
)
from tradersim.services.persistence.sync import DebouncedSaver, StateSynchronizer

__all__ = [
    "IStateStore",
    "Snapshot",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "SqliteStateStore",
    "DebouncedSaver",
    "StateSynchronizer",
    "migrate_snapshot",
    "build_store",
]
