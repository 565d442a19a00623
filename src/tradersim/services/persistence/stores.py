"""State store implementations.

- InMemoryStateStore: dict-backed, for tests
- JsonFileStateStore: one ``<account_id>.json`` document per account
- SqliteStateStore: ``user_saves(id, state, updated_at)`` table with upsert

Stores deal in plain dicts; AppState conversion happens in the synchronizer.
"""

import copy
import json
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from tradersim.services.persistence.interface import IStateStore, Snapshot
from tradersim.system import LoggerFactory
from tradersim.system.config import PersistenceConfig

logger = LoggerFactory.get_logger()

_SCHEMA = """
CREATE TABLE IF NOT EXISTS user_saves (
    id TEXT PRIMARY KEY,
    state TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class InMemoryStateStore:
    """Snapshots kept in a dict (deep-copied in and out)."""

    def __init__(self) -> None:
        self._data: dict[str, Snapshot] = {}
        self.save_count = 0

    def load(self, account_id: str) -> Snapshot | None:
        snapshot = self._data.get(account_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, account_id: str, snapshot: Snapshot) -> None:
        self._data[account_id] = copy.deepcopy(snapshot)
        self.save_count += 1


class JsonFileStateStore:
    """
    One JSON document per account in a directory.

    Writes go to a temporary file that is then renamed over the target, so
    a reader never sees a half-written document.
    """

    def __init__(self, directory: str | Path) -> None:
        """
        Initialize store.

        Args:
            directory: Folder holding ``<account_id>.json`` files (created on first save)
        """
        self._directory = Path(directory)

    def _path(self, account_id: str) -> Path:
        return self._directory / f"{account_id}.json"

    def load(self, account_id: str) -> Snapshot | None:
        path = self._path(account_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, account_id: str, snapshot: Snapshot) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(account_id)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f, ensure_ascii=False, indent=2)
        tmp_path.replace(path)
        logger.debug("persistence.file_written", path=str(path))


class SqliteStateStore:
    """
    Snapshots in a SQLite table keyed by account id.

    Uses raw SQL (no ORM). ``save`` is an upsert.
    """

    def __init__(self, db_path: str | Path):
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database file (":memory:" is not supported,
                each call opens its own connection)
        """
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Connection inside a transaction, closed on exit."""
        with closing(sqlite3.connect(self._db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def load(self, account_id: str) -> Snapshot | None:
        with self._get_connection() as conn:
            row = conn.execute("SELECT state FROM user_saves WHERE id = ?", (account_id,)).fetchone()
        if row is None:
            return None
        return json.loads(row["state"])

    def save(self, account_id: str, snapshot: Snapshot) -> None:
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO user_saves (id, state, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET state = excluded.state, updated_at = excluded.updated_at
                """,
                (account_id, json.dumps(snapshot, ensure_ascii=False), datetime.now(timezone.utc).isoformat()),
            )

    def updated_at(self, account_id: str) -> datetime | None:
        """Time of the last save for account_id."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT updated_at FROM user_saves WHERE id = ?", (account_id,)).fetchone()
        return datetime.fromisoformat(row["updated_at"]) if row is not None else None


def build_store(config: PersistenceConfig) -> IStateStore:
    """Remote store for the ``persistence`` section of the system config."""
    if config.backend == "memory":
        return InMemoryStateStore()
    if config.backend == "json":
        return JsonFileStateStore(config.path)
    if config.backend == "sqlite":
        return SqliteStateStore(config.path)
    raise ValueError(f"Unknown persistence backend: {config.backend}")
