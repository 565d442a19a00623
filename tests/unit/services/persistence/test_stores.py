"""Tests for state store implementations."""

import sqlite3
from decimal import Decimal

import pytest

from tradersim.services.persistence import (
    InMemoryStateStore,
    JsonFileStateStore,
    SqliteStateStore,
    build_store,
)
from tradersim.services.portfolio import AppState, Portfolio
from tradersim.system.config import PersistenceConfig


@pytest.fixture
def snapshot() -> dict:
    state = AppState(
        cash=Decimal("1000.25"),
        root_portfolios=[Portfolio(id="p-1", name="Gold & Coins", allocation=Decimal("500"))],
    )
    return state.to_snapshot()


@pytest.fixture(params=["memory", "json", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStateStore()
    if request.param == "json":
        return JsonFileStateStore(tmp_path / "cache")
    return SqliteStateStore(tmp_path / "db" / "tradersim.db")


class TestStoreContract:
    """Behavior shared by every store."""

    def test_load_missing_returns_none(self, store) -> None:
        assert store.load("nobody") is None

    def test_save_then_load(self, store, snapshot: dict) -> None:
        store.save("alice", snapshot)

        assert store.load("alice") == snapshot

    def test_save_replaces_previous(self, store, snapshot: dict) -> None:
        store.save("alice", snapshot)
        store.save("alice", {**snapshot, "cash": "1"})

        assert store.load("alice")["cash"] == "1"

    def test_accounts_are_separate(self, store, snapshot: dict) -> None:
        store.save("alice", snapshot)

        assert store.load("bob") is None


class TestJsonFileStateStore:
    """JSON file specifics."""

    def test_writes_one_file_per_account(self, tmp_path, snapshot: dict) -> None:
        store = JsonFileStateStore(tmp_path)

        store.save("alice", snapshot)

        assert (tmp_path / "alice.json").exists()
        assert not (tmp_path / "alice.json.tmp").exists()

    def test_keeps_non_ascii_names(self, tmp_path) -> None:
        store = JsonFileStateStore(tmp_path)

        store.save("alice", {"name": "طلا"})

        assert "طلا" in (tmp_path / "alice.json").read_text(encoding="utf-8")


class TestSqliteStateStore:
    """SQLite specifics."""

    def test_upsert_keeps_single_row(self, tmp_path, snapshot: dict) -> None:
        db_path = tmp_path / "tradersim.db"
        store = SqliteStateStore(db_path)

        store.save("alice", snapshot)
        store.save("alice", snapshot)

        with sqlite3.connect(db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM user_saves").fetchone()[0]
        assert count == 1
        assert store.updated_at("alice") is not None
        assert store.updated_at("bob") is None

    def test_reopen_existing_database(self, tmp_path, snapshot: dict) -> None:
        db_path = tmp_path / "tradersim.db"
        SqliteStateStore(db_path).save("alice", snapshot)

        assert SqliteStateStore(db_path).load("alice") == snapshot

    def test_connections_are_closed(self, tmp_path, snapshot: dict, monkeypatch) -> None:
        opened: list[sqlite3.Connection] = []
        connect = sqlite3.connect

        def tracking_connect(*args, **kwargs):
            conn = connect(*args, **kwargs)
            opened.append(conn)
            return conn

        monkeypatch.setattr(sqlite3, "connect", tracking_connect)
        store = SqliteStateStore(tmp_path / "tradersim.db")

        store.save("alice", snapshot)
        assert store.load("alice") == snapshot
        store.updated_at("alice")

        assert len(opened) == 4
        for conn in opened:
            with pytest.raises(sqlite3.ProgrammingError):
                conn.execute("SELECT 1")

    def test_failed_save_keeps_previous_state(self, tmp_path, snapshot: dict) -> None:
        store = SqliteStateStore(tmp_path / "tradersim.db")
        store.save("alice", snapshot)

        with pytest.raises(TypeError):
            store.save("alice", {"bad": object()})

        assert store.load("alice") == snapshot


class TestBuildStore:
    """Backend selection from config."""

    def test_memory(self) -> None:
        assert isinstance(build_store(PersistenceConfig(backend="memory")), InMemoryStateStore)

    def test_json(self, tmp_path) -> None:
        assert isinstance(build_store(PersistenceConfig(backend="json", path=str(tmp_path))), JsonFileStateStore)

    def test_sqlite(self, tmp_path) -> None:
        store = build_store(PersistenceConfig(backend="sqlite", path=str(tmp_path / "x.db")))

        assert isinstance(store, SqliteStateStore)

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown persistence backend"):
            build_store(PersistenceConfig(backend="redis"))  # type: ignore[arg-type]
