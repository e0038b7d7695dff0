"""
Tests for the workshop SQLite primitives.
"""

import sqlite3

import pytest

from workshop_platform.errors import PersistenceFailed
from workshop_platform.persistence import SCHEMA_VERSION, SessionStore, get_connection, init_db, transaction
from workshop_platform.persistence.database import _table_has_column


def test_get_connection_creates_schema(tmp_path):
    conn = get_connection(tmp_path / "w.db")
    try:
        tables = {
            r["name"]
            for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        }
        assert {"session", "participant", "statement", "pin", "final_statement",
                "vote_item", "vote"} <= tables
        version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
        assert version == SCHEMA_VERSION
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "wal"
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()


def test_get_connection_honours_env_override(db_path):
    conn = get_connection()
    conn.close()
    assert db_path.exists()


def test_init_db_is_idempotent(db_conn):
    init_db(db_conn)
    init_db(db_conn)
    rows = db_conn.execute("SELECT version FROM schema_version").fetchall()
    assert [r[0] for r in rows] == [SCHEMA_VERSION]


def test_migration_adds_statement_updated_at():
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.executescript(
        """
        CREATE TABLE schema_version (version INTEGER PRIMARY KEY);
        INSERT INTO schema_version (version) VALUES (1);
        CREATE TABLE session (
            id TEXT PRIMARY KEY, tool_kind TEXT NOT NULL, title TEXT NOT NULL,
            description TEXT, creator_identity TEXT NOT NULL,
            phase TEXT NOT NULL DEFAULT 'setup', created_at TEXT NOT NULL,
            completed_at TEXT
        );
        CREATE TABLE statement (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            session_id TEXT NOT NULL REFERENCES session(id) ON DELETE CASCADE,
            author_identity TEXT NOT NULL, author_name TEXT NOT NULL,
            text TEXT NOT NULL, submitted_at TEXT NOT NULL,
            UNIQUE (session_id, author_identity)
        );
        INSERT INTO session (id, tool_kind, title, creator_identity, created_at)
            VALUES ('s1', 'problem-framing', 'T', 'a', '2024-01-01');
        INSERT INTO statement (session_id, author_identity, author_name, text, submitted_at)
            VALUES ('s1', 'a', 'A', 'hello', '2024-01-02');
        """
    )
    assert _table_has_column(conn, "statement", "updated_at") is False

    init_db(conn)

    assert _table_has_column(conn, "statement", "updated_at") is True
    row = conn.execute("SELECT updated_at FROM statement").fetchone()
    assert row[0] == "2024-01-02"
    conn.close()


class TestTransaction:

    def test_commits_on_success(self, db_conn):
        with transaction(db_conn):
            SessionStore.create(db_conn, "problem-framing", "T", "a", session_id="s1")
        assert db_conn.in_transaction is False
        assert SessionStore.get(db_conn, "s1") is not None

    def test_rolls_back_on_error(self, db_conn):
        with pytest.raises(RuntimeError):
            with transaction(db_conn):
                SessionStore.create(db_conn, "problem-framing", "T", "a", session_id="s1")
                raise RuntimeError("boom")
        assert SessionStore.get(db_conn, "s1") is None

    def test_nested_joins_outer(self, db_conn):
        with pytest.raises(RuntimeError):
            with transaction(db_conn):
                with transaction(db_conn):
                    SessionStore.create(db_conn, "problem-framing", "T", "a", session_id="s1")
                assert db_conn.in_transaction is True
                raise RuntimeError("boom")
        assert SessionStore.get(db_conn, "s1") is None


def test_migration_adds_vote_note():
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.executescript(
        """
        CREATE TABLE schema_version (version INTEGER PRIMARY KEY);
        INSERT INTO schema_version (version) VALUES (2);
        CREATE TABLE vote (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            session_id TEXT NOT NULL, participant_identity TEXT NOT NULL,
            item_id INTEGER NOT NULL, points INTEGER NOT NULL,
            created_at TEXT NOT NULL
        );
        """
    )
    init_db(conn)
    assert _table_has_column(conn, "vote", "note") is True
    version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    assert version == SCHEMA_VERSION
    conn.close()


class TestConcurrentWriter:

    @pytest.fixture
    def locked_db(self, tmp_path, monkeypatch):
        """A database file whose write lock is held by another connection."""
        monkeypatch.setenv("WORKSHOP_DB_TIMEOUT_SECONDS", "1")
        path = tmp_path / "locked.db"
        get_connection(path).close()
        holder = sqlite3.connect(str(path), isolation_level=None)
        holder.execute("BEGIN IMMEDIATE")
        yield path
        holder.rollback()
        holder.close()

    def test_connect_and_read_beside_writer(self, locked_db):
        conn = get_connection(locked_db)
        try:
            with transaction(conn, read_only=True):
                assert SessionStore.list_all(conn) == []
            assert conn.in_transaction is False
        finally:
            conn.close()

    def test_write_waits_then_fails_cleanly(self, locked_db):
        conn = get_connection(locked_db)
        try:
            with pytest.raises(PersistenceFailed) as exc:
                with transaction(conn):
                    SessionStore.create(conn, "problem-framing", "T", "a")
            assert "locked" in exc.value.context["reason"]
            assert conn.in_transaction is False
        finally:
            conn.close()
