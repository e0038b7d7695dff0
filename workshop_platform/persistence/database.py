"""Platform-owned SQLite database primitives."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from workshop_platform.config import db_timeout_seconds, resolve_db_path
from workshop_platform.errors import PersistenceFailed

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3


def get_db_path() -> Path:
    """Return the path to the workshop SQLite database."""
    return resolve_db_path()


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """Open (or create) the workshop database and ensure the schema exists.

    Returns a ``sqlite3.Connection`` in autocommit mode with WAL, foreign keys
    and a busy timeout enabled. Multi-statement writes go through
    :func:`transaction`. The caller is responsible for closing the connection.
    """
    path = str(db_path if db_path is not None else get_db_path())
    conn = sqlite3.connect(
        path,
        timeout=db_timeout_seconds(),
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    # Only switch modes when needed; re-issuing the pragma can wait on a writer.
    if path != ":memory:" and conn.execute("PRAGMA journal_mode").fetchone()[0] != "wal":
        conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    init_db(conn)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection, read_only: bool = False) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one transaction.

    Writes use ``BEGIN IMMEDIATE`` so the write lock is taken up front.
    ``read_only=True`` uses a deferred ``BEGIN``: under WAL the reads see one
    consistent snapshot and never wait for a concurrent writer. Nested use
    joins the outer transaction. On any exception the whole unit is rolled
    back; SQLite lock and I/O errors surface as ``PersistenceFailed``.
    """
    if conn.in_transaction:
        yield conn
        return

    try:
        conn.execute("BEGIN" if read_only else "BEGIN IMMEDIATE")
    except sqlite3.OperationalError as e:
        raise _storage_failure(e) from e
    try:
        yield conn
    except sqlite3.OperationalError as e:
        conn.rollback()
        raise _storage_failure(e) from e
    except BaseException:
        conn.rollback()
        raise
    try:
        conn.commit()
    except sqlite3.OperationalError as e:
        conn.rollback()
        raise _storage_failure(e) from e


def _storage_failure(err: sqlite3.OperationalError) -> PersistenceFailed:
    logger.warning("Database operation failed: %s", err)
    return PersistenceFailed("The workshop database is busy or unavailable; retry shortly",
                             reason=str(err))


def init_db(conn: sqlite3.Connection) -> None:
    """Create tables if they don't exist and apply migrations.

    An up-to-date database is detected with reads only, so opening a
    connection never waits on another connection's write.
    """
    if _schema_is_current(conn):
        return

    conn.executescript(_SCHEMA_SQL)

    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    current = row[0] if row[0] is not None else 0

    needs_statement_updated_at = not _table_has_column(conn, "statement", "updated_at")
    if current < 2 or needs_statement_updated_at:
        _migrate_add_statement_updated_at(conn)

    if current < 3 or not _table_has_column(conn, "vote", "note"):
        _migrate_add_vote_note(conn)

    if current < SCHEMA_VERSION:
        with transaction(conn):
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )


def _schema_is_current(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    if row is None:
        return False
    version = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()[0]
    return (
        version is not None
        and version >= SCHEMA_VERSION
        and _table_has_column(conn, "statement", "updated_at")
        and _table_has_column(conn, "vote", "note")
    )


def _table_has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    """Return True if *table* contains *column*."""
    cols = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return any(c[1] == column for c in cols)


def _migrate_add_statement_updated_at(conn: sqlite3.Connection) -> None:
    """Add ``statement.updated_at`` and backfill it from ``submitted_at``."""
    if _table_has_column(conn, "statement", "updated_at"):
        return

    logger.info("Applying DB migration: add statement.updated_at")
    with transaction(conn):
        conn.execute("ALTER TABLE statement ADD COLUMN updated_at TEXT")
        conn.execute("UPDATE statement SET updated_at = submitted_at WHERE updated_at IS NULL")


def _migrate_add_vote_note(conn: sqlite3.Connection) -> None:
    """Add the optional ``vote.note`` column."""
    if _table_has_column(conn, "vote", "note"):
        return

    logger.info("Applying DB migration: add vote.note")
    with transaction(conn):
        conn.execute("ALTER TABLE vote ADD COLUMN note TEXT")


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS session (
    id TEXT PRIMARY KEY,
    tool_kind TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT,
    creator_identity TEXT NOT NULL,
    phase TEXT NOT NULL DEFAULT 'setup',
    created_at TEXT NOT NULL,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS participant (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES session(id) ON DELETE CASCADE,
    participant_identity TEXT NOT NULL,
    participant_name TEXT NOT NULL,
    is_facilitator INTEGER NOT NULL DEFAULT 0,
    has_submitted INTEGER NOT NULL DEFAULT 0,
    joined_at TEXT NOT NULL,
    UNIQUE (session_id, participant_identity)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_participant_one_facilitator
    ON participant(session_id) WHERE is_facilitator = 1;

CREATE TABLE IF NOT EXISTS statement (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES session(id) ON DELETE CASCADE,
    author_identity TEXT NOT NULL,
    author_name TEXT NOT NULL,
    text TEXT NOT NULL,
    submitted_at TEXT NOT NULL,
    updated_at TEXT,
    UNIQUE (session_id, author_identity)
);

CREATE INDEX IF NOT EXISTS idx_statement_session ON statement(session_id);

CREATE TABLE IF NOT EXISTS pin (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    statement_id INTEGER NOT NULL REFERENCES statement(id) ON DELETE CASCADE,
    endorser_identity TEXT NOT NULL,
    endorser_name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (statement_id, endorser_identity)
);

CREATE TABLE IF NOT EXISTS final_statement (
    session_id TEXT PRIMARY KEY REFERENCES session(id) ON DELETE CASCADE,
    text TEXT NOT NULL,
    author_identity TEXT NOT NULL,
    author_name TEXT NOT NULL,
    finalized_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS vote_item (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES session(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_vote_item_session ON vote_item(session_id);

CREATE TABLE IF NOT EXISTS vote (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES session(id) ON DELETE CASCADE,
    participant_identity TEXT NOT NULL,
    item_id INTEGER NOT NULL REFERENCES vote_item(id) ON DELETE CASCADE,
    points INTEGER NOT NULL CHECK (points >= 0),
    note TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (session_id, participant_identity, item_id)
);

CREATE INDEX IF NOT EXISTS idx_vote_session ON vote(session_id);
"""


__all__ = ["SCHEMA_VERSION", "get_db_path", "get_connection", "init_db", "transaction"]
