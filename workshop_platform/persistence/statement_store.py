"""Platform-owned statement store."""

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class StatementStore:
    """CRUD operations for participant statements within a session."""

    @staticmethod
    def upsert(conn: sqlite3.Connection, session_id: str, author_identity: str,
               author_name: str, text: str) -> dict:
        """Insert the author's statement or replace its text.

        ``submitted_at`` keeps the first submission time; ``updated_at``
        tracks the latest edit.
        """
        now = datetime.now(timezone.utc).isoformat()
        conn.execute(
            """INSERT INTO statement
               (session_id, author_identity, author_name, text, submitted_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT (session_id, author_identity) DO UPDATE SET
                   text = excluded.text,
                   author_name = excluded.author_name,
                   updated_at = excluded.updated_at""",
            (session_id, author_identity, author_name, text, now, now),
        )
        return StatementStore.get_by_author(conn, session_id, author_identity)

    @staticmethod
    def get(conn: sqlite3.Connection, statement_id: int) -> Optional[dict]:
        row = conn.execute(
            "SELECT * FROM statement WHERE id = ?", (statement_id,)
        ).fetchone()
        if row is None:
            return None
        return dict(row)

    @staticmethod
    def get_by_author(conn: sqlite3.Connection, session_id: str,
                      author_identity: str) -> Optional[dict]:
        row = conn.execute(
            "SELECT * FROM statement WHERE session_id = ? AND author_identity = ?",
            (session_id, author_identity),
        ).fetchone()
        if row is None:
            return None
        return dict(row)

    @staticmethod
    def list_for_session(conn: sqlite3.Connection, session_id: str) -> list[dict]:
        """List statements ordered by first submission time."""
        rows = conn.execute(
            "SELECT * FROM statement WHERE session_id = ? ORDER BY submitted_at, id",
            (session_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def rename_author(conn: sqlite3.Connection, session_id: str,
                      old_identity: str, new_identity: str) -> int:
        cursor = conn.execute(
            """UPDATE statement SET author_identity = ?
               WHERE session_id = ? AND author_identity = ?""",
            (new_identity, session_id, old_identity),
        )
        return cursor.rowcount


__all__ = ["StatementStore"]
