"""Platform-owned session store."""

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionStore:
    """CRUD operations for workshop sessions."""

    @staticmethod
    def create(conn: sqlite3.Connection, tool_kind: str, title: str,
               creator_identity: str, description: str | None = None,
               session_id: str | None = None) -> str:
        """Insert a new session in the ``setup`` phase. Returns the session id."""
        sid = session_id or str(uuid.uuid4())
        conn.execute(
            """INSERT INTO session
               (id, tool_kind, title, description, creator_identity, phase, created_at)
               VALUES (?, ?, ?, ?, ?, 'setup', ?)""",
            (sid, tool_kind, title, description, creator_identity, _now()),
        )
        return sid

    @staticmethod
    def get(conn: sqlite3.Connection, session_id: str) -> Optional[dict]:
        """Load a single session by id."""
        row = conn.execute(
            "SELECT * FROM session WHERE id = ?", (session_id,)
        ).fetchone()
        if row is None:
            return None
        return dict(row)

    @staticmethod
    def list_all(conn: sqlite3.Connection) -> list[dict]:
        """List all sessions with their participant counts, newest first."""
        rows = conn.execute(
            """SELECT s.*,
                      (SELECT COUNT(*) FROM participant p WHERE p.session_id = s.id)
                          AS participant_count
               FROM session s
               ORDER BY s.created_at DESC, s.rowid DESC"""
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def update_phase(conn: sqlite3.Connection, session_id: str,
                     expected_phase: str, new_phase: str) -> bool:
        """Compare-and-set the stored phase.

        Writes *new_phase* only while the row still holds *expected_phase*,
        stamping ``completed_at`` when the new phase is ``completed``.
        Returns True when the row was updated.
        """
        completed_at = _now() if new_phase == "completed" else None
        cursor = conn.execute(
            """UPDATE session SET phase = ?, completed_at = COALESCE(?, completed_at)
               WHERE id = ? AND phase = ?""",
            (new_phase, completed_at, session_id, expected_phase),
        )
        return cursor.rowcount > 0

    @staticmethod
    def complete(conn: sqlite3.Connection, session_id: str) -> bool:
        """Move a session to ``completed`` and stamp ``completed_at``.

        Leaves an already-completed session (and its timestamp) untouched.
        Returns True when the row changed.
        """
        cursor = conn.execute(
            """UPDATE session SET phase = 'completed', completed_at = ?
               WHERE id = ? AND phase != 'completed'""",
            (_now(), session_id),
        )
        return cursor.rowcount > 0

    @staticmethod
    def delete(conn: sqlite3.Connection, session_id: str) -> bool:
        """Delete a session and its dependent rows. Returns True if a row was deleted."""
        cursor = conn.execute(
            "DELETE FROM session WHERE id = ?", (session_id,)
        )
        return cursor.rowcount > 0

    @staticmethod
    def list_finalized_but_open(conn: sqlite3.Connection) -> list[str]:
        """Return ids of sessions holding a final statement without being completed."""
        rows = conn.execute(
            """SELECT s.id FROM session s
               JOIN final_statement f ON f.session_id = s.id
               WHERE s.phase != 'completed'
               ORDER BY s.created_at"""
        ).fetchall()
        return [r["id"] for r in rows]


__all__ = ["SessionStore"]
