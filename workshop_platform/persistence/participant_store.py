"""Platform-owned participant store."""

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class ParticipantStore:
    """CRUD operations for session participants."""

    @staticmethod
    def insert(conn: sqlite3.Connection, session_id: str, identity: str,
               name: str, is_facilitator: bool) -> dict:
        """Insert a participant row.

        Raises ``sqlite3.IntegrityError`` when (session, identity) already
        exists or when a second facilitator row is attempted.
        """
        conn.execute(
            """INSERT INTO participant
               (session_id, participant_identity, participant_name,
                is_facilitator, has_submitted, joined_at)
               VALUES (?, ?, ?, ?, 0, ?)""",
            (session_id, identity, name, int(is_facilitator),
             datetime.now(timezone.utc).isoformat()),
        )
        return ParticipantStore.get(conn, session_id, identity)

    @staticmethod
    def get(conn: sqlite3.Connection, session_id: str,
            identity: str) -> Optional[dict]:
        row = conn.execute(
            """SELECT * FROM participant
               WHERE session_id = ? AND participant_identity = ?""",
            (session_id, identity),
        ).fetchone()
        if row is None:
            return None
        return ParticipantStore._row_to_dict(row)

    @staticmethod
    def list_for_session(conn: sqlite3.Connection, session_id: str) -> list[dict]:
        """List participants in join order."""
        rows = conn.execute(
            "SELECT * FROM participant WHERE session_id = ? ORDER BY joined_at, id",
            (session_id,),
        ).fetchall()
        return [ParticipantStore._row_to_dict(r) for r in rows]

    @staticmethod
    def count(conn: sqlite3.Connection, session_id: str) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM participant WHERE session_id = ?",
            (session_id,),
        ).fetchone()
        return row[0]

    @staticmethod
    def mark_submitted(conn: sqlite3.Connection, session_id: str,
                       identity: str) -> bool:
        """Set the submission flag. Returns False if no such participant exists."""
        cursor = conn.execute(
            """UPDATE participant SET has_submitted = 1
               WHERE session_id = ? AND participant_identity = ?""",
            (session_id, identity),
        )
        return cursor.rowcount > 0

    @staticmethod
    def rename_identity(conn: sqlite3.Connection, session_id: str,
                        old_identity: str, new_identity: str) -> bool:
        cursor = conn.execute(
            """UPDATE participant SET participant_identity = ?
               WHERE session_id = ? AND participant_identity = ?""",
            (new_identity, session_id, old_identity),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> dict:
        d = dict(row)
        for key in ("is_facilitator", "has_submitted"):
            if key in d:
                d[key] = bool(d[key])
        return d


__all__ = ["ParticipantStore"]
