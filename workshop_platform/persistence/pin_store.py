"""Platform-owned pin store."""

import sqlite3
from datetime import datetime, timezone


class PinStore:
    """Endorsement rows between participants and statements."""

    @staticmethod
    def insert(conn: sqlite3.Connection, statement_id: int,
               endorser_identity: str, endorser_name: str) -> None:
        """Insert a pin. Raises ``sqlite3.IntegrityError`` if it already exists."""
        conn.execute(
            """INSERT INTO pin
               (statement_id, endorser_identity, endorser_name, created_at)
               VALUES (?, ?, ?, ?)""",
            (statement_id, endorser_identity, endorser_name,
             datetime.now(timezone.utc).isoformat()),
        )

    @staticmethod
    def delete(conn: sqlite3.Connection, statement_id: int,
               endorser_identity: str) -> bool:
        """Delete a pin. Returns True if one existed."""
        cursor = conn.execute(
            "DELETE FROM pin WHERE statement_id = ? AND endorser_identity = ?",
            (statement_id, endorser_identity),
        )
        return cursor.rowcount > 0

    @staticmethod
    def exists(conn: sqlite3.Connection, statement_id: int,
               endorser_identity: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM pin WHERE statement_id = ? AND endorser_identity = ?",
            (statement_id, endorser_identity),
        ).fetchone()
        return row is not None

    @staticmethod
    def list_for_statement(conn: sqlite3.Connection, statement_id: int) -> list[dict]:
        rows = conn.execute(
            "SELECT * FROM pin WHERE statement_id = ? ORDER BY created_at, id",
            (statement_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def list_for_session(conn: sqlite3.Connection, session_id: str) -> list[dict]:
        """List every pin on the session's statements, oldest first."""
        rows = conn.execute(
            """SELECT p.* FROM pin p
               JOIN statement s ON s.id = p.statement_id
               WHERE s.session_id = ?
               ORDER BY p.created_at, p.id""",
            (session_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def rename_endorser(conn: sqlite3.Connection, session_id: str,
                        old_identity: str, new_identity: str) -> int:
        cursor = conn.execute(
            """UPDATE pin SET endorser_identity = ?
               WHERE endorser_identity = ?
                 AND statement_id IN (SELECT id FROM statement WHERE session_id = ?)""",
            (new_identity, old_identity, session_id),
        )
        return cursor.rowcount


__all__ = ["PinStore"]
