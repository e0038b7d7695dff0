"""Platform-owned final statement store."""

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class FinalStatementStore:
    """The single facilitator-authored synthesis per session."""

    @staticmethod
    def upsert(conn: sqlite3.Connection, session_id: str, text: str,
               author_identity: str, author_name: str) -> dict:
        conn.execute(
            """INSERT INTO final_statement
               (session_id, text, author_identity, author_name, finalized_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT (session_id) DO UPDATE SET
                   text = excluded.text,
                   author_identity = excluded.author_identity,
                   author_name = excluded.author_name,
                   finalized_at = excluded.finalized_at""",
            (session_id, text, author_identity, author_name,
             datetime.now(timezone.utc).isoformat()),
        )
        return FinalStatementStore.get(conn, session_id)

    @staticmethod
    def get(conn: sqlite3.Connection, session_id: str) -> Optional[dict]:
        row = conn.execute(
            "SELECT * FROM final_statement WHERE session_id = ?", (session_id,)
        ).fetchone()
        if row is None:
            return None
        return dict(row)

    @staticmethod
    def rename_author(conn: sqlite3.Connection, session_id: str,
                      old_identity: str, new_identity: str) -> bool:
        cursor = conn.execute(
            """UPDATE final_statement SET author_identity = ?
               WHERE session_id = ? AND author_identity = ?""",
            (new_identity, session_id, old_identity),
        )
        return cursor.rowcount > 0


__all__ = ["FinalStatementStore"]
