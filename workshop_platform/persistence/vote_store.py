"""Platform-owned voting-board stores (items and point allocations)."""

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class VoteItemStore:
    """Items a voting board distributes points across."""

    @staticmethod
    def create(conn: sqlite3.Connection, session_id: str, title: str,
               description: str | None = None) -> int:
        cursor = conn.execute(
            """INSERT INTO vote_item (session_id, title, description, created_at)
               VALUES (?, ?, ?, ?)""",
            (session_id, title, description, datetime.now(timezone.utc).isoformat()),
        )
        return cursor.lastrowid

    @staticmethod
    def get(conn: sqlite3.Connection, item_id: int) -> Optional[dict]:
        row = conn.execute(
            "SELECT * FROM vote_item WHERE id = ?", (item_id,)
        ).fetchone()
        if row is None:
            return None
        return dict(row)

    @staticmethod
    def list_for_session(conn: sqlite3.Connection, session_id: str) -> list[dict]:
        rows = conn.execute(
            "SELECT * FROM vote_item WHERE session_id = ? ORDER BY created_at, id",
            (session_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def count(conn: sqlite3.Connection, session_id: str) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM vote_item WHERE session_id = ?", (session_id,)
        ).fetchone()
        return row[0]


class VoteStore:
    """Per-participant point allocations.

    Only non-zero allocations are stored; a participant's remaining points
    are never persisted.
    """

    @staticmethod
    def replace_allocation(conn: sqlite3.Connection, session_id: str,
                           identity: str, points_by_item: dict[int, int],
                           notes: Optional[dict[int, str]] = None) -> None:
        """Replace the participant's whole allocation with *points_by_item*.

        Notes are kept only for items that end up with points.
        """
        notes = notes or {}
        conn.execute(
            "DELETE FROM vote WHERE session_id = ? AND participant_identity = ?",
            (session_id, identity),
        )
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            (session_id, identity, item_id, points, notes.get(item_id), now)
            for item_id, points in points_by_item.items()
            if points > 0
        ]
        conn.executemany(
            """INSERT INTO vote
               (session_id, participant_identity, item_id, points, note, created_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            rows,
        )

    @staticmethod
    def load_allocation(conn: sqlite3.Connection, session_id: str,
                        identity: str) -> dict[int, int]:
        rows = conn.execute(
            """SELECT item_id, points FROM vote
               WHERE session_id = ? AND participant_identity = ?
               ORDER BY item_id""",
            (session_id, identity),
        ).fetchall()
        return {r["item_id"]: r["points"] for r in rows}

    @staticmethod
    def load_notes(conn: sqlite3.Connection, session_id: str, identity: str) -> dict[int, str]:
        rows = conn.execute(
            """SELECT item_id, note FROM vote
               WHERE session_id = ? AND participant_identity = ? AND note IS NOT NULL""",
            (session_id, identity),
        ).fetchall()
        return {r["item_id"]: r["note"] for r in rows}

    @staticmethod
    def list_for_session(conn: sqlite3.Connection, session_id: str) -> list[dict]:
        rows = conn.execute(
            "SELECT * FROM vote WHERE session_id = ? ORDER BY id",
            (session_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    @staticmethod
    def rename_participant(conn: sqlite3.Connection, session_id: str,
                           old_identity: str, new_identity: str) -> int:
        cursor = conn.execute(
            """UPDATE vote SET participant_identity = ?
               WHERE session_id = ? AND participant_identity = ?""",
            (new_identity, session_id, old_identity),
        )
        return cursor.rowcount


__all__ = ["VoteItemStore", "VoteStore"]
