"""
Shared fixtures for decision-workshop tests.
"""

import sqlite3

import pytest

from workshop_platform.config import TOOL_VOTING_BOARD
from workshop_platform.persistence import init_db
from workshop_platform.services import add_item, advance_phase, create_session, join_session

FACILITATOR = "alice-id"
FACILITATOR_NAME = "Alice"


@pytest.fixture
def db_conn():
    """Create an in-memory SQLite connection with the workshop schema."""
    conn = sqlite3.connect(":memory:", isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    init_db(conn)
    yield conn
    conn.close()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point WORKSHOP_DB_PATH at a fresh file database for this test."""
    path = tmp_path / "workshop.db"
    monkeypatch.setenv("WORKSHOP_DB_PATH", str(path))
    return path


@pytest.fixture
def pf_session(db_conn):
    """A problem-framing session created by Alice, still in setup."""
    return create_session(
        db_conn,
        title="Why do onboarding tickets stall?",
        description="Frame the problem before we pick solutions",
        creator_identity=FACILITATOR,
        creator_name=FACILITATOR_NAME,
    )


@pytest.fixture
def pf_input_session(db_conn, pf_session):
    """Problem-framing session in the input phase with Bob and Carol joined."""
    join_session(db_conn, pf_session, "bob-id", "Bob")
    join_session(db_conn, pf_session, "carol-id", "Carol")
    advance_phase(db_conn, pf_session, FACILITATOR, "input")
    return pf_session


@pytest.fixture
def vb_session(db_conn):
    """A voting-board session by Alice with items X, Y, Z, open for votes.

    Returns ``(session_id, {"X": id, "Y": id, "Z": id})``.
    """
    sid = create_session(
        db_conn,
        title="Q3 priorities",
        creator_identity=FACILITATOR,
        creator_name=FACILITATOR_NAME,
        tool_kind=TOOL_VOTING_BOARD,
    )
    items = {
        title: add_item(db_conn, sid, FACILITATOR, title).id
        for title in ("X", "Y", "Z")
    }
    join_session(db_conn, sid, "bob-id", "Bob")
    advance_phase(db_conn, sid, FACILITATOR, "input")
    return sid, items
