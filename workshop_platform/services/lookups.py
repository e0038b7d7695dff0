"""Row lookups shared by the workflow services."""

import sqlite3

from workshop_platform.errors import ParticipantNotFound, SessionNotFound, ValidationFailed
from workshop_platform.models import Participant, Session
from workshop_platform.persistence import ParticipantStore, SessionStore


def require_session(conn: sqlite3.Connection, session_id: str) -> Session:
    """Load a session or raise ``SessionNotFound``."""
    row = SessionStore.get(conn, session_id)
    if row is None:
        raise SessionNotFound(f"Session {session_id} not found", session_id=session_id)
    return Session.from_dict(row)


def require_visible_session(conn: sqlite3.Connection, session_id: str) -> Session:
    """Like :func:`require_session`, but a session still being created
    (no participant registered yet) does not exist for readers."""
    session = require_session(conn, session_id)
    if ParticipantStore.count(conn, session_id) == 0:
        raise SessionNotFound(f"Session {session_id} not found", session_id=session_id)
    return session


def require_participant(conn: sqlite3.Connection, session_id: str,
                        identity: str) -> Participant:
    row = ParticipantStore.get(conn, session_id, identity)
    if row is None:
        raise ParticipantNotFound(
            f"Participant {identity!r} has not joined session {session_id}",
            session_id=session_id,
            identity=identity,
        )
    return Participant.from_dict(row)


def require_tool_kind(session: Session, tool_kind: str) -> None:
    if session.tool_kind != tool_kind:
        raise ValidationFailed(
            f"Session {session.id} is a {session.tool_kind} session, not {tool_kind}",
            field="tool_kind",
        )
