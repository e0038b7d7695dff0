"""Session lifecycle: creation, phase advances and snapshots."""

import logging
import sqlite3

from workshop_platform.config import DEFAULT_TOOL_KIND, TOOL_PROBLEM_FRAMING, TOOL_VOTING_BOARD
from workshop_platform.errors import ConflictFailed, IllegalTransition, PersistenceFailed
from workshop_platform.models import Session, SessionSnapshot
from workshop_platform.persistence import SessionStore, VoteItemStore, transaction
from workshop_platform.session_state_machine import PHASE_INPUT, PHASE_SETUP, parse_phase, plan_transition
from workshop_platform.validation import (
    validate_description,
    validate_identity,
    validate_name,
    validate_title,
    validate_tool_kind,
)

from . import finalization_service, participant_service, statement_service, voting_service
from .lookups import require_visible_session

logger = logging.getLogger(__name__)

# Compare-and-set attempts before an advance gives up with a conflict.
_PHASE_WRITE_ATTEMPTS = 3


def create_session(conn: sqlite3.Connection, title: str, creator_identity: str,
                   creator_name: str, description: str | None = None,
                   tool_kind: str = DEFAULT_TOOL_KIND) -> str:
    """Create a session and register its creator as facilitator.

    The session row and the facilitator row are written in two steps. If the
    second step fails the session row is deleted again, so callers either get
    a session with a facilitator or an error; never a half-created session.
    Returns the new session id.
    """
    title = validate_title(title)
    description = validate_description(description)
    creator_identity = validate_identity(creator_identity, "creator_identity")
    creator_name = validate_name(creator_name, "creator_name")
    tool_kind = validate_tool_kind(tool_kind)

    try:
        with transaction(conn):
            session_id = SessionStore.create(
                conn, tool_kind, title, creator_identity, description=description,
            )
    except sqlite3.Error as e:
        raise PersistenceFailed("Failed to create session") from e

    try:
        participant_service.register_participant(
            conn, session_id, creator_identity, creator_name, is_creator_bootstrap=True,
        )
    except Exception as e:
        _discard_session(conn, session_id)
        raise PersistenceFailed(
            "Failed to register session creator; session was rolled back",
            session_id=session_id,
        ) from e

    logger.info("Created %s session %s for %r", tool_kind, session_id, creator_identity)
    return session_id


def _discard_session(conn: sqlite3.Connection, session_id: str) -> None:
    try:
        with transaction(conn):
            SessionStore.delete(conn, session_id)
    except (sqlite3.Error, PersistenceFailed):
        logger.exception("Could not delete half-created session %s", session_id)
    else:
        logger.warning("Rolled back half-created session %s", session_id)


def get_session(conn: sqlite3.Connection, session_id: str) -> Session:
    return require_visible_session(conn, session_id)


def list_sessions(conn: sqlite3.Connection) -> list[dict]:
    """List fully created sessions, newest first, with participant counts."""
    with transaction(conn, read_only=True):
        rows = SessionStore.list_all(conn)
    return [row for row in rows if row["participant_count"] > 0]


def advance_phase(conn: sqlite3.Connection, session_id: str, identity: str,
                  target_phase: str | int) -> str:
    """Move a session forward to *target_phase* (facilitator only).

    The stored phase is re-read on every attempt and written with a
    compare-and-set, so two facilitators advancing at once cannot skip or
    rewind a phase. Advancing to the phase the session is already in is a
    no-op. Returns the phase the session is in afterwards.
    """
    identity = validate_identity(identity)
    target = parse_phase(target_phase)

    for _ in range(_PHASE_WRITE_ATTEMPTS):
        with transaction(conn):
            session = require_visible_session(conn, session_id)
            participant_service.require_facilitator(conn, session, identity)
            new_phase = plan_transition(session.tool_kind, session.phase, target)
            if new_phase is None:
                return session.phase
            _check_entry_requirements(conn, session, new_phase)
            if SessionStore.update_phase(conn, session_id, session.phase, new_phase):
                logger.info(
                    "Session %s advanced %s -> %s by %r",
                    session_id, session.phase, new_phase, identity,
                )
                return new_phase
        logger.debug("Phase of session %s changed underneath advance; retrying", session_id)

    raise ConflictFailed(
        "Session phase keeps changing; refresh and retry",
        session_id=session_id,
        target_phase=target,
    )


def _check_entry_requirements(conn: sqlite3.Connection, session: Session, new_phase: str) -> None:
    if (
        session.tool_kind == TOOL_VOTING_BOARD
        and session.phase == PHASE_SETUP
        and new_phase == PHASE_INPUT
        and VoteItemStore.count(conn, session.id) == 0
    ):
        raise IllegalTransition(
            "Add at least one item before opening the vote",
            current_phase=session.phase,
            target_phase=new_phase,
        )


def get_session_snapshot(conn: sqlite3.Connection, session_id: str) -> SessionSnapshot:
    """Read a session with participants, statements, pins and results.

    The final statement is included only once the session is completed. All
    reads happen inside one read-only transaction so the parts agree with
    each other without waiting on concurrent writers.
    """
    with transaction(conn, read_only=True):
        session = require_visible_session(conn, session_id)
        snapshot = SessionSnapshot(
            session=session,
            participants=participant_service.list_participants(conn, session_id),
        )
        if session.tool_kind == TOOL_PROBLEM_FRAMING:
            snapshot.statements = statement_service.list_with_pin_counts(conn, session_id)
            snapshot.final_statement = finalization_service.get_final_statement(conn, session_id)
        else:
            snapshot.items = voting_service.list_items(conn, session_id)
            snapshot.results = voting_service.voting_results(
                conn, session_id, items=snapshot.items,
            )["results"]
    return snapshot


__all__ = [
    "create_session",
    "get_session",
    "list_sessions",
    "advance_phase",
    "get_session_snapshot",
]
