"""Finalization gate for problem-framing sessions.

A session counts as finalized only when its phase is ``completed``. The
final statement row is written before the phase, in the same transaction;
should a crash ever leave the row without the phase (for example a database
restored from a partial copy), :func:`reconcile_finalizations` repairs it.
"""

import logging
import sqlite3
from typing import Optional

from workshop_platform.config import TOOL_PROBLEM_FRAMING
from workshop_platform.errors import AlreadyFinalizedByOther, IllegalTransition, SessionClosed
from workshop_platform.models import FinalStatement
from workshop_platform.persistence import FinalStatementStore, SessionStore, transaction
from workshop_platform.session_state_machine import PHASE_COMPLETED, PHASE_FINALIZE
from workshop_platform.validation import validate_identity, validate_name, validate_statement_text

from . import participant_service
from .lookups import require_session, require_visible_session

logger = logging.getLogger(__name__)


def finalize(conn: sqlite3.Connection, session_id: str, identity: str,
             name: str, text: str) -> FinalStatement:
    """Record the facilitator's final statement and close the session.

    Re-finalizing by the same author overwrites the text and leaves the
    session completed. Any other facilitator-qualified identity is rejected
    once the session is completed.
    """
    identity = validate_identity(identity)
    name = validate_name(name)
    text = validate_statement_text(text)

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        if session.tool_kind != TOOL_PROBLEM_FRAMING:
            raise IllegalTransition(
                f"{session.tool_kind} sessions are not finalized with a statement",
                current_phase=session.phase,
                target_phase=PHASE_COMPLETED,
            )
        participant_service.require_facilitator(conn, session, identity)

        existing = FinalStatementStore.get(conn, session_id)
        if session.phase == PHASE_COMPLETED:
            if existing is None:
                raise SessionClosed("Session is completed and can no longer be changed",
                                    session_id=session_id)
            if existing["author_identity"] != identity:
                raise AlreadyFinalizedByOther(
                    "Session was already finalized by another facilitator",
                    session_id=session_id,
                    finalized_by=existing["author_identity"],
                )
        elif session.phase != PHASE_FINALIZE:
            raise IllegalTransition(
                f"Advance to '{PHASE_FINALIZE}' before finalizing",
                current_phase=session.phase,
                target_phase=PHASE_COMPLETED,
            )

        row = FinalStatementStore.upsert(conn, session_id, text, identity, name)
        SessionStore.complete(conn, session_id)

    logger.info("Session %s finalized by %r", session_id, identity)
    return FinalStatement.from_dict(row)


def get_final_statement(conn: sqlite3.Connection, session_id: str) -> Optional[FinalStatement]:
    """Return the final statement of a completed session, else None."""
    session = require_session(conn, session_id)
    if not session.is_completed:
        return None
    row = FinalStatementStore.get(conn, session_id)
    return FinalStatement.from_dict(row) if row else None


def reconcile_finalizations(conn: sqlite3.Connection) -> list[str]:
    """Complete sessions that hold a final statement but never reached ``completed``.

    Only the phase write is repeated; the statement text is left as stored.
    Returns the ids of the repaired sessions.
    """
    repaired = []
    for session_id in SessionStore.list_finalized_but_open(conn):
        with transaction(conn):
            if not SessionStore.complete(conn, session_id):
                continue
        repaired.append(session_id)
        logger.warning("Completed half-finalized session %s", session_id)
    return repaired
