"""Pin ledger: per-participant endorsements of statements."""

import logging
import sqlite3

from workshop_platform.errors import StatementNotFound
from workshop_platform.persistence import PinStore, StatementStore, transaction
from workshop_platform.session_state_machine import ensure_open
from workshop_platform.validation import validate_identity, validate_name

from .lookups import require_participant, require_visible_session

logger = logging.getLogger(__name__)

PIN_ADDED = "added"
PIN_REMOVED = "removed"


def toggle_pin(conn: sqlite3.Connection, session_id: str, statement_id: int,
               identity: str, name: str) -> str:
    """Add the caller's pin on a statement, or remove it if present.

    Returns ``"added"`` or ``"removed"``. Toggling twice restores the
    original state. When two toggles from the same identity race, the
    delete-first order inside one write transaction means each call sees the
    other's result; an insert that still hits the unique constraint is
    treated as a removal.
    """
    identity = validate_identity(identity)
    name = validate_name(name)

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        ensure_open(session.phase)

        statement = StatementStore.get(conn, statement_id)
        if statement is None or statement["session_id"] != session_id:
            raise StatementNotFound(
                f"Statement {statement_id} not found in session {session_id}",
                session_id=session_id,
                statement_id=statement_id,
            )
        require_participant(conn, session_id, identity)

        if PinStore.delete(conn, statement_id, identity):
            outcome = PIN_REMOVED
        else:
            try:
                PinStore.insert(conn, statement_id, identity, name)
                outcome = PIN_ADDED
            except sqlite3.IntegrityError:
                logger.warning(
                    "Concurrent pin on statement %s by %r; treating toggle as removal",
                    statement_id, identity,
                )
                PinStore.delete(conn, statement_id, identity)
                outcome = PIN_REMOVED

    logger.debug("Pin %s on statement %s by %r", outcome, statement_id, identity)
    return outcome
