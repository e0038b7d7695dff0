"""Problem-framing statements (one per participant, editable until close)."""

import logging
import sqlite3
from collections import defaultdict

from workshop_platform.config import TOOL_PROBLEM_FRAMING
from workshop_platform.models import Pin, Statement
from workshop_platform.persistence import PinStore, StatementStore, transaction
from workshop_platform.session_state_machine import ensure_open
from workshop_platform.validation import validate_identity, validate_name, validate_statement_text

from . import participant_service
from .lookups import require_participant, require_session, require_tool_kind, require_visible_session

logger = logging.getLogger(__name__)


def submit_statement(conn: sqlite3.Connection, session_id: str, identity: str,
                     name: str, text: str) -> Statement:
    """Create or replace the caller's statement and flag them as submitted.

    Resubmitting keeps the statement id (and therefore its pins); only the
    text, display name and ``updated_at`` change.
    """
    identity = validate_identity(identity)
    name = validate_name(name)
    text = validate_statement_text(text)

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        require_tool_kind(session, TOOL_PROBLEM_FRAMING)
        ensure_open(session.phase)
        require_participant(conn, session_id, identity)

        row = StatementStore.upsert(conn, session_id, identity, name, text)
        participant_service.mark_submitted(conn, session_id, identity)
        pins = PinStore.list_for_statement(conn, row["id"])

    logger.info("Statement %s saved by %r in session %s", row["id"], identity, session_id)
    statement = Statement.from_dict(row)
    statement.pins = [Pin.from_dict(p) for p in pins]
    return statement


def list_with_pin_counts(conn: sqlite3.Connection, session_id: str) -> list[Statement]:
    """Statements of a session with their current pins attached."""
    require_session(conn, session_id)
    pins_by_statement: dict[int, list[Pin]] = defaultdict(list)
    for row in PinStore.list_for_session(conn, session_id):
        pins_by_statement[row["statement_id"]].append(Pin.from_dict(row))

    statements = []
    for row in StatementStore.list_for_session(conn, session_id):
        statement = Statement.from_dict(row)
        statement.pins = pins_by_statement.get(statement.id, [])
        statements.append(statement)
    return statements
