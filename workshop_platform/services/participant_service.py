"""Platform-owned participant registry."""

import logging
import sqlite3

from workshop_platform.errors import DuplicateIdentity, NotFacilitator, ParticipantNotFound, SessionNotFound
from workshop_platform.models import Participant, Session
from workshop_platform.persistence import (
    FinalStatementStore,
    ParticipantStore,
    PinStore,
    StatementStore,
    VoteStore,
    transaction,
)
from workshop_platform.session_state_machine import ensure_open
from workshop_platform.validation import validate_identity, validate_name

from .lookups import require_session, require_visible_session

logger = logging.getLogger(__name__)

RECONCILE_MIGRATED = "migrated"
RECONCILE_UNCHANGED = "unchanged"


def register_participant(conn: sqlite3.Connection, session_id: str, identity: str,
                         name: str, is_creator_bootstrap: bool = False) -> Participant:
    """Insert a participant row for *identity*.

    The facilitator flag is decided here and only here: the first row of a
    session is the facilitator, every later row is not. *is_creator_bootstrap*
    never grants the flag; it only lets us log a bootstrap that arrived after
    someone else already registered.
    """
    identity = validate_identity(identity)
    name = validate_name(name)

    with transaction(conn):
        session = require_session(conn, session_id)
        ensure_open(session.phase)

        if ParticipantStore.get(conn, session_id, identity) is not None:
            raise DuplicateIdentity(
                f"{identity!r} already joined this session",
                session_id=session_id,
                identity=identity,
            )

        first = ParticipantStore.count(conn, session_id) == 0
        if first and identity != session.creator_identity:
            # Only the creator may open the participant list.
            raise SessionNotFound(f"Session {session_id} not found", session_id=session_id)
        if is_creator_bootstrap and not first:
            logger.warning(
                "Bootstrap registration for session %s arrived after other participants; "
                "registering %r without facilitator role",
                session_id, identity,
            )

        try:
            row = ParticipantStore.insert(conn, session_id, identity, name, is_facilitator=first)
        except sqlite3.IntegrityError as e:
            raise DuplicateIdentity(
                f"{identity!r} already joined this session",
                session_id=session_id,
                identity=identity,
            ) from e

    logger.info(
        "Registered %s %r in session %s",
        "facilitator" if first else "participant", identity, session_id,
    )
    return Participant.from_dict(row)


def join_session(conn: sqlite3.Connection, session_id: str, identity: str,
                 name: str) -> Participant:
    """Join an existing session as a regular participant."""
    session = require_visible_session(conn, session_id)
    ensure_open(session.phase)
    return register_participant(conn, session_id, identity, name)


def mark_submitted(conn: sqlite3.Connection, session_id: str, identity: str) -> None:
    """Set the participant's submission flag (idempotent)."""
    if not ParticipantStore.mark_submitted(conn, session_id, identity):
        raise ParticipantNotFound(
            f"Participant {identity!r} has not joined session {session_id}",
            session_id=session_id,
            identity=identity,
        )


def is_facilitator(conn: sqlite3.Connection, session_id: str, identity: str) -> bool:
    """Return True when *identity* holds facilitator authority in the session.

    Authority is the stored facilitator flag OR a match with the session
    creator. The second signal covers sessions whose facilitator row still
    carries a pre-migration identity (see :func:`reconcile_identity`); keep
    this check here rather than repeating it at call sites.
    """
    session = require_session(conn, session_id)
    return _holds_facilitator_role(conn, session, identity)


def _holds_facilitator_role(conn: sqlite3.Connection, session: Session, identity: str) -> bool:
    row = ParticipantStore.get(conn, session.id, identity)
    if row is not None and row["is_facilitator"]:
        return True
    return identity == session.creator_identity


def require_facilitator(conn: sqlite3.Connection, session: Session, identity: str) -> None:
    if not _holds_facilitator_role(conn, session, identity):
        raise NotFacilitator(
            "Only the facilitator can perform this action",
            session_id=session.id,
            identity=identity,
        )


def list_participants(conn: sqlite3.Connection, session_id: str) -> list[Participant]:
    require_session(conn, session_id)
    return [Participant.from_dict(r) for r in ParticipantStore.list_for_session(conn, session_id)]


def reconcile_identity(conn: sqlite3.Connection, session_id: str,
                       cached_identity: str, authoritative_identity: str) -> str:
    """Rewrite a locally cached creator identity to the authoritative one.

    Applies only when *authoritative_identity* is the session creator, the
    row for *cached_identity* is the facilitator row and no row exists for
    the authoritative identity. Every row keyed by the cached identity in this
    session moves in one transaction. Calling it again is a no-op.
    """
    cached_identity = validate_identity(cached_identity, "cached_identity")
    authoritative_identity = validate_identity(authoritative_identity, "authoritative_identity")
    if cached_identity == authoritative_identity:
        return RECONCILE_UNCHANGED

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        ensure_open(session.phase)

        if authoritative_identity != session.creator_identity:
            return RECONCILE_UNCHANGED
        cached = ParticipantStore.get(conn, session_id, cached_identity)
        # Only the creator's own facilitator row may move; never another participant's.
        if cached is None or not cached["is_facilitator"]:
            return RECONCILE_UNCHANGED
        if ParticipantStore.get(conn, session_id, authoritative_identity) is not None:
            return RECONCILE_UNCHANGED

        ParticipantStore.rename_identity(conn, session_id, cached_identity, authoritative_identity)
        StatementStore.rename_author(conn, session_id, cached_identity, authoritative_identity)
        PinStore.rename_endorser(conn, session_id, cached_identity, authoritative_identity)
        VoteStore.rename_participant(conn, session_id, cached_identity, authoritative_identity)
        FinalStatementStore.rename_author(conn, session_id, cached_identity, authoritative_identity)

    logger.info(
        "Migrated identity %r -> %r in session %s",
        cached_identity, authoritative_identity, session_id,
    )
    return RECONCILE_MIGRATED
