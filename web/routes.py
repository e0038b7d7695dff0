"""
REST API routes for the decision workshop.
"""

import logging
import sqlite3
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException

from contracts.v1 import (
    AdvanceRequest,
    AdvanceResponse,
    AllocationResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    FinalizeRequest,
    FinalStatementContract,
    ItemRequest,
    JoinSessionRequest,
    ParticipantContract,
    PinRequest,
    PinToggleResponse,
    ReconcileIdentityRequest,
    ReconcileIdentityResponse,
    SessionListResponse,
    SessionSnapshotResponse,
    StatementContract,
    StatementRequest,
    VoteItemContract,
    VoteRequest,
    VotingResultsResponse,
)
from workshop_platform.errors import PersistenceFailed, WorkshopError
from workshop_platform.persistence import get_connection, get_db_path
from workshop_platform.services import (
    add_item,
    advance_phase,
    create_session,
    finalize,
    get_allocation,
    get_session_snapshot,
    join_session,
    list_sessions,
    reconcile_identity,
    submit_statement,
    submit_vote_allocation,
    toggle_pin,
    voting_results,
)

from . import __version__ as WEB_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

_STATUS_BY_CATEGORY = {
    "validation": 400,
    "authorization": 403,
    "not_found": 404,
    "conflict": 409,
    "closed": 409,
    "persistence": 500,
}

# What a client should do next, by failure category.
_NEXT_ACTION_BY_CATEGORY = {
    "authorization": "redirect",
    "conflict": "refresh",
    "closed": "refresh",
    "persistence": "retry",
}


# --- Helpers ---

def get_db() -> Iterator[sqlite3.Connection]:
    """Open one connection per request."""
    try:
        conn = get_connection(get_db_path())
    except sqlite3.Error as e:
        failure = PersistenceFailed("Could not open the workshop database", reason=str(e))
        raise _http_error(failure) from e
    try:
        yield conn
    finally:
        conn.close()


def _http_error(err: WorkshopError) -> HTTPException:
    """Translate a workshop failure to an ``HTTPException`` with a structured detail."""
    status_code = _STATUS_BY_CATEGORY.get(err.category, 500)
    detail = err.to_dict()
    next_action = _NEXT_ACTION_BY_CATEGORY.get(err.category)
    if next_action:
        detail.setdefault("next_action", next_action)
    if status_code >= 500:
        logger.error("%s: %s", err.code, err.message)
    else:
        logger.info("Request rejected (%s): %s", err.code, err.message)
    return HTTPException(status_code=status_code, detail=detail)


# --- Routes ---

@router.get("/health")
async def health():
    """Report whether the database can be opened and queried."""
    try:
        conn = get_connection(get_db_path())
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
    except sqlite3.Error as e:
        logger.error("Health check failed: %s", e)
        raise HTTPException(
            status_code=503,
            detail={"status": "unhealthy", "database": "unavailable", "error": str(e)},
        ) from e
    return {"status": "ok", "database": "ok", "version": WEB_VERSION}


@router.post("/sessions", status_code=201, response_model=CreateSessionResponse)
async def create_session_route(req: CreateSessionRequest, conn: sqlite3.Connection = Depends(get_db)):
    """Create a session and register its creator as facilitator."""
    try:
        session_id = create_session(
            conn,
            title=req.title,
            description=req.description,
            creator_identity=req.creator_identity,
            creator_name=req.creator_name,
            tool_kind=req.tool_kind,
        )
    except WorkshopError as e:
        raise _http_error(e) from e
    return {"session_id": session_id}


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(conn: sqlite3.Connection = Depends(get_db)):
    """List sessions, newest first."""
    return {"sessions": list_sessions(conn)}


@router.get("/sessions/{session_id}", response_model=SessionSnapshotResponse)
async def get_session_route(session_id: str, conn: sqlite3.Connection = Depends(get_db)):
    """Get the full snapshot of a session."""
    try:
        snapshot = get_session_snapshot(conn, session_id)
    except WorkshopError as e:
        raise _http_error(e) from e
    return snapshot.to_dict()


@router.post("/sessions/{session_id}/participants", status_code=201, response_model=ParticipantContract)
async def join_session_route(session_id: str, req: JoinSessionRequest,
                             conn: sqlite3.Connection = Depends(get_db)):
    """Join a session as a participant."""
    try:
        participant = join_session(conn, session_id, req.identity, req.name)
    except WorkshopError as e:
        raise _http_error(e) from e
    return participant.to_dict()


@router.post("/sessions/{session_id}/participants/reconcile", response_model=ReconcileIdentityResponse)
async def reconcile_identity_route(session_id: str, req: ReconcileIdentityRequest,
                                   conn: sqlite3.Connection = Depends(get_db)):
    """Move a creator's rows from a cached identity to the authoritative one."""
    try:
        result = reconcile_identity(
            conn, session_id, req.cached_identity, req.authoritative_identity,
        )
    except WorkshopError as e:
        raise _http_error(e) from e
    return {"result": result}


@router.post("/sessions/{session_id}/statements", status_code=201, response_model=StatementContract)
async def submit_statement_route(session_id: str, req: StatementRequest,
                                 conn: sqlite3.Connection = Depends(get_db)):
    """Create or replace the caller's statement."""
    try:
        statement = submit_statement(conn, session_id, req.identity, req.name, req.text)
    except WorkshopError as e:
        raise _http_error(e) from e
    return statement.to_dict()


@router.post("/sessions/{session_id}/pins", response_model=PinToggleResponse)
async def toggle_pin_route(session_id: str, req: PinRequest,
                           conn: sqlite3.Connection = Depends(get_db)):
    """Toggle the caller's pin on a statement."""
    try:
        result = toggle_pin(conn, session_id, req.statement_id, req.identity, req.name)
    except WorkshopError as e:
        raise _http_error(e) from e
    return {"result": result, "statement_id": req.statement_id}


@router.post("/sessions/{session_id}/finalize", status_code=201, response_model=FinalStatementContract)
async def finalize_route(session_id: str, req: FinalizeRequest,
                         conn: sqlite3.Connection = Depends(get_db)):
    """Record the final statement and complete the session."""
    try:
        final = finalize(conn, session_id, req.identity, req.name, req.text)
    except WorkshopError as e:
        raise _http_error(e) from e
    return final.to_dict()


@router.post("/sessions/{session_id}/advance", response_model=AdvanceResponse)
async def advance_route(session_id: str, req: AdvanceRequest,
                        conn: sqlite3.Connection = Depends(get_db)):
    """Advance the session to the requested phase."""
    try:
        phase = advance_phase(conn, session_id, req.identity, req.target_phase)
    except WorkshopError as e:
        raise _http_error(e) from e
    return {"session_id": session_id, "phase": phase}


@router.post("/sessions/{session_id}/items", status_code=201, response_model=VoteItemContract)
async def add_item_route(session_id: str, req: ItemRequest,
                         conn: sqlite3.Connection = Depends(get_db)):
    """Add an item to a voting board."""
    try:
        item = add_item(conn, session_id, req.identity, req.title, req.description)
    except WorkshopError as e:
        raise _http_error(e) from e
    return item.to_dict()


@router.post("/sessions/{session_id}/votes", response_model=AllocationResponse)
async def submit_votes_route(session_id: str, req: VoteRequest,
                             conn: sqlite3.Connection = Depends(get_db)):
    """Store the caller's point allocation."""
    try:
        allocation = submit_vote_allocation(
            conn, session_id, req.identity, req.pairs(), merge=req.merge, notes=req.notes(),
        )
    except WorkshopError as e:
        raise _http_error(e) from e
    return allocation.to_dict()


@router.get("/sessions/{session_id}/votes/{identity}", response_model=AllocationResponse)
async def get_votes_route(session_id: str, identity: str,
                          conn: sqlite3.Connection = Depends(get_db)):
    """Get a participant's current allocation and remaining points."""
    try:
        allocation = get_allocation(conn, session_id, identity)
    except WorkshopError as e:
        raise _http_error(e) from e
    return allocation.to_dict()


@router.get("/sessions/{session_id}/results", response_model=VotingResultsResponse)
async def results_route(session_id: str, conn: sqlite3.Connection = Depends(get_db)):
    """Get aggregated voting results and consensus metrics."""
    try:
        return voting_results(conn, session_id)
    except WorkshopError as e:
        raise _http_error(e) from e
