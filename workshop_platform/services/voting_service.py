"""Voting-board items, point allocations and aggregated results."""

import logging
import sqlite3
from typing import Any, Iterable, Mapping, Optional

from workshop_platform.config import MAX_ITEMS, POINT_BUDGET, TOOL_VOTING_BOARD
from workshop_platform.errors import IllegalTransition, ValidationFailed, WrongPhase
from workshop_platform.models import VoteAllocation, VoteItem
from workshop_platform.persistence import VoteItemStore, VoteStore, transaction
from workshop_platform.point_budget import validate_allocation
from workshop_platform.session_state_machine import PHASE_INPUT, PHASE_SETUP, ensure_open
from workshop_platform.validation import validate_description, validate_identity, validate_note, validate_title

from . import participant_service
from .lookups import require_participant, require_session, require_tool_kind, require_visible_session

logger = logging.getLogger(__name__)

# Most contested items reported; see consensus_metrics.
CONTESTED_LIMIT = 3
ALIGNMENT_TOP_N = 3
# vote_count >= 0.8 * total_points, i.e. at most 1.25 points per voter.
UNANIMOUS_POINTS_PER_VOTE = 1.25


def add_item(conn: sqlite3.Connection, session_id: str, identity: str,
             title: str, description: str | None = None) -> VoteItem:
    """Add an item to a voting board (facilitator only, during setup)."""
    identity = validate_identity(identity)
    title = validate_title(title)
    description = validate_description(description)

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        require_tool_kind(session, TOOL_VOTING_BOARD)
        ensure_open(session.phase)
        participant_service.require_facilitator(conn, session, identity)
        if session.phase != PHASE_SETUP:
            raise IllegalTransition(
                "Items can only be added during setup",
                current_phase=session.phase,
                target_phase=PHASE_SETUP,
            )
        if VoteItemStore.count(conn, session_id) >= MAX_ITEMS:
            raise ValidationFailed(
                f"A voting board holds at most {MAX_ITEMS} items",
                field="items",
            )
        item_id = VoteItemStore.create(conn, session_id, title, description)
        row = VoteItemStore.get(conn, item_id)

    logger.info("Item %s added to session %s", item_id, session_id)
    return VoteItem.from_dict(row)


def list_items(conn: sqlite3.Connection, session_id: str) -> list[VoteItem]:
    require_session(conn, session_id)
    return [VoteItem.from_dict(r) for r in VoteItemStore.list_for_session(conn, session_id)]


def submit_vote_allocation(conn: sqlite3.Connection, session_id: str, identity: str,
                           allocations: Iterable[tuple[int, int]],
                           merge: bool = False,
                           notes: Optional[Mapping[int, str | None]] = None) -> VoteAllocation:
    """Validate and store a participant's point allocation.

    With ``merge=False`` the submission replaces the whole stored allocation.
    With ``merge=True`` the submitted pairs overlay the stored ones and the
    budget is checked against the combined result. Either way nothing is
    written unless the effective allocation passes the budget checks.

    *notes* maps item ids to an optional comment. When merging, a blank note
    clears the stored one; items that end up without points lose their note.
    """
    identity = validate_identity(identity)
    pairs = list(allocations)
    submitted_notes = {
        item_id: validate_note(note) for item_id, note in (notes or {}).items()
    }

    with transaction(conn):
        session = require_visible_session(conn, session_id)
        require_tool_kind(session, TOOL_VOTING_BOARD)
        ensure_open(session.phase)
        if session.phase != PHASE_INPUT:
            raise WrongPhase(
                "Voting is not open in this phase",
                current_phase=session.phase,
                required_phase=PHASE_INPUT,
            )
        require_participant(conn, session_id, identity)

        validate_allocation(pairs)
        known = {row["id"] for row in VoteItemStore.list_for_session(conn, session_id)}
        referenced = {item_id for item_id, _ in pairs} | set(submitted_notes)
        unknown = sorted(referenced - known)
        if unknown:
            raise ValidationFailed(
                "Allocation references items outside this session",
                field="allocations",
                items=unknown,
            )

        if merge:
            effective = VoteStore.load_allocation(conn, session_id, identity)
            effective_notes = VoteStore.load_notes(conn, session_id, identity)
        else:
            effective, effective_notes = {}, {}
        effective.update(pairs)
        effective_notes.update(submitted_notes)
        validate_allocation(effective.items())

        stored = {item_id: points for item_id, points in effective.items() if points > 0}
        stored_notes = {
            item_id: note for item_id, note in effective_notes.items()
            if note is not None and item_id in stored
        }
        VoteStore.replace_allocation(conn, session_id, identity, stored, notes=stored_notes)
        participant_service.mark_submitted(conn, session_id, identity)

    logger.info(
        "Allocation of %s points by %r stored in session %s",
        sum(stored.values()), identity, session_id,
    )
    return VoteAllocation(session_id=session_id, identity=identity, points=stored,
                          budget=POINT_BUDGET, notes=stored_notes)


def get_allocation(conn: sqlite3.Connection, session_id: str, identity: str) -> VoteAllocation:
    identity = validate_identity(identity)
    with transaction(conn, read_only=True):
        require_session(conn, session_id)
        require_participant(conn, session_id, identity)
        return VoteAllocation(
            session_id=session_id,
            identity=identity,
            points=VoteStore.load_allocation(conn, session_id, identity),
            budget=POINT_BUDGET,
            notes=VoteStore.load_notes(conn, session_id, identity),
        )


def aggregate_votes(items: list[VoteItem], votes: list[dict]) -> list[dict[str, Any]]:
    """Sum points per item, most points first (ties keep item order)."""
    totals = {item.id: {"points": 0, "voters": 0} for item in items}
    for vote in votes:
        entry = totals.get(vote["item_id"])
        if entry is None:
            continue
        entry["points"] += vote["points"]
        if vote["points"] > 0:
            entry["voters"] += 1

    results = [
        {
            "item_id": item.id,
            "title": item.title,
            "description": item.description,
            "total_points": totals[item.id]["points"],
            "vote_count": totals[item.id]["voters"],
        }
        for item in items
    ]
    results.sort(key=lambda r: r["total_points"], reverse=True)
    return results


def consensus_metrics(results: list[dict[str, Any]]) -> dict[str, Any]:
    """Summarise how aligned the group is.

    ``team_alignment`` is the share (0-100) of all points that went to the
    top three items. ``contested_items`` lists items many people voted for
    with comparatively few points each. ``unanimous_items`` lists
    above-average items carried by many small allocations (at most
    ``UNANIMOUS_POINTS_PER_VOTE`` points per voter on average).
    """
    total = sum(r["total_points"] for r in results)
    if not results or total == 0:
        return {
            "team_alignment": 0,
            "consensus_leader": None,
            "contested_items": [],
            "unanimous_items": [],
        }

    top = sum(r["total_points"] for r in results[:ALIGNMENT_TOP_N])
    avg_points = total / len(results)
    avg_voters = sum(r["vote_count"] for r in results) / len(results)
    contested = [
        r["item_id"]
        for r in results
        if r["vote_count"] > avg_voters and r["total_points"] < avg_points
    ][:CONTESTED_LIMIT]
    unanimous = [
        r["item_id"]
        for r in results
        if r["total_points"] > avg_points
        and r["total_points"] <= r["vote_count"] * UNANIMOUS_POINTS_PER_VOTE
    ]
    return {
        "team_alignment": round(top / total * 100),
        "consensus_leader": results[0]["item_id"],
        "contested_items": contested,
        "unanimous_items": unanimous,
    }


def voting_results(conn: sqlite3.Connection, session_id: str,
                   items: Optional[list[VoteItem]] = None) -> dict[str, Any]:
    """Aggregated totals for a voting board plus consensus metrics."""
    with transaction(conn, read_only=True):
        session = require_visible_session(conn, session_id)
        require_tool_kind(session, TOOL_VOTING_BOARD)
        if items is None:
            items = list_items(conn, session_id)
        results = aggregate_votes(items, VoteStore.list_for_session(conn, session_id))
        participants = participant_service.list_participants(conn, session_id)
    return {
        "session_id": session_id,
        "phase": session.phase,
        "results": results,
        "total_points": sum(r["total_points"] for r in results),
        "voters": sum(1 for p in participants if p.has_submitted),
        "participants": len(participants),
        "consensus": consensus_metrics(results),
    }
