"""Domain models shared by services, contracts and clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class Session:
    """One facilitated workshop exercise."""

    id: str
    tool_kind: str
    title: str
    creator_identity: str
    phase: str
    created_at: str
    description: str | None = None
    completed_at: str | None = None

    @property
    def is_completed(self) -> bool:
        return self.phase == "completed"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            id=data["id"],
            tool_kind=data.get("tool_kind", "problem-framing"),
            title=data.get("title", ""),
            creator_identity=data.get("creator_identity", ""),
            phase=data.get("phase", "setup"),
            created_at=data.get("created_at", ""),
            description=data.get("description"),
            completed_at=data.get("completed_at"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tool_kind": self.tool_kind,
            "title": self.title,
            "description": self.description,
            "creator_identity": self.creator_identity,
            "phase": self.phase,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


@dataclass(slots=True)
class Participant:
    session_id: str
    identity: str
    name: str
    is_facilitator: bool = False
    has_submitted: bool = False
    joined_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        return cls(
            session_id=data["session_id"],
            identity=data["participant_identity"],
            name=data.get("participant_name", ""),
            is_facilitator=bool(data.get("is_facilitator", False)),
            has_submitted=bool(data.get("has_submitted", False)),
            joined_at=data.get("joined_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "identity": self.identity,
            "name": self.name,
            "is_facilitator": self.is_facilitator,
            "has_submitted": self.has_submitted,
            "joined_at": self.joined_at,
        }


@dataclass(slots=True)
class Pin:
    statement_id: int
    endorser_identity: str
    endorser_name: str
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pin":
        return cls(
            statement_id=data["statement_id"],
            endorser_identity=data["endorser_identity"],
            endorser_name=data.get("endorser_name", ""),
            created_at=data.get("created_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "statement_id": self.statement_id,
            "endorser_identity": self.endorser_identity,
            "endorser_name": self.endorser_name,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class Statement:
    """A participant's free-text input, annotated with its current pins."""

    id: int
    session_id: str
    author_identity: str
    author_name: str
    text: str
    submitted_at: str = ""
    updated_at: str = ""
    pins: list[Pin] = field(default_factory=list)

    @property
    def pin_count(self) -> int:
        return len(self.pins)

    @property
    def pinned_by(self) -> set[str]:
        return {pin.endorser_identity for pin in self.pins}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Statement":
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            author_identity=data["author_identity"],
            author_name=data.get("author_name", ""),
            text=data.get("text", ""),
            submitted_at=data.get("submitted_at", ""),
            updated_at=data.get("updated_at") or data.get("submitted_at", ""),
            pins=[Pin.from_dict(p) for p in data.get("pins", [])],
        )

    def to_dict(self, *, include_pins: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "session_id": self.session_id,
            "author_identity": self.author_identity,
            "author_name": self.author_name,
            "text": self.text,
            "submitted_at": self.submitted_at,
            "updated_at": self.updated_at,
        }
        if include_pins:
            payload.update(
                {
                    "pin_count": self.pin_count,
                    "pinned_by": sorted(self.pinned_by),
                    "pins": [pin.to_dict() for pin in self.pins],
                }
            )
        return payload


@dataclass(slots=True)
class FinalStatement:
    session_id: str
    text: str
    author_identity: str
    author_name: str
    finalized_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FinalStatement":
        return cls(
            session_id=data["session_id"],
            text=data.get("text", ""),
            author_identity=data["author_identity"],
            author_name=data.get("author_name", ""),
            finalized_at=data.get("finalized_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "text": self.text,
            "author_identity": self.author_identity,
            "author_name": self.author_name,
            "finalized_at": self.finalized_at,
        }


@dataclass(slots=True)
class VoteItem:
    id: int
    session_id: str
    title: str
    description: str | None = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoteItem":
        return cls(
            id=data["id"],
            session_id=data["session_id"],
            title=data.get("title", ""),
            description=data.get("description"),
            created_at=data.get("created_at", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
        }


@dataclass(slots=True)
class VoteAllocation:
    """A participant's current point allocation.

    ``remaining`` is derived from ``points`` on every access and is never
    stored.
    """

    session_id: str
    identity: str
    points: dict[int, int] = field(default_factory=dict)
    budget: int = 100
    notes: dict[int, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.points.values())

    @property
    def remaining(self) -> int:
        return self.budget - self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "identity": self.identity,
            "allocations": [
                {"item_id": item_id, "points": points, "note": self.notes.get(item_id)}
                for item_id, points in sorted(self.points.items())
            ],
            "total": self.total,
            "remaining": self.remaining,
            "budget": self.budget,
        }


@dataclass(slots=True)
class SessionSnapshot:
    """Everything a client needs to render a session, read in one go.

    ``final_statement`` is only set once the session is completed; voting
    fields stay empty for problem-framing sessions.
    """

    session: Session
    participants: list[Participant] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    final_statement: FinalStatement | None = None
    items: list[VoteItem] = field(default_factory=list)
    results: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session": self.session.to_dict(),
            "participants": [p.to_dict() for p in self.participants],
            "statements": [s.to_dict() for s in self.statements],
            "final_statement": self.final_statement.to_dict() if self.final_statement else None,
            "items": [i.to_dict() for i in self.items],
            "results": list(self.results),
        }


__all__ = [
    "SessionSnapshot",
    "Session",
    "Participant",
    "Pin",
    "Statement",
    "FinalStatement",
    "VoteItem",
    "VoteAllocation",
]
