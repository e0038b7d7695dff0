"""Pydantic contracts for the v1 workshop HTTP API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ToolKind = Literal["problem-framing", "voting-board"]


class _StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# --- Requests ---

class CreateSessionRequest(_StrictModel):
    title: str = Field(min_length=1)
    description: str | None = None
    creator_identity: str = Field(min_length=1)
    creator_name: str = Field(min_length=1)
    tool_kind: ToolKind = "problem-framing"


class JoinSessionRequest(_StrictModel):
    identity: str = Field(min_length=1)
    name: str = Field(min_length=1)


class ReconcileIdentityRequest(_StrictModel):
    cached_identity: str = Field(min_length=1)
    authoritative_identity: str = Field(min_length=1)


class StatementRequest(_StrictModel):
    identity: str = Field(min_length=1)
    name: str = Field(min_length=1)
    text: str = Field(min_length=1)


class PinRequest(_StrictModel):
    statement_id: int
    identity: str = Field(min_length=1)
    name: str = Field(min_length=1)


class FinalizeRequest(_StrictModel):
    identity: str = Field(min_length=1)
    name: str = Field(min_length=1)
    text: str = Field(min_length=1)


class AdvanceRequest(_StrictModel):
    identity: str = Field(min_length=1)
    target_phase: str | int


class ItemRequest(_StrictModel):
    identity: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None


class AllocationEntry(_StrictModel):
    item_id: int
    # Sign and range are checked by the point-budget validator.
    points: int
    note: str | None = None


class VoteRequest(_StrictModel):
    identity: str = Field(min_length=1)
    allocations: list[AllocationEntry] = Field(default_factory=list)
    merge: bool = False

    def pairs(self) -> list[tuple[int, int]]:
        return [(entry.item_id, entry.points) for entry in self.allocations]

    def notes(self) -> dict[int, str]:
        return {entry.item_id: entry.note for entry in self.allocations if entry.note is not None}


# --- Responses ---

class SessionContract(_StrictModel):
    id: str
    tool_kind: ToolKind
    title: str
    description: str | None = None
    creator_identity: str
    phase: str
    created_at: str
    completed_at: str | None = None


class SessionSummaryContract(SessionContract):
    participant_count: int = Field(ge=0)


class ParticipantContract(_StrictModel):
    session_id: str
    identity: str
    name: str
    is_facilitator: bool
    has_submitted: bool
    joined_at: str


class PinContract(_StrictModel):
    statement_id: int
    endorser_identity: str
    endorser_name: str
    created_at: str


class StatementContract(_StrictModel):
    id: int
    session_id: str
    author_identity: str
    author_name: str
    text: str
    submitted_at: str
    updated_at: str
    pin_count: int = Field(ge=0)
    pinned_by: list[str] = Field(default_factory=list)
    pins: list[PinContract] = Field(default_factory=list)


class FinalStatementContract(_StrictModel):
    session_id: str
    text: str
    author_identity: str
    author_name: str
    finalized_at: str


class VoteItemContract(_StrictModel):
    id: int
    session_id: str
    title: str
    description: str | None = None
    created_at: str


class ItemResultContract(_StrictModel):
    item_id: int
    title: str
    description: str | None = None
    total_points: int = Field(ge=0)
    vote_count: int = Field(ge=0)


class ConsensusContract(_StrictModel):
    team_alignment: int = Field(ge=0, le=100)
    consensus_leader: int | None = None
    contested_items: list[int] = Field(default_factory=list)
    unanimous_items: list[int] = Field(default_factory=list)


class VotingResultsResponse(_StrictModel):
    session_id: str
    phase: str
    results: list[ItemResultContract]
    total_points: int = Field(ge=0)
    voters: int = Field(ge=0)
    participants: int = Field(ge=0)
    consensus: ConsensusContract


class AllocationResponse(_StrictModel):
    session_id: str
    identity: str
    allocations: list[AllocationEntry]
    total: int
    remaining: int
    budget: int


class SessionSnapshotResponse(_StrictModel):
    session: SessionContract
    participants: list[ParticipantContract]
    statements: list[StatementContract] = Field(default_factory=list)
    final_statement: FinalStatementContract | None = None
    items: list[VoteItemContract] = Field(default_factory=list)
    results: list[ItemResultContract] = Field(default_factory=list)


class CreateSessionResponse(_StrictModel):
    session_id: str


class SessionListResponse(_StrictModel):
    sessions: list[SessionSummaryContract]


class PinToggleResponse(_StrictModel):
    result: Literal["added", "removed"]
    statement_id: int


class AdvanceResponse(_StrictModel):
    session_id: str
    phase: str


class ReconcileIdentityResponse(_StrictModel):
    result: Literal["migrated", "unchanged"]
