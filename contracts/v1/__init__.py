"""v1 contract schemas for the workshop HTTP API."""

__version__ = "1.0.0"

from .schemas import (
    AdvanceRequest,
    AdvanceResponse,
    AllocationEntry,
    AllocationResponse,
    ConsensusContract,
    CreateSessionRequest,
    CreateSessionResponse,
    FinalizeRequest,
    FinalStatementContract,
    ItemRequest,
    ItemResultContract,
    JoinSessionRequest,
    ParticipantContract,
    PinContract,
    PinRequest,
    PinToggleResponse,
    ReconcileIdentityRequest,
    ReconcileIdentityResponse,
    SessionContract,
    SessionListResponse,
    SessionSnapshotResponse,
    SessionSummaryContract,
    StatementContract,
    StatementRequest,
    VoteItemContract,
    VoteRequest,
    VotingResultsResponse,
)

__all__ = [
    "__version__",
    "AdvanceRequest",
    "AdvanceResponse",
    "AllocationEntry",
    "AllocationResponse",
    "ConsensusContract",
    "CreateSessionRequest",
    "CreateSessionResponse",
    "FinalizeRequest",
    "FinalStatementContract",
    "ItemRequest",
    "ItemResultContract",
    "JoinSessionRequest",
    "ParticipantContract",
    "PinContract",
    "PinRequest",
    "PinToggleResponse",
    "ReconcileIdentityRequest",
    "ReconcileIdentityResponse",
    "SessionContract",
    "SessionListResponse",
    "SessionSnapshotResponse",
    "SessionSummaryContract",
    "StatementContract",
    "StatementRequest",
    "VoteItemContract",
    "VoteRequest",
    "VotingResultsResponse",
]
