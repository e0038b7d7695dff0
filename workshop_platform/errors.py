"""Failure taxonomy for workshop operations.

Every failure the core surfaces is a ``WorkshopError``. Subclasses are grouped
by category so callers can pick a retry/redirect policy without matching on
individual kinds:

- ``ValidationFailed``: malformed or missing input; fix and resend.
- ``AuthorizationFailed``: caller lacks the role; never retried automatically.
- ``ConflictFailed``: stored state disagrees with the request; refresh first.
- ``NotFoundFailed``: the addressed entity does not exist.
- ``ClosedFailed``: the session reached its terminal phase.
- ``PersistenceFailed``: the store rejected a write.
"""

from __future__ import annotations

from typing import Any


class WorkshopError(Exception):
    """Base exception for workshop core failures."""

    code = "workshop_error"
    category = "workshop"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "category": self.category,
            "message": self.message,
        }
        payload.update(self.context)
        return payload


# --- Validation ---

class ValidationFailed(WorkshopError):
    code = "validation_failed"
    category = "validation"


class NegativePoints(ValidationFailed):
    code = "negative_points"


class PerItemExceeded(ValidationFailed):
    code = "per_item_exceeded"


class BudgetExceeded(ValidationFailed):
    code = "budget_exceeded"


# --- Authorization ---

class AuthorizationFailed(WorkshopError):
    code = "authorization_failed"
    category = "authorization"


class NotFacilitator(AuthorizationFailed):
    code = "not_facilitator"


# --- Conflict ---

class ConflictFailed(WorkshopError):
    code = "conflict"
    category = "conflict"


class DuplicateIdentity(ConflictFailed):
    code = "duplicate_identity"


class IllegalTransition(ConflictFailed):
    code = "illegal_transition"


class AlreadyFinalizedByOther(ConflictFailed):
    code = "already_finalized_by_other"


class WrongPhase(ConflictFailed):
    code = "wrong_phase"


# --- Not found ---

class NotFoundFailed(WorkshopError):
    code = "not_found"
    category = "not_found"


class SessionNotFound(NotFoundFailed):
    code = "session_not_found"


class StatementNotFound(NotFoundFailed):
    code = "statement_not_found"


class ParticipantNotFound(NotFoundFailed):
    code = "participant_not_found"


# --- Closed ---

class ClosedFailed(WorkshopError):
    code = "closed"
    category = "closed"


class SessionClosed(ClosedFailed):
    code = "session_closed"


# --- Persistence ---

class PersistenceFailed(WorkshopError):
    code = "persistence_failed"
    category = "persistence"


__all__ = [
    "WorkshopError",
    "ValidationFailed",
    "NegativePoints",
    "PerItemExceeded",
    "BudgetExceeded",
    "AuthorizationFailed",
    "NotFacilitator",
    "ConflictFailed",
    "DuplicateIdentity",
    "IllegalTransition",
    "AlreadyFinalizedByOther",
    "WrongPhase",
    "NotFoundFailed",
    "SessionNotFound",
    "StatementNotFound",
    "ParticipantNotFound",
    "ClosedFailed",
    "SessionClosed",
    "PersistenceFailed",
]
