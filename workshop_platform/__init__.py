"""Platform layer for facilitated decision workshops."""

__version__ = "1.0.0"

from .errors import WorkshopError
from .models import (
    FinalStatement,
    Participant,
    Pin,
    Session,
    SessionSnapshot,
    Statement,
    VoteAllocation,
    VoteItem,
)
from .point_budget import find_violations, remaining_points, total_points, validate_allocation
from .session_state_machine import ensure_open, is_terminal_phase, parse_phase, plan_transition

__all__ = [
    "__version__",
    "WorkshopError",
    "Session",
    "Participant",
    "Pin",
    "Statement",
    "FinalStatement",
    "VoteItem",
    "VoteAllocation",
    "SessionSnapshot",
    "total_points",
    "remaining_points",
    "find_violations",
    "validate_allocation",
    "parse_phase",
    "plan_transition",
    "ensure_open",
    "is_terminal_phase",
]
