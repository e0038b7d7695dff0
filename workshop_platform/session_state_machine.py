"""Session phase rules.

Phases only ever move forward. Each tool kind declares which phases it uses,
which non-adjacent jumps are legal shortcuts, and whether the terminal phase
may be reached by a plain advance or only through finalization. Everything in
this module is pure; the stored phase is read and written by
``services.session_service``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import TOOL_PROBLEM_FRAMING, TOOL_VOTING_BOARD
from .errors import IllegalTransition, SessionClosed, ValidationFailed


PHASE_SETUP = "setup"
PHASE_INPUT = "input"
PHASE_REVIEW = "review"
PHASE_FINALIZE = "finalize"
PHASE_COMPLETED = "completed"

PHASE_ORDER = (PHASE_SETUP, PHASE_INPUT, PHASE_REVIEW, PHASE_FINALIZE, PHASE_COMPLETED)

# "summary" is the name clients show for the terminal step.
PHASE_ALIASES = {"summary": PHASE_COMPLETED}

STEP_NUMBERS = {i + 1: phase for i, phase in enumerate(PHASE_ORDER)}


@dataclass(frozen=True)
class Workflow:
    tool_kind: str
    phases: tuple[str, ...]
    shortcuts: frozenset[tuple[str, str]] = frozenset()
    terminal_by_advance: bool = False

    def allows(self, current: str, target: str) -> bool:
        """Return True when *current* -> *target* is a forward move this workflow permits."""
        if current not in self.phases or target not in self.phases:
            return False
        i, j = self.phases.index(current), self.phases.index(target)
        if j != i + 1 and (current, target) not in self.shortcuts:
            return False
        if target == PHASE_COMPLETED and not self.terminal_by_advance:
            return False
        return True


WORKFLOWS = {
    TOOL_PROBLEM_FRAMING: Workflow(
        tool_kind=TOOL_PROBLEM_FRAMING,
        phases=PHASE_ORDER,
        shortcuts=frozenset({(PHASE_INPUT, PHASE_FINALIZE)}),
        terminal_by_advance=False,
    ),
    TOOL_VOTING_BOARD: Workflow(
        tool_kind=TOOL_VOTING_BOARD,
        phases=(PHASE_SETUP, PHASE_INPUT, PHASE_REVIEW, PHASE_COMPLETED),
        terminal_by_advance=True,
    ),
}


def workflow_for(tool_kind: str) -> Workflow:
    try:
        return WORKFLOWS[tool_kind]
    except KeyError:
        raise ValidationFailed(f"Unknown tool kind {tool_kind!r}", field="tool_kind") from None


def parse_phase(value: str | int) -> str:
    """Resolve a phase name, alias or 1-based step number to a canonical phase."""
    if isinstance(value, bool):
        raise ValidationFailed(f"Unknown phase {value!r}", field="target_phase")
    if isinstance(value, int):
        if value in STEP_NUMBERS:
            return STEP_NUMBERS[value]
        raise ValidationFailed(f"Unknown phase step {value}", field="target_phase")

    name = (value or "").strip().lower()
    if name.isdigit():
        return parse_phase(int(name))
    name = PHASE_ALIASES.get(name, name)
    if name not in PHASE_ORDER:
        raise ValidationFailed(f"Unknown phase {value!r}", field="target_phase")
    return name


def phase_rank(phase: str) -> int:
    """Return the 0-based position of *phase* in the global order."""
    return PHASE_ORDER.index(phase)


def is_terminal_phase(phase: str) -> bool:
    return phase == PHASE_COMPLETED


def ensure_open(phase: str) -> None:
    """Raise ``SessionClosed`` once a session reached its terminal phase."""
    if is_terminal_phase(phase):
        raise SessionClosed("Session is completed and can no longer be changed")


def next_phase(tool_kind: str, current: str) -> Optional[str]:
    """Return the adjacent phase after *current* for this workflow, or None at the end."""
    phases = workflow_for(tool_kind).phases
    if current not in phases:
        return None
    idx = phases.index(current) + 1
    return phases[idx] if idx < len(phases) else None


def plan_transition(tool_kind: str, current: str, target: str) -> Optional[str]:
    """Decide how a stored *current* phase reacts to an advance to *target*.

    Returns ``None`` for the idempotent case (already at *target*), the phase
    to write otherwise. Raises ``SessionClosed`` for any other request against
    a completed session and ``IllegalTransition`` for backward moves, skips
    outside the workflow's shortcuts, phases the workflow does not use, and a
    plain advance into a terminal phase that only finalization may reach.
    """
    if current == target:
        return None

    ensure_open(current)

    workflow = workflow_for(tool_kind)
    if target not in workflow.phases:
        raise IllegalTransition(
            f"Phase '{target}' is not part of the {tool_kind} workflow",
            current_phase=current,
            target_phase=target,
        )
    if phase_rank(target) < phase_rank(current):
        raise IllegalTransition(
            f"Cannot move back from '{current}' to '{target}'",
            current_phase=current,
            target_phase=target,
        )
    if target == PHASE_COMPLETED and not workflow.terminal_by_advance:
        raise IllegalTransition(
            "This session closes by finalizing the final statement",
            current_phase=current,
            target_phase=target,
        )
    if not workflow.allows(current, target):
        raise IllegalTransition(
            f"Cannot skip from '{current}' to '{target}'",
            current_phase=current,
            target_phase=target,
        )
    return target


__all__ = [
    "PHASE_SETUP",
    "PHASE_INPUT",
    "PHASE_REVIEW",
    "PHASE_FINALIZE",
    "PHASE_COMPLETED",
    "PHASE_ORDER",
    "PHASE_ALIASES",
    "STEP_NUMBERS",
    "Workflow",
    "WORKFLOWS",
    "workflow_for",
    "parse_phase",
    "phase_rank",
    "is_terminal_phase",
    "ensure_open",
    "next_phase",
    "plan_transition",
]
