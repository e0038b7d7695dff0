"""Point-budget validation for voting-board allocations.

All helpers here are pure: they look only at the (item, points) pairs they are
given, never at stored state, and the result does not depend on the order in
which items are listed.
"""

from __future__ import annotations

from typing import Hashable, Iterable

from .config import POINT_BUDGET
from .errors import BudgetExceeded, NegativePoints, PerItemExceeded, ValidationFailed

Allocation = tuple[Hashable, int]

VIOLATION_NEGATIVE = "negative_points"
VIOLATION_PER_ITEM = "per_item_exceeded"
VIOLATION_BUDGET = "budget_exceeded"


def _normalise(allocations: Iterable[Allocation]) -> list[Allocation]:
    pairs = list(allocations)
    seen = set()
    for item, points in pairs:
        if isinstance(points, bool) or not isinstance(points, int):
            raise ValidationFailed(
                f"Points for item {item!r} must be an integer",
                item_id=item,
            )
        if item in seen:
            raise ValidationFailed(
                f"Item {item!r} appears more than once in the allocation",
                item_id=item,
            )
        seen.add(item)
    return pairs


def total_points(allocations: Iterable[Allocation]) -> int:
    """Return the sum of points across an allocation."""
    return sum(points for _, points in allocations)


def remaining_points(allocations: Iterable[Allocation], budget: int = POINT_BUDGET) -> int:
    """Return ``budget - sum(points)``; recomputed, never cached."""
    return budget - total_points(allocations)


def find_violations(allocations: Iterable[Allocation], budget: int = POINT_BUDGET) -> list[str]:
    """Return every violation kind present in *allocations* (may be empty).

    The three checks are independent: an allocation can be over budget and
    carry a negative entry at the same time, and both are reported.
    """
    pairs = _normalise(allocations)
    violations = []
    if any(points < 0 for _, points in pairs):
        violations.append(VIOLATION_NEGATIVE)
    if any(points > budget for _, points in pairs):
        violations.append(VIOLATION_PER_ITEM)
    if total_points(pairs) > budget:
        violations.append(VIOLATION_BUDGET)
    return violations


def validate_allocation(allocations: Iterable[Allocation], budget: int = POINT_BUDGET) -> None:
    """Raise the first violation found in *allocations*, or return for a valid one.

    Checks run in a fixed order (negative, per-item, total) so the same input
    always yields the same error kind. Every violation present is attached as
    ``violations`` on the raised error.
    """
    pairs = _normalise(allocations)
    violations = find_violations(pairs, budget)
    if not violations:
        return

    total = total_points(pairs)
    if VIOLATION_NEGATIVE in violations:
        offending = [item for item, points in pairs if points < 0]
        raise NegativePoints(
            "Points cannot be negative",
            items=offending,
            violations=violations,
        )
    if VIOLATION_PER_ITEM in violations:
        offending = [item for item, points in pairs if points > budget]
        raise PerItemExceeded(
            f"Individual item points cannot exceed {budget}",
            items=offending,
            budget=budget,
            violations=violations,
        )
    raise BudgetExceeded(
        f"Total points cannot exceed {budget} (got {total})",
        total=total,
        budget=budget,
        violations=violations,
    )


__all__ = [
    "VIOLATION_NEGATIVE",
    "VIOLATION_PER_ITEM",
    "VIOLATION_BUDGET",
    "total_points",
    "remaining_points",
    "find_violations",
    "validate_allocation",
]
