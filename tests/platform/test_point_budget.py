"""Tests for point-budget validation."""

import pytest

from workshop_platform.errors import BudgetExceeded, NegativePoints, PerItemExceeded, ValidationFailed
from workshop_platform.point_budget import (
    VIOLATION_BUDGET,
    VIOLATION_NEGATIVE,
    VIOLATION_PER_ITEM,
    find_violations,
    remaining_points,
    total_points,
    validate_allocation,
)


class TestValidateAllocation:

    def test_empty_allocation_is_valid(self):
        validate_allocation([])

    def test_exact_budget_is_accepted(self):
        validate_allocation([("x", 50), ("y", 30), ("z", 20)])

    def test_under_budget_is_accepted(self):
        validate_allocation([("x", 10), ("y", 5)])

    def test_one_over_budget_is_rejected(self):
        with pytest.raises(BudgetExceeded) as exc:
            validate_allocation([("x", 60), ("y", 30), ("z", 11)])
        assert exc.value.context["total"] == 101
        assert exc.value.context["budget"] == 100

    def test_zero_entries_next_to_full_budget(self):
        validate_allocation([("x", 100), ("y", 0), ("z", 0)])

    def test_negative_points_rejected(self):
        with pytest.raises(NegativePoints) as exc:
            validate_allocation([("x", -1), ("y", 10)])
        assert exc.value.context["items"] == ["x"]

    def test_single_item_over_budget_is_per_item(self):
        with pytest.raises(PerItemExceeded):
            validate_allocation([("x", 101)])

    def test_negative_reported_before_total(self):
        with pytest.raises(NegativePoints) as exc:
            validate_allocation([("x", -5), ("y", 90), ("z", 90)])
        assert exc.value.context["violations"] == [VIOLATION_NEGATIVE, VIOLATION_BUDGET]

    def test_violation_kinds_are_distinct(self):
        assert NegativePoints.code != PerItemExceeded.code != BudgetExceeded.code
        assert issubclass(BudgetExceeded, ValidationFailed)

    def test_order_does_not_matter(self):
        a = [("x", 70), ("y", 40)]
        for allocation in (a, list(reversed(a))):
            with pytest.raises(BudgetExceeded):
                validate_allocation(allocation)

    def test_custom_budget(self):
        validate_allocation([("x", 5)], budget=5)
        with pytest.raises(BudgetExceeded):
            validate_allocation([("x", 3), ("y", 3)], budget=5)

    def test_duplicate_item_rejected(self):
        with pytest.raises(ValidationFailed):
            validate_allocation([("x", 10), ("x", 20)])

    @pytest.mark.parametrize("points", [1.5, "10", None, True])
    def test_non_integer_points_rejected(self, points):
        with pytest.raises(ValidationFailed):
            validate_allocation([("x", points)])


class TestFindViolations:

    def test_valid_allocation_has_none(self):
        assert find_violations([("x", 40), ("y", 60)]) == []

    def test_reports_every_kind(self):
        assert find_violations([("x", -1), ("y", 150)]) == [
            VIOLATION_NEGATIVE,
            VIOLATION_PER_ITEM,
            VIOLATION_BUDGET,
        ]


def test_total_and_remaining():
    allocation = [("x", 50), ("y", 30)]
    assert total_points(allocation) == 80
    assert remaining_points(allocation) == 20
    assert remaining_points([]) == 100
    assert remaining_points(allocation, budget=80) == 0
