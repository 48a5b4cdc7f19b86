"""Tests for manual cell edits."""

from __future__ import annotations

import pytest

from scheduler.data.models import (
    Allocation,
    SchoolData,
    SessionLabel,
    Setup,
    SubjectAllocation,
    init_grid_structure,
)
from scheduler.editing import CellEditStatus, set_cell


MATH_T1 = SessionLabel(subject="Math", teacher="T1")


@pytest.fixture
def school() -> SchoolData:
    setup = Setup(days=["Mon", "Tue"], periods_per_day=3)
    allocations = [
        Allocation(class_name="A", subjects=[
            SubjectAllocation(subject="Math", teacher="T1", periods=2),
            SubjectAllocation(subject="Art", teacher="T2", periods=1),
        ]),
    ]
    return SchoolData(setup=setup, allocations=allocations, grid=init_grid_structure(setup, allocations))


def _fill(school: SchoolData, *cells) -> SchoolData:
    grid = init_grid_structure(school.setup, school.allocations)
    for day, period, label in cells:
        grid["A"][day][period] = label
    return school.with_grid(grid)


class TestSetCell:
    """Tests for set_cell."""

    def test_place_label(self, school):
        result = set_cell(school, "A", "Mon", 0, MATH_T1)

        assert result.ok
        assert result.grid["A"]["Mon"][0] == MATH_T1
        assert school.grid["A"]["Mon"][0] is None

    def test_capacity_exceeded(self, school):
        school = _fill(school, ("Mon", 0, MATH_T1), ("Tue", 0, MATH_T1))

        result = set_cell(school, "A", "Mon", 1, MATH_T1)

        assert result.status == CellEditStatus.CAPACITY_EXCEEDED
        assert not result.ok
        assert result.grid is None
        assert result.subject == "Math"
        assert result.limit == 2
        assert result.message == "Limit reached: Math (T1) allows only 2 periods"

    def test_overwriting_same_label_is_allowed(self, school):
        school = _fill(school, ("Mon", 0, MATH_T1), ("Tue", 0, MATH_T1))

        result = set_cell(school, "A", "Tue", 0, MATH_T1)

        assert result.ok

    def test_overwriting_other_label(self, school):
        art = SessionLabel(subject="Art", teacher="T2")
        school = _fill(school, ("Mon", 0, MATH_T1), ("Tue", 0, art))

        result = set_cell(school, "A", "Tue", 0, MATH_T1)

        assert result.ok
        assert result.grid["A"]["Tue"][0] == MATH_T1

    def test_clear_is_always_allowed(self, school):
        school = _fill(school, ("Mon", 0, MATH_T1), ("Tue", 0, MATH_T1))

        result = set_cell(school, "A", "Mon", 0, None)

        assert result.ok
        assert result.grid["A"]["Mon"][0] is None
        assert school.grid["A"]["Mon"][0] == MATH_T1

    def test_zero_period_allocation(self, school):
        school = school.model_copy(update={"allocations": [
            Allocation(class_name="A", subjects=[SubjectAllocation(subject="Math", teacher="T1", periods=0)]),
        ]})

        result = set_cell(school, "A", "Mon", 0, MATH_T1)

        assert result.status == CellEditStatus.CAPACITY_EXCEEDED
        assert result.limit == 0

    def test_pair_not_allocated(self, school):
        result = set_cell(school, "A", "Mon", 0, SessionLabel(subject="Math", teacher="T9"))
        assert result.status == CellEditStatus.NOT_ALLOCATED

    @pytest.mark.parametrize("class_name,day,period", [
        ("Z", "Mon", 0),
        ("A", "Sun", 0),
        ("A", "Mon", 3),
        ("A", "Mon", -1),
    ])
    def test_invalid_cell(self, school, class_name, day, period):
        result = set_cell(school, class_name, day, period, MATH_T1)
        assert result.status == CellEditStatus.INVALID_CELL

    def test_not_configured(self):
        result = set_cell(SchoolData(), "A", "Mon", 0, MATH_T1)
        assert result.status == CellEditStatus.NOT_CONFIGURED


class TestSetCellOnPartialGrid:
    """Edits on grids that were never normalised."""

    @pytest.fixture
    def partial(self) -> SchoolData:
        return SchoolData(
            setup=Setup(days=["Mon", "Tue"], periods_per_day=3),
            allocations=[
                Allocation(class_name="A", subjects=[SubjectAllocation(subject="Math", teacher="T1", periods=1)]),
            ],
            grid={"A": {"Mon": [None], "Sat": [MATH_T1]}},
        )

    def test_short_row_is_filled(self, partial):
        result = set_cell(partial, "A", "Mon", 2, MATH_T1)

        assert result.ok
        assert result.grid["A"]["Mon"] == [None, None, MATH_T1]
        assert result.grid["A"]["Tue"] == [None, None, None]
        assert partial.grid["A"]["Mon"] == [None]

    def test_days_outside_week_do_not_count(self, partial):
        result = set_cell(partial, "A", "Tue", 0, MATH_T1)

        assert result.ok
        assert "Sat" not in result.grid["A"]
