"""
Views of the grid for display.

- class view: one class, days by periods, labels in the cells
- staff view: one teacher, days by periods, the classes taught in each slot
"""

from __future__ import annotations

from typing import Optional

from scheduler.data.models import SchoolData, SessionLabel, iter_cells

# teacher -> day -> period -> class names
StaffView = dict[str, dict[str, list[list[str]]]]


def build_staff_view(data: SchoolData) -> StaffView:
    """
    Pivot the grid by teacher.

    Teachers come from the allocations, sorted; sessions of teachers that are
    not allocated anywhere are left out. A shared session lists every class.
    """
    if data.setup is None:
        return {}

    staff: StaffView = {
        teacher: {day: [[] for _ in range(data.setup.periods_per_day)] for day in data.setup.days}
        for teacher in data.teachers
    }

    for class_name, day, period, label in iter_cells(data.grid, data.setup.days):
        teacher_days = staff.get(label.teacher)
        if teacher_days is None or period >= data.setup.periods_per_day:
            continue
        teacher_days[day][period].append(class_name)

    return staff


def class_view(data: SchoolData, class_name: str) -> dict[str, list[Optional[SessionLabel]]]:
    """Rows of one class in setup day order."""
    if data.setup is None:
        return {}
    class_days = data.grid.get(class_name) or {}
    return {
        day: list(class_days.get(day) or [None] * data.setup.periods_per_day)
        for day in data.setup.days
    }


def class_options(data: SchoolData, class_name: str) -> list[SessionLabel]:
    """Labels that may be placed in a class's cells."""
    alloc = data.get_allocation(class_name)
    if alloc is None:
        return []
    return [sub.label for sub in alloc.subjects]


def teacher_load(staff: StaffView) -> dict[str, int]:
    """Occupied slots per teacher (a shared session counts once)."""
    return {
        teacher: sum(1 for cells in days.values() for classes in cells if classes)
        for teacher, days in staff.items()
    }
