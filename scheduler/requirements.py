"""
Requirement calculation.

Diffs each class's declared periods against what the grid already holds,
grouped by (teacher, subject) so classes sharing a teacher for a subject end
up in the same group.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from .data.models import Allocation, Grid, SchoolData, SessionLabel, Setup, count_label


class RequirementKey(NamedTuple):
    """Groups classes taught the same subject by the same teacher."""
    teacher: str
    subject: str

    def __str__(self) -> str:
        return f"{self.teacher}|{self.subject}"


Requirements = dict[RequirementKey, dict[str, int]]


@dataclass(frozen=True)
class RequirementProgress:
    """How far one subject allocation of a class has been scheduled."""
    subject: str
    teacher: str
    periods_required: int
    periods_placed: int

    @property
    def remaining(self) -> int:
        return max(0, self.periods_required - self.periods_placed)

    @property
    def complete(self) -> bool:
        return self.periods_placed >= self.periods_required

    @property
    def percentage(self) -> float:
        if self.periods_required == 0:
            return 100.0
        return min(self.periods_placed / self.periods_required * 100, 100.0)


def calculate_requirements(setup: Setup, allocations: list[Allocation], grid: Grid) -> Requirements:
    """
    Remaining sessions per (teacher, subject) and class.

    A cell counts toward an allocation only when both subject and teacher
    match. Counts are clamped at zero, so over-filled classes need nothing.

    Args:
        setup: Weekly cycle (only days in the setup are counted)
        allocations: Per-class subject allocations
        grid: Current grid (not modified)

    Returns:
        Mapping of key -> {class_name: remaining periods}, in allocation order
    """
    requirements: Requirements = {}

    for alloc in allocations:
        for sub in alloc.subjects:
            key = RequirementKey(teacher=sub.teacher, subject=sub.subject)
            placed = count_placed(grid, alloc.class_name, sub.label, setup)
            requirements.setdefault(key, {})[alloc.class_name] = max(0, sub.periods - placed)

    return requirements


def requirements_for(data: SchoolData, class_name: str) -> list[RequirementProgress]:
    """Per-subject progress for one class, in allocation order."""
    alloc = data.get_allocation(class_name)
    if alloc is None:
        return []

    return [
        RequirementProgress(
            subject=sub.subject,
            teacher=sub.teacher,
            periods_required=sub.periods,
            periods_placed=count_placed(data.grid, class_name, sub.label, data.setup),
        )
        for sub in alloc.subjects
    ]


def total_remaining(requirements: Requirements) -> int:
    """Sum of remaining periods across all classes."""
    return sum(n for needs in requirements.values() for n in needs.values())


def count_placed(grid: Grid, class_name: str, label: SessionLabel, setup: Optional[Setup] = None) -> int:
    """Cells of a class holding exactly ``label``, inside the setup's week when given."""
    class_days = grid.get(class_name) or {}
    if setup is not None:
        class_days = {day: (class_days.get(day) or [])[:setup.periods_per_day] for day in setup.days}
    return count_label({class_name: class_days}, class_name, label)
