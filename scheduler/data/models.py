"""
Pydantic models for the school schedule document.

The persisted document has three parts:
- setup: the weekly cycle (day names and a uniform number of periods per day)
- allocations: per class, which subject is taught by which teacher and how
  many periods per week it needs
- grid: class -> day -> period slots, each either empty or a session label

Periods are 0-based in the grid and displayed 1-based ("Pd 1").
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from scheduler.errors import MalformedLabelError

logger = logging.getLogger(__name__)


# =============================================================================
# Session Labels
# =============================================================================

class SessionLabel(BaseModel):
    """A (subject, teacher) pair occupying one grid cell."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    subject: str = Field(min_length=1, description="Subject name")
    teacher: str = Field(min_length=1, description="Teacher name")

    def __str__(self) -> str:
        return f"{self.subject} ({self.teacher})"


# Cells are stored as labels or None for an empty slot
Grid = dict[str, dict[str, list[Optional[SessionLabel]]]]

# "Subject (Teacher)"; the teacher is the last parenthesised group
_LEGACY_LABEL = re.compile(r"^(?P<subject>.*?)\s*\((?P<teacher>[^()]*)\)\s*$")


def parse_label(value: Any) -> Optional[SessionLabel]:
    """
    Convert a stored cell value into a SessionLabel.

    Accepts an existing label, a ``{"subject", "teacher"}`` mapping, or the
    legacy ``"Subject (Teacher)"`` string. Empty values yield None.

    Raises:
        MalformedLabelError: If the value cannot be read as a label
    """
    if value is None or value == "":
        return None
    if isinstance(value, SessionLabel):
        return value
    if isinstance(value, dict):
        subject = str(value.get("subject") or "").strip()
        teacher = str(value.get("teacher") or "").strip()
        if not subject or not teacher:
            raise MalformedLabelError(value)
        return SessionLabel(subject=subject, teacher=teacher)
    if isinstance(value, str):
        match = _LEGACY_LABEL.match(value.strip())
        if not match:
            raise MalformedLabelError(value)
        subject = match.group("subject").strip()
        teacher = match.group("teacher").strip()
        if not subject or not teacher:
            raise MalformedLabelError(value)
        return SessionLabel(subject=subject, teacher=teacher)
    raise MalformedLabelError(value)


# =============================================================================
# Configuration Models
# =============================================================================

class Setup(BaseModel):
    """Weekly cycle: ordered day names and periods per day."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    days: list[str] = Field(min_length=1, description="Ordered day names")
    periods_per_day: int = Field(ge=1, le=24, description="Periods in every day")

    @field_validator("days")
    @classmethod
    def validate_unique_days(cls, days: list[str]) -> list[str]:
        """Day names identify grid columns, so they must be unique."""
        seen: set[str] = set()
        for day in days:
            if not day:
                raise ValueError("Day names must not be empty")
            if day in seen:
                raise ValueError(f"Duplicate day name: '{day}'")
            seen.add(day)
        return days

    @property
    def total_slots(self) -> int:
        return len(self.days) * self.periods_per_day

    def slots(self) -> list[tuple[str, int]]:
        """All (day, period) pairs in weekly order."""
        return [(day, p) for day in self.days for p in range(self.periods_per_day)]


class SubjectAllocation(BaseModel):
    """One subject taught to a class by a teacher."""
    model_config = ConfigDict(extra="forbid")

    subject: str = Field(min_length=1, description="Subject name")
    teacher: str = Field(min_length=1, description="Teacher name")
    periods: int = Field(ge=0, description="Required sessions per week")

    @property
    def label(self) -> SessionLabel:
        return SessionLabel(subject=self.subject, teacher=self.teacher)


class Allocation(BaseModel):
    """Subject allocations for a single class-section."""
    model_config = ConfigDict(extra="forbid")

    class_name: str = Field(min_length=1, description="Unique class identifier")
    subjects: list[SubjectAllocation] = Field(default_factory=list)

    def find(self, label: SessionLabel) -> Optional[SubjectAllocation]:
        """Allocation entry matching the exact (subject, teacher) pair."""
        for sub in self.subjects:
            if sub.subject == label.subject and sub.teacher == label.teacher:
                return sub
        return None

    def __str__(self) -> str:
        return self.class_name


# =============================================================================
# Main Document Model
# =============================================================================

class SchoolData(BaseModel):
    """
    The complete persisted aggregate.

    An absent document is represented by the defaults:
    ``{"setup": null, "allocations": [], "grid": {}}``.
    """
    model_config = ConfigDict(extra="forbid")

    setup: Optional[Setup] = Field(default=None, description="Weekly cycle")
    allocations: list[Allocation] = Field(default_factory=list, description="Per-class allocations")
    grid: Grid = Field(default_factory=dict, description="class -> day -> period slots")

    @field_validator("grid", mode="before")
    @classmethod
    def parse_legacy_labels(cls, grid: Any) -> Any:
        """Accept legacy ``"Subject (Teacher)"`` strings in grid cells."""
        if not isinstance(grid, dict):
            return grid
        parsed: dict = {}
        for class_name, days in grid.items():
            if not isinstance(days, dict):
                parsed[class_name] = days
                continue
            parsed[class_name] = {
                day: [parse_label(cell) for cell in cells] if isinstance(cells, list) else cells
                for day, cells in days.items()
            }
        return parsed

    @model_validator(mode="after")
    def validate_unique_classes(self) -> "SchoolData":
        """Ensure class names are unique across allocations."""
        seen: set[str] = set()
        errors: list[str] = []
        for alloc in self.allocations:
            if alloc.class_name in seen:
                errors.append(f"Duplicate class name: '{alloc.class_name}'")
            seen.add(alloc.class_name)
        if errors:
            raise ValueError("Allocation validation failed:\n" + "\n".join(f"  - {e}" for e in errors))
        return self

    # -------------------------------------------------------------------------
    # Lookup Methods
    # -------------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        return self.setup is not None and len(self.allocations) > 0

    @property
    def class_names(self) -> list[str]:
        return [a.class_name for a in self.allocations]

    @property
    def teachers(self) -> list[str]:
        """Distinct teacher names across all allocations, sorted."""
        return sorted({s.teacher for a in self.allocations for s in a.subjects})

    def get_allocation(self, class_name: str) -> Optional[Allocation]:
        for alloc in self.allocations:
            if alloc.class_name == class_name:
                return alloc
        return None

    def with_grid(self, grid: Grid) -> "SchoolData":
        """Copy of this document with the grid replaced."""
        return self.model_copy(update={"grid": grid})

    def summary(self) -> dict[str, Any]:
        total_required = sum(s.periods for a in self.allocations for s in a.subjects)
        total_placed = sum(1 for _ in iter_cells(self.grid))
        return {
            "days": len(self.setup.days) if self.setup else 0,
            "periods_per_day": self.setup.periods_per_day if self.setup else 0,
            "classes": len(self.allocations),
            "teachers": len(self.teachers),
            "periods_required": total_required,
            "cells_filled": total_placed,
        }


# =============================================================================
# Grid Helpers
# =============================================================================

def init_grid_structure(setup: Setup, allocations: list[Allocation]) -> Grid:
    """Build an all-empty grid for every class, day and period."""
    return {
        alloc.class_name: {day: [None] * setup.periods_per_day for day in setup.days}
        for alloc in allocations
    }


def normalize_grid(setup: Setup, allocations: list[Allocation], grid: Optional[Grid]) -> Grid:
    """
    Return a fully materialised copy of ``grid``.

    Missing classes, days and periods are filled with empty cells, period lists
    are truncated to ``periods_per_day``, and classes or days that are not in
    the setup/allocations are dropped.
    """
    grid = grid or {}
    normalized: Grid = {}

    for unknown in set(grid) - {a.class_name for a in allocations}:
        logger.warning("Dropping grid entry for unknown class '%s'", unknown)

    for alloc in allocations:
        class_days = grid.get(alloc.class_name) or {}
        normalized[alloc.class_name] = {}
        for day in setup.days:
            cells = list(class_days.get(day) or [])[:setup.periods_per_day]
            cells.extend([None] * (setup.periods_per_day - len(cells)))
            normalized[alloc.class_name][day] = cells

    return normalized


def clone_grid(grid: Grid) -> Grid:
    """Private copy of a grid; labels are immutable and shared."""
    return {cls: {day: list(cells) for day, cells in days.items()} for cls, days in grid.items()}


def iter_cells(grid: Grid, days: Optional[list[str]] = None) -> Iterator[tuple[str, str, int, SessionLabel]]:
    """
    Yield ``(class_name, day, period, label)`` for every occupied cell.

    Days are visited in ``days`` order when given, otherwise in the grid's own
    order.
    """
    for class_name, class_days in grid.items():
        for day in (days if days is not None else class_days.keys()):
            for period, label in enumerate(class_days.get(day) or []):
                if label is not None:
                    yield class_name, day, period, label


def count_label(grid: Grid, class_name: str, label: SessionLabel) -> int:
    """Count cells in a class holding exactly ``label``."""
    return sum(
        1
        for cells in (grid.get(class_name) or {}).values()
        for cell in cells
        if cell == label
    )
