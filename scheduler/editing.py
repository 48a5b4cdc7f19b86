"""Manual single-cell edits with the periods-cap check."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .data.models import Grid, SchoolData, SessionLabel, normalize_grid
from .errors import CapacityExceededError, ConfigurationMissingError


class CellEditStatus(str, Enum):
    """Outcome of a manual edit."""
    OK = "ok"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    NOT_ALLOCATED = "not_allocated"
    INVALID_CELL = "invalid_cell"
    NOT_CONFIGURED = "not_configured"


@dataclass
class CellEditResult:
    """Result of ``set_cell``; ``grid`` is the edited copy when status is OK."""
    status: CellEditStatus
    message: str
    grid: Optional[Grid] = None
    subject: Optional[str] = None
    limit: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == CellEditStatus.OK


def set_cell(
    data: SchoolData,
    class_name: str,
    day: str,
    period: int,
    label: Optional[SessionLabel],
) -> CellEditResult:
    """
    Write ``label`` into one cell, or clear it when ``label`` is None.

    The label must be allocated to the class, and the class may not hold more
    cells of that exact (subject, teacher) pair than its weekly periods. The
    cell being overwritten does not count toward the limit. ``data`` is not
    modified; the returned grid is fully materialised for the setup's week.
    """
    if not data.is_configured:
        return CellEditResult(CellEditStatus.NOT_CONFIGURED, str(ConfigurationMissingError()))

    alloc = data.get_allocation(class_name)
    if alloc is None:
        return CellEditResult(CellEditStatus.INVALID_CELL, f"Unknown class '{class_name}'")
    if day not in data.setup.days:
        return CellEditResult(CellEditStatus.INVALID_CELL, f"Unknown day '{day}'")
    if not 0 <= period < data.setup.periods_per_day:
        return CellEditResult(
            CellEditStatus.INVALID_CELL,
            f"Period {period + 1} is outside 1-{data.setup.periods_per_day}",
        )

    grid = normalize_grid(data.setup, data.allocations, data.grid)
    cells = grid[class_name][day]

    if label is None:
        cells[period] = None
        return CellEditResult(CellEditStatus.OK, f"Cleared {class_name} {day} Pd {period + 1}", grid=grid)

    entry = alloc.find(label)
    if entry is None:
        return CellEditResult(
            CellEditStatus.NOT_ALLOCATED,
            f"{label} is not allocated to {class_name}",
            subject=label.subject,
        )

    try:
        _check_capacity(grid, class_name, day, period, label, entry.periods)
    except CapacityExceededError as e:
        return CellEditResult(
            CellEditStatus.CAPACITY_EXCEEDED,
            str(e),
            subject=e.subject,
            limit=e.limit,
        )

    cells[period] = label
    return CellEditResult(CellEditStatus.OK, f"Set {class_name} {day} Pd {period + 1} to {label}", grid=grid)


def _check_capacity(grid: Grid, class_name: str, day: str, period: int, label: SessionLabel, limit: int) -> None:
    used = 0
    for d, cells in grid[class_name].items():
        for p, cell in enumerate(cells):
            if cell == label and not (d == day and p == period):
                used += 1
    if used >= limit:
        raise CapacityExceededError(label.subject, label.teacher, limit)
