"""
Collision detection.

Re-derives teacher occupancy from the grid alone, so sessions written by hand
are audited the same way as the engine's own placements. A teacher seen twice
in one slot with the same subject is a shared session, not a collision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .data.models import Grid, iter_cells


@dataclass(frozen=True)
class Collision:
    """A teacher booked for two different subjects in one slot."""
    teacher: str
    day: str
    period: int
    first_subject: str
    first_class: str
    second_subject: str
    second_class: str

    def describe(self) -> str:
        return (
            f"{self.teacher}: {self.first_subject}({self.first_class}) vs "
            f"{self.second_subject}({self.second_class}) on {self.day} Pd {self.period + 1}"
        )

    def __str__(self) -> str:
        return self.describe()


def detect_collisions(grid: Grid, days: Optional[list[str]] = None) -> list[Collision]:
    """
    Scan the grid once and report teacher double-bookings.

    Each later cell is compared with the first cell seen for its teacher and
    slot.

    Args:
        grid: Grid to audit (not modified)
        days: Day order for the scan; defaults to each class's own order

    Returns:
        Collisions in scan order; empty for a clean schedule
    """
    first_seen: dict[str, dict[str, dict[int, tuple[str, str]]]] = {}
    collisions: list[Collision] = []

    for class_name, day, period, label in iter_cells(grid, days):
        slots = first_seen.setdefault(label.teacher, {}).setdefault(day, {})
        existing = slots.get(period)

        if existing is None:
            slots[period] = (label.subject, class_name)
        elif existing[0] != label.subject:
            collisions.append(Collision(
                teacher=label.teacher,
                day=day,
                period=period,
                first_subject=existing[0],
                first_class=existing[1],
                second_subject=label.subject,
                second_class=class_name,
            ))

    return collisions
