"""
Output formatters for schedules.

This module provides:
- Class and staff grid tables (rich)
- Per-class progress table (rich)
- Collision listing (rich)
- CSV export of every occupied cell
- JSON export of the whole document
"""

from __future__ import annotations

import csv
from io import StringIO
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from scheduler.collisions import Collision
from scheduler.data.loader import to_json
from scheduler.data.models import SchoolData, iter_cells
from scheduler.requirements import RequirementProgress
from .views import build_staff_view, class_view


# =============================================================================
# Grid Tables
# =============================================================================

def class_table(data: SchoolData, class_name: str) -> Table:
    """Days by periods for one class."""
    table = Table(title=f"Class {class_name}", show_header=True, header_style="bold cyan")
    table.add_column("Day", style="bold")
    for p in range(data.setup.periods_per_day):
        table.add_column(f"Period {p + 1}", justify="center")

    for day, cells in class_view(data, class_name).items():
        table.add_row(day, *[str(cell) if cell else "[dim]--[/dim]" for cell in cells])

    return table


def staff_table(data: SchoolData, teacher: str) -> Table:
    """Days by periods for one teacher, listing the classes taught."""
    staff = build_staff_view(data)
    table = Table(title=f"Teacher {teacher}", show_header=True, header_style="bold cyan")
    table.add_column("Day", style="bold")
    for p in range(data.setup.periods_per_day):
        table.add_column(f"Pd {p + 1}", justify="center")

    for day, cells in staff.get(teacher, {}).items():
        table.add_row(day, *[
            Text(", ".join(classes), style="green") if classes else Text("--", style="dim")
            for classes in cells
        ])

    return table


# =============================================================================
# Progress and Collisions
# =============================================================================

def progress_table(class_name: str, progress: list[RequirementProgress]) -> Table:
    """Placed versus required periods per subject of a class."""
    table = Table(title=f"Progress for {class_name}", show_header=True, header_style="bold cyan")
    table.add_column("Subject")
    table.add_column("Teacher")
    table.add_column("Placed", justify="right")
    table.add_column("Status")

    for item in progress:
        color = "green" if item.complete else "yellow"
        table.add_row(
            item.subject,
            item.teacher,
            f"{item.periods_placed}/{item.periods_required}",
            f"[{color}]{item.percentage:.0f}%[/{color}]",
        )

    return table


def collisions_table(collisions: list[Collision]) -> Table:
    """One row per collision."""
    table = Table(title="Collisions", show_header=True, header_style="bold red")
    table.add_column("Teacher")
    table.add_column("Day")
    table.add_column("Period", justify="right")
    table.add_column("First")
    table.add_column("Second")

    for c in collisions:
        table.add_row(
            c.teacher,
            c.day,
            str(c.period + 1),
            f"{c.first_subject} ({c.first_class})",
            f"{c.second_subject} ({c.second_class})",
        )

    return table


def render_text(renderable, width: int = 120) -> str:
    """Render a rich object to plain text."""
    console = Console(record=True, width=width, file=StringIO())
    console.print(renderable)
    return console.export_text()


# =============================================================================
# CSV Formatter
# =============================================================================

class CSVFormatter:
    """Formats occupied grid cells as CSV rows."""

    HEADERS = ["class", "day", "period", "subject", "teacher"]

    def __init__(self, delimiter: str = ",", include_headers: bool = True):
        """
        Initialize CSV formatter.

        Args:
            delimiter: CSV delimiter character
            include_headers: Include header row
        """
        self.delimiter = delimiter
        self.include_headers = include_headers

    def format(self, data: SchoolData) -> str:
        buffer = StringIO()
        self.write(data, buffer)
        return buffer.getvalue()

    def write(self, data: SchoolData, file: TextIO) -> None:
        writer = csv.writer(file, delimiter=self.delimiter, lineterminator="\n")
        if self.include_headers:
            writer.writerow(self.HEADERS)

        days = data.setup.days if data.setup else None
        for class_name, day, period, label in iter_cells(data.grid, days):
            writer.writerow([class_name, day, period + 1, label.subject, label.teacher])


# =============================================================================
# File Utilities
# =============================================================================

def save_json(data: SchoolData, filepath: str | Path, indent: int = 2) -> None:
    """Save the document as pretty-printed JSON."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_json(data, indent=indent), encoding="utf-8")


def save_csv(data: SchoolData, filepath: str | Path) -> None:
    """Save occupied cells as CSV."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        CSVFormatter().write(data, f)
