"""
Authoritative schedule state.

Holds the current document, hands out snapshots to readers and swaps in new
grids in a single step. Writers (auto-fill, manual edits, reset) are
serialised; readers only wait for the swap itself, never for a solve.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .collisions import Collision, detect_collisions
from .config import EngineConfig
from .data.loader import JsonStore
from .data.models import Grid, SchoolData, SessionLabel, clone_grid, init_grid_structure
from .editing import CellEditResult, set_cell
from .engine import AutoFillResult, run_auto_fill
from .errors import ConfigurationMissingError, PersistenceError
from .requirements import RequirementProgress, requirements_for

logger = logging.getLogger(__name__)


class ScheduleState:
    """
    In-memory school document with optional persistence.

    Args:
        data: Initial document
        store: Where committed changes are saved (None keeps state in memory)
    """

    def __init__(self, data: SchoolData, store: Optional[JsonStore] = None):
        self._data = data
        self._store = store
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()
        self.dirty = False
        self.last_error: Optional[str] = None

    @classmethod
    def from_store(cls, store: JsonStore) -> tuple["ScheduleState", list[str]]:
        """Load state from ``store``, returning it with any load warnings."""
        report = store.load()
        return cls(report.data, store), report.warnings

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def snapshot(self) -> SchoolData:
        """Independent copy of the current document."""
        with self._lock:
            return self._data.with_grid(clone_grid(self._data.grid))

    def check_collisions(self) -> list[Collision]:
        data = self.snapshot()
        return detect_collisions(data.grid, data.setup.days if data.setup else None)

    def requirements_for(self, class_name: str) -> list[RequirementProgress]:
        return requirements_for(self.snapshot(), class_name)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def commit_grid(self, grid: Grid) -> None:
        """Replace the grid in one step."""
        grid = clone_grid(grid)
        with self._lock:
            self._data = self._data.with_grid(grid)
            self.dirty = True

    def auto_fill(self, config: Optional[EngineConfig] = None) -> AutoFillResult:
        """Run auto-fill on a snapshot and commit the result on success."""
        with self._write_lock:
            data = self.snapshot()
            result = run_auto_fill(data.setup, data.allocations, data.grid, config)
            if result.is_success:
                self.commit_grid(result.grid)
                self.save()
            return result

    def set_cell(self, class_name: str, day: str, period: int, label: Optional[SessionLabel]) -> CellEditResult:
        """Apply a manual edit and commit it if accepted."""
        with self._write_lock:
            result = set_cell(self.snapshot(), class_name, day, period, label)
            if result.ok:
                self.commit_grid(result.grid)
                self.save()
            return result

    def reset(self) -> Grid:
        """
        Replace the grid with an all-empty one.

        Raises:
            ConfigurationMissingError: If no setup has been provided
        """
        with self._write_lock:
            data = self.snapshot()
            if data.setup is None:
                raise ConfigurationMissingError()
            grid = init_grid_structure(data.setup, data.allocations)
            self.commit_grid(grid)
            self.save()
            return clone_grid(grid)

    def save(self) -> bool:
        """
        Persist the current document.

        A failed write is logged and leaves the state dirty; the in-memory
        document is kept so a later save can retry.
        """
        if self._store is None:
            return False

        data = self.snapshot()
        try:
            self._store.save(data)
        except PersistenceError as e:
            logger.warning("Changes kept in memory but not saved: %s", e)
            self.last_error = str(e)
            self.dirty = True
            return False

        self.last_error = None
        self.dirty = False
        return True
