"""Load and save the school data document as JSON."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from pydantic import ValidationError

from scheduler.errors import DataValidationError, MalformedLabelError, PersistenceError
from .models import SchoolData, init_grid_structure, normalize_grid, parse_label

logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """A loaded document plus any cells that had to be skipped."""
    data: SchoolData
    warnings: list[str] = field(default_factory=list)


def validate_school_data(raw: dict[str, Any]) -> LoadReport:
    """
    Validate a raw document and bring its grid into shape.

    Malformed legacy labels are replaced by empty cells and reported as
    warnings. A missing or empty grid is regenerated from setup/allocations.

    Raises:
        DataValidationError: If the document structure is invalid
    """
    if not isinstance(raw, dict):
        raise DataValidationError(f"Expected a JSON object, got {type(raw).__name__}")

    warnings: list[str] = []
    raw = dict(raw)
    raw["grid"] = _strip_malformed_labels(raw.get("grid") or {}, warnings)

    try:
        data = SchoolData.model_validate(raw)
    except ValidationError as e:
        raise DataValidationError(str(e)) from e

    if data.setup is not None:
        if data.grid:
            grid = normalize_grid(data.setup, data.allocations, data.grid)
        else:
            grid = init_grid_structure(data.setup, data.allocations)
        data = data.with_grid(grid)

    return LoadReport(data=data, warnings=warnings)


def _strip_malformed_labels(grid: Any, warnings: list[str]) -> Any:
    if not isinstance(grid, dict):
        return grid

    cleaned: dict = {}
    for class_name, days in grid.items():
        if not isinstance(days, dict):
            cleaned[class_name] = days
            continue
        cleaned[class_name] = {}
        for day, cells in days.items():
            if not isinstance(cells, list):
                cleaned[class_name][day] = cells
                continue
            row = []
            for period, cell in enumerate(cells):
                try:
                    row.append(parse_label(cell))
                except MalformedLabelError as e:
                    message = f"{class_name} {day} Pd {period + 1}: {e}"
                    logger.warning("Skipping cell %s", message)
                    warnings.append(message)
                    row.append(None)
            cleaned[class_name][day] = row
    return cleaned


class JsonStore:
    """
    File-backed store for the school data document.

    Reading an absent file yields the empty document; writes are
    pretty-printed and replace the file in one step.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> LoadReport:
        """
        Read the document.

        Raises:
            PersistenceError: If the file cannot be read or is not valid JSON
            DataValidationError: If the document fails validation
        """
        if not self.path.exists():
            return LoadReport(data=SchoolData())

        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise PersistenceError(f"Error reading data from {self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Invalid JSON in {self.path}: {e}") from e

        return validate_school_data(raw)

    def save(self, data: SchoolData) -> bool:
        """
        Write the document.

        Raises:
            PersistenceError: If the file cannot be written
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(to_json(data))
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Error saving data to {self.path}: {e}") from e

        logger.debug("Saved school data to %s", self.path)
        return True


def to_json(data: SchoolData, indent: int = 2) -> str:
    """Serialize a document the way the store writes it."""
    return json.dumps(data.model_dump(mode="json"), indent=indent)


def load_school_data(path: Union[str, Path]) -> LoadReport:
    """Load a document from ``path``."""
    return JsonStore(path).load()
