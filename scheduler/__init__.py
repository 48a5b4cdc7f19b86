"""School Scheduler - randomized auto-fill of weekly school timetables."""

from .data.models import (
    Allocation,
    Grid,
    SchoolData,
    SessionLabel,
    Setup,
    SubjectAllocation,
    init_grid_structure,
)
from .requirements import RequirementKey, RequirementProgress, calculate_requirements, requirements_for
from .tasks import Task, build_tasks
from .engine import AutoFillResult, AutoFillStatus, SlotAssignmentEngine, run_auto_fill
from .collisions import Collision, detect_collisions
from .editing import CellEditResult, CellEditStatus, set_cell
from .config import EngineConfig
from .state import ScheduleState
from .cli import app as cli_app

__all__ = [
    # Data model
    "Allocation",
    "Grid",
    "SchoolData",
    "SessionLabel",
    "Setup",
    "SubjectAllocation",
    "init_grid_structure",
    # Engine
    "RequirementKey",
    "RequirementProgress",
    "calculate_requirements",
    "requirements_for",
    "Task",
    "build_tasks",
    "AutoFillResult",
    "AutoFillStatus",
    "SlotAssignmentEngine",
    "run_auto_fill",
    "EngineConfig",
    # Auditing and editing
    "Collision",
    "detect_collisions",
    "CellEditResult",
    "CellEditStatus",
    "set_cell",
    "ScheduleState",
    # CLI
    "cli_app",
]
