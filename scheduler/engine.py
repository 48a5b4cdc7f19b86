"""
Randomized slot-assignment engine.

Each attempt works on a private copy of the grid:

    Attempt -> Placing -> Success
                      \\-> Retry (fresh shuffle) -> ... -> Exhausted

Within an attempt the task order and the slot order are shuffled and every
task takes the first slot where its teacher is free and all of its classes
are empty. There is no backtracking inside an attempt; a task with no
feasible slot abandons the attempt.
"""

from __future__ import annotations

import logging
import random
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import EngineConfig
from .data.models import Allocation, Grid, Setup, clone_grid, iter_cells, normalize_grid
from .errors import ConfigurationMissingError, SolverExhaustedError
from .requirements import calculate_requirements, total_remaining
from .tasks import Task, build_tasks

logger = logging.getLogger(__name__)


# teacher -> day -> occupied periods
BusyMap = dict[str, dict[str, set[int]]]


def build_busy_map(grid: Grid) -> BusyMap:
    """Record every occupied (teacher, day, period) in the grid."""
    busy: BusyMap = defaultdict(lambda: defaultdict(set))
    for _, day, period, label in iter_cells(grid):
        busy[label.teacher][day].add(period)
    return busy


# =============================================================================
# Results
# =============================================================================

@dataclass
class SolveOutcome:
    """Result of running the engine over a task list."""
    success: bool
    grid: Optional[Grid]
    attempts_used: int


class AutoFillStatus(str, Enum):
    """Outcome of an auto-fill run."""
    SUCCESS = "success"
    NOTHING_TO_SCHEDULE = "nothing_to_schedule"
    EXHAUSTED = "exhausted"
    NOT_CONFIGURED = "not_configured"


@dataclass
class AutoFillResult:
    """Auto-fill outcome; ``grid`` is only set on success or when nothing was needed."""
    status: AutoFillStatus
    message: str
    grid: Optional[Grid] = None
    attempts_used: int = 0
    tasks: list[Task] = field(default_factory=list)
    strategy: Optional[str] = None
    solve_time_ms: int = 0

    @property
    def is_success(self) -> bool:
        return self.status == AutoFillStatus.SUCCESS

    @property
    def sessions_placed(self) -> int:
        return sum(len(t.classes) for t in self.tasks) if self.is_success else 0

    def raise_for_status(self) -> None:
        """Raise the matching error for failed runs."""
        if self.status == AutoFillStatus.NOT_CONFIGURED:
            raise ConfigurationMissingError()
        if self.status == AutoFillStatus.EXHAUSTED:
            raise SolverExhaustedError(self.attempts_used)


# =============================================================================
# Engine
# =============================================================================

class SlotAssignmentEngine:
    """
    Randomized greedy constructive solver with bounded restarts.

    Args:
        setup: Weekly cycle defining the candidate slots
        max_attempts: Attempts before reporting exhaustion
        rng: Random source (seed it for reproducible runs)
    """

    def __init__(self, setup: Setup, max_attempts: int = 100, rng: Optional[random.Random] = None):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.setup = setup
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()

    def solve(self, tasks: list[Task], grid: Grid) -> SolveOutcome:
        """
        Place every task, restarting with a fresh shuffle on failure.

        ``grid`` is never modified; a successful outcome carries a new grid.
        """
        for attempt in range(1, self.max_attempts + 1):
            result = self._attempt(tasks, grid)
            if result is not None:
                logger.info("Placed %d tasks on attempt %d", len(tasks), attempt)
                return SolveOutcome(success=True, grid=result, attempts_used=attempt)
            logger.debug("Attempt %d failed", attempt)

        logger.info("No placement found after %d attempts", self.max_attempts)
        return SolveOutcome(success=False, grid=None, attempts_used=self.max_attempts)

    def _attempt(self, tasks: list[Task], grid: Grid) -> Optional[Grid]:
        working = clone_grid(grid)
        busy = build_busy_map(working)

        order = list(tasks)
        self.rng.shuffle(order)

        for task in order:
            slot = self._find_slot(task, working, busy)
            if slot is None:
                logger.debug("No slot for %s", task)
                return None
            day, period = slot
            label = task.label
            for class_name in task.classes:
                working[class_name][day][period] = label
            busy[task.teacher][day].add(period)

        return working

    def _find_slot(self, task: Task, grid: Grid, busy: BusyMap) -> Optional[tuple[str, int]]:
        slots = self.setup.slots()
        self.rng.shuffle(slots)

        teacher_busy = busy[task.teacher]
        for day, period in slots:
            if period in teacher_busy[day]:
                continue
            if all(grid[c][day][period] is None for c in task.classes):
                return day, period
        return None


# =============================================================================
# Pipeline
# =============================================================================

def run_auto_fill(
    setup: Optional[Setup],
    allocations: list[Allocation],
    grid: Optional[Grid],
    config: Optional[EngineConfig] = None,
) -> AutoFillResult:
    """
    Fill the remaining requirement of every class.

    Requirements are derived from ``grid``, turned into tasks and handed to
    the engine (and to CP-SAT when ``config.cpsat_fallback`` is set and the
    engine is exhausted). The input grid is never modified.

    Args:
        setup: Weekly cycle (None means not configured)
        allocations: Per-class subject allocations
        grid: Current grid; missing entries are materialised on a copy
        config: Engine configuration

    Returns:
        AutoFillResult describing success or the failure kind
    """
    config = config or EngineConfig()
    start = time.perf_counter()

    if setup is None or not allocations:
        return AutoFillResult(
            status=AutoFillStatus.NOT_CONFIGURED,
            message=str(ConfigurationMissingError()),
        )

    working = normalize_grid(setup, allocations, grid)
    requirements = calculate_requirements(setup, allocations, working)
    tasks = build_tasks(requirements)

    if not tasks:
        return AutoFillResult(
            status=AutoFillStatus.NOTHING_TO_SCHEDULE,
            message="Schedule is already full!",
            grid=working,
        )

    logger.info(
        "Scheduling %d tasks (%d class sessions) over %d slots",
        len(tasks), total_remaining(requirements), setup.total_slots,
    )

    engine = SlotAssignmentEngine(setup, max_attempts=config.max_attempts, rng=random.Random(config.seed))
    outcome = engine.solve(tasks, working)

    if outcome.success:
        return AutoFillResult(
            status=AutoFillStatus.SUCCESS,
            message=f"Auto-filled successfully (Attempt {outcome.attempts_used})",
            grid=outcome.grid,
            attempts_used=outcome.attempts_used,
            tasks=tasks,
            strategy="random",
            solve_time_ms=_elapsed_ms(start),
        )

    if config.cpsat_fallback:
        from .fallback import solve_with_cpsat

        fallback_grid = solve_with_cpsat(tasks, working, setup, time_limit_seconds=config.cpsat_time_limit)
        if fallback_grid is not None:
            return AutoFillResult(
                status=AutoFillStatus.SUCCESS,
                message=f"Auto-filled with CP-SAT after {outcome.attempts_used} randomized attempts",
                grid=fallback_grid,
                attempts_used=outcome.attempts_used,
                tasks=tasks,
                strategy="cpsat",
                solve_time_ms=_elapsed_ms(start),
            )

    return AutoFillResult(
        status=AutoFillStatus.EXHAUSTED,
        message=str(SolverExhaustedError(outcome.attempts_used)),
        attempts_used=outcome.attempts_used,
        tasks=tasks,
        solve_time_ms=_elapsed_ms(start),
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
