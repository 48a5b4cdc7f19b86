"""CP-SAT placement of a task list, used when the randomized engine gives up.

The model uses one boolean per feasible task-slot pair:
    x[task_index, day, period] = 1 if the task is placed in that slot

A slot is a candidate for a task only if every class of the task is empty
there and the teacher has no existing session in it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from ortools.sat.python import cp_model

from .data.models import Grid, Setup, clone_grid
from .engine import build_busy_map
from .tasks import Task

logger = logging.getLogger(__name__)


class TaskPlacementModel:
    """Builds and solves the exact placement model for a task list."""

    def __init__(self, tasks: list[Task], grid: Grid, setup: Setup):
        self.tasks = tasks
        self.grid = grid
        self.setup = setup
        self.model = cp_model.CpModel()
        self.variables: dict[tuple[int, str, int], cp_model.IntVar] = {}
        self._built = False

    def build(self) -> bool:
        """
        Create variables and constraints.

        Returns:
            False if some task has no candidate slot at all
        """
        if self._built:
            return True

        busy = build_busy_map(self.grid)

        for index, task in enumerate(self.tasks):
            candidates = 0
            for day, period in self.setup.slots():
                if period in busy.get(task.teacher, {}).get(day, set()):
                    continue
                if any(self.grid[c][day][period] is not None for c in task.classes):
                    continue
                self.variables[(index, day, period)] = self.model.NewBoolVar(f"x_{index}_{day}_{period}")
                candidates += 1
            if candidates == 0:
                logger.debug("Task %s has no free slot", task)
                return False

        self._add_constraints()
        self._built = True
        return True

    def _add_constraints(self) -> None:
        by_task: dict[int, list[cp_model.IntVar]] = defaultdict(list)
        by_teacher_slot: dict[tuple[str, str, int], list[cp_model.IntVar]] = defaultdict(list)
        by_class_slot: dict[tuple[str, str, int], list[cp_model.IntVar]] = defaultdict(list)

        for (index, day, period), var in self.variables.items():
            task = self.tasks[index]
            by_task[index].append(var)
            by_teacher_slot[(task.teacher, day, period)].append(var)
            for class_name in task.classes:
                by_class_slot[(class_name, day, period)].append(var)

        # Every task takes exactly one slot
        for index in range(len(self.tasks)):
            self.model.AddExactlyOne(by_task[index])

        # No teacher double-booking
        for group in by_teacher_slot.values():
            if len(group) > 1:
                self.model.AddAtMostOne(group)

        # No class double-booking
        for group in by_class_slot.values():
            if len(group) > 1:
                self.model.AddAtMostOne(group)

    def solve(self, time_limit_seconds: float = 10.0) -> Optional[Grid]:
        """
        Solve the model.

        Returns:
            A new grid with every task placed, or None if none was found
        """
        if not self.build():
            return None

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = time_limit_seconds
        solver.parameters.num_search_workers = 0  # Use all available cores

        status = solver.Solve(self.model)
        status_name = solver.StatusName(status)
        logger.info("CP-SAT finished with status %s in %.2fs", status_name, solver.WallTime())

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            return None

        result = clone_grid(self.grid)
        for (index, day, period), var in self.variables.items():
            if solver.Value(var) == 1:
                task = self.tasks[index]
                for class_name in task.classes:
                    result[class_name][day][period] = task.label
        return result


def solve_with_cpsat(
    tasks: list[Task],
    grid: Grid,
    setup: Setup,
    time_limit_seconds: float = 10.0,
) -> Optional[Grid]:
    """Place ``tasks`` exactly with CP-SAT; ``grid`` is not modified."""
    return TaskPlacementModel(tasks, grid, setup).solve(time_limit_seconds=time_limit_seconds)
