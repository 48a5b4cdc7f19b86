"""Turn residual requirements into atomic placement tasks."""

from __future__ import annotations

from dataclasses import dataclass

from .data.models import SessionLabel
from .requirements import Requirements


@dataclass(frozen=True)
class Task:
    """One session to place into the same slot for every class in ``classes``."""
    teacher: str
    subject: str
    classes: frozenset[str]

    @property
    def label(self) -> SessionLabel:
        return SessionLabel(subject=self.subject, teacher=self.teacher)

    @property
    def is_shared(self) -> bool:
        return len(self.classes) > 1

    def __str__(self) -> str:
        return f"{self.subject} ({self.teacher}) -> {', '.join(sorted(self.classes))}"


def build_tasks(requirements: Requirements) -> list[Task]:
    """
    Build the task list for every (teacher, subject) group.

    Each group yields as many tasks as its neediest class. Every task takes
    all classes that still need a session and uses one up for each, so shared
    sessions come first and solo sessions for the neediest classes follow.

    Example:
        A needs 2, B needs 1 -> [{A, B}, {A}]
    """
    tasks: list[Task] = []

    for key, class_needs in requirements.items():
        needs = {cls: max(0, n) for cls, n in class_needs.items()}
        max_needed = max(needs.values(), default=0)

        for _ in range(max_needed):
            participants = [cls for cls, n in needs.items() if n > 0]
            for cls in participants:
                needs[cls] -= 1
            if participants:
                tasks.append(Task(teacher=key.teacher, subject=key.subject, classes=frozenset(participants)))

    return tasks
