"""
Sample data generator for demos and tests.

Generates a school with several grades, each split into sections. Some
subjects are combined across the sections of a grade (one teacher teaching all
sections at once), the rest are taught per section.

Usage:
    from scheduler.data.generator import generate_sample_school, generate_small_school

    school = generate_sample_school(GeneratorConfig(num_grades=4, seed=7))
    small_school = generate_small_school(seed=1)
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional

from .models import (
    Allocation,
    SchoolData,
    Setup,
    SubjectAllocation,
    init_grid_structure,
)


# =============================================================================
# Name Data
# =============================================================================

FIRST_NAMES = [
    "James", "Robert", "Michael", "David", "William", "Sarah", "Emily", "Laura",
    "Nicole", "Emma", "Olivia", "Sophia", "Daniel", "Andrew", "Samuel", "Grace",
    "Hannah", "Lucy", "Marcus", "Nathan", "Kevin", "George", "Peter", "Chloe",
]

LAST_NAMES = [
    "Smith", "Johnson", "Brown", "Jones", "Garcia", "Miller", "Davis", "Wilson",
    "Anderson", "Taylor", "Moore", "Jackson", "Martin", "Lee", "Thompson", "White",
    "Harris", "Clark", "Lewis", "Walker", "Young", "King", "Wright", "Scott",
]

DEFAULT_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]


# =============================================================================
# Subject Definitions
# =============================================================================

SUBJECT_CATALOGUE = [
    {"subject": "English", "periods": 5},
    {"subject": "Mathematics", "periods": 5},
    {"subject": "Science", "periods": 4},
    {"subject": "History", "periods": 2},
    {"subject": "Geography", "periods": 2},
    {"subject": "Physical Education", "periods": 2, "combined": True},
    {"subject": "Art", "periods": 1, "combined": True},
    {"subject": "Music", "periods": 1, "combined": True},
]


# =============================================================================
# Generator Configuration
# =============================================================================

@dataclass
class GeneratorConfig:
    """Configuration for data generation.

    The defaults leave slack in every class and teacher week so the randomized
    auto-fill succeeds comfortably:
    - class load is the sum of the catalogue periods (22 of 35 slots)
    - no teacher is given more than ``max_teacher_load`` of the slots
    """
    num_grades: int = 3
    sections_per_grade: int = 2
    days: list[str] = field(default_factory=lambda: list(DEFAULT_DAYS))
    periods_per_day: int = 7
    subjects: list[dict[str, Any]] = field(default_factory=lambda: [dict(s) for s in SUBJECT_CATALOGUE])

    # Probability that a non-combined subject is still shared by all sections
    share_probability: float = 0.2
    # Fraction of the weekly slots any teacher may be booked for
    max_teacher_load: float = 0.6

    seed: Optional[int] = None


def generate_sample_school(config: GeneratorConfig | None = None) -> SchoolData:
    """
    Generate a complete school document with an empty grid.

    Args:
        config: Generator configuration (defaults used if not provided)

    Returns:
        SchoolData with setup, allocations and an all-empty grid
    """
    config = config or GeneratorConfig()
    rng = random.Random(config.seed)

    setup = Setup(days=list(config.days), periods_per_day=config.periods_per_day)
    max_load = max(1, int(setup.total_slots * config.max_teacher_load))

    staff = _StaffPool(rng, max_load)
    allocations: list[Allocation] = []

    for grade in range(1, config.num_grades + 1):
        sections = [f"{grade}{chr(ord('A') + s)}" for s in range(config.sections_per_grade)]
        per_section: dict[str, list[SubjectAllocation]] = {s: [] for s in sections}

        for entry in config.subjects:
            subject = entry["subject"]
            periods = entry["periods"]
            combined = entry.get("combined", False) or rng.random() < config.share_probability

            if combined:
                teacher = staff.pick(subject, periods)
                for section in sections:
                    per_section[section].append(
                        SubjectAllocation(subject=subject, teacher=teacher, periods=periods)
                    )
            else:
                for section in sections:
                    teacher = staff.pick(subject, periods)
                    per_section[section].append(
                        SubjectAllocation(subject=subject, teacher=teacher, periods=periods)
                    )

        allocations.extend(
            Allocation(class_name=section, subjects=subs) for section, subs in per_section.items()
        )

    return SchoolData(
        setup=setup,
        allocations=allocations,
        grid=init_grid_structure(setup, allocations),
    )


def generate_small_school(seed: int | None = None) -> SchoolData:
    """Two grades with two sections each over a three-day week."""
    return generate_sample_school(GeneratorConfig(
        num_grades=2,
        sections_per_grade=2,
        days=["Mon", "Tue", "Wed"],
        periods_per_day=6,
        subjects=[
            {"subject": "English", "periods": 3},
            {"subject": "Mathematics", "periods": 3},
            {"subject": "Science", "periods": 2},
            {"subject": "Art", "periods": 1, "combined": True},
        ],
        share_probability=0.0,
        seed=seed,
    ))


def generate_medium_school(seed: int | None = None) -> SchoolData:
    """Default catalogue over a five-day week, five grades."""
    return generate_sample_school(GeneratorConfig(num_grades=5, sections_per_grade=3, seed=seed))


@dataclass
class _StaffMember:
    name: str
    load: int = 0
    subjects: set[str] = field(default_factory=set)


class _StaffPool:
    """
    Hands out teachers with spare capacity.

    A teacher is never given the same subject twice: classes sharing a
    (teacher, subject) pair are always taught together, so a second section
    would silently become a combined one.
    """

    def __init__(self, rng: random.Random, max_load: int):
        self._rng = rng
        self._max_load = max_load
        self._members: list[_StaffMember] = []
        self._used_names: set[str] = set()

    def pick(self, subject: str, periods: int) -> str:
        for member in self._members:
            if subject not in member.subjects and member.load + periods <= self._max_load:
                return self._assign(member, subject, periods)

        member = _StaffMember(name=self._new_name())
        self._members.append(member)
        return self._assign(member, subject, periods)

    def _assign(self, member: _StaffMember, subject: str, periods: int) -> str:
        member.subjects.add(subject)
        member.load += periods
        return member.name

    def _new_name(self) -> str:
        for _ in range(100):
            name = f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"
            if name not in self._used_names:
                self._used_names.add(name)
                return name
        name = f"Teacher {len(self._used_names) + 1}"
        self._used_names.add(name)
        return name


def get_generation_stats(school: SchoolData) -> dict[str, Any]:
    """Load figures for a generated school."""
    # classes sharing a (teacher, subject) pair are taught together,
    # so each pair costs the teacher its largest periods target
    pair_load: dict[tuple[str, str], int] = {}
    for alloc in school.allocations:
        for sub in alloc.subjects:
            key = (sub.teacher, sub.subject)
            pair_load[key] = max(pair_load.get(key, 0), sub.periods)

    loads: dict[str, int] = {}
    for (teacher, _), periods in pair_load.items():
        loads[teacher] = loads.get(teacher, 0) + periods
    class_loads = [sum(s.periods for s in a.subjects) for a in school.allocations]
    total_slots = school.setup.total_slots if school.setup else 0

    return {
        "classes": len(school.allocations),
        "teachers": len(loads),
        "total_slots": total_slots,
        "max_class_load": max(class_loads, default=0),
        "max_teacher_load": max(loads.values(), default=0),
        "class_utilization": round(max(class_loads, default=0) / total_slots * 100, 1) if total_slots else 0.0,
    }
