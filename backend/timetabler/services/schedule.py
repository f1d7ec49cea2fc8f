from __future__ import annotations

import random
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timetabler.services.conflict_service import Conflict

SUBJECT_COLORS = (
    "#3B82F6",
    "#EF4444",
    "#10B981",
    "#F59E0B",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
    "#F97316",
    "#6366F1",
    "#14B8A6",
    "#F43F5E",
    "#8B5A2B",
    "#059669",
    "#7C3AED",
)

DaySchedule = dict[str, "ClassAssignment | None"]


@dataclass(frozen=True)
class ClassAssignment:
    subject: str
    faculty: str
    room: str
    color: str | None = None


@dataclass
class Batch:
    id: int
    name: str
    schedule: dict[str, DaySchedule]

    def coordinates(self) -> Iterator[tuple[str, str]]:
        """Yield (day, slot) pairs in day-major, slot-minor order."""
        for day, day_schedule in self.schedule.items():
            for slot in day_schedule:
                yield day, slot

    def filled_coordinates(self) -> list[tuple[str, str]]:
        return [(day, slot) for day, slot in self.coordinates() if self.schedule[day][slot] is not None]

    def empty_coordinates(self) -> list[tuple[str, str]]:
        return [(day, slot) for day, slot in self.coordinates() if self.schedule[day][slot] is None]

    def slot_count(self) -> int:
        return sum(len(day_schedule) for day_schedule in self.schedule.values())

    def filled_count(self) -> int:
        return len(self.filled_coordinates())

    def subject_counts(self) -> Counter[str]:
        counts: Counter[str] = Counter()
        for day_schedule in self.schedule.values():
            for entry in day_schedule.values():
                if entry is not None:
                    counts[entry.subject] += 1
        return counts


@dataclass
class Timetable:
    batches: list[Batch]
    fitness: float | None = None
    conflicts: list[Conflict] | None = None
    algorithm: str | None = None

    def clone(self) -> "Timetable":
        """Copy the grid so the clone can be mutated independently.

        Assignments are immutable and shared; the result is unfinalized.
        """
        return Timetable(
            batches=[
                Batch(
                    id=batch.id,
                    name=batch.name,
                    schedule={day: dict(day_schedule) for day, day_schedule in batch.schedule.items()},
                )
                for batch in self.batches
            ]
        )

    @property
    def is_finalized(self) -> bool:
        return self.fitness is not None and self.conflicts is not None and self.algorithm is not None


@dataclass
class SchedulingContext:
    """Everything one generation run needs, derived once from the request."""

    subjects: list[str]
    faculty: list[str]
    days: list[str]
    time_slots: list[str]
    rooms: list[str]
    batch_count: int
    frequency: int
    rng: random.Random
    subject_colors: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.subject_colors:
            self.subject_colors = build_subject_colors(self.subjects)

    @property
    def slots_per_batch(self) -> int:
        return len(self.days) * len(self.time_slots)

    @property
    def max_classes_per_batch(self) -> int:
        # One slot per batch per week always stays free.
        return max(0, self.slots_per_batch - 1)

    def coordinates(self) -> list[tuple[str, str]]:
        return [(day, slot) for day in self.days for slot in self.time_slots]

    def faculty_for_subject(self, subject: str) -> str:
        return self.faculty[self.subjects.index(subject) % len(self.faculty)]

    def room_for_batch(self, batch_id: int) -> str:
        return self.rooms[batch_id % len(self.rooms)]

    def make_assignment(self, subject: str, faculty: str, room: str) -> ClassAssignment:
        return ClassAssignment(
            subject=subject,
            faculty=faculty,
            room=room,
            color=self.subject_colors.get(subject),
        )

    def create_empty_timetable(self) -> Timetable:
        return create_empty_timetable(self.batch_count, self.days, self.time_slots)


def build_subject_colors(subjects: list[str]) -> dict[str, str]:
    return {subject: SUBJECT_COLORS[index % len(SUBJECT_COLORS)] for index, subject in enumerate(subjects)}


def create_empty_timetable(batch_count: int, days: list[str], time_slots: list[str]) -> Timetable:
    return Timetable(
        batches=[
            Batch(
                id=batch_id,
                name=f"Batch {batch_id + 1}",
                schedule={day: {slot: None for slot in time_slots} for day in days},
            )
            for batch_id in range(batch_count)
        ]
    )
