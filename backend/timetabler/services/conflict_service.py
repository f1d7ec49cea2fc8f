from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from timetabler.services.constraints import is_lab_room
from timetabler.services.schedule import Timetable

FACULTY_CONFLICT = "faculty_conflict"
ROOM_CONFLICT = "room_conflict"

ConflictKind = Literal["faculty_conflict", "room_conflict"]


@dataclass(frozen=True)
class Conflict:
    kind: ConflictKind
    day: str
    slot: str
    batches: tuple[int, int]
    resource: str
    severity: Literal["high", "medium"]
    description: str
    details: str

    @property
    def is_faculty_conflict(self) -> bool:
        return self.kind == FACULTY_CONFLICT


def detect_conflicts(timetable: Timetable) -> list[Conflict]:
    """Report every faculty and non-lab room collision between batches.

    Each unordered batch pair is reported once per kind at a given slot,
    ordered by batch, then day, then slot, then partner batch.
    """
    conflicts: list[Conflict] = []
    batches = timetable.batches

    for batch_index, batch in enumerate(batches):
        for day, day_schedule in batch.schedule.items():
            for slot, first in day_schedule.items():
                if first is None:
                    continue
                for other_index in range(batch_index + 1, len(batches)):
                    second = batches[other_index].schedule[day][slot]
                    if second is None:
                        continue
                    where = f"{day} {slot}: Batch {batch_index + 1} and Batch {other_index + 1}"
                    if first.faculty == second.faculty:
                        conflicts.append(
                            Conflict(
                                kind=FACULTY_CONFLICT,
                                day=day,
                                slot=slot,
                                batches=(batch_index, other_index),
                                resource=first.faculty,
                                severity="high",
                                description=f"Faculty {first.faculty} assigned to multiple batches",
                                details=where,
                            )
                        )
                    if first.room == second.room and not is_lab_room(first.room):
                        conflicts.append(
                            Conflict(
                                kind=ROOM_CONFLICT,
                                day=day,
                                slot=slot,
                                batches=(batch_index, other_index),
                                resource=first.room,
                                severity="medium",
                                description=f"Room {first.room} double-booked",
                                details=f"{where} ({first.subject} and {second.subject})",
                            )
                        )
    return conflicts


def count_conflicts_by_kind(conflicts: list[Conflict]) -> dict[str, int]:
    counts = {FACULTY_CONFLICT: 0, ROOM_CONFLICT: 0}
    for conflict in conflicts:
        counts[conflict.kind] += 1
    return counts
