from __future__ import annotations

from dataclasses import dataclass

from timetabler.services.schedule import Timetable

LAB_MARKER = "Lab"


def is_lab_room(room: str) -> bool:
    """Lab rooms may host several batches in the same slot."""
    return LAB_MARKER in room


@dataclass(frozen=True)
class PlacementCandidate:
    subject: str
    faculty: str
    room: str
    batch: int
    day: str
    slot: str


def is_valid_assignment(timetable: Timetable, candidate: PlacementCandidate) -> bool:
    for batch in timetable.batches:
        if batch.id == candidate.batch:
            continue
        existing = batch.schedule[candidate.day][candidate.slot]
        if existing is None:
            continue
        if existing.faculty == candidate.faculty:
            return False
        if existing.room == candidate.room and not is_lab_room(candidate.room):
            return False
    return True
