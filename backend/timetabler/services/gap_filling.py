from __future__ import annotations

import logging

from timetabler.services.conflict_service import detect_conflicts
from timetabler.services.constraints import PlacementCandidate, is_valid_assignment
from timetabler.services.schedule import Batch, ClassAssignment, SchedulingContext, Timetable

logger = logging.getLogger(__name__)


def _least_scheduled_subject(batch: Batch, context: SchedulingContext) -> str:
    current = batch.subject_counts()
    counts = {subject: current.get(subject, 0) for subject in context.subjects}
    lowest = min(counts.values())
    candidates = [subject for subject in context.subjects if counts[subject] == lowest]
    return context.rng.choice(candidates)


def fill_gaps(timetable: Timetable, context: SchedulingContext) -> Timetable:
    """Return a copy with empty slots filled by under-represented subjects.

    Each batch keeps at least one free slot per week. A slot whose candidate
    class is rejected by the constraint checker stays empty.
    """
    optimized = timetable.clone()

    for batch in optimized.batches:
        empty_slots = batch.empty_coordinates()
        filled = batch.slot_count() - len(empty_slots)
        max_allowed = batch.slot_count() - 1
        slots_to_fill = max(0, min(len(empty_slots), max_allowed - filled))

        for day, slot in empty_slots[:slots_to_fill]:
            subject = _least_scheduled_subject(batch, context)
            candidate = PlacementCandidate(
                subject=subject,
                faculty=context.faculty_for_subject(subject),
                room=context.room_for_batch(batch.id),
                batch=batch.id,
                day=day,
                slot=slot,
            )
            if is_valid_assignment(optimized, candidate):
                batch.schedule[day][slot] = context.make_assignment(
                    candidate.subject, candidate.faculty, candidate.room
                )

    return optimized


def _relocate(timetable: Timetable, batch: Batch, entry: ClassAssignment, day: str, slot: str) -> bool:
    for target_day, target_slot in batch.empty_coordinates():
        candidate = PlacementCandidate(
            subject=entry.subject,
            faculty=entry.faculty,
            room=entry.room,
            batch=batch.id,
            day=target_day,
            slot=target_slot,
        )
        if is_valid_assignment(timetable, candidate):
            batch.schedule[target_day][target_slot] = entry
            batch.schedule[day][slot] = None
            return True
    return False


def resolve_conflicts_by_swapping(timetable: Timetable) -> Timetable:
    """Move one class out of every faculty collision when a valid free slot exists.

    Room collisions are left untouched.
    """
    optimized = timetable.clone()
    resolved = 0

    for conflict in detect_conflicts(optimized):
        if not conflict.is_faculty_conflict:
            continue
        involved = [optimized.batches[index] for index in conflict.batches]
        entries = [batch.schedule[conflict.day][conflict.slot] for batch in involved]
        # An earlier relocation may already have broken this collision up.
        if any(entry is None or entry.faculty != conflict.resource for entry in entries):
            continue
        for batch, entry in zip(involved, entries):
            if _relocate(optimized, batch, entry, conflict.day, conflict.slot):
                resolved += 1
                break

    if resolved:
        logger.debug("Relocated %s classes out of faculty conflicts", resolved)
    return optimized


def intensive_gap_filling(timetable: Timetable, context: SchedulingContext, passes: int = 3) -> Timetable:
    optimized = timetable.clone()
    for _ in range(passes):
        optimized = fill_gaps(optimized, context)
        optimized = resolve_conflicts_by_swapping(optimized)
    return optimized
