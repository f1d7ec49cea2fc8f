from __future__ import annotations

from collections import Counter

from timetabler.core.exceptions import InvalidConfigurationError
from timetabler.schemas.generator import (
    BatchPayload,
    ClassAssignmentPayload,
    ConflictPayload,
    FitnessBreakdownPayload,
    TimetablePayload,
    TimetableSummary,
)
from timetabler.services.conflict_service import (
    FACULTY_CONFLICT,
    ROOM_CONFLICT,
    Conflict,
    count_conflicts_by_kind,
    detect_conflicts,
)
from timetabler.services.fitness import FitnessBreakdown, fill_ratio
from timetabler.services.schedule import Batch, ClassAssignment, Timetable


def conflict_to_payload(conflict: Conflict) -> ConflictPayload:
    is_faculty = conflict.kind == FACULTY_CONFLICT
    return ConflictPayload(
        type=conflict.kind,
        description=conflict.description,
        details=conflict.details,
        day=conflict.day,
        slot=conflict.slot,
        batches=list(conflict.batches),
        severity=conflict.severity,
        faculty=conflict.resource if is_faculty else None,
        room=None if is_faculty else conflict.resource,
    )


def timetable_to_payload(timetable: Timetable) -> TimetablePayload:
    batches = []
    for batch in timetable.batches:
        schedule: dict[str, dict[str, ClassAssignmentPayload | None]] = {}
        for day, day_schedule in batch.schedule.items():
            schedule[day] = {
                slot: (
                    None
                    if entry is None
                    else ClassAssignmentPayload(
                        subject=entry.subject,
                        faculty=entry.faculty,
                        room=entry.room,
                        color=entry.color,
                    )
                )
                for slot, entry in day_schedule.items()
            }
        batches.append(BatchPayload(id=batch.id, name=batch.name, schedule=schedule))

    return TimetablePayload(
        batches=batches,
        fitness=timetable.fitness,
        conflicts=[conflict_to_payload(item) for item in timetable.conflicts or []],
        algorithm=timetable.algorithm,
    )


def payload_to_timetable(payload: TimetablePayload) -> Timetable:
    """Rebuild an unfinalized timetable from a wire payload.

    Every batch must cover the same days and slots as the first one.
    """
    reference = payload.batches[0].schedule
    expected = {day: list(slots) for day, slots in reference.items()}
    if not expected or not all(expected.values()):
        raise InvalidConfigurationError(message="Timetable payload has no slots")

    batches: list[Batch] = []
    for position, batch in enumerate(payload.batches):
        if batch.id != position:
            raise InvalidConfigurationError(
                message="Batch ids must be consecutive and start at 0",
                details={"position": position, "id": batch.id},
            )
        layout = {day: list(slots) for day, slots in batch.schedule.items()}
        if layout != expected:
            raise InvalidConfigurationError(
                message="Every batch must cover the same days and time slots",
                details={"batch": batch.id},
            )
        batches.append(
            Batch(
                id=batch.id,
                name=batch.name,
                schedule={
                    day: {
                        slot: (
                            None
                            if entry is None
                            else ClassAssignment(
                                subject=entry.subject,
                                faculty=entry.faculty,
                                room=entry.room,
                                color=entry.color,
                            )
                        )
                        for slot, entry in day_schedule.items()
                    }
                    for day, day_schedule in batch.schedule.items()
                },
            )
        )
    return Timetable(batches=batches)


def build_summary(timetable: Timetable, conflicts: list[Conflict] | None = None) -> TimetableSummary:
    if conflicts is None:
        conflicts = timetable.conflicts if timetable.conflicts is not None else detect_conflicts(timetable)
    filled, total, ratio = fill_ratio(timetable)
    by_kind = count_conflicts_by_kind(conflicts)
    subject_counts: Counter[str] = Counter()
    for batch in timetable.batches:
        subject_counts.update(batch.subject_counts())
    return TimetableSummary(
        filled_slots=filled,
        total_slots=total,
        utilization=round(ratio, 4),
        faculty_conflicts=by_kind[FACULTY_CONFLICT],
        room_conflicts=by_kind[ROOM_CONFLICT],
        subject_counts=dict(sorted(subject_counts.items())),
    )


def breakdown_to_payload(breakdown: FitnessBreakdown) -> FitnessBreakdownPayload:
    return FitnessBreakdownPayload(
        fitness=breakdown.fitness,
        conflict_count=breakdown.conflict_count,
        fill_ratio=breakdown.fill_ratio,
        utilization_score=breakdown.utilization_score,
        gap_penalty=breakdown.gap_penalty,
        distribution_score=breakdown.distribution_score,
        bonus=breakdown.bonus,
    )
