from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from timetabler.services.conflict_service import detect_conflicts
from timetabler.services.schedule import ClassAssignment, Timetable

BASE_SCORE = 100.0
CONFLICT_WEIGHT = 25.0
OPTIMAL_UTILIZATION = 0.85
UTILIZATION_WEIGHT = 50.0
OVERFILL_WEIGHT = 20.0
GAP_WEIGHT = 5.0
GAP_COST = 2
DISTRIBUTION_CEILING = 15.0
DISTRIBUTION_WEIGHT = 8.0
BONUS_THRESHOLD = 0.8
BONUS_WEIGHT = 100.0


@dataclass(frozen=True)
class FitnessBreakdown:
    fitness: float
    conflict_count: int
    fill_ratio: float
    utilization_score: float
    gap_penalty: int
    distribution_score: float
    bonus: float


def day_gap_penalty(day_schedule: Sequence[ClassAssignment | None]) -> int:
    """Charge every empty slot that sits between two classes of the same day."""
    penalty = 0
    seen_class = False
    for index, entry in enumerate(day_schedule):
        if entry is not None:
            seen_class = True
            continue
        if seen_class and any(later is not None for later in day_schedule[index + 1 :]):
            penalty += GAP_COST
    return penalty


def subject_distribution_score(timetable: Timetable) -> float:
    counts: Counter[str] = Counter()
    for batch in timetable.batches:
        counts.update(batch.subject_counts())
    if not counts:
        return 0.0
    values = list(counts.values())
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    return max(0.0, DISTRIBUTION_CEILING - variance)


def utilization_score(fill_ratio: float) -> float:
    if fill_ratio <= OPTIMAL_UTILIZATION:
        return fill_ratio * UTILIZATION_WEIGHT
    return OPTIMAL_UTILIZATION * UTILIZATION_WEIGHT - (fill_ratio - OPTIMAL_UTILIZATION) * OVERFILL_WEIGHT


def fill_ratio(timetable: Timetable) -> tuple[int, int, float]:
    filled = sum(batch.filled_count() for batch in timetable.batches)
    total = sum(batch.slot_count() for batch in timetable.batches)
    return filled, total, (filled / total if total > 0 else 0.0)


def evaluate_fitness(timetable: Timetable) -> FitnessBreakdown:
    conflict_count = len(detect_conflicts(timetable))
    _, _, ratio = fill_ratio(timetable)
    gap_penalty = sum(
        day_gap_penalty(list(day_schedule.values()))
        for batch in timetable.batches
        for day_schedule in batch.schedule.values()
    )
    utilization = utilization_score(ratio)
    distribution = subject_distribution_score(timetable)
    bonus = max(0.0, ratio - BONUS_THRESHOLD) * BONUS_WEIGHT

    raw = (
        BASE_SCORE
        - conflict_count * CONFLICT_WEIGHT
        + utilization
        - gap_penalty * GAP_WEIGHT
        + distribution * DISTRIBUTION_WEIGHT
        + bonus
    )
    return FitnessBreakdown(
        fitness=max(0.0, raw),
        conflict_count=conflict_count,
        fill_ratio=ratio,
        utilization_score=utilization,
        gap_penalty=gap_penalty,
        distribution_score=distribution,
        bonus=bonus,
    )


def calculate_fitness(timetable: Timetable) -> float:
    return evaluate_fitness(timetable).fitness
