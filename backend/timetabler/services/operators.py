from __future__ import annotations

import random

from timetabler.services.schedule import Timetable


def best_index(scores: list[float]) -> int:
    """Index of the highest score; the earliest one wins ties."""
    return scores.index(max(scores))


def ranked_indices(scores: list[float]) -> list[int]:
    return sorted(range(len(scores)), key=lambda idx: scores[idx], reverse=True)


def worst_indices(scores: list[float], count: int) -> list[int]:
    return sorted(range(len(scores)), key=lambda idx: scores[idx])[:count]


def tournament_selection(
    population: list[Timetable],
    scores: list[float],
    rng: random.Random,
    tournament_size: int = 4,
) -> Timetable:
    contenders = [rng.randrange(len(population)) for _ in range(tournament_size)]
    winner = max(contenders, key=lambda idx: scores[idx])
    return population[winner]


def crossover(parent_a: Timetable, parent_b: Timetable) -> Timetable:
    """Copy parent A and let parent B fill A's gaps in the back half of the week.

    Unlike a plain gap copy, donation stops once a batch is one class short
    of a full week so every batch keeps a free period.
    """
    offspring = parent_a.clone()
    for batch, donor in zip(offspring.batches, parent_b.batches):
        day_count = len(batch.schedule)
        room_left = batch.slot_count() - 1 - batch.filled_count()
        for day_index, (day, day_schedule) in enumerate(batch.schedule.items()):
            if day_index < day_count / 2:
                continue
            for slot, entry in day_schedule.items():
                donated = donor.schedule[day][slot]
                if entry is None and donated is not None and room_left > 0:
                    day_schedule[slot] = donated
                    room_left -= 1
    return offspring


def mutate(individual: Timetable, rng: random.Random) -> Timetable:
    """Move a class of one random batch into an empty slot, or swap two slots when none is empty."""
    mutated = individual.clone()
    batch = mutated.batches[rng.randrange(len(mutated.batches))]
    empty_slots = batch.empty_coordinates()
    filled_slots = batch.filled_coordinates()

    if empty_slots and filled_slots:
        empty_day, empty_slot = empty_slots[rng.randrange(len(empty_slots))]
        filled_day, filled_slot = filled_slots[rng.randrange(len(filled_slots))]
        batch.schedule[empty_day][empty_slot] = batch.schedule[filled_day][filled_slot]
        batch.schedule[filled_day][filled_slot] = None
        return mutated

    days = list(batch.schedule)
    first_day = days[rng.randrange(len(days))]
    second_day = days[rng.randrange(len(days))]
    first_slots = list(batch.schedule[first_day])
    second_slots = list(batch.schedule[second_day])
    first_slot = first_slots[rng.randrange(len(first_slots))]
    second_slot = second_slots[rng.randrange(len(second_slots))]
    batch.schedule[first_day][first_slot], batch.schedule[second_day][second_slot] = (
        batch.schedule[second_day][second_slot],
        batch.schedule[first_day][first_slot],
    )
    return mutated
