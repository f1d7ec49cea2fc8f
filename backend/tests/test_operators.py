import random

from timetabler.services.operators import (
    best_index,
    crossover,
    mutate,
    ranked_indices,
    tournament_selection,
    worst_indices,
)

SLOTS = ["09:00-10:00", "10:00-11:00"]


def test_score_ordering_helpers():
    scores = [10.0, 30.0, 5.0, 30.0]
    assert best_index(scores) == 1
    assert ranked_indices(scores) == [1, 3, 0, 2]
    assert worst_indices(scores, 2) == [2, 0]
    assert worst_indices(scores, 0) == []


def test_tournament_prefers_the_fittest(make_timetable):
    population = [make_timetable(1, ["Monday"], SLOTS) for _ in range(3)]
    winner = tournament_selection(population, [1.0, 9.0, 3.0], random.Random(3), tournament_size=200)
    assert winner is population[1]


def test_crossover_fills_back_half_gaps_only(make_timetable):
    days = ["Monday", "Tuesday", "Wednesday"]
    parent_a = make_timetable(1, days, SLOTS, [(0, "Wednesday", "09:00-10:00", "Math", "Dr. A", "Room-101")])
    parent_b = make_timetable(
        1,
        days,
        SLOTS,
        [(0, day, slot, "Physics", "Dr. B", "Room-102") for day in days for slot in SLOTS],
    )

    child = crossover(parent_a, parent_b)
    schedule = child.batches[0].schedule

    assert all(entry is None for entry in schedule["Monday"].values())
    assert all(entry is None for entry in schedule["Tuesday"].values())
    assert schedule["Wednesday"]["09:00-10:00"].subject == "Math"
    assert schedule["Wednesday"]["10:00-11:00"].subject == "Physics"
    assert parent_a.batches[0].filled_count() == 1


def test_crossover_with_two_days_uses_second_day(make_timetable):
    days = ["Monday", "Tuesday"]
    parent_a = make_timetable(1, days, SLOTS)
    parent_b = make_timetable(
        1,
        days,
        SLOTS,
        [(0, day, slot, "Physics", "Dr. B", "Room-102") for day in days for slot in SLOTS],
    )

    child = crossover(parent_a, parent_b)

    assert child.batches[0].filled_coordinates() == [("Tuesday", slot) for slot in SLOTS]


def test_mutate_moves_a_class_into_an_empty_slot(make_timetable):
    original = make_timetable(1, ["Monday"], SLOTS, [(0, "Monday", "09:00-10:00", "Math", "Dr. A", "Room-101")])

    mutated = mutate(original, random.Random(5))

    assert mutated.batches[0].filled_coordinates() == [("Monday", "10:00-11:00")]
    assert original.batches[0].filled_coordinates() == [("Monday", "09:00-10:00")]


def test_mutate_swaps_when_batch_is_full(make_timetable):
    original = make_timetable(
        1,
        ["Monday"],
        SLOTS,
        [
            (0, "Monday", "09:00-10:00", "Math", "Dr. A", "Room-101"),
            (0, "Monday", "10:00-11:00", "Physics", "Dr. B", "Room-101"),
        ],
    )

    mutated = mutate(original, random.Random(11))

    assert mutated.batches[0].subject_counts() == original.batches[0].subject_counts()
    assert mutated.batches[0].filled_count() == 2


def test_crossover_keeps_one_slot_free(make_timetable):
    days = ["Monday", "Tuesday"]
    parent_a = make_timetable(1, days, SLOTS, [(0, "Monday", slot, "Math", "Dr. A", "Room-101") for slot in SLOTS])
    parent_b = make_timetable(
        1,
        days,
        SLOTS,
        [(0, day, slot, "Physics", "Dr. B", "Room-102") for day in days for slot in SLOTS],
    )

    child = crossover(parent_a, parent_b)

    assert child.batches[0].filled_count() == 3
    assert child.batches[0].empty_coordinates() == [("Tuesday", "10:00-11:00")]
