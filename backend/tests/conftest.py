import random

import pytest
from fastapi.testclient import TestClient

from timetabler.api.deps import get_random_source
from timetabler.main import app
from timetabler.schemas.generator import GenerationTuning
from timetabler.services.schedule import ClassAssignment, SchedulingContext, create_empty_timetable


@pytest.fixture()
def client():
    app.dependency_overrides[get_random_source] = lambda: random.Random(7)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def fast_tuning():
    # Small enough to keep the search strategies quick under test.
    return GenerationTuning(
        population_size=8,
        generations=5,
        hybrid_population_size=6,
        hybrid_generations=4,
        hybrid_replace_count=2,
    )


@pytest.fixture()
def make_context(rng):
    def factory(
        *,
        subjects=("Math", "Physics", "Chemistry"),
        faculty=("Dr. A", "Dr. B", "Dr. C"),
        days=("Monday", "Tuesday"),
        time_slots=("09:00-10:00", "10:00-11:00", "11:00-12:00"),
        rooms=("Room-101", "Room-102"),
        batch_count=2,
        frequency=1,
    ):
        return SchedulingContext(
            subjects=list(subjects),
            faculty=list(faculty),
            days=list(days),
            time_slots=list(time_slots),
            rooms=list(rooms),
            batch_count=batch_count,
            frequency=frequency,
            rng=rng,
        )

    return factory


@pytest.fixture()
def make_timetable():
    def factory(batch_count, days, time_slots, placements=()):
        timetable = create_empty_timetable(batch_count, list(days), list(time_slots))
        for batch_id, day, slot, subject, faculty, room in placements:
            timetable.batches[batch_id].schedule[day][slot] = ClassAssignment(subject, faculty, room)
        return timetable

    return factory
