from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from time import perf_counter
from typing import Any, ClassVar

from pydantic import ValidationError

from timetabler.core.config import get_settings
from timetabler.core.exceptions import InvalidConfigurationError
from timetabler.schemas.generator import GenerateTimetableRequest, GenerationParameters, GenerationTuning
from timetabler.services.conflict_service import detect_conflicts
from timetabler.services.constraints import PlacementCandidate, is_valid_assignment
from timetabler.services.fitness import calculate_fitness
from timetabler.services.gap_filling import fill_gaps, intensive_gap_filling
from timetabler.services.operators import (
    best_index,
    crossover,
    mutate,
    ranked_indices,
    tournament_selection,
    worst_indices,
)
from timetabler.services.schedule import SchedulingContext, Timetable
from timetabler.services.slot_grid import build_time_slots

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "hybrid"


@dataclass(frozen=True)
class AssignmentRequest:
    subject: str
    faculty: str
    batch: int
    room: str
    priority: float


def build_scheduling_context(
    subjects: list[str],
    faculty: list[str],
    parameters: GenerationParameters,
    *,
    room_catalog: list[str],
    rng: random.Random,
) -> SchedulingContext:
    time_slots = build_time_slots(parameters.start_time, parameters.end_time, parameters.max_classes)
    if not time_slots:
        raise InvalidConfigurationError(
            message="Working hours do not fit a single 60-minute slot",
            details={"start_time": parameters.start_time, "end_time": parameters.end_time},
        )
    if not subjects:
        raise InvalidConfigurationError(message="At least one subject is required")
    if not faculty:
        raise InvalidConfigurationError(message="At least one faculty member is required")
    if not room_catalog:
        raise InvalidConfigurationError(message="At least one room is required")

    return SchedulingContext(
        subjects=list(subjects[: parameters.subjects]),
        faculty=list(faculty),
        days=list(parameters.working_days),
        time_slots=time_slots,
        rooms=list(room_catalog[: min(len(room_catalog), parameters.classrooms)]),
        batch_count=parameters.batches,
        frequency=parameters.frequency,
        rng=rng,
    )


def finalize_timetable(timetable: Timetable, algorithm: str) -> Timetable:
    timetable.fitness = calculate_fitness(timetable)
    timetable.conflicts = detect_conflicts(timetable)
    timetable.algorithm = algorithm
    return timetable


class GenerationStrategy(ABC):
    name: ClassVar[str]

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        tuning: GenerationTuning | None = None,
        room_catalog: list[str] | None = None,
    ) -> None:
        self.random = rng if rng is not None else random.Random()
        self.tuning = tuning if tuning is not None else GenerationTuning()
        if room_catalog is None:
            room_catalog = get_settings().room_catalog
        self.room_catalog = list(room_catalog)

    def run(self, subjects: list[str], faculty: list[str], parameters: GenerationParameters) -> Timetable:
        context = build_scheduling_context(
            subjects,
            faculty,
            parameters,
            room_catalog=self.room_catalog,
            rng=self.random,
        )
        started = perf_counter()
        logger.info(
            "Scheduler run strategy=%s batches=%s days=%s slots=%s subjects=%s",
            self.name,
            context.batch_count,
            len(context.days),
            len(context.time_slots),
            len(context.subjects),
        )
        timetable = finalize_timetable(self.search(context), self.name)
        logger.info(
            "Scheduler done strategy=%s fitness=%.2f conflicts=%s runtime_ms=%s",
            self.name,
            timetable.fitness,
            len(timetable.conflicts),
            int((perf_counter() - started) * 1000),
        )
        return timetable

    @abstractmethod
    def search(self, context: SchedulingContext) -> Timetable:
        """Build an unfinalized timetable for ``context``."""


class ConstraintFirstStrategy(GenerationStrategy):
    name = "constraint"

    def calculate_optimal_class_count(self, context: SchedulingContext) -> int:
        target_per_batch = math.floor(context.slots_per_batch * self.tuning.constraint_utilization)
        return min(target_per_batch, context.max_classes_per_batch) * context.batch_count

    def build_assignment_requests(self, context: SchedulingContext) -> list[AssignmentRequest]:
        total_needed = self.calculate_optimal_class_count(context)
        extra_frequency = math.ceil(total_needed / (len(context.subjects) * context.batch_count))
        actual_frequency = max(context.frequency, extra_frequency)

        requests: list[AssignmentRequest] = []
        for subject_index, subject in enumerate(context.subjects):
            for repeat in range(actual_frequency):
                for batch_id in range(context.batch_count):
                    requests.append(
                        AssignmentRequest(
                            subject=subject,
                            faculty=context.faculty[subject_index % len(context.faculty)],
                            batch=batch_id,
                            room=context.room_for_batch(batch_id),
                            # Repeats within the configured frequency go first.
                            priority=self.random.random() + (1.0 if repeat < context.frequency else 0.5),
                        )
                    )
        requests.sort(key=lambda item: item.priority, reverse=True)
        return requests

    def search(self, context: SchedulingContext) -> Timetable:
        timetable = context.create_empty_timetable()
        requests = self.build_assignment_requests(context)
        placed_per_batch = [0] * context.batch_count
        dropped = 0

        for request in requests:
            batch = timetable.batches[request.batch]
            placed = False
            if placed_per_batch[request.batch] < context.max_classes_per_batch:
                for day, slot in context.coordinates():
                    if batch.schedule[day][slot] is not None:
                        continue
                    candidate = PlacementCandidate(
                        subject=request.subject,
                        faculty=request.faculty,
                        room=request.room,
                        batch=request.batch,
                        day=day,
                        slot=slot,
                    )
                    if is_valid_assignment(timetable, candidate):
                        batch.schedule[day][slot] = context.make_assignment(
                            request.subject, request.faculty, request.room
                        )
                        placed_per_batch[request.batch] += 1
                        placed = True
                        break
            if not placed:
                dropped += 1

        logger.debug("Constraint-first placement requests=%s dropped=%s", len(requests), dropped)
        return fill_gaps(timetable, context)


class GeneticStrategy(GenerationStrategy):
    name = "genetic"

    def create_random_timetable(self, context: SchedulingContext) -> Timetable:
        timetable = context.create_empty_timetable()
        target_per_batch = math.floor(context.slots_per_batch * self.tuning.genetic_fill_ratio)
        classes_per_subject = math.ceil(target_per_batch / len(context.subjects))
        coordinates = context.coordinates()

        for subject in context.subjects:
            for _ in range(classes_per_subject):
                for batch in timetable.batches:
                    faculty = context.faculty[self.random.randrange(len(context.faculty))]
                    room = context.rooms[self.random.randrange(len(context.rooms))]
                    if batch.filled_count() >= context.max_classes_per_batch:
                        continue
                    for day, slot in coordinates:
                        if batch.schedule[day][slot] is None:
                            batch.schedule[day][slot] = context.make_assignment(subject, faculty, room)
                            break
        return timetable

    def evolve(self, population: list[Timetable], context: SchedulingContext) -> list[Timetable]:
        tuning = self.tuning
        elite_size = math.floor(len(population) * tuning.elite_fraction)

        for generation in range(tuning.generations):
            scores = [calculate_fitness(individual) for individual in population]
            order = ranked_indices(scores)
            if generation % 25 == 0:
                logger.debug("Generation %s best_fitness=%.2f", generation, scores[order[0]])

            next_population = [population[idx].clone() for idx in order[:elite_size]]
            while len(next_population) < len(population):
                parent_a = tournament_selection(population, scores, self.random, tuning.tournament_size)
                parent_b = tournament_selection(population, scores, self.random, tuning.tournament_size)
                offspring = crossover(parent_a, parent_b)
                if self.random.random() < tuning.mutation_rate:
                    offspring = mutate(offspring, self.random)
                next_population.append(fill_gaps(offspring, context))
            population = next_population

        return population

    def search(self, context: SchedulingContext) -> Timetable:
        population = [self.create_random_timetable(context) for _ in range(self.tuning.population_size)]
        population = self.evolve(population, context)
        scores = [calculate_fitness(individual) for individual in population]
        best = population[best_index(scores)]
        return intensive_gap_filling(best, context, passes=self.tuning.intensive_passes)


class HybridStrategy(GenerationStrategy):
    name = "hybrid"

    def search(self, context: SchedulingContext) -> Timetable:
        tuning = self.tuning
        seed = ConstraintFirstStrategy(rng=self.random, tuning=tuning, room_catalog=self.room_catalog).search(context)

        population = [seed]
        while len(population) < tuning.hybrid_population_size:
            population.append(fill_gaps(mutate(seed, self.random), context))
        population = self.evolve(population, context)

        scores = [calculate_fitness(individual) for individual in population]
        best = population[best_index(scores)]
        return intensive_gap_filling(best, context, passes=tuning.intensive_passes)

    def evolve(self, population: list[Timetable], context: SchedulingContext) -> list[Timetable]:
        """Replace the worst individuals with mutated copies of the best, keeping the rest in place."""
        tuning = self.tuning
        population = list(population)
        for generation in range(tuning.hybrid_generations):
            scores = [calculate_fitness(individual) for individual in population]
            best = population[best_index(scores)]
            if generation % 10 == 0:
                logger.debug("Hybrid generation %s best_fitness=%.2f", generation, max(scores))
            for idx in worst_indices(scores, tuning.hybrid_replace_count):
                population[idx] = fill_gaps(mutate(best, self.random), context)
        return population


STRATEGIES: dict[str, type[GenerationStrategy]] = {
    ConstraintFirstStrategy.name: ConstraintFirstStrategy,
    GeneticStrategy.name: GeneticStrategy,
    HybridStrategy.name: HybridStrategy,
}


def resolve_strategy(algorithm: str) -> type[GenerationStrategy]:
    strategy = STRATEGIES.get(algorithm.strip().lower())
    if strategy is None:
        logger.warning("Unknown algorithm %r, falling back to %s", algorithm, DEFAULT_ALGORITHM)
        return STRATEGIES[DEFAULT_ALGORITHM]
    return strategy


def generate_timetable(
    subjects: list[str],
    faculty: list[str],
    parameters: GenerationParameters,
    *,
    rng: random.Random | None = None,
    tuning: GenerationTuning | None = None,
    room_catalog: list[str] | None = None,
) -> Timetable:
    """Single blocking entry point: pick the strategy named by ``parameters.algorithm`` and run it."""
    strategy_cls = resolve_strategy(parameters.algorithm)
    strategy = strategy_cls(rng=rng, tuning=tuning, room_catalog=room_catalog)
    return strategy.run(subjects, faculty, parameters)


def load_generation_request(data: dict[str, Any]) -> GenerateTimetableRequest:
    """Validate a raw request, reporting every problem as an InvalidConfigurationError."""
    try:
        return GenerateTimetableRequest.model_validate(data)
    except ValidationError as exc:
        raise InvalidConfigurationError.from_validation_errors(exc.errors()) from exc
