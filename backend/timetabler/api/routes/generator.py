import logging
import random
from time import perf_counter

from fastapi import APIRouter, Depends

from timetabler.api.deps import get_app_settings, get_random_source
from timetabler.core.config import Settings
from timetabler.schemas.generator import (
    EvaluateTimetableRequest,
    EvaluateTimetableResponse,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    GenerationTuning,
)
from timetabler.services.conflict_service import detect_conflicts
from timetabler.services.evolution_scheduler import generate_timetable as run_generation
from timetabler.services.fitness import evaluate_fitness
from timetabler.services.payloads import (
    breakdown_to_payload,
    build_summary,
    conflict_to_payload,
    payload_to_timetable,
    timetable_to_payload,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/timetable/generate", response_model=GenerateTimetableResponse)
def generate_timetable(
    payload: GenerateTimetableRequest,
    settings: Settings = Depends(get_app_settings),
    rng: random.Random = Depends(get_random_source),
) -> GenerateTimetableResponse:
    parameters = payload.parameters
    tuning = payload.tuning if payload.tuning is not None else GenerationTuning()
    if payload.random_seed is not None:
        rng = random.Random(payload.random_seed)

    logger.info(
        "TIMETABLE GENERATION START | institution=%s | course=%s | algorithm=%s | batches=%s | days=%s",
        payload.institution_name,
        payload.course_name,
        parameters.algorithm,
        parameters.batches,
        len(parameters.working_days),
    )
    started = perf_counter()
    try:
        timetable = run_generation(
            payload.course_subjects,
            payload.course_faculty,
            parameters,
            rng=rng,
            tuning=tuning,
            room_catalog=settings.room_catalog,
        )
    except Exception:
        logger.exception(
            "TIMETABLE GENERATION FAILED | algorithm=%s | wall_ms=%s",
            parameters.algorithm,
            int((perf_counter() - started) * 1000),
        )
        raise
    generation_time = perf_counter() - started

    summary = build_summary(timetable)
    logger.info(
        "TIMETABLE GENERATION COMPLETE | algorithm=%s | fitness=%.2f | conflicts=%s | utilization=%.3f | wall_ms=%s",
        timetable.algorithm,
        timetable.fitness,
        len(timetable.conflicts),
        summary.utilization,
        int(generation_time * 1000),
    )
    return GenerateTimetableResponse(
        timetable=timetable_to_payload(timetable),
        summary=summary,
        generation_time=round(generation_time, 3),
        tuning_used=tuning,
        institution_name=payload.institution_name,
        course_name=payload.course_name,
    )


@router.post("/timetable/evaluate", response_model=EvaluateTimetableResponse)
def evaluate_timetable(payload: EvaluateTimetableRequest) -> EvaluateTimetableResponse:
    timetable = payload_to_timetable(payload.timetable)
    conflicts = detect_conflicts(timetable)
    breakdown = evaluate_fitness(timetable)
    return EvaluateTimetableResponse(
        fitness=breakdown_to_payload(breakdown),
        conflicts=[conflict_to_payload(item) for item in conflicts],
        summary=build_summary(timetable, conflicts),
    )
