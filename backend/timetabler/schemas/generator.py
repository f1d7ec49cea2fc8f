from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from timetabler.schemas.settings import DAY_VALUES, TIME_PATTERN, parse_time_to_minutes

ConflictType = Literal["faculty_conflict", "room_conflict"]
ConflictSeverity = Literal["high", "medium"]

DEFAULT_WORKING_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]


class GenerationParameters(BaseModel):
    model_config = {"populate_by_name": True, "frozen": True}

    classrooms: int = Field(default=5, ge=1, le=100)
    batches: int = Field(default=3, ge=1, le=50)
    subjects: int = Field(default=6, ge=1, le=50)
    max_classes: int = Field(default=6, alias="maxClasses", ge=1, le=12)
    frequency: int = Field(default=3, ge=1, le=20)
    faculty: int = Field(default=6, ge=1, le=200)
    # Free-form: unrecognized names dispatch to the hybrid strategy.
    algorithm: str = Field(default="hybrid", max_length=50)
    start_time: str = Field(default="09:00", alias="startTime")
    end_time: str = Field(default="17:00", alias="endTime")
    working_days: list[str] = Field(default_factory=lambda: list(DEFAULT_WORKING_DAYS), alias="workingDays")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        value = value.strip()
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: list[str]) -> list[str]:
        days = [day.strip() for day in value if day.strip()]
        if not days:
            raise ValueError("At least one working day is required")
        invalid = [day for day in days if day not in DAY_VALUES]
        if invalid:
            raise ValueError(f"Invalid working day(s): {', '.join(invalid)}")
        duplicates = sorted({day for day in days if days.count(day) > 1})
        if duplicates:
            raise ValueError(f"Duplicate working day(s): {', '.join(duplicates)}")
        return days

    @model_validator(mode="after")
    def validate_time_order(self) -> "GenerationParameters":
        if parse_time_to_minutes(self.start_time) >= parse_time_to_minutes(self.end_time):
            raise ValueError("startTime must be before endTime")
        return self


class GenerationTuning(BaseModel):
    model_config = {"populate_by_name": True}

    population_size: int = Field(default=40, alias="populationSize", ge=2, le=500)
    generations: int = Field(default=150, ge=0, le=2000)
    elite_fraction: float = Field(default=0.25, alias="eliteFraction", ge=0.0, lt=1.0)
    tournament_size: int = Field(default=4, alias="tournamentSize", ge=1, le=50)
    mutation_rate: float = Field(default=0.12, alias="mutationRate", ge=0.0, le=1.0)
    hybrid_population_size: int = Field(default=20, alias="hybridPopulationSize", ge=2, le=500)
    hybrid_generations: int = Field(default=50, alias="hybridGenerations", ge=0, le=2000)
    hybrid_replace_count: int = Field(default=7, alias="hybridReplaceCount", ge=0, le=500)
    intensive_passes: int = Field(default=3, alias="intensivePasses", ge=0, le=20)
    constraint_utilization: float = Field(default=0.82, alias="constraintUtilization", gt=0.0, le=1.0)
    genetic_fill_ratio: float = Field(default=0.8, alias="geneticFillRatio", gt=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_relationships(self) -> "GenerationTuning":
        if self.hybrid_replace_count >= self.hybrid_population_size:
            raise ValueError("hybridReplaceCount must be less than hybridPopulationSize")
        return self


class GenerateTimetableRequest(BaseModel):
    model_config = {"populate_by_name": True}

    course_subjects: list[str] = Field(alias="courseSubjects", min_length=1, max_length=100)
    course_faculty: list[str] = Field(alias="courseFaculty", min_length=1, max_length=200)
    parameters: GenerationParameters = Field(default_factory=GenerationParameters)
    institution_name: str | None = Field(default=None, alias="institutionName", max_length=200)
    course_name: str | None = Field(default=None, alias="courseName", max_length=200)
    tuning: GenerationTuning | None = None
    random_seed: int | None = Field(default=None, alias="randomSeed", ge=0, le=2_000_000_000)

    @field_validator("course_subjects", "course_faculty")
    @classmethod
    def normalize_names(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item.strip()]
        if not cleaned:
            raise ValueError("At least one non-blank name is required")
        return cleaned


class ClassAssignmentPayload(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    faculty: str = Field(min_length=1, max_length=200)
    room: str = Field(min_length=1, max_length=100)
    color: str | None = None


class BatchPayload(BaseModel):
    id: int = Field(ge=0)
    name: str
    schedule: dict[str, dict[str, ClassAssignmentPayload | None]]


class ConflictPayload(BaseModel):
    type: ConflictType
    description: str
    details: str
    day: str
    slot: str
    batches: list[int] = Field(min_length=2, max_length=2)
    severity: ConflictSeverity
    faculty: str | None = None
    room: str | None = None


class TimetablePayload(BaseModel):
    batches: list[BatchPayload] = Field(min_length=1)
    fitness: float | None = None
    conflicts: list[ConflictPayload] = Field(default_factory=list)
    algorithm: str | None = None


class TimetableSummary(BaseModel):
    model_config = {"populate_by_name": True}

    filled_slots: int = Field(alias="filledSlots")
    total_slots: int = Field(alias="totalSlots")
    utilization: float
    faculty_conflicts: int = Field(alias="facultyConflicts")
    room_conflicts: int = Field(alias="roomConflicts")
    subject_counts: dict[str, int] = Field(default_factory=dict, alias="subjectCounts")


class FitnessBreakdownPayload(BaseModel):
    model_config = {"populate_by_name": True}

    fitness: float
    conflict_count: int = Field(alias="conflictCount")
    fill_ratio: float = Field(alias="fillRatio")
    utilization_score: float = Field(alias="utilizationScore")
    gap_penalty: int = Field(alias="gapPenalty")
    distribution_score: float = Field(alias="distributionScore")
    bonus: float


class GenerateTimetableResponse(BaseModel):
    model_config = {"populate_by_name": True}

    timetable: TimetablePayload
    summary: TimetableSummary
    generation_time: float = Field(alias="generationTime")
    tuning_used: GenerationTuning = Field(alias="tuningUsed")
    institution_name: str | None = Field(default=None, alias="institutionName")
    course_name: str | None = Field(default=None, alias="courseName")


class EvaluateTimetableRequest(BaseModel):
    timetable: TimetablePayload


class EvaluateTimetableResponse(BaseModel):
    fitness: FitnessBreakdownPayload
    conflicts: list[ConflictPayload]
    summary: TimetableSummary
