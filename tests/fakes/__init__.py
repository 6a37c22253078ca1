"""
Fake Repository Implementations for Testing.

This package provides in-memory fake implementations of repository interfaces
for fast, isolated testing. No database or external dependencies required.

Features:
- All fakes implement the same Protocol interfaces as real implementations
- Supports seeding with test data
- Supports reset() for test isolation
- Factory functions for common test scenarios

Usage:
    from tests.fakes import FakeRoutineRepository, make_rtf_routine

    repo = FakeRoutineRepository()
    repo.seed([make_rtf_routine(start_week=8)])
"""
from datetime import date, datetime, timezone
from typing import Optional

from backend.core.program_calendar import clamp_start_week, program_end_date
from backend.core.rtf_schedules import build_program_snapshot, total_weeks
from domain.models import (
    ProgramStyle,
    ProgressionScheme,
    Routine,
    RoutineDay,
    RoutineExercise,
)

from tests.fakes.routine_repository import FakeRoutineRepository
from tests.fakes.tm_adjustment_repository import FakeTmAdjustmentRepository
from tests.fakes.workout_session_repository import FakeWorkoutSessionRepository


# =============================================================================
# Factory Functions
# =============================================================================

# Monday
DEFAULT_START_DATE = date(2026, 1, 5)
SNAPSHOT_CREATED_AT = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_rtf_routine(
    *,
    routine_id: str = "routine-1",
    user_id: str = "user-1",
    style: ProgramStyle = ProgramStyle.STANDARD,
    tm_kg: Optional[float] = 100.0,
    rounding_kg: Optional[float] = 2.5,
    with_deloads: bool = True,
    start_date: date = DEFAULT_START_DATE,
    start_week: int = 1,
    timezone_name: str = "UTC",
    with_program: bool = True,
    last_adjusted_week: Optional[int] = None,
) -> Routine:
    """
    Create a routine with one Monday day holding an RtF squat and a plain curl.

    Ids: day "day-mon", RtF routine exercise "re-squat" (exercise "ex-squat"),
    non-RtF routine exercise "re-curl" (exercise "ex-curl").
    """
    squat = RoutineExercise(
        id="re-squat",
        routine_day_id="day-mon",
        exercise_id="ex-squat",
        exercise_name="Back Squat",
        order=0,
        progression_scheme=ProgressionScheme.PROGRAMMED_RTF,
        program_style=style,
        program_tm_kg=tm_kg,
        program_rounding_kg=rounding_kg,
        program_last_adjusted_week=last_adjusted_week,
    )
    curl = RoutineExercise(
        id="re-curl",
        routine_day_id="day-mon",
        exercise_id="ex-curl",
        exercise_name="Curl",
        order=1,
        progression_scheme=ProgressionScheme.DOUBLE_PROGRESSION,
    )
    day = RoutineDay(id="day-mon", routine_id=routine_id, day_of_week=1, order=0, exercises=[squat, curl])
    routine = Routine(id=routine_id, user_id=user_id, name="RtF Lower", days=[day])
    if not with_program:
        return routine

    duration = total_weeks(with_deloads)
    first = clamp_start_week(start_week, duration)
    return routine.model_copy(
        update={
            "program_with_deloads": with_deloads,
            "program_duration_weeks": duration,
            "program_start_week": first,
            "program_start_date": start_date,
            "program_end_date": program_end_date(start_date, duration, first),
            "program_timezone": timezone_name,
            "program_training_days_of_week": [1],
            "program_snapshot": build_program_snapshot(with_deloads, created_at=SNAPSHOT_CREATED_AT),
        }
    )


class FixedClock:
    """Settable clock for services that take a `clock` callable."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def create_routine_repo(*routines: Routine) -> FakeRoutineRepository:
    repo = FakeRoutineRepository()
    repo.seed(routines or [make_rtf_routine()])
    return repo


__all__ = [
    "FakeRoutineRepository",
    "FakeTmAdjustmentRepository",
    "FakeWorkoutSessionRepository",
    "make_rtf_routine",
    "create_routine_repo",
    "FixedClock",
    "DEFAULT_START_DATE",
]
