"""
Week-goal resolver for PROGRAMMED_RTF exercises.

Given a routine's program configuration, one of its RtF exercises and a
logical week, compute the goal for that week:

- Deload weeks return the deload prescription with no working weight.
- Training weeks return intensity, fixed reps, AMRAP target and the
  working weight round(TM * intensity / rounding) * rounding.

The routine's pinned snapshot is used when its deload variant matches
the routine's; otherwise the live tables are used.
"""

import math
from typing import List, Tuple

from application.exceptions import BadRequestError, WeekOutOfRangeError
from backend.core.rtf_schedules import (
    DELOAD_PRESCRIPTION,
    FIXED_SET_COUNT,
    amrap_set_number,
    get_schedule,
    total_weeks,
)
from domain.models import ProgramStyle, Routine, RoutineExercise, ScheduleWeek, WeekGoal


def round_to_increment(value: float, increment: float) -> float:
    """Round half-up to the nearest increment. Non-positive increments leave value as-is."""
    if not increment or increment <= 0:
        return value
    return round(math.floor(value / increment + 0.5) * increment, 4)


def program_table(routine: Routine, style: ProgramStyle) -> Tuple[ScheduleWeek, ...]:
    snapshot = routine.program_snapshot
    if snapshot is not None and snapshot.applies_to(routine.program_with_deloads):
        return snapshot.table(style)
    return get_schedule(style, routine.program_with_deloads)


def program_total_weeks(routine: Routine) -> int:
    snapshot = routine.program_snapshot
    if snapshot is not None and snapshot.applies_to(routine.program_with_deloads):
        return snapshot.weeks
    return total_weeks(routine.program_with_deloads)


def schedule_week(routine: Routine, style: ProgramStyle, week: int) -> ScheduleWeek:
    """
    Look up the schedule entry for a style and logical week.

    Raises:
        WeekOutOfRangeError: week is outside [1, total weeks].
    """
    table = program_table(routine, style)
    if week < 1 or week > len(table):
        raise WeekOutOfRangeError(week, len(table))
    return table[week - 1]


def is_program_deload(routine: Routine, week: int) -> bool:
    return schedule_week(routine, ProgramStyle.STANDARD, week).is_deload


def resolve_week_goal(routine: Routine, exercise: RoutineExercise, week: int) -> WeekGoal:
    """
    Resolve one exercise's goal for a week.

    Args:
        routine: Routine carrying the program configuration.
        exercise: A PROGRAMMED_RTF routine exercise.
        week: Logical program week.

    Returns:
        WeekGoal for the exercise.

    Raises:
        BadRequestError: exercise is not enrolled in PROGRAMMED_RTF.
        WeekOutOfRangeError: week is outside the program.
    """
    if not exercise.is_rtf:
        raise BadRequestError(f"Routine exercise {exercise.id} is not PROGRAMMED_RTF")

    style = exercise.style
    entry = schedule_week(routine, style, week)
    tm_kg = exercise.program_tm_kg or 0.0

    base = {
        "routine_exercise_id": exercise.id,
        "exercise_id": exercise.exercise_id,
        "exercise_name": exercise.exercise_name,
        "variant": style,
        "week": week,
        "training_max_kg": tm_kg,
    }

    if entry.is_deload:
        deload = DELOAD_PRESCRIPTION[style]
        return WeekGoal(
            **base,
            is_deload=True,
            sets_planned=deload.sets,
            deload_reps=deload.reps,
            deload_intensity=deload.intensity,
            deload_rpe=deload.rpe,
        )

    return WeekGoal(
        **base,
        is_deload=False,
        intensity=entry.intensity,
        fixed_reps=entry.fixed_reps,
        sets_planned=FIXED_SET_COUNT[style] + 1,
        amrap_target=entry.amrap_target,
        amrap_set_number=amrap_set_number(style),
        working_weight_kg=round_to_increment(tm_kg * entry.intensity, exercise.rounding_kg),
    )


def resolve_routine_week(routine: Routine, week: int) -> List[WeekGoal]:
    """Resolve goals for every PROGRAMMED_RTF exercise of a routine, in day/exercise order."""
    return [resolve_week_goal(routine, exercise, week) for exercise in routine.rtf_exercises()]
