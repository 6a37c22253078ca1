"""
Supabase Routine Repository Implementation.

Implements the RoutineRepository protocol using Supabase.

Tables:
- routines: program_* columns; program_snapshot is JSONB
- routine_days: day_of_week (0=Sunday), position
- routine_exercises: progression and program_* columns, joined to exercises(name)
"""
import logging
from typing import Any, Dict, Optional

from supabase import Client

from domain.models import ProgramConfig, Routine, RoutineDay, RoutineExercise

logger = logging.getLogger(__name__)

ROUTINE_SELECT = (
    "*, routine_days(id, routine_id, day_of_week, position, "
    "routine_exercises(*, exercises(id, name)))"
)


def _exercise_from_row(row: Dict[str, Any]) -> RoutineExercise:
    catalog = row.get("exercises") or {}
    return RoutineExercise(
        id=row["id"],
        routine_day_id=row["routine_day_id"],
        exercise_id=row["exercise_id"],
        exercise_name=catalog.get("name") or "",
        order=row.get("position") or 0,
        progression_scheme=row.get("progression_scheme") or "NONE",
        program_style=row.get("program_style"),
        program_tm_kg=row.get("program_tm_kg"),
        program_rounding_kg=row.get("program_rounding_kg"),
        program_last_adjusted_week=row.get("program_last_adjusted_week"),
    )


def _routine_from_row(row: Dict[str, Any]) -> Routine:
    days = [
        RoutineDay(
            id=d["id"],
            routine_id=d.get("routine_id") or row["id"],
            day_of_week=d["day_of_week"],
            order=d.get("position") or 0,
            exercises=[_exercise_from_row(e) for e in d.get("routine_exercises") or []],
        )
        for d in row.get("routine_days") or []
    ]
    return Routine(
        id=row["id"],
        user_id=row["user_id"],
        name=row.get("name") or "",
        days=days,
        program_with_deloads=bool(row.get("program_with_deloads", True)),
        program_duration_weeks=row.get("program_duration_weeks"),
        program_start_week=row.get("program_start_week"),
        program_start_date=row.get("program_start_date"),
        program_end_date=row.get("program_end_date"),
        program_timezone=row.get("program_timezone"),
        program_training_days_of_week=row.get("program_training_days_of_week") or [],
        program_snapshot=row.get("program_snapshot"),
    )


class SupabaseRoutineRepository:
    """
    Supabase implementation of RoutineRepository.

    Loads a routine with its days and exercises in one nested select.
    """

    def __init__(self, client: Client):
        """
        Initialize with Supabase client.

        Args:
            client: Supabase client instance (injected)
        """
        self._client = client

    def get_routine(self, routine_id: str) -> Optional[Routine]:
        try:
            result = self._client.table("routines") \
                .select(ROUTINE_SELECT) \
                .eq("id", routine_id) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to get routine {routine_id}: {e}")
            raise
        if not result.data:
            return None
        return _routine_from_row(result.data[0])

    def update_exercise_tm(
        self,
        routine_exercise_id: str,
        tm_kg: float,
        last_adjusted_week: Optional[int],
    ) -> None:
        try:
            self._client.table("routine_exercises") \
                .update({
                    "program_tm_kg": tm_kg,
                    "program_last_adjusted_week": last_adjusted_week,
                }) \
                .eq("id", routine_exercise_id) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to update TM for routine exercise {routine_exercise_id}: {e}")
            raise

    def save_program(self, routine_id: str, config: ProgramConfig) -> Routine:
        payload = {
            "program_with_deloads": config.with_deloads,
            "program_duration_weeks": config.duration_weeks,
            "program_start_week": config.start_week,
            "program_start_date": config.start_date.isoformat(),
            "program_end_date": config.end_date.isoformat(),
            "program_timezone": config.timezone,
            "program_training_days_of_week": config.training_days_of_week,
            "program_snapshot": config.snapshot.to_wire(),
        }
        try:
            self._client.table("routines") \
                .update(payload) \
                .eq("id", routine_id) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to save program for routine {routine_id}: {e}")
            raise
        logger.info(f"Program saved for routine {routine_id}")
        routine = self.get_routine(routine_id)
        if routine is None:
            raise LookupError(f"Routine {routine_id} disappeared while saving its program")
        return routine
