"""
Supabase Workout Session Repository Implementation.

Tables:
- workout_sessions: one IN_PROGRESS row per user (partial unique index)
- set_logs: unique on (session_id, routine_exercise_id, set_number)
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase import Client

from domain.models import SessionStatus, SetLog, WorkoutSession

logger = logging.getLogger(__name__)

SET_LOG_CONFLICT = "session_id,routine_exercise_id,set_number"


class SupabaseWorkoutSessionRepository:
    """Supabase implementation of WorkoutSessionRepository."""

    def __init__(self, client: Client):
        self._client = client

    # ===== Sessions =====

    def get_active(self, user_id: str) -> Optional[WorkoutSession]:
        try:
            result = self._client.table("workout_sessions") \
                .select("*") \
                .eq("user_id", user_id) \
                .eq("status", SessionStatus.IN_PROGRESS.value) \
                .order("started_at", desc=True) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to get active session for {user_id}: {e}")
            raise
        return WorkoutSession.model_validate(result.data[0]) if result.data else None

    def get(self, user_id: str, session_id: str) -> Optional[WorkoutSession]:
        try:
            result = self._client.table("workout_sessions") \
                .select("*") \
                .eq("id", session_id) \
                .eq("user_id", user_id) \
                .limit(1) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to get session {session_id}: {e}")
            raise
        return WorkoutSession.model_validate(result.data[0]) if result.data else None

    def create(
        self,
        user_id: str,
        routine_id: str,
        routine_day_id: str,
        *,
        started_at: datetime,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        row = {
            "user_id": user_id,
            "routine_id": routine_id,
            "routine_day_id": routine_day_id,
            "status": SessionStatus.IN_PROGRESS.value,
            "started_at": started_at.isoformat(),
            "notes": notes,
        }
        try:
            result = self._client.table("workout_sessions").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to create session for {user_id}: {e}")
            raise
        return WorkoutSession.model_validate(result.data[0])

    def finish(
        self,
        session_id: str,
        *,
        status: SessionStatus,
        ended_at: datetime,
        duration_sec: int,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        try:
            result = self._client.table("workout_sessions") \
                .update({
                    "status": status.value,
                    "ended_at": ended_at.isoformat(),
                    "duration_sec": duration_sec,
                    "notes": notes,
                }) \
                .eq("id", session_id) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to finish session {session_id}: {e}")
            raise
        return WorkoutSession.model_validate(result.data[0])

    def touch(self, session_id: str, at: datetime) -> None:
        self._client.table("workout_sessions") \
            .update({"last_activity_at": at.isoformat()}) \
            .eq("id", session_id) \
            .execute()

    def abort_stale(self, cutoff: datetime, now: datetime) -> int:
        update = {
            "status": SessionStatus.ABORTED.value,
            "ended_at": now.isoformat(),
            "notes": "Auto-aborted after inactivity",
        }
        in_progress = SessionStatus.IN_PROGRESS.value
        try:
            idle = self._client.table("workout_sessions") \
                .update(update) \
                .eq("status", in_progress) \
                .lt("last_activity_at", cutoff.isoformat()) \
                .execute()
            never_active = self._client.table("workout_sessions") \
                .update(update) \
                .eq("status", in_progress) \
                .is_("last_activity_at", "null") \
                .lt("started_at", cutoff.isoformat()) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to abort stale sessions: {e}")
            raise
        return len(idle.data or []) + len(never_active.data or [])

    # ===== Set logs =====

    def list_set_logs(self, session_id: str) -> List[SetLog]:
        try:
            result = self._client.table("set_logs") \
                .select("*") \
                .eq("session_id", session_id) \
                .order("set_number") \
                .execute()
        except Exception as e:
            logger.error(f"Failed to list set logs for session {session_id}: {e}")
            raise
        return [SetLog.model_validate(r) for r in result.data or []]

    def upsert_set_log(
        self,
        session_id: str,
        routine_exercise_id: str,
        exercise_id: str,
        set_number: int,
        *,
        reps: Optional[int] = None,
        weight_kg: Optional[float] = None,
        rpe: Optional[float] = None,
        is_completed: Optional[bool] = None,
        completed_at: Optional[datetime] = None,
    ) -> SetLog:
        row: Dict[str, Any] = {
            "session_id": session_id,
            "routine_exercise_id": routine_exercise_id,
            "exercise_id": exercise_id,
            "set_number": set_number,
        }
        # Omitted fields keep their stored values
        optional = {"reps": reps, "weight_kg": weight_kg, "rpe": rpe, "is_completed": is_completed}
        row.update({k: v for k, v in optional.items() if v is not None})
        if is_completed is not None:
            row["completed_at"] = completed_at.isoformat() if completed_at else None
        try:
            result = self._client.table("set_logs") \
                .upsert(row, on_conflict=SET_LOG_CONFLICT) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to upsert set log for session {session_id}: {e}")
            raise
        return SetLog.model_validate(result.data[0])

    def delete_set_log(self, session_id: str, routine_exercise_id: str, set_number: int) -> bool:
        try:
            result = self._client.table("set_logs") \
                .delete() \
                .eq("session_id", session_id) \
                .eq("routine_exercise_id", routine_exercise_id) \
                .eq("set_number", set_number) \
                .execute()
        except Exception as e:
            logger.error(f"Failed to delete set log for session {session_id}: {e}")
            raise
        return bool(result.data)
