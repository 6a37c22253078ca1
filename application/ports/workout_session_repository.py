"""
Workout Session Repository Interface (Port).

Workout sessions and their per-set logs. A user has at most one
IN_PROGRESS session at a time.
"""
from datetime import datetime
from typing import List, Optional, Protocol

from domain.models import SessionStatus, SetLog, WorkoutSession


class WorkoutSessionRepository(Protocol):
    """Interface for workout session persistence."""

    # ===== Sessions =====

    def get_active(self, user_id: str) -> Optional[WorkoutSession]:
        """Most recently started IN_PROGRESS session of a user."""
        ...

    def get(self, user_id: str, session_id: str) -> Optional[WorkoutSession]:
        """Session owned by user_id, or None."""
        ...

    def create(
        self,
        user_id: str,
        routine_id: str,
        routine_day_id: str,
        *,
        started_at: datetime,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        ...

    def finish(
        self,
        session_id: str,
        *,
        status: SessionStatus,
        ended_at: datetime,
        duration_sec: int,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        ...

    def touch(self, session_id: str, at: datetime) -> None:
        """Bump last_activity_at."""
        ...

    def abort_stale(self, cutoff: datetime, now: datetime) -> int:
        """
        Abort IN_PROGRESS sessions idle since before cutoff.

        Idle time is measured from last_activity_at, or started_at when no
        activity was recorded. Only rows still IN_PROGRESS are updated.

        Returns:
            Number of sessions aborted
        """
        ...

    # ===== Set logs =====

    def list_set_logs(self, session_id: str) -> List[SetLog]:
        ...

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
        """Insert or update the log keyed by (session, routine exercise, set number)."""
        ...

    def delete_set_log(self, session_id: str, routine_exercise_id: str, set_number: int) -> bool:
        """Returns False when no such log exists."""
        ...
