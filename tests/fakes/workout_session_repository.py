"""
Fake Workout Session Repository for Testing.

In-memory implementation of WorkoutSessionRepository for fast, isolated testing.
"""
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from domain.models import SessionStatus, SetLog, WorkoutSession


class FakeWorkoutSessionRepository:
    """In-memory fake implementation of WorkoutSessionRepository."""

    def __init__(self):
        self._sessions: Dict[str, WorkoutSession] = {}
        self._set_logs: Dict[Tuple[str, str, int], SetLog] = {}
        self.fail_touch = False

    def reset(self) -> None:
        self._sessions.clear()
        self._set_logs.clear()
        self.fail_touch = False

    def seed(self, sessions: Iterable[WorkoutSession]) -> None:
        for session in sessions:
            self._sessions[session.id] = session.model_copy()

    # ===== Sessions =====

    def get_active(self, user_id: str) -> Optional[WorkoutSession]:
        for session in self._sessions.values():
            if session.user_id == user_id and session.status == SessionStatus.IN_PROGRESS:
                return session.model_copy()
        return None

    def get(self, user_id: str, session_id: str) -> Optional[WorkoutSession]:
        session = self._sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session.model_copy()

    def create(
        self,
        user_id: str,
        routine_id: str,
        routine_day_id: str,
        *,
        started_at: datetime,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        session = WorkoutSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            routine_id=routine_id,
            routine_day_id=routine_day_id,
            started_at=started_at,
            notes=notes,
        )
        self._sessions[session.id] = session
        return session.model_copy()

    def finish(
        self,
        session_id: str,
        *,
        status: SessionStatus,
        ended_at: datetime,
        duration_sec: int,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        session = self._sessions[session_id].model_copy(
            update={
                "status": status,
                "ended_at": ended_at,
                "duration_sec": duration_sec,
                "notes": notes,
            }
        )
        self._sessions[session_id] = session
        return session.model_copy()

    def touch(self, session_id: str, at: datetime) -> None:
        if self.fail_touch:
            raise RuntimeError("touch failed")
        session = self._sessions[session_id]
        self._sessions[session_id] = session.model_copy(update={"last_activity_at": at})

    def abort_stale(self, cutoff: datetime, now: datetime) -> int:
        aborted = 0
        for session_id, session in list(self._sessions.items()):
            if session.status != SessionStatus.IN_PROGRESS:
                continue
            last_seen = session.last_activity_at or session.started_at
            if last_seen < cutoff:
                self._sessions[session_id] = session.model_copy(
                    update={"status": SessionStatus.ABORTED, "ended_at": now}
                )
                aborted += 1
        return aborted

    # ===== Set logs =====

    def list_set_logs(self, session_id: str) -> List[SetLog]:
        logs = [log for key, log in self._set_logs.items() if key[0] == session_id]
        return sorted(logs, key=lambda log: (log.routine_exercise_id, log.set_number))

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
        key = (session_id, routine_exercise_id, set_number)
        existing = self._set_logs.get(key)
        log = existing or SetLog(
            id=str(uuid.uuid4()),
            session_id=session_id,
            routine_exercise_id=routine_exercise_id,
            exercise_id=exercise_id,
            set_number=set_number,
        )
        update = {"reps": reps, "weight_kg": weight_kg, "rpe": rpe, "is_completed": is_completed}
        changes = {k: v for k, v in update.items() if v is not None}
        if is_completed is not None:
            changes["completed_at"] = completed_at
        log = log.model_copy(update=changes)
        self._set_logs[key] = log
        return log

    def delete_set_log(self, session_id: str, routine_exercise_id: str, set_number: int) -> bool:
        return self._set_logs.pop((session_id, routine_exercise_id, set_number), None) is not None

    def stored(self, session_id: str) -> Optional[WorkoutSession]:
        """Stored session regardless of owner (test inspection helper)."""
        return self._sessions.get(session_id)
