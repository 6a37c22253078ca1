"""
Workout session service.

Starts and finishes workout sessions, records per-set logs and triggers
automatic Training-Max progression when a session completes.

Routines with an RtF program are date-driven: a session may only start
inside the program window, on a scheduled training weekday, for the
routine day matching today. The started session carries today's RtF
plan (per-set prescription for each PROGRAMMED_RTF exercise).

Progression on completion is fail-open: errors are logged and the
session still finishes.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from starlette.concurrency import run_in_threadpool

from application.exceptions import BadRequestError, NotFoundError
from application.ports import RoutineRepository, WorkoutSessionRepository
from backend.core.program_calendar import local_date, routine_current_week, weekday_index
from backend.core.rtf_schedules import amrap_set_number
from backend.core.tm_adjustment_service import TmAdjustmentService
from backend.core.week_goal_resolver import (
    is_program_deload,
    program_total_weeks,
    resolve_week_goal,
    round_to_increment,
)
from domain.models import (
    PlannedSet,
    ProgramWeekInfo,
    Routine,
    RoutineDay,
    RoutineExercise,
    RtfExercisePlan,
    SessionStatus,
    SetLog,
    StartedSession,
    WorkoutSession,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkoutSessionService:
    """Session lifecycle, set logging and completion-time progression."""

    def __init__(
        self,
        session_repo: WorkoutSessionRepository,
        routine_repo: RoutineRepository,
        tm_service: TmAdjustmentService,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._sessions = session_repo
        self._routines = routine_repo
        self._tm = tm_service
        self._clock = clock

    # ===== Queries =====

    async def get_active_session(self, user_id: str) -> Optional[WorkoutSession]:
        return await run_in_threadpool(self._sessions.get_active, user_id)

    async def get_session(self, user_id: str, session_id: str) -> WorkoutSession:
        session = await run_in_threadpool(self._sessions.get, user_id, session_id)
        if session is None:
            raise NotFoundError("Workout session not found")
        return session

    # ===== Lifecycle =====

    async def start_session(
        self,
        user_id: str,
        routine_id: str,
        routine_day_id: str,
        notes: Optional[str] = None,
    ) -> StartedSession:
        """
        Start a session, or return the user's active one with reused=True.

        Raises:
            NotFoundError: routine day is not part of the user's routine.
            BadRequestError: the program schedule does not allow training today.
        """
        active = await self.get_active_session(user_id)
        if active is not None:
            return StartedSession(**active.model_dump(), reused=True)

        routine = await run_in_threadpool(self._routines.get_routine, routine_id)
        day = routine.find_day(routine_day_id) if routine and routine.user_id == user_id else None
        if day is None:
            raise NotFoundError("Routine day not found for this user/routine")

        now = self._clock()
        scheduled = routine.has_program and bool(routine.program_training_days_of_week)
        if scheduled:
            self._check_schedule(routine, day, now)

        session = await run_in_threadpool(
            lambda: self._sessions.create(
                user_id, routine_id, routine_day_id, started_at=now, notes=notes
            )
        )
        await self._heartbeat(session.id, now)

        if not scheduled:
            return StartedSession(**session.model_dump(), reused=False)

        total = program_total_weeks(routine)
        week = routine_current_week(routine, now, total)
        program = ProgramWeekInfo(
            current_week=week,
            duration_weeks=total,
            with_deloads=routine.program_with_deloads,
            is_deload_week=is_program_deload(routine, week),
            start_date=routine.program_start_date,
            end_date=routine.program_end_date,
            timezone=routine.program_timezone,
        )
        plans = [
            self._plan_exercise(routine, exercise, week)
            for exercise in sorted(day.exercises, key=lambda e: e.order)
            if exercise.is_rtf
        ]
        return StartedSession(**session.model_dump(), reused=False, program=program, rtf_plans=plans)

    async def finish_session(
        self,
        user_id: str,
        session_id: str,
        status: SessionStatus,
        notes: Optional[str] = None,
    ) -> WorkoutSession:
        """
        Finish an in-progress session as COMPLETED or ABORTED.

        Completed sessions run automatic TM progression first; progression
        failures are logged and never block finishing.
        """
        if status == SessionStatus.IN_PROGRESS:
            raise BadRequestError("Finish status must be COMPLETED or ABORTED")

        session = await self.get_session(user_id, session_id)
        if session.status != SessionStatus.IN_PROGRESS:
            raise BadRequestError("Only in-progress sessions can be finished")

        now = self._clock()
        duration_sec = max(0, round((now - session.started_at).total_seconds()))

        if status == SessionStatus.COMPLETED:
            await self._apply_progression(session, now)

        return await run_in_threadpool(
            lambda: self._sessions.finish(
                session.id,
                status=status,
                ended_at=now,
                duration_sec=duration_sec,
                notes=notes if notes is not None else session.notes,
            )
        )

    # ===== Set logs =====

    async def upsert_set_log(
        self,
        user_id: str,
        session_id: str,
        *,
        routine_exercise_id: str,
        exercise_id: str,
        set_number: int,
        reps: Optional[int] = None,
        weight_kg: Optional[float] = None,
        rpe: Optional[float] = None,
        is_completed: Optional[bool] = None,
    ) -> SetLog:
        session = await self._editable_session(user_id, session_id)

        routine = await run_in_threadpool(self._routines.get_routine, session.routine_id)
        day = routine.find_day(session.routine_day_id) if routine else None
        exercise = self._find_exercise(day, routine_exercise_id)
        if exercise is None:
            raise BadRequestError("Routine exercise does not belong to this session")
        if exercise.exercise_id != exercise_id:
            raise BadRequestError("exerciseId does not match routine exercise")

        now = self._clock()
        log = await run_in_threadpool(
            lambda: self._sessions.upsert_set_log(
                session.id,
                routine_exercise_id,
                exercise_id,
                set_number,
                reps=reps,
                weight_kg=weight_kg,
                rpe=rpe,
                is_completed=is_completed,
                completed_at=now if is_completed else None,
            )
        )
        await self._heartbeat(session.id, now)
        return log

    async def delete_set_log(
        self,
        user_id: str,
        session_id: str,
        routine_exercise_id: str,
        set_number: int,
    ) -> None:
        session = await self._editable_session(user_id, session_id)
        deleted = await run_in_threadpool(
            self._sessions.delete_set_log, session.id, routine_exercise_id, set_number
        )
        if not deleted:
            raise NotFoundError("Set log not found")
        await self._heartbeat(session.id, self._clock())

    # ===== Internals =====

    @staticmethod
    def _check_schedule(routine: Routine, day: RoutineDay, now: datetime) -> None:
        today = local_date(now, routine.program_timezone)
        dow = weekday_index(today)
        if today < routine.program_start_date:
            raise BadRequestError("Program has not started yet")
        if routine.program_end_date and today > routine.program_end_date:
            raise BadRequestError("Program has ended")
        if dow not in routine.program_training_days_of_week:
            raise BadRequestError("Today is not a scheduled training day for this routine")
        if day.day_of_week != dow:
            raise BadRequestError("Selected routine day does not match today's weekday")

    @staticmethod
    def _plan_exercise(routine: Routine, exercise: RoutineExercise, week: int) -> RtfExercisePlan:
        goal = resolve_week_goal(routine, exercise, week)
        base = {
            "routine_exercise_id": exercise.id,
            "exercise_id": exercise.exercise_id,
            "exercise_name": exercise.exercise_name,
            "variant": goal.variant,
        }
        if goal.is_deload:
            load = round_to_increment(goal.training_max_kg * goal.deload_intensity, exercise.rounding_kg)
            sets = [
                PlannedSet(set_number=n, reps=goal.deload_reps, weight_kg=load, rpe=goal.deload_rpe)
                for n in range(1, goal.sets_planned + 1)
            ]
            return RtfExercisePlan(**base, is_deload=True, weight_kg=load, sets=sets)

        weight = goal.working_weight_kg
        sets = [
            PlannedSet(set_number=n, reps=goal.fixed_reps, weight_kg=weight)
            for n in range(1, goal.amrap_set_number)
        ]
        sets.append(
            PlannedSet(
                set_number=goal.amrap_set_number,
                reps=None,
                amrap_target=goal.amrap_target,
                weight_kg=weight,
            )
        )
        return RtfExercisePlan(
            **base,
            is_deload=False,
            weight_kg=weight,
            fixed_reps=goal.fixed_reps,
            amrap_target=goal.amrap_target,
            sets=sets,
        )

    async def _apply_progression(self, session: WorkoutSession, now: datetime) -> None:
        try:
            routine = await run_in_threadpool(self._routines.get_routine, session.routine_id)
            if routine is None or not routine.has_program:
                return
            day = routine.find_day(session.routine_day_id)
            if day is None:
                return

            week = routine_current_week(routine, now, program_total_weeks(routine))
            if is_program_deload(routine, week):
                logger.info("Session %s finished in deload week %d, TM unchanged", session.id, week)
                return

            logs = await run_in_threadpool(self._sessions.list_set_logs, session.id)
            by_set: Dict[Tuple[str, int], SetLog] = {
                (log.routine_exercise_id, log.set_number): log for log in logs
            }
            for exercise in day.exercises:
                if not exercise.is_rtf:
                    continue
                amrap = by_set.get((exercise.id, amrap_set_number(exercise.style)))
                if amrap is None or amrap.reps is None:
                    continue
                await self._tm.auto_adjust(routine, exercise, week, amrap.reps)
        except Exception:
            logger.exception("TM progression failed for session %s; finishing anyway", session.id)

    async def _editable_session(self, user_id: str, session_id: str) -> WorkoutSession:
        session = await self.get_session(user_id, session_id)
        if session.status != SessionStatus.IN_PROGRESS:
            raise BadRequestError("Cannot modify set logs for a finished session")
        return session

    @staticmethod
    def _find_exercise(day: Optional[RoutineDay], routine_exercise_id: str) -> Optional[RoutineExercise]:
        if day is None:
            return None
        for exercise in day.exercises:
            if exercise.id == routine_exercise_id:
                return exercise
        return None

    async def _heartbeat(self, session_id: str, at: datetime) -> None:
        """Bump last activity; never blocks the mutation that triggered it."""
        try:
            await run_in_threadpool(self._sessions.touch, session_id, at)
        except Exception as e:
            logger.warning("Heartbeat failed for session %s: %s", session_id, e)
