"""
Training-Max adjustment ledger service.

Records TM changes for PROGRAMMED_RTF exercises and applies them:
- Manual events: validated for ownership, enrollment, delta math and the
  max-delta guardrail.
- Automatic events: written on session completion when the AMRAP set meets
  the week's target on a non-deload week, at most once per week.

Every applied change rewrites the exercise's TM and last-adjusted week and
invalidates all cached week goals and forecasts of the routine, since a TM
change shifts every future working weight.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from application.exceptions import (
    TmEventNotAllowedError,
    TmGuardrailError,
    TmMathMismatchError,
    WeekOutOfRangeError,
)
from application.ports import RoutineRepository, TmAdjustmentRepository, WeekGoalsCache
from backend.core.routine_access import load_owned_routine
from backend.core.rtf_stats import RtfStats
from backend.core.tm_step_strategies import TmStepStrategy, get_step_strategy
from backend.core.week_goal_resolver import program_total_weeks, resolve_week_goal
from domain.models import (
    AUTO_ADJUST_REASON,
    NewTmAdjustment,
    Routine,
    RoutineExercise,
    TmAdjustment,
    TmAdjustmentSummary,
)

logger = logging.getLogger(__name__)

TM_MATH_TOLERANCE_KG = 1e-3
DEFAULT_MAX_DELTA_KG = 15.0


class TmAdjustmentService:
    """Validates, records and applies Training-Max adjustments."""

    def __init__(
        self,
        routine_repo: RoutineRepository,
        tm_repo: TmAdjustmentRepository,
        cache: WeekGoalsCache,
        stats: RtfStats,
        max_delta_kg: float = DEFAULT_MAX_DELTA_KG,
        step_strategy: str = "rounding_increment",
    ):
        self._routines = routine_repo
        self._ledger = tm_repo
        self._cache = cache
        self._stats = stats
        self._max_delta_kg = max_delta_kg
        self._step: TmStepStrategy = get_step_strategy(step_strategy)

    # ===== Manual adjustments =====

    async def create_adjustment(
        self,
        user_id: str,
        routine_id: str,
        *,
        exercise_id: str,
        week_number: int,
        delta_kg: float,
        pre_tm_kg: float,
        post_tm_kg: float,
        reason: Optional[str] = None,
    ) -> TmAdjustment:
        """
        Record a user-requested TM change.

        Raises:
            RoutineNotFoundError: routine does not exist.
            RoutineOwnershipError: routine belongs to another user.
            TmEventNotAllowedError: exercise is not PROGRAMMED_RTF in this routine.
            WeekOutOfRangeError: week_number is outside the program.
            TmMathMismatchError: pre + delta != post.
            TmGuardrailError: |delta| exceeds the configured maximum.
        """
        routine = await load_owned_routine(self._routines, user_id, routine_id, self._stats)

        targets = self._rtf_exercises_for(routine, exercise_id)
        if not targets:
            self._stats.tm_unknown_exercise_rejections += 1
            raise TmEventNotAllowedError(
                f"Exercise {exercise_id} is not a PROGRAMMED_RTF exercise of routine {routine_id}"
            )

        total = program_total_weeks(routine)
        if week_number < 1 or week_number > total:
            raise WeekOutOfRangeError(week_number, total)

        if abs(pre_tm_kg + delta_kg - post_tm_kg) > TM_MATH_TOLERANCE_KG:
            raise TmMathMismatchError(pre_tm_kg, delta_kg, post_tm_kg)

        if abs(delta_kg) > self._max_delta_kg:
            self._stats.tm_guardrail_rejections += 1
            raise TmGuardrailError(delta_kg, self._max_delta_kg)

        return await self._apply(
            routine,
            targets,
            NewTmAdjustment(
                routine_id=routine.id,
                exercise_id=exercise_id,
                week_number=week_number,
                delta_kg=delta_kg,
                pre_tm_kg=pre_tm_kg,
                post_tm_kg=post_tm_kg,
                reason=reason,
                style=targets[0].style,
            ),
        )

    # ===== Automatic adjustments =====

    async def auto_adjust(
        self,
        routine: Routine,
        exercise: RoutineExercise,
        week: int,
        amrap_reps: int,
    ) -> Optional[TmAdjustment]:
        """
        Apply the automatic TM step for one exercise after a completed session.

        Returns None without writing when the week is a deload, the exercise
        was already adjusted this week, it has no TM, the AMRAP target was
        missed, or the strategy yields a zero step.
        """
        goal = resolve_week_goal(routine, exercise, week)
        if goal.is_deload:
            return None
        if exercise.program_last_adjusted_week == week:
            logger.debug("TM for %s already adjusted in week %d", exercise.id, week)
            return None
        if exercise.program_tm_kg is None:
            return None
        if amrap_reps < goal.amrap_target:
            return None

        pre_tm = exercise.program_tm_kg
        step = self._step(pre_tm, amrap_reps, goal.amrap_target, exercise.rounding_kg)
        delta = round(max(-self._max_delta_kg, min(self._max_delta_kg, step)), 3)
        if delta == 0:
            return None

        adjustment = await self._apply(
            routine,
            [exercise],
            NewTmAdjustment(
                routine_id=routine.id,
                exercise_id=exercise.exercise_id,
                week_number=week,
                delta_kg=delta,
                pre_tm_kg=pre_tm,
                post_tm_kg=round(pre_tm + delta, 3),
                reason=AUTO_ADJUST_REASON,
                style=exercise.style,
            ),
        )
        self._stats.tm_auto_adjustments += 1
        logger.info(
            "Auto TM adjustment for %s week %d: %.2f -> %.2f (reps %d, target %d)",
            exercise.id,
            week,
            adjustment.pre_tm_kg,
            adjustment.post_tm_kg,
            amrap_reps,
            goal.amrap_target,
        )
        return adjustment

    # ===== Queries =====

    async def list_adjustments(
        self,
        user_id: str,
        routine_id: str,
        *,
        exercise_id: Optional[str] = None,
        min_week: Optional[int] = None,
        max_week: Optional[int] = None,
    ) -> List[TmAdjustment]:
        """Ledger rows of an owned routine, newest first."""
        await load_owned_routine(self._routines, user_id, routine_id, self._stats)
        rows = await run_in_threadpool(
            lambda: self._ledger.list_for_routine(
                routine_id,
                exercise_id=exercise_id,
                min_week=min_week,
                max_week=max_week,
            )
        )
        return sorted(rows, key=lambda r: r.created_at, reverse=True)

    async def get_summary(self, user_id: str, routine_id: str) -> List[TmAdjustmentSummary]:
        """Per-exercise count, net delta, average delta and latest adjustment time."""
        routine = await load_owned_routine(self._routines, user_id, routine_id, self._stats)
        rows = await run_in_threadpool(lambda: self._ledger.list_for_routine(routine_id))

        names: Dict[str, str] = {e.exercise_id: e.exercise_name for e in routine.iter_exercises()}
        grouped: Dict[str, List[TmAdjustment]] = defaultdict(list)
        for row in rows:
            grouped[row.exercise_id].append(row)

        summary = []
        for exercise_id, items in grouped.items():
            total_delta = sum(r.delta_kg for r in items)
            summary.append(
                TmAdjustmentSummary(
                    exercise_id=exercise_id,
                    exercise_name=names.get(exercise_id) or "Unknown Exercise",
                    total_adjustments=len(items),
                    total_delta_kg=round(total_delta, 3),
                    average_delta_kg=round(total_delta / len(items), 3),
                    last_adjustment=max(r.created_at for r in items),
                )
            )
        summary.sort(key=lambda s: s.exercise_name)
        return summary

    # ===== Internals =====

    @staticmethod
    def _rtf_exercises_for(routine: Routine, exercise_id: str) -> List[RoutineExercise]:
        return [e for e in routine.rtf_exercises() if e.exercise_id == exercise_id]

    async def _apply(
        self,
        routine: Routine,
        exercises: List[RoutineExercise],
        adjustment: NewTmAdjustment,
    ) -> TmAdjustment:
        row = await run_in_threadpool(self._ledger.create, adjustment)
        for exercise in exercises:
            await run_in_threadpool(
                self._routines.update_exercise_tm,
                exercise.id,
                adjustment.post_tm_kg,
                adjustment.week_number,
            )
        removed = await self._cache.invalidate_prefix(routine.id)
        self._stats.tm_adjustments += 1
        logger.debug("TM change on routine %s invalidated %d cache keys", routine.id, removed)
        return row
