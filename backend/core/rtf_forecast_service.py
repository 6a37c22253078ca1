"""
RtF forecast and timeline service.

Serves the cached read side of the RtF engine:
- Week goals: every PROGRAMMED_RTF exercise's goal for one week
- Timeline: week goals for a range of weeks, built from the per-week cache
- Forecast: the schedule shape of both styles per week, without exercise data

Reads go cache -> stampede-protected compute -> cache set. Results carry a
HIT/MISS marker; the marker is never stored.
A compute whose routine was invalidated after it was loaded returns its
result without storing it.

The "remaining" view starts at the routine's start week instead of week 1.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from application.exceptions import BadRequestError, MissingProgramError, WeekOutOfRangeError
from application.ports import RoutineRepository, WeekGoalsCache, forecast_key, week_goals_key
from backend.core.program_calendar import clamp_start_week, routine_current_week
from backend.core.routine_access import load_owned_routine
from backend.core.rtf_schedules import DELOAD_PRESCRIPTION, FIXED_SET_COUNT
from backend.core.rtf_stats import RtfStats
from backend.core.week_goal_resolver import (
    program_total_weeks,
    resolve_routine_week,
    schedule_week,
)
from domain.models import (
    CacheStats,
    ForecastResult,
    ForecastWeek,
    ProgramStyle,
    Routine,
    ScheduleWeek,
    StylePlan,
    TimelineResult,
    TimelineWeek,
    WeekGoalsResult,
)
from infrastructure.cache.stampede import InFlightRegistry

logger = logging.getLogger(__name__)

# Bump when the shape of week-goal, timeline or forecast payloads changes.
RTF_WEEK_GOALS_VERSION = 1

CACHE_HIT = "HIT"
CACHE_MISS = "MISS"

_UNSTORED = {"cache_status"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RtfForecastService:
    """Cached week goals, timelines and forecasts for RtF routines."""

    def __init__(
        self,
        routine_repo: RoutineRepository,
        cache: WeekGoalsCache,
        in_flight: InFlightRegistry,
        stats: RtfStats,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._routines = routine_repo
        self._cache = cache
        self._in_flight = in_flight
        self._stats = stats
        self._clock = clock

    # ===== Public API =====

    async def get_week_goals(
        self,
        user_id: str,
        routine_id: str,
        week: Optional[int] = None,
        remaining: bool = False,
    ) -> WeekGoalsResult:
        """
        Goals of every RtF exercise in a routine for one week.

        Args:
            user_id: Caller
            routine_id: Routine UUID
            week: Logical week; defaults to the routine's current week
            remaining: Reject weeks before the routine's start week

        Raises:
            RoutineNotFoundError / RoutineOwnershipError
            MissingProgramError: routine has no program configured
            WeekOutOfRangeError: week outside the program
        """
        generation = self._cache.generation(routine_id)
        routine = await load_owned_routine(self._routines, user_id, routine_id)
        self._require_program(routine)
        total = program_total_weeks(routine)
        if week is None:
            week = routine_current_week(routine, self._clock(), total)
        if remaining and 1 <= week <= total and week < self._from_week(routine, total, True):
            raise BadRequestError(
                f"Week {week} is before the program start week {routine.program_start_week}"
            )
        return await self._week_goals_for(routine, week, total, generation)

    async def get_timeline(
        self,
        user_id: str,
        routine_id: str,
        remaining: bool = False,
    ) -> TimelineResult:
        """Week goals for fromWeek..totalWeeks, with per-week cache hit/miss counts."""
        generation = self._cache.generation(routine_id)
        routine = await load_owned_routine(self._routines, user_id, routine_id)
        self._require_program(routine)
        total = program_total_weeks(routine)
        from_week = self._from_week(routine, total, remaining)

        stats = CacheStats()
        timeline: List[TimelineWeek] = []
        for week in range(from_week, total + 1):
            result = await self._week_goals_for(routine, week, total, generation)
            if result.cache_status == CACHE_HIT:
                stats.hits += 1
            else:
                stats.misses += 1
            timeline.append(TimelineWeek(week=week, goals=result.goals))

        return TimelineResult(
            routine_id=routine.id,
            weeks=total,
            version=RTF_WEEK_GOALS_VERSION,
            from_week=from_week,
            timeline=timeline,
            cache_stats=stats,
        )

    async def get_forecast(
        self,
        user_id: str,
        routine_id: str,
        remaining: bool = False,
    ) -> ForecastResult:
        """Per-week STANDARD and HYPERTROPHY schedule shape for the program."""
        generation = self._cache.generation(routine_id)
        routine = await load_owned_routine(self._routines, user_id, routine_id)
        self._require_program(routine)
        key = forecast_key(routine.id, RTF_WEEK_GOALS_VERSION, remaining)

        cached = await self._cache.get(key)
        if cached:
            self._stats.forecast_hits += 1
            return ForecastResult.model_validate(cached).model_copy(update={"cache_status": CACHE_HIT})

        self._stats.forecast_misses += 1
        return await self._in_flight.run(key, lambda: self._compute_forecast(routine, remaining, key, generation))

    # ===== Week goals =====

    async def _week_goals_for(
        self, routine: Routine, week: int, total: int, generation: int
    ) -> WeekGoalsResult:
        if week < 1 or week > total:
            raise WeekOutOfRangeError(week, total)
        key = week_goals_key(routine.id, week)

        cached = await self._cache.get(key)
        if cached:
            self._stats.week_goals_hits += 1
            return WeekGoalsResult.model_validate(cached).model_copy(update={"cache_status": CACHE_HIT})

        self._stats.week_goals_misses += 1
        return await self._in_flight.run(key, lambda: self._compute_week_goals(routine, week, key, generation))

    async def _compute_week_goals(
        self, routine: Routine, week: int, key: str, generation: int
    ) -> WeekGoalsResult:
        # A computation that finished just before this one started may have filled the key.
        again = await self._cache.get(key)
        if again:
            return WeekGoalsResult.model_validate(again).model_copy(update={"cache_status": CACHE_HIT})

        result = WeekGoalsResult(
            routine_id=routine.id,
            week=week,
            with_deloads=routine.program_with_deloads,
            goals=resolve_routine_week(routine, week),
            version=RTF_WEEK_GOALS_VERSION,
        )
        if await self._store(routine.id, generation, key, result.to_wire(exclude=_UNSTORED)):
            self._stats.week_goals_sets += 1
        return result.model_copy(update={"cache_status": CACHE_MISS})

    # ===== Forecast =====

    async def _compute_forecast(
        self, routine: Routine, remaining: bool, key: str, generation: int
    ) -> ForecastResult:
        again = await self._cache.get(key)
        if again:
            return ForecastResult.model_validate(again).model_copy(update={"cache_status": CACHE_HIT})

        total = program_total_weeks(routine)
        from_week = self._from_week(routine, total, remaining)
        forecast = []
        for week in range(from_week, total + 1):
            standard = schedule_week(routine, ProgramStyle.STANDARD, week)
            hypertrophy = schedule_week(routine, ProgramStyle.HYPERTROPHY, week)
            forecast.append(
                ForecastWeek(
                    week=week,
                    is_deload=standard.is_deload,
                    standard=self._style_plan(standard, ProgramStyle.STANDARD),
                    hypertrophy=self._style_plan(hypertrophy, ProgramStyle.HYPERTROPHY),
                )
            )

        result = ForecastResult(
            routine_id=routine.id,
            weeks=total,
            version=RTF_WEEK_GOALS_VERSION,
            with_deloads=routine.program_with_deloads,
            from_week=from_week,
            forecast=forecast,
        )
        if await self._store(routine.id, generation, key, result.to_wire(exclude=_UNSTORED)):
            self._stats.forecast_sets += 1
        return result.model_copy(update={"cache_status": CACHE_MISS})

    @staticmethod
    def _style_plan(entry: ScheduleWeek, style: ProgramStyle) -> StylePlan:
        if entry.is_deload:
            deload = DELOAD_PRESCRIPTION[style]
            return StylePlan(
                is_deload=True,
                intensity=deload.intensity,
                fixed_reps=deload.reps,
                sets=deload.sets,
                rpe=deload.rpe,
            )
        sets = FIXED_SET_COUNT[style] + 1
        return StylePlan(
            intensity=entry.intensity,
            fixed_reps=entry.fixed_reps,
            amrap_target=entry.amrap_target,
            sets=sets,
            amrap_set=sets,
        )

    # ===== Helpers =====

    async def _store(self, routine_id: str, generation: int, key: str, payload: dict) -> bool:
        # An invalidation since the routine was loaded means the payload may be stale.
        if self._cache.generation(routine_id) != generation:
            logger.debug("Skipping cache write for %s: routine %s was invalidated", key, routine_id)
            return False
        await self._cache.set(key, payload)
        return True

    @staticmethod
    def _require_program(routine: Routine) -> None:
        if not routine.has_program:
            raise MissingProgramError(routine.id)

    @staticmethod
    def _from_week(routine: Routine, total: int, remaining: bool) -> int:
        if not remaining:
            return 1
        return clamp_start_week(routine.program_start_week, total)
