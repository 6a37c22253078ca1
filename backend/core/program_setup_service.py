"""
RtF program setup.

Configures a routine's date-driven program and pins a fresh schedule
snapshot to it:
- duration is 21 weeks with deloads, 18 without
- start week is clamped to [1, duration] (entering the program mid-cycle)
- start date must fall on the weekday of the first training day
- end date is the last day of the remaining window from the start week

Cached results of the routine are invalidated afterwards.
"""

import logging
from datetime import date
from typing import Optional

from starlette.concurrency import run_in_threadpool

from application.exceptions import BadRequestError
from application.ports import RoutineRepository, WeekGoalsCache
from backend.core.program_calendar import (
    clamp_start_week,
    get_zone,
    program_end_date,
    weekday_index,
)
from backend.core.routine_access import load_owned_routine
from backend.core.rtf_schedules import build_program_snapshot, total_weeks
from domain.models import ProgramConfig, Routine

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


class ProgramSetupService:
    def __init__(self, routine_repo: RoutineRepository, cache: WeekGoalsCache):
        self._routines = routine_repo
        self._cache = cache

    async def configure_program(
        self,
        user_id: str,
        routine_id: str,
        *,
        with_deloads: bool,
        start_date: date,
        timezone_name: str,
        start_week: Optional[int] = None,
    ) -> Routine:
        """
        Configure (or reconfigure) a routine's RtF program.

        Raises:
            RoutineNotFoundError / RoutineOwnershipError
            BadRequestError: no training days, invalid timezone, or a start
                date that is not on the first training day's weekday.
        """
        routine = await load_owned_routine(self._routines, user_id, routine_id)
        get_zone(timezone_name)

        days = sorted(routine.days, key=lambda d: d.order)
        if not days:
            raise BadRequestError("Routine requires at least one training day to run a program")
        training_days = [d.day_of_week for d in days]

        if weekday_index(start_date) != training_days[0]:
            raise BadRequestError(
                f"programStartDate must fall on a {WEEKDAY_NAMES[training_days[0]]}, "
                "the weekday of the first training day"
            )

        duration = total_weeks(with_deloads)
        clamped_start = clamp_start_week(start_week, duration)
        config = ProgramConfig(
            with_deloads=with_deloads,
            duration_weeks=duration,
            start_week=clamped_start,
            start_date=start_date,
            end_date=program_end_date(start_date, duration, clamped_start),
            timezone=timezone_name,
            training_days_of_week=training_days,
            snapshot=build_program_snapshot(with_deloads),
        )

        updated = await run_in_threadpool(self._routines.save_program, routine.id, config)
        await self._cache.invalidate_prefix(routine.id)
        logger.info(
            "Configured RtF program for routine %s: %d weeks from week %d starting %s",
            routine.id,
            duration,
            clamped_start,
            start_date.isoformat(),
        )
        return updated
