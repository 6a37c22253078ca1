"""
Ownership-checked routine loading shared by the RtF services.
"""

from typing import Optional

from starlette.concurrency import run_in_threadpool

from application.exceptions import RoutineNotFoundError, RoutineOwnershipError
from application.ports import RoutineRepository
from backend.core.rtf_stats import RtfStats
from domain.models import Routine


async def load_owned_routine(
    repo: RoutineRepository,
    user_id: str,
    routine_id: str,
    stats: Optional[RtfStats] = None,
) -> Routine:
    """
    Load a routine and verify the caller owns it.

    Raises:
        RoutineNotFoundError: routine does not exist.
        RoutineOwnershipError: routine belongs to another user. Counted as a
            routine-access rejection when stats is given.
    """
    routine = await run_in_threadpool(repo.get_routine, routine_id)
    if routine is None:
        raise RoutineNotFoundError(routine_id)
    if routine.user_id != user_id:
        if stats is not None:
            stats.tm_routine_access_rejections += 1
        raise RoutineOwnershipError(routine_id)
    return routine
