"""
Periodic sweep aborting abandoned workout sessions.

IN_PROGRESS sessions with no activity (last_activity_at, else started_at)
for WORKOUT_SESSION_TIMEOUT_HOURS are marked ABORTED. The update is
conditioned on the current status, so running the sweep on several
instances at once is harmless.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from starlette.concurrency import run_in_threadpool

from application.ports import WorkoutSessionRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionMaintenance:
    """Runs the stale-session sweep on a fixed interval."""

    def __init__(
        self,
        session_repo: WorkoutSessionRepository,
        timeout_hours: float = 48,
        interval_min: float = 30,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._sessions = session_repo
        self._timeout = timedelta(hours=timeout_hours)
        self._interval_sec = max(interval_min, 5) * 60
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        """Abort stale sessions once. Returns the number aborted (0 on error)."""
        now = self._clock()
        cutoff = now - self._timeout
        try:
            aborted = await run_in_threadpool(self._sessions.abort_stale, cutoff, now)
        except Exception:
            logger.exception("Stale session sweep failed")
            return 0
        if aborted:
            logger.info("Auto-aborted %d stale workout sessions (idle since %s)", aborted, cutoff.isoformat())
        return aborted

    async def _run(self) -> None:
        while True:
            await self.sweep_once()
            await asyncio.sleep(self._interval_sec)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            "Workout session sweep started: timeout=%s, interval=%ds",
            self._timeout,
            self._interval_sec,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
