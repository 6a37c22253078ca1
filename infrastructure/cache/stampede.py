"""
In-flight computation registry for cache stampede suppression.

Maps cache key -> asyncio.Future of the running computation. The first
caller for a key runs the factory (a "bypass"); callers arriving while it
runs await the same future (a "wait"). The entry is removed as soon as the
computation settles, whether it succeeded or failed.

Waiters are shielded: a cancelled request stops waiting but the shared
computation keeps running and still populates the cache.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRegistry:
    """Per-process registry of pending computations keyed by cache key."""

    def __init__(self):
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}
        self.waits = 0
        self.bypasses = 0

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run factory once per key among concurrent callers.

        Args:
            key: Cache key identifying the computation.
            factory: Zero-arg coroutine function producing the value.

        Returns:
            The factory's result (shared by all concurrent callers).

        Raises:
            Whatever the factory raised, to every caller sharing it.
        """
        task = self._pending.get(key)
        if task is not None:
            self.waits += 1
            return await asyncio.shield(task)

        self.bypasses += 1
        task = asyncio.ensure_future(factory())
        self._pending[key] = task
        task.add_done_callback(lambda t, k=key: self._settle(k, t))
        return await asyncio.shield(task)

    def _settle(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Retrieve the exception so an unawaited failure is not reported as lost.
        if not task.cancelled() and task.exception() is not None:
            logger.debug("In-flight computation for %s failed: %r", key, task.exception())

    async def shutdown(self) -> None:
        """Cancel pending computations and clear the registry."""
        pending = list(self._pending.values())
        self._pending.clear()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("Cancelled %d in-flight RtF computations on shutdown", len(pending))

    def stats(self) -> Dict[str, int]:
        return {"waits": self.waits, "bypasses": self.bypasses, "in_flight": len(self._pending)}
