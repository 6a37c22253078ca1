"""
Layered RtF cache driver: short-lived in-memory L1 over an external L2.

- get: L1 hit returns; on L1 miss read L2 and refill L1 on hit.
- set: write-through to L2 first, then populate L1.
- invalidate: clear matching keys in both tiers.

The L1 TTL (default 5 s) bounds staleness: an L1 refill racing an
invalidation may serve the old value for at most that long.
A compute that loaded its routine before an invalidation is kept out of
both tiers by the generation check in the forecast service.
"""
import logging
import time
from typing import Callable, Dict, Optional

from application.ports.week_goals_cache import CacheValue, WeekGoalsCache
from infrastructure.cache.generations import RoutineGenerations
from infrastructure.cache.memory import InMemoryWeekGoalsCache

logger = logging.getLogger(__name__)

DEFAULT_L1_TTL_SEC = 5.0


class LayeredWeekGoalsCache:
    """In-memory L1 in front of an external-store L2."""

    name = "layered"

    def __init__(
        self,
        l2: WeekGoalsCache,
        l1_ttl_sec: float = DEFAULT_L1_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._l1 = InMemoryWeekGoalsCache(
            default_ttl_sec=l1_ttl_sec if l1_ttl_sec > 0 else DEFAULT_L1_TTL_SEC,
            clock=clock,
        )
        self._l2 = l2
        self._generations = RoutineGenerations()
        self._counters = {
            "gets": 0,
            "hits": 0,
            "misses": 0,
            "l1_hits": 0,
            "l1_misses": 0,
            "l2_hits": 0,
            "sets": 0,
            "deletes": 0,
            "invalidations": 0,
        }
        logger.info(
            "Layered RtF cache active: L1 TTL=%.1fs, L2=%s",
            self._l1.default_ttl_sec,
            getattr(l2, "name", type(l2).__name__),
        )

    @property
    def l1(self) -> InMemoryWeekGoalsCache:
        return self._l1

    async def get(self, key: str) -> Optional[CacheValue]:
        self._counters["gets"] += 1
        value = await self._l1.get(key)
        if value is not None:
            self._counters["hits"] += 1
            self._counters["l1_hits"] += 1
            return value
        self._counters["l1_misses"] += 1

        value = await self._l2.get(key)
        if value is None:
            self._counters["misses"] += 1
            return None
        self._counters["hits"] += 1
        self._counters["l2_hits"] += 1
        await self._l1.set(key, value)
        return value

    async def set(self, key: str, value: CacheValue, ttl_sec: Optional[float] = None) -> None:
        await self._l2.set(key, value, ttl_sec)
        await self._l1.set(key, value)
        self._counters["sets"] += 1

    async def delete(self, key: str) -> None:
        await self._l1.delete(key)
        await self._l2.delete(key)
        self._counters["deletes"] += 1

    async def invalidate_prefix(self, routine_id: str) -> int:
        self._generations.bump(routine_id)
        removed = await self._l1.invalidate_prefix(routine_id)
        if removed:
            logger.debug("L1 invalidated %d keys for routine %s", removed, routine_id)
        removed += await self._l2.invalidate_prefix(routine_id)
        self._counters["invalidations"] += 1
        return removed

    def generation(self, routine_id: str) -> int:
        return self._generations.current(routine_id)

    def metrics(self) -> Dict[str, float]:
        c = self._counters
        hits = c["hits"]
        return {
            **c,
            "hit_rate": hits / c["gets"] if c["gets"] else 0.0,
            "l1_hit_rate": c["l1_hits"] / hits if hits else 0.0,
            "l2_contribution": c["l2_hits"] / hits if hits else 0.0,
            "l1_size": self._l1.size(),
        }

    async def close(self) -> None:
        await self._l1.close()
        await self._l2.close()
