"""
NO-OP RtF cache driver.

Stands in for the external store when no Redis URL is configured: every
get misses and every write is dropped.
"""
from typing import Dict, Optional

from application.ports.week_goals_cache import CacheValue
from infrastructure.cache.generations import RoutineGenerations


class NullWeekGoalsCache:
    name = "null"

    def __init__(self):
        self._gets = 0
        self._generations = RoutineGenerations()

    async def get(self, key: str) -> Optional[CacheValue]:
        self._gets += 1
        return None

    async def set(self, key: str, value: CacheValue, ttl_sec: Optional[float] = None) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def invalidate_prefix(self, routine_id: str) -> int:
        self._generations.bump(routine_id)
        return 0

    def generation(self, routine_id: str) -> int:
        return self._generations.current(routine_id)

    def metrics(self) -> Dict[str, float]:
        return {"gets": self._gets, "hits": 0, "misses": self._gets, "hit_rate": 0.0}

    async def close(self) -> None:
        return None
