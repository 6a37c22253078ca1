"""
In-memory RtF cache driver.

Process-local dict with a per-entry expiry timestamp. Expired entries are
dropped lazily on read and by purge_expired(). Also used as the L1 tier of
the layered driver.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from application.ports.week_goals_cache import CacheValue, routine_key_prefixes
from infrastructure.cache.generations import RoutineGenerations

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 600.0


@dataclass
class _Entry:
    value: Any
    expires_at: float


class InMemoryWeekGoalsCache:
    """Process-local RtF cache with TTL expiry."""

    name = "memory"

    def __init__(
        self,
        default_ttl_sec: float = DEFAULT_TTL_SEC,
        clock: Callable[[], float] = time.monotonic,
    ):
        if default_ttl_sec <= 0:
            default_ttl_sec = DEFAULT_TTL_SEC
        self._default_ttl_sec = default_ttl_sec
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._generations = RoutineGenerations()
        self._counters = {
            "gets": 0,
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "invalidations": 0,
        }

    @property
    def default_ttl_sec(self) -> float:
        return self._default_ttl_sec

    def _lookup(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            self._entries.pop(key, None)
            return None
        return entry

    async def get(self, key: str) -> Optional[CacheValue]:
        self._counters["gets"] += 1
        entry = self._lookup(key)
        if entry is None:
            self._counters["misses"] += 1
            return None
        self._counters["hits"] += 1
        return entry.value

    async def set(self, key: str, value: CacheValue, ttl_sec: Optional[float] = None) -> None:
        ttl = ttl_sec if ttl_sec and ttl_sec > 0 else self._default_ttl_sec
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)
        self._counters["sets"] += 1

    async def delete(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            self._counters["deletes"] += 1

    async def invalidate_prefix(self, routine_id: str) -> int:
        self._generations.bump(routine_id)
        prefixes = routine_key_prefixes(routine_id)
        doomed = [k for k in list(self._entries) if k.startswith(prefixes)]
        for key in doomed:
            self._entries.pop(key, None)
        if doomed:
            self._counters["invalidations"] += 1
            logger.debug("Invalidated %d cached keys for routine %s", len(doomed), routine_id)
        return len(doomed)

    def generation(self, routine_id: str) -> int:
        return self._generations.current(routine_id)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, e in list(self._entries.items()) if e.expires_at <= now]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def size(self) -> int:
        """Number of unexpired entries. Read-only, safe to call from a scrape."""
        now = self._clock()
        return sum(1 for e in list(self._entries.values()) if e.expires_at > now)

    def metrics(self) -> Dict[str, float]:
        gets = self._counters["gets"]
        hit_rate = self._counters["hits"] / gets if gets else 0.0
        return {**self._counters, "hit_rate": hit_rate, "size": len(self._entries)}

    async def close(self) -> None:
        self._entries.clear()
