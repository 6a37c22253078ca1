"""
RtF Week-Goals Cache Interface (Port).

Async key/value cache for computed week goals and forecasts. Drivers live
in infrastructure/cache (memory, redis, layered). Values are JSON-compatible
dicts so every driver can store them.

Key space:
- weekGoals:{routine_id}:{week}
- forecast:{routine_id}:v{version}[:rem]
"""
from typing import Any, Dict, Optional, Protocol, Tuple

CacheValue = Dict[str, Any]


def week_goals_key(routine_id: str, week: int) -> str:
    return f"weekGoals:{routine_id}:{week}"


def forecast_key(routine_id: str, version: int, remaining: bool = False) -> str:
    suffix = ":rem" if remaining else ""
    return f"forecast:{routine_id}:v{version}{suffix}"


def routine_key_prefixes(routine_id: str) -> Tuple[str, ...]:
    """Every key prefix owned by a routine."""
    return (f"weekGoals:{routine_id}:", f"forecast:{routine_id}:")


class WeekGoalsCache(Protocol):
    """
    Interface for RtF result caches.

    Implementations must never raise on backend failures: a failing
    external store behaves as a permanent miss.
    """

    name: str

    async def get(self, key: str) -> Optional[CacheValue]:
        """Return the cached value, or None on miss or expiry."""
        ...

    async def set(self, key: str, value: CacheValue, ttl_sec: Optional[float] = None) -> None:
        """Store a value. ttl_sec defaults to the driver's default TTL."""
        ...

    async def delete(self, key: str) -> None:
        ...

    async def invalidate_prefix(self, routine_id: str) -> int:
        """
        Remove every weekGoals and forecast key of a routine.

        Returns:
            Number of keys removed (best effort for external stores).
        """
        ...

    def generation(self, routine_id: str) -> int:
        """
        Invalidation generation of a routine; bumped by every invalidate_prefix.

        Readers capture it before loading a routine and skip the cache write
        when it moved, so a result computed from pre-invalidation data is
        never stored.
        """
        ...

    def metrics(self) -> Dict[str, float]:
        """Driver counters and derived rates."""
        ...

    async def close(self) -> None:
        """Release connections held by the driver."""
        ...
