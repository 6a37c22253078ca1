"""
RtF cache drivers.

- InMemoryWeekGoalsCache: process-local dict with TTL
- RedisWeekGoalsCache: Redis JSON store, degrades to pass-through on errors
- LayeredWeekGoalsCache: in-memory L1 over an external L2
- NullWeekGoalsCache: NO-OP external tier
- InFlightRegistry: stampede suppression
"""

from infrastructure.cache.factory import build_week_goals_cache
from infrastructure.cache.layered import LayeredWeekGoalsCache
from infrastructure.cache.memory import InMemoryWeekGoalsCache
from infrastructure.cache.null import NullWeekGoalsCache
from infrastructure.cache.redis_cache import RedisWeekGoalsCache, create_redis_client
from infrastructure.cache.stampede import InFlightRegistry

__all__ = [
    "build_week_goals_cache",
    "create_redis_client",
    "InMemoryWeekGoalsCache",
    "RedisWeekGoalsCache",
    "LayeredWeekGoalsCache",
    "NullWeekGoalsCache",
    "InFlightRegistry",
]
