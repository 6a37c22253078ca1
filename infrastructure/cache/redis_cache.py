"""
Redis RtF cache driver.

Values are stored as JSON with a server-side expiry (SET EX). Prefix
invalidation walks SCAN MATCH {prefix}* in batches of 100 and deletes the
matches.

Any Redis failure degrades to a pass-through: get returns None, writes and
deletes are dropped, and a warning is logged. Callers recompute on miss, so
correctness holds at a latency cost.
"""
import json
import logging
import math
from typing import Dict, List, Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from application.ports.week_goals_cache import CacheValue, routine_key_prefixes
from infrastructure.cache.generations import RoutineGenerations

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 600.0
SCAN_COUNT = 100

# Socket failures can surface outside RedisError; undecodable payloads as ValueError.
_DEGRADE_ERRORS = (RedisError, OSError, ValueError)


def create_redis_client(url: Optional[str]) -> Optional[aioredis.Redis]:
    """
    Build an asyncio Redis client for a URL.

    The client connects lazily on first command. Returns None when no URL
    is configured.
    """
    if not url:
        return None
    return aioredis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=2,
        socket_timeout=2,
        health_check_interval=30,
    )


class RedisWeekGoalsCache:
    """Redis-backed RtF cache that never raises on store failures."""

    name = "redis"

    def __init__(self, client: aioredis.Redis, default_ttl_sec: float = DEFAULT_TTL_SEC):
        self._client = client
        self._default_ttl_sec = default_ttl_sec if default_ttl_sec > 0 else DEFAULT_TTL_SEC
        self._counters = {
            "gets": 0,
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "deletes": 0,
            "invalidations": 0,
            "errors": 0,
        }
        self._generations = RoutineGenerations()

    def _degraded(self, op: str, key: str, exc: Exception) -> None:
        self._counters["errors"] += 1
        logger.warning("Redis cache %s failed for %s: %s", op, key, exc)

    async def get(self, key: str) -> Optional[CacheValue]:
        self._counters["gets"] += 1
        try:
            raw = await self._client.get(key)
            value = json.loads(raw) if raw else None
        except _DEGRADE_ERRORS as e:
            self._degraded("get", key, e)
            value = None
        if value is None:
            self._counters["misses"] += 1
            return None
        self._counters["hits"] += 1
        return value

    async def set(self, key: str, value: CacheValue, ttl_sec: Optional[float] = None) -> None:
        ttl = ttl_sec if ttl_sec and ttl_sec > 0 else self._default_ttl_sec
        try:
            await self._client.set(key, json.dumps(value, default=str), ex=max(1, math.ceil(ttl)))
            self._counters["sets"] += 1
        except _DEGRADE_ERRORS as e:
            self._degraded("set", key, e)

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
            self._counters["deletes"] += 1
        except _DEGRADE_ERRORS as e:
            self._degraded("delete", key, e)

    async def invalidate_prefix(self, routine_id: str) -> int:
        self._generations.bump(routine_id)
        removed = 0
        for prefix in routine_key_prefixes(routine_id):
            pattern = f"{prefix}*"
            try:
                keys: List[str] = [
                    k async for k in self._client.scan_iter(match=pattern, count=SCAN_COUNT)
                ]
                if keys:
                    removed += await self._client.delete(*keys)
            except _DEGRADE_ERRORS as e:
                self._degraded("invalidate", pattern, e)
        if removed:
            self._counters["invalidations"] += 1
        return removed

    def generation(self, routine_id: str) -> int:
        return self._generations.current(routine_id)

    def metrics(self) -> Dict[str, float]:
        gets = self._counters["gets"]
        hit_rate = self._counters["hits"] / gets if gets else 0.0
        return {**self._counters, "hit_rate": hit_rate}

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except _DEGRADE_ERRORS as e:
            logger.warning("Error closing Redis client: %s", e)
