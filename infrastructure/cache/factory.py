"""
Composition-root factory for the RtF cache provider.

Called once from create_app(); the returned provider is stored on
app.state and injected wherever it is needed.

Driver selection (RTF_CACHE_DRIVER):
- memory: InMemoryWeekGoalsCache
- redis / external: RedisWeekGoalsCache, wrapped in LayeredWeekGoalsCache
  unless RTF_CACHE_LAYERED is off
- layered: always LayeredWeekGoalsCache over Redis

Without RTF_REDIS_URL the external tier is a NullWeekGoalsCache, so the
service keeps working with no shared cache.
"""
import logging
from typing import Optional

from redis import asyncio as aioredis

from application.ports.week_goals_cache import WeekGoalsCache
from backend.settings import Settings
from infrastructure.cache.layered import LayeredWeekGoalsCache
from infrastructure.cache.memory import InMemoryWeekGoalsCache
from infrastructure.cache.null import NullWeekGoalsCache
from infrastructure.cache.redis_cache import RedisWeekGoalsCache, create_redis_client

logger = logging.getLogger(__name__)


def build_external_cache(
    client: Optional[aioredis.Redis],
    default_ttl_sec: float,
) -> WeekGoalsCache:
    """Redis provider when a client is present, NO-OP provider otherwise."""
    if client is None:
        logger.warning("RTF cache: no Redis URL configured, external tier disabled")
        return NullWeekGoalsCache()
    return RedisWeekGoalsCache(client, default_ttl_sec=default_ttl_sec)


def build_week_goals_cache(
    settings: Settings,
    redis_client: Optional[aioredis.Redis] = None,
) -> WeekGoalsCache:
    """
    Build the RtF cache provider from settings.

    Args:
        settings: Application settings.
        redis_client: Pre-built client (tests); otherwise one is created from
            settings.rtf_redis_url for external drivers.

    Returns:
        The configured WeekGoalsCache.
    """
    driver = settings.rtf_cache_driver
    ttl = float(settings.rtf_week_goal_ttl_sec)

    if driver == "memory":
        logger.info("RTF cache driver: memory (TTL=%ss)", ttl)
        return InMemoryWeekGoalsCache(default_ttl_sec=ttl)

    client = redis_client if redis_client is not None else create_redis_client(settings.rtf_redis_url)
    external = build_external_cache(client, ttl)

    if driver == "layered" or settings.rtf_cache_layered:
        return LayeredWeekGoalsCache(external, l1_ttl_sec=settings.rtf_week_goals_l1_ttl_ms / 1000.0)

    logger.info("RTF cache driver: %s (TTL=%ss)", external.name, ttl)
    return external
