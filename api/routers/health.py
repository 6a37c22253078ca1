"""
Health check router.

This router provides health check endpoints for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter, Depends

from api.deps import get_settings, get_week_goals_cache
from application.ports import WeekGoalsCache
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Health"],
)


@router.get("/health")
def health(
    settings: Settings = Depends(get_settings),
    cache: WeekGoalsCache = Depends(get_week_goals_cache),
):
    """
    Simple liveness endpoint.

    Returns:
        dict: Status indicator plus the active cache driver
    """
    return {
        "status": "ok",
        "environment": settings.environment,
        "cacheDriver": cache.name,
    }
