"""
Repository Interfaces (Ports) for the RtF Progression API.

This package defines abstract interfaces that decouple the RtF engine from
infrastructure (Supabase, Redis). Implementations are provided in the
infrastructure layer.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the engine needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import RoutineRepository, WeekGoalsCache

    class RtfForecastService:
        def __init__(self, routine_repo: RoutineRepository, cache: WeekGoalsCache):
            self._routines = routine_repo
            self._cache = cache
"""

# Routine program persistence
from application.ports.routine_repository import RoutineRepository

# TM adjustment ledger
from application.ports.tm_adjustment_repository import TmAdjustmentRepository

# Workout sessions and set logs
from application.ports.workout_session_repository import WorkoutSessionRepository

# RtF result cache
from application.ports.week_goals_cache import (
    CacheValue,
    WeekGoalsCache,
    forecast_key,
    routine_key_prefixes,
    week_goals_key,
)

__all__ = [
    # Persistence
    "RoutineRepository",
    "TmAdjustmentRepository",
    "WorkoutSessionRepository",
    # Cache
    "CacheValue",
    "WeekGoalsCache",
    "week_goals_key",
    "forecast_key",
    "routine_key_prefixes",
]
