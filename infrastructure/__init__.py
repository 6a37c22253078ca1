"""
Infrastructure Layer for the RtF progression API.

This package contains concrete implementations of the application ports:
- db/: Supabase database implementations
- cache/: in-memory, Redis and layered week-goal cache drivers
"""

from infrastructure.db import (
    SupabaseRoutineRepository,
    SupabaseTmAdjustmentRepository,
    SupabaseWorkoutSessionRepository,
)
from infrastructure.cache import (
    InFlightRegistry,
    InMemoryWeekGoalsCache,
    LayeredWeekGoalsCache,
    NullWeekGoalsCache,
    RedisWeekGoalsCache,
    build_week_goals_cache,
)

__all__ = [
    "SupabaseRoutineRepository",
    "SupabaseTmAdjustmentRepository",
    "SupabaseWorkoutSessionRepository",
    # Cache drivers
    "InFlightRegistry",
    "InMemoryWeekGoalsCache",
    "LayeredWeekGoalsCache",
    "NullWeekGoalsCache",
    "RedisWeekGoalsCache",
    "build_week_goals_cache",
]
