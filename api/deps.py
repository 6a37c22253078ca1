"""
FastAPI Dependency Providers for the RtF Progression API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations. This
enables clean separation of concerns and easy testing with fakes.

Architecture:
- Settings and Supabase client are cached per-process (lru_cache)
- Repository and service providers create new instances per-request
- Process-wide RtF state (cache, in-flight registry, counters, metrics) is
  built by create_app() and read from app.state
- Auth providers wrap backend.auth

Usage in routers:
    from api.deps import get_forecast_service, get_current_user

    @router.get("/routines/{routine_id}/rtf-timeline")
    async def timeline(
        routine_id: str,
        user_id: str = Depends(get_current_user),
        service: RtfForecastService = Depends(get_forecast_service),
    ):
        return await service.get_timeline(user_id, routine_id)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_routine_repo] = lambda: FakeRoutineRepository()
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request
from supabase import Client, create_client

# Protocol types (interfaces)
from application.ports import (
    RoutineRepository,
    TmAdjustmentRepository,
    WeekGoalsCache,
    WorkoutSessionRepository,
)

# Concrete implementations
from infrastructure import (
    InFlightRegistry,
    SupabaseRoutineRepository,
    SupabaseTmAdjustmentRepository,
    SupabaseWorkoutSessionRepository,
)

from backend.core.metrics_collector import MetricsCollector
from backend.core.program_setup_service import ProgramSetupService
from backend.core.rtf_forecast_service import RtfForecastService
from backend.core.rtf_stats import RtfStats
from backend.core.tm_adjustment_service import TmAdjustmentService
from backend.core.workout_session_service import WorkoutSessionService
from backend.settings import Settings, get_settings as _get_settings

# Auth from existing module (wrap to maintain single source of truth)
from backend.auth import get_current_user as _get_current_user


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns None if credentials are not configured.
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Repository Providers
# =============================================================================


def get_routine_repo(
    client: Client = Depends(get_supabase_client_required),
) -> RoutineRepository:
    """Routines with their days, exercises and RtF program fields."""
    return SupabaseRoutineRepository(client)


def get_tm_adjustment_repo(
    client: Client = Depends(get_supabase_client_required),
) -> TmAdjustmentRepository:
    """Append-only Training-Max ledger."""
    return SupabaseTmAdjustmentRepository(client)


def get_workout_session_repo(
    client: Client = Depends(get_supabase_client_required),
) -> WorkoutSessionRepository:
    """Workout sessions and set logs."""
    return SupabaseWorkoutSessionRepository(client)


# =============================================================================
# Process-wide RtF State (built in create_app)
# =============================================================================


def get_week_goals_cache(request: Request) -> WeekGoalsCache:
    return request.app.state.week_goals_cache


def get_in_flight(request: Request) -> InFlightRegistry:
    return request.app.state.in_flight


def get_rtf_stats(request: Request) -> RtfStats:
    return request.app.state.rtf_stats


def get_metrics_collector(request: Request) -> MetricsCollector:
    return request.app.state.metrics


# =============================================================================
# Service Providers
# =============================================================================


def get_forecast_service(
    routine_repo: RoutineRepository = Depends(get_routine_repo),
    cache: WeekGoalsCache = Depends(get_week_goals_cache),
    in_flight: InFlightRegistry = Depends(get_in_flight),
    stats: RtfStats = Depends(get_rtf_stats),
) -> RtfForecastService:
    return RtfForecastService(routine_repo, cache, in_flight, stats)


def get_tm_adjustment_service(
    routine_repo: RoutineRepository = Depends(get_routine_repo),
    tm_repo: TmAdjustmentRepository = Depends(get_tm_adjustment_repo),
    cache: WeekGoalsCache = Depends(get_week_goals_cache),
    stats: RtfStats = Depends(get_rtf_stats),
    settings: Settings = Depends(get_settings),
) -> TmAdjustmentService:
    return TmAdjustmentService(
        routine_repo,
        tm_repo,
        cache,
        stats,
        max_delta_kg=settings.max_tm_event_delta_kg,
        step_strategy=settings.tm_auto_adjust_strategy,
    )


def get_program_setup_service(
    routine_repo: RoutineRepository = Depends(get_routine_repo),
    cache: WeekGoalsCache = Depends(get_week_goals_cache),
) -> ProgramSetupService:
    return ProgramSetupService(routine_repo, cache)


def get_workout_session_service(
    session_repo: WorkoutSessionRepository = Depends(get_workout_session_repo),
    routine_repo: RoutineRepository = Depends(get_routine_repo),
    tm_service: TmAdjustmentService = Depends(get_tm_adjustment_service),
) -> WorkoutSessionService:
    return WorkoutSessionService(session_repo, routine_repo, tm_service)


# =============================================================================
# Authentication Providers
# =============================================================================


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """
    Get the current authenticated user ID.

    Wraps backend.auth.get_current_user for dependency injection.
    Supports:
    - Supabase JWT (HS256)
    - API key authentication (user id from key suffix or X-User-Id)

    Raises:
        HTTPException: 401 if authentication fails
    """
    return await _get_current_user(
        authorization=authorization,
        x_api_key=x_api_key,
        x_user_id=x_user_id,
    )


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Repositories
    "get_routine_repo",
    "get_tm_adjustment_repo",
    "get_workout_session_repo",
    # Process-wide state
    "get_week_goals_cache",
    "get_in_flight",
    "get_rtf_stats",
    "get_metrics_collector",
    # Services
    "get_forecast_service",
    "get_tm_adjustment_service",
    "get_program_setup_service",
    "get_workout_session_service",
    # Authentication
    "get_current_user",
]
