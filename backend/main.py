"""
Application factory for FastAPI.

This module provides a factory function for creating FastAPI application instances.
The factory pattern allows for:
- Easy testing with custom settings
- Multiple app instances with different configurations
- Clear separation of app creation from route definitions

create_app() is also the composition root of the RtF engine: the week-goal
cache, the stampede registry, the engine counters and the Prometheus
collector are built once here and stored on app.state. The lifespan runs
the stale-session sweep and releases the cache on shutdown.

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings
    test_settings = Settings(environment="test", _env_file=None)
    test_app = create_app(settings=test_settings)
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from supabase import create_client

from application.exceptions import ApplicationError
from backend.core.metrics_collector import MetricsCollector
from backend.core.rtf_stats import RtfStats
from backend.core.session_maintenance import SessionMaintenance
from backend.settings import Settings, get_settings
from infrastructure.cache import InFlightRegistry, build_week_goals_cache
from infrastructure.db import SupabaseWorkoutSessionRepository

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Initialize Sentry for error tracking
    _init_sentry(settings)

    app = FastAPI(
        title="RtF Progression API",
        description="Reps-to-Failure program scheduling, forecasting and Training-Max progression",
        version="1.0.0",
        lifespan=_lifespan,
    )
    app.state.settings = settings

    _init_rtf_state(app, settings)

    # Configure CORS middleware
    _configure_cors(app)

    _register_exception_handlers(app)

    _include_routers(app)

    # Log feature flags status
    _log_feature_flags(settings)

    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            profiles_sample_rate=0.1,
            enable_tracing=True,
        )
        logger.info("Sentry initialized for rtf-progression-api")


def _init_rtf_state(app: FastAPI, settings: Settings) -> None:
    """Build the process-wide RtF cache, stampede registry, counters and metrics."""
    cache = build_week_goals_cache(settings)
    in_flight = InFlightRegistry()
    stats = RtfStats()

    app.state.week_goals_cache = cache
    app.state.in_flight = in_flight
    app.state.rtf_stats = stats
    app.state.metrics = MetricsCollector(stats, cache, in_flight)
    app.state.session_maintenance = _build_session_maintenance(settings)


def _build_session_maintenance(settings: Settings) -> Optional[SessionMaintenance]:
    if not settings.workout_session_sweep_enabled:
        return None
    if not settings.supabase_url or not settings.supabase_key:
        logger.info("Workout session sweep disabled: Supabase credentials not configured")
        return None
    client = create_client(settings.supabase_url, settings.supabase_key)
    return SessionMaintenance(
        SupabaseWorkoutSessionRepository(client),
        timeout_hours=settings.workout_session_timeout_hours,
        interval_min=settings.workout_session_sweep_interval_min,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI):
    maintenance: Optional[SessionMaintenance] = app.state.session_maintenance
    if maintenance is not None:
        maintenance.start()
    try:
        yield
    finally:
        if maintenance is not None:
            await maintenance.stop()
        await app.state.in_flight.shutdown()
        await app.state.week_goals_cache.close()
        logger.info("RtF cache closed")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
        "http://localhost:3001",
    ]
    # Add production domains from environment if configured
    production_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in production_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag"],
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """Map application errors to JSON responses with their status code."""

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import (
        health_router,
        metrics_router,
        rtf_router,
        tm_events_router,
        workouts_router,
    )

    # Health and metrics (no prefix)
    app.include_router(health_router)
    app.include_router(metrics_router)

    # RtF reads and program setup
    app.include_router(rtf_router)
    # TM adjustment ledger
    app.include_router(tm_events_router)
    # Workout sessions
    app.include_router(workouts_router)


def _log_feature_flags(settings: Settings) -> None:
    """Log the status of feature flags at startup."""
    logger.info(
        "RTF cache: driver=%s layered=%s ttl=%ss l1_ttl=%sms",
        settings.rtf_cache_driver,
        settings.rtf_cache_layered,
        settings.rtf_week_goal_ttl_sec,
        settings.rtf_week_goals_l1_ttl_ms,
    )
    if not settings.rtf_etag_enabled:
        logger.info("RTF_ETAG_ENABLED is off")
    if settings.enable_tm_events:
        logger.info("ENABLE_TM_EVENTS is active (max delta %.1f kg)", settings.max_tm_event_delta_kg)
    else:
        logger.warning("ENABLE_TM_EVENTS is disabled: TM event endpoints return 404")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
