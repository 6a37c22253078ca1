"""
API package for the RtF Progression API.

This package contains:
- deps.py: FastAPI dependency providers for DI
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_routine_repo,
    get_tm_adjustment_repo,
    get_workout_session_repo,
    get_forecast_service,
    get_tm_adjustment_service,
    get_program_setup_service,
    get_workout_session_service,
    get_current_user,
)

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
    # Services
    "get_forecast_service",
    "get_tm_adjustment_service",
    "get_program_setup_service",
    "get_workout_session_service",
    # Authentication
    "get_current_user",
]
