"""
Infrastructure Database Layer.

This package provides Supabase-backed implementations of the repository interfaces
defined in application.ports. Repositories take an injected client so they can
be swapped for fakes in tests.

Usage:
    from supabase import create_client
    from infrastructure.db import (
        SupabaseRoutineRepository,
        SupabaseTmAdjustmentRepository,
        SupabaseWorkoutSessionRepository,
    )

    client = create_client(SUPABASE_URL, SUPABASE_KEY)

    routine_repo = SupabaseRoutineRepository(client)
    tm_repo = SupabaseTmAdjustmentRepository(client)
    session_repo = SupabaseWorkoutSessionRepository(client)
"""

from infrastructure.db.routine_repository import SupabaseRoutineRepository
from infrastructure.db.tm_adjustment_repository import SupabaseTmAdjustmentRepository
from infrastructure.db.workout_session_repository import SupabaseWorkoutSessionRepository

__all__ = [
    # Routines and RtF program fields
    "SupabaseRoutineRepository",

    # Training-Max ledger
    "SupabaseTmAdjustmentRepository",

    # Workout sessions and set logs
    "SupabaseWorkoutSessionRepository",
]
