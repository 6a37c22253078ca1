"""
Workout sessions router.

This router provides:
- Starting a session for a routine day (reusing the active one)
- Finishing a session as COMPLETED or ABORTED
- Recording and deleting per-set logs
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.deps import get_current_user, get_workout_session_service
from backend.core.workout_session_service import WorkoutSessionService
from domain.models import SessionStatus

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/workouts/sessions",
    tags=["Workout Sessions"],
)


# =============================================================================
# Request Models
# =============================================================================


class _CamelBody(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StartSessionRequest(_CamelBody):
    routine_id: str = Field(..., min_length=1)
    routine_day_id: str = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class FinishSessionRequest(_CamelBody):
    status: SessionStatus = SessionStatus.COMPLETED
    notes: Optional[str] = Field(None, max_length=1000)


class SetLogRequest(_CamelBody):
    routine_exercise_id: str = Field(..., min_length=1)
    exercise_id: str = Field(..., min_length=1)
    set_number: int = Field(..., ge=1)
    reps: Optional[int] = Field(None, ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    rpe: Optional[float] = Field(None, ge=0, le=10)
    is_completed: Optional[bool] = None


# =============================================================================
# Endpoints
# =============================================================================

# /active must be registered before /{session_id}


@router.post("/start")
async def start_session(
    body: StartSessionRequest,
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    """
    Start a workout session.

    Returns the user's in-progress session with reused=true when one exists.
    For routines with an RtF program, the response carries the current
    program week and today's RtF set prescriptions.
    """
    started = await service.start_session(
        user_id, body.routine_id, body.routine_day_id, notes=body.notes
    )
    return started.to_wire()


@router.get("/active")
async def get_active_session(
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    session = await service.get_active_session(user_id)
    return {"session": session.to_wire() if session else None}


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    session = await service.get_session(user_id, session_id)
    return session.to_wire()


@router.patch("/{session_id}/finish")
async def finish_session(
    session_id: str,
    body: FinishSessionRequest,
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    """Finish an in-progress session; COMPLETED runs automatic TM progression."""
    session = await service.finish_session(user_id, session_id, body.status, notes=body.notes)
    return session.to_wire()


@router.put("/{session_id}/set-logs")
async def upsert_set_log(
    session_id: str,
    body: SetLogRequest,
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    """Create or update one set log of an in-progress session."""
    log = await service.upsert_set_log(
        user_id,
        session_id,
        routine_exercise_id=body.routine_exercise_id,
        exercise_id=body.exercise_id,
        set_number=body.set_number,
        reps=body.reps,
        weight_kg=body.weight_kg,
        rpe=body.rpe,
        is_completed=body.is_completed,
    )
    return log.to_wire()


@router.delete("/{session_id}/set-logs/{routine_exercise_id}/{set_number}", status_code=204)
async def delete_set_log(
    session_id: str,
    routine_exercise_id: str,
    set_number: int = Path(..., ge=1),
    user_id: str = Depends(get_current_user),
    service: WorkoutSessionService = Depends(get_workout_session_service),
):
    await service.delete_set_log(user_id, session_id, routine_exercise_id, set_number)
    return Response(status_code=204)
