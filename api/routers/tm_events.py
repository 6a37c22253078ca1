"""
Training-Max events router.

Exposes the TM adjustment ledger of a routine. Every endpoint answers 404
when ENABLE_TM_EVENTS is off.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.deps import get_current_user, get_settings, get_tm_adjustment_service
from backend.core.tm_adjustment_service import TmAdjustmentService
from backend.settings import Settings

logger = logging.getLogger(__name__)


def require_tm_events(settings: Settings = Depends(get_settings)) -> None:
    if not settings.enable_tm_events:
        raise HTTPException(status_code=404, detail="Not Found")


router = APIRouter(
    prefix="/routines",
    tags=["TM Events"],
    dependencies=[Depends(require_tm_events)],
)


# =============================================================================
# Request Models
# =============================================================================


class TmEventRequest(BaseModel):
    """Body of POST /routines/{id}/tm-events."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    exercise_id: str = Field(..., min_length=1)
    week_number: int
    delta_kg: float
    pre_tm_kg: float = Field(..., ge=0)
    post_tm_kg: float = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=160)


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/{routine_id}/tm-events", status_code=201)
async def create_tm_event(
    routine_id: str,
    body: TmEventRequest,
    user_id: str = Depends(get_current_user),
    service: TmAdjustmentService = Depends(get_tm_adjustment_service),
):
    """Record a TM change and apply it to the routine's exercise."""
    adjustment = await service.create_adjustment(
        user_id,
        routine_id,
        exercise_id=body.exercise_id,
        week_number=body.week_number,
        delta_kg=body.delta_kg,
        pre_tm_kg=body.pre_tm_kg,
        post_tm_kg=body.post_tm_kg,
        reason=body.reason,
    )
    return adjustment.to_wire()


@router.get("/{routine_id}/tm-events")
async def list_tm_events(
    routine_id: str,
    exercise_id: Optional[str] = Query(None, alias="exerciseId"),
    min_week: Optional[int] = Query(None, alias="minWeek", ge=1),
    max_week: Optional[int] = Query(None, alias="maxWeek", ge=1),
    user_id: str = Depends(get_current_user),
    service: TmAdjustmentService = Depends(get_tm_adjustment_service),
):
    """Ledger rows of the routine, newest first."""
    rows = await service.list_adjustments(
        user_id,
        routine_id,
        exercise_id=exercise_id,
        min_week=min_week,
        max_week=max_week,
    )
    return [row.to_wire() for row in rows]


@router.get("/{routine_id}/tm-events/summary")
async def tm_events_summary(
    routine_id: str,
    user_id: str = Depends(get_current_user),
    service: TmAdjustmentService = Depends(get_tm_adjustment_service),
):
    """Per-exercise totals of the routine's TM adjustments."""
    summary = await service.get_summary(user_id, routine_id)
    return [item.to_wire() for item in summary]
