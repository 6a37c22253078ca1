"""
RtF router: week goals, timeline, forecast and program setup.

Read endpoints return ETags (RTF_ETAG_ENABLED) and answer 304 when the
client's If-None-Match still matches. The `_cache` HIT/MISS marker and
timeline cacheStats do not affect the ETag.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.deps import (
    get_current_user,
    get_forecast_service,
    get_program_setup_service,
    get_settings,
)
from backend.core.etag import conditional_json
from backend.core.program_setup_service import ProgramSetupService
from backend.core.rtf_forecast_service import RtfForecastService
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/routines",
    tags=["RtF"],
)


# =============================================================================
# Request Models
# =============================================================================


class ProgramSetupRequest(BaseModel):
    """Body of PUT /routines/{id}/program."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    with_deloads: bool = True
    start_date: date = Field(..., description="First session date, on the first training day's weekday")
    timezone: str = Field(..., min_length=1, description="IANA timezone, e.g. Europe/London")
    start_week: Optional[int] = Field(None, description="Forward the program to this week (clamped)")


# =============================================================================
# Read Endpoints
# =============================================================================


@router.get("/{routine_id}/rtf-week-goals")
async def get_week_goals(
    routine_id: str,
    request: Request,
    week: Optional[int] = Query(None, description="Program week; defaults to the current week"),
    remaining: bool = Query(False),
    user_id: str = Depends(get_current_user),
    service: RtfForecastService = Depends(get_forecast_service),
    settings: Settings = Depends(get_settings),
):
    """Goals of every PROGRAMMED_RTF exercise of the routine for one week."""
    result = await service.get_week_goals(user_id, routine_id, week=week, remaining=remaining)
    return conditional_json(request, result.to_wire(), enabled=settings.rtf_etag_enabled)


@router.get("/{routine_id}/rtf-timeline")
async def get_timeline(
    routine_id: str,
    request: Request,
    remaining: bool = Query(False),
    user_id: str = Depends(get_current_user),
    service: RtfForecastService = Depends(get_forecast_service),
    settings: Settings = Depends(get_settings),
):
    """Week goals from week 1 (or the start week with remaining=1) to the last week."""
    result = await service.get_timeline(user_id, routine_id, remaining=remaining)
    return conditional_json(request, result.to_wire(), enabled=settings.rtf_etag_enabled)


@router.get("/{routine_id}/rtf-forecast")
async def get_forecast(
    routine_id: str,
    request: Request,
    remaining: bool = Query(False),
    user_id: str = Depends(get_current_user),
    service: RtfForecastService = Depends(get_forecast_service),
    settings: Settings = Depends(get_settings),
):
    """STANDARD and HYPERTROPHY prescriptions per program week."""
    result = await service.get_forecast(user_id, routine_id, remaining=remaining)
    return conditional_json(request, result.to_wire(), enabled=settings.rtf_etag_enabled)


# =============================================================================
# Program Setup
# =============================================================================


@router.put("/{routine_id}/program")
async def configure_program(
    routine_id: str,
    body: ProgramSetupRequest,
    user_id: str = Depends(get_current_user),
    service: ProgramSetupService = Depends(get_program_setup_service),
):
    """
    Configure the routine's RtF program.

    Stores a fresh schedule snapshot and drops every cached week goal and
    forecast of the routine.
    """
    routine = await service.configure_program(
        user_id,
        routine_id,
        with_deloads=body.with_deloads,
        start_date=body.start_date,
        timezone_name=body.timezone,
        start_week=body.start_week,
    )
    return routine.to_wire()
