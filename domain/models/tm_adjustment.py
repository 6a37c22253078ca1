"""
Training-Max adjustment ledger models.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from domain.models.base import WireModel
from domain.models.rtf import ProgramStyle


AUTO_ADJUST_REASON = "auto"


class TmAdjustment(WireModel):
    """Append-only ledger row recording one training max change."""

    id: str
    routine_id: str
    exercise_id: str
    week_number: int
    delta_kg: float
    pre_tm_kg: float
    post_tm_kg: float
    reason: Optional[str] = None
    style: Optional[ProgramStyle] = None
    created_at: datetime


class NewTmAdjustment(WireModel):
    """Ledger row before persistence assigns id and timestamp."""

    routine_id: str
    exercise_id: str
    week_number: int = Field(..., ge=1)
    delta_kg: float
    pre_tm_kg: float
    post_tm_kg: float
    reason: Optional[str] = None
    style: Optional[ProgramStyle] = None


class TmAdjustmentSummary(WireModel):
    exercise_id: str
    exercise_name: str
    total_adjustments: int
    total_delta_kg: float
    average_delta_kg: float
    last_adjustment: Optional[datetime] = None
