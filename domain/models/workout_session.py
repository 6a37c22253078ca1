"""
Workout session and set log models.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from domain.models.base import WireModel
from domain.models.rtf import ProgramStyle


class SessionStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class WorkoutSession(WireModel):
    id: str
    user_id: str
    routine_id: str
    routine_day_id: str
    status: SessionStatus = SessionStatus.IN_PROGRESS
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_sec: Optional[int] = None
    notes: Optional[str] = None
    last_activity_at: Optional[datetime] = None


class SetLog(WireModel):
    """Performed set, unique per (session, routine exercise, set number)."""

    id: str
    session_id: str
    routine_exercise_id: str
    exercise_id: str
    set_number: int = Field(..., ge=1)
    reps: Optional[int] = None
    weight_kg: Optional[float] = None
    rpe: Optional[float] = None
    is_completed: bool = False
    completed_at: Optional[datetime] = None


class PlannedSet(WireModel):
    """One prescribed set of a session plan; the AMRAP set has reps=None."""

    set_number: int
    reps: Optional[int] = None
    weight_kg: Optional[float] = None
    amrap_target: Optional[int] = None
    rpe: Optional[int] = None


class RtfExercisePlan(WireModel):
    routine_exercise_id: str
    exercise_id: str
    exercise_name: str
    variant: ProgramStyle
    is_deload: bool
    weight_kg: Optional[float] = None
    fixed_reps: Optional[int] = None
    amrap_target: Optional[int] = None
    sets: List[PlannedSet] = Field(default_factory=list)


class ProgramWeekInfo(WireModel):
    current_week: int
    duration_weeks: int
    with_deloads: bool
    is_deload_week: bool
    start_date: date
    end_date: Optional[date] = None
    timezone: str


class StartedSession(WorkoutSession):
    """Session returned by start: reused flag plus today's RtF plan when a program runs."""

    reused: bool = False
    program: Optional[ProgramWeekInfo] = None
    rtf_plans: List[RtfExercisePlan] = Field(default_factory=list)
