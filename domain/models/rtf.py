"""
RtF (Reps-to-Failure) schedule and goal models.

A schedule week is either a training week ({intensity, fixed reps,
AMRAP target}) or a deload week. A program snapshot freezes both style
tables for one deload variant. A week goal is the per-exercise result of
resolving a schedule week against a training max.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import ConfigDict, Field, model_validator

from domain.models.base import WireModel


class ProgramStyle(str, Enum):
    """RtF training styles."""

    STANDARD = "STANDARD"
    HYPERTROPHY = "HYPERTROPHY"


class ScheduleWeek(WireModel):
    """One week of an RtF curriculum."""

    model_config = ConfigDict(frozen=True)

    week: int = Field(..., ge=1, description="1-based week number within the variant")
    is_deload: bool = Field(default=False)
    intensity: Optional[float] = Field(default=None, gt=0, le=1)
    fixed_reps: Optional[int] = Field(default=None, ge=1)
    amrap_target: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_shape(self) -> "ScheduleWeek":
        """Training weeks need a full prescription; deload weeks carry none."""
        prescribed = (self.intensity, self.fixed_reps, self.amrap_target)
        if self.is_deload and any(v is not None for v in prescribed):
            raise ValueError("Deload weeks carry no intensity or rep prescription")
        if not self.is_deload and any(v is None for v in prescribed):
            raise ValueError("Training weeks require intensity, fixed_reps and amrap_target")
        return self


class ProgramSnapshot(WireModel):
    """
    Immutable, versioned copy of both RtF tables for one deload variant.

    Pinned to a routine when its program is configured so later table
    changes never alter a running program. Only applicable while the
    routine's with_deloads flag matches the snapshot's.
    """

    model_config = ConfigDict(frozen=True)

    version: int = Field(..., ge=1)
    created_at: datetime
    with_deloads: bool
    weeks: int = Field(..., ge=1, description="Total weeks in this variant")
    standard: Tuple[ScheduleWeek, ...]
    hypertrophy: Tuple[ScheduleWeek, ...]

    def table(self, style: ProgramStyle) -> Tuple[ScheduleWeek, ...]:
        if style == ProgramStyle.HYPERTROPHY:
            return self.hypertrophy
        return self.standard

    def applies_to(self, with_deloads: bool) -> bool:
        return self.with_deloads == with_deloads


class WeekGoal(WireModel):
    """
    Computed goal for one RtF exercise in one program week.

    Training weeks carry intensity, fixed reps, AMRAP target and working
    weight. Deload weeks carry only the deload prescription.
    """

    routine_exercise_id: str
    exercise_id: str
    exercise_name: str
    variant: ProgramStyle
    week: int
    is_deload: bool
    intensity: Optional[float] = None
    fixed_reps: Optional[int] = None
    sets_planned: int
    amrap_target: Optional[int] = None
    amrap_set_number: Optional[int] = None
    working_weight_kg: Optional[float] = None
    training_max_kg: float
    # Deload prescription, populated only when is_deload
    deload_reps: Optional[int] = None
    deload_intensity: Optional[float] = None
    deload_rpe: Optional[int] = None


class WeekGoalsResult(WireModel):
    """All RtF goals of a routine for one week."""

    routine_id: str
    week: int
    with_deloads: bool
    goals: List[WeekGoal] = Field(default_factory=list)
    version: int
    cache_status: Optional[str] = Field(default=None, alias="_cache")


class TimelineWeek(WireModel):
    week: int
    goals: List[WeekGoal] = Field(default_factory=list)


class CacheStats(WireModel):
    hits: int = 0
    misses: int = 0


class TimelineResult(WireModel):
    routine_id: str
    weeks: int
    version: int
    from_week: int
    timeline: List[TimelineWeek] = Field(default_factory=list)
    cache_stats: CacheStats = Field(default_factory=CacheStats)


class StylePlan(WireModel):
    """Schedule shape of one style for one forecast week."""

    is_deload: bool = False
    intensity: float
    fixed_reps: int
    amrap_target: Optional[int] = None
    sets: int
    amrap_set: Optional[int] = None
    rpe: Optional[int] = None


class ForecastWeek(WireModel):
    week: int
    is_deload: bool
    standard: StylePlan
    hypertrophy: StylePlan


class ForecastResult(WireModel):
    routine_id: str
    weeks: int
    version: int
    with_deloads: bool
    from_week: int
    forecast: List[ForecastWeek] = Field(default_factory=list)
    cache_status: Optional[str] = Field(default=None, alias="_cache")
