"""
Domain models for the RtF Progression API.

These are pure pydantic models, independent of persistence and transport:
- Schedule weeks, program snapshots and computed week goals (rtf)
- Routines with their program configuration (routine)
- Training-Max adjustment ledger rows (tm_adjustment)
- Workout sessions and set logs (workout_session)

All models dump to camelCase via ``to_wire()``.
"""

from domain.models.base import WireModel
from domain.models.rtf import (
    CacheStats,
    ForecastResult,
    ForecastWeek,
    ProgramSnapshot,
    ProgramStyle,
    ScheduleWeek,
    StylePlan,
    TimelineResult,
    TimelineWeek,
    WeekGoal,
    WeekGoalsResult,
)
from domain.models.routine import (
    DEFAULT_ROUNDING_KG,
    ProgramConfig,
    ProgressionScheme,
    Routine,
    RoutineDay,
    RoutineExercise,
)
from domain.models.tm_adjustment import (
    AUTO_ADJUST_REASON,
    NewTmAdjustment,
    TmAdjustment,
    TmAdjustmentSummary,
)
from domain.models.workout_session import (
    PlannedSet,
    ProgramWeekInfo,
    RtfExercisePlan,
    SessionStatus,
    SetLog,
    StartedSession,
    WorkoutSession,
)

__all__ = [
    "WireModel",
    # RtF schedule and goals
    "ProgramStyle",
    "ScheduleWeek",
    "ProgramSnapshot",
    "WeekGoal",
    "WeekGoalsResult",
    "TimelineWeek",
    "TimelineResult",
    "CacheStats",
    "StylePlan",
    "ForecastWeek",
    "ForecastResult",
    # Routines
    "DEFAULT_ROUNDING_KG",
    "ProgressionScheme",
    "Routine",
    "RoutineDay",
    "RoutineExercise",
    "ProgramConfig",
    # TM ledger
    "AUTO_ADJUST_REASON",
    "TmAdjustment",
    "NewTmAdjustment",
    "TmAdjustmentSummary",
    # Sessions
    "SessionStatus",
    "WorkoutSession",
    "SetLog",
    "StartedSession",
    "ProgramWeekInfo",
    "RtfExercisePlan",
    "PlannedSet",
]
