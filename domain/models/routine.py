"""
Routine program models.

Routines, days and routine exercises are owned by the routine CRUD
collaborator. The RtF engine reads the program fields and writes back
the training max and last-adjusted week of PROGRAMMED_RTF exercises.
"""

from datetime import date
from enum import Enum
from typing import Iterator, List, Optional

from pydantic import Field

from domain.models.base import WireModel
from domain.models.rtf import ProgramSnapshot, ProgramStyle


DEFAULT_ROUNDING_KG = 2.5


class ProgressionScheme(str, Enum):
    NONE = "NONE"
    DOUBLE_PROGRESSION = "DOUBLE_PROGRESSION"
    DYNAMIC_DOUBLE_PROGRESSION = "DYNAMIC_DOUBLE_PROGRESSION"
    PROGRAMMED_RTF = "PROGRAMMED_RTF"


class RoutineExercise(WireModel):
    """An exercise slot within a routine day."""

    id: str
    routine_day_id: str
    exercise_id: str
    exercise_name: str = ""
    order: int = 0
    progression_scheme: ProgressionScheme = ProgressionScheme.NONE
    program_style: Optional[ProgramStyle] = None
    program_tm_kg: Optional[float] = Field(default=None, ge=0)
    program_rounding_kg: Optional[float] = Field(default=None, gt=0)
    program_last_adjusted_week: Optional[int] = None

    @property
    def is_rtf(self) -> bool:
        return self.progression_scheme == ProgressionScheme.PROGRAMMED_RTF

    @property
    def style(self) -> ProgramStyle:
        return self.program_style or ProgramStyle.STANDARD

    @property
    def rounding_kg(self) -> float:
        return self.program_rounding_kg or DEFAULT_ROUNDING_KG


class RoutineDay(WireModel):
    id: str
    routine_id: str
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    order: int = 0
    exercises: List[RoutineExercise] = Field(default_factory=list)


class Routine(WireModel):
    """
    A user's routine with its optional RtF program configuration.

    A routine "has a program" once start date, duration and timezone
    are all configured.
    """

    id: str
    user_id: str
    name: str = ""
    days: List[RoutineDay] = Field(default_factory=list)

    program_with_deloads: bool = True
    program_duration_weeks: Optional[int] = None
    program_start_week: Optional[int] = None
    program_start_date: Optional[date] = None
    program_end_date: Optional[date] = None
    program_timezone: Optional[str] = None
    program_training_days_of_week: List[int] = Field(default_factory=list)
    program_snapshot: Optional[ProgramSnapshot] = None

    @property
    def has_program(self) -> bool:
        return bool(
            self.program_start_date
            and self.program_duration_weeks
            and self.program_timezone
        )

    def iter_exercises(self) -> Iterator[RoutineExercise]:
        for day in sorted(self.days, key=lambda d: d.order):
            for exercise in sorted(day.exercises, key=lambda e: e.order):
                yield exercise

    def rtf_exercises(self) -> List[RoutineExercise]:
        return [e for e in self.iter_exercises() if e.is_rtf]

    def find_day(self, routine_day_id: str) -> Optional[RoutineDay]:
        for day in self.days:
            if day.id == routine_day_id:
                return day
        return None


class ProgramConfig(WireModel):
    """Program fields written when a routine's RtF program is configured."""

    with_deloads: bool
    duration_weeks: int
    start_week: int
    start_date: date
    end_date: date
    timezone: str
    training_days_of_week: List[int]
    snapshot: ProgramSnapshot
