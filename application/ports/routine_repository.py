"""
Routine Repository Interface (Port).

Read access to routines with their days, exercises and RtF program
configuration, plus the narrow writes the RtF engine owns: a routine's
program fields and an exercise's training max.
"""
from typing import Optional, Protocol

from domain.models import ProgramConfig, Routine


class RoutineRepository(Protocol):
    """Interface for routine persistence used by the RtF engine."""

    def get_routine(self, routine_id: str) -> Optional[Routine]:
        """
        Load a routine with days, exercises and program snapshot.

        Ownership is not filtered here; callers compare routine.user_id.

        Args:
            routine_id: Routine UUID

        Returns:
            Routine or None if it does not exist
        """
        ...

    def update_exercise_tm(
        self,
        routine_exercise_id: str,
        tm_kg: float,
        last_adjusted_week: Optional[int],
    ) -> None:
        """
        Persist a routine exercise's training max and last-adjusted week.

        Args:
            routine_exercise_id: Routine exercise UUID
            tm_kg: New training max in kg
            last_adjusted_week: Program week of the adjustment
        """
        ...

    def save_program(self, routine_id: str, config: ProgramConfig) -> Routine:
        """
        Write a routine's program fields and snapshot.

        Returns:
            The updated routine
        """
        ...
