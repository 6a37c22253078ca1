"""
TM Adjustment Repository Interface (Port).

Append-only ledger of Training-Max changes per routine and exercise.
"""
from typing import List, Optional, Protocol

from domain.models import NewTmAdjustment, TmAdjustment


class TmAdjustmentRepository(Protocol):
    """Interface for the TM adjustment ledger."""

    def create(self, adjustment: NewTmAdjustment) -> TmAdjustment:
        """Append a ledger row; persistence assigns id and created_at."""
        ...

    def list_for_routine(
        self,
        routine_id: str,
        *,
        exercise_id: Optional[str] = None,
        min_week: Optional[int] = None,
        max_week: Optional[int] = None,
    ) -> List[TmAdjustment]:
        """
        List ledger rows of a routine, newest first.

        Args:
            routine_id: Routine UUID
            exercise_id: Only rows for this exercise
            min_week: Only rows with week_number >= min_week
            max_week: Only rows with week_number <= max_week
        """
        ...
