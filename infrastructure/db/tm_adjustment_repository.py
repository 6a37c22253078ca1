"""
Supabase TM Adjustment Repository Implementation.

Append-only ledger stored in the tm_adjustments table.
"""
import logging
from typing import List, Optional

from supabase import Client

from domain.models import NewTmAdjustment, TmAdjustment

logger = logging.getLogger(__name__)


class SupabaseTmAdjustmentRepository:
    """Supabase implementation of TmAdjustmentRepository."""

    def __init__(self, client: Client):
        self._client = client

    def create(self, adjustment: NewTmAdjustment) -> TmAdjustment:
        row = adjustment.model_dump(mode="json")
        try:
            result = self._client.table("tm_adjustments").insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to record TM adjustment for routine {adjustment.routine_id}: {e}")
            raise
        if not result.data:
            raise RuntimeError("TM adjustment insert returned no row")
        return TmAdjustment.model_validate(result.data[0])

    def list_for_routine(
        self,
        routine_id: str,
        *,
        exercise_id: Optional[str] = None,
        min_week: Optional[int] = None,
        max_week: Optional[int] = None,
    ) -> List[TmAdjustment]:
        query = self._client.table("tm_adjustments") \
            .select("*") \
            .eq("routine_id", routine_id)
        if exercise_id:
            query = query.eq("exercise_id", exercise_id)
        if min_week is not None:
            query = query.gte("week_number", min_week)
        if max_week is not None:
            query = query.lte("week_number", max_week)
        try:
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"Failed to list TM adjustments for routine {routine_id}: {e}")
            raise
        return [TmAdjustment.model_validate(r) for r in result.data or []]
