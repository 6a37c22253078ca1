"""
Unit tests for backend/core/rtf_schedules.py
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from backend.core.rtf_schedules import (
    DELOAD_PRESCRIPTION,
    DELOAD_WEEKS,
    HYPERTROPHY_WITH_DELOADS,
    SNAPSHOT_VERSION,
    STANDARD_WITH_DELOADS,
    amrap_set_number,
    build_program_snapshot,
    get_schedule,
    is_deload_week,
    total_weeks,
)
from domain.models import ProgramStyle, ScheduleWeek


@pytest.mark.unit
class TestCanonicalTables:
    """The 21-week tables."""

    @pytest.mark.parametrize("table", [STANDARD_WITH_DELOADS, HYPERTROPHY_WITH_DELOADS])
    def test_tables_have_21_sequential_weeks(self, table):
        assert [w.week for w in table] == list(range(1, 22))

    @pytest.mark.parametrize("table", [STANDARD_WITH_DELOADS, HYPERTROPHY_WITH_DELOADS])
    def test_deloads_at_7_14_21(self, table):
        assert tuple(w.week for w in table if w.is_deload) == DELOAD_WEEKS

    def test_standard_week_8_targets_8_reps(self):
        week8 = STANDARD_WITH_DELOADS[7]
        assert (week8.intensity, week8.fixed_reps, week8.amrap_target) == (0.75, 4, 8)

    def test_training_week_requires_full_prescription(self):
        with pytest.raises(ValidationError):
            ScheduleWeek(week=1, intensity=0.7, fixed_reps=5)

    def test_deload_week_rejects_prescription(self):
        with pytest.raises(ValidationError):
            ScheduleWeek(week=7, is_deload=True, intensity=0.6)

    def test_amrap_set_follows_fixed_sets(self):
        assert amrap_set_number(ProgramStyle.STANDARD) == 5
        assert amrap_set_number(ProgramStyle.HYPERTROPHY) == 4

    def test_deload_prescriptions(self):
        standard = DELOAD_PRESCRIPTION[ProgramStyle.STANDARD]
        hypertrophy = DELOAD_PRESCRIPTION[ProgramStyle.HYPERTROPHY]
        assert (standard.sets, standard.reps, standard.intensity, standard.rpe) == (3, 5, 0.6, 6)
        assert (hypertrophy.sets, hypertrophy.reps, hypertrophy.intensity) == (4, 5, 0.6)


@pytest.mark.unit
class TestVariants:
    """With/without deload lookups."""

    def test_total_weeks(self):
        assert total_weeks(True) == 21
        assert total_weeks(False) == 18

    def test_is_deload_week_only_with_deloads(self):
        assert is_deload_week(7, True)
        assert not is_deload_week(7, False)
        assert not is_deload_week(8, True)

    def test_without_deloads_renumbers_training_weeks(self):
        table = get_schedule(ProgramStyle.STANDARD, False)
        assert len(table) == 18
        assert [w.week for w in table] == list(range(1, 19))
        assert not any(w.is_deload for w in table)
        # Old week 8 becomes week 7
        assert table[6].intensity == STANDARD_WITH_DELOADS[7].intensity
        assert table[6].amrap_target == STANDARD_WITH_DELOADS[7].amrap_target

    def test_without_deloads_preserves_training_order(self):
        original = [w for w in HYPERTROPHY_WITH_DELOADS if not w.is_deload]
        renumbered = get_schedule(ProgramStyle.HYPERTROPHY, False)
        assert [(w.intensity, w.fixed_reps, w.amrap_target) for w in renumbered] == [
            (w.intensity, w.fixed_reps, w.amrap_target) for w in original
        ]


@pytest.mark.unit
class TestBuildProgramSnapshot:
    """Snapshot builder."""

    def test_with_deloads_copies_tables_verbatim(self):
        snapshot = build_program_snapshot(True)
        assert snapshot.version == SNAPSHOT_VERSION
        assert snapshot.weeks == 21
        assert snapshot.standard == STANDARD_WITH_DELOADS
        assert snapshot.hypertrophy == HYPERTROPHY_WITH_DELOADS

    def test_without_deloads_has_18_weeks(self):
        snapshot = build_program_snapshot(False)
        assert snapshot.weeks == 18
        assert len(snapshot.standard) == 18
        assert len(snapshot.hypertrophy) == 18
        assert not snapshot.applies_to(True)
        assert snapshot.applies_to(False)

    def test_snapshot_is_immutable(self):
        snapshot = build_program_snapshot(True)
        with pytest.raises(ValidationError):
            snapshot.weeks = 3

    def test_created_at_is_honoured(self):
        stamp = datetime(2026, 2, 1, tzinfo=timezone.utc)
        assert build_program_snapshot(True, created_at=stamp).created_at == stamp

    def test_snapshot_round_trips_through_wire_format(self):
        snapshot = build_program_snapshot(False)
        wire = snapshot.to_wire()
        assert wire["withDeloads"] is False
        assert wire["standard"][0]["amrapTarget"] == 10
        assert type(snapshot).model_validate(wire) == snapshot
