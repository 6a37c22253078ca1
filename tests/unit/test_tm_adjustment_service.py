"""
Unit tests for backend/core/tm_adjustment_service.py
"""

import pytest

from application.ports import forecast_key, week_goals_key
from application.exceptions import (
    RoutineNotFoundError,
    RoutineOwnershipError,
    TmEventNotAllowedError,
    TmGuardrailError,
    TmMathMismatchError,
    WeekOutOfRangeError,
)
from backend.core.rtf_stats import RtfStats
from backend.core.tm_adjustment_service import TmAdjustmentService
from backend.core.tm_step_strategies import get_step_strategy, percent_table_step
from domain.models import AUTO_ADJUST_REASON, ProgramStyle
from infrastructure.cache import InMemoryWeekGoalsCache
from tests.fakes import FakeRoutineRepository, FakeTmAdjustmentRepository, make_rtf_routine

USER = "user-1"
ROUTINE = "routine-1"


@pytest.fixture
def routine_repo():
    repo = FakeRoutineRepository()
    repo.seed([make_rtf_routine()])
    return repo


@pytest.fixture
def tm_repo():
    return FakeTmAdjustmentRepository()


@pytest.fixture
def cache():
    return InMemoryWeekGoalsCache()


@pytest.fixture
def stats():
    return RtfStats()


@pytest.fixture
def service(routine_repo, tm_repo, cache, stats):
    return TmAdjustmentService(routine_repo, tm_repo, cache, stats)


async def _create(service, **overrides):
    payload = dict(
        exercise_id="ex-squat",
        week_number=2,
        delta_kg=5.0,
        pre_tm_kg=100.0,
        post_tm_kg=105.0,
        reason="felt strong",
    )
    payload.update(overrides)
    return await service.create_adjustment(USER, ROUTINE, **payload)


# =============================================================================
# Manual adjustments
# =============================================================================


@pytest.mark.unit
class TestCreateAdjustment:

    @pytest.mark.asyncio
    async def test_records_and_applies_adjustment(self, service, routine_repo, tm_repo, stats):
        row = await _create(service)

        assert row.post_tm_kg == 105.0
        assert row.style == ProgramStyle.STANDARD
        assert len(tm_repo.rows) == 1
        squat = routine_repo.exercise("re-squat")
        assert squat.program_tm_kg == 105.0
        assert squat.program_last_adjusted_week == 2
        assert stats.tm_adjustments == 1

    @pytest.mark.asyncio
    async def test_invalidates_routine_cache(self, service, cache):
        await cache.set(week_goals_key(ROUTINE, 2), {"stale": True})
        await cache.set(forecast_key(ROUTINE, 1), {"stale": True})

        await _create(service)

        assert await cache.get(week_goals_key(ROUTINE, 2)) is None
        assert await cache.get(forecast_key(ROUTINE, 1)) is None

    @pytest.mark.asyncio
    async def test_math_mismatch_rejected(self, service, tm_repo):
        with pytest.raises(TmMathMismatchError) as exc:
            await _create(service, delta_kg=5.0, pre_tm_kg=100.0, post_tm_kg=102.5)
        assert exc.value.status_code == 400
        assert tm_repo.rows == []

    @pytest.mark.asyncio
    async def test_math_within_tolerance_accepted(self, service):
        row = await _create(service, delta_kg=2.5, pre_tm_kg=100.0, post_tm_kg=102.5004)
        assert row.delta_kg == 2.5

    @pytest.mark.asyncio
    async def test_guardrail_rejects_large_consistent_delta(self, service, stats, tm_repo):
        with pytest.raises(TmGuardrailError):
            await _create(service, delta_kg=20.0, pre_tm_kg=100.0, post_tm_kg=120.0)
        assert stats.tm_guardrail_rejections == 1
        assert tm_repo.rows == []

    @pytest.mark.asyncio
    async def test_guardrail_applies_to_decreases(self, service):
        with pytest.raises(TmGuardrailError):
            await _create(service, delta_kg=-16.0, pre_tm_kg=100.0, post_tm_kg=84.0)

    @pytest.mark.asyncio
    async def test_guardrail_boundary_is_inclusive(self, service):
        row = await _create(service, delta_kg=15.0, pre_tm_kg=100.0, post_tm_kg=115.0)
        assert row.delta_kg == 15.0

    @pytest.mark.asyncio
    async def test_configurable_max_delta(self, routine_repo, tm_repo, cache, stats):
        strict = TmAdjustmentService(routine_repo, tm_repo, cache, stats, max_delta_kg=2.5)
        with pytest.raises(TmGuardrailError):
            await _create(strict)

    @pytest.mark.asyncio
    async def test_non_rtf_exercise_rejected(self, service, stats):
        with pytest.raises(TmEventNotAllowedError):
            await _create(service, exercise_id="ex-curl")
        assert stats.tm_unknown_exercise_rejections == 1

    @pytest.mark.asyncio
    async def test_unknown_exercise_rejected(self, service, stats):
        with pytest.raises(TmEventNotAllowedError):
            await _create(service, exercise_id="ex-deadlift")
        assert stats.tm_unknown_exercise_rejections == 1

    @pytest.mark.asyncio
    async def test_week_out_of_range_rejected(self, service):
        with pytest.raises(WeekOutOfRangeError):
            await _create(service, week_number=22)

    @pytest.mark.asyncio
    async def test_missing_routine(self, service):
        with pytest.raises(RoutineNotFoundError) as exc:
            await service.create_adjustment(
                USER, "nope", exercise_id="ex-squat", week_number=1,
                delta_kg=0, pre_tm_kg=100, post_tm_kg=100,
            )
        assert exc.value.status_code == 404

    @pytest.mark.asyncio
    async def test_foreign_routine_counts_access_rejection(self, service, stats):
        with pytest.raises(RoutineOwnershipError) as exc:
            await service.create_adjustment(
                "intruder", ROUTINE, exercise_id="ex-squat", week_number=1,
                delta_kg=0, pre_tm_kg=100, post_tm_kg=100,
            )
        assert exc.value.status_code == 403
        assert stats.tm_routine_access_rejections == 1


# =============================================================================
# Automatic adjustments
# =============================================================================


@pytest.mark.unit
class TestAutoAdjust:

    async def _auto(self, service, routine_repo, week, reps):
        routine = routine_repo.get_routine(ROUTINE)
        squat = next(e for e in routine.iter_exercises() if e.id == "re-squat")
        return await service.auto_adjust(routine, squat, week, reps)

    @pytest.mark.asyncio
    async def test_meeting_target_adds_one_rounding_step(self, service, routine_repo, stats):
        row = await self._auto(service, routine_repo, week=8, reps=14)

        assert row.reason == AUTO_ADJUST_REASON
        assert row.pre_tm_kg == 100.0
        assert row.post_tm_kg == 102.5
        assert routine_repo.exercise("re-squat").program_last_adjusted_week == 8
        assert stats.tm_auto_adjustments == 1

    @pytest.mark.asyncio
    async def test_missing_target_does_nothing(self, service, routine_repo, tm_repo):
        assert await self._auto(service, routine_repo, week=8, reps=7) is None
        assert tm_repo.rows == []

    @pytest.mark.asyncio
    async def test_deload_week_never_adjusts(self, service, routine_repo, tm_repo):
        assert await self._auto(service, routine_repo, week=7, reps=30) is None
        assert tm_repo.rows == []
        assert routine_repo.exercise("re-squat").program_tm_kg == 100.0

    @pytest.mark.asyncio
    async def test_at_most_once_per_week(self, service, routine_repo, tm_repo):
        await self._auto(service, routine_repo, week=8, reps=14)
        assert await self._auto(service, routine_repo, week=8, reps=14) is None
        assert len(tm_repo.rows) == 1

    @pytest.mark.asyncio
    async def test_no_tm_no_adjustment(self, tm_repo, cache, stats):
        repo = FakeRoutineRepository()
        repo.seed([make_rtf_routine(tm_kg=None)])
        service = TmAdjustmentService(repo, tm_repo, cache, stats)
        assert await self._auto(service, repo, week=8, reps=14) is None

    @pytest.mark.asyncio
    async def test_percent_strategy(self, routine_repo, tm_repo, cache, stats):
        service = TmAdjustmentService(
            routine_repo, tm_repo, cache, stats, step_strategy="percent_table"
        )
        # 14 reps vs target 8: 6 over -> 3% of 100
        row = await self._auto(service, routine_repo, week=8, reps=14)
        assert row.delta_kg == 3.0
        assert row.post_tm_kg == 103.0

    @pytest.mark.asyncio
    async def test_step_clamped_to_max_delta(self, routine_repo, tm_repo, cache, stats):
        service = TmAdjustmentService(
            routine_repo, tm_repo, cache, stats, max_delta_kg=1.0
        )
        row = await self._auto(service, routine_repo, week=8, reps=14)
        assert row.delta_kg == 1.0


@pytest.mark.unit
class TestStepStrategies:

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            get_step_strategy("double_it")

    def test_percent_table_zero_when_on_target(self):
        assert percent_table_step(100.0, 8, 8, 2.5) == 0.0


# =============================================================================
# Queries
# =============================================================================


@pytest.mark.unit
class TestQueries:

    @pytest.mark.asyncio
    async def test_list_newest_first_with_filters(self, service):
        await _create(service, week_number=1, delta_kg=2.5, pre_tm_kg=100, post_tm_kg=102.5)
        await _create(service, week_number=2, delta_kg=2.5, pre_tm_kg=102.5, post_tm_kg=105)
        await _create(service, week_number=3, delta_kg=-5, pre_tm_kg=105, post_tm_kg=100)

        rows = await service.list_adjustments(USER, ROUTINE)
        assert [r.week_number for r in rows] == [3, 2, 1]

        filtered = await service.list_adjustments(USER, ROUTINE, min_week=2, max_week=2)
        assert [r.week_number for r in filtered] == [2]

        none = await service.list_adjustments(USER, ROUTINE, exercise_id="ex-curl")
        assert none == []

    @pytest.mark.asyncio
    async def test_summary_aggregates_per_exercise(self, service):
        await _create(service, week_number=1, delta_kg=2.5, pre_tm_kg=100, post_tm_kg=102.5)
        await _create(service, week_number=2, delta_kg=5, pre_tm_kg=102.5, post_tm_kg=107.5)

        [summary] = await service.get_summary(USER, ROUTINE)
        assert summary.exercise_name == "Back Squat"
        assert summary.total_adjustments == 2
        assert summary.total_delta_kg == 7.5
        assert summary.average_delta_kg == 3.75
        assert summary.last_adjustment is not None

    @pytest.mark.asyncio
    async def test_queries_enforce_ownership(self, service):
        with pytest.raises(RoutineOwnershipError):
            await service.list_adjustments("intruder", ROUTINE)
        with pytest.raises(RoutineOwnershipError):
            await service.get_summary("intruder", ROUTINE)
