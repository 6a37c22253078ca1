"""
Unit tests for backend/core/program_setup_service.py
"""

from datetime import date

import pytest

from application.exceptions import BadRequestError, RoutineOwnershipError
from application.ports import week_goals_key
from backend.core.program_setup_service import ProgramSetupService
from backend.core.rtf_schedules import SNAPSHOT_VERSION
from infrastructure.cache import InMemoryWeekGoalsCache
from tests.fakes import FakeRoutineRepository, make_rtf_routine

USER = "user-1"
ROUTINE = "routine-1"
MONDAY = date(2026, 2, 2)


@pytest.fixture
def repo():
    repo = FakeRoutineRepository()
    repo.seed([make_rtf_routine(with_program=False)])
    return repo


@pytest.fixture
def cache():
    return InMemoryWeekGoalsCache()


@pytest.fixture
def service(repo, cache):
    return ProgramSetupService(repo, cache)


@pytest.mark.unit
class TestConfigureProgram:

    @pytest.mark.asyncio
    async def test_configures_full_program(self, service):
        routine = await service.configure_program(
            USER, ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="Europe/Berlin"
        )

        assert routine.has_program
        assert routine.program_duration_weeks == 21
        assert routine.program_start_week == 1
        assert routine.program_end_date == date(2026, 6, 28)
        assert routine.program_timezone == "Europe/Berlin"
        assert routine.program_training_days_of_week == [1]
        assert routine.program_snapshot.version == SNAPSHOT_VERSION
        assert routine.program_snapshot.with_deloads is True
        assert routine.program_snapshot.weeks == 21

    @pytest.mark.asyncio
    async def test_without_deloads_is_18_weeks(self, service):
        routine = await service.configure_program(
            USER, ROUTINE, with_deloads=False, start_date=MONDAY, timezone_name="UTC"
        )
        assert routine.program_duration_weeks == 18
        assert routine.program_snapshot.weeks == 18
        assert routine.program_end_date == date(2026, 6, 7)

    @pytest.mark.asyncio
    async def test_forwarded_start_week_shortens_window(self, service):
        routine = await service.configure_program(
            USER, ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="UTC", start_week=8
        )
        assert routine.program_start_week == 8
        assert routine.program_end_date == date(2026, 5, 10)

    @pytest.mark.asyncio
    async def test_start_week_is_clamped(self, service):
        routine = await service.configure_program(
            USER, ROUTINE, with_deloads=False, start_date=MONDAY, timezone_name="UTC", start_week=40
        )
        assert routine.program_start_week == 18
        assert routine.program_end_date == MONDAY.replace(day=8)

    @pytest.mark.asyncio
    async def test_start_date_must_match_first_training_day(self, service, repo):
        with pytest.raises(BadRequestError) as exc:
            await service.configure_program(
                USER, ROUTINE, with_deloads=True, start_date=date(2026, 2, 3), timezone_name="UTC"
            )
        assert "Monday" in exc.value.message
        assert not repo.get_routine(ROUTINE).has_program

    @pytest.mark.asyncio
    async def test_invalid_timezone(self, service):
        with pytest.raises(BadRequestError):
            await service.configure_program(
                USER, ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="Not/AZone"
            )

    @pytest.mark.asyncio
    async def test_routine_without_days(self, cache):
        routine = make_rtf_routine(with_program=False).model_copy(update={"days": []})
        repo = FakeRoutineRepository()
        repo.seed([routine])
        with pytest.raises(BadRequestError):
            await ProgramSetupService(repo, cache).configure_program(
                USER, ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="UTC"
            )

    @pytest.mark.asyncio
    async def test_foreign_routine(self, service):
        with pytest.raises(RoutineOwnershipError):
            await service.configure_program(
                "user-2", ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="UTC"
            )

    @pytest.mark.asyncio
    async def test_reconfigure_invalidates_cache(self, service, cache):
        await cache.set(week_goals_key(ROUTINE, 1), {"stale": True})
        await service.configure_program(
            USER, ROUTINE, with_deloads=True, start_date=MONDAY, timezone_name="UTC"
        )
        assert await cache.get(week_goals_key(ROUTINE, 1)) is None
