"""
Shared fixtures for the RtF test suite.

API tests run against create_app() with the repository providers
overridden by in-memory fakes. Authentication uses the test-environment
bearer fallback, so "Authorization: Bearer <user_id>" authenticates as
that user.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from api import deps
from application.ports import WeekGoalsCache
from backend.core.rtf_forecast_service import RtfForecastService
from backend.core.rtf_stats import RtfStats
from backend.core.tm_adjustment_service import TmAdjustmentService
from backend.core.workout_session_service import WorkoutSessionService
from backend.main import create_app
from backend.settings import Settings
from infrastructure.cache import InFlightRegistry
from tests.fakes import (
    FixedClock,
    FakeRoutineRepository,
    FakeTmAdjustmentRepository,
    FakeWorkoutSessionRepository,
    make_rtf_routine,
)


# =============================================================================
# Settings and Fakes
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    return Settings(environment="test", workout_session_sweep_enabled=False, _env_file=None)


@pytest.fixture
def fake_routine_repo() -> FakeRoutineRepository:
    repo = FakeRoutineRepository()
    repo.seed([make_rtf_routine()])
    return repo


@pytest.fixture
def fake_tm_repo() -> FakeTmAdjustmentRepository:
    return FakeTmAdjustmentRepository()


@pytest.fixture
def fake_session_repo() -> FakeWorkoutSessionRepository:
    return FakeWorkoutSessionRepository()


@pytest.fixture
def clock() -> FixedClock:
    # Monday of program week 1 for the default routine
    return FixedClock(datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc))


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app(
    monkeypatch,
    test_settings: Settings,
    fake_routine_repo: FakeRoutineRepository,
    fake_tm_repo: FakeTmAdjustmentRepository,
    fake_session_repo: FakeWorkoutSessionRepository,
    clock: FixedClock,
):
    """App wired to in-memory fakes; clock-dependent services use the fixed clock."""
    monkeypatch.setattr("backend.auth.get_settings", lambda: test_settings)
    application = create_app(settings=test_settings)

    def session_service(
        tm_service: TmAdjustmentService = Depends(deps.get_tm_adjustment_service),
    ) -> WorkoutSessionService:
        return WorkoutSessionService(fake_session_repo, fake_routine_repo, tm_service, clock=clock)

    def forecast_service(
        cache: WeekGoalsCache = Depends(deps.get_week_goals_cache),
        in_flight: InFlightRegistry = Depends(deps.get_in_flight),
        stats: RtfStats = Depends(deps.get_rtf_stats),
    ) -> RtfForecastService:
        return RtfForecastService(fake_routine_repo, cache, in_flight, stats, clock=clock)

    overrides: Dict[Callable[..., Any], Callable[..., Any]] = {
        deps.get_settings: lambda: test_settings,
        deps.get_routine_repo: lambda: fake_routine_repo,
        deps.get_tm_adjustment_repo: lambda: fake_tm_repo,
        deps.get_workout_session_repo: lambda: fake_session_repo,
        deps.get_workout_session_service: session_service,
        deps.get_forecast_service: forecast_service,
    }
    application.dependency_overrides.update(overrides)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
